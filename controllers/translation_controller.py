# -*- coding: utf-8 -*-
"""
LocForge Translation Controller

Handles translation-related business logic:
- Building the per-batch request from settings and terminology
- Running the batch protocol on one file
- Turning the batch outcome into a single notification
- Translating free text with the same request settings
"""

from typing import Any, Callable, Dict, Iterable, Optional, Tuple

import locforge_settings as lf_settings
from locforge_ai import SafetyConfig, translate_text
from locforge_exceptions import AIError
from locforge_logger import get_logger
from core.error_explainer import ErrorExplainer
from core.terminology import TerminologyManager
from core.translation_service import (
    BatchResult, BatchTranslationService, TranslationRequest, Translator,
)
from models.entry import EntryId
from models.notification import Notification
from models.parsed_file import ParsedFile

logger = get_logger("controllers.translation")


class TranslationController:
    """
    Controller for batch translation.

    The translator is injected (GeminiTranslator in production, a fake in
    tests). Terminology comes from a TerminologyManager; languages, model,
    chunk size and safety come from the settings dict.
    """

    def __init__(
        self,
        translator: Translator,
        settings: Optional[Dict[str, Any]] = None,
        terminology: Optional[TerminologyManager] = None,
        pre_transform: Optional[Callable[[str], str]] = None,
        post_transform: Optional[Callable[[str], str]] = None,
    ):
        self._settings = settings or lf_settings.default_settings()
        self._terminology = terminology or TerminologyManager()
        self._service = BatchTranslationService(
            translator,
            chunk_size=self._settings[lf_settings.KEY_CHUNK_SIZE],
            max_workers=self._settings[lf_settings.KEY_MAX_WORKERS],
            pre_transform=pre_transform,
            post_transform=post_transform,
        )
        logger.debug("TranslationController initialized")

    @property
    def service(self) -> BatchTranslationService:
        return self._service

    def build_request(
        self,
        source_lang: Optional[str] = None,
        target_lang: Optional[str] = None,
        model: Optional[str] = None,
        extra_context: Optional[str] = None,
    ) -> TranslationRequest:
        """Explicit arguments override the stored defaults."""
        return TranslationRequest(
            source_lang=source_lang or self._settings[lf_settings.KEY_SOURCE_LANG],
            target_lang=target_lang or self._settings[lf_settings.KEY_TARGET_LANG],
            model=model or self._settings[lf_settings.KEY_MODEL],
            safety_config=SafetyConfig.from_dict(self._settings.get(lf_settings.KEY_SAFETY)),
            terminology=self._terminology.terminology,
            rules=list(self._terminology.rules),
            extra_context=extra_context,
        )

    def translate_file(
        self,
        parsed_file: ParsedFile,
        entry_ids: Optional[Iterable[EntryId]] = None,
        request: Optional[TranslationRequest] = None,
    ) -> Notification:
        """
        Translate the selected pending/failed entries of one file.

        Returns:
            Exactly one notification for the whole batch
        """
        request = request or self.build_request()
        selected = self._service.select_translatable(parsed_file.entries, entry_ids)
        if not selected:
            return Notification.success("No entries need translation in the selected range.", count=0)

        parsed_file.status = 'processing'
        parsed_file.notify_entries_updated(e.id for e in selected)

        def on_chunk_done(chunk):
            parsed_file.notify_entries_updated(e.id for e in chunk)

        result = self._service.translate_entries(
            parsed_file.entries,
            parsed_file.format,
            request=request,
            entry_ids=[e.id for e in selected],
            on_chunk_done=on_chunk_done,
        )
        parsed_file.refresh_status()
        return self.build_notification(result, parsed_file.filename)

    @staticmethod
    def build_notification(result: BatchResult, filename: str = "") -> Notification:
        where = f" in {filename}" if filename else ""
        if result.ok:
            return Notification.success(f"Translated {result.translated} entries{where}.", count=result.translated)

        explanation = ErrorExplainer.analyze(result.errors)
        if explanation is None:
            # No request failed; the model dropped or emptied some segments
            return Notification.error(
                f"Translated {result.translated} entries{where}; "
                f"{result.failed} came back missing or empty and were marked as errors.",
                count=result.failed,
            )
        return Notification.error(
            f"{explanation.title}: {explanation.message} "
            f"{result.failed} entries{where} failed, {result.translated} translated.",
            count=result.failed,
        )

    def translate_text(self, text: str, request: Optional[TranslationRequest] = None) -> Tuple[Optional[str], Notification]:
        """
        Translate free text in one request, outside any file.

        Stored terminology and rules apply as for a batch.

        Returns:
            (translation or None, one notification)
        """
        text = (text or "").strip()
        if not text:
            return None, Notification.error("Nothing to translate: the text is empty.")

        request = request or self.build_request()
        try:
            translated = translate_text(
                text,
                request.source_lang,
                request.target_lang,
                model=request.model,
                safety_config=request.safety_config,
                terminology=request.terminology,
                rules=request.rules,
                extra_context=request.extra_context,
                translator=self._service.translator,
            )
        except AIError as e:
            logger.error(f"Text translation failed: {e}")
            explanation = ErrorExplainer.explain(e)
            return None, Notification.error(f"{explanation.title}: {explanation.message}", count=1)

        return translated.strip(), Notification.success(f"Translated {len(text)} characters.", count=1)
