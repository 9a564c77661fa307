"""
Batch translation protocol.

Selected entries are packed into chunks, each chunk is joined with a
delimiter and sent as one request, and the response is split on the same
delimiter and mapped back onto the chunk's entries by position.
"""

import re
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

import locforge_config as config
from core.terminology import Rule, Terminology
from core.text_utils import missing_control_codes, strip_speaker_tag
from locforge_enums import FileFormat
from locforge_logger import get_logger
from models.entry import Entry, EntryId

logger = get_logger("core.translation_service")

MISSING_SEGMENT = "missing segment"
EMPTY_SEGMENT = "empty segment"

# translate(payload, source_lang, target_lang, model, safety_config,
#           terminology, rules, format_hint, extra_context) -> str
Translator = Callable[..., str]


@dataclass
class TranslationRequest:
    """Per-batch parameters forwarded to the translator on every chunk."""
    source_lang: str = config.DEFAULT_SOURCE_LANG
    target_lang: str = config.DEFAULT_TARGET_LANG
    model: str = config.DEFAULT_MODEL_NAME
    safety_config: Any = None
    terminology: Terminology = field(default_factory=Terminology)
    rules: List[Rule] = field(default_factory=list)
    extra_context: Optional[str] = None


@dataclass
class ChunkError:
    chunk_index: int
    entry_ids: List[EntryId]
    error: Exception


@dataclass
class BatchResult:
    """Outcome of one batch, from which a single notification is built."""
    translated: int = 0
    failed: int = 0
    chunk_errors: List[ChunkError] = field(default_factory=list)
    failed_ids: List[EntryId] = field(default_factory=list)
    # entry id -> control codes the translation dropped
    code_warnings: Dict[EntryId, List[str]] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return self.translated + self.failed

    @property
    def errors(self) -> List[Exception]:
        return [c.error for c in self.chunk_errors]

    @property
    def ok(self) -> bool:
        return self.failed == 0


@dataclass
class _ChunkOutcome:
    chunk_index: int = 0
    translated: int = 0
    failed_ids: List[EntryId] = field(default_factory=list)
    error: Optional[ChunkError] = None
    code_warnings: Dict[EntryId, List[str]] = field(default_factory=dict)


class BatchTranslationService:
    """
    Runs the chunk / join / translate / split / scatter protocol.

    Each chunk only ever mutates its own entries, so chunks can run on a
    thread pool (max_workers > 1) and complete in any order.
    """

    def __init__(
        self,
        translator: Translator,
        chunk_size: int = config.BATCH_CHUNK_SIZE,
        delimiter: str = config.BATCH_DELIMITER,
        max_workers: int = config.BATCH_MAX_WORKERS,
        pre_transform: Optional[Callable[[str], str]] = None,
        post_transform: Optional[Callable[[str], str]] = None,
    ):
        if chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")
        self.translator = translator
        self.chunk_size = chunk_size
        self.delimiter = delimiter
        self.max_workers = max(1, max_workers)
        self.pre_transform = pre_transform
        self.post_transform = post_transform
        self._split_regex = re.compile(r'\s*' + re.escape(delimiter) + r'\s*')

    # =========================================================================
    # PROTOCOL STEPS
    # =========================================================================

    @staticmethod
    def select_translatable(entries: Iterable[Entry], entry_ids: Optional[Iterable[EntryId]] = None) -> List[Entry]:
        """Entries that are selected and pending or failed, in file order."""
        wanted = set(entry_ids) if entry_ids is not None else None
        return [
            e for e in entries
            if (wanted is None or e.id in wanted) and e.is_translatable
        ]

    def chunk_entries(self, entries: Sequence[Entry]) -> List[List[Entry]]:
        return [list(entries[i:i + self.chunk_size]) for i in range(0, len(entries), self.chunk_size)]

    def join_chunk(self, chunk: Sequence[Entry], file_format: FileFormat = FileFormat.RPGMAKER) -> str:
        """
        Join original texts with the delimiter.

        Ren'Py texts are tagged with their speaker ('[Eileen]: ...',
        '[Narrator]: ...') so the model can pick the right register.
        """
        if FileFormat(file_format) == FileFormat.RENPY:
            texts = [f"{self.speaker_tag(e)}: {e.original_text}" for e in chunk]
        else:
            texts = [e.original_text for e in chunk]
        return f"\n{self.delimiter}\n".join(texts)

    @staticmethod
    def speaker_tag(entry: Entry) -> str:
        return f"[{entry.speaker or config.NARRATOR_TAG}]"

    def split_response(self, response: str) -> List[str]:
        """Split on the delimiter, tolerating any whitespace around it."""
        segments = self._split_regex.split((response or "").strip())
        return [s.strip() for s in segments]

    # =========================================================================
    # BATCH
    # =========================================================================

    def translate_entries(
        self,
        entries: Iterable[Entry],
        file_format: FileFormat,
        request: Optional[TranslationRequest] = None,
        entry_ids: Optional[Iterable[EntryId]] = None,
        on_chunk_done: Optional[Callable[[List[Entry]], None]] = None,
    ) -> BatchResult:
        """
        Translate the selected pending/failed entries in place.

        Args:
            entries: All entries of one file
            file_format: Format of the file (chooses payload tagging and hints)
            request: Languages, model, safety and terminology
            entry_ids: Ids to translate (None = all)
            on_chunk_done: Called with a chunk's entries once they are settled

        Returns:
            BatchResult with counts and per-chunk errors
        """
        file_format = FileFormat(file_format)
        request = request or TranslationRequest()
        selected = self.select_translatable(entries, entry_ids)
        result = BatchResult()
        if not selected:
            logger.info("Nothing to translate: no pending or failed entries selected")
            return result

        for entry in selected:
            entry.mark_translating()

        chunks = self.chunk_entries(selected)
        logger.info(
            f"Translating {len(selected)} entries in {len(chunks)} chunks "
            f"({file_format.value}, {request.source_lang} -> {request.target_lang}, {request.model})"
        )

        outcomes: List[_ChunkOutcome] = []
        if self.max_workers == 1 or len(chunks) == 1:
            for index, chunk in enumerate(chunks):
                outcomes.append(self._run_chunk(index, chunk, file_format, request, on_chunk_done))
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                futures = [
                    executor.submit(self._run_chunk, index, chunk, file_format, request, on_chunk_done)
                    for index, chunk in enumerate(chunks)
                ]
                for future in as_completed(futures):
                    outcomes.append(future.result())

        for outcome in sorted(outcomes, key=lambda o: o.chunk_index):
            result.translated += outcome.translated
            result.failed += len(outcome.failed_ids)
            result.failed_ids.extend(outcome.failed_ids)
            result.code_warnings.update(outcome.code_warnings)
            if outcome.error:
                result.chunk_errors.append(outcome.error)

        logger.info(f"Batch finished: {result.translated} translated, {result.failed} failed")
        return result

    def _run_chunk(self, index, chunk, file_format, request, on_chunk_done) -> _ChunkOutcome:
        outcome = self._translate_chunk(index, chunk, file_format, request)
        if on_chunk_done:
            try:
                on_chunk_done(chunk)
            except Exception as e:
                logger.error(f"Error in chunk callback: {e}")
        return outcome

    def _translate_chunk(self, index: int, chunk: List[Entry], file_format: FileFormat,
                         request: TranslationRequest) -> _ChunkOutcome:
        outcome = _ChunkOutcome(chunk_index=index)
        payload = self.join_chunk(chunk, file_format)

        try:
            if self.pre_transform:
                payload = self.pre_transform(payload)
            response = self.translator(
                payload,
                request.source_lang,
                request.target_lang,
                request.model,
                request.safety_config,
                request.terminology,
                request.rules,
                file_format.value,
                request.extra_context,
            )
            if self.post_transform:
                response = self.post_transform(response)
        except Exception as e:
            logger.error(f"Chunk {index + 1} failed ({len(chunk)} entries): {e}")
            for entry in chunk:
                entry.mark_error(str(e))
                outcome.failed_ids.append(entry.id)
            outcome.error = ChunkError(index, [e.id for e in chunk], e)
            return outcome

        segments = self.split_response(response)
        if len(segments) != len(chunk):
            logger.warning(
                f"Chunk {index + 1}: expected {len(chunk)} segments, got {len(segments)}"
            )

        for position, entry in enumerate(chunk):
            if position >= len(segments):
                entry.mark_error(MISSING_SEGMENT)
                outcome.failed_ids.append(entry.id)
                continue
            segment = segments[position]
            if file_format == FileFormat.RENPY:
                segment = strip_speaker_tag(segment, self.speaker_tag(entry))
            if not segment:
                entry.mark_error(EMPTY_SEGMENT)
                outcome.failed_ids.append(entry.id)
                continue

            entry.mark_done(segment)
            outcome.translated += 1

            dropped = missing_control_codes(entry.original_text, segment, file_format)
            if dropped:
                outcome.code_warnings[entry.id] = dropped
                logger.warning(f"Entry {entry.id!r}: translation dropped control codes {dropped}")

        return outcome
