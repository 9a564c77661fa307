import sys
import time
import random
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional

from locforge_logger import get_logger, mask_secret
logger = get_logger("ai")

import locforge_config as config
from locforge_enums import FileFormat
from locforge_exceptions import (
    AIError, APIKeyError, ContentBlockedError, EmptyResponseError, NetworkError,
    QuotaExceededError, ResponseTruncatedError, TranslationError,
)
from core.terminology import Rule, Terminology, build_terminology_instruction

genai = None

# =============================================================================
# SAFETY SETTINGS
# =============================================================================

SUPPORTED_HARM_CATEGORIES = [
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
]

BLOCK_THRESHOLDS = (
    "BLOCK_NONE",
    "BLOCK_ONLY_HIGH",
    "BLOCK_MEDIUM_AND_ABOVE",
    "BLOCK_LOW_AND_ABOVE",
)


@dataclass
class SafetyConfig:
    """
    enabled=False sends BLOCK_NONE for every category. When enabled,
    categories missing from `thresholds` also fall back to BLOCK_NONE.
    """
    enabled: bool = False
    thresholds: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'SafetyConfig':
        if not isinstance(data, dict):
            return cls()
        thresholds = data.get('thresholds') or {}
        return cls(
            enabled=bool(data.get('enabled', False)),
            thresholds={k: v for k, v in thresholds.items() if v in BLOCK_THRESHOLDS},
        )

    def to_dict(self) -> Dict[str, Any]:
        return {'enabled': self.enabled, 'thresholds': dict(self.thresholds)}


def build_safety_settings(safety_config: Optional[SafetyConfig]) -> List[Dict[str, str]]:
    safety_config = safety_config or SafetyConfig()
    if not safety_config.enabled:
        return [{"category": c, "threshold": "BLOCK_NONE"} for c in SUPPORTED_HARM_CATEGORIES]
    return [
        {"category": c, "threshold": safety_config.thresholds.get(c) or "BLOCK_NONE"}
        for c in SUPPORTED_HARM_CATEGORIES
    ]


# =============================================================================
# PROMPT
# =============================================================================

RENPY_FORMAT_INSTRUCTIONS = """
--- REN'PY FORMAT (CRITICAL) ---
- Keep variables in square brackets EXACTLY as they are, e.g. [player_name], [score].
- Keep text tags in curly braces EXACTLY as they are, e.g. {i}, {/i}, {size=+10}, {w}.
- Keep percent interpolation (%(name)s, %s) and escapes such as \\n and \\" unchanged.
- Do not translate file names or code that appears in the text.
- Each segment starts with the speaker in the form [Speaker]: Text. Use the speaker to pick a fitting voice and form of address.
- Return every segment in the same form: [Speaker]: Translated text

--- BATCH TRANSLATION ---
The input contains segments separated by a line containing only "#####". Translate each segment individually, keep the context flow between them, and return exactly the same number of segments separated by the same "#####" delimiter."""

RPGMAKER_FORMAT_INSTRUCTIONS = """
--- RPG MAKER CODE PRESERVATION (CRITICAL) ---
- You MUST NOT translate or remove any control codes starting with a backslash.
- Keep these EXACTLY as they are: \\n<...>, \\C[...], \\I[...], \\V[...], \\., \\|, \\!, \\^, \\{, \\}, \\$, \\#.
- Example: "\\n<Claire>Hello!" -> keep "\\n<Claire>" untouched (do not translate the name inside the code).
- Example: "You got \\C[20]50 Gold\\C[0]!" -> the \\C[20] and \\C[0] codes stay around the translated words.
- Keep these codes in their relative positions within the sentence.
- Lines starting with "[Choice] " are menu options: keep the "[Choice] " tag and translate only the label.

--- BATCH TRANSLATION ---
If the input contains multiple segments separated by "#####", treat them as a continuous dialogue or event. Translate each segment individually but keep the context flow between them. Return the result separated by the same "#####" delimiter."""

FORMAT_INSTRUCTIONS = {
    FileFormat.RENPY.value: RENPY_FORMAT_INSTRUCTIONS,
    FileFormat.RPGMAKER.value: RPGMAKER_FORMAT_INSTRUCTIONS,
}


def _language_name(code: str) -> str:
    return config.SUPPORTED_LANGUAGES.get(code, code)


def build_system_instruction(
    source_lang: str,
    target_lang: str,
    terminology: Optional[Terminology] = None,
    rules: Optional[Iterable[Rule]] = None,
    format_hint: Optional[str] = None,
    extra_context: Optional[str] = None,
) -> str:
    """Assemble the system instruction for one translation request."""
    target_name = _language_name(target_lang)
    if not source_lang or source_lang == 'auto':
        lang_clause = f"to {target_name} after automatically detecting the source language"
    else:
        lang_clause = f"from {_language_name(source_lang)} to {target_name}"

    parts = [
        f"You are a professional game and light novel translator. Your translations read as natural, "
        f"emotional, flowing {target_name} and never sound like a machine.",
        "",
        "--- TRANSLATION RULES ---",
        f"1. Translate the text {lang_clause}.",
        "2. Match each character's voice and personality; choose pronouns and forms of address naturally.",
        "3. Avoid word-for-word translation. Rearrange clauses so the result sounds native.",
        "4. Preserve the exact number of line breaks and all original formatting.",
        "5. Your response MUST consist ONLY of the final translated text. Do not include notes or explanations.",
    ]

    format_block = FORMAT_INSTRUCTIONS.get(format_hint or "")
    if format_block:
        parts.append(format_block)

    terminology = terminology or Terminology()
    terms_block = build_terminology_instruction(terminology.keywords, terminology.proper_nouns, rules or [])
    if terms_block:
        parts.append("")
        parts.append(terms_block)

    if extra_context:
        parts.append("")
        parts.append("--- ADDITIONAL CONTEXT ---")
        parts.append(extra_context)

    return '\n'.join(parts)


# =============================================================================
# GEMINI CLIENT
# =============================================================================

def _lazy_import_genai():

    global genai

    if 'google.generativeai' in sys.modules and genai is not None:
        return genai

    if genai is None:
        try:
            logger.debug("Lazy importing google.generativeai...")
            import google.generativeai as genai_local
            genai = genai_local
            logger.debug("Lazy import successful: google.generativeai")
            return genai
        except ImportError:
            logger.error("Failed to import google.generativeai. Install it with: pip install google-generativeai")
            return None
    return genai


def _default_model_factory(api_key: str, model_name: str, system_instruction: str):
    genai_module = _lazy_import_genai()
    if genai_module is None:
        raise AIError("google-generativeai is not installed; AI translation is unavailable")
    genai_module.configure(api_key=api_key)
    return genai_module.GenerativeModel(model_name, system_instruction=system_instruction)


RETRYABLE_KEYWORDS = [
    "429", "503", "rate limit", "quota", "resource exhausted",
    "timeout", "deadline", "unavailable",
]

NETWORK_KEYWORDS = [
    "deadline exceeded", "timeout", "timed out", "connection refused", "connection reset",
    "network is unreachable", "dns", "unavailable", "503",
]


def _finish_reason_name(candidate) -> str:
    reason = getattr(candidate, 'finish_reason', None)
    if reason is None:
        return ""
    name = getattr(reason, 'name', None)
    if name:
        return name
    # Older SDKs expose the raw proto int
    return {1: "STOP", 2: "MAX_TOKENS", 3: "SAFETY", 4: "RECITATION"}.get(reason, str(reason))


def _response_text(response) -> str:
    try:
        return response.text or ""
    except (ValueError, AttributeError):
        # .text raises when the candidate has no parts (blocked/truncated)
        return ""


def _check_response(response) -> str:
    """Return the response text or raise the matching AIError."""
    text = _response_text(response)
    if text.strip():
        return text

    candidates = getattr(response, 'candidates', None) or []
    if candidates:
        finish_reason = _finish_reason_name(candidates[0])
        if finish_reason == "MAX_TOKENS":
            raise ResponseTruncatedError("The text is too long and exceeded the model's output limit.")
        if finish_reason == "SAFETY":
            ratings = getattr(candidates[0], 'safety_ratings', None) or []
            category = getattr(getattr(ratings[0], 'category', None), 'name', None) if ratings else None
            raise ContentBlockedError(
                f"The content was blocked by the safety filter (category: {category or 'unknown'}).",
                reason=category,
            )

    feedback = getattr(response, 'prompt_feedback', None)
    block_reason = getattr(feedback, 'block_reason', None) if feedback else None
    if block_reason:
        reason = getattr(block_reason, 'name', None) or str(block_reason)
        raise ContentBlockedError(f"The request was blocked. Reason: {reason}.", reason=reason)

    raise EmptyResponseError("The model returned no text.")


def _classify_exception(e: Exception) -> AIError:
    message = str(e)
    lowered = message.lower()
    if 'api key not valid' in lowered or 'api_key_invalid' in lowered:
        return APIKeyError("The API key is not valid.", details=message)
    if '429' in message or 'quota' in lowered or 'resource exhausted' in lowered:
        return QuotaExceededError("The API usage quota was exceeded.", details=message)
    if any(k in lowered for k in NETWORK_KEYWORDS):
        return NetworkError("Could not reach the Gemini API.", details=message)
    return TranslationError(f"Unknown error while talking to the AI: {message}")


def _call_gemini_with_backoff(model, payload: str, safety_settings, generation_config,
                              max_retries: int = config.REQUEST_MAX_RETRIES) -> str:
    """
    Call Gemini with exponential backoff + jitter on rate limits/transient errors.

    Returns:
        The response text

    Raises:
        AIError subclasses
    """
    attempt = 0
    while True:
        try:
            response = model.generate_content(
                payload,
                safety_settings=safety_settings,
                generation_config=generation_config,
            )
        except Exception as e:
            error_str = str(e).lower()
            is_retryable = any(keyword in error_str for keyword in RETRYABLE_KEYWORDS)
            if is_retryable and attempt + 1 < max_retries:
                delay = min(2 ** attempt + random.uniform(0, 1), config.REQUEST_BACKOFF_CAP_SECONDS)
                logger.warning(f"[_call_gemini_with_backoff] Rate limit/error, retrying in {delay:.1f}s: {e}")
                time.sleep(delay)
                attempt += 1
                continue
            logger.error(f"[_call_gemini_with_backoff] Final error: {e}")
            raise _classify_exception(e) from e

        return _check_response(response)


class GeminiTranslator:
    """
    Translator callable backed by google-generativeai.

    Instances match the batch protocol's translator signature:
    translate(payload, source_lang, target_lang, model, safety_config,
    terminology, rules, format_hint, extra_context) -> str
    """

    def __init__(self, api_key: Optional[str], max_retries: int = config.REQUEST_MAX_RETRIES,
                 model_factory: Optional[Callable[[str, str, str], Any]] = None):
        self._api_key = api_key
        self._max_retries = max_retries
        self._model_factory = model_factory or _default_model_factory

    def __call__(
        self,
        payload: str,
        source_lang: str,
        target_lang: str,
        model: Optional[str] = None,
        safety_config: Optional[SafetyConfig] = None,
        terminology: Optional[Terminology] = None,
        rules: Optional[List[Rule]] = None,
        format_hint: Optional[str] = None,
        extra_context: Optional[str] = None,
    ) -> str:
        if not self._api_key:
            raise APIKeyError("API key is not configured.")

        model_name = model or config.DEFAULT_MODEL_NAME
        system_instruction = build_system_instruction(
            source_lang, target_lang, terminology, rules, format_hint, extra_context
        )
        logger.debug(
            f"Gemini request: model={model_name}, key={mask_secret(self._api_key)}, "
            f"{len(payload)} chars, format={format_hint}"
        )

        try:
            gemini_model = self._model_factory(self._api_key, model_name, system_instruction)
        except AIError:
            raise
        except Exception as e:
            logger.error(f"Error during Gemini configuration or model creation: {e}")
            raise _classify_exception(e) from e

        return _call_gemini_with_backoff(
            gemini_model,
            payload,
            build_safety_settings(safety_config),
            {"temperature": config.GENERATION_TEMPERATURE},
            max_retries=self._max_retries,
        )


def translate_text(payload, source_lang, target_lang, model=None, safety_config=None,
                   terminology=None, rules=None, format_hint=None, extra_context=None,
                   api_key=None, translator=None) -> str:
    """
    One-shot translation of free text with an explicit API key.

    `translator` replaces the Gemini-backed default (same call signature).
    """
    translator = translator or GeminiTranslator(api_key)
    return translator(
        payload, source_lang, target_lang, model, safety_config,
        terminology, rules, format_hint, extra_context,
    )
