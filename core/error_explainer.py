# -*- coding: utf-8 -*-
"""
Error Explainer Module

Maps translation and parsing failures to a category and a user-facing
message with actionable suggestions.
"""

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Union

from locforge_exceptions import (
    APIKeyError, ContentBlockedError, EmptyResponseError, NetworkError,
    ParserError, QuotaExceededError, ResponseTruncatedError,
)


@dataclass
class ErrorExplanation:
    category: str
    title: str
    message: str
    suggestions: List[str] = field(default_factory=list)
    raw_sample: str = ""
    status_code: Optional[int] = None


class ErrorExplainer:
    """
    Analyzes raw error messages/objects and returns a structured summary.
    """

    # Categories
    CAT_AUTH = "AUTH"
    CAT_RATE_LIMIT = "RATE_LIMIT"
    CAT_SAFETY = "SAFETY"
    CAT_TRUNCATED = "TRUNCATED"
    CAT_EMPTY = "EMPTY_RESPONSE"
    CAT_NETWORK = "NETWORK"
    CAT_PARSE = "PARSE"
    CAT_UNKNOWN = "UNKNOWN"

    # Most actionable category wins when several chunks failed differently
    PRIORITY = {
        CAT_AUTH: 100,
        CAT_RATE_LIMIT: 90,
        CAT_NETWORK: 80,
        CAT_SAFETY: 70,
        CAT_TRUNCATED: 60,
        CAT_EMPTY: 50,
        CAT_PARSE: 40,
        CAT_UNKNOWN: 0,
    }

    _TYPE_MAP = (
        (APIKeyError, CAT_AUTH),
        (QuotaExceededError, CAT_RATE_LIMIT),
        (ContentBlockedError, CAT_SAFETY),
        (ResponseTruncatedError, CAT_TRUNCATED),
        (EmptyResponseError, CAT_EMPTY),
        (NetworkError, CAT_NETWORK),
        (ParserError, CAT_PARSE),
    )

    @classmethod
    def explain(cls, error: Union[BaseException, str]) -> ErrorExplanation:
        """Explain a single exception or error message."""
        raw = str(error) if error is not None else ""
        code = cls._status_code(raw)

        category = None
        if isinstance(error, BaseException):
            for exc_type, cat in cls._TYPE_MAP:
                if isinstance(error, exc_type):
                    category = cat
                    break
        if category is None:
            category = cls._classify_text(raw, code)

        return cls._build(category, code, raw)

    @classmethod
    def analyze(cls, errors: Iterable[Union[BaseException, str]]) -> Optional[ErrorExplanation]:
        """
        Pick the most significant error of a batch and explain it.

        Returns:
            None when there were no errors
        """
        best = None
        for err in errors:
            if err is None or (isinstance(err, str) and not err):
                continue
            explanation = cls.explain(err)
            if best is None or cls.PRIORITY[explanation.category] > cls.PRIORITY[best.category]:
                best = explanation
        return best

    @staticmethod
    def _status_code(error_str: str) -> Optional[int]:
        match = re.search(r'\b(400|401|403|429|500|502|503|504)\b', error_str)
        return int(match.group(1)) if match else None

    @classmethod
    def _classify_text(cls, error_str: str, status_code: Optional[int]) -> str:
        error_lower = error_str.lower()

        if status_code in (401, 403) or any(k in error_lower for k in ["api key not valid", "invalid api key", "api key", "unauthorized", "permission denied"]):
            return cls.CAT_AUTH
        if status_code == 429 or any(k in error_lower for k in ["rate limit", "too many requests", "resource exhausted", "quota"]):
            return cls.CAT_RATE_LIMIT
        if any(k in error_lower for k in ["safety", "blocked", "block_reason"]):
            return cls.CAT_SAFETY
        if any(k in error_lower for k in ["max_tokens", "truncated", "too long"]):
            return cls.CAT_TRUNCATED
        if any(k in error_lower for k in ["empty response", "returned empty", "no text", "missing segment"]):
            return cls.CAT_EMPTY
        if any(k in error_lower for k in ["timeout", "timed out", "connection", "dns", "unreachable", "network", "socket"]):
            return cls.CAT_NETWORK
        if any(k in error_lower for k in ["json", "parse", "decode"]):
            return cls.CAT_PARSE
        return cls.CAT_UNKNOWN

    @classmethod
    def _build(cls, category: str, code: Optional[int], raw: str) -> ErrorExplanation:
        code_str = f" [Code: {code}]" if code else ""

        if category == cls.CAT_AUTH:
            return ErrorExplanation(
                category, "Authentication Error",
                f"The Gemini API key is missing or invalid.{code_str}",
                ["Set a valid key with `locforge --api-key` or the GEMINI_API_KEY environment variable.",
                 "Make sure the key was copied without surrounding spaces."],
                raw, code,
            )
        if category == cls.CAT_RATE_LIMIT:
            return ErrorExplanation(
                category, "Quota Exceeded",
                f"The API quota or rate limit was exceeded.{code_str}",
                ["Wait a minute and retry the failed entries.",
                 "Lower the number of parallel workers or use a smaller chunk size."],
                raw, code,
            )
        if category == cls.CAT_SAFETY:
            return ErrorExplanation(
                category, "Content Blocked",
                "The request or the response was blocked by the model's safety filter.",
                ["Review the blocked lines manually.",
                 "Adjust the safety thresholds in the settings."],
                raw, code,
            )
        if category == cls.CAT_TRUNCATED:
            return ErrorExplanation(
                category, "Response Truncated",
                "The text was too long and the model stopped at its output limit.",
                ["Use a smaller chunk size and retry."],
                raw, code,
            )
        if category == cls.CAT_EMPTY:
            return ErrorExplanation(
                category, "Empty Response",
                "The model returned no usable text for some entries.",
                ["Retry the failed entries.", "Use a smaller chunk size if delimiters are being dropped."],
                raw, code,
            )
        if category == cls.CAT_NETWORK:
            return ErrorExplanation(
                category, "Network Error",
                "The translation service could not be reached.",
                ["Check your internet connection and proxy settings.", "Retry the failed entries."],
                raw, code,
            )
        if category == cls.CAT_PARSE:
            return ErrorExplanation(
                category, "File Could Not Be Read",
                "The file is not valid for its format.",
                ["Check that the file is a Ren'Py script or an RPG Maker MZ data file.",
                 "Make sure JSON files are not truncated or hand-edited."],
                raw, code,
            )
        return ErrorExplanation(
            cls.CAT_UNKNOWN, "Unknown Error",
            "An unexpected error occurred while talking to the translation service.",
            ["Check the log file for details.", "Retry the operation."],
            raw, code,
        )
