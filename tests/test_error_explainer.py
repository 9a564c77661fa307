# -*- coding: utf-8 -*-
"""
Tests for error categorisation and batch error summaries.
"""

import pytest

from core.error_explainer import ErrorExplainer
from locforge_exceptions import (
    APIKeyError, ContentBlockedError, DocumentShapeError, QuotaExceededError,
    ResponseTruncatedError,
)


class TestExplain:

    @pytest.mark.parametrize("error,category", [
        (APIKeyError("bad key"), ErrorExplainer.CAT_AUTH),
        (QuotaExceededError("slow down"), ErrorExplainer.CAT_RATE_LIMIT),
        (ContentBlockedError("blocked", reason="SAFETY"), ErrorExplainer.CAT_SAFETY),
        (ResponseTruncatedError("long"), ErrorExplainer.CAT_TRUNCATED),
        (DocumentShapeError("unknown layout"), ErrorExplainer.CAT_PARSE),
    ])
    def test_by_exception_type(self, error, category):
        assert ErrorExplainer.explain(error).category == category

    @pytest.mark.parametrize("text,category", [
        ("401 Unauthorized", ErrorExplainer.CAT_AUTH),
        ("429 Too Many Requests", ErrorExplainer.CAT_RATE_LIMIT),
        ("Connection timed out", ErrorExplainer.CAT_NETWORK),
        ("finish_reason MAX_TOKENS", ErrorExplainer.CAT_TRUNCATED),
        ("missing segment", ErrorExplainer.CAT_EMPTY),
        ("Expecting value: line 1 column 1 (char 0) while decoding JSON", ErrorExplainer.CAT_PARSE),
        ("no idea", ErrorExplainer.CAT_UNKNOWN),
    ])
    def test_by_message(self, text, category):
        assert ErrorExplainer.explain(text).category == category

    def test_status_code_in_message(self):
        explanation = ErrorExplainer.explain("429 Resource exhausted")
        assert explanation.status_code == 429
        assert "[Code: 429]" in explanation.message
        assert explanation.raw_sample == "429 Resource exhausted"

    def test_suggestions_present(self):
        explanation = ErrorExplainer.explain(APIKeyError("bad key"))
        assert explanation.title == "Authentication Error"
        assert any("GEMINI_API_KEY" in s for s in explanation.suggestions)


class TestAnalyze:

    def test_no_errors(self):
        assert ErrorExplainer.analyze([]) is None
        assert ErrorExplainer.analyze([None, ""]) is None

    def test_most_actionable_wins(self):
        explanation = ErrorExplainer.analyze([
            ResponseTruncatedError("long"),
            QuotaExceededError("slow down"),
            "something odd",
        ])
        assert explanation.category == ErrorExplainer.CAT_RATE_LIMIT

    def test_auth_beats_everything(self):
        explanation = ErrorExplainer.analyze(["Connection refused", APIKeyError("bad key")])
        assert explanation.category == ErrorExplainer.CAT_AUTH
