# -*- coding: utf-8 -*-
"""
LocForge Exceptions Module
Custom exception classes for structured error handling across the application.
"""


class LocForgeError(Exception):
    """
    Base exception class for all LocForge-related errors.

    Attributes:
        message: Human-readable error message
        details: Optional additional details (dict, string, etc.)
    """

    def __init__(self, message: str, details=None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# Parser Exceptions
# =============================================================================

class ParserError(LocForgeError):
    """Base exception for parser-related errors."""
    pass


class ParseError(ParserError):
    """Raised when a document cannot be decoded (e.g. malformed JSON)."""

    def __init__(self, message: str, file_name: str = None, line_number: int = None):
        super().__init__(message, details={'file_name': file_name, 'line_number': line_number})
        self.file_name = file_name
        self.line_number = line_number


class DocumentShapeError(ParserError):
    """Raised when a decoded document matches no known RPG Maker layout."""

    def __init__(self, message: str, file_name: str = None):
        super().__init__(message, details={'file_name': file_name})
        self.file_name = file_name


# =============================================================================
# AI Exceptions
# =============================================================================

class AIError(LocForgeError):
    """Base exception for translation-service errors (Gemini, etc.)."""
    pass


class APIKeyError(AIError):
    """Raised when API key is missing or invalid."""
    pass


class QuotaExceededError(AIError):
    """Raised when the API quota or rate limit is exhausted."""
    pass


class ContentBlockedError(AIError):
    """Raised when the request or response was blocked by a safety filter."""

    def __init__(self, message: str, reason: str = None):
        super().__init__(message, details={'reason': reason} if reason else None)
        self.reason = reason


class ResponseTruncatedError(AIError):
    """Raised when generation stopped at the model's output length limit."""
    pass


class EmptyResponseError(AIError):
    """Raised when the model returned no text at all."""
    pass


class NetworkError(AIError):
    """Raised when there's a network connectivity issue."""
    pass


class TranslationError(AIError):
    """Raised when AI translation fails for an unclassified reason."""

    def __init__(self, message: str, source_text: str = None, target_lang: str = None):
        super().__init__(message, details={'target_lang': target_lang} if target_lang else None)
        self.source_text = source_text
        self.target_lang = target_lang


# =============================================================================
# Core/File Exceptions
# =============================================================================

class CoreError(LocForgeError):
    """Base exception for core module errors."""
    pass


class FileOperationError(CoreError):
    """Raised when a file operation (read/write) fails."""

    def __init__(self, message: str, file_path: str = None, operation: str = None):
        super().__init__(message, details={'file_path': file_path, 'operation': operation})
        self.file_path = file_path
        self.operation = operation


class InvalidStatusTransition(CoreError):
    """Raised when an entry is moved to a status its lifecycle does not allow."""

    def __init__(self, entry_id, current: str, requested: str):
        super().__init__(
            f"Entry {entry_id!r} cannot move from '{current}' to '{requested}'",
            details={'entry_id': entry_id},
        )
        self.entry_id = entry_id
        self.current = current
        self.requested = requested


class ExportError(CoreError):
    """Raised when a file cannot be exported in the requested mode."""

    def __init__(self, message: str, file_name: str = None, mode: str = None):
        super().__init__(message, details={'file_name': file_name, 'mode': mode})
        self.file_name = file_name
        self.mode = mode


# =============================================================================
# Settings Exceptions
# =============================================================================

class SettingsError(LocForgeError):
    """Base exception for settings-related errors."""
    pass


class SettingsLoadError(SettingsError):
    """Raised when loading settings fails."""
    pass


class SettingsSaveError(SettingsError):
    """Raised when saving settings fails."""
    pass
