"""
Error types raised by the OCR pipeline.

Normalization itself never raises; bad OCR output turns into empty fields.
The errors below come from the layers around it: settings, file intake,
PDF rendering, the vision model call and the JSON/CSV store.

Every error carries a ``details`` dict for the log line and a
``recoverable`` flag. Only model-call failures are recoverable: the page
can be sent again later.
"""

from __future__ import annotations

from typing import Any, Optional

RESPONSE_PREVIEW_CHARS = 500


def _compact(**fields: Any) -> dict[str, Any]:
    """Keep only the fields that were actually given."""
    return {key: value for key, value in fields.items() if value not in (None, "")}


class CutruError(Exception):
    """Root of the application's error tree."""

    def __init__(
        self,
        message: str,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.details = dict(details) if details else {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        if not self.details:
            return self.message
        return f"{self.message} | Details: {self.details}"


class ConfigurationError(CutruError):
    """A required setting such as the model API key is missing or unusable."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        super().__init__(message, _compact(config_key=config_key))


class InputFileError(CutruError):
    """
    An uploaded image or PDF was refused before any OCR ran
    (missing, empty, wrong type or over the size cap).
    """

    def __init__(self, message: str, file_path: Optional[str] = None, size_bytes: Optional[int] = None):
        super().__init__(message, _compact(file_path=file_path, size_bytes=size_bytes))


class PDFExtractionError(CutruError):
    """PyMuPDF could not open the document or rasterize one of its pages."""

    def __init__(self, message: str, pdf_path: Optional[str] = None, page_number: Optional[int] = None):
        super().__init__(message, _compact(pdf_path=pdf_path, page_number=page_number))


class OCRError(CutruError):
    """The vision model gave up on a page: retries exhausted or a hard API error."""

    def __init__(
        self,
        message: str,
        page_number: Optional[int] = None,
        ai_provider: Optional[str] = None,
        response_text: Optional[str] = None,
    ):
        preview = response_text[:RESPONSE_PREVIEW_CHARS] if response_text else None
        super().__init__(
            message,
            _compact(page_number=page_number, ai_provider=ai_provider, response_preview=preview),
            recoverable=True,
        )


class DataPersistenceError(CutruError):
    """Reading or writing a result file failed. ``operation`` is "save" or "load"."""

    def __init__(self, message: str, file_path: Optional[str] = None, operation: Optional[str] = None):
        super().__init__(message, _compact(file_path=file_path, operation=operation))
