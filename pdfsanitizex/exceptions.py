"""
Custom exceptions for pdfsanitizex.

Every exception carries a ``stage`` naming the part of the conversion that
failed, so callers can tell a corrupt pixel stream from a renderer crash.
"""

from __future__ import annotations


class PdfSanitizeXError(Exception):
    """Base exception for all pdfsanitizex errors."""

    stage: str = "convert"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def default_message(self) -> str:
        return "An unknown document sanitization error occurred."


class PixelStreamError(PdfSanitizeXError):
    """Raised when the renderer's pixel stream cannot be decoded."""

    stage = "decode"

    @property
    def default_message(self) -> str:
        return "Malformed pixel stream."


class TruncatedStreamError(PixelStreamError):
    """Raised when the pixel stream ends before a declared field is complete."""

    def __init__(
        self,
        field: str,
        expected: int,
        available: int,
        *,
        page_index: int | None = None,
        offset: int = 0,
    ) -> None:
        self.field = field
        self.expected = expected
        self.available = available
        self.page_index = page_index
        self.offset = offset
        where = "page count" if page_index is None else f"page {page_index} {field}"
        super().__init__(
            f"Truncated pixel stream at byte {offset}: {where} needs {expected} "
            f"bytes but only {available} available"
        )


class PixelStreamLimitError(PixelStreamError):
    """Raised when a declared pixel block exceeds the configured decode limit."""

    def __init__(self, page_index: int, requested: int, limit: int) -> None:
        self.page_index = page_index
        self.requested = requested
        self.limit = limit
        super().__init__(
            f"Page {page_index} declares {requested} pixel bytes, which would exceed "
            f"the decode limit of {limit} bytes"
        )


class EmptyDocumentError(PdfSanitizeXError):
    """Raised when a PDF is requested for zero pages."""

    stage = "assemble"

    @property
    def default_message(self) -> str:
        return "No pages to convert."


class DocumentIOError(PdfSanitizeXError):
    """Raised when reading or writing a file fails."""

    stage = "io"

    def __init__(self, message: str = "", *, stage: str | None = None) -> None:
        super().__init__(message)
        if stage is not None:
            self.stage = stage

    @property
    def default_message(self) -> str:
        return "File operation failed."


class ExternalProcessError(PdfSanitizeXError):
    """Raised when the rendering collaborator cannot run or exits non-zero."""

    stage = "render"

    def __init__(self, message: str = "", *, returncode: int | None = None) -> None:
        super().__init__(message)
        self.returncode = returncode

    @property
    def default_message(self) -> str:
        return "The document renderer failed."


class OcrDegradedError(PdfSanitizeXError):
    """Raised by an OCR strategy that could not produce a text layer.

    Never escapes :class:`pdfsanitizex.ocr.OcrPostProcessor`.
    """

    stage = "ocr"

    @property
    def default_message(self) -> str:
        return "OCR failed."


class InvalidPDFError(PdfSanitizeXError):
    """Raised when a produced PDF fails structural validation."""

    stage = "validate"

    @property
    def default_message(self) -> str:
        return "Invalid or corrupted PDF file."
