"""Validation helpers for :mod:`pdfsanitizex`."""

from __future__ import annotations

import logging
from pathlib import Path

from pypdf import PdfReader

from .exceptions import InvalidPDFError
from .utils import resolve_path

_LOGGER = logging.getLogger("pdfsanitizex")


def validate_pdf(path: str | Path, *, expected_pages: int | None = None) -> int:
    """Validate the PDF at *path* and return its page count.

    The file is parsed with :mod:`pypdf` in strict mode, so a broken
    cross-reference table or trailer is reported rather than repaired.
    """

    pdf_path = resolve_path(path)
    _LOGGER.debug("Validating PDF at %s", pdf_path)

    try:
        reader = PdfReader(str(pdf_path), strict=True)
        page_count = len(reader.pages)
    except Exception as exc:
        raise InvalidPDFError(f"Failed to parse PDF: {exc}") from exc

    if page_count == 0:
        raise InvalidPDFError("PDF contains no pages")
    if expected_pages is not None and page_count != expected_pages:
        raise InvalidPDFError(f"PDF has {page_count} page(s), expected {expected_pages}")
    return page_count


__all__ = ["validate_pdf"]
