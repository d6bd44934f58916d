"""
pdfsanitizex - turn untrusted documents into safe, pixel-only PDFs.

The document is rendered to raw RGB pixels inside an isolated container and
the pixels are re-assembled into a new, minimal PDF, so none of the original
file's active content survives. An optional OCR pass restores a text layer.

Quick Start:
    >>> from pdfsanitizex import convert_document
    >>> result = convert_document('untrusted.docx', 'safe.pdf', apply_ocr=True)
    >>> result.page_count

Building blocks:
    - parse_pixel_data / encode_pixel_data: the renderer's pixel stream format
    - PdfAssembler / pixels_to_pdf: minimal PDF writer
    - OcrPostProcessor / apply_ocr: best-effort OCR with a plain-copy fallback
    - ConversionPipeline: the whole conversion with injectable renderer and OCR

For CLI usage, use the 'pdfsanitizex' command after installation.
"""

from pdfsanitizex.config import SanitizerConfig
from pdfsanitizex.decoder import encode_pixel_data, parse_pixel_data
from pdfsanitizex.exceptions import (
    DocumentIOError,
    EmptyDocumentError,
    ExternalProcessError,
    InvalidPDFError,
    OcrDegradedError,
    PdfSanitizeXError,
    PixelStreamError,
    PixelStreamLimitError,
    TruncatedStreamError,
)
from pdfsanitizex.ocr import OcrMyPdf, OcrPostProcessor, PdfKitOcr, apply_ocr, default_ocr_strategies
from pdfsanitizex.pipeline import ConversionPipeline, convert_doc_to_pixels, convert_document
from pdfsanitizex.renderer import ContainerRenderer, Renderer
from pdfsanitizex.types import ConversionResult, OcrOutcome, Page
from pdfsanitizex.validators import validate_pdf
from pdfsanitizex.writer import ObjectWriter, PdfAssembler, pixels_to_pdf

__version__ = "0.1.0"

__all__ = [
    # Pipeline
    "ConversionPipeline",
    "convert_document",
    "convert_doc_to_pixels",
    # Stages
    "parse_pixel_data",
    "encode_pixel_data",
    "PdfAssembler",
    "ObjectWriter",
    "pixels_to_pdf",
    "OcrPostProcessor",
    "PdfKitOcr",
    "OcrMyPdf",
    "default_ocr_strategies",
    "apply_ocr",
    "Renderer",
    "ContainerRenderer",
    "validate_pdf",
    # Data types
    "Page",
    "OcrOutcome",
    "ConversionResult",
    "SanitizerConfig",
    # Exceptions
    "PdfSanitizeXError",
    "PixelStreamError",
    "TruncatedStreamError",
    "PixelStreamLimitError",
    "EmptyDocumentError",
    "DocumentIOError",
    "ExternalProcessError",
    "OcrDegradedError",
    "InvalidPDFError",
    # Version info
    "__version__",
]
