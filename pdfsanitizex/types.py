"""
Type definitions and dataclasses for pdfsanitizex.

This module defines the data structures passed between the decoder, the
assembler, the OCR post-processor and the pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

MAX_U16 = 0xFFFF
BYTES_PER_PIXEL = 3


@dataclass(frozen=True, slots=True)
class Page:
    """
    A single rendered page.

    Attributes:
        width: Width in pixels (0-65535)
        height: Height in pixels (0-65535)
        pixels: RGB8 samples, row-major, no row padding and no alpha
    """
    width: int
    height: int
    pixels: bytes = field(repr=False)

    def __post_init__(self) -> None:
        for name, value in (("width", self.width), ("height", self.height)):
            if not 0 <= value <= MAX_U16:
                raise ValueError(f"Page {name} must be in [0, {MAX_U16}], got {value}")
        expected = self.width * self.height * BYTES_PER_PIXEL
        if len(self.pixels) != expected:
            raise ValueError(
                f"Page of {self.width}x{self.height} needs {expected} pixel bytes, "
                f"got {len(self.pixels)}"
            )

    @property
    def byte_size(self) -> int:
        return len(self.pixels)

    def size_in_points(self, dpi: float) -> tuple[float, float]:
        """Return the page size in PDF points (1/72 inch) at *dpi*."""
        return self.width / dpi * 72.0, self.height / dpi * 72.0


@dataclass
class OcrOutcome:
    """
    Result of an OCR post-processing run.

    Attributes:
        strategy: Name of the strategy that produced the output, ``"copy"``
            when every OCR tier failed and the input was copied unchanged
        warnings: One message per failed OCR tier
    """
    strategy: str
    warnings: List[str] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        return self.strategy == "copy"


@dataclass
class ConversionResult:
    """
    Result of a document sanitization.

    Attributes:
        input_path: The untrusted source document
        output_path: The sanitized PDF
        page_count: Number of pages written
        output_size: Size of the sanitized PDF in bytes
        ocr: OCR outcome, or None when OCR was not requested
    """
    input_path: Path
    output_path: Path
    page_count: int
    output_size: int
    ocr: Optional[OcrOutcome] = None

    @property
    def warnings(self) -> List[str]:
        return list(self.ocr.warnings) if self.ocr else []

    def __str__(self) -> str:
        return (
            f"ConversionResult(pages={self.page_count}, output='{self.output_path}', "
            f"warnings={len(self.warnings)})"
        )
