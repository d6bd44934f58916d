"""Conversion settings for :mod:`pdfsanitizex`."""

from __future__ import annotations

import dataclasses
import zlib
from pathlib import Path
from typing import Any

DEFAULT_DPI = 150.0
DEFAULT_IMAGE_NAME = "ghcr.io/freedomofpress/dangerzone/v1"

SECURITY_ARGS: tuple[str, ...] = (
    "--log-driver",
    "none",
    "--security-opt",
    "no-new-privileges",
    "--cap-drop",
    "all",
    "--cap-add",
    "SYS_CHROOT",
    "--security-opt",
    "label=type:container_engine_t",
    "--network=none",
    "-u",
    "dangerzone",
)

CONVERTER_COMMAND: tuple[str, ...] = (
    "/usr/bin/python3",
    "-m",
    "dangerzone.conversion.doc_to_pixels",
)


@dataclasses.dataclass(frozen=True, slots=True)
class SanitizerConfig:
    """Settings shared by every stage of a conversion.

    ``dpi`` is the resolution the renderer rasterizes at; it fixes the page
    size written to the PDF. ``max_decoded_bytes`` bounds the pixel data the
    decoder will accept (``None`` leaves it unbounded). ``pdfkit_helper`` is
    the Swift helper used for OCR on macOS; ``None`` looks for
    ``macos_ocr.swift`` next to the package.
    """

    dpi: float = DEFAULT_DPI
    container_runtime: str = "podman"
    image_name: str = DEFAULT_IMAGE_NAME
    security_args: tuple[str, ...] = SECURITY_ARGS
    converter_command: tuple[str, ...] = CONVERTER_COMMAND
    max_decoded_bytes: int | None = None
    compression_level: int = zlib.Z_DEFAULT_COMPRESSION
    ocrmypdf_executables: tuple[str, ...] = ("ocrmypdf",)
    ocrmypdf_args: tuple[str, ...] = ("--redo-ocr",)
    swift_executable: str = "swift"
    pdfkit_helper: Path | None = None
    post_validate: bool = False

    def __post_init__(self) -> None:
        if self.dpi <= 0:
            raise ValueError(f"dpi must be positive, got {self.dpi}")
        if self.max_decoded_bytes is not None and self.max_decoded_bytes < 0:
            raise ValueError(f"max_decoded_bytes must not be negative, got {self.max_decoded_bytes}")
        if not -1 <= self.compression_level <= 9:
            raise ValueError(f"Unknown compression level: {self.compression_level}")
        if not self.container_runtime:
            raise ValueError("container_runtime must not be empty")

    def with_updates(self, **updates: Any) -> "SanitizerConfig":
        """Return a copy with every non-``None`` value in *updates* applied."""

        changes = {k: v for k, v in updates.items() if v is not None}
        return dataclasses.replace(self, **changes)

    def resolve_pdfkit_helper(self) -> Path:
        if self.pdfkit_helper is not None:
            return Path(self.pdfkit_helper)
        return Path(__file__).resolve().parent / "macos_ocr.swift"


__all__ = ["SanitizerConfig", "DEFAULT_DPI", "DEFAULT_IMAGE_NAME", "SECURITY_ARGS", "CONVERTER_COMMAND"]
