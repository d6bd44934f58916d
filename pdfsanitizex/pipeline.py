"""End-to-end document sanitization."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from .config import SanitizerConfig
from .decoder import parse_pixel_data
from .exceptions import DocumentIOError
from .ocr import OcrPostProcessor
from .renderer import ContainerRenderer, Renderer
from .types import ConversionResult, OcrOutcome
from .utils import resolve_path
from .validators import validate_pdf
from .writer import pixels_to_pdf

_LOGGER = logging.getLogger("pdfsanitizex")


def temporary_output_path(output_path: Path) -> Path:
    """Path the pre-OCR PDF is written to when OCR is requested."""

    return output_path.with_name(f"{output_path.name}.temp.pdf")


def _read_document(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise DocumentIOError(f"Failed to open input file '{path}': {exc}", stage="render") from exc


class ConversionPipeline:
    """Render, decode, assemble and optionally OCR a single document.

    The renderer and OCR post-processor are injected so a conversion can be
    exercised with fakes. Two conversions must not share an ``output_path``
    at the same time: the temporary pre-OCR file is derived from it.
    """

    def __init__(
        self,
        config: SanitizerConfig | None = None,
        *,
        renderer: Renderer | None = None,
        ocr: OcrPostProcessor | None = None,
    ) -> None:
        self.config = config or SanitizerConfig()
        self.renderer = renderer or ContainerRenderer(self.config)
        self._ocr = ocr

    @property
    def ocr(self) -> OcrPostProcessor:
        if self._ocr is None:
            self._ocr = OcrPostProcessor.from_config(self.config)
        return self._ocr

    def render(self, input_path: str | os.PathLike[str]) -> bytes:
        source = resolve_path(input_path)
        return self.renderer.render(_read_document(source))

    def convert(
        self,
        input_path: str | os.PathLike[str],
        output_path: str | os.PathLike[str],
        apply_ocr: bool = False,
    ) -> ConversionResult:
        source = resolve_path(input_path)
        destination = resolve_path(output_path)

        stream = self.renderer.render(_read_document(source))
        pages = parse_pixel_data(stream, max_decoded_bytes=self.config.max_decoded_bytes)
        del stream

        target = temporary_output_path(destination) if apply_ocr else destination
        pixels_to_pdf(pages, target, config=self.config)
        page_count = len(pages)
        del pages

        outcome: OcrOutcome | None = None
        if apply_ocr:
            try:
                outcome = self.ocr.run(target, destination)
            finally:
                target.unlink(missing_ok=True)

        if self.config.post_validate:
            validate_pdf(destination, expected_pages=page_count)

        result = ConversionResult(
            input_path=source,
            output_path=destination,
            page_count=page_count,
            output_size=destination.stat().st_size,
            ocr=outcome,
        )
        _LOGGER.info("Conversion completed successfully: %d page(s)", page_count)
        return result


def convert_doc_to_pixels(
    input_path: str | os.PathLike[str],
    *,
    config: SanitizerConfig | None = None,
    renderer: Renderer | None = None,
) -> bytes:
    """Render *input_path* in the sandbox and return the raw pixel stream."""

    return ConversionPipeline(config, renderer=renderer).render(input_path)


def convert_document(
    input_path: str | os.PathLike[str],
    output_path: str | os.PathLike[str],
    apply_ocr: bool = False,
    *,
    config: SanitizerConfig | None = None,
    renderer: Renderer | None = None,
) -> ConversionResult:
    """Sanitize *input_path* into a pixel-only PDF at *output_path*."""

    pipeline = ConversionPipeline(config, renderer=renderer)
    return pipeline.convert(input_path, output_path, apply_ocr=apply_ocr)


__all__ = ["ConversionPipeline", "convert_document", "convert_doc_to_pixels", "temporary_output_path"]
