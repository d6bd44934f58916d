"""Optional OCR pass adding a text layer to the sanitized PDF.

OCR is best effort. Strategies are tried in order; each failure is logged as
a warning and the next one is tried. When none succeeds the un-OCR'd PDF is
copied to the output path, so the caller always gets a usable document.
"""

from __future__ import annotations

import logging
import os
import shutil
import sys
from pathlib import Path
from typing import Iterable, Protocol, Sequence

from .config import SanitizerConfig
from .exceptions import DocumentIOError, OcrDegradedError
from .types import OcrOutcome
from .utils import decode_output, ensure_parent_dir, resolve_path, run_subprocess, which

_LOGGER = logging.getLogger("pdfsanitizex.ocr")

COPY_STRATEGY = "copy"


class OcrStrategy(Protocol):
    """A single way of producing an OCR'd copy of a PDF."""

    name: str

    def attempt(self, input_pdf: Path, output_pdf: Path) -> None:
        """Write an OCR'd copy of *input_pdf* to *output_pdf*.

        Raises :class:`OcrDegradedError` on failure.
        """


def _run_tool(name: str, command: Sequence[str]) -> None:
    try:
        completed = run_subprocess(command, check=False)
    except OSError as exc:
        raise OcrDegradedError(f"{name} could not be started: {exc}") from exc
    if completed.returncode != 0:
        detail = decode_output(completed.stderr)
        raise OcrDegradedError(
            f"{name} exited with status {completed.returncode}" + (f": {detail}" if detail else "")
        )


class PdfKitOcr:
    """macOS PDFKit text recognition through a Swift helper script."""

    name = "pdfkit"

    def __init__(self, helper: Path, swift_executable: str = "swift") -> None:
        self.helper = helper
        self.swift_executable = swift_executable

    def attempt(self, input_pdf: Path, output_pdf: Path) -> None:
        if not self.helper.exists():
            raise OcrDegradedError(f"macOS OCR script not found at {self.helper}")
        _LOGGER.info("Using macOS PDFKit for OCR...")
        _run_tool(
            "Swift OCR script",
            [self.swift_executable, str(self.helper), str(input_pdf.resolve()), str(output_pdf.resolve())],
        )


class OcrMyPdf:
    """The ``ocrmypdf`` command line tool, forcing recognition on every page."""

    name = "ocrmypdf"

    def __init__(self, executables: Sequence[str] = ("ocrmypdf",), args: Sequence[str] = ("--redo-ocr",)) -> None:
        self.executables = tuple(executables)
        self.args = tuple(args)

    def attempt(self, input_pdf: Path, output_pdf: Path) -> None:
        executable = which(self.executables)
        if executable is None:
            raise OcrDegradedError(
                "ocrmypdf not found. To enable OCR, install ocrmypdf: pip install ocrmypdf"
            )
        _run_tool("ocrmypdf", [executable, *self.args, str(input_pdf), str(output_pdf)])


def default_ocr_strategies(
    config: SanitizerConfig | None = None,
    *,
    platform: str | None = None,
) -> list[OcrStrategy]:
    """Return the OCR strategies available on *platform* in preference order."""

    config = config or SanitizerConfig()
    platform = sys.platform if platform is None else platform
    strategies: list[OcrStrategy] = []
    if platform == "darwin":
        strategies.append(PdfKitOcr(config.resolve_pdfkit_helper(), config.swift_executable))
    strategies.append(OcrMyPdf(config.ocrmypdf_executables, config.ocrmypdf_args))
    return strategies


class OcrPostProcessor:
    """Runs OCR strategies in order, falling back to a plain copy."""

    def __init__(self, strategies: Iterable[OcrStrategy] | None = None) -> None:
        self.strategies = list(default_ocr_strategies() if strategies is None else strategies)

    @classmethod
    def from_config(cls, config: SanitizerConfig) -> "OcrPostProcessor":
        return cls(default_ocr_strategies(config))

    def run(self, input_pdf: str | os.PathLike[str], output_pdf: str | os.PathLike[str]) -> OcrOutcome:
        source = resolve_path(input_pdf)
        destination = resolve_path(output_pdf)
        _LOGGER.info("Applying OCR to PDF...")

        warnings: list[str] = []
        for strategy in self.strategies:
            _discard_output(destination)
            try:
                strategy.attempt(source, destination)
                _check_output(destination)
            except Exception as exc:
                _LOGGER.warning("OCR strategy %s failed: %s", strategy.name, exc)
                warnings.append(f"{strategy.name}: {exc}")
                continue
            _LOGGER.info("OCR applied successfully using %s", strategy.name)
            return OcrOutcome(strategy=strategy.name, warnings=warnings)

        _LOGGER.warning("Falling back to PDF without OCR")
        try:
            ensure_parent_dir(destination)
            shutil.copyfile(source, destination)
        except OSError as exc:
            raise DocumentIOError(f"Failed to copy PDF to '{destination}': {exc}", stage="ocr") from exc
        return OcrOutcome(strategy=COPY_STRATEGY, warnings=warnings)


def _discard_output(path: Path) -> None:
    # A file left from an earlier run must not pass for this tier's output.
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        raise DocumentIOError(f"Failed to clear output path '{path}': {exc}", stage="ocr") from exc


def _check_output(path: Path) -> None:
    try:
        size = path.stat().st_size
    except OSError as exc:
        raise OcrDegradedError(f"no output written to {path}") from exc
    if size == 0:
        raise OcrDegradedError(f"empty output written to {path}")


def apply_ocr(
    input_pdf: str | os.PathLike[str],
    output_pdf: str | os.PathLike[str],
    *,
    config: SanitizerConfig | None = None,
) -> OcrOutcome:
    """Add a text layer to *input_pdf*, writing the result to *output_pdf*."""

    return OcrPostProcessor.from_config(config or SanitizerConfig()).run(input_pdf, output_pdf)


__all__ = [
    "OcrStrategy",
    "PdfKitOcr",
    "OcrMyPdf",
    "OcrPostProcessor",
    "default_ocr_strategies",
    "apply_ocr",
    "COPY_STRATEGY",
]
