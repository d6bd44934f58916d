from __future__ import annotations

from pathlib import Path
from typing import Callable
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from pdfsanitizex.decoder import encode_pixel_data  # noqa: E402
from pdfsanitizex.types import Page  # noqa: E402
from pdfsanitizex.writer import pixels_to_pdf  # noqa: E402


class FakeRenderer:
    """Renderer returning a canned pixel stream and recording its input."""

    def __init__(self, stream: bytes) -> None:
        self.stream = stream
        self.documents: list[bytes] = []

    def render(self, document: bytes) -> bytes:
        self.documents.append(document)
        return self.stream


class FakeOcr:
    """OCR strategy that either writes a marker file or fails."""

    def __init__(self, name: str, *, fail: Exception | None = None, payload: bytes = b"%PDF-ocr\n") -> None:
        self.name = name
        self.fail = fail
        self.payload = payload
        self.calls: list[tuple[Path, Path]] = []

    def attempt(self, input_pdf: Path, output_pdf: Path) -> None:
        self.calls.append((input_pdf, output_pdf))
        if self.fail is not None:
            raise self.fail
        output_pdf.write_bytes(self.payload)


@pytest.fixture()
def page_factory() -> Callable[..., Page]:
    def _create(width: int = 4, height: int = 3, rgb: tuple[int, int, int] = (255, 0, 0)) -> Page:
        return Page(width, height, bytes(rgb) * (width * height))

    return _create


@pytest.fixture()
def gray_page(page_factory: Callable[..., Page]) -> Page:
    return page_factory(100, 50, (0x80, 0x80, 0x80))


@pytest.fixture()
def sample_stream(page_factory: Callable[..., Page]) -> bytes:
    return encode_pixel_data([page_factory(4, 3), page_factory(2, 5, (0, 0, 255))])


@pytest.fixture()
def sample_pdf(tmp_path: Path, page_factory: Callable[..., Page]) -> Path:
    return pixels_to_pdf([page_factory(30, 20)], tmp_path / "sample.pdf")


@pytest.fixture()
def sample_document(tmp_path: Path) -> Path:
    path = tmp_path / "untrusted.docx"
    path.write_bytes(b"PK\x03\x04 not really a document")
    return path


@pytest.fixture()
def fake_renderer(sample_stream: bytes) -> FakeRenderer:
    return FakeRenderer(sample_stream)
