"""Minimal PDF writer embedding each page as a Flate-compressed RGB image.

The generated file always has the same shape. With ``N`` pages:

* object 1 is the catalog and object 2 the page tree root,
* page ``i`` is object ``3 + 2i`` and its image XObject ``4 + 2i``,
* the content stream painting page ``i`` is object ``3 + 2N + i``,

followed by a classic cross-reference table and trailer. The whole file is
produced by appending to one buffer, and each object's offset is recorded
when it is started, so the table always matches the bytes on disk.
"""

from __future__ import annotations

import logging
import os
import zlib
from pathlib import Path
from typing import BinaryIO, Sequence

from .config import DEFAULT_DPI, SanitizerConfig
from .exceptions import DocumentIOError, EmptyDocumentError
from .types import Page
from .utils import ensure_parent_dir, resolve_path

_LOGGER = logging.getLogger("pdfsanitizex.writer")

PDF_HEADER = b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n"
_FREE_ENTRY = b"0000000000 65535 f \n"


class ObjectWriter:
    """Append-only PDF byte buffer that records indirect object offsets."""

    def __init__(self) -> None:
        self._buffer = bytearray()
        self._offsets: list[int] = []

    @property
    def position(self) -> int:
        return len(self._buffer)

    @property
    def offsets(self) -> tuple[int, ...]:
        return tuple(self._offsets)

    @property
    def object_count(self) -> int:
        return len(self._offsets)

    def append(self, data: bytes) -> int:
        """Append *data* and return the offset it was written at."""

        offset = len(self._buffer)
        self._buffer += data
        return offset

    def begin_object(self, number: int) -> int:
        expected = len(self._offsets) + 1
        if number != expected:
            raise ValueError(f"Object {number} written out of order, expected object {expected}")
        offset = self.append(f"{number} 0 obj\n".encode("ascii"))
        self._offsets.append(offset)
        return offset

    def write_object(self, number: int, entries: Sequence[str]) -> int:
        """Write a dictionary object made of *entries*, one per line."""

        offset = self.begin_object(number)
        self.append(_dictionary(entries))
        self.append(b"endobj\n")
        return offset

    def write_stream_object(self, number: int, entries: Sequence[str], payload: bytes) -> int:
        """Write a stream object; ``/Length`` is appended to *entries*."""

        offset = self.begin_object(number)
        self.append(_dictionary([*entries, f"/Length {len(payload)}"]))
        self.append(b"stream\n")
        self.append(payload)
        self.append(b"\nendstream\n")
        self.append(b"endobj\n")
        return offset

    def write_xref_and_trailer(self, root: int) -> int:
        """Finish the file, returning the offset of the ``xref`` keyword."""

        xref_offset = self.append(b"xref\n")
        size = len(self._offsets) + 1
        self.append(f"0 {size}\n".encode("ascii"))
        self.append(_FREE_ENTRY)
        for offset in self._offsets:
            self.append(f"{offset:010d} 00000 n \n".encode("ascii"))
        self.append(b"trailer\n")
        self.append(_dictionary([f"/Size {size}", f"/Root {root} 0 R"]))
        self.append(f"startxref\n{xref_offset}\n%%EOF\n".encode("ascii"))
        return xref_offset

    def getvalue(self) -> bytes:
        return bytes(self._buffer)


def _dictionary(entries: Sequence[str]) -> bytes:
    return ("<<\n" + "".join(f"{entry}\n" for entry in entries) + ">>\n").encode("ascii")


def page_object_number(page_index: int) -> int:
    return 3 + 2 * page_index


def image_object_number(page_index: int) -> int:
    return page_object_number(page_index) + 1


def content_object_number(page_index: int, page_count: int) -> int:
    return 3 + 2 * page_count + page_index


def content_stream(page_index: int, width_pts: float, height_pts: float) -> bytes:
    """Drawing program scaling the unit image square to the whole page."""

    return f"q\n{width_pts:.2f} 0 0 {height_pts:.2f} 0 0 cm\n/Im{page_index} Do\nQ\n".encode("ascii")


class PdfAssembler:
    """Builds the sanitized PDF from decoded pages."""

    def __init__(self, dpi: float = DEFAULT_DPI, compression_level: int = zlib.Z_DEFAULT_COMPRESSION) -> None:
        if dpi <= 0:
            raise ValueError(f"dpi must be positive, got {dpi}")
        self.dpi = dpi
        self.compression_level = compression_level

    @classmethod
    def from_config(cls, config: SanitizerConfig) -> "PdfAssembler":
        return cls(dpi=config.dpi, compression_level=config.compression_level)

    def assemble(self, pages: Sequence[Page]) -> bytes:
        """Return the complete PDF for *pages*."""

        if not pages:
            raise EmptyDocumentError("No pages to convert")

        page_count = len(pages)
        writer = ObjectWriter()
        writer.append(PDF_HEADER)

        writer.write_object(1, ["/Type /Catalog", "/Pages 2 0 R"])
        kids = " ".join(f"{page_object_number(i)} 0 R" for i in range(page_count))
        writer.write_object(2, ["/Type /Pages", f"/Kids [{kids}]", f"/Count {page_count}"])

        sizes = [page.size_in_points(self.dpi) for page in pages]
        for index, page in enumerate(pages):
            _LOGGER.info("Adding page %d to PDF...", index + 1)
            width_pts, height_pts = sizes[index]
            writer.write_object(
                page_object_number(index),
                [
                    "/Type /Page",
                    "/Parent 2 0 R",
                    f"/MediaBox [0 0 {width_pts:.2f} {height_pts:.2f}]",
                    f"/Resources << /XObject << /Im{index} {image_object_number(index)} 0 R >> >>",
                    f"/Contents {content_object_number(index, page_count)} 0 R",
                ],
            )
            compressed = zlib.compress(page.pixels, self.compression_level)
            _LOGGER.debug(
                "Page %d image compressed from %d to %d bytes", index + 1, page.byte_size, len(compressed)
            )
            writer.write_stream_object(
                image_object_number(index),
                [
                    "/Type /XObject",
                    "/Subtype /Image",
                    f"/Width {page.width}",
                    f"/Height {page.height}",
                    "/ColorSpace /DeviceRGB",
                    "/BitsPerComponent 8",
                    "/Filter /FlateDecode",
                ],
                compressed,
            )

        for index, (width_pts, height_pts) in enumerate(sizes):
            writer.write_stream_object(
                content_object_number(index, page_count),
                [],
                content_stream(index, width_pts, height_pts),
            )

        writer.write_xref_and_trailer(root=1)
        return writer.getvalue()

    def write(self, pages: Sequence[Page], sink: BinaryIO) -> int:
        """Assemble *pages* and write them to *sink*, returning the byte count.

        Nothing reaches *sink* unless assembly succeeds.
        """

        data = self.assemble(pages)
        sink.write(data)
        return len(data)


def pixels_to_pdf(
    pages: Sequence[Page],
    output_path: str | os.PathLike[str],
    *,
    config: SanitizerConfig | None = None,
) -> Path:
    """Write the sanitized PDF for *pages* to *output_path*."""

    config = config or SanitizerConfig()
    _LOGGER.info("Converting pixels to safe PDF...")
    data = PdfAssembler.from_config(config).assemble(pages)

    destination = resolve_path(output_path)
    partial = destination.with_name(f".{destination.name}.partial")
    try:
        ensure_parent_dir(destination)
        with partial.open("wb") as handle:
            handle.write(data)
        os.replace(partial, destination)
    except OSError as exc:
        if partial.exists():
            partial.unlink()
        raise DocumentIOError(
            f"Failed to write output file '{destination}': {exc}", stage="assemble"
        ) from exc

    _LOGGER.info("Safe PDF created successfully at: %s", destination)
    return destination


__all__ = [
    "ObjectWriter",
    "PdfAssembler",
    "pixels_to_pdf",
    "content_stream",
    "page_object_number",
    "image_object_number",
    "content_object_number",
    "PDF_HEADER",
]
