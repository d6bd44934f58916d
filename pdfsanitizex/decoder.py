"""Decoder for the renderer's raw pixel stream.

The stream is a big-endian ``u16`` page count followed, for each page, by a
``u16`` width, a ``u16`` height and ``width * height * 3`` bytes of RGB8
samples. The renderer runs untrusted code, so every read is bounds-checked
and a short read reports exactly which field was cut off.
"""

from __future__ import annotations

import logging
import struct
from typing import Iterable, Sequence

from .exceptions import PixelStreamLimitError, TruncatedStreamError
from .types import BYTES_PER_PIXEL, MAX_U16, Page

_LOGGER = logging.getLogger("pdfsanitizex.decoder")

_U16 = struct.Struct(">H")


class _StreamCursor:
    """Forward-only reader over the pixel stream."""

    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        self._view = memoryview(data)
        self.position = 0

    @property
    def remaining(self) -> int:
        return len(self._view) - self.position

    def _require(self, size: int, field: str, page_index: int | None) -> None:
        if self.remaining < size:
            raise TruncatedStreamError(
                field,
                expected=size,
                available=self.remaining,
                page_index=page_index,
                offset=self.position,
            )

    def read_u16(self, field: str, page_index: int | None) -> int:
        self._require(_U16.size, field, page_index)
        (value,) = _U16.unpack_from(self._view, self.position)
        self.position += _U16.size
        return value

    def read_block(self, size: int, field: str, page_index: int | None) -> bytes:
        self._require(size, field, page_index)
        block = self._view[self.position:self.position + size].tobytes()
        self.position += size
        return block


def parse_pixel_data(
    data: bytes | bytearray | memoryview,
    *,
    max_decoded_bytes: int | None = None,
) -> list[Page]:
    """Decode *data* into an ordered list of :class:`Page`.

    Raises :class:`TruncatedStreamError` if the buffer ends before a declared
    field is complete, and :class:`PixelStreamLimitError` if the pixel data
    would grow beyond *max_decoded_bytes*.
    """

    cursor = _StreamCursor(data)
    page_count = cursor.read_u16("count", None)
    _LOGGER.info("Document has %d page(s)", page_count)

    pages: list[Page] = []
    decoded = 0
    for page_index in range(page_count):
        width = cursor.read_u16("width", page_index)
        height = cursor.read_u16("height", page_index)
        block_size = width * height * BYTES_PER_PIXEL
        _LOGGER.debug("Page %d: %dx%d pixels (%d bytes)", page_index + 1, width, height, block_size)

        if max_decoded_bytes is not None and decoded + block_size > max_decoded_bytes:
            raise PixelStreamLimitError(page_index, block_size, max_decoded_bytes)

        pixels = cursor.read_block(block_size, "pixels", page_index)
        decoded += block_size
        pages.append(Page(width, height, pixels))

    if cursor.remaining:
        _LOGGER.warning("Ignoring %d trailing byte(s) after the last page", cursor.remaining)
    return pages


def encode_pixel_data(pages: Sequence[Page] | Iterable[Page]) -> bytes:
    """Serialize *pages* into the renderer's pixel stream format."""

    pages = list(pages)
    if len(pages) > MAX_U16:
        raise ValueError(f"Pixel stream holds at most {MAX_U16} pages, got {len(pages)}")

    chunks = [_U16.pack(len(pages))]
    for page in pages:
        chunks.append(_U16.pack(page.width))
        chunks.append(_U16.pack(page.height))
        chunks.append(page.pixels)
    return b"".join(chunks)


__all__ = ["parse_pixel_data", "encode_pixel_data"]
