from __future__ import annotations

import logging

import numpy as np

from .elements import ImageElementTable
from .errors import BlockRangeError, ShortReadError, UnsupportedFormatError
from .stream import ByteSource


logger = logging.getLogger(__name__)


class ScanlineBlockReader:
    """Reads whole scanlines of one image element as stored bytes."""

    def __init__(self, source: ByteSource, table: ImageElementTable) -> None:
        self._source = source
        self._table = table

    def block_extent(self, element_index: int, y_begin: int, y_end: int) -> tuple[int, int]:
        """Byte offset and length covering rows ``y_begin .. y_end - 1``."""
        element = self._table.element(element_index)
        if y_begin < 0 or y_end > element.height or y_begin >= y_end:
            raise BlockRangeError(
                f"scanline range [{y_begin}, {y_end}) outside element {element_index} height {element.height}"
            )
        offset = element.offset + y_begin * element.stride
        # The last row's end-of-line padding need not be present in the file.
        length = (y_end - y_begin) * element.stride - element.end_of_line_padding
        return offset, length

    def read_block(self, element_index: int, y_begin: int, y_end: int) -> bytes:
        element = self._table.element(element_index)
        if element.is_rle:
            raise UnsupportedFormatError(f"element {element_index}: RLE encoded pixel data is not supported")
        offset, length = self.block_extent(element_index, y_begin, y_end)
        data = self._source.pread(length, offset)
        if len(data) < length:
            raise ShortReadError(requested=length, received=len(data), offset=offset)
        logger.debug("read element %s rows [%s, %s): %s bytes at %s", element_index, y_begin, y_end, length, offset)
        return data

    def read_rows(self, element_index: int, y_begin: int, y_end: int) -> np.ndarray:
        """Block as a ``(rows, row_bytes)`` uint8 array with line padding removed."""
        element = self._table.element(element_index)
        data = self.read_block(element_index, y_begin, y_end)
        rows = y_end - y_begin
        buf = np.frombuffer(data + bytes(element.end_of_line_padding), dtype=np.uint8)
        return buf.reshape(rows, element.stride)[:, : element.row_bytes]
