"""Bit-depth unpacking shared by the raw and converted read paths.

10 and 12-bit samples are widened to 16 bits by bit replication so that the
full code range maps onto the full ``uint16`` range.
"""

from __future__ import annotations

import numpy as np

from .elements import ImageElementDescriptor
from .errors import UnsupportedFormatError
from .types import Packing


def widen_to_16(values: np.ndarray, bit_depth: int) -> np.ndarray:
    v = values.astype(np.uint32)
    if bit_depth == 10:
        v = (v << 6) | (v >> 4)
    elif bit_depth == 12:
        v = (v << 4) | (v >> 8)
    return v.astype(np.uint16)


def _words(rows: np.ndarray, itemsize: int, big_endian: bool) -> np.ndarray:
    order = ">" if big_endian else "<"
    return np.ascontiguousarray(rows).view(f"{order}u{itemsize}").astype(f"=u{itemsize}")


def _unpack_filled10(rows: np.ndarray, datums: int, packing: int, single: bool, big_endian: bool) -> np.ndarray:
    words = _words(rows, 4, big_endian)
    pad = 2 if packing == Packing.FILLED_A else 0
    shifts = np.array([20 + pad, 10 + pad, pad], dtype=np.uint32)
    if single:
        # single-component data stores each word's three samples low to high
        shifts = shifts[::-1]
    samples = (words[..., None] >> shifts) & 0x3FF
    return samples.reshape(rows.shape[0], -1)[:, :datums]


def _unpack_filled12(rows: np.ndarray, datums: int, packing: int, big_endian: bool) -> np.ndarray:
    words = _words(rows, 2, big_endian)[:, :datums]
    if packing == Packing.FILLED_B:
        return words & 0x0FFF
    return words >> 4


def _unpack_bitstream(rows: np.ndarray, datums: int, bit_depth: int, big_endian: bool) -> np.ndarray:
    words = _words(rows, 4, big_endian).astype(np.uint64)
    words = np.concatenate([words, np.zeros((words.shape[0], 1), dtype=np.uint64)], axis=1)
    bit = np.arange(datums, dtype=np.uint64) * np.uint64(bit_depth)
    index = (bit // np.uint64(32)).astype(np.intp)
    shift = bit % np.uint64(32)
    pair = words[:, index] | (words[:, index + 1] << np.uint64(32))
    return (pair >> shift) & np.uint64((1 << bit_depth) - 1)


def unpack_rows(element: ImageElementDescriptor, rows: np.ndarray, big_endian: bool) -> np.ndarray:
    """Unpack ``(rows, row_bytes)`` stored bytes to ``(rows, width, components)`` samples."""
    st = element.check_supported()
    n = rows.shape[0]
    datums = element.width * element.component_count
    order = ">" if big_endian else "<"
    bits = element.bit_depth

    if bits == 8:
        flat = np.ascontiguousarray(rows[:, :datums]).view(st.dtype)
    elif bits in (10, 12):
        if element.is_bit_packed:
            values = _unpack_bitstream(rows, datums, bits, big_endian)
        elif bits == 10:
            values = _unpack_filled10(rows, datums, element.packing, element.component_count == 1, big_endian)
        else:
            values = _unpack_filled12(rows, datums, element.packing, big_endian)
        flat = widen_to_16(values, bits).view(st.dtype)
    elif bits in (16, 32, 64):
        itemsize = bits // 8
        stored = np.ascontiguousarray(rows[:, : datums * itemsize]).view(st.dtype.newbyteorder(order))
        flat = stored.astype(st.dtype)
    else:
        raise UnsupportedFormatError(f"element {element.index}: unsupported bit depth {bits}")

    return flat.reshape(n, element.width, element.component_count)
