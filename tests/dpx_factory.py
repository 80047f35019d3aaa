from __future__ import annotations

from dataclasses import dataclass
import struct
from typing import Sequence

import numpy as np


HEADER_SIZE = 2048
ELEMENT_BASE = 780
ELEMENT_SIZE = 72


@dataclass
class Element:
    descriptor: int
    bit_depth: int
    data: bytes = b""
    packing: int = 0
    encoding: int = 0
    data_sign: int = 0
    transfer: int = 2
    colorimetric: int = 2
    eol_padding: int = 0xFFFFFFFF
    eoi_padding: int = 0xFFFFFFFF
    data_offset: int | None = None
    description: str = ""


def _ascii(value: str, length: int) -> bytes:
    b = value.encode("ascii")[: length - 1]
    return b + b"\x00" * (length - len(b))


def put(buf: bytearray, fmt: str, offset: int, *values, big_endian: bool = True) -> None:
    struct.pack_into((">" if big_endian else "<") + fmt, buf, offset, *values)


def put_text(buf: bytearray, offset: int, length: int, value: str) -> None:
    buf[offset : offset + length] = _ascii(value, length)


def build_header(
    width: int,
    height: int,
    elements: Sequence[Element],
    big_endian: bool = True,
    user_size: int = 0,
    number_of_elements: int | None = None,
) -> bytearray:
    """Header with every optional field left at its "unset" sentinel."""
    buf = bytearray(b"\xff" * HEADER_SIZE)
    buf[0:4] = b"SDPX" if big_endian else b"XPDS"

    def p(fmt: str, offset: int, *values) -> None:
        put(buf, fmt, offset, *values, big_endian=big_endian)

    p("I", 4, HEADER_SIZE + user_size)
    p("I", 24, 1664)
    p("I", 28, 384)
    p("I", 32, user_size)
    p("H", 768, 0)
    p("H", 770, len(elements) if number_of_elements is None else number_of_elements)
    p("I", 772, width)
    p("I", 776, height)

    offset = HEADER_SIZE + user_size
    for i, el in enumerate(elements):
        base = ELEMENT_BASE + i * ELEMENT_SIZE
        data_offset = offset if el.data_offset is None else el.data_offset
        p("I", base, el.data_sign)
        p("4B", base + 20, el.descriptor, el.transfer, el.colorimetric, el.bit_depth)
        p("H", base + 24, el.packing)
        p("H", base + 26, el.encoding)
        p("I", base + 28, data_offset)
        p("I", base + 32, el.eol_padding)
        p("I", base + 36, el.eoi_padding)
        if el.description:
            put_text(buf, base + 40, 32, el.description)
        offset += len(el.data)
    return buf


def build_dpx(
    width: int,
    height: int,
    elements: Sequence[Element],
    big_endian: bool = True,
    user_data: bytes = b"",
    number_of_elements: int | None = None,
) -> bytes:
    header = build_header(
        width,
        height,
        elements,
        big_endian=big_endian,
        user_size=len(user_data),
        number_of_elements=number_of_elements,
    )
    return bytes(header) + user_data + b"".join(el.data for el in elements)


def _pad_row(row: bytes) -> bytes:
    return row + b"\x00" * (-len(row) % 4)


def pack_bytes(samples: np.ndarray, dtype: str) -> bytes:
    """Byte-aligned samples; ``samples`` is ``(rows, datums)``."""
    arr = np.asarray(samples).astype(dtype)
    return b"".join(_pad_row(row.tobytes()) for row in arr)


def pack_filled10(samples: np.ndarray, method_a: bool = True, big_endian: bool = True, single: bool = False) -> bytes:
    out = []
    pad = 2 if method_a else 0
    for row in np.asarray(samples, dtype=np.uint32):
        vals = [int(v) for v in row]
        vals += [0] * (-len(vals) % 3)
        words = []
        for k in range(0, len(vals), 3):
            a, b, c = vals[k : k + 3]
            if single:
                a, c = c, a
            words.append((a << (20 + pad)) | (b << (10 + pad)) | (c << pad))
        out.append(struct.pack((">" if big_endian else "<") + f"{len(words)}I", *words))
    return b"".join(out)


def pack_filled12(samples: np.ndarray, method_a: bool = True, big_endian: bool = True) -> bytes:
    arr = np.asarray(samples, dtype=np.uint16)
    words = (arr << 4) if method_a else arr
    return pack_bytes(words, ">u2" if big_endian else "<u2")


def pack_bitstream(samples: np.ndarray, bit_depth: int, big_endian: bool = True) -> bytes:
    out = []
    for row in np.asarray(samples):
        acc = 0
        for n, v in enumerate(int(x) for x in row):
            acc |= v << (n * bit_depth)
        nwords = (len(row) * bit_depth + 31) // 32
        words = [(acc >> (32 * k)) & 0xFFFFFFFF for k in range(nwords)]
        out.append(struct.pack((">" if big_endian else "<") + f"{nwords}I", *words))
    return b"".join(out)


def widen10(v: int) -> int:
    return (v << 6) | (v >> 4)


def widen12(v: int) -> int:
    return (v << 4) | (v >> 8)
