"""SMPTE 268M header decoding.

The header is a fixed 2048 byte structure: the generic file and image
information blocks, followed by the image source, film industry and television
industry blocks. Multi-byte fields use the byte order announced by the magic
cookie at offset 0.

Unset fields are written as sentinels (all ones for integers, NaN for floats,
an empty or 0xFF-led string). :meth:`Header.field` and
:meth:`Header.element_field` return ``None`` for them; the plain attributes
hold the values exactly as stored.
"""

from __future__ import annotations

import logging
import math
import struct
from dataclasses import dataclass
from typing import Any

from .errors import BadMagicError, TruncatedHeaderError
from .stream import ByteSource


logger = logging.getLogger(__name__)

HEADER_SIZE = 2048
MAGIC_BIG_ENDIAN = b"SDPX"
MAGIC_LITTLE_ENDIAN = b"XPDS"
MAX_ELEMENTS = 8
ELEMENT_BASE = 780
ELEMENT_SIZE = 72

UNSET_U32 = 0xFFFFFFFF


def optional_int(value: int, bits: int = 32) -> int | None:
    return None if value == (1 << bits) - 1 else value


def optional_float(value: float) -> float | None:
    return None if math.isnan(value) else value


def optional_text(raw: bytes) -> str | None:
    # Some writers fill unused strings with 0xFF instead of a leading NUL.
    if not raw or raw[0] in (0x00, 0xFF):
        return None
    return raw.split(b"\x00", 1)[0].decode("latin-1")


class _FieldReader:
    """Byte-order aware primitive used for every multi-byte header field."""

    def __init__(self, buf: bytes, big_endian: bool) -> None:
        self._buf = buf
        self._order = ">" if big_endian else "<"

    def _unpack(self, fmt: str, offset: int) -> tuple[Any, ...]:
        return struct.unpack_from(self._order + fmt, self._buf, offset)

    def u8(self, offset: int) -> int:
        return self._buf[offset]

    def u16(self, offset: int) -> int:
        return self._unpack("H", offset)[0]

    def u32(self, offset: int) -> int:
        return self._unpack("I", offset)[0]

    def f32(self, offset: int) -> float:
        return self._unpack("f", offset)[0]

    def u16s(self, offset: int, count: int) -> tuple[int, ...]:
        return self._unpack(f"{count}H", offset)

    def u32s(self, offset: int, count: int) -> tuple[int, ...]:
        return self._unpack(f"{count}I", offset)

    def raw(self, offset: int, length: int) -> bytes:
        return bytes(self._buf[offset : offset + length])


@dataclass(frozen=True)
class ElementHeader:
    data_sign: int
    low_data: int
    low_quantity: float
    high_data: int
    high_quantity: float
    descriptor: int
    transfer: int
    colorimetric: int
    bit_depth: int
    packing: int
    encoding: int
    data_offset: int
    end_of_line_padding: int
    end_of_image_padding: int
    description: bytes


@dataclass(frozen=True)
class Header:
    big_endian: bool
    magic: bytes

    # generic file information
    image_offset: int
    version: bytes
    file_size: int
    ditto_key: int
    generic_size: int
    industry_size: int
    user_size: int
    file_name: bytes
    creation_time_date: bytes
    creator: bytes
    project: bytes
    copyright: bytes
    encrypt_key: int

    # generic image information
    orientation: int
    number_of_elements: int
    pixels_per_line: int
    lines_per_element: int
    elements: tuple[ElementHeader, ...]

    # image source information
    x_offset: int
    y_offset: int
    x_center: float
    y_center: float
    x_original_size: int
    y_original_size: int
    source_image_file_name: bytes
    source_time_date: bytes
    input_device: bytes
    input_device_serial_number: bytes
    border: tuple[int, int, int, int]
    aspect_ratio: tuple[int, int]
    x_scanned_size: float
    y_scanned_size: float

    # film industry information
    film_manufacturing_id_code: bytes
    film_type: bytes
    perfs_offset: bytes
    prefix: bytes
    count: bytes
    format: bytes
    frame_position: int
    sequence_length: int
    held_count: int
    frame_rate: float
    shutter_angle: float
    frame_id: bytes
    slate_info: bytes

    # television industry information
    time_code: int
    user_bits: int
    interlace: int
    field_number: int
    video_signal: int
    horizontal_sample_rate: float
    vertical_sample_rate: float
    temporal_frame_rate: float
    time_offset: float
    gamma: float
    black_level: float
    black_gain: float
    break_point: float
    white_level: float
    integration_times: float

    @property
    def width(self) -> int:
        return self.pixels_per_line

    @property
    def height(self) -> int:
        return self.lines_per_element

    def field(self, name: str) -> Any | None:
        """Return a global header field, or ``None`` when it holds its sentinel."""
        if name == "elements":
            raise KeyError(name)
        return _optional(getattr(self, name), _FIELD_BITS.get(name, 32))

    def element_field(self, index: int, name: str) -> Any | None:
        return _optional(getattr(self.elements[index], name), _ELEMENT_FIELD_BITS.get(name, 32))

    def text(self, name: str) -> str | None:
        return optional_text(getattr(self, name))

    def film_edge_code(self) -> str | None:
        parts = (
            self.film_manufacturing_id_code,
            self.film_type,
            self.perfs_offset,
            self.prefix,
            self.count,
        )
        # a short field ends at its first NUL; a 0xFF-filled one is empty
        text = "".join(optional_text(p) or "" for p in parts)
        return text or None


_FIELD_BITS = {
    "orientation": 16,
    "number_of_elements": 16,
    "interlace": 8,
    "field_number": 8,
    "video_signal": 8,
}

_ELEMENT_FIELD_BITS = {
    "descriptor": 8,
    "transfer": 8,
    "colorimetric": 8,
    "bit_depth": 8,
    "packing": 16,
    "encoding": 16,
}


def _optional(value: Any, bits: int) -> Any | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, bytes):
        return optional_text(value)
    if isinstance(value, float):
        return optional_float(value)
    if isinstance(value, int):
        return optional_int(value, bits)
    return value


def is_dpx(source: ByteSource) -> bool:
    magic = source.pread(4, 0)
    return magic in (MAGIC_BIG_ENDIAN, MAGIC_LITTLE_ENDIAN)


def _read_element(r: _FieldReader, index: int) -> ElementHeader:
    base = ELEMENT_BASE + index * ELEMENT_SIZE
    return ElementHeader(
        data_sign=r.u32(base),
        low_data=r.u32(base + 4),
        low_quantity=r.f32(base + 8),
        high_data=r.u32(base + 12),
        high_quantity=r.f32(base + 16),
        descriptor=r.u8(base + 20),
        transfer=r.u8(base + 21),
        colorimetric=r.u8(base + 22),
        bit_depth=r.u8(base + 23),
        packing=r.u16(base + 24),
        encoding=r.u16(base + 26),
        data_offset=r.u32(base + 28),
        end_of_line_padding=r.u32(base + 32),
        end_of_image_padding=r.u32(base + 36),
        description=r.raw(base + 40, 32),
    )


def parse_header(source: ByteSource) -> Header:
    magic = source.pread(4, 0)
    if len(magic) < 4:
        raise TruncatedHeaderError(f"file too short for a DPX magic cookie ({len(magic)} bytes)")
    if magic == MAGIC_BIG_ENDIAN:
        big_endian = True
    elif magic == MAGIC_LITTLE_ENDIAN:
        big_endian = False
    else:
        raise BadMagicError(f"bad DPX magic cookie {magic!r}")

    buf = magic + source.pread(HEADER_SIZE - 4, 4)
    if len(buf) < HEADER_SIZE:
        raise TruncatedHeaderError(f"DPX header truncated: {len(buf)} of {HEADER_SIZE} bytes")

    r = _FieldReader(buf, big_endian)
    header = Header(
        big_endian=big_endian,
        magic=magic,
        image_offset=r.u32(4),
        version=r.raw(8, 8),
        file_size=r.u32(16),
        ditto_key=r.u32(20),
        generic_size=r.u32(24),
        industry_size=r.u32(28),
        user_size=r.u32(32),
        file_name=r.raw(36, 100),
        creation_time_date=r.raw(136, 24),
        creator=r.raw(160, 100),
        project=r.raw(260, 200),
        copyright=r.raw(460, 200),
        encrypt_key=r.u32(660),
        orientation=r.u16(768),
        number_of_elements=r.u16(770),
        pixels_per_line=r.u32(772),
        lines_per_element=r.u32(776),
        elements=tuple(_read_element(r, i) for i in range(MAX_ELEMENTS)),
        x_offset=r.u32(1408),
        y_offset=r.u32(1412),
        x_center=r.f32(1416),
        y_center=r.f32(1420),
        x_original_size=r.u32(1424),
        y_original_size=r.u32(1428),
        source_image_file_name=r.raw(1432, 100),
        source_time_date=r.raw(1532, 24),
        input_device=r.raw(1556, 32),
        input_device_serial_number=r.raw(1588, 32),
        border=r.u16s(1620, 4),
        aspect_ratio=r.u32s(1628, 2),
        x_scanned_size=r.f32(1636),
        y_scanned_size=r.f32(1640),
        film_manufacturing_id_code=r.raw(1664, 2),
        film_type=r.raw(1666, 2),
        perfs_offset=r.raw(1668, 2),
        prefix=r.raw(1670, 6),
        count=r.raw(1676, 4),
        format=r.raw(1680, 32),
        frame_position=r.u32(1712),
        sequence_length=r.u32(1716),
        held_count=r.u32(1720),
        frame_rate=r.f32(1724),
        shutter_angle=r.f32(1728),
        frame_id=r.raw(1732, 32),
        slate_info=r.raw(1764, 100),
        time_code=r.u32(1920),
        user_bits=r.u32(1924),
        interlace=r.u8(1928),
        field_number=r.u8(1929),
        video_signal=r.u8(1930),
        horizontal_sample_rate=r.f32(1932),
        vertical_sample_rate=r.f32(1936),
        temporal_frame_rate=r.f32(1940),
        time_offset=r.f32(1944),
        gamma=r.f32(1948),
        black_level=r.f32(1952),
        black_gain=r.f32(1956),
        break_point=r.f32(1960),
        white_level=r.f32(1964),
        integration_times=r.f32(1968),
    )
    logger.debug(
        "parsed DPX header: %sx%s elements=%s byte_order=%s",
        header.width,
        header.height,
        header.number_of_elements,
        "big" if big_endian else "little",
    )
    return header
