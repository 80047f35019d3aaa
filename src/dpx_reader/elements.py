from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator

from .errors import InvalidSubimageError, UnsupportedFormatError
from .header import HEADER_SIZE, MAX_ELEMENTS, UNSET_U32, Header
from .types import DataSize, Descriptor, Encoding, Packing, SampleType


logger = logging.getLogger(__name__)

SUPPORTED_BIT_DEPTHS = (8, 10, 12, 16, 32, 64)

_COMPONENT_COUNTS = {
    Descriptor.RGB: 3,
    Descriptor.RGBA: 4,
    Descriptor.ABGR: 4,
    Descriptor.CBYCRY: 2,
    Descriptor.CBYACRYA: 3,
    Descriptor.CBYCR: 3,
    Descriptor.CBYCRA: 4,
    Descriptor.USER_DEFINED_2: 2,
    Descriptor.USER_DEFINED_3: 3,
    Descriptor.USER_DEFINED_4: 4,
    Descriptor.USER_DEFINED_5: 5,
    Descriptor.USER_DEFINED_6: 6,
    Descriptor.USER_DEFINED_7: 7,
    Descriptor.USER_DEFINED_8: 8,
}

_SAMPLE_TYPES = {
    (DataSize.BYTE, False): SampleType.UINT8,
    (DataSize.BYTE, True): SampleType.INT8,
    (DataSize.WORD, False): SampleType.UINT16,
    (DataSize.WORD, True): SampleType.INT16,
    (DataSize.INT, False): SampleType.UINT32,
    (DataSize.INT, True): SampleType.INT32,
    (DataSize.FLOAT, False): SampleType.FLOAT32,
    (DataSize.FLOAT, True): SampleType.FLOAT32,
    (DataSize.DOUBLE, False): SampleType.FLOAT64,
    (DataSize.DOUBLE, True): SampleType.FLOAT64,
}


def component_count(descriptor: int) -> int:
    return _COMPONENT_COUNTS.get(descriptor, 1)


def data_size_for_bit_depth(bit_depth: int) -> DataSize:
    if bit_depth == 8:
        return DataSize.BYTE
    if bit_depth in (10, 12, 16):
        return DataSize.WORD
    if bit_depth == 32:
        return DataSize.FLOAT
    if bit_depth == 64:
        return DataSize.DOUBLE
    return DataSize.UNKNOWN


def _round_up4(n: int) -> int:
    return (n + 3) // 4 * 4


@dataclass(frozen=True)
class ImageElementDescriptor:
    index: int
    width: int
    height: int
    descriptor: int
    component_count: int
    data_size: DataSize
    signed: bool
    bit_depth: int
    packing: int
    encoding: int
    transfer: int
    colorimetric: int
    offset: int
    end_of_line_padding: int
    end_of_image_padding: int

    @property
    def sample_type(self) -> SampleType:
        st = _SAMPLE_TYPES.get((self.data_size, self.signed))
        if st is None:
            raise UnsupportedFormatError(
                f"element {self.index}: unsupported component size for bit depth {self.bit_depth}"
            )
        return st

    @property
    def is_rle(self) -> bool:
        return self.encoding == Encoding.RLE

    @property
    def is_bit_packed(self) -> bool:
        return self.bit_depth in (10, 12) and self.packing == Packing.PACKED

    @property
    def row_bytes(self) -> int:
        """Stored length of one scanline, excluding end-of-line padding."""
        datums = self.width * self.component_count
        if self.is_bit_packed:
            return (datums * self.bit_depth + 31) // 32 * 4
        if self.bit_depth == 10:
            return (datums + 2) // 3 * 4
        return _round_up4(datums * ((self.bit_depth + 7) // 8))

    @property
    def stride(self) -> int:
        return self.row_bytes + self.end_of_line_padding

    @property
    def size_bytes(self) -> int:
        return self.height * self.stride

    def check_supported(self) -> SampleType:
        st = self.sample_type
        if self.bit_depth not in SUPPORTED_BIT_DEPTHS:
            raise UnsupportedFormatError(f"element {self.index}: unsupported bit depth {self.bit_depth}")
        if self.bit_depth in (10, 12) and self.packing not in tuple(Packing):
            raise UnsupportedFormatError(f"element {self.index}: unsupported packing {self.packing}")
        return st


def _element_count(header: Header) -> int:
    n = header.number_of_elements
    if 0 < n <= MAX_ELEMENTS:
        return n
    count = 0
    for element in header.elements:
        if element.descriptor == Descriptor.UNDEFINED:
            break
        count += 1
    logger.warning("header element count %s out of range; using %s defined elements", n, count)
    return count


def _padding(value: int) -> int:
    return 0 if value == UNSET_U32 else value


class ImageElementTable:
    """Per-subimage descriptors derived once from a parsed header."""

    def __init__(self, header: Header) -> None:
        self.header = header
        self.count = _element_count(header)

        elements: list[ImageElementDescriptor] = []
        next_offset = header.image_offset
        if next_offset in (0, UNSET_U32):
            next_offset = HEADER_SIZE + (header.user_size if header.user_size != UNSET_U32 else 0)

        for i in range(self.count):
            raw = header.elements[i]
            offset = raw.data_offset
            if offset in (0, UNSET_U32):
                offset = next_offset
            desc = ImageElementDescriptor(
                index=i,
                width=header.width,
                height=header.height,
                descriptor=raw.descriptor,
                component_count=component_count(raw.descriptor),
                data_size=data_size_for_bit_depth(raw.bit_depth),
                signed=raw.data_sign == 1,
                bit_depth=raw.bit_depth,
                packing=raw.packing,
                encoding=raw.encoding,
                transfer=raw.transfer,
                colorimetric=raw.colorimetric,
                offset=offset,
                end_of_line_padding=_padding(raw.end_of_line_padding),
                end_of_image_padding=_padding(raw.end_of_image_padding),
            )
            elements.append(desc)
            next_offset = offset + desc.size_bytes + desc.end_of_image_padding

        self._elements = tuple(elements)

    def __len__(self) -> int:
        return self.count

    def __iter__(self) -> Iterator[ImageElementDescriptor]:
        return iter(self._elements)

    def element(self, index: int) -> ImageElementDescriptor:
        if not 0 <= index < self.count:
            raise InvalidSubimageError(f"subimage {index} out of range (file has {self.count} elements)")
        return self._elements[index]
