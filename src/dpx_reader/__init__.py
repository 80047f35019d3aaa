from .color import ColorMode
from .elements import ImageElementDescriptor, ImageElementTable
from .errors import (
    BadMagicError,
    BlockRangeError,
    DPXError,
    FormatError,
    InvalidSubimageError,
    MissingDependencyError,
    ShortReadError,
    TruncatedHeaderError,
    UnsupportedFormatError,
)
from .header import Header, is_dpx, parse_header
from .reader import DPXReader, ReaderState, read_dpx
from .stream import ByteSource, BytesByteSource, FileByteSource, open_source
from .types import ImageSpec, SampleType

__all__ = [
    "ColorMode",
    "ImageElementDescriptor",
    "ImageElementTable",
    "BadMagicError",
    "BlockRangeError",
    "DPXError",
    "FormatError",
    "InvalidSubimageError",
    "MissingDependencyError",
    "ShortReadError",
    "TruncatedHeaderError",
    "UnsupportedFormatError",
    "Header",
    "is_dpx",
    "parse_header",
    "DPXReader",
    "ReaderState",
    "read_dpx",
    "ByteSource",
    "BytesByteSource",
    "FileByteSource",
    "open_source",
    "ImageSpec",
    "SampleType",
]
