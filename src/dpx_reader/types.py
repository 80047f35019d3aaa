from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

import numpy as np


class Orientation(enum.IntEnum):
    LEFT_TO_RIGHT_TOP_TO_BOTTOM = 0
    RIGHT_TO_LEFT_TOP_TO_BOTTOM = 1
    LEFT_TO_RIGHT_BOTTOM_TO_TOP = 2
    RIGHT_TO_LEFT_BOTTOM_TO_TOP = 3
    TOP_TO_BOTTOM_LEFT_TO_RIGHT = 4
    TOP_TO_BOTTOM_RIGHT_TO_LEFT = 5
    BOTTOM_TO_TOP_LEFT_TO_RIGHT = 6
    BOTTOM_TO_TOP_RIGHT_TO_LEFT = 7
    UNDEFINED = 8


class Descriptor(enum.IntEnum):
    USER_DEFINED = 0
    RED = 1
    GREEN = 2
    BLUE = 3
    ALPHA = 4
    LUMA = 6
    COLOR_DIFFERENCE = 7
    DEPTH = 8
    COMPOSITE_VIDEO = 9
    RGB = 50
    RGBA = 51
    ABGR = 52
    CBYCRY = 100
    CBYACRYA = 101
    CBYCR = 102
    CBYCRA = 103
    USER_DEFINED_2 = 150
    USER_DEFINED_3 = 151
    USER_DEFINED_4 = 152
    USER_DEFINED_5 = 153
    USER_DEFINED_6 = 154
    USER_DEFINED_7 = 155
    USER_DEFINED_8 = 156
    UNDEFINED = 255


class Characteristic(enum.IntEnum):
    USER_DEFINED = 0
    PRINTING_DENSITY = 1
    LINEAR = 2
    LOGARITHMIC = 3
    UNSPECIFIED_VIDEO = 4
    SMPTE_274M = 5
    ITU_R_709 = 6
    ITU_R_601 = 7
    ITU_R_602 = 8
    NTSC_COMPOSITE = 9
    PAL_COMPOSITE = 10
    Z_LINEAR = 11
    Z_HOMOGENEOUS = 12
    ADX = 13
    UNDEFINED = 255


class Packing(enum.IntEnum):
    PACKED = 0
    FILLED_A = 1
    FILLED_B = 2


class Encoding(enum.IntEnum):
    NONE = 0
    RLE = 1


class VideoSignal(enum.IntEnum):
    UNDEFINED = 0
    NTSC = 1
    PAL = 2
    PAL_M = 3
    SECAM = 4
    LINE_525_INTERLACE_4_3 = 50
    LINE_625_INTERLACE_4_3 = 51
    LINE_525_INTERLACE_16_9 = 100
    LINE_625_INTERLACE_16_9 = 101
    LINE_1050_INTERLACE_16_9 = 150
    LINE_1125_INTERLACE_16_9_274 = 151
    LINE_1250_INTERLACE_16_9 = 152
    LINE_1125_INTERLACE_16_9_240 = 153
    LINE_525_PROGRESSIVE_16_9 = 200
    LINE_625_PROGRESSIVE_16_9 = 201
    LINE_750_PROGRESSIVE_16_9 = 202
    LINE_1125_PROGRESSIVE_16_9 = 203
    UNSET = 255


class DataSize(str, enum.Enum):
    BYTE = "byte"
    WORD = "word"
    INT = "int"
    FLOAT = "float"
    DOUBLE = "double"
    UNKNOWN = "unknown"


class SampleType(str, enum.Enum):
    UINT8 = "uint8"
    INT8 = "int8"
    UINT16 = "uint16"
    INT16 = "int16"
    UINT32 = "uint32"
    INT32 = "int32"
    FLOAT32 = "float32"
    FLOAT64 = "float64"

    @property
    def dtype(self) -> np.dtype:
        return np.dtype(self.value)


@dataclass
class ImageSpec:
    width: int
    height: int
    nchannels: int
    sample_type: SampleType
    channel_names: list[str]
    x: int = 0
    y: int = 0
    full_width: int = 0
    full_height: int = 0
    alpha_channel: int = -1
    z_channel: int = -1
    attributes: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.full_width <= 0:
            self.full_width = self.width
        if self.full_height <= 0:
            self.full_height = self.height

    def to_json_dict(self) -> dict[str, Any]:
        attrs: dict[str, Any] = {}
        for key, value in self.attributes.items():
            if isinstance(value, (bytes, bytearray)):
                attrs[key] = f"<{len(value)} bytes>"
            elif isinstance(value, tuple):
                attrs[key] = list(value)
            else:
                attrs[key] = value
        return {
            "width": self.width,
            "height": self.height,
            "nchannels": self.nchannels,
            "format": self.sample_type.value,
            "channel_names": list(self.channel_names),
            "x": self.x,
            "y": self.y,
            "full_width": self.full_width,
            "full_height": self.full_height,
            "alpha_channel": self.alpha_channel,
            "z_channel": self.z_channel,
            "attributes": attrs,
        }
