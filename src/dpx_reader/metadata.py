"""Mapping of DPX header values to image attributes.

Every mapping here is a pure lookup over read-only ``(code, value)`` tables.
:func:`build_attributes` assembles the attribute set for one subimage and
leaves out every field that holds its "unset" sentinel.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Sequence, TypeVar

from .elements import ImageElementDescriptor
from .header import UNSET_U32, Header, optional_int
from .types import Characteristic, Descriptor, Encoding, Orientation, Packing, VideoSignal
from .utils.formatting import format_dpx_datetime, format_timecode, pixel_aspect_ratio


K = TypeVar("K")
V = TypeVar("V")


def lookup(key: K, table: Sequence[tuple[K, V]], default: V) -> V:
    for code, value in table:
        if code == key:
            return value
    return default


# DPX orientation -> EXIF-style orientation code
ORIENTATION_TABLE: tuple[tuple[int, int], ...] = (
    (Orientation.LEFT_TO_RIGHT_TOP_TO_BOTTOM, 1),
    (Orientation.RIGHT_TO_LEFT_TOP_TO_BOTTOM, 2),
    (Orientation.LEFT_TO_RIGHT_BOTTOM_TO_TOP, 4),
    (Orientation.RIGHT_TO_LEFT_BOTTOM_TO_TOP, 3),
    (Orientation.TOP_TO_BOTTOM_LEFT_TO_RIGHT, 5),
    (Orientation.TOP_TO_BOTTOM_RIGHT_TO_LEFT, 6),
    (Orientation.BOTTOM_TO_TOP_LEFT_TO_RIGHT, 8),
    (Orientation.BOTTOM_TO_TOP_RIGHT_TO_LEFT, 7),
)

CHARACTERISTIC_TABLE: tuple[tuple[int, str], ...] = (
    (Characteristic.USER_DEFINED, "User defined"),
    (Characteristic.PRINTING_DENSITY, "Printing density"),
    (Characteristic.LINEAR, "Linear"),
    (Characteristic.LOGARITHMIC, "Logarithmic"),
    (Characteristic.UNSPECIFIED_VIDEO, "Unspecified video"),
    (Characteristic.SMPTE_274M, "SMPTE 274M"),
    (Characteristic.ITU_R_709, "ITU-R 709-4"),
    (Characteristic.ITU_R_601, "ITU-R 601-5 system B or G"),
    (Characteristic.ITU_R_602, "ITU-R 601-5 system M"),
    (Characteristic.NTSC_COMPOSITE, "NTSC composite video"),
    (Characteristic.PAL_COMPOSITE, "PAL composite video"),
    (Characteristic.Z_LINEAR, "Z depth linear"),
    (Characteristic.Z_HOMOGENEOUS, "Z depth homogeneous"),
    (Characteristic.ADX, "ADX"),
    (Characteristic.UNDEFINED, "Undefined"),
)

DESCRIPTOR_TABLE: tuple[tuple[int, str], ...] = (
    (Descriptor.USER_DEFINED, "User defined"),
    (Descriptor.USER_DEFINED_2, "User defined"),
    (Descriptor.USER_DEFINED_3, "User defined"),
    (Descriptor.USER_DEFINED_4, "User defined"),
    (Descriptor.USER_DEFINED_5, "User defined"),
    (Descriptor.USER_DEFINED_6, "User defined"),
    (Descriptor.USER_DEFINED_7, "User defined"),
    (Descriptor.USER_DEFINED_8, "User defined"),
    (Descriptor.RED, "Red"),
    (Descriptor.GREEN, "Green"),
    (Descriptor.BLUE, "Blue"),
    (Descriptor.ALPHA, "Alpha"),
    (Descriptor.LUMA, "Luma"),
    (Descriptor.COLOR_DIFFERENCE, "Color difference"),
    (Descriptor.DEPTH, "Depth"),
    (Descriptor.COMPOSITE_VIDEO, "Composite video"),
    (Descriptor.RGB, "RGB"),
    (Descriptor.RGBA, "RGBA"),
    (Descriptor.ABGR, "ABGR"),
    (Descriptor.CBYCRY, "CbYCrY"),
    (Descriptor.CBYACRYA, "CbYACrYA"),
    (Descriptor.CBYCR, "CbYCr"),
    (Descriptor.CBYCRA, "CbYCrA"),
)

# None means the attribute is not emitted at all.
VIDEO_SIGNAL_TABLE: tuple[tuple[int, str | None], ...] = (
    (VideoSignal.UNDEFINED, "Undefined"),
    (VideoSignal.NTSC, "NTSC"),
    (VideoSignal.PAL, "PAL"),
    (VideoSignal.PAL_M, "PAL-M"),
    (VideoSignal.SECAM, "SECAM"),
    (VideoSignal.LINE_525_INTERLACE_4_3, "YCbCr ITU-R 601-5 525i, 4:3"),
    (VideoSignal.LINE_625_INTERLACE_4_3, "YCbCr ITU-R 601-5 625i, 4:3"),
    (VideoSignal.LINE_525_INTERLACE_16_9, "YCbCr ITU-R 601-5 525i, 16:9"),
    (VideoSignal.LINE_625_INTERLACE_16_9, "YCbCr ITU-R 601-5 625i, 16:9"),
    (VideoSignal.LINE_1050_INTERLACE_16_9, "YCbCr 1050i, 16:9"),
    (VideoSignal.LINE_1125_INTERLACE_16_9_274, "YCbCr 1125i, 16:9 (SMPTE 274M)"),
    (VideoSignal.LINE_1250_INTERLACE_16_9, "YCbCr 1250i, 16:9"),
    (VideoSignal.LINE_1125_INTERLACE_16_9_240, "YCbCr 1125i, 16:9 (SMPTE 240M)"),
    (VideoSignal.LINE_525_PROGRESSIVE_16_9, "YCbCr 525p, 16:9"),
    (VideoSignal.LINE_625_PROGRESSIVE_16_9, "YCbCr 625p, 16:9"),
    (VideoSignal.LINE_750_PROGRESSIVE_16_9, "YCbCr 750p, 16:9 (SMPTE 296M)"),
    (VideoSignal.LINE_1125_PROGRESSIVE_16_9, "YCbCr 1125p, 16:9 (SMPTE 274M)"),
    (VideoSignal.UNSET, None),
)

PACKING_TABLE: tuple[tuple[int, str | None], ...] = (
    (Packing.PACKED, "Packed"),
    (Packing.FILLED_A, "Filled, method A"),
    (Packing.FILLED_B, "Filled, method B"),
)

# (name, prefix match, perfs per frame, perfs per count)
_FILM_FORMATS: tuple[tuple[str, bool, int, int], ...] = (
    ("8kimax", False, 15, 120),
    ("2kvv", True, 8, 64),
    ("4kvv", True, 8, 64),
    ("VistaVision", False, 8, 64),
    ("2k35", True, 4, 64),
    ("4k35", True, 4, 64),
    ("Full Aperture", False, 4, 64),
    ("Academy", False, 4, 64),
    ("2k3perf", True, 3, 64),
    ("4k3perf", True, 3, 64),
    ("3perf", False, 3, 64),
)

DEFAULT_PERFS_PER_FRAME = 4
DEFAULT_PERFS_PER_COUNT = 64


def orientation_code(value: int) -> int:
    return lookup(value, ORIENTATION_TABLE, 1)


def characteristic_name(value: int) -> str:
    return lookup(value, CHARACTERISTIC_TABLE, "Undefined")


def descriptor_name(value: int) -> str:
    return lookup(value, DESCRIPTOR_TABLE, "Undefined")


def video_signal_name(value: int) -> str | None:
    return lookup(value, VIDEO_SIGNAL_TABLE, "Undefined")


def packing_name(value: int) -> str | None:
    return lookup(value, PACKING_TABLE, None)


_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _stoi(raw: bytes) -> int:
    m = _LEADING_INT.match(raw.split(b"\x00", 1)[0].decode("latin-1"))
    return int(m.group(1)) if m else 0


def perforations_for_format(film_format: str) -> tuple[int, int]:
    for name, is_prefix, per_frame, per_count in _FILM_FORMATS:
        if film_format == name or (is_prefix and film_format.startswith(name)):
            return per_frame, per_count
    return DEFAULT_PERFS_PER_FRAME, DEFAULT_PERFS_PER_COUNT


def keycode_values(header: Header) -> tuple[int, int, int, int, int, int, int]:
    """Manufacturer, film type, prefix, count, perf offset, perfs/frame, perfs/count."""
    film_format = header.format.split(b"\x00", 1)[0].decode("latin-1")
    per_frame, per_count = perforations_for_format(film_format)
    return (
        _stoi(header.film_manufacturing_id_code),
        _stoi(header.film_type),
        _stoi(header.prefix),
        _stoi(header.count),
        _stoi(header.perfs_offset),
        per_frame,
        per_count,
    )


@dataclass(frozen=True)
class TimeCode:
    hours: int
    minutes: int
    seconds: int
    frame: int
    drop_frame: bool = False

    def __str__(self) -> str:
        return format_timecode(self.hours, self.minutes, self.seconds, self.frame, self.drop_frame)


def _bcd(value: int) -> int:
    return (value >> 4) * 10 + (value & 0x0F)


def decode_timecode(packed: int) -> TimeCode:
    """Decode an SMPTE 12M time-and-flags word (60 field packing)."""
    return TimeCode(
        hours=_bcd((packed >> 24) & 0x3F),
        minutes=_bcd((packed >> 16) & 0x7F),
        seconds=_bcd((packed >> 8) & 0x7F),
        frame=_bcd(packed & 0x3F),
        drop_frame=bool(packed & 0x40),
    )


def colorspace_attributes(header: Header, transfer: int) -> dict[str, Any]:
    if transfer == Characteristic.LINEAR:
        return {"oiio:ColorSpace": "Linear"}
    if transfer == Characteristic.LOGARITHMIC:
        return {"oiio:ColorSpace": "KodakLog"}
    if transfer == Characteristic.ITU_R_709:
        return {"oiio:ColorSpace": "Rec709"}
    if transfer == Characteristic.USER_DEFINED:
        gamma = header.field("gamma")
        if gamma:
            gamma = round(gamma, 2)
            if gamma == 1.0:
                return {"oiio:ColorSpace": "lin_rec709"}
            for known in (1.8, 2.2, 2.4):
                if gamma == known:
                    return {"oiio:ColorSpace": f"g{int(known * 10)}_rec709", "oiio:Gamma": gamma}
            return {"oiio:ColorSpace": f"Gamma{gamma:g}", "oiio:Gamma": gamma}
    return {}


_GLOBAL_FIELDS = (
    ("dpx:EncryptKey", "encrypt_key"),
    ("dpx:DittoKey", "ditto_key"),
)

_ELEMENT_FIELDS = (
    ("dpx:LowData", "low_data"),
    ("dpx:LowQuantity", "low_quantity"),
    ("dpx:HighData", "high_data"),
    ("dpx:HighQuantity", "high_quantity"),
    ("dpx:EndOfLinePadding", "end_of_line_padding"),
    ("dpx:EndOfImagePadding", "end_of_image_padding"),
)

_SOURCE_FIELDS = (
    ("dpx:XScannedSize", "x_scanned_size"),
    ("dpx:YScannedSize", "y_scanned_size"),
    ("dpx:FramePosition", "frame_position"),
    ("dpx:SequenceLength", "sequence_length"),
    ("dpx:HeldCount", "held_count"),
    ("dpx:FrameRate", "frame_rate"),
    ("dpx:ShutterAngle", "shutter_angle"),
    ("dpx:Version", "version"),
    ("dpx:Format", "format"),
    ("dpx:FrameId", "frame_id"),
    ("dpx:SlateInfo", "slate_info"),
    ("dpx:SourceImageFileName", "source_image_file_name"),
    ("dpx:InputDevice", "input_device"),
    ("dpx:InputDeviceSerialNumber", "input_device_serial_number"),
    ("dpx:Interlace", "interlace"),
    ("dpx:FieldNumber", "field_number"),
    ("dpx:HorizontalSampleRate", "horizontal_sample_rate"),
    ("dpx:VerticalSampleRate", "vertical_sample_rate"),
    ("dpx:TemporalFrameRate", "temporal_frame_rate"),
    ("dpx:TimeOffset", "time_offset"),
    ("dpx:BlackLevel", "black_level"),
    ("dpx:BlackGain", "black_gain"),
    ("dpx:BreakPoint", "break_point"),
    ("dpx:WhiteLevel", "white_level"),
    ("dpx:IntegrationTimes", "integration_times"),
)


def _set(attrs: dict[str, Any], name: str, value: Any) -> None:
    if value is not None:
        attrs[name] = value


def build_attributes(
    header: Header,
    element: ImageElementDescriptor,
    element_count: int,
    user_data: bytes | None = None,
) -> dict[str, Any]:
    i = element.index
    attrs: dict[str, Any] = {
        "oiio:BitsPerSample": element.bit_depth,
        "Orientation": orientation_code(header.orientation),
        "oiio:subimages": element_count,
    }
    attrs.update(colorspace_attributes(header, element.transfer))
    attrs["dpx:Transfer"] = characteristic_name(element.transfer)
    attrs["dpx:Colorimetric"] = characteristic_name(element.colorimetric)

    _set(attrs, "Copyright", header.text("copyright"))
    _set(attrs, "Software", header.text("creator"))
    _set(attrs, "DocumentName", header.text("project"))
    _set(attrs, "DateTime", format_dpx_datetime(header.text("creation_time_date")))
    if element.encoding == Encoding.RLE:
        attrs["compression"] = "rle"
    _set(attrs, "ImageDescription", header.element_field(i, "description"))
    num, den = header.aspect_ratio
    attrs["PixelAspectRatio"] = pixel_aspect_ratio(optional_int(num), optional_int(den))
    attrs["dpx:ImageDescriptor"] = descriptor_name(element.descriptor)

    for name, field_name in _GLOBAL_FIELDS:
        _set(attrs, name, header.field(field_name))
    for name, field_name in _ELEMENT_FIELDS:
        _set(attrs, name, header.element_field(i, field_name))
    for name, field_name in _SOURCE_FIELDS:
        _set(attrs, name, header.field(field_name))

    _set(attrs, "dpx:Packing", packing_name(element.packing))

    if header.text("film_manufacturing_id_code") is not None:
        attrs["smpte:KeyCode"] = keycode_values(header)

    if header.time_code != UNSET_U32:
        attrs["smpte:TimeCode"] = (header.time_code, header.user_bits)
        attrs["dpx:TimeCode"] = str(decode_timecode(header.time_code))
    _set(attrs, "dpx:UserBits", header.field("user_bits"))

    _set(attrs, "dpx:SourceDateTime", format_dpx_datetime(header.text("source_time_date")))
    _set(attrs, "dpx:FilmEdgeCode", header.film_edge_code())
    _set(attrs, "dpx:Signal", video_signal_name(header.video_signal))

    if user_data:
        attrs["dpx:UserData"] = bytes(user_data)
    return attrs
