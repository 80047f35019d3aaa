from __future__ import annotations

import enum
from dataclasses import dataclass

import numpy as np

from .elements import ImageElementDescriptor
from .types import Characteristic, Descriptor


class ColorMode(str, enum.Enum):
    RAW = "raw"
    RGB = "rgb"


@dataclass(frozen=True)
class ChannelLayout:
    names: tuple[str, ...]
    alpha_channel: int = -1
    z_channel: int = -1

    @property
    def nchannels(self) -> int:
        return len(self.names)


_SINGLE_CHANNEL = {
    Descriptor.RED: ChannelLayout(("R",)),
    Descriptor.GREEN: ChannelLayout(("G",)),
    Descriptor.BLUE: ChannelLayout(("B",)),
    Descriptor.ALPHA: ChannelLayout(("A",), alpha_channel=0),
    Descriptor.LUMA: ChannelLayout(("Y",)),
    Descriptor.DEPTH: ChannelLayout(("Z",), z_channel=0),
}

_RAW_YCBCR = {
    Descriptor.CBYCRY: ChannelLayout(("CbCr", "Y")),
    Descriptor.CBYACRYA: ChannelLayout(("CbCr", "Y", "A"), alpha_channel=2),
    Descriptor.CBYCR: ChannelLayout(("Cb", "Y", "Cr")),
    Descriptor.CBYCRA: ChannelLayout(("Cb", "Y", "Cr", "A"), alpha_channel=3),
}

_RGB = ChannelLayout(("R", "G", "B"))
_RGBA = ChannelLayout(("R", "G", "B", "A"), alpha_channel=3)

_CONVERTED_CHANNELS = {
    Descriptor.RGB: _RGB,
    Descriptor.RGBA: _RGBA,
    Descriptor.ABGR: _RGBA,
    Descriptor.CBYCRY: _RGB,
    Descriptor.CBYACRYA: _RGBA,
    Descriptor.CBYCR: _RGB,
    Descriptor.CBYCRA: _RGBA,
}

# rows: R, G, B; columns: Y, Cb, Cr
_REC601 = np.array(
    [
        [1.164, 0.0, 1.596],
        [1.164, -0.392, -0.813],
        [1.164, 2.017, 0.0],
    ],
    dtype=np.float64,
)
_REC709 = np.array(
    [
        [1.164, 0.0, 1.793],
        [1.164, -0.213, -0.533],
        [1.164, 2.112, 0.0],
    ],
    dtype=np.float64,
)

_REC601_SPACES = (
    Characteristic.ITU_R_601,
    Characteristic.ITU_R_602,
    Characteristic.NTSC_COMPOSITE,
    Characteristic.PAL_COMPOSITE,
    Characteristic.UNSPECIFIED_VIDEO,
)


def channel_layout(element: ImageElementDescriptor, mode: ColorMode) -> ChannelLayout:
    descriptor = element.descriptor
    if descriptor in _SINGLE_CHANNEL:
        return _SINGLE_CHANNEL[descriptor]
    if mode == ColorMode.RAW and descriptor in _RAW_YCBCR:
        return _RAW_YCBCR[descriptor]
    if descriptor in _CONVERTED_CHANNELS:
        return _CONVERTED_CHANNELS[descriptor]
    return ChannelLayout(tuple(f"channel{i}" for i in range(element.component_count)))


def ycbcr_matrix(colorimetric: int) -> np.ndarray:
    return _REC601 if colorimetric in _REC601_SPACES else _REC709


def _sample_max(dtype: np.dtype) -> float:
    if dtype.kind == "f":
        return 1.0
    return float(np.iinfo(dtype).max)


def _to_dtype(values: np.ndarray, dtype: np.dtype) -> np.ndarray:
    if dtype.kind == "f":
        return values.astype(dtype)
    return np.clip(np.rint(values), 0, np.iinfo(dtype).max).astype(dtype)


def upsample_422(chroma: np.ndarray, neutral: float) -> tuple[np.ndarray, np.ndarray]:
    """Expand an interleaved ``Cb Cr Cb Cr ...`` row block to full-width Cb and Cr planes.

    Even columns take their co-sited pair; odd columns average the pair on
    their left with the next pair to the right, or repeat the left pair at the
    last column.
    """
    width = chroma.shape[1]
    npairs = (width + 1) // 2
    cb = chroma[:, 0::2]
    cr = chroma[:, 1::2]
    if cr.shape[1] < npairs:
        if cr.shape[1] == 0:
            cr = np.full_like(cb, neutral)
        else:
            cr = np.concatenate([cr, cr[:, -1:]], axis=1)

    planes = []
    for pairs in (cb, cr):
        following = np.concatenate([pairs[:, 1:], pairs[:, -1:]], axis=1)
        full = np.empty((chroma.shape[0], width), dtype=np.float64)
        full[:, 0::2] = pairs
        full[:, 1::2] = ((pairs + following) / 2.0)[:, : width // 2]
        planes.append(full)
    return planes[0], planes[1]


def ycbcr_to_rgb(y: np.ndarray, cb: np.ndarray, cr: np.ndarray, colorimetric: int, sample_max: float) -> np.ndarray:
    ycc = np.stack(
        [
            y - sample_max * 16.0 / 255.0,
            cb - sample_max * 128.0 / 255.0,
            cr - sample_max * 128.0 / 255.0,
        ],
        axis=-1,
    )
    return np.einsum("ij,...j->...i", ycbcr_matrix(colorimetric), ycc, optimize=True)


def convert(element: ImageElementDescriptor, samples: np.ndarray, mode: ColorMode = ColorMode.RGB) -> np.ndarray:
    """Convert unpacked ``(rows, width, components)`` samples for output.

    ``ColorMode.RAW`` returns the stored component layout untouched.
    """
    element.check_supported()
    if mode == ColorMode.RAW:
        return samples

    descriptor = element.descriptor
    if descriptor == Descriptor.ABGR:
        return np.ascontiguousarray(samples[..., ::-1])
    if descriptor not in (Descriptor.CBYCRY, Descriptor.CBYACRYA, Descriptor.CBYCR, Descriptor.CBYCRA):
        return samples

    dtype = samples.dtype
    smax = _sample_max(dtype)
    x = samples.astype(np.float64)
    if descriptor in (Descriptor.CBYCRY, Descriptor.CBYACRYA):
        cb, cr = upsample_422(x[..., 0], neutral=smax * 128.0 / 255.0)
        y = x[..., 1]
    else:
        cb, y, cr = x[..., 0], x[..., 1], x[..., 2]

    rgb = ycbcr_to_rgb(y, cb, cr, element.colorimetric, smax)
    if descriptor == Descriptor.CBYACRYA:
        rgb = np.concatenate([rgb, x[..., 2:3]], axis=-1)
    elif descriptor == Descriptor.CBYCRA:
        rgb = np.concatenate([rgb, x[..., 3:4]], axis=-1)
    return _to_dtype(rgb, dtype)

