from __future__ import annotations

import numpy as np
import pytest

from dpx_factory import Element, build_dpx
from dpx_reader.color import ColorMode, channel_layout, convert, upsample_422, ycbcr_matrix
from dpx_reader.elements import ImageElementDescriptor, ImageElementTable
from dpx_reader.errors import UnsupportedFormatError
from dpx_reader.header import parse_header
from dpx_reader.stream import BytesByteSource


def _element(descriptor: int, bit_depth: int = 8, width: int = 4, colorimetric: int = 6) -> ImageElementDescriptor:
    data = build_dpx(width, 1, [Element(descriptor=descriptor, bit_depth=bit_depth, colorimetric=colorimetric)])
    return ImageElementTable(parse_header(BytesByteSource(data))).element(0)


def test_raw_mode_is_exact_pass_through() -> None:
    el = _element(6, bit_depth=16)
    samples = np.array([[[1], [2], [65535], [0]]], dtype=np.uint16)
    out = convert(el, samples, ColorMode.RAW)
    assert out is samples


def test_single_channel_and_rgb_unchanged_in_rgb_mode() -> None:
    luma = np.array([[[10], [20], [30], [40]]], dtype=np.uint16)
    np.testing.assert_array_equal(convert(_element(6, 16), luma), luma)
    rgb = np.arange(12, dtype=np.uint8).reshape(1, 4, 3)
    np.testing.assert_array_equal(convert(_element(50), rgb), rgb)


def test_abgr_becomes_rgba() -> None:
    samples = np.array([[[1, 2, 3, 4]]], dtype=np.uint8)
    out = convert(_element(52, width=1), samples)
    assert out[0, 0].tolist() == [4, 3, 2, 1]
    assert convert(_element(52, width=1), samples, ColorMode.RAW)[0, 0].tolist() == [1, 2, 3, 4]


def test_unsupported_sample_type_fails_conversion() -> None:
    el = _element(6, bit_depth=7)
    with pytest.raises(UnsupportedFormatError):
        convert(el, np.zeros((1, 4, 1), dtype=np.uint8))


def test_upsample_422_interpolates_between_neighbouring_pairs() -> None:
    chroma = np.array([[10.0, 20.0, 30.0, 40.0, 50.0, 60.0]])
    cb, cr = upsample_422(chroma, neutral=128.0)
    assert cb[0].tolist() == [10.0, 20.0, 30.0, 40.0, 50.0, 50.0]
    assert cr[0].tolist() == [20.0, 30.0, 40.0, 50.0, 60.0, 60.0]


def test_upsample_422_odd_width() -> None:
    chroma = np.array([[10.0, 20.0, 30.0]])
    cb, cr = upsample_422(chroma, neutral=128.0)
    assert cb[0].tolist() == [10.0, 20.0, 30.0]
    assert cr[0].tolist() == [20.0, 20.0, 20.0]

    cb1, cr1 = upsample_422(np.array([[7.0]]), neutral=128.0)
    assert cb1[0].tolist() == [7.0]
    assert cr1[0].tolist() == [128.0]


def test_422_raw_and_converted_layouts() -> None:
    el = _element(100, width=4)
    # Cb Y Cr Y Cb Y Cr Y with neutral chroma
    samples = np.array([[[128, 16], [128, 235], [128, 16], [128, 235]]], dtype=np.uint8)

    raw = convert(el, samples, ColorMode.RAW)
    assert raw.shape == (1, 4, 2)

    rgb = convert(el, samples)
    assert rgb.shape == (1, 4, 3)
    assert rgb.dtype == np.uint8
    assert rgb[0, :, 0].tolist() == [0, 255, 0, 255]
    np.testing.assert_array_equal(rgb[..., 0], rgb[..., 1])
    np.testing.assert_array_equal(rgb[..., 0], rgb[..., 2])


def test_422_with_alpha_keeps_alpha() -> None:
    el = _element(101, width=2)
    samples = np.array([[[128, 126, 7], [128, 126, 9]]], dtype=np.uint8)
    out = convert(el, samples)
    assert out.shape == (1, 2, 4)
    assert out[0, :, 3].tolist() == [7, 9]


def test_444_conversion_uses_colorimetry_matrix() -> None:
    samples = np.array([[[128, 126, 200]]], dtype=np.uint8)
    rec709 = convert(_element(102, width=1, colorimetric=6), samples)
    rec601 = convert(_element(102, width=1, colorimetric=7), samples)
    assert rec709[0, 0, 0] != rec601[0, 0, 0]
    assert ycbcr_matrix(7)[0, 2] == pytest.approx(1.596)
    assert ycbcr_matrix(6)[0, 2] == pytest.approx(1.793)
    assert ycbcr_matrix(255)[0, 2] == pytest.approx(1.793)


def test_ycbcr_conversion_clips_integers() -> None:
    samples = np.array([[[128, 255, 128, 9]]], dtype=np.uint8)
    out = convert(_element(103, width=1), samples)
    assert out[0, 0].tolist() == [255, 255, 255, 9]


def test_ycbcr_float_samples_use_unit_range() -> None:
    el = _element(102, bit_depth=32, width=1)
    samples = np.array([[[128 / 255, 235 / 255, 128 / 255]]], dtype=np.float32)
    out = convert(el, samples)
    assert out.dtype == np.float32
    np.testing.assert_allclose(out[0, 0], [219 * 1.164 / 255] * 3, rtol=1e-5)


@pytest.mark.parametrize(
    "descriptor,mode,names,alpha,z",
    [
        (1, ColorMode.RGB, ("R",), -1, -1),
        (4, ColorMode.RGB, ("A",), 0, -1),
        (8, ColorMode.RGB, ("Z",), -1, 0),
        (6, ColorMode.RAW, ("Y",), -1, -1),
        (50, ColorMode.RAW, ("R", "G", "B"), -1, -1),
        (52, ColorMode.RGB, ("R", "G", "B", "A"), 3, -1),
        (100, ColorMode.RAW, ("CbCr", "Y"), -1, -1),
        (100, ColorMode.RGB, ("R", "G", "B"), -1, -1),
        (101, ColorMode.RAW, ("CbCr", "Y", "A"), 2, -1),
        (101, ColorMode.RGB, ("R", "G", "B", "A"), 3, -1),
        (102, ColorMode.RAW, ("Cb", "Y", "Cr"), -1, -1),
        (103, ColorMode.RAW, ("Cb", "Y", "Cr", "A"), 3, -1),
        (152, ColorMode.RGB, ("channel0", "channel1", "channel2", "channel3"), -1, -1),
        (9, ColorMode.RGB, ("channel0",), -1, -1),
    ],
)
def test_channel_layout(descriptor: int, mode: ColorMode, names: tuple, alpha: int, z: int) -> None:
    layout = channel_layout(_element(descriptor), mode)
    assert layout.names == names
    assert layout.alpha_channel == alpha
    assert layout.z_channel == z
