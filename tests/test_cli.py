from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import pytest

from dpx_factory import Element, build_dpx, pack_bytes
from dpx_reader.cli import main


def _write_rgb8(path: Path) -> None:
    px = np.arange(4 * 2 * 3, dtype=np.uint8).reshape(2, 12)
    path.write_bytes(build_dpx(4, 2, [Element(descriptor=50, bit_depth=8, transfer=6, data=pack_bytes(px, "u1"))]))


def test_info_json(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "shot_0001.dpx"
    _write_rgb8(path)

    assert main(["info", str(path), "--json"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["subimages"] == 1
    assert payload["byte_order"] == "big"
    assert payload["spec"]["width"] == 4
    assert payload["spec"]["channel_names"] == ["R", "G", "B"]
    assert payload["spec"]["attributes"]["oiio:ColorSpace"] == "Rec709"


def test_info_text(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "shot_0001.dpx"
    _write_rgb8(path)
    assert main(["info", str(path)]) == 0
    out = capsys.readouterr().out
    assert "Size: 4x2" in out
    assert "dpx:ImageDescriptor: RGB" in out


def test_info_reports_errors(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "broken.dpx"
    path.write_bytes(b"nope" * 10)
    assert main(["info", str(path)]) == 1
    assert "bad DPX magic" in capsys.readouterr().err


def test_to_tiff(tmp_path: Path) -> None:
    tifffile = pytest.importorskip("tifffile")
    src = tmp_path / "shot_0001.dpx"
    out = tmp_path / "out" / "shot_0001.tif"
    _write_rgb8(src)

    assert main(["to-tiff", str(src), str(out)]) == 0
    arr = tifffile.imread(str(out))
    assert arr.shape == (2, 4, 3)
    assert arr.dtype == np.uint8
    assert arr[1, 3].tolist() == [21, 22, 23]


def test_info_reaches_later_subimage_when_first_is_unsupported(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    path = tmp_path / "mixed.dpx"
    luma = pack_bytes(np.zeros((2, 4), dtype=np.uint16), ">u2")
    path.write_bytes(build_dpx(4, 2, [Element(descriptor=6, bit_depth=1), Element(descriptor=6, bit_depth=16, data=luma)]))

    assert main(["info", str(path), "--subimage", "1", "--json"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["subimage"] == 1
    assert payload["subimages"] == 2
    assert payload["spec"]["channel_names"] == ["Y"]

    assert main(["info", str(path)]) == 1
    assert "bit depth 1" in capsys.readouterr().err
