from __future__ import annotations

from pathlib import Path

import numpy as np

from dpx_reader.errors import MissingDependencyError
from dpx_reader.types import ImageSpec


def _photometric(spec: ImageSpec, nchannels: int) -> str:
    if nchannels in (3, 4) and spec.channel_names[:3] == ["R", "G", "B"]:
        return "rgb"
    return "minisblack"


def write_subimage_tiff(path: Path, pixels: np.ndarray, spec: ImageSpec, as_float: bool = False) -> None:
    """Write decoded ``(height, width, channels)`` samples to a TIFF file."""
    try:
        import tifffile  # type: ignore
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise MissingDependencyError("tifffile is required for TIFF export. Install with: pip install '.[io]'") from exc

    arr = np.asarray(pixels)
    if as_float and arr.dtype.kind != "f":
        arr = arr.astype(np.float32) / float(np.iinfo(arr.dtype).max)
    nchannels = arr.shape[-1]
    photometric = _photometric(spec, nchannels)
    if photometric == "minisblack" and nchannels == 1:
        arr = arr[..., 0]

    description = spec.attributes.get("ImageDescription")
    path.parent.mkdir(parents=True, exist_ok=True)
    tifffile.imwrite(
        str(path),
        arr,
        photometric=photometric,
        planarconfig="contig" if arr.ndim == 3 else None,
        description=description,
    )
