from __future__ import annotations

import enum
import logging
import threading
from pathlib import Path
from typing import Any

import numpy as np

from .block_reader import ScanlineBlockReader
from .color import ColorMode, channel_layout, convert
from .elements import ImageElementDescriptor, ImageElementTable
from .errors import DPXError, InvalidSubimageError, UnsupportedFormatError
from .header import HEADER_SIZE, UNSET_U32, Header, parse_header
from .metadata import build_attributes
from .stream import ByteSource, open_source
from .types import ImageSpec
from .unpack import unpack_rows


logger = logging.getLogger(__name__)

INT32_MAX = 2**31 - 1


class ReaderState(str, enum.Enum):
    CLOSED = "closed"
    HEADER_PARSED = "header_parsed"
    SUBIMAGE_SELECTED = "subimage_selected"


class DPXReader:
    """Reads one DPX file: header metadata and scanlines of its image elements.

    One instance must not be used from several threads at once; give each
    thread its own reader over its own byte source.
    """

    def __init__(self, rawcolor: bool = False) -> None:
        self._lock = threading.RLock()
        self._rawcolor_requested = bool(rawcolor)
        self._source: Any = None
        self._owns_source = False
        self._reset()

    def _reset(self) -> None:
        if self._owns_source and self._source is not None:
            self._source.close()
        self._source = None
        self._owns_source = False
        self._header: Header | None = None
        self._table: ImageElementTable | None = None
        self._blocks: ScanlineBlockReader | None = None
        self._subimage = -1
        self._spec: ImageSpec | None = None
        self._mode = ColorMode.RAW if self._rawcolor_requested else ColorMode.RGB
        self._user_data: bytes | None = None

    def __enter__(self) -> "DPXReader":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    @property
    def state(self) -> ReaderState:
        if self._header is None:
            return ReaderState.CLOSED
        if self._subimage < 0:
            return ReaderState.HEADER_PARSED
        return ReaderState.SUBIMAGE_SELECTED

    @property
    def header(self) -> Header:
        if self._header is None:
            raise DPXError("reader is not open")
        return self._header

    @property
    def elements(self) -> ImageElementTable:
        if self._table is None:
            raise DPXError("reader is not open")
        return self._table

    @property
    def spec(self) -> ImageSpec:
        if self._spec is None:
            raise DPXError("no subimage selected")
        return self._spec

    @property
    def current_subimage(self) -> int:
        return self._subimage

    @property
    def color_mode(self) -> ColorMode:
        return self._mode

    @property
    def user_data(self) -> bytes | None:
        return self._user_data or None

    def open(self, target: str | Path | ByteSource) -> ImageSpec | None:
        """Parse the header and select subimage 0.

        Returns ``None`` and stays in ``HEADER_PARSED`` when subimage 0 cannot
        be selected; other subimages may still be usable.
        """
        with self._lock:
            self._reset()
            if isinstance(target, (str, Path)):
                self._source = open_source(target)
                self._owns_source = True
            else:
                self._source = target
            try:
                self._header = parse_header(self._source)
                self._table = ImageElementTable(self._header)
                self._blocks = ScanlineBlockReader(self._source, self._table)
            except Exception:
                self.close()
                raise
            try:
                return self.select(0)
            except (InvalidSubimageError, UnsupportedFormatError) as exc:
                logger.warning("subimage 0 not selectable: %s", exc)
                return None

    def close(self) -> None:
        with self._lock:
            self._reset()

    def _load_user_data(self, header: Header) -> bytes:
        size = header.user_size
        if size in (0, UNSET_U32):
            return b""
        data = self._source.pread(size, HEADER_SIZE)
        if len(data) < size:
            logger.warning("user data truncated: expected %s bytes, got %s; ignoring it", size, len(data))
            return b""
        logger.debug("loaded %s bytes of user data", size)
        return data

    def _build_spec(self, element: ImageElementDescriptor, mode: ColorMode) -> ImageSpec:
        header = self.header
        layout = channel_layout(element, mode)
        spec = ImageSpec(
            width=header.width,
            height=header.height,
            nchannels=layout.nchannels,
            sample_type=element.sample_type,
            channel_names=list(layout.names),
            alpha_channel=layout.alpha_channel,
            z_channel=layout.z_channel,
        )
        if header.x_offset <= INT32_MAX:
            spec.x = header.x_offset
        if header.y_offset <= INT32_MAX:
            spec.y = header.y_offset
        if 0 < header.x_original_size <= INT32_MAX:
            spec.full_width = header.x_original_size
        if 0 < header.y_original_size <= INT32_MAX:
            spec.full_height = header.y_original_size
        spec.attributes = build_attributes(header, element, self.elements.count, self._user_data)
        return spec

    def select(self, subimage: int) -> ImageSpec:
        """Make ``subimage`` current. A failed select leaves the reader unchanged."""
        with self._lock:
            if self._header is None:
                raise DPXError("reader is not open")
            if subimage == self._subimage and self._spec is not None:
                return self._spec

            element = self.elements.element(subimage)
            element.check_supported()

            if self._user_data is None:
                self._user_data = self._load_user_data(self._header)

            mode = ColorMode.RAW if self._rawcolor_requested else ColorMode.RGB
            # one-channel elements never need color conversion
            if channel_layout(element, mode).nchannels == 1:
                mode = ColorMode.RAW
            spec = self._build_spec(element, mode)

            self._subimage = subimage
            self._mode = mode
            self._spec = spec
            logger.debug("selected subimage %s (%s, %s channels)", subimage, spec.sample_type.value, spec.nchannels)
            return spec

    def read_block(self, subimage: int, y_begin: int, y_end: int) -> bytes:
        """Stored bytes of scanlines ``y_begin .. y_end - 1`` without unpacking."""
        with self._lock:
            self.select(subimage)
            assert self._blocks is not None
            return self._blocks.read_block(subimage, y_begin, y_end)

    def read_scanlines(self, subimage: int, y_begin: int, y_end: int) -> np.ndarray:
        """Samples of scanlines ``y_begin .. y_end - 1`` as ``(rows, width, channels)``."""
        with self._lock:
            self.select(subimage)
            assert self._blocks is not None
            element = self.elements.element(subimage)
            rows = self._blocks.read_rows(subimage, y_begin, y_end)
            samples = unpack_rows(element, rows, self.header.big_endian)
            return convert(element, samples, self._mode)

    def read_scanline(self, subimage: int, y: int) -> np.ndarray:
        return self.read_scanlines(subimage, y, y + 1)[0]

    def read_image(self, subimage: int = 0) -> np.ndarray:
        with self._lock:
            self.select(subimage)
            return self.read_scanlines(subimage, 0, self.header.height)


def read_dpx(path: str | Path, subimage: int = 0, rawcolor: bool = False) -> tuple[np.ndarray, ImageSpec]:
    with DPXReader(rawcolor=rawcolor) as reader:
        reader.open(path)
        spec = reader.select(subimage)
        return reader.read_image(subimage), spec
