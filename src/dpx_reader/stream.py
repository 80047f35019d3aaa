from __future__ import annotations

from pathlib import Path
from typing import BinaryIO, Protocol


class ByteSource(Protocol):
    def pread(self, size: int, offset: int) -> bytes:
        """Read up to ``size`` bytes at ``offset``; fewer at end of data."""
        ...


class FileByteSource:
    """Random-access reads over a seekable binary file object."""

    def __init__(self, fileobj: BinaryIO, owns: bool = False) -> None:
        self._f = fileobj
        self._owns = owns

    def pread(self, size: int, offset: int) -> bytes:
        if size <= 0:
            return b""
        self._f.seek(offset)
        return self._f.read(size)

    def close(self) -> None:
        if self._owns and not self._f.closed:
            self._f.close()


class BytesByteSource:
    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        self._data = bytes(data)

    def pread(self, size: int, offset: int) -> bytes:
        if size <= 0 or offset < 0:
            return b""
        return self._data[offset : offset + size]

    def close(self) -> None:
        pass


def open_source(path: str | Path) -> FileByteSource:
    return FileByteSource(Path(path).expanduser().open("rb"), owns=True)
