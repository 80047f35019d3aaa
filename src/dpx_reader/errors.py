from __future__ import annotations


class DPXError(RuntimeError):
    pass


class FormatError(DPXError):
    """The file is not a readable DPX file. Fatal to opening it."""


class BadMagicError(FormatError):
    pass


class TruncatedHeaderError(FormatError):
    pass


class UnsupportedFormatError(DPXError):
    """An image element uses a layout this reader does not decode.

    Only the affected subimage is unusable; other elements of the same file
    may still be selected.
    """


class InvalidSubimageError(DPXError, IndexError):
    pass


class BlockRangeError(DPXError, ValueError):
    pass


class ShortReadError(DPXError, OSError):
    def __init__(self, requested: int, received: int, offset: int) -> None:
        super().__init__(f"short read at offset {offset}: requested {requested} bytes, received {received}")
        self.requested = requested
        self.received = received
        self.offset = offset


class MissingDependencyError(DPXError):
    pass
