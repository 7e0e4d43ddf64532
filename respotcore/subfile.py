"""A view of a seekable stream that starts at a fixed offset."""

from __future__ import annotations

import io
from typing import BinaryIO


class Subfile:
    """Presents ``stream`` as if it began at ``offset``."""

    def __init__(self, stream: BinaryIO, offset: int) -> None:
        self._stream = stream
        self._offset = offset
        stream.seek(offset, io.SEEK_SET)

    def read(self, size: int = -1) -> bytes:
        return self._stream.read(size)

    def seek(self, pos: int, whence: int = io.SEEK_SET) -> int:
        if whence == io.SEEK_SET:
            pos += self._offset
        newpos = self._stream.seek(pos, whence)
        return newpos - self._offset if newpos > self._offset else 0

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True