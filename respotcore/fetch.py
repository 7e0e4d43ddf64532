"""Streaming download of audio files in fixed-size chunks."""

from __future__ import annotations

import io
import logging
import queue
import struct
import tempfile
import threading
from collections.abc import Iterator
from typing import BinaryIO

from respotcore.channel import Channel, ChannelError
from respotcore.spotify_id import FileId

logger = logging.getLogger(__name__)

CHUNK_SIZE = 0x20000
CMD_STREAM_CHUNK = 0x8
HEADER_FILE_SIZE = 0x3

_REQUEST_PREFIX = struct.Struct(">HBBHIII")
_REQUEST_RANGE = struct.Struct(">II")


def chunk_request_packet(channel_id: int, file_id: FileId, index: int) -> bytes:
    """Build the packet that asks for chunk ``index`` of ``file_id`` on a channel."""
    start = index * CHUNK_SIZE // 4
    end = (index + 1) * CHUNK_SIZE // 4
    return (
        _REQUEST_PREFIX.pack(channel_id, 0, 1, 0x0000, 0x00000000, 0x00009C40, 0x00020000)
        + file_id.data
        + _REQUEST_RANGE.pack(start, end)
    )


def request_chunk(session, file_id: FileId, index: int) -> Channel:
    """Allocate a channel and request chunk ``index`` of ``file_id`` on it."""
    logger.debug("requesting chunk %d", index)
    channel_id, channel = session.channel().allocate()
    session.send_packet(CMD_STREAM_CHUNK, chunk_request_packet(channel_id, file_id, index))
    return channel


class _DownloadClosed(Exception):
    """The reader went away; the download should stop."""


class _Download:
    """State shared by the reader and the background fetcher."""

    def __init__(self, file_id: FileId, size: int) -> None:
        self.file_id = file_id
        self.size = size
        self.chunk_count = -(-size // CHUNK_SIZE)
        self.seeks: queue.SimpleQueue = queue.SimpleQueue()
        self._cond = threading.Condition()
        self._chunks: set[int] = set()
        self._failed = False
        self.closed = False
        self._file = tempfile.TemporaryFile()
        self._file.truncate(size)

    def write(self, position: int, data: bytes) -> None:
        with self._cond:
            if self.closed:
                raise _DownloadClosed
            self._file.seek(position)
            self._file.write(data)

    def complete(self, index: int) -> bool:
        """Mark chunk ``index`` as present; return whether every chunk is."""
        with self._cond:
            self._chunks.add(index)
            self._cond.notify_all()
            return len(self._chunks) >= self.chunk_count

    def next_missing(self, index: int) -> int:
        with self._cond:
            if len(self._chunks) >= self.chunk_count:
                return index
            while index in self._chunks:
                index = (index + 1) % self.chunk_count
            return index

    def fail(self) -> None:
        with self._cond:
            self._failed = True
            self._cond.notify_all()

    def read(self, index: int, position: int, size: int) -> bytes:
        """Wait for chunk ``index`` and read ``size`` bytes at ``position``."""
        with self._cond:
            while index not in self._chunks:
                if self.closed:
                    raise ValueError("I/O operation on closed file")
                if self._failed:
                    raise OSError(f"download of file {self.file_id} failed")
                self._cond.wait()
            if self.closed:
                raise ValueError("I/O operation on closed file")
            self._file.seek(position)
            return self._file.read(size)

    def save_to(self, cache) -> bool:
        with self._cond:
            if self.closed:
                return False
            self._file.seek(0)
            cache.save_file(self.file_id, self._file)
            return True

    def close(self) -> None:
        with self._cond:
            if not self.closed:
                self.closed = True
                self._file.close()
            self._cond.notify_all()


class _Fetcher:
    """Downloads chunks in order, jumping to where the reader seeks."""

    def __init__(self, session, download: _Download, data: Iterator[bytes]) -> None:
        self._session = session
        self._download = download
        self._data = data
        self._index = 0
        self._position = 0

    def run(self) -> None:
        try:
            self._run()
        except ChannelError:
            logger.warning("error from channel")
            self._download.fail()
        except _DownloadClosed:
            pass

    def _run(self) -> None:
        download = self._download
        while not download.closed:
            packet = next(self._data, None)
            if packet is None:
                logger.debug("chunk %d / %d complete", self._index, download.chunk_count)
                if download.complete(self._index):
                    self._finish()
                    return
                self._switch_to((self._index + 1) % download.chunk_count)
            else:
                download.write(self._position, packet)
                self._position += len(packet)
            for offset in self._pending_seeks():
                self._switch_to(offset // CHUNK_SIZE)

    def _pending_seeks(self) -> Iterator[int]:
        while True:
            try:
                yield self._download.seeks.get_nowait()
            except queue.Empty:
                return

    def _switch_to(self, index: int) -> None:
        index = self._download.next_missing(index)
        if index != self._index:
            self._index = index
            self._position = index * CHUNK_SIZE
            self._data = request_chunk(self._session, self._download.file_id, index).data()

    def _finish(self) -> None:
        file_id = self._download.file_id
        cache = self._session.cache
        if cache is not None:
            if self._download.save_to(cache):
                logger.debug("File %s complete, saving to cache", file_id)
        else:
            logger.debug("File %s complete", file_id)


class _StreamingFile:
    """Reader side of a download in progress."""

    def __init__(self, download: _Download) -> None:
        self._download = download
        self._position = 0

    def read(self, size: int | None = -1) -> bytes:
        download = self._download
        if size is None or size < 0:
            end = download.size
        else:
            end = min(download.size, self._position + size)
        parts = []
        while self._position < end:
            index = self._position // CHUNK_SIZE
            chunk_end = min(end, (index + 1) * CHUNK_SIZE)
            data = download.read(index, self._position, chunk_end - self._position)
            if not data:
                break
            parts.append(data)
            self._position += len(data)
        return b"".join(parts)

    def seek(self, pos: int, whence: int = io.SEEK_SET) -> int:
        if whence == io.SEEK_SET:
            target = pos
        elif whence == io.SEEK_CUR:
            target = self._position + pos
        elif whence == io.SEEK_END:
            target = self._download.size + pos
        else:
            raise ValueError(f"invalid whence {whence}")
        if target < 0:
            raise ValueError(f"negative seek position {target}")
        self._position = target
        if target < self._download.size:
            self._download.seeks.put(target)
        return target

    def close(self) -> None:
        self._download.close()


def _read_file_size(channel: Channel) -> int:
    for header_id, data in channel.headers():
        if header_id == HEADER_FILE_SIZE:
            if len(data) < 4:
                raise ChannelError("truncated file size header")
            return struct.unpack_from(">I", data)[0] * 4
    raise ChannelError("channel ended before the file size header")


class AudioFile:
    """A readable, seekable audio file, either cached or being downloaded."""

    def __init__(self, stream: BinaryIO | _StreamingFile) -> None:
        self._stream = stream
        self._closed = False

    @classmethod
    def open(cls, session, file_id: FileId) -> AudioFile:
        """Open ``file_id`` from the session cache, or start downloading it."""
        cache = session.cache
        if cache is not None:
            cached = cache.file(file_id)
            if cached is not None:
                logger.debug("File %s already in cache", file_id)
                return cls(cached)

        logger.debug("Downloading file %s", file_id)
        channel = request_chunk(session, file_id, 0)
        size = _read_file_size(channel)
        download = _Download(file_id, size)
        fetcher = _Fetcher(session, download, channel.data())
        session.spawn(fetcher.run)
        return cls(_StreamingFile(download))

    def _check_open(self) -> None:
        if self._closed:
            raise ValueError("I/O operation on closed file")

    def read(self, size: int | None = -1) -> bytes:
        self._check_open()
        return self._stream.read(size)

    def seek(self, pos: int, whence: int = io.SEEK_SET) -> int:
        self._check_open()
        return self._stream.seek(pos, whence)

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._stream.close()

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True

    def __enter__(self) -> AudioFile:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()