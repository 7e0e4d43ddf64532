"""Multiplexed data channels carried over the session connection."""

from __future__ import annotations

import enum
import logging
import queue
import struct
import threading
import weakref
from collections.abc import Callable, Iterator
from dataclasses import dataclass

from respotcore.util import SeqGenerator

logger = logging.getLogger(__name__)

CMD_CHANNEL_DATA = 0x9
CMD_CHANNEL_ERROR = 0xA

_U16 = struct.Struct(">H")
_CHANNEL_ID_LIMIT = 1 << 16


class ChannelError(Exception):
    """The server reported an error on a channel, or sent malformed data."""


@dataclass(frozen=True)
class HeaderEvent:
    """A header carried at the start of a channel."""

    header_id: int
    data: bytes


@dataclass(frozen=True)
class DataEvent:
    """A block of payload data."""

    data: bytes


class _State(enum.Enum):
    HEADER = enum.auto()
    DATA = enum.auto()
    CLOSED = enum.auto()


class Channel:
    """One logical channel: a run of headers followed by data packets.

    Reading blocks until the manager delivers the next packet.
    """

    def __init__(
        self,
        packets: queue.SimpleQueue,
        on_close: Callable[[], None] | None = None,
    ) -> None:
        self._packets = packets
        self._on_close = on_close
        self._state = _State.HEADER
        self._buffer = b""
        self._pending: HeaderEvent | DataEvent | None = None
        self._lock = threading.RLock()

    def _close(self) -> None:
        self._state = _State.CLOSED
        if self._on_close is not None:
            self._on_close()
            self._on_close = None

    def _recv_packet(self) -> bytes:
        cmd, packet = self._packets.get()
        if cmd == CMD_CHANNEL_ERROR:
            code = int.from_bytes(packet[:2], "big")
            logger.error("channel error: %d %d", len(packet), code)
            self._close()
            raise ChannelError(f"channel error code {code}")
        return packet

    def _fail(self, message: str) -> ChannelError:
        self._close()
        return ChannelError(message)

    def _next_event(self) -> HeaderEvent | DataEvent | None:
        with self._lock:
            if self._pending is not None:
                event, self._pending = self._pending, None
                return event
            while True:
                if self._state is _State.CLOSED:
                    return None
                if self._state is _State.HEADER:
                    if not self._buffer:
                        self._buffer = self._recv_packet()
                    if len(self._buffer) < 2:
                        raise self._fail("truncated header length")
                    (length,) = _U16.unpack_from(self._buffer)
                    self._buffer = self._buffer[2:]
                    if length == 0:
                        if self._buffer:
                            raise self._fail("unexpected data after header terminator")
                        self._state = _State.DATA
                        continue
                    if len(self._buffer) < length:
                        raise self._fail("truncated header")
                    header_id = self._buffer[0]
                    header_data = self._buffer[1:length]
                    self._buffer = self._buffer[length:]
                    return HeaderEvent(header_id, header_data)
                data = self._recv_packet()
                if not data:
                    self._close()
                    return None
                return DataEvent(data)

    def events(self) -> Iterator[HeaderEvent | DataEvent]:
        """Yield every header and data event until the channel ends."""
        while (event := self._next_event()) is not None:
            yield event

    def headers(self) -> Iterator[tuple[int, bytes]]:
        """Yield ``(header_id, data)`` pairs until the first data packet."""
        while (event := self._next_event()) is not None:
            if isinstance(event, DataEvent):
                with self._lock:
                    self._pending = event
                return
            yield event.header_id, event.data

    def data(self) -> Iterator[bytes]:
        """Yield the data packets, skipping any headers."""
        while (event := self._next_event()) is not None:
            if isinstance(event, DataEvent):
                yield event.data


class ChannelManager:
    """Allocates channel ids and routes incoming packets to channels."""

    def __init__(self, session) -> None:
        self._session = weakref.ref(session)
        self._lock = threading.Lock()
        self._sequence = SeqGenerator(0)
        self._channels: dict[int, queue.SimpleQueue] = {}

    def allocate(self) -> tuple[int, Channel]:
        """Reserve a new channel id and return it with its channel."""
        packets: queue.SimpleQueue = queue.SimpleQueue()
        with self._lock:
            channel_id = self._sequence.get() % _CHANNEL_ID_LIMIT
            self._channels[channel_id] = packets
        channel = Channel(packets, on_close=lambda: self._release(channel_id, packets))
        return channel_id, channel

    def _release(self, channel_id: int, packets: queue.SimpleQueue) -> None:
        with self._lock:
            if self._channels.get(channel_id) is packets:
                del self._channels[channel_id]

    def dispatch(self, cmd: int, data: bytes) -> None:
        """Deliver a channel packet; packets for unknown channels are dropped."""
        if len(data) < 2:
            raise ValueError("channel packet too short")
        (channel_id,) = _U16.unpack_from(data)
        with self._lock:
            packets = self._channels.get(channel_id)
        if packets is not None:
            packets.put((cmd, bytes(data[2:])))