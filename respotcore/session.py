"""An authenticated session and the routing of its incoming packets."""

from __future__ import annotations

import hashlib
import itertools
import logging
import threading
from collections.abc import Callable

from respotcore.audio_key import AudioKeyManager
from respotcore.cache import Cache
from respotcore.channel import ChannelManager
from respotcore.config import SessionConfig

logger = logging.getLogger(__name__)

_SESSION_COUNTER = itertools.count()

CMD_PING = 0x4
CMD_PONG = 0x49
CMD_PONG_ACK = 0x4A
CMD_COUNTRY_CODE = 0x1B
_CHANNEL_COMMANDS = frozenset({0x9, 0xA})
_AUDIO_KEY_COMMANDS = frozenset({0xD, 0xE})
_MERCURY_COMMANDS = range(0xB2, 0xB7)


def device_id(name: str) -> str:
    """Derive a device id as the hex SHA-1 of ``name``."""
    return hashlib.sha1(name.encode("utf-8")).hexdigest()


class Session:
    """State shared by everything that talks over one connection.

    ``sender`` is called with ``(cmd, data)`` for every outgoing packet.
    """

    def __init__(
        self,
        config: SessionConfig,
        sender: Callable[[int, bytes], None],
        cache: Cache | None = None,
        username: str = "",
    ) -> None:
        self.config = config
        self.cache = cache
        self._sender = sender
        self._data_lock = threading.Lock()
        self._country = ""
        self._username = username
        self._managers_lock = threading.Lock()
        self._channel: ChannelManager | None = None
        self._audio_key: AudioKeyManager | None = None
        self.session_id = next(_SESSION_COUNTER)
        logger.debug("new Session[%d]", self.session_id)

    def send_packet(self, cmd: int, data: bytes) -> None:
        self._sender(cmd, bytes(data))

    def dispatch(self, cmd: int, data: bytes) -> None:
        """Route one incoming packet to whatever handles its command."""
        if cmd == CMD_PING:
            self.send_packet(CMD_PONG, data)
        elif cmd == CMD_PONG_ACK:
            pass
        elif cmd == CMD_COUNTRY_CODE:
            country = bytes(data).decode("utf-8")
            logger.info("Country: %r", country)
            with self._data_lock:
                self._country = country
        elif cmd in _CHANNEL_COMMANDS:
            self.channel().dispatch(cmd, data)
        elif cmd in _AUDIO_KEY_COMMANDS:
            self.audio_key().dispatch(cmd, data)
        elif cmd in _MERCURY_COMMANDS:
            logger.debug("ignoring mercury packet 0x%x", cmd)

    def channel(self) -> ChannelManager:
        with self._managers_lock:
            if self._channel is None:
                self._channel = ChannelManager(self)
            return self._channel

    def audio_key(self) -> AudioKeyManager:
        with self._managers_lock:
            if self._audio_key is None:
                self._audio_key = AudioKeyManager(self)
            return self._audio_key

    def spawn(self, func: Callable[[], object]) -> threading.Thread:
        """Run ``func`` in a background thread and return the thread."""
        thread = threading.Thread(target=func, daemon=True)
        thread.start()
        return thread

    def country(self) -> str:
        with self._data_lock:
            return self._country

    def username(self) -> str:
        with self._data_lock:
            return self._username

    def device_id(self) -> str:
        return self.config.device_id