"""Requests for the keys that decrypt audio files."""

from __future__ import annotations

import logging
import struct
import threading
import weakref
from concurrent.futures import Future

from respotcore.spotify_id import FileId, SpotifyId
from respotcore.util import SeqGenerator

logger = logging.getLogger(__name__)

CMD_REQUEST_KEY = 0xC
CMD_AES_KEY = 0xD
CMD_AES_KEY_ERROR = 0xE

_KEY_SIZE = 16
_SEQ_LIMIT = 1 << 32


class AudioKeyError(Exception):
    """The server refused or failed to provide an audio key."""


class AudioKeyManager:
    """Sends key requests and completes them as replies arrive."""

    def __init__(self, session) -> None:
        self._session_ref = weakref.ref(session)
        self._lock = threading.Lock()
        self._sequence = SeqGenerator(0)
        self._pending: dict[int, Future] = {}

    def _session(self):
        session = self._session_ref()
        if session is None:
            raise RuntimeError("Session died")
        return session

    def dispatch(self, cmd: int, data: bytes) -> None:
        """Complete the request that a key reply belongs to."""
        if len(data) < 4:
            raise ValueError("audio key packet too short")
        (seq,) = struct.unpack_from(">I", data)
        body = bytes(data[4:])

        with self._lock:
            future = self._pending.pop(seq, None)
        if future is None:
            return

        if cmd == CMD_AES_KEY and len(body) == _KEY_SIZE:
            future.set_result(body)
        elif cmd == CMD_AES_KEY_ERROR:
            codes = " ".join(format(b, "x") for b in body[:2])
            logger.warning("error audio key %s", codes)
            future.set_exception(AudioKeyError(f"audio key error {codes}"))
        else:
            future.set_exception(AudioKeyError(f"unexpected key reply 0x{cmd:x}"))

    def request(self, track: SpotifyId, file: FileId) -> Future:
        """Ask for the key of ``file`` in ``track``; the future yields 16 bytes."""
        session = self._session()
        future: Future = Future()
        with self._lock:
            seq = self._sequence.get() % _SEQ_LIMIT
            self._pending[seq] = future
        packet = file.data + track.to_raw() + struct.pack(">IH", seq, 0)
        session.send_packet(CMD_REQUEST_KEY, packet)
        return future