"""Decryption of AES-128-CTR protected audio streams."""

from __future__ import annotations

import io
from typing import BinaryIO

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

AUDIO_AESIV = bytes(
    [0x72, 0xE0, 0x67, 0xFB, 0xDD, 0xCB, 0xCF, 0x77, 0xEB, 0xE8, 0xBC, 0x64, 0x3F, 0x63, 0x0D, 0x93]
)
_BLOCK = 16
_COUNTER_LIMIT = 1 << 128


class AudioDecrypt:
    """A readable, seekable stream that decrypts ``reader`` with ``key``."""

    def __init__(self, key: bytes, reader: BinaryIO) -> None:
        if len(key) != 16:
            raise ValueError(f"audio key must be 16 bytes, got {len(key)}")
        self._key = bytes(key)
        self._reader = reader
        self._cipher = self._decryptor(AUDIO_AESIV)

    def _decryptor(self, iv: bytes):
        return Cipher(algorithms.AES(self._key), modes.CTR(iv)).decryptor()

    def read(self, size: int = -1) -> bytes:
        data = self._reader.read(size)
        return self._cipher.update(data) if data else b""

    def seek(self, pos: int, whence: int = io.SEEK_SET) -> int:
        newpos = self._reader.seek(pos, whence)
        counter = (int.from_bytes(AUDIO_AESIV, "big") + newpos // _BLOCK) % _COUNTER_LIMIT
        self._cipher = self._decryptor(counter.to_bytes(_BLOCK, "big"))
        self._cipher.update(bytes(newpos % _BLOCK))
        return newpos

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True