"""User credentials: construction, stored-blob decoding and JSON persistence."""

from __future__ import annotations

import base64
import getpass
import hashlib
import json
import os
from dataclasses import dataclass
from typing import IO

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

AUTHENTICATION_USER_PASS = 0

_BLOB_KDF_ROUNDS = 0x100
_AES_BLOCK = 16
_I32_MIN = -(1 << 31)
_I32_MAX = (1 << 31) - 1


class _BlobReader:
    """Reads the compact length-prefixed fields of a decrypted blob."""

    def __init__(self, data: bytes) -> None:
        self._data = data
        self._pos = 0

    def read_u8(self) -> int:
        if self._pos >= len(self._data):
            raise ValueError("credentials blob is truncated")
        value = self._data[self._pos]
        self._pos += 1
        return value

    def read_int(self) -> int:
        lo = self.read_u8()
        if lo & 0x80 == 0:
            return lo
        hi = self.read_u8()
        return (lo & 0x7F) | (hi << 7)

    def read_bytes(self) -> bytes:
        length = self.read_int()
        end = self._pos + length
        if end > len(self._data):
            raise ValueError("credentials blob is truncated")
        value = self._data[self._pos:end]
        self._pos = end
        return value


def _blob_key(username: str, device_id: str) -> bytes:
    """The AES-192 key protecting a stored credentials blob."""
    secret = hashlib.sha1(device_id.encode()).digest()
    derived = hashlib.pbkdf2_hmac("sha1", secret, username.encode(), _BLOB_KDF_ROUNDS, 20)
    return hashlib.sha1(derived).digest() + (20).to_bytes(4, "big")


def _decrypt_blob(encrypted: bytes, key: bytes) -> bytes:
    decryptor = Cipher(algorithms.AES(key), modes.ECB()).decryptor()
    data = bytearray(decryptor.update(encrypted) + decryptor.finalize())
    for index in range(len(data) - 1, _AES_BLOCK - 1, -1):
        data[index] ^= data[index - _AES_BLOCK]
    return bytes(data)


@dataclass
class Credentials:
    """A username with an authentication type and its opaque data."""

    username: str
    auth_type: int
    auth_data: bytes

    @classmethod
    def with_password(cls, username: str, password: str) -> Credentials:
        return cls(username, AUTHENTICATION_USER_PASS, password.encode())

    @classmethod
    def with_blob(cls, username: str, encrypted_blob: str, device_id: str) -> Credentials:
        """Decode a base64 encrypted credentials blob bound to ``device_id``."""
        encrypted = base64.b64decode(encrypted_blob, validate=True)
        blob = _decrypt_blob(encrypted, _blob_key(username, device_id))

        reader = _BlobReader(blob)
        reader.read_u8()
        reader.read_bytes()
        reader.read_u8()
        auth_type = reader.read_int()
        reader.read_u8()
        auth_data = reader.read_bytes()
        return cls(username, auth_type, auth_data)

    def to_json(self) -> str:
        return json.dumps(
            {
                "username": self.username,
                "auth_type": self.auth_type,
                "auth_data": base64.b64encode(self.auth_data).decode("ascii"),
            }
        )

    @classmethod
    def from_json(cls, text: str) -> Credentials:
        document = json.loads(text)
        if not isinstance(document, dict):
            raise ValueError("credentials must be a JSON object")
        try:
            username = document["username"]
            auth_type = document["auth_type"]
            auth_data = document["auth_data"]
        except KeyError as err:
            raise ValueError(f"missing field {err.args[0]!r} in credentials") from None
        if not isinstance(username, str):
            raise ValueError("username must be a string")
        if (
            not isinstance(auth_type, int)
            or isinstance(auth_type, bool)
            or not _I32_MIN <= auth_type <= _I32_MAX
        ):
            raise ValueError("Invalid enum value")
        if not isinstance(auth_data, str):
            raise ValueError("auth_data must be a base64 string")
        return cls(username, auth_type, base64.b64decode(auth_data, validate=True))

    @classmethod
    def from_reader(cls, reader: IO) -> Credentials:
        contents = reader.read()
        if isinstance(contents, bytes):
            contents = contents.decode("utf-8")
        return cls.from_json(contents)

    @classmethod
    def from_file(cls, path: str | os.PathLike) -> Credentials | None:
        """Load credentials from ``path``, or ``None`` if it cannot be opened."""
        try:
            handle = open(path, encoding="utf-8")
        except OSError:
            return None
        with handle:
            return cls.from_reader(handle)

    def save_to_writer(self, writer: IO[str]) -> None:
        writer.write(self.to_json())

    def save_to_file(self, path: str | os.PathLike) -> None:
        with open(path, "w", encoding="utf-8") as handle:
            self.save_to_writer(handle)


def get_credentials(
    username: str | None,
    password: str | None,
    cached_credentials: Credentials | None,
) -> Credentials | None:
    """Choose credentials from arguments, cache, or an interactive prompt."""
    if username is not None:
        if password is not None:
            return Credentials.with_password(username, password)
        if cached_credentials is not None and cached_credentials.username == username:
            return cached_credentials
        typed = getpass.getpass(f"Password for {username}: ")
        return Credentials.with_password(username, typed)
    return cached_credentials