"""Track and file identifiers."""

from __future__ import annotations

from dataclasses import dataclass

BASE62_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
BASE16_DIGITS = "0123456789abcdef"

_ID_BITS = 128
_ID_LIMIT = 1 << _ID_BITS


def _parse(text: str, digits: str) -> int:
    if not text.isascii():
        raise ValueError(f"identifier {text!r} is not ASCII")
    base = len(digits)
    value = 0
    for char in text:
        digit = digits.find(char)
        if digit < 0:
            raise ValueError(f"invalid digit {char!r} in identifier {text!r}")
        value = value * base + digit
        if value >= _ID_LIMIT:
            raise ValueError(f"identifier {text!r} does not fit in 128 bits")
    return value


@dataclass(frozen=True)
class SpotifyId:
    """A 128-bit item identifier."""

    value: int

    def __post_init__(self) -> None:
        if not 0 <= self.value < _ID_LIMIT:
            raise ValueError("identifier out of 128-bit range")

    @classmethod
    def from_base16(cls, text: str) -> SpotifyId:
        return cls(_parse(text, BASE16_DIGITS))

    @classmethod
    def from_base62(cls, text: str) -> SpotifyId:
        return cls(_parse(text, BASE62_DIGITS))

    @classmethod
    def from_raw(cls, data: bytes) -> SpotifyId:
        if len(data) != 16:
            raise ValueError(f"raw identifier must be 16 bytes, got {len(data)}")
        return cls(int.from_bytes(data, "big"))

    def to_base16(self) -> str:
        return format(self.value, "032x")

    def to_raw(self) -> bytes:
        return self.value.to_bytes(16, "big")


@dataclass(frozen=True, order=True)
class FileId:
    """A 20-byte file identifier."""

    data: bytes

    def __post_init__(self) -> None:
        if len(self.data) != 20:
            raise ValueError(f"file id must be 20 bytes, got {len(self.data)}")

    def to_base16(self) -> str:
        return self.data.hex()

    def __str__(self) -> str:
        return self.to_base16()

    def __repr__(self) -> str:
        return f"FileId({self.to_base16()!r})"