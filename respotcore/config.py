"""Session, player and device configuration."""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field

VERSION = "0.1.0"


def version_string() -> str:
    """The client version string sent to the server."""
    return f"respotcore-{VERSION}"


class Bitrate(enum.IntEnum):
    """Audio bitrate in kbit/s."""

    BITRATE_96 = 96
    BITRATE_160 = 160
    BITRATE_320 = 320

    @classmethod
    def parse(cls, text: str) -> Bitrate:
        try:
            return _BITRATES[text]
        except KeyError:
            raise ValueError(f"unsupported bitrate {text!r}") from None


_BITRATES = {"96": Bitrate.BITRATE_96, "160": Bitrate.BITRATE_160, "320": Bitrate.BITRATE_320}


class DeviceType(enum.IntEnum):
    """Kind of device announced to other clients."""

    UNKNOWN = 0
    COMPUTER = 1
    TABLET = 2
    SMARTPHONE = 3
    SPEAKER = 4
    TV = 5
    AVR = 6
    STB = 7
    AUDIO_DONGLE = 8

    @classmethod
    def parse(cls, text: str) -> DeviceType:
        try:
            return _PARSEABLE[text.lower()]
        except KeyError:
            raise ValueError(f"unknown device type {text!r}") from None

    def __str__(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    DeviceType.UNKNOWN: "Unknown",
    DeviceType.COMPUTER: "Computer",
    DeviceType.TABLET: "Tablet",
    DeviceType.SMARTPHONE: "Smartphone",
    DeviceType.SPEAKER: "Speaker",
    DeviceType.TV: "TV",
    DeviceType.AVR: "AVR",
    DeviceType.STB: "STB",
    DeviceType.AUDIO_DONGLE: "AudioDongle",
}

_PARSEABLE = {
    name.lower(): member
    for member, name in _DISPLAY_NAMES.items()
    if member is not DeviceType.UNKNOWN
}


def _new_device_id() -> str:
    return str(uuid.uuid4())


@dataclass
class SessionConfig:
    user_agent: str = field(default_factory=version_string)
    device_id: str = field(default_factory=_new_device_id)


@dataclass
class PlayerConfig:
    bitrate: Bitrate = Bitrate.BITRATE_160
    onstart: str | None = None
    onstop: str | None = None


@dataclass
class ConnectConfig:
    name: str
    device_type: DeviceType