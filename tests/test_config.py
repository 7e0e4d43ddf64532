import uuid

import pytest

from respotcore.config import (
    Bitrate,
    ConnectConfig,
    DeviceType,
    PlayerConfig,
    SessionConfig,
    version_string,
)


@pytest.mark.parametrize(
    "text, expected",
    [("96", Bitrate.BITRATE_96), ("160", Bitrate.BITRATE_160), ("320", Bitrate.BITRATE_320)],
)
def test_bitrate_parse(text, expected):
    assert Bitrate.parse(text) is expected


def test_bitrate_parse_rejects_other():
    with pytest.raises(ValueError):
        Bitrate.parse("128")


def test_bitrate_ordering():
    parsed = sorted(Bitrate.parse(text) for text in ("320", "96", "160"))
    assert parsed == [Bitrate.BITRATE_96, Bitrate.BITRATE_160, Bitrate.BITRATE_320]


def test_device_type_parse_case_insensitive():
    assert DeviceType.parse("AudioDongle") is DeviceType.AUDIO_DONGLE
    assert DeviceType.parse("tv") is DeviceType.TV
    assert DeviceType.parse("SPEAKER") is DeviceType.SPEAKER


def test_device_type_parse_rejects_unknown():
    with pytest.raises(ValueError):
        DeviceType.parse("unknown")
    with pytest.raises(ValueError):
        DeviceType.parse("toaster")


def test_device_type_display():
    assert str(DeviceType.parse("audiodongle")) == "AudioDongle"
    assert str(DeviceType.parse("TV")) == "TV"
    assert str(DeviceType(0)) == "Unknown"


@pytest.mark.parametrize("device", [d for d in DeviceType if d is not DeviceType.UNKNOWN])
def test_device_type_display_round_trip(device):
    assert DeviceType.parse(str(device)) is device


def test_device_type_values():
    assert int(DeviceType.parse("speaker")) == 4
    assert int(DeviceType.parse("audiodongle")) == 8


def test_player_config_defaults():
    config = PlayerConfig()
    assert config.bitrate is Bitrate.BITRATE_160
    assert config.onstart is None
    assert config.onstop is None


def test_session_config_defaults():
    first = SessionConfig()
    second = SessionConfig()
    assert first.user_agent == version_string()
    assert str(uuid.UUID(first.device_id)) == first.device_id
    assert first.device_id != second.device_id


def test_connect_config_requires_fields():
    with pytest.raises(TypeError):
        ConnectConfig()
    config = ConnectConfig("Kitchen", DeviceType.SPEAKER)
    assert config.name == "Kitchen"
    assert config.device_type is DeviceType.SPEAKER