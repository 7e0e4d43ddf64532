import struct

import pytest

from respotcore.channel import (
    ChannelError,
    ChannelManager,
    DataEvent,
    HeaderEvent,
)


class FakeSession:
    def __init__(self):
        self.sent = []

    def send_packet(self, cmd, data):
        self.sent.append((cmd, bytes(data)))


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def manager(session):
    return ChannelManager(session)


def framed(channel_id, payload):
    return struct.pack(">H", channel_id) + payload


def test_allocate_hands_out_consecutive_ids(manager):
    first, _ = manager.allocate()
    second, _ = manager.allocate()
    assert (first, second) == (0, 1)


def test_events_header_then_data(manager):
    cid, channel = manager.allocate()
    manager.dispatch(0x9, framed(cid, b"\x00\x03\x03\x00\x01\x00\x00"))
    manager.dispatch(0x9, framed(cid, b"abc"))
    manager.dispatch(0x9, framed(cid, b""))
    assert list(channel.events()) == [HeaderEvent(3, b"\x00\x01"), DataEvent(b"abc")]


def test_headers_then_data_keeps_first_data_packet(manager):
    cid, channel = manager.allocate()
    manager.dispatch(0x9, framed(cid, b"\x00\x03\x03\x00\x01\x00\x00"))
    manager.dispatch(0x9, framed(cid, b"first"))
    manager.dispatch(0x9, framed(cid, b"second"))
    manager.dispatch(0x9, framed(cid, b""))
    assert list(channel.headers()) == [(3, b"\x00\x01")]
    assert list(channel.data()) == [b"first", b"second"]


def test_headers_split_across_packets(manager):
    cid, channel = manager.allocate()
    manager.dispatch(0x9, framed(cid, b"\x00\x02\x01\xaa"))
    manager.dispatch(0x9, framed(cid, b"\x00\x02\x02\xbb\x00\x00"))
    manager.dispatch(0x9, framed(cid, b""))
    assert list(channel.events()) == [HeaderEvent(1, b"\xaa"), HeaderEvent(2, b"\xbb")]


def test_data_skips_headers(manager):
    cid, channel = manager.allocate()
    manager.dispatch(0x9, framed(cid, b"\x00\x02\x07\x01\x00\x00"))
    manager.dispatch(0x9, framed(cid, b"payload"))
    manager.dispatch(0x9, framed(cid, b""))
    assert list(channel.data()) == [b"payload"]


def test_exhausted_channel_yields_nothing_more(manager):
    cid, channel = manager.allocate()
    manager.dispatch(0x9, framed(cid, b"\x00\x00"))
    manager.dispatch(0x9, framed(cid, b""))
    assert list(channel.events()) == []
    assert list(channel.events()) == []


def test_error_packet_raises(manager):
    cid, channel = manager.allocate()
    manager.dispatch(0xA, framed(cid, b"\x00\x02"))
    with pytest.raises(ChannelError):
        list(channel.data())
    assert list(channel.data()) == []


def test_unknown_channel_is_ignored(manager):
    cid, channel = manager.allocate()
    manager.dispatch(0x9, framed(cid + 5, b"stray"))
    manager.dispatch(0x9, framed(cid, b"\x00\x00"))
    manager.dispatch(0x9, framed(cid, b"mine"))
    manager.dispatch(0x9, framed(cid, b""))
    assert list(channel.data()) == [b"mine"]


def test_channels_are_independent(manager):
    cid_a, channel_a = manager.allocate()
    cid_b, channel_b = manager.allocate()
    for cid, payload in ((cid_a, b"one"), (cid_b, b"two")):
        manager.dispatch(0x9, framed(cid, b"\x00\x00"))
        manager.dispatch(0x9, framed(cid, payload))
        manager.dispatch(0x9, framed(cid, b""))
    assert list(channel_b.data()) == [b"two"]
    assert list(channel_a.data()) == [b"one"]


def test_trailing_data_after_terminator_is_an_error(manager):
    cid, channel = manager.allocate()
    manager.dispatch(0x9, framed(cid, b"\x00\x00junk"))
    with pytest.raises(ChannelError):
        list(channel.events())


def test_truncated_header_is_an_error(manager):
    cid, channel = manager.allocate()
    manager.dispatch(0x9, framed(cid, b"\x00\x09\x01"))
    with pytest.raises(ChannelError):
        list(channel.headers())


def test_dispatch_rejects_short_packet(manager):
    with pytest.raises(ValueError):
        manager.dispatch(0x9, b"\x00")