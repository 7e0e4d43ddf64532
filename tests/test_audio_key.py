import struct

import pytest

from respotcore.audio_key import AudioKeyError, AudioKeyManager
from respotcore.spotify_id import FileId, SpotifyId


class FakeSession:
    def __init__(self):
        self.sent = []

    def send_packet(self, cmd, data):
        self.sent.append((cmd, bytes(data)))


TRACK = SpotifyId.from_base16("00112233445566778899aabbccddeeff")
FILE = FileId(bytes(range(20)))
KEY = bytes(range(100, 116))
OTHER_KEY = bytes(range(200, 216))


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def manager(session):
    return AudioKeyManager(session)


def test_request_sends_packet(manager, session):
    manager.request(TRACK, FILE)
    assert session.sent == [(0xC, FILE.data + TRACK.to_raw() + b"\x00\x00\x00\x00\x00\x00")]


def test_sequence_numbers_increase(manager, session):
    first = manager.request(TRACK, FILE)
    second = manager.request(TRACK, FILE)
    seqs = [struct.unpack(">I", data[36:40])[0] for _, data in session.sent]
    manager.dispatch(0xD, struct.pack(">I", 1) + OTHER_KEY)
    manager.dispatch(0xD, struct.pack(">I", 0) + KEY)
    assert (first.result(timeout=1), second.result(timeout=1), seqs) == (KEY, OTHER_KEY, [0, 1])


def test_key_reply_completes_request(manager):
    future = manager.request(TRACK, FILE)
    manager.dispatch(0xD, struct.pack(">I", 0) + KEY)
    assert future.result(timeout=1) == KEY


def test_replies_matched_by_sequence(manager):
    first = manager.request(TRACK, FILE)
    second = manager.request(TRACK, FILE)
    manager.dispatch(0xD, struct.pack(">I", 1) + KEY)
    assert second.result(timeout=1) == KEY
    assert not first.done()


def test_error_reply_raises(manager):
    future = manager.request(TRACK, FILE)
    manager.dispatch(0xE, struct.pack(">I", 0) + b"\x00\x01")
    with pytest.raises(AudioKeyError):
        future.result(timeout=1)


def test_unknown_sequence_leaves_request_pending(manager):
    future = manager.request(TRACK, FILE)
    manager.dispatch(0xD, struct.pack(">I", 42) + KEY)
    assert not future.done()


def test_wrong_key_length_fails_request(manager):
    future = manager.request(TRACK, FILE)
    manager.dispatch(0xD, struct.pack(">I", 0) + b"short")
    with pytest.raises(AudioKeyError):
        future.result(timeout=1)


def test_request_without_session_raises():
    manager = AudioKeyManager(FakeSession())
    with pytest.raises(RuntimeError):
        manager.request(TRACK, FILE)


def test_dispatch_rejects_short_packet(manager):
    with pytest.raises(ValueError):
        manager.dispatch(0xD, b"\x00\x00")