import random

from respotcore.diffie_hellman import DH_GENERATOR, DH_PRIME, DHLocalKeys


def test_prime_is_96_bytes():
    assert DH_PRIME.bit_length() == 768
    assert DH_PRIME.to_bytes(96, "big")[:8] == b"\xff" * 8
    assert DH_PRIME.to_bytes(96, "big")[-8:] == b"\xff" * 8


def test_shared_secret_agrees():
    alice = DHLocalKeys.random()
    bob = DHLocalKeys.random()
    assert alice.shared_secret(bob.public_key()) == bob.shared_secret(alice.public_key())


def test_public_key_is_generator_power():
    keys = DHLocalKeys(12345)
    expected = pow(DH_GENERATOR, 12345, DH_PRIME)
    assert int.from_bytes(keys.public_key(), "big") == expected


def test_private_key_one_gives_generator():
    assert DHLocalKeys(1).public_key() == bytes([DH_GENERATOR])


def test_random_is_deterministic_with_seeded_rng():
    first = DHLocalKeys.random(random.Random(42))
    second = DHLocalKeys.random(random.Random(42))
    assert first.public_key() == second.public_key()


def test_public_key_below_prime():
    keys = DHLocalKeys.random()
    assert int.from_bytes(keys.public_key(), "big") < DH_PRIME
    assert len(keys.public_key()) <= 96


def test_shared_secret_with_known_remote():
    keys = DHLocalKeys(7)
    remote = (3).to_bytes(1, "big")
    assert int.from_bytes(keys.shared_secret(remote), "big") == pow(3, 7, DH_PRIME)