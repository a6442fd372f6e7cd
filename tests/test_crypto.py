import pytest
from nacl.public import Box, PrivateKey, PublicKey

from sealedpipe.crypto import KEY_SIZE, derive_session_key, generate_keypair, random_bytes
from sealedpipe.errors import KeyExchangeError, KeyGenerationError


def test_generate_keypair_is_fresh():
    a = generate_keypair()
    b = generate_keypair()
    assert len(a.public_key) == KEY_SIZE
    assert len(a.private_key) == KEY_SIZE
    assert a.public_key != b.public_key
    assert a.private_key != b.private_key


def test_keypair_repr_hides_private_key():
    kp = generate_keypair()
    assert kp.private_key.hex() not in repr(kp)
    assert repr(kp.private_key) not in repr(kp)


def test_generate_keypair_is_deterministic_for_a_given_seed():
    seed = bytes(range(32))
    a = generate_keypair(lambda n: seed[:n])
    b = generate_keypair(lambda n: seed[:n])
    assert a.public_key == b.public_key


def test_entropy_failure_raises_key_generation_error():
    def broken(n):
        raise OSError("no entropy")

    with pytest.raises(KeyGenerationError) as ei:
        generate_keypair(broken)
    assert isinstance(ei.value.__cause__, OSError)


def test_short_entropy_raises_key_generation_error():
    with pytest.raises(KeyGenerationError):
        generate_keypair(lambda n: b"\x01" * (n - 1))
    with pytest.raises(KeyGenerationError):
        random_bytes(24, lambda n: b"")


def test_both_sides_derive_same_session_key():
    a = generate_keypair()
    b = generate_keypair()
    k_ab = derive_session_key(a.private_key, b.public_key)
    k_ba = derive_session_key(b.private_key, a.public_key)
    assert k_ab == k_ba
    assert len(k_ab) == 32


def test_session_key_matches_nacl_box_precompute():
    a = generate_keypair()
    b = generate_keypair()
    expected = Box(PrivateKey(a.private_key), PublicKey(b.public_key)).shared_key()
    assert derive_session_key(a.private_key, b.public_key) == expected


def test_session_keys_differ_across_peers():
    a = generate_keypair()
    b = generate_keypair()
    c = generate_keypair()
    assert derive_session_key(a.private_key, b.public_key) != derive_session_key(a.private_key, c.public_key)


def test_derive_rejects_malformed_peer_key():
    a = generate_keypair()
    with pytest.raises(KeyExchangeError):
        derive_session_key(a.private_key, b"\x09" * 31)
    with pytest.raises(KeyExchangeError):
        derive_session_key(a.private_key[:16], generate_keypair().public_key)


def test_derive_rejects_low_order_peer_key():
    a = generate_keypair()
    with pytest.raises(KeyExchangeError):
        derive_session_key(a.private_key, bytes(32))
