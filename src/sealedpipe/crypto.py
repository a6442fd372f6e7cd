"""
sealedpipe.crypto
核心密码学构件：X25519 密钥对 + NaCl box（X25519 + XSalsa20-Poly1305）。

帧与 NaCl/libsodium 的 crypto_box 逐字节兼容：
- 预计算模式：crypto_box_beforenm 得到 32 字节会话密钥，之后每帧用 secretbox；
- 非对称模式：每帧直接 crypto_box(私钥, 对端公钥)。
两种模式产生的密文完全相同。
"""
from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass, field
from typing import Callable

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import x25519
from nacl import bindings
from nacl.exceptions import CryptoError

from .errors import KeyExchangeError, KeyGenerationError


KEY_SIZE = 32
NONCE_SIZE = 24
TAG_SIZE = 16  # Poly1305
FRAME_OVERHEAD = NONCE_SIZE + TAG_SIZE

RandomSource = Callable[[int], bytes]


def sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def fingerprint(public_key: bytes) -> str:
    """Short printable id for a public key (logging only)."""
    return sha256(public_key)[:8].hex()


@dataclass(frozen=True)
class KeyPair:
    public_key: bytes  # 32
    private_key: bytes = field(repr=False)  # 32

    @property
    def fingerprint(self) -> str:
        return fingerprint(self.public_key)


@dataclass(frozen=True)
class BoxKeys:
    """本地私钥 + 对端公钥，用于逐帧非对称加密。"""
    private_key: bytes = field(repr=False)
    peer_public_key: bytes


def random_bytes(n: int, rng: RandomSource = os.urandom) -> bytes:
    try:
        data = rng(n)
    except (OSError, NotImplementedError) as e:
        raise KeyGenerationError(f"entropy source failed: {e}") from e
    if len(data) != n:
        raise KeyGenerationError(f"entropy source returned {len(data)} of {n} bytes")
    return bytes(data)


def generate_keypair(rng: RandomSource = os.urandom) -> KeyPair:
    seed = random_bytes(KEY_SIZE, rng)
    priv = x25519.X25519PrivateKey.from_private_bytes(seed)
    pub = priv.public_key().public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )
    raw_priv = priv.private_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PrivateFormat.Raw,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return KeyPair(public_key=pub, private_key=raw_priv)


def x25519_load_public(raw32: bytes) -> x25519.X25519PublicKey:
    if len(raw32) != KEY_SIZE:
        raise KeyExchangeError(f"X25519 public key must be {KEY_SIZE} bytes, got {len(raw32)}")
    return x25519.X25519PublicKey.from_public_bytes(bytes(raw32))


def derive_session_key(private_key: bytes, peer_public_key: bytes) -> bytes:
    """
    X25519 + HSalsa20（即 NaCl box 的 beforenm）。
    双方用 (自己私钥, 对端公钥) 得到同一个 32 字节对称密钥。
    """
    if len(private_key) != KEY_SIZE:
        raise KeyExchangeError(f"private key must be {KEY_SIZE} bytes, got {len(private_key)}")
    x25519_load_public(peer_public_key)
    try:
        return bindings.crypto_box_beforenm(bytes(peer_public_key), bytes(private_key))
    except CryptoError as e:
        # libsodium rejects low-order points (all-zero shared secret)
        raise KeyExchangeError("peer public key yields an invalid shared secret") from e


def secretbox_encrypt(key32: bytes, nonce24: bytes, plaintext: bytes) -> bytes:
    return bindings.crypto_secretbox(bytes(plaintext), nonce24, key32)


def secretbox_decrypt(key32: bytes, nonce24: bytes, ciphertext: bytes) -> bytes:
    return bindings.crypto_secretbox_open(bytes(ciphertext), nonce24, key32)


def box_encrypt(keys: BoxKeys, nonce24: bytes, plaintext: bytes) -> bytes:
    return bindings.crypto_box(bytes(plaintext), nonce24, keys.peer_public_key, keys.private_key)


def box_decrypt(keys: BoxKeys, nonce24: bytes, ciphertext: bytes) -> bytes:
    return bindings.crypto_box_open(bytes(ciphertext), nonce24, keys.peer_public_key, keys.private_key)
