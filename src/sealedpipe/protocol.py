"""
sealedpipe.protocol
帧编解码：nonce(24) || ciphertext(明文长度 + 16)，以及可选的长度前缀 framing。
"""
from __future__ import annotations

import os
import struct
from typing import Optional, Tuple, Union

from nacl.exceptions import CryptoError

from .crypto import (
    FRAME_OVERHEAD,
    KEY_SIZE,
    NONCE_SIZE,
    BoxKeys,
    RandomSource,
    box_decrypt,
    box_encrypt,
    random_bytes,
    secretbox_decrypt,
    secretbox_encrypt,
)
from .errors import DecryptionFailure, FrameError


# 32-byte session key, or (private key, peer public key) for per-frame box
FrameKey = Union[bytes, BoxKeys]

LENGTH_PREFIX_SIZE = 4
MIN_FRAME_SIZE = FRAME_OVERHEAD


def pack_u32(n: int) -> bytes:
    return struct.pack(">I", n)


def unpack_u32(b: bytes) -> int:
    return struct.unpack(">I", b)[0]


def frame(payload: bytes) -> bytes:
    return pack_u32(len(payload)) + payload


def deframe(buf: bytes, max_size: int) -> Tuple[Optional[bytes], bytes]:
    """从缓冲区中解析一帧：返回 (payload_or_none, remaining_buf)。"""
    if len(buf) < LENGTH_PREFIX_SIZE:
        return None, buf
    n = check_frame_length(unpack_u32(buf[:LENGTH_PREFIX_SIZE]), max_size)
    end = LENGTH_PREFIX_SIZE + n
    if len(buf) < end:
        return None, buf
    return buf[LENGTH_PREFIX_SIZE:end], buf[end:]


def check_frame_length(n: int, max_size: int) -> int:
    if n > max_size:
        raise FrameError(f"frame too large: {n} > {max_size}")
    if n < MIN_FRAME_SIZE:
        raise FrameError(f"frame too short: {n} < {MIN_FRAME_SIZE}")
    return n


def _check_key(key: FrameKey) -> None:
    if isinstance(key, BoxKeys):
        return
    if len(key) != KEY_SIZE:
        raise ValueError(f"session key must be {KEY_SIZE} bytes")


def seal_frame(plaintext: bytes, key: FrameKey, rng: RandomSource = os.urandom) -> bytes:
    """Encrypt plaintext under a fresh random nonce and return nonce || ciphertext."""
    _check_key(key)
    nonce = random_bytes(NONCE_SIZE, rng)
    if isinstance(key, BoxKeys):
        ct = box_encrypt(key, nonce, plaintext)
    else:
        ct = secretbox_encrypt(key, nonce, plaintext)
    return nonce + ct


def open_frame(data: bytes, key: FrameKey) -> bytes:
    """
    Split nonce from ciphertext and authenticate-decrypt.

    Raises DecryptionFailure for frames shorter than nonce + tag and for any
    authentication failure; never returns partial plaintext.
    """
    _check_key(key)
    if len(data) < MIN_FRAME_SIZE:
        raise DecryptionFailure(f"frame too short: {len(data)} < {MIN_FRAME_SIZE}")
    data = bytes(data)
    nonce, ct = data[:NONCE_SIZE], data[NONCE_SIZE:]
    try:
        if isinstance(key, BoxKeys):
            return box_decrypt(key, nonce, ct)
        return secretbox_decrypt(key, nonce, ct)
    except CryptoError as e:
        raise DecryptionFailure("cannot decrypt the message") from e
