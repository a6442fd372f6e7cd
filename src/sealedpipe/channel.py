"""
sealedpipe.channel
数据通道：每个连接独占一个 SecureChannel，持有本连接解析好的密钥。
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from .crypto import BoxKeys, KeyPair, RandomSource, derive_session_key
from .protocol import FrameKey, open_frame, seal_frame


@dataclass
class SecureChannel:
    key: FrameKey = field(repr=False)
    rng: RandomSource = field(default=os.urandom, repr=False)

    @staticmethod
    def from_keys(
        keypair: KeyPair,
        peer_public_key: bytes,
        precompute: bool = True,
        session_key: Optional[bytes] = None,
    ) -> "SecureChannel":
        if not precompute:
            return SecureChannel(key=BoxKeys(keypair.private_key, peer_public_key))
        if session_key is None:
            session_key = derive_session_key(keypair.private_key, peer_public_key)
        return SecureChannel(key=session_key)

    @property
    def precomputed(self) -> bool:
        return not isinstance(self.key, BoxKeys)

    def encrypt(self, plaintext: bytes) -> bytes:
        return seal_frame(plaintext, self.key, self.rng)

    def decrypt(self, data: bytes) -> bytes:
        return open_frame(data, self.key)
