"""
sealedpipe.errors
错误类型：密钥生成、握手、解密失败与帧格式错误彼此区分。
"""
from __future__ import annotations

from typing import Any


class SealedPipeError(Exception):
    """Base class for all sealedpipe errors."""


class KeyGenerationError(SealedPipeError):
    """The entropy source could not supply key or nonce material."""


class KeyExchangeError(SealedPipeError):
    """Peer public key is malformed or yields an unusable shared secret."""


class HandshakeError(SealedPipeError):
    """The 32-byte public key exchange did not complete.

    `state` is always the terminal ABORTED state; `failed_state` is the step
    (SEND_KEY or RECV_KEY) that was running when the exchange broke off.
    """

    def __init__(self, message: str, failed_state: Any = None, state: Any = None):
        super().__init__(message)
        self.failed_state = failed_state
        self.state = state


class DecryptionFailure(SealedPipeError):
    """Authenticated decryption rejected the frame (wrong key, corruption or tampering)."""


class FrameError(SealedPipeError, OSError):
    """Malformed length prefix on the wire. Treated as an I/O failure."""


class ShortBufferError(SealedPipeError):
    """Decrypted message does not fit into the caller's buffer."""

    def __init__(self, needed: int, available: int):
        super().__init__(f"buffer too small: need {needed} bytes, have {available}")
        self.needed = needed
        self.available = available
