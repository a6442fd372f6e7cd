"""
sealedpipe.config
传输层配置：帧模式、最大帧长、读块大小、是否预计算会话密钥、socket 超时。
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional

from .crypto import FRAME_OVERHEAD


class FramingMode(enum.Enum):
    # u32 big-endian length || frame
    LENGTH_PREFIXED = "length-prefixed"
    # frame boundaries follow transport read/write boundaries (legacy peers)
    RAW = "raw"


DEFAULT_MAX_FRAME_SIZE = 1024 * 1024
DEFAULT_CHUNK_SIZE = 4096 + FRAME_OVERHEAD


@dataclass(frozen=True)
class TransportConfig:
    framing: FramingMode = FramingMode.LENGTH_PREFIXED
    max_frame_size: int = DEFAULT_MAX_FRAME_SIZE
    chunk_size: int = DEFAULT_CHUNK_SIZE
    precompute: bool = True
    timeout: Optional[float] = None

    def __post_init__(self) -> None:
        if self.max_frame_size < FRAME_OVERHEAD:
            raise ValueError(f"max_frame_size must be at least {FRAME_OVERHEAD}")
        if self.chunk_size < FRAME_OVERHEAD:
            raise ValueError(f"chunk_size must be at least {FRAME_OVERHEAD}")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be positive")


DEFAULT_CONFIG = TransportConfig()
