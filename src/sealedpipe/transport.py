"""
sealedpipe.transport
字节流抽象与 framing 收发：socket.socket 或任何实现 recv/sendall/close 的对象。
"""
from __future__ import annotations

from typing import Protocol

from .config import DEFAULT_CONFIG, FramingMode, TransportConfig
from .protocol import LENGTH_PREFIX_SIZE, deframe, frame, unpack_u32


class ByteStream(Protocol):
    """Reliable ordered byte stream (socket.socket satisfies this)."""

    def recv(self, bufsize: int) -> bytes:
        ...

    def sendall(self, data: bytes) -> None:
        ...

    def close(self) -> None:
        ...


class FramedStream:
    """
    在原始字节流上收发帧。
    - LENGTH_PREFIXED: u32 长度前缀，帧边界与 TCP 分段无关；
    - RAW: 一次 sendall = 一帧，一次 recv = 一帧（兼容旧对端）。
    handshake 的 read_exact 与之共用同一个缓冲区。
    """
    def __init__(self, stream: ByteStream, config: TransportConfig = DEFAULT_CONFIG):
        self.stream = stream
        self.config = config
        self.buf = b""

    def _recv_chunk(self, n: int) -> bytes:
        chunk = self.stream.recv(n)
        if not chunk:
            raise EOFError("connection closed")
        return chunk

    def read_exact(self, n: int) -> bytes:
        """Loop until exactly n bytes are available; partial reads are accumulated."""
        while len(self.buf) < n:
            # never read past n: in RAW mode the next frame starts right after
            self.buf += self._recv_chunk(n - len(self.buf))
        out, self.buf = self.buf[:n], self.buf[n:]
        return out

    def write_all(self, data: bytes) -> None:
        self.stream.sendall(data)

    def send_frame(self, payload: bytes) -> None:
        if self.config.framing is FramingMode.RAW:
            self.stream.sendall(payload)
        else:
            self.stream.sendall(frame(payload))

    def recv_frame(self) -> bytes:
        if self.config.framing is FramingMode.RAW:
            if self.buf:
                payload, self.buf = self.buf, b""
                return payload
            return self._recv_chunk(self.config.chunk_size)
        while True:
            payload, rest = deframe(self.buf, self.config.max_frame_size)
            if payload is not None:
                self.buf = rest
                return payload
            if len(self.buf) >= LENGTH_PREFIX_SIZE:
                # length already validated; read the remainder in one go
                need = LENGTH_PREFIX_SIZE + unpack_u32(self.buf[:LENGTH_PREFIX_SIZE]) - len(self.buf)
                self.buf += self._recv_chunk(need)
            else:
                self.buf += self._recv_chunk(self.config.chunk_size)

    def close(self) -> None:
        self.stream.close()
