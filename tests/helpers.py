"""Byte streams and a background echo server for driving the transport in tests."""
from __future__ import annotations

import socket
import threading
from typing import List, Optional

from sealedpipe.config import TransportConfig
from sealedpipe.server import listen, serve


def start_server(config: TransportConfig) -> socket.socket:
    listener = listen(0, "127.0.0.1")

    def run() -> None:
        try:
            serve(listener, config)
        except OSError:
            # listener closed at teardown
            pass

    threading.Thread(target=run, daemon=True).start()
    return listener


class ScriptedStream:
    """Feeds fixed incoming bytes and records writes and call order."""

    def __init__(self, incoming: bytes = b"", max_chunk: Optional[int] = None):
        self.incoming = bytearray(incoming)
        self.max_chunk = max_chunk
        self.sent = bytearray()
        self.ops: List[str] = []
        self.closes = 0

    def recv(self, n: int) -> bytes:
        self.ops.append("recv")
        if self.max_chunk is not None:
            n = min(n, self.max_chunk)
        out = bytes(self.incoming[:n])
        del self.incoming[:n]
        return out

    def sendall(self, data: bytes) -> None:
        self.ops.append("sendall")
        self.sent += data

    def close(self) -> None:
        self.closes += 1


class TrickleStream:
    """Socket wrapper whose recv returns at most one byte at a time."""

    def __init__(self, sock: socket.socket):
        self.sock = sock

    def recv(self, n: int) -> bytes:
        return self.sock.recv(1)

    def sendall(self, data: bytes) -> None:
        self.sock.sendall(data)

    def close(self) -> None:
        self.sock.close()


class CorruptingStream:
    """Socket wrapper that flips the last byte of every write once armed."""

    def __init__(self, sock: socket.socket):
        self.sock = sock
        self.armed = False

    def recv(self, n: int) -> bytes:
        return self.sock.recv(n)

    def sendall(self, data: bytes) -> None:
        if self.armed and data:
            data = bytes(data[:-1]) + bytes([data[-1] ^ 0x01])
        self.sock.sendall(data)

    def close(self) -> None:
        self.sock.close()
