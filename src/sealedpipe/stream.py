"""
sealedpipe.stream
安全读写适配器：一次 write = 一次 seal + 一次底层写；一次 read = 一次底层读 + 一次 open。
"""
from __future__ import annotations

from typing import Optional, Union

from .channel import SecureChannel
from .errors import ShortBufferError
from .transport import FramedStream

WritableBuffer = Union[bytearray, memoryview]


class SecureReader:
    def __init__(self, framed: FramedStream, channel: SecureChannel):
        self.framed = framed
        self.channel = channel

    def recv(self) -> bytes:
        """Read and decrypt the next whole message."""
        data = self.framed.recv_frame()
        return self.channel.decrypt(data)

    def read(self, buf: WritableBuffer) -> int:
        """
        Decrypt one frame into buf and return the plaintext length.

        I/O errors (EOFError included) propagate unchanged. On
        DecryptionFailure or ShortBufferError buf is left untouched.
        The frame is consumed either way: a message that did not fit is
        lost, so size buf for the largest message the peer may send.
        """
        pt = self.recv()
        view = memoryview(buf)
        if len(pt) > len(view):
            raise ShortBufferError(len(pt), len(view))
        view[:len(pt)] = pt
        return len(pt)


class SecureWriter:
    def __init__(self, framed: FramedStream, channel: SecureChannel):
        self.framed = framed
        self.channel = channel

    def write(self, data: bytes) -> int:
        """Seal data into one frame and write it; returns len(data), not the wire size."""
        self.framed.send_frame(self.channel.encrypt(data))
        return len(data)


class SecureConn:
    """
    握手完成后的连接：独占底层流，close() 只释放一次。
    """
    def __init__(
        self,
        framed: FramedStream,
        channel: SecureChannel,
        peer_public_key: Optional[bytes] = None,
    ):
        self.framed = framed
        self.channel = channel
        self.peer_public_key = peer_public_key
        self.reader = SecureReader(framed, channel)
        self.writer = SecureWriter(framed, channel)
        self.closed = False

    def read(self, buf: WritableBuffer) -> int:
        return self.reader.read(buf)

    def recv(self) -> bytes:
        return self.reader.recv()

    def write(self, data: bytes) -> int:
        return self.writer.write(data)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.framed.close()

    def __enter__(self) -> "SecureConn":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
