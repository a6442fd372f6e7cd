"""
sealedpipe.client
拨号端：建立 TCP 连接，作为 initiator 完成握手，发送一条消息并读取回显。
"""
from __future__ import annotations

import logging
import socket

from .config import DEFAULT_CONFIG, TransportConfig
from .handshake import Role, establish
from .stream import SecureConn

logger = logging.getLogger(__name__)


def dial(host: str, port: int, config: TransportConfig = DEFAULT_CONFIG) -> SecureConn:
    """Connect, run the initiator handshake and return the secure connection.

    Dial errors propagate as OSError; handshake failures as HandshakeError.
    The socket is closed if the handshake does not complete.
    """
    sock = socket.create_connection((host, port), timeout=config.timeout)
    try:
        return establish(sock, Role.INITIATOR, config)
    except BaseException:
        sock.close()
        raise


def echo_once(conn: SecureConn, message: bytes) -> bytes:
    """Send message and read one response into a buffer of the same size."""
    conn.write(message)
    buf = bytearray(len(message))
    n = conn.read(buf)
    return bytes(buf[:n])
