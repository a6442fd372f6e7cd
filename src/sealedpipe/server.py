"""
sealedpipe.server
回显服务器：每个连接一个线程，握手后把解密出的消息重新加密写回。
"""
from __future__ import annotations

import logging
import socket
import threading
from typing import Any, Callable, Optional

from .config import DEFAULT_CONFIG, TransportConfig
from .errors import SealedPipeError
from .handshake import Role, establish
from .stream import SecureConn

logger = logging.getLogger(__name__)

ECHO_BUFFER_SIZE = 1024

Handler = Callable[[SecureConn], None]


def listen(port: int, host: str = "") -> socket.socket:
    return socket.create_server((host, port))


def echo(conn: SecureConn) -> None:
    buf = bytearray(ECHO_BUFFER_SIZE)
    while True:
        n = conn.read(buf)
        conn.write(bytes(buf[:n]))


def handle_connection(
    sock: socket.socket,
    addr: Any = None,
    config: TransportConfig = DEFAULT_CONFIG,
    handler: Handler = echo,
) -> None:
    """Handshake on an accepted socket and run handler until the connection ends.

    Every failure is fatal for this connection only; the socket is always closed.
    """
    if config.timeout is not None:
        sock.settimeout(config.timeout)
    conn: Optional[SecureConn] = None
    try:
        conn = establish(sock, Role.RESPONDER, config)
        logger.info("session established with %s", addr)
        handler(conn)
    except EOFError:
        logger.debug("connection %s closed by peer", addr)
    except (OSError, SealedPipeError) as e:
        logger.warning("connection %s: %s", addr, e)
    finally:
        if conn is not None:
            conn.close()
        else:
            sock.close()
        logger.info("connection %s closed", addr)


def serve(
    listener: socket.socket,
    config: TransportConfig = DEFAULT_CONFIG,
    handler: Handler = echo,
) -> None:
    """Accept connections forever, one daemon thread each.

    Returns only by raising the listener's accept() error.
    """
    while True:
        sock, addr = listener.accept()
        logger.info("accepted from %s", addr)
        t = threading.Thread(
            target=handle_connection,
            args=(sock, addr, config, handler),
            name=f"sealedpipe-conn-{addr}",
            daemon=True,
        )
        t.start()
