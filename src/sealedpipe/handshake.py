"""
sealedpipe.handshake
握手：双方各发送 32 字节 X25519 公钥，顺序按角色镜像。
- Responder: 生成密钥对 -> 发送公钥 -> 接收对端公钥
- Initiator: 生成密钥对 -> 接收对端公钥 -> 发送公钥
任一步失败即 ABORTED，不会返回任何部分密钥状态。
"""
from __future__ import annotations

import enum
import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from .channel import SecureChannel
from .config import DEFAULT_CONFIG, TransportConfig
from .crypto import KEY_SIZE, KeyPair, RandomSource, derive_session_key, fingerprint, generate_keypair
from .errors import HandshakeError, KeyExchangeError
from .stream import SecureConn
from .transport import ByteStream, FramedStream

logger = logging.getLogger(__name__)


class Role(enum.Enum):
    INITIATOR = "initiator"
    RESPONDER = "responder"


class HandshakeState(enum.Enum):
    INIT = "init"
    SEND_KEY = "send_key"
    RECV_KEY = "recv_key"
    ESTABLISHED = "established"
    ABORTED = "aborted"


@dataclass
class HandshakeResult:
    role: Role
    keypair: KeyPair
    peer_public_key: bytes
    session_key: bytes = field(repr=False)
    state: HandshakeState = HandshakeState.ESTABLISHED


def run_handshake(
    framed: FramedStream,
    role: Role,
    keypair: Optional[KeyPair] = None,
    rng: RandomSource = os.urandom,
) -> HandshakeResult:
    # KeyGenerationError propagates as-is: nothing has touched the wire yet
    if keypair is None:
        keypair = generate_keypair(rng)

    state = HandshakeState.INIT
    try:
        # initiator reads first, responder writes first; the two must stay mirrored
        if role is Role.RESPONDER:
            state = HandshakeState.SEND_KEY
            framed.write_all(keypair.public_key)
            state = HandshakeState.RECV_KEY
            peer = framed.read_exact(KEY_SIZE)
        else:
            state = HandshakeState.RECV_KEY
            peer = framed.read_exact(KEY_SIZE)
            state = HandshakeState.SEND_KEY
            framed.write_all(keypair.public_key)
        session_key = derive_session_key(keypair.private_key, peer)
    except (OSError, EOFError, KeyExchangeError) as e:
        logger.debug("%s handshake aborted in %s: %s", role.value, state.name, e)
        raise HandshakeError(
            f"{role.value} handshake failed in {state.name}: {e}",
            failed_state=state,
            state=HandshakeState.ABORTED,
        ) from e

    logger.debug(
        "%s handshake established: local=%s peer=%s",
        role.value, keypair.fingerprint, fingerprint(peer),
    )
    return HandshakeResult(role=role, keypair=keypair, peer_public_key=peer, session_key=session_key)


def establish(
    stream: ByteStream,
    role: Role,
    config: TransportConfig = DEFAULT_CONFIG,
    keypair: Optional[KeyPair] = None,
) -> SecureConn:
    """Run the role's handshake on a raw stream and wrap it in secure adapters."""
    framed = FramedStream(stream, config)
    res = run_handshake(framed, role, keypair)
    chan = SecureChannel.from_keys(
        res.keypair,
        res.peer_public_key,
        precompute=config.precompute,
        session_key=res.session_key,
    )
    return SecureConn(framed, chan, peer_public_key=res.peer_public_key)
