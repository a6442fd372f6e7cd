"""
sealedpipe.cli
命令行：
  sealedpipe -l PORT          监听并运行回显服务器
  sealedpipe PORT MESSAGE     连接 localhost:PORT，发送 MESSAGE 并打印回显
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, NoReturn, Optional

from .client import dial, echo_once
from .errors import SealedPipeError
from .server import listen, serve

logger = logging.getLogger("sealedpipe")


def fatal(msg: str, *args: object) -> NoReturn:
    logger.critical(msg, *args)
    raise SystemExit(1)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="sealedpipe", description="encrypted echo over TCP")
    ap.add_argument("-l", dest="listen", type=int, default=0, metavar="PORT", help="listen mode, serve on PORT")
    ap.add_argument("port", nargs="?", type=int, help="client mode: server port on localhost")
    ap.add_argument("message", nargs="?", help="client mode: message to send")
    return ap


def run_server(port: int) -> NoReturn:
    try:
        listener = listen(port)
    except OSError as e:
        fatal("listen on port %d: %s", port, e)
    with listener:
        logger.info("listening on :%d", port)
        try:
            serve(listener)
        except OSError as e:
            fatal("accept: %s", e)
    fatal("listener stopped")


def run_client(port: int, message: str) -> None:
    try:
        conn = dial("localhost", port)
    except (OSError, SealedPipeError) as e:
        fatal("dial localhost:%d: %s", port, e)
    with conn:
        try:
            reply = echo_once(conn, os.fsencode(message))
        except (OSError, EOFError, SealedPipeError) as e:
            fatal("%s", e)
    # raw bytes, as received; argv may carry non-UTF-8 bytes
    sys.stdout.buffer.write(reply + b"\n")
    sys.stdout.buffer.flush()


def main(argv: Optional[List[str]] = None) -> None:
    logging.basicConfig(level=logging.INFO, format="[%(name)s] %(levelname)s %(message)s")
    ap = build_parser()
    args = ap.parse_args(argv)

    if args.listen:
        run_server(args.listen)

    if args.port is None or args.message is None:
        ap.error("client mode needs PORT and MESSAGE")
    run_client(args.port, args.message)


if __name__ == "__main__":
    main(sys.argv[1:])
