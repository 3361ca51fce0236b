from __future__ import annotations

import argparse
import os
import re
import sys

from edison_sockets.common import (
    DEFAULT_BACKLOG,
    DEFAULT_HOSTNAME,
    DEFAULT_MESSAGE,
    ClientConfig,
    Endpoint,
    ServerConfig,
)
from edison_sockets.echo import run_echo_client, run_echo_server
from edison_sockets.errors import ArgumentError, EdisonError

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class _Parser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of exiting with status 2."""

    def error(self, message: str) -> None:  # type: ignore[override]
        raise ArgumentError(message, self.format_usage())


def parse_port(text: str) -> int:
    """Parse a port like C's atoi: leading digits, or 0 when there are none."""
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def _add_client_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--hostname",
        default=DEFAULT_HOSTNAME,
        help=f"the hostname to use, defaults to {DEFAULT_HOSTNAME!r}",
    )
    parser.add_argument(
        "--message",
        default=DEFAULT_MESSAGE,
        help="the message to send to the server",
    )
    parser.add_argument("port", type=parse_port, help="the server's listening port number")


def _add_server_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--hostname",
        default=DEFAULT_HOSTNAME,
        help=f"the hostname to use, defaults to {DEFAULT_HOSTNAME!r}",
    )
    parser.add_argument(
        "--backlog",
        type=int,
        default=DEFAULT_BACKLOG,
        help=f"pending connections queued by the OS (default: {DEFAULT_BACKLOG})",
    )
    parser.add_argument("port", type=parse_port, help="the listening port number")


def _run_client(args: argparse.Namespace) -> int:
    config = ClientConfig(hostname=args.hostname, message=args.message)
    run_echo_client(Endpoint(config.hostname, args.port), os.fsencode(config.message))
    return 0


def _run_server(args: argparse.Namespace) -> int:
    if not 0 < args.port <= 65535:
        raise ArgumentError(f"invalid port number: {args.port}", args.usage())
    config = ServerConfig(hostname=args.hostname, backlog=args.backlog)
    try:
        run_echo_server(Endpoint(config.hostname, args.port), config)
    except KeyboardInterrupt:
        print("server stopped.")
    return 0


def _execute(parser: argparse.ArgumentParser, argv: list[str] | None) -> int:
    try:
        args = parser.parse_args(argv)
        return args.run(args)
    except ArgumentError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        print(exc.usage or parser.format_usage(), end="", file=sys.stderr)
        return 1
    except EdisonError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1


def client_main(argv: list[str] | None = None) -> int:
    parser = _Parser(
        prog="edison-client",
        description="Send a message to an echo server and read back exactly as many bytes.",
    )
    _add_client_args(parser)
    parser.set_defaults(run=_run_client)
    return _execute(parser, argv)


def server_main(argv: list[str] | None = None) -> int:
    parser = _Parser(
        prog="edison-server",
        description="Echo bytes back to one TCP client at a time.",
    )
    _add_server_args(parser)
    parser.set_defaults(run=_run_server, usage=parser.format_usage)
    return _execute(parser, argv)


def main(argv: list[str] | None = None) -> int:
    parser = _Parser(
        prog="edison",
        description="Minimal TCP echo pair: a sequential echo server and a fixed-length client.",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    srv = sub.add_parser("server", help="Run the echo server")
    _add_server_args(srv)
    srv.set_defaults(run=_run_server, usage=srv.format_usage)

    cli = sub.add_parser("client", help="Send one message to the echo server")
    _add_client_args(cli)
    cli.set_defaults(run=_run_client)

    return _execute(parser, argv)


if __name__ == "__main__":
    raise SystemExit(main())
