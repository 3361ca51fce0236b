from __future__ import annotations

import socket
from dataclasses import dataclass

from edison_sockets.errors import ResolutionError

DEFAULT_HOSTNAME = "localhost"
DEFAULT_MESSAGE = "hello world"
DEFAULT_BACKLOG = 5
ECHO_BUFFER_LEN = 512


@dataclass(frozen=True)
class Endpoint:
    hostname: str
    port: int

    def __str__(self) -> str:
        return f"{self.hostname}:{self.port}"


@dataclass(frozen=True)
class ServerConfig:
    hostname: str = DEFAULT_HOSTNAME
    backlog: int = DEFAULT_BACKLOG
    echo_buffer_len: int = ECHO_BUFFER_LEN


@dataclass(frozen=True)
class ClientConfig:
    hostname: str = DEFAULT_HOSTNAME
    message: str = DEFAULT_MESSAGE


def resolve(endpoint: Endpoint) -> tuple[str, int]:
    """Turn an endpoint into an IPv4 socket address usable by connect().

    The port is passed through as-is; the socket module converts it to
    network byte order when the address is used.
    """
    try:
        address = socket.gethostbyname(endpoint.hostname)
    except (OSError, UnicodeError) as exc:
        raise ResolutionError(f"no such host: {endpoint.hostname!r}") from exc
    return address, endpoint.port
