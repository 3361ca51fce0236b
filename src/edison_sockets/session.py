from __future__ import annotations

import enum
import socket

from edison_sockets.common import Endpoint, resolve
from edison_sockets.errors import (
    AcceptError,
    BindError,
    ConnectError,
    ListenError,
    ReceiveError,
    SendError,
    SessionStateError,
    ShortReadError,
    ShortWriteError,
    SocketCreateError,
)


class Role(enum.Enum):
    CLIENT = "client"
    LISTENING = "listening"
    ACCEPTED = "accepted"


class TransportSession:
    """A single stream socket plus the role it was opened for.

    Client and accepted sessions are connected and can send/receive.
    Listening sessions can only accept. The session owns the socket and
    closes it once, either via close() or by leaving a `with` block.
    """

    def __init__(
        self,
        sock: socket.socket,
        role: Role,
        peer: tuple[str, int] | None = None,
    ) -> None:
        self.sock = sock
        self.role = role
        self.peer = peer

    @property
    def port(self) -> int:
        """Local port the socket is bound to."""
        return self.sock.getsockname()[1]

    def _require(self, *roles: Role) -> None:
        if self.role not in roles:
            names = ", ".join(r.value for r in roles)
            raise SessionStateError(f"operation needs a {names} session, not {self.role.value}")

    def send(self, data: bytes) -> int:
        """Write `data` in a single call. A partial write is fatal, not retried."""
        self._require(Role.CLIENT, Role.ACCEPTED)
        try:
            sent = self.sock.send(data)
        except OSError as exc:
            raise SendError(f"failed to send {len(data)} bytes: {exc}") from exc
        if sent != len(data):
            raise ShortWriteError(len(data), sent)
        return sent

    def receive(self, max_len: int) -> bytes:
        """Read exactly `max_len` bytes in a single call or raise ShortReadError."""
        self._require(Role.CLIENT, Role.ACCEPTED)
        try:
            data = self.sock.recv(max_len)
        except OSError as exc:
            raise ReceiveError(f"failed to receive: {exc}") from exc
        if len(data) != max_len:
            raise ShortReadError(max_len, len(data))
        return data

    def receive_into(self, buffer: bytearray) -> int:
        """Read whatever is available into `buffer`; 0 means the peer closed."""
        self._require(Role.CLIENT, Role.ACCEPTED)
        try:
            return self.sock.recv_into(buffer)
        except OSError as exc:
            raise ReceiveError(f"failed to receive characters from the client: {exc}") from exc

    def accept(self) -> tuple[TransportSession, tuple[str, int]]:
        self._require(Role.LISTENING)
        try:
            conn, addr = self.sock.accept()
        except OSError as exc:
            raise AcceptError(f"failed to accept the client: {exc}") from exc
        peer = (addr[0], addr[1])
        return TransportSession(conn, Role.ACCEPTED, peer), peer

    def close(self) -> None:
        self.sock.close()

    def __enter__(self) -> TransportSession:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _new_socket() -> socket.socket:
    try:
        return socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    except OSError as exc:
        raise SocketCreateError(f"failed to create socket: {exc}") from exc


def connect(endpoint: Endpoint) -> TransportSession:
    sock = _new_socket()
    try:
        address = resolve(endpoint)
        try:
            sock.connect(address)
        except (OSError, OverflowError) as exc:
            raise ConnectError(f"failed to connect to {endpoint}: {exc}") from exc
    except BaseException:
        sock.close()
        raise
    return TransportSession(sock, Role.CLIENT)


def listen(endpoint: Endpoint, backlog: int) -> TransportSession:
    """Open a listening socket on endpoint.port.

    The socket binds to the wildcard address, so it accepts connections on
    every local interface whatever endpoint.hostname says.
    """
    sock = _new_socket()
    try:
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind(("", endpoint.port))
        except (OSError, OverflowError) as exc:
            raise BindError(f"failed to bind port {endpoint.port}: {exc}") from exc
        try:
            sock.listen(backlog)
        except OSError as exc:
            raise ListenError(f"failed to listen on port {endpoint.port}: {exc}") from exc
    except BaseException:
        sock.close()
        raise
    return TransportSession(sock, Role.LISTENING)
