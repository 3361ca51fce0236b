from __future__ import annotations

import socket
import threading
from typing import Iterator

import pytest

from edison_sockets.common import Endpoint
from edison_sockets.echo import serve
from edison_sockets.session import TransportSession, listen


class FakeSocket:
    """Socket stand-in that replays canned results for send/recv calls."""

    def __init__(self, sends=(), recvs=()) -> None:
        self.sends = list(sends)
        self.recvs = list(recvs)
        self.sent: list[bytes] = []
        self.closed = 0

    def _next(self, queue):
        result = queue.pop(0)
        if isinstance(result, BaseException):
            raise result
        return result

    def send(self, data) -> int:
        self.sent.append(bytes(data))
        return self._next(self.sends)

    def recv(self, max_len: int) -> bytes:
        return self._next(self.recvs)

    def recv_into(self, buffer) -> int:
        data = self._next(self.recvs)
        buffer[: len(data)] = data
        return len(data)

    def close(self) -> None:
        self.closed += 1


class ListenerSocket(FakeSocket):
    """Listening-socket stand-in whose listen/accept can be made to fail."""

    def __init__(self, listen_error=None, accept_error=None) -> None:
        super().__init__()
        self.listen_error = listen_error
        self.accept_error = accept_error

    def setsockopt(self, *args) -> None:
        pass

    def bind(self, address) -> None:
        pass

    def listen(self, backlog: int) -> None:
        if self.listen_error is not None:
            raise self.listen_error

    def accept(self):
        if self.accept_error is not None:
            raise self.accept_error
        raise AssertionError("no pending connection")


class EchoServer:
    def __init__(self, listener: TransportSession, max_clients: int | None) -> None:
        self.listener = listener
        self.error: BaseException | None = None
        self.thread = threading.Thread(target=self._run, args=(max_clients,), daemon=True)

    @property
    def endpoint(self) -> Endpoint:
        return Endpoint("localhost", self.listener.port)

    def _run(self, max_clients: int | None) -> None:
        try:
            serve(self.listener, max_clients=max_clients)
        except BaseException as exc:  # surfaced to the test through .error
            self.error = exc


@pytest.fixture
def start_echo_server() -> Iterator:
    servers: list[EchoServer] = []

    def _start(max_clients: int | None = None) -> EchoServer:
        server = EchoServer(listen(Endpoint("localhost", 0), 5), max_clients)
        server.thread.start()
        servers.append(server)
        return server

    yield _start

    for server in servers:
        # shutdown() wakes a thread still blocked in accept(); close() alone does not
        try:
            server.listener.sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        server.listener.close()
        server.thread.join(timeout=5)


@pytest.fixture
def free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]
