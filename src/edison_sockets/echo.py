from __future__ import annotations

from edison_sockets.common import ECHO_BUFFER_LEN, Endpoint, ServerConfig
from edison_sockets.session import TransportSession, connect, listen


def start_server(endpoint: Endpoint, backlog: int) -> TransportSession:
    print(f"Starting server at {endpoint}")
    return listen(endpoint, backlog)


def echo_loop(session: TransportSession, buffer_len: int = ECHO_BUFFER_LEN) -> int:
    """Echo everything the client sends until it closes its end.

    Returns the number of bytes echoed. Read and write failures propagate.
    """
    buffer = bytearray(buffer_len)
    view = memoryview(buffer)
    total = 0
    while True:
        received = session.receive_into(buffer)
        if received == 0:
            print("connection to client closed.")
            print("waiting for next connection.")
            return total
        session.send(view[:received])
        total += received


def serve(
    listener: TransportSession,
    echo_buffer_len: int = ECHO_BUFFER_LEN,
    max_clients: int | None = None,
) -> None:
    """Accept and serve clients one at a time.

    Each client is echoed to completion before the next accept. With
    `max_clients` set, returns after that many connections.
    """
    served = 0
    while max_clients is None or served < max_clients:
        client, (host, port) = listener.accept()
        print(f"connected to client: {host}:{port}")
        with client:
            echo_loop(client, echo_buffer_len)
        served += 1


def run_echo_server(endpoint: Endpoint, config: ServerConfig | None = None) -> None:
    config = config or ServerConfig()
    with start_server(endpoint, config.backlog) as listener:
        serve(listener, config.echo_buffer_len)


def run_echo_client(
    endpoint: Endpoint,
    message: bytes,
    rx_buffer_len: int | None = None,
) -> bytes:
    """Send `message` once and read back exactly as many bytes.

    Every read asks for min(remaining, rx_buffer_len) bytes and must get all
    of them. rx_buffer_len defaults to the message length.
    """
    message_len = len(message)
    if rx_buffer_len is None:
        rx_buffer_len = message_len
    elif rx_buffer_len <= 0:
        raise ValueError(f"rx_buffer_len must be positive, got {rx_buffer_len}")

    print(f"connecting to server at {endpoint}")
    with connect(endpoint) as session:
        print(f'sending message: "{message.decode("utf-8", errors="replace")}"')
        session.send(message)

        received = bytearray()
        print('receiving response: "', end="", flush=True)
        while len(received) < message_len:
            remaining = message_len - len(received)
            chunk = session.receive(min(remaining, rx_buffer_len))
            received += chunk
            print(chunk.decode("utf-8", errors="replace"), end="", flush=True)
        print('"')

    return bytes(received)
