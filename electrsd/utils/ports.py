import socket

LOCALHOST = "127.0.0.1"


def get_available_port(host: str = LOCALHOST) -> int:
    # Binding to port 0 asks the OS for an arbitrary free port. The port is not
    # reserved once the socket closes, so a third party can still grab it before
    # electrs binds; the launcher retries with fresh ports when that happens.
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind((host, 0))
        return sock.getsockname()[1]


def format_addr(host: str, port: int) -> str:
    return f"{host}:{port}"


def parse_addr(addr: str) -> tuple[str, int]:
    host, sep, port = addr.rpartition(":")
    if not sep or not host:
        raise ValueError(f"Expected host:port, got {addr!r}")

    return host, int(port)
