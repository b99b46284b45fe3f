import socket
import sys

import psutil


def is_port_open(port: int, host: str = "0.0.0.0") -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as candidate:
        if sys.platform != "win32":
            candidate.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        try:
            candidate.bind((host, port))

        except OSError:
            return False

    return True


def find_open_ports(
    start: int,
    count: int = 2,
    host: str = "0.0.0.0",
    limit: int = 65535,
) -> list[int]:
    """First run of ``count`` consecutive bindable ports at or above ``start``."""
    port = start
    while port + count - 1 <= limit:
        for offset in range(count):
            if not is_port_open(port + offset, host=host):
                port += offset + 1
                break

        else:
            return list(range(port, port + count))

    raise OSError(f"No {count} consecutive open ports found from {start}")


def get_address() -> str:
    """First non-loopback IPv4 address of this machine, or ``localhost``."""
    for addresses in psutil.net_if_addrs().values():
        for address in addresses:
            if address.family != socket.AF_INET:
                continue

            if address.address.startswith("127."):
                continue

            return address.address

    return "localhost"
