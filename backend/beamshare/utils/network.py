"""LAN address detection and listening-port fallback."""

import logging
import socket

logger = logging.getLogger(__name__)

DEFAULT_PORTS = (7777, 8080, 8888, 9000, 9999, 3000, 4000, 5000, 6000, 8000)


def get_local_ip() -> str:
    """Best-effort IPv4 address other hosts on the LAN can reach us at."""
    # Connecting a UDP socket sends nothing; it only selects the outbound interface.
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.connect(("10.255.255.255", 1))
            ip = sock.getsockname()[0]
    except OSError as e:
        logger.warning("Failed to detect local IP: %s", e)
        return "localhost"

    if ip.startswith("127."):
        logger.warning("No LAN address found, using localhost")
        return "localhost"
    return ip


def is_port_available(port: int, host: str = "") -> bool:
    """True if a TCP listener can bind ``port`` right now."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.bind((host, port))
        except OSError:
            return False
    return True


def find_available_port(preferred: int = 0, candidates: tuple[int, ...] = DEFAULT_PORTS) -> int:
    """Pick ``preferred`` if free, else the first free port of ``candidates``.

    Raises:
        RuntimeError: none of the ports can be bound.
    """
    if preferred > 0:
        if is_port_available(preferred):
            return preferred
        logger.error("Port %d is not available, falling back to the default list", preferred)

    for port in candidates:
        if is_port_available(port):
            return port
    raise RuntimeError(f"No available ports found from the default list: {list(candidates)}")
