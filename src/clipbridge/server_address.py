#!/usr/bin/env python3
"""Listen address utilities for the clipboard server.

This module provides helpers for the server's listen address, including:
- Parsing listen addresses like ":8080" or "0.0.0.0:8080"
- Discovering the LAN URLs the server is reachable at
- Printing startup messages
"""

from __future__ import annotations

import ipaddress
import socket
import sys

DEFAULT_PORT: int = 8080

# Bind-all host used when the listen address omits one.
DEFAULT_HOST: str = "0.0.0.0"

# Documentation address used to find the outbound interface; nothing is sent.
_PROBE_ADDRESS: tuple[str, int] = ("192.0.2.1", 9)


def parse_listen_addr(addr: str) -> tuple[str, int]:
    """Split a listen address into host and port.

    Args:
        addr: Address such as ":8080", "127.0.0.1:9000", or "" for defaults.

    Returns:
        Tuple of (host, port). Missing parts fall back to DEFAULT_HOST and
        DEFAULT_PORT.

    Raises:
        ValueError: If the port part is not a valid port number.
    """
    addr = addr.strip()
    if not addr:
        return DEFAULT_HOST, DEFAULT_PORT
    host, sep, port_text = addr.rpartition(":")
    if not sep:
        host, port_text = addr, ""
    host = host.strip("[]") or DEFAULT_HOST
    if not port_text:
        return host, DEFAULT_PORT
    port = int(port_text)
    if not 0 < port < 65536:
        raise ValueError(f"port out of range: {port}")
    return host, port


def _is_lan_ipv4(value: str) -> bool:
    try:
        ip = ipaddress.ip_address(value)
    except ValueError:
        return False
    return ip.version == 4 and not ip.is_loopback and not ip.is_link_local


def local_ips() -> list[str]:
    """Return non-loopback IPv4 addresses of this host, in discovery order."""
    found: list[str] = []

    probe = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        probe.connect(_PROBE_ADDRESS)
        found.append(probe.getsockname()[0])
    except OSError:
        pass  # No route; fall back to hostname resolution
    finally:
        probe.close()

    try:
        infos = socket.getaddrinfo(socket.gethostname(), None, socket.AF_INET)
    except OSError:
        infos = []
    for info in infos:
        found.append(str(info[4][0]))

    ips: list[str] = []
    for ip in found:
        if _is_lan_ipv4(ip) and ip not in ips:
            ips.append(ip)
    return ips


def server_urls(port: int) -> list[str]:
    """Return http://<ip>:<port> for each LAN address of this host."""
    return [f"http://{ip}:{port}" for ip in local_ips()]


def print_startup_message(host: str, port: int, db_path: str) -> None:
    """Print server startup message to stderr.

    Shows the listen address, the history database path, and the LAN URLs
    clients can use as --server-url.

    Args:
        host: Host the server binds to.
        port: Port the server listens on.
        db_path: Path of the SQLite history database.
    """
    print(f"Clipboard server listening on {host}:{port}", file=sys.stderr)
    print(f"History database: {db_path}", file=sys.stderr)
    for url in server_urls(port):
        print(f"Reachable at {url}", file=sys.stderr)
