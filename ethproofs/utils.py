"""Shared helpers: socket addresses and URLs."""

from __future__ import annotations

import ipaddress
from typing import NamedTuple, Union
from urllib.parse import urlsplit, urlunsplit

# maximum number of subblocks for proving
MAX_NUM_SUBBLOCKS = 7

_SPECIAL_SCHEMES = {"http", "https", "ws", "wss", "ftp", "file"}
_DEFAULT_PORTS = {"http": 80, "https": 443, "ws": 80, "wss": 443, "ftp": 21}

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


class SocketAddr(NamedTuple):
    """An IP address with a port."""

    ip: IPAddress
    port: int

    def host(self) -> str:
        return f"[{self.ip}]" if self.ip.version == 6 else str(self.ip)

    def __str__(self) -> str:
        return f"{self.host()}:{self.port}"


def parse_socket_addr(text: str) -> SocketAddr:
    """Parse `a.b.c.d:port` or `[v6]:port`; raises ValueError if malformed."""
    if text.startswith("["):
        host, sep, port_text = text[1:].partition("]:")
        if not sep:
            raise ValueError(f"invalid socket address: {text!r}")
        try:
            ip: IPAddress = ipaddress.IPv6Address(host)
        except ValueError as err:
            raise ValueError(f"invalid socket address: {text!r}") from err
    else:
        host, sep, port_text = text.rpartition(":")
        if not sep:
            raise ValueError(f"invalid socket address: {text!r}")
        try:
            ip = ipaddress.IPv4Address(host)
        except ValueError as err:
            raise ValueError(f"invalid socket address: {text!r}") from err

    if not (port_text.isascii() and port_text.isdigit()) or int(port_text) > 0xFFFF:
        raise ValueError(f"invalid port in socket address: {text!r}")
    return SocketAddr(ip, int(port_text))


def addr_to_url(addr: Union[SocketAddr, str], scheme_prefix: str) -> str:
    """Turn a socket address into a normalised URL, e.g. with prefix `http://`."""
    if isinstance(addr, str):
        addr = parse_socket_addr(addr)
    text = f"{scheme_prefix}{addr}"
    try:
        parts = urlsplit(text)
    except ValueError as err:
        raise ValueError(f"failed to convert a socket address to an URL: {text}") from err
    if not parts.scheme or not parts.netloc:
        raise ValueError(f"failed to convert a socket address to an URL: {text}")

    scheme = parts.scheme.lower()
    netloc = addr.host() if _DEFAULT_PORTS.get(scheme) == addr.port else str(addr)
    path = parts.path or ("/" if scheme in _SPECIAL_SCHEMES else "")
    return urlunsplit((scheme, netloc, path, parts.query, parts.fragment))