"""Parsing helpers for newline-delimited CIDR lists."""

from __future__ import annotations

import ipaddress
import logging
from dataclasses import dataclass
from typing import Tuple, Union

LOG = logging.getLogger(__name__)

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]
IPNetwork = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]

COMMENT_MARKER = "#"


@dataclass(frozen=True)
class Prefix:
    """An address plus prefix length.

    The address is kept exactly as written, host bits included, so
    ``5.6.7.0/16`` round-trips unchanged.  Use :attr:`network` for the
    masked block when testing membership.
    """

    address: IPAddress
    length: int

    def __post_init__(self) -> None:
        if not 0 <= self.length <= self.address.max_prefixlen:
            raise ValueError(
                f"prefix length {self.length} out of range for {self.address}"
            )

    def __str__(self) -> str:
        return f"{self.address}/{self.length}"

    def __contains__(self, item: object) -> bool:
        if isinstance(item, str):
            item = ipaddress.ip_address(item)
        return item in self.network

    @property
    def version(self) -> int:
        return self.address.version

    @property
    def network(self) -> IPNetwork:
        return ipaddress.ip_network(f"{self.address}/{self.length}", strict=False)


def parse_cidr(expression: str) -> Prefix:
    """Parse ``expression`` into a :class:`Prefix`.

    A bare address is treated as a single-host prefix (``/32`` or ``/128``).
    """

    text = expression.strip()
    if "%" in text:
        raise ValueError(f"zoned addresses are not allowed in {expression!r}")
    if "/" not in text:
        address = ipaddress.ip_address(text)
        return Prefix(address, address.max_prefixlen)

    addr_part, _, length_part = text.partition("/")
    if not length_part.isdigit() or not length_part.isascii():
        raise ValueError(f"invalid prefix length in {expression!r}")
    if len(length_part) > 1 and length_part.startswith("0"):
        raise ValueError(f"leading zero in prefix length of {expression!r}")
    address = ipaddress.ip_address(addr_part)
    return Prefix(address, int(length_part))


def parse_prefixes(text: str) -> Tuple[Prefix, ...]:
    """Turn a CIDR list into prefixes, skipping comments and bad lines.

    Order and duplicates from the source are preserved.
    """

    prefixes = []
    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith(COMMENT_MARKER):
            continue
        try:
            prefixes.append(parse_cidr(line))
        except ValueError as exc:
            LOG.warning("failed to parse line %d %r: %s", lineno, line, exc)
    return tuple(prefixes)
