"""ParsPack CDN IP range source.

The package keeps an in-memory snapshot of the CIDR blocks published by the
ParsPack CDN and refreshes it on a timer from a background thread.  Consumers
that need to decide whether a peer address belongs to the CDN (for example
before trusting ``X-Forwarded-For``) read the snapshot through
:meth:`ParspackIPRange.get_ip_ranges`, which never blocks on the network.

The moving parts are:

* :mod:`parspack_ranges.prefixes` turns the plain-text list into prefixes,
  skipping comments and malformed lines;
* :mod:`parspack_ranges.fetcher` performs a single bounded HTTP GET;
* :mod:`parspack_ranges.store` publishes snapshots copy-on-write; and
* :mod:`parspack_ranges.refresher` runs the fetch/parse/replace loop until
  told to stop.
"""

from .config import ConfigError, RefreshConfig, parse_duration  # noqa: F401
from .fetcher import FetchError, FetchTimeout, StatusError, fetch_text  # noqa: F401
from .prefixes import Prefix, parse_cidr, parse_prefixes  # noqa: F401
from .registry import SourceRegistry, default_registry  # noqa: F401
from .source import MODULE_ID, LifecycleState, ParspackIPRange  # noqa: F401
from .store import SnapshotStore  # noqa: F401

__all__ = [
    "ConfigError",
    "FetchError",
    "FetchTimeout",
    "LifecycleState",
    "MODULE_ID",
    "ParspackIPRange",
    "Prefix",
    "RefreshConfig",
    "SnapshotStore",
    "SourceRegistry",
    "StatusError",
    "default_registry",
    "fetch_text",
    "parse_cidr",
    "parse_duration",
    "parse_prefixes",
]
