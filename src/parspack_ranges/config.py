"""Refresh configuration for the ParsPack IP range source.

Durations are stored as floating point seconds.  ``0`` has a special meaning
for both knobs: an unset interval falls back to :data:`DEFAULT_INTERVAL` and
an unset timeout disables the per-fetch deadline entirely.
"""

from __future__ import annotations

import math
import re
import threading
from dataclasses import dataclass, replace
from typing import Union

DEFAULT_URL = "https://parspack.com/cdnips.txt"
DEFAULT_INTERVAL = 3600.0

# Go durations top out at int64 nanoseconds; Event.wait is bounded by TIMEOUT_MAX.
MAX_DURATION = min(threading.TIMEOUT_MAX, (2**63 - 1) / 1e9)

_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
    "d": 86400.0,
}

_NUMBER = r"(?:\d+(?:\.\d*)?|\.\d+)"
_COMPONENT = re.compile(rf"({_NUMBER})(ns|us|µs|μs|ms|s|m|h|d)")
_DURATION = re.compile(rf"(?:{_NUMBER}(?:ns|us|µs|μs|ms|s|m|h|d))+")


class ConfigError(ValueError):
    """Raised when configuration cannot be turned into a usable source."""


def parse_duration(value: Union[str, int, float]) -> float:
    """Convert ``value`` into seconds.

    Accepts Go style duration strings (``"1h30m"``, ``"1.5s"``, ``"250ms"``)
    extended with a ``d`` unit for days, as well as bare numbers which are
    interpreted as seconds.
    """

    if isinstance(value, bool):
        raise ConfigError(f"invalid duration {value!r}")
    if isinstance(value, (int, float)):
        seconds = float(value)
    else:
        text = str(value).strip()
        if not text:
            raise ConfigError("duration cannot be empty")
        if text == "0":
            return 0.0
        try:
            seconds = float(text)
        except ValueError:
            if not _DURATION.fullmatch(text):
                raise ConfigError(f"invalid duration {value!r}") from None
            seconds = sum(
                float(number) * _UNIT_SECONDS[unit]
                for number, unit in _COMPONENT.findall(text)
            )
    if not math.isfinite(seconds):
        raise ConfigError(f"invalid duration {value!r}")
    if seconds < 0:
        raise ConfigError(f"duration {value!r} must not be negative")
    if seconds > MAX_DURATION:
        raise ConfigError(f"duration {value!r} is too large")
    return seconds


@dataclass(frozen=True)
class RefreshConfig:
    """Options for one IP range source.

    Attributes
    ----------
    url:
        Endpoint serving one CIDR expression per line.
    interval:
        Seconds between refresh cycles.  ``0`` means "use the default".
    timeout:
        Upper bound in seconds for a single fetch.  ``0`` means no timeout.
    """

    url: str = DEFAULT_URL
    interval: float = 0.0
    timeout: float = 0.0

    def with_defaults(self) -> "RefreshConfig":
        """Return a validated copy with unset fields filled in."""

        if not self.url:
            raise ConfigError("source url must not be empty")
        if self.interval < 0:
            raise ConfigError(f"interval must not be negative, got {self.interval}")
        if self.timeout < 0:
            raise ConfigError(f"timeout must not be negative, got {self.timeout}")
        for name in ("interval", "timeout"):
            value = getattr(self, name)
            if not math.isfinite(value) or value > MAX_DURATION:
                raise ConfigError(f"{name} must not exceed {MAX_DURATION:.0f}s")

        interval = self.interval or DEFAULT_INTERVAL
        return replace(self, interval=float(interval), timeout=float(self.timeout))

    @property
    def has_timeout(self) -> bool:
        return self.timeout > 0
