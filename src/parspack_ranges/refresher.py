"""Background refresh loop for IP range sources."""

from __future__ import annotations

import logging
from threading import Event, Thread
from typing import Callable, Tuple

from .config import RefreshConfig
from .fetcher import FetchError, fetch_text
from .prefixes import Prefix, parse_prefixes
from .store import SnapshotStore

LOG = logging.getLogger(__name__)

Fetch = Callable[[str, float], str]


def refresh_once(
    config: RefreshConfig, store: SnapshotStore, fetch: Fetch = fetch_text
) -> Tuple[Prefix, ...]:
    """Fetch, parse and publish one snapshot into ``store``.

    Raises :class:`~parspack_ranges.fetcher.FetchError` when the fetch
    fails, in which case the store is left untouched.
    """

    text = fetch(config.url, config.timeout)
    prefixes = parse_prefixes(text)
    if not prefixes:
        LOG.warning("source %s returned no usable prefixes", config.url)
    snapshot = store.replace(prefixes)
    LOG.info("fetched %d prefixes from %s", len(snapshot), config.url)
    return snapshot


class RangeRefresher(Thread):
    """Fetch the CIDR list once at start, then every ``interval`` seconds.

    Each cycle runs to completion before the next wait begins, so a slow
    fetch only delays the following tick.  Failures leave the previous
    snapshot in place; the next tick is the retry.
    """

    def __init__(
        self,
        config: RefreshConfig,
        store: SnapshotStore,
        stop_event: Event,
        fetch: Fetch = fetch_text,
    ) -> None:
        super().__init__(daemon=True, name=f"range-refresher[{config.url}]")
        self._config = config
        self._store = store
        self._stop_event = stop_event
        self._fetch = fetch

    def run(self) -> None:
        LOG.info(
            "starting IP range refresher (url=%s, interval=%ss, timeout=%s)",
            self._config.url,
            self._config.interval,
            f"{self._config.timeout}s" if self._config.has_timeout else "none",
        )
        if not self._cycle(initial=True):
            LOG.warning("initial fetch failed; serving an empty prefix list")

        while not self._stop_event.wait(self._config.interval):
            self._cycle(initial=False)

        LOG.info("IP range refresher for %s stopped", self._config.url)

    def refresh(self) -> Tuple[Prefix, ...]:
        """Run one fetch-parse-replace cycle and return the new snapshot."""

        return refresh_once(self._config, self._store, self._fetch)

    def _cycle(self, *, initial: bool) -> bool:
        level = logging.WARNING if initial else logging.ERROR
        try:
            self.refresh()
            return True
        except FetchError as exc:
            LOG.log(level, "refresh cycle failed: %s", exc)
        except Exception:  # pragma: no cover - keep the loop alive
            LOG.exception("unexpected error during refresh cycle")
        return False
