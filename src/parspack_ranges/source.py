"""ParsPack CDN IP range source with provision/cleanup lifecycle."""

from __future__ import annotations

import enum
import logging
from threading import Event
from typing import Any, Optional, Tuple

from .config import RefreshConfig
from .fetcher import fetch_text
from .prefixes import Prefix
from .refresher import Fetch, RangeRefresher, refresh_once
from .store import SnapshotStore

LOG = logging.getLogger(__name__)

MODULE_ID = "http.ip_sources.parspack"


class LifecycleState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    RUNNING = "running"
    STOPPED = "stopped"


class ParspackIPRange:
    """Keep an up-to-date list of ParsPack CDN prefixes.

    The host calls :meth:`provision` once to start the background refresher
    and :meth:`cleanup` once on shutdown.  Request handlers may call
    :meth:`get_ip_ranges` from any thread at any time; it returns an empty
    tuple until the first successful fetch.
    """

    module_id = MODULE_ID

    def __init__(
        self,
        config: Optional[RefreshConfig] = None,
        *,
        store: Optional[SnapshotStore] = None,
        fetch: Fetch = fetch_text,
    ) -> None:
        self._config = config or RefreshConfig()
        self._store = store or SnapshotStore()
        self._fetch = fetch
        self._stop_event: Optional[Event] = None
        self._refresher: Optional[RangeRefresher] = None
        self._state = LifecycleState.UNINITIALIZED

    @property
    def config(self) -> RefreshConfig:
        return self._config

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def store(self) -> SnapshotStore:
        return self._store

    def provision(self) -> None:
        """Fill in defaults and start refreshing in the background.

        Raises :class:`~parspack_ranges.config.ConfigError` for unusable
        settings, in which case nothing is started.
        """

        if self._state is not LifecycleState.UNINITIALIZED:
            raise RuntimeError(f"{self.module_id} already provisioned")

        self._config = self._config.with_defaults()
        self._stop_event = Event()
        self._refresher = RangeRefresher(
            self._config, self._store, self._stop_event, fetch=self._fetch
        )
        self._refresher.start()
        self._state = LifecycleState.RUNNING
        LOG.debug("provisioned %s for %s", self.module_id, self._config.url)

    def refresh(self) -> Tuple[Prefix, ...]:
        """Fetch once in the calling thread, without starting the refresher.

        Raises :class:`~parspack_ranges.fetcher.FetchError` on failure and
        :class:`~parspack_ranges.config.ConfigError` for unusable settings.
        """

        return refresh_once(self._config.with_defaults(), self._store, self._fetch)

    def get_ip_ranges(self, request: Any = None) -> Tuple[Prefix, ...]:
        """Return the current prefixes; ``request`` is accepted and ignored."""

        return self._store.read()

    def cleanup(self) -> None:
        """Ask the refresher to stop.  Safe to call repeatedly or unprovisioned."""

        if self._state is not LifecycleState.RUNNING:
            return
        if self._stop_event is not None:
            self._stop_event.set()
        self._state = LifecycleState.STOPPED
        LOG.debug("stop requested for %s", self.module_id)

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the refresher thread to exit; ``True`` once it has."""

        if self._refresher is None:
            return True
        self._refresher.join(timeout)
        return not self._refresher.is_alive()
