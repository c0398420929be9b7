"""Entry point for the standalone ParsPack range agent."""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from pathlib import Path
from threading import Event

from parspack_ranges import ConfigError, FetchError, SourceRegistry, default_registry

from .config import AgentConfig, load_config

LOG = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )


def _fetch_once(config: AgentConfig, registry: SourceRegistry) -> int:
    status = 0
    for source_cfg in config.sources:
        try:
            source = registry.create(source_cfg.module, source_cfg.refresh)
            prefixes = source.refresh()
        except (KeyError, ConfigError) as exc:
            LOG.error("invalid source %s: %s", source_cfg.module, exc)
            return 2
        except FetchError as exc:
            LOG.error("failed to fetch %s: %s", source_cfg.refresh.url, exc)
            status = 1
            continue
        for prefix in prefixes:
            print(prefix)
    return status


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run the ParsPack IP range agent")
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("/etc/parspack-ranges/agent.yaml"),
        help="Path to the agent configuration file",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Fetch every source once, print the prefixes and exit",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    try:
        config = load_config(args.config)
    except (OSError, ConfigError) as exc:
        LOG.error("could not load configuration %s: %s", args.config, exc)
        return 2

    registry = default_registry()
    if args.once:
        return _fetch_once(config, registry)

    sources = []
    try:
        for source_cfg in config.sources:
            source = registry.create(source_cfg.module, source_cfg.refresh)
            source.provision()
            sources.append(source)
    except (KeyError, ConfigError) as exc:
        LOG.error("failed to start sources: %s", exc)
        for source in sources:
            source.cleanup()
        return 2

    stop_event = Event()

    def _shutdown(signum, frame):
        LOG.info("received signal %s, shutting down", signum)
        stop_event.set()

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    try:
        while not stop_event.is_set():
            stop_event.wait(1.0)
    except KeyboardInterrupt:  # pragma: no cover - fallback if signal not set
        stop_event.set()

    for source in sources:
        source.cleanup()
        source.join(timeout=5.0)

    LOG.info("ParsPack range agent stopped")
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
