"""YAML configuration loader for the ParsPack agent."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Sequence

import yaml

from parspack_ranges import MODULE_ID
from parspack_ranges.config import DEFAULT_URL, ConfigError, RefreshConfig, parse_duration


@dataclass
class SourceConfig:
    module: str
    refresh: RefreshConfig


@dataclass
class AgentConfig:
    sources: Sequence[SourceConfig] = field(default_factory=list)


def _parse_source(entry: dict) -> SourceConfig:
    if not isinstance(entry, dict):
        raise ConfigError("each source entry must be a mapping")

    unknown = set(entry) - {"module", "url", "interval", "timeout"}
    if unknown:
        raise ConfigError(f"unknown source option(s): {', '.join(sorted(unknown))}")

    url = entry.get("url", DEFAULT_URL)
    if not isinstance(url, str):
        raise ConfigError(f"source url must be a string, got {url!r}")
    module = entry.get("module", MODULE_ID)
    if not isinstance(module, str):
        raise ConfigError(f"source module must be a string, got {module!r}")

    refresh = RefreshConfig(
        url=url,
        interval=parse_duration(entry.get("interval", 0)),
        timeout=parse_duration(entry.get("timeout", 0)),
    ).with_defaults()
    return SourceConfig(module=module, refresh=refresh)


def _parse_sources(entries: Iterable[dict]) -> List[SourceConfig]:
    return [_parse_source(entry) for entry in entries]


def load_config(path: Path) -> AgentConfig:
    data = yaml.safe_load(Path(path).read_text())
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("Agent configuration must be a mapping")

    sources_section = data.get("sources")
    if sources_section is None:
        return AgentConfig(sources=[SourceConfig(MODULE_ID, RefreshConfig().with_defaults())])
    if not isinstance(sources_section, list):
        raise ConfigError("'sources' section must be a list")

    return AgentConfig(sources=_parse_sources(sources_section))
