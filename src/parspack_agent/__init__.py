"""Standalone runner for ParsPack IP range sources."""

from .config import AgentConfig, SourceConfig, load_config  # noqa: F401

__all__ = [
    "AgentConfig",
    "SourceConfig",
    "load_config",
]
