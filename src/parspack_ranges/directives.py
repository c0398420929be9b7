"""Parser for the ``parspack { ... }`` configuration block.

The grammar is intentionally small::

    parspack [{
        interval <duration>
        timeout  <duration>
    }]

Directives take exactly one argument on the same line.  Anything else is a
:class:`~parspack_ranges.config.ConfigError`.
"""

from __future__ import annotations

import shlex
from dataclasses import replace
from typing import List, Tuple

from .config import ConfigError, RefreshConfig, parse_duration

Token = Tuple[int, str]

DIRECTIVES = ("interval", "timeout")


def _tokenize(text: str) -> List[Token]:
    tokens: List[Token] = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        try:
            words = shlex.split(line, comments=True)
        except ValueError as exc:
            raise ConfigError(f"line {lineno}: {exc}") from exc
        tokens.extend((lineno, word) for word in words)
    return tokens


def parse_block(
    text: str,
    name: str = "parspack",
    base: RefreshConfig = RefreshConfig(),
) -> RefreshConfig:
    """Parse ``text`` into a :class:`RefreshConfig` derived from ``base``."""

    tokens = _tokenize(text)
    if not tokens:
        raise ConfigError(f"expected '{name}' block, got empty input")

    head_line, head = tokens[0]
    if head != name:
        raise ConfigError(f"line {head_line}: expected '{name}', got '{head}'")

    config = base
    pos = 1
    if pos < len(tokens) and tokens[pos][1] != "{":
        lineno, word = tokens[pos]
        raise ConfigError(f"line {lineno}: unexpected argument '{word}'")

    if pos < len(tokens):
        open_line = tokens[pos][0]
        pos += 1
        while True:
            if pos >= len(tokens):
                raise ConfigError(f"line {open_line}: unclosed '{{' block")
            lineno, directive = tokens[pos]
            if directive == "}":
                pos += 1
                break
            pos += 1
            args = []
            while (
                pos < len(tokens)
                and tokens[pos][0] == lineno
                and tokens[pos][1] != "}"
            ):
                args.append(tokens[pos][1])
                pos += 1
            config = _apply_directive(config, lineno, directive, args)

    if pos < len(tokens):
        lineno, word = tokens[pos]
        raise ConfigError(f"line {lineno}: unexpected token '{word}' after block")

    return config


def _apply_directive(
    config: RefreshConfig, lineno: int, directive: str, args: List[str]
) -> RefreshConfig:
    if directive not in DIRECTIVES:
        raise ConfigError(f"line {lineno}: unrecognized directive '{directive}'")
    if len(args) != 1:
        raise ConfigError(
            f"line {lineno}: '{directive}' takes exactly one argument, got {len(args)}"
        )
    try:
        seconds = parse_duration(args[0])
    except ConfigError as exc:
        raise ConfigError(f"line {lineno}: invalid {directive} duration: {exc}") from exc
    return replace(config, **{directive: seconds})
