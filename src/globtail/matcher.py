"""Exclude rules compiled from wildcard strings.

Wildcards here are narrower than shell globs: ``*`` stands for one or more
characters and ``?`` for exactly one. The compiled rule is unanchored, so it
matches when the wildcard occurs anywhere in the path.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass

_WILDCARDS = {".": r"\.", "*": ".+", "?": "."}


def wildcard_to_regex(wildcard: str) -> str:
    """Translate a wildcard into regular expression source.

    Args:
        wildcard: Any string; only ``.``, ``*`` and ``?`` are special.

    Returns:
        Regex source suitable for ``re.compile``.
    """
    return "".join(_WILDCARDS.get(ch, re.escape(ch)) for ch in wildcard)


@dataclass(frozen=True)
class ExcludeRule:
    """A compiled exclude wildcard."""

    wildcard: str
    """Wildcard the rule was compiled from."""

    regex: re.Pattern
    """Compiled, unanchored, case-sensitive pattern."""

    def matches(self, path: str) -> bool:
        return self.regex.search(path) is not None

    def __str__(self) -> str:
        return self.wildcard


def compile_exclude(wildcard: str) -> ExcludeRule:
    """Compile ``wildcard`` into an ExcludeRule. Never fails."""
    return ExcludeRule(wildcard=wildcard, regex=re.compile(wildcard_to_regex(wildcard)))


def compile_excludes(wildcards: Iterable[str]) -> list[ExcludeRule]:
    return [compile_exclude(w) for w in wildcards]


def first_match(path: str, rules: Iterable[ExcludeRule]) -> ExcludeRule | None:
    """Return the first rule excluding ``path``, or None if it is accepted."""
    for rule in rules:
        if rule.matches(path):
            return rule
    return None
