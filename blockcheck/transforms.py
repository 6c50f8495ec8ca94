"""
transforms.py - Per-List Text Transforms

Some lists are not published in filter syntax. A transform rewrites the raw
download into rules before it reaches the cleaner. Lists without a registered
transform pass through unchanged.
"""
from __future__ import annotations

from typing import Callable, Final

Transform = Callable[[str], str]

#: Number of header lines in plain domain lists
DOMAIN_LIST_HEADER_LINES: Final[int] = 4

#: Disconnect malvertising: plain domains after a 4-line header
DISCONNECT_MALVERTISING: Final[str] = "FBB430E8-3910-4761-9373-840FC3B43FF2"


def identity(text: str) -> str:
    """Return ``text`` unchanged."""
    return text


def prefix_domains(text: str) -> str:
    """
    Turn a domain-per-line list into domain anchored rules.

    Drops the header and prefixes every remaining line with ``||``.
    Blank lines are skipped: a bare ``||`` matches every request.

    Example:
        >>> prefix_domains("h1\\nh2\\nh3\\nh4\\nads.example\\ntrack.example\\n")
        '||ads.example\\n||track.example'
    """
    lines = text.split("\n")[DOMAIN_LIST_HEADER_LINES:]
    return "\n".join(f"||{line.strip()}" for line in lines if line.strip())


class TransformRegistry:
    """Maps list identifiers to the transform applied to their content."""

    def __init__(self, entries: dict[str, Transform] | None = None) -> None:
        self._entries: dict[str, Transform] = dict(entries or {})

    def register(self, identifier: str, transform: Transform) -> None:
        """Add or replace the transform for ``identifier``."""
        self._entries[identifier] = transform

    def lookup(self, identifier: str) -> Transform:
        """Return the transform for ``identifier``, or ``identity``."""
        return self._entries.get(identifier, identity)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._entries


def default_registry() -> TransformRegistry:
    """Registry with the transforms needed by the bundled catalog."""
    return TransformRegistry({DISCONNECT_MALVERTISING: prefix_domains})
