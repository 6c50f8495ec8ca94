"""
client.py - Matching Engine Client and Snapshot I/O

Wraps an ``adblock.Engine``. A client is built either from rule text or from
a snapshot previously written by ``write_snapshot()``; the snapshot bytes are
owned by the engine and never interpreted here.
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, NamedTuple

import adblock
import aiofiles

from blockcheck.cleaner import rule_kind
from blockcheck.errors import FilesystemError


class CheckQuery(NamedTuple):
    """One request to classify."""
    target_url: str
    origin_host: str
    resource_type: str = "image"

    @property
    def origin_url(self) -> str:
        return f"https://{self.origin_host}"


class BatchResult(NamedTuple):
    """Outcome of checking a site list."""
    matched: int
    skipped: int
    elapsed: float


@dataclass(frozen=True)
class ParsingStats:
    """
    Rule counts gathered while building a client.

    Clients restored from a snapshot report ``from_snapshot=True`` and zero
    counts, since the snapshot does not carry the original rule text.
    """
    total_lines: int = 0
    network_rules: int = 0
    cosmetic_rules: int = 0
    exception_rules: int = 0
    ignored_lines: int = 0
    from_snapshot: bool = False

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> ParsingStats:
        counts = {"network": 0, "cosmetic": 0, "exception": 0, "ignored": 0}
        total = 0
        for line in lines:
            total += 1
            counts[rule_kind(line)] += 1
        return cls(
            total_lines=total,
            network_rules=counts["network"],
            cosmetic_rules=counts["cosmetic"],
            exception_rules=counts["exception"],
            ignored_lines=counts["ignored"],
        )


class Client:
    """A compiled ruleset ready to answer match queries."""

    def __init__(self, engine: adblock.Engine, stats: ParsingStats) -> None:
        self._engine = engine
        self._stats = stats

    @classmethod
    def from_text(cls, text: str) -> Client:
        """
        Build a client from newline separated rules.

        Malformed rules are the engine's concern and never fail here.
        """
        lines = text.split("\n")
        filter_set = adblock.FilterSet()
        filter_set.add_filters(lines)
        return cls(adblock.Engine(filter_set), ParsingStats.from_lines(lines))

    @classmethod
    def from_snapshot(cls, buffer: bytes) -> Client:
        """
        Restore a client from snapshot bytes.

        Raises:
            adblock.DeserializationError: If the buffer is malformed
        """
        engine = adblock.Engine(adblock.FilterSet())
        engine.deserialize(buffer)
        return cls(engine, ParsingStats(from_snapshot=True))

    @property
    def parsing_stats(self) -> ParsingStats:
        return self._stats

    def check(self, query: CheckQuery) -> bool:
        """Return True if the request matches a blocking rule."""
        result = self._engine.check_network_urls(
            query.target_url,
            query.origin_url,
            query.resource_type,
        )
        return bool(result.matched)

    def check_many(self, queries: Iterable[CheckQuery]) -> BatchResult:
        """Check queries sequentially and count matches and skips."""
        matched = 0
        skipped = 0
        start = time.time()
        for query in queries:
            if self.check(query):
                matched += 1
            else:
                skipped += 1
        return BatchResult(matched, skipped, time.time() - start)

    def serialize(self) -> bytes:
        return bytes(self._engine.serialize())


# =============================================================================
# SNAPSHOT I/O
# =============================================================================

async def read_snapshot(path: str | Path) -> bytes:
    """
    Read a snapshot file verbatim.

    Raises:
        FilesystemError: If the file cannot be read
    """
    try:
        async with aiofiles.open(path, "rb") as f:
            return await f.read()
    except OSError as e:
        raise FilesystemError(f"Cannot read snapshot {path}: {e.strerror or e}") from e


async def write_snapshot(client: Client, path: str | Path) -> int:
    """
    Serialize ``client`` and write the bytes to ``path``.

    Returns:
        Number of bytes written
    """
    buffer = client.serialize()
    out_path = Path(path)
    try:
        out_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(out_path, "wb") as f:
            await f.write(buffer)
    except OSError as e:
        raise FilesystemError(f"Cannot write snapshot {path}: {e.strerror or e}") from e
    return len(buffer)
