"""
sources.py - Source Descriptions and Resolution

A run builds its ruleset from exactly one source. The source is one of the
variants below; ``resolve_source()`` turns it into rule text, or directly
into a client for snapshots.

    RawRules           rules given literally, joined as-is
    SnapshotFile       serialized engine, restored without parsing
    RemoteList         one or more list URLs, fetched concurrently
    LocalFile          one or more rule files, read in order
    CatalogIdentifier  a known list, looked up by UUID
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Union

from blockcheck.catalog import Catalog
from blockcheck.client import Client, read_snapshot
from blockcheck.downloader import FetchConfig, Part, aggregate
from blockcheck.report import Sink, console
from blockcheck.transforms import Transform, TransformRegistry, default_registry


@dataclass(frozen=True)
class RawRules:
    rules: tuple[str, ...]


@dataclass(frozen=True)
class SnapshotFile:
    path: str | Path


@dataclass(frozen=True)
class RemoteList:
    urls: tuple[str, ...]
    transform: Transform | None = None


@dataclass(frozen=True)
class LocalFile:
    paths: tuple[str, ...]


@dataclass(frozen=True)
class CatalogIdentifier:
    identifier: str


SourceSpec = Union[RawRules, SnapshotFile, RemoteList, LocalFile, CatalogIdentifier]


async def resolve_source(
    spec: SourceSpec,
    catalog: Catalog,
    registry: TransformRegistry | None = None,
    config: FetchConfig | None = None,
    sink: Sink = console,
) -> str | Client:
    """
    Resolve a source into rule text, or a ready client for snapshots.

    Raises:
        NotFoundError: If a catalog identifier is unknown
        FilesystemError: If a file cannot be read
        NetworkError: If a list download fails
        adblock.DeserializationError: If a snapshot is malformed
    """
    if isinstance(spec, RawRules):
        return "\n".join(spec.rules)

    if isinstance(spec, SnapshotFile):
        return Client.from_snapshot(await read_snapshot(spec.path))

    if isinstance(spec, LocalFile):
        parts = [Part(str(path), remote=False) for path in spec.paths]
        return await aggregate(parts, config, sink)

    if isinstance(spec, RemoteList):
        parts = [Part(url, spec.transform) for url in spec.urls]
        return await aggregate(parts, config, sink)

    if isinstance(spec, CatalogIdentifier):
        descriptor = catalog.resolve(spec.identifier)
        transform = (registry or default_registry()).lookup(spec.identifier)
        return await resolve_source(
            RemoteList((descriptor.url,), transform), catalog, registry, config, sink
        )

    raise TypeError(f"Unsupported source: {spec!r}")


async def build_client(
    spec: SourceSpec,
    catalog: Catalog,
    registry: TransformRegistry | None = None,
    config: FetchConfig | None = None,
    sink: Sink = console,
) -> Client:
    """Resolve ``spec`` and build a client from it."""
    resolved = await resolve_source(spec, catalog, registry, config, sink)
    if isinstance(resolved, Client):
        return resolved
    return Client.from_text(resolved)
