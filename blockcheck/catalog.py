#!/usr/bin/env python3
"""
catalog.py - Known Filter Lists and Identifier Lookup

The catalog groups known filter lists into three named, ordered catalogs:

    default  - lists enabled out of the box
    regions  - language/region specific lists
    malware  - malware and malvertising domain lists

An identifier (UUID) is resolved by searching the catalogs in that exact
priority order; the first match wins. Lookup never touches the network or
the filesystem: the catalog data is loaded once up front and injected.

Catalog file format (JSON):
    {
      "default": [{"uuid": "...", "url": "https://...", "title": "..."}],
      "regions": [...],
      "malware": [...]
    }
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from blockcheck.errors import FilesystemError, NotFoundError


#: Bundled catalog shipped with the package
CATALOG_FILE: Final[Path] = Path(__file__).with_name("catalog.json")

#: Search order for identifier resolution
CATALOG_ORDER: Final[tuple[str, ...]] = ("default", "regions", "malware")


# =============================================================================
# DATA STRUCTURES
# =============================================================================

@dataclass(frozen=True)
class ListDescriptor:
    """
    Metadata for one known filter list.

    Attributes:
        identifier: Unique key of the list (UUID)
        url: Where the list is downloaded from
        title: Human readable name
        catalog: Name of the catalog the list belongs to
    """
    identifier: str
    url: str
    title: str = ""
    catalog: str = ""


@dataclass(frozen=True)
class Catalog:
    """Three named, ordered sequences of list descriptors."""
    default: tuple[ListDescriptor, ...] = ()
    regions: tuple[ListDescriptor, ...] = ()
    malware: tuple[ListDescriptor, ...] = ()

    def resolve(self, identifier: str) -> ListDescriptor:
        """
        Resolve an identifier to its list descriptor.

        Searches ``default``, then ``regions``, then ``malware``.

        Raises:
            NotFoundError: If no catalog contains the identifier

        Example:
            >>> catalog.resolve("67F880F5-7602-4042-8A3D-01481FD7437A").title
            'EasyList'
        """
        for name in CATALOG_ORDER:
            for descriptor in getattr(self, name):
                if descriptor.identifier == identifier:
                    return descriptor
        raise NotFoundError(f"No list found for UUID {identifier}")

    def default_urls(self) -> list[str]:
        """URLs of the default catalog, in catalog order."""
        return [descriptor.url for descriptor in self.default]

    @classmethod
    def from_dict(cls, data: dict) -> Catalog:
        """Build a catalog from its JSON mapping; missing catalogs are empty."""
        if not isinstance(data, dict):
            raise ValueError("Catalog must be a JSON object with default/regions/malware")

        groups: dict[str, tuple[ListDescriptor, ...]] = {}
        for name in CATALOG_ORDER:
            items = data.get(name, [])
            if not isinstance(items, list):
                raise ValueError(f"Catalog '{name}' must be a list")
            groups[name] = tuple(_parse_item(item, name) for item in items)
        return cls(**groups)


def _parse_item(item: object, catalog: str) -> ListDescriptor:
    if not isinstance(item, dict) or "uuid" not in item or "url" not in item:
        raise ValueError(f"Invalid entry in catalog '{catalog}': {item!r}")
    return ListDescriptor(
        identifier=str(item["uuid"]),
        url=str(item["url"]),
        title=str(item.get("title", "")),
        catalog=catalog,
    )


def load_catalog(path: str | Path | None = None) -> Catalog:
    """
    Load a catalog from a JSON file.

    Args:
        path: Catalog file, or None for the bundled catalog

    Raises:
        FilesystemError: If the file cannot be read
        ValueError: If the JSON is malformed
    """
    catalog_path = Path(path) if path is not None else CATALOG_FILE
    try:
        with open(catalog_path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Malformed catalog {catalog_path}: {e}") from e
    except OSError as e:
        raise FilesystemError(f"Cannot read catalog {catalog_path}: {e.strerror or e}") from e
    return Catalog.from_dict(data)
