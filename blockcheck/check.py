#!/usr/bin/env python3
"""
check.py - Check URLs Against Adblock Rules

Builds a matching client from a single source and classifies requests.

Usage:
    Basic check of a URL against the default lists:
        python -m blockcheck.check --host www.cnet.com --location https://s0.2mdn.net/instream/html5/ima3.js
    With a particular resource type:
        python -m blockcheck.check --host www.example.org --location https://www.example.org/js/analytics.js -O script
    Against a known list:
        python -m blockcheck.check --uuid 03F91310-9244-40FA-BCF6-DA31B832F34D --host slashdot.org --location https://s.yimg.jp/images/ds/ult/toppage/rapidjp-1.0.0.js
    From a snapshot:
        python -m blockcheck.check --dat ./out/rules.dat --host example.net --location https://example.net
    From a list URL:
        python -m blockcheck.check --http https://easylist.to/easylist/easylist.txt --host example.net --location http://example.net/adbanner.gif
    A list of sites:
        python -m blockcheck.check --host www.cnet.com --list ./sitelist.txt
    Parsing stats for a known list:
        python -m blockcheck.check --uuid 67F880F5-7602-4042-8A3D-01481FD7437A --stats

Flow:
    1. Validate inputs (no I/O happens when they are insufficient)
    2. Select the source: --uuid > --dat > --http > --filter > --filter-path > default lists
    3. Build the client
    4. Report stats, or run a single check, or check a site list
    5. Optionally write the client's snapshot (--output)
"""
from __future__ import annotations

import argparse
import asyncio
import sys
import traceback
from pathlib import Path

import aiofiles

from blockcheck.catalog import Catalog, load_catalog
from blockcheck.client import BatchResult, CheckQuery, Client, write_snapshot
from blockcheck.downloader import DEFAULT_CONCURRENCY, DEFAULT_TIMEOUT, FetchConfig
from blockcheck.errors import (
    CheckError,
    DeserializationError,
    FilesystemError,
    UsageError,
    exit_code_for,
)
from blockcheck.report import (
    Sink,
    console,
    console_error,
    print_batch_summary,
    print_match,
    print_stats,
)
from blockcheck.sources import (
    CatalogIdentifier,
    LocalFile,
    RawRules,
    RemoteList,
    SnapshotFile,
    SourceSpec,
    build_client,
)
from blockcheck.transforms import TransformRegistry

DEFAULT_FILTER_OPTION = "image"

USAGE = "Usage: python -m blockcheck.check --location <location> --host <host> [--uuid <uuid>]"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Check URLs against adblock rules")
    parser.add_argument("-u", "--uuid", help="UUID of the list to use")
    parser.add_argument("-d", "--dat", help="File path of a serialized rules snapshot")
    parser.add_argument("-f", "--filter", action="append", help="Filter rules (repeatable)")
    parser.add_argument("-F", "--filter-path", action="append", help="Filter rules file path (repeatable)")
    parser.add_argument("-w", "--http", action="append", help="Filter list URL (repeatable)")
    parser.add_argument("-H", "--host", help="Host of the page that is being loaded")
    parser.add_argument("-l", "--location", help="URL to use for the check")
    parser.add_argument("-o", "--output", help="Optionally saves a snapshot file")
    parser.add_argument("-L", "--list", help="Filename for list of sites to check")
    parser.add_argument("-s", "--stats", action="store_true", help="Output parsing stats")
    parser.add_argument(
        "-O", "--filter-option", default=DEFAULT_FILTER_OPTION, help="Resource type to check as"
    )
    parser.add_argument("--catalog", help="JSON catalog of known lists (default: bundled)")
    parser.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT, help="Request timeout in seconds")
    parser.add_argument("--concurrency", type=int, default=DEFAULT_CONCURRENCY, help="Max concurrent downloads")
    return parser


def validate_args(args: argparse.Namespace) -> None:
    """
    Require --stats, or --host with --location or --list.

    Raises:
        UsageError: If neither combination is present
    """
    if args.stats:
        return
    if args.host and (args.location or args.list):
        return
    raise UsageError(USAGE)


def select_source(args: argparse.Namespace, catalog: Catalog, sink: Sink = console) -> SourceSpec:
    """Pick the one source to build the client from; first match wins."""
    if args.uuid:
        return CatalogIdentifier(args.uuid)
    if args.dat:
        return SnapshotFile(args.dat)
    if args.http:
        return RemoteList(tuple(args.http))
    if args.filter:
        return RawRules(tuple(args.filter))
    if args.filter_path:
        return LocalFile(tuple(args.filter_path))

    default_lists = catalog.default_urls()
    sink(f"defaultLists: {default_lists}")
    return RemoteList(tuple(default_lists))


async def read_site_list(path: str | Path) -> list[str]:
    """
    Read a site list, one site per line.

    Surrounding whitespace is stripped and blank lines are dropped.
    """
    try:
        async with aiofiles.open(path, encoding="utf-8-sig") as f:
            content = await f.read()
    except OSError as e:
        raise FilesystemError(f"Cannot read site list {path}: {e.strerror or e}") from e
    return [line.strip() for line in content.splitlines() if line.strip()]


def check_site_list(client: Client, sites: list[str], host: str, resource_type: str) -> BatchResult:
    """Check each site from ``host`` in order."""
    return client.check_many(CheckQuery(site, host, resource_type) for site in sites)


async def run(
    args: argparse.Namespace,
    catalog: Catalog | None = None,
    registry: TransformRegistry | None = None,
    sink: Sink = console,
) -> Client:
    """
    Run one invocation: build the client, query it, optionally persist it.

    Returns:
        The client that was built
    """
    validate_args(args)

    if catalog is None:
        catalog = load_catalog(args.catalog)
    config = FetchConfig(timeout=args.timeout, concurrency=args.concurrency)

    spec = select_source(args, catalog, sink)
    client = await build_client(spec, catalog, registry, config, sink)

    if args.stats:
        print_stats(client.parsing_stats, sink)
        return client

    if args.location:
        query = CheckQuery(args.location, args.host, args.filter_option)
        print_match(query, client.check(query), sink)
    else:
        sites = await read_site_list(args.list)
        result = check_site_list(client, sites, args.host, args.filter_option)
        print_batch_summary(result, sink)

    if args.output:
        written = await write_snapshot(client, args.output)
        sink(f"💾 Wrote {written:,} bytes to {args.output}")

    return client


def main(
    argv: list[str] | None = None,
    sink: Sink = console,
    error_sink: Sink = console_error,
) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        asyncio.run(run(args, sink=sink))
        return 0

    except (CheckError, DeserializationError) as e:
        error_sink(f"❌ ERROR: {e}")
        return exit_code_for(e)

    except Exception as e:
        error_sink(f"❌ ERROR: {e}")
        traceback.print_exc()
        return exit_code_for(e)


if __name__ == "__main__":
    sys.exit(main())
