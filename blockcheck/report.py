"""
report.py - Diagnostic Output

All user-visible output goes through a sink: any callable taking one line of
text. The console sinks print to stdout/stderr; tests pass ``list.append``.
"""
from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from blockcheck.client import BatchResult, CheckQuery, ParsingStats

Sink = Callable[[str], None]


def console(message: str) -> None:
    print(message)


def console_error(message: str) -> None:
    print(message, file=sys.stderr)


def print_stats(stats: ParsingStats, sink: Sink = console) -> None:
    """Print the engine's parsing statistics."""
    sink(f"Parsing stats: {stats}")


def print_match(query: CheckQuery, matched: bool, sink: Sink = console) -> None:
    """Print the parameters and outcome of a single check."""
    sink(f"params: {query.target_url} {query.resource_type} {query.origin_host}")
    sink(f"Matches: {matched}")


def print_batch_summary(result: BatchResult, sink: Sink = console) -> None:
    """Print formatted summary of a site list check."""
    total = result.matched + result.skipped
    sink(f"⏱️  check: {result.elapsed * 1000:.3f}ms")
    sink(f"Matching: {result.matched}")
    sink(f"Skipped: {result.skipped}")
    sink(f"📊 {total:,} sites checked")
