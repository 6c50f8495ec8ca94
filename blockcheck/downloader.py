#!/usr/bin/env python3
"""
downloader.py - Concurrent List Fetching and Ordered Aggregation

Builds the rule text for the matching engine out of one or more parts. A part
is either a remote list (URL) or a local rule file, each with an optional
text transform.

For every part:
    1. Obtain raw content (HTTP GET or file read)
    2. Apply the part's transform
    3. Sanitize

The part texts are then joined with newlines, in INPUT order, and sanitized
once more. Remote parts are fetched concurrently, local parts are read one
after another; completion order never affects the result.

Failure handling:
    Any non-200 response or transport error fails the whole aggregation with
    NetworkError. On the first failure the sibling downloads still in flight
    are cancelled. There are no retries and no cached fallbacks.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import NamedTuple, Sequence

import aiofiles
import aiohttp

from blockcheck import __version__
from blockcheck.cleaner import sanitize
from blockcheck.errors import FilesystemError, NetworkError
from blockcheck.report import Sink, console
from blockcheck.transforms import Transform, identity


# Default configuration
DEFAULT_TIMEOUT = 30
DEFAULT_CONCURRENCY = 8
USER_AGENT = f"blockcheck/{__version__} (aiohttp/{aiohttp.__version__})"


@dataclass(frozen=True)
class FetchConfig:
    """Settings for remote list downloads."""
    timeout: float = DEFAULT_TIMEOUT
    concurrency: int = DEFAULT_CONCURRENCY
    user_agent: str = USER_AGENT


class Part(NamedTuple):
    """One unit of aggregation."""
    location: str
    transform: Transform | None = None
    remote: bool = True


# =============================================================================
# SINGLE PART
# =============================================================================

async def fetch_url(session: aiohttp.ClientSession, url: str, timeout: float) -> str:
    """
    Download a single URL and return its body as text.

    Raises:
        NetworkError: On a non-200 status, timeout or transport error
    """
    try:
        async with session.get(
            url,
            timeout=aiohttp.ClientTimeout(total=timeout),
            allow_redirects=True,
        ) as response:
            if response.status != 200:
                raise NetworkError(f"Error status code {response.status} returned for URL: {url}")
            content = await response.read()
            return content.decode(response.charset or "utf-8", errors="replace")
    except asyncio.TimeoutError as e:
        raise NetworkError(f"Request error for {url}: timed out after {timeout}s") from e
    except aiohttp.ClientError as e:
        raise NetworkError(f"Request error for {url}: {e}") from e


async def read_file(path: str) -> str:
    """
    Read a local rule file as text.

    Raises:
        FilesystemError: If the file cannot be read
    """
    try:
        async with aiofiles.open(path, encoding="utf-8-sig", errors="replace") as f:
            return await f.read()
    except OSError as e:
        raise FilesystemError(f"Cannot read {path}: {e.strerror or e}") from e


def prepare(raw: str, transform: Transform | None) -> str:
    """Apply a part's transform, then sanitize."""
    return sanitize((transform or identity)(raw))


# =============================================================================
# MULTIPLE PARTS
# =============================================================================

async def fetch_all(
    parts: Sequence[Part],
    config: FetchConfig,
    sink: Sink = console,
) -> list[str]:
    """
    Fetch remote parts concurrently; results are in the order of ``parts``.

    Wait for all, fail on the first error. Downloads still running when one
    fails are cancelled before the error propagates.
    """
    semaphore = asyncio.Semaphore(config.concurrency)

    async def fetch_with_semaphore(part: Part) -> str:
        async with semaphore:
            sink(f"{part.location}...")
            raw = await fetch_url(session, part.location, config.timeout)
        return prepare(raw, part.transform)

    connector = aiohttp.TCPConnector(limit=config.concurrency)
    headers = {"User-Agent": config.user_agent}
    async with aiohttp.ClientSession(connector=connector, headers=headers) as session:
        tasks = [asyncio.create_task(fetch_with_semaphore(part)) for part in parts]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            # Let cancelled downloads unwind before the session closes
            await asyncio.gather(*tasks, return_exceptions=True)
            raise


async def read_all(parts: Sequence[Part]) -> list[str]:
    """Read local parts sequentially, in order."""
    texts = []
    for part in parts:
        raw = await read_file(part.location)
        texts.append(prepare(raw, part.transform))
    return texts


async def aggregate(
    parts: Sequence[Part],
    config: FetchConfig | None = None,
    sink: Sink = console,
) -> str:
    """
    Fetch/read every part and join the sanitized texts in input order.

    The joined text is sanitized again, which relies on sanitize() being
    idempotent.
    """
    config = config or FetchConfig()
    remote = [part for part in parts if part.remote]
    fetched = iter(await fetch_all(remote, config, sink) if remote else [])

    texts = []
    for part in parts:
        if part.remote:
            texts.append(next(fetched))
        else:
            texts.extend(await read_all([part]))
    return sanitize("\n".join(texts))


async def fetch_list_text(
    url: str,
    transform: Transform | None = None,
    config: FetchConfig | None = None,
    sink: Sink = console,
) -> str:
    """Fetch one list and return its transformed, sanitized text."""
    return await aggregate([Part(url, transform)], config, sink)
