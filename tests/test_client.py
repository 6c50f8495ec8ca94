"""Tests for blockcheck.client engine wrapper and snapshot I/O."""

# pylint: disable=missing-function-docstring
from asyncio import run
from pathlib import Path

from pytest import raises

from blockcheck.cleaner import sanitize
from blockcheck.client import CheckQuery, Client, ParsingStats, read_snapshot, write_snapshot
from blockcheck.errors import DeserializationError, FilesystemError
from blockcheck.transforms import prefix_domains

RULES = "\n".join(
    [
        "||ads.example.com^",
        "||tracker.example.net^$script",
        "/banner/ad-",
        "example.com##.sponsored",
        "! comment",
        "",
    ]
)

QUERIES = [
    CheckQuery("https://ads.example.com/banner.js", "example.com", "script"),
    CheckQuery("https://example.com/app.js", "example.com", "script"),
    CheckQuery("https://tracker.example.net/t.js", "news.example.org", "script"),
    CheckQuery("https://tracker.example.net/pixel.gif", "news.example.org", "image"),
    CheckQuery("https://cdn.example.org/banner/ad-1.png", "example.org", "image"),
]


def test_raw_rule_matches_and_skips():
    client = Client.from_text("||ads.example.com^")

    assert client.check(CheckQuery("https://ads.example.com/banner.js", "example.com", "script"))
    assert not client.check(CheckQuery("https://example.com/app.js", "example.com", "script"))


def test_snapshot_round_trip_answers_identically():
    client = Client.from_text(RULES)
    restored = Client.from_snapshot(client.serialize())

    assert [restored.check(q) for q in QUERIES] == [client.check(q) for q in QUERIES]
    assert client.check(QUERIES[0])


def test_malformed_snapshot_raises_engine_error():
    with raises(DeserializationError):
        Client.from_snapshot(b"definitely not a snapshot")


def test_parsing_stats_from_text():
    stats = Client.from_text(RULES).parsing_stats

    assert stats == ParsingStats(
        total_lines=6,
        network_rules=3,
        cosmetic_rules=1,
        exception_rules=0,
        ignored_lines=2,
        from_snapshot=False,
    )


def test_parsing_stats_from_snapshot():
    client = Client.from_snapshot(Client.from_text(RULES).serialize())

    assert client.parsing_stats.from_snapshot
    assert client.parsing_stats.total_lines == 0


def test_check_many_counts_every_query():
    result = Client.from_text(RULES).check_many(QUERIES)

    assert result.matched + result.skipped == len(QUERIES)
    assert result.elapsed >= 0


def test_origin_url_is_synthesized_from_host():
    assert CheckQuery("https://a.example/x", "b.example").origin_url == "https://b.example"
    assert CheckQuery("https://a.example/x", "b.example").resource_type == "image"


def test_write_and_read_snapshot(tmp_path: Path):
    client = Client.from_text(RULES)
    path = tmp_path / "out" / "rules.dat"

    written = run(write_snapshot(client, path))

    assert written == path.stat().st_size
    assert run(read_snapshot(path)) == client.serialize()


def test_read_missing_snapshot(tmp_path: Path):
    with raises(FilesystemError):
        run(read_snapshot(tmp_path / "missing.dat"))


def test_domain_list_with_trailing_newline_only_blocks_listed_domains():
    domains = "# Disconnect\n# License\n# Contact\n#\nads.example.com\ntrack.example.net\n"
    client = Client.from_text(sanitize(prefix_domains(domains)))

    assert client.check(CheckQuery("https://ads.example.com/x.js", "news.example", "script"))
    assert not client.check(
        CheckQuery("https://unrelated.example.org/x.js", "news.example", "script")
    )
