"""Tests for blockcheck.sources resolution of each source variant."""

# pylint: disable=missing-function-docstring
from asyncio import run
from pathlib import Path

from pytest import raises

from blockcheck import sources
from blockcheck.catalog import Catalog
from blockcheck.client import Client, write_snapshot
from blockcheck.downloader import Part
from blockcheck.errors import FilesystemError, NotFoundError
from blockcheck.transforms import DISCONNECT_MALVERTISING, identity, prefix_domains

CATALOG = Catalog.from_dict(
    {
        "default": [{"uuid": "EASY", "url": "https://lists.example/easylist.txt"}],
        "malware": [
            {"uuid": DISCONNECT_MALVERTISING, "url": "https://lists.example/malvertising.txt"}
        ],
    }
)


def _fake_aggregate(calls, text="||fetched.example^"):
    async def aggregate(parts, config=None, sink=None):
        del config, sink
        calls.append(list(parts))
        return text

    return aggregate


def test_raw_rules_are_joined_without_cleaning():
    spec = sources.RawRules(("||a.example^", "! kept", "||b.example^"))

    assert run(sources.resolve_source(spec, CATALOG)) == "||a.example^\n! kept\n||b.example^"


def test_local_files_are_aggregated_in_order(tmp_path: Path):
    first = tmp_path / "first.txt"
    second = tmp_path / "second.txt"
    first.write_text("! header\n||one.example^\n", encoding="utf-8")
    second.write_text("||two.example^\n", encoding="utf-8")
    spec = sources.LocalFile((str(first), str(second)))

    assert run(sources.resolve_source(spec, CATALOG)) == "||one.example^\n||two.example^"


def test_missing_local_file_fails_before_client_is_built(tmp_path: Path, monkeypatch):
    built = []
    monkeypatch.setattr(sources.Client, "from_text", classmethod(lambda cls, text: built.append(text)))
    spec = sources.LocalFile((str(tmp_path / "missing.txt"),))

    with raises(FilesystemError):
        run(sources.build_client(spec, CATALOG))
    assert not built


def test_remote_list_parts_carry_transform(monkeypatch):
    calls = []
    monkeypatch.setattr(sources, "aggregate", _fake_aggregate(calls))
    spec = sources.RemoteList(("https://a.example/1.txt", "https://a.example/2.txt"), prefix_domains)

    assert run(sources.resolve_source(spec, CATALOG)) == "||fetched.example^"
    assert calls == [
        [
            Part("https://a.example/1.txt", prefix_domains),
            Part("https://a.example/2.txt", prefix_domains),
        ]
    ]


def test_catalog_identifier_uses_registered_transform(monkeypatch):
    calls = []
    monkeypatch.setattr(sources, "aggregate", _fake_aggregate(calls))

    run(sources.resolve_source(sources.CatalogIdentifier(DISCONNECT_MALVERTISING), CATALOG))

    assert calls == [[Part("https://lists.example/malvertising.txt", prefix_domains)]]


def test_catalog_identifier_without_transform_uses_identity(monkeypatch):
    calls = []
    monkeypatch.setattr(sources, "aggregate", _fake_aggregate(calls))

    run(sources.resolve_source(sources.CatalogIdentifier("EASY"), CATALOG))

    assert calls == [[Part("https://lists.example/easylist.txt", identity)]]


def test_unknown_identifier_does_no_io(monkeypatch):
    calls = []
    monkeypatch.setattr(sources, "aggregate", _fake_aggregate(calls))

    with raises(NotFoundError):
        run(sources.resolve_source(sources.CatalogIdentifier("UNKNOWN"), CATALOG))
    assert not calls


def test_snapshot_file_resolves_to_client(tmp_path: Path):
    path = tmp_path / "rules.dat"
    run(write_snapshot(Client.from_text("||ads.example.com^"), path))

    resolved = run(sources.resolve_source(sources.SnapshotFile(path), CATALOG))

    assert isinstance(resolved, Client)
    assert resolved.parsing_stats.from_snapshot


def test_build_client_from_raw_rules():
    client = run(sources.build_client(sources.RawRules(("||ads.example.com^",)), CATALOG))

    assert isinstance(client, Client)
    assert client.parsing_stats.network_rules == 1


def test_unsupported_source_is_rejected():
    with raises(TypeError):
        run(sources.resolve_source("||a.example^", CATALOG))
