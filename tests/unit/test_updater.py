"""Tests for the per-route upsert."""

from __future__ import annotations

import pytest

from api_change_ledger.exceptions import InvalidEntryError
from api_change_ledger.processing.updater import update_route, upsert_route
from conftest import make_record

NEW_ENTRIES = [
    {"change": "removed", "target": "request", "breaking": True, "date": "2024-04-01"},
]


def _key_b(ledger):
    return [r for r in ledger if r.key != ("openai", "chat/completions", "POST")]


def test_upsert_replaces_only_the_key_group(ledger) -> None:
    result = upsert_route(ledger, "openai", "chat/completions", "POST", NEW_ENTRIES)

    group = [r for r in result if r.key == ("openai", "chat/completions", "POST")]
    assert len(group) == 1
    assert group[0].change == "removed"
    assert group[0].breaking is True
    assert _key_b(result) == _key_b(ledger)


def test_upsert_keeps_date_order(ledger) -> None:
    result = upsert_route(ledger, "anthropic", "messages", "POST", [
        {"change": "changed", "target": "response", "date": "2023-11-01"},
        {"change": "added", "target": "route", "date": "2024-05-01"},
    ])
    assert [r.date for r in result] == sorted((r.date for r in result), reverse=True)
    assert result[0].date == "2024-05-01"


def test_upsert_is_idempotent(ledger) -> None:
    once = upsert_route(ledger, "openai", "chat/completions", "POST", NEW_ENTRIES)
    twice = upsert_route(once, "openai", "chat/completions", "POST", NEW_ENTRIES)
    assert once == twice


def test_update_route_persists(store, ledger) -> None:
    store.write(ledger)

    result = update_route(store, "openai", "chat/completions/post.json", NEW_ENTRIES)

    assert result.updated is True
    assert result.removed == 2
    assert result.inserted == 1
    assert result.total == 3
    assert store.read() == upsert_route(ledger, "openai", "chat/completions", "POST", NEW_ENTRIES)


def test_update_new_key_appends(store, ledger) -> None:
    store.write(ledger)
    result = update_route(store, "mistral", "v1/embeddings/post.yml", NEW_ENTRIES)
    assert result.removed == 0
    assert len(store.read()) == len(ledger) + 1


def test_empty_entries_is_a_noop(store, ledger) -> None:
    store.write(ledger)
    before = store.path.read_bytes()

    result = update_route(store, "openai", "chat/completions/post.json", [])

    assert result.updated is False
    assert (result.route, result.method) == ("chat/completions", "POST")
    assert store.path.read_bytes() == before


def test_invalid_entry_rejects_before_write(store, ledger) -> None:
    store.write(ledger)
    before = store.path.read_bytes()

    with pytest.raises(InvalidEntryError):
        update_route(store, "openai", "chat/completions/post.json", [
            {"change": "added", "target": "response", "date": "2024-06-01"},
            {"target": "response", "date": "2024-06-02"},
        ])

    assert store.path.read_bytes() == before


def test_update_without_existing_ledger_starts_empty(store) -> None:
    update_route(store, "openai", "chat/completions/post.json", NEW_ENTRIES)
    assert store.read() == [
        make_record(change="removed", target="request", breaking=True, date="2024-04-01"),
    ]
