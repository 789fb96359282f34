"""Tests for the full ledger rebuild."""

from __future__ import annotations

import json

import pytest

from api_change_ledger.exceptions import DescriptorError, InvalidEntryError, LedgerError
from api_change_ledger.processing.builder import build_ledger, discover_descriptors, seed_ledger
from conftest import write_descriptor


def test_discovery_derives_key_from_location(descriptor_tree) -> None:
    found = [(p, r, m) for p, r, m, _ in discover_descriptors(descriptor_tree)]
    assert found == [
        ("anthropic", "messages", "POST"),
        ("anthropic", "models", "GET"),
        ("openai", "chat/completions", "POST"),
    ]


def test_descriptor_outside_provider_dir_is_skipped(tmp_path) -> None:
    write_descriptor(tmp_path, "post.yml", "- change: added\n  target: route\n  date: 2024-01-01\n")
    assert list(discover_descriptors(tmp_path)) == []


def test_build_emits_every_entry_sorted(descriptor_tree) -> None:
    ledger = build_ledger(descriptor_tree)

    assert [(r.provider, r.route_label, r.date) for r in ledger] == [
        ("openai", "POST /chat/completions", "2024-03-01"),
        ("anthropic", "POST /messages", "2024-02-15"),
        ("openai", "POST /chat/completions", "2024-01-10"),
    ]
    first = ledger[0]
    assert first.breaking is True
    assert first.deprecated is False
    assert first.note == "Removed the functions parameter"
    assert ledger[1].doc_only is True


def test_sort_invariant_holds(descriptor_tree) -> None:
    ledger = build_ledger(descriptor_tree)
    for current, following in zip(ledger, ledger[1:]):
        assert current.date >= following.date


def test_missing_root_raises(tmp_path) -> None:
    with pytest.raises(LedgerError):
        build_ledger(tmp_path / "nope")


def test_malformed_descriptor_aborts_build(descriptor_tree, store) -> None:
    write_descriptor(descriptor_tree, "openai/embeddings/post.yml", "- change: [broken\n")
    with pytest.raises(DescriptorError):
        seed_ledger(descriptor_tree, store)
    assert not store.exists()


def test_invalid_entry_aborts_build(descriptor_tree) -> None:
    write_descriptor(descriptor_tree, "openai/embeddings/post.yml", "- change: added\n  date: 2024-01-01\n")
    with pytest.raises(InvalidEntryError):
        build_ledger(descriptor_tree)


def test_seed_writes_pretty_json_with_trailing_newline(descriptor_tree, store) -> None:
    assert seed_ledger(descriptor_tree, store) == 3

    text = store.path.read_text(encoding="utf-8")
    assert text.endswith("]\n")
    assert text.startswith("[\n  {\n")
    data = json.loads(text)
    assert list(data[0]) == [
        "provider", "route", "method", "change", "target",
        "breaking", "deprecated", "doc_only", "note", "date",
    ]
    assert "note" not in data[1]


def test_seed_is_idempotent(descriptor_tree, store) -> None:
    seed_ledger(descriptor_tree, store)
    first = store.path.read_bytes()
    seed_ledger(descriptor_tree, store)
    assert store.path.read_bytes() == first


def test_seed_replaces_previous_ledger(descriptor_tree, store) -> None:
    store.path.parent.mkdir(parents=True)
    store.path.write_text("[]\n", encoding="utf-8")
    seed_ledger(descriptor_tree, store)
    assert len(store.read()) == 3
