"""Shared fixtures: ledger records, descriptor trees and a temporary store."""

from __future__ import annotations

from pathlib import Path

import pytest

from api_change_ledger.models import ChangeRecord
from api_change_ledger.processing.store import JsonLedgerStore


def make_record(
    provider: str = "openai",
    route: str = "chat/completions",
    method: str = "POST",
    change: str = "changed",
    target: str = "request",
    breaking: bool = False,
    doc_only: bool = False,
    date: str = "2024-01-01",
    note: str | None = None,
) -> ChangeRecord:
    return ChangeRecord(
        provider=provider,
        route=route,
        method=method,
        change=change,
        target=target,
        breaking=breaking,
        doc_only=doc_only,
        date=date,
        note=note,
    )


def write_descriptor(root: Path, relative: str, content: str) -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def store(tmp_path: Path) -> JsonLedgerStore:
    return JsonLedgerStore(tmp_path / "data" / "changes.json")


@pytest.fixture
def descriptor_tree(tmp_path: Path) -> Path:
    root = tmp_path / "changes"
    write_descriptor(
        root,
        "openai/chat/completions/post.yml",
        """
- change: changed
  target: request
  breaking: true
  note: Removed the functions parameter
  date: 2024-03-01
- change: added
  target: response
  date: 2024-01-10
""",
    )
    write_descriptor(
        root,
        "anthropic/messages/post.yml",
        """
- change: added
  target: request
  doc_only: true
  date: "2024-02-15"
""",
    )
    write_descriptor(root, "anthropic/models/get.yml", "{}\n")
    write_descriptor(root, "anthropic/README.md", "not a descriptor\n")
    return root


@pytest.fixture
def ledger() -> list[ChangeRecord]:
    return [
        make_record(provider="openai", route="chat/completions", change="changed",
                    target="request", breaking=True, date="2024-03-01"),
        make_record(provider="anthropic", route="messages", change="added",
                    target="request", doc_only=True, date="2024-02-15"),
        make_record(provider="openai", route="chat/completions", change="added",
                    target="response", date="2024-01-10"),
        make_record(provider="openai", route="models", method="GET", change="removed",
                    target="route", date="2023-12-01"),
    ]
