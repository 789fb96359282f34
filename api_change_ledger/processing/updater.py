# Copyright 2025 API Change Ledger contributors
# License AGPL-3.0 or later (http://www.gnu.org/licenses/agpl)

from typing import Any, Iterable, List, Sequence

from ..models import ChangeRecord, LedgerUpdate
from .descriptors import sort_ledger, split_descriptor_path, to_change_records

import logging

logger = logging.getLogger(__name__)


def upsert_route(
    ledger: Iterable[ChangeRecord],
    provider: str,
    route: str,
    method: str,
    raw_entries: Sequence[Any],
) -> List[ChangeRecord]:
    """Return a new ledger where the (provider, route, method) group is replaced.

    Entries are validated before the ledger is touched; other groups pass
    through unchanged.
    """
    new_records = to_change_records(provider, route, method, raw_entries)
    key = (provider, route, method)
    kept = [record for record in ledger if record.key != key]
    return sort_ledger(kept + new_records)


def update_route(store, provider: str, relative_path: str, raw_entries: Sequence[Any]) -> LedgerUpdate:
    """Replace one route's changes in the stored ledger.

    An empty entry list reports "nothing to update" and leaves the stored
    ledger untouched.
    """
    route, method = split_descriptor_path(relative_path)

    if not raw_entries:
        logger.info(f"No entries for {provider} {method} /{route}, nothing to update")
        return LedgerUpdate(provider=provider, route=route, method=method, updated=False)

    if store.exists():
        ledger = store.read()
    else:
        logger.warning(f"Ledger {store.path} not found, starting from an empty ledger")
        ledger = []

    result = upsert_route(ledger, provider, route, method, raw_entries)
    removed = sum(1 for record in ledger if record.key == (provider, route, method))

    store.write(result)
    logger.info(
        f"Updated {provider} {method} /{route}: replaced {removed} with {len(raw_entries)} entries, "
        f"{len(result)} total entries"
    )
    return LedgerUpdate(
        provider=provider,
        route=route,
        method=method,
        updated=True,
        removed=removed,
        inserted=len(raw_entries),
        total=len(result),
    )
