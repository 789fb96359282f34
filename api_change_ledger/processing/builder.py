# Copyright 2025 API Change Ledger contributors
# License AGPL-3.0 or later (http://www.gnu.org/licenses/agpl)

from pathlib import Path
from typing import Iterator, List, Tuple

from ..exceptions import LedgerError
from ..models import ChangeRecord
from .descriptors import DESCRIPTOR_SUFFIXES, read_descriptor, sort_ledger, to_change_records

import logging

logger = logging.getLogger(__name__)


def discover_descriptors(root: Path) -> Iterator[Tuple[str, str, str, Path]]:
    """Yield ``(provider, route, method, path)`` for every descriptor under root.

    Layout is ``{provider}/{route segments...}/{method}.yml``. Paths are
    walked in sorted order so a rebuild is reproducible.
    """
    for path in sorted(p for p in root.rglob("*") if p.is_file()):
        if path.suffix.lower() not in DESCRIPTOR_SUFFIXES:
            continue
        parts = path.relative_to(root).parts
        if len(parts) < 2:
            logger.warning(f"Skipping {path}: descriptor is not inside a provider directory")
            continue
        provider = parts[0]
        route = "/".join(parts[1:-1])
        method = path.stem.upper()
        yield provider, route, method, path


def build_ledger(root) -> List[ChangeRecord]:
    """Walk the descriptor tree and return the complete, sorted ledger.

    Any descriptor that fails to parse, or holds an invalid entry, aborts the
    build: nothing is returned rather than a partial ledger.
    """
    root = Path(root)
    if not root.is_dir():
        raise LedgerError(f"Descriptor directory {root} not found")

    all_changes = []
    count_files = 0
    for provider, route, method, path in discover_descriptors(root):
        entries = read_descriptor(path)
        all_changes.extend(to_change_records(provider, route, method, entries))
        count_files += 1

    logger.info(f"Read {len(all_changes)} changes from {count_files} descriptors in {root}")
    return sort_ledger(all_changes)


def seed_ledger(root, store) -> int:
    """Rebuild the ledger from root and replace the stored one in a single write."""
    ledger = build_ledger(root)
    store.write(ledger)
    logger.info(f"Wrote {len(ledger)} changes to {store.path}")
    return len(ledger)
