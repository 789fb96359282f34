# Copyright 2025 API Change Ledger contributors
# License AGPL-3.0 or later (http://www.gnu.org/licenses/agpl)

from pathlib import Path, PurePosixPath
from typing import Any, Iterable, List, Tuple

import requests
import yaml
from pydantic import ValidationError

from ..exceptions import DescriptorError, InvalidEntryError
from ..models import ChangeRecord, RawChangeEntry

import logging

logger = logging.getLogger(__name__)

DESCRIPTOR_SUFFIXES = (".yml", ".yaml")


def parse_descriptor(text: str, source: str = "<string>") -> List[Any]:
    """Parse descriptor text into its list of raw entries.

    Content that is valid YAML but not a list (an empty file, a mapping)
    counts as no entries. Content that is not valid YAML raises
    DescriptorError.
    """
    try:
        entries = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise DescriptorError(f"Cannot parse descriptor {source}: {e}") from e
    if not isinstance(entries, list):
        logger.debug(f"Descriptor {source} is not a list, treating it as empty")
        return []
    return entries


def read_descriptor(path) -> List[Any]:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise DescriptorError(f"Cannot read descriptor {path}: {e}") from e
    return parse_descriptor(text, str(path))


def fetch_descriptor(url: str, timeout: float = 30) -> List[Any]:
    try:
        r = requests.get(url, timeout=timeout)
        r.raise_for_status()
    except requests.RequestException as e:
        raise DescriptorError(f"Cannot fetch descriptor {url}: {e}") from e
    return parse_descriptor(r.text, url)


def load_descriptor(source: str, timeout: float = 30) -> List[Any]:
    if source.startswith(("http://", "https://")):
        return fetch_descriptor(source, timeout=timeout)
    return read_descriptor(source)


def split_descriptor_path(relative_path: str) -> Tuple[str, str]:
    """Split ``v1/chat/completions/post.json`` into ``("v1/chat/completions", "POST")``."""
    parts = [p for p in PurePosixPath(relative_path.strip("/")).parts if p]
    if not parts:
        raise DescriptorError(f"Descriptor path {relative_path!r} names no method")
    method = PurePosixPath(parts[-1]).stem.upper()
    route = "/".join(parts[:-1])
    return route, method


def to_change_records(
    provider: str, route: str, method: str, raw_entries: Iterable[Any]
) -> List[ChangeRecord]:
    """Attach the key to every raw entry.

    Every entry is validated before any record is produced, so one bad entry
    rejects the whole descriptor.
    """
    validated = []
    for index, entry in enumerate(raw_entries):
        if not isinstance(entry, dict):
            raise InvalidEntryError(
                f"{provider} {method} /{route}: entry #{index} is not a mapping"
            )
        try:
            validated.append(RawChangeEntry.model_validate(entry))
        except ValidationError as e:
            raise InvalidEntryError(
                f"{provider} {method} /{route}: entry #{index} is invalid: {e}"
            ) from e

    try:
        return [
            ChangeRecord(provider=provider, route=route, method=method, **entry.model_dump())
            for entry in validated
        ]
    except ValidationError as e:
        raise InvalidEntryError(f"{provider} {method} /{route}: invalid key: {e}") from e


def sort_ledger(records: Iterable[ChangeRecord]) -> List[ChangeRecord]:
    """Newest first. ``sorted`` is stable, ties keep their insertion order."""
    return sorted(records, key=lambda r: r.date, reverse=True)
