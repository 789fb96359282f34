# Copyright 2025 API Change Ledger contributors
# License AGPL-3.0 or later (http://www.gnu.org/licenses/agpl)

from typing import Dict, Iterable, Mapping
from urllib.parse import parse_qsl, urlencode

from ..models import FLAG_TOKENS, FilterState

SET_KEYS = ("providers", "routes")
SCALAR_KEYS = ("change", "target", "breaking", "doc_only")
QUERY_KEYS = SET_KEYS + SCALAR_KEYS


def _join(values: Iterable[str]) -> str:
    return ",".join(sorted(values))


def _split(value: str) -> frozenset:
    return frozenset(part for part in value.split(",") if part)


def encode(state: FilterState) -> Dict[str, str]:
    """Flatten a FilterState; unconstrained dimensions are left out entirely."""
    params = {}
    for key in SET_KEYS:
        values = getattr(state, key)
        if values:
            params[key] = _join(values)
    for key in SCALAR_KEYS:
        value = getattr(state, key)
        if value:
            params[key] = value
    return params


def decode(params: Mapping[str, str]) -> FilterState:
    """Build a FilterState from a flat string map such as ``request.args``.

    Unknown keys, empty values and flag values other than ``true``/``false``
    are ignored.
    """
    data = {}
    for key in SET_KEYS:
        value = params.get(key)
        if value:
            data[key] = _split(value)
    for key in SCALAR_KEYS:
        value = params.get(key)
        if not value:
            continue
        if key in ("breaking", "doc_only") and value not in FLAG_TOKENS:
            continue
        data[key] = value
    return FilterState(**data)


def to_query_string(state: FilterState) -> str:
    params = encode(state)
    return urlencode([(key, params[key]) for key in QUERY_KEYS if key in params])


def from_query_string(query_string: str) -> FilterState:
    return decode(dict(parse_qsl(query_string.lstrip("?"))))
