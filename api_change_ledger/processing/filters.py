# Copyright 2025 API Change Ledger contributors
# License AGPL-3.0 or later (http://www.gnu.org/licenses/agpl)

"""Filtering over an in-memory ledger.

Everything here is a pure function of a ledger snapshot and a FilterState.
State transitions return a new FilterState; a provider change and the
route cleanup it implies always come back together.

Route selections hold bare labels (``"POST /chat/completions"``) or
provider-qualified keys (``"openai:POST /chat/completions"``).
"""

from collections import Counter
from typing import Iterable, List, Optional, Sequence, Tuple

from ..models import FLAG_TOKENS, ChangeRecord, FilterState

SCALAR_FILTERS = ("change", "target", "breaking", "doc_only")


def parse_route_selection(value: str) -> Tuple[Optional[str], str]:
    """Split a route selection into ``(provider or None, "METHOD /route")``.

    The prefix before the first ``:`` is a provider only if it holds no
    space, since paths themselves may contain colons.
    """
    head, sep, tail = value.partition(":")
    if sep and head and " " not in head:
        return head, tail
    return None, value


def list_providers(ledger: Iterable[ChangeRecord]) -> List[str]:
    return sorted({record.provider for record in ledger})


def available_routes(ledger: Iterable[ChangeRecord], providers: Iterable[str]) -> List[str]:
    """Route labels offered by the selected providers, sorted.

    No provider selected means no routes are offered.
    """
    providers = set(providers)
    if not providers:
        return []
    return sorted({record.route_label for record in ledger if record.provider in providers})


def available_route_keys(ledger: Iterable[ChangeRecord], providers: Iterable[str]) -> List[str]:
    providers = set(providers)
    if not providers:
        return []
    return sorted({record.route_key for record in ledger if record.provider in providers})


def _route_selected(record: ChangeRecord, routes: Iterable[str]) -> bool:
    for selection in routes:
        provider, label = parse_route_selection(selection)
        if label == record.route_label and (provider is None or provider == record.provider):
            return True
    return False


def matches(record: ChangeRecord, state: FilterState) -> bool:
    if state.providers and record.provider not in state.providers:
        return False
    if state.routes and not _route_selected(record, state.routes):
        return False
    if state.change and record.change != state.change:
        return False
    if state.target and record.target != state.target:
        return False
    if state.breaking and record.breaking != (state.breaking == "true"):
        return False
    if state.doc_only and record.doc_only != (state.doc_only == "true"):
        return False
    return True


def filter_records(ledger: Sequence[ChangeRecord], state: FilterState) -> List[ChangeRecord]:
    """Records satisfying every constrained dimension, in ledger order."""
    return [record for record in ledger if matches(record, state)]


def _offered(ledger: Iterable[ChangeRecord], providers: Iterable[str]) -> set:
    providers = set(providers)
    return {
        (record.provider, record.route_label)
        for record in ledger
        if record.provider in providers
    }


def _reachable(selection: str, offered: set) -> bool:
    provider, label = parse_route_selection(selection)
    if provider is None:
        return any(label == offered_label for _, offered_label in offered)
    return (provider, label) in offered


def reconcile(state: FilterState, ledger: Iterable[ChangeRecord]) -> FilterState:
    """Drop selected routes that the selected providers no longer offer."""
    if not state.routes:
        return state
    offered = _offered(ledger, state.providers)
    kept = {selection for selection in state.routes if _reachable(selection, offered)}
    if kept == state.routes:
        return state
    return state.model_copy(update={"routes": frozenset(kept)})


def set_providers(state: FilterState, ledger: Iterable[ChangeRecord], providers: Iterable[str]) -> FilterState:
    new_state = state.model_copy(update={"providers": frozenset(providers)})
    return reconcile(new_state, ledger)


def select_provider(state: FilterState, ledger: Iterable[ChangeRecord], provider: str) -> FilterState:
    if provider in state.providers:
        return state
    return set_providers(state, ledger, state.providers | {provider})


def deselect_provider(state: FilterState, ledger: Iterable[ChangeRecord], provider: str) -> FilterState:
    if provider not in state.providers:
        return state
    return set_providers(state, ledger, state.providers - {provider})


def add_route(state: FilterState, ledger: Iterable[ChangeRecord], route: str) -> FilterState:
    """Select a route; a no-op unless the selected providers offer it."""
    if not route or route in state.routes:
        return state
    if not _reachable(route, _offered(ledger, state.providers)):
        return state
    return state.model_copy(update={"routes": state.routes | {route}})


def remove_route(state: FilterState, route: str) -> FilterState:
    if route not in state.routes:
        return state
    return state.model_copy(update={"routes": state.routes - {route}})


def set_filter(state: FilterState, name: str, value: Optional[str]) -> FilterState:
    """Set one scalar dimension; an empty value clears it."""
    if name not in SCALAR_FILTERS:
        raise KeyError(name)
    if not value:
        value = None
    elif name in ("breaking", "doc_only") and value not in FLAG_TOKENS:
        value = None
    return state.model_copy(update={name: value})


def clear_filters() -> FilterState:
    return FilterState()


def summarize(ledger: Sequence[ChangeRecord]) -> dict:
    by_provider = Counter(record.provider for record in ledger)
    return {
        "total": len(ledger),
        "providers": len(by_provider),
        "by_provider": dict(sorted(by_provider.items())),
    }
