# Copyright 2025 API Change Ledger contributors
# License AGPL-3.0 or later (http://www.gnu.org/licenses/agpl)

import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, FrozenSet, Literal, Optional

ChangeKind = Literal["added", "changed", "removed"]
ChangeTarget = Literal["route", "request", "response"]
FlagToken = Literal["true", "false"]

CHANGE_KINDS = ("added", "changed", "removed")
CHANGE_TARGETS = ("route", "request", "response")
FLAG_TOKENS = ("true", "false")


def _iso_date(value: Any) -> Any:
    # YAML loads unquoted dates as datetime.date
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    return value


class RawChangeEntry(BaseModel):
    """One item of a source change descriptor, before the key is attached."""
    model_config = ConfigDict(extra="ignore")

    change: ChangeKind
    target: ChangeTarget
    date: str
    breaking: bool = False
    deprecated: bool = False
    doc_only: bool = False
    note: Optional[str] = None

    @field_validator("breaking", "deprecated", "doc_only", mode="before")
    @classmethod
    def _absent_flag_is_false(cls, value):
        return False if value is None else value

    @field_validator("date", mode="before")
    @classmethod
    def _normalize_date(cls, value):
        return _iso_date(value)


class ChangeRecord(BaseModel):
    """A single ledger entry: one observed change on one provider route."""
    model_config = ConfigDict(frozen=True)

    provider: str
    route: str
    method: str
    change: ChangeKind
    target: ChangeTarget
    breaking: bool = False
    deprecated: bool = False
    doc_only: bool = False
    note: Optional[str] = None
    date: str

    @field_validator("provider")
    @classmethod
    def _check_provider(cls, value: str) -> str:
        if not value or value != value.lower():
            raise ValueError(f"provider must be a non-empty lowercase identifier, got {value!r}")
        return value

    @field_validator("route")
    @classmethod
    def _check_route(cls, value: str) -> str:
        if value.startswith("/") or value.endswith("/"):
            raise ValueError(f"route must not start or end with '/', got {value!r}")
        return value

    @field_validator("method")
    @classmethod
    def _check_method(cls, value: str) -> str:
        if not value or value != value.upper():
            raise ValueError(f"method must be an uppercase HTTP verb, got {value!r}")
        return value

    @field_validator("date", mode="before")
    @classmethod
    def _normalize_date(cls, value):
        return _iso_date(value)

    @property
    def key(self) -> tuple:
        return (self.provider, self.route, self.method)

    @property
    def route_label(self) -> str:
        return f"{self.method} /{self.route}"

    @property
    def route_key(self) -> str:
        return f"{self.provider}:{self.route_label}"


class FilterState(BaseModel):
    """Active query constraints. Empty sets and None mean unconstrained."""
    model_config = ConfigDict(frozen=True)

    providers: FrozenSet[str] = Field(default_factory=frozenset)
    routes: FrozenSet[str] = Field(default_factory=frozenset)
    change: Optional[str] = None
    target: Optional[str] = None
    breaking: Optional[FlagToken] = None
    doc_only: Optional[FlagToken] = None

    @property
    def is_empty(self) -> bool:
        return self == FilterState()


class LedgerUpdate(BaseModel):
    """Outcome of replacing one (provider, route, method) group."""
    provider: str
    route: str
    method: str
    updated: bool
    removed: int = 0
    inserted: int = 0
    total: int = 0
