"""Typed query, update and sort structures understood by the document store.

Filters are built from `Clause(field, op, value)` triples and checked when
constructed, so values coming from a request can never smuggle in an operator
or reach a field name the caller did not intend.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Collection, Mapping, Sequence

_FIELD_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _check_field(name: str) -> str:
    if not isinstance(name, str) or not _FIELD_RE.match(name):
        raise ValueError(f"Invalid field name: {name!r}")
    return name


class Op(str, Enum):
    EQ = "eq"
    IN = "in"
    ICONTAINS = "icontains"


@dataclass(frozen=True)
class Clause:
    field: str
    op: Op
    value: Any

    def __post_init__(self) -> None:
        _check_field(self.field)
        if not isinstance(self.op, Op):
            raise ValueError(f"Invalid operator: {self.op!r}")
        if self.op is Op.IN:
            if isinstance(self.value, (str, bytes)) or not isinstance(self.value, (list, tuple, set, frozenset)):
                raise ValueError("IN expects a sequence of values")
            object.__setattr__(self, "value", tuple(self.value))
        elif self.op is Op.ICONTAINS and not isinstance(self.value, str):
            raise ValueError("ICONTAINS expects a string")
        elif self.op is Op.EQ and isinstance(self.value, (dict, list, tuple, set)):
            raise ValueError("EQ expects a scalar value")

    def matches(self, doc: Mapping[str, Any]) -> bool:
        actual = doc.get(self.field)
        if self.op is Op.EQ:
            # array fields match on membership
            if isinstance(actual, list):
                return self.value in actual
            return actual == self.value
        if self.op is Op.IN:
            if isinstance(actual, list):
                return any(v in self.value for v in actual)
            return actual in self.value
        if not isinstance(actual, str):
            return False
        return self.value.casefold() in actual.casefold()


def eq(name: str, value: Any) -> Clause:
    return Clause(name, Op.EQ, value)


def in_(name: str, values: Collection[Any]) -> Clause:
    return Clause(name, Op.IN, values)


def icontains(name: str, value: str) -> Clause:
    return Clause(name, Op.ICONTAINS, value)


@dataclass(frozen=True)
class Filter:
    """All of `all_of` must match; if `any_of` is non-empty, at least one of it too."""

    all_of: tuple[Clause, ...] = ()
    any_of: tuple[Clause, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "all_of", tuple(self.all_of))
        object.__setattr__(self, "any_of", tuple(self.any_of))
        for c in self.all_of + self.any_of:
            if not isinstance(c, Clause):
                raise ValueError(f"Not a filter clause: {c!r}")

    def and_(self, *clauses: Clause) -> "Filter":
        return Filter(all_of=self.all_of + tuple(clauses), any_of=self.any_of)

    def or_(self, *clauses: Clause) -> "Filter":
        if self.any_of:
            raise ValueError("Filter already has an any_of group")
        return Filter(all_of=self.all_of, any_of=tuple(clauses))

    def matches(self, doc: Mapping[str, Any]) -> bool:
        if not all(c.matches(doc) for c in self.all_of):
            return False
        if self.any_of and not any(c.matches(doc) for c in self.any_of):
            return False
        return True


def where(*clauses: Clause) -> Filter:
    return Filter(all_of=clauses)


@dataclass(frozen=True)
class Sort:
    field: str
    descending: bool = False

    def __post_init__(self) -> None:
        _check_field(self.field)

    def apply(self, docs: list[dict[str, Any]]) -> list[dict[str, Any]]:
        # documents missing the field sort first ascending, last descending
        return sorted(
            docs,
            key=lambda d: (d.get(self.field) is not None, d.get(self.field) or ""),
            reverse=self.descending,
        )


@dataclass(frozen=True)
class Update:
    """Field assignments, removals and array pulls applied to one document."""

    set: Mapping[str, Any] = field(default_factory=dict)
    unset: Sequence[str] = ()
    pull: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "set", dict(self.set))
        object.__setattr__(self, "unset", tuple(self.unset))
        object.__setattr__(self, "pull", dict(self.pull))
        for name in list(self.set) + list(self.unset) + list(self.pull):
            _check_field(name)
            if name in ("id", "ownerId", "createdAt", "updatedAt"):
                raise ValueError(f"Field {name!r} is managed by the store")

    def apply(self, doc: dict[str, Any]) -> dict[str, Any]:
        out = dict(doc)
        for name, value in self.set.items():
            out[name] = value
        for name in self.unset:
            out.pop(name, None)
        for name, value in self.pull.items():
            current = out.get(name)
            if isinstance(current, list):
                out[name] = [v for v in current if v != value]
        return out
