from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Sequence

from app.schemas.query import (
    ComparisonOperator,
    FieldSearchCriterion,
    FilterCriterion,
    SortCriterion,
    SortDirection,
)

ROOT_ALIAS = "backend"

# Array-valued collections that are matched through a correlated JOIN.
CORRELATED_COLLECTIONS = {"documents", "submissions"}

# Cosmos SQL keywords that can not be used after a dot; compared lower-cased.
RESERVED_WORDS = frozenset(
    {
        "and",
        "array",
        "as",
        "asc",
        "between",
        "by",
        "desc",
        "distinct",
        "escape",
        "exists",
        "false",
        "from",
        "group",
        "in",
        "join",
        "like",
        "limit",
        "not",
        "null",
        "offset",
        "or",
        "order",
        "select",
        "top",
        "true",
        "undefined",
        "value",
        "where",
    }
)

CONDITION_SYMBOLS: dict[ComparisonOperator, str] = {
    ComparisonOperator.equals: "=",
    ComparisonOperator.greaterThan: ">",
    ComparisonOperator.smallerThan: "<",
}

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class CriterionError(ValueError):
    pass


class FragmentKind(str, Enum):
    JOIN = "join"
    WHERE = "where"
    EXISTENCE = "existence"


@dataclass(frozen=True)
class QueryFragment:
    kind: FragmentKind
    text: str
    parameters: tuple[dict[str, Any], ...] = ()
    subquery: str = ""


@dataclass(frozen=True)
class ComposedQuery:
    projection_clause: str
    sort_clause: str
    correlated_clause: str
    filter_clause: str
    object_search_clause: str
    field_search_clause: str
    parameters: tuple[dict[str, Any], ...] = ()

    @property
    def where_suffix(self) -> str:
        parts = (self.filter_clause, self.correlated_clause, self.object_search_clause, self.field_search_clause)
        return " ".join(part for part in parts if part)


def encode_condition(condition: ComparisonOperator | str) -> str:
    try:
        return CONDITION_SYMBOLS[ComparisonOperator(condition)]
    except (ValueError, KeyError):
        raise CriterionError(f'Unknown comparison operator "{condition}"') from None


def _sort_direction(order: SortDirection | str) -> SortDirection:
    try:
        return SortDirection(order)
    except ValueError:
        raise CriterionError(f'Unknown sort direction "{order}"') from None


def _path_segments(field_path: str) -> list[str]:
    segments = str(field_path or "").split(".")
    for segment in segments:
        if not _IDENTIFIER_RE.fullmatch(segment):
            raise CriterionError(f'Invalid field path "{field_path}"')
    return segments


def _render_segment(segment: str) -> str:
    if segment.lower() in RESERVED_WORDS:
        return f'["{segment}"]'
    return f".{segment}"


def resolve_path(field_path: str) -> str:
    """Property accessor for a dotted path, e.g. ``a.value.b`` -> ``.a["value"].b``."""
    return "".join(_render_segment(segment) for segment in _path_segments(field_path))


def _param(name: str, value: Any) -> dict[str, Any]:
    return {"name": name, "value": value}


def _correlated_fragment(index: int, segments: list[str], value: Any) -> QueryFragment:
    alias = f"t{index}"
    member = alias + "".join(_render_segment(segment) for segment in segments[1:])
    source = f"{alias} IN {ROOT_ALIAS}{_render_segment(segments[0])}"
    if value is None:
        subquery = f"SELECT VALUE {alias} FROM {source} WHERE NOT IS_DEFINED({member})"
        return QueryFragment(FragmentKind.JOIN, f"JOIN ({subquery})", subquery=subquery)
    name = f"@f{index}"
    subquery = f"SELECT VALUE {alias} FROM {source} WHERE {member} = {name}"
    return QueryFragment(FragmentKind.JOIN, f"JOIN ({subquery})", (_param(name, value),), subquery)


def build_filter_fragments(criteria: Sequence[FilterCriterion] | None) -> list[QueryFragment]:
    fragments: list[QueryFragment] = []
    for index, criterion in enumerate(criteria or ()):
        segments = _path_segments(criterion.field)
        if segments[0] in CORRELATED_COLLECTIONS and len(segments) > 1:
            fragments.append(_correlated_fragment(index, segments, criterion.value))
            continue
        accessor = ROOT_ALIAS + resolve_path(criterion.field)
        if criterion.value is None:
            fragments.append(QueryFragment(FragmentKind.EXISTENCE, f"AND NOT IS_DEFINED({accessor})"))
            continue
        symbol = encode_condition(criterion.condition)
        name = f"@f{index}"
        fragments.append(
            QueryFragment(
                FragmentKind.WHERE,
                f"AND {accessor} {symbol} {name}",
                (_param(name, criterion.value),),
            )
        )
    return fragments


def build_sort_clauses(criteria: Sequence[SortCriterion] | None) -> list[str]:
    clauses: list[str] = []
    for index, criterion in enumerate(criteria or ()):
        direction = _sort_direction(criterion.order)
        term = f"{ROOT_ALIAS}{resolve_path(criterion.field)} {direction.value}"
        clauses.append(f"ORDER BY {term}" if index == 0 else term)
    return clauses


def build_object_search_fragments(terms: Iterable[str] | None) -> list[QueryFragment]:
    fragments: list[QueryFragment] = []
    for index, term in enumerate(terms or ()):
        if not term:
            continue
        name = f"@s{index}"
        fragments.append(
            QueryFragment(
                FragmentKind.WHERE,
                f"AND CONTAINS(LOWER(ToString({ROOT_ALIAS})), {name})",
                (_param(name, str(term).lower()),),
            )
        )
    return fragments


def build_field_search_fragments(criteria: Sequence[FieldSearchCriterion] | None) -> list[QueryFragment]:
    fragments: list[QueryFragment] = []
    for index, criterion in enumerate(criteria or ()):
        name = f"@fs{index}"
        fragments.append(
            QueryFragment(
                FragmentKind.WHERE,
                f"AND CONTAINS(LOWER({ROOT_ALIAS}{resolve_path(criterion.field)}), {name})",
                (_param(name, str(criterion.value or "").lower()),),
            )
        )
    return fragments


def build_projection(properties: Sequence[str] | None) -> str:
    if not properties:
        return "*"
    return ", ".join(f"{ROOT_ALIAS}{resolve_path(prop)}" for prop in properties)


def _join_text(fragments: Iterable[QueryFragment]) -> str:
    return " ".join(fragment.text for fragment in fragments)


def _exists_text(fragments: Iterable[QueryFragment]) -> str:
    # EXISTS matches a parent once however many of its elements qualify.
    return " ".join(f"AND EXISTS({fragment.subquery})" for fragment in fragments)


def _collect_parameters(*groups: Iterable[QueryFragment]) -> tuple[dict[str, Any], ...]:
    collected: list[dict[str, Any]] = []
    for group in groups:
        for fragment in group:
            collected.extend(fragment.parameters)
    return tuple(collected)


def compose_query(
    sort: Sequence[SortCriterion] | None = None,
    filters: Sequence[FilterCriterion] | None = None,
    search: Sequence[str] | None = None,
    search_fields: Sequence[FieldSearchCriterion] | None = None,
    properties: Sequence[str] | None = None,
) -> ComposedQuery:
    filter_fragments = build_filter_fragments(filters)
    joins = [f for f in filter_fragments if f.kind is FragmentKind.JOIN]
    conditions = [f for f in filter_fragments if f.kind is not FragmentKind.JOIN]
    object_search = build_object_search_fragments(search)
    field_search = build_field_search_fragments(search_fields)
    return ComposedQuery(
        projection_clause=build_projection(properties),
        sort_clause=", ".join(build_sort_clauses(sort)),
        correlated_clause=_exists_text(joins),
        filter_clause=_join_text(conditions),
        object_search_clause=_join_text(object_search),
        field_search_clause=_join_text(field_search),
        parameters=_collect_parameters(conditions, joins, object_search, field_search),
    )
