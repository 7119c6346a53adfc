from __future__ import annotations

from typing import Any, Sequence


def get_by_path(obj: Any, path: str) -> Any:
    current = obj
    for part in path.split("."):
        if not isinstance(current, dict):
            return None
        current = current.get(part)
    return current


def set_by_path(obj: dict, path: str, value: Any) -> dict:
    parts = path.split(".")
    last = parts.pop()
    current = obj
    for part in parts:
        if not isinstance(current.get(part), dict):
            current[part] = {}
        current = current[part]
    current[last] = value
    return obj


def _project_array(existing: list | None, items: list, member: str) -> list:
    projected: list = []
    for index, element in enumerate(items):
        base = dict(existing[index]) if existing and index < len(existing) else {}
        base[member] = element.get(member) if isinstance(element, dict) else None
        projected.append(base)
    return projected


def pick_properties(rows: Sequence[dict], properties: Sequence[str]) -> list[dict]:
    """Client-side projection of fetched rows onto dotted property paths.

    A path whose root holds an array (``documents.type``) keeps the member of
    every element, so several such paths merge into one list of partial
    elements. Missing values come back as ``None``.
    """
    if not properties:
        return list(rows)
    picked: list[dict] = []
    for row in rows:
        out: dict = {}
        for prop in properties:
            head, _, member = prop.partition(".")
            if member and isinstance(row.get(head), list):
                out[head] = _project_array(out.get(head), row[head], member)
                continue
            set_by_path(out, prop, get_by_path(row, prop))
        picked.append(out)
    return picked
