"""
Parsing of the JSON-encoded collection query parameters.

GET /api/users and GET /api/tasks accept where, sort, select, skip, limit
and count. where/sort/select are JSON documents in the query string.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from fastapi import Query

from taskboard.errors import QueryParameterError


@dataclass
class CollectionQuery:
    where: Dict[str, Any] = field(default_factory=dict)
    sort: Optional[Dict[str, Any]] = None
    select: Optional[Dict[str, Any]] = None
    skip: Optional[int] = None
    limit: Optional[int] = None
    count: bool = False


def parse_json_param(name: str, raw: Optional[str]) -> Optional[Dict[str, Any]]:
    """Decode one JSON query parameter; None when absent."""
    if raw is None or raw == "":
        return None
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise QueryParameterError("Invalid JSON in query parameter") from exc
    if not isinstance(value, dict):
        raise QueryParameterError(f"Query parameter '{name}' must be a JSON object")
    return value


def collection_query(
    where: Optional[str] = Query(None),
    sort: Optional[str] = Query(None),
    select: Optional[str] = Query(None),
    skip: Optional[int] = Query(None, ge=0),
    limit: Optional[int] = Query(None, ge=0),
    count: bool = Query(False),
) -> CollectionQuery:
    """FastAPI dependency for collection endpoints."""
    return CollectionQuery(
        where=parse_json_param("where", where) or {},
        sort=parse_json_param("sort", sort),
        select=parse_json_param("select", select),
        skip=skip or None,
        limit=limit,
        count=count,
    )


def select_only(select: Optional[str] = Query(None)) -> Optional[Dict[str, Any]]:
    """FastAPI dependency for single-document endpoints: only select is honoured."""
    return parse_json_param("select", select)


def apply_projection(document: Dict[str, Any], select: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Apply a {"field": 1} / {"field": 0} projection to a serialized document.

    Inclusion keeps _id unless it is explicitly excluded. Mixing inclusion
    and exclusion is only allowed for _id.
    """
    if not select:
        return document

    flags = {key: _projection_flag(key, value) for key, value in select.items()}
    included = {key for key, flag in flags.items() if flag and key != "_id"}
    excluded = {key for key, flag in flags.items() if not flag and key != "_id"}
    if included and excluded:
        raise QueryParameterError("Cannot mix inclusion and exclusion in select")

    if included:
        keep = set(included)
        if flags.get("_id", True):
            keep.add("_id")
        return {key: value for key, value in document.items() if key in keep}

    dropped = set(excluded)
    if flags.get("_id") is False:
        dropped.add("_id")
    return {key: value for key, value in document.items() if key not in dropped}


def _projection_flag(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    raise QueryParameterError(f"Invalid projection value for '{key}'")
