"""
Translate document-style where/sort documents into SQLAlchemy clauses.

Supported in where: field equality, $eq $ne $gt $gte $lt $lte $in $nin
$exists, and $and/$or over lists of filter documents. Array fields are
handled by caller-supplied builders.
"""

import operator
from datetime import datetime
from typing import Any, Callable, Iterable, List, Mapping, Optional

from pydantic import TypeAdapter, ValidationError as PydanticValidationError
from sqlalchemy import and_, false, or_, true
from sqlalchemy.sql.elements import ColumnElement

from taskboard.errors import QueryParameterError

ArrayFilter = Callable[[Any], ColumnElement]

COMPARISONS = {
    "$eq": operator.eq,
    "$ne": operator.ne,
    "$gt": operator.gt,
    "$gte": operator.ge,
    "$lt": operator.lt,
    "$lte": operator.le,
}

_datetime_adapter = TypeAdapter(datetime)


class FieldMap:
    """Wire field name -> mapped column, plus which fields hold timestamps."""

    def __init__(
        self,
        columns: Mapping[str, Any],
        datetime_fields: Iterable[str] = (),
        array_filters: Optional[Mapping[str, ArrayFilter]] = None,
    ):
        self.columns = dict(columns)
        self.datetime_fields = set(datetime_fields)
        self.array_filters = dict(array_filters or {})

    def coerce(self, name: str, value: Any) -> Any:
        if name in self.datetime_fields and isinstance(value, (str, int, float)) and not isinstance(value, bool):
            try:
                return _datetime_adapter.validate_python(value)
            except PydanticValidationError as exc:
                raise QueryParameterError(f"Invalid timestamp for '{name}'") from exc
        return value


def build_filter(where: Mapping[str, Any], fields: FieldMap) -> ColumnElement:
    clauses: List[ColumnElement] = []
    for key, condition in where.items():
        if key in ("$and", "$or"):
            parts = [build_filter(sub, fields) for sub in _filter_list(key, condition)]
            clauses.append(and_(*parts) if key == "$and" else or_(*parts))
        elif key in fields.array_filters:
            clauses.append(fields.array_filters[key](condition))
        elif key in fields.columns:
            clauses.append(_column_filter(key, condition, fields))
        else:
            raise QueryParameterError(f"Unknown field in where: '{key}'")
    if not clauses:
        return true()
    return and_(*clauses)


def build_order_by(sort: Optional[Mapping[str, Any]], fields: FieldMap) -> List[ColumnElement]:
    if not sort:
        return []
    order = []
    for key, direction in sort.items():
        column = fields.columns.get(key)
        if column is None:
            raise QueryParameterError(f"Cannot sort by '{key}'")
        if direction in (1, "asc", "ascending"):
            order.append(column.asc())
        elif direction in (-1, "desc", "descending"):
            order.append(column.desc())
        else:
            raise QueryParameterError(f"Invalid sort direction for '{key}'")
    return order


def is_operator_document(condition: Any) -> bool:
    return isinstance(condition, dict) and bool(condition) and all(k.startswith("$") for k in condition)


def _filter_list(key: str, condition: Any) -> List[Mapping[str, Any]]:
    if not isinstance(condition, list) or not condition or not all(isinstance(c, dict) for c in condition):
        raise QueryParameterError(f"'{key}' expects a non-empty list of filter documents")
    return condition


def _column_filter(name: str, condition: Any, fields: FieldMap) -> ColumnElement:
    column = fields.columns[name]
    if not is_operator_document(condition):
        return column == fields.coerce(name, condition)

    clauses = []
    for op, value in condition.items():
        if op in COMPARISONS:
            clauses.append(COMPARISONS[op](column, fields.coerce(name, value)))
        elif op in ("$in", "$nin"):
            if not isinstance(value, list):
                raise QueryParameterError(f"'{op}' on '{name}' expects a list")
            values = [fields.coerce(name, v) for v in value]
            clauses.append(column.in_(values) if op == "$in" else column.not_in(values))
        elif op == "$exists":
            # Every mapped column is NOT NULL
            clauses.append(true() if value else false())
        else:
            raise QueryParameterError(f"Unsupported operator '{op}' on '{name}'")
    return and_(*clauses)
