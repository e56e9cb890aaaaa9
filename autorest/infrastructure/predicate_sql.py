"""Predicate Compiler - translates predicates and query options into SQLAlchemy clauses.

Invariants:
    - "id" always addresses the mapper's primary key column
    - Unknown attributes, operators or malformed options raise ModelValidationError
    - A literal value means equality; None means IS NULL
    - Every non-null value is converted to the column's python type ("3" -> 3, 3 -> "3")
      or rejected with ModelValidationError before reaching the driver
    - page is only valid together with limit (offset = skip + page * limit)

Design Decisions:
    - Operator table over if/elif chain: every supported operator visible in one place
    - $and / $or accepted at any predicate level, each taking a list of predicates
"""

from datetime import date, datetime, time
from decimal import Decimal
from typing import Any

from sqlalchemy import Select, and_, false, inspect, or_, true
from sqlalchemy.orm import ColumnProperty
from sqlalchemy.sql.elements import ColumnElement

from autorest.core.domain_types import ID_KEY, Predicate
from autorest.core.errors import ModelValidationError

_COMPARATORS = {
    "$less": lambda col, v: col < v,
    "$lessEqual": lambda col, v: col <= v,
    "$greater": lambda col, v: col > v,
    "$greaterEqual": lambda col, v: col >= v,
}

_BOOL_STRINGS = {"true": True, "1": True, "false": False, "0": False}


def column_names(model_cls: type) -> dict[str, str]:
    """Map attribute name -> mapped attribute key, with "id" -> primary key."""
    mapper = inspect(model_cls)
    names = {
        prop.key: prop.key
        for prop in mapper.attrs
        if isinstance(prop, ColumnProperty)
    }
    pk = mapper.primary_key[0]
    names.setdefault(ID_KEY, mapper.get_property_by_column(pk).key)
    return names


def compile_predicate(model_cls: type, predicate: Predicate) -> ColumnElement:
    """Build a WHERE clause for a predicate mapping."""
    clauses = []
    for key, value in predicate.items():
        if key == "$and":
            clauses.append(and_(true(), *_compile_list(model_cls, key, value)))
        elif key == "$or":
            clauses.append(or_(false(), *_compile_list(model_cls, key, value)))
        else:
            clauses.append(_compile_field(model_cls, key, value))
    return and_(true(), *clauses)


def apply_options(model_cls: type, stmt: Select, options: dict) -> Select:
    """Apply sort, skip, limit and page to a select statement."""
    name = model_cls.__name__
    if "sort" in options:
        stmt = stmt.order_by(*_compile_sort(model_cls, options["sort"]))

    offset = options.get("skip", 0)
    limit = options.get("limit")
    if "page" in options:
        if limit is None:
            raise ModelValidationError(
                "Option page requires limit", name, "page",
            )
        offset += options["page"] * limit
    if offset:
        stmt = stmt.offset(offset)
    if limit is not None:
        stmt = stmt.limit(limit)
    return stmt


def attribute_column(model_cls: type, key: str):
    """Instrumented attribute for a predicate key, or ModelValidationError."""
    names = column_names(model_cls)
    if key not in names:
        raise ModelValidationError(
            f"{model_cls.__name__} has no attribute {key!r}",
            model_cls.__name__, key,
        )
    return getattr(model_cls, names[key])


def coerce_value(model_cls: type, key: str, value: Any) -> Any:
    """Convert a JSON value to the column's python type, or ModelValidationError."""
    if value is None:
        return None
    column = attribute_column(model_cls, key)
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return value
    if python_type in (dict, list):
        return value
    try:
        return _convert(python_type, value)
    except (KeyError, TypeError, ValueError, ArithmeticError):
        raise ModelValidationError(
            f"Value {value!r} is not a valid {python_type.__name__} for {key!r}",
            model_cls.__name__, key,
        )


def _convert(python_type: type, value: Any) -> Any:
    if isinstance(value, (dict, list)):
        raise TypeError(type(value).__name__)
    if python_type is bool:
        if isinstance(value, bool):
            return value
        return _BOOL_STRINGS[str(value).lower()]
    # JSON true/false never stand in for numbers or text
    if isinstance(value, bool):
        raise TypeError("bool")
    if isinstance(value, python_type):
        return value
    if python_type is str:
        return str(value)
    if python_type is int:
        if isinstance(value, float) and not value.is_integer():
            raise ValueError(value)
        return int(value)
    if python_type is float:
        return float(value)
    if python_type is Decimal:
        return Decimal(str(value))
    if not isinstance(value, str):
        raise TypeError(type(value).__name__)
    if python_type in (datetime, date, time):
        return python_type.fromisoformat(value)
    return python_type(value)


def _compile_list(model_cls: type, key: str, value: Any) -> list[ColumnElement]:
    if not isinstance(value, list) or not all(isinstance(p, dict) for p in value):
        raise ModelValidationError(
            f"{key} expects a list of predicates", model_cls.__name__, key,
        )
    return [compile_predicate(model_cls, p) for p in value]


def _compile_field(model_cls: type, key: str, value: Any) -> ColumnElement:
    column = attribute_column(model_cls, key)
    if not isinstance(value, dict):
        return _equal(column, coerce_value(model_cls, key, value))
    if not value:
        raise ModelValidationError(
            f"Empty condition for {key!r}", model_cls.__name__, key,
        )
    return and_(*(
        _compile_operator(model_cls, column, key, op, operand)
        for op, operand in value.items()
    ))


def _compile_operator(
    model_cls: type, column, key: str, op: str, operand: Any,
) -> ColumnElement:
    name = model_cls.__name__
    if op == "$equal":
        return _equal(column, coerce_value(model_cls, key, operand))
    if op == "$diff":
        operand = coerce_value(model_cls, key, operand)
        return column.is_not(None) if operand is None else column != operand
    if op in _COMPARATORS:
        return _COMPARATORS[op](column, coerce_value(model_cls, key, operand))
    if op in ("$in", "$nin"):
        if not isinstance(operand, list):
            raise ModelValidationError(f"{op} expects a list", name, key)
        values = [coerce_value(model_cls, key, v) for v in operand]
        return column.in_(values) if op == "$in" else column.not_in(values)
    if op == "$contains":
        return column.contains(str(operand), autoescape=True)
    if op == "$exists":
        return column.is_not(None) if operand else column.is_(None)
    raise ModelValidationError(f"Unknown operator {op!r}", name, key)


def _equal(column, value: Any) -> ColumnElement:
    return column.is_(None) if value is None else column == value


def _compile_sort(model_cls: type, sort: Any) -> list:
    name = model_cls.__name__
    if isinstance(sort, str):
        sort = [sort]
    if isinstance(sort, list):
        pairs = []
        for item in sort:
            if not isinstance(item, str) or not item.lstrip("-"):
                raise ModelValidationError(
                    f"Invalid sort field {item!r}", name, "sort",
                )
            descending = item.startswith("-")
            pairs.append((item.lstrip("-"), "desc" if descending else "asc"))
    elif isinstance(sort, dict):
        pairs = list(sort.items())
    else:
        raise ModelValidationError(f"Invalid sort {sort!r}", name, "sort")

    orderings = []
    for key, direction in pairs:
        column = attribute_column(model_cls, key)
        if direction in ("asc", 1):
            orderings.append(column.asc())
        elif direction in ("desc", -1):
            orderings.append(column.desc())
        else:
            raise ModelValidationError(
                f"Invalid sort direction {direction!r} for {key!r}", name, "sort",
            )
    return orderings
