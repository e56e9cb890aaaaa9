"""Query Translator - turns raw query-string pairs into a predicate and options.

Invariants:
    - Every value is decoded as JSON independently (typed filters: 5, true, {"$less": 3})
    - Keys in QUERY_OPTIONS never reach the predicate
    - A `where` key replaces the predicate wholesale; sibling non-option keys are ignored
    - The first decoding failure voids the whole parse and names the offending key
    - parse_query never raises on client input (total function)

Design Decisions:
    - Result type (ParsedQuery | MalformedQuery) over control-flow exceptions:
      the route decides how to render the failure (ADR: functional core)
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union

QUERY_OPTIONS = ("skip", "limit", "sort", "page")
INTEGER_OPTIONS = ("skip", "limit", "page")
WHERE_KEY = "where"


@dataclass(frozen=True)
class ParsedQuery:
    """Decoded query: filter predicate plus recognized options."""
    predicate: dict[str, Any] = field(default_factory=dict)
    options: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class MalformedQuery:
    """Parse failure for a single query-string pair."""
    key: str
    value: str
    reason: str


QueryParseResult = Union[ParsedQuery, MalformedQuery]


def parse_query(query_params: Mapping[str, str]) -> QueryParseResult:
    """Decode and partition query-string pairs."""
    decoded: dict[str, Any] = {}
    for key, raw in query_params.items():
        try:
            decoded[key] = json.loads(raw)
        except ValueError as e:
            return MalformedQuery(key, raw, f"invalid JSON ({e})")

    options = {k: decoded[k] for k in QUERY_OPTIONS if k in decoded}
    failure = _check_options(options, query_params)
    if failure:
        return failure

    if WHERE_KEY in decoded:
        where = decoded[WHERE_KEY]
        if not isinstance(where, dict):
            return MalformedQuery(
                WHERE_KEY, query_params[WHERE_KEY], "expected a JSON object",
            )
        return ParsedQuery(predicate=where, options=options)

    predicate = {k: v for k, v in decoded.items() if k not in QUERY_OPTIONS}
    return ParsedQuery(predicate=predicate, options=options)


def _check_options(
    options: dict[str, Any], raw: Mapping[str, str],
) -> MalformedQuery | None:
    for key in INTEGER_OPTIONS:
        if key not in options:
            continue
        value = options[key]
        # bool is an int subclass
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            return MalformedQuery(key, raw[key], "expected a non-negative integer")
    if "sort" in options and not isinstance(options["sort"], (str, list, dict)):
        return MalformedQuery(
            "sort", raw["sort"], "expected a field name, a list or an object",
        )
    return None


def encode_query(parsed: ParsedQuery) -> dict[str, str]:
    """Inverse of parse_query: JSON-encode a parsed query back to query-string pairs."""
    encoded = {k: json.dumps(v) for k, v in parsed.options.items()}
    if parsed.predicate:
        encoded[WHERE_KEY] = json.dumps(parsed.predicate)
    return encoded
