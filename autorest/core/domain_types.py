"""Domain Types - tagged outcomes and write intents that flow between layers.

Invariants:
    - Every dispatcher operation returns exactly one OperationOutcome variant
    - NotFound is a value, never an exception
    - A write request is classified once into Create or TargetedUpdate; no
      other code re-tests predicate emptiness

Design Decisions:
    - Frozen dataclasses over dicts: pattern matching on the tag, no stringly typed kinds
    - Empty predicate means Create (ADR: the same endpoint doubles as query and
      creation interface). Sharp edge: a client that sends an empty filter on
      POST/PUT creates data instead of updating everything.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

Predicate = dict[str, Any]
Attributes = dict[str, Any]

ID_KEY = "id"


class RouteShape(str, Enum):
    """Which of the two generated endpoints a request hit."""
    SINGULAR = "singular"
    PLURAL = "plural"


# ─── Operation Outcomes ──────────────────────────────────────────

@dataclass(frozen=True)
class Found:
    """Entity (dict) or collection (list of dicts) matched the request."""
    value: Any


@dataclass(frozen=True)
class NotFound:
    """No entity matched a targeted singular operation."""


@dataclass(frozen=True)
class Created:
    """Entity or collection was created from the body."""
    value: Any


@dataclass(frozen=True)
class Deleted:
    """Delete completed; the number of matches is irrelevant."""


OperationOutcome = Union[Found, NotFound, Created, Deleted]


# ─── Write Intents ───────────────────────────────────────────────

@dataclass(frozen=True)
class Create:
    """Write with an empty predicate: the body describes new entities."""
    body: Any


@dataclass(frozen=True)
class TargetedUpdate:
    """Write with a non-empty predicate: the body mutates the matches."""
    predicate: Predicate
    body: Any
    options: dict[str, Any] = field(default_factory=dict)


WriteIntent = Union[Create, TargetedUpdate]


def classify_write(
    predicate: Predicate, body: Any, options: dict[str, Any] | None = None,
) -> WriteIntent:
    """Decide once whether a write request creates or updates."""
    if not predicate:
        return Create(body)
    return TargetedUpdate(predicate, body, dict(options or {}))
