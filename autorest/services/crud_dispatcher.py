"""CRUD Dispatcher - maps (route shape x verb) to model-layer operations.

Invariants:
    - Eight operations: read / create_or_update / replace_or_create / remove,
      each in a singular and a plural flavour
    - A path identifier is folded into the predicate under "id" before the
      model layer sees it
    - Write verbs classify the request once (classify_write) and branch on the tag
    - Deletes never check existence: zero matches is still Deleted()
    - Model-layer exceptions propagate untouched to the error handlers

Design Decisions:
    - POST = partial update (unspecified attributes kept), PUT = full replacement
      (unspecified attributes cleared)
    - Bulk replace mutates the match set in memory in no particular order, then
      awaits one persist of the whole set
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from autorest.core.domain_types import (
    ID_KEY, Create, Created, Deleted, Found, NotFound, OperationOutcome,
    RouteShape, TargetedUpdate, classify_write,
)
from autorest.core.model_protocols import ModelHandle
from autorest.core.query_translator import ParsedQuery

logger = logging.getLogger(__name__)


def with_identifier(query: ParsedQuery, item_id: str | None) -> ParsedQuery:
    """Fold a path identifier into the predicate under the reserved id key."""
    if item_id is None:
        return query
    return ParsedQuery(
        predicate={**query.predicate, ID_KEY: item_id}, options=query.options,
    )


# ─── Singular ────────────────────────────────────────────────────

async def read_one(
    model: ModelHandle, query: ParsedQuery, item_id: str | None = None,
) -> OperationOutcome:
    query = with_identifier(query, item_id)
    entity = await model.find(query.predicate, query.options)
    if entity is None:
        return NotFound()
    return Found(model.serialize(entity))


async def create_or_update_one(
    model: ModelHandle, query: ParsedQuery, body: Any,
    item_id: str | None = None,
) -> OperationOutcome:
    """POST: create from body, or partially update the single match."""
    query = with_identifier(query, item_id)
    intent = classify_write(query.predicate, body, query.options)
    if isinstance(intent, Create):
        return await _create_one(model, intent)

    entity = await model.update(intent.predicate, intent.body, intent.options)
    if entity is None:
        return NotFound()
    return Found(model.serialize(entity))


async def replace_or_create_one(
    model: ModelHandle, query: ParsedQuery, body: Any,
    item_id: str | None = None,
) -> OperationOutcome:
    """PUT: create from body, or replace the whole attribute set of the single match."""
    query = with_identifier(query, item_id)
    intent = classify_write(query.predicate, body, query.options)
    if isinstance(intent, Create):
        return await _create_one(model, intent)

    entity = await model.find(intent.predicate, intent.options)
    if entity is None:
        return NotFound()
    model.replace_attributes(entity, intent.body)
    entity = await model.persist(entity)
    return Found(model.serialize(entity))


async def remove_one(
    model: ModelHandle, query: ParsedQuery, item_id: str | None = None,
) -> OperationOutcome:
    query = with_identifier(query, item_id)
    await model.delete(query.predicate, query.options)
    return Deleted()


async def _create_one(model: ModelHandle, intent: Create) -> OperationOutcome:
    entity = await model.persist(model.spawn(intent.body))
    logger.info(f"Created {model.name}", extra={"model": model.name})
    return Created(model.serialize(entity))


# ─── Plural ──────────────────────────────────────────────────────

async def read_many(model: ModelHandle, query: ParsedQuery) -> OperationOutcome:
    entities = await model.find_many(query.predicate, query.options)
    return Found([model.serialize(e) for e in entities])


async def create_or_update_many(
    model: ModelHandle, query: ParsedQuery, body: Any,
) -> OperationOutcome:
    """POST: bulk-create from a list body, or partially update every match."""
    intent = classify_write(query.predicate, body, query.options)
    if isinstance(intent, Create):
        return await _create_many(model, intent)

    entities = await model.update_many(
        intent.predicate, intent.body, intent.options,
    )
    return Found([model.serialize(e) for e in entities])


async def replace_or_create_many(
    model: ModelHandle, query: ParsedQuery, body: Any,
) -> OperationOutcome:
    """PUT: bulk-create, or replace every match's attributes with the single body."""
    intent = classify_write(query.predicate, body, query.options)
    if isinstance(intent, Create):
        return await _create_many(model, intent)

    entities = await model.find_many(intent.predicate, intent.options)
    for entity in entities:
        model.replace_attributes(entity, intent.body)
    entities = await model.persist_many(entities)
    return Found([model.serialize(e) for e in entities])


async def remove_many(model: ModelHandle, query: ParsedQuery) -> OperationOutcome:
    await model.delete_many(query.predicate, query.options)
    return Deleted()


async def _create_many(model: ModelHandle, intent: Create) -> OperationOutcome:
    entities = await model.persist_many(model.spawn_many(intent.body))
    logger.info(
        f"Created {len(entities)} {model.name} entities",
        extra={"model": model.name},
    )
    return Created([model.serialize(e) for e in entities])


# ─── Dispatch table ──────────────────────────────────────────────

Operation = Callable[..., Awaitable[OperationOutcome]]

# ADR: every mapping explicit, one entry per (shape, verb)
OPERATIONS: dict[tuple[RouteShape, str], Operation] = {
    (RouteShape.SINGULAR, "GET"): read_one,
    (RouteShape.SINGULAR, "POST"): create_or_update_one,
    (RouteShape.SINGULAR, "PUT"): replace_or_create_one,
    (RouteShape.SINGULAR, "DELETE"): remove_one,
    (RouteShape.PLURAL, "GET"): read_many,
    (RouteShape.PLURAL, "POST"): create_or_update_many,
    (RouteShape.PLURAL, "PUT"): replace_or_create_many,
    (RouteShape.PLURAL, "DELETE"): remove_many,
}

WRITE_METHODS = frozenset({"POST", "PUT"})


async def dispatch(
    shape: RouteShape,
    method: str,
    model: ModelHandle,
    query: ParsedQuery,
    body: Any = None,
    item_id: str | None = None,
) -> OperationOutcome:
    """Select and run the operation for a request."""
    method = method.upper()
    operation = OPERATIONS.get((shape, method))
    if operation is None:
        raise ValueError(f"No {shape.value} operation for {method}")

    logger.debug(
        f"Dispatching {method} {shape.value} on {model.name}",
        extra={"model": model.name, "method": method},
    )
    args: list[Any] = [model, query]
    if method in WRITE_METHODS:
        args.append(body)
    if shape is RouteShape.SINGULAR:
        args.append(item_id)
    return await operation(*args)
