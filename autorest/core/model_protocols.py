"""Boundary Protocols - the model-layer contract the dispatcher is written against.

Invariants:
    - Core and services NEVER import the ORM; they only see ModelHandle
    - Every IO method is async; replace_attributes and serialize are pure
    - Methods returning a single entity return None when nothing matches

Design Decisions:
    - Protocol over ABC: structural subtyping, fakes in tests need no base class
      (ADR: ExMA anti-pattern)
"""

from typing import Any, Protocol

from autorest.core.domain_types import Attributes, Predicate


class ModelHandle(Protocol):
    """Contract for one model's persistence operations, bound to a request."""
    name: str

    async def find(self, where: Predicate, options: dict) -> Any | None: ...
    async def find_many(self, where: Predicate, options: dict) -> list[Any]: ...
    async def update(
        self, where: Predicate, attributes: Any, options: dict,
    ) -> Any | None: ...
    async def update_many(
        self, where: Predicate, attributes: Any, options: dict,
    ) -> list[Any]: ...
    async def delete(self, where: Predicate, options: dict) -> None: ...
    async def delete_many(self, where: Predicate, options: dict) -> None: ...
    def spawn(self, attributes: Any) -> Any: ...
    def spawn_many(self, attributes: Any) -> list[Any]: ...
    async def persist(self, entity: Any) -> Any: ...
    async def persist_many(self, entities: list[Any]) -> list[Any]: ...
    def replace_attributes(self, entity: Any, attributes: Any) -> None: ...
    def serialize(self, entity: Any) -> Attributes: ...
