"""SQLAlchemy Model Gateway - the ModelHandle implementation over an AsyncSession.

Invariants:
    - One gateway per (model, request session); never shared across requests
    - Every write commits before returning; failures roll back first
    - IntegrityError -> ConstraintViolationError (400), a value refused before reaching
      the driver -> ModelValidationError (400), other SQLAlchemyError -> DatabaseError (503)
    - Payload keys must be mapped column attributes ("id" -> primary key)
    - replace_attributes never touches the primary key

Design Decisions:
    - Deletes load then delete matching rows: skip/limit/sort apply to deletes too
    - Cleared attributes fall back to the column's scalar default when the
      column is not nullable, otherwise None
    - expire_on_commit=False sessions (see database.py): attributes stay readable after commit
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import inspect, select
from sqlalchemy.exc import (
    DBAPIError, IntegrityError, SQLAlchemyError, StatementError,
)
from sqlalchemy.ext.asyncio import AsyncSession

from autorest.core.domain_types import ID_KEY, Attributes, Predicate
from autorest.core.errors import (
    ConstraintViolationError, DatabaseError, ModelValidationError,
)
from autorest.infrastructure.predicate_sql import (
    apply_options, column_names, coerce_value, compile_predicate,
)

logger = logging.getLogger(__name__)


class SqlAlchemyModel:
    """Persistence operations for one ORM class, bound to a request session."""

    def __init__(self, model_cls: type, db: AsyncSession):
        self.model_cls = model_cls
        self.name = model_cls.__name__
        self._db = db
        self._names = column_names(model_cls)
        mapper = inspect(model_cls)
        self._pk_key = mapper.get_property_by_column(mapper.primary_key[0]).key

    # ─── Reads ───────────────────────────────────────────────────

    async def find(self, where: Predicate, options: dict) -> Any | None:
        stmt = self._select(where, options).limit(1)
        async with self._guard("find"):
            result = await self._db.execute(stmt)
        return result.scalars().first()

    async def find_many(self, where: Predicate, options: dict) -> list[Any]:
        stmt = self._select(where, options)
        async with self._guard("find_many"):
            result = await self._db.execute(stmt)
        return list(result.scalars().all())

    # ─── Writes ──────────────────────────────────────────────────

    async def update(
        self, where: Predicate, attributes: Any, options: dict,
    ) -> Any | None:
        attributes = self._check_attributes(attributes)
        entity = await self.find(where, options)
        if entity is None:
            return None
        self._assign(entity, attributes)
        return await self.persist(entity)

    async def update_many(
        self, where: Predicate, attributes: Any, options: dict,
    ) -> list[Any]:
        attributes = self._check_attributes(attributes)
        entities = await self.find_many(where, options)
        for entity in entities:
            self._assign(entity, attributes)
        return await self.persist_many(entities)

    async def delete(self, where: Predicate, options: dict) -> None:
        entity = await self.find(where, options)
        if entity is None:
            return
        async with self._guard("delete"):
            await self._db.delete(entity)
            await self._db.commit()

    async def delete_many(self, where: Predicate, options: dict) -> None:
        entities = await self.find_many(where, options)
        async with self._guard("delete_many"):
            for entity in entities:
                await self._db.delete(entity)
            await self._db.commit()
        logger.debug(
            f"Deleted {len(entities)} {self.name} entities",
            extra={"model": self.name},
        )

    def spawn(self, attributes: Any) -> Any:
        attributes = self._check_attributes(attributes)
        entity = self.model_cls()
        self._assign(entity, attributes)
        return entity

    def spawn_many(self, attributes: Any) -> list[Any]:
        if not isinstance(attributes, list):
            raise ModelValidationError(
                f"Creating several {self.name} entities expects a JSON array",
                self.name,
            )
        return [self.spawn(item) for item in attributes]

    async def persist(self, entity: Any) -> Any:
        async with self._guard("persist"):
            self._db.add(entity)
            await self._db.commit()
            await self._db.refresh(entity)
        return entity

    async def persist_many(self, entities: list[Any]) -> list[Any]:
        if not entities:
            return entities
        async with self._guard("persist"):
            self._db.add_all(entities)
            await self._db.commit()
            for entity in entities:
                await self._db.refresh(entity)
        return entities

    def replace_attributes(self, entity: Any, attributes: Any) -> None:
        """Replace the whole attribute set: keys absent from attributes are cleared."""
        attributes = self._check_attributes(attributes)
        columns = {
            prop.key: prop.columns[0]
            for prop in inspect(self.model_cls).column_attrs
        }
        for key, column in columns.items():
            if key == self._pk_key:
                continue
            if key in attributes:
                setattr(entity, key, attributes[key])
            else:
                setattr(entity, key, _cleared_value(column))

    def serialize(self, entity: Any) -> Attributes:
        data = {
            prop.key: getattr(entity, prop.key)
            for prop in inspect(self.model_cls).column_attrs
        }
        data.setdefault(ID_KEY, getattr(entity, self._pk_key))
        return data

    # ─── Helpers ─────────────────────────────────────────────────

    def _select(self, where: Predicate, options: dict):
        stmt = select(self.model_cls).where(
            compile_predicate(self.model_cls, where),
        )
        return apply_options(self.model_cls, stmt, options)

    def _check_attributes(self, attributes: Any) -> dict[str, Any]:
        """Validate a payload and return it keyed by mapped attribute names."""
        if not isinstance(attributes, dict):
            raise ModelValidationError(
                f"{self.name} attributes must be a JSON object", self.name,
            )
        checked = {}
        for key, value in attributes.items():
            if key not in self._names:
                raise ModelValidationError(
                    f"{self.name} has no attribute {key!r}", self.name, key,
                )
            checked[self._names[key]] = coerce_value(self.model_cls, key, value)
        return checked

    def _assign(self, entity: Any, attributes: dict[str, Any]) -> None:
        for key, value in attributes.items():
            setattr(entity, key, value)

    @asynccontextmanager
    async def _guard(self, operation: str) -> AsyncIterator[None]:
        """Roll back and translate SQLAlchemy failures."""
        try:
            yield
        except IntegrityError as e:
            await self._db.rollback()
            logger.warning(
                f"{self.name} {operation} integrity error: {e.orig}",
                extra={"model": self.name},
            )
            raise ConstraintViolationError(self.name, operation)
        except SQLAlchemyError as e:
            await self._db.rollback()
            # StatementError without a DBAPI cause: a bind processor refused a value
            if isinstance(e, StatementError) and not isinstance(e, DBAPIError):
                logger.warning(
                    f"{self.name} {operation} rejected a value: {e.orig}",
                    extra={"model": self.name},
                )
                raise ModelValidationError(
                    f"{self.name} {operation} rejected a value: {e.orig}",
                    self.name,
                )
            logger.error(
                f"{self.name} {operation} failed: {e}",
                extra={"model": self.name},
            )
            raise DatabaseError(str(e.__class__.__name__), operation)


def _cleared_value(column) -> Any:
    if not column.nullable and column.default is not None and column.default.is_scalar:
        return column.default.arg
    return None
