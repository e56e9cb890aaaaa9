"""SQLAlchemy Declarative Base - shared base class for all exposable ORM models.

Invariants:
    - Every model the API can expose inherits from Base
    - Base.registry is the single source of truth for the model registry

Design Decisions:
    - Separate file for Base: avoids circular imports between models (ADR: SQLAlchemy best practice)
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all autorest ORM models."""
    pass
