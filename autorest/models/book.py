"""Book ORM - a published work, optionally linked to an author.

Invariants:
    - id is a UUID primary key generated client-side
    - title is non-nullable; every other attribute is optional

Design Decisions:
    - author_id FK without relationship(): the generated API only serializes
      columns, so relationships would never be loaded
"""

import uuid

from sqlalchemy import Boolean, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from autorest.db.base import Base


class Book(Base):
    """Book entity."""
    __tablename__ = "books"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4,
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    available: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    author_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("authors.id", ondelete="SET NULL"), nullable=True,
    )
