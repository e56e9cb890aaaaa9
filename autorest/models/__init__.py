"""ORM Models - sample entities exposed by the default configuration.

Invariants:
    - All models inherit from Base (db/base.py)
    - Importing this package registers every model on Base.registry

Design Decisions:
    - One file per entity for locality (ADR: ExMA max 3-4 files to understand a feature)
    - Point settings.models_module at another package to expose your own models
"""

from autorest.models.author import Author  # noqa: F401
from autorest.models.book import Book  # noqa: F401
