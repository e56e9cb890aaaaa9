"""Database Infrastructure - SQLAlchemy declarative Base.

Invariants:
    - Models register themselves on Base.registry at import time
"""
