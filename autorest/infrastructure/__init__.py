"""Infrastructure - database sessions, SQLAlchemy model gateway, logging.

Invariants:
    - The only package that imports SQLAlchemy's session and engine APIs
"""
