"""Pydantic Schemas - response contracts for endpoints with a fixed shape.

Invariants:
    - Generated model endpoints have no schema: bodies are the model layer's attribute sets

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence (ADR: DDD boundary)
"""
