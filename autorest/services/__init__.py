"""Service Layer - async orchestration of model-layer calls.

Invariants:
    - Services only talk to the model layer through core.model_protocols.ModelHandle
"""
