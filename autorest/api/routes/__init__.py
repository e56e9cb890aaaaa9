"""Route Modules - generated model routes and health probes.

Invariants:
    - Each module defines its own APIRouter with prefix and tags
    - Routes never contain CRUD policy (delegate to services/crud_dispatcher)
"""
