"""Model Routes - generates the singular, plural and discovery endpoints per binding.

Invariants:
    - Per binding: /{singular}, /{singular}/{item_id} and /{plural}, each with GET/POST/PUT/DELETE
    - The router root (GET) serves the discovery document, two entries per binding
    - A malformed query string never reaches the dispatcher (400 here)
    - Routes never contain CRUD policy: they parse, dispatch, map

Design Decisions:
    - Endpoints built from closures over the read-only binding table
      (ADR: bindings validated once in create_app, never looked up by name per request)
    - Body decoded by hand instead of a Pydantic model: the payload shape belongs
      to the model layer, not to the route
    - Empty write body defaults to {} (singular) or [] (plural)
"""

import json
import logging
from collections.abc import Mapping
from typing import Any

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from autorest.api.response_mapper import malformed_query_response, to_response
from autorest.core.domain_types import RouteShape
from autorest.core.errors import MalformedBodyError
from autorest.core.query_translator import MalformedQuery, parse_query
from autorest.core.resource_config import ModelBinding
from autorest.infrastructure.database import get_db
from autorest.infrastructure.sqlalchemy_model import SqlAlchemyModel
from autorest.schemas.discovery import RouteDescription, RouteParameter
from autorest.services.crud_dispatcher import WRITE_METHODS, dispatch

logger = logging.getLogger(__name__)

METHODS = ["GET", "POST", "PUT", "DELETE"]
ID_PLACEHOLDER = "$ID"


def build_model_router(
    bindings: Mapping[str, ModelBinding], prefix: str = "",
) -> APIRouter:
    """Register every binding's endpoints plus the discovery endpoint."""
    router = APIRouter(prefix=prefix, tags=["models"])

    for binding in bindings.values():
        singular = _make_endpoint(binding, RouteShape.SINGULAR)
        plural = _make_endpoint(binding, RouteShape.PLURAL)
        router.add_api_route(
            f"/{binding.singular}", singular, methods=METHODS,
            name=f"{binding.model_name}.singular",
        )
        router.add_api_route(
            f"/{binding.singular}/{{item_id}}", singular, methods=METHODS,
            name=f"{binding.model_name}.singular_by_id",
        )
        router.add_api_route(
            f"/{binding.plural}", plural, methods=METHODS,
            name=f"{binding.model_name}.plural",
        )

    async def discover(request: Request) -> dict:
        """Describe every generated route."""
        mount = f"{request.scope.get('root_path', '')}{prefix}"
        return describe_routes(bindings, mount)

    # FastAPI refuses an empty prefix together with an empty path
    router.add_api_route(
        "" if prefix else "/", discover, methods=["GET"], name="discovery",
    )
    return router


def describe_routes(bindings: Mapping[str, ModelBinding], mount: str) -> dict:
    """Discovery document: two entries per binding, canonical URLs under mount."""
    document = {}
    for binding in bindings.values():
        route = f"/{binding.singular}/{ID_PLACEHOLDER}"
        document[route] = RouteDescription(
            description=(
                f"Base API to query on a SINGLE item of {binding.model_name}"
            ),
            parameters={
                ID_PLACEHOLDER: RouteParameter(
                    optional=True, description="Id of the item to match",
                ),
            },
            canonical_url=f"{mount}{route}",
        ).to_document()
        route = f"/{binding.plural}"
        document[route] = RouteDescription(
            description=(
                f"Base API to query on SEVERAL items of {binding.model_name}"
            ),
            canonical_url=f"{mount}{route}",
        ).to_document()
    return document


def _make_endpoint(binding: ModelBinding, shape: RouteShape):
    empty_body: Any = {} if shape is RouteShape.SINGULAR else []

    async def endpoint(request: Request, db: AsyncSession = Depends(get_db)):
        parsed = parse_query(request.query_params)
        if isinstance(parsed, MalformedQuery):
            logger.warning(
                f"Malformed query on {request.url.path}: {parsed.key}={parsed.value}",
                extra={"model": binding.model_name, "path": request.url.path},
            )
            return malformed_query_response(parsed)

        body = None
        if request.method in WRITE_METHODS:
            body = await _read_json_body(request, empty_body)

        outcome = await dispatch(
            shape,
            request.method,
            SqlAlchemyModel(binding.model, db),
            parsed,
            body,
            request.path_params.get("item_id"),
        )
        return to_response(outcome)

    endpoint.__name__ = f"{binding.model_name.lower()}_{shape.value}"
    return endpoint


async def _read_json_body(request: Request, default: Any) -> Any:
    raw = await request.body()
    if not raw.strip():
        return default
    try:
        return json.loads(raw)
    except ValueError as e:
        raise MalformedBodyError(str(e))
