"""Discovery Schemas - the document served at the API root.

Invariants:
    - Exactly two entries per exposed model: "/{singular}/$ID" and "/{plural}"
    - canonicalUrl always starts with the mount path of the generated router

Design Decisions:
    - camelCase aliases on the wire (canonicalUrl), snake_case in Python
"""

from pydantic import BaseModel, ConfigDict, Field


class RouteParameter(BaseModel):
    """Description of one path parameter."""
    optional: bool
    description: str


class RouteDescription(BaseModel):
    """One discoverable route."""
    model_config = ConfigDict(populate_by_name=True)

    description: str
    parameters: dict[str, RouteParameter] | None = None
    canonical_url: str = Field(alias="canonicalUrl")

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
