"""Schemas shared by every router."""

from typing import Literal

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base for API schemas; reads straight from model instances."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class HealthResponse(BaseSchema):
    """Result of the dependency checks behind ``/health``."""

    status: Literal["healthy", "unhealthy"]
    version: str
    environment: str
    checks: dict[str, str]


class ProbeResponse(BaseSchema):
    status: str


class ErrorResponse(BaseSchema):
    """Body of every non-2xx response."""

    error: str
