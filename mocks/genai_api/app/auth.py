from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, Request

from mocks.genai_api.app.services import ServiceContainer, get_services
from shared.common.errors import PermissionDeniedError, UnauthenticatedError


@dataclass(slots=True)
class Scope:
    project: str
    location: str

    @property
    def prefix(self) -> str:
        return f"projects/{self.project}/locations/{self.location}"


def require_bearer(request: Request) -> None:
    header = request.headers.get("authorization", "")
    if not header.startswith("Bearer ") or not header[len("Bearer ") :].strip():
        raise UnauthenticatedError("Request is missing required authentication credential.")


def require_api_key(request: Request) -> None:
    if not (request.headers.get("x-goog-api-key") or request.query_params.get("key")):
        raise UnauthenticatedError("API key not provided. Please provide a valid API key.")


def resolve_scope(project: str, location: str, services: ServiceContainer = Depends(get_services)) -> Scope:
    settings = services.settings
    project = project if project and project != "-" else settings.default_project_id
    location = location if location and location != "-" else settings.default_location
    if settings.enforce_project_id and project != settings.enforce_project_id:
        raise PermissionDeniedError(f"Access denied. Expected project ID: {settings.enforce_project_id}")
    if settings.enforce_location and location != settings.enforce_location:
        raise PermissionDeniedError(f"Access denied. Expected location: {settings.enforce_location}")
    return Scope(project=project, location=location)
