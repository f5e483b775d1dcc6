from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from mocks.genai_api.app.services import ServiceContainer, get_services
from shared.catalog.model_catalog import publisher_view
from shared.common.errors import NotFoundError


router = APIRouter(prefix="/v1/publishers/google", tags=["publishers"])


@router.get("/models")
async def list_publisher_models(services: ServiceContainer = Depends(get_services)) -> dict[str, Any]:
    return {"publisherModels": [publisher_view(model) for model in services.vertex_catalog.models]}


@router.get("/models/{model}")
async def get_publisher_model(model: str, services: ServiceContainer = Depends(get_services)) -> dict[str, Any]:
    descriptor = services.vertex_catalog.find(model)
    if descriptor is None:
        raise NotFoundError(f"Publisher model {model} not found.")
    return publisher_view(descriptor)
