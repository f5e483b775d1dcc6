from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from mocks.genai_api.app.auth import Scope, require_bearer, resolve_scope
from mocks.genai_api.app.services import ServiceContainer, get_services
from mocks.genai_api.app.streams import sse_response
from shared.catalog.model_catalog import vertex_model_name
from shared.common.errors import InvalidArgumentError, NotFoundError
from shared.common.models import (
    BatchEmbedContentsRequest,
    CountTokensRequest,
    EmbedContentRequest,
    GenerateContentRequest,
)


MODELS_PATH = "/projects/{project}/locations/{location}/publishers/google/models"

router = APIRouter(dependencies=[Depends(require_bearer)], tags=["vertex-ai"])


def require_contents(body: GenerateContentRequest) -> None:
    if body.contents is None:
        raise InvalidArgumentError("Request must contain contents array.")


@router.post(MODELS_PATH + "/{model}:generateContent")
async def generate_content(
    model: str,
    body: GenerateContentRequest,
    scope: Scope = Depends(resolve_scope),
    services: ServiceContainer = Depends(get_services),
) -> dict[str, Any]:
    require_contents(body)
    return await services.vertex.generate_content(body, model, services.vertex_catalog.find(model))


@router.post(MODELS_PATH + "/{model}:streamGenerateContent")
async def stream_generate_content(
    model: str,
    body: GenerateContentRequest,
    scope: Scope = Depends(resolve_scope),
    services: ServiceContainer = Depends(get_services),
) -> StreamingResponse:
    require_contents(body)
    chunks = await services.vertex.stream_generate_content(
        body,
        model,
        services.vertex_catalog.find(model),
        incremental=services.settings.enable_streaming,
    )
    return sse_response(chunks, services.logger)


@router.post(MODELS_PATH + "/{model}:countTokens")
async def count_tokens(
    model: str,
    body: CountTokensRequest,
    scope: Scope = Depends(resolve_scope),
    services: ServiceContainer = Depends(get_services),
) -> dict[str, Any]:
    return await services.vertex.count_tokens(body, services.vertex_catalog.find(model))


@router.post(MODELS_PATH + "/{model}:embedContent")
async def embed_content(
    model: str,
    body: EmbedContentRequest,
    scope: Scope = Depends(resolve_scope),
    services: ServiceContainer = Depends(get_services),
) -> dict[str, Any]:
    if body.content is None:
        raise InvalidArgumentError("Request must contain content.")
    return await services.vertex.embed_content(body, model, services.vertex_catalog.find(model))


@router.post(MODELS_PATH + "/{model}:batchEmbedContents")
async def batch_embed_contents(
    model: str,
    body: BatchEmbedContentsRequest,
    scope: Scope = Depends(resolve_scope),
    services: ServiceContainer = Depends(get_services),
) -> dict[str, Any]:
    return await services.vertex.batch_embed_contents(body, model, services.vertex_catalog.find(model))


@router.get(MODELS_PATH)
async def list_models(
    scope: Scope = Depends(resolve_scope),
    services: ServiceContainer = Depends(get_services),
) -> dict[str, Any]:
    return {
        "models": [
            model.to_dict(vertex_model_name(model.id, scope.project, scope.location))
            for model in services.vertex_catalog.models
        ]
    }


@router.get(MODELS_PATH + "/{model}")
async def get_model(
    model: str,
    scope: Scope = Depends(resolve_scope),
    services: ServiceContainer = Depends(get_services),
) -> dict[str, Any]:
    descriptor = services.vertex_catalog.find(model)
    if descriptor is None:
        raise NotFoundError(f"Model {model} not found.")
    return descriptor.to_dict(vertex_model_name(descriptor.id, scope.project, scope.location))
