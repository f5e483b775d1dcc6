from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from mocks.genai_api.app.auth import require_api_key
from mocks.genai_api.app.services import ServiceContainer, get_services
from mocks.genai_api.app.streams import ndjson_response, sse_response
from mocks.genai_api.app.vertex_routes import require_contents
from shared.catalog.model_catalog import direct_model_name
from shared.common.errors import InvalidArgumentError, NotFoundError
from shared.common.models import (
    BatchEmbedContentsRequest,
    CountTokensRequest,
    EmbedContentRequest,
    GenerateContentRequest,
)


router = APIRouter(prefix="/v1beta", dependencies=[Depends(require_api_key)], tags=["google-ai"])


@router.post("/models/{model}:generateContent")
async def generate_content(
    model: str,
    body: GenerateContentRequest,
    services: ServiceContainer = Depends(get_services),
) -> dict[str, Any]:
    require_contents(body)
    return await services.direct.generate_content(body, model, services.direct_catalog.find(model))


@router.post("/models/{model}:streamGenerateContent")
async def stream_generate_content(
    model: str,
    body: GenerateContentRequest,
    alt: str | None = Query(default=None),
    services: ServiceContainer = Depends(get_services),
) -> StreamingResponse:
    require_contents(body)
    chunks = await services.direct.stream_generate_content(
        body,
        model,
        services.direct_catalog.find(model),
        incremental=services.settings.enable_streaming,
    )
    if alt == "sse":
        return sse_response(chunks, services.logger)
    return ndjson_response(chunks, services.logger)


@router.post("/models/{model}:countTokens")
async def count_tokens(
    model: str,
    body: CountTokensRequest,
    services: ServiceContainer = Depends(get_services),
) -> dict[str, Any]:
    return await services.direct.count_tokens(body, services.direct_catalog.find(model))


@router.post("/models/{model}:embedContent")
async def embed_content(
    model: str,
    body: EmbedContentRequest,
    services: ServiceContainer = Depends(get_services),
) -> dict[str, Any]:
    if body.content is None:
        raise InvalidArgumentError("Request must contain content.")
    return await services.direct.embed_content(body, model, services.direct_catalog.find(model))


@router.post("/models/{model}:batchEmbedContents")
async def batch_embed_contents(
    model: str,
    body: BatchEmbedContentsRequest,
    services: ServiceContainer = Depends(get_services),
) -> dict[str, Any]:
    return await services.direct.batch_embed_contents(body, model, services.direct_catalog.find(model))


@router.get("/models")
async def list_models(services: ServiceContainer = Depends(get_services)) -> dict[str, Any]:
    return {"models": [model.to_dict(direct_model_name(model.id)) for model in services.direct_catalog.models]}


@router.get("/models/{model}")
async def get_model(model: str, services: ServiceContainer = Depends(get_services)) -> dict[str, Any]:
    descriptor = services.direct_catalog.find(model)
    if descriptor is None:
        raise NotFoundError(f"Model models/{model} not found.")
    return descriptor.to_dict(direct_model_name(descriptor.id))
