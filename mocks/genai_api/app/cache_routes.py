from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query, Response, status

from mocks.genai_api.app.auth import Scope, resolve_scope
from mocks.genai_api.app.services import ServiceContainer, get_services
from shared.common.models import CreateCachedContentRequest, UpdateCachedContentRequest


CACHE_PATH = "/projects/{project}/locations/{location}/cachedContents"

router = APIRouter(tags=["cached-contents"])


@router.post(CACHE_PATH, status_code=status.HTTP_201_CREATED)
async def create_cached_content(
    body: CreateCachedContentRequest,
    scope: Scope = Depends(resolve_scope),
    services: ServiceContainer = Depends(get_services),
) -> dict[str, Any]:
    entry = services.caches.create(body, scope.project, scope.location)
    services.logger.info("Created cached content %s with %s tokens", entry.name, entry.token_count)
    return entry.to_resource()


@router.get(CACHE_PATH)
async def list_cached_contents(
    page_size: int = Query(default=50, alias="pageSize"),
    page_token: str | None = Query(default=None, alias="pageToken"),
    scope: Scope = Depends(resolve_scope),
    services: ServiceContainer = Depends(get_services),
) -> dict[str, Any]:
    entries, next_token = services.caches.list(f"{scope.prefix}/", page_size, page_token)
    payload: dict[str, Any] = {"cachedContents": [entry.to_resource() for entry in entries]}
    if next_token:
        payload["nextPageToken"] = next_token
    return payload


@router.get(CACHE_PATH + "/{cache_id}")
async def get_cached_content(
    cache_id: str,
    scope: Scope = Depends(resolve_scope),
    services: ServiceContainer = Depends(get_services),
) -> dict[str, Any]:
    return services.caches.get(cache_id).to_resource()


@router.patch(CACHE_PATH + "/{cache_id}")
async def update_cached_content(
    cache_id: str,
    body: UpdateCachedContentRequest,
    scope: Scope = Depends(resolve_scope),
    services: ServiceContainer = Depends(get_services),
) -> dict[str, Any]:
    return services.caches.update(cache_id, body.expiry()).to_resource()


@router.delete(CACHE_PATH + "/{cache_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_cached_content(
    cache_id: str,
    scope: Scope = Depends(resolve_scope),
    services: ServiceContainer = Depends(get_services),
) -> Response:
    services.caches.delete(cache_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
