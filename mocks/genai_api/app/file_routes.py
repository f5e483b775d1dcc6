from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, File, UploadFile

from mocks.genai_api.app.auth import Scope, resolve_scope
from mocks.genai_api.app.services import ServiceContainer, get_services
from shared.common.errors import InvalidArgumentError


FILES_PATH = "/projects/{project}/locations/{location}/files"

router = APIRouter(tags=["files"])


@router.post(FILES_PATH)
async def upload_file(
    file: UploadFile | None = File(default=None),
    scope: Scope = Depends(resolve_scope),
    services: ServiceContainer = Depends(get_services),
) -> dict[str, Any]:
    if file is None:
        raise InvalidArgumentError("No file uploaded")
    data = await file.read(services.files.max_bytes + 1)
    stored = services.files.upload(file.filename or "upload", file.content_type, data)
    services.logger.info("Stored %s (%s bytes) for %s", stored.name, len(data), scope.prefix)
    return {"file": stored.metadata()}


@router.get(FILES_PATH)
async def list_files(
    scope: Scope = Depends(resolve_scope),
    services: ServiceContainer = Depends(get_services),
) -> dict[str, Any]:
    return {"files": [stored.metadata() for stored in services.files.list()]}


@router.get(FILES_PATH + "/{file_id}")
async def get_file(
    file_id: str,
    scope: Scope = Depends(resolve_scope),
    services: ServiceContainer = Depends(get_services),
) -> dict[str, Any]:
    return {"file": services.files.get(f"files/{file_id}").metadata()}


@router.delete(FILES_PATH + "/{file_id}")
async def delete_file(
    file_id: str,
    scope: Scope = Depends(resolve_scope),
    services: ServiceContainer = Depends(get_services),
) -> dict[str, Any]:
    services.files.delete(f"files/{file_id}")
    return {}
