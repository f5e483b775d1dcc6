from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, status
from pydantic import ValidationError

from mocks.genai_api.app.auth import Scope, resolve_scope
from mocks.genai_api.app.services import ServiceContainer, get_services
from shared.common.errors import InvalidArgumentError
from shared.common.models import BatchRequestItem


BATCH_PATH = "/projects/{project}/locations/{location}/batch"

router = APIRouter(tags=["batch"])


def parse_batch_items(payload: dict[str, Any]) -> list[BatchRequestItem]:
    raw_items = payload.get("requests")
    if not isinstance(raw_items, list) or not raw_items:
        raise InvalidArgumentError("Request must contain a non-empty requests array.")
    items = []
    for index, raw in enumerate(raw_items):
        if not isinstance(raw, dict) or not raw.get("id") or not isinstance(raw.get("request"), dict):
            raise InvalidArgumentError(f"Request at index {index} must have an id and a request object.")
        try:
            items.append(BatchRequestItem.model_validate(raw))
        except ValidationError as exc:
            raise InvalidArgumentError(f"Request at index {index} is invalid: {exc.errors()[0]['msg']}") from exc
    return items


@router.post(BATCH_PATH, status_code=status.HTTP_201_CREATED)
async def submit_batch(
    payload: dict[str, Any] = Body(...),
    scope: Scope = Depends(resolve_scope),
    services: ServiceContainer = Depends(get_services),
) -> dict[str, Any]:
    items = parse_batch_items(payload)
    model = str(payload.get("model") or services.settings.default_model)
    job = services.batch.submit(items, model)
    return {
        "jobId": job.id,
        "status": job.status.value,
        "message": f"Batch job created with {len(items)} requests",
    }


@router.get(BATCH_PATH)
async def list_batches(
    scope: Scope = Depends(resolve_scope),
    services: ServiceContainer = Depends(get_services),
) -> dict[str, Any]:
    jobs = services.batch.list()
    return {"jobs": [job.summary() for job in jobs], "total": len(jobs)}


@router.get(BATCH_PATH + "/{job_id}")
async def get_batch(
    job_id: str,
    scope: Scope = Depends(resolve_scope),
    services: ServiceContainer = Depends(get_services),
) -> dict[str, Any]:
    return services.batch.get(job_id).summary()


@router.get(BATCH_PATH + "/{job_id}/results")
async def get_batch_results(
    job_id: str,
    scope: Scope = Depends(resolve_scope),
    services: ServiceContainer = Depends(get_services),
) -> dict[str, Any]:
    return services.batch.results(job_id)


@router.delete(BATCH_PATH + "/{job_id}")
async def cancel_batch(
    job_id: str,
    scope: Scope = Depends(resolve_scope),
    services: ServiceContainer = Depends(get_services),
) -> dict[str, Any]:
    job = services.batch.cancel(job_id)
    return {"message": f"Batch job {job_id} cancelled", **job.summary()}
