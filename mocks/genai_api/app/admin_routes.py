from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Query, status
from pydantic import ValidationError

from mocks.genai_api.app.services import ServiceContainer, get_services
from shared.catalog.model_catalog import vertex_model_name
from shared.common.errors import InvalidArgumentError
from shared.common.serialization import isoformat_z, utc_now


REQUIRED_PRESET_FIELDS = ("id", "name", "trigger", "response")

router = APIRouter(prefix="/admin", tags=["admin"])


def _invalid_preset(exc: ValidationError) -> InvalidArgumentError:
    error = exc.errors()[0]
    location = ".".join(str(item) for item in error.get("loc", ()))
    return InvalidArgumentError(f"Invalid preset: {location}: {error.get('msg')}")


@router.get("/presets")
async def list_presets(services: ServiceContainer = Depends(get_services)) -> dict[str, Any]:
    return {"presets": services.presets.list()}


@router.get("/presets/{preset_id}")
async def get_preset(preset_id: str, services: ServiceContainer = Depends(get_services)) -> dict[str, Any]:
    return services.presets.get(preset_id)


@router.post("/presets", status_code=status.HTTP_201_CREATED)
async def create_preset(
    payload: dict[str, Any] = Body(...),
    services: ServiceContainer = Depends(get_services),
) -> dict[str, Any]:
    missing = [name for name in REQUIRED_PRESET_FIELDS if not payload.get(name)]
    if missing:
        raise InvalidArgumentError(f"Missing required fields: {', '.join(missing)}")
    try:
        preset = services.presets.add(payload)
    except ValidationError as exc:
        raise _invalid_preset(exc) from exc
    services.logger.info("Preset %s created", preset["id"])
    return {"message": "Preset created successfully", "preset": preset}


@router.put("/presets/{preset_id}")
async def update_preset(
    preset_id: str,
    payload: dict[str, Any] = Body(...),
    services: ServiceContainer = Depends(get_services),
) -> dict[str, Any]:
    try:
        preset = services.presets.update(preset_id, payload)
    except ValidationError as exc:
        raise _invalid_preset(exc) from exc
    return {"message": "Preset updated successfully", "preset": preset}


@router.delete("/presets/{preset_id}")
async def delete_preset(preset_id: str, services: ServiceContainer = Depends(get_services)) -> dict[str, Any]:
    services.presets.remove(preset_id)
    return {"message": "Preset deleted successfully"}


@router.post("/presets/reset")
async def reset_presets(services: ServiceContainer = Depends(get_services)) -> dict[str, Any]:
    services.presets.reset()
    return {"message": "Presets reset to defaults", "count": len(services.presets.list())}


@router.get("/health")
async def admin_health(services: ServiceContainer = Depends(get_services)) -> dict[str, Any]:
    return {"status": "ok", "timestamp": isoformat_z(utc_now()), "service": services.settings.app_name}


@router.get("/models")
async def admin_models(services: ServiceContainer = Depends(get_services)) -> dict[str, Any]:
    settings = services.settings
    return {
        "models": [
            model.to_dict(vertex_model_name(model.id, settings.default_project_id, settings.default_location))
            for model in services.vertex_catalog.models
        ]
    }


@router.get("/stats")
async def admin_stats(services: ServiceContainer = Depends(get_services)) -> dict[str, Any]:
    return {"stats": services.stats.snapshot()}


@router.get("/system-instructions")
async def system_instruction_stats(services: ServiceContainer = Depends(get_services)) -> dict[str, Any]:
    return services.system_instructions.stats()


@router.get("/cache/stats")
async def cache_stats(services: ServiceContainer = Depends(get_services)) -> dict[str, Any]:
    return {"stats": services.caches.stats()}


@router.post("/cache/cleanup")
async def cache_cleanup(services: ServiceContainer = Depends(get_services)) -> dict[str, Any]:
    return {"message": "Expired cache entries removed", "removed": services.caches.sweep_expired()}


@router.get("/batch/stats")
async def batch_stats(services: ServiceContainer = Depends(get_services)) -> dict[str, Any]:
    return {"stats": services.batch.stats()}


@router.post("/batch/cleanup")
async def batch_cleanup(
    max_age_hours: float = Query(default=24.0, alias="maxAgeHours", gt=0),
    services: ServiceContainer = Depends(get_services),
) -> dict[str, Any]:
    removed = services.batch.cleanup(max_age_hours * 3600)
    return {"message": "Old batch jobs removed", "removed": removed}


@router.get("/docs")
async def admin_docs() -> dict[str, Any]:
    models_path = "/v1/projects/{project}/locations/{location}/publishers/google/models"
    scope_path = "/v1/projects/{project}/locations/{location}"
    return {
        "name": "Mock Gemini API",
        "version": "1.0.0",
        "description": "Mock Vertex AI and Google AI Gemini APIs for testing",
        "endpoints": {
            "vertexAI": {
                "generateContent": f"POST {models_path}/{{model}}:generateContent",
                "streamGenerateContent": f"POST {models_path}/{{model}}:streamGenerateContent",
                "countTokens": f"POST {models_path}/{{model}}:countTokens",
                "embedContent": f"POST {models_path}/{{model}}:embedContent",
                "batchEmbedContents": f"POST {models_path}/{{model}}:batchEmbedContents",
                "getModels": f"GET {models_path}",
                "getModel": f"GET {models_path}/{{model}}",
                "files": f"POST|GET {scope_path}/files",
                "cachedContents": f"POST|GET|PATCH|DELETE {scope_path}/cachedContents",
                "batch": f"POST|GET|DELETE {scope_path}/batch",
                "live": "WS /v1/live",
            },
            "googleAI": {
                "generateContent": "POST /v1beta/models/{model}:generateContent",
                "streamGenerateContent": "POST /v1beta/models/{model}:streamGenerateContent",
                "countTokens": "POST /v1beta/models/{model}:countTokens",
                "embedContent": "POST /v1beta/models/{model}:embedContent",
                "batchEmbedContents": "POST /v1beta/models/{model}:batchEmbedContents",
                "getModels": "GET /v1beta/models",
                "getModel": "GET /v1beta/models/{model}",
            },
            "admin": {
                "getPresets": "GET /admin/presets",
                "getPreset": "GET /admin/presets/{id}",
                "createPreset": "POST /admin/presets",
                "updatePreset": "PUT /admin/presets/{id}",
                "deletePreset": "DELETE /admin/presets/{id}",
                "health": "GET /admin/health",
                "docs": "GET /admin/docs",
                "stats": "GET /admin/stats",
            },
        },
        "availableModels": ["gemini-1.5-pro", "gemini-1.5-flash", "text-embedding-004"],
    }
