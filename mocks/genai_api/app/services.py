from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from fastapi import Request

from shared.catalog.model_catalog import DIRECT_MODELS, VERTEX_MODELS, ModelCatalog
from shared.catalog.preset_table import default_presets
from shared.catalog.safety import direct_safety_ratings, vertex_safety_ratings
from shared.common.config import Settings
from shared.common.models import GenerateContentRequest
from shared.common.serialization import utc_now
from shared.state.batch_jobs import BatchJobRunner
from shared.state.context_cache import ContextCacheStore
from shared.state.file_store import FileStore
from shared.state.live_sessions import LiveSessionManager
from shared.state.preset_store import PresetStore
from shared.synthesis.assembler import AssemblerOptions, RequestStats, ResponseAssembler
from shared.synthesis.grounding import GroundingSimulator
from shared.synthesis.schema_values import SchemaValueGenerator
from shared.synthesis.system_instructions import SystemInstructionRegistry
from shared.synthesis.thinking import ThinkingSimulator


@dataclass(slots=True)
class ServiceContainer:
    settings: Settings
    logger: logging.Logger
    rng: random.Random
    started_at: datetime
    vertex_catalog: ModelCatalog
    direct_catalog: ModelCatalog
    presets: PresetStore
    caches: ContextCacheStore
    files: FileStore
    live_sessions: LiveSessionManager
    system_instructions: SystemInstructionRegistry
    stats: RequestStats
    vertex: ResponseAssembler
    direct: ResponseAssembler
    batch: BatchJobRunner

    def uptime_seconds(self) -> float:
        return (utc_now() - self.started_at).total_seconds()


def build_services(settings: Settings, logger: logging.Logger) -> ServiceContainer:
    rng = random.Random(settings.random_seed) if settings.random_seed is not None else random.Random()
    presets = PresetStore(default_presets())
    caches = ContextCacheStore()
    system_instructions = SystemInstructionRegistry(load_defaults=settings.default_system_instructions)
    grounding = GroundingSimulator(rng)
    thinking = ThinkingSimulator()
    values = SchemaValueGenerator(rng)
    stats = RequestStats()
    options = AssemblerOptions(
        delay_seconds=settings.mock_delay_seconds,
        include_safety_ratings=settings.include_safety_ratings,
        include_usage_metadata=settings.include_usage_metadata,
    )
    shared: dict[str, Any] = {
        "presets": presets,
        "caches": caches,
        "system_instructions": system_instructions,
        "grounding": grounding,
        "thinking": thinking,
        "values": values,
        "options": options,
        "stats": stats,
        "logger": logger,
    }
    vertex = ResponseAssembler(safety_ratings=vertex_safety_ratings, **shared)
    direct = ResponseAssembler(safety_ratings=direct_safety_ratings, **shared)
    vertex_catalog = ModelCatalog(VERTEX_MODELS)

    async def generate_for_batch(request: GenerateContentRequest, model_name: str) -> dict[str, Any]:
        return await vertex.generate_content(request, model_name, vertex_catalog.find(model_name))

    return ServiceContainer(
        settings=settings,
        logger=logger,
        rng=rng,
        started_at=utc_now(),
        vertex_catalog=vertex_catalog,
        direct_catalog=ModelCatalog(DIRECT_MODELS),
        presets=presets,
        caches=caches,
        files=FileStore(max_bytes=settings.max_upload_bytes, rng=rng),
        live_sessions=LiveSessionManager(),
        system_instructions=system_instructions,
        stats=stats,
        vertex=vertex,
        direct=direct,
        batch=BatchJobRunner(
            generate_for_batch,
            max_concurrency=settings.batch_max_concurrency,
            timeout_seconds=settings.batch_timeout_seconds,
            logger=logger,
        ),
    )


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services
