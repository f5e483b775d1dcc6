from __future__ import annotations

import asyncio
import copy
import logging
import threading
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from shared.catalog.model_catalog import ModelDescriptor
from shared.catalog.preset_table import fallback_response
from shared.common.errors import InvalidArgumentError
from shared.common.models import (
    BatchEmbedContentsRequest,
    CountTokensRequest,
    EmbedContentRequest,
    GenerateContentRequest,
)
from shared.state.context_cache import ContextCacheStore, cache_id_from
from shared.state.preset_store import PresetStore
from shared.synthesis.budget import check_input, output_limit_for, recount_output_tokens, trim_response
from shared.synthesis.code_execution import attach_execution_results
from shared.synthesis.embeddings import dimensions_for_model, embed_text, embedding_input
from shared.synthesis.grounding import GroundingSimulator
from shared.synthesis.schema_values import SchemaValueGenerator
from shared.synthesis.streaming import decompose_response
from shared.synthesis.system_instructions import SystemInstructionRegistry
from shared.synthesis.thinking import ThinkingSimulator
from shared.synthesis.triggers import match_preset
from shared.synthesis.tokens import contents_text, estimate_tokens


DEFAULT_TOKEN_COUNT = 42
ENUM_MIME_TYPE = "text/x.enum"
JSON_MIME_TYPE = "application/json"

Sleep = Callable[[float], Awaitable[None]]


@dataclass(slots=True)
class RequestStats:
    counts: dict[str, int] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def bump(self, key: str) -> None:
        with self._lock:
            self.counts[key] = self.counts.get(key, 0) + 1

    def snapshot(self) -> dict[str, int]:
        keys = (
            "totalRequests",
            "presetResponses",
            "fallbackResponses",
            "structuredResponses",
            "streamingResponses",
            "embeddingRequests",
        )
        with self._lock:
            return {key: self.counts.get(key, 0) for key in keys}


@dataclass(slots=True)
class AssemblerOptions:
    delay_seconds: float = 0.0
    include_safety_ratings: bool = True
    include_usage_metadata: bool = True


class ResponseAssembler:
    def __init__(
        self,
        *,
        presets: PresetStore,
        caches: ContextCacheStore,
        system_instructions: SystemInstructionRegistry,
        grounding: GroundingSimulator,
        thinking: ThinkingSimulator,
        values: SchemaValueGenerator,
        safety_ratings: Callable[[], list[dict[str, Any]]],
        options: AssemblerOptions | None = None,
        stats: RequestStats | None = None,
        logger: logging.Logger | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._presets = presets
        self._caches = caches
        self._system = system_instructions
        self._grounding = grounding
        self._thinking = thinking
        self._values = values
        self._safety_ratings = safety_ratings
        self._options = options or AssemblerOptions()
        self._stats = stats or RequestStats()
        self._logger = logger or logging.getLogger(__name__)
        self._sleep = sleep

    @property
    def stats(self) -> RequestStats:
        return self._stats

    async def _pause(self, seconds: float) -> None:
        if seconds > 0:
            await self._sleep(seconds)

    async def generate_content(
        self,
        request: GenerateContentRequest,
        model_name: str,
        model: ModelDescriptor | None = None,
    ) -> dict[str, Any]:
        self._stats.bump("totalRequests")
        await self._pause(self._options.delay_seconds)
        model_key = model.id if model is not None else model_name

        contents = list(request.contents or [])
        cache_tokens = 0
        if request.cached_content:
            hit = self._caches.apply(cache_id_from(request.cached_content))
            if hit is None:
                self._logger.info("Cached content %s missing or expired, continuing without it", request.cached_content)
            else:
                contents = [*hit.contents, *contents]
                cache_tokens = hit.token_count

        # only what the caller sent counts against the input limit, not injected defaults
        supplied = contents if request.system_instruction is None else [request.system_instruction, *contents]
        prompt_tokens = check_input(contents_text(supplied), model)

        instruction = self._system.effective_for(model_key, request.system_instruction)
        contents = self._system.apply(contents, model_key, request.system_instruction)
        prompt_text = contents_text(contents, skip_system=True)

        grounding = self._grounding.build(prompt_text) if request.has_tool("google_search") else None

        response, structured = await self._select_payload(request, prompt_text)
        candidate = primary_candidate(response)
        parts: list[dict[str, Any]] = candidate["content"]["parts"]

        primary = next((index for index, part in enumerate(parts) if isinstance(part.get("text"), str)), None)
        if not structured and primary is not None:
            text = parts[primary]["text"]
            if grounding is not None:
                text = f"{grounding.enhanced_content}\n\n{text}"
            parts[primary] = {**parts[primary], "text": self._system.rewrite(text, instruction)}
        if grounding is not None:
            candidate["groundingMetadata"] = grounding.metadata
        parts = attach_execution_results(parts)
        if not structured and self._thinking.should_think(request, model_key, prompt_text):
            hint = " ".join(part["text"] for part in parts if isinstance(part.get("text"), str))
            parts.insert(0, self._thinking.thought_part(prompt_text, hint))
        candidate["content"]["parts"] = parts
        candidate["safetyRatings"] = self._safety_ratings() if self._options.include_safety_ratings else []

        usage = response.setdefault("usageMetadata", {})
        usage["promptTokenCount"] = prompt_tokens
        if cache_tokens:
            usage["cachedContentTokenCount"] = cache_tokens
        config = request.generation_config
        limit = output_limit_for(model, config.max_output_tokens if config else None)
        if limit is not None:
            trim_response(response, limit)
        else:
            recount_output_tokens(response)
        if model is not None:
            response["modelVersion"] = model.id
        if not self._options.include_usage_metadata:
            response.pop("usageMetadata", None)
        return response

    async def _select_payload(self, request: GenerateContentRequest, prompt_text: str) -> tuple[dict[str, Any], bool]:
        schema = request.response_schema
        mime_type = request.response_mime_type or JSON_MIME_TYPE
        if schema is not None and mime_type in (ENUM_MIME_TYPE, JSON_MIME_TYPE):
            self._stats.bump("structuredResponses")
            if mime_type == ENUM_MIME_TYPE:
                text = self._values.enum_text(schema, prompt_text)
            else:
                text = self._values.json_text(schema, prompt_text)
            return structured_payload(text), True

        preset = match_preset(prompt_text, self._presets.list(), self._logger)
        if preset is None:
            self._stats.bump("fallbackResponses")
            return fallback_response(), False
        self._stats.bump("presetResponses")
        delay = preset.get("delay")
        if delay:
            await self._pause(delay / 1000.0)
        return copy.deepcopy(preset["response"]), False

    async def stream_generate_content(
        self,
        request: GenerateContentRequest,
        model_name: str,
        model: ModelDescriptor | None = None,
        *,
        incremental: bool = True,
    ) -> AsyncIterator[dict[str, Any]]:
        """Returns an iterator of chunks; validation errors surface before the first chunk."""
        response = await self.generate_content(request, model_name, model)
        self._stats.bump("streamingResponses")
        return self._paced(response, incremental)

    async def _paced(self, response: dict[str, Any], incremental: bool) -> AsyncIterator[dict[str, Any]]:
        if not incremental:
            yield response
            return
        for position, chunk in enumerate(decompose_response(response)):
            if position:
                await self._pause(self._options.delay_seconds)
            yield chunk

    async def count_tokens(self, request: CountTokensRequest, model: ModelDescriptor | None = None) -> dict[str, Any]:
        await self._pause(self._options.delay_seconds)
        contents = request.effective_contents()
        if contents is None:
            raise InvalidArgumentError("Request must contain contents array.")
        tokens = check_input(contents_text(contents), model)
        return {"totalTokens": tokens or DEFAULT_TOKEN_COUNT}

    async def embed_content(
        self,
        request: EmbedContentRequest,
        model_name: str,
        model: ModelDescriptor | None = None,
    ) -> dict[str, Any]:
        self._stats.bump("embeddingRequests")
        await self._pause(self._options.delay_seconds)
        text = contents_text([request.content]) if request.content is not None else ""
        check_input(text, model)
        hashed = embedding_input(request.content)
        dimensions = request.output_dimensionality or dimensions_for_model(model.id if model else model_name)
        return {
            "embedding": {"values": embed_text(hashed, dimensions)},
            "usageMetadata": {"totalTokenCount": max(estimate_tokens(hashed), 1)},
        }

    async def batch_embed_contents(
        self,
        request: BatchEmbedContentsRequest,
        model_name: str,
        model: ModelDescriptor | None = None,
    ) -> dict[str, Any]:
        if request.requests is None:
            raise InvalidArgumentError("Request must contain requests array.")
        results = [await self.embed_content(item, model_name, model) for item in request.requests]
        return {"embeddings": [result["embedding"] for result in results]}


def primary_candidate(response: dict[str, Any]) -> dict[str, Any]:
    candidates = response.setdefault("candidates", [])
    if not candidates:
        candidates.append({"finishReason": "STOP", "index": 0})
    candidate = candidates[0]
    content = candidate.setdefault("content", {"role": "model"})
    content.setdefault("parts", [])
    content.setdefault("role", "model")
    candidate.setdefault("finishReason", "STOP")
    return candidate


def structured_payload(text: str) -> dict[str, Any]:
    return {
        "candidates": [
            {
                "content": {"parts": [{"text": text}], "role": "model"},
                "finishReason": "STOP",
                "index": 0,
            }
        ],
        "usageMetadata": {},
    }
