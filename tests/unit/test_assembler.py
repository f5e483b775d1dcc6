from __future__ import annotations

import asyncio
import random
from typing import Any

import pytest

from shared.catalog.model_catalog import ModelCatalog, VERTEX_MODELS
from shared.catalog.preset_table import FALLBACK_TEXT, default_presets
from shared.catalog.safety import vertex_safety_ratings
from shared.common.errors import InvalidArgumentError, TokenLimitError
from shared.common.models import (
    BatchEmbedContentsRequest,
    CountTokensRequest,
    CreateCachedContentRequest,
    EmbedContentRequest,
    GenerateContentRequest,
)
from shared.state.context_cache import ContextCacheStore
from shared.state.preset_store import PresetStore
from shared.synthesis.assembler import AssemblerOptions, ResponseAssembler
from shared.synthesis.grounding import GroundingSimulator
from shared.synthesis.schema_values import SchemaValueGenerator
from shared.synthesis.system_instructions import SystemInstructionRegistry
from shared.synthesis.thinking import ThinkingSimulator
from shared.synthesis.tokens import estimate_tokens, response_text


CATALOG = ModelCatalog(VERTEX_MODELS)
GREETING = "Hello! How can I help you today? I'm here to assist you with any questions or tasks you might have."


class FakeSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def build(
    *,
    presets: list[dict[str, Any]] | None = None,
    instructions: SystemInstructionRegistry | None = None,
    caches: ContextCacheStore | None = None,
    options: AssemblerOptions | None = None,
    sleep: FakeSleep | None = None,
) -> ResponseAssembler:
    rng = random.Random(9)
    return ResponseAssembler(
        presets=PresetStore(default_presets() if presets is None else presets),
        caches=caches or ContextCacheStore(),
        system_instructions=instructions or SystemInstructionRegistry(load_defaults=False),
        grounding=GroundingSimulator(rng),
        thinking=ThinkingSimulator(),
        values=SchemaValueGenerator(rng),
        safety_ratings=vertex_safety_ratings,
        options=options,
        sleep=sleep or FakeSleep(),
    )


def request(text: str, **extra: Any) -> GenerateContentRequest:
    return GenerateContentRequest.model_validate(
        {"contents": [{"role": "user", "parts": [{"text": text}]}], **extra}
    )


def generate(
    assembler: ResponseAssembler,
    body: GenerateContentRequest,
    model: str = "gemini-1.5-pro",
) -> dict[str, Any]:
    return asyncio.run(assembler.generate_content(body, model, CATALOG.find(model)))


def test_greeting_preset_is_returned_for_hello() -> None:
    response = generate(build(), request("hello"))

    candidate = response["candidates"][0]
    assert response_text(response) == GREETING
    assert candidate["finishReason"] == "STOP"
    assert len(candidate["safetyRatings"]) == 4
    assert response["modelVersion"] == "gemini-1.5-pro"
    assert response["usageMetadata"] == {
        "promptTokenCount": 2,
        "candidatesTokenCount": estimate_tokens(GREETING),
        "totalTokenCount": 2 + estimate_tokens(GREETING),
    }


def test_unmatched_input_gets_fallback() -> None:
    assert response_text(generate(build(), request("tell me a riddle"))) == FALLBACK_TEXT


def test_preset_table_is_not_mutated_by_overlays() -> None:
    assembler = build(instructions=SystemInstructionRegistry())

    first = generate(assembler, request("hello"))
    second = generate(assembler, request("hello"))

    assert response_text(first) == response_text(second)
    assert "Note: I can provide technical implementation details" in response_text(first)


def test_default_instruction_text_does_not_steer_matching() -> None:
    response = generate(build(instructions=SystemInstructionRegistry()), request("hi there"), "gemini-2.0-flash")

    assert response_text(response).startswith("I understand your request.")


def test_enum_schema_returns_bare_value() -> None:
    body = request(
        "This is absolutely amazing!",
        generationConfig={
            "responseMimeType": "text/x.enum",
            "responseSchema": {"type": "STRING", "enum": ["POSITIVE", "NEGATIVE", "NEUTRAL"]},
        },
    )

    response = generate(build(instructions=SystemInstructionRegistry()), body)

    assert response["candidates"][0]["content"]["parts"] == [{"text": "POSITIVE"}]


def test_json_schema_skips_presets() -> None:
    body = request(
        "hello",
        generationConfig={
            "responseMimeType": "application/json",
            "responseSchema": {
                "type": "OBJECT",
                "properties": {"name": {"type": "STRING"}, "age": {"type": "INTEGER"}},
                "required": ["name"],
            },
        },
    )

    text = response_text(generate(build(), body))

    assert text.startswith('{"name":')


def test_input_over_model_limit_fails_before_generation() -> None:
    with pytest.raises(TokenLimitError) as excinfo:
        generate(build(), request("a" * 15_000), "text-embedding-004")

    assert "limit: 3072" in excinfo.value.message


def test_cached_contents_are_billed() -> None:
    caches = ContextCacheStore()
    entry = caches.create(
        CreateCachedContentRequest.model_validate(
            {"model": "gemini-1.5-pro", "contents": [{"role": "user", "parts": [{"text": "x" * 400}]}]}
        ),
        "p",
        "l",
    )

    response = generate(build(caches=caches), request("hello", cachedContent=entry.name))

    usage = response["usageMetadata"]
    assert usage["cachedContentTokenCount"] == 100
    assert usage["promptTokenCount"] == estimate_tokens("x" * 400 + " hello")
    assert usage["totalTokenCount"] == usage["promptTokenCount"] + usage["candidatesTokenCount"] + 100
    assert caches.get(entry.id).hit_count == 1


def test_missing_cache_is_treated_as_a_miss() -> None:
    response = generate(build(), request("hello", cachedContent="cachedContents/cache-99"))

    assert "cachedContentTokenCount" not in response["usageMetadata"]


def test_search_tool_adds_grounding() -> None:
    response = generate(build(), request("What is Python?", tools=[{"googleSearchRetrieval": {}}]))

    candidate = response["candidates"][0]
    assert response_text(response).startswith('Based on current web search results for "Python"')
    assert candidate["groundingMetadata"]["webSearchQueries"] == ["Python"]


def test_code_parts_get_execution_results() -> None:
    response = generate(build(), request("Show me some python code", tools=[{"codeExecution": {}}]))

    parts = response["candidates"][0]["content"]["parts"]
    kinds = [next(iter(part)) for part in parts]
    assert kinds == ["text", "executableCode", "codeExecutionResult"]
    assert parts[2]["codeExecutionResult"]["outcome"] == "OUTCOME_OK"
    assert parts[2]["codeExecutionResult"]["output"].startswith("Hello from Python!")


def test_complex_query_on_thinking_model_gets_thought_part() -> None:
    body = request("Write a comprehensive guide to sorting algorithms with code")

    parts = generate(build(), body, "gemini-2.0-flash")["candidates"][0]["content"]["parts"]

    assert parts[0]["thought"] is True
    assert "technical query" in parts[0]["text"]
    assert "thought" not in parts[1]


def test_thinking_disabled_by_budget() -> None:
    body = request(
        "Write a comprehensive guide to sorting algorithms with code",
        generationConfig={"thinkingConfig": {"thinkingBudget": 0}},
    )

    parts = generate(build(), body, "gemini-2.0-flash")["candidates"][0]["content"]["parts"]

    assert all("thought" not in part for part in parts)


def test_max_output_tokens_trims_and_recounts() -> None:
    response = generate(build(), request("hello", generationConfig={"maxOutputTokens": 3}))

    text = response_text(response)
    assert text == "Hello! How"
    assert response["usageMetadata"]["candidatesTokenCount"] == estimate_tokens(text)


def test_preset_delay_is_honored() -> None:
    preset = {
        "id": "slow",
        "name": "Slow",
        "trigger": {"type": "text", "value": "wait"},
        "response": {"candidates": [{"content": {"parts": [{"text": "done"}], "role": "model"}}]},
        "delay": 1500,
    }
    sleep = FakeSleep()

    assembler = build(presets=[preset], sleep=sleep, options=AssemblerOptions(delay_seconds=0.1))

    response = generate(assembler, request("WAIT"))

    assert sleep.calls == [0.1, 1.5]
    assert response["candidates"][0]["finishReason"] == "STOP"


def test_usage_can_be_left_out() -> None:
    options = AssemblerOptions(include_usage_metadata=False, include_safety_ratings=False)

    response = generate(build(options=options), request("hello"))

    assert "usageMetadata" not in response
    assert response["candidates"][0]["safetyRatings"] == []


def test_stream_final_chunk_matches_whole_response() -> None:
    assembler = build()

    async def collect() -> list[dict[str, Any]]:
        model = CATALOG.find("gemini-1.5-pro")
        chunks = await assembler.stream_generate_content(request("hello"), "gemini-1.5-pro", model)
        return [chunk async for chunk in chunks]

    chunks = asyncio.run(collect())

    assert response_text(chunks[-1]) == GREETING
    assert chunks[-1]["usageMetadata"]["promptTokenCount"] == 2
    assert len(chunks) == len(GREETING.split(" "))
    assert assembler.stats.snapshot()["streamingResponses"] == 1


def test_stream_errors_surface_before_first_chunk() -> None:
    assembler = build()

    model = CATALOG.find("text-embedding-004")

    with pytest.raises(TokenLimitError):
        asyncio.run(assembler.stream_generate_content(request("a" * 15_000), "text-embedding-004", model))


def test_count_tokens() -> None:
    assembler = build()
    model = CATALOG.find("gemini-1.5-pro")

    body = CountTokensRequest.model_validate({"contents": [{"parts": [{"text": "abcdefgh"}]}]})

    counted = asyncio.run(assembler.count_tokens(body, model))
    empty = asyncio.run(assembler.count_tokens(CountTokensRequest.model_validate({"contents": []}), model))

    assert counted == {"totalTokens": 2}
    assert empty == {"totalTokens": 42}
    with pytest.raises(InvalidArgumentError):
        asyncio.run(assembler.count_tokens(CountTokensRequest(), model))


def test_embeddings_are_deterministic_and_sized() -> None:
    assembler = build()
    body = EmbedContentRequest.model_validate({"content": {"parts": [{"text": "embed me"}]}})

    first = asyncio.run(assembler.embed_content(body, "text-embedding-004", CATALOG.find("text-embedding-004")))
    second = asyncio.run(assembler.embed_content(body, "text-embedding-004", CATALOG.find("text-embedding-004")))
    multimodal = asyncio.run(
        assembler.embed_content(body, "multimodalembedding@001", CATALOG.find("multimodalembedding@001"))
    )

    assert first == second
    assert len(first["embedding"]["values"]) == 768
    assert len(multimodal["embedding"]["values"]) == 1408


def test_batch_embeddings_keep_order() -> None:
    assembler = build()
    body = BatchEmbedContentsRequest.model_validate(
        {"requests": [{"content": {"parts": [{"text": "one"}]}}, {"content": {"parts": [{"text": "two"}]}}]}
    )
    single = EmbedContentRequest.model_validate({"content": {"parts": [{"text": "two"}]}})

    batch = asyncio.run(assembler.batch_embed_contents(body, "text-embedding-004"))
    alone = asyncio.run(assembler.embed_content(single, "text-embedding-004"))

    assert len(batch["embeddings"]) == 2
    assert batch["embeddings"][1] == alone["embedding"]


def test_cached_instruction_without_role_is_treated_as_system() -> None:
    caches = ContextCacheStore()
    entry = caches.create(
        CreateCachedContentRequest.model_validate(
            {
                "model": "gemini-1.5-pro",
                "systemInstruction": {"parts": [{"text": "Always say hello"}]},
                "contents": [{"role": "user", "parts": [{"text": "zzz"}]}],
            }
        ),
        "p",
        "l",
    )

    response = generate(build(caches=caches), request("zzz", cachedContent=entry.name))

    assert response_text(response) == FALLBACK_TEXT
    assert response["usageMetadata"]["promptTokenCount"] == estimate_tokens("Always say hello zzz zzz")


def test_injected_instructions_do_not_count_against_the_input_limit() -> None:
    assembler = build(instructions=SystemInstructionRegistry())

    response = generate(assembler, request("a" * 4 * 3072), "text-embedding-004")

    assert response["usageMetadata"]["promptTokenCount"] == 3072
    with pytest.raises(TokenLimitError) as excinfo:
        generate(assembler, request("a" * (4 * 3072 + 1)), "text-embedding-004")
    assert excinfo.value.message == "Request exceeds token limit. Input tokens: 3073, limit: 3072"
