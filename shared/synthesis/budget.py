from __future__ import annotations

from typing import Any

from shared.catalog.model_catalog import ModelDescriptor
from shared.common.errors import TokenLimitError
from shared.synthesis.tokens import CHARS_PER_TOKEN, estimate_tokens, response_parts


def check_input(text: str, model: ModelDescriptor | None) -> int:
    tokens = estimate_tokens(text)
    if model is not None and tokens > model.input_token_limit:
        raise TokenLimitError(tokens, model.input_token_limit)
    return tokens


def trim_text(text: str, output_limit: int) -> str:
    if estimate_tokens(text) <= output_limit:
        return text
    budget = output_limit * CHARS_PER_TOKEN
    kept: list[str] = []
    used = 0
    for word in text.split(" "):
        extra = len(word) if not kept else len(word) + 1
        if used + extra > budget:
            break
        kept.append(word)
        used += extra
    if not any(kept):
        return text[:budget]
    return " ".join(kept)


def output_limit_for(model: ModelDescriptor | None, max_output_tokens: int | None) -> int | None:
    limits = [limit for limit in (model.output_token_limit if model else None, max_output_tokens) if limit]
    return min(limits) if limits else None


def trim_response(response: dict[str, Any], output_limit: int) -> dict[str, Any]:
    for candidate in response.get("candidates") or []:
        for part in candidate.get("content", {}).get("parts") or []:
            if isinstance(part.get("text"), str):
                part["text"] = trim_text(part["text"], output_limit)
    recount_output_tokens(response)
    return response


def recount_output_tokens(response: dict[str, Any]) -> None:
    usage = response.get("usageMetadata")
    if usage is None:
        return
    output_tokens = sum(
        estimate_tokens(part["text"]) for part in response_parts(response) if isinstance(part.get("text"), str)
    )
    usage["candidatesTokenCount"] = output_tokens
    usage["totalTokenCount"] = (
        usage.get("promptTokenCount", 0) + output_tokens + usage.get("cachedContentTokenCount", 0)
    )
