from __future__ import annotations

import copy
from collections.abc import Iterator
from typing import Any

from shared.common.serialization import json_dumps


_TRAILING_FIELDS = ("finishReason", "groundingMetadata", "citationMetadata")


def _increments(parts: list[dict[str, Any]]) -> list[list[dict[str, Any]]]:
    thoughts = [copy.deepcopy(part) for part in parts if isinstance(part.get("text"), str) and part.get("thought")]
    answer = [part for part in parts if isinstance(part.get("text"), str) and not part.get("thought")]
    trailing = [copy.deepcopy(part) for part in parts if not isinstance(part.get("text"), str)]

    pieces: list[list[dict[str, Any]]] = [[thought] for thought in thoughts]
    if answer:
        # text parts collapse into one cumulative part so the last chunk carries the whole answer
        text = "".join(part["text"] for part in answer)
        cumulative = ""
        for index, word in enumerate(text.split(" ")):
            cumulative = word if index == 0 else f"{cumulative} {word}"
            pieces.append([{"text": cumulative}])
        pieces[-1].extend(trailing)
    elif trailing:
        pieces.append(trailing)
    return pieces or [[{"text": ""}]]


def decompose_response(response: dict[str, Any]) -> Iterator[dict[str, Any]]:
    """Splits a finished response into word-by-word increments.

    Thought parts go out first, one chunk each. The answer text then streams
    as a single cumulative part; non-text parts such as executable code join
    the final increment, which alone carries finish reason, grounding and usage.
    """
    candidates = response.get("candidates") or []
    candidate = candidates[0] if candidates else {}
    content = candidate.get("content") or {}
    pieces = _increments(list(content.get("parts") or []))
    header = {key: value for key, value in response.items() if key not in {"candidates", "usageMetadata"}}
    for position, piece in enumerate(pieces):
        last = position == len(pieces) - 1
        chunk_candidate: dict[str, Any] = {
            "content": {"parts": piece, "role": content.get("role", "model")},
            "index": candidate.get("index", 0),
        }
        if "safetyRatings" in candidate:
            chunk_candidate["safetyRatings"] = candidate["safetyRatings"]
        if last:
            for key in _TRAILING_FIELDS:
                if key in candidate:
                    chunk_candidate[key] = candidate[key]
        chunk = {**header, "candidates": [chunk_candidate]}
        if last and "usageMetadata" in response:
            chunk["usageMetadata"] = response["usageMetadata"]
        yield chunk


def sse_frame(chunk: dict[str, Any]) -> str:
    return f"data: {json_dumps(chunk)}\n\n"


def ndjson_frame(chunk: dict[str, Any]) -> str:
    return f"{json_dumps(chunk)}\n"
