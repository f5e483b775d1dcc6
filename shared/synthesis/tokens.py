from __future__ import annotations

import math
from collections.abc import Iterable
from typing import Any

from shared.common.models import Content, Part


CHARS_PER_TOKEN = 4


def estimate_tokens(text: str) -> int:
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def part_texts(parts: Iterable[Part]) -> list[str]:
    return [part.text for part in parts if part.text is not None]


def content_text(content: Content) -> str:
    return " ".join(part_texts(content.parts))


def contents_text(contents: Iterable[Content] | None, *, skip_system: bool = False) -> str:
    texts = []
    for content in contents or []:
        if skip_system and content.role == "system":
            continue
        texts.append(content_text(content))
    return " ".join(texts)


def response_parts(response: dict[str, Any]) -> list[dict[str, Any]]:
    candidates = response.get("candidates") or []
    if not candidates:
        return []
    return list(candidates[0].get("content", {}).get("parts") or [])


def response_text(response: dict[str, Any], *, include_thoughts: bool = False) -> str:
    texts = []
    for part in response_parts(response):
        if "text" not in part:
            continue
        if part.get("thought") and not include_thoughts:
            continue
        texts.append(str(part["text"]))
    return "".join(texts)
