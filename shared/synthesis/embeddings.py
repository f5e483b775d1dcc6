from __future__ import annotations

import math

from shared.common.models import Content
from shared.common.serialization import json_dumps


TEXT_EMBEDDING_DIMENSIONS = 768
MULTIMODAL_EMBEDDING_DIMENSIONS = 1408
SEED_MODULUS = 1_000_000
SPREAD = 10_000
MEDIA_PART_KINDS = ("inline_data", "file_data")


def dimensions_for_model(model_name: str | None) -> int:
    if model_name and "multimodalembedding" in model_name.lower():
        return MULTIMODAL_EMBEDDING_DIMENSIONS
    return TEXT_EMBEDDING_DIMENSIONS


def text_seed(text: str) -> int:
    seed = 0
    for char in text:
        seed = (seed * 31 + ord(char)) % SEED_MODULUS
    return seed


def embed_text(text: str, dimensions: int = TEXT_EMBEDDING_DIMENSIONS) -> list[float]:
    seed = text_seed(text)
    values = []
    for index in range(dimensions):
        wave = math.sin(seed + index) * SPREAD
        values.append((wave - math.floor(wave)) * 2 - 1)
    return values


def embedding_input(content: Content | None) -> str:
    """Text that gets hashed for a content, media parts included."""
    if content is None:
        return ""
    pieces = []
    for part in content.parts:
        if part.text is not None:
            pieces.append(part.text)
        elif part.kind in MEDIA_PART_KINDS:
            pieces.append(json_dumps(part.to_wire()))
    return " ".join(pieces)
