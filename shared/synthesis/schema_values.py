from __future__ import annotations

import random
from typing import Any

from shared.common.models import Schema, SchemaType
from shared.common.serialization import json_dumps


MAX_DEPTH = 10
OPTIONAL_PROPERTY_PROBABILITY = 0.7

RECIPE_NAMES = (
    "Chocolate Chip Cookies",
    "Oatmeal Raisin Cookies",
    "Sugar Cookies",
    "Snickerdoodles",
    "Peanut Butter Cookies",
)
CHARACTER_NAMES = ("Alex", "Jordan", "Casey", "Riley", "Morgan", "Taylor", "Avery", "Quinn")
PLACEHOLDER_STRING = "Generated string value"

POSITIVE_WORDS = ("love", "great", "excellent", "amazing")
NEGATIVE_WORDS = ("hate", "bad", "terrible", "awful")
GENRE_RULES = (
    ("drama", ("drama", "serious", "emotion")),
    ("comedy", ("comedy", "funny", "humor")),
    ("documentary", ("documentary", "factual", "real-life")),
)
CONDITION_RULES = (
    ("damaged", ("tear", "broken", "damage")),
    ("new in package", ("new",)),
    ("used", ("used",)),
)

JsonValue = Any


def _contains_any(text: str, words: tuple[str, ...]) -> bool:
    return any(word in text for word in words)


def choose_enum_value(values: list[str], input_text: str) -> str:
    if not values:
        return "UNKNOWN"
    lowered = input_text.lower()
    if "POSITIVE" in values and "NEGATIVE" in values:
        if _contains_any(lowered, POSITIVE_WORDS):
            return "POSITIVE"
        if _contains_any(lowered, NEGATIVE_WORDS):
            return "NEGATIVE"
        if "NEUTRAL" in values:
            return "NEUTRAL"
    for value, words in (*GENRE_RULES, *CONDITION_RULES):
        if value in values and _contains_any(lowered, words):
            return value
    return values[0]


class SchemaValueGenerator:
    """Fabricates plausible values for a response schema.

    All randomness goes through the injected `random.Random`, so a seeded
    source reproduces the same fixture for the same schema and input.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def generate(self, schema: Schema, input_text: str, depth: int = 0) -> JsonValue:
        if depth > MAX_DEPTH:
            return None
        if schema.type is SchemaType.STRING:
            if schema.enum:
                return choose_enum_value(schema.enum, input_text)
            return self._string(input_text)
        if schema.type is SchemaType.INTEGER:
            if "age" in input_text.lower():
                return self._rng.randint(18, 80)
            return self._rng.randint(0, 100)
        if schema.type is SchemaType.NUMBER:
            return self._rng.uniform(0, 100)
        if schema.type is SchemaType.BOOLEAN:
            return self._rng.random() < 0.5
        if schema.type is SchemaType.ARRAY:
            return self._array(schema, input_text, depth)
        return self._object(schema, input_text, depth)

    def _string(self, input_text: str) -> str:
        lowered = input_text.lower()
        if "recipe" in lowered or "cookie" in lowered:
            return self._rng.choice(RECIPE_NAMES)
        if "character" in lowered or "name" in lowered:
            return self._rng.choice(CHARACTER_NAMES)
        return PLACEHOLDER_STRING

    def _array(self, schema: Schema, input_text: str, depth: int) -> list[JsonValue]:
        if schema.items is None:
            return []
        count = self._rng.randint(1, 5)
        return [self.generate(schema.items, input_text, depth + 1) for _ in range(count)]

    def _object(self, schema: Schema, input_text: str, depth: int) -> dict[str, JsonValue]:
        required = set(schema.required or [])
        result: dict[str, JsonValue] = {}
        for key, property_schema in (schema.properties or {}).items():
            if key not in required and self._rng.random() >= OPTIONAL_PROPERTY_PROBABILITY:
                continue
            value = self.generate(property_schema, input_text, depth + 1)
            if value is None and not property_schema.nullable:
                continue
            result[key] = value
        return result

    def json_text(self, schema: Schema, input_text: str) -> str:
        return json_dumps(self.generate(schema, input_text))

    def enum_text(self, schema: Schema, input_text: str) -> str:
        return choose_enum_value(schema.enum or [], input_text)
