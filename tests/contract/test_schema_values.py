from __future__ import annotations

import json
import random
from typing import Any

from shared.common.models import Schema
from shared.synthesis.schema_values import (
    CHARACTER_NAMES,
    MAX_DEPTH,
    RECIPE_NAMES,
    SchemaValueGenerator,
    choose_enum_value,
)


def conforms(value: Any, schema: Schema) -> bool:
    kind = schema.type.value
    if kind == "STRING":
        return isinstance(value, str) and (not schema.enum or value in schema.enum)
    if kind == "INTEGER":
        return isinstance(value, int) and not isinstance(value, bool)
    if kind == "NUMBER":
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if kind == "BOOLEAN":
        return isinstance(value, bool)
    if kind == "ARRAY":
        return isinstance(value, list) and 1 <= len(value) <= 5 and all(conforms(item, schema.items) for item in value)
    if not isinstance(value, dict):
        return False
    properties = schema.properties or {}
    if any(key not in value for key in schema.required or []):
        return False
    return all(key in properties and conforms(item, properties[key]) for key, item in value.items())


NESTED = Schema.model_validate(
    {
        "type": "OBJECT",
        "properties": {
            "title": {"type": "STRING"},
            "rating": {"type": "NUMBER"},
            "published": {"type": "BOOLEAN"},
            "tags": {"type": "ARRAY", "items": {"type": "STRING"}},
            "mood": {"type": "STRING", "enum": ["calm", "tense"]},
            "chapters": {
                "type": "ARRAY",
                "items": {
                    "type": "OBJECT",
                    "properties": {"number": {"type": "INTEGER"}, "name": {"type": "STRING"}},
                    "required": ["number", "name"],
                },
            },
        },
        "required": ["title", "chapters"],
    }
)


def test_sentiment_enum_picks_positive_for_enthusiastic_text() -> None:
    schema = Schema.model_validate({"type": "STRING", "enum": ["POSITIVE", "NEGATIVE", "NEUTRAL"]})

    assert SchemaValueGenerator().enum_text(schema, "This is absolutely amazing!") == "POSITIVE"


def test_enum_rules_cover_sentiment_genre_and_condition() -> None:
    sentiment = ["POSITIVE", "NEGATIVE", "NEUTRAL"]
    assert choose_enum_value(sentiment, "What an awful day") == "NEGATIVE"
    assert choose_enum_value(sentiment, "It arrived on Tuesday") == "NEUTRAL"
    assert choose_enum_value(["drama", "comedy", "documentary"], "A funny film") == "comedy"
    assert choose_enum_value(["drama", "comedy", "documentary"], "A real-life account") == "documentary"
    assert choose_enum_value(["new in package", "used", "damaged"], "The box has a tear") == "damaged"
    assert choose_enum_value(["a", "b"], "nothing relevant") == "a"
    assert choose_enum_value([], "anything") == "UNKNOWN"


def test_object_always_contains_required_name() -> None:
    schema = Schema.model_validate(
        {
            "type": "OBJECT",
            "properties": {"name": {"type": "STRING"}, "age": {"type": "INTEGER"}},
            "required": ["name"],
        }
    )
    generator = SchemaValueGenerator(random.Random(7))

    seen_age = False
    for _ in range(50):
        value = generator.generate(schema, "Describe a person")
        assert isinstance(value["name"], str)
        if "age" in value:
            seen_age = True
            assert 0 <= value["age"] <= 100

    assert seen_age


def test_age_in_input_narrows_integer_range() -> None:
    schema = Schema.model_validate({"type": "INTEGER"})
    generator = SchemaValueGenerator(random.Random(3))

    values = [generator.generate(schema, "What is their age?") for _ in range(200)]

    assert all(18 <= value <= 80 for value in values)


def test_nested_schema_conforms_at_every_node() -> None:
    generator = SchemaValueGenerator(random.Random(11))

    for _ in range(25):
        assert conforms(generator.generate(NESTED, "write a story outline"), NESTED)


def test_serialized_keys_follow_declaration_order() -> None:
    schema = Schema.model_validate(
        {
            "type": "OBJECT",
            "properties": {
                "zeta": {"type": "STRING"},
                "alpha": {"type": "INTEGER"},
                "mid": {"type": "BOOLEAN"},
            },
            "required": ["zeta", "alpha", "mid"],
        }
    )

    text = SchemaValueGenerator(random.Random(5)).json_text(schema, "")

    assert list(json.loads(text)) == ["zeta", "alpha", "mid"]
    assert ": " not in text


def test_seeded_generators_reproduce_the_same_fixture() -> None:
    first = SchemaValueGenerator(random.Random(42)).json_text(NESTED, "cookie recipe")
    second = SchemaValueGenerator(random.Random(42)).json_text(NESTED, "cookie recipe")

    assert first == second


def test_contextual_strings_use_keyword_lists() -> None:
    schema = Schema.model_validate({"type": "STRING"})
    generator = SchemaValueGenerator(random.Random(1))

    assert generator.generate(schema, "a cookie recipe") in RECIPE_NAMES
    assert generator.generate(schema, "pick a character name") in CHARACTER_NAMES
    assert generator.generate(schema, "anything else") == "Generated string value"


def test_depth_guard_returns_none() -> None:
    schema = Schema.model_validate({"type": "STRING"})

    assert SchemaValueGenerator().generate(schema, "", depth=MAX_DEPTH + 1) is None


def test_lowercase_and_implicit_types_are_normalized() -> None:
    schema = Schema.model_validate({"properties": {"count": {"type": "integer"}}, "required": ["count"]})

    value = SchemaValueGenerator(random.Random(2)).generate(schema, "")

    assert schema.type.value == "OBJECT"
    assert isinstance(value["count"], int)
