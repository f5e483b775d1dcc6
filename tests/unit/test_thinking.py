from __future__ import annotations

from shared.common.models import GenerateContentRequest
from shared.synthesis.thinking import ThinkingSimulator, build_reasoning, classify_query, is_complex_query


def request_with(config: dict[str, object] | None = None) -> GenerateContentRequest:
    payload: dict[str, object] = {"contents": [{"role": "user", "parts": [{"text": "x"}]}]}
    if config is not None:
        payload["generationConfig"] = config
    return GenerateContentRequest.model_validate(payload)


def test_complexity_heuristic() -> None:
    assert is_complex_query("Why? And how?")
    assert is_complex_query("Give me a thorough overview")
    assert is_complex_query(" ".join(["word"] * 21))
    assert not is_complex_query("What time is it?")


def test_query_classification_order() -> None:
    assert classify_query("Write code for a parser") == "technical"
    assert classify_query("Write a poem") == "creative"
    assert classify_query("Compare these options") == "analytical"
    assert classify_query("Who is the president") == "factual"
    assert classify_query("Good morning") == "general"


def test_reasoning_is_a_stable_template() -> None:
    first = build_reasoning("Explain this in detail, step by step", "Here is a step-by-step example")

    assert first == build_reasoning("Explain this in detail, step by step", "Here is a step-by-step example")
    assert first.startswith("Let me analyze this request step by step.")
    assert "This appears to be a analytical query." in first
    assert "practical examples or code snippets" in first
    assert first.endswith("Now let me provide a helpful and comprehensive response.")


def test_should_think_needs_model_and_complexity() -> None:
    simulator = ThinkingSimulator()
    complex_text = "Give me a comprehensive history of computing"

    assert simulator.should_think(request_with(), "gemini-2.0-flash", complex_text)
    assert not simulator.should_think(request_with(), "gemini-pro", complex_text)
    assert not simulator.should_think(request_with(), "gemini-2.0-flash", "hi")


def test_thinking_can_be_switched_off() -> None:
    simulator = ThinkingSimulator()
    complex_text = "Give me a comprehensive history of computing"

    assert not simulator.should_think(request_with({"enableThinking": False}), "gemini-1.5-pro", complex_text)
    assert not simulator.should_think(
        request_with({"thinkingConfig": {"thinkingBudget": 0}}), "gemini-1.5-pro", complex_text
    )


def test_thought_part_is_flagged() -> None:
    part = ThinkingSimulator().thought_part("why?", "because")

    assert part["thought"] is True
    assert isinstance(part["text"], str)
