from __future__ import annotations

from shared.common.models import GenerateContentRequest


THINKING_MODELS = ("gemini-2.5-pro", "gemini-2.0-flash", "gemini-1.5-pro")
COMPLEXITY_WORDS = ("comprehensive", "detailed", "thorough")

QUERY_TYPES = (
    ("technical", ("code", "programming", "algorithm", "api", "function", "implementation")),
    ("creative", ("write", "create", "story", "poem", "design", "imagine")),
    ("analytical", ("analyze", "compare", "evaluate", "why", "how does", "explain")),
    ("factual", ("what is", "who is", "when", "where", "define", "list")),
)

TYPE_GUIDANCE = {
    "technical": "For technical questions, I should provide accurate, detailed information with examples where helpful.",
    "creative": "For creative tasks, I should be imaginative while maintaining coherence and quality.",
    "analytical": "For analytical questions, I should break down the problem systematically and provide logical reasoning.",
    "factual": "For factual questions, I should provide accurate, up-to-date information from reliable sources.",
}


def supports_thinking(model_name: str | None) -> bool:
    if not model_name:
        return False
    lowered = model_name.lower()
    return any(model in lowered for model in THINKING_MODELS)


def thinking_disabled(request: GenerateContentRequest) -> bool:
    config = request.generation_config
    if config is None:
        return False
    if config.enable_thinking is False:
        return True
    return config.thinking_config is not None and config.thinking_config.thinking_budget == 0


def is_complex_query(text: str) -> bool:
    lowered = text.lower()
    return text.count("?") > 1 or len(text.split()) > 20 or any(word in lowered for word in COMPLEXITY_WORDS)


def classify_query(text: str) -> str:
    lowered = text.lower()
    for query_type, words in QUERY_TYPES:
        if any(word in lowered for word in words):
            return query_type
    return "general"


def build_reasoning(input_text: str, answer_hint: str) -> str:
    query_type = classify_query(input_text)
    steps = ["Let me analyze this request step by step.", f"This appears to be a {query_type} query."]
    if query_type in TYPE_GUIDANCE:
        steps.append(TYPE_GUIDANCE[query_type])
    hint = answer_hint[:100].lower()
    if "code" in hint or "example" in hint:
        steps.append("I should include practical examples or code snippets to illustrate the concepts.")
    if "step" in hint or "process" in hint:
        steps.append("I should structure this as a step-by-step explanation.")
    if is_complex_query(input_text):
        steps.append(
            "This is a complex topic, so I'll break it down into manageable parts and ensure comprehensive coverage."
        )
    steps.append("Now let me provide a helpful and comprehensive response.")
    return "\n\n".join(steps)


class ThinkingSimulator:
    def should_think(self, request: GenerateContentRequest, model_name: str | None, input_text: str) -> bool:
        if not supports_thinking(model_name):
            return False
        if thinking_disabled(request):
            return False
        return is_complex_query(input_text)

    def thought_part(self, input_text: str, answer_hint: str) -> dict[str, object]:
        return {"text": build_reasoning(input_text, answer_hint), "thought": True}
