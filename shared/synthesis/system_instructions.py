from __future__ import annotations

import math
import re

from shared.common.models import Content, Part
from shared.synthesis.tokens import content_text


DEFAULT_INSTRUCTION = (
    "You are a helpful, harmless, and honest AI assistant. Provide accurate and useful information while being "
    "respectful and professional. If you don't know something, admit it rather than guessing. Focus on being "
    "genuinely helpful to the user."
)

MODEL_INSTRUCTIONS = {
    "gemini-2.0-flash": (
        "You are Gemini 2.0 Flash, a fast and efficient AI assistant. Provide quick, accurate responses while "
        "maintaining high quality. Use your multimodal capabilities when appropriate and mention when you can help "
        "with images, audio, or code execution."
    ),
    "gemini-1.5-pro": (
        "You are Gemini 1.5 Pro, a powerful AI assistant with advanced reasoning capabilities. Provide thorough, "
        "well-reasoned responses with detailed explanations when helpful. Use your large context window effectively "
        "for complex tasks."
    ),
}

CONTRACTIONS = {
    "i'm": "I am",
    "can't": "cannot",
    "won't": "will not",
    "don't": "do not",
    "isn't": "is not",
    "aren't": "are not",
    "wasn't": "was not",
    "weren't": "were not",
    "hasn't": "has not",
    "haven't": "have not",
    "hadn't": "had not",
    "shouldn't": "should not",
    "wouldn't": "would not",
    "couldn't": "could not",
}
_CONTRACTION_PATTERN = re.compile(r"\b(" + "|".join(re.escape(word) for word in CONTRACTIONS) + r")\b", re.IGNORECASE)

TECHNICAL_NOTE = (
    "\n\nNote: I can provide technical implementation details, code examples, or architectural guidance if needed."
)
FOLLOW_UP_OFFER = "\n\nIs there anything specific about this topic you'd like me to elaborate on or help you with?"


def make_formal(text: str) -> str:
    return _CONTRACTION_PATTERN.sub(lambda match: CONTRACTIONS[match.group(0).lower()], text)


def make_concise(text: str) -> str:
    sentences = [sentence.strip() for sentence in re.split(r"[.!?]+", text) if sentence.strip()]
    if len(sentences) <= 2:
        return text
    keep = math.ceil(len(sentences) * 0.7)
    return ". ".join(sentences[:keep]) + "."


def add_technical_note(text: str) -> str:
    lowered = text.lower()
    if "technical" in lowered or "implementation" in lowered:
        return text
    return text + TECHNICAL_NOTE


def add_follow_up(text: str) -> str:
    lowered = text.lower()
    if "help" in lowered or "assist" in lowered:
        return text
    return text + FOLLOW_UP_OFFER


class SystemInstructionRegistry:
    def __init__(self, *, load_defaults: bool = True) -> None:
        self._default: Content | None = None
        self._by_model: dict[str, Content] = {}
        if load_defaults:
            self.set_default(DEFAULT_INSTRUCTION)
            for model, text in MODEL_INSTRUCTIONS.items():
                self.set_for_model(model, text)

    @staticmethod
    def _as_content(instruction: str | Content) -> Content:
        if isinstance(instruction, str):
            return Content(role="system", parts=[Part(text=instruction)])
        return instruction.model_copy(update={"role": "system"})

    def set_default(self, instruction: str | Content | None) -> None:
        self._default = self._as_content(instruction) if instruction is not None else None

    def set_for_model(self, model: str, instruction: str | Content) -> None:
        self._by_model[model] = self._as_content(instruction)

    def remove_for_model(self, model: str) -> bool:
        return self._by_model.pop(model, None) is not None

    def effective_for(self, model: str | None, requested: Content | None = None) -> Content | None:
        if requested is not None:
            return self._as_content(requested)
        if model and model in self._by_model:
            return self._by_model[model]
        return self._default

    def apply(self, contents: list[Content], model: str | None, requested: Content | None = None) -> list[Content]:
        instruction = self.effective_for(model, requested)
        if instruction is None or has_system_turn(contents):
            return list(contents)
        return [instruction, *contents]

    def rewrite(self, text: str, instruction: Content | None) -> str:
        if instruction is None:
            return text
        hints = content_text(instruction).lower()
        if "formal" in hints or "professional" in hints:
            text = make_formal(text)
        if "concise" in hints or "brief" in hints:
            text = make_concise(text)
        if "technical" in hints or "detailed" in hints:
            text = add_technical_note(text)
        if "helpful" in hints or "assist" in hints:
            text = add_follow_up(text)
        return text

    def stats(self) -> dict[str, object]:
        return {
            "hasDefault": self._default is not None,
            "modelCount": len(self._by_model),
            "models": sorted(self._by_model),
        }


def has_system_turn(contents: list[Content]) -> bool:
    for content in contents:
        if content.role == "system":
            return True
        if content.role == "user" and "system" in content_text(content).lower():
            return True
    return False
