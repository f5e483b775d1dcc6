from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class ModelDescriptor:
    id: str
    version: str
    display_name: str
    description: str
    input_token_limit: int
    output_token_limit: int
    supported_generation_methods: tuple[str, ...] = ("generateContent", "streamGenerateContent")
    temperature: float = 1.0
    top_p: float = 0.95
    top_k: int = 40

    @property
    def is_embedding(self) -> bool:
        return "embedContent" in self.supported_generation_methods

    def to_dict(self, name: str) -> dict[str, Any]:
        return {
            "name": name,
            "version": self.version,
            "displayName": self.display_name,
            "description": self.description,
            "inputTokenLimit": self.input_token_limit,
            "outputTokenLimit": self.output_token_limit,
            "supportedGenerationMethods": list(self.supported_generation_methods),
            "temperature": self.temperature,
            "topP": self.top_p,
            "topK": self.top_k,
        }


_EMBEDDING = ("embedContent",)
_GENERATE_ONLY = ("generateContent",)


def _embedding(model_id: str, version: str, display_name: str, description: str, input_limit: int) -> ModelDescriptor:
    return ModelDescriptor(
        id=model_id,
        version=version,
        display_name=display_name,
        description=description,
        input_token_limit=input_limit,
        output_token_limit=1,
        supported_generation_methods=_EMBEDDING,
        temperature=0.0,
        top_p=1.0,
        top_k=1,
    )


VERTEX_MODELS: tuple[ModelDescriptor, ...] = (
    ModelDescriptor(
        "gemini-2.5-pro-preview-0325",
        "0325",
        "Gemini 2.5 Pro Preview",
        "Enhanced thinking and reasoning, multimodal understanding, advanced coding, and more",
        2_000_000,
        8192,
    ),
    ModelDescriptor(
        "gemini-2.0-flash",
        "001",
        "Gemini 2.0 Flash",
        "Next generation features, speed, thinking, realtime streaming, and multimodal generation",
        1_048_576,
        8192,
    ),
    ModelDescriptor("gemini-2.0-flash-lite", "001", "Gemini 2.0 Flash-Lite", "Cost efficiency and low latency", 1_048_576, 8192),
    ModelDescriptor(
        "gemini-1.5-pro", "001", "Gemini 1.5 Pro", "Complex reasoning tasks requiring more intelligence", 1_048_576, 8192
    ),
    ModelDescriptor(
        "gemini-1.5-flash",
        "001",
        "Gemini 1.5 Flash",
        "Fast and versatile performance across a diverse variety of tasks",
        1_048_576,
        8192,
    ),
    ModelDescriptor(
        "gemini-1.5-flash-8b", "001", "Gemini 1.5 Flash-8B", "High volume and lower intelligence tasks", 1_048_576, 8192
    ),
    _embedding("text-embedding-004", "004", "Text Embedding 004", "Advanced text embedding model", 3072),
    _embedding(
        "gemini-embedding-exp", "001", "Gemini Embedding Experimental", "Measuring the relatedness of text strings", 3072
    ),
    _embedding(
        "multimodalembedding@001",
        "001",
        "Multimodal Embedding 001",
        "Generate embeddings for text, image, video and audio content",
        2048,
    ),
    _embedding(
        "text-multilingual-embedding-002",
        "002",
        "Text Multilingual Embedding 002",
        "Multilingual text embedding with enhanced multimodal capabilities",
        2048,
    ),
    ModelDescriptor(
        "imagen-3.0-generate-002",
        "002",
        "Imagen 3",
        "Our most advanced image generation model",
        1024,
        1,
        _GENERATE_ONLY,
        temperature=0.4,
        top_p=1.0,
        top_k=32,
    ),
    ModelDescriptor(
        "veo-2.0-generate-001",
        "001",
        "Veo 2",
        "Advanced video generation model",
        1024,
        1,
        _GENERATE_ONLY,
        temperature=0.4,
        top_p=1.0,
        top_k=32,
    ),
    ModelDescriptor(
        "gemini-2.0-flash-live-001",
        "001",
        "Gemini 2.0 Flash Live",
        "Real-time streaming and multimodal generation",
        1_048_576,
        8192,
    ),
)


DIRECT_MODELS: tuple[ModelDescriptor, ...] = (
    ModelDescriptor(
        "gemini-pro",
        "001",
        "Gemini Pro",
        "The best model for scaling across a wide range of tasks",
        32_760,
        8192,
        ("generateContent", "countTokens"),
        temperature=0.9,
        top_p=1.0,
        top_k=1,
    ),
    ModelDescriptor(
        "gemini-pro-vision",
        "001",
        "Gemini Pro Vision",
        "The best image understanding model to handle a broad range of applications",
        16_384,
        2048,
        ("generateContent", "countTokens"),
        temperature=0.4,
        top_p=1.0,
        top_k=32,
    ),
    ModelDescriptor(
        "gemini-1.5-flash",
        "001",
        "Gemini 1.5 Flash",
        "Fast and versatile multimodal model for scaling across diverse tasks",
        1_048_576,
        8192,
        ("generateContent", "countTokens", "streamGenerateContent"),
        temperature=1.0,
        top_p=0.95,
        top_k=64,
    ),
    ModelDescriptor(
        "gemini-1.5-pro",
        "001",
        "Gemini 1.5 Pro",
        "Mid-size multimodal model that supports up to 2 million tokens",
        2_097_152,
        8192,
        ("generateContent", "countTokens", "streamGenerateContent"),
        temperature=1.0,
        top_p=0.95,
        top_k=64,
    ),
    ModelDescriptor(
        "gemini-2.0-flash",
        "001",
        "Gemini 2.0 Flash",
        "Next generation features, speed, and multimodal generation",
        1_048_576,
        8192,
        ("generateContent", "countTokens", "streamGenerateContent"),
        temperature=1.0,
        top_p=0.95,
        top_k=64,
    ),
    ModelDescriptor(
        "text-embedding-004",
        "004",
        "Text Embedding 004",
        "Obtain a distributed representation of a text",
        3072,
        1,
        ("embedContent", "batchEmbedContents"),
        temperature=0.0,
        top_p=1.0,
        top_k=1,
    ),
)


@dataclass(slots=True)
class ModelCatalog:
    models: tuple[ModelDescriptor, ...]
    _by_id: dict[str, ModelDescriptor] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._by_id = {model.id: model for model in self.models}

    def find(self, name: str | None) -> ModelDescriptor | None:
        if not name:
            return None
        key = name.rsplit("/", 1)[-1]
        if key in self._by_id:
            return self._by_id[key]
        for model in self.models:
            if model.display_name == name:
                return model
        return None


def vertex_model_name(model_id: str, project: str, location: str) -> str:
    return f"projects/{project}/locations/{location}/publishers/google/models/{model_id}"


def direct_model_name(model_id: str) -> str:
    return f"models/{model_id}"


def publisher_view(model: ModelDescriptor) -> dict[str, Any]:
    return {
        "name": f"publishers/google/models/{model.id}",
        "versionId": model.version,
        "displayName": model.display_name,
        "description": model.description,
        "supportedActions": list(model.supported_generation_methods),
        "inputTokenLimit": model.input_token_limit,
        "outputTokenLimit": model.output_token_limit,
        "publisher": {"name": "google", "displayName": "Google"},
    }
