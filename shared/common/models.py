from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Blob(WireModel):
    mime_type: str
    data: str = ""


class FileData(WireModel):
    mime_type: str | None = None
    file_uri: str


class FunctionCall(WireModel):
    name: str
    args: dict[str, Any] = Field(default_factory=dict)


class FunctionResponse(WireModel):
    name: str
    response: dict[str, Any] = Field(default_factory=dict)


class ExecutableCode(WireModel):
    language: str = "PYTHON"
    code: str


class CodeExecutionResult(WireModel):
    outcome: str = "OUTCOME_OK"
    output: str | None = None


PART_VARIANTS = (
    "text",
    "inline_data",
    "file_data",
    "function_call",
    "function_response",
    "executable_code",
    "code_execution_result",
)


class Part(WireModel):
    text: str | None = None
    inline_data: Blob | None = None
    file_data: FileData | None = None
    function_call: FunctionCall | None = None
    function_response: FunctionResponse | None = None
    executable_code: ExecutableCode | None = None
    code_execution_result: CodeExecutionResult | None = None
    thought: bool | None = None

    @model_validator(mode="after")
    def _one_variant(self) -> "Part":
        populated = [name for name in PART_VARIANTS if getattr(self, name) is not None]
        if len(populated) > 1:
            raise ValueError(f"a part must carry exactly one value, got {', '.join(populated)}")
        return self

    @property
    def kind(self) -> str | None:
        if self.text is not None and self.thought:
            return "thought"
        for name in PART_VARIANTS:
            if getattr(self, name) is not None:
                return name
        return None


class Content(WireModel):
    role: str | None = None
    parts: list[Part] = Field(default_factory=list)


def coerce_instruction(value: Any) -> Any:
    if isinstance(value, str):
        return {"role": "system", "parts": [{"text": value}]}
    return value


class SchemaType(str, Enum):
    STRING = "STRING"
    INTEGER = "INTEGER"
    NUMBER = "NUMBER"
    BOOLEAN = "BOOLEAN"
    ARRAY = "ARRAY"
    OBJECT = "OBJECT"


class Schema(WireModel):
    type: SchemaType
    format: str | None = None
    description: str | None = None
    nullable: bool | None = None
    enum: list[str] | None = None
    properties: dict[str, Schema] | None = None
    required: list[str] | None = None
    items: Schema | None = None

    @model_validator(mode="before")
    @classmethod
    def _infer_type(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        raw_type = data.get("type")
        if isinstance(raw_type, str):
            data["type"] = raw_type.upper()
        elif raw_type is None:
            if data.get("properties") is not None:
                data["type"] = "OBJECT"
            elif data.get("items") is not None:
                data["type"] = "ARRAY"
            else:
                data["type"] = "STRING"
        return data


Schema.model_rebuild()


class ThinkingConfig(WireModel):
    thinking_budget: int | None = None
    include_thoughts: bool | None = None


class GenerationConfig(WireModel):
    temperature: float | None = None
    top_p: float | None = None
    top_k: int | None = None
    candidate_count: int | None = None
    max_output_tokens: int | None = None
    stop_sequences: list[str] | None = None
    response_mime_type: str | None = None
    response_schema: Schema | None = None
    enable_thinking: bool | None = None
    thinking_config: ThinkingConfig | None = None


class FunctionDeclarationsTool(WireModel):
    kind: Literal["function_declarations"] = "function_declarations"
    function_declarations: list[dict[str, Any]] = Field(default_factory=list)


class CodeExecutionTool(WireModel):
    kind: Literal["code_execution"] = "code_execution"


class GoogleSearchTool(WireModel):
    kind: Literal["google_search"] = "google_search"
    config: dict[str, Any] = Field(default_factory=dict)


Tool = Annotated[Union[FunctionDeclarationsTool, CodeExecutionTool, GoogleSearchTool], Field(discriminator="kind")]


def classify_tool(raw: Any) -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise ValueError("each tool must be an object")
    if "kind" in raw:
        return raw
    for key in ("googleSearchRetrieval", "googleSearch", "google_search_retrieval", "google_search"):
        if key in raw:
            return {"kind": "google_search", "config": raw[key] or {}}
    if "codeExecution" in raw or "code_execution" in raw:
        return {"kind": "code_execution"}
    for key in ("functionDeclarations", "function_declarations"):
        if key in raw:
            return {"kind": "function_declarations", "function_declarations": raw[key] or []}
    raise ValueError(f"unsupported tool: {', '.join(sorted(raw)) or 'empty object'}")


class _ToolBearing(WireModel):
    @field_validator("tools", mode="before", check_fields=False)
    @classmethod
    def _classify_tools(cls, value: Any) -> Any:
        if value is None:
            return None
        if not isinstance(value, list):
            raise ValueError("tools must be a list")
        return [classify_tool(item) for item in value]

    @field_validator("system_instruction", mode="before", check_fields=False)
    @classmethod
    def _instruction_from_text(cls, value: Any) -> Any:
        return coerce_instruction(value)


class GenerateContentRequest(_ToolBearing):
    contents: list[Content] | None = None
    system_instruction: Content | None = None
    tools: list[Tool] | None = None
    tool_config: dict[str, Any] | None = None
    safety_settings: list[dict[str, Any]] | None = None
    generation_config: GenerationConfig | None = None
    cached_content: str | None = None
    labels: dict[str, str] | None = None

    @property
    def response_schema(self) -> Schema | None:
        return self.generation_config.response_schema if self.generation_config else None

    @property
    def response_mime_type(self) -> str | None:
        return self.generation_config.response_mime_type if self.generation_config else None

    def has_tool(self, kind: str) -> bool:
        return any(tool.kind == kind for tool in self.tools or [])


class CountTokensRequest(_ToolBearing):
    contents: list[Content] | None = None
    system_instruction: Content | None = None
    tools: list[Tool] | None = None
    generate_content_request: GenerateContentRequest | None = None

    def effective_contents(self) -> list[Content] | None:
        if self.contents is not None:
            return self.contents
        if self.generate_content_request is not None:
            return self.generate_content_request.contents
        return None


class EmbedContentRequest(WireModel):
    model: str | None = None
    content: Content | None = None
    task_type: str | None = None
    title: str | None = None
    output_dimensionality: int | None = Field(default=None, gt=0)


class BatchEmbedContentsRequest(WireModel):
    requests: list[EmbedContentRequest] | None = None


class CreateCachedContentRequest(_ToolBearing):
    model: str | None = None
    display_name: str | None = None
    system_instruction: Content | None = None
    contents: list[Content] = Field(default_factory=list)
    tools: list[Tool] | None = None
    ttl: str | None = None
    expire_time: str | None = None


class CacheExpiryUpdate(WireModel):
    ttl: str | None = None
    expire_time: str | None = None


class UpdateCachedContentRequest(WireModel):
    cached_content: CacheExpiryUpdate | None = None
    ttl: str | None = None
    expire_time: str | None = None

    def expiry(self) -> CacheExpiryUpdate:
        if self.cached_content is not None and (self.cached_content.ttl or self.cached_content.expire_time):
            return self.cached_content
        return CacheExpiryUpdate(ttl=self.ttl, expire_time=self.expire_time)


class BatchRequestItem(WireModel):
    id: str
    request: GenerateContentRequest
    model: str | None = None
