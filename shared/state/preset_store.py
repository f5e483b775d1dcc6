from __future__ import annotations

import copy
import threading
from typing import Any, Literal

from pydantic import BaseModel, Field

from shared.common.errors import AlreadyExistsError, NotFoundError


class PresetTrigger(BaseModel):
    type: Literal["text", "contains", "regex"]
    value: str


class PresetResponse(BaseModel):
    id: str = Field(min_length=1)
    name: str
    description: str = ""
    trigger: PresetTrigger
    response: dict[str, Any]
    delay: int | None = Field(default=None, ge=0)


class PresetStore:
    """Ordered preset table; lookups scan it front to back."""

    def __init__(self, presets: list[dict[str, Any]] | None = None) -> None:
        self._lock = threading.Lock()
        self._initial = [self._validated(preset) for preset in presets or []]
        self._presets = copy.deepcopy(self._initial)

    @staticmethod
    def _validated(preset: dict[str, Any]) -> dict[str, Any]:
        return PresetResponse.model_validate(preset).model_dump(exclude_none=True)

    def list(self) -> list[dict[str, Any]]:
        with self._lock:
            return list(self._presets)

    def get(self, preset_id: str) -> dict[str, Any]:
        with self._lock:
            for preset in self._presets:
                if preset["id"] == preset_id:
                    return preset
        raise NotFoundError("Preset not found")

    def add(self, preset: dict[str, Any]) -> dict[str, Any]:
        validated = self._validated(preset)
        with self._lock:
            if any(existing["id"] == validated["id"] for existing in self._presets):
                raise AlreadyExistsError(f"Preset with id {validated['id']} already exists")
            self._presets.append(validated)
        return validated

    def update(self, preset_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        with self._lock:
            for index, preset in enumerate(self._presets):
                if preset["id"] != preset_id:
                    continue
                merged = self._validated({**preset, **changes, "id": preset_id})
                self._presets[index] = merged
                return merged
        raise NotFoundError("Preset not found")

    def remove(self, preset_id: str) -> None:
        with self._lock:
            for index, preset in enumerate(self._presets):
                if preset["id"] == preset_id:
                    del self._presets[index]
                    return
        raise NotFoundError("Preset not found")

    def reset(self) -> None:
        with self._lock:
            self._presets = copy.deepcopy(self._initial)
