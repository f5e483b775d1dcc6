from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from typing import Any


def trigger_matches(trigger: dict[str, Any], input_text: str, logger: logging.Logger | None = None) -> bool:
    trigger_type = trigger.get("type")
    value = str(trigger.get("value", ""))
    if trigger_type == "text":
        return input_text.lower() == value.lower()
    if trigger_type == "contains":
        return value.lower() in input_text.lower()
    if trigger_type == "regex":
        try:
            return re.search(value, input_text, re.IGNORECASE) is not None
        except re.error as exc:
            if logger is not None:
                logger.warning("Skipping preset with invalid regex trigger %r: %s", value, exc)
            return False
    return False


def match_preset(
    input_text: str,
    presets: Iterable[dict[str, Any]],
    logger: logging.Logger | None = None,
) -> dict[str, Any] | None:
    for preset in presets:
        if trigger_matches(preset.get("trigger") or {}, input_text, logger):
            return preset
    return None
