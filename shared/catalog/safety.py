from __future__ import annotations

from typing import Any


HARM_CATEGORIES = (
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
)


def vertex_safety_ratings() -> list[dict[str, Any]]:
    return [
        {
            "category": category,
            "probability": "NEGLIGIBLE",
            "probabilityScore": 0.05,
            "severity": "HARM_SEVERITY_NEGLIGIBLE",
            "severityScore": 0.05,
        }
        for category in HARM_CATEGORIES
    ]


def direct_safety_ratings() -> list[dict[str, Any]]:
    return [{"category": category, "probability": "NEGLIGIBLE"} for category in HARM_CATEGORIES]
