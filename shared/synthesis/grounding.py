from __future__ import annotations

import random
import re
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote_plus


QUERY_PATTERNS = (
    re.compile(r"what is (.*?)[.?]?$", re.IGNORECASE),
    re.compile(r"tell me about (.*?)[.?]?$", re.IGNORECASE),
    re.compile(r"search for (.*?)[.?]?$", re.IGNORECASE),
    re.compile(r"find information about (.*?)[.?]?$", re.IGNORECASE),
    re.compile(r"latest news on (.*?)[.?]?$", re.IGNORECASE),
)
QUESTION_OPENERS = ("what", "how", "when", "where", "why")


@dataclass(slots=True)
class SearchResult:
    title: str
    url: str
    snippet: str


@dataclass(slots=True)
class GroundingResult:
    query: str
    results: list[SearchResult]
    metadata: dict[str, Any]
    enhanced_content: str


def extract_query(text: str) -> str:
    stripped = text.strip()
    for pattern in QUERY_PATTERNS:
        match = pattern.search(stripped)
        if match and match.group(1).strip():
            return match.group(1).strip()
    lowered = stripped.lower()
    if "?" in stripped or lowered.startswith(QUESTION_OPENERS):
        return stripped.replace("?", "").strip()
    return stripped


class GroundingSimulator:
    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def search(self, query: str) -> list[SearchResult]:
        results = [
            SearchResult(
                title=f"{query} - Wikipedia",
                url=f"https://en.wikipedia.org/wiki/{query.replace(' ', '_')}",
                snippet=(
                    f"Wikipedia article about {query}. This is a comprehensive overview covering the key aspects "
                    f"and latest information about {query}."
                ),
            ),
            SearchResult(
                title=f"Latest news about {query}",
                url=f"https://news.google.com/search?q={quote_plus(query)}",
                snippet=(
                    f"Recent news and updates about {query}. Stay informed with the latest developments and "
                    "breaking news."
                ),
            ),
            SearchResult(
                title=f"{query} - Official Documentation",
                url=f"https://docs.example.com/{query.lower().replace(' ', '-')}",
                snippet=(
                    f"Official documentation and guides for {query}. Learn about features, best practices, and "
                    "implementation details."
                ),
            ),
        ]
        return results[: 2 + self._rng.randint(0, 1)]

    def build(self, input_text: str) -> GroundingResult:
        query = extract_query(input_text)
        results = self.search(query)
        chunks = [
            {
                "web": {"uri": result.url, "title": result.title},
                "retrievedContext": {"uri": result.url, "title": result.title, "text": result.snippet},
            }
            for result in results
        ]
        supports = [
            {
                "segment": {"startIndex": 0, "endIndex": len(result.snippet), "text": result.snippet},
                "groundingChunkIndices": [index],
                "confidenceScores": [round(0.85 + self._rng.random() * 0.1, 4)],
            }
            for index, result in enumerate(results)
        ]
        metadata = {
            "searchEntryPoint": {"renderedContent": query},
            "groundingChunks": chunks,
            "groundingSupports": supports,
            "webSearchQueries": [query],
        }
        return GroundingResult(query, results, metadata, enhanced_content(query, results))


def enhanced_content(query: str, results: list[SearchResult]) -> str:
    lines = [f'Based on current web search results for "{query}":\n\n']
    for result in results:
        lines.append(f"**{result.title}**\n{result.snippet}\n\n")
    return "".join(lines).rstrip()
