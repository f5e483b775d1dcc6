from __future__ import annotations

import re
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from shared.common.errors import InvalidArgumentError, NotFoundError
from shared.common.ids import SequentialIds
from shared.common.models import Content, CreateCachedContentRequest, CacheExpiryUpdate
from shared.common.serialization import isoformat_z, parse_timestamp, utc_now
from shared.synthesis.tokens import estimate_tokens


DEFAULT_TTL_SECONDS = 3600.0
DEFAULT_PAGE_SIZE = 50
_TTL = re.compile(r"^\s*(\d+(?:\.\d+)?)s\s*$")


def parse_ttl(ttl: str) -> timedelta:
    match = _TTL.match(ttl)
    if match is None:
        raise InvalidArgumentError(f"Invalid ttl {ttl!r}. Expected a duration in seconds such as '3600s'.")
    return timedelta(seconds=float(match.group(1)))


def cache_id_from(reference: str) -> str:
    return reference.rstrip("/").rsplit("/", 1)[-1]


@dataclass(slots=True)
class CacheEntry:
    id: str
    name: str
    model: str
    display_name: str | None
    system_instruction: Content | None
    contents: list[Content]
    tools: list[Any] | None
    token_count: int
    create_time: datetime
    update_time: datetime
    expire_time: datetime
    hit_count: int = 0

    def prefix_contents(self) -> list[Content]:
        if self.system_instruction is None:
            return list(self.contents)
        return [self.system_instruction, *self.contents]

    def to_resource(self) -> dict[str, Any]:
        resource: dict[str, Any] = {
            "name": self.name,
            "model": self.model,
            "usageMetadata": {"totalTokenCount": self.token_count},
            "createTime": isoformat_z(self.create_time),
            "updateTime": isoformat_z(self.update_time),
            "expireTime": isoformat_z(self.expire_time),
        }
        if self.display_name:
            resource["displayName"] = self.display_name
        return resource


@dataclass(slots=True)
class CacheHit:
    contents: list[Content]
    token_count: int


def as_system_turn(instruction: Content | None) -> Content | None:
    if instruction is None:
        return None
    return instruction.model_copy(update={"role": "system"})


def count_cached_tokens(system_instruction: Content | None, contents: list[Content]) -> int:
    total = 0
    for content in ([system_instruction] if system_instruction else []) + contents:
        total += sum(estimate_tokens(part.text) for part in content.parts if part.text is not None)
    return total


@dataclass(slots=True)
class _Counters:
    total_hits: int = 0
    explicit_hits: int = 0


class ContextCacheStore:
    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self._clock = clock
        self._ids = SequentialIds("cache")
        self._entries: dict[str, CacheEntry] = {}
        self._counters = _Counters()
        self._lock = threading.Lock()

    def _expiry(self, update: CacheExpiryUpdate, now: datetime) -> datetime | None:
        if update.expire_time:
            try:
                return parse_timestamp(update.expire_time)
            except ValueError as exc:
                raise InvalidArgumentError(f"Invalid expireTime {update.expire_time!r}.") from exc
        if update.ttl:
            return now + parse_ttl(update.ttl)
        return None

    def create(self, request: CreateCachedContentRequest, project: str, location: str) -> CacheEntry:
        if not request.model:
            raise InvalidArgumentError("Model is required for cached content.")
        now = self._clock()
        expire_time = self._expiry(CacheExpiryUpdate(ttl=request.ttl, expire_time=request.expire_time), now)
        cache_id = self._ids.next()
        entry = CacheEntry(
            id=cache_id,
            name=f"projects/{project}/locations/{location}/cachedContents/{cache_id}",
            model=request.model,
            display_name=request.display_name,
            system_instruction=as_system_turn(request.system_instruction),
            contents=list(request.contents),
            tools=request.tools,
            token_count=count_cached_tokens(request.system_instruction, request.contents),
            create_time=now,
            update_time=now,
            expire_time=expire_time or now + timedelta(seconds=DEFAULT_TTL_SECONDS),
        )
        with self._lock:
            self._entries[cache_id] = entry
        return entry

    def _live(self, cache_id: str, now: datetime) -> CacheEntry | None:
        entry = self._entries.get(cache_id)
        if entry is not None and entry.expire_time <= now:
            del self._entries[cache_id]
            return None
        return entry

    def get(self, cache_id: str) -> CacheEntry:
        with self._lock:
            entry = self._live(cache_id, self._clock())
        if entry is None:
            raise NotFoundError(f"Cached content {cache_id} not found or expired.")
        return entry

    def update(self, cache_id: str, update: CacheExpiryUpdate) -> CacheEntry:
        now = self._clock()
        expire_time = self._expiry(update, now)
        with self._lock:
            entry = self._live(cache_id, now)
            if entry is None:
                raise NotFoundError(f"Cached content {cache_id} not found or expired.")
            if expire_time is not None:
                entry.expire_time = expire_time
            entry.update_time = now
            return entry

    def delete(self, cache_id: str) -> None:
        with self._lock:
            if self._entries.pop(cache_id, None) is None:
                raise NotFoundError(f"Cached content {cache_id} not found or expired.")

    def list(
        self,
        prefix: str | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        page_token: str | None = None,
    ) -> tuple[list[CacheEntry], str | None]:
        try:
            offset = int(page_token) if page_token else 0
        except ValueError as exc:
            raise InvalidArgumentError(f"Invalid page token {page_token!r}.") from exc
        page_size = page_size if page_size > 0 else DEFAULT_PAGE_SIZE
        now = self._clock()
        with self._lock:
            live = [entry for entry in (self._live(key, now) for key in list(self._entries)) if entry is not None]
        matching = [entry for entry in live if prefix is None or entry.name.startswith(prefix)]
        page = matching[offset : offset + page_size]
        next_token = str(offset + page_size) if offset + page_size < len(matching) else None
        return page, next_token

    def apply(self, cache_id: str) -> CacheHit | None:
        with self._lock:
            entry = self._live(cache_id, self._clock())
            if entry is None:
                return None
            entry.hit_count += 1
            self._counters.total_hits += 1
            self._counters.explicit_hits += 1
            return CacheHit(contents=entry.prefix_contents(), token_count=entry.token_count)

    def sweep_expired(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if entry.expire_time <= now]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def stats(self) -> dict[str, int]:
        now = self._clock()
        with self._lock:
            entries = list(self._entries.values())
            active = [entry for entry in entries if entry.expire_time > now]
            return {
                "totalCaches": len(entries),
                "activeCaches": len(active),
                "expiredCaches": len(entries) - len(active),
                "totalTokensStored": sum(entry.token_count for entry in active),
                "totalHits": self._counters.total_hits,
                "explicitCacheHits": self._counters.explicit_hits,
            }
