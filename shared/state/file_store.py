from __future__ import annotations

import hashlib
import random
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from shared.common.errors import InvalidArgumentError, NotFoundError
from shared.common.ids import new_file_id
from shared.common.serialization import b64encode_bytes, isoformat_z, utc_now


FILE_LIFETIME = timedelta(hours=24)
DEFAULT_MAX_BYTES = 10 * 1024 * 1024


@dataclass(slots=True)
class StoredFile:
    name: str
    display_name: str
    mime_type: str
    data: bytes
    create_time: datetime
    expiration_time: datetime

    def metadata(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "displayName": self.display_name,
            "mimeType": self.mime_type,
            "sizeBytes": str(len(self.data)),
            "createTime": isoformat_z(self.create_time),
            "updateTime": isoformat_z(self.create_time),
            "expirationTime": isoformat_z(self.expiration_time),
            "sha256Hash": b64encode_bytes(hashlib.sha256(self.data).digest()),
            "uri": f"gs://mock-bucket/{self.name}",
            "state": "ACTIVE",
        }


class FileStore:
    def __init__(
        self,
        *,
        max_bytes: int = DEFAULT_MAX_BYTES,
        clock: Callable[[], datetime] = utc_now,
        rng: random.Random | None = None,
    ) -> None:
        self._max_bytes = max_bytes
        self._clock = clock
        self._rng = rng
        self._files: dict[str, StoredFile] = {}
        self._lock = threading.Lock()

    @property
    def max_bytes(self) -> int:
        return self._max_bytes

    def upload(self, display_name: str, mime_type: str | None, data: bytes) -> StoredFile:
        if len(data) > self._max_bytes:
            raise InvalidArgumentError(f"File exceeds the maximum upload size of {self._max_bytes} bytes.")
        now = self._clock()
        stored = StoredFile(
            name=new_file_id(self._rng),
            display_name=display_name,
            mime_type=mime_type or "application/octet-stream",
            data=data,
            create_time=now,
            expiration_time=now + FILE_LIFETIME,
        )
        with self._lock:
            self._files[stored.name] = stored
        return stored

    def get(self, name: str) -> StoredFile:
        with self._lock:
            stored = self._files.get(name)
            if stored is not None and stored.expiration_time <= self._clock():
                del self._files[name]
                stored = None
        if stored is None:
            raise NotFoundError(f"File {name} not found.")
        return stored

    def list(self) -> list[StoredFile]:
        now = self._clock()
        with self._lock:
            return [stored for stored in self._files.values() if stored.expiration_time > now]

    def delete(self, name: str) -> None:
        with self._lock:
            if self._files.pop(name, None) is None:
                raise NotFoundError(f"File {name} not found.")
