from __future__ import annotations

import itertools
import random
import string
import time
from collections.abc import Iterator


_BASE36 = string.digits + string.ascii_lowercase


def new_file_id(rng: random.Random | None = None) -> str:
    source = rng or random.Random()
    suffix = "".join(source.choice(_BASE36) for _ in range(9))
    return f"files/{int(time.time() * 1000)}-{suffix}"


class SequentialIds:
    """Hands out `{prefix}-{n}` identifiers starting at 1."""

    def __init__(self, prefix: str) -> None:
        self._prefix = prefix
        self._counter: Iterator[int] = itertools.count(1)

    def next(self) -> str:
        return f"{self._prefix}-{next(self._counter)}"
