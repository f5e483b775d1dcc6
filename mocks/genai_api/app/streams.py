from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from typing import Any

from fastapi.responses import StreamingResponse

from shared.synthesis.streaming import ndjson_frame, sse_frame


SSE_MEDIA_TYPE = "text/event-stream"
NDJSON_MEDIA_TYPE = "application/x-ndjson"


async def _framed(
    chunks: AsyncIterator[dict[str, Any]],
    frame: Callable[[dict[str, Any]], str],
    logger: logging.Logger,
) -> AsyncIterator[str]:
    try:
        async for chunk in chunks:
            yield frame(chunk)
    except Exception:
        # headers are already sent, so the only thing left to do is end the stream
        logger.exception("Stream aborted after it started")


def sse_response(chunks: AsyncIterator[dict[str, Any]], logger: logging.Logger) -> StreamingResponse:
    return StreamingResponse(
        _framed(chunks, sse_frame, logger),
        media_type=SSE_MEDIA_TYPE,
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
    )


def ndjson_response(chunks: AsyncIterator[dict[str, Any]], logger: logging.Logger) -> StreamingResponse:
    return StreamingResponse(_framed(chunks, ndjson_frame, logger), media_type=NDJSON_MEDIA_TYPE)
