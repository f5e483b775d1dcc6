from __future__ import annotations

import asyncio
from typing import Any

import pytest

from shared.common.errors import InvalidArgumentError, NotFoundError, TokenLimitError
from shared.common.models import BatchRequestItem, GenerateContentRequest
from shared.state.batch_jobs import BatchJobRunner, JobStatus


def items(count: int) -> list[BatchRequestItem]:
    return [
        BatchRequestItem.model_validate(
            {"id": f"req-{index}", "request": {"contents": [{"role": "user", "parts": [{"text": f"q{index}"}]}]}}
        )
        for index in range(count)
    ]


class FakeGenerator:
    def __init__(self, delay: float = 0.0, fail_on: set[str] | None = None) -> None:
        self.delay = delay
        self.fail_on = fail_on or set()
        self.calls: list[tuple[str, str]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def __call__(self, request: GenerateContentRequest, model: str) -> dict[str, Any]:
        text = request.contents[0].parts[0].text
        self.calls.append((text, model))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
        finally:
            self.in_flight -= 1
        if text in self.fail_on:
            raise TokenLimitError(10, 5)
        return {"candidates": [{"content": {"parts": [{"text": f"answer to {text}"}]}}]}


def test_job_completes_in_order_with_per_request_errors() -> None:
    async def scenario() -> None:
        generator = FakeGenerator(fail_on={"q1"})
        runner = BatchJobRunner(generator, max_concurrency=2)
        job = runner.submit(items(5), "gemini-1.5-pro")
        assert job.status is JobStatus.PENDING

        finished = await runner.wait(job.id)

        assert finished.status is JobStatus.COMPLETED
        assert finished.progress() == {"total": 5, "completed": 4, "failed": 1}
        results = runner.results(job.id)
        assert [entry["id"] for entry in results["responses"]] == [f"req-{index}" for index in range(5)]
        assert results["responses"][1]["error"]["status"] == "INVALID_ARGUMENT"
        assert generator.max_in_flight <= 2
        assert runner.stats()["completedJobs"] == 1

    asyncio.run(scenario())


def test_item_model_overrides_job_model() -> None:
    async def scenario() -> None:
        generator = FakeGenerator()
        runner = BatchJobRunner(generator)
        batch = items(1)
        batch[0].model = "gemini-2.0-flash"
        job = runner.submit(batch, "gemini-1.5-pro")
        await runner.wait(job.id)
        assert generator.calls == [("q0", "gemini-2.0-flash")]

    asyncio.run(scenario())


def test_timeout_forces_failed() -> None:
    async def scenario() -> None:
        runner = BatchJobRunner(FakeGenerator(delay=1.0), timeout_seconds=0.05)
        job = runner.submit(items(2), "m")

        finished = await runner.wait(job.id)

        assert finished.status is JobStatus.FAILED
        assert "timed out" in (finished.error or "")
        with pytest.raises(InvalidArgumentError):
            runner.results(job.id)

    asyncio.run(scenario())


def test_cancel_marks_failed_and_discards_late_results() -> None:
    async def scenario() -> None:
        runner = BatchJobRunner(FakeGenerator(delay=0.05), max_concurrency=1)
        job = runner.submit(items(3), "m")
        await asyncio.sleep(0.01)

        cancelled = runner.cancel(job.id)
        await runner.wait(job.id)

        assert cancelled.status is JobStatus.FAILED
        assert runner.get(job.id).status is JobStatus.FAILED
        assert runner.get(job.id).responses == []
        assert runner.get(job.id).error == "Cancelled by user"

    asyncio.run(scenario())


def test_completed_job_cannot_be_cancelled() -> None:
    async def scenario() -> None:
        runner = BatchJobRunner(FakeGenerator())
        job = runner.submit(items(1), "m")
        await runner.wait(job.id)

        with pytest.raises(InvalidArgumentError):
            runner.cancel(job.id)

    asyncio.run(scenario())


def test_unknown_job_and_cleanup() -> None:
    async def scenario() -> None:
        runner = BatchJobRunner(FakeGenerator())
        job = runner.submit(items(1), "m")
        await runner.wait(job.id)

        assert runner.cleanup(max_age_seconds=3600) == 0
        assert runner.cleanup(max_age_seconds=-1) == 1
        with pytest.raises(NotFoundError):
            runner.get(job.id)

    asyncio.run(scenario())
