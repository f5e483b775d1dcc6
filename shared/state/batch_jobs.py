from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from shared.common.errors import ApiError, InvalidArgumentError, NotFoundError, google_status
from shared.common.ids import SequentialIds
from shared.common.models import BatchRequestItem, GenerateContentRequest
from shared.common.serialization import isoformat_z, utc_now


Generate = Callable[[GenerateContentRequest, str], Awaitable[dict[str, Any]]]


class JobStatus(str, Enum):
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


TERMINAL = {JobStatus.COMPLETED, JobStatus.FAILED}
_NEXT = {
    JobStatus.PENDING: {JobStatus.RUNNING, JobStatus.FAILED},
    JobStatus.RUNNING: {JobStatus.COMPLETED, JobStatus.FAILED},
}


@dataclass(slots=True)
class BatchJob:
    id: str
    model: str
    requests: list[BatchRequestItem]
    created_at: datetime
    status: JobStatus = JobStatus.PENDING
    responses: list[dict[str, Any]] = field(default_factory=list)
    completed: int = 0
    failed: int = 0
    started_at: datetime | None = None
    completed_at: datetime | None = None
    error: str | None = None

    def progress(self) -> dict[str, int]:
        return {"total": len(self.requests), "completed": self.completed, "failed": self.failed}

    def summary(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "jobId": self.id,
            "model": self.model,
            "status": self.status.value,
            "progress": self.progress(),
            "createdAt": isoformat_z(self.created_at),
        }
        if self.started_at is not None:
            data["startedAt"] = isoformat_z(self.started_at)
        if self.completed_at is not None:
            data["completedAt"] = isoformat_z(self.completed_at)
        if self.error:
            data["error"] = self.error
        return data


class BatchJobRunner:
    def __init__(
        self,
        generate: Generate,
        *,
        max_concurrency: int = 10,
        timeout_seconds: float = 300.0,
        logger: logging.Logger | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._generate = generate
        self._max_concurrency = max(1, max_concurrency)
        self._timeout_seconds = timeout_seconds
        self._logger = logger or logging.getLogger(__name__)
        self._clock = clock
        self._ids = SequentialIds("batch-job")
        self._jobs: dict[str, BatchJob] = {}
        self._tasks: dict[str, asyncio.Task[None]] = {}

    def submit(self, requests: list[BatchRequestItem], model: str) -> BatchJob:
        job = BatchJob(id=self._ids.next(), model=model, requests=list(requests), created_at=self._clock())
        self._jobs[job.id] = job
        task = asyncio.get_running_loop().create_task(self._run(job))
        self._tasks[job.id] = task
        task.add_done_callback(lambda _: self._tasks.pop(job.id, None))
        self._logger.info("Batch job %s submitted with %s requests", job.id, len(job.requests))
        return job

    def _advance(self, job: BatchJob, status: JobStatus) -> bool:
        if status not in _NEXT.get(job.status, set()):
            return False
        job.status = status
        if status in TERMINAL:
            job.completed_at = self._clock()
        return True

    async def _run(self, job: BatchJob) -> None:
        if not self._advance(job, JobStatus.RUNNING):
            return
        job.started_at = self._clock()
        try:
            await asyncio.wait_for(self._process(job), timeout=self._timeout_seconds)
        except asyncio.TimeoutError:
            job.error = f"Batch job timed out after {self._timeout_seconds:g} seconds"
            if self._advance(job, JobStatus.FAILED):
                self._logger.warning("Batch job %s timed out", job.id)
            return
        except Exception:
            self._logger.exception("Batch job %s crashed", job.id)
            job.error = "Batch processing failed"
            self._advance(job, JobStatus.FAILED)
            return
        if self._advance(job, JobStatus.COMPLETED):
            self._logger.info("Batch job %s completed: %s ok, %s failed", job.id, job.completed, job.failed)

    async def _process(self, job: BatchJob) -> None:
        for start in range(0, len(job.requests), self._max_concurrency):
            chunk = job.requests[start : start + self._max_concurrency]
            outcomes = await asyncio.gather(*(self._run_one(item, job.model) for item in chunk))
            if job.status is not JobStatus.RUNNING:
                return
            for outcome in outcomes:
                job.responses.append(outcome)
                if "error" in outcome:
                    job.failed += 1
                else:
                    job.completed += 1

    async def _run_one(self, item: BatchRequestItem, default_model: str) -> dict[str, Any]:
        try:
            response = await self._generate(item.request, item.model or default_model)
        except ApiError as exc:
            return {"id": item.id, "error": {"code": exc.code, "message": exc.message, "status": exc.status}}
        except Exception as exc:
            self._logger.exception("Batch request %s failed", item.id)
            return {"id": item.id, "error": {"code": 500, "message": str(exc), "status": google_status(500)}}
        return {"id": item.id, "response": response}

    def get(self, job_id: str) -> BatchJob:
        job = self._jobs.get(job_id)
        if job is None:
            raise NotFoundError(f"Batch job {job_id} not found.")
        return job

    def results(self, job_id: str) -> dict[str, Any]:
        job = self.get(job_id)
        if job.status is not JobStatus.COMPLETED:
            raise InvalidArgumentError(f"Batch job {job_id} is not completed. Current status: {job.status.value}")
        return {**job.summary(), "responses": list(job.responses)}

    def cancel(self, job_id: str) -> BatchJob:
        job = self.get(job_id)
        if job.status is JobStatus.COMPLETED:
            raise InvalidArgumentError(f"Batch job {job_id} is already completed.")
        if self._advance(job, JobStatus.FAILED):
            job.error = "Cancelled by user"
            self._logger.info("Batch job %s cancelled", job_id)
        return job

    def list(self) -> list[BatchJob]:
        return sorted(self._jobs.values(), key=lambda job: job.created_at, reverse=True)

    async def wait(self, job_id: str) -> BatchJob:
        task = self._tasks.get(job_id)
        if task is not None:
            await asyncio.shield(task)
        return self.get(job_id)

    def stats(self) -> dict[str, Any]:
        jobs = list(self._jobs.values())
        durations = [
            (job.completed_at - job.started_at).total_seconds() * 1000
            for job in jobs
            if job.status is JobStatus.COMPLETED and job.started_at and job.completed_at
        ]
        counts = {status: sum(1 for job in jobs if job.status is status) for status in JobStatus}
        return {
            "totalJobs": len(jobs),
            "pendingJobs": counts[JobStatus.PENDING],
            "runningJobs": counts[JobStatus.RUNNING],
            "completedJobs": counts[JobStatus.COMPLETED],
            "failedJobs": counts[JobStatus.FAILED],
            "avgProcessingTime": round(sum(durations) / len(durations), 2) if durations else 0,
        }

    def cleanup(self, max_age_seconds: float = 86400.0) -> int:
        cutoff = self._clock() - timedelta(seconds=max_age_seconds)
        stale = [
            job_id
            for job_id, job in self._jobs.items()
            if job.status in TERMINAL and (job.completed_at or job.created_at) < cutoff
        ]
        for job_id in stale:
            del self._jobs[job_id]
        return len(stale)

    async def shutdown(self) -> None:
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
