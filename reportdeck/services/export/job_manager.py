"""Submits a presentation export and follows it to a terminal state.

One manager owns at most one job. Polling runs as an asyncio task driven by
tenacity: it retries only while the job reports ``pending``, waits a fixed
interval between polls and gives up after a fixed number of polls. Transport
and HTTP errors are not retried; a single failed poll ends the loop.

A newer submission supersedes the current job: its loop is stopped, the job
is marked ``cancelled`` and anyone still waiting on it gets ``ExportCancelled``.
"""

import asyncio
import contextlib
import logging
from collections.abc import Awaitable
from collections.abc import Callable
from typing import Any

from tenacity import AsyncRetrying
from tenacity import RetryCallState
from tenacity import retry_if_result
from tenacity import stop_after_attempt
from tenacity import wait_fixed

from reportdeck.core.exceptions import ExportCancelled
from reportdeck.core.exceptions import ExportFailed
from reportdeck.core.exceptions import ExportTimedOut
from reportdeck.models.report_models import ExportJob
from reportdeck.models.report_models import ExportStatus
from reportdeck.services.export.client import GammaClient
from reportdeck.services.export.payloads import GenerationAccepted
from reportdeck.services.export.payloads import GenerationState

logger = logging.getLogger(__name__)


def build_generation_body(draft_text: str, theme_id: str, image_style: str | None = None) -> dict[str, Any]:
    """Request body for a 16:9 PPTX export that keeps the markdown text as written."""
    body: dict[str, Any] = {
        "inputText": draft_text,
        "textMode": "preserve",
        "format": "presentation",
        "themeId": theme_id,
        "exportAs": "pptx",
        "cardOptions": {"dimensions": "16x9"},
    }
    if image_style:
        body["imageOptions"] = {"source": "aiGenerated", "style": image_style}
    return body


def _is_pending(status: ExportStatus) -> bool:
    return status is ExportStatus.PENDING


def _last_status(retry_state: RetryCallState) -> ExportStatus:
    # Called when the attempt ceiling is reached; the last outcome is a pending status
    return retry_state.outcome.result()


class ExportJobManager:
    def __init__(
        self,
        client: GammaClient,
        poll_interval: float | None = None,
        max_attempts: int | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.client = client
        self.poll_interval = client.cfg.export_poll_interval if poll_interval is None else poll_interval
        self.max_attempts = max_attempts or client.cfg.export_max_attempts
        self._sleep = sleep
        self._job: ExportJob | None = None
        self._task: asyncio.Task[str] | None = None
        self._submit_lock = asyncio.Lock()

    @property
    def job(self) -> ExportJob | None:
        """Snapshot of the current job, if any."""
        return self._job.model_copy() if self._job else None

    @property
    def polling(self) -> bool:
        return self._task is not None and not self._task.done()

    async def submit(self, draft_text: str, theme_id: str, image_style: str | None = None) -> ExportJob:
        """Start a new export, superseding any job this manager was following.

        Concurrent submissions are serialized, so at most one poll loop is
        ever running; the last submission wins.
        """
        async with self._submit_lock:
            await self.cancel()

            body = build_generation_body(draft_text, theme_id, image_style)
            logger.info("Submitting export job (theme=%s, image_style=%s, %d chars)", theme_id, image_style or "-", len(draft_text))
            accepted = await self.client.post("generations", body, response_model=GenerationAccepted)
            job_id = accepted.generation_id
            logger.info("Export job %s accepted with status %s", job_id, accepted.status)

            self._job = ExportJob(job_id=job_id)
            self._task = asyncio.create_task(self._poll(self._job), name=f"export-poll-{job_id}")
            self._task.add_done_callback(self._log_outcome)
            return self._job.model_copy()

    async def wait(self) -> str:
        """Wait for the current job and return its PPTX URL."""
        task, job = self._task, self._job
        if task is None or job is None:
            raise RuntimeError("No export job has been submitted.")
        try:
            # A cancelled waiter must not stop the loop itself
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            if task.cancelled():
                raise ExportCancelled(job.job_id) from None
            raise

    async def export(self, draft_text: str, theme_id: str, image_style: str | None = None) -> str:
        await self.submit(draft_text, theme_id, image_style)
        return await self.wait()

    async def cancel(self) -> None:
        """Stop observing the current job. Server-side work is not cancelled."""
        task, self._task = self._task, None
        if task is None or task.done():
            return
        job = self._job
        if job is not None and job.status is ExportStatus.PENDING:
            job.status = ExportStatus.CANCELLED
            job.error_message = "Superseded by a newer export or a new report."
        logger.info("Cancelling poll loop for export job %s", job.job_id if job else "-")
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _poll_once(self, job: ExportJob) -> ExportStatus:
        job.attempt_count += 1
        state = await self.client.get(f"generations/{job.job_id}", response_model=GenerationState)
        status = state.status
        logger.info("Export job %s: poll #%d status %s", job.job_id, job.attempt_count, status)

        if status == ExportStatus.COMPLETED.value and state.pptx_url:
            job.status = ExportStatus.COMPLETED
            job.result_url = state.pptx_url
        elif status == ExportStatus.FAILED.value:
            job.status = ExportStatus.FAILED
            job.error_message = state.error or "Unknown error"
        return job.status

    async def _poll(self, job: ExportJob) -> str:
        retrying = AsyncRetrying(
            retry=retry_if_result(_is_pending),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_fixed(self.poll_interval),
            sleep=self._sleep,
            retry_error_callback=_last_status,
        )
        try:
            await self._sleep(self.poll_interval)
            status = await retrying(self._poll_once, job)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            job.status = ExportStatus.FAILED
            job.error_message = str(e)
            logger.error("Export job %s: polling aborted: %s", job.job_id, e)
            raise

        if status is ExportStatus.COMPLETED:
            logger.info("Export job %s completed: %s", job.job_id, job.result_url)
            return job.result_url or ""
        if status is ExportStatus.FAILED:
            raise ExportFailed(job.error_message)

        job.status = ExportStatus.TIMED_OUT
        job.error_message = "Timed out waiting for the export."
        logger.error("Export job %s: timed out after %d polls", job.job_id, job.attempt_count)
        raise ExportTimedOut(job.attempt_count)

    @staticmethod
    def _log_outcome(task: "asyncio.Task[str]") -> None:
        # Retrieve the exception so an unawaited task does not warn at shutdown
        if not task.cancelled() and task.exception() is not None:
            logger.debug("Poll task %s ended with %r", task.get_name(), task.exception())
