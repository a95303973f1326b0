"""
Transfer Orchestrator
=====================

Accepts upload submissions and relays each Drive file to YouTube in a
fire-and-forget background task. Callers observe progress only by polling
the persisted job record.

Job lifecycle (forward only, every step persisted):

    queued -> downloading -> uploading -> completed
       \\__________\\_____________\\______-> error

Progress checkpoints: 10 on start, 20 before the download, 40 once the file
is buffered, 50 before the upload, 100 on completion. A failed job keeps the
last checkpoint it reached.
"""

import asyncio
import logging
import uuid
from typing import Any, Dict, List, Optional, Set, Union

from config import TransferConfig
from errors import InvalidRequest, PhaseTimeout, describe_error
from utils.validators import validate_privacy_status, validate_upload_request

from .job_store import JobStore
from .models import JobStatus, TransferJob

logger = logging.getLogger(__name__)

PROGRESS_STARTED = 10
PROGRESS_DOWNLOADING = 20
PROGRESS_DOWNLOADED = 40
PROGRESS_UPLOADING = 50


class TransferOrchestrator:
    """
    Drive to YouTube upload relay

    Features:
    - Non-blocking submission; one background task per job
    - Persisted checkpoint after every transition
    - Per-phase timeouts
    - Optional cap on concurrent transfers
    """

    def __init__(
        self,
        credential_manager,
        job_store: JobStore,
        source,
        publisher,
        transfer_config: Optional[TransferConfig] = None,
        user_id: str = "default-user",
        history_limit: int = 50
    ):
        """
        Initialize Transfer Orchestrator

        Args:
            credential_manager: Hands out authenticated handles
            job_store: Persistent job records
            source: Drive client (list_video_files, download)
            publisher: YouTube client (publish)
            transfer_config: Timeouts, concurrency cap, default privacy
            user_id: Key the jobs are recorded under
            history_limit: Default size of the history query
        """
        self.credential_manager = credential_manager
        self.job_store = job_store
        self.source = source
        self.publisher = publisher
        self.transfer_config = transfer_config or TransferConfig()
        self.user_id = user_id
        self.history_limit = history_limit

        self._tasks: Set[asyncio.Task] = set()
        self._semaphore: Optional[asyncio.Semaphore] = None

    # ------------------------------------------------------------------
    # Request-path entry points
    # ------------------------------------------------------------------

    async def list_source_files(self) -> List[Dict[str, Any]]:
        """List candidate video files in Drive; credential errors propagate"""
        credentials = await self.credential_manager.get_credentials()
        return await asyncio.to_thread(self.source.list_video_files, credentials)

    async def submit(
        self,
        source_ref: str,
        title: str,
        description: Optional[str] = None,
        tags: Union[List[str], str, None] = None,
        privacy_status: Optional[str] = None
    ) -> str:
        """
        Create a queued job and start its transfer in the background

        Returns:
            The job id, as soon as the queued record is persisted

        Raises:
            InvalidRequest: missing file id or title, or invalid metadata
        """
        default_privacy = validate_privacy_status(self.transfer_config.default_privacy)
        source_ref, metadata = validate_upload_request(
            source_ref,
            title,
            description=description,
            tags=tags,
            privacy_status=privacy_status,
            default_privacy=default_privacy
        )

        job = TransferJob(
            id=str(uuid.uuid4()),
            user_id=self.user_id,
            source_ref=source_ref,
            metadata=metadata
        )
        self.job_store.put(job)
        logger.info(f"Job {job.id} queued: Drive file {source_ref} -> '{metadata.title}'")

        task = asyncio.create_task(self._run(job.id), name=f"transfer-{job.id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        return job.id

    def get_job(self, job_id: str) -> TransferJob:
        job = self.job_store.get(job_id)
        if job is None or job.user_id != self.user_id:
            raise InvalidRequest(f"Upload not found: {job_id}")
        return job

    def list_jobs(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Upload history, most recent first"""
        jobs = self.job_store.list(self.user_id, limit or self.history_limit)
        return [job.summary() for job in jobs]

    async def drain(self) -> None:
        """Wait until every background transfer started so far has finished"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    @property
    def active_transfers(self) -> int:
        return len(self._tasks)

    # ------------------------------------------------------------------
    # Background execution
    # ------------------------------------------------------------------

    def _get_semaphore(self) -> Optional[asyncio.Semaphore]:
        limit = self.transfer_config.max_concurrent_transfers
        if limit <= 0:
            return None
        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(limit)
        return self._semaphore

    async def _run(self, job_id: str) -> None:
        """Task body; never raises except on cancellation"""
        job = self.job_store.get(job_id)
        if job is None:
            logger.error(f"Job {job_id} vanished before it started")
            return

        try:
            semaphore = self._get_semaphore()
            if semaphore is None:
                await self._execute(job)
            else:
                async with semaphore:
                    await self._execute(job)
        except asyncio.CancelledError:
            self._fail(job, "Transfer cancelled")
            raise
        except Exception as e:
            logger.error(f"❌ Job {job.id} failed: {describe_error(e)}")
            self._fail(job, describe_error(e))

    async def _execute(self, job: TransferJob) -> None:
        config = self.transfer_config

        self._advance(job, JobStatus.DOWNLOADING, PROGRESS_STARTED)
        source_credentials = await self._bounded(
            self.credential_manager.get_credentials(),
            config.token_timeout_seconds,
            "Acquiring Drive credentials"
        )

        self._advance(job, JobStatus.DOWNLOADING, PROGRESS_DOWNLOADING)
        content = await self._bounded(
            asyncio.to_thread(self.source.download, source_credentials, job.source_ref),
            config.download_timeout_seconds,
            "Downloading from Drive"
        )

        self._advance(job, JobStatus.UPLOADING, PROGRESS_DOWNLOADED)
        target_credentials = await self._bounded(
            self.credential_manager.get_credentials(),
            config.token_timeout_seconds,
            "Acquiring YouTube credentials"
        )

        self._advance(job, JobStatus.UPLOADING, PROGRESS_UPLOADING)
        video_id = await self._bounded(
            asyncio.to_thread(self.publisher.publish, target_credentials, content, job.metadata),
            config.upload_timeout_seconds,
            "Uploading to YouTube"
        )

        job.complete(video_id)
        self.job_store.put(job)
        logger.info(f"✅ Job {job.id} completed. YouTube ID: {video_id}")

    @staticmethod
    async def _bounded(awaitable, timeout: float, phase: str):
        if not timeout or timeout <= 0:
            return await awaitable
        try:
            return await asyncio.wait_for(awaitable, timeout)
        except asyncio.TimeoutError:
            raise PhaseTimeout(f"{phase} timed out after {timeout:g}s")

    def _advance(self, job: TransferJob, status: JobStatus, progress: int) -> None:
        job.advance(status, progress)
        self.job_store.put(job)
        logger.info(f"Job {job.id}: {status.value} ({progress}%)")

    def _fail(self, job: TransferJob, detail: str) -> None:
        # The in-memory job can be ahead of the store when a write failed;
        # only the persisted record decides whether the job is finished.
        try:
            record = self.job_store.get(job.id) or job
            if record.status.is_terminal:
                return
            record.fail(detail)
            self.job_store.put(record)
        except Exception:
            logger.exception(f"Could not record failure of job {job.id}")
