"""
Persistent job record store
Transfer jobs are kept in a disk-backed key-value cache so they outlive the
request that submitted them
"""

import logging
from typing import List, Optional

from diskcache import Cache

from .models import TransferJob

logger = logging.getLogger(__name__)


class JobStore:
    """Keyed store of transfer job records"""

    KEY_PREFIX = "job:"

    def __init__(self, directory: str):
        """
        Initialize job store

        Args:
            directory: diskcache directory, created if missing
        """
        self.cache = Cache(directory)
        logger.info(f"Job store initialized: {directory}")

    def _key(self, job_id: str) -> str:
        return f"{self.KEY_PREFIX}{job_id}"

    def put(self, job: TransferJob) -> None:
        """Persist the full record atomically"""
        self.cache.set(self._key(job.id), job.to_dict())

    def get(self, job_id: str) -> Optional[TransferJob]:
        data = self.cache.get(self._key(job_id))
        if data is None:
            return None
        return TransferJob.from_dict(data)

    def list(self, user_id: str, limit: Optional[int] = None) -> List[TransferJob]:
        """Jobs for one user, most recently created first"""
        jobs = []
        for key in self.cache:
            if not isinstance(key, str) or not key.startswith(self.KEY_PREFIX):
                continue
            data = self.cache.get(key)
            if data is not None and data['user_id'] == user_id:
                jobs.append(TransferJob.from_dict(data))

        # Insertion order breaks ties between identical timestamps
        ordered = sorted(
            enumerate(jobs),
            key=lambda pair: (pair[1].created_at, pair[0]),
            reverse=True
        )
        jobs = [job for _, job in ordered]
        return jobs[:limit] if limit else jobs

    def count(self) -> int:
        return sum(
            1 for key in self.cache
            if isinstance(key, str) and key.startswith(self.KEY_PREFIX)
        )

    def close(self) -> None:
        self.cache.close()
