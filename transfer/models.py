"""
Transfer job data model
Job record, publish metadata and the forward-only status machine
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


class JobStatus(Enum):
    """Transfer job states"""
    QUEUED = "queued"
    DOWNLOADING = "downloading"
    UPLOADING = "uploading"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.ERROR)


class PrivacyStatus(Enum):
    """YouTube visibility levels, most restrictive first"""
    PRIVATE = "private"
    UNLISTED = "unlisted"
    PUBLIC = "public"


# Allowed next states; staying in a phase is allowed for progress updates
TRANSITIONS = {
    JobStatus.QUEUED: {JobStatus.DOWNLOADING, JobStatus.ERROR},
    JobStatus.DOWNLOADING: {JobStatus.DOWNLOADING, JobStatus.UPLOADING, JobStatus.ERROR},
    JobStatus.UPLOADING: {JobStatus.UPLOADING, JobStatus.COMPLETED, JobStatus.ERROR},
    JobStatus.COMPLETED: set(),
    JobStatus.ERROR: set(),
}


class IllegalTransition(ValueError):
    """A job update that would move backwards or leave a terminal state"""
    pass


@dataclass
class VideoMetadata:
    """What gets published alongside the video"""

    title: str
    description: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    privacy_status: PrivacyStatus = PrivacyStatus.PRIVATE


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class TransferJob:
    """One tracked attempt to move one Drive file to YouTube"""

    id: str
    user_id: str
    source_ref: str
    metadata: VideoMetadata
    status: JobStatus = JobStatus.QUEUED
    progress: int = 0
    result_id: Optional[str] = None
    error_detail: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def advance(self, status: JobStatus, progress: Optional[int] = None) -> None:
        """
        Move to a later phase (or report progress within the current one)

        Raises:
            IllegalTransition: backwards move, terminal state, or falling progress
        """
        if status not in TRANSITIONS[self.status]:
            raise IllegalTransition(
                f"Job {self.id}: {self.status.value} -> {status.value} not allowed"
            )
        if progress is not None:
            if progress < self.progress:
                raise IllegalTransition(
                    f"Job {self.id}: progress {self.progress} -> {progress} decreases"
                )
            self.progress = progress
        self.status = status
        self.updated_at = _utcnow()

    def complete(self, result_id: str) -> None:
        if not result_id:
            raise IllegalTransition(f"Job {self.id}: completed without a result id")
        self.advance(JobStatus.COMPLETED, 100)
        self.result_id = result_id

    def fail(self, detail: str) -> None:
        """Terminate in error; progress stays at its last value"""
        self.advance(JobStatus.ERROR)
        self.error_detail = detail or "Unknown error occurred"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'user_id': self.user_id,
            'source_ref': self.source_ref,
            'title': self.metadata.title,
            'description': self.metadata.description,
            'tags': list(self.metadata.tags),
            'privacy_status': self.metadata.privacy_status.value,
            'status': self.status.value,
            'progress': self.progress,
            'result_id': self.result_id,
            'error_detail': self.error_detail,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TransferJob":
        return cls(
            id=data['id'],
            user_id=data['user_id'],
            source_ref=data['source_ref'],
            metadata=VideoMetadata(
                title=data['title'],
                description=data.get('description'),
                tags=list(data.get('tags') or []),
                privacy_status=PrivacyStatus(data['privacy_status']),
            ),
            status=JobStatus(data['status']),
            progress=data['progress'],
            result_id=data.get('result_id'),
            error_detail=data.get('error_detail'),
            created_at=datetime.fromisoformat(data['created_at']),
            updated_at=datetime.fromisoformat(data['updated_at']),
        )

    def summary(self) -> Dict[str, Any]:
        """Row returned by the upload history query"""
        return {
            'id': self.id,
            'youtube_video_id': self.result_id,
            'title': self.metadata.title,
            'status': self.status.value,
            'progress': self.progress,
            'timestamp': self.created_at.isoformat(),
            'error_message': self.error_detail,
            'privacy_status': self.metadata.privacy_status.value,
        }
