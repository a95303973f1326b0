"""
Drive to YouTube transfer jobs
"""

from .models import (
    JobStatus,
    PrivacyStatus,
    VideoMetadata,
    TransferJob,
    IllegalTransition
)
from .job_store import JobStore

__all__ = [
    'JobStatus',
    'PrivacyStatus',
    'VideoMetadata',
    'TransferJob',
    'IllegalTransition',
    'JobStore',
]
