#!/usr/bin/env python3
"""
Tests for persisted state
Encrypted credential storage and the job record store
"""

from datetime import datetime, timedelta, timezone

import pytest

from auth.token_storage import CredentialRecord, TokenStorage
from transfer.job_store import JobStore
from transfer.models import (
    IllegalTransition,
    JobStatus,
    TransferJob,
    VideoMetadata,
)

EXPIRY = datetime(2025, 6, 1, 13, 0, 0, tzinfo=timezone.utc)


def make_record(**overrides):
    values = dict(
        user_id="default-user",
        access_token="ya29.secret-access",
        refresh_token="1//secret-refresh",
        expiry=EXPIRY
    )
    values.update(overrides)
    return CredentialRecord(**values)


class TestTokenStorage:
    """Test encrypted credential storage"""

    def test_missing_record_returns_none(self, tmp_path):
        storage = TokenStorage(str(tmp_path / "token.json"))

        assert storage.get("default-user") is None
        assert storage.exists() is False

    def test_file_is_encrypted(self, tmp_path):
        storage = TokenStorage(str(tmp_path / "token.json"))
        storage.put(make_record())

        raw = (tmp_path / "token.json").read_bytes()
        assert b"secret-access" not in raw
        assert b"secret-refresh" not in raw

    def test_new_instance_reads_saved_record(self, tmp_path):
        TokenStorage(str(tmp_path / "token.json")).put(make_record())

        record = TokenStorage(str(tmp_path / "token.json")).get("default-user")

        assert record == make_record()
        assert record.expiry.tzinfo is not None

    def test_put_replaces_previous_record(self, tmp_path):
        storage = TokenStorage(str(tmp_path / "token.json"))
        storage.put(make_record())
        storage.put(make_record(access_token="second", refresh_token=None))

        record = storage.get("default-user")
        assert record.access_token == "second"
        assert record.refresh_token is None

    def test_undecryptable_file_treated_as_empty(self, tmp_path):
        (tmp_path / "token.json").write_bytes(b"not a fernet token")
        storage = TokenStorage(str(tmp_path / "token.json"))

        assert storage.get("default-user") is None


def make_job(job_id="job-1", user_id="default-user", created_at=None):
    job = TransferJob(
        id=job_id,
        user_id=user_id,
        source_ref="f1",
        metadata=VideoMetadata(title="Trip", tags=["a"])
    )
    if created_at:
        job.created_at = created_at
    return job


class TestTransferJob:
    """Test the job state machine"""

    def test_forward_path(self):
        job = make_job()
        job.advance(JobStatus.DOWNLOADING, 10)
        job.advance(JobStatus.DOWNLOADING, 20)
        job.advance(JobStatus.UPLOADING, 40)
        job.complete("yt-1")

        assert job.status == JobStatus.COMPLETED
        assert job.progress == 100
        assert job.result_id == "yt-1"

    def test_skipping_download_rejected(self):
        with pytest.raises(IllegalTransition):
            make_job().advance(JobStatus.UPLOADING, 40)

    def test_backwards_rejected(self):
        job = make_job()
        job.advance(JobStatus.DOWNLOADING, 10)
        job.advance(JobStatus.UPLOADING, 40)

        with pytest.raises(IllegalTransition):
            job.advance(JobStatus.DOWNLOADING, 50)

    def test_decreasing_progress_rejected(self):
        job = make_job()
        job.advance(JobStatus.DOWNLOADING, 20)

        with pytest.raises(IllegalTransition):
            job.advance(JobStatus.DOWNLOADING, 10)

    def test_terminal_states_are_immutable(self):
        job = make_job()
        job.advance(JobStatus.DOWNLOADING, 10)
        job.fail("boom")

        with pytest.raises(IllegalTransition):
            job.fail("again")
        with pytest.raises(IllegalTransition):
            job.advance(JobStatus.UPLOADING, 40)

        assert job.error_detail == "boom"
        assert job.progress == 10

    def test_complete_requires_result_id(self):
        job = make_job()
        job.advance(JobStatus.DOWNLOADING, 10)
        job.advance(JobStatus.UPLOADING, 40)

        with pytest.raises(IllegalTransition):
            job.complete("")


class TestJobStore:
    """Test the job record store"""

    def test_put_and_get(self, tmp_path):
        store = JobStore(str(tmp_path / "jobs"))
        job = make_job()
        job.advance(JobStatus.DOWNLOADING, 10)
        store.put(job)

        loaded = store.get("job-1")
        assert loaded.status == JobStatus.DOWNLOADING
        assert loaded.progress == 10
        assert loaded.metadata.tags == ["a"]
        store.close()

    def test_unknown_id(self, tmp_path):
        store = JobStore(str(tmp_path / "jobs"))
        assert store.get("nope") is None
        store.close()

    def test_list_filters_user_and_orders_newest_first(self, tmp_path):
        store = JobStore(str(tmp_path / "jobs"))
        base = datetime(2025, 6, 1, tzinfo=timezone.utc)
        store.put(make_job("old", created_at=base))
        store.put(make_job("new", created_at=base + timedelta(minutes=5)))
        store.put(make_job("other", user_id="someone-else", created_at=base + timedelta(minutes=9)))

        assert [job.id for job in store.list("default-user")] == ["new", "old"]
        assert [job.id for job in store.list("default-user", limit=1)] == ["new"]
        assert store.count() == 3
        store.close()

    def test_records_survive_reopen(self, tmp_path):
        JobStore(str(tmp_path / "jobs")).put(make_job())

        store = JobStore(str(tmp_path / "jobs"))
        assert store.get("job-1") is not None
        store.close()
