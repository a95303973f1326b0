"""
Shared fixtures and fakes for the relay tests
"""

import os
import sys
import time
import tempfile
import threading
from datetime import datetime, timedelta, timezone

import pytest

# Add parent directory to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# Set test environment before importing config
os.environ.setdefault('DATA_DIR', tempfile.mkdtemp(prefix='relay-test-'))
os.environ.setdefault('GOOGLE_CLIENT_ID', 'test-client-id.apps.googleusercontent.com')
os.environ.setdefault('GOOGLE_CLIENT_SECRET', 'test-client-secret')
os.environ.setdefault('GOOGLE_REDIRECT_URI', 'http://localhost:3000/api/youtube/callback')

from config import GoogleOAuthConfig, TransferConfig
from errors import SourceReadFailed
from auth.credential_manager import CredentialManager
from auth.oauth_flow import TokenGrant
from auth.token_storage import CredentialRecord
from transfer.job_store import JobStore
from transfer.orchestrator import TransferOrchestrator

NOW = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)
USER_ID = "default-user"


class FakeClock:
    """Settable clock"""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class MemoryTokenStorage:
    """In-memory credential store counting writes"""

    def __init__(self):
        self.records = {}
        self.put_count = 0

    def get(self, user_id):
        return self.records.get(user_id)

    def put(self, record):
        self.records[record.user_id] = record
        self.put_count += 1


class FakeAuthorizationProvider:
    """Records refresh/exchange calls and returns canned grants"""

    def __init__(self):
        self.refresh_calls = []
        self.exchange_calls = []
        self.refresh_result = TokenGrant(
            access_token="refreshed-token",
            expiry=NOW + timedelta(hours=1)
        )
        self.exchange_result = TokenGrant(
            access_token="granted-token",
            refresh_token="granted-refresh",
            expiry=NOW + timedelta(hours=1)
        )
        self.refresh_delay = 0.0

    def refresh(self, refresh_token):
        self.refresh_calls.append(refresh_token)
        if self.refresh_delay:
            time.sleep(self.refresh_delay)
        if isinstance(self.refresh_result, Exception):
            raise self.refresh_result
        return self.refresh_result

    def exchange_code(self, code):
        self.exchange_calls.append(code)
        if isinstance(self.exchange_result, Exception):
            raise self.exchange_result
        return self.exchange_result

    def build_authorization_url(self, state=None):
        return "https://accounts.google.com/o/oauth2/v2/auth?fake=1", state or "state"


class FakeDriveSource:
    """Drive stand-in serving bytes from a dict"""

    def __init__(self, files=None):
        self.files = files if files is not None else {"f1": b"video-bytes"}
        self.download_calls = []
        self.error = None
        self.delay = 0.0
        self.listing = []
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def list_video_files(self, credentials):
        return list(self.listing)

    def download(self, credentials, file_id):
        with self._lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            self.download_calls.append((credentials.token, file_id))
            if self.delay:
                time.sleep(self.delay)
            if self.error is not None:
                raise self.error
            if file_id not in self.files:
                raise SourceReadFailed(f"Failed to download {file_id}: file not found")
            return self.files[file_id]
        finally:
            with self._lock:
                self.active -= 1


class FakePublisher:
    """YouTube stand-in returning a fixed video id"""

    def __init__(self, video_id="yt-abc123"):
        self.video_id = video_id
        self.calls = []
        self.error = None

    def publish(self, credentials, content, metadata):
        self.calls.append((credentials.token, content, metadata))
        if self.error is not None:
            raise self.error
        return self.video_id


class RecordingJobStore(JobStore):
    """Job store that keeps every persisted (status, progress) per job"""

    def __init__(self, directory):
        super().__init__(directory)
        self.history = {}

    def put(self, job):
        self.history.setdefault(job.id, []).append((job.status, job.progress))
        super().put(job)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def token_storage():
    return MemoryTokenStorage()


@pytest.fixture
def auth_provider():
    return FakeAuthorizationProvider()


@pytest.fixture
def oauth_config():
    return GoogleOAuthConfig()


@pytest.fixture
def credential_manager(token_storage, auth_provider, oauth_config, clock):
    return CredentialManager(
        storage=token_storage,
        provider=auth_provider,
        oauth_config=oauth_config,
        clock=clock
    )


@pytest.fixture
def valid_credential(token_storage):
    record = CredentialRecord(
        user_id=USER_ID,
        access_token="stored-token",
        refresh_token="stored-refresh",
        expiry=NOW + timedelta(hours=1)
    )
    token_storage.put(record)
    token_storage.put_count = 0
    return record


@pytest.fixture
def job_store(tmp_path):
    store = RecordingJobStore(str(tmp_path / "jobs"))
    yield store
    store.close()


@pytest.fixture
def drive_source():
    return FakeDriveSource()


@pytest.fixture
def publisher():
    return FakePublisher()


@pytest.fixture
def transfer_config():
    return TransferConfig()


@pytest.fixture
def orchestrator(credential_manager, job_store, drive_source, publisher, transfer_config):
    return TransferOrchestrator(
        credential_manager=credential_manager,
        job_store=job_store,
        source=drive_source,
        publisher=publisher,
        transfer_config=transfer_config,
        user_id=USER_ID
    )
