#!/usr/bin/env python3
"""
Tests for environment-backed configuration
"""

from config import ServerConfig, StorageConfig, TransferConfig


class TestTransferConfig:
    """Explicit arguments win over the environment, which wins over defaults"""

    def test_defaults(self, monkeypatch):
        for name in ('MAX_CONCURRENT_TRANSFERS', 'DOWNLOAD_TIMEOUT_SECONDS', 'UPLOAD_TIMEOUT_SECONDS'):
            monkeypatch.delenv(name, raising=False)

        transfer = TransferConfig()

        assert transfer.max_concurrent_transfers == 0
        assert transfer.download_timeout_seconds == 1800
        assert transfer.upload_timeout_seconds == 3600

    def test_environment_used_when_not_given(self, monkeypatch):
        monkeypatch.setenv('MAX_CONCURRENT_TRANSFERS', '3')
        monkeypatch.setenv('DOWNLOAD_TIMEOUT_SECONDS', '90')

        transfer = TransferConfig()

        assert transfer.max_concurrent_transfers == 3
        assert transfer.download_timeout_seconds == 90

    def test_explicit_argument_beats_environment(self, monkeypatch):
        monkeypatch.setenv('MAX_CONCURRENT_TRANSFERS', '3')
        monkeypatch.setenv('UPLOAD_TIMEOUT_SECONDS', '90')

        transfer = TransferConfig(max_concurrent_transfers=1, upload_timeout_seconds=5)

        assert transfer.max_concurrent_transfers == 1
        assert transfer.upload_timeout_seconds == 5

    def test_zero_disables_bounds(self, monkeypatch):
        monkeypatch.setenv('MAX_CONCURRENT_TRANSFERS', '3')
        monkeypatch.setenv('DOWNLOAD_TIMEOUT_SECONDS', '90')

        transfer = TransferConfig(max_concurrent_transfers=0, download_timeout_seconds=0)

        assert transfer.max_concurrent_transfers == 0
        assert transfer.download_timeout_seconds == 0


class TestServerAndStorageConfig:
    """Server and storage settings follow the same order"""

    def test_environment_read(self, monkeypatch):
        monkeypatch.setenv('MCP_TRANSPORT', 'http')
        monkeypatch.setenv('PORT', '9000')
        monkeypatch.setenv('LOG_LEVEL', 'debug')

        server = ServerConfig()

        assert server.transport == 'http'
        assert server.port == 9000
        assert server.log_level == 'DEBUG'

    def test_explicit_log_level_wins(self, monkeypatch):
        monkeypatch.setenv('LOG_LEVEL', 'debug')

        assert ServerConfig(log_level='warning').log_level == 'WARNING'

    def test_explicit_data_dir_wins(self, monkeypatch, tmp_path):
        monkeypatch.setenv('DATA_DIR', '/nonexistent')
        monkeypatch.delenv('TOKEN_FILE', raising=False)

        storage = StorageConfig(data_dir=str(tmp_path))

        assert storage.data_dir == str(tmp_path)
        assert storage.token_file == str(tmp_path / "token.json")
