#!/usr/bin/env python3
"""
Configuration management for the Drive to YouTube relay
Centralized settings for OAuth, storage, transfers and the tool server
"""

import os
import logging
from pathlib import Path
from typing import Optional, List
from pydantic import BaseModel, Field, validator
from dotenv import load_dotenv

# Find .env file in the same directory as this config.py file
config_dir = Path(__file__).parent
env_file = config_dir / ".env"
load_dotenv(dotenv_path=env_file)

logger = logging.getLogger(__name__)


class GoogleOAuthConfig(BaseModel):
    """OAuth client settings for the Google authorization server"""

    client_id: Optional[str] = Field(
        default=None,
        description="OAuth client ID from Google Cloud Console"
    )

    client_secret: Optional[str] = Field(
        default=None,
        description="OAuth client secret"
    )

    redirect_uri: Optional[str] = Field(
        default=None,
        description="Redirect URI registered for the web client"
    )

    auth_uri: str = Field(
        default="https://accounts.google.com/o/oauth2/v2/auth",
        description="Consent screen endpoint"
    )

    token_uri: str = Field(
        default="https://oauth2.googleapis.com/token",
        description="Token exchange endpoint"
    )

    scopes: List[str] = Field(
        default=[
            "https://www.googleapis.com/auth/youtube.upload",
            "https://www.googleapis.com/auth/drive.readonly"
        ],
        description="Upload to YouTube, read-only access to Drive"
    )

    user_id: str = Field(
        default="default-user",
        description="Fixed key of the single stored credential"
    )

    refresh_margin_seconds: int = Field(
        default=300,  # 5 minutes
        description="Refresh tokens this long before they expire"
    )

    default_token_lifetime_seconds: int = Field(
        default=3600,  # 1 hour
        description="Assumed lifetime when the exchange returns no expiry"
    )

    @validator('client_id', pre=True, always=True)
    def set_client_id(cls, v):
        return v or os.getenv("GOOGLE_CLIENT_ID")

    @validator('client_secret', pre=True, always=True)
    def set_client_secret(cls, v):
        return v or os.getenv("GOOGLE_CLIENT_SECRET")

    @validator('redirect_uri', pre=True, always=True)
    def set_redirect_uri(cls, v):
        return v or os.getenv("GOOGLE_REDIRECT_URI")

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret and self.redirect_uri)

    def client_config(self) -> dict:
        """Client config in the shape of a downloaded client_secrets.json"""
        return {
            "web": {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "redirect_uris": [self.redirect_uri],
                "auth_uri": self.auth_uri,
                "token_uri": self.token_uri,
            }
        }


class StorageConfig(BaseModel):
    """Where credentials and job records live"""

    data_dir: str = Field(
        default=None,
        description="Base directory for persisted state"
    )

    token_file: Optional[str] = Field(
        default=None,
        description="Encrypted credential file (default: <data_dir>/token.json)"
    )

    jobs_dir: Optional[str] = Field(
        default=None,
        description="Job record store directory (default: <data_dir>/jobs)"
    )

    history_limit: int = Field(
        default=50,
        description="Maximum jobs returned by the history query"
    )

    @validator('data_dir', pre=True, always=True)
    def set_data_dir(cls, v):
        return v or os.getenv("DATA_DIR") or "data"

    @validator('token_file', pre=True, always=True)
    def set_token_file(cls, v, values):
        return v or os.getenv("TOKEN_FILE") or str(Path(values['data_dir']) / "token.json")

    @validator('jobs_dir', pre=True, always=True)
    def set_jobs_dir(cls, v, values):
        return v or os.getenv("JOBS_DIR") or str(Path(values['data_dir']) / "jobs")


class TransferConfig(BaseModel):
    """Publish defaults and background job limits"""

    category_id: str = Field(
        default="22",  # People & Blogs
        description="YouTube category for every upload"
    )

    default_privacy: str = Field(
        default="private",
        description="Visibility used when the submitter gives none"
    )

    mime_type: str = Field(
        default="video/*",
        description="Media type sent with the upload body"
    )

    made_for_kids: bool = Field(
        default=False,
        description="selfDeclaredMadeForKids flag"
    )

    token_timeout_seconds: float = Field(
        default=60,
        description="Bound on acquiring a token inside a job"
    )

    # Env-backed fields default to None so an explicit argument can be told
    # apart from "not given"; 0 disables the bound.
    download_timeout_seconds: float = Field(
        default=None,
        description="Bound on buffering the source file (default 1800)"
    )

    upload_timeout_seconds: float = Field(
        default=None,
        description="Bound on the publish call (default 3600)"
    )

    max_concurrent_transfers: int = Field(
        default=None,
        description="Concurrent background transfers (0 = unbounded)"
    )

    @validator('max_concurrent_transfers', pre=True, always=True)
    def set_max_concurrent_transfers(cls, v):
        return int(v if v is not None else os.getenv("MAX_CONCURRENT_TRANSFERS", 0))

    @validator('download_timeout_seconds', pre=True, always=True)
    def set_download_timeout(cls, v):
        return float(v if v is not None else os.getenv("DOWNLOAD_TIMEOUT_SECONDS", 1800))

    @validator('upload_timeout_seconds', pre=True, always=True)
    def set_upload_timeout(cls, v):
        return float(v if v is not None else os.getenv("UPLOAD_TIMEOUT_SECONDS", 3600))


class DriveConfig(BaseModel):
    """Drive file listing settings"""

    video_query: str = Field(
        default="mimeType contains 'video/'",
        description="Drive search query selecting candidate files"
    )

    page_size: int = Field(
        default=50,
        description="Files returned per listing"
    )

    order_by: str = Field(
        default="modifiedTime desc",
        description="Listing order"
    )


class ServerConfig(BaseModel):
    """Main server configuration"""

    transport: str = Field(
        default=None,
        description="Transport mode: stdio or http"
    )

    host: str = Field(
        default="0.0.0.0",
        description="Server host for HTTP mode"
    )

    port: int = Field(
        default=None,
        description="Server port for HTTP mode"
    )

    log_level: str = Field(
        default=None,
        description="Logging level"
    )

    @validator('transport', pre=True, always=True)
    def set_transport(cls, v):
        return v or os.getenv("MCP_TRANSPORT", "stdio")

    @validator('port', pre=True, always=True)
    def set_port(cls, v):
        return int(v or os.getenv("PORT", 8080))

    @validator('log_level', pre=True, always=True)
    def set_log_level(cls, v):
        return (v or os.getenv("LOG_LEVEL") or "INFO").upper()


class AppConfig(BaseModel):
    """Application-wide configuration"""

    oauth: GoogleOAuthConfig = Field(default_factory=GoogleOAuthConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    transfer: TransferConfig = Field(default_factory=TransferConfig)
    drive: DriveConfig = Field(default_factory=DriveConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    class Config:
        validate_assignment = True


def get_config() -> AppConfig:
    """Build configuration from the current environment"""
    return AppConfig()


# Export config for easy import
config = get_config()

if not config.oauth.is_configured:
    logger.warning(
        "⚠️  Google OAuth client not configured. "
        "Set GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET and GOOGLE_REDIRECT_URI in .env"
    )
