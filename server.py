#!/usr/bin/env python3
"""
Drive to YouTube Relay - MCP Server
Publishes videos from the connected Google Drive to YouTube.

Provides tools for:
- Connecting a Google account (consent URL + callback code exchange)
- Listing video files in Drive
- Submitting background Drive -> YouTube uploads
- Upload history and per-upload status
- Health reporting
"""

import logging
from typing import Optional, Dict, Any, List

from fastmcp import FastMCP

from config import config
from errors import RelayError, UnknownError, describe_error
from auth import CredentialManager, GoogleAuthorizationProvider, TokenStorage
from drive_client import DriveSource
from youtube_client import YouTubePublisher
from transfer import JobStore
from transfer.orchestrator import TransferOrchestrator
from utils.health_check import HealthChecker

# Setup logging
logging.basicConfig(
    level=getattr(logging, config.server.log_level, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Initialize MCP server
mcp = FastMCP("Drive to YouTube Relay")

authorization_provider = GoogleAuthorizationProvider(config.oauth)
credential_manager = CredentialManager(
    storage=TokenStorage(config.storage.token_file),
    provider=authorization_provider,
    oauth_config=config.oauth
)
job_store = JobStore(config.storage.jobs_dir)
orchestrator = TransferOrchestrator(
    credential_manager=credential_manager,
    job_store=job_store,
    source=DriveSource(config.drive),
    publisher=YouTubePublisher(config.transfer),
    transfer_config=config.transfer,
    user_id=config.oauth.user_id,
    history_limit=config.storage.history_limit
)
health_checker = HealthChecker(credential_manager, job_store, config.oauth)
logger.info("Relay components initialized")


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def error_response(error: Exception, context: str) -> Dict[str, Any]:
    """Tool result for a failed call; auth problems carry requires_reauth"""
    if isinstance(error, RelayError):
        logger.warning(f"{context}: {error.code} - {error.message}")
        return error.to_dict()

    logger.error(f"{context}: {error}")
    return UnknownError(describe_error(error)).to_dict()


# ============================================================================
# MCP TOOLS
# ============================================================================

def get_authorization_url() -> Dict[str, Any]:
    """
    Start connecting a Google account.

    Returns the Google consent URL (YouTube upload + Drive read-only, offline
    access). After consenting, pass the `code` from the redirect to
    complete_authorization.
    """
    try:
        auth_url, state = authorization_provider.build_authorization_url()
        return {
            "success": True,
            "auth_url": auth_url,
            "state": state
        }
    except Exception as e:
        return error_response(e, "Error initiating OAuth flow")


async def complete_authorization(code: str) -> Dict[str, Any]:
    """
    Finish connecting a Google account.

    Args:
        code: One-time authorization code from the OAuth redirect

    Returns:
        Dictionary with success flag and token status
    """
    if not code:
        return {
            "success": False,
            "error": "INVALID_REQUEST",
            "message": "Authorization code is required",
            "requires_reauth": True
        }

    try:
        await credential_manager.complete_authorization(code)
        return {
            "success": True,
            "message": "✅ Google account connected",
            **credential_manager.get_token_info()
        }
    except Exception as e:
        return error_response(e, "Error handling OAuth callback")


def check_oauth_status() -> Dict[str, Any]:
    """
    Check whether a Google account is connected and its token usable.
    """
    info = credential_manager.get_token_info()
    info["configured"] = config.oauth.is_configured
    if not info["authenticated"]:
        info["instructions"] = [
            "1. Call get_authorization_url and open the URL",
            "2. Pass the returned code to complete_authorization"
        ]
    return info


async def refresh_access_token() -> Dict[str, Any]:
    """
    Make sure the stored access token is usable now, refreshing if needed.
    """
    try:
        await credential_manager.acquire_token()
        return {
            "success": True,
            **credential_manager.get_token_info()
        }
    except Exception as e:
        return error_response(e, "Error refreshing access token")


async def list_drive_files() -> Dict[str, Any]:
    """
    List video files in the connected Google Drive, newest first.

    Returns:
        Dictionary with `files`: id, name, size, mime_type, thumbnail_url,
        modified_time
    """
    try:
        files = await orchestrator.list_source_files()
        return {
            "success": True,
            "files": files,
            "count": len(files)
        }
    except Exception as e:
        return error_response(e, "Error listing Drive files")


async def upload_drive_video(
    drive_file_id: str,
    title: str,
    description: Optional[str] = None,
    tags: Optional[List[str]] = None,
    privacy_status: Optional[str] = None
) -> Dict[str, Any]:
    """
    Publish a Drive video to YouTube in the background.

    Returns immediately with an upload id; poll get_upload_status or
    get_upload_history for progress and the YouTube video id.

    Args:
        drive_file_id: Drive file id (from list_drive_files)
        title: Video title (required)
        description: Video description
        tags: List of tags
        privacy_status: "private" (default), "unlisted" or "public"
    """
    try:
        upload_id = await orchestrator.submit(
            drive_file_id,
            title,
            description=description,
            tags=tags,
            privacy_status=privacy_status
        )
        return {
            "success": True,
            "upload_id": upload_id,
            "video_id": None
        }
    except Exception as e:
        return error_response(e, "Error initiating video upload")


def get_upload_history(limit: int = 50) -> Dict[str, Any]:
    """
    Recent uploads, most recent first.

    Each entry: id, youtube_video_id, title, status, progress, timestamp,
    error_message, privacy_status.
    """
    try:
        limit = max(1, min(int(limit), config.storage.history_limit))
        return {
            "success": True,
            "uploads": orchestrator.list_jobs(limit)
        }
    except Exception as e:
        return error_response(e, "Error fetching upload history")


def get_upload_status(upload_id: str) -> Dict[str, Any]:
    """
    Status of one upload.

    Args:
        upload_id: Id returned by upload_drive_video
    """
    try:
        return {
            "success": True,
            "upload": orchestrator.get_job(upload_id).summary()
        }
    except Exception as e:
        return error_response(e, "Error fetching upload status")


async def server_health() -> Dict[str, Any]:
    """
    Server health: OAuth configuration, stored credential, job store.
    """
    try:
        health_status = await health_checker.check_health(include_details=True)
        health_status["active_transfers"] = orchestrator.active_transfers
        return {
            "success": True,
            **health_status
        }
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return {
            "success": False,
            "status": "unhealthy",
            "error": str(e),
            "message": "Health check failed"
        }


# Registered without rebinding so the plain functions stay importable
for _tool in (
    get_authorization_url,
    complete_authorization,
    check_oauth_status,
    refresh_access_token,
    list_drive_files,
    upload_drive_video,
    get_upload_history,
    get_upload_status,
    server_health,
):
    mcp.tool()(_tool)


# ============================================================================
# SERVER INITIALIZATION
# ============================================================================

if __name__ == "__main__":
    logger.info("Starting Drive to YouTube Relay")
    logger.info(f"Transport: {config.server.transport}")
    logger.info(f"Data directory: {config.storage.data_dir}")

    if config.server.transport == "http":
        logger.info(f"🚀 Starting in HTTP mode on {config.server.host}:{config.server.port}")
        mcp.run(
            transport="streamable-http",
            host=config.server.host,
            port=config.server.port
        )
    else:
        logger.info("🚀 Starting in stdio mode (local)")
        mcp.run()
