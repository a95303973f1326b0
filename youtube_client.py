"""
YouTube publish client
Uploads an in-memory video with its metadata and returns the new video id
"""

import io
import logging
from typing import Optional, Dict, Any

import httplib2
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build, Resource
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseUpload

from config import TransferConfig
from errors import PublishRejected, api_error_reason, is_auth_rejection
from transfer.models import VideoMetadata

logger = logging.getLogger(__name__)


class YouTubePublisher:
    """
    Publishes videos through the YouTube Data API v3

    Calls are blocking; async callers run them in a worker thread.
    """

    def __init__(self, transfer_config: Optional[TransferConfig] = None):
        self.transfer_config = transfer_config or TransferConfig()

    def _service(self, credentials: Credentials) -> Resource:
        return build('youtube', 'v3', credentials=credentials, cache_discovery=False)

    def build_request_body(self, metadata: VideoMetadata) -> Dict[str, Any]:
        """videos.insert body for the given metadata"""
        return {
            'snippet': {
                'title': metadata.title,
                'description': metadata.description or '',
                'tags': list(metadata.tags),
                'categoryId': self.transfer_config.category_id
            },
            'status': {
                'privacyStatus': metadata.privacy_status.value,
                'selfDeclaredMadeForKids': self.transfer_config.made_for_kids
            }
        }

    def publish(
        self,
        credentials: Credentials,
        content: bytes,
        metadata: VideoMetadata
    ) -> str:
        """
        Upload video bytes to YouTube

        Args:
            credentials: Authenticated handle
            content: Whole video file
            metadata: Title, description, tags and visibility

        Returns:
            The YouTube video id

        Raises:
            PublishRejected: API rejection or network failure; auth errors
                (401, or 403 not caused by quota) are flagged for re-authorization
        """
        logger.info(
            f"Uploading '{metadata.title}' to YouTube "
            f"({len(content)} bytes, privacy: {metadata.privacy_status.value})"
        )

        media = MediaIoBaseUpload(
            io.BytesIO(content),
            mimetype=self.transfer_config.mime_type,
            resumable=False
        )

        try:
            response = self._service(credentials).videos().insert(
                part='snippet,status',
                body=self.build_request_body(metadata),
                media_body=media
            ).execute()
        except HttpError as e:
            reason = api_error_reason(e)
            if is_auth_rejection(e):
                logger.warning(f"YouTube answered {e.resp.status} ({reason}); re-authorization required")
                raise PublishRejected(
                    f"YouTube refused the token: {reason}. Please reconnect your Google account.",
                    auth_error=True
                ) from e
            error_msg = f"YouTube rejected the upload: {reason}"
            logger.error(error_msg)
            raise PublishRejected(error_msg) from e
        except (OSError, httplib2.HttpLib2Error) as e:
            raise PublishRejected(f"Upload to YouTube failed: {e}") from e

        video_id = response.get('id') if isinstance(response, dict) else None
        if not video_id:
            raise PublishRejected("YouTube upload did not return a video id")

        logger.info(f"✅ Video uploaded successfully. YouTube ID: {video_id}")
        return video_id
