"""
Google Drive source client
Lists candidate video files and downloads file content into memory
"""

import io
import logging
from datetime import datetime, timezone
from typing import Dict, Any, List, Optional

import httplib2
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build, Resource
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseDownload

from config import DriveConfig
from errors import AuthorizationExpired, SourceReadFailed, api_error_reason, is_auth_rejection

logger = logging.getLogger(__name__)


class DriveSource:
    """
    Read-only access to the connected user's Drive

    Calls are blocking; async callers run them in a worker thread.
    """

    FILE_FIELDS = 'files(id,name,size,modifiedTime,mimeType,thumbnailLink)'

    def __init__(self, drive_config: Optional[DriveConfig] = None):
        self.drive_config = drive_config or DriveConfig()

    def _service(self, credentials: Credentials) -> Resource:
        return build('drive', 'v3', credentials=credentials, cache_discovery=False)

    def list_video_files(self, credentials: Credentials) -> List[Dict[str, Any]]:
        """
        List video files, most recently modified first

        Returns:
            List of dicts with id, name, size, mime_type, thumbnail_url, modified_time

        Raises:
            AuthorizationExpired: Drive refused the token (401, or 403 not caused by quota)
            SourceReadFailed: any other API or network failure
        """
        try:
            response = self._service(credentials).files().list(
                q=self.drive_config.video_query,
                fields=self.FILE_FIELDS,
                orderBy=self.drive_config.order_by,
                pageSize=self.drive_config.page_size
            ).execute()
        except HttpError as e:
            raise self._map_http_error(e, "Failed to list Drive files") from e
        except (OSError, httplib2.HttpLib2Error) as e:
            raise SourceReadFailed(f"Failed to list Drive files: {e}") from e

        files = [self._format_file(item) for item in response.get('files', [])]
        logger.info(f"Found {len(files)} video files in Drive")
        return files

    @staticmethod
    def _format_file(item: Dict[str, Any]) -> Dict[str, Any]:
        return {
            'id': item.get('id', ''),
            'name': item.get('name', ''),
            'size': int(item['size']) if item.get('size') else 0,
            'mime_type': item.get('mimeType', ''),
            'thumbnail_url': item.get('thumbnailLink'),
            'modified_time': item.get('modifiedTime')
                or datetime.now(timezone.utc).isoformat(),
        }

    def download(self, credentials: Credentials, file_id: str) -> bytes:
        """
        Download the full content of a file into memory

        Raises:
            AuthorizationExpired: Drive refused the token (401, or 403 not caused by quota)
            SourceReadFailed: any other read failure, with the underlying message
        """
        logger.info(f"Downloading Drive file {file_id}")

        try:
            request = self._service(credentials).files().get_media(fileId=file_id)

            fh = io.BytesIO()
            downloader = MediaIoBaseDownload(fh, request)
            done = False
            while not done:
                status, done = downloader.next_chunk()
                if status:
                    logger.debug(f"Download progress: {int(status.progress() * 100)}%")
        except HttpError as e:
            raise self._map_http_error(e, f"Failed to download {file_id}") from e
        except (OSError, httplib2.HttpLib2Error) as e:
            raise SourceReadFailed(f"Failed to download {file_id}: {e}") from e

        content = fh.getvalue()
        logger.info(f"✅ Downloaded {len(content)} bytes from Drive")
        return content

    @staticmethod
    def _map_http_error(error: HttpError, context: str) -> Exception:
        reason = api_error_reason(error)
        if is_auth_rejection(error):
            logger.warning(f"{context}: Drive answered {error.resp.status} ({reason})")
            return AuthorizationExpired(
                f"{context}: {reason}. Please reconnect your Google account."
            )

        if error.resp.status == 404:
            message = f"{context}: file not found"
        else:
            message = f"{context}: {reason}"
        logger.error(message)
        return SourceReadFailed(message)
