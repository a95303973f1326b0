#!/usr/bin/env python3
"""
Input validation for the Drive to YouTube relay
Validates and sanitizes upload submissions
"""

import re
import logging
from typing import Optional, List, Union

from errors import InvalidRequest
from transfer.models import PrivacyStatus, VideoMetadata

logger = logging.getLogger(__name__)

# YouTube limits
MAX_TITLE_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 5000
MAX_TAGS = 500


def sanitize_text(text: str, max_length: Optional[int] = None) -> str:
    """
    Sanitize text input (remove control characters, limit length)

    Args:
        text: Text to sanitize
        max_length: Maximum length (optional)

    Returns:
        Sanitized text
    """
    if not text or not isinstance(text, str):
        return ""

    # Remove control characters except newlines and tabs
    text = re.sub(r'[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]', '', text)

    if max_length and len(text) > max_length:
        text = text[:max_length]

    return text.strip()


def validate_source_ref(source_ref: str) -> str:
    """Validate a Drive file id"""
    if not source_ref or not isinstance(source_ref, str) or not source_ref.strip():
        raise InvalidRequest("Drive file ID and title are required")
    return source_ref.strip()


def validate_title(title: str) -> str:
    """Validate video title"""
    if not title or not isinstance(title, str):
        raise InvalidRequest("Drive file ID and title are required")

    title = sanitize_text(title)

    if len(title) < 1:
        raise InvalidRequest("Video title cannot be empty")

    if len(title) > MAX_TITLE_LENGTH:
        raise InvalidRequest(f"Video title too long (max {MAX_TITLE_LENGTH} characters)")

    return title


def validate_description(description: Optional[str]) -> Optional[str]:
    """Validate video description; empty becomes None"""
    if not description:
        return None

    if not isinstance(description, str):
        raise InvalidRequest("Video description must be a string")

    if len(description) > MAX_DESCRIPTION_LENGTH:
        raise InvalidRequest(
            f"Video description too long (max {MAX_DESCRIPTION_LENGTH} characters)"
        )

    return sanitize_text(description) or None


def validate_tags(tags: Union[List[str], str, None]) -> List[str]:
    """Validate tags; a comma separated string is accepted too"""
    if not tags:
        return []

    if isinstance(tags, str):
        tags = tags.split(',')

    if not isinstance(tags, (list, tuple)):
        raise InvalidRequest("Tags must be a list")

    if len(tags) > MAX_TAGS:
        raise InvalidRequest(f"Too many tags (max {MAX_TAGS})")

    validated_tags = []
    for tag in tags:
        if not isinstance(tag, str):
            raise InvalidRequest("Tags must be strings")

        tag = sanitize_text(tag)
        if tag:
            validated_tags.append(tag)

    return validated_tags


def validate_privacy_status(
    status: Optional[str],
    default: PrivacyStatus = PrivacyStatus.PRIVATE
) -> PrivacyStatus:
    """Validate privacy status; missing means the most restrictive level"""
    if status is None or status == "":
        return default

    if isinstance(status, PrivacyStatus):
        return status

    if not isinstance(status, str):
        raise InvalidRequest("Privacy status must be a string")

    try:
        return PrivacyStatus(status.strip().lower())
    except ValueError:
        valid = ', '.join(p.value for p in PrivacyStatus)
        raise InvalidRequest(
            f"Invalid privacy status: {status}. Valid options: {valid}"
        )


def validate_upload_request(
    source_ref: str,
    title: str,
    description: Optional[str] = None,
    tags: Union[List[str], str, None] = None,
    privacy_status: Optional[str] = None,
    default_privacy: PrivacyStatus = PrivacyStatus.PRIVATE
) -> tuple:
    """
    Validate a whole submission

    Returns:
        (source_ref, VideoMetadata)

    Raises:
        InvalidRequest: on any invalid field
    """
    source_ref = validate_source_ref(source_ref)
    metadata = VideoMetadata(
        title=validate_title(title),
        description=validate_description(description),
        tags=validate_tags(tags),
        privacy_status=validate_privacy_status(privacy_status, default_privacy),
    )
    return source_ref, metadata
