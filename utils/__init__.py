#!/usr/bin/env python3
"""
Utils package for the Drive to YouTube relay
Provides input validation and health checks
"""

from .validators import (
    sanitize_text,
    validate_source_ref,
    validate_title,
    validate_description,
    validate_tags,
    validate_privacy_status,
    validate_upload_request
)

from .health_check import (
    HealthStatus,
    HealthChecker
)

__all__ = [
    # Validators
    'sanitize_text',
    'validate_source_ref',
    'validate_title',
    'validate_description',
    'validate_tags',
    'validate_privacy_status',
    'validate_upload_request',

    # Health
    'HealthStatus',
    'HealthChecker',
]
