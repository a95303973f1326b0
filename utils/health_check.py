"""
Health Check Module for the Drive to YouTube relay
==================================================

Components:
1. Server: process is running
2. OAuth: client configuration present
3. Credentials: a usable or refreshable token is stored
4. Job store: record storage readable
"""

import time
import logging
from typing import Dict, Any
from datetime import datetime, timezone
from enum import Enum

logger = logging.getLogger(__name__)


class HealthStatus(Enum):
    """Health check status levels"""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class HealthChecker:
    """
    Health checker for the relay's collaborators
    """

    def __init__(self, credential_manager, job_store, oauth_config):
        self.credential_manager = credential_manager
        self.job_store = job_store
        self.oauth_config = oauth_config
        self.start_time = time.time()

    async def check_health(self, include_details: bool = True) -> Dict[str, Any]:
        """
        Perform health check

        Args:
            include_details: Include detailed component status

        Returns:
            Health check results
        """
        checks = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "status": HealthStatus.HEALTHY.value,
            "uptime_seconds": time.time() - self.start_time,
        }

        components = {
            "server": self._check_server(),
            "oauth": self._check_oauth(),
            "credentials": self._check_credentials(),
            "job_store": self._check_job_store(),
        }

        unhealthy = [k for k, v in components.items() if v["status"] == HealthStatus.UNHEALTHY.value]
        degraded = [k for k, v in components.items() if v["status"] == HealthStatus.DEGRADED.value]

        if unhealthy:
            checks["status"] = HealthStatus.UNHEALTHY.value
            checks["unhealthy_components"] = unhealthy
        elif degraded:
            checks["status"] = HealthStatus.DEGRADED.value
            checks["degraded_components"] = degraded

        if include_details:
            checks["components"] = components

        return checks

    def _check_server(self) -> Dict[str, Any]:
        return {
            "status": HealthStatus.HEALTHY.value,
            "message": "Server is running",
            "uptime_seconds": time.time() - self.start_time
        }

    def _check_oauth(self) -> Dict[str, Any]:
        if not self.oauth_config.is_configured:
            return {
                "status": HealthStatus.UNHEALTHY.value,
                "message": "Google OAuth credentials not configured"
            }
        return {
            "status": HealthStatus.HEALTHY.value,
            "message": "OAuth configured"
        }

    def _check_credentials(self) -> Dict[str, Any]:
        info = self.credential_manager.get_token_info()

        if not info["authenticated"]:
            return {
                "status": HealthStatus.DEGRADED.value,
                "message": "Google account not connected"
            }

        if info["expired"] and not info["has_refresh_token"]:
            return {
                "status": HealthStatus.DEGRADED.value,
                "message": "Token expired and cannot be refreshed; reconnect required"
            }

        return {
            "status": HealthStatus.HEALTHY.value,
            "message": "Credentials usable",
            "has_refresh_token": info["has_refresh_token"]
        }

    def _check_job_store(self) -> Dict[str, Any]:
        try:
            job_count = self.job_store.count()
        except Exception as e:
            logger.error(f"Job store check failed: {e}")
            return {
                "status": HealthStatus.UNHEALTHY.value,
                "message": f"Job store check failed: {str(e)}"
            }
        return {
            "status": HealthStatus.HEALTHY.value,
            "message": "Job store is available",
            "job_count": job_count
        }

