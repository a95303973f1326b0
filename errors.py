"""
Error taxonomy for the Drive to YouTube relay

Synchronous entry points raise these directly. Background transfers record
the message on the job instead of raising.
"""

from typing import Any, Dict, Optional


class RelayError(Exception):
    """Base class for every failure the relay reports to its caller"""

    code = "UNKNOWN"
    requires_reauth = False
    default_message = "Unknown error occurred"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": False,
            "error": self.code,
            "message": self.message,
            "requires_reauth": self.requires_reauth,
        }


class InvalidRequest(RelayError):
    """Bad caller input"""

    code = "INVALID_REQUEST"
    default_message = "Invalid request"


class NotAuthorized(RelayError):
    """No credential has been stored yet"""

    code = "NOT_AUTHORIZED"
    requires_reauth = True
    default_message = "No OAuth token found. Please connect your Google account."


class NotConfigured(NotAuthorized):
    """OAuth client id, secret or redirect URI missing"""

    code = "CREDENTIALS_MISSING"
    default_message = "Google OAuth credentials not configured"


class RefreshUnavailable(RelayError):
    """Access token expired and there is no refresh token to renew it"""

    code = "REFRESH_UNAVAILABLE"
    requires_reauth = True
    default_message = (
        "Access token expired and no refresh token is stored. "
        "Please reconnect your Google account."
    )


class RefreshFailed(RelayError):
    """Authorization server rejected the refresh, or it could not be reached"""

    code = "REFRESH_FAILED"
    requires_reauth = True
    default_message = "Failed to refresh access token"


class AuthorizationExpired(RelayError):
    """A Google API answered 401 or 403"""

    code = "AUTH_EXPIRED"
    requires_reauth = True
    default_message = "Authentication expired. Please reconnect your Google account."


class SourceReadFailed(RelayError):
    """Drive listing or download failed"""

    code = "SOURCE_READ_FAILED"
    default_message = "Failed to read file from Google Drive"


class PublishRejected(RelayError):
    """YouTube refused the upload"""

    code = "PUBLISH_REJECTED"
    default_message = "YouTube rejected the upload"

    def __init__(self, message: Optional[str] = None, auth_error: bool = False):
        super().__init__(message)
        if auth_error:
            self.code = AuthorizationExpired.code
            self.requires_reauth = True


class PhaseTimeout(RelayError):
    """A transfer phase did not finish within its bound"""

    code = "TIMEOUT"
    default_message = "Transfer phase timed out"


class UnknownError(RelayError):
    """Catch-all; the original message is preserved"""

    code = "UNKNOWN"


# 403 reasons Google uses for quota, rate and content limits; the token is fine
NON_AUTH_FORBIDDEN_REASONS = frozenset({
    'downloadQuotaExceeded',
    'cannotDownloadAbusiveFile',
    'rateLimitExceeded',
    'userRateLimitExceeded',
    'dailyLimitExceeded',
    'quotaExceeded',
    'uploadLimitExceeded',
    'sharingRateLimitExceeded',
})


def api_error_reason(error) -> str:
    """Google's own message from an HttpError, falling back to str()"""
    reason = getattr(error, 'reason', None)
    if isinstance(reason, str) and reason.strip():
        return reason.strip()
    return describe_error(error)


def is_auth_rejection(error) -> bool:
    """
    True when an HttpError means the token itself was refused

    401 always is. 403 is, unless Google tags it with a quota/rate reason or
    the message says so.
    """
    status = error.resp.status
    if status == 401:
        return True
    if status != 403:
        return False

    details = getattr(error, 'error_details', None)
    if isinstance(details, list):
        reasons = {d.get('reason') for d in details if isinstance(d, dict)}
        if reasons & NON_AUTH_FORBIDDEN_REASONS:
            return False

    message = api_error_reason(error).lower()
    return not ('quota' in message or 'rate limit' in message)


def describe_error(error: BaseException) -> str:
    """Best-effort human readable message for any exception"""
    if isinstance(error, RelayError):
        return error.message
    message = str(error).strip()
    return message or error.__class__.__name__ or "Unknown error occurred"
