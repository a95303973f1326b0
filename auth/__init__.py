"""
OAuth2 Authentication Module
Credential storage, Google token exchanges and the credential manager
"""

from .token_storage import CredentialRecord, TokenStorage
from .oauth_flow import GoogleAuthorizationProvider, TokenGrant
from .credential_manager import CredentialManager

__all__ = [
    'CredentialRecord',
    'TokenStorage',
    'GoogleAuthorizationProvider',
    'TokenGrant',
    'CredentialManager',
]
