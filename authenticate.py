#!/usr/bin/env python3
"""
OAuth2 Authentication CLI Tool
Helper script for connecting the relay to a Google account
"""

import sys
import asyncio
import argparse
import logging

from config import config
from errors import RelayError
from auth import CredentialManager, GoogleAuthorizationProvider, TokenStorage

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(message)s'
)
logger = logging.getLogger(__name__)


def build_manager() -> CredentialManager:
    return CredentialManager(
        storage=TokenStorage(config.storage.token_file),
        provider=GoogleAuthorizationProvider(config.oauth),
        oauth_config=config.oauth
    )


def main(argv=None) -> int:
    """Main CLI function"""
    parser = argparse.ArgumentParser(
        description='OAuth2 Authentication Manager for the Drive to YouTube relay',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Print the Google consent URL
  python authenticate.py url

  # Store tokens from the code Google redirected back with
  python authenticate.py exchange 4/0AbC...

  # Check authentication status
  python authenticate.py status

  # Refresh the access token now if it is expired or expiring
  python authenticate.py refresh
"""
    )

    parser.add_argument(
        'command',
        choices=['url', 'exchange', 'status', 'refresh'],
        help='Command to execute'
    )

    parser.add_argument(
        'code',
        nargs='?',
        help='Authorization code (for exchange)'
    )

    args = parser.parse_args(argv)
    manager = build_manager()

    if args.command == 'url':
        return print_url(manager)
    elif args.command == 'exchange':
        if not args.code:
            parser.error("exchange requires the authorization code")
        return exchange(manager, args.code)
    elif args.command == 'status':
        return show_status(manager)
    elif args.command == 'refresh':
        return refresh(manager)

    return 0


def print_url(manager: CredentialManager) -> int:
    """Print the consent URL"""
    try:
        url, state = manager.provider.build_authorization_url()
    except Exception as e:
        logger.error(f"\n❌ Failed to build consent URL: {e}")
        return 1

    logger.info("\n🔐 Open this URL in a browser and grant access:")
    logger.info("=" * 60)
    logger.info(url)
    logger.info("=" * 60)
    logger.info(f"State: {state}")
    logger.info("\n💡 Then run: python authenticate.py exchange <code>")
    return 0


def exchange(manager: CredentialManager, code: str) -> int:
    """Exchange the authorization code and store tokens"""
    try:
        asyncio.run(manager.complete_authorization(code))
    except Exception as e:
        logger.error(f"\n❌ Authentication failed: {e}")
        return 1

    logger.info("\n✅ Authentication successful!")
    return show_status(manager)


def show_status(manager: CredentialManager) -> int:
    """Show authentication status"""
    info = manager.get_token_info()

    logger.info("\n📊 Authentication Status")
    logger.info("=" * 60)

    if not info['authenticated']:
        logger.info("❌ Not authenticated")
        logger.info("\n💡 Run: python authenticate.py url")
        return 1

    logger.info(f"✅ Authenticated: {info['authenticated']}")
    logger.info(f"   Expired: {info['expired']}")
    logger.info(f"   Has refresh token: {info['has_refresh_token']}")
    logger.info(f"\n⏰ Token Expiry: {info['expiry']}")

    hours = info['time_until_expiry_seconds'] / 3600
    logger.info(f"   Time remaining: {hours:.1f} hours")
    return 0


def refresh(manager: CredentialManager) -> int:
    """Acquire a usable token, refreshing if needed"""
    try:
        asyncio.run(manager.acquire_token())
    except Exception as e:
        logger.error(f"\n❌ Refresh failed: {e}")
        if isinstance(e, RelayError) and e.requires_reauth:
            logger.info("\n💡 Run: python authenticate.py url")
        return 1

    logger.info("\n✅ Access token is usable")
    return show_status(manager)


if __name__ == '__main__':
    sys.exit(main())
