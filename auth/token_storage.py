"""
Secure Credential Storage with Encryption
Holds the single OAuth credential record in an encrypted file
"""

import os
import json
import uuid
import base64
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Dict, Any
from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

logger = logging.getLogger(__name__)


@dataclass
class CredentialRecord:
    """Stored OAuth credential for one user key"""

    user_id: str
    access_token: str
    refresh_token: Optional[str]
    expiry: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            'user_id': self.user_id,
            'access_token': self.access_token,
            'refresh_token': self.refresh_token,
            'expiry': self.expiry.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CredentialRecord":
        expiry = datetime.fromisoformat(data['expiry'])
        if expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=timezone.utc)
        return cls(
            user_id=data['user_id'],
            access_token=data['access_token'],
            refresh_token=data.get('refresh_token'),
            expiry=expiry,
        )


class TokenStorage:
    """
    Encrypted keyed store for credential records

    Features:
    - AES encryption via Fernet
    - Key derivation from machine-specific data
    - Records keyed by user id; a put fully replaces the record for that key
    """

    def __init__(self, token_file: str = "token.json"):
        """
        Initialize token storage

        Args:
            token_file: Path to encrypted token file
        """
        self.token_file = Path(token_file)
        self.key_file = self.token_file.with_suffix('.key')
        self.token_file.parent.mkdir(parents=True, exist_ok=True)

        self.cipher = self._get_cipher()

    def _get_cipher(self) -> Fernet:
        """Get or create Fernet cipher"""
        if self.key_file.exists():
            key = self.key_file.read_bytes()
        else:
            key = self._generate_key()
            self.key_file.write_bytes(key)
            self.key_file.chmod(0o600)
            logger.info(f"✅ Generated new encryption key: {self.key_file}")

        return Fernet(key)

    def _generate_key(self) -> bytes:
        """
        Generate encryption key from machine-specific data

        Uses PBKDF2 with machine ID as salt for deterministic key generation
        """
        machine_id = str(uuid.getnode()).encode()

        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=machine_id,
            iterations=100000,
        )

        password = machine_id + os.getenv('USER', 'default').encode()
        return base64.urlsafe_b64encode(kdf.derive(password))

    def _read_all(self) -> Dict[str, Dict[str, Any]]:
        if not self.token_file.exists():
            return {}

        try:
            json_data = self.cipher.decrypt(self.token_file.read_bytes())
        except InvalidToken:
            logger.error(f"Failed to decrypt {self.token_file}; treating as empty")
            return {}

        return json.loads(json_data.decode('utf-8'))

    def get(self, user_id: str) -> Optional[CredentialRecord]:
        """
        Load and decrypt the record stored under user_id

        Returns:
            CredentialRecord or None if not found
        """
        data = self._read_all().get(user_id)
        if not data:
            return None
        return CredentialRecord.from_dict(data)

    def put(self, record: CredentialRecord) -> None:
        """
        Encrypt and save a record, replacing any previous one for its user id

        Args:
            record: Credential record to save
        """
        records = self._read_all()
        records[record.user_id] = record.to_dict()

        encrypted_data = self.cipher.encrypt(json.dumps(records).encode('utf-8'))
        self.token_file.write_bytes(encrypted_data)
        self.token_file.chmod(0o600)

        logger.info(f"✅ Credential saved securely to {self.token_file}")

    def exists(self) -> bool:
        """Check if token file exists"""
        return self.token_file.exists()
