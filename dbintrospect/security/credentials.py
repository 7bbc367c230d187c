"""Connection secrets and credential encryption.

A ``Secret`` stands in for the connection string handed over by the host.
It is resolved to plaintext only when a connection is about to be opened,
and its value never appears in ``repr()`` or logs.

``EncryptedSecret`` uses Fernet symmetric encryption. The key comes from
the CREDENTIAL_ENCRYPTION_KEY environment variable unless given
explicitly. Generate one with:
    python -c "from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())"
"""

from __future__ import annotations

import base64
import logging
import os
from abc import ABC, abstractmethod

from cryptography.fernet import Fernet, InvalidToken

from ..connectors.base import SecretResolutionError

logger = logging.getLogger(__name__)

ENCRYPTION_KEY_ENV = "CREDENTIAL_ENCRYPTION_KEY"


class Secret(ABC):
    """An opaque credential resolved lazily to plaintext."""

    @abstractmethod
    def plaintext(self) -> str:
        """Resolve the secret.

        Raises:
            SecretResolutionError: If the value cannot be obtained
        """
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(***)"


class PlainSecret(Secret):
    """A secret whose plaintext is already in hand."""

    def __init__(self, value: str) -> None:
        self._value = value

    def plaintext(self) -> str:
        if not self._value:
            raise SecretResolutionError("Error getting plaintext connection: secret is empty")
        return self._value


class EnvSecret(Secret):
    """A secret read from an environment variable at resolution time."""

    def __init__(self, name: str) -> None:
        self.name = name

    def plaintext(self) -> str:
        value = os.getenv(self.name)
        if not value:
            raise SecretResolutionError(
                f"Error getting plaintext connection: environment variable {self.name} is not set",
                context=self.name,
            )
        return value

    def __repr__(self) -> str:
        return f"EnvSecret({self.name!r})"


class CredentialCipher:
    """Encrypts and decrypts credential values with Fernet.

    Tokens are the Fernet token wrapped in an extra urlsafe base64 layer,
    so they survive transports that mangle padding.
    """

    def __init__(self, encryption_key: str | None = None) -> None:
        """Initialize the cipher.

        Args:
            encryption_key: Fernet key (defaults to env var)
        """
        self._key = encryption_key or os.getenv(ENCRYPTION_KEY_ENV)
        self._fernet: Fernet | None = None

        if self._key:
            try:
                self._fernet = Fernet(self._key.encode())
            except (ValueError, TypeError) as e:
                logger.error(f"Invalid encryption key: {e}")
                self._fernet = None

    @property
    def encryption_enabled(self) -> bool:
        """Check if encryption is properly configured."""
        return self._fernet is not None

    def encrypt(self, value: str) -> str:
        """Encrypt a string value.

        Raises:
            ValueError: If encryption is not configured
        """
        if not self._fernet:
            raise ValueError(
                f"Encryption not configured. Set {ENCRYPTION_KEY_ENV} env var."
            )

        encrypted = self._fernet.encrypt(value.encode())
        return base64.urlsafe_b64encode(encrypted).decode()

    def decrypt(self, encrypted_value: str) -> str:
        """Decrypt an encrypted value.

        Raises:
            ValueError: If decryption fails
        """
        if not self._fernet:
            raise ValueError("Encryption not configured")

        try:
            decoded = base64.urlsafe_b64decode(encrypted_value.encode())
            return self._fernet.decrypt(decoded).decode()
        except (InvalidToken, ValueError):
            raise ValueError("Invalid encrypted value or wrong key")


class EncryptedSecret(Secret):
    """A secret stored as a Fernet token and decrypted on resolution."""

    def __init__(self, token: str, encryption_key: str | None = None) -> None:
        self._token = token
        self._key = encryption_key

    def plaintext(self) -> str:
        try:
            return CredentialCipher(self._key).decrypt(self._token)
        except ValueError as e:
            raise SecretResolutionError(f"Error getting plaintext connection: {e}") from e


def encrypt_value(value: str, encryption_key: str | None = None) -> str:
    """Convenience function to encrypt a value.

    Args:
        value: Plain text to encrypt
        encryption_key: Fernet key (defaults to env var)

    Returns:
        Encrypted value
    """
    return CredentialCipher(encryption_key).encrypt(value)


def decrypt_value(encrypted: str, encryption_key: str | None = None) -> str:
    """Convenience function to decrypt a value.

    Args:
        encrypted: Encrypted value
        encryption_key: Fernet key (defaults to env var)

    Returns:
        Decrypted plain text
    """
    return CredentialCipher(encryption_key).decrypt(encrypted)
