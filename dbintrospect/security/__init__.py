"""Security module for connection secrets.

Provides lazily resolved secrets and Fernet encryption for connection strings.
"""

from .credentials import (
    CredentialCipher,
    EncryptedSecret,
    EnvSecret,
    PlainSecret,
    Secret,
    decrypt_value,
    encrypt_value,
)

__all__ = [
    "Secret",
    "PlainSecret",
    "EnvSecret",
    "EncryptedSecret",
    "CredentialCipher",
    "encrypt_value",
    "decrypt_value",
]
