"""Credential Vault core — Encryption of stored secrets and password generation.

Security Note (Threat Model):
    A single server-held key protects every stored secret. Anyone who can
    read the process environment (``ENCRYPTION_KEY``) or dump process memory
    can recover all plaintext. This is an accepted limitation; mitigation
    requires HSM/KMS integration which is out of scope.
"""

from .exceptions import (
    VaultError,
    RandomnessUnavailable,
    TokenError,
    MalformedToken,
    AuthenticationFailed,
    UnsatisfiableCharsetSpec,
)
from .crypto import CredentialCipher, derive_key
from .generator import CharsetSpec, SecureGenerator
from .config import VaultConfig, normalize_key, redact, generate_master_key

__all__ = [
    "VaultError",
    "RandomnessUnavailable",
    "TokenError",
    "MalformedToken",
    "AuthenticationFailed",
    "UnsatisfiableCharsetSpec",
    "CredentialCipher",
    "derive_key",
    "CharsetSpec",
    "SecureGenerator",
    "VaultConfig",
    "normalize_key",
    "redact",
    "generate_master_key",
]
