"""Credential Vault.

Encrypted-at-rest credential storage core and secure password generation.
"""
from .version import __version__
from .vault import (
    VaultConfig,
    CredentialCipher,
    SecureGenerator,
    CharsetSpec,
    VaultError,
    TokenError,
    MalformedToken,
    AuthenticationFailed,
    RandomnessUnavailable,
    UnsatisfiableCharsetSpec,
)
from .models import (
    PasswordEntry,
    CreatePasswordRequest,
    UpdatePasswordRequest,
    GeneratePasswordRequest,
    GeneratePasswordResponse,
    SuccessResponse,
    ErrorResponse,
)

__all__ = [
    "__version__",
    "VaultConfig",
    "CredentialCipher",
    "SecureGenerator",
    "CharsetSpec",
    "VaultError",
    "TokenError",
    "MalformedToken",
    "AuthenticationFailed",
    "RandomnessUnavailable",
    "UnsatisfiableCharsetSpec",
    "PasswordEntry",
    "CreatePasswordRequest",
    "UpdatePasswordRequest",
    "GeneratePasswordRequest",
    "GeneratePasswordResponse",
    "SuccessResponse",
    "ErrorResponse",
]
