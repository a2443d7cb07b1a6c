"""
Vault Configuration — Key material normalization and validated settings.

Reads settings from environment variables (optionally seeded from a
``.env`` file):
    ENCRYPTION_KEY = <operator-supplied string>
    VAULT_CIPHER_BACKEND = aesgcm | chacha20
    VAULT_KEY_DERIVATION = pad | hkdf
    VAULT_PASSWORD_LENGTH = <default generated length>
    VAULT_GENERATOR_ATTEMPTS = <retry ceiling>
    VAULT_EXCLUSION_POLICY = strict | preserve_required

Security Note:
    Never log key material. Only log lengths and redacted previews.
"""
import os
import secrets
import logging
from typing import Any, Optional

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, SecretStr, field_validator

from .crypto import CredentialCipher, derive_key, KEY_LENGTH, CIPHER_BACKENDS
from .generator import (
    SecureGenerator,
    DEFAULT_LENGTH,
    MAX_LENGTH,
    DEFAULT_MAX_ATTEMPTS,
    EXCLUSION_POLICIES,
    STRICT,
)

logger = logging.getLogger("credential_vault.vault")

PAD_BYTE = b"0"
HKDF_CONTEXT = "credential-vault-v1"
KEY_DERIVATIONS = ("pad", "hkdf")


def redact(value: Optional[str], visible: int = 2) -> str:
    """Return a masked preview of a secret suitable for logs.

    Only ``visible`` characters at each end are kept, and only when the
    value is long enough that the mask still hides most of it.
    """
    if not value:
        return "<empty>"
    size = len(value)
    if size <= visible * 4:
        return f"{'*' * size} (len={size})"
    hidden = "*" * (size - visible * 2)
    return f"{value[:visible]}{hidden}{value[-visible:]} (len={size})"


def clean_key_input(value: Optional[str]) -> bytes:
    """Trim whitespace, drop stray ``%`` characters and encode as UTF-8."""
    if value is None:
        value = ""
    return value.strip().replace("%", "").encode("utf-8")


def normalize_key(value: Optional[str]) -> bytes:
    """Normalize an operator-supplied string into a 32-byte key.

    Longer input is truncated to its first 32 bytes, shorter input is
    right-padded with ASCII ``0``. This never raises.

    Args:
        value: Raw key string from configuration.

    Returns:
        Exactly 32 bytes of key material.
    """
    cleaned = clean_key_input(value)
    size = len(cleaned)
    if size > KEY_LENGTH:
        logger.warning(
            "Encryption key was too long (%d bytes), truncated to %d bytes: %s",
            size, KEY_LENGTH, redact(cleaned.decode("utf-8", "replace")),
        )
        return cleaned[:KEY_LENGTH]
    if size < KEY_LENGTH:
        logger.warning(
            "Encryption key was too short (%d bytes), padded to %d bytes "
            "(not recommended for production)",
            size, KEY_LENGTH,
        )
        return cleaned.ljust(KEY_LENGTH, PAD_BYTE)
    return cleaned


def getenv(name: str, default: Any = None) -> Any:
    """Read an environment variable; blank values count as unset."""
    return os.environ.get(name) or default


def generate_master_key() -> str:
    """Generate a random key string for the ``ENCRYPTION_KEY`` setting.

    The result is 32 URL-safe characters, so it is used as-is by
    ``normalize_key`` without truncation or padding.

    Returns:
        32-character random key string.
    """
    return secrets.token_urlsafe(24)


class VaultConfig(BaseModel):
    """Validated vault configuration."""

    encryption_key: SecretStr = Field(default=SecretStr(""))
    cipher_backend: str = Field(default="aesgcm")
    key_derivation: str = Field(default="pad")
    default_length: int = Field(default=DEFAULT_LENGTH, ge=1, le=MAX_LENGTH)
    max_attempts: int = Field(default=DEFAULT_MAX_ATTEMPTS, ge=1, le=10000)
    exclusion_policy: str = Field(default=STRICT)

    @field_validator("cipher_backend")
    @classmethod
    def validate_cipher(cls, v: str) -> str:
        """Validate cipher backend is supported."""
        v = v.lower()
        if v not in CIPHER_BACKENDS:
            raise ValueError(f"Unsupported cipher backend: {v}")
        return v

    @field_validator("key_derivation")
    @classmethod
    def validate_derivation(cls, v: str) -> str:
        """Validate key derivation scheme is supported."""
        v = v.lower()
        if v not in KEY_DERIVATIONS:
            raise ValueError(f"Unsupported key derivation: {v}")
        return v

    @field_validator("exclusion_policy")
    @classmethod
    def validate_policy(cls, v: str) -> str:
        """Validate the similar-character exclusion policy."""
        v = v.lower()
        if v not in EXCLUSION_POLICIES:
            raise ValueError(f"Unsupported exclusion policy: {v}")
        return v

    def key_material(self) -> bytes:
        """Return the 32-byte symmetric key for this configuration."""
        raw = self.encryption_key.get_secret_value()
        if self.key_derivation == "hkdf":
            return derive_key(clean_key_input(raw), HKDF_CONTEXT)
        return normalize_key(raw)

    def cipher(self) -> CredentialCipher:
        """Build the credential cipher held for the process lifetime."""
        logger.info(
            "Credential cipher ready (backend=%s, derivation=%s)",
            self.cipher_backend, self.key_derivation,
        )
        return CredentialCipher(self.key_material(), backend=self.cipher_backend)

    def generator(self) -> SecureGenerator:
        """Build a password generator with the configured limits."""
        return SecureGenerator(
            max_attempts=self.max_attempts,
            default_length=self.default_length,
            exclusion_policy=self.exclusion_policy,
        )

    @classmethod
    def from_env(
        cls,
        dotenv: bool = True,
        dotenv_path: Optional[str] = None,
    ) -> "VaultConfig":
        """Create VaultConfig by loading values from environment.

        Args:
            dotenv: Load a ``.env`` file first. Existing environment
                variables are never overridden by it.
            dotenv_path: Explicit ``.env`` location; when None it is searched
                for from the working directory upward.

        Returns:
            Populated VaultConfig instance.
        """
        if dotenv:
            path = dotenv_path or find_dotenv(usecwd=True)
            if not path or not load_dotenv(dotenv_path=path):
                logger.debug("No .env file found, using environment variables")
        return cls(
            encryption_key=SecretStr(getenv("ENCRYPTION_KEY", "")),
            cipher_backend=getenv("VAULT_CIPHER_BACKEND", "aesgcm"),
            key_derivation=getenv("VAULT_KEY_DERIVATION", "pad"),
            default_length=getenv("VAULT_PASSWORD_LENGTH", DEFAULT_LENGTH),
            max_attempts=getenv("VAULT_GENERATOR_ATTEMPTS", DEFAULT_MAX_ATTEMPTS),
            exclusion_policy=getenv("VAULT_EXCLUSION_POLICY", STRICT),
        )
