import pytest

from credential_vault.vault.config import normalize_key
from credential_vault.vault.crypto import CredentialCipher
from credential_vault.vault.generator import SecureGenerator


@pytest.fixture
def key():
    """A 32-byte key normalized from an operator string."""
    return normalize_key("k3y-for-tests-0123456789abcdefgh")


@pytest.fixture
def cipher(key):
    return CredentialCipher(key)


@pytest.fixture
def generator():
    return SecureGenerator()


@pytest.fixture(autouse=True)
def clean_vault_env(monkeypatch):
    """Keep host settings out of config tests."""
    for name in (
        "ENCRYPTION_KEY",
        "VAULT_CIPHER_BACKEND",
        "VAULT_KEY_DERIVATION",
        "VAULT_PASSWORD_LENGTH",
        "VAULT_GENERATOR_ATTEMPTS",
        "VAULT_EXCLUSION_POLICY",
    ):
        # setenv first so teardown also removes values loaded from .env
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
