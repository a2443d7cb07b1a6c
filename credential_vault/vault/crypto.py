"""
Vault Crypto Core — Authenticated encryption of stored credentials.

A single server-held 32-byte key seals every secret before it is handed to
the persistence layer:
    token = base64([nonce 12B][encrypted_payload + tag 16B])

Security Note:
    Never log plaintext, tokens or key material.
    Nonces are random 96-bit; collision probability negligible under normal usage.
"""
import os
import base64
import binascii
from typing import Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.kdf.hkdf import HKDF
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM, ChaCha20Poly1305

from .exceptions import AuthenticationFailed, MalformedToken, RandomnessUnavailable

NONCE_SIZE = 12  # 96-bit nonce
TAG_SIZE = 16
KEY_LENGTH = 32  # AES-256
MIN_TOKEN_SIZE = NONCE_SIZE + TAG_SIZE

CIPHER_BACKENDS = {
    "aesgcm": AESGCM,
    "chacha20": ChaCha20Poly1305,
}


# ---------------------------------------------------------------------------
# Key derivation
# ---------------------------------------------------------------------------

def derive_key(seed: bytes, context: str) -> bytes:
    """Derive a 32-byte encryption key using HKDF-SHA256.

    Args:
        seed: Input key material (cleaned operator key bytes).
        context: Context string for domain separation.

    Returns:
        32-byte derived key.
    """
    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=None,  # deterministic: the same setting must reopen old tokens
        info=context.encode("utf-8"),
    )
    return hkdf.derive(seed)


def random_bytes(size: int) -> bytes:
    """Read ``size`` bytes from the OS CSPRNG.

    Raises:
        RandomnessUnavailable: If the random source cannot be read.
    """
    try:
        return os.urandom(size)
    except (OSError, NotImplementedError) as err:
        raise RandomnessUnavailable(
            "Secure random source is unavailable"
        ) from err


# ---------------------------------------------------------------------------
# Credential cipher
# ---------------------------------------------------------------------------

class CredentialCipher:
    """Seal and open single secret strings under a server-held key.

    The instance keeps only the key and the AEAD primitive built from it;
    every call works on local state, so one instance can be shared by any
    number of threads or tasks.
    """

    def __init__(self, key: bytes, backend: str = "aesgcm"):
        if not isinstance(key, (bytes, bytearray)) or len(key) != KEY_LENGTH:
            raise ValueError(f"Key must be exactly {KEY_LENGTH} bytes")
        try:
            cipher_cls = CIPHER_BACKENDS[backend.lower()]
        except KeyError:
            raise ValueError(f"Unsupported cipher backend: {backend}") from None
        self._backend = backend.lower()
        self._aead = cipher_cls(bytes(key))

    def __repr__(self) -> str:
        return f"<CredentialCipher backend={self._backend}>"

    @property
    def backend(self) -> str:
        return self._backend

    def seal(self, plaintext: str) -> str:
        """Encrypt a secret into a printable token.

        Args:
            plaintext: Secret to protect.

        Returns:
            Base64 token of ``nonce || ciphertext || tag``.

        Raises:
            TypeError: If plaintext is not a string.
            ValueError: If plaintext cannot be encoded as UTF-8
                (e.g. it holds a lone surrogate).
            RandomnessUnavailable: If no nonce can be drawn.
        """
        if not isinstance(plaintext, str):
            raise TypeError("plaintext must be a str")
        try:
            data = plaintext.encode("utf-8")
        except UnicodeEncodeError:
            raise ValueError("plaintext is not encodable as UTF-8") from None
        nonce = random_bytes(NONCE_SIZE)
        ct = self._aead.encrypt(nonce, data, None)
        return base64.b64encode(nonce + ct).decode("ascii")

    def open(self, token: Union[str, bytes]) -> str:
        """Decrypt a token produced by ``seal``.

        Args:
            token: Base64 token read back from storage.

        Returns:
            The original plaintext.

        Raises:
            MalformedToken: If the token is not decodable or too short.
            AuthenticationFailed: If the tag does not verify.
        """
        blob = self._decode(token)
        nonce = blob[:NONCE_SIZE]
        ct = blob[NONCE_SIZE:]
        try:
            data = self._aead.decrypt(nonce, ct, None)
        except InvalidTag:
            raise AuthenticationFailed("Token could not be authenticated") from None
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError:
            raise MalformedToken("Token payload is not valid UTF-8") from None

    def _decode(self, token: Union[str, bytes]) -> bytes:
        if isinstance(token, str):
            try:
                token = token.encode("ascii")
            except UnicodeEncodeError:
                raise MalformedToken("Token is not valid base64") from None
        if not isinstance(token, (bytes, bytearray)):
            raise MalformedToken("Token must be a str or bytes")
        try:
            blob = base64.b64decode(token, validate=True)
        except (binascii.Error, ValueError):
            raise MalformedToken("Token is not valid base64") from None
        if len(blob) < MIN_TOKEN_SIZE:
            raise MalformedToken(
                f"Token too short: {len(blob)} bytes (minimum {MIN_TOKEN_SIZE})"
            )
        return blob
