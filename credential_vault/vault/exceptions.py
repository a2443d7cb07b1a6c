"""
Vault Exceptions — Typed failures raised by the credential core.

Callers map these to user-facing statuses. ``MalformedToken`` and
``AuthenticationFailed`` share the ``TokenError`` base so that a caller can
treat both as "cannot recover plaintext" without revealing which one occurred.

Security Note:
    Exception messages never carry plaintext, token contents or key material.
"""


class VaultError(Exception):
    """Base exception for credential vault operations"""
    pass


class RandomnessUnavailable(VaultError):
    """Raised when the secure random source cannot provide entropy"""
    pass


class TokenError(VaultError):
    """Raised when a ciphertext token cannot be turned back into plaintext"""
    pass


class MalformedToken(TokenError):
    """Raised when a token is not valid base64 or is too short"""
    pass


class AuthenticationFailed(TokenError):
    """Raised when the authentication tag of a token does not verify"""
    pass


class UnsatisfiableCharsetSpec(VaultError, ValueError):
    """Raised when a password request cannot be met by its charset"""
    pass
