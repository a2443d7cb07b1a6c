"""
Secure Password Generator — Charset-constrained random passwords.

Each call builds a charset from the requested classes, draws every
position uniformly from the OS CSPRNG and redraws the whole string until
every requested class is present, up to a fixed number of attempts.
"""
import secrets
import logging
from typing import Optional

from pydantic import BaseModel, Field

from .exceptions import RandomnessUnavailable, UnsatisfiableCharsetSpec

logger = logging.getLogger("credential_vault.vault")

UPPERCASE = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
LOWERCASE = "abcdefghijklmnopqrstuvwxyz"
DIGITS = "0123456789"
SYMBOLS = "!@#$%^&*()_+-=[]{}|;:,.<>?"
SIMILAR_CHARS = "il1Lo0O"

CHARACTER_CLASSES = {
    "upper": UPPERCASE,
    "lower": LOWERCASE,
    "numbers": DIGITS,
    "symbols": SYMBOLS,
}
DEFAULT_CLASSES = ("upper", "lower", "numbers")

MIN_LENGTH = 1
MAX_LENGTH = 128
DEFAULT_LENGTH = 12
DEFAULT_MAX_ATTEMPTS = 100

# exclude_similar may empty a required class (request then fails) ...
STRICT = "strict"
# ... or is skipped for any required class it would empty.
PRESERVE_REQUIRED = "preserve_required"
EXCLUSION_POLICIES = (STRICT, PRESERVE_REQUIRED)


class CharsetSpec(BaseModel):
    """A password generation request."""

    length: int = Field(default=0)
    upper: bool = False
    lower: bool = False
    numbers: bool = False
    symbols: bool = False
    exclude_similar: bool = False

    def resolved_length(self, default: int = DEFAULT_LENGTH) -> int:
        """Length actually generated: unset means default, else clamped."""
        if self.length <= 0:
            return default
        return max(MIN_LENGTH, min(MAX_LENGTH, self.length))

    def required_classes(self) -> tuple[str, ...]:
        """Explicitly requested classes, in canonical order."""
        return tuple(name for name in CHARACTER_CLASSES if getattr(self, name))

    def enabled_classes(self) -> tuple[str, ...]:
        """Classes the charset is built from: the requested ones or the default set."""
        return self.required_classes() or DEFAULT_CLASSES


class SecureGenerator:
    """Generate passwords that satisfy a ``CharsetSpec``.

    Holds only immutable settings, so a single instance may serve
    concurrent requests.
    """

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        default_length: int = DEFAULT_LENGTH,
        exclusion_policy: str = STRICT,
        similar_chars: str = SIMILAR_CHARS,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if exclusion_policy not in EXCLUSION_POLICIES:
            raise ValueError(f"Unsupported exclusion policy: {exclusion_policy}")
        self.max_attempts = max_attempts
        self.default_length = max(MIN_LENGTH, min(MAX_LENGTH, default_length))
        self.exclusion_policy = exclusion_policy
        self.similar_chars = similar_chars

    def __repr__(self) -> str:
        return (
            f"<SecureGenerator attempts={self.max_attempts} "
            f"policy={self.exclusion_policy}>"
        )

    def build_charset(self, spec: CharsetSpec) -> dict[str, str]:
        """Return the usable characters of every enabled class.

        Args:
            spec: Generation request.

        Returns:
            Mapping of class name to its remaining characters; a class may
            map to an empty string under the strict policy.
        """
        pools = {}
        for name in spec.enabled_classes():
            chars = CHARACTER_CLASSES[name]
            if spec.exclude_similar:
                filtered = "".join(
                    c for c in chars if c not in self.similar_chars
                )
                if filtered or self.exclusion_policy == STRICT:
                    chars = filtered
            pools[name] = chars
        return pools

    def generate(self, spec: Optional[CharsetSpec] = None, **options) -> str:
        """Generate a password for ``spec`` (or for keyword options).

        Args:
            spec: Generation request; built from ``options`` when None.
            **options: ``CharsetSpec`` fields, e.g. ``length=20, symbols=True``.

        Returns:
            Password of the resolved length containing every requested class.

        Raises:
            UnsatisfiableCharsetSpec: If the request can never be met or no
                valid password was drawn within ``max_attempts``.
            RandomnessUnavailable: If the random source fails.
        """
        if spec is None:
            spec = CharsetSpec(**options)
        length = spec.resolved_length(self.default_length)
        pools = self.build_charset(spec)
        required = [pools[name] for name in spec.required_classes()]

        empty = [name for name in spec.required_classes() if not pools[name]]
        if empty:
            raise UnsatisfiableCharsetSpec(
                f"No characters left for required class(es): {', '.join(empty)}"
            )
        if length < len(required):
            raise UnsatisfiableCharsetSpec(
                f"Length {length} is too short for {len(required)} required classes"
            )
        charset = "".join(pools.values())
        if not charset:
            raise UnsatisfiableCharsetSpec("No characters left to draw from")

        for _ in range(self.max_attempts):
            password = self._draw(charset, length)
            if all(any(c in chars for c in password) for chars in required):
                return password
        logger.warning(
            "Password generation gave up after %d attempts (length=%d, classes=%s)",
            self.max_attempts, length, ",".join(spec.required_classes()),
        )
        raise UnsatisfiableCharsetSpec(
            f"No valid password after {self.max_attempts} attempts"
        )

    @staticmethod
    def _draw(charset: str, length: int) -> str:
        try:
            return "".join(
                charset[secrets.randbelow(len(charset))] for _ in range(length)
            )
        except (OSError, NotImplementedError) as err:
            raise RandomnessUnavailable(
                "Secure random source is unavailable"
            ) from err
