"""Credential entry models.

Request/response shapes for the vault API and the helpers that move a
password between its plaintext form (requests, responses) and its sealed
form (``encrypted_password`` column). A sealed token is never part of any
serialized output.
"""
import logging
from uuid import UUID
from typing import Any, Optional
from datetime import datetime
from collections.abc import Iterable

import orjson
from pydantic import BaseModel, Field

from .vault.crypto import CredentialCipher
from .vault.exceptions import TokenError
from .vault.generator import CharsetSpec, SecureGenerator

logger = logging.getLogger("credential_vault")


class JSONModel(BaseModel):
    """BaseModel with orjson wire encoding."""

    def to_json(self) -> bytes:
        return orjson.dumps(self.model_dump(mode="json", exclude_none=True))


class PasswordEntry(JSONModel):
    """A stored credential as returned to its owner."""

    id: UUID
    user_id: UUID
    service_name: str
    service_url: Optional[str] = None
    username: Optional[str] = None
    password: str = ""
    # never serialized
    encrypted_password: str = Field(default="", exclude=True, repr=False)
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class CreatePasswordRequest(JSONModel):
    service_name: str = Field(min_length=1, max_length=255)
    service_url: Optional[str] = Field(default=None, max_length=500)
    username: Optional[str] = Field(default=None, max_length=255)
    password: str = Field(min_length=1, repr=False)
    notes: Optional[str] = None


class UpdatePasswordRequest(JSONModel):
    """Partial update; empty ``service_name``/``password`` mean unchanged."""

    service_name: str = Field(default="", max_length=255)
    service_url: Optional[str] = Field(default=None, max_length=500)
    username: Optional[str] = Field(default=None, max_length=255)
    password: str = Field(default="", repr=False)
    notes: Optional[str] = None


class GeneratePasswordRequest(JSONModel):
    length: int = 0
    include_upper: bool = False
    include_lower: bool = False
    include_numbers: bool = False
    include_symbols: bool = False
    exclude_similar: bool = False

    def to_charset_spec(self) -> CharsetSpec:
        """Charset for this request; no flag at all means upper, lower and
        numbers, each of which must then appear in the password."""
        flags = (
            self.include_upper,
            self.include_lower,
            self.include_numbers,
            self.include_symbols,
        )
        alphanumeric = not any(flags)
        return CharsetSpec(
            length=self.length,
            upper=self.include_upper or alphanumeric,
            lower=self.include_lower or alphanumeric,
            numbers=self.include_numbers or alphanumeric,
            symbols=self.include_symbols,
            exclude_similar=self.exclude_similar,
        )


class GeneratePasswordResponse(JSONModel):
    password: str


class ErrorResponse(JSONModel):
    error: str
    message: Optional[str] = None


class SuccessResponse(JSONModel):
    message: str
    data: Optional[Any] = None


def seal_entry(cipher: CredentialCipher, request: CreatePasswordRequest) -> dict:
    """Column values for a new entry, with the password sealed.

    Args:
        cipher: Process-wide credential cipher.
        request: Validated create request.

    Returns:
        dict ready for the persistence layer; it has no plaintext password.
    """
    values = request.model_dump(exclude={"password"})
    values["encrypted_password"] = cipher.seal(request.password)
    return values


def build_update(cipher: CredentialCipher, request: UpdatePasswordRequest) -> dict:
    """Changed column values for a partial update.

    Raises:
        ValueError: If the request changes nothing.
    """
    values: dict[str, Any] = {}
    if request.service_name:
        values["service_name"] = request.service_name
    for field in ("service_url", "username", "notes"):
        value = getattr(request, field)
        if value is not None:
            values[field] = value
    if request.password:
        values["encrypted_password"] = cipher.seal(request.password)
    if not values:
        raise ValueError("No fields to update")
    return values


def reveal_entry(cipher: CredentialCipher, entry: PasswordEntry) -> PasswordEntry:
    """Return a copy of ``entry`` with its password opened.

    Raises:
        TokenError: If the stored token cannot be opened.
    """
    password = cipher.open(entry.encrypted_password)
    return entry.model_copy(update={"password": password, "encrypted_password": ""})


def reveal_entries(
    cipher: CredentialCipher,
    entries: Iterable[PasswordEntry],
) -> list[PasswordEntry]:
    """Open every entry of a listing.

    Entries whose token cannot be opened are kept with an empty password.
    """
    revealed = []
    for entry in entries:
        try:
            revealed.append(reveal_entry(cipher, entry))
        except TokenError:
            logger.warning("Unable to open stored password for entry id=%s", entry.id)
            revealed.append(
                entry.model_copy(update={"password": "", "encrypted_password": ""})
            )
    return revealed


def generate_password(
    generator: SecureGenerator,
    request: GeneratePasswordRequest,
) -> GeneratePasswordResponse:
    """Run the generator for an API request."""
    return GeneratePasswordResponse(
        password=generator.generate(request.to_charset_spec())
    )
