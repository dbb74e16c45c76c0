"""
Vaultify Models — Users, vaults, secrets, audit records and request payloads.

Secrets only ever carry ``encrypted_value``; plaintext values appear on
request models and are encrypted before a ``Secret`` is built.
"""
from typing import Any, Optional
from datetime import datetime, timezone

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(BaseModel):
    """A registered user and the plan that bounds their vault count."""

    id: str
    email: str = ""
    display_name: str = ""
    plan: str = "FREE"
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Vault(BaseModel):
    """A collection of secrets with one owner and zero or more collaborators.

    The owner holds implicit write access and is never a key of
    ``shared_with``. Levels are stored as plain strings, exactly as they
    are persisted; ``vaultify.vault.access`` validates them on read.
    """

    id: Optional[str] = None
    owner_id: str
    name: str
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    shared_with: dict[str, str] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Secret(BaseModel):
    """A secret stored within a vault.

    ``vault_id`` is contextual: the store keeps secrets under their vault,
    so the services fill it in on the way out.
    """

    id: Optional[str] = None
    vault_id: Optional[str] = None
    name: str
    type: str
    encrypted_value: str
    expires_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class AuditLog(BaseModel):
    """An audit trail event."""

    id: Optional[str] = None
    timestamp: datetime = Field(default_factory=utcnow)
    user_id: str
    action: str
    target_type: Optional[str] = None
    target_id: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    details: dict[str, Any] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------

class CreateVaultRequest(BaseModel):
    name: str = Field(min_length=1)
    description: str = ""
    tags: list[str] = Field(default_factory=list)


class UpdateVaultRequest(BaseModel):
    """Only fields that are not None are applied."""

    name: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[list[str]] = None


class ShareVaultRequest(BaseModel):
    user_ids: list[str]
    permission_level: str


class CreateSecretRequest(BaseModel):
    name: str = Field(min_length=1)
    type: str = Field(min_length=1)
    value: str


class UpdateSecretRequest(BaseModel):
    """Only fields that are not None are applied."""

    name: Optional[str] = None
    type: Optional[str] = None
    value: Optional[str] = None
