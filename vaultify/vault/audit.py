"""
Vault Audit — Append-only trail of mutating and decrypting actions.

A failed audit write never fails the operation being audited: the record
is logged as a warning instead so it can be recovered from the logs.

Security Note:
    Audit details hold names, types and IDs only. Never pass secret values
    or ciphertext into ``details``.
"""
import logging
from typing import Any, Optional

import orjson

from ..models import AuditLog
from .repository import AuditRepository

logger = logging.getLogger("vaultify.vault")

# Actions
VAULT_CREATE = "VAULT_CREATE"
VAULT_UPDATE = "VAULT_UPDATE"
VAULT_DELETE = "VAULT_DELETE"
VAULT_SHARE = "VAULT_SHARE"
VAULT_SHARE_UPDATE_PERMISSION = "VAULT_SHARE_UPDATE_PERMISSION"
VAULT_SHARE_REMOVE = "VAULT_SHARE_REMOVE"
SECRET_CREATE = "SECRET_CREATE"
SECRET_ACCESS = "SECRET_ACCESS"
SECRET_UPDATE = "SECRET_UPDATE"
SECRET_DELETE = "SECRET_DELETE"

# Target types
TARGET_VAULT = "VAULT"
TARGET_SECRET = "SECRET"


class AuditService:
    """Writes AuditLog records through an audit repository."""

    def __init__(self, repository: AuditRepository):
        self._repository = repository

    async def record(
        self,
        user_id: str,
        action: str,
        target_type: Optional[str] = None,
        target_id: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> bool:
        """Create an audit log entry.

        Returns:
            True if the entry was stored, False if the repository failed.
        """
        entry = AuditLog(
            user_id=user_id,
            action=action,
            target_type=target_type,
            target_id=target_id,
            details=details or {},
            ip_address=ip_address,
            user_agent=user_agent,
        )
        return await self.create(entry)

    async def create(self, entry: AuditLog) -> bool:
        """Store a prepared AuditLog entry."""
        try:
            await self._repository.create(entry)
        except Exception as err:
            logger.warning(
                "Failed to create audit log for %s (target=%s): %s; record=%s",
                entry.action, entry.target_id, err,
                orjson.dumps(entry.model_dump(mode="json")).decode("utf-8"),
            )
            return False
        logger.debug(
            "Audit: user=%s action=%s target=%s",
            entry.user_id, entry.action, entry.target_id,
        )
        return True
