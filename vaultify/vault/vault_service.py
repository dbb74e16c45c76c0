"""
VaultService — Vault lifecycle and sharing.

Provides the vault-management API:
- ``create_vault`` / ``get_vault`` / ``list_vaults`` / ``update_vault``
- ``delete_vault`` — removes the vault and every secret inside it
- ``share_vault`` — batch grant, best-effort per target
- ``update_share_permission`` / ``remove_share``

Sharing changes rewrite the whole ``shared_with`` map fetched at the start
of the call (last write wins).
"""
import logging
from typing import Optional

from ..models import (
    Vault,
    CreateVaultRequest,
    UpdateVaultRequest,
    ShareVaultRequest,
    utcnow,
)
from ..exceptions import (
    ForbiddenAccess,
    UserNotFound,
    VaultLimitReached,
    VaultNotFound,
)
from . import audit
from .access import (
    PermissionLevel,
    evaluate,
    plan_share,
    require_existing_share,
    validate_permission_level,
    validate_share_target,
)
from .audit import AuditService
from .config import VaultifyConfig
from .repository import SecretRepository, UserRepository, VaultRepository

logger = logging.getLogger("vaultify.vault")


class VaultService:
    """Vault management bound to explicitly passed repositories."""

    def __init__(
        self,
        vaults: VaultRepository,
        secrets: SecretRepository,
        users: UserRepository,
        audit_service: AuditService,
        config: VaultifyConfig,
    ):
        self._vaults = vaults
        self._secrets = secrets
        self._users = users
        self._audit = audit_service
        self._config = config

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _fetch(self, vault_id: str) -> Vault:
        vault = await self._vaults.get_by_id(vault_id)
        if vault is None:
            raise VaultNotFound(f"Vault with ID '{vault_id}' not found")
        return vault

    async def _fetch_owned(self, user_id: str, vault_id: str) -> Vault:
        """Fetch a vault and require ``user_id`` to be its owner."""
        vault = await self._fetch(vault_id)
        if vault.owner_id != user_id:
            raise ForbiddenAccess(
                f"User '{user_id}' is not owner of vault '{vault_id}'"
            )
        return vault

    async def _check_vault_limit(self, user_id: str, plan: str) -> None:
        limit = self._config.vault_limit(plan)
        count = await self._vaults.count_by_owner_id(user_id)
        if count >= limit:
            raise VaultLimitReached(
                f"Plan '{plan}' allows {limit} vault(s), current count {count}"
            )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def create_vault(self, user_id: str, request: CreateVaultRequest) -> Vault:
        """Create a new vault owned by ``user_id``.

        Raises:
            UserNotFound: If the user does not exist.
            VaultLimitReached: If the user's plan allows no more vaults.
        """
        user = await self._users.get_by_id(user_id)
        if user is None:
            raise UserNotFound(f"User with ID '{user_id}' not found")
        await self._check_vault_limit(user_id, user.plan)

        vault = Vault(
            owner_id=user_id,
            name=request.name,
            description=request.description,
            tags=list(request.tags),
            shared_with={},
        )
        vault.id = await self._vaults.create(vault)

        await self._audit.record(
            user_id, audit.VAULT_CREATE, audit.TARGET_VAULT, vault.id,
            {
                "name": vault.name,
                "description": vault.description,
                "tags": vault.tags,
            },
        )
        logger.info("Vault created: user=%s vault=%s", user_id, vault.id)
        return vault

    async def get_vault(self, user_id: str, vault_id: str) -> Vault:
        """Return a vault the user owns or has been shared on."""
        vault = await self._fetch(vault_id)
        evaluate(vault, user_id, PermissionLevel.READ)
        return vault

    async def list_vaults(
        self, user_id: str, limit: Optional[int] = None, offset: int = 0,
    ) -> list[Vault]:
        """List vaults owned by ``user_id``."""
        # TODO: include vaults shared with the user once the store can
        # query shared_with by member.
        return await self._vaults.get_by_owner_id(user_id, limit, offset)

    async def update_vault(
        self, user_id: str, vault_id: str, request: UpdateVaultRequest,
    ) -> Vault:
        """Apply the provided fields of ``request``. Owner only."""
        vault = await self._fetch_owned(user_id, vault_id)
        if request.name is not None:
            vault.name = request.name
        if request.description is not None:
            vault.description = request.description
        if request.tags is not None:
            vault.tags = list(request.tags)
        vault.updated_at = utcnow()
        await self._vaults.update(vault)

        await self._audit.record(
            user_id, audit.VAULT_UPDATE, audit.TARGET_VAULT, vault.id,
            {
                "updated_name": vault.name,
                "updated_description": vault.description,
                "updated_tags": vault.tags,
            },
        )
        return vault

    async def delete_vault(self, user_id: str, vault_id: str) -> None:
        """Delete a vault and all of its secrets. Owner only."""
        vault = await self._fetch_owned(user_id, vault_id)
        await self._secrets.delete_by_vault_id(vault_id)
        await self._vaults.delete(vault_id)

        await self._audit.record(
            user_id, audit.VAULT_DELETE, audit.TARGET_VAULT, vault_id,
            {"deleted_vault_name": vault.name},
        )
        logger.info("Vault deleted: user=%s vault=%s", user_id, vault_id)

    # ------------------------------------------------------------------
    # Sharing
    # ------------------------------------------------------------------

    async def share_vault(
        self, owner_id: str, vault_id: str, request: ShareVaultRequest,
    ) -> list[str]:
        """Share a vault with several users at one permission level.

        Self and unknown targets are skipped; the rest are granted and each
        grant is audited on its own.

        Returns:
            The user IDs that were granted access.

        Raises:
            ForbiddenAccess: If ``owner_id`` does not own the vault.
            InvalidPermissionLevel: If the level is not read or write.
            CannotShareWithSelf: If the owner was the only target.
            NoShareTargets: If no target could be granted.
        """
        vault = await self._fetch_owned(owner_id, vault_id)
        level = validate_permission_level(request.permission_level)

        known = set()
        for target in set(request.user_ids):
            if target != owner_id and await self._users.get_by_id(target) is not None:
                known.add(target)

        plan = plan_share(vault, request.user_ids, level, known.__contains__)
        if not plan.granted:
            return []

        vault.shared_with = plan.shared_with
        vault.updated_at = utcnow()
        await self._vaults.update(vault)

        for target in plan.granted:
            await self._audit.record(
                owner_id, audit.VAULT_SHARE, audit.TARGET_VAULT, vault_id,
                {
                    "shared_with_user_id": target,
                    "permission_level": level.value,
                },
            )
        logger.info(
            "Vault shared: vault=%s granted=%d skipped=%d",
            vault_id, len(plan.granted), len(plan.skipped),
        )
        return plan.granted

    async def update_share_permission(
        self, owner_id: str, vault_id: str, target_id: str, permission_level: str,
    ) -> None:
        """Change the level of a user already shared on the vault."""
        vault = await self._fetch_owned(owner_id, vault_id)
        validate_share_target(vault, target_id)
        require_existing_share(vault, target_id)
        level = validate_permission_level(permission_level)

        shared_with = dict(vault.shared_with)
        shared_with[target_id] = level.value
        vault.shared_with = shared_with
        vault.updated_at = utcnow()
        await self._vaults.update(vault)

        await self._audit.record(
            owner_id, audit.VAULT_SHARE_UPDATE_PERMISSION,
            audit.TARGET_VAULT, vault_id,
            {
                "target_user_id": target_id,
                "new_permission_level": level.value,
            },
        )

    async def remove_share(self, owner_id: str, vault_id: str, target_id: str) -> None:
        """Revoke a user's access to the vault."""
        vault = await self._fetch_owned(owner_id, vault_id)
        validate_share_target(vault, target_id)
        require_existing_share(vault, target_id)

        shared_with = dict(vault.shared_with)
        del shared_with[target_id]
        vault.shared_with = shared_with
        vault.updated_at = utcnow()
        await self._vaults.update(vault)

        await self._audit.record(
            owner_id, audit.VAULT_SHARE_REMOVE, audit.TARGET_VAULT, vault_id,
            {"removed_user_id": target_id},
        )
