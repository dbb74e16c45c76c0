"""
SecretService — Encrypted secrets inside vaults.

Every call resolves the vault, asks the access evaluator for permission and
only then runs the codec:
- ``create_secret`` / ``update_secret`` / ``delete_secret`` need write access
- ``get_secret`` / ``list_secrets`` need read access

Security Note:
    Never log plaintext or ciphertext values. Only log secret names, IDs
    and user IDs. Codec failures are reported to callers as a single
    ``DecryptionFailed``; the specific cause is kept on ``__cause__``.
"""
import logging
from typing import Optional

from ..models import (
    Secret,
    Vault,
    CreateSecretRequest,
    UpdateSecretRequest,
    utcnow,
)
from ..exceptions import (
    DecryptionError,
    DecryptionFailed,
    EncryptionFailed,
    InvalidKeyLength,
    SecretNotFound,
    VaultNotFound,
)
from . import audit
from .access import PermissionLevel, evaluate
from .audit import AuditService
from .config import VaultifyConfig
from .crypto import check_key, encrypt, decrypt
from .repository import SecretRepository, VaultRepository

logger = logging.getLogger("vaultify.vault")


class SecretService:
    """Secret lifecycle gated by vault permissions.

    The encryption key comes from ``config`` and is checked once here;
    a wrong-length key fails construction with ``InvalidKeyLength``.
    """

    def __init__(
        self,
        secrets: SecretRepository,
        vaults: VaultRepository,
        audit_service: AuditService,
        config: VaultifyConfig,
    ):
        check_key(config.encryption_key)
        self._secrets = secrets
        self._vaults = vaults
        self._audit = audit_service
        self._key = config.encryption_key

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _check_vault_access(
        self, user_id: str, vault_id: str, required: PermissionLevel,
    ) -> Vault:
        vault = await self._vaults.get_by_id(vault_id)
        if vault is None:
            raise VaultNotFound(f"Vault with ID '{vault_id}' not found")
        evaluate(vault, user_id, required)
        return vault

    async def _fetch(self, vault_id: str, secret_id: str) -> Secret:
        secret = await self._secrets.get_by_id(vault_id, secret_id)
        if secret is None:
            raise SecretNotFound(
                f"Secret '{secret_id}' not found in vault '{vault_id}'"
            )
        return secret

    def _encrypt(self, value: str) -> str:
        try:
            return encrypt(value, self._key)
        except (InvalidKeyLength, ValueError) as err:
            raise EncryptionFailed() from err

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def create_secret(
        self, user_id: str, vault_id: str, request: CreateSecretRequest,
    ) -> Secret:
        """Encrypt and persist a new secret.

        Returns:
            The stored Secret (encrypted value only).
        """
        await self._check_vault_access(user_id, vault_id, PermissionLevel.WRITE)

        secret = Secret(
            name=request.name,
            type=request.type,
            encrypted_value=self._encrypt(request.value),
        )
        secret.id = await self._secrets.create(vault_id, secret)
        secret.vault_id = vault_id

        await self._audit.record(
            user_id, audit.SECRET_CREATE, audit.TARGET_SECRET, secret.id,
            {
                "vault_id": vault_id,
                "secret_name": secret.name,
                "secret_type": secret.type,
            },
        )
        logger.debug(
            "Secret create: user=%s vault=%s secret=%s",
            user_id, vault_id, secret.id,
        )
        return secret

    async def get_secret(
        self, user_id: str, vault_id: str, secret_id: str,
    ) -> tuple[Secret, str]:
        """Return a secret and its decrypted value.

        Raises:
            DecryptionFailed: If the stored value is corrupted or was
                encrypted with another key.
        """
        await self._check_vault_access(user_id, vault_id, PermissionLevel.READ)
        secret = await self._fetch(vault_id, secret_id)

        try:
            value = decrypt(secret.encrypted_value, self._key)
        except DecryptionError as err:
            logger.error(
                "Decryption failed for secret=%s vault=%s: %s",
                secret_id, vault_id, type(err).__name__,
            )
            raise DecryptionFailed(
                f"Failed to decrypt secret '{secret_id}': "
                "data corrupted or wrong key"
            ) from err

        await self._audit.record(
            user_id, audit.SECRET_ACCESS, audit.TARGET_SECRET, secret.id,
            {"vault_id": vault_id, "secret_name": secret.name},
        )
        secret.vault_id = vault_id
        return secret, value

    async def list_secrets(
        self,
        user_id: str,
        vault_id: str,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[Secret]:
        """List the secrets in a vault without decrypting them."""
        await self._check_vault_access(user_id, vault_id, PermissionLevel.READ)
        secrets = await self._secrets.get_by_vault_id(vault_id, limit, offset)
        for secret in secrets:
            secret.vault_id = vault_id
        return secrets

    async def update_secret(
        self,
        user_id: str,
        vault_id: str,
        secret_id: str,
        request: UpdateSecretRequest,
    ) -> Secret:
        """Apply the provided fields; a new value is re-encrypted."""
        await self._check_vault_access(user_id, vault_id, PermissionLevel.WRITE)
        secret = await self._fetch(vault_id, secret_id)

        updated = {}
        if request.name is not None:
            secret.name = request.name
            updated["name"] = request.name
        if request.type is not None:
            secret.type = request.type
            updated["type"] = request.type
        if request.value is not None:
            secret.encrypted_value = self._encrypt(request.value)
            updated["value_updated"] = True
        secret.updated_at = utcnow()
        await self._secrets.update(vault_id, secret)

        await self._audit.record(
            user_id, audit.SECRET_UPDATE, audit.TARGET_SECRET, secret.id,
            {"vault_id": vault_id, "updated_fields": updated},
        )
        secret.vault_id = vault_id
        return secret

    async def delete_secret(self, user_id: str, vault_id: str, secret_id: str) -> None:
        """Delete a secret from a vault."""
        await self._check_vault_access(user_id, vault_id, PermissionLevel.WRITE)
        await self._fetch(vault_id, secret_id)
        await self._secrets.delete(vault_id, secret_id)

        await self._audit.record(
            user_id, audit.SECRET_DELETE, audit.TARGET_SECRET, secret_id,
            {"vault_id": vault_id},
        )
        logger.debug(
            "Secret delete: user=%s vault=%s secret=%s",
            user_id, vault_id, secret_id,
        )
