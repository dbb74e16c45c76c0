"""
Repository interfaces consumed by the vault and secret services.

Storage clients are constructed by the application and passed in; the
services never reach for a process-wide client. Vaults are written back
whole, so concurrent share mutations on one vault are last-write-wins.
"""
from typing import Optional, Protocol

from ..models import AuditLog, Secret, User, Vault


class UserRepository(Protocol):
    async def get_by_id(self, user_id: str) -> Optional[User]: ...


class VaultRepository(Protocol):
    async def create(self, vault: Vault) -> str: ...

    async def get_by_id(self, vault_id: str) -> Optional[Vault]: ...

    async def get_by_owner_id(
        self, owner_id: str, limit: Optional[int] = None, offset: int = 0,
    ) -> list[Vault]: ...

    async def count_by_owner_id(self, owner_id: str) -> int: ...

    async def update(self, vault: Vault) -> None: ...

    async def delete(self, vault_id: str) -> None: ...


class SecretRepository(Protocol):
    async def create(self, vault_id: str, secret: Secret) -> str: ...

    async def get_by_id(self, vault_id: str, secret_id: str) -> Optional[Secret]: ...

    async def get_by_vault_id(
        self, vault_id: str, limit: Optional[int] = None, offset: int = 0,
    ) -> list[Secret]: ...

    async def update(self, vault_id: str, secret: Secret) -> None: ...

    async def delete(self, vault_id: str, secret_id: str) -> None: ...

    async def delete_by_vault_id(self, vault_id: str) -> None: ...


class AuditRepository(Protocol):
    async def create(self, entry: AuditLog) -> None: ...
