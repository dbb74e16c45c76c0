"""Shared fixtures: in-memory repositories and wired services."""
import os
import uuid

import pytest

from vaultify.models import User, Vault
from vaultify.vault.audit import AuditService
from vaultify.vault.config import VaultifyConfig
from vaultify.vault.secret_service import SecretService
from vaultify.vault.vault_service import VaultService


class MemoryUsers:
    def __init__(self, *users: User):
        self.users = {u.id: u for u in users}

    async def get_by_id(self, user_id):
        return self.users.get(user_id)


class MemoryVaults:
    """Stores deep copies, so callers only see changes they write back."""

    def __init__(self):
        self.vaults: dict[str, Vault] = {}

    async def create(self, vault):
        vault_id = uuid.uuid4().hex
        stored = vault.model_copy(deep=True)
        stored.id = vault_id
        self.vaults[vault_id] = stored
        return vault_id

    async def get_by_id(self, vault_id):
        vault = self.vaults.get(vault_id)
        return vault.model_copy(deep=True) if vault else None

    async def get_by_owner_id(self, owner_id, limit=None, offset=0):
        owned = [
            v.model_copy(deep=True)
            for v in self.vaults.values() if v.owner_id == owner_id
        ]
        end = None if limit is None else offset + limit
        return owned[offset:end]

    async def count_by_owner_id(self, owner_id):
        return sum(1 for v in self.vaults.values() if v.owner_id == owner_id)

    async def update(self, vault):
        self.vaults[vault.id] = vault.model_copy(deep=True)

    async def delete(self, vault_id):
        self.vaults.pop(vault_id, None)


class MemorySecrets:
    def __init__(self):
        self.secrets: dict[str, dict] = {}

    async def create(self, vault_id, secret):
        secret_id = uuid.uuid4().hex
        stored = secret.model_copy(deep=True)
        stored.id = secret_id
        stored.vault_id = None
        self.secrets.setdefault(vault_id, {})[secret_id] = stored
        return secret_id

    async def get_by_id(self, vault_id, secret_id):
        secret = self.secrets.get(vault_id, {}).get(secret_id)
        return secret.model_copy(deep=True) if secret else None

    async def get_by_vault_id(self, vault_id, limit=None, offset=0):
        items = [s.model_copy(deep=True) for s in self.secrets.get(vault_id, {}).values()]
        end = None if limit is None else offset + limit
        return items[offset:end]

    async def update(self, vault_id, secret):
        stored = secret.model_copy(deep=True)
        stored.vault_id = None
        self.secrets[vault_id][secret.id] = stored

    async def delete(self, vault_id, secret_id):
        self.secrets.get(vault_id, {}).pop(secret_id, None)

    async def delete_by_vault_id(self, vault_id):
        self.secrets.pop(vault_id, None)


class MemoryAudit:
    def __init__(self, fail: bool = False):
        self.entries = []
        self.fail = fail

    async def create(self, entry):
        if self.fail:
            raise ConnectionError("audit store unavailable")
        self.entries.append(entry)

    def actions(self):
        return [e.action for e in self.entries]


@pytest.fixture
def key():
    """A random 32-byte AES-256 key."""
    return os.urandom(32)


@pytest.fixture
def config(key):
    return VaultifyConfig(encryption_key=key)


@pytest.fixture
def users():
    return MemoryUsers(
        User(id="U1", email="owner@example.com", plan="PRO"),
        User(id="U2", email="bob@example.com"),
        User(id="U3", email="carol@example.com"),
        User(id="U4", email="dave@example.com", plan="FREE"),
    )


@pytest.fixture
def vaults():
    return MemoryVaults()


@pytest.fixture
def secrets_repo():
    return MemorySecrets()


@pytest.fixture
def audit_repo():
    return MemoryAudit()


@pytest.fixture
def audit_service(audit_repo):
    return AuditService(audit_repo)


@pytest.fixture
def vault_service(vaults, secrets_repo, users, audit_service, config):
    return VaultService(vaults, secrets_repo, users, audit_service, config)


@pytest.fixture
def secret_service(secrets_repo, vaults, audit_service, config):
    return SecretService(secrets_repo, vaults, audit_service, config)


@pytest.fixture
def failing_audit_repo():
    return MemoryAudit(fail=True)
