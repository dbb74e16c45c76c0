"""Vault core — Encrypted secrets inside shareable vaults.

Security Note (Threat Model):
    Secret values are encrypted with a single process-wide AES-256 key.
    Decrypted values exist in process memory while a request is served.
    AES-CBC with PKCS#7 padding is not authenticated: tampering is only
    detected when it breaks the padding. Existing stored envelopes depend
    on this format, so it is kept as is.
"""

from .crypto import encrypt, decrypt
from .access import PermissionLevel, evaluate, plan_share
from .config import VaultifyConfig, load_encryption_key, generate_encryption_key
from .audit import AuditService
from .vault_service import VaultService
from .secret_service import SecretService

__all__ = [
    "encrypt",
    "decrypt",
    "PermissionLevel",
    "evaluate",
    "plan_share",
    "VaultifyConfig",
    "load_encryption_key",
    "generate_encryption_key",
    "AuditService",
    "VaultService",
    "SecretService",
]
