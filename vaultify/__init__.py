"""Vaultify.

Multi-tenant secrets vault core: an AES-256-CBC codec for secret values and
the vault sharing model that gates it.
"""
from .version import __version__
from .exceptions import VaultifyError
