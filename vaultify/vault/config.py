"""
Vault Configuration — Encryption key loading and validated settings.

Reads the encryption key from the environment:
    ENCRYPTION_KEY = <base64-encoded 32-byte key>
    VAULTIFY_PLAN_LIMITS = <optional JSON object, plan name -> max vaults>

A missing, undecodable or wrong-length key is a fatal startup error.

Security Note:
    Never log key material. Only log variable names and key lengths.
"""
import os
import base64
import binascii
import secrets
import logging

import orjson
from pydantic import BaseModel, Field, field_validator

from ..exceptions import ConfigurationError, InvalidKeyLength
from .crypto import KEY_LENGTH

logger = logging.getLogger("vaultify.vault")

DEFAULT_PLAN_LIMITS = {
    "FREE": 1,
    "PRO": 10,
    "ENTERPRISE": 1000,
}


def load_encryption_key(env_var: str = "ENCRYPTION_KEY") -> bytes:
    """Load the AES-256 key from a base64 environment variable.

    Args:
        env_var: Name of the environment variable holding the key.

    Returns:
        Raw 32-byte key.

    Raises:
        ConfigurationError: If the variable is unset or not valid base64.
        InvalidKeyLength: If the key does not decode to exactly 32 bytes.
    """
    value = os.environ.get(env_var)
    if not value:
        raise ConfigurationError(
            f"{env_var} environment variable not set. "
            f"Set {env_var}=<base64-encoded-32-byte-key>"
        )
    try:
        key = base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as err:
        raise ConfigurationError(
            f"Failed to decode {env_var} from base64"
        ) from err
    if len(key) != KEY_LENGTH:
        raise InvalidKeyLength(
            f"{env_var} must decode to exactly {KEY_LENGTH} bytes, "
            f"got {len(key)}"
        )
    logger.debug("Loaded encryption key from %s", env_var)
    return key


def load_plan_limits(env_var: str = "VAULTIFY_PLAN_LIMITS") -> dict[str, int]:
    """Read plan limits from a JSON environment variable.

    Returns:
        The default limits updated with any values found in ``env_var``.

    Raises:
        ConfigurationError: If the value is not a JSON object of integers.
    """
    limits = dict(DEFAULT_PLAN_LIMITS)
    raw = os.environ.get(env_var)
    if not raw:
        return limits
    try:
        parsed = orjson.loads(raw)
    except orjson.JSONDecodeError as err:
        raise ConfigurationError(f"{env_var} is not valid JSON") from err
    if not isinstance(parsed, dict) or not all(
        isinstance(v, int) for v in parsed.values()
    ):
        raise ConfigurationError(
            f"{env_var} must be a JSON object mapping plan names to integers"
        )
    limits.update({str(k).upper(): v for k, v in parsed.items()})
    return limits


def generate_encryption_key() -> str:
    """Generate a random 32-byte key and return it as a base64 string.

    This is a utility for operators to generate new keys.
    """
    return base64.b64encode(secrets.token_bytes(KEY_LENGTH)).decode("ascii")


class VaultifyConfig(BaseModel):
    """Validated Vaultify configuration."""

    encryption_key: bytes = Field(repr=False)
    plan_limits: dict[str, int] = Field(
        default_factory=lambda: dict(DEFAULT_PLAN_LIMITS)
    )
    default_plan_limit: int = Field(default=1, ge=0)

    @field_validator("encryption_key")
    @classmethod
    def validate_key_length(cls, v: bytes) -> bytes:
        """Ensure the key is exactly 32 bytes."""
        if len(v) != KEY_LENGTH:
            raise InvalidKeyLength(
                f"encryption_key must be {KEY_LENGTH} bytes, got {len(v)}"
            )
        return v

    def vault_limit(self, plan: str) -> int:
        """Return the vault limit for ``plan``.

        Unknown plans fall back to ``default_plan_limit``.
        """
        limit = self.plan_limits.get((plan or "").upper())
        if limit is None:
            logger.warning(
                "Plan '%s' not found in vault limits configuration, "
                "defaulting to %d", plan, self.default_plan_limit,
            )
            return self.default_plan_limit
        return limit

    @classmethod
    def from_env(cls) -> "VaultifyConfig":
        """Create VaultifyConfig by loading values from environment.

        Returns:
            Populated VaultifyConfig instance.
        """
        return cls(
            encryption_key=load_encryption_key(),
            plan_limits=load_plan_limits(),
        )
