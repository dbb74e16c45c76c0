"""
Vaultify Exceptions.

Every error raised by the core derives from ``VaultifyError``. Messages
carry identifiers (vault, secret and user IDs) but never plaintext,
ciphertext or key material.
"""


class VaultifyError(Exception):
    """Base class for all Vaultify errors."""

    def __init__(self, message: str = None, **kwargs):
        self.message = message or self.__class__.__doc__
        self.context = kwargs
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class ConfigurationError(VaultifyError):
    """Invalid or missing configuration."""


## Codec errors

class InvalidKeyLength(ConfigurationError):
    """Encryption key must be exactly 32 bytes."""


class DecryptionError(VaultifyError):
    """Decryption failed: data corrupted or wrong key."""


class MalformedEnvelope(DecryptionError):
    """Envelope is not valid base64/hex or is too short."""


class InvalidIVLength(DecryptionError):
    """Decoded IV is not 16 bytes."""


class InvalidCiphertextLength(DecryptionError):
    """Ciphertext is not a multiple of the block size."""


class InvalidPadding(DecryptionError):
    """Invalid PKCS#7 padding."""


class EncryptionFailed(VaultifyError):
    """Failed to encrypt secret value."""


class DecryptionFailed(VaultifyError):
    """Failed to decrypt secret value."""


## Access errors

class AccessError(VaultifyError):
    """Access to the resource was denied."""


class ForbiddenAccess(AccessError):
    """User does not have permission for this action on the vault."""


## Validation errors

class ValidationError(VaultifyError):
    """Invalid input."""


class InvalidPermissionLevel(ValidationError):
    """Invalid permission level specified for sharing."""


class CannotShareWithSelf(ValidationError):
    """Cannot share vault with oneself."""


class NotShared(ValidationError):
    """User is not currently shared on the vault."""


class NoShareTargets(ValidationError):
    """No valid target users found to share the vault with."""


## Lookup errors

class NotFound(VaultifyError):
    """Resource not found."""


class VaultNotFound(NotFound):
    """Vault not found."""


class SecretNotFound(NotFound):
    """Secret not found."""


class UserNotFound(NotFound):
    """User not found."""


class VaultLimitReached(VaultifyError):
    """Vault limit reached for the current plan."""
