"""
Vault Crypto Core — AES-256-CBC codec for secret values at rest.

Envelope format (kept bit-exact for previously stored secrets):

    base64( hex(iv 16B) || hex(ciphertext N*16B) )

The key is supplied on every call; this module holds no key state.

Security Note:
    Never log plaintext, ciphertext, IV or key material.
    IVs are random 128-bit from ``os.urandom``, fresh for every call.
"""
import os
import base64
import binascii
import logging

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from ..exceptions import (
    InvalidKeyLength,
    MalformedEnvelope,
    InvalidIVLength,
    InvalidCiphertextLength,
    InvalidPadding,
)

logger = logging.getLogger("vaultify.vault")

KEY_LENGTH = 32  # AES-256
BLOCK_SIZE = 16  # AES block size
IV_LENGTH = 16  # CBC IV is one block
IV_HEX_LENGTH = IV_LENGTH * 2


def check_key(key: bytes) -> None:
    """Raise InvalidKeyLength unless key is exactly 32 bytes."""
    if key is None or len(key) != KEY_LENGTH:
        raise InvalidKeyLength(
            f"Encryption key must be {KEY_LENGTH} bytes for AES-256, "
            f"got {0 if key is None else len(key)}"
        )


# ---------------------------------------------------------------------------
# PKCS#7 padding
# ---------------------------------------------------------------------------

def pkcs7_pad(data: bytes, block_size: int = BLOCK_SIZE) -> bytes:
    """Pad data to a multiple of block_size.

    A full block of padding is appended when data is already aligned,
    so the pad length is always between 1 and block_size.
    """
    if not 0 < block_size <= 255:
        raise ValueError(f"Invalid block size: {block_size}")
    pad_len = block_size - (len(data) % block_size)
    return data + bytes([pad_len]) * pad_len


def pkcs7_unpad(data: bytes, block_size: int = BLOCK_SIZE) -> bytes:
    """Validate and strip PKCS#7 padding.

    Raises:
        InvalidPadding: If the declared pad length is zero, larger than
            block_size or data, or any pad byte differs from it.
    """
    if not data:
        raise InvalidPadding("Invalid PKCS#7 padding: data is empty")
    pad_len = data[-1]
    if pad_len == 0 or pad_len > block_size:
        raise InvalidPadding(
            "Invalid PKCS#7 padding: padding size is zero or exceeds block size"
        )
    if len(data) < pad_len:
        raise InvalidPadding(
            "Invalid PKCS#7 padding: data too short for claimed padding"
        )
    if data[-pad_len:] != bytes([pad_len]) * pad_len:
        raise InvalidPadding(
            "Invalid PKCS#7 padding: padding bytes are inconsistent"
        )
    return data[:-pad_len]


# ---------------------------------------------------------------------------
# Encrypt / Decrypt
# ---------------------------------------------------------------------------

def _cipher(key: bytes, iv: bytes) -> Cipher:
    return Cipher(algorithms.AES(key), modes.CBC(iv))


def encrypt(plaintext: str, key: bytes) -> str:
    """Encrypt a plaintext string into a transport-safe envelope.

    Args:
        plaintext: Secret value to protect.
        key: Raw 32-byte AES-256 key.

    Returns:
        Base64 text of ``hex(iv) + hex(ciphertext)``.

    Raises:
        InvalidKeyLength: If key is not 32 bytes.
    """
    check_key(key)
    iv = os.urandom(IV_LENGTH)
    padded = pkcs7_pad(plaintext.encode("utf-8"))
    encryptor = _cipher(key, iv).encryptor()
    ct = encryptor.update(padded) + encryptor.finalize()
    combined = iv.hex() + ct.hex()
    return base64.b64encode(combined.encode("ascii")).decode("ascii")


def decrypt(envelope: str, key: bytes) -> str:
    """Decrypt an envelope produced by :func:`encrypt`.

    Args:
        envelope: Base64 text of ``hex(iv) + hex(ciphertext)``.
        key: Raw 32-byte AES-256 key.

    Returns:
        The original plaintext string.

    Raises:
        InvalidKeyLength: If key is not 32 bytes.
        MalformedEnvelope: On invalid base64, invalid hex, an envelope too
            short to hold an IV, or output that is not UTF-8 text.
        InvalidIVLength: If the decoded IV is not 16 bytes.
        InvalidCiphertextLength: If the ciphertext is not block aligned.
        InvalidPadding: If PKCS#7 padding does not validate.
    """
    check_key(key)
    try:
        # line breaks are ignored, as in wrapped base64
        raw = envelope.replace("\r", "").replace("\n", "")
        combined = base64.b64decode(raw, validate=True).decode("ascii")
    except (binascii.Error, ValueError, TypeError, AttributeError) as err:
        raise MalformedEnvelope(
            f"Failed to decode base64 envelope: {err}"
        ) from err

    if len(combined) < IV_HEX_LENGTH:
        raise MalformedEnvelope(
            "Invalid ciphertext: too short to contain IV"
        )
    iv_hex = combined[:IV_HEX_LENGTH]
    ct_hex = combined[IV_HEX_LENGTH:]
    try:
        iv = binascii.unhexlify(iv_hex)
    except (binascii.Error, ValueError) as err:
        raise MalformedEnvelope("Failed to decode IV from hex") from err
    if len(iv) != IV_LENGTH:
        raise InvalidIVLength(
            f"Invalid IV length after hex decoding: expected {IV_LENGTH}, "
            f"got {len(iv)}"
        )
    try:
        ct = binascii.unhexlify(ct_hex)
    except (binascii.Error, ValueError) as err:
        raise MalformedEnvelope("Failed to decode ciphertext from hex") from err
    if len(ct) % BLOCK_SIZE != 0:
        raise InvalidCiphertextLength(
            f"Ciphertext length {len(ct)} is not a multiple of the block size"
        )

    decryptor = _cipher(key, iv).decryptor()
    padded = decryptor.update(ct) + decryptor.finalize()
    data = pkcs7_unpad(padded)
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as err:
        raise MalformedEnvelope("Decrypted value is not valid UTF-8") from err
