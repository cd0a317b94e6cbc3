"""
Archive Crypto Core — Key derivation and authenticated encryption.

Implements the two primitives behind an export archive:
- Key derivation: Argon2id(password, salt) → 32-byte key
- Authenticated cipher: AES-256-GCM(key, fresh 96-bit nonce) → ciphertext + 16B tag

Security Note:
    Never log passwords, keys, nonces, plaintext or ciphertext values.
    A fresh nonce is drawn on every ``encrypt`` call; callers cannot pass one in.
    Argon2id is deliberately slow (64 MiB, 3 passes); keep it off event loops.
"""
import os
import logging

from argon2.exceptions import HashingError
from argon2.low_level import Type, hash_secret_raw
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..exceptions import AuthenticationError, KeyDerivationError

logger = logging.getLogger("sshvault.archive")

# Argon2id parameters, fixed: changing them breaks every existing archive.
ARGON2_MEMORY_COST = 65536  # KiB (64 MiB)
ARGON2_TIME_COST = 3
ARGON2_PARALLELISM = 1

KEY_LENGTH = 32  # AES-256
SALT_SIZE = 16  # 128-bit
NONCE_SIZE = 12  # 96-bit nonce
TAG_SIZE = 16  # GCM tag


# ---------------------------------------------------------------------------
# Key derivation
# ---------------------------------------------------------------------------

def generate_salt() -> bytes:
    """Return a fresh random salt for a new archive."""
    return os.urandom(SALT_SIZE)


def derive_key(password: str, salt: bytes) -> bytes:
    """Derive a 32-byte encryption key from a passphrase using Argon2id.

    The salt is always supplied by the caller: a fresh one when encrypting,
    the one recovered from the envelope when decrypting.

    Args:
        password: User passphrase.
        salt: Salt bytes.

    Returns:
        32-byte derived key.

    Raises:
        KeyDerivationError: If Argon2id fails or returns short key material.
    """
    try:
        key = hash_secret_raw(
            secret=password.encode("utf-8"),
            salt=salt,
            time_cost=ARGON2_TIME_COST,
            memory_cost=ARGON2_MEMORY_COST,
            parallelism=ARGON2_PARALLELISM,
            hash_len=KEY_LENGTH,
            type=Type.ID,
        )
    except HashingError as err:
        raise KeyDerivationError(f"Argon2id hashing failed: {err}") from err
    if len(key) < KEY_LENGTH:
        raise KeyDerivationError(
            f"Derived key too short: {len(key)} bytes (expected {KEY_LENGTH})"
        )
    return key[:KEY_LENGTH]


# ---------------------------------------------------------------------------
# Authenticated encryption
# ---------------------------------------------------------------------------

def _check_key(key: bytes) -> None:
    if len(key) != KEY_LENGTH:
        raise ValueError(
            f"key must be {KEY_LENGTH} bytes, got {len(key)}"
        )


def encrypt(plaintext: bytes, key: bytes) -> tuple[bytes, bytes]:
    """Encrypt plaintext with AES-256-GCM under a freshly drawn nonce.

    Args:
        plaintext: Data to encrypt.
        key: 32-byte key from ``derive_key``.

    Returns:
        Tuple of (nonce 12B, ciphertext + 16B tag).
    """
    _check_key(key)
    nonce = os.urandom(NONCE_SIZE)
    ct = AESGCM(key).encrypt(nonce, plaintext, None)
    return nonce, ct


def decrypt(key: bytes, nonce: bytes, ciphertext: bytes) -> bytes:
    """Verify and decrypt AES-256-GCM ciphertext.

    A failed tag check is reported as a single ``AuthenticationError`` whether
    the password was wrong or the data was altered.

    Args:
        key: 32-byte key from ``derive_key``.
        nonce: 12-byte nonce used at encryption time.
        ciphertext: Encrypted payload followed by the GCM tag.

    Returns:
        Decrypted plaintext bytes.

    Raises:
        ValueError: If key or nonce has the wrong length.
        AuthenticationError: If the tag does not verify.
    """
    _check_key(key)
    if len(nonce) != NONCE_SIZE:
        raise ValueError(
            f"nonce must be {NONCE_SIZE} bytes, got {len(nonce)}"
        )
    try:
        return AESGCM(key).decrypt(nonce, ciphertext, None)
    except InvalidTag:
        raise AuthenticationError() from None
