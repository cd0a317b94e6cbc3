"""
SSHVault errors.

Every failure of the archive engine surfaces as one of these types. None of
them is transient, so callers should not retry.
"""


class VaultError(Exception):
    """Base class for all sshvault errors."""


class KeyDerivationError(VaultError):
    """Argon2id failed or produced unusable key material."""


class AuthenticationError(VaultError):
    """Integrity tag did not verify.

    Raised identically for a wrong password and for tampered or corrupted
    ciphertext.
    """

    def __init__(self, message: str = "wrong password or corrupted data"):
        super().__init__(message)


class FormatError(VaultError):
    """Malformed envelope, invalid base64, or a payload that is not a Store."""


class UnsupportedFormatError(FormatError):
    """Envelope ``fmt``/``v`` pair is not one this version understands."""


class SerializationError(VaultError):
    """A Store could not be serialized."""


class StorageError(VaultError):
    """The vault file or an export file could not be read or written."""
