"""SSHVault — Encrypted export and import of SSH host stores.

A Store (groups and hosts) is exported as a JSON envelope whose payload is
encrypted with AES-256-GCM under an Argon2id key derived from a passphrase.
Imports either replace the current Store or merge into it, append-only.
"""

from .version import __version__
from .exceptions import (
    VaultError,
    KeyDerivationError,
    AuthenticationError,
    FormatError,
    UnsupportedFormatError,
    SerializationError,
    StorageError,
)
from .models import Store, Group, Host, AgentAuth, KeyPathAuth
from .archive import encode, decode
from .merge import merge_stores
from .config import VaultConfig
from .storage import StoreFile
from .service import VaultService, ImportMode, ImportState

__all__ = [
    "__version__",
    "VaultError",
    "KeyDerivationError",
    "AuthenticationError",
    "FormatError",
    "UnsupportedFormatError",
    "SerializationError",
    "StorageError",
    "Store",
    "Group",
    "Host",
    "AgentAuth",
    "KeyPathAuth",
    "encode",
    "decode",
    "merge_stores",
    "VaultConfig",
    "StoreFile",
    "VaultService",
    "ImportMode",
    "ImportState",
]
