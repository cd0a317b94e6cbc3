"""Archive — Passphrase-protected export and import of a host Store.

Security Note (Threat Model):
    An archive is only as strong as its passphrase. Argon2id raises the cost
    of offline guessing but cannot stop it. Decrypted stores live in process
    memory as ordinary Python objects once imported; protecting process
    memory is out of scope.
"""

from .crypto import derive_key, encrypt, decrypt, generate_salt
from .envelope import (
    EXPORT_FORMAT,
    EXPORT_VERSION,
    encode,
    decode,
    serialize_store,
    deserialize_store,
)

__all__ = [
    "derive_key",
    "encrypt",
    "decrypt",
    "generate_salt",
    "EXPORT_FORMAT",
    "EXPORT_VERSION",
    "encode",
    "decode",
    "serialize_store",
    "deserialize_store",
]
