"""
Envelope Codec — the versioned export archive format.

An export is UTF-8 JSON holding exactly five fields::

    {"fmt": "sshvault-export", "v": 1,
     "salt": "<base64>", "nonce": "<base64>", "ciphertext": "<base64>"}

Decoding dispatches on ``v`` through a registry of per-version decoders, so a
later format can be added next to ``_decode_v1`` without touching it.

Security Note:
    Error messages never include key material or decrypted data. Validation
    details stay on the chained ``__cause__`` of a FormatError.
"""
import base64
import logging
from typing import Any, Callable, Union

import orjson
from pydantic import BaseModel, ConfigDict, StrictInt, StrictStr, ValidationError
from pydantic_core import PydanticSerializationError

from ..exceptions import FormatError, SerializationError, UnsupportedFormatError
from ..models import STORE_VERSION, WIRE_CONTEXT, Store
from .crypto import (
    NONCE_SIZE,
    SALT_SIZE,
    TAG_SIZE,
    decrypt,
    derive_key,
    encrypt,
    generate_salt,
)

logger = logging.getLogger("sshvault.archive")

EXPORT_FORMAT = "sshvault-export"
EXPORT_VERSION = 1

Decoder = Callable[[dict[str, Any], str], Store]

_DECODERS: dict[int, Decoder] = {}


def _register(version: int) -> Callable[[Decoder], Decoder]:
    def wrapper(func: Decoder) -> Decoder:
        _DECODERS[version] = func
        return func
    return wrapper


def supported_versions() -> list[int]:
    return sorted(_DECODERS)


class EnvelopeV1(BaseModel):
    """Field layout of a version 1 export."""

    model_config = ConfigDict(extra="forbid")

    fmt: StrictStr
    v: StrictInt
    salt: StrictStr
    nonce: StrictStr
    ciphertext: StrictStr


# ---------------------------------------------------------------------------
# Store payload serialization
# ---------------------------------------------------------------------------

def serialize_store(store: Store, pretty: bool = False) -> bytes:
    """Serialize a Store to canonical JSON bytes (sorted keys).

    Args:
        store: Store to serialize.
        pretty: Indent the output (used for the plaintext vault file).

    Returns:
        UTF-8 JSON bytes.

    Raises:
        SerializationError: If the store is not a valid version 1 Store.
    """
    if not isinstance(store, Store):
        raise SerializationError(
            f"Expected a Store, got {type(store).__name__}"
        )
    if store.version != STORE_VERSION:
        raise SerializationError(
            f"Unsupported store version: {store.version!r}"
        )
    option = orjson.OPT_SORT_KEYS
    if pretty:
        option |= orjson.OPT_INDENT_2
    try:
        return orjson.dumps(store.model_dump(mode="json"), option=option)
    except (PydanticSerializationError, orjson.JSONEncodeError, TypeError) as err:
        raise SerializationError(f"Store serialization failed: {err}") from err


def deserialize_store(data: Union[bytes, str]) -> Store:
    """Parse canonical JSON back into a Store.

    Every non-optional field must be present; nothing is filled with defaults.

    Raises:
        FormatError: If data is not JSON or does not describe a valid Store.
    """
    try:
        parsed = orjson.loads(data)
    except orjson.JSONDecodeError as err:
        raise FormatError("Store payload is not valid JSON") from err
    if not isinstance(parsed, dict):
        raise FormatError("Store payload must be a JSON object")
    try:
        return Store.model_validate(parsed, context=WIRE_CONTEXT)
    except ValidationError as err:
        raise FormatError(
            f"Store payload is malformed ({err.error_count()} error(s))"
        ) from err


# ---------------------------------------------------------------------------
# Base64 helpers
# ---------------------------------------------------------------------------

def _b64e(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _b64d(value: str, field: str) -> bytes:
    try:
        return base64.b64decode(value, validate=True)
    except ValueError as err:  # binascii.Error or non-ASCII input
        raise FormatError(f"Invalid {field} encoding") from err


# ---------------------------------------------------------------------------
# Encode / decode
# ---------------------------------------------------------------------------

def encode(store: Store, password: str) -> str:
    """Encrypt a Store under a passphrase and wrap it in an export envelope.

    A fresh salt is drawn here and a fresh nonce inside ``encrypt``, so two
    exports of the same store never share salt, nonce or ciphertext.

    Args:
        store: Store to export.
        password: Non-empty passphrase.

    Returns:
        Export envelope as JSON text.

    Raises:
        ValueError: If password is empty.
        SerializationError: If the store cannot be serialized.
        KeyDerivationError: If key derivation fails.
    """
    if not password:
        raise ValueError("Export password cannot be empty")
    plaintext = serialize_store(store)
    salt = generate_salt()
    key = derive_key(password, salt)
    nonce, ciphertext = encrypt(plaintext, key)
    envelope = {
        "fmt": EXPORT_FORMAT,
        "v": EXPORT_VERSION,
        "salt": _b64e(salt),
        "nonce": _b64e(nonce),
        "ciphertext": _b64e(ciphertext),
    }
    logger.debug(
        "Encoded export v%d: %d group(s), %d host(s)",
        EXPORT_VERSION, len(store.groups), len(store.hosts),
    )
    return orjson.dumps(envelope).decode("utf-8")


def _load_envelope(export_text: Union[str, bytes]) -> dict[str, Any]:
    try:
        parsed = orjson.loads(export_text)
    except orjson.JSONDecodeError as err:
        raise FormatError("Invalid export format: not valid JSON") from err
    if not isinstance(parsed, dict):
        raise FormatError("Invalid export format: expected a JSON object")
    return parsed


def decode(export_text: Union[str, bytes], password: str) -> Store:
    """Parse, verify and decrypt an export envelope.

    Args:
        export_text: Envelope JSON as text or UTF-8 bytes.
        password: Passphrase used at export time.

    Returns:
        The decrypted Store.

    Raises:
        FormatError: Malformed JSON, fields, base64 or decrypted payload.
        UnsupportedFormatError: Unknown ``fmt`` or ``v``.
        KeyDerivationError: If key derivation fails.
        AuthenticationError: Wrong password or corrupted/tampered data.
    """
    envelope = _load_envelope(export_text)
    fmt = envelope.get("fmt")
    if fmt != EXPORT_FORMAT:
        raise UnsupportedFormatError(f"Unsupported export format: {fmt!r}")
    version = envelope.get("v")
    # bool is an int subclass; True must not select the v1 decoder
    decoder = _DECODERS.get(version) if type(version) is int else None
    if decoder is None:
        raise UnsupportedFormatError(
            f"Unsupported export version: {version!r} "
            f"(supported: {supported_versions()})"
        )
    return decoder(envelope, password)


@_register(1)
def _decode_v1(envelope: dict[str, Any], password: str) -> Store:
    try:
        fields = EnvelopeV1.model_validate(envelope)
    except ValidationError as err:
        raise FormatError(
            f"Malformed v1 envelope ({err.error_count()} error(s))"
        ) from err

    salt = _b64d(fields.salt, "salt")
    nonce = _b64d(fields.nonce, "nonce")
    ciphertext = _b64d(fields.ciphertext, "ciphertext")

    if len(salt) < SALT_SIZE:
        raise FormatError(
            f"salt too short: {len(salt)} bytes (minimum {SALT_SIZE})"
        )
    if len(nonce) != NONCE_SIZE:
        raise FormatError(
            f"nonce must be {NONCE_SIZE} bytes, got {len(nonce)}"
        )
    if len(ciphertext) < TAG_SIZE:
        raise FormatError(
            f"ciphertext too short: {len(ciphertext)} bytes (minimum {TAG_SIZE})"
        )

    key = derive_key(password, salt)
    plaintext = decrypt(key, nonce, ciphertext)
    store = deserialize_store(plaintext)
    logger.debug(
        "Decoded export v1: %d group(s), %d host(s)",
        len(store.groups), len(store.hosts),
    )
    return store
