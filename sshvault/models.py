"""
Store Models — groups and SSH hosts held in the vault.

A ``Store`` owns its groups and hosts. Host authentication is a tagged union:
``AgentAuth`` carries nothing, ``KeyPathAuth`` carries the private key path.

On the wire (encrypted payload and plaintext vault file) a host keeps the flat
form written by earlier releases::

    {"auth": "KeyPath", "key_path": "~/.ssh/id_ed25519", ...}

Inconsistent combinations (``Agent`` with a path, ``KeyPath`` without one)
are rejected during validation.

Defaults only serve in-process construction (``Store()``, ``Host.create``).
Validating with ``context=WIRE_CONTEXT`` requires every non-optional field
to be present, so a decoded payload is never completed with made-up values.
"""
import time
import uuid
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    StrictInt,
    StrictStr,
    ValidationInfo,
    model_serializer,
    model_validator,
)

STORE_VERSION = 1
DEFAULT_SSH_PORT = 22

WIRE_CONTEXT = {"wire": True}

# Optional fields (username, group, notes, key_path) may be absent on the wire.
GROUP_WIRE_FIELDS = frozenset({"name", "created_at"})
HOST_WIRE_FIELDS = frozenset({
    "id", "name", "hostname", "port", "auth", "tags", "created_at", "updated_at",
})
STORE_WIRE_FIELDS = frozenset({"version", "groups", "hosts"})

Port = Annotated[StrictInt, Field(ge=0, le=65535)]


def now_ts() -> int:
    """Current time as integer epoch seconds."""
    return int(time.time())


def new_host_id() -> str:
    return str(uuid.uuid4())


def require_wire_fields(data: Any, info: ValidationInfo, required: frozenset) -> None:
    """Reject wire data that omits a field the model would otherwise default."""
    if not isinstance(data, dict) or not (info.context or {}).get("wire"):
        return
    missing = sorted(required.difference(data))
    if missing:
        raise ValueError(f"Missing required field(s): {', '.join(missing)}")


# ---------------------------------------------------------------------------
# Authentication methods
# ---------------------------------------------------------------------------

class AgentAuth(BaseModel):
    """Authenticate through the running SSH agent."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["Agent"] = "Agent"


class KeyPathAuth(BaseModel):
    """Authenticate with the private key stored at ``key_path``."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["KeyPath"] = "KeyPath"
    key_path: Annotated[StrictStr, Field(min_length=1)]


AuthMethod = Annotated[Union[AgentAuth, KeyPathAuth], Field(discriminator="kind")]


# ---------------------------------------------------------------------------
# Store entries
# ---------------------------------------------------------------------------

class Group(BaseModel):
    """Named collection of hosts. Names are case-sensitive."""

    model_config = ConfigDict(extra="forbid")

    name: StrictStr
    created_at: StrictInt = Field(default_factory=now_ts)

    @model_validator(mode="before")
    @classmethod
    def check_wire_fields(cls, data: Any, info: ValidationInfo) -> Any:
        require_wire_fields(data, info, GROUP_WIRE_FIELDS)
        return data


class Host(BaseModel):
    """A single SSH connection record.

    ``group`` is a weak reference to ``Group.name``; nothing enforces that the
    group exists.
    """

    model_config = ConfigDict(extra="forbid")

    id: StrictStr = Field(default_factory=new_host_id)
    name: StrictStr
    hostname: StrictStr
    port: Port = DEFAULT_SSH_PORT
    username: Optional[StrictStr] = None
    auth: AuthMethod = Field(default_factory=AgentAuth)
    group: Optional[StrictStr] = None
    tags: list[StrictStr] = Field(default_factory=list)
    notes: Optional[StrictStr] = None
    created_at: StrictInt = Field(default_factory=now_ts)
    updated_at: StrictInt = Field(default_factory=now_ts)

    @model_validator(mode="before")
    @classmethod
    def fold_auth(cls, data: Any, info: ValidationInfo) -> Any:
        """Turn the flat ``auth``/``key_path`` wire form into an auth model."""
        require_wire_fields(data, info, HOST_WIRE_FIELDS)
        if not isinstance(data, dict) or not isinstance(data.get("auth"), str):
            return data
        data = dict(data)
        kind = data.pop("auth")
        key_path = data.pop("key_path", None)
        if kind == "Agent":
            if key_path not in (None, ""):
                raise ValueError("Agent auth cannot carry a key_path")
            data["auth"] = {"kind": "Agent"}
        elif kind == "KeyPath":
            if not key_path:
                raise ValueError("KeyPath auth requires a key_path")
            data["auth"] = {"kind": "KeyPath", "key_path": key_path}
        else:
            raise ValueError(f"Unknown auth kind: {kind!r}")
        return data

    @model_serializer(mode="wrap")
    def flatten_auth(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        auth = data.pop("auth", None)
        if auth is not None:
            data["auth"] = auth["kind"]
            data["key_path"] = auth.get("key_path")
        return data

    @classmethod
    def create(
        cls,
        name: str,
        hostname: str,
        port: int = DEFAULT_SSH_PORT,
        **fields: Any,
    ) -> "Host":
        """Build a new host with a fresh id and matching timestamps.

        Args:
            name: Display name (e.g. ``"prod-app-01"``).
            hostname: DNS name or address to connect to.
            port: SSH port.
            **fields: Any other Host field (username, auth, group, tags, notes).

        Returns:
            New Host instance.
        """
        now = now_ts()
        return cls(
            id=new_host_id(),
            name=name,
            hostname=hostname,
            port=port,
            created_at=now,
            updated_at=now,
            **fields,
        )

    @property
    def key_path(self) -> Optional[str]:
        if isinstance(self.auth, KeyPathAuth):
            return self.auth.key_path
        return None


class Store(BaseModel):
    """In-memory collection of groups and hosts.

    The empty store (``Store()``) is what a fresh installation starts with.
    """

    model_config = ConfigDict(extra="forbid")

    version: Annotated[StrictInt, Field(ge=STORE_VERSION, le=STORE_VERSION)] = STORE_VERSION
    groups: list[Group] = Field(default_factory=list)
    hosts: list[Host] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def check_wire_fields(cls, data: Any, info: ValidationInfo) -> Any:
        require_wire_fields(data, info, STORE_WIRE_FIELDS)
        return data

    @property
    def empty(self) -> bool:
        return not self.groups and not self.hosts

    def group_names(self) -> list[str]:
        return [group.name for group in self.groups]

    def get_host(self, host_id: str) -> Optional[Host]:
        for host in self.hosts:
            if host.id == host_id:
                return host
        return None
