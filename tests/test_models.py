"""
Tests for Store, Group and Host models.

Tests cover:
- Defaults and the Host.create factory
- Tagged auth union and its flat wire form
- Strict field validation
"""
import uuid

import pytest
from pydantic import ValidationError

from sshvault.models import WIRE_CONTEXT, AgentAuth, Group, Host, KeyPathAuth, Store


def wire_host(**overrides):
    data = {
        "id": "h-1",
        "name": "web1",
        "hostname": "10.0.0.5",
        "port": 22,
        "username": None,
        "auth": "Agent",
        "key_path": None,
        "group": None,
        "tags": [],
        "notes": None,
        "created_at": 1700000000,
        "updated_at": 1700000000,
    }
    data.update(overrides)
    return data


class TestStore:
    """Tests for the Store container."""

    def test_default_is_empty(self):
        store = Store()
        assert store.version == 1
        assert store.groups == []
        assert store.hosts == []
        assert store.empty is True

    def test_not_empty(self, prod_store):
        assert prod_store.empty is False

    def test_version_fixed(self):
        """Only store version 1 exists."""
        with pytest.raises(ValidationError):
            Store(version=2)

    @pytest.mark.parametrize("version", [True, 1.0, "1"])
    def test_version_strict(self, version):
        """A boolean, float or string is not version 1."""
        with pytest.raises(ValidationError):
            Store.model_validate({"version": version, "groups": [], "hosts": []})

    def test_wire_context_requires_fields(self):
        """Defaults apply to construction only, not to wire data."""
        assert Store.model_validate({}).empty
        with pytest.raises(ValidationError):
            Store.model_validate({}, context=WIRE_CONTEXT)

    def test_unknown_field(self):
        with pytest.raises(ValidationError):
            Store.model_validate({"version": 1, "groups": [], "hosts": [], "extra": 1})

    def test_group_names(self, prod_store):
        assert prod_store.group_names() == ["prod"]

    def test_get_host(self, prod_store, db1):
        assert prod_store.get_host(db1.id) is prod_store.hosts[0]
        assert prod_store.get_host("missing") is None


class TestHostCreate:
    """Tests for the Host.create factory."""

    def test_defaults(self):
        host = Host.create("web1", "10.0.0.5")
        assert uuid.UUID(host.id).version == 4
        assert host.port == 22
        assert host.username is None
        assert isinstance(host.auth, AgentAuth)
        assert host.tags == []
        assert host.created_at == host.updated_at

    def test_unique_ids(self):
        assert Host.create("a", "a.local").id != Host.create("a", "a.local").id

    def test_extra_fields(self, key_host):
        assert key_host.port == 2222
        assert key_host.username == "ops"
        assert key_host.key_path == "~/.ssh/id_ed25519"


class TestAuth:
    """Tests for the tagged auth union."""

    def test_agent_wire_form(self):
        host = Host.model_validate(wire_host())
        assert isinstance(host.auth, AgentAuth)
        assert host.key_path is None

    def test_key_path_wire_form(self):
        host = Host.model_validate(wire_host(auth="KeyPath", key_path="~/.ssh/id_rsa"))
        assert isinstance(host.auth, KeyPathAuth)
        assert host.auth.key_path == "~/.ssh/id_rsa"

    def test_agent_empty_key_path(self):
        """An empty key path next to Agent is treated as absent."""
        host = Host.model_validate(wire_host(key_path=""))
        assert isinstance(host.auth, AgentAuth)

    def test_agent_with_key_path_rejected(self):
        with pytest.raises(ValidationError):
            Host.model_validate(wire_host(key_path="~/.ssh/id_rsa"))

    @pytest.mark.parametrize("key_path", [None, ""])
    def test_key_path_without_path_rejected(self, key_path):
        with pytest.raises(ValidationError):
            Host.model_validate(wire_host(auth="KeyPath", key_path=key_path))

    @pytest.mark.parametrize("auth", ["Password", "agent", ""])
    def test_unknown_auth_kind(self, auth):
        with pytest.raises(ValidationError):
            Host.model_validate(wire_host(auth=auth))

    def test_nested_form(self):
        """The tagged form is accepted as well."""
        data = wire_host(auth={"kind": "KeyPath", "key_path": "/keys/id"})
        del data["key_path"]
        host = Host.model_validate(data)
        assert host.key_path == "/keys/id"

    def test_dump_is_flat(self, key_host):
        data = key_host.model_dump()
        assert data["auth"] == "KeyPath"
        assert data["key_path"] == "~/.ssh/id_ed25519"

    def test_dump_agent(self, db1):
        data = db1.model_dump(mode="json")
        assert data["auth"] == "Agent"
        assert data["key_path"] is None

    def test_dump_validates_back(self, key_host):
        again = Host.model_validate(key_host.model_dump())
        assert again.model_dump() == key_host.model_dump()

    def test_dump_without_auth(self, key_host):
        """Excluding auth drops both flat fields instead of failing."""
        data = key_host.model_dump(exclude={"auth"})
        assert "auth" not in data
        assert "key_path" not in data
        assert data["name"] == "bastion"

    def test_dump_include_subset(self, key_host):
        assert key_host.model_dump(include={"id", "name"}) == {"id": key_host.id, "name": "bastion"}

    def test_auth_is_frozen(self):
        auth = KeyPathAuth(key_path="/keys/id")
        with pytest.raises(ValidationError):
            auth.key_path = "/other"


class TestHostValidation:
    """Strict scalar validation."""

    @pytest.mark.parametrize("port", [-1, 65536, 100000])
    def test_port_range(self, port):
        with pytest.raises(ValidationError):
            Host.model_validate(wire_host(port=port))

    @pytest.mark.parametrize("port", [0, 22, 65535])
    def test_port_bounds(self, port):
        assert Host.model_validate(wire_host(port=port)).port == port

    @pytest.mark.parametrize("port", ["22", 22.0, True])
    def test_port_not_coerced(self, port):
        with pytest.raises(ValidationError):
            Host.model_validate(wire_host(port=port))

    def test_missing_required(self):
        data = wire_host()
        del data["hostname"]
        with pytest.raises(ValidationError):
            Host.model_validate(data)

    def test_unknown_field(self):
        with pytest.raises(ValidationError):
            Host.model_validate(wire_host(password="hunter2"))

    def test_wire_requires_defaulted_fields(self):
        """Under the wire context a missing port is an error, not 22."""
        data = wire_host()
        del data["port"]
        assert Host.model_validate(data).port == 22
        with pytest.raises(ValidationError):
            Host.model_validate(data, context=WIRE_CONTEXT)

    def test_wire_allows_missing_optionals(self):
        data = wire_host()
        for field in ("username", "group", "notes", "key_path"):
            del data[field]
        assert Host.model_validate(data, context=WIRE_CONTEXT).notes is None

    def test_tags_must_be_strings(self):
        with pytest.raises(ValidationError):
            Host.model_validate(wire_host(tags=["ok", 3]))


class TestGroup:
    def test_default_timestamp(self):
        assert Group(name="prod").created_at > 0

    def test_timestamp_strict(self):
        with pytest.raises(ValidationError):
            Group.model_validate({"name": "prod", "created_at": "yesterday"})

    def test_wire_requires_timestamp(self):
        assert Group.model_validate({"name": "prod"}).created_at > 0
        with pytest.raises(ValidationError):
            Group.model_validate({"name": "prod"}, context=WIRE_CONTEXT)
