import pytest

from sshvault.config import VaultConfig
from sshvault.models import AgentAuth, Group, Host, KeyPathAuth, Store
from sshvault.service import VaultService


@pytest.fixture
def password():
    return "correct-password"


@pytest.fixture
def db1():
    """The ``db1`` host from the reference scenario."""
    return Host(
        id="5f1c9a52-7a8e-4d0b-9a43-1f2d3c4b5a69",
        name="db1",
        hostname="example.com",
        port=22,
        username="alice",
        auth=AgentAuth(),
        group="prod",
        tags=["database", "primary"],
        notes="Primary database",
        created_at=1700000000,
        updated_at=1700000100,
    )


@pytest.fixture
def prod_store(db1):
    """Store with one group ``prod`` and one host ``db1``."""
    return Store(
        groups=[Group(name="prod", created_at=1700000000)],
        hosts=[db1],
    )


@pytest.fixture
def key_host():
    return Host.create(
        "bastion",
        "bastion.example.com",
        port=2222,
        username="ops",
        auth=KeyPathAuth(key_path="~/.ssh/id_ed25519"),
        tags=["edge"],
    )


@pytest.fixture
def config(tmp_path):
    return VaultConfig(vault_dir=tmp_path / "vault")


@pytest.fixture
def service(config):
    return VaultService(config=config)
