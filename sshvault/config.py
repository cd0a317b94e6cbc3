"""
Vault Configuration — where the plaintext store lives and how imports behave.

Reads optional settings from environment variables:
    SSHVAULT_DIR = <directory holding the vault file>      (default ~/.neonjack)
    SSHVAULT_FILENAME = <vault file name>                  (default vault.json)
    SSHVAULT_IMPORT_MODE = merge | replace                 (default merge)

Key derivation and cipher parameters are fixed and not configurable.
"""
import os
import logging
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger("sshvault")

DEFAULT_VAULT_DIR = Path.home() / ".neonjack"
DEFAULT_VAULT_FILENAME = "vault.json"
EXPORT_FILE_EXTENSION = ".sshvault"

ImportModeName = Literal["merge", "replace"]


class VaultConfig(BaseModel):
    """Validated vault configuration."""

    vault_dir: Path = Field(default=DEFAULT_VAULT_DIR)
    vault_filename: str = Field(default=DEFAULT_VAULT_FILENAME, min_length=1)
    import_mode: ImportModeName = "merge"

    @field_validator("vault_dir")
    @classmethod
    def expand_dir(cls, v: Path) -> Path:
        """Expand ``~`` so the path is usable as-is."""
        return v.expanduser()

    @field_validator("vault_filename")
    @classmethod
    def validate_filename(cls, v: str) -> str:
        """Ensure the vault file name has no directory component."""
        if Path(v).name != v or v in (".", ".."):
            raise ValueError(f"vault_filename must be a bare file name: {v!r}")
        return v

    @property
    def vault_path(self) -> Path:
        return self.vault_dir / self.vault_filename

    @classmethod
    def from_env(cls) -> "VaultConfig":
        """Create VaultConfig from environment variables.

        Returns:
            Populated VaultConfig instance.
        """
        values: dict[str, str] = {}
        if "SSHVAULT_DIR" in os.environ:
            values["vault_dir"] = os.environ["SSHVAULT_DIR"]
        if "SSHVAULT_FILENAME" in os.environ:
            values["vault_filename"] = os.environ["SSHVAULT_FILENAME"]
        if "SSHVAULT_IMPORT_MODE" in os.environ:
            values["import_mode"] = os.environ["SSHVAULT_IMPORT_MODE"].lower()
        config = cls(**values)
        logger.debug("Vault config: path=%s import_mode=%s", config.vault_path, config.import_mode)
        return config
