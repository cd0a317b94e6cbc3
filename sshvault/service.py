"""
VaultService — owner of the loaded Store and entry point for export/import.

Provides the public API used by the application shell:
- ``export(password)`` / ``export_to_file(path, password)``
- ``import_archive(data, password, mode)`` / ``import_from_file(...)``
- ``add_group(name)`` / ``add_host(host)``
- ``export_async`` / ``import_archive_async``: same calls on a worker thread

An import moves through ``ImportState``::

    RECEIVED → DECRYPTED → MERGED | REPLACED → PERSISTED
                    (any failure) → FAILED

Merging happens on a copy of the current Store; the copy becomes current
only after it has been written, so a failed import changes nothing.

Security Note:
    Never log passwords or decrypted contents. Only log counts, states and
    error types.
"""
import asyncio
import logging
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from .archive.envelope import decode, encode
from .config import VaultConfig
from .exceptions import StorageError, VaultError
from .merge import host_key, merge_stores
from .models import Group, Host, Store
from .storage import StoreFile
from .validators import validate_host, validate_name

logger = logging.getLogger("sshvault")


class ImportMode(str, Enum):
    MERGE = "merge"
    REPLACE = "replace"


class ImportState(str, Enum):
    RECEIVED = "received"
    DECRYPTED = "decrypted"
    MERGED = "merged"
    REPLACED = "replaced"
    PERSISTED = "persisted"
    FAILED = "failed"


class VaultService:
    """Single-writer owner of the current Store.

    Not thread-safe: one caller at a time. The ``*_async`` methods only move
    the CPU-heavy work off the event loop; they must not be run concurrently
    against the same service.
    """

    def __init__(
        self,
        config: Optional[VaultConfig] = None,
        storage: Optional[StoreFile] = None,
    ):
        self._config = config or VaultConfig.from_env()
        self._storage = storage or StoreFile(self._config.vault_path)
        self._store: Optional[Store] = None
        self.last_import_state: Optional[ImportState] = None

    def __repr__(self) -> str:
        return f"<VaultService storage={self._storage!r}>"

    @property
    def config(self) -> VaultConfig:
        return self._config

    @property
    def storage(self) -> StoreFile:
        return self._storage

    # ------------------------------------------------------------------
    # Current store
    # ------------------------------------------------------------------

    @property
    def store(self) -> Store:
        """Currently loaded Store, read from disk on first access."""
        if self._store is None:
            self._store = self._storage.load()
        return self._store

    def reload(self) -> Store:
        """Discard the in-memory Store and read it again from disk."""
        self._store = self._storage.load()
        return self._store

    def save(self) -> None:
        self._storage.save(self.store)

    def _commit(self, store: Store) -> None:
        self._storage.save(store)
        self._store = store

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export(self, password: str) -> str:
        """Encrypt the current Store into export envelope text."""
        text = encode(self.store, password)
        logger.info(
            "Vault exported: %d group(s), %d host(s)",
            len(self.store.groups), len(self.store.hosts),
        )
        return text

    def export_to_file(self, path: Union[str, Path], password: str) -> Path:
        """Export the current Store and write it to ``path``.

        Returns:
            The path written.

        Raises:
            StorageError: If the file cannot be written.
        """
        path = Path(path)
        text = self.export(password)
        try:
            path.write_text(text, encoding="utf-8")
        except OSError as err:
            raise StorageError(f"Failed to write export file {path}: {err}") from err
        return path

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------

    def _set_state(self, state: ImportState) -> None:
        self.last_import_state = state
        logger.debug("Import state: %s", state.value)

    def import_archive(
        self,
        data: Union[bytes, str],
        password: str,
        mode: Union[ImportMode, str, None] = None,
    ) -> Store:
        """Decrypt an export and merge it into, or replace, the current Store.

        Args:
            data: Export envelope as UTF-8 bytes or text.
            password: Passphrase used at export time.
            mode: ``merge`` or ``replace``; defaults to the configured mode.

        Returns:
            The new current Store (already persisted).

        Raises:
            ValueError: If mode is not a known import mode.
            VaultError: Any decode, serialization or storage failure.
        """
        mode = ImportMode(mode or self._config.import_mode)
        self._set_state(ImportState.RECEIVED)
        try:
            imported = decode(data, password)
            self._set_state(ImportState.DECRYPTED)
            if mode is ImportMode.MERGE:
                result = self.store.model_copy(deep=True)
                merge_stores(result, imported)
                self._set_state(ImportState.MERGED)
            else:
                result = imported
                self._set_state(ImportState.REPLACED)
            self._commit(result)
        except VaultError as err:
            self._set_state(ImportState.FAILED)
            logger.warning("Vault import failed: %s", type(err).__name__)
            raise
        self._set_state(ImportState.PERSISTED)
        logger.info(
            "Vault imported (%s): %d group(s), %d host(s)",
            mode.value, len(result.groups), len(result.hosts),
        )
        return result

    def import_from_file(
        self,
        path: Union[str, Path],
        password: str,
        mode: Union[ImportMode, str, None] = None,
    ) -> Store:
        """Read an export file and import it (see ``import_archive``).

        Raises:
            StorageError: If the file cannot be read.
        """
        path = Path(path)
        try:
            data = path.read_bytes()
        except OSError as err:
            raise StorageError(f"Failed to read export file {path}: {err}") from err
        return self.import_archive(data, password, mode)

    # ------------------------------------------------------------------
    # Direct edits
    # ------------------------------------------------------------------

    def add_group(self, name: str) -> Group:
        """Create and persist a new group.

        Raises:
            ValueError: If the name is invalid or already taken.
        """
        error = validate_name(name)
        if error:
            raise ValueError(error)
        if name in self.store.group_names():
            raise ValueError(f"Group already exists: {name!r}")
        group = Group(name=name)
        updated = self.store.model_copy(deep=True)
        updated.groups.append(group)
        self._commit(updated)
        logger.debug("Group added: %s", name)
        return group

    def add_host(self, host: Host) -> Host:
        """Validate and persist a new host.

        Raises:
            ValueError: If a field is invalid or an identical
                ``(name, hostname, port)`` host exists.
        """
        errors = validate_host(host)
        if errors:
            raise ValueError(f"Invalid host: {errors}")
        key = host_key(host)
        if any(host_key(existing) == key for existing in self.store.hosts):
            raise ValueError(
                f"Host already exists: {host.name} ({host.hostname}:{host.port})"
            )
        updated = self.store.model_copy(deep=True)
        updated.hosts.append(host)
        self._commit(updated)
        logger.debug("Host added: id=%s name=%s", host.id, host.name)
        return host

    # ------------------------------------------------------------------
    # Async wrappers
    # ------------------------------------------------------------------

    async def export_async(self, password: str) -> str:
        """``export`` on a worker thread; Argon2id would block the loop."""
        return await asyncio.to_thread(self.export, password)

    async def import_archive_async(
        self,
        data: Union[bytes, str],
        password: str,
        mode: Union[ImportMode, str, None] = None,
    ) -> Store:
        """``import_archive`` on a worker thread."""
        return await asyncio.to_thread(self.import_archive, data, password, mode)
