"""
Plaintext vault file — loads and saves the unencrypted Store on local disk.

``save`` writes to a temporary sibling, fsyncs it and atomically replaces the
target, so an interrupted write never leaves a truncated vault behind. The
parent directory is fsynced afterwards so the rename itself is durable.
"""
import os
import logging
from pathlib import Path
from typing import Union

from .archive.envelope import deserialize_store, serialize_store
from .exceptions import FormatError, StorageError
from .models import Store

logger = logging.getLogger("sshvault")


class StoreFile:
    """Plaintext JSON persistence for a single Store."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"<StoreFile path={str(self.path)!r}>"

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> Store:
        """Read the Store from disk.

        Returns:
            The stored Store, or an empty one if the file does not exist.

        Raises:
            StorageError: If the file cannot be read or is not a valid Store.
        """
        if not self.path.exists():
            logger.debug("No vault file at %s, starting empty", self.path)
            return Store()
        try:
            content = self.path.read_bytes()
        except OSError as err:
            raise StorageError(f"Failed to read vault file {self.path}: {err}") from err
        try:
            store = deserialize_store(content)
        except FormatError as err:
            raise StorageError(f"Failed to parse vault file {self.path}: {err}") from err
        logger.debug(
            "Loaded vault file %s: %d group(s), %d host(s)",
            self.path, len(store.groups), len(store.hosts),
        )
        return store

    def save(self, store: Store) -> None:
        """Write the Store to disk and force it to stable storage.

        Raises:
            SerializationError: If the store cannot be serialized.
            StorageError: If the file cannot be written.
        """
        content = serialize_store(store, pretty=True)
        tmp_path = self.path.with_name(f".{self.path.name}.tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "wb") as fp:
                fp.write(content)
                fp.flush()
                os.fsync(fp.fileno())
            os.replace(tmp_path, self.path)
            self._sync_directory()
        except OSError as err:
            tmp_path.unlink(missing_ok=True)
            raise StorageError(f"Failed to write vault file {self.path}: {err}") from err
        logger.debug(
            "Saved vault file %s: %d group(s), %d host(s)",
            self.path, len(store.groups), len(store.hosts),
        )

    def _sync_directory(self) -> None:
        fd = os.open(self.path.parent, os.O_RDONLY)
        try:
            os.fsync(fd)
        finally:
            os.close(fd)
