"""
Cipherslip - Persistence substrate.

Created by orpheus497

The key store never touches files directly. It reads and writes named
text records through a KeyValueStore, which the caller injects:

- MemoryStore keeps records in a dictionary (tests, ephemeral sessions)
- JsonFileStore keeps one ``<name>.json`` file per record in a data
  directory, written atomically
"""

import logging
import os
import re
from pathlib import Path
from typing import Dict, Iterable, Optional

from .constants import IDENTITY_RECORD
from .errors import CorruptStateError, ErrorCode, StorageError

logger = logging.getLogger(__name__)

_RECORD_NAME = re.compile(r"^[a-z][a-z0-9_]*$")


class KeyValueStore:
    """Get/set interface for named text records."""

    def get(self, name: str) -> Optional[str]:
        """Return the stored text for ``name`` or None if absent."""
        raise NotImplementedError

    def set(self, name: str, value: str) -> None:
        """Store ``value`` under ``name``, replacing any previous value."""
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    """Dictionary-backed store."""

    def __init__(self, records: Optional[Dict[str, str]] = None):
        self.records: Dict[str, str] = dict(records or {})

    def get(self, name: str) -> Optional[str]:
        return self.records.get(name)

    def set(self, name: str, value: str) -> None:
        self.records[name] = value


class JsonFileStore(KeyValueStore):
    """
    File-backed store, one JSON document per record.

    Writes go to a temporary file that is then renamed over the record, so
    a crash never leaves a half-written file behind. Records listed in
    ``private_records`` are created readable by the owner only.
    """

    def __init__(self, data_dir, private_records: Iterable[str] = (IDENTITY_RECORD,)):
        self.data_dir = Path(data_dir)
        self.private_records = frozenset(private_records)

    def path_for(self, name: str) -> Path:
        """Return the file path backing a record."""
        if not _RECORD_NAME.match(name):
            raise StorageError(
                ErrorCode.E002_INVALID_ARGUMENT, f"Invalid record name: {name!r}", {"name": name}
            )
        return self.data_dir / f"{name}.json"

    def get(self, name: str) -> Optional[str]:
        path = self.path_for(name)
        if not path.exists():
            logger.debug(f"Record does not exist: {path}")
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                return f.read()
        except UnicodeDecodeError as e:
            logger.error(f"Record {name} is not UTF-8 text: {e}")
            raise CorruptStateError(f"Corrupted {name} record: {e}", {"record": name}) from e
        except (IOError, OSError) as e:
            logger.error(f"Failed to read record {name}: {e}")
            raise _storage_error(e, f"Cannot read {name}", path) from e

    def set(self, name: str, value: str) -> None:
        path = self.path_for(name)
        temp_file = path.with_name(path.name + ".tmp")

        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            if name in self.private_records:
                fd = os.open(temp_file, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
                f = os.fdopen(fd, "w", encoding="utf-8")
            else:
                f = open(temp_file, "w", encoding="utf-8")
            with f:
                f.write(value)

            # Atomic rename
            os.replace(temp_file, path)
            logger.debug(f"Saved record {name} to {path}")
        except (IOError, OSError) as e:
            logger.error(f"Failed to save record {name}: {e}")
            _remove_temp_file(temp_file)
            raise _storage_error(e, f"Cannot save {name}", path) from e


def _remove_temp_file(temp_file: Path) -> None:
    """Remove a leftover temporary file, ignoring a missing one."""
    try:
        temp_file.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Could not remove temporary file {temp_file}: {e}")


def _storage_error(error: OSError, message: str, path: Path) -> StorageError:
    if isinstance(error, PermissionError):
        code = ErrorCode.E004_PERMISSION_DENIED
    elif isinstance(error, FileNotFoundError):
        code = ErrorCode.E003_FILE_NOT_FOUND
    else:
        code = ErrorCode.E005_OPERATION_FAILED
    return StorageError(code, f"{message}: {error}", {"path": str(path)})
