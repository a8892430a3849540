"""
Cipherslip - Identity and contact storage.

Created by orpheus497

Owns the two records the envelope depends on:
- ``identity``: the local keypair, {"publicKey", "privateKey"} as base64
- ``contacts``: ordered list of {"name", "publicKey"}

Records are serialized as JSON and handed to an injected KeyValueStore.
Nothing is cached between calls; every read goes back to the store.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from . import crypto
from .constants import CONTACTS_RECORD, IDENTITY_RECORD
from .errors import CorruptStateError, CryptoError, StorageError
from .storage import KeyValueStore

logger = logging.getLogger(__name__)


class Contact:
    """A named public key belonging to someone else."""

    def __init__(self, name: str, public_key: str):
        self.name = name
        self.public_key = public_key

    def to_dict(self) -> Dict[str, Any]:
        """Convert contact to dictionary for storage."""
        return {"name": self.name, "publicKey": self.public_key}

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Contact":
        """Create contact from dictionary."""
        return Contact(name=data["name"], public_key=data["publicKey"])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Contact):
            return NotImplemented
        return self.name == other.name and self.public_key == other.public_key

    def __repr__(self) -> str:
        return f"Contact(name={self.name!r}, public_key={self.public_key!r})"


class KeyStore:
    """Reads and writes the local identity and contact list."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    @staticmethod
    def generate_identity() -> crypto.KeyPair:
        """
        Produce a fresh keypair.

        Nothing is persisted; call save_identity() to keep it.
        """
        return crypto.generate_keypair()

    def load_identity(self) -> Optional[crypto.KeyPair]:
        """
        Load the local keypair.

        Returns:
            The stored KeyPair, or None if none was ever saved

        Raises:
            StorageError: If the backend cannot be read
            CorruptStateError: If the record is not a valid key pair
        """
        data = self._read_record(IDENTITY_RECORD)
        if data is None:
            return None

        if not isinstance(data, dict):
            raise CorruptStateError("Identity record is not an object", {"record": IDENTITY_RECORD})

        try:
            return crypto.KeyPair.from_dict(data)
        except CryptoError as e:
            raise CorruptStateError(
                f"Identity record is invalid: {e.message}", {"record": IDENTITY_RECORD}
            ) from e

    def save_identity(self, keypair: crypto.KeyPair) -> None:
        """Replace the stored identity unconditionally."""
        self._write_record(IDENTITY_RECORD, keypair.to_dict())
        logger.info(f"Identity saved: {crypto.generate_fingerprint(keypair.public_key)}")

    def load_contacts(self) -> List[Contact]:
        """
        Load all contacts in insertion order.

        Returns:
            List of contacts, empty if none were ever added

        Raises:
            StorageError: If the backend cannot be read
            CorruptStateError: If the record is not a list of contacts
        """
        data = self._read_record(CONTACTS_RECORD)
        if data is None:
            return []

        if not isinstance(data, list):
            raise CorruptStateError("Contacts record is not a list", {"record": CONTACTS_RECORD})

        contacts = []
        for position, entry in enumerate(data):
            if (
                not isinstance(entry, dict)
                or not isinstance(entry.get("name"), str)
                or not isinstance(entry.get("publicKey"), str)
            ):
                raise CorruptStateError(
                    "Contacts record has an invalid entry",
                    {"record": CONTACTS_RECORD, "index": position},
                )
            contacts.append(Contact.from_dict(entry))
        return contacts

    def append_contact(self, contact: Contact) -> None:
        """
        Append a contact and persist the list.

        The key is stored as given. If the write fails the stored list is
        left as it was.
        """
        contacts = self.load_contacts()
        contacts.append(contact)
        self._write_record(CONTACTS_RECORD, [c.to_dict() for c in contacts])
        logger.info(f"Contact added: {contact.name} ({len(contacts)} total)")

    def _read_record(self, name: str) -> Any:
        try:
            raw = self.store.get(name)
        except StorageError:
            raise
        except (IOError, OSError) as e:
            raise StorageError(message=f"Cannot read {name}: {e}", details={"record": name}) from e

        if raw is None:
            return None

        try:
            return json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            logger.error(f"Corrupted {name} record: {e}")
            raise CorruptStateError(f"Corrupted {name} record: {e}", {"record": name}) from e

    def _write_record(self, name: str, data: Any) -> None:
        json_data = json.dumps(data, indent=2, ensure_ascii=False)
        try:
            self.store.set(name, json_data)
        except StorageError:
            raise
        except (IOError, OSError) as e:
            raise StorageError(message=f"Cannot save {name}: {e}", details={"record": name}) from e
