"""
Cipherslip - Key store tests.

Created by orpheus497

Tests for identity and contact persistence on top of the record stores.
"""

import json

import pytest

from cipherslip import crypto
from cipherslip.errors import CorruptStateError, StorageError
from cipherslip.keystore import Contact, KeyStore
from cipherslip.storage import JsonFileStore, MemoryStore


class FailingStore(MemoryStore):
    """Store whose writes always fail."""

    def set(self, name, value):
        raise OSError("disk full")


class BrokenReadStore(MemoryStore):
    """Store whose reads always fail."""

    def get(self, name):
        raise OSError("device unavailable")


def test_identity_absent_by_default(memory_store):
    assert KeyStore(memory_store).load_identity() is None


def test_generate_identity_does_not_persist(memory_store):
    keystore = KeyStore(memory_store)
    keystore.generate_identity()
    assert keystore.load_identity() is None


def test_save_and_load_identity(memory_store):
    keystore = KeyStore(memory_store)
    keypair = keystore.generate_identity()
    keystore.save_identity(keypair)

    loaded = keystore.load_identity()
    assert loaded == keypair
    assert json.loads(memory_store.get("identity")) == keypair.to_dict()


def test_save_identity_overwrites(memory_store):
    keystore = KeyStore(memory_store)
    first = keystore.generate_identity()
    second = keystore.generate_identity()

    keystore.save_identity(first)
    keystore.save_identity(second)

    assert keystore.load_identity() == second


def test_identity_survives_new_keystore(file_store: JsonFileStore):
    keypair = crypto.generate_keypair()
    KeyStore(file_store).save_identity(keypair)

    reloaded = KeyStore(JsonFileStore(file_store.data_dir)).load_identity()
    assert reloaded == keypair


def test_contacts_empty_by_default(memory_store):
    assert KeyStore(memory_store).load_contacts() == []


def test_append_contact_preserves_order(memory_store):
    keystore = KeyStore(memory_store)
    names = ["bob", "carol", "dave"]
    for name in names:
        keystore.append_contact(Contact(name, f"key-{name}"))

    assert [c.name for c in keystore.load_contacts()] == names
    assert json.loads(memory_store.get("contacts")) == [
        {"name": name, "publicKey": f"key-{name}"} for name in names
    ]


def test_append_contact_allows_duplicates(memory_store):
    keystore = KeyStore(memory_store)
    keystore.append_contact(Contact("bob", "same"))
    keystore.append_contact(Contact("bob", "same"))

    assert keystore.load_contacts() == [Contact("bob", "same"), Contact("bob", "same")]


def test_append_contact_does_not_validate_key(memory_store):
    keystore = KeyStore(memory_store)
    keystore.append_contact(Contact("bob", "definitely not base64!"))
    assert keystore.load_contacts()[0].public_key == "definitely not base64!"


def test_failed_append_leaves_list_unchanged():
    store = FailingStore({"contacts": json.dumps([{"name": "bob", "publicKey": "k"}])})
    keystore = KeyStore(store)
    before = store.records["contacts"]

    with pytest.raises(StorageError):
        keystore.append_contact(Contact("carol", "k2"))

    assert store.records["contacts"] == before


def test_read_failure_raises_storage_error():
    keystore = KeyStore(BrokenReadStore())

    with pytest.raises(StorageError):
        keystore.load_identity()
    with pytest.raises(StorageError):
        keystore.load_contacts()


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        "[]",
        '"text"',
        "{}",
        '{"publicKey": "AAAA", "privateKey": "AAAA"}',
    ],
)
def test_corrupt_identity_raises(raw):
    keystore = KeyStore(MemoryStore({"identity": raw}))
    with pytest.raises(CorruptStateError):
        keystore.load_identity()


def test_identity_with_mismatched_public_key_is_corrupt():
    data = crypto.generate_keypair().to_dict()
    data["publicKey"] = crypto.generate_keypair().public_key_text
    keystore = KeyStore(MemoryStore({"identity": json.dumps(data)}))

    with pytest.raises(CorruptStateError):
        keystore.load_identity()


@pytest.mark.parametrize(
    "raw",
    [
        "{not json",
        "{}",
        "[1, 2]",
        '[{"name": "bob"}]',
        '[{"name": 5, "publicKey": "k"}]',
    ],
)
def test_corrupt_contacts_raise(raw):
    keystore = KeyStore(MemoryStore({"contacts": raw}))
    with pytest.raises(CorruptStateError):
        keystore.load_contacts()


def test_corrupt_contacts_block_append():
    store = MemoryStore({"contacts": "{broken"})
    with pytest.raises(CorruptStateError):
        KeyStore(store).append_contact(Contact("bob", "k"))
    assert store.records["contacts"] == "{broken"


@pytest.mark.parametrize("record", ["identity", "contacts"])
def test_non_utf8_record_file_is_corrupt(temp_dir, record):
    temp_dir.joinpath(f"{record}.json").write_bytes(b"\xff\xfe{garbage")
    keystore = KeyStore(JsonFileStore(temp_dir))

    with pytest.raises(CorruptStateError):
        if record == "identity":
            keystore.load_identity()
        else:
            keystore.load_contacts()


def test_contact_dict_round_trip():
    contact = Contact("Zoë", "key")
    assert Contact.from_dict(contact.to_dict()) == contact
    assert contact.to_dict() == {"name": "Zoë", "publicKey": "key"}
