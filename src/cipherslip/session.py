"""
Cipherslip - Session orchestration.

Created by orpheus497

The Session is the command interface every front end drives:
generate_identity, add_contact, encrypt_for and decrypt_token. It looks
up the identity and contacts in the KeyStore, calls the crypto engine,
and encodes or decodes tokens. It keeps no state of its own between calls.

Failures are raised as CipherslipError subclasses. Callers that prefer
not to use exceptions for control flow can use encrypt_result() and
decrypt_result(), which return an outcome carrying either the value or
the error.
"""

import logging
from dataclasses import dataclass
from typing import Generic, List, Optional, TypeVar

from . import crypto, envelope
from .constants import KEY_SIZE
from .errors import (
    CipherslipError,
    CryptoError,
    DecryptionFailedError,
    ErrorCode,
    IdentityExistsError,
    InvalidContactError,
    InvalidRecipientError,
    NoIdentityError,
)
from .keystore import Contact, KeyStore
from .storage import KeyValueStore
from .utils import from_base64

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """
    Result of a session command.

    Exactly one of ``error`` and the wrapped value is set. Reading ``value``
    on a failed outcome raises the stored error, so a failure can never be
    used as if it were a result.
    """

    _value: Optional[T] = None
    error: Optional[CipherslipError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def code(self) -> Optional[ErrorCode]:
        """Error kind, or None on success."""
        return self.error.code if self.error is not None else None

    @property
    def value(self) -> T:
        if self.error is not None:
            raise self.error
        return self._value


class Session:
    """Command interface over one local identity and contact list."""

    def __init__(self, store: KeyValueStore):
        self.keystore = KeyStore(store)

    # Identity

    def generate_identity(self, overwrite: bool = True) -> crypto.KeyPair:
        """
        Generate a new keypair and persist it immediately.

        Regeneration replaces the old keypair; tokens sealed to the old
        public key can no longer be decrypted.

        Args:
            overwrite: If False, refuse to replace an existing identity

        Raises:
            IdentityExistsError: If overwrite is False and an identity exists
        """
        if not overwrite and self.keystore.load_identity() is not None:
            raise IdentityExistsError()

        keypair = self.keystore.generate_identity()
        self.keystore.save_identity(keypair)
        return keypair

    def identity(self) -> crypto.KeyPair:
        """Return the local keypair or raise NoIdentityError."""
        keypair = self.keystore.load_identity()
        if keypair is None:
            raise NoIdentityError()
        return keypair

    def has_identity(self) -> bool:
        return self.keystore.load_identity() is not None

    def public_key_text(self) -> str:
        """The base64 public key to share with contacts, unframed."""
        return self.identity().public_key_text

    def fingerprint(self) -> str:
        """Fingerprint of the local public key for manual comparison."""
        return crypto.generate_fingerprint(self.identity().public_key)

    # Contacts

    def add_contact(self, name: str, public_key_text: str) -> Contact:
        """
        Add a contact after trimming surrounding whitespace.

        Only emptiness is checked here; the key's format is checked when
        encrypting for the contact. Duplicate names and keys are allowed.

        Raises:
            InvalidContactError: If the name or key is empty
        """
        name = (name or "").strip()
        public_key_text = (public_key_text or "").strip()

        if not name or not public_key_text:
            raise InvalidContactError()

        contact = Contact(name, public_key_text)
        self.keystore.append_contact(contact)
        return contact

    def contacts(self) -> List[Contact]:
        return self.keystore.load_contacts()

    def find_contact_index(self, name: str) -> int:
        """
        Return the index of the first contact with this name.

        Raises:
            InvalidRecipientError: If no contact has the name
        """
        for index, contact in enumerate(self.contacts()):
            if contact.name == name:
                return index
        raise InvalidRecipientError(f"No contact named {name!r}", {"name": name})

    # Messages

    def encrypt_for(self, contact_index: int, plaintext: str) -> str:
        """
        Seal a text message for a contact.

        Args:
            contact_index: Position of the contact in the contact list
            plaintext: Message text

        Returns:
            Token text

        Raises:
            NoIdentityError: If no local keypair exists
            InvalidRecipientError: If the index is out of range or the
                contact's key is not a usable 32-byte base64 key
            CryptoError: If the message cannot be encoded as UTF-8
        """
        keypair = self.identity()
        contacts = self.contacts()

        if (
            isinstance(contact_index, bool)
            or not isinstance(contact_index, int)
            or not 0 <= contact_index < len(contacts)
        ):
            raise InvalidRecipientError(
                "Select a recipient first",
                {"index": contact_index, "contacts": len(contacts)},
            )

        contact = contacts[contact_index]
        recipient_key = _contact_key_bytes(contact)

        try:
            payload = plaintext.encode("utf-8")
        except UnicodeEncodeError as e:
            raise CryptoError(
                ErrorCode.E101_ENCRYPTION_FAILED,
                "Message is not valid Unicode text",
                {"position": e.start},
            ) from e

        try:
            nonce, ciphertext = crypto.seal(payload, recipient_key, keypair.private_key)
        except CryptoError as e:
            if e.code != ErrorCode.E103_INVALID_KEY:
                raise
            raise InvalidRecipientError(
                f"Public key of {contact.name!r} cannot be used for encryption",
                {"name": contact.name},
            ) from e

        token = envelope.encode(keypair.public_key, nonce, ciphertext)
        logger.info(f"Encrypted {len(ciphertext)} bytes for {contact.name}")
        return token

    def encrypt_for_name(self, name: str, plaintext: str) -> str:
        """Seal a message for the first contact with the given name."""
        return self.encrypt_for(self.find_contact_index(name), plaintext)

    def decrypt_token(self, token: str) -> str:
        """
        Open a token addressed to the local identity.

        Args:
            token: Token text; surrounding whitespace is ignored

        Returns:
            Message text

        Raises:
            NoIdentityError: If no local keypair exists
            MalformedEnvelopeError: If the token does not parse
            DecryptionFailedError: If the token fails authentication
        """
        keypair = self.identity()
        sealed = envelope.decode(token.strip() if isinstance(token, str) else token)

        plaintext = crypto.open_sealed(
            sealed.ciphertext, sealed.nonce, sealed.sender_public_key, keypair.private_key
        )
        try:
            text = plaintext.decode("utf-8")
        except UnicodeDecodeError:
            raise DecryptionFailedError() from None

        logger.info(
            f"Decrypted message from {crypto.generate_fingerprint(sealed.sender_public_key)}"
        )
        return text

    def sender_of(self, token: str) -> Optional[Contact]:
        """
        Return the first contact whose key matches the token's sender key.

        The sender field is not authenticated until the token is opened, so
        use this only to label a token that decrypt_token() accepted.
        """
        sealed = envelope.decode(token.strip())
        for contact in self.contacts():
            try:
                if from_base64(contact.public_key) == sealed.sender_public_key:
                    return contact
            except ValueError:
                continue
        return None

    # Outcome forms

    def encrypt_result(self, contact_index: int, plaintext: str) -> Outcome[str]:
        try:
            return Outcome(self.encrypt_for(contact_index, plaintext))
        except CipherslipError as e:
            return Outcome(error=e)

    def decrypt_result(self, token: str) -> Outcome[str]:
        try:
            return Outcome(self.decrypt_token(token))
        except CipherslipError as e:
            return Outcome(error=e)


def _contact_key_bytes(contact: Contact) -> bytes:
    try:
        key = from_base64(contact.public_key)
    except ValueError:
        key = b""

    if len(key) != KEY_SIZE:
        raise InvalidRecipientError(
            f"Public key of {contact.name!r} is not a valid {KEY_SIZE}-byte key",
            {"name": contact.name},
        )
    return key
