"""
Cipherslip - Command line front end.

Created by orpheus497

Drives the Session command interface from a terminal. Tokens and public
keys are printed as plain text so they can be copied, or rendered as QR
codes when the optional QR dependencies are installed.
"""

import argparse
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from . import __version__, qr_code
from .config import Config
from .constants import (
    CONFIG_FILENAME,
    LOG_BACKUP_COUNT,
    LOG_DATE_FORMAT,
    LOG_FILENAME,
    LOG_FORMAT,
    LOG_MAX_BYTES,
    LOGS_DIR,
    STORAGE_BACKEND_MEMORY,
)
from .crypto import generate_fingerprint
from .errors import CipherslipError, IdentityExistsError
from .session import Session
from .storage import JsonFileStore, KeyValueStore, MemoryStore
from .utils import from_base64, is_valid_public_key_text, resolve_data_dir, truncate_string

logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)


def setup_logging(config: Config, data_dir: Path, debug: bool = False) -> None:
    """Configure the root logger from the logging section of the config."""
    level = logging.DEBUG if debug else getattr(logging, config.get("logging", "level"))
    root = logging.getLogger()
    root.setLevel(level)

    for handler in list(root.handlers):
        if getattr(handler, "_cipherslip", False):
            root.removeHandler(handler)
            handler.close()

    if config.get("logging", "console_logging"):
        handler = RichHandler(console=err_console, show_path=debug, log_time_format=LOG_DATE_FORMAT)
        handler.setLevel(level)
        handler._cipherslip = True
        root.addHandler(handler)

    if config.get("logging", "file_logging"):
        logs_dir = data_dir / LOGS_DIR
        logs_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            logs_dir / LOG_FILENAME,
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
        file_handler.setLevel(level)
        file_handler._cipherslip = True
        root.addHandler(file_handler)


def build_store(config: Config, data_dir: Path) -> KeyValueStore:
    """Create the persistence backend named in the config."""
    if config.get("storage", "backend") == STORAGE_BACKEND_MEMORY:
        return MemoryStore()
    return JsonFileStore(data_dir)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cipherslip",
        description="Cipherslip - encrypted messages as copy-and-paste tokens",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  cipherslip keygen                          # Create your keypair
  cipherslip whoami                          # Show the public key to share
  cipherslip add-contact bob <public key>    # Save a contact
  cipherslip encrypt --name bob "hello"      # Print a token for bob
  cipherslip decrypt <token>                 # Read a token sent to you

Created by orpheus497
        """,
    )

    parser.add_argument("--version", action="version", version=f"Cipherslip {__version__}")
    parser.add_argument(
        "--data-dir",
        type=str,
        default=None,
        help="Directory holding identity, contacts and config (default: ~/.cipherslip)",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    keygen = subparsers.add_parser("keygen", help="Generate your keypair")
    keygen.add_argument(
        "--force",
        action="store_true",
        help="Replace an existing keypair (tokens sent to the old key become unreadable)",
    )

    whoami = subparsers.add_parser("whoami", help="Show your public key and fingerprint")
    _add_qr_output_arguments(whoami)

    add_contact = subparsers.add_parser("add-contact", help="Add a contact")
    add_contact.add_argument("name", help="Contact name")
    add_contact.add_argument("public_key", nargs="?", default=None, help="Contact's public key")
    add_contact.add_argument(
        "--qr-image", type=Path, default=None, help="Read the public key from a QR code image"
    )

    subparsers.add_parser("contacts", help="List contacts")

    encrypt = subparsers.add_parser("encrypt", help="Encrypt a message for a contact")
    recipient = encrypt.add_mutually_exclusive_group(required=True)
    recipient.add_argument("--to", type=int, dest="index", help="Contact index (see 'contacts')")
    recipient.add_argument("--name", help="Contact name")
    encrypt.add_argument("message", nargs="?", default=None, help="Message (default: stdin)")
    _add_qr_output_arguments(encrypt)

    decrypt = subparsers.add_parser("decrypt", help="Decrypt a token sent to you")
    decrypt.add_argument("token", nargs="?", default=None, help="Token (default: stdin)")
    decrypt.add_argument(
        "--qr-image", type=Path, default=None, help="Read the token from a QR code image"
    )

    return parser


def _add_qr_output_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--qr", action="store_true", help="Also print a QR code")
    parser.add_argument("--qr-png", type=Path, default=None, help="Save a QR code PNG")


def _key_fingerprint(public_key_text: str) -> Optional[str]:
    """Fingerprint of a contact key, or None if the key is unusable."""
    if not is_valid_public_key_text(public_key_text):
        return None
    return generate_fingerprint(from_base64(public_key_text))


def _read_stdin() -> str:
    if sys.stdin is None or sys.stdin.isatty():
        return ""
    return sys.stdin.read()


def _emit(text: str, args: argparse.Namespace, config: Config) -> None:
    """Print text plainly, plus any QR output requested on the command line."""
    console.print(text, soft_wrap=True, markup=False, highlight=False)

    if not (args.qr or args.qr_png):
        return

    qr = qr_code.generate_qr_code(
        text,
        error_correction=config.get("qr", "error_correction"),
        box_size=config.get("qr", "box_size"),
        border=config.get("qr", "border"),
    )
    if args.qr:
        console.print(qr_code.display_qr_terminal(qr), markup=False, highlight=False)
    if args.qr_png:
        qr_code.export_qr_png(qr, args.qr_png)
        err_console.print(f"QR code saved to {args.qr_png}")


def cmd_keygen(session: Session, args: argparse.Namespace, config: Config) -> int:
    try:
        keypair = session.generate_identity(overwrite=args.force)
    except IdentityExistsError:
        err_console.print(
            "[yellow]A keypair already exists.[/yellow] Use --force to replace it; "
            "messages sent to the old key will no longer decrypt."
        )
        return 1

    err_console.print(f"Keypair generated. Fingerprint: {generate_fingerprint(keypair.public_key)}")
    console.print(keypair.public_key_text, markup=False, highlight=False)
    return 0


def cmd_whoami(session: Session, args: argparse.Namespace, config: Config) -> int:
    err_console.print(f"Fingerprint: {session.fingerprint()}")
    _emit(session.public_key_text(), args, config)
    return 0


def cmd_add_contact(session: Session, args: argparse.Namespace, config: Config) -> int:
    public_key = args.public_key
    if args.qr_image is not None:
        public_key = qr_code.scan_qr_code(args.qr_image)

    contact = session.add_contact(args.name, public_key or "")
    fingerprint = _key_fingerprint(contact.public_key) or "not a valid key"
    err_console.print(f"Added {contact.name} ({fingerprint})", markup=False)
    return 0


def cmd_contacts(session: Session, args: argparse.Namespace, config: Config) -> int:
    contacts = session.contacts()
    if not contacts:
        err_console.print("No contacts yet. Add one with 'cipherslip add-contact'.")
        return 0

    table = Table(title="Contacts")
    table.add_column("#", justify="right")
    table.add_column("Name")
    table.add_column("Public key")
    table.add_column("Fingerprint", no_wrap=True)

    for index, contact in enumerate(contacts):
        fingerprint = _key_fingerprint(contact.public_key) or "[red]invalid key[/red]"
        table.add_row(
            str(index), escape(contact.name), truncate_string(contact.public_key, 16), fingerprint
        )

    console.print(table)
    return 0


def cmd_encrypt(session: Session, args: argparse.Namespace, config: Config) -> int:
    message = args.message if args.message is not None else _read_stdin()
    message = message.strip()
    if not message:
        err_console.print("Type a message first")
        return 1

    if args.name is not None:
        token = session.encrypt_for_name(args.name, message)
    else:
        token = session.encrypt_for(args.index, message)

    _emit(token, args, config)
    return 0


def cmd_decrypt(session: Session, args: argparse.Namespace, config: Config) -> int:
    if args.qr_image is not None:
        token = qr_code.scan_qr_code(args.qr_image)
    else:
        token = args.token if args.token is not None else _read_stdin()

    if not token.strip():
        err_console.print("Paste an encrypted message first")
        return 1

    plaintext = session.decrypt_token(token)

    sender = session.sender_of(token)
    if sender is not None:
        err_console.print(f"From: {sender.name}", markup=False)
    console.print(plaintext, soft_wrap=True, markup=False, highlight=False)
    return 0


COMMANDS = {
    "keygen": cmd_keygen,
    "whoami": cmd_whoami,
    "add-contact": cmd_add_contact,
    "contacts": cmd_contacts,
    "encrypt": cmd_encrypt,
    "decrypt": cmd_decrypt,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the cipherslip command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    data_dir = resolve_data_dir(args.data_dir)

    try:
        config = Config(data_dir / CONFIG_FILENAME)
        setup_logging(config, data_dir, args.debug)
        session = Session(build_store(config, data_dir))
        return COMMANDS[args.command](session, args, config)
    except CipherslipError as e:
        logger.debug(f"Command {args.command} failed: {e.to_dict()}")
        err_console.print(f"[red]Error:[/red] {escape(e.message)}", highlight=False)
        return 1


if __name__ == "__main__":
    sys.exit(main())
