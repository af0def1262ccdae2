"""Wallet tasks: create, import and inspect the encrypted key file."""
from __future__ import annotations

import argparse
import getpass
import logging
import sys

from ..setup.wallet import create_account, import_account, load_wallet
from .common import add_key_file

logger = logging.getLogger(__name__)

PRIVATE_KEY_WARNING = (
    "Continuing will print your private key to the terminal (Enter to continue, Ctrl+C to exit)..."
)


def cmd_account_create(args: argparse.Namespace) -> int:
    create_account(args.key_file)
    return 0


def cmd_account_import(args: argparse.Namespace) -> int:
    address = import_account(args.key_file)
    logger.info("Address: %s", address)
    return 0


def cmd_account_print_address(args: argparse.Namespace) -> int:
    wallet = load_wallet(args.key_file)
    logger.info("Address: %s", wallet.address)
    return 0


def cmd_account_print_private_key(args: argparse.Namespace) -> int:
    wallet = load_wallet(args.key_file)
    if not args.yes:
        if not sys.stdin.isatty():
            print("Refusing to print private key without confirmation (pass --yes)", file=sys.stderr)
            return 2
        getpass.getpass(PRIVATE_KEY_WARNING)
    logger.info("Private key: 0x%s", bytes(wallet.key).hex())
    return 0


def register(sub: argparse._SubParsersAction) -> None:
    p = sub.add_parser("task:accountCreate", help="Generate a random account and store it encrypted")
    add_key_file(p, "File to save encrypted key in")
    p.set_defaults(func=cmd_account_create)

    p = sub.add_parser("task:accountImport", help="Encrypt the key in PRIVATE_KEY into a key file")
    add_key_file(p, "File to save encrypted key in")
    p.set_defaults(func=cmd_account_import)

    p = sub.add_parser("task:accountPrintAddress", help="Show the address of an encrypted key file")
    add_key_file(p, "File to read encrypted key from")
    p.set_defaults(func=cmd_account_print_address)

    p = sub.add_parser("task:accountPrintPrivateKey", help="Decrypt a key file and print the private key")
    add_key_file(p, "File to read encrypted key from")
    p.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")
    p.set_defaults(func=cmd_account_print_private_key)
