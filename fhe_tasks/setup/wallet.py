#!/usr/bin/env python3
from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_utils import to_checksum_address

from .credentials import PASSWORD_ENV, SecretProvider, resolve_secret
from .keystore import (
    decrypt_keystore,
    encrypt_private_key,
    keystore_address,
    read_keystore,
    write_keystore,
)

logger = logging.getLogger(__name__)

PRIVATE_KEY_ENV = "PRIVATE_KEY"


class MissingEnvironmentError(RuntimeError):
    """A required environment variable is not set."""


class WalletDecryptionError(ValueError):
    """The keystore could not be decrypted with the supplied password."""


def load_wallet(key_file: str | Path, providers: Iterable[SecretProvider] | None = None) -> LocalAccount:
    """Decrypt the keystore at ``key_file`` into a signing account.

    The password comes from the provider chain (WALLET_PASSWORD, then a
    prompt by default). A wrong password, or a key that does not match the
    address recorded in the keystore, raises WalletDecryptionError.
    """
    path = Path(key_file)
    keystore_json = read_keystore(path)
    recorded = keystore_address(keystore_json)
    if recorded:
        logger.debug("Keystore %s holds %s", path, recorded)
    password = resolve_secret(providers)
    try:
        priv_hex = decrypt_keystore(keystore_json, password)
    except ValueError as e:
        raise WalletDecryptionError(f"Could not decrypt {path}: {e}") from e
    account = Account.from_key(priv_hex)
    if recorded and account.address != recorded:
        raise WalletDecryptionError(f"{path} decrypts to {account.address}, but records {recorded}")
    return account


def _save(priv_hex: str, key_file: str | Path, providers: Iterable[SecretProvider] | None) -> str:
    password = resolve_secret(providers)
    keystore, address = encrypt_private_key(priv_hex, password)
    dest = write_keystore(Path(key_file), keystore)
    logger.info("Account saved to file: %s", dest)
    return address


def create_account(key_file: str | Path, providers: Iterable[SecretProvider] | None = None) -> str:
    """Generate a random account and store it encrypted; returns the address."""
    acct = Account.create()
    address = to_checksum_address(acct.address)
    logger.info("Account generated: %s", address)
    return _save("0x" + bytes(acct.key).hex(), key_file, providers)


def import_account(
    key_file: str | Path,
    providers: Iterable[SecretProvider] | None = None,
    private_key: str | None = None,
) -> str:
    """Store the key from PRIVATE_KEY (or ``private_key``) encrypted in ``key_file``."""
    priv_hex = private_key or os.getenv(PRIVATE_KEY_ENV)
    if not priv_hex:
        raise MissingEnvironmentError(
            f"Set {PRIVATE_KEY_ENV} env var to the private key to be imported. "
            f"It will be stored in {key_file} encrypted with the password stored in the env var "
            f"{PASSWORD_ENV} (if that env var is not set you will be prompted to supply a password)"
        )
    return _save(priv_hex, key_file, providers)
