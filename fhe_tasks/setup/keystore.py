#!/usr/bin/env python3
from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_utils import to_checksum_address


def normalize_privkey_hex(pk: str) -> str:
    if not isinstance(pk, str):
        raise ValueError("private key must be a hex string")
    pk = pk.strip()
    if pk.startswith(("0x", "0X")):
        pk = pk[2:]
    if len(pk) != 64:
        raise ValueError("private key hex must be 64 characters (32 bytes)")
    int(pk, 16)  # validate hex
    return "0x" + pk.lower()


def encrypt_private_key(private_key_hex: str, password: str) -> tuple[dict[str, Any], str]:
    """Encrypt a private key into a keystore JSON and return (keystore, checksum address)."""
    priv = normalize_privkey_hex(private_key_hex)
    acct: LocalAccount = Account.from_key(priv)
    keystore: dict[str, Any] = Account.encrypt(priv, password)
    address = to_checksum_address(acct.address)
    return keystore, address


def decrypt_keystore(keystore_json: dict[str, Any], password: str) -> str:
    """Decrypt a keystore JSON and return the 0x-prefixed private key hex string.

    Raises ValueError when the password does not match (MAC mismatch).
    """
    key_bytes = Account.decrypt(keystore_json, password)
    # Ensure plain bytes before hex() to avoid leading '0x' from HexBytes.hex()
    return "0x" + bytes(key_bytes).hex()


def write_json_atomic(path: Path, data: dict[str, Any]) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_fd, tmp_path = tempfile.mkstemp(prefix="keystore_", suffix=".tmp", dir=str(path.parent))
    try:
        with os.fdopen(tmp_fd, "w") as f:
            json.dump(data, f, indent=2)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)


def read_json(path: Path) -> dict[str, Any]:
    with open(path) as f:
        return json.load(f)


def write_keystore(path: Path, keystore_json: dict[str, Any]) -> Path:
    """Write a keystore to exactly ``path`` (the --key-file given by the operator)."""
    path = Path(path)
    write_json_atomic(path, keystore_json)
    return path


def read_keystore(path: Path) -> dict[str, Any]:
    return read_json(Path(path))


def keystore_address(keystore_json: dict[str, Any]) -> str | None:
    """Address recorded in the keystore (unencrypted field), if present."""
    addr = keystore_json.get("address")
    if not addr:
        return None
    if not str(addr).startswith("0x"):
        addr = "0x" + str(addr)
    return to_checksum_address(addr)
