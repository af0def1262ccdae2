"""
EIP-712 typed data for user-decryption grants.

The signed document binds an ephemeral public key to a list of contracts and a
validity window; the KMS only re-encrypts for a key that a user authorised
this way.
"""
from __future__ import annotations

import time
from collections.abc import Sequence
from typing import Any

from eth_account import Account
from eth_account.messages import encode_typed_data
from eth_account.signers.local import LocalAccount
from eth_utils import to_checksum_address

DOMAIN_NAME = "Decryption"
DOMAIN_VERSION = "1"
PRIMARY_TYPE = "UserDecryptRequestVerification"
DEFAULT_EXTRA_DATA = "0x00"

MAX_CONTRACT_ADDRESSES = 10
MAX_DURATION_DAYS = 365
SECONDS_PER_DAY = 86_400


class InvalidDecryptRequest(ValueError):
    pass


def _prefixed(hexstr: str) -> str:
    return hexstr if hexstr.startswith("0x") else "0x" + hexstr


def build_user_decrypt_typed_data(
    public_key: str,
    contract_addresses: Sequence[str],
    start_timestamp: int | str,
    duration_days: int | str,
    *,
    chain_id: int,
    verifying_contract: str,
    extra_data: str = DEFAULT_EXTRA_DATA,
) -> dict[str, Any]:
    """Compose the full EIP-712 structured-data dict for a user decrypt request."""
    return {
        "types": {
            "EIP712Domain": [
                {"name": "name", "type": "string"},
                {"name": "version", "type": "string"},
                {"name": "chainId", "type": "uint256"},
                {"name": "verifyingContract", "type": "address"},
            ],
            PRIMARY_TYPE: [
                {"name": "publicKey", "type": "bytes"},
                {"name": "contractAddresses", "type": "address[]"},
                {"name": "startTimestamp", "type": "uint256"},
                {"name": "durationDays", "type": "uint256"},
                {"name": "extraData", "type": "bytes"},
            ],
        },
        "domain": {
            "name": DOMAIN_NAME,
            "version": DOMAIN_VERSION,
            "chainId": int(chain_id),
            "verifyingContract": to_checksum_address(verifying_contract),
        },
        "primaryType": PRIMARY_TYPE,
        "message": {
            "publicKey": _prefixed(public_key),
            "contractAddresses": [to_checksum_address(a) for a in contract_addresses],
            "startTimestamp": int(start_timestamp),
            "durationDays": int(duration_days),
            "extraData": extra_data,
        },
    }


def sign_typed_data(account: LocalAccount, typed_data: dict[str, Any]) -> str:
    """Sign a full typed-data document; returns 0x-prefixed hex."""
    signed = account.sign_message(encode_typed_data(full_message=typed_data))
    return _prefixed(bytes(signed.signature).hex())


def recover_typed_data_signer(typed_data: dict[str, Any], signature: str) -> str:
    return to_checksum_address(
        Account.recover_message(encode_typed_data(full_message=typed_data), signature=_prefixed(signature))
    )


def validate_request(
    contract_addresses: Sequence[str],
    start_timestamp: int | str,
    duration_days: int | str,
    handle_contracts: Sequence[str] = (),
    now: int | None = None,
) -> None:
    """Client-side checks made before a user decrypt request leaves the machine."""
    if not contract_addresses:
        raise InvalidDecryptRequest("at least one contract address is required")
    if len(contract_addresses) > MAX_CONTRACT_ADDRESSES:
        raise InvalidDecryptRequest(
            f"too many contract addresses ({len(contract_addresses)} > {MAX_CONTRACT_ADDRESSES})"
        )
    listed = {to_checksum_address(a) for a in contract_addresses}
    for c in handle_contracts:
        if to_checksum_address(c) not in listed:
            raise InvalidDecryptRequest(f"handle contract {c} is not in the signed contract list")
    days = int(duration_days)
    if days <= 0 or days > MAX_DURATION_DAYS:
        raise InvalidDecryptRequest(f"durationDays must be in 1..{MAX_DURATION_DAYS}, got {days}")
    now = int(time.time()) if now is None else int(now)
    if int(start_timestamp) > now:
        raise InvalidDecryptRequest("startTimestamp is in the future")


def is_window_open(start_timestamp: int | str, duration_days: int | str, now: int | None = None) -> bool:
    now = int(time.time()) if now is None else int(now)
    start = int(start_timestamp)
    return start <= now < start + int(duration_days) * SECONDS_PER_DAY
