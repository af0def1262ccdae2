"""
User and public decryption flows on top of any FhevmInstance.
"""
from __future__ import annotations

import logging
import time
from typing import Any

from eth_account.signers.local import LocalAccount
from eth_utils import to_checksum_address

from .base import DecryptionError, FhevmInstance
from .eip712 import sign_typed_data
from .types import HandleContractPair, handle_to_hex

logger = logging.getLogger(__name__)

DEFAULT_DURATION_DAYS = 10


def setup_user_decrypt(
    instance: FhevmInstance,
    account: LocalAccount,
    handle: bytes | str,
    contract_address: str,
    duration_days: int = DEFAULT_DURATION_DAYS,
    now: int | None = None,
) -> Any:
    """Run the full user-decrypt handshake for one handle and return its clear value.

    A fresh keypair is generated, the user signs an EIP-712 grant for
    ``contract_address`` valid from now for ``duration_days``, and the
    decryption service re-encrypts the value for that keypair.
    """
    handle_hex = handle_to_hex(handle)
    contract = to_checksum_address(contract_address)

    logger.info("Generating keypair...")
    keypair = instance.generate_keypair()

    pairs = [HandleContractPair(handle=handle_hex, contract_address=contract).to_json()]
    start_timestamp = int(time.time()) if now is None else int(now)
    contract_addresses = [contract]

    logger.info("Creating EIP712...")
    typed = instance.create_eip712(keypair.public_key, contract_addresses, start_timestamp, duration_days)

    logger.info("Sign typed data...")
    signature = sign_typed_data(account, typed)

    logger.info("User decrypt...")
    result = instance.user_decrypt(
        pairs,
        keypair.private_key,
        keypair.public_key,
        signature[2:],
        contract_addresses,
        account.address,
        start_timestamp,
        duration_days,
    )
    result = {k.lower(): v for k, v in result.items()}
    if handle_hex not in result:
        raise DecryptionError(f"no value returned for handle {handle_hex}")
    value = result[handle_hex]
    logger.info("Result: %s", value)
    return value


def public_decrypt_value(instance: FhevmInstance, handle: bytes | str) -> Any:
    handle_hex = handle_to_hex(handle)
    result = {k.lower(): v for k, v in instance.public_decrypt([handle_hex]).items()}
    if handle_hex not in result:
        raise DecryptionError(f"no value returned for handle {handle_hex}")
    return result[handle_hex]
