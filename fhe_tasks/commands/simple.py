"""Tasks for the Test contract: encrypt, store and publicly decrypt uint8 values."""
from __future__ import annotations

import argparse
import logging

from ..contracts.facades import SimpleStore
from ..fhevm.decrypt import public_decrypt_value
from ..fhevm.types import handle_to_hex
from ..helpers.input_codec import dump_encrypted_input, load_encrypted_input
from . import common

logger = logging.getLogger(__name__)


def _uint_pair(text: str) -> tuple[int, int]:
    parts = [s.strip() for s in text.split(",")]
    if len(parts) != 2:
        raise argparse.ArgumentTypeError("expected two comma-separated integers, e.g. 4,13")
    try:
        return int(parts[0]), int(parts[1])
    except ValueError:
        raise argparse.ArgumentTypeError(f"not integers: {text!r}") from None


def _encrypt(args: argparse.Namespace, *values: int) -> None:
    wallet = common.wallet(args)
    address = common.contract_address(args)
    config = common.testnet_config(args)
    instance = common.fhevm_instance(args, config)
    logger.info("Encrypting...")
    builder = instance.create_encrypted_input(address, wallet.address)
    for value in values:
        builder.add8(value)
    bundle = builder.encrypt()
    logger.info("Input encrypted")
    dump_encrypted_input(bundle, args.input_file)
    logger.info("Encrypted input and ZK proof written to: %s", args.input_file)


def cmd_encrypt_uint8(args: argparse.Namespace) -> int:
    _encrypt(args, args.input)
    return 0


def cmd_encrypt_sum(args: argparse.Namespace) -> int:
    _encrypt(args, *args.inputs)
    return 0


def _load_store(args: argparse.Namespace):
    wallet = common.wallet(args)
    address = common.contract_address(args)
    config = common.testnet_config(args)
    logger.info("Loading encrypted input and zkproof")
    bundle = load_encrypted_input(args.input_file)
    w3 = common.connect(config)
    return common.attach(SimpleStore, w3, wallet, address), bundle


def cmd_store_encrypted_uint8(args: argparse.Namespace) -> int:
    store, bundle = _load_store(args)
    logger.info("Calling storeEncryptedSimpleValue on contract")
    store.store_encrypted_simple_value(bundle.handles[0], bundle.input_proof)
    return 0


def cmd_store_encrypted_sum(args: argparse.Namespace) -> int:
    store, bundle = _load_store(args)
    if len(bundle.handles) < 2:
        raise ValueError(f"{args.input_file} holds {len(bundle.handles)} handle(s); storeEncryptedSum needs 2")
    logger.info("Calling storeEncryptedSum on contract")
    store.store_encrypted_sum(bundle.handles[0], bundle.handles[1], bundle.input_proof)
    return 0


def _public_decrypt(args: argparse.Namespace, getter: str) -> int:
    address = common.contract_address(args)
    config = common.testnet_config(args)
    w3 = common.connect(config, "provider")
    instance = common.fhevm_instance(args, config, w3)
    store = common.attach(SimpleStore, w3, None, address)
    logger.info("Getting ciphertext handle")
    handle = getattr(store, getter)()
    logger.info("Requesting decryption...")
    value = public_decrypt_value(instance, handle)
    logger.info("Result:")
    print(handle_to_hex(handle), value)
    return 0


def cmd_public_decrypt_simple(args: argparse.Namespace) -> int:
    return _public_decrypt(args, "encrypted_simple_value")


def cmd_public_decrypt_sum(args: argparse.Namespace) -> int:
    return _public_decrypt(args, "encrypted_sum")


def register(sub: argparse._SubParsersAction) -> None:
    p = sub.add_parser("task:encryptUint8", help="Encrypt a uint8 for the Test contract")
    p.add_argument("--input", type=int, required=True, help="Input to encrypt")
    common.add_input_file(p, write=True)
    common.add_config_file(p)
    common.add_address_file(p)
    common.add_key_file(p, "Encrypted key to derive user address from")
    p.set_defaults(func=cmd_encrypt_uint8)

    p = sub.add_parser("task:encryptSum", help="Encrypt two uint8 summands in one bundle")
    p.add_argument("--inputs", type=_uint_pair, required=True, help="Two inputs to encrypt, e.g. 4,13")
    common.add_input_file(p, write=True)
    common.add_config_file(p)
    common.add_address_file(p)
    common.add_key_file(p, "Encrypted key to derive user address from")
    p.set_defaults(func=cmd_encrypt_sum)

    p = sub.add_parser("task:storeEncryptedUint8", help="Send an encrypted uint8 to storeEncryptedSimpleValue")
    common.add_input_file(p)
    common.add_config_file(p)
    common.add_address_file(p)
    common.add_key_file(p)
    p.set_defaults(func=cmd_store_encrypted_uint8)

    p = sub.add_parser("task:storeEncryptedSum", help="Send two encrypted uint8 values to storeEncryptedSum")
    common.add_input_file(p)
    common.add_config_file(p)
    common.add_address_file(p)
    common.add_key_file(p)
    p.set_defaults(func=cmd_store_encrypted_sum)

    p = sub.add_parser("task:publicDecryptionOfSimpleUint8", help="Publicly decrypt the stored uint8")
    common.add_config_file(p)
    common.add_address_file(p)
    p.set_defaults(func=cmd_public_decrypt_simple)

    p = sub.add_parser("task:publicDecryptionOfSum", help="Publicly decrypt the stored sum")
    common.add_config_file(p)
    common.add_address_file(p)
    p.set_defaults(func=cmd_public_decrypt_sum)
