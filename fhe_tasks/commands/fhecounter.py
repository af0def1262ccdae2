"""FHECounter tasks: deploy, encrypt an increment, apply it, and decrypt the count."""
from __future__ import annotations

import argparse
import logging

from ..contracts.facades import FheCounter
from ..fhevm.decrypt import setup_user_decrypt
from ..helpers.input_codec import dump_encrypted_input, load_encrypted_input
from . import common
from .contract import add_deploy_arguments, deploy_and_record

logger = logging.getLogger(__name__)


def cmd_deploy_fhe_counter(args: argparse.Namespace) -> int:
    deploy_and_record(FheCounter.CONTRACT_NAME, args)
    return 0


def cmd_increment_fhe_counter(args: argparse.Namespace) -> int:
    wallet = common.wallet(args)
    address = common.contract_address(args)
    config = common.testnet_config(args)
    instance = common.fhevm_instance(args, config)
    logger.info("Encrypting...")
    bundle = instance.create_encrypted_input(address, wallet.address).add32(args.input).encrypt()
    logger.info("Input encrypted")
    dump_encrypted_input(bundle, args.input_file)
    logger.info("Encrypted input and ZK proof written to: %s", args.input_file)
    return 0


def _call_counter(args: argparse.Namespace, fn: str) -> int:
    wallet = common.wallet(args)
    address = common.contract_address(args)
    config = common.testnet_config(args)
    logger.info("Loading encrypted input and zkproof")
    bundle = load_encrypted_input(args.input_file)
    w3 = common.connect(config)
    counter = common.attach(FheCounter, w3, wallet, address)
    logger.info("Calling %s on contract", fn)
    getattr(counter, fn)(bundle.handles[0], bundle.input_proof)
    return 0


def cmd_call_increment(args: argparse.Namespace) -> int:
    return _call_counter(args, "increment")


def cmd_call_decrement(args: argparse.Namespace) -> int:
    return _call_counter(args, "decrement")


def cmd_decrypt_fhe_counter(args: argparse.Namespace) -> int:
    wallet = common.wallet(args)
    address = common.contract_address(args)
    config = common.testnet_config(args)
    w3 = common.connect(config)
    instance = common.fhevm_instance(args, config, w3)
    counter = common.attach(FheCounter, w3, wallet, address)
    logger.info("Calling getCount on contract to get ciphertext handle")
    handle = counter.get_count()
    logger.info("Requesting decryption...")
    count = setup_user_decrypt(instance, wallet, handle, address)
    logger.info("Decrypted count: %s", count)
    return 0


def register(sub: argparse._SubParsersAction) -> None:
    p = sub.add_parser("task:deployFheCounter", help="Deploy the FHECounter contract")
    add_deploy_arguments(p)
    p.set_defaults(func=cmd_deploy_fhe_counter)

    p = sub.add_parser("task:incrementFheCounter", help="Encrypt an increment (euint32) for FHECounter")
    p.add_argument("--input", type=int, required=True, help="Amount to increment")
    common.add_input_file(p, write=True)
    common.add_config_file(p)
    common.add_address_file(p)
    common.add_key_file(p, "Encrypted key to derive user address from")
    p.set_defaults(func=cmd_increment_fhe_counter)

    for name, func, what in (
        ("task:callIncrementFheCounter", cmd_call_increment, "increment"),
        ("task:callDecrementFheCounter", cmd_call_decrement, "decrement"),
    ):
        p = sub.add_parser(name, help=f"Call {what} on FHECounter with an encrypted input file")
        common.add_input_file(p)
        common.add_config_file(p)
        common.add_address_file(p)
        common.add_key_file(p)
        p.set_defaults(func=func)

    p = sub.add_parser("task:decryptFheCounter", help="User-decrypt the current count")
    common.add_config_file(p)
    common.add_address_file(p)
    common.add_key_file(p, "Encrypted key to derive user address from")
    p.set_defaults(func=cmd_decrypt_fhe_counter)
