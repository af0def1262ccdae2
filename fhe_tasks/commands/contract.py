"""Contract deployment tasks."""
from __future__ import annotations

import argparse
import logging
from typing import Any

from ..helpers.artifacts import load_artifact
from ..helpers.files import write_address_file
from ..helpers.transactions import ReceiptSummary, deploy_contract
from . import common

logger = logging.getLogger(__name__)


def deploy_and_record(contract_name: str, args: argparse.Namespace, *extra_ctor_args: Any) -> ReceiptSummary:
    """Deploy ``contract_name`` against the host contracts in the config and write its address file."""
    wallet = common.wallet(args)
    config = common.testnet_config(args)
    w3 = common.connect(config)
    bytecode, abi = load_artifact(contract_name, getattr(args, "artifacts_dir", None))

    logger.info("Deploying contract")
    receipt = deploy_contract(w3, wallet, abi, bytecode, *config.host_contracts(), *extra_ctor_args)
    logger.info("Contract deployed at block: %s", receipt.block_number)
    logger.info("Contract address: %s", receipt.contract_address)
    write_address_file(args.address_file, receipt.contract_address)
    logger.info("Contract address written to file: %s", args.address_file)
    return receipt


def add_deploy_arguments(p: argparse.ArgumentParser) -> None:
    common.add_config_file(p)
    common.add_address_file(p, write=True)
    common.add_key_file(p)
    p.add_argument(
        "--artifacts-dir",
        dest="artifacts_dir",
        help="Hardhat artifacts directory holding the compiled contracts (default ./artifacts)",
    )


def cmd_deploy_test(args: argparse.Namespace) -> int:
    deploy_and_record("Test", args)
    return 0


def register(sub: argparse._SubParsersAction) -> None:
    p = sub.add_parser("task:deployTest", help="Deploy the Test contract from Simple.sol")
    add_deploy_arguments(p)
    p.set_defaults(func=cmd_deploy_test)
