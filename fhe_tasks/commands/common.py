"""
Steps shared by the task commands: argument declarations and the
load-wallet / load-config / connect sequence each task walks through.
"""
from __future__ import annotations

import argparse
import logging
from typing import Any

from eth_account.signers.local import LocalAccount
from web3 import Web3

from ..config.abis import ABIS_BY_CONTRACT
from ..config.testnet import TestnetConfig, load_testnet_config
from ..contracts.clients import Web3ContractClient
from ..fhevm.factory import create_instance, load_backend
from ..fhevm.relayer import RelayerFhevm
from ..helpers.files import read_address_file
from ..helpers.web3_setup import build_w3, require_connection
from ..setup.wallet import load_wallet

logger = logging.getLogger(__name__)


def add_key_file(p: argparse.ArgumentParser, help: str = "Encrypted key to sign transactions") -> None:
    p.add_argument("--key-file", dest="key_file", required=True, help=help)


def add_config_file(p: argparse.ArgumentParser) -> None:
    p.add_argument("--config-file", dest="config_file", required=True, help="JSON file to read testnet config from")


def add_address_file(p: argparse.ArgumentParser, write: bool = False) -> None:
    if write:
        help = "File to write address of deployed contract to"
    else:
        help = "File to read address of deployed contract from"
    p.add_argument("--address-file", dest="address_file", required=True, help=help)


def add_input_file(p: argparse.ArgumentParser, write: bool = False) -> None:
    if write:
        help = "File to write encrypted input and zkproof to"
    else:
        help = "File to read encrypted input and zkproof from"
    p.add_argument("--input-file", dest="input_file", required=True, help=help)


def wallet(args: argparse.Namespace) -> LocalAccount:
    logger.info("Loading wallet")
    return load_wallet(args.key_file)


def contract_address(args: argparse.Namespace) -> str:
    logger.info("Loading contract address")
    return read_address_file(args.address_file)


def testnet_config(args: argparse.Namespace) -> TestnetConfig:
    logger.info("Loading testnet config")
    return load_testnet_config(args.config_file)


def connect(config: TestnetConfig, what: str = "wallet") -> Web3:
    logger.info("Connecting %s", what)
    return require_connection(build_w3(config.json_rpc_url))


def fhevm_instance(args: argparse.Namespace, config: TestnetConfig, w3: Web3 | None = None) -> RelayerFhevm:
    logger.info("Instantiating fhevm instance")
    if w3 is None and config.chain_id is None:
        w3 = build_w3(config.json_rpc_url)
    backend = load_backend(getattr(args, "fhe_backend", None))
    return create_instance(config, backend=backend, w3=w3)


def attach(facade_cls: type, w3: Web3, account: LocalAccount | None, address: str) -> Any:
    """Facade over the deployed contract at ``address``."""
    logger.info("Connecting to contract")
    abi = ABIS_BY_CONTRACT[facade_cls.CONTRACT_NAME]
    return facade_cls(Web3ContractClient(w3, account, address, abi))
