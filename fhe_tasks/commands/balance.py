from __future__ import annotations

import argparse
import logging

from web3 import Web3

from ..config.network import MIN_BALANCE_WEI
from ..helpers.transactions import get_balance_wei
from . import common

logger = logging.getLogger(__name__)


def cmd_get_balance(args: argparse.Namespace) -> int:
    wallet = common.wallet(args)
    config = common.testnet_config(args)
    w3 = common.connect(config)
    balance = get_balance_wei(w3, wallet.address)
    logger.info("Balance of %s: %s ETH (%s wei)", wallet.address, Web3.from_wei(balance, "ether"), balance)
    if balance < MIN_BALANCE_WEI:
        logger.error(
            "Balance below %s gwei; fund %s before deploying or sending transactions",
            MIN_BALANCE_WEI // 10**9,
            wallet.address,
        )
        return 1
    return 0


def register(sub: argparse._SubParsersAction) -> None:
    p = sub.add_parser("task:getBalance", help="Print the wallet balance; fails when it is too low to transact")
    common.add_key_file(p, "Encrypted key whose address is checked")
    common.add_config_file(p)
    p.set_defaults(func=cmd_get_balance)
