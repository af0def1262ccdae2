"""
Contract clients: the one seam between the facades and a chain.

A client exposes ``address``, ``call(fn, *args)`` for views and
``transact(fn, *args)`` for state changes. The web3 client signs locally and
waits for the receipt; the mock client (mock_chain.py) executes the simulated
contract in process.
"""
from __future__ import annotations

import logging
from typing import Any, Protocol

from eth_account.signers.local import LocalAccount
from eth_utils import to_checksum_address
from web3 import Web3

from ..helpers.transactions import TX_TIMEOUT, ReceiptSummary, send_transaction

logger = logging.getLogger(__name__)


class ContractClient(Protocol):
    address: str

    def call(self, fn: str, *args: Any) -> Any:
        ...

    def transact(self, fn: str, *args: Any) -> ReceiptSummary:
        ...


class Web3ContractClient:
    def __init__(
        self,
        w3: Web3,
        account: LocalAccount | None,
        address: str,
        abi: list[dict[str, Any]],
        timeout: int = TX_TIMEOUT,
    ):
        self.w3 = w3
        self.account = account
        self.address = to_checksum_address(address)
        self.contract = w3.eth.contract(address=self.address, abi=abi)
        self.timeout = timeout

    def call(self, fn: str, *args: Any) -> Any:
        tx = {"from": self.account.address} if self.account is not None else {}
        return self.contract.functions[fn](*args).call(tx)

    def transact(self, fn: str, *args: Any) -> ReceiptSummary:
        if self.account is None:
            raise RuntimeError(f"cannot send {fn}: no wallet connected")
        logger.debug("%s.%s(%d args)", self.address, fn, len(args))
        return send_transaction(self.w3, self.account, self.contract.functions[fn](*args), timeout=self.timeout)
