#!/usr/bin/env python3
"""
Transaction lifecycle shared by every task: build, estimate gas, sign with the
local account, broadcast, wait for inclusion, and summarise the receipt.

There is no retry layer. RPC errors propagate to the caller and end the task;
the operator re-runs it.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from eth_account.signers.local import LocalAccount
from eth_utils import to_checksum_address
from hexbytes import HexBytes
from web3 import Web3
from web3.contract.contract import ContractFunction

from ..config.network import (
    FALLBACK_GAS_LIMIT,
    GAS_LIMIT_BUFFER_DEN,
    GAS_LIMIT_BUFFER_NUM,
    TX_TIMEOUT,
)

logger = logging.getLogger(__name__)


class TransactionFailed(RuntimeError):
    """Transaction was mined but reverted (status != 1)."""

    def __init__(self, tx_hash: str, receipt: Any = None):
        self.tx_hash = tx_hash
        self.receipt = receipt
        super().__init__(f"Transaction {tx_hash} failed (status != 1)")


@dataclass(frozen=True)
class ReceiptSummary:
    tx_hash: str
    block_number: int
    status: int
    gas_used: int = 0
    contract_address: str | None = None


def _hex(value: Any) -> str:
    return HexBytes(value).to_0x_hex()


def summarize_receipt(receipt: Any) -> ReceiptSummary:
    """Pull the fields the tasks report out of a web3 receipt mapping."""
    contract_address = receipt.get("contractAddress")
    return ReceiptSummary(
        tx_hash=_hex(receipt["transactionHash"]),
        block_number=int(receipt["blockNumber"]),
        status=int(receipt.get("status", 0)),
        gas_used=int(receipt.get("gasUsed", 0)),
        contract_address=to_checksum_address(contract_address) if contract_address else None,
    )


def _with_gas(w3: Web3, tx: dict[str, Any]) -> dict[str, Any]:
    tx.pop("gas", None)
    try:
        est_gas = int(w3.eth.estimate_gas(tx))
        tx["gas"] = est_gas * GAS_LIMIT_BUFFER_NUM // GAS_LIMIT_BUFFER_DEN
    except Exception as err:  # estimation can fail on nodes without FHE precompile tracing
        logger.warning("estimate_gas failed, using %s fallback -> %s", FALLBACK_GAS_LIMIT, err)
        tx["gas"] = FALLBACK_GAS_LIMIT
    return tx


def _base_tx(w3: Web3, account: LocalAccount) -> dict[str, Any]:
    # build_transaction skips estimation when gas is already set
    return {
        "from": account.address,
        "nonce": w3.eth.get_transaction_count(account.address, "pending"),
        "chainId": w3.eth.chain_id,
        "gas": FALLBACK_GAS_LIMIT,
    }


def sign_and_send(w3: Web3, account: LocalAccount, tx: dict[str, Any], timeout: int = TX_TIMEOUT) -> ReceiptSummary:
    """Sign ``tx`` locally, broadcast it and block until it is mined."""
    signed = account.sign_transaction(tx)
    tx_hash = w3.eth.send_raw_transaction(signed.raw_transaction)
    logger.info("Transaction hash: %s", _hex(tx_hash))
    logger.info("Waiting for transaction to be included in block...")
    receipt = w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)
    summary = summarize_receipt(receipt)
    if summary.status != 1:
        raise TransactionFailed(summary.tx_hash, receipt)
    logger.info("Transaction receipt received. Block number: %s", summary.block_number)
    return summary


def send_transaction(w3: Web3, account: LocalAccount, fn: ContractFunction, timeout: int = TX_TIMEOUT) -> ReceiptSummary:
    """Submit a state-changing contract call."""
    tx = fn.build_transaction(_base_tx(w3, account))
    return sign_and_send(w3, account, _with_gas(w3, tx), timeout=timeout)


def deploy_contract(
    w3: Web3,
    account: LocalAccount,
    abi: list[dict[str, Any]],
    bytecode: str,
    *ctor_args: Any,
    timeout: int = TX_TIMEOUT,
) -> ReceiptSummary:
    """Deploy a contract and return the receipt summary (with contract_address)."""
    factory = w3.eth.contract(abi=abi, bytecode=bytecode)
    tx = factory.constructor(*ctor_args).build_transaction(_base_tx(w3, account))
    logger.info("Waiting for deployment...")
    summary = sign_and_send(w3, account, _with_gas(w3, tx), timeout=timeout)
    if not summary.contract_address:
        raise TransactionFailed(summary.tx_hash)
    return summary


def get_balance_wei(w3: Web3, address: str) -> int:
    return int(w3.eth.get_balance(to_checksum_address(address)))
