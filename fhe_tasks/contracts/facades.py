"""
Typed Python views of the example contracts, over any ContractClient.
"""
from __future__ import annotations

from typing import Any

from ..fhevm.types import handle_to_bytes
from ..helpers.transactions import ReceiptSummary
from .clients import ContractClient


def _handle(value: Any) -> bytes:
    return handle_to_bytes(bytes(value) if isinstance(value, (bytes, bytearray)) else value)


class _Facade:
    def __init__(self, client: ContractClient):
        self.client = client

    @property
    def address(self) -> str:
        return self.client.address


class FheCounter(_Facade):
    CONTRACT_NAME = "FHECounter"

    def get_count(self) -> bytes:
        return _handle(self.client.call("getCount"))

    def increment(self, handle: bytes, input_proof: bytes) -> ReceiptSummary:
        return self.client.transact("increment", _handle(handle), bytes(input_proof))

    def decrement(self, handle: bytes, input_proof: bytes) -> ReceiptSummary:
        return self.client.transact("decrement", _handle(handle), bytes(input_proof))


class SimpleStore(_Facade):
    """The ``Test`` contract from Simple.sol."""

    CONTRACT_NAME = "Test"

    def encrypted_simple_value(self) -> bytes:
        return _handle(self.client.call("encryptedSimpleValue"))

    def encrypted_sum(self) -> bytes:
        return _handle(self.client.call("encryptedSum"))

    def store_encrypted_simple_value(self, handle: bytes, input_proof: bytes) -> ReceiptSummary:
        return self.client.transact("storeEncryptedSimpleValue", _handle(handle), bytes(input_proof))

    def store_encrypted_sum(self, handle_a: bytes, handle_b: bytes, input_proof: bytes) -> ReceiptSummary:
        return self.client.transact("storeEncryptedSum", _handle(handle_a), _handle(handle_b), bytes(input_proof))


class EncryptedVoting(_Facade):
    CONTRACT_NAME = "EncryptedVoting"

    def question(self) -> str:
        return self.client.call("question")

    def is_valid_vote(self, handle: bytes, input_proof: bytes) -> ReceiptSummary:
        return self.client.transact("isValidVote", _handle(handle), bytes(input_proof))

    def vote_is_valid(self) -> bytes:
        return _handle(self.client.call("voteIsValid"))

    def cast_vote(self, handle: bytes, input_proof: bytes) -> ReceiptSummary:
        return self.client.transact("castVote", _handle(handle), bytes(input_proof))

    def total_votes(self) -> int:
        return int(self.client.call("totalVotes"))

    def finalize(self) -> ReceiptSummary:
        return self.client.transact("finalize")

    def winning(self) -> tuple[bytes, bytes]:
        option, tally = self.client.call("winning")
        return _handle(option), _handle(tally)
