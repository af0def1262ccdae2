"""
In-process chain hosting Python versions of the example contracts.

Each simulated contract does what its Solidity counterpart does with the FHE
library, but against a MockFhevm: inputs go through ``verify_input``,
arithmetic through the mock coprocessor, and results are granted through the
mock ACL. Transactions get synthetic receipts with increasing block numbers.
"""
from __future__ import annotations

import copy
import logging
from typing import Any

from eth_utils import keccak, to_bytes, to_checksum_address

from ..fhevm.mock import AccessDenied, InputProofError, MockFhevm
from ..fhevm.types import ZERO_HANDLE, FheType
from ..helpers.transactions import ReceiptSummary

logger = logging.getLogger(__name__)

# hardhat's first default signer
DEFAULT_SENDER = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


class ContractReverted(RuntimeError):
    pass


class SimulatedContract:
    """Base for simulated contracts: maps ABI names to Python methods."""

    VIEWS: dict[str, str] = {}
    TRANSACTIONS: dict[str, str] = {}

    def __init__(self, fhevm: MockFhevm, address: str, acl: str, executor: str, kms_verifier: str, decryption_oracle: str):
        self.fhevm = fhevm
        self.address = address
        self.host_contracts = (acl, executor, kms_verifier, decryption_oracle)

    def _input(self, sender: str, handle: bytes, proof: bytes) -> bytes:
        return self.fhevm.verify_input(handle, proof, sender, self.address)

    def _allow_this(self, handle: bytes) -> None:
        self.fhevm.allow(handle, self.address)


class SimulatedFheCounter(SimulatedContract):
    VIEWS = {"getCount": "get_count"}
    TRANSACTIONS = {"increment": "increment", "decrement": "decrement"}

    def __init__(self, *args):
        super().__init__(*args)
        self.count = ZERO_HANDLE

    def get_count(self, sender: str) -> bytes:
        return self.count

    def increment(self, sender: str, input_euint32: bytes, input_proof: bytes) -> None:
        value = self._input(sender, input_euint32, input_proof)
        self.count = self.fhevm.add(self.count, value, FheType.EUINT32)
        self._allow_this(self.count)
        self.fhevm.allow(self.count, sender)

    def decrement(self, sender: str, input_euint32: bytes, input_proof: bytes) -> None:
        value = self._input(sender, input_euint32, input_proof)
        self.count = self.fhevm.sub(self.count, value, FheType.EUINT32)
        self._allow_this(self.count)
        self.fhevm.allow(self.count, sender)


class SimulatedSimpleStore(SimulatedContract):
    VIEWS = {"encryptedSimpleValue": "encrypted_simple_value", "encryptedSum": "encrypted_sum"}
    TRANSACTIONS = {"storeEncryptedSimpleValue": "store_simple_value", "storeEncryptedSum": "store_sum"}

    def __init__(self, *args):
        super().__init__(*args)
        self.simple_value = ZERO_HANDLE
        self.sum = ZERO_HANDLE

    def encrypted_simple_value(self, sender: str) -> bytes:
        return self.simple_value

    def encrypted_sum(self, sender: str) -> bytes:
        return self.sum

    def store_simple_value(self, sender: str, input_euint8: bytes, input_proof: bytes) -> None:
        self.simple_value = self._input(sender, input_euint8, input_proof)
        self._allow_this(self.simple_value)
        self.fhevm.make_publicly_decryptable(self.simple_value)

    def store_sum(self, sender: str, input_a: bytes, input_b: bytes, input_proof: bytes) -> None:
        a = self._input(sender, input_a, input_proof)
        b = self._input(sender, input_b, input_proof)
        self.sum = self.fhevm.add(a, b)
        self._allow_this(self.sum)
        self.fhevm.make_publicly_decryptable(self.sum)


class SimulatedEncryptedVoting(SimulatedContract):
    VIEWS = {
        "question": "get_question",
        "voteIsValid": "get_vote_is_valid",
        "totalVotes": "get_total_votes",
        "winning": "get_winning",
    }
    TRANSACTIONS = {"isValidVote": "is_valid_vote", "castVote": "cast_vote", "finalize": "finalize"}

    def __init__(self, *args):
        *host, question = args
        super().__init__(*host)
        self.question = str(question)
        self.vote_is_valid = ZERO_HANDLE
        self.total_votes = 0
        self.tallies = [ZERO_HANDLE, ZERO_HANDLE]
        self.winning_option = ZERO_HANDLE
        self.winning_tally = ZERO_HANDLE

    def get_question(self, sender: str) -> str:
        return self.question

    def get_vote_is_valid(self, sender: str) -> bytes:
        return self.vote_is_valid

    def get_total_votes(self, sender: str) -> int:
        return self.total_votes

    def get_winning(self, sender: str) -> tuple[bytes, bytes]:
        return self.winning_option, self.winning_tally

    def _valid(self, vote: bytes) -> bytes:
        fhe = self.fhevm
        return fhe.or_(fhe.eq(vote, 0), fhe.eq(vote, 1))

    def is_valid_vote(self, sender: str, vote: bytes, input_proof: bytes) -> None:
        v = self._input(sender, vote, input_proof)
        self.vote_is_valid = self._valid(v)
        self._allow_this(self.vote_is_valid)
        self.fhevm.allow(self.vote_is_valid, sender)

    def cast_vote(self, sender: str, vote: bytes, input_proof: bytes) -> None:
        fhe = self.fhevm
        v = self._input(sender, vote, input_proof)
        valid = self._valid(v)
        for option in (0, 1):
            counts = fhe.and_(valid, fhe.eq(v, option))
            increment = fhe.select(counts, 1, 0, FheType.EUINT16)
            self.tallies[option] = fhe.add(self.tallies[option], increment, FheType.EUINT16)
            self._allow_this(self.tallies[option])
        self.total_votes += 1

    def finalize(self, sender: str) -> None:
        fhe = self.fhevm
        one_wins = fhe.gt(self.tallies[1], self.tallies[0], FheType.EUINT16)
        self.winning_option = fhe.select(one_wins, 1, 0, FheType.EUINT8)
        self.winning_tally = fhe.select(one_wins, self.tallies[1], self.tallies[0], FheType.EUINT16)
        for handle in (self.winning_option, self.winning_tally):
            self._allow_this(handle)
            fhe.make_publicly_decryptable(handle)


SIMULATED_CONTRACTS: dict[str, type[SimulatedContract]] = {
    "FHECounter": SimulatedFheCounter,
    "Test": SimulatedSimpleStore,
    "EncryptedVoting": SimulatedEncryptedVoting,
}


class MockContractClient:
    """ContractClient bound to one simulated contract and one sender."""

    def __init__(self, chain: "MockChain", address: str, sender: str):
        self.chain = chain
        self.address = to_checksum_address(address)
        self.sender = to_checksum_address(sender)

    def call(self, fn: str, *args: Any) -> Any:
        return self.chain.call(self.address, fn, *args, sender=self.sender)

    def transact(self, fn: str, *args: Any) -> ReceiptSummary:
        return self.chain.transact(self.address, fn, *args, sender=self.sender)


class MockChain:
    def __init__(self, fhevm: MockFhevm | None = None, block_number: int = 0):
        self.fhevm = fhevm or MockFhevm()
        self.block_number = block_number
        self.contracts: dict[str, SimulatedContract] = {}
        self._nonces: dict[str, int] = {}

    @property
    def chain_id(self) -> int:
        return self.fhevm.chain_id

    def _next_nonce(self, sender: str) -> int:
        nonce = self._nonces.get(sender, 0)
        self._nonces[sender] = nonce + 1
        return nonce

    def _mine(self, sender: str, nonce: int, contract_address: str | None = None) -> ReceiptSummary:
        self.block_number += 1
        tx_hash = keccak(to_bytes(hexstr=sender) + nonce.to_bytes(8, "big") + self.block_number.to_bytes(8, "big"))
        return ReceiptSummary(
            tx_hash="0x" + tx_hash.hex(),
            block_number=self.block_number,
            status=1,
            contract_address=contract_address,
        )

    def deploy(self, contract_name: str, *ctor_args: Any, sender: str = DEFAULT_SENDER) -> ReceiptSummary:
        try:
            cls = SIMULATED_CONTRACTS[contract_name]
        except KeyError:
            raise ValueError(f"no simulated contract named {contract_name!r}") from None
        sender = to_checksum_address(sender)
        nonce = self._next_nonce(sender)
        address = to_checksum_address(keccak(to_bytes(hexstr=sender) + nonce.to_bytes(8, "big"))[12:])
        self.contracts[address] = cls(self.fhevm, address, *ctor_args)
        logger.debug("Deployed simulated %s at %s", contract_name, address)
        return self._mine(sender, nonce, contract_address=address)

    def _contract(self, address: str) -> SimulatedContract:
        try:
            return self.contracts[to_checksum_address(address)]
        except KeyError:
            raise ContractReverted(f"no contract at {address}") from None

    def call(self, address: str, fn: str, *args: Any, sender: str = DEFAULT_SENDER) -> Any:
        contract = self._contract(address)
        if fn not in contract.VIEWS:
            raise ValueError(f"{type(contract).__name__} has no view {fn!r}")
        return getattr(contract, contract.VIEWS[fn])(to_checksum_address(sender), *args)

    def transact(self, address: str, fn: str, *args: Any, sender: str = DEFAULT_SENDER) -> ReceiptSummary:
        contract = self._contract(address)
        if fn not in contract.TRANSACTIONS:
            raise ValueError(f"{type(contract).__name__} has no function {fn!r}")
        sender = to_checksum_address(sender)
        nonce = self._next_nonce(sender)
        args = tuple(bytes(a) if isinstance(a, (bytes, bytearray)) else a for a in args)
        # A revert leaves storage and ACL grants as they were before the call
        state = copy.deepcopy(vars(contract), {id(self.fhevm): self.fhevm})
        acl = self.fhevm.acl_snapshot()
        try:
            with self.fhevm.executing(contract.address):
                getattr(contract, contract.TRANSACTIONS[fn])(sender, *args)
        except (InputProofError, AccessDenied) as e:
            contract.__dict__ = state
            self.fhevm.restore_acl(acl)
            raise ContractReverted(f"{fn} reverted: {e}") from e
        finally:
            self.fhevm.end_transaction()
        return self._mine(sender, nonce)

    def client(self, address: str, sender: str = DEFAULT_SENDER) -> MockContractClient:
        self._contract(address)
        return MockContractClient(self, address, sender)
