"""
In-process stand-in for the relayer, coprocessors and KMS.

Ciphertexts are plain integers kept in a handle-indexed store, so the mock is
only as confidential as a dict. What it does reproduce faithfully is the
protocol surface the tasks depend on:

* input proofs are signed by a coprocessor key over (handles, user,
  contract, chain id) and rejected for any other pair;
* an access-control list decides who may compute on or decrypt a handle,
  with transient grants that last for one transaction;
* user decryption checks the EIP-712 grant signature and validity window;
* public decryption only works for handles marked publicly decryptable.

Simulated contracts (fhe_tasks.contracts.mock_chain) call the arithmetic
helpers here the same way Solidity contracts call the FHE library.
"""
from __future__ import annotations

import contextlib
import itertools
import logging
import os
import time
from collections.abc import Iterator, Sequence
from typing import Any

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_keys import keys
from eth_utils import keccak, to_bytes, to_checksum_address

from .base import DecryptionError, FhevmInstance
from .eip712 import (
    build_user_decrypt_typed_data,
    is_window_open,
    recover_typed_data_signer,
    validate_request,
)
from .relayer import assemble_input_proof
from .types import (
    COMPUTED_INDEX,
    HANDLE_SIZE,
    EncryptedInput,
    FheType,
    Keypair,
    build_handle,
    clear_value,
    handle_to_bytes,
    handle_to_hex,
    is_zero_handle,
)

logger = logging.getLogger(__name__)

# Defaults mirror a local hardhat node with the fhevm mock deployment
MOCK_CHAIN_ID = 31337
MOCK_GATEWAY_CHAIN_ID = 55815
MOCK_DECRYPTION_CONTRACT = "0xb6E160B1ff80D67Bfe90A85eE06Ce0A2613607D1"
SIGNATURE_SIZE = 65

Operand = bytes | str | int


class InputProofError(ValueError):
    """Input proof does not cover the handle for this (contract, user) pair."""


class AccessDenied(PermissionError):
    """An address used a handle it has not been granted."""


class DecryptionDenied(DecryptionError):
    pass


class MockFhevm(FhevmInstance):
    is_mock = True

    def __init__(
        self,
        chain_id: int = MOCK_CHAIN_ID,
        gateway_chain_id: int = MOCK_GATEWAY_CHAIN_ID,
        verifying_contract_address_decryption: str = MOCK_DECRYPTION_CONTRACT,
        coprocessor_key: str | None = None,
        clock=time.time,
    ):
        self.chain_id = int(chain_id)
        self.gateway_chain_id = int(gateway_chain_id)
        self.verifying_contract_address_decryption = to_checksum_address(verifying_contract_address_decryption)
        self.coprocessor = Account.from_key(coprocessor_key) if coprocessor_key else Account.create()
        self.clock = clock
        self._store: dict[bytes, tuple[FheType, int]] = {}
        self._acl: dict[bytes, set[str]] = {}
        self._transient: dict[bytes, set[str]] = {}
        self._public: set[bytes] = set()
        self._counter = itertools.count()
        self._caller: str | None = None

    # ---------- store ----------

    def _put(self, fhe_type: FheType, value: int, handle: bytes | None = None) -> bytes:
        value = int(value) & fhe_type.max_value
        if handle is None:
            seed = keccak(next(self._counter).to_bytes(8, "big") + os.urandom(16))
            handle = build_handle(seed, COMPUTED_INDEX, self.chain_id, fhe_type)
        self._store[handle] = (fhe_type, value)
        return handle

    def _get(self, handle: bytes) -> tuple[FheType, int]:
        try:
            return self._store[handle]
        except KeyError:
            raise KeyError(f"unknown ciphertext handle {handle_to_hex(handle)}") from None

    def peek(self, handle: bytes | str) -> Any:
        """Clear value behind a handle, bypassing the ACL (debugging aid)."""
        fhe_type, value = self._get(handle_to_bytes(handle))
        return clear_value(fhe_type, value)

    # ---------- ACL ----------

    def allow(self, handle: bytes, address: str) -> None:
        self._acl.setdefault(bytes(handle), set()).add(to_checksum_address(address))

    def allow_transient(self, handle: bytes, address: str) -> None:
        self._transient.setdefault(bytes(handle), set()).add(to_checksum_address(address))

    def is_allowed(self, handle: bytes, address: str) -> bool:
        addr = to_checksum_address(address)
        h = bytes(handle)
        return addr in self._acl.get(h, ()) or addr in self._transient.get(h, ())

    def is_persistently_allowed(self, handle: bytes, address: str) -> bool:
        return to_checksum_address(address) in self._acl.get(bytes(handle), ())

    def make_publicly_decryptable(self, handle: bytes) -> None:
        self._public.add(bytes(handle))

    def is_publicly_decryptable(self, handle: bytes) -> bool:
        return bytes(handle) in self._public

    def acl_snapshot(self) -> tuple[dict[bytes, set[str]], set[bytes]]:
        return {h: set(addrs) for h, addrs in self._acl.items()}, set(self._public)

    def restore_acl(self, snapshot: tuple[dict[bytes, set[str]], set[bytes]]) -> None:
        """Put back persistent and public grants taken by ``acl_snapshot``."""
        acl, public = snapshot
        self._acl = {h: set(addrs) for h, addrs in acl.items()}
        self._public = set(public)

    def end_transaction(self) -> None:
        """Drop transient grants, as happens at the end of every transaction."""
        self._transient.clear()

    @contextlib.contextmanager
    def executing(self, contract_address: str) -> Iterator[None]:
        """Run FHE operations on behalf of ``contract_address`` (the msg.sender of the executor)."""
        previous = self._caller
        self._caller = to_checksum_address(contract_address)
        try:
            yield
        finally:
            self._caller = previous

    # ---------- inputs ----------

    def _input_digest(self, handles: Sequence[bytes], user_address: str, contract_address: str) -> bytes:
        return keccak(
            b"".join(bytes(h) for h in handles)
            + to_bytes(hexstr=to_checksum_address(user_address))
            + to_bytes(hexstr=to_checksum_address(contract_address))
            + self.chain_id.to_bytes(32, "big")
        )

    def _encrypt_input(
        self, contract_address: str, user_address: str, values: list[tuple[FheType, int]]
    ) -> EncryptedInput:
        nonce = os.urandom(32)
        handles = []
        for index, (fhe_type, value) in enumerate(values):
            seed = keccak(nonce + to_bytes(hexstr=contract_address) + to_bytes(hexstr=user_address) + bytes([index]))
            handles.append(self._put(fhe_type, value, build_handle(seed, index, self.chain_id, fhe_type)))
        digest = self._input_digest(handles, user_address, contract_address)
        signature = self.coprocessor.sign_message(encode_defunct(primitive=digest)).signature
        return EncryptedInput(handles=handles, input_proof=assemble_input_proof(handles, [bytes(signature)]))

    def verify_input(self, handle: bytes | str, input_proof: bytes, user_address: str, contract_address: str) -> bytes:
        """Check an external input the way InputVerifier does; returns the usable handle.

        On success the contract gets a transient grant on the handle.
        """
        handle = handle_to_bytes(handle)
        proof = bytes(input_proof)
        if len(proof) < 2:
            raise InputProofError("input proof too short")
        n_handles, n_signers = proof[0], proof[1]
        handles_end = 2 + n_handles * HANDLE_SIZE
        sigs_end = handles_end + n_signers * SIGNATURE_SIZE
        if len(proof) < sigs_end or n_signers == 0:
            raise InputProofError("input proof truncated")
        handles = [proof[2 + i * HANDLE_SIZE: 2 + (i + 1) * HANDLE_SIZE] for i in range(n_handles)]
        if handle not in handles:
            raise InputProofError(f"handle {handle_to_hex(handle)} is not covered by the input proof")
        digest = self._input_digest(handles, user_address, contract_address)
        signers = set()
        for i in range(n_signers):
            sig = proof[handles_end + i * SIGNATURE_SIZE: handles_end + (i + 1) * SIGNATURE_SIZE]
            try:
                signers.add(Account.recover_message(encode_defunct(primitive=digest), signature=sig))
            except Exception as e:  # malformed signature bytes
                raise InputProofError(f"bad coprocessor signature: {e}") from e
        if self.coprocessor.address not in signers:
            raise InputProofError("input proof was not issued for this contract and user")
        if handle not in self._store:
            raise InputProofError(f"unknown ciphertext {handle_to_hex(handle)}")
        self.allow_transient(handle, contract_address)
        return handle

    # ---------- arithmetic ----------

    def _operand(self, value: Operand, type_hint: FheType | None) -> tuple[FheType | None, int, bool]:
        """Resolve an operand to (type, clear value, is_scalar)."""
        if isinstance(value, int) and not isinstance(value, bool):
            return type_hint, int(value), True
        if isinstance(value, bool):
            return FheType.EBOOL, int(value), True
        h = handle_to_bytes(value)
        if is_zero_handle(h):
            # uninitialized ciphertexts behave like an encryption of zero
            return type_hint, 0, False
        if self._caller is not None and not self.is_allowed(h, self._caller):
            raise AccessDenied(f"{self._caller} is not allowed to use {handle_to_hex(h)}")
        fhe_type, clear = self._get(h)
        return fhe_type, clear, False

    def _result(self, fhe_type: FheType, value: int) -> bytes:
        handle = self._put(fhe_type, value)
        if self._caller is not None:
            self.allow_transient(handle, self._caller)
        return handle

    def _binary(self, a: Operand, b: Operand, type_hint: FheType | None) -> tuple[FheType, int, int]:
        ta, va, _ = self._operand(a, type_hint)
        tb, vb, _ = self._operand(b, ta or type_hint)
        fhe_type = ta or tb or type_hint
        if fhe_type is None:
            raise TypeError("cannot infer ciphertext type; pass fhe_type")
        if tb is not None and tb.bits > fhe_type.bits:
            fhe_type = tb
        return fhe_type, va, vb

    def as_encrypted(self, value: int | bool, fhe_type: FheType) -> bytes:
        """Trivial encryption of a clear constant (FHE.asEuintXX / asEbool)."""
        return self._result(FheType(fhe_type), int(value))

    def add(self, a: Operand, b: Operand, fhe_type: FheType | None = None) -> bytes:
        t, va, vb = self._binary(a, b, fhe_type)
        return self._result(t, (va + vb) % (1 << t.bits))

    def sub(self, a: Operand, b: Operand, fhe_type: FheType | None = None) -> bytes:
        t, va, vb = self._binary(a, b, fhe_type)
        return self._result(t, (va - vb) % (1 << t.bits))

    def _compare(self, a: Operand, b: Operand, fhe_type: FheType | None, op) -> bytes:
        _, va, vb = self._binary(a, b, fhe_type)
        return self._result(FheType.EBOOL, int(op(va, vb)))

    def eq(self, a: Operand, b: Operand, fhe_type: FheType | None = None) -> bytes:
        return self._compare(a, b, fhe_type, lambda x, y: x == y)

    def ne(self, a: Operand, b: Operand, fhe_type: FheType | None = None) -> bytes:
        return self._compare(a, b, fhe_type, lambda x, y: x != y)

    def le(self, a: Operand, b: Operand, fhe_type: FheType | None = None) -> bytes:
        return self._compare(a, b, fhe_type, lambda x, y: x <= y)

    def lt(self, a: Operand, b: Operand, fhe_type: FheType | None = None) -> bytes:
        return self._compare(a, b, fhe_type, lambda x, y: x < y)

    def ge(self, a: Operand, b: Operand, fhe_type: FheType | None = None) -> bytes:
        return self._compare(a, b, fhe_type, lambda x, y: x >= y)

    def gt(self, a: Operand, b: Operand, fhe_type: FheType | None = None) -> bytes:
        return self._compare(a, b, fhe_type, lambda x, y: x > y)

    def or_(self, a: Operand, b: Operand) -> bytes:
        t, va, vb = self._binary(a, b, FheType.EBOOL)
        return self._result(t, va | vb)

    def and_(self, a: Operand, b: Operand) -> bytes:
        t, va, vb = self._binary(a, b, FheType.EBOOL)
        return self._result(t, va & vb)

    def select(self, cond: Operand, a: Operand, b: Operand, fhe_type: FheType | None = None) -> bytes:
        _, vc, _ = self._operand(cond, FheType.EBOOL)
        t, va, vb = self._binary(a, b, fhe_type)
        return self._result(t, va if vc else vb)

    def cast(self, a: Operand, fhe_type: FheType) -> bytes:
        _, va, _ = self._operand(a, fhe_type)
        return self._result(FheType(fhe_type), va)

    # ---------- decryption ----------

    def generate_keypair(self) -> Keypair:
        acct = Account.create()
        private_key = bytes(acct.key)
        public_key = keys.PrivateKey(private_key).public_key.to_bytes()
        return Keypair(public_key=public_key.hex(), private_key=private_key.hex())

    def create_eip712(
        self,
        public_key: str,
        contract_addresses: Sequence[str],
        start_timestamp: int | str,
        duration_days: int | str,
    ) -> dict[str, Any]:
        return build_user_decrypt_typed_data(
            public_key,
            contract_addresses,
            start_timestamp,
            duration_days,
            chain_id=self.gateway_chain_id,
            verifying_contract=self.verifying_contract_address_decryption,
        )

    def user_decrypt(
        self,
        handle_contract_pairs: Sequence[dict[str, str]],
        private_key: str,
        public_key: str,
        signature: str,
        contract_addresses: Sequence[str],
        user_address: str,
        start_timestamp: int | str,
        duration_days: int | str,
    ) -> dict[str, Any]:
        now = int(self.clock())
        validate_request(
            contract_addresses,
            start_timestamp,
            duration_days,
            handle_contracts=[p["contractAddress"] for p in handle_contract_pairs],
            now=now,
        )
        if not is_window_open(start_timestamp, duration_days, now=now):
            raise DecryptionDenied("user decryption grant has expired")
        pk = bytes.fromhex(private_key[2:] if private_key.startswith("0x") else private_key)
        if keys.PrivateKey(pk).public_key.to_bytes().hex() != (public_key[2:] if public_key.startswith("0x") else public_key).lower():
            raise DecryptionDenied("private key does not match the signed public key")

        typed = self.create_eip712(public_key, contract_addresses, start_timestamp, duration_days)
        user = to_checksum_address(user_address)
        if recover_typed_data_signer(typed, signature) != user:
            raise DecryptionDenied(f"decryption grant is not signed by {user}")

        out: dict[str, Any] = {}
        for pair in handle_contract_pairs:
            handle = handle_to_bytes(pair["handle"])
            contract = to_checksum_address(pair["contractAddress"])
            if contract == user:
                raise DecryptionDenied("user address must differ from the contract address")
            if not self.is_persistently_allowed(handle, user):
                raise DecryptionDenied(f"{user} is not allowed to decrypt {handle_to_hex(handle)}")
            if not self.is_persistently_allowed(handle, contract):
                raise DecryptionDenied(f"{contract} is not allowed to decrypt {handle_to_hex(handle)}")
            fhe_type, value = self._get(handle)
            out[handle_to_hex(handle)] = clear_value(fhe_type, value)
        return out

    def public_decrypt(self, handles: Sequence[bytes | str]) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for h in handles:
            handle = handle_to_bytes(h)
            if not self.is_publicly_decryptable(handle):
                raise DecryptionDenied(f"handle {handle_to_hex(handle)} is not publicly decryptable")
            fhe_type, value = self._get(handle)
            out[handle_to_hex(handle)] = clear_value(fhe_type, value)
        return out
