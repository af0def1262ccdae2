"""
The capability interface every task and test talks to.

Two implementations exist: RelayerFhevm (live relayer + coprocessors) and
MockFhevm (in-process simulator). Code that only needs to encrypt inputs and
decrypt results should depend on FhevmInstance and nothing else.
"""
from __future__ import annotations

import abc
from collections.abc import Sequence
from typing import Any

from eth_utils import is_address, to_checksum_address

from .types import EncryptedInput, FheType, Keypair

MAX_INPUT_BITS = 2048
MAX_INPUT_VALUES = 256


class DecryptionError(RuntimeError):
    """A decryption request was refused or returned no value for a handle."""


class EncryptedInputBuilder:
    """Accumulates typed clear values, then encrypts them as one bundle.

    Usage::

        bundle = instance.create_encrypted_input(contract, user).add8(4).add8(13).encrypt()
    """

    def __init__(self, instance: "FhevmInstance", contract_address: str, user_address: str):
        if not is_address(contract_address):
            raise ValueError(f"invalid contract address: {contract_address!r}")
        if not is_address(user_address):
            raise ValueError(f"invalid user address: {user_address!r}")
        self._instance = instance
        self.contract_address = to_checksum_address(contract_address)
        self.user_address = to_checksum_address(user_address)
        self._values: list[tuple[FheType, int]] = []

    @property
    def values(self) -> list[tuple[FheType, int]]:
        return list(self._values)

    @property
    def packed_bits(self) -> int:
        return sum(t.packed_bits for t, _ in self._values)

    def _add(self, fhe_type: FheType, value: int) -> "EncryptedInputBuilder":
        if isinstance(value, bool) and fhe_type is not FheType.EBOOL:
            value = int(value)
        value = int(value)
        if value < 0 or value > fhe_type.max_value:
            raise ValueError(f"value {value} out of range for {fhe_type.name.lower()}")
        if len(self._values) + 1 > MAX_INPUT_VALUES:
            raise ValueError(f"an encrypted input holds at most {MAX_INPUT_VALUES} values")
        if self.packed_bits + fhe_type.packed_bits > MAX_INPUT_BITS:
            raise ValueError(f"encrypted input would exceed {MAX_INPUT_BITS} bits")
        self._values.append((fhe_type, value))
        return self

    def add_bool(self, value: bool | int) -> "EncryptedInputBuilder":
        return self._add(FheType.EBOOL, int(bool(value)) if isinstance(value, bool) else value)

    def add8(self, value: int) -> "EncryptedInputBuilder":
        return self._add(FheType.EUINT8, value)

    def add16(self, value: int) -> "EncryptedInputBuilder":
        return self._add(FheType.EUINT16, value)

    def add32(self, value: int) -> "EncryptedInputBuilder":
        return self._add(FheType.EUINT32, value)

    def add64(self, value: int) -> "EncryptedInputBuilder":
        return self._add(FheType.EUINT64, value)

    def add128(self, value: int) -> "EncryptedInputBuilder":
        return self._add(FheType.EUINT128, value)

    def add256(self, value: int) -> "EncryptedInputBuilder":
        return self._add(FheType.EUINT256, value)

    def add_address(self, address: str) -> "EncryptedInputBuilder":
        if not is_address(address):
            raise ValueError(f"invalid address: {address!r}")
        return self._add(FheType.EADDRESS, int(to_checksum_address(address), 16))

    def add(self, fhe_type: FheType, value: int) -> "EncryptedInputBuilder":
        return self._add(FheType(fhe_type), value)

    def encrypt(self) -> EncryptedInput:
        if not self._values:
            raise ValueError("nothing to encrypt: add at least one value")
        return self._instance._encrypt_input(self.contract_address, self.user_address, list(self._values))


class FhevmInstance(abc.ABC):
    """Client-side view of the FHE protocol: encrypt inputs, decrypt results."""

    is_mock: bool = False

    def create_encrypted_input(self, contract_address: str, user_address: str) -> EncryptedInputBuilder:
        return EncryptedInputBuilder(self, contract_address, user_address)

    @abc.abstractmethod
    def _encrypt_input(
        self, contract_address: str, user_address: str, values: list[tuple[FheType, int]]
    ) -> EncryptedInput:
        ...

    @abc.abstractmethod
    def generate_keypair(self) -> Keypair:
        ...

    @abc.abstractmethod
    def create_eip712(
        self,
        public_key: str,
        contract_addresses: Sequence[str],
        start_timestamp: int | str,
        duration_days: int | str,
    ) -> dict[str, Any]:
        ...

    @abc.abstractmethod
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
        """Decrypt handles the user is allowed to see. Keys are 0x handle hex."""

    @abc.abstractmethod
    def public_decrypt(self, handles: Sequence[bytes | str]) -> dict[str, Any]:
        """Decrypt publicly decryptable handles. Keys are 0x handle hex."""
