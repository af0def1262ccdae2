"""
Value types shared by the relayer client, the mock coprocessor and the tasks.

Handle layout (32 bytes)::

    [0..20]  hash prefix
    [21]     index of the value inside its input bundle (0xff for computed)
    [22..29] chain id, big endian
    [30]     FHE type code
    [31]     handle version
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

from eth_utils import to_checksum_address

HANDLE_SIZE = 32
HANDLE_VERSION = 0
COMPUTED_INDEX = 0xFF
ZERO_HANDLE = bytes(HANDLE_SIZE)


class FheType(enum.IntEnum):
    EBOOL = 0
    EUINT8 = 2
    EUINT16 = 3
    EUINT32 = 4
    EUINT64 = 5
    EUINT128 = 6
    EADDRESS = 7
    EUINT256 = 8

    @property
    def bits(self) -> int:
        """Width of the plaintext domain."""
        return _BITS[self]

    @property
    def packed_bits(self) -> int:
        """Bits the value occupies in an encrypted input list (bools take 2)."""
        return 2 if self is FheType.EBOOL else self.bits

    @property
    def max_value(self) -> int:
        return (1 << self.bits) - 1


_BITS = {
    FheType.EBOOL: 1,
    FheType.EUINT8: 8,
    FheType.EUINT16: 16,
    FheType.EUINT32: 32,
    FheType.EUINT64: 64,
    FheType.EUINT128: 128,
    FheType.EADDRESS: 160,
    FheType.EUINT256: 256,
}


def handle_to_bytes(handle: bytes | str) -> bytes:
    if isinstance(handle, (bytes, bytearray)):
        raw = bytes(handle)
    else:
        s = handle[2:] if handle.startswith(("0x", "0X")) else handle
        raw = bytes.fromhex(s)
    if len(raw) != HANDLE_SIZE:
        raise ValueError(f"handle must be {HANDLE_SIZE} bytes, got {len(raw)}")
    return raw


def handle_to_hex(handle: bytes | str) -> str:
    return "0x" + handle_to_bytes(handle).hex()


def handle_type(handle: bytes | str) -> FheType:
    return FheType(handle_to_bytes(handle)[30])


def handle_chain_id(handle: bytes | str) -> int:
    return int.from_bytes(handle_to_bytes(handle)[22:30], "big")


def handle_index(handle: bytes | str) -> int:
    return handle_to_bytes(handle)[21]


def is_zero_handle(handle: bytes | str) -> bool:
    return handle_to_bytes(handle) == ZERO_HANDLE


def build_handle(prefix: bytes, index: int, chain_id: int, fhe_type: FheType) -> bytes:
    """Assemble a handle from a hash (first 21 bytes used) and metadata."""
    if len(prefix) < 21:
        raise ValueError("handle prefix needs at least 21 bytes")
    return (
        bytes(prefix[:21])
        + bytes([index & 0xFF])
        + int(chain_id).to_bytes(8, "big")
        + bytes([int(fhe_type), HANDLE_VERSION])
    )


def clear_value(fhe_type: FheType, raw: int) -> int | bool | str:
    """Present a decrypted integer in its natural Python form."""
    if fhe_type is FheType.EBOOL:
        return bool(raw)
    if fhe_type is FheType.EADDRESS:
        return to_checksum_address(raw.to_bytes(20, "big"))
    return int(raw)


def _to_bytes(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        s = value[2:] if value.startswith(("0x", "0X")) else value
        return bytes.fromhex(s)
    if isinstance(value, list):
        return bytes(value)
    if isinstance(value, dict):
        # Uint8Array serialised without a Buffer tag: {"0": 12, "1": 255, ...}
        return bytes(value[k] for k in sorted(value, key=int))
    raise TypeError(f"cannot interpret {type(value).__name__} as bytes")


@dataclass
class EncryptedInput:
    """Ciphertext handles plus the proof binding them to (contract, user)."""

    handles: list[bytes]
    input_proof: bytes

    def to_dict(self) -> dict[str, Any]:
        return {"handles": [bytes(h) for h in self.handles], "inputProof": bytes(self.input_proof)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EncryptedInput":
        try:
            handles = [handle_to_bytes(_to_bytes(h)) for h in data["handles"]]
            proof = _to_bytes(data["inputProof"])
        except KeyError as e:
            raise ValueError(f"encrypted input is missing {e.args[0]!r}") from None
        return cls(handles=handles, input_proof=proof)


@dataclass(frozen=True)
class Keypair:
    """Ephemeral keypair for one user-decryption request (hex, no 0x)."""

    public_key: str
    private_key: str = field(repr=False)


@dataclass(frozen=True)
class HandleContractPair:
    handle: str
    contract_address: str

    def to_json(self) -> dict[str, str]:
        return {"handle": self.handle, "contractAddress": self.contract_address}
