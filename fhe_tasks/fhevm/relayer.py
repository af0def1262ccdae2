"""
Live FhevmInstance backed by a relayer's HTTP API.

The relayer brokers everything the client cannot do alone: it returns the
network public key and CRS, has the coprocessors verify and sign encrypted
inputs, and forwards decryption requests to the KMS. Building ciphertexts
and recovering plaintext from KMS re-encryption shares are properties of
the FHE scheme; those two steps are delegated to an FheBackend object.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Protocol

import requests
from eth_abi import decode as abi_decode
from eth_utils import to_checksum_address

from .base import FhevmInstance
from .eip712 import DEFAULT_EXTRA_DATA, build_user_decrypt_typed_data, validate_request
from .types import (
    EncryptedInput,
    FheType,
    Keypair,
    clear_value,
    handle_to_bytes,
    handle_to_hex,
    handle_type,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60  # seconds per HTTP call


class RelayerError(RuntimeError):
    """The relayer rejected a request or answered with something unusable."""

    def __init__(self, message: str, status_code: int | None = None, body: str | None = None):
        self.status_code = status_code
        self.body = body
        if status_code is not None:
            message = f"{message} (HTTP {status_code}): {(body or '')[:300]}"
        super().__init__(message)


class FheBackend(Protocol):
    """Scheme-level operations a live client needs from an FHE library."""

    def generate_keypair(self) -> Keypair:
        ...

    def encrypt(
        self,
        values: list[tuple[FheType, int]],
        *,
        public_key: bytes,
        crs: bytes,
        contract_address: str,
        user_address: str,
        acl_contract_address: str,
        chain_id: int,
    ) -> bytes:
        """Return the packed ciphertext list with its input-verification proof."""

    def reconstruct(
        self,
        shares: list[dict[str, Any]],
        *,
        keypair: Keypair,
        handles: list[str],
        user_address: str,
        signature: str,
    ) -> dict[str, int]:
        """Combine KMS re-encryption shares into raw integers keyed by handle hex."""


class RelayerFhevm(FhevmInstance):
    is_mock = False

    def __init__(
        self,
        relayer_url: str,
        *,
        chain_id: int,
        gateway_chain_id: int,
        acl_contract_address: str,
        kms_contract_address: str,
        input_verifier_contract_address: str,
        verifying_contract_address_decryption: str,
        verifying_contract_address_input_verification: str,
        backend: FheBackend | None = None,
        session: requests.Session | None = None,
        timeout: int = DEFAULT_TIMEOUT,
    ):
        self.relayer_url = relayer_url.rstrip("/")
        self.chain_id = int(chain_id)
        self.gateway_chain_id = int(gateway_chain_id)
        self.acl_contract_address = to_checksum_address(acl_contract_address)
        self.kms_contract_address = to_checksum_address(kms_contract_address)
        self.input_verifier_contract_address = to_checksum_address(input_verifier_contract_address)
        self.verifying_contract_address_decryption = to_checksum_address(verifying_contract_address_decryption)
        self.verifying_contract_address_input_verification = to_checksum_address(
            verifying_contract_address_input_verification
        )
        self.backend = backend
        self.session = session or requests.Session()
        self.timeout = timeout
        self._public_params: tuple[bytes, bytes] | None = None

    # ---------- http ----------

    def _url(self, path: str) -> str:
        return f"{self.relayer_url}/{path.lstrip('/')}"

    def _request(self, method: str, path: str, payload: dict[str, Any] | None = None) -> Any:
        url = self._url(path)
        logger.debug("relayer %s %s", method, url)
        response = self.session.request(
            method,
            url,
            json=payload,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            timeout=self.timeout,
        )
        if response.status_code >= 400:
            raise RelayerError(f"Relayer {method} {path} failed", response.status_code, response.text)
        try:
            body = response.json()
        except ValueError:
            raise RelayerError(f"Relayer {method} {path} returned non-JSON body", response.status_code, response.text) from None
        if not isinstance(body, dict) or "response" not in body:
            raise RelayerError(f"Relayer {method} {path} returned an unexpected body: {str(body)[:300]}")
        return body["response"]

    def _download(self, url: str) -> bytes:
        response = self.session.get(url, timeout=self.timeout)
        if response.status_code >= 400:
            raise RelayerError(f"Download of {url} failed", response.status_code, response.text)
        return response.content

    def _require_backend(self, what: str) -> FheBackend:
        if self.backend is None:
            raise RelayerError(
                f"{what} needs an FHE backend; pass --fhe-backend module:attr or set FHE_BACKEND"
            )
        return self.backend

    # ---------- public parameters ----------

    def public_params(self) -> tuple[bytes, bytes]:
        """(public key, CRS) announced by the relayer; fetched once per instance."""
        if self._public_params is None:
            info = self._request("GET", "/v1/keyurl")
            try:
                key_url = info["fhe_key_info"][0]["fhe_public_key"]["urls"][0]
                crs_url = info["crs"]["2048"]["urls"][0]
            except (KeyError, IndexError, TypeError):
                raise RelayerError(f"Relayer key info is incomplete: {str(info)[:300]}") from None
            logger.info("Fetching FHE public key and CRS")
            self._public_params = (self._download(key_url), self._download(crs_url))
        return self._public_params

    # ---------- encryption ----------

    def _encrypt_input(
        self, contract_address: str, user_address: str, values: list[tuple[FheType, int]]
    ) -> EncryptedInput:
        backend = self._require_backend("Input encryption")
        public_key, crs = self.public_params()
        ciphertext = backend.encrypt(
            values,
            public_key=public_key,
            crs=crs,
            contract_address=contract_address,
            user_address=user_address,
            acl_contract_address=self.acl_contract_address,
            chain_id=self.chain_id,
        )
        result = self._request(
            "POST",
            "/v1/input-proof",
            {
                "contractAddress": contract_address,
                "userAddress": user_address,
                "ciphertextWithInputVerification": bytes(ciphertext).hex(),
                "contractChainId": hex(self.chain_id),
                "extraData": DEFAULT_EXTRA_DATA,
            },
        )
        handles = [handle_to_bytes(h) for h in result.get("handles", [])]
        signatures = [bytes.fromhex(s[2:] if s.startswith("0x") else s) for s in result.get("signatures", [])]
        if len(handles) != len(values):
            raise RelayerError(f"Relayer returned {len(handles)} handles for {len(values)} values")
        return EncryptedInput(handles=handles, input_proof=assemble_input_proof(handles, signatures))

    # ---------- decryption ----------

    def generate_keypair(self) -> Keypair:
        return self._require_backend("Keypair generation").generate_keypair()

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
        backend = self._require_backend("User decryption")
        validate_request(
            contract_addresses,
            start_timestamp,
            duration_days,
            handle_contracts=[p["contractAddress"] for p in handle_contract_pairs],
        )
        pairs = [
            {"handle": handle_to_hex(p["handle"]), "contractAddress": to_checksum_address(p["contractAddress"])}
            for p in handle_contract_pairs
        ]
        shares = self._request(
            "POST",
            "/v1/user-decrypt",
            {
                "handleContractPairs": pairs,
                "requestValidity": {
                    "startTimestamp": str(start_timestamp),
                    "durationDays": str(duration_days),
                },
                "contractsChainId": str(self.chain_id),
                "contractAddresses": [to_checksum_address(a) for a in contract_addresses],
                "userAddress": to_checksum_address(user_address),
                "signature": signature[2:] if signature.startswith("0x") else signature,
                "publicKey": public_key[2:] if public_key.startswith("0x") else public_key,
                "extraData": DEFAULT_EXTRA_DATA,
            },
        )
        handles = [p["handle"] for p in pairs]
        raw = backend.reconstruct(
            list(shares),
            keypair=Keypair(public_key=public_key, private_key=private_key),
            handles=handles,
            user_address=user_address,
            signature=signature,
        )
        raw = {k.lower(): v for k, v in raw.items()}
        return {h: clear_value(handle_type(h), int(raw[h])) for h in handles if h in raw}

    def public_decrypt(self, handles: Sequence[bytes | str]) -> dict[str, Any]:
        hexes = [handle_to_hex(h) for h in handles]
        result = self._request(
            "POST",
            "/v1/public-decrypt",
            {"ciphertextHandles": hexes, "extraData": DEFAULT_EXTRA_DATA},
        )
        entry = result[0] if isinstance(result, list) and result else result
        try:
            encoded = entry["decrypted_value"]
        except (KeyError, TypeError):
            raise RelayerError(f"Relayer public decrypt response has no decrypted_value: {str(result)[:300]}") from None
        return decode_public_values(hexes, encoded)


def assemble_input_proof(handles: Sequence[bytes], signatures: Sequence[bytes], extra_data: bytes = b"\x00") -> bytes:
    """n_handles || n_signers || handles || signatures || extra data."""
    if len(handles) > 255 or len(signatures) > 255:
        raise ValueError("too many handles or signatures for an input proof")
    return (
        bytes([len(handles), len(signatures)])
        + b"".join(bytes(h) for h in handles)
        + b"".join(bytes(s) for s in signatures)
        + bytes(extra_data)
    )


_ABI_TYPES = {FheType.EBOOL: "bool", FheType.EADDRESS: "address"}


def decode_public_values(handles: Sequence[str], encoded: str | bytes) -> dict[str, Any]:
    """Decode the ABI-encoded cleartext list returned for ``handles``."""
    if isinstance(encoded, str):
        encoded = bytes.fromhex(encoded[2:] if encoded.startswith("0x") else encoded)
    types = [_ABI_TYPES.get(handle_type(h), "uint256") for h in handles]
    values = abi_decode(types, bytes(encoded))
    out: dict[str, Any] = {}
    for h, v in zip(handles, values):
        out[h] = to_checksum_address(v) if isinstance(v, str) else v
    return out
