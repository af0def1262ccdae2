from __future__ import annotations

import json

import pytest
from eth_abi import encode as abi_encode

from fhe_tasks.fhevm.relayer import RelayerError, RelayerFhevm, assemble_input_proof, decode_public_values
from fhe_tasks.fhevm.types import FheType, Keypair, build_handle, handle_to_hex

CONTRACT = "0x50157CFfD6bBFA2DECe204a89ec419c23ef5755D"
USER = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
CHAIN_ID = 8008135


class _FakeResponse:
    def __init__(self, status_code=200, payload=None, content=b""):
        self.status_code = status_code
        self._payload = payload
        self.content = content
        self.text = json.dumps(payload) if payload is not None else content.decode(errors="replace")

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class _FakeSession:
    def __init__(self, routes):
        self.routes = routes
        self.requests = []

    def request(self, method, url, json=None, headers=None, timeout=None):
        self.requests.append((method, url, json))
        return self.routes[(method, url)]

    def get(self, url, timeout=None):
        self.requests.append(("GET", url, None))
        return self.routes[("GET", url)]


class _FakeBackend:
    def __init__(self):
        self.encrypted = None
        self.reconstructed = None

    def generate_keypair(self):
        return Keypair(public_key="aa" * 16, private_key="bb" * 16)

    def encrypt(self, values, **kwargs):
        self.encrypted = (values, kwargs)
        return b"\xc0\xff\xee"

    def reconstruct(self, shares, **kwargs):
        self.reconstructed = (shares, kwargs)
        return {h.upper().replace("0X", "0x"): 42 for h in kwargs["handles"]}


def _instance(session, backend=None):
    return RelayerFhevm(
        "https://relayer.example.org/",
        chain_id=CHAIN_ID,
        gateway_chain_id=55815,
        acl_contract_address=CONTRACT,
        kms_contract_address=CONTRACT,
        input_verifier_contract_address=CONTRACT,
        verifying_contract_address_decryption=CONTRACT,
        verifying_contract_address_input_verification=CONTRACT,
        backend=backend,
        session=session,
    )


def _handle(i, fhe_type=FheType.EUINT8):
    return build_handle(bytes([i]) * 21, i, CHAIN_ID, fhe_type)


def test_encrypt_posts_input_proof_request_and_assembles_proof():
    h0 = _handle(0)
    sig = "0x" + "11" * 65
    session = _FakeSession(
        {
            ("GET", "https://relayer.example.org/v1/keyurl"): _FakeResponse(
                payload={
                    "response": {
                        "fhe_key_info": [{"fhe_public_key": {"urls": ["https://keys/pk"]}}],
                        "crs": {"2048": {"urls": ["https://keys/crs"]}},
                    }
                }
            ),
            ("GET", "https://keys/pk"): _FakeResponse(content=b"PK"),
            ("GET", "https://keys/crs"): _FakeResponse(content=b"CRS"),
            ("POST", "https://relayer.example.org/v1/input-proof"): _FakeResponse(
                payload={"response": {"handles": [handle_to_hex(h0)], "signatures": [sig]}}
            ),
        }
    )
    backend = _FakeBackend()

    bundle = _instance(session, backend).create_encrypted_input(CONTRACT, USER).add8(4).encrypt()

    method, url, payload = session.requests[-1]
    assert (method, url) == ("POST", "https://relayer.example.org/v1/input-proof")
    assert payload == {
        "contractAddress": CONTRACT,
        "userAddress": USER,
        "ciphertextWithInputVerification": "c0ffee",
        "contractChainId": hex(CHAIN_ID),
        "extraData": "0x00",
    }
    assert backend.encrypted[0] == [(FheType.EUINT8, 4)]
    assert backend.encrypted[1]["public_key"] == b"PK"
    assert backend.encrypted[1]["crs"] == b"CRS"
    assert bundle.handles == [h0]
    assert bundle.input_proof == bytes([1, 1]) + h0 + b"\x11" * 65 + b"\x00"


def test_public_params_fetched_once():
    session = _FakeSession(
        {
            ("GET", "https://relayer.example.org/v1/keyurl"): _FakeResponse(
                payload={
                    "response": {
                        "fhe_key_info": [{"fhe_public_key": {"urls": ["https://keys/pk"]}}],
                        "crs": {"2048": {"urls": ["https://keys/crs"]}},
                    }
                }
            ),
            ("GET", "https://keys/pk"): _FakeResponse(content=b"PK"),
            ("GET", "https://keys/crs"): _FakeResponse(content=b"CRS"),
        }
    )
    instance = _instance(session)
    assert instance.public_params() == (b"PK", b"CRS")
    assert instance.public_params() == (b"PK", b"CRS")
    assert len(session.requests) == 3


def test_public_decrypt_decodes_per_type():
    h_uint = _handle(1, FheType.EUINT8)
    h_bool = _handle(2, FheType.EBOOL)
    h_addr = _handle(3, FheType.EADDRESS)
    encoded = abi_encode(["uint256", "bool", "address"], [17, True, USER])
    session = _FakeSession(
        {
            ("POST", "https://relayer.example.org/v1/public-decrypt"): _FakeResponse(
                payload={"response": [{"decrypted_value": encoded.hex(), "signatures": []}]}
            )
        }
    )

    result = _instance(session).public_decrypt([h_uint, h_bool, h_addr])

    _, _, payload = session.requests[0]
    assert payload == {"ciphertextHandles": [handle_to_hex(h) for h in (h_uint, h_bool, h_addr)], "extraData": "0x00"}
    assert result == {handle_to_hex(h_uint): 17, handle_to_hex(h_bool): True, handle_to_hex(h_addr): USER}


def test_user_decrypt_payload_and_reconstruction():
    handle = _handle(4, FheType.EUINT32)
    session = _FakeSession(
        {
            ("POST", "https://relayer.example.org/v1/user-decrypt"): _FakeResponse(
                payload={"response": [{"payload": "share-1"}, {"payload": "share-2"}]}
            )
        }
    )
    backend = _FakeBackend()

    result = _instance(session, backend).user_decrypt(
        [{"handle": handle_to_hex(handle), "contractAddress": CONTRACT.lower()}],
        "bb" * 16,
        "aa" * 16,
        "0x" + "cd" * 65,
        [CONTRACT],
        USER,
        1_700_000_000,
        10,
    )

    _, url, payload = session.requests[0]
    assert url.endswith("/v1/user-decrypt")
    assert payload["handleContractPairs"] == [{"handle": handle_to_hex(handle), "contractAddress": CONTRACT}]
    assert payload["requestValidity"] == {"startTimestamp": "1700000000", "durationDays": "10"}
    assert payload["signature"] == "cd" * 65
    assert payload["publicKey"] == "aa" * 16
    assert payload["userAddress"] == USER
    assert backend.reconstructed[0] == [{"payload": "share-1"}, {"payload": "share-2"}]
    assert result == {handle_to_hex(handle): 42}


def test_http_error_raises_relayer_error():
    session = _FakeSession(
        {
            ("POST", "https://relayer.example.org/v1/public-decrypt"): _FakeResponse(
                status_code=400, payload={"message": "not allowed"}
            )
        }
    )
    with pytest.raises(RelayerError) as excinfo:
        _instance(session).public_decrypt([_handle(5)])
    assert excinfo.value.status_code == 400
    assert "not allowed" in str(excinfo.value)


def test_unwrapped_body_raises_relayer_error():
    session = _FakeSession(
        {("POST", "https://relayer.example.org/v1/public-decrypt"): _FakeResponse(payload={"status": "ok"})}
    )
    with pytest.raises(RelayerError):
        _instance(session).public_decrypt([_handle(5)])


def test_encryption_without_backend_is_explained():
    with pytest.raises(RelayerError) as excinfo:
        _instance(_FakeSession({})).create_encrypted_input(CONTRACT, USER).add8(1).encrypt()
    assert "FHE_BACKEND" in str(excinfo.value)


def test_assemble_input_proof_layout():
    handles = [_handle(0), _handle(1)]
    proof = assemble_input_proof(handles, [b"\x01" * 65])
    assert proof[:2] == bytes([2, 1])
    assert proof[2:66] == handles[0] + handles[1]
    assert proof[66:131] == b"\x01" * 65
    assert proof[131:] == b"\x00"


def test_decode_public_values_accepts_0x_hex():
    h = handle_to_hex(_handle(6, FheType.EUINT64))
    assert decode_public_values([h], "0x" + abi_encode(["uint256"], [9]).hex()) == {h: 9}
