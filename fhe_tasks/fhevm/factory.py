"""
Build FhevmInstance objects from a TestnetConfig.
"""
from __future__ import annotations

import importlib
import logging
import os
from typing import Any

import requests
from web3 import Web3

from ..config.testnet import TestnetConfig
from .mock import MOCK_CHAIN_ID, MockFhevm
from .relayer import FheBackend, RelayerFhevm

logger = logging.getLogger(__name__)

FHE_BACKEND_ENV = "FHE_BACKEND"


def load_backend(spec: str | None = None) -> FheBackend | None:
    """Import an FHE backend from a ``module:attr`` spec.

    Falls back to the FHE_BACKEND env var; returns None when neither is set.
    A callable attribute is treated as a factory and called without arguments.
    """
    spec = spec or os.getenv(FHE_BACKEND_ENV)
    if not spec:
        return None
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"FHE backend must look like 'package.module:attr', got {spec!r}")
    module = importlib.import_module(module_name)
    try:
        obj: Any = getattr(module, attr)
    except AttributeError:
        raise ValueError(f"module {module_name!r} has no attribute {attr!r}") from None
    backend = obj() if callable(obj) else obj
    logger.debug("Loaded FHE backend %s", spec)
    return backend


def create_instance(
    config: TestnetConfig,
    backend: FheBackend | None = None,
    session: requests.Session | None = None,
    w3: Web3 | None = None,
) -> RelayerFhevm:
    """Live instance talking to the relayer named in ``config``.

    The host chain id comes from the config when present, otherwise from the node.
    """
    chain_id = config.chain_id
    if chain_id is None:
        if w3 is None:
            raise ValueError("config has no chain_id; pass a connected Web3 to read it from the node")
        chain_id = w3.eth.chain_id
    return RelayerFhevm(
        config.relayer_url,
        chain_id=chain_id,
        gateway_chain_id=config.gateway_chain_id,
        acl_contract_address=config.acl_contract_address,
        kms_contract_address=config.kms_verifier_contract_address,
        input_verifier_contract_address=config.input_verifier_contract_address,
        verifying_contract_address_decryption=config.decryption_contract_address,
        verifying_contract_address_input_verification=config.input_verification_contract_address,
        backend=backend if backend is not None else load_backend(),
        session=session,
    )


def create_mock_instance(config: TestnetConfig | None = None) -> MockFhevm:
    """In-process instance; addresses and chain ids come from ``config`` when given."""
    if config is None:
        return MockFhevm()
    return MockFhevm(
        chain_id=config.chain_id or MOCK_CHAIN_ID,
        gateway_chain_id=config.gateway_chain_id,
        verifying_contract_address_decryption=config.decryption_contract_address,
    )
