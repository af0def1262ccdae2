from __future__ import annotations

import dataclasses
from pathlib import Path

import pytest

from fhe_tasks.config.testnet import load_testnet_config
from fhe_tasks.fhevm.factory import FHE_BACKEND_ENV, create_instance, create_mock_instance, load_backend
from fhe_tasks.fhevm.mock import MockFhevm
from fhe_tasks.fhevm.relayer import RelayerFhevm

ROOT = Path(__file__).resolve().parents[2]


@pytest.fixture
def config():
    return load_testnet_config(ROOT / "mocked_config.json")


class _FakeEth:
    chain_id = 9000


class _FakeW3:
    eth = _FakeEth()


def test_load_backend_calls_factories():
    assert isinstance(load_backend("fhe_tasks.fhevm.mock:MockFhevm"), MockFhevm)


def test_load_backend_from_env(monkeypatch):
    monkeypatch.setenv(FHE_BACKEND_ENV, "fhe_tasks.fhevm.mock:MockFhevm")
    assert isinstance(load_backend(), MockFhevm)


def test_load_backend_unset(monkeypatch):
    monkeypatch.delenv(FHE_BACKEND_ENV, raising=False)
    assert load_backend() is None


@pytest.mark.parametrize("spec", ["fhe_tasks.fhevm.mock", "fhe_tasks.fhevm.mock:Nope"])
def test_load_backend_bad_spec(spec):
    with pytest.raises(ValueError):
        load_backend(spec)


def test_create_instance_from_config(config, monkeypatch):
    monkeypatch.delenv(FHE_BACKEND_ENV, raising=False)
    instance = create_instance(config)

    assert isinstance(instance, RelayerFhevm)
    assert not instance.is_mock
    assert instance.chain_id == 31337
    assert instance.gateway_chain_id == config.gateway_chain_id
    assert instance.verifying_contract_address_decryption == config.decryption_contract_address
    assert instance.backend is None


def test_create_instance_reads_chain_id_from_node(config):
    cfg = dataclasses.replace(config, chain_id=None)
    assert create_instance(cfg, w3=_FakeW3()).chain_id == 9000
    with pytest.raises(ValueError):
        create_instance(cfg)


def test_mock_instance_uses_config(config):
    instance = create_mock_instance(config)
    assert instance.is_mock
    assert instance.chain_id == 31337
    assert instance.gateway_chain_id == 55815
