from __future__ import annotations

import json

import pytest

from fhe_tasks.config.network import get_config_file, is_live_network
from fhe_tasks.config.testnet import ConfigError, load_testnet_config, parse_testnet_config

VALID = {
    "json_rpc_url": "https://rpc.example.org",
    "relayer_url": "https://relayer.example.org",
    "gateway_chain_id": 55815,
    "acl_contract_address": "0x50157cffd6bbfa2dece204a89ec419c23ef5755d",
    "fhevm_executor_contract_address": "0xcd3ab3bd6bcc0c0bf3e27912a92043e817b1cf69",
    "kms_verifier_contract_address": "0x1364cbbf2cdf5032c47d8226a6f6fbd2afcdacac",
    "decryption_oracle_contract_address": "0xa02cda4ca3a71d7c46997716f4283aa851c28812",
    "input_verifier_contract_address": "0x901f8942346f7ab3a01f6d7613119bca447bb030",
    "input_verification_contract_address": "0x812b06e1cdce800494b79ffe4f925a504a9a9810",
    "decryption_contract_address": "0xb6e160b1ff80d67bfe90a85ee06ce0a2613607d1",
}


def test_parse_valid_config_checksums_addresses():
    cfg = parse_testnet_config(dict(VALID))

    assert cfg.gateway_chain_id == 55815
    assert cfg.chain_id is None
    assert cfg.acl_contract_address == "0x50157CFfD6bBFA2DECe204a89ec419c23ef5755D"
    assert cfg.host_contracts()[0] == cfg.acl_contract_address
    assert len(cfg.host_contracts()) == 4


def test_all_problems_reported_together():
    raw = dict(VALID)
    del raw["relayer_url"]
    raw["gateway_chain_id"] = -1
    raw["acl_contract_address"] = "0x1234"
    raw["json_rpc_url"] = "ftp://node"

    with pytest.raises(ConfigError) as excinfo:
        parse_testnet_config(raw, source="cfg.json")

    problems = excinfo.value.problems
    assert set(problems) == {"relayer_url", "gateway_chain_id", "acl_contract_address", "json_rpc_url"}
    assert problems["relayer_url"] == "missing"
    assert "cfg.json" in str(excinfo.value)


def test_bool_chain_id_rejected():
    raw = dict(VALID, gateway_chain_id=True)
    with pytest.raises(ConfigError) as excinfo:
        parse_testnet_config(raw)
    assert "gateway_chain_id" in excinfo.value.problems


def test_numeric_string_chain_id_accepted():
    cfg = parse_testnet_config(dict(VALID, chain_id="9000"))
    assert cfg.chain_id == 9000


def test_load_missing_file(tmp_path):
    with pytest.raises(ConfigError) as excinfo:
        load_testnet_config(tmp_path / "nope.json")
    assert excinfo.value.problems == {"<file>": "not found"}


def test_load_invalid_json(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{not json")
    with pytest.raises(ConfigError) as excinfo:
        load_testnet_config(path)
    assert "invalid JSON" in excinfo.value.problems["<file>"]


def test_load_round_trip(tmp_path):
    path = tmp_path / "testnet_config.json"
    path.write_text(json.dumps(VALID))
    assert load_testnet_config(path).relayer_url == VALID["relayer_url"]


def test_network_selection():
    assert is_live_network("optalysys")
    assert get_config_file("optalysys") == "testnet_config.json"
    assert not is_live_network("hardhat")
    assert get_config_file("anything-else") == "mocked_config.json"
