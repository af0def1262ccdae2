"""
Shared fixtures.

Scenario tests run against the in-process mock network by default. With
NETWORK=optalysys they deploy to the live testnet instead, using key.json,
testnet_config.json and compiled hardhat artifacts from the working directory.
"""
from __future__ import annotations

import logging
from pathlib import Path

import pytest
from eth_account import Account

from fhe_tasks.config.network import DEFAULT_KEY_FILE, get_config_file, get_network_name, is_live_network
from fhe_tasks.config.testnet import load_testnet_config
from fhe_tasks.contracts.clients import Web3ContractClient
from fhe_tasks.contracts.mock_chain import MockChain
from fhe_tasks.fhevm.factory import create_instance, create_mock_instance
from fhe_tasks.helpers.artifacts import load_artifact
from fhe_tasks.helpers.transactions import deploy_contract
from fhe_tasks.helpers.web3_setup import build_w3
from fhe_tasks.setup.wallet import load_wallet

ROOT = Path(__file__).resolve().parent.parent

# First hardhat dev account; only ever used against the mock network
HARDHAT_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
OTHER_KEY = "0x59c6995e998f97a5a0044966f0a1d9e4ad3c3e7b4d2c8d6a2b6c1c4e7a8f9b0c"

logger = logging.getLogger("fhe_tasks.tests")


class MockNetwork:
    is_live = False

    def __init__(self, config):
        self.config = config
        self.fhevm = create_mock_instance(config)
        self.chain = MockChain(self.fhevm)
        self.account = Account.from_key(HARDHAT_KEY)

    def deploy(self, facade_cls, *extra_ctor_args):
        receipt = self.chain.deploy(
            facade_cls.CONTRACT_NAME,
            *self.config.host_contracts(),
            *extra_ctor_args,
            sender=self.account.address,
        )
        logger.info("Contract deployed at block: %s", receipt.block_number)
        return facade_cls(self.chain.client(receipt.contract_address, self.account.address))

    def attach_as(self, facade, account):
        return type(facade)(self.chain.client(facade.address, account.address))


class LiveNetwork:
    is_live = True

    def __init__(self, config):
        self.config = config
        logger.info("Loading wallet")
        self.account = load_wallet(ROOT / DEFAULT_KEY_FILE)
        self.w3 = build_w3(config.json_rpc_url)
        logger.info("Creating fhevm instance")
        self.fhevm = create_instance(config, w3=self.w3)

    def deploy(self, facade_cls, *extra_ctor_args):
        bytecode, abi = load_artifact(facade_cls.CONTRACT_NAME, ROOT / "artifacts")
        receipt = deploy_contract(
            self.w3, self.account, abi, bytecode, *self.config.host_contracts(), *extra_ctor_args
        )
        logger.info("Contract deployed at block: %s", receipt.block_number)
        return facade_cls(Web3ContractClient(self.w3, self.account, receipt.contract_address, abi))

    def attach_as(self, facade, account):
        client = facade.client
        return type(facade)(Web3ContractClient(self.w3, account, facade.address, client.contract.abi))


@pytest.fixture(scope="session")
def network_name() -> str:
    return get_network_name()


@pytest.fixture(scope="session")
def testnet_config(network_name):
    logger.info("Network name: %s", network_name)
    return load_testnet_config(ROOT / get_config_file(network_name))


@pytest.fixture
def network(network_name, testnet_config):
    if is_live_network(network_name):
        return LiveNetwork(testnet_config)
    logger.info("Running on hardhat, using mocked config")
    return MockNetwork(testnet_config)


@pytest.fixture
def mock_only(network):
    if network.is_live:
        pytest.skip("needs the in-process mock network")
    return network


@pytest.fixture
def other_account():
    return Account.from_key(OTHER_KEY)
