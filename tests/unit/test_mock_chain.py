from __future__ import annotations

import pytest

from fhe_tasks.contracts.mock_chain import ContractReverted, MockChain, SimulatedFheCounter
from fhe_tasks.fhevm.mock import AccessDenied, MockFhevm
from fhe_tasks.fhevm.types import FheType

SENDER = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
HOSTS = (
    "0x50157CFfD6bBFA2DECe204a89ec419c23ef5755D",
    "0xCD3ab3bd6bcc0c0bf3E27912a92043e817B1cf69",
    "0x1364cBBf2cDF5032C47d8226a6f6FBD2AFCDacAC",
    "0xb6E160B1ff80D67Bfe90A85eE06Ce0A2613607D1",
)


@pytest.fixture
def chain():
    return MockChain(MockFhevm())


def _increment(chain, address, value):
    bundle = chain.fhevm.create_encrypted_input(address, SENDER).add32(value).encrypt()
    return chain.transact(address, "increment", bundle.handles[0], bundle.input_proof, sender=SENDER)


def test_receipts_have_increasing_blocks(chain):
    deployed = chain.deploy("FHECounter", *HOSTS, sender=SENDER)
    first = _increment(chain, deployed.contract_address, 1)
    second = _increment(chain, deployed.contract_address, 1)

    assert deployed.contract_address is not None
    assert deployed.block_number < first.block_number < second.block_number
    assert first.tx_hash != second.tx_hash


def test_revert_rolls_back_state_and_grants(chain, monkeypatch):
    address = chain.deploy("FHECounter", *HOSTS, sender=SENDER).contract_address
    _increment(chain, address, 5)
    before = chain.call(address, "getCount", sender=SENDER)
    written = []

    def half_done(self, sender, input_euint32, input_proof):
        self.count = self.fhevm.as_encrypted(99, FheType.EUINT32)
        written.append(self.count)
        self.fhevm.allow(self.count, sender)
        self.fhevm.make_publicly_decryptable(self.count)
        raise AccessDenied("stop")

    monkeypatch.setattr(SimulatedFheCounter, "decrement", half_done)
    with pytest.raises(ContractReverted):
        chain.transact(address, "decrement", b"\x00" * 32, b"", sender=SENDER)

    after = chain.call(address, "getCount", sender=SENDER)
    assert after == before
    assert chain.fhevm.peek(after) == 5
    assert chain.fhevm.is_persistently_allowed(after, SENDER)
    assert chain.fhevm.is_persistently_allowed(after, address)
    (discarded,) = written
    assert not chain.fhevm.is_persistently_allowed(discarded, SENDER)
    assert not chain.fhevm.is_publicly_decryptable(discarded)


def test_unknown_function_is_rejected(chain):
    address = chain.deploy("FHECounter", *HOSTS, sender=SENDER).contract_address
    with pytest.raises(ValueError):
        chain.transact(address, "reset", sender=SENDER)


def test_call_to_missing_contract_reverts(chain):
    with pytest.raises(ContractReverted):
        chain.call("0x5FbDB2315678afecb367f032d93F642f64180aa3", "getCount", sender=SENDER)
