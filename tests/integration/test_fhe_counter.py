from __future__ import annotations

import pytest

from fhe_tasks.contracts.facades import FheCounter
from fhe_tasks.fhevm.decrypt import setup_user_decrypt
from fhe_tasks.fhevm.types import ZERO_HANDLE


@pytest.fixture
def counter(network):
    return network.deploy(FheCounter)


def _encrypt(network, counter, amount):
    return network.fhevm.create_encrypted_input(counter.address, network.account.address).add32(amount).encrypt()


def test_count_is_uninitialized_after_deployment(counter):
    assert counter.get_count() == ZERO_HANDLE


def test_increment_by_one(network, counter):
    bundle = _encrypt(network, counter, 1)
    counter.increment(bundle.handles[0], bundle.input_proof)

    count = setup_user_decrypt(network.fhevm, network.account, counter.get_count(), counter.address)
    assert count == 1


def test_increment_then_decrement(network, counter):
    bundle = _encrypt(network, counter, 1)
    counter.increment(bundle.handles[0], bundle.input_proof)

    bundle = _encrypt(network, counter, 1)
    counter.decrement(bundle.handles[0], bundle.input_proof)

    count = setup_user_decrypt(network.fhevm, network.account, counter.get_count(), counter.address)
    assert count == 0


def test_decrement_below_zero_wraps(mock_only):
    counter = mock_only.deploy(FheCounter)
    bundle = _encrypt(mock_only, counter, 3)
    counter.decrement(bundle.handles[0], bundle.input_proof)

    assert mock_only.fhevm.peek(counter.get_count()) == 2**32 - 3


def test_receipts_have_increasing_block_numbers(network, counter):
    first = _encrypt(network, counter, 5)
    r1 = counter.increment(first.handles[0], first.input_proof)
    second = _encrypt(network, counter, 5)
    r2 = counter.increment(second.handles[0], second.input_proof)

    assert r1.status == r2.status == 1
    assert r2.block_number > r1.block_number
