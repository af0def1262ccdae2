from __future__ import annotations

import pytest

from fhe_tasks.contracts.facades import SimpleStore
from fhe_tasks.fhevm.decrypt import public_decrypt_value
from fhe_tasks.fhevm.types import ZERO_HANDLE, handle_to_hex


@pytest.fixture
def store(network):
    return network.deploy(SimpleStore)


def test_simple_value_is_uninitialized_after_deployment(store):
    assert store.encrypted_simple_value() == ZERO_HANDLE


def test_store_value_4(network, store):
    bundle = network.fhevm.create_encrypted_input(store.address, network.account.address).add8(4).encrypt()

    store.store_encrypted_simple_value(bundle.handles[0], bundle.input_proof)

    handle = store.encrypted_simple_value()
    result = network.fhevm.public_decrypt([handle])
    assert result[handle_to_hex(handle)] == 4


def test_sum_is_uninitialized_after_deployment(store):
    assert store.encrypted_sum() == ZERO_HANDLE


def test_store_sum(network, store):
    bundle = (
        network.fhevm.create_encrypted_input(store.address, network.account.address)
        .add8(4)
        .add8(13)
        .encrypt()
    )

    store.store_encrypted_sum(bundle.handles[0], bundle.handles[1], bundle.input_proof)

    assert public_decrypt_value(network.fhevm, store.encrypted_sum()) == 17


def test_sum_wraps_at_uint8(mock_only):
    store = mock_only.deploy(SimpleStore)
    bundle = (
        mock_only.fhevm.create_encrypted_input(store.address, mock_only.account.address)
        .add8(200)
        .add8(100)
        .encrypt()
    )

    store.store_encrypted_sum(bundle.handles[0], bundle.handles[1], bundle.input_proof)

    assert public_decrypt_value(mock_only.fhevm, store.encrypted_sum()) == 44
