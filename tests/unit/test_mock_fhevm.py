from __future__ import annotations

import pytest
from eth_account import Account

from fhe_tasks.fhevm.eip712 import sign_typed_data
from fhe_tasks.fhevm.mock import AccessDenied, DecryptionDenied, InputProofError, MockFhevm
from fhe_tasks.fhevm.types import ZERO_HANDLE, FheType, handle_to_hex

CONTRACT = "0x50157CFfD6bBFA2DECe204a89ec419c23ef5755D"
OTHER_CONTRACT = "0xCD3ab3bd6bcc0c0bf3E27912a92043e817B1cf69"
USER = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
OTHER_USER = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"


@pytest.fixture
def fhevm():
    return MockFhevm()


def test_verify_input_grants_transient_access(fhevm):
    bundle = fhevm.create_encrypted_input(CONTRACT, USER).add8(9).encrypt()

    handle = fhevm.verify_input(bundle.handles[0], bundle.input_proof, USER, CONTRACT)

    assert fhevm.is_allowed(handle, CONTRACT)
    fhevm.end_transaction()
    assert not fhevm.is_allowed(handle, CONTRACT)


@pytest.mark.parametrize("user, contract", [(OTHER_USER, CONTRACT), (USER, OTHER_CONTRACT)])
def test_verify_input_rejects_other_pair(fhevm, user, contract):
    bundle = fhevm.create_encrypted_input(CONTRACT, USER).add8(9).encrypt()
    with pytest.raises(InputProofError):
        fhevm.verify_input(bundle.handles[0], bundle.input_proof, user, contract)


def test_verify_input_rejects_foreign_coprocessor(fhevm):
    bundle = MockFhevm().create_encrypted_input(CONTRACT, USER).add8(9).encrypt()
    with pytest.raises(InputProofError):
        fhevm.verify_input(bundle.handles[0], bundle.input_proof, USER, CONTRACT)


def test_verify_input_rejects_uncovered_handle(fhevm):
    first = fhevm.create_encrypted_input(CONTRACT, USER).add8(1).encrypt()
    second = fhevm.create_encrypted_input(CONTRACT, USER).add8(2).encrypt()
    with pytest.raises(InputProofError):
        fhevm.verify_input(first.handles[0], second.input_proof, USER, CONTRACT)


def test_arithmetic_wraps(fhevm):
    a = fhevm.as_encrypted(250, FheType.EUINT8)
    assert fhevm.peek(fhevm.add(a, 10)) == 4
    assert fhevm.peek(fhevm.sub(fhevm.as_encrypted(1, FheType.EUINT8), 2)) == 255


def test_uninitialized_operand_is_zero(fhevm):
    total = fhevm.add(ZERO_HANDLE, fhevm.as_encrypted(3, FheType.EUINT32), FheType.EUINT32)
    assert fhevm.peek(total) == 3


def test_comparisons_and_select(fhevm):
    five = fhevm.as_encrypted(5, FheType.EUINT16)
    seven = fhevm.as_encrypted(7, FheType.EUINT16)

    assert fhevm.peek(fhevm.le(five, seven)) is True
    assert fhevm.peek(fhevm.gt(five, seven)) is False
    assert fhevm.peek(fhevm.eq(five, 5)) is True
    assert fhevm.peek(fhevm.select(fhevm.gt(seven, five), seven, five)) == 7


def test_operations_check_caller_acl(fhevm):
    secret = fhevm.as_encrypted(1, FheType.EUINT8)
    with fhevm.executing(CONTRACT):
        with pytest.raises(AccessDenied):
            fhevm.add(secret, 1)
    fhevm.allow(secret, CONTRACT)
    with fhevm.executing(CONTRACT):
        result = fhevm.add(secret, 1)
    assert fhevm.is_allowed(result, CONTRACT)


def test_public_decrypt_requires_flag(fhevm):
    handle = fhevm.as_encrypted(12, FheType.EUINT8)
    with pytest.raises(DecryptionDenied):
        fhevm.public_decrypt([handle])
    fhevm.make_publicly_decryptable(handle)
    assert fhevm.public_decrypt([handle]) == {handle_to_hex(handle): 12}


def test_keypair_is_hex(fhevm):
    keypair = fhevm.generate_keypair()
    assert len(bytes.fromhex(keypair.public_key)) == 64
    assert len(bytes.fromhex(keypair.private_key)) == 32


def test_user_decrypt_rejects_mismatched_keypair(fhevm):
    account = Account.create()
    handle = fhevm.as_encrypted(3, FheType.EUINT8)
    fhevm.allow(handle, account.address)
    fhevm.allow(handle, CONTRACT)
    keypair, other = fhevm.generate_keypair(), fhevm.generate_keypair()
    start = int(fhevm.clock())
    typed = fhevm.create_eip712(keypair.public_key, [CONTRACT], start, 1)

    with pytest.raises(DecryptionDenied):
        fhevm.user_decrypt(
            [{"handle": handle_to_hex(handle), "contractAddress": CONTRACT}],
            other.private_key,
            keypair.public_key,
            sign_typed_data(account, typed),
            [CONTRACT],
            account.address,
            start,
            1,
        )
