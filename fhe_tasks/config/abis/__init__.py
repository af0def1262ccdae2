"""
Contract ABI package for the FHE task runner.

Contains the ABIs of the confidential example contracts, one module per
contract. Bytecode for deployment comes from hardhat build artifacts
(see fhe_tasks.helpers.artifacts).
"""

from .fhe_counter import FHE_COUNTER_ABI
from .simple import SIMPLE_TEST_ABI
from .voting import ENCRYPTED_VOTING_ABI

# Contract name (as compiled) -> ABI
ABIS_BY_CONTRACT = {
    "FHECounter": FHE_COUNTER_ABI,
    "Test": SIMPLE_TEST_ABI,
    "EncryptedVoting": ENCRYPTED_VOTING_ABI,
}

__all__ = [
    'FHE_COUNTER_ABI',
    'SIMPLE_TEST_ABI',
    'ENCRYPTED_VOTING_ABI',
    'ABIS_BY_CONTRACT',
]
