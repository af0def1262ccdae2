from .clients import ContractClient, Web3ContractClient
from .facades import EncryptedVoting, FheCounter, SimpleStore
from .mock_chain import ContractReverted, MockChain

__all__ = [
    "ContractClient",
    "ContractReverted",
    "EncryptedVoting",
    "FheCounter",
    "MockChain",
    "SimpleStore",
    "Web3ContractClient",
]
