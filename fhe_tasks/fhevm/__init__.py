from .base import DecryptionError, EncryptedInputBuilder, FhevmInstance
from .decrypt import public_decrypt_value, setup_user_decrypt
from .factory import create_instance, create_mock_instance, load_backend
from .mock import MockFhevm
from .relayer import RelayerError, RelayerFhevm
from .types import EncryptedInput, FheType, Keypair

__all__ = [
    "DecryptionError",
    "EncryptedInput",
    "EncryptedInputBuilder",
    "FheType",
    "FhevmInstance",
    "Keypair",
    "MockFhevm",
    "RelayerError",
    "RelayerFhevm",
    "create_instance",
    "create_mock_instance",
    "load_backend",
    "public_decrypt_value",
    "setup_user_decrypt",
]
