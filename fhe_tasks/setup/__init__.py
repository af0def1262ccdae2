from .credentials import (
    EnvSecretProvider,
    MissingSecretError,
    PromptSecretProvider,
    StaticSecretProvider,
    default_password_providers,
    resolve_secret,
)
from .wallet import (
    MissingEnvironmentError,
    WalletDecryptionError,
    create_account,
    import_account,
    load_wallet,
)

__all__ = [
    "EnvSecretProvider",
    "MissingEnvironmentError",
    "MissingSecretError",
    "PromptSecretProvider",
    "StaticSecretProvider",
    "WalletDecryptionError",
    "create_account",
    "default_password_providers",
    "import_account",
    "load_wallet",
    "resolve_secret",
]
