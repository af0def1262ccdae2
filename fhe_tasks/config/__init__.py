"""
Configuration package for the FHE task runner.
"""

from fhe_tasks.config.network import (
    NETWORKS,
    DEFAULT_NETWORK,
    DEFAULT_KEY_FILE,
    MIN_BALANCE_WEI,
    TX_TIMEOUT,
    get_network_name,
    get_network_config,
    is_live_network,
    get_config_file,
)

from fhe_tasks.config.testnet import (
    ConfigError,
    TestnetConfig,
    load_testnet_config,
    parse_testnet_config,
)

from fhe_tasks.config.abis import (
    FHE_COUNTER_ABI,
    SIMPLE_TEST_ABI,
    ENCRYPTED_VOTING_ABI,
    ABIS_BY_CONTRACT,
)

__all__ = [
    # Network
    'NETWORKS',
    'DEFAULT_NETWORK',
    'DEFAULT_KEY_FILE',
    'MIN_BALANCE_WEI',
    'TX_TIMEOUT',
    'get_network_name',
    'get_network_config',
    'is_live_network',
    'get_config_file',
    # Testnet config
    'ConfigError',
    'TestnetConfig',
    'load_testnet_config',
    'parse_testnet_config',
    # ABIs
    'FHE_COUNTER_ABI',
    'SIMPLE_TEST_ABI',
    'ENCRYPTED_VOTING_ABI',
    'ABIS_BY_CONTRACT',
]
