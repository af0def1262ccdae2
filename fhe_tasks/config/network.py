"""
Network selection for the FHE task runner.

The NETWORK environment variable picks between the live Optalysys testnet
(real node + relayer) and the in-process mock network used by the tests.
"""

import os
from typing import Any


# =============================================================================
# NETWORK CONFIGURATIONS
# =============================================================================

NETWORKS: dict[str, dict[str, Any]] = {
    "optalysys": {
        "name": "Optalysys FHE Testnet",
        "config_file": "testnet_config.json",
        "mock": False,
    },
    "hardhat": {
        "name": "In-process mock network",
        "config_file": "mocked_config.json",
        "mock": True,
    },
}

DEFAULT_NETWORK = "hardhat"
NETWORK_ENV = "NETWORK"

# Default key file for fixtures running against a live network
DEFAULT_KEY_FILE = "key.json"

# Balance under which task:getBalance refuses to continue
MIN_BALANCE_WEI: int = 10 * 10**9  # 10 gwei

# Receipt wait timeout (seconds)
TX_TIMEOUT: int = 240
GAS_LIMIT_BUFFER_NUM, GAS_LIMIT_BUFFER_DEN = 12, 10  # 20% buffer on estimates
FALLBACK_GAS_LIMIT: int = 5_000_000


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def get_network_name(network: str | None = None) -> str:
    """Resolve the active network name.

    Unknown names behave like the mock network, matching how the hardhat
    fixtures treat anything that is not the live testnet.
    """
    if network is None:
        network = os.getenv(NETWORK_ENV) or DEFAULT_NETWORK
    return network.strip().lower()


def get_network_config(network: str | None = None) -> dict[str, Any]:
    """Get configuration for a network, falling back to the mock entry."""
    name = get_network_name(network)
    return NETWORKS.get(name, NETWORKS[DEFAULT_NETWORK])


def is_live_network(network: str | None = None) -> bool:
    return not get_network_config(network)["mock"]


def get_config_file(network: str | None = None) -> str:
    """Testnet config file used by fixtures for the given network."""
    return get_network_config(network)["config_file"]
