"""
Web3 setup helper - provides common web3 instance utilities.

Public API
----------
build_w3(rpc_url)
    Return a Web3 instance for the node URL from the testnet config.
    POA extra-data middleware is injected since the FHE testnets run
    clique/POA-style consensus.
require_connection(w3)
    Fail fast when the node does not answer.
"""
from __future__ import annotations

from web3 import HTTPProvider, LegacyWebSocketProvider, Web3
from web3.middleware import ExtraDataToPOAMiddleware

__all__ = ["build_w3", "require_connection"]


def _provider_for(url: str):
    if url.startswith(("ws://", "wss://")):
        return LegacyWebSocketProvider(url)
    return HTTPProvider(url)


def build_w3(rpc_url: str) -> Web3:
    """Create a fresh Web3 connected to ``rpc_url``."""
    if not rpc_url:
        raise OSError("No JSON-RPC URL given (check json_rpc_url in the testnet config)")
    w3 = Web3(_provider_for(rpc_url))
    w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
    return w3


def require_connection(w3: Web3) -> Web3:
    """Fail fast with a readable error when the node is unreachable."""
    if not w3.is_connected():
        raise OSError("Web3 provider not connected (check json_rpc_url)")
    return w3
