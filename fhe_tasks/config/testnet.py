"""
Testnet config loader.

The JSON file is flat, snake_case, and describes one network: the node and
relayer endpoints, the gateway chain id, and the addresses of the fhevm host
and gateway contracts. Every field is validated up front so a bad file fails
with a field-level report instead of an obscure downstream RPC error.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from eth_utils import is_hex_address, to_checksum_address


class ConfigError(ValueError):
    """Raised when a testnet config file is unreadable or invalid.

    ``problems`` maps each offending field to a short reason.
    """

    def __init__(self, source: str, problems: dict[str, str]):
        self.source = source
        self.problems = dict(problems)
        details = "; ".join(f"{k}: {v}" for k, v in sorted(self.problems.items()))
        super().__init__(f"Invalid testnet config {source}: {details}")


@dataclass(frozen=True)
class TestnetConfig:
    json_rpc_url: str
    relayer_url: str
    gateway_chain_id: int
    acl_contract_address: str
    fhevm_executor_contract_address: str
    kms_verifier_contract_address: str
    decryption_oracle_contract_address: str
    input_verifier_contract_address: str
    input_verification_contract_address: str
    decryption_contract_address: str
    chain_id: int | None = None

    # keep pytest from collecting this class when imported into test modules
    __test__ = False

    def host_contracts(self) -> tuple[str, str, str, str]:
        """Constructor arguments shared by every confidential contract."""
        return (
            self.acl_contract_address,
            self.fhevm_executor_contract_address,
            self.kms_verifier_contract_address,
            self.decryption_oracle_contract_address,
        )


_URL_FIELDS = ("json_rpc_url", "relayer_url")
_URL_SCHEMES = ("http", "https", "ws", "wss")
_INT_FIELDS = ("gateway_chain_id", "chain_id")
_OPTIONAL_FIELDS = ("chain_id",)
_ADDRESS_FIELDS = tuple(
    f.name for f in fields(TestnetConfig) if f.name.endswith("_contract_address")
)


def _check_url(value: Any) -> str | None:
    if not isinstance(value, str) or not value.strip():
        return "must be a non-empty URL string"
    parsed = urlparse(value.strip())
    if parsed.scheme not in _URL_SCHEMES or not parsed.netloc:
        return f"unsupported URL {value!r}"
    return None


def _check_int(value: Any) -> str | None:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool):
        return "must be a positive integer"
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if not isinstance(value, int) or value <= 0:
        return "must be a positive integer"
    return None


def _check_address(value: Any) -> str | None:
    if not isinstance(value, str) or not is_hex_address(value.strip()):
        return "must be a 20-byte 0x-prefixed hex address"
    return None


def parse_testnet_config(raw: dict[str, Any], source: str = "<dict>") -> TestnetConfig:
    """Validate a decoded config mapping and build a TestnetConfig."""
    if not isinstance(raw, dict):
        raise ConfigError(source, {"<root>": "expected a JSON object"})

    problems: dict[str, str] = {}
    values: dict[str, Any] = {}
    for f in fields(TestnetConfig):
        name = f.name
        value = raw.get(name)
        if value is None:
            if name not in _OPTIONAL_FIELDS:
                problems[name] = "missing"
            continue
        if name in _URL_FIELDS:
            err = _check_url(value)
            values[name] = value.strip() if err is None else value
        elif name in _INT_FIELDS:
            err = _check_int(value)
            values[name] = int(value) if err is None else value
        else:
            err = _check_address(value)
            values[name] = to_checksum_address(value.strip()) if err is None else value
        if err:
            problems[name] = err

    if problems:
        raise ConfigError(source, problems)
    return TestnetConfig(**values)


def load_testnet_config(path: str | Path) -> TestnetConfig:
    """Read and validate a testnet config JSON file."""
    path = Path(path)
    try:
        with open(path) as f:
            raw = json.load(f)
    except FileNotFoundError:
        raise ConfigError(str(path), {"<file>": "not found"}) from None
    except json.JSONDecodeError as e:
        raise ConfigError(str(path), {"<file>": f"invalid JSON ({e.msg} at line {e.lineno})"}) from e
    return parse_testnet_config(raw, source=str(path))
