from __future__ import annotations

from pathlib import Path

from eth_utils import is_hex_address, to_checksum_address


def write_address_file(path: str | Path, address: str) -> Path:
    """Persist a deployed contract address as a bare hex string."""
    path = Path(path)
    if path.parent != Path("."):
        path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(to_checksum_address(address))
    return path


def read_address_file(path: str | Path) -> str:
    raw = Path(path).read_text().strip()
    if not is_hex_address(raw):
        raise ValueError(f"{path} does not contain a contract address: {raw[:64]!r}")
    return to_checksum_address(raw)
