"""Load contract bytecode and ABI from hardhat build artifacts."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ..config.abis import ABIS_BY_CONTRACT

DEFAULT_ARTIFACTS_DIR = Path("artifacts")

# Contract name -> Solidity source file it is compiled from
SOURCE_FILES = {
    "FHECounter": "FHECounter.sol",
    "Test": "Simple.sol",
    "EncryptedVoting": "EncryptedVoting.sol",
}


class ArtifactNotFound(FileNotFoundError):
    pass


def _candidates(contract: str, artifacts_dir: Path) -> list[Path]:
    source = SOURCE_FILES.get(contract, f"{contract}.sol")
    return [
        artifacts_dir / "contracts" / source / f"{contract}.json",
        artifacts_dir / f"{contract}.json",
    ]


def load_artifact(contract: str, artifacts_dir: str | Path | None = None) -> tuple[str, list[dict[str, Any]]]:
    """Return (bytecode, abi) for ``contract``.

    Looks for a hardhat artifact (``artifacts/contracts/<Source>.sol/<Name>.json``)
    or a flat ``<artifacts_dir>/<Name>.json``, then falls back to the
    ``<artifacts_dir>/<Name>.abi`` + ``<artifacts_dir>/<Name>.bin`` pair.
    """
    base = Path(artifacts_dir) if artifacts_dir else DEFAULT_ARTIFACTS_DIR
    for path in _candidates(contract, base):
        if path.exists():
            data = json.loads(path.read_text())
            bytecode = data.get("bytecode") or ""
            if isinstance(bytecode, dict):  # solc standard-json shape
                bytecode = bytecode.get("object", "")
            abi = data.get("abi") or ABIS_BY_CONTRACT.get(contract)
            return _prefixed(bytecode, path), abi

    abi_path = base / f"{contract}.abi"
    bin_path = base / f"{contract}.bin"
    if abi_path.exists() and bin_path.exists():
        abi = json.loads(abi_path.read_text())
        return _prefixed(bin_path.read_text().strip(), bin_path), abi

    raise ArtifactNotFound(
        f"Missing build artifacts for {contract} under {base}. "
        "Compile the contracts (npx hardhat compile) or pass --artifacts-dir."
    )


def _prefixed(bytecode: str, origin: Path) -> str:
    bytecode = bytecode.strip()
    if not bytecode or bytecode == "0x":
        raise ArtifactNotFound(f"Artifact {origin} has no bytecode (abstract contract or interface?)")
    if not bytecode.startswith("0x"):
        bytecode = "0x" + bytecode
    return bytecode
