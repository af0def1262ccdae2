"""
JSON encoding of encrypted input bundles.

Binary values are written as Node-style buffer objects,
``{"type": "Buffer", "data": [0, 255, ...]}``, so files produced by the
JavaScript relayer SDK and by these tasks are interchangeable. Decoding turns
every such object back into ``bytes`` wherever it appears in the document.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ..fhevm.types import EncryptedInput

BUFFER_TAG = "Buffer"


def buffer_to_json(value: bytes | bytearray | memoryview) -> dict[str, Any]:
    return {"type": BUFFER_TAG, "data": list(bytes(value))}


def _default(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return buffer_to_json(value)
    if isinstance(value, EncryptedInput):
        return value.to_dict()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _object_hook(obj: dict[str, Any]) -> Any:
    if obj.get("type") == BUFFER_TAG and isinstance(obj.get("data"), list):
        return bytes(obj["data"])
    return obj


def dumps(value: Any) -> str:
    return json.dumps(value, default=_default)


def loads(text: str) -> Any:
    return json.loads(text, object_hook=_object_hook)


def dump_encrypted_input(bundle: EncryptedInput, path: str | Path) -> Path:
    path = Path(path)
    path.write_text(dumps(bundle))
    return path


def load_encrypted_input(path: str | Path) -> EncryptedInput:
    data = loads(Path(path).read_text())
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected an object with handles and inputProof")
    return EncryptedInput.from_dict(data)
