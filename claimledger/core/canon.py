# claimledger/core/canon.py
import json
from typing import Any

try:
    import jcs
except ImportError:
    raise ImportError("Please install jcs: pip install jcs")


def canonical_json(obj: Any) -> bytes:
    """
    RFC 8785 (JCS) bytes for a stored value or event record.
    Identical state always serializes to identical bytes.
    """
    return jcs.canonicalize(obj)


def canonical_json_str(obj: Any) -> str:
    """Text form, as written into the storage table."""
    return canonical_json(obj).decode("utf-8")


def from_canonical(text: str) -> Any:
    return json.loads(text)
