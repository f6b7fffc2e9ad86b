# claimledger/core/encoding.py
import hashlib

from claimledger.core.types import CLAIM_ID_LENGTH, ClaimId


def hash_content(data: bytes) -> ClaimId:
    """BLAKE2b-256 digest of raw content, used as its claim id."""
    return hashlib.blake2b(data, digest_size=CLAIM_ID_LENGTH).digest()


def claim_id_hex(claim: ClaimId) -> str:
    return "0x" + claim.hex()


def parse_claim_id(text: str) -> ClaimId:
    """Parse 64 hex digits, with or without a 0x prefix."""
    s = text.strip()
    if s[:2].lower() == "0x":
        s = s[2:]
    if len(s) != CLAIM_ID_LENGTH * 2:
        raise ValueError(f"Claim id must be {CLAIM_ID_LENGTH * 2} hex digits, got {len(s)}")
    try:
        return bytes.fromhex(s)
    except ValueError:
        raise ValueError(f"Claim id is not valid hex: {text!r}")
