# claimledger/__init__.py
"""
claimledger: a fungible balance ledger and a content claim registry, run as
deterministic state transitions over a pluggable key-value store.

Modelled on a minimal chain runtime: signed origins, per-block events and a
supply that is conserved across every transfer.
"""

__version__ = "0.1.0-dev"

from claimledger.core.errors import (
    AlreadyClaimed,
    BadOrigin,
    CallFiltered,
    DispatchError,
    InsufficientBalance,
    NonExistentAccount,
    NoSuchClaim,
    NotClaimOwner,
    Overflow,
)
from claimledger.core.types import Claim, ClaimCreated, ClaimRevoked, EventRecord, Transferred
from claimledger.core.encoding import hash_content, parse_claim_id
from claimledger.pallets.balances import AccountLedger
from claimledger.pallets.claims import ClaimRegistry
from claimledger.runtime.dispatch import Call, DispatchResult, Runtime
from claimledger.runtime.genesis import GenesisConfig
from claimledger.runtime.origin import Origin, ensure_signed
from claimledger.storage import MemoryStorage, SQLiteStorage, create_storage
from claimledger.verify.verifier import StateVerifier

__all__ = [
    "AccountLedger",
    "AlreadyClaimed",
    "BadOrigin",
    "Call",
    "CallFiltered",
    "Claim",
    "ClaimCreated",
    "ClaimRegistry",
    "ClaimRevoked",
    "DispatchError",
    "DispatchResult",
    "EventRecord",
    "GenesisConfig",
    "InsufficientBalance",
    "MemoryStorage",
    "NoSuchClaim",
    "NonExistentAccount",
    "NotClaimOwner",
    "Origin",
    "Overflow",
    "Runtime",
    "SQLiteStorage",
    "StateVerifier",
    "Transferred",
    "create_storage",
    "ensure_signed",
    "hash_content",
    "parse_claim_id",
]
