# claimledger/pallets/claims.py
"""
Claim registry: binds a content hash to the account that registered it.

A claim moves Unclaimed → Claimed(owner) on `create_claim` and back on
`revoke_claim` by that owner. There is no ownership transfer.
"""

import logging
from typing import Iterator, List, Optional, Tuple

from claimledger.core.errors import AlreadyClaimed, NoSuchClaim, NotClaimOwner
from claimledger.core.types import AccountId, Claim, ClaimCreated, ClaimId, ClaimRevoked, ensure_claim_id
from claimledger.core.encoding import claim_id_hex
from claimledger.runtime.origin import AuthorizationGate, Origin, ensure_signed
from claimledger.runtime.system import Environment
from claimledger.storage import Codec, StorageBackend, StorageMap
from claimledger.storage.items import HEX, JSON

logger = logging.getLogger(__name__)

PALLET = "Claims"

CLAIM = Codec(
    encode=lambda c: JSON.encode(c.to_dict()),
    decode=lambda raw: Claim(**JSON.decode(raw)),
)


class ClaimRegistry:
    CALLS = ("create_claim", "revoke_claim")

    def __init__(self, backend: StorageBackend, env: Environment, gate: AuthorizationGate = ensure_signed):
        self.env = env
        self.gate = gate
        self.claims: StorageMap[ClaimId, Claim] = StorageMap(backend, PALLET, "Claims", key=HEX, value=CLAIM)

    def create_claim(self, origin: Origin, claim: ClaimId) -> None:
        sender = self.gate(origin)
        claim = ensure_claim_id(claim)

        if self.claims.contains_key(claim):
            raise AlreadyClaimed(f"{claim_id_hex(claim)} is already registered")

        current_block = self.env.block_number()
        self.claims.insert(claim, Claim(owner=sender, height=current_block))
        logger.debug("Claim %s registered by %s at block %d", claim_id_hex(claim), sender, current_block)

        self.env.deposit_event(ClaimCreated(who=sender, claim=claim))

    def revoke_claim(self, origin: Origin, claim: ClaimId) -> None:
        sender = self.gate(origin)
        claim = ensure_claim_id(claim)

        record = self.claims.get(claim)
        if record is None:
            raise NoSuchClaim(f"{claim_id_hex(claim)} is not registered")
        if record.owner != sender:
            raise NotClaimOwner(f"{claim_id_hex(claim)} belongs to {record.owner}, not {sender}")

        self.claims.remove(claim)
        self.env.deposit_event(ClaimRevoked(who=sender, claim=claim))

    def build_genesis(self, claims: List[Tuple[ClaimId, AccountId]]) -> None:
        for claim, owner in claims:
            self.claims.insert(ensure_claim_id(claim), Claim(owner=owner, height=0))

    def claim_of(self, claim: ClaimId) -> Optional[Claim]:
        return self.claims.get(ensure_claim_id(claim))

    def all_claims(self) -> Iterator[Tuple[ClaimId, Claim]]:
        return self.claims.iter()
