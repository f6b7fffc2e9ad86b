# claimledger/runtime/genesis.py
import logging
from dataclasses import dataclass, field
from typing import List, Tuple

from claimledger.core.types import (
    AccountId,
    Balance,
    ClaimId,
    checked_add,
    ensure_account,
    ensure_balance,
    ensure_claim_id,
)
from claimledger.runtime.dispatch import Runtime

logger = logging.getLogger(__name__)


@dataclass
class GenesisConfig:
    """
    Initial state written before block 1: endowed accounts and pre-registered
    claims. Issuance is derived from the endowments so the supply invariant
    holds from the first block on.
    """
    balances: List[Tuple[AccountId, Balance]] = field(default_factory=list)
    claims: List[Tuple[ClaimId, AccountId]] = field(default_factory=list)

    def add_balance(self, who: AccountId, amount: Balance) -> "GenesisConfig":
        self.balances.append((who, amount))
        return self

    def add_claim(self, claim: ClaimId, owner: AccountId) -> "GenesisConfig":
        self.claims.append((claim, owner))
        return self

    def validate(self) -> Balance:
        """Check every entry; returns the total issuance the config implies."""
        seen = set()
        issuance = 0
        for who, amount in self.balances:
            ensure_account(who)
            ensure_balance(amount)
            if who in seen:
                raise ValueError(f"Duplicate genesis balance for {who}")
            seen.add(who)
            issuance = checked_add(issuance, amount)
            if issuance is None:
                raise ValueError("Genesis issuance exceeds the u128 range")

        claimed = set()
        for claim, owner in self.claims:
            ensure_account(owner)
            claim = ensure_claim_id(claim)
            if claim in claimed:
                raise ValueError(f"Duplicate genesis claim {claim.hex()}")
            claimed.add(claim)
        return issuance

    def build(self, runtime: Runtime) -> None:
        """Write the genesis state. Nothing is written if validation fails."""
        if runtime.system.block_number() != 0:
            raise ValueError("Genesis can only be built at block 0")
        if runtime.balances.total_issuance() is not None or any(True for _ in runtime.claims.all_claims()):
            raise ValueError("Genesis state already built")

        issuance = self.validate()
        with runtime.backend.transaction():
            runtime.balances.build_genesis(self.balances, issuance)
            runtime.claims.build_genesis(self.claims)

        logger.info(
            "Built genesis: %d accounts, %d claims, issuance %d",
            len(self.balances), len(self.claims), issuance,
        )
