# claimledger/verify/verifier.py
from typing import List, Optional
from dataclasses import dataclass

from claimledger.core.encoding import claim_id_hex
from claimledger.core.types import BALANCE_MAX, CLAIM_ID_LENGTH
from claimledger.runtime.dispatch import Runtime


@dataclass
class VerificationFailure:
    index: int
    message: str
    category: str = "general"  # e.g. "issuance", "balance", "claim", "storage"


@dataclass
class VerificationResult:
    is_valid: bool
    message: str = ""
    failures: List[VerificationFailure] = None

    def __post_init__(self):
        if self.failures is None:
            self.failures = []

    def fail(self, index: int, message: str, category: str) -> None:
        self.failures.append(VerificationFailure(index, message, category))
        self.is_valid = False

    @property
    def first_failure(self) -> Optional[VerificationFailure]:
        return self.failures[0] if self.failures else None

    def __bool__(self):
        return self.is_valid

    def __str__(self):
        if self.is_valid:
            return "State is valid ✓"
        lines = [f"Verification FAILED ({len(self.failures)} issues):"]
        for f in self.failures:
            lines.append(f"  • [{f.index}] {f.category}: {f.message}")
        return "\n".join(lines)


class StateVerifier:
    """
    Offline checker for the invariants runtime state must satisfy between calls:
    issuance equals the sum of balances, every balance is a u128, and every
    claim names an owner and a height no later than the current block.
    """

    def verify(self, runtime: Runtime) -> VerificationResult:
        result = VerificationResult(True)

        try:
            accounts = list(runtime.balances.accounts())
            issuance = runtime.balances.total_issuance()
            claims = list(runtime.claims.all_claims())
        except (ValueError, TypeError, KeyError) as e:
            # undecodable rows
            result.fail(-1, f"Failed to decode state: {e}", "storage")
            result.message = "State could not be loaded"
            return result

        # 1. Balance range
        total = 0
        for i, (who, amount) in enumerate(accounts):
            if amount < 0 or amount > BALANCE_MAX:
                result.fail(i, f"Balance of {who} out of range: {amount}", "balance")
            total += amount

        # 2. Conservation
        expected = issuance or 0
        if issuance is None and accounts:
            result.fail(-1, "TotalIssuance missing while balances exist", "issuance")
        elif total != expected:
            result.fail(-1, f"TotalIssuance {expected} != sum of balances {total}", "issuance")

        # 3. Claims
        current = runtime.system.block_number()
        for i, (claim, record) in enumerate(claims):
            label = claim_id_hex(claim)
            if len(claim) != CLAIM_ID_LENGTH:
                result.fail(i, f"Claim id {label} is not {CLAIM_ID_LENGTH} bytes", "claim")
            if not record.owner:
                result.fail(i, f"Claim {label} has no owner", "claim")
            if record.height > current:
                result.fail(i, f"Claim {label} registered at future block {record.height}", "claim")

        result.message = (
            f"{len(accounts)} accounts, {len(claims)} claims, issuance {expected}"
            if result.is_valid
            else f"Failed with {len(result.failures)} issues"
        )
        return result
