# claimledger/core/errors.py
"""
Dispatch errors: expected, recoverable outcomes of a call.

Every error is raised before any storage write, so a failed call leaves
state untouched.
"""


class DispatchError(Exception):
    """Base for every caller-visible dispatch failure."""
    module: str = "Runtime"

    @property
    def name(self) -> str:
        return type(self).__name__

    def __init__(self, message: str = ""):
        self.message = message or self.__doc__ or self.name
        super().__init__(f"{self.module}.{self.name}: {self.message}")


class BadOrigin(DispatchError):
    """Call requires a signed origin."""
    module = "System"


class CallFiltered(DispatchError):
    """Call is disabled in this runtime."""
    module = "System"


# ── Balances ────────────────────────────────────────────────────────────────

class BalancesError(DispatchError):
    module = "Balances"


class NonExistentAccount(BalancesError):
    """Account does not exist."""


class InsufficientBalance(BalancesError):
    """Account does not have enough balance."""


class Overflow(BalancesError):
    """Credit would exceed the maximum representable balance."""


# ── Claims ──────────────────────────────────────────────────────────────────

class ClaimsError(DispatchError):
    module = "Claims"


class AlreadyClaimed(ClaimsError):
    """The claim already exists."""


class NoSuchClaim(ClaimsError):
    """The claim does not exist, so it cannot be revoked."""


class NotClaimOwner(ClaimsError):
    """The claim is owned by another account, so caller can't revoke it."""
