# claimledger/runtime/origin.py
from dataclasses import dataclass
from typing import Callable, Literal, Optional

from claimledger.core.errors import BadOrigin
from claimledger.core.types import AccountId, ensure_account

OriginKind = Literal["signed", "root", "none"]


@dataclass(frozen=True)
class Origin:
    """Who is behind a call, as established before the call reaches a pallet."""
    kind: OriginKind
    who: Optional[AccountId] = None

    @classmethod
    def signed(cls, who: AccountId) -> "Origin":
        return cls("signed", ensure_account(who))

    @classmethod
    def root(cls) -> "Origin":
        return cls("root")

    @classmethod
    def none(cls) -> "Origin":
        return cls("none")

    def __str__(self):
        return f"signed({self.who})" if self.kind == "signed" else self.kind


# origin → authenticated identity, or raise BadOrigin
AuthorizationGate = Callable[[Origin], AccountId]


def ensure_signed(origin: Origin) -> AccountId:
    if origin.kind != "signed" or not origin.who:
        raise BadOrigin(f"expected a signed origin, got {origin}")
    return origin.who


def deny_all(origin: Origin) -> AccountId:
    """Gate that refuses every origin; used to switch a call off."""
    raise BadOrigin(f"call is disabled for {origin}")
