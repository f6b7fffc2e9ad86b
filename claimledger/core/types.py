# claimledger/core/types.py
from dataclasses import dataclass, asdict
from typing import ClassVar, Dict, Optional, Type

AccountId = str
Balance = int
ClaimId = bytes
BlockNumber = int

BALANCE_MAX = 2**128 - 1
CLAIM_ID_LENGTH = 32


def ensure_account(who: AccountId) -> AccountId:
    if not isinstance(who, str):
        raise TypeError(f"Account id must be a string, got {type(who).__name__}")
    if not who:
        raise ValueError("Account id must not be empty")
    return who


def ensure_balance(amount: Balance) -> Balance:
    """Reject anything that is not an unsigned 128-bit integer."""
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise TypeError(f"Balance must be an int, got {type(amount).__name__}")
    if amount < 0 or amount > BALANCE_MAX:
        raise ValueError(f"Balance out of u128 range: {amount}")
    return amount


def ensure_claim_id(claim: ClaimId) -> ClaimId:
    if not isinstance(claim, (bytes, bytearray)):
        raise TypeError(f"Claim id must be bytes, got {type(claim).__name__}")
    if len(claim) != CLAIM_ID_LENGTH:
        raise ValueError(f"Claim id must be {CLAIM_ID_LENGTH} bytes, got {len(claim)}")
    return bytes(claim)


def checked_add(a: Balance, b: Balance) -> Optional[Balance]:
    total = a + b
    return total if total <= BALANCE_MAX else None


def checked_sub(a: Balance, b: Balance) -> Optional[Balance]:
    rest = a - b
    return rest if rest >= 0 else None


@dataclass(frozen=True)
class Claim:
    """Registry entry: who registered a content id and at which block."""
    owner: AccountId
    height: BlockNumber

    def to_dict(self) -> dict:
        return asdict(self)


# ── Events ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Event:
    """Base for domain events. Subclasses set `pallet` and `name`."""
    pallet: ClassVar[str] = ""
    name: ClassVar[str] = ""

    def to_dict(self) -> dict:
        raise NotImplementedError

    @classmethod
    def from_dict(cls, data: dict) -> "Event":
        raise NotImplementedError


@dataclass(frozen=True)
class Transferred(Event):
    pallet: ClassVar[str] = "Balances"
    name: ClassVar[str] = "Transferred"

    from_: AccountId
    to: AccountId
    amount: Balance

    def to_dict(self) -> dict:
        # amounts travel as decimal strings, u128 does not fit a JSON double
        return {"from": self.from_, "to": self.to, "amount": str(self.amount)}

    @classmethod
    def from_dict(cls, data: dict) -> "Transferred":
        return cls(from_=data["from"], to=data["to"], amount=int(data["amount"]))


@dataclass(frozen=True)
class ClaimCreated(Event):
    pallet: ClassVar[str] = "Claims"
    name: ClassVar[str] = "ClaimCreated"

    who: AccountId
    claim: ClaimId

    def to_dict(self) -> dict:
        return {"who": self.who, "claim": self.claim.hex()}

    @classmethod
    def from_dict(cls, data: dict) -> "ClaimCreated":
        return cls(who=data["who"], claim=bytes.fromhex(data["claim"]))


@dataclass(frozen=True)
class ClaimRevoked(Event):
    pallet: ClassVar[str] = "Claims"
    name: ClassVar[str] = "ClaimRevoked"

    who: AccountId
    claim: ClaimId

    def to_dict(self) -> dict:
        return {"who": self.who, "claim": self.claim.hex()}

    @classmethod
    def from_dict(cls, data: dict) -> "ClaimRevoked":
        return cls(who=data["who"], claim=bytes.fromhex(data["claim"]))


EVENT_TYPES: Dict[str, Type[Event]] = {
    f"{cls.pallet}.{cls.name}": cls
    for cls in (Transferred, ClaimCreated, ClaimRevoked)
}


@dataclass(frozen=True)
class EventRecord:
    """An event as deposited in a block, with its position in that block."""
    block: BlockNumber
    index: int
    event: Event

    @property
    def pallet(self) -> str:
        return self.event.pallet

    def to_dict(self) -> dict:
        return {
            "block": self.block,
            "index": self.index,
            "pallet": self.event.pallet,
            "event": self.event.name,
            "data": self.event.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "EventRecord":
        key = f"{data['pallet']}.{data['event']}"
        event_cls = EVENT_TYPES.get(key)
        if event_cls is None:
            raise ValueError(f"Unknown event type: {key}")
        return cls(block=data["block"], index=data["index"], event=event_cls.from_dict(data["data"]))
