# claimledger/runtime/dispatch.py
"""
Runtime assembly: one storage backend, the System module and the two pallets,
plus the dispatch boundary that turns a call and an origin into a result.
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from claimledger.core.errors import (
    BalancesError,
    CallFiltered,
    ClaimsError,
    DispatchError,
)
from claimledger.core.types import EVENT_TYPES, EventRecord
from claimledger.pallets.balances import AccountLedger
from claimledger.pallets.claims import ClaimRegistry
from claimledger.runtime.origin import Origin, deny_all, ensure_signed
from claimledger.runtime.system import System
from claimledger.storage import StorageBackend

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RuntimeVersion:
    spec_name: str = "claimledger-runtime"
    impl_name: str = "claimledger-runtime"
    authoring_version: int = 1
    spec_version: int = 2
    impl_version: int = 1
    transaction_version: int = 1
    state_version: int = 1


VERSION = RuntimeVersion()
TOKEN_NAME = "XYZ"
TOKEN_SYMBOL = "ℵ"

# pallet index → (pallet name, call names by call index)
PALLET_INDICES: Dict[int, str] = {0: "System", 1: "Balances", 2: "Claims"}
CALL_INDICES: Dict[str, tuple] = {
    "Balances": AccountLedger.CALLS,
    "Claims": ClaimRegistry.CALLS,
}

ERRORS: Dict[str, List[str]] = {
    "Balances": [cls.__name__ for cls in BalancesError.__subclasses__()],
    "Claims": [cls.__name__ for cls in ClaimsError.__subclasses__()],
}

STORAGE: Dict[str, List[str]] = {
    "System": ["Number", "EventCount", "Events"],
    "Balances": ["Balances", "TotalIssuance"],
    "Claims": ["Claims"],
}


@dataclass(frozen=True)
class Call:
    pallet: str
    function: str
    args: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_index(cls, pallet_index: int, call_index: int, args: Optional[Dict[str, Any]] = None) -> "Call":
        pallet = PALLET_INDICES.get(pallet_index)
        calls = CALL_INDICES.get(pallet, ())
        if call_index < 0 or call_index >= len(calls):
            raise LookupError(f"No call {call_index} in pallet {pallet_index}")
        return cls(pallet, calls[call_index], dict(args or {}))

    def __str__(self):
        return f"{self.pallet}.{self.function}"


@dataclass
class DispatchResult:
    """Outcome of one dispatched call. Truthy on success."""
    ok: bool
    call: Optional[Call] = None
    error: Optional[DispatchError] = None
    events: List[EventRecord] = field(default_factory=list)

    def __bool__(self):
        return self.ok

    def __str__(self):
        if self.ok:
            return f"{self.call} ok ({len(self.events)} events)"
        return f"{self.call} failed: {self.error.module}.{self.error.name}"


class Runtime:
    """
    Composes System, Balances and Claims over a single backend.

    `unsafe_mint=False` removes `Balances.mint` from the dispatch table; the
    call then fails with `CallFiltered`. Direct use of `runtime.balances.mint`
    is blocked as well through its gate.
    """

    def __init__(self, backend: StorageBackend, unsafe_mint: bool = True):
        self.backend = backend
        self.unsafe_mint = unsafe_mint
        self.system = System(backend)
        self.balances = AccountLedger(
            backend,
            self.system,
            gate=ensure_signed,
            mint_gate=ensure_signed if unsafe_mint else deny_all,
        )
        self.claims = ClaimRegistry(backend, self.system, gate=ensure_signed)

    @property
    def version(self) -> RuntimeVersion:
        return VERSION

    def pallet(self, name: str):
        pallets = {"System": self.system, "Balances": self.balances, "Claims": self.claims}
        if name not in pallets:
            raise LookupError(f"Unknown pallet: {name}")
        return pallets[name]

    def is_filtered(self, call: Call) -> bool:
        return str(call) == "Balances.mint" and not self.unsafe_mint

    def dispatch(self, call: Call, origin: Origin) -> DispatchResult:
        """
        Run one call to completion. Storage writes and deposited events
        commit together; a DispatchError rolls both back and is returned in
        the result. Any other exception propagates.
        """
        pallet = self.pallet(call.pallet)
        if call.function not in CALL_INDICES.get(call.pallet, ()):
            raise LookupError(f"Unknown call: {call}")

        before = self.system.event_count.get() or 0
        try:
            if self.is_filtered(call):
                raise CallFiltered(f"{call} is disabled")
            with self.backend.transaction():
                getattr(pallet, call.function)(origin, **call.args)
        except DispatchError as e:
            logger.warning("Dispatch %s from %s failed: %s", call, origin, e)
            return DispatchResult(False, call=call, error=e)

        events = [r for r in self.system.read_events() if r.index >= before]
        logger.info("Dispatched %s from %s", call, origin)
        return DispatchResult(True, call=call, events=events)

    def initialize_block(self, number: int) -> None:
        with self.backend.transaction():
            self.system.initialize_block(number)

    def next_block(self) -> int:
        number = self.system.block_number() + 1
        self.initialize_block(number)
        return number

    def metadata(self) -> dict:
        return {
            "version": asdict(VERSION),
            "token": {"name": TOKEN_NAME, "symbol": TOKEN_SYMBOL},
            "pallets": [
                {
                    "index": index,
                    "name": name,
                    "calls": list(CALL_INDICES.get(name, ())),
                    "events": sorted(cls.name for cls in EVENT_TYPES.values() if cls.pallet == name),
                    "errors": ERRORS.get(name, []),
                    "storage": STORAGE.get(name, []),
                }
                for index, name in sorted(PALLET_INDICES.items())
            ],
        }
