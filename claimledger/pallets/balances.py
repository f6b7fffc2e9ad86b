# claimledger/pallets/balances.py
"""
Account ledger: per-account balances and the total issuance that must equal
their sum between calls.

`mint` is deliberately permissive: any signed caller may credit any account.
It sits behind its own gate (`mint_gate`) so a runtime can switch it off
without touching `transfer`.
"""

import logging
from typing import Iterator, List, Optional, Tuple

from claimledger.core.errors import InsufficientBalance, NonExistentAccount, Overflow
from claimledger.core.types import (
    AccountId,
    Balance,
    Transferred,
    checked_add,
    checked_sub,
    ensure_account,
    ensure_balance,
)
from claimledger.runtime.origin import AuthorizationGate, Origin, ensure_signed
from claimledger.runtime.system import Environment
from claimledger.storage import StorageBackend, StorageMap, StorageValue
from claimledger.storage.items import TEXT, UINT

logger = logging.getLogger(__name__)

PALLET = "Balances"


class AccountLedger:
    """Fungible balances with a conserved total supply."""

    CALLS = ("mint", "transfer")

    def __init__(
        self,
        backend: StorageBackend,
        env: Environment,
        gate: AuthorizationGate = ensure_signed,
        mint_gate: AuthorizationGate = ensure_signed,
    ):
        self.backend = backend
        self.env = env
        self.gate = gate
        self.mint_gate = mint_gate
        self.balances: StorageMap[AccountId, Balance] = StorageMap(backend, PALLET, "Balances", key=TEXT, value=UINT)
        self.issuance: StorageValue[Balance] = StorageValue(backend, PALLET, "TotalIssuance", UINT)

    # ── Calls ───────────────────────────────────────────────────────────────

    def mint(self, origin: Origin, dest: AccountId, amount: Balance) -> None:
        """An unsafe mint that can be called by anyone signed."""
        # signed, but who it is does not matter
        _anyone = self.mint_gate(origin)
        ensure_account(dest)
        ensure_balance(amount)

        new_balance = checked_add(self.balances.get(dest) or 0, amount)
        new_issuance = checked_add(self.issuance.get() or 0, amount)
        if new_balance is None or new_issuance is None:
            raise Overflow(f"minting {amount} to {dest} exceeds the u128 range")

        with self.backend.transaction():
            self.balances.insert(dest, new_balance)
            self.issuance.put(new_issuance)
        logger.debug("Minted %d to %s (issuance %d)", amount, dest, new_issuance)

    def transfer(self, origin: Origin, dest: AccountId, amount: Balance) -> None:
        """Transfer `amount` from the signer of `origin` to `dest`."""
        sender = self.gate(origin)
        ensure_account(dest)
        ensure_balance(amount)

        sender_balance = self.balances.get(sender)
        if sender_balance is None:
            raise NonExistentAccount(f"{sender} has no balance entry")

        remainder = checked_sub(sender_balance, amount)
        if remainder is None:
            raise InsufficientBalance(f"{sender} holds {sender_balance}, cannot send {amount}")

        if dest != sender:
            dest_balance = checked_add(self.balances.get(dest) or 0, amount)
            if dest_balance is None:
                raise InsufficientBalance(f"crediting {amount} to {dest} overflows")
            with self.backend.transaction():
                self.balances.insert(sender, remainder)
                self.balances.insert(dest, dest_balance)

        self.env.deposit_event(Transferred(from_=sender, to=dest, amount=amount))

    def build_genesis(self, endowments: List[Tuple[AccountId, Balance]], issuance: Balance) -> None:
        """Write pre-validated endowments. Issuance stays absent when there are none."""
        for who, amount in endowments:
            self.balances.insert(who, amount)
        if endowments:
            self.issuance.put(issuance)

    # ── Reads ───────────────────────────────────────────────────────────────

    def balance_of(self, who: AccountId) -> Optional[Balance]:
        return self.balances.get(who)

    def total_issuance(self) -> Optional[Balance]:
        return self.issuance.get()

    def accounts(self) -> Iterator[Tuple[AccountId, Balance]]:
        return self.balances.iter()
