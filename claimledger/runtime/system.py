# claimledger/runtime/system.py
"""
System module: block height and the per-block event log.

Pallets see it through the `Environment` protocol only, so any object that
can report the current height and accept events can stand in for it.
"""

import logging
from typing import List, Protocol

from claimledger.core.types import BlockNumber, Event, EventRecord
from claimledger.storage import StorageBackend, StorageMap, StorageValue
from claimledger.storage.items import INDEX, JSON, UINT

logger = logging.getLogger(__name__)

PALLET = "System"


class Environment(Protocol):
    def block_number(self) -> BlockNumber:
        ...

    def deposit_event(self, event: Event) -> None:
        ...


class System:
    def __init__(self, backend: StorageBackend):
        self.number: StorageValue[int] = StorageValue(backend, PALLET, "Number", UINT)
        self.event_count: StorageValue[int] = StorageValue(backend, PALLET, "EventCount", UINT)
        # index → serialized EventRecord; keys zero-padded so they sort numerically
        self.events: StorageMap[int, dict] = StorageMap(
            backend, PALLET, "Events",
            key=INDEX,
            value=JSON,
        )

    def block_number(self) -> BlockNumber:
        return self.number.get() or 0

    def set_block_number(self, number: BlockNumber) -> None:
        self.number.put(number)

    def initialize_block(self, number: BlockNumber) -> None:
        """Move to block `number` and drop the previous block's events."""
        current = self.block_number()
        if number < current:
            raise ValueError(f"Block number cannot go backwards: {current} → {number}")
        self.events.clear()
        self.event_count.kill()
        self.set_block_number(number)
        logger.debug("Initialized block %d", number)

    def deposit_event(self, event: Event) -> None:
        block = self.block_number()
        # genesis block carries no events
        if block == 0:
            logger.debug("Dropping %s.%s deposited at genesis", event.pallet, event.name)
            return
        index = self.event_count.get() or 0
        record = EventRecord(block=block, index=index, event=event)
        self.events.insert(index, record.to_dict())
        self.event_count.put(index + 1)
        logger.debug("Deposited event #%d %s.%s", index, event.pallet, event.name)

    def read_events(self) -> List[EventRecord]:
        return [EventRecord.from_dict(raw) for _, raw in self.events.iter()]

    def read_events_for_pallet(self, pallet: str) -> List[Event]:
        return [r.event for r in self.read_events() if r.pallet == pallet]
