# claimledger/storage/memory.py
import logging
from contextlib import contextmanager
from typing import Dict, Iterator, Optional, Tuple

from . import StorageBackend

logger = logging.getLogger(__name__)


class MemoryStorage(StorageBackend):
    """Dict-backed storage for tests and throwaway runtimes."""

    def __init__(self):
        self._data: Optional[Dict[Tuple[str, str], str]] = {}
        self._depth = 0

    @property
    def data(self) -> Dict[Tuple[str, str], str]:
        if self._data is None:
            raise RuntimeError("Storage is closed")
        return self._data

    def get(self, item: str, key: str) -> Optional[str]:
        return self.data.get((item, key))

    def insert(self, item: str, key: str, value: str) -> None:
        self.data[(item, key)] = value

    def remove(self, item: str, key: str) -> None:
        self.data.pop((item, key), None)

    def iter_prefix(self, item: str) -> Iterator[Tuple[str, str]]:
        rows = sorted((k, v) for (i, k), v in self.data.items() if i == item)
        return iter(rows)

    def clear_prefix(self, item: str) -> None:
        for pair in [p for p in self.data if p[0] == item]:
            del self.data[pair]

    @contextmanager
    def transaction(self) -> Iterator[None]:
        snapshot = dict(self.data) if self._depth == 0 else None
        self._depth += 1
        try:
            yield
        except BaseException:
            if snapshot is not None:
                logger.debug("Rolling back in-memory transaction")
                self._data = snapshot
            raise
        finally:
            self._depth -= 1

    def snapshot(self) -> Dict[Tuple[str, str], str]:
        """Copy of every stored entry, for before/after comparisons."""
        return dict(self.data)

    def close(self) -> None:
        self._data = None
