"""
Key-value storage backends for runtime state.

Every backend stores text values under an (item, key) pair, where `item`
names a storage item such as "Balances.Balances" and `key` is its encoded
map key ("" for scalar values).
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, ContextManager, Dict, Iterator, Optional, Tuple


class StorageBackend(ABC):
    """Abstract base for all persistent storage implementations."""

    @abstractmethod
    def get(self, item: str, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def insert(self, item: str, key: str, value: str) -> None:
        pass

    @abstractmethod
    def remove(self, item: str, key: str) -> None:
        pass

    @abstractmethod
    def iter_prefix(self, item: str) -> Iterator[Tuple[str, str]]:
        """Yield (key, value) pairs of one storage item, ordered by key."""
        pass

    @abstractmethod
    def clear_prefix(self, item: str) -> None:
        pass

    @abstractmethod
    def transaction(self) -> ContextManager[None]:
        """Group writes so they commit together or not at all."""
        pass

    @abstractmethod
    def snapshot(self) -> Dict[Tuple[str, str], str]:
        """Copy of every stored entry, for before/after comparisons."""
        pass

    @abstractmethod
    def close(self) -> None:
        pass

    def contains(self, item: str, key: str) -> bool:
        return self.get(item, key) is not None

    def mutate(
        self,
        item: str,
        key: str,
        fn: Callable[[Optional[str]], Optional[str]],
    ) -> Optional[str]:
        """
        Apply `fn` to the current value (None when absent) and store the result.
        Returning None from `fn` removes the entry.
        """
        new_value = fn(self.get(item, key))
        if new_value is None:
            self.remove(item, key)
        else:
            self.insert(item, key, new_value)
        return new_value

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def create_storage(uri: str) -> StorageBackend:
    if uri.startswith("memory://"):
        from .memory import MemoryStorage
        return MemoryStorage()

    elif uri.startswith("sqlite://"):
        from .sqlite import SQLiteStorage
        raw_path = uri[len("sqlite://"):]
        if not raw_path:
            raise ValueError(f"Missing database path in storage URI: {uri}")
        return SQLiteStorage(Path(raw_path).resolve())

    elif "://" in uri:
        raise ValueError(f"Unsupported storage URI: {uri}")

    # Plain file path → SQLite
    from .sqlite import SQLiteStorage
    return SQLiteStorage(Path(uri).resolve())


from .memory import MemoryStorage
from .sqlite import SQLiteStorage
from .items import Codec, StorageMap, StorageValue

__all__ = [
    "StorageBackend",
    "create_storage",
    "MemoryStorage",
    "SQLiteStorage",
    "Codec",
    "StorageMap",
    "StorageValue",
]
