# claimledger/storage/items.py
"""
Typed views over a StorageBackend: a keyed map and a single-slot value.
"""

from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterator, Optional, Tuple, TypeVar

from claimledger.core.canon import canonical_json_str, from_canonical
from . import StorageBackend

K = TypeVar("K")
V = TypeVar("V")


@dataclass(frozen=True)
class Codec:
    """Pair of functions turning a Python value into stored text and back."""
    encode: Callable[[Any], str]
    decode: Callable[[str], Any]


TEXT = Codec(encode=str, decode=str)
UINT = Codec(encode=lambda n: str(int(n)), decode=int)
INDEX = Codec(encode=lambda n: f"{int(n):010d}", decode=int)
HEX = Codec(encode=lambda b: b.hex(), decode=bytes.fromhex)
JSON = Codec(encode=canonical_json_str, decode=from_canonical)


class StorageMap(Generic[K, V]):
    """`prefix.name` map with get / insert / remove / mutate over one backend."""

    def __init__(self, backend: StorageBackend, prefix: str, name: str, key: Codec, value: Codec):
        self.backend = backend
        self.item = f"{prefix}.{name}"
        self.key = key
        self.value = value

    def get(self, k: K) -> Optional[V]:
        raw = self.backend.get(self.item, self.key.encode(k))
        return None if raw is None else self.value.decode(raw)

    def contains_key(self, k: K) -> bool:
        return self.backend.contains(self.item, self.key.encode(k))

    def insert(self, k: K, v: V) -> None:
        self.backend.insert(self.item, self.key.encode(k), self.value.encode(v))

    def remove(self, k: K) -> None:
        self.backend.remove(self.item, self.key.encode(k))

    def mutate(self, k: K, fn: Callable[[Optional[V]], Optional[V]]) -> Optional[V]:
        """Apply `fn` to the current value (None if absent); None removes the entry."""
        result: list = []

        def apply(raw: Optional[str]) -> Optional[str]:
            new = fn(None if raw is None else self.value.decode(raw))
            result.append(new)
            return None if new is None else self.value.encode(new)

        self.backend.mutate(self.item, self.key.encode(k), apply)
        return result[0]

    def iter(self) -> Iterator[Tuple[K, V]]:
        for raw_key, raw_value in self.backend.iter_prefix(self.item):
            yield self.key.decode(raw_key), self.value.decode(raw_value)

    def clear(self) -> None:
        self.backend.clear_prefix(self.item)


class StorageValue(Generic[V]):
    """Scalar item stored under a fixed slot of the backend."""

    SLOT = ""

    def __init__(self, backend: StorageBackend, prefix: str, name: str, value: Codec):
        self.backend = backend
        self.item = f"{prefix}.{name}"
        self.value = value

    def get(self) -> Optional[V]:
        raw = self.backend.get(self.item, self.SLOT)
        return None if raw is None else self.value.decode(raw)

    def exists(self) -> bool:
        return self.backend.contains(self.item, self.SLOT)

    def put(self, v: V) -> None:
        self.backend.insert(self.item, self.SLOT, self.value.encode(v))

    def kill(self) -> None:
        self.backend.remove(self.item, self.SLOT)

    def mutate(self, fn: Callable[[Optional[V]], Optional[V]]) -> Optional[V]:
        new = fn(self.get())
        if new is None:
            self.kill()
        else:
            self.put(new)
        return new
