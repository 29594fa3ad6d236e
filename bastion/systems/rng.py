"""Domain-separated deterministic RNG using xxhash.

The outcome of tick T depends only on the seed and the state at T-1, so
two sessions with the same seed and the same actions replay identically.

Formula: RNG_Value = Hash(Seed, Domain, EntityID, Tick)
"""

from __future__ import annotations

import struct
from typing import Sequence, TypeVar

import xxhash

from bastion.core.enums import Domain

T = TypeVar("T")


class DeterministicRNG:
    """Stateless domain-separated pseudo-random number generator.

    Each call is a pure function of (seed, domain, entity_id, tick) with
    no internal mutable state.
    """

    __slots__ = ("_seed",)

    _MAX_UINT64 = (1 << 64) - 1

    def __init__(self, seed: int) -> None:
        self._seed = seed

    @property
    def seed(self) -> int:
        return self._seed

    def _hash(self, domain: Domain, entity_id: int, tick: int) -> int:
        payload = struct.pack("<qiqq", self._seed, domain.value, entity_id, tick)
        return xxhash.xxh64(payload).intdigest()

    def next_float(self, domain: Domain, entity_id: int, tick: int) -> float:
        """Return a deterministic float in [0.0, 1.0)."""
        return self._hash(domain, entity_id, tick) / (self._MAX_UINT64 + 1)

    def next_int(self, domain: Domain, entity_id: int, tick: int, low: int, high: int) -> int:
        """Return a deterministic integer in [low, high] inclusive."""
        f = self.next_float(domain, entity_id, tick)
        return low + int(f * (high - low + 1))

    def next_bool(self, domain: Domain, entity_id: int, tick: int, probability: float = 0.5) -> bool:
        """Return True with the given probability."""
        return self.next_float(domain, entity_id, tick) < probability

    def next_uniform(self, domain: Domain, entity_id: int, tick: int, low: float, high: float) -> float:
        """Return a deterministic float in [low, high)."""
        return low + self.next_float(domain, entity_id, tick) * (high - low)

    def choice(self, domain: Domain, entity_id: int, tick: int, options: Sequence[T]) -> T:
        """Pick one element of a non-empty sequence."""
        return options[self.next_int(domain, entity_id, tick, 0, len(options) - 1)]
