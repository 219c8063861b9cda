"""Domain-separated deterministic RNG using xxhash.

The outcome of epoch E depends only on the battle seed and the state at the
end of epoch E-1. Worker scheduling order must not matter.

Formula: RNG_Value = Hash(Seed, Domain, Key, Epoch, Salt)
"""

from __future__ import annotations

import struct
from typing import Sequence, TypeVar

import xxhash

from hexroyale.core.enums import Domain

T = TypeVar("T")


class DeterministicRNG:
    """Stateless domain-separated pseudo-random number generator.

    Each call is a pure function of (seed, domain, key, epoch, salt), with no
    internal mutable state, so it is safe to share across decision workers.
    Keys may be agent ids, item ids or any other string/int label.
    """

    __slots__ = ("_seed",)

    _MAX_UINT64 = (1 << 64) - 1

    def __init__(self, seed: int) -> None:
        self._seed = seed

    @property
    def seed(self) -> int:
        return self._seed

    def _hash(self, domain: Domain, key: int | str, epoch: int, salt: int) -> int:
        payload = struct.pack("<qiqi", self._seed, domain.value, epoch, salt)
        return xxhash.xxh64(payload + str(key).encode("utf-8")).intdigest()

    def next_float(self, domain: Domain, key: int | str, epoch: int, salt: int = 0) -> float:
        """Return a deterministic float in [0.0, 1.0)."""
        return self._hash(domain, key, epoch, salt) / (self._MAX_UINT64 + 1)

    def next_int(
        self, domain: Domain, key: int | str, epoch: int, low: int, high: int, salt: int = 0,
    ) -> int:
        """Return a deterministic integer in [low, high] inclusive."""
        f = self.next_float(domain, key, epoch, salt)
        return low + int(f * (high - low + 1))

    def next_bool(
        self, domain: Domain, key: int | str, epoch: int, probability: float = 0.5, salt: int = 0,
    ) -> bool:
        """Return True with the given probability."""
        return self.next_float(domain, key, epoch, salt) < probability

    # -- sequence helpers --

    def choice(self, domain: Domain, key: int | str, epoch: int, seq: Sequence[T], salt: int = 0) -> T:
        if not seq:
            raise IndexError("choice from empty sequence")
        return seq[self.next_int(domain, key, epoch, 0, len(seq) - 1, salt)]

    def shuffle(self, domain: Domain, key: int | str, epoch: int, seq: Sequence[T]) -> list[T]:
        """Return a Fisher-Yates shuffled copy of *seq*."""
        out = list(seq)
        for i in range(len(out) - 1, 0, -1):
            j = self.next_int(domain, key, epoch, 0, i, salt=i)
            out[i], out[j] = out[j], out[i]
        return out

    def weighted(
        self,
        domain: Domain,
        key: int | str,
        epoch: int,
        weights: Sequence[tuple[T, float]],
        salt: int = 0,
    ) -> T:
        """Pick from ``(value, weight)`` pairs; weights need not sum to 1."""
        total = sum(w for _, w in weights)
        roll = self.next_float(domain, key, epoch, salt) * total
        cumulative = 0.0
        for value, weight in weights:
            cumulative += weight
            if roll < cumulative:
                return value
        return weights[-1][0]
