"""
Seeded RNG for deterministic, replayable seasons.
"""
from __future__ import annotations

import random
from typing import Any, Sequence


class SeededRNG:
    """Wrapper around random.Random injected into every stochastic component."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)
        self._seed = seed

    @property
    def seed(self) -> int | None:
        return self._seed

    def random(self) -> float:
        return self._rng.random()

    def uniform(self, a: float, b: float) -> float:
        return self._rng.uniform(a, b)

    def randint(self, a: int, b: int) -> int:
        return self._rng.randint(a, b)

    def choice(self, seq: Sequence[Any]) -> Any:
        return self._rng.choice(seq)

    def chance(self, probability: float) -> bool:
        """True with the given probability (clamped to 0..1)."""
        return self._rng.random() < max(0.0, min(1.0, probability))

    def getstate(self) -> list[Any]:
        """Generator state as JSON-ready lists; setstate accepts the same shape."""
        version, internal, gauss_next = self._rng.getstate()
        return [version, list(internal), gauss_next]

    def setstate(self, state: Sequence[Any]) -> None:
        version, internal, gauss_next = state
        self._rng.setstate((version, tuple(internal), gauss_next))

    def token_hex(self) -> str:
        """32 hex chars drawn from the seeded stream; used for reproducible player ids."""
        return f"{self._rng.getrandbits(128):032x}"
