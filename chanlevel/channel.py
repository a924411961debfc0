"""Lossy channel simulation.

Two independent impairments are applied to a message of codewords:
- Whole-message loss, decided once before any encoding work
- At most one flipped bit per codeword, decided independently per codeword

Probabilities are expressed per mille (0-1000). Randomness always comes from
an explicit generator so runs are reproducible under a fixed seed.
"""

from __future__ import annotations

import logging
import threading
from typing import Protocol

import numpy as np

from chanlevel.fec.hamming import CODEWORD_BITS
from chanlevel.typing import Message

logger = logging.getLogger(__name__)

PER_MILLE = 1000


class IntegerSource(Protocol):
    """The slice of ``numpy.random.Generator`` the simulator draws from."""

    def integers(self, low: int, high: int) -> int: ...


class RandomSource:
    """Hands out one independent generator per message.

    Child generators are spawned from a single ``SeedSequence`` under a lock,
    so concurrent messages never share generator state and a fixed seed
    reproduces the same sequence of per-message generators.
    """

    def __init__(self, seed: int | None = None) -> None:
        self._seed_sequence = np.random.SeedSequence(seed)
        self._lock = threading.Lock()

    def spawn(self) -> np.random.Generator:
        with self._lock:
            (child,) = self._seed_sequence.spawn(1)
        return np.random.default_rng(child)


class ChannelSimulator:
    """Injects bit errors and message loss using an explicit random source."""

    def __init__(self, rng: IntegerSource) -> None:
        self.rng = rng

    def _roll(self, probability_per_mille: int) -> bool:
        return int(self.rng.integers(0, PER_MILLE)) < probability_per_mille

    def should_drop_message(self, probability_per_mille: int) -> bool:
        """Decide whether the whole message is lost."""
        return self._roll(probability_per_mille)

    def inject_bit_error(self, codeword: int, probability_per_mille: int) -> int:
        """Flip one random bit of ``codeword`` with the given probability."""
        if not self._roll(probability_per_mille):
            return codeword
        position = int(self.rng.integers(0, CODEWORD_BITS))
        return codeword ^ (1 << position)

    def apply_bit_errors(self, message: Message, probability_per_mille: int) -> list[int]:
        """Corrupt ``message`` in place, one independent draw per codeword.

        Returns:
            Indices of the codewords that had a bit flipped
        """
        flipped: list[int] = []
        for i in range(len(message)):
            original = int(message[i])
            corrupted = self.inject_bit_error(original, probability_per_mille)
            if corrupted != original:
                message[i] = corrupted
                flipped.append(i)
        if flipped:
            logger.debug("Channel flipped bits in %d/%d codewords", len(flipped), len(message))
        return flipped


__all__ = ["ChannelSimulator", "IntegerSource", "PER_MILLE", "RandomSource"]
