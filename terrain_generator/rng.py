# terrain_generator/rng.py

"""
================================================================================
SEEDED PSEUDO-RANDOM NUMBER GENERATOR
================================================================================
A reproducible random stream keyed by a hashed seed (Mulberry32 mixing). This
is the sole entropy source for terrain generation.

Data Contract:
---------------
- Inputs: a seed (string or number).
- Outputs: floats in [0, 1).
- Side Effects: each draw advances the instance's single 32-bit state
  register. There is no global state.
- Invariants: the mixing constants are load-bearing. Changing them changes
  every permutation table and therefore all terrain.
================================================================================
"""
from .hashing import UINT32_MASK, seed_hash

_STATE_INCREMENT = 0x6D2B79F5
_TWO_POW_32 = 4294967296.0


def _imul(a: int, b: int) -> int:
    """32-bit integer multiplication, keeping the low 32 bits."""
    return (a * b) & UINT32_MASK


class SeededRNG:
    """A deterministic random stream. Two instances built from the same seed produce identical draws."""

    def __init__(self, seed):
        self.seed = seed_hash(seed)
        self.state = self.seed

    def next(self) -> float:
        self.state = (self.state + _STATE_INCREMENT) & UINT32_MASK
        t = self.state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & UINT32_MASK
        return ((t ^ (t >> 14)) & UINT32_MASK) / _TWO_POW_32

    def range(self, min_value: float, max_value: float) -> float:
        return min_value + self.next() * (max_value - min_value)

    def reset(self):
        """Restores the state to the hashed seed so the stream can be replayed."""
        self.state = self.seed
