"""
Seeded 32-bit PRNG (mulberry32) with explicit state threading.

The generator is a value: ``step`` returns the advanced generator together
with a float in ``[0, 1)``, so the optimizer loop is a fold over the
stream and the same seed always yields the same sequence.
"""

from typing import NamedTuple, Tuple

_MASK = 0xFFFFFFFF


def _imul(a: int, b: int) -> int:
    """32-bit wrapping multiply."""
    return (a * b) & _MASK


class Mulberry32(NamedTuple):
    state: int

    @classmethod
    def seeded(cls, seed: int) -> "Mulberry32":
        return cls(int(seed) & _MASK)


def step(rng: Mulberry32) -> Tuple[Mulberry32, float]:
    """Advance *rng* once; returns ``(next_rng, value)``."""
    state = (rng.state + 0x6D2B79F5) & _MASK
    t = _imul(state ^ (state >> 15), state | 1)
    t = ((t + _imul(t ^ (t >> 7), t | 61)) & _MASK) ^ t
    value = ((t ^ (t >> 14)) & _MASK) / 4294967296
    return Mulberry32(state), value


def next_int(rng: Mulberry32, upper: int) -> Tuple[Mulberry32, int]:
    """Uniform integer in ``[0, upper)``."""
    rng, value = step(rng)
    return rng, int(value * upper)
