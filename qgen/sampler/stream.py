"""Seeded random stream shared by one query instantiation."""

from __future__ import annotations

_MULTIPLIER = 0x5DEECE66D
_ADDEND = 0xB
_MASK = (1 << 48) - 1


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value >= (1 << 31) else value


def _to_int64(value: int) -> int:
    value &= 0xFFFFFFFFFFFFFFFF
    return value - (1 << 64) if value >= (1 << 63) else value


class RandomStream:
    """
    48-bit linear congruential generator.

    Multiplier, addend and seed scrambling follow the classic 48-bit LCG,
    so a given seed always replays the same sequence of draws. A stream is
    owned by a single generation context and is not thread-safe.
    """

    def __init__(self, seed: int = 0) -> None:
        self.initial_seed = int(seed)
        self._seed = (int(seed) ^ _MULTIPLIER) & _MASK

    def _next(self, bits: int) -> int:
        self._seed = (self._seed * _MULTIPLIER + _ADDEND) & _MASK
        return _to_int32(self._seed >> (48 - bits))

    def next_int(self, bound: int) -> int:
        """Return an integer uniformly drawn from ``[0, bound)``."""

        if bound <= 0:
            raise ValueError(f"bound must be positive, got {bound}")
        r = self._next(31)
        m = bound - 1
        if bound & m == 0:
            return (bound * r) >> 31
        u = r
        r = u % bound
        # Reject draws from the incomplete final bucket (32-bit overflow test).
        while u - r + m >= (1 << 31):
            u = self._next(31)
            r = u % bound
        return r

    def next_long(self) -> int:
        """Return a signed 64-bit integer."""

        high = self._next(32)
        low = self._next(32)
        return _to_int64((high << 32) + low)

    def uniform_int(self, lo: int, hi: int) -> int:
        """Return an integer uniformly drawn from ``[lo, hi]`` inclusive."""

        if hi < lo:
            raise ValueError(f"empty range [{lo}, {hi}]")
        return lo + self.next_int(hi - lo + 1)

    def __repr__(self) -> str:
        return f"RandomStream(seed={self.initial_seed})"
