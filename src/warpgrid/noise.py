from __future__ import annotations

import math

import numpy as np


def fade(t: float) -> float:
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


def lerp(a: float, b: float, t: float) -> float:
    return a + t * (b - a)


class ValueNoise:
    """
    2D value noise on the integer lattice, smoothed with the quintic fade curve.

    The lattice is hashed through a permutation table drawn from `seed`, so a
    given seed always yields the same field. Output lies in [-1, 1].
    """

    def __init__(self, seed: int = 0) -> None:
        rng = np.random.default_rng(seed)
        perm = rng.permutation(256)
        self._perm: list[int] = np.concatenate([perm, perm]).tolist()
        self._values: list[float] = (rng.random(256) * 2.0 - 1.0).tolist()
        self.seed = seed

    def _lattice(self, ix: int, iy: int) -> float:
        p = self._perm
        return self._values[p[p[ix] + iy]]

    def sample(self, x: float, y: float) -> float:
        x0 = math.floor(x)
        y0 = math.floor(y)
        ix = x0 & 255
        iy = y0 & 255
        u = fade(x - x0)
        v = fade(y - y0)

        v00 = self._lattice(ix, iy)
        v10 = self._lattice(ix + 1, iy)
        v01 = self._lattice(ix, iy + 1)
        v11 = self._lattice(ix + 1, iy + 1)
        return lerp(lerp(v00, v10, u), lerp(v01, v11, u), v)

    def fbm(self, x: float, y: float, octaves: int = 3, persistence: float = 0.5) -> float:
        """Sum of `octaves` layers, doubling frequency and scaling amplitude by
        `persistence` each time, normalized by the total amplitude."""
        total = 0.0
        frequency = 1.0
        amplitude = 1.0
        max_value = 0.0
        for _ in range(max(1, octaves)):
            total += self.sample(x * frequency, y * frequency) * amplitude
            max_value += amplitude
            amplitude *= persistence
            frequency *= 2.0
        if max_value <= 0.0:
            return 0.0
        return total / max_value
