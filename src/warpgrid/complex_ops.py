"""Complex-plane helpers used by the conformal mappings.

Points are carried as Python ``complex`` values (``re`` = x, ``im`` = y); the
helpers below keep the mapping code readable and guard the one operation that
can blow up (division by ~0).
"""

from __future__ import annotations

import cmath

from .grid_types import Point

EPSILON = 1e-10


def from_point(p: Point, center: Point | None = None, scale: float = 1.0) -> complex:
    """Complex coordinate of `p` relative to `center`, divided by `scale`."""
    if center is None:
        return complex(p[0] / scale, p[1] / scale)
    return complex((p[0] - center[0]) / scale, (p[1] - center[1]) / scale)


def to_point(z: complex) -> Point:
    return Point(z.real, z.imag)


def add(z1: complex, z2: complex) -> complex:
    return z1 + z2


def subtract(z1: complex, z2: complex) -> complex:
    return z1 - z2


def multiply(z1: complex, z2: complex) -> complex:
    return z1 * z2


def divide(z1: complex, z2: complex) -> complex:
    """z1 / z2; a zero denominator yields a non-finite value instead of raising."""
    denom = z2.real * z2.real + z2.imag * z2.imag
    if denom == 0.0:
        return complex(float("nan"), float("nan"))
    return complex(
        (z1.real * z2.real + z1.imag * z2.imag) / denom,
        (z1.imag * z2.real - z1.real * z2.imag) / denom,
    )


def modulus(z: complex) -> float:
    return abs(z)


def argument(z: complex) -> float:
    return cmath.phase(z)


def conjugate(z: complex) -> complex:
    return z.conjugate()
