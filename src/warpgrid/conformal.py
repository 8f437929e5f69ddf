from __future__ import annotations

import math

from . import complex_ops as cx
from .grid_types import Point, Point3
from ..utils import debug_helpers

# Magnitude of the point returned for a near-singular Mobius denominator.
SINGULAR_MAGNITUDE = 1e6


def mobius_transform(
    z: complex,
    a: complex,
    b: complex,
    c: complex,
    d: complex,
    regularization: float = cx.EPSILON,
) -> complex:
    """
    (a*z + b) / (c*z + d).

    When |c*z + d| < regularization the quotient is replaced by a point of
    magnitude SINGULAR_MAGNITUDE along the numerator's argument, so the
    singularity shows up as a bounded spike rather than inf/nan.
    """
    numerator = cx.add(cx.multiply(a, z), b)
    denominator = cx.add(cx.multiply(c, z), d)
    if cx.modulus(denominator) < regularization:
        debug_helpers.log_once(
            "mobius_singular",
            f"mobius denominator below {regularization:g}; clamping to {SINGULAR_MAGNITUDE:g}",
            tag="conformal",
        )
        direction = cx.argument(numerator)
        return complex(
            math.cos(direction) * SINGULAR_MAGNITUDE,
            math.sin(direction) * SINGULAR_MAGNITUDE,
        )
    return cx.divide(numerator, denominator)


def stereographic_projection(
    p: Point | Point3,
    center: Point,
    radius: float,
    direction: int = 1,
) -> Point | Point3:
    """
    direction > 0: plane -> sphere of `radius` around `center`. Returns a Point3
      whose x/y are back in plane units and z is the signed height.
    direction < 0: perspective divide by (radius - z). A 2D input is taken to
      lie at z = 0. Points at the pole collapse onto the center.
    """
    if direction > 0:
        z = cx.from_point(p, center, radius)
        r2 = cx.modulus(z) ** 2
        factor = 2.0 / (1.0 + r2)
        return Point3(
            factor * z.real * radius + center[0],
            factor * z.imag * radius + center[1],
            (r2 - 1.0) / (r2 + 1.0) * radius,
        )

    pz = float(p[2]) if len(p) > 2 else 0.0
    if abs(pz - radius) < cx.EPSILON:
        return Point(float(center[0]), float(center[1]))
    factor = radius / (radius - pz)
    return Point(p[0] * factor + center[0], p[1] * factor + center[1])


def cylindrical_mapping(
    p: Point,
    center: Point,
    radius: float,
    direction: int = 1,
) -> Point:
    """
    direction > 0: offset from center -> (radius * angle, distance - radius).
    direction < 0: the exact algebraic inverse, back to plane coordinates.
    """
    if direction > 0:
        dx = p[0] - center[0]
        dy = p[1] - center[1]
        theta = math.atan2(dy, dx)
        return Point(radius * theta, math.hypot(dx, dy) - radius)

    theta = p[0] / radius
    r = p[1] + radius
    return Point(center[0] + r * math.cos(theta), center[1] + r * math.sin(theta))


def conic_mapping(
    p: Point,
    center: Point,
    radius: float,
    eccentricity: float = 0.5,
    direction: int = 1,
    regularization: float = cx.EPSILON,
) -> Point:
    """
    z -> z / (e*z + 1) on coordinates normalized by `radius`, mapped back to the
    plane. The backward direction flips the sign of e.
    """
    z = cx.from_point(p, center, radius)
    c = eccentricity if direction > 0 else -eccentricity
    w = mobius_transform(z, 1.0 + 0j, 0j, complex(c, 0.0), 1.0 + 0j, regularization)
    return Point(center[0] + radius * w.real, center[1] + radius * w.imag)
