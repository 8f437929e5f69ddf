from __future__ import annotations

import itertools
import math
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Mapping, cast

from . import conformal
from .blending import get_blend_function
from .complex_ops import EPSILON
from .grid_types import Point, Point3
from .noise import ValueNoise
from ..utils import debug

DOMAIN_TYPES: tuple[str, ...] = (
    "spherical",
    "cylindrical",
    "conic",
    "noise",
    "harmonic",
    "gaussian-curvature",
)
_TYPE_ALIASES = {"gaussian-curvature-bump": "gaussian-curvature"}

DEFAULT_INVERSE_TOLERANCE = 0.1
DEFAULT_INVERSE_MAX_ITERATIONS = 50

# Ids double as creation order.
_domain_ids = itertools.count(1)


class UnknownDomainTypeError(ValueError):
    pass


def distance_between(p1: Point, p2: Point) -> float:
    return math.hypot(p2[0] - p1[0], p2[1] - p1[1])


class Domain(ABC):
    """
    A localized transformation of the plane.

    `weight_at` says how strongly the domain applies at a point, `transform`
    maps a point, and `inverse` undoes `transform` numerically unless a variant
    knows its exact inverse.
    """

    type_name: ClassVar[str]

    def __init__(
        self,
        *,
        center: Point | tuple[float, float] = (0.0, 0.0),
        radius: float = 100.0,
        amplitude: float = 0.0,
        blend_mode: str = "smooth",
        options: Mapping[str, Any] | None = None,
        inverse_tolerance: float = DEFAULT_INVERSE_TOLERANCE,
        inverse_max_iterations: int = DEFAULT_INVERSE_MAX_ITERATIONS,
    ) -> None:
        if not math.isfinite(radius) or radius <= 0:
            raise ValueError("radius must be a finite positive number")
        if inverse_tolerance <= 0:
            raise ValueError("inverse_tolerance must be > 0")
        if inverse_max_iterations < 0:
            raise ValueError("inverse_max_iterations must be >= 0")

        self.id = next(_domain_ids)
        self.center = Point.of(center)
        self.radius = float(radius)
        self.amplitude = float(amplitude)
        self.blend_mode = blend_mode
        self._blend = get_blend_function(blend_mode)
        self.options: dict[str, Any] = dict(options or {})
        self.inverse_tolerance = float(inverse_tolerance)
        self.inverse_max_iterations = int(inverse_max_iterations)

    @property
    def created(self) -> int:
        return self.id

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(id={self.id}, center=({self.center.x:g}, "
            f"{self.center.y:g}), radius={self.radius:g}, blend_mode={self.blend_mode!r})"
        )

    def distance_to(self, point: Point) -> float:
        return distance_between(self.center, point)

    def weight_at(self, point: Point) -> float:
        return self._blend(self.distance_to(point), self.radius)

    @abstractmethod
    def transform(self, point: Point, direction: int = 1) -> Point:
        raise NotImplementedError

    def inverse(self, point: Point) -> Point:
        return self._iterative_inverse(point)

    def _iterative_inverse(
        self,
        target: Point,
        tolerance: float | None = None,
        max_iterations: int | None = None,
    ) -> Point:
        """
        Damped fixed-point iteration: move the guess by half the residual
        target - transform(guess) until the residual drops below `tolerance`.
        Returns the last guess when the iteration budget runs out.
        """
        tol = self.inverse_tolerance if tolerance is None else tolerance
        budget = self.inverse_max_iterations if max_iterations is None else max_iterations
        gx, gy = float(target[0]), float(target[1])
        for _ in range(budget):
            fx, fy = self.transform(Point(gx, gy))[:2]
            dx = target[0] - fx
            dy = target[1] - fy
            if math.hypot(dx, dy) < tol:
                break
            gx += dx * 0.5
            gy += dy * 0.5
        return Point(gx, gy)

    def curvature_factor(self, point: Point) -> float:
        return 1.0


class SphericalDomain(Domain):
    type_name = "spherical"

    def lift(self, point: Point) -> Point3:
        """Full stereographic image of `point`, height included."""
        return cast(
            Point3,
            conformal.stereographic_projection(point, self.center, self.radius, 1),
        )

    def transform(self, point: Point, direction: int = 1) -> Point:
        mapped = conformal.stereographic_projection(
            point, self.center, self.radius, direction
        )
        return Point(mapped[0], mapped[1])

    def curvature_factor(self, point: Point) -> float:
        t = self.distance_to(point) / self.radius
        return 1.0 - min(0.5, 1.0 - t * t)


class CylindricalDomain(Domain):
    type_name = "cylindrical"

    def transform(self, point: Point, direction: int = 1) -> Point:
        return conformal.cylindrical_mapping(point, self.center, self.radius, direction)

    def inverse(self, point: Point) -> Point:
        return conformal.cylindrical_mapping(point, self.center, self.radius, -1)

    def curvature_factor(self, point: Point) -> float:
        return 0.7


class ConicDomain(Domain):
    type_name = "conic"

    @property
    def eccentricity(self) -> float:
        return float(self.options.get("eccentricity", 0.5))

    @property
    def regularization(self) -> float:
        return float(self.options.get("regularization", EPSILON))

    def transform(self, point: Point, direction: int = 1) -> Point:
        return conformal.conic_mapping(
            point,
            self.center,
            self.radius,
            self.eccentricity,
            direction,
            self.regularization,
        )

    def curvature_factor(self, point: Point) -> float:
        return 1.0 - self.eccentricity * 0.4


class NoiseDomain(Domain):
    """Adds the same fractal noise value to both coordinates. `direction` is ignored."""

    type_name = "noise"

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.scale = float(self.options.get("scale", 0.1))
        self.octaves = int(self.options.get("octaves", 3))
        self.persistence = float(self.options.get("persistence", 0.5))
        self._noise = ValueNoise(int(self.options.get("seed", 0)))

    def noise_at(self, point: Point) -> float:
        return self._noise.fbm(
            (point[0] - self.center.x) * self.scale,
            (point[1] - self.center.y) * self.scale,
            self.octaves,
            self.persistence,
        )

    def transform(self, point: Point, direction: int = 1) -> Point:
        offset = self.noise_at(point) * self.amplitude
        return Point(point[0] + offset, point[1] + offset)


class HarmonicDomain(Domain):
    type_name = "harmonic"

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.freq_x = float(self.options.get("freq_x", 3.0))
        self.freq_y = float(self.options.get("freq_y", 2.0))
        self.phase = float(self.options.get("phase", 0.0))

    def transform(self, point: Point, direction: int = 1) -> Point:
        dx = point[0] - self.center.x
        dy = point[1] - self.center.y
        return Point(
            point[0] + math.sin(dx * self.freq_x + self.phase) * self.amplitude,
            point[1] + math.cos(dy * self.freq_y + self.phase) * self.amplitude,
        )


# (u, v, sign) in coordinates normalized by the domain radius.
GAUSSIAN_BUMPS: tuple[tuple[float, float, float], ...] = (
    (0.5, 0.5, 1.0),
    (-0.5, -0.5, 1.0),
    (0.5, -0.5, -1.0),
    (-0.5, 0.5, -1.0),
)


class GaussianCurvatureDomain(Domain):
    type_name = "gaussian-curvature"

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.spread = float(self.options.get("spread", 4.0))

    def bump_height(self, point: Point) -> float:
        u = (point[0] - self.center.x) / self.radius
        v = (point[1] - self.center.y) / self.radius
        height = 0.0
        for bx, by, sign in GAUSSIAN_BUMPS:
            dx = u - bx
            dy = v - by
            height += sign * math.exp(-(dx * dx + dy * dy) * self.spread)
        return height

    def transform(self, point: Point, direction: int = 1) -> Point:
        offset = self.bump_height(point) * self.amplitude
        return Point(point[0] + offset, point[1] + offset)


DOMAIN_CLASSES: dict[str, type[Domain]] = {
    cls.type_name: cls
    for cls in (
        SphericalDomain,
        CylindricalDomain,
        ConicDomain,
        NoiseDomain,
        HarmonicDomain,
        GaussianCurvatureDomain,
    )
}


def create_domain(
    domain_type: str,
    *,
    center: Point | tuple[float, float] = (0.0, 0.0),
    radius: float = 100.0,
    amplitude: float = 0.0,
    blend_mode: str = "smooth",
    options: Mapping[str, Any] | None = None,
    inverse_tolerance: float = DEFAULT_INVERSE_TOLERANCE,
    inverse_max_iterations: int = DEFAULT_INVERSE_MAX_ITERATIONS,
) -> Domain:
    cls = DOMAIN_CLASSES.get(_TYPE_ALIASES.get(domain_type, domain_type))
    if cls is None:
        debug.log(f"invalid domain type: {domain_type!r}", tag="DomainFactory")
        raise UnknownDomainTypeError(
            f"{domain_type!r} is not a valid domain type "
            f"(expected one of: {', '.join(DOMAIN_TYPES)})"
        )
    return cls(
        center=center,
        radius=radius,
        amplitude=amplitude,
        blend_mode=blend_mode,
        options=options,
        inverse_tolerance=inverse_tolerance,
        inverse_max_iterations=inverse_max_iterations,
    )


def is_point_in_domain(point: Point, domain: Domain) -> bool:
    return domain.distance_to(point) <= domain.radius


def apply_domain_transformation(
    point: Point,
    domain_type: str,
    direction: int = 1,
    **config: Any,
) -> Point:
    """One-shot transform of `point` by a throwaway domain built from `config`."""
    return create_domain(domain_type, **config).transform(point, direction)
