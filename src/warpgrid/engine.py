from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from jaxtyping import jaxtyped

from .cache import BLENDING_CACHE, TRANSFORMATION_CACHE, NamedCache
from .domains import Domain
from .grid_types import Point, PointArray, typechecker
from .registry import DomainRegistry

# Grid cells never shrink below this fraction of the base size.
MIN_GRID_SCALE = 0.2


@dataclass(frozen=True)
class BlendingWeights:
    """
    Per-domain weights (> 0 only) at a point, plus the flat residual
    max(0, 1 - sum). Domain weights are not renormalized, so overlapping
    domains can carry a total influence above 1.
    """

    domain_weights: tuple[tuple[Domain, float], ...]
    flat_weight: float

    @property
    def total_weight(self) -> float:
        return sum(w for _, w in self.domain_weights)

    @property
    def is_flat(self) -> bool:
        return self.flat_weight == 1.0


def _key(point: Point) -> tuple[float, float]:
    return (float(point[0]), float(point[1]))


class TransformationEngine:
    """Forward/inverse point transforms and local grid size over a registry."""

    def __init__(self, registry: DomainRegistry) -> None:
        self.registry = registry

    @property
    def cache(self) -> NamedCache:
        return self.registry.cache

    def blending_weights(self, point: Point) -> BlendingWeights:
        key = _key(point)
        found, cached = self.cache.lookup(BLENDING_CACHE, key)
        if found:
            return cached

        pairs: list[tuple[Domain, float]] = []
        for domain in self.registry:
            weight = domain.weight_at(point)
            if weight > 0:
                pairs.append((domain, weight))
        total = sum(w for _, w in pairs)
        result = BlendingWeights(tuple(pairs), max(0.0, 1.0 - total))
        return self.cache.set(BLENDING_CACHE, key, result)

    def transform_point(self, point: Point) -> Point:
        """
        flat_weight * p + sum(w_i * T_i(p)). Each domain sees the original
        point; the outputs are blended, not chained.
        """
        key = _key(point)
        found, cached = self.cache.lookup(TRANSFORMATION_CACHE, key)
        if found:
            return cached

        x, y = key
        weights = self.blending_weights(point)
        if weights.is_flat:
            return self.cache.set(TRANSFORMATION_CACHE, key, Point(x, y))

        rx = weights.flat_weight * x
        ry = weights.flat_weight * y
        p = Point(x, y)
        for domain, weight in weights.domain_weights:
            tx, ty = domain.transform(p, 1)[:2]
            rx += weight * tx
            ry += weight * ty
        return self.cache.set(TRANSFORMATION_CACHE, key, Point(rx, ry))

    def inverse_transform_point(self, point: Point) -> Point:
        """
        Undo every domain one at a time, newest first. Approximate whenever more
        than one domain overlaps the point.
        """
        result = Point.of(point)
        for domain in reversed(self.registry):
            result = domain.inverse(result)
        return result

    def effective_grid_size(self, point: Point, base_size: float) -> float:
        if not base_size > 0:
            raise ValueError("base_size must be > 0")
        multiplier = 1.0
        for domain, weight in self.blending_weights(point).domain_weights:
            multiplier *= (
                domain.curvature_factor(point) * (1.0 - weight)
                + (1.0 - weight * 0.5) * weight
            )
        return max(base_size * MIN_GRID_SCALE, base_size * multiplier)

    @jaxtyped(typechecker=typechecker)
    def transform_points(self, points: PointArray) -> PointArray:
        """Forward transform of every row of an (N,2) array."""
        out = np.empty(points.shape, dtype=np.float64)
        for i, (x, y) in enumerate(points.tolist()):
            out[i] = self.transform_point(Point(x, y))
        return out
