from __future__ import annotations

from typing import Any, Iterator, Mapping

from .cache import DERIVED_CACHES, NamedCache
from .config import TransformationParams
from .domains import Domain, create_domain
from .grid_types import Point
from ..utils import debug


class DomainRegistry:
    """
    Insertion-ordered set of active domains, at most `capacity` long.

    Creating a domain at capacity evicts the oldest one first. Every mutation
    clears the derived caches in `cache`, so nothing computed against the old
    domain set can be read back afterwards.
    """

    def __init__(
        self,
        cache: NamedCache | None = None,
        params: TransformationParams | None = None,
        *,
        cache_names: tuple[str, ...] = DERIVED_CACHES,
    ) -> None:
        self.cache = NamedCache() if cache is None else cache
        self.params = TransformationParams() if params is None else params
        self.cache_names = cache_names
        self._domains: list[Domain] = []

    @property
    def capacity(self) -> int:
        return self.params.max_active_domains

    def __len__(self) -> int:
        return len(self._domains)

    def __iter__(self) -> Iterator[Domain]:
        return iter(tuple(self._domains))

    def __reversed__(self) -> Iterator[Domain]:
        return reversed(tuple(self._domains))

    @property
    def domains(self) -> tuple[Domain, ...]:
        return tuple(self._domains)

    def ids(self) -> list[int]:
        return [d.id for d in self._domains]

    def get(self, domain_id: int) -> Domain | None:
        for domain in self._domains:
            if domain.id == domain_id:
                return domain
        return None

    def invalidate(self) -> None:
        for name in self.cache_names:
            self.cache.clear(name)

    def _evict_to(self, limit: int) -> list[Domain]:
        evicted: list[Domain] = []
        while len(self._domains) > limit:
            evicted.append(self._domains.pop(0))
        for domain in evicted:
            debug.log(f"evicted oldest domain id={domain.id}", tag="AdaptiveGrid")
        return evicted

    def create(
        self,
        domain_type: str,
        center: Point | tuple[float, float],
        radius: float | None = None,
        options: Mapping[str, Any] | None = None,
        *,
        amplitude: float = 0.0,
        blend_mode: str | None = None,
    ) -> Domain:
        params = self.params
        opts = dict(options or {})
        if domain_type == "conic":
            opts.setdefault("regularization", params.regularization_factor)
        # Build before evicting so a bad type leaves the registry untouched.
        domain = create_domain(
            domain_type,
            center=center,
            radius=params.default_radius if radius is None else radius,
            amplitude=amplitude,
            blend_mode=params.blend_mode if blend_mode is None else blend_mode,
            options=opts,
            inverse_tolerance=params.inverse_tolerance,
            inverse_max_iterations=params.inverse_max_iterations,
        )
        self._evict_to(self.capacity - 1)
        self._domains.append(domain)
        self.invalidate()
        debug.log(
            f"created transformation domain type={domain_type} "
            f"center=({domain.center.x:g}, {domain.center.y:g}) radius={domain.radius:g}",
            tag="AdaptiveGrid",
        )
        return domain

    def remove(self, domain_id: int) -> bool:
        before = len(self._domains)
        self._domains = [d for d in self._domains if d.id != domain_id]
        if len(self._domains) == before:
            return False
        self.invalidate()
        debug.log(f"removed transformation domain id={domain_id}", tag="AdaptiveGrid")
        return True

    def clear(self) -> None:
        self._domains = []
        self.invalidate()
        debug.log("cleared all transformation domains", tag="AdaptiveGrid")

    def set_params(self, params: TransformationParams) -> None:
        """Adopt new defaults; shrinking the capacity evicts the oldest domains."""
        self.params = params
        self._evict_to(self.capacity)
        self.invalidate()
