from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping

import numpy as np

from .cache import GRID_CELL_CACHE, NamedCache
from .config import GridParameters
from .domains import Domain
from .engine import BlendingWeights, TransformationEngine
from .grid_types import CellArray, Point, PointArray
from .registry import DomainRegistry
from .snap import SnapEngine, SnapSettings
from ..utils import debug, debug_helpers

MIN_ZOOM = 0.1
MAX_ZOOM = 10.0

_TAG = "AdaptiveGrid"


@dataclass(frozen=True)
class SessionState:
    width: float
    height: float
    zoom_level: float
    pan_offset: Point
    domains: tuple[Domain, ...]


class GridSession:
    """
    One grid-sculpting session: parameters, viewport, domains and the caches
    derived from them. Every mutating call clears the derived caches.
    """

    def __init__(
        self,
        width: float = 800.0,
        height: float = 600.0,
        parameters: Mapping[str, Mapping[str, Any]] | GridParameters | None = None,
        *,
        snap_settings: SnapSettings | None = None,
        cache: NamedCache | None = None,
    ) -> None:
        if isinstance(parameters, GridParameters):
            self.parameters = parameters
        else:
            self.parameters = GridParameters().merged(parameters)
        self.cache = NamedCache() if cache is None else cache
        self.registry = DomainRegistry(self.cache, self.parameters.transformations)
        self.engine = TransformationEngine(self.registry)
        self.snapper = SnapEngine(snap_settings)

        self.width = 0.0
        self.height = 0.0
        self.zoom_level = 1.0
        self.pan_offset = Point(0.0, 0.0)
        self.update_viewport_dimensions(width, height)

    # -- domains ---------------------------------------------------------------

    def create_transformation_domain(
        self,
        center: Point | tuple[float, float],
        radius: float | None = None,
        domain_type: str = "spherical",
        options: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> Domain:
        return self.registry.create(domain_type, center, radius, options, **kwargs)

    def remove_transformation_domain(self, domain_id: int) -> bool:
        return self.registry.remove(domain_id)

    def clear_transformation_domains(self) -> None:
        self.registry.clear()

    @property
    def domains(self) -> tuple[Domain, ...]:
        return self.registry.domains

    # -- transforms -------------------------------------------------------------

    def blending_weights(self, point: Point) -> BlendingWeights:
        return self.engine.blending_weights(point)

    def transform_point(self, point: Point) -> Point:
        return self.engine.transform_point(point)

    def inverse_transform_point(self, point: Point) -> Point:
        return self.engine.inverse_transform_point(point)

    def effective_grid_size(self, point: Point, base_size: float | None = None) -> float:
        size = self.parameters.grid.size if base_size is None else base_size
        return self.engine.effective_grid_size(point, size)

    def snap_to_grid(self, point: Point) -> Point:
        if not self.parameters.grid.snap_to_grid:
            return Point.of(point)
        return self.snapper.snap(
            point,
            self.transform_point,
            self.inverse_transform_point,
            self.effective_grid_size,
        )

    # -- grid geometry ----------------------------------------------------------

    def visible_bounds(self) -> tuple[float, float, float, float]:
        """World-space (min_x, min_y, max_x, max_y) of the viewport."""
        zoom = self.zoom_level
        px, py = self.pan_offset
        return (
            -px / zoom,
            -py / zoom,
            (self.width - px) / zoom,
            (self.height - py) / zoom,
        )

    def _lattice_axes(self, closed: bool) -> tuple[np.ndarray, np.ndarray]:
        size = self.parameters.grid.size
        min_x, min_y, max_x, max_y = self.visible_bounds()
        x0 = math.floor(min_x / size) * size - size
        y0 = math.floor(min_y / size) * size - size
        nx = math.ceil((max_x + size - x0) / size)
        ny = math.ceil((max_y + size - y0) / size)
        if closed:
            nx += 1
            ny += 1
        xs = x0 + size * np.arange(nx, dtype=np.float64)
        ys = y0 + size * np.arange(ny, dtype=np.float64)
        return xs, ys

    def generate_grid_points(self) -> tuple[PointArray, PointArray]:
        """Lattice points covering the viewport plus one cell of padding:
        (original, transformed), both (N,2)."""
        xs, ys = self._lattice_axes(closed=True)
        gx, gy = np.meshgrid(xs, ys, indexing="ij")
        original = np.stack([gx.ravel(), gy.ravel()], axis=1)
        transformed = self.engine.transform_points(original)
        debug_helpers.log_array("grid_points", transformed, tag=_TAG)
        return original, transformed

    def _cell_signature(self) -> tuple[float, ...]:
        return (
            self.width,
            self.height,
            self.parameters.grid.size,
            self.zoom_level,
            self.pan_offset.x,
            self.pan_offset.y,
            float(len(self.registry)),
        )

    def generate_grid_cells(self) -> tuple[CellArray, CellArray]:
        """Quad corners (original, transformed), both (K,4,2), counter-clockwise
        from the cell's minimum corner."""
        key = self._cell_signature()
        found, cached = self.cache.lookup(GRID_CELL_CACHE, key)
        if found:
            original, transformed = cached
            return original.copy(), transformed.copy()

        size = self.parameters.grid.size
        xs, ys = self._lattice_axes(closed=False)
        gx, gy = np.meshgrid(xs, ys, indexing="ij")
        x = gx.ravel()
        y = gy.ravel()
        corners = np.stack(
            [
                np.stack([x, y], axis=1),
                np.stack([x + size, y], axis=1),
                np.stack([x + size, y + size], axis=1),
                np.stack([x, y + size], axis=1),
            ],
            axis=1,
        )
        flat = corners.reshape(-1, 2)
        transformed = self.engine.transform_points(flat).reshape(corners.shape)
        debug_helpers.log_array("grid_cells", transformed, tag=_TAG)
        self.cache.set(GRID_CELL_CACHE, key, (corners, transformed))
        return corners.copy(), transformed.copy()

    # -- viewport / parameters --------------------------------------------------

    def _invalidate(self) -> None:
        self.registry.invalidate()

    def set_zoom_level(self, zoom: float) -> float:
        self.zoom_level = max(MIN_ZOOM, min(MAX_ZOOM, float(zoom)))
        self._invalidate()
        debug.log(f"zoom level set to {self.zoom_level:g}", tag=_TAG)
        return self.zoom_level

    def set_pan_offset(self, x: float, y: float) -> Point:
        self.pan_offset = Point(float(x), float(y))
        self._invalidate()
        debug.log(f"pan offset set to ({x:g}, {y:g})", tag=_TAG)
        return self.pan_offset

    def update_viewport_dimensions(self, width: float, height: float) -> tuple[float, float]:
        if not (width > 0 and height > 0):
            raise ValueError("viewport dimensions must be > 0")
        self.width = float(width)
        self.height = float(height)
        self._invalidate()
        debug.log(f"viewport dimensions updated to {width:g}x{height:g}", tag=_TAG)
        return self.width, self.height

    def get_parameters(self) -> GridParameters:
        return self.parameters

    def update_parameters(self, overrides: Mapping[str, Mapping[str, Any]]) -> GridParameters:
        self.parameters = self.parameters.merged(overrides)
        self.registry.set_params(self.parameters.transformations)
        self._invalidate()
        debug.log("parameters updated", tag=_TAG)
        return self.parameters

    def get_state(self) -> SessionState:
        return SessionState(
            width=self.width,
            height=self.height,
            zoom_level=self.zoom_level,
            pan_offset=self.pan_offset,
            domains=self.registry.domains,
        )
