from __future__ import annotations

import math
from dataclasses import asdict, dataclass, replace
from enum import Enum
from typing import Any, Callable, Sequence

import numpy as np
from scipy.spatial import cKDTree  # type: ignore[reportMissingTypeStubs]

from .grid_types import Point


class SnapMode(str, Enum):
    GRID = "grid"
    INTERSECTION = "intersection"
    NONE = "none"


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


@dataclass(frozen=True)
class SnapSettings:
    enabled: bool = True
    mode: SnapMode = SnapMode.GRID
    tolerance: float = 10.0
    snap_strength: float = 1.0
    visual_feedback: bool = True

    def __post_init__(self) -> None:
        # Out-of-range numbers are clamped, not rejected.
        object.__setattr__(self, "mode", SnapMode(self.mode))
        object.__setattr__(self, "tolerance", max(0.0, float(self.tolerance)))
        object.__setattr__(
            self, "snap_strength", _clamp(float(self.snap_strength), 0.0, 1.0)
        )

    @property
    def active(self) -> bool:
        return self.enabled and self.mode is not SnapMode.NONE


@dataclass(frozen=True)
class SnapIndicator:
    original: Point
    snapped: Point
    distance: float


def round_half_up(value: float) -> float:
    return math.floor(value + 0.5)


def snap_to_multiple(point: Point, grid_size: float) -> Point:
    return Point(
        round_half_up(point[0] / grid_size) * grid_size,
        round_half_up(point[1] / grid_size) * grid_size,
    )


class SnapEngine:
    """Grid snapping in undeformed space, plus nearest-intersection attraction."""

    def __init__(self, settings: SnapSettings | None = None) -> None:
        self.settings = SnapSettings() if settings is None else settings

    def get_settings(self) -> SnapSettings:
        return self.settings

    def update_settings(self, **changes: Any) -> SnapSettings:
        self.settings = replace(self.settings, **changes)
        return self.settings

    def enable(self) -> bool:
        self.update_settings(enabled=True)
        return True

    def disable(self) -> bool:
        self.update_settings(enabled=False)
        return False

    def set_mode(self, mode: str | SnapMode) -> bool:
        try:
            resolved = SnapMode(mode)
        except ValueError:
            return False
        self.update_settings(mode=resolved)
        return True

    def snap_to_grid_point(self, point: Point, grid_size: float) -> Point:
        if not self.settings.active:
            return Point.of(point)
        if not grid_size > 0:
            raise ValueError("grid_size must be > 0")
        return snap_to_multiple(point, grid_size)

    def snap(
        self,
        point: Point,
        transform_fn: Callable[[Point], Point],
        inverse_fn: Callable[[Point], Point],
        grid_size_fn: Callable[[Point], float],
    ) -> Point:
        """
        Snap a point of deformed space: invert it, round to the effective grid
        size there, and map the rounded point forward again.
        """
        if not self.settings.active:
            return Point.of(point)
        original = inverse_fn(point)
        grid_size = grid_size_fn(original)
        return Point.of(transform_fn(self.snap_to_grid_point(original, grid_size)))

    snap_transformed_point = snap

    def snap_with_attraction(
        self,
        point: Point,
        grid_point: Point,
        strength: float | None = None,
    ) -> Point:
        s = self.settings.snap_strength if strength is None else _clamp(strength, 0.0, 1.0)
        if s >= 1.0:
            return Point.of(grid_point)
        return Point(
            point[0] + (grid_point[0] - point[0]) * s,
            point[1] + (grid_point[1] - point[1]) * s,
        )

    def find_nearest_grid_point(
        self,
        point: Point,
        grid_points: Sequence[Point] | np.ndarray,
        tolerance: float | None = None,
    ) -> Point | None:
        """Closest candidate no further than `tolerance`, or None."""
        tol = self.settings.tolerance if tolerance is None else tolerance
        candidates = np.asarray(grid_points, dtype=np.float64).reshape(-1, 2)
        if candidates.shape[0] == 0:
            return None
        tree = cKDTree(candidates)
        dist, idx = tree.query([float(point[0]), float(point[1])], k=1)
        if not np.isfinite(dist) or dist > tol:
            return None
        x, y = candidates[int(idx)]
        return Point(float(x), float(y))

    def snap_to_grid_intersection(
        self,
        point: Point,
        grid_points: Sequence[Point] | np.ndarray,
    ) -> Point:
        if not self.settings.active:
            return Point.of(point)
        nearest = self.find_nearest_grid_point(point, grid_points)
        if nearest is None:
            return Point.of(point)
        return self.snap_with_attraction(point, nearest)

    def calculate_snap_indicators(
        self, point: Point, snapped: Point
    ) -> SnapIndicator | None:
        s = self.settings
        if not s.visual_feedback or not s.enabled:
            return None
        if point[0] == snapped[0] and point[1] == snapped[1]:
            return None
        return SnapIndicator(
            original=Point.of(point),
            snapped=Point.of(snapped),
            distance=math.hypot(snapped[0] - point[0], snapped[1] - point[1]),
        )

    def settings_dict(self) -> dict[str, Any]:
        out = asdict(self.settings)
        out["mode"] = self.settings.mode.value
        return out
