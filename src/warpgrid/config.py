from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any, Mapping

from .blending import BLEND_FUNCTIONS


@dataclass(frozen=True)
class GridParams:
    size: float = 20.0
    snap_to_grid: bool = True
    show_domains: bool = False

    def __post_init__(self) -> None:
        if not self.size > 0:
            raise ValueError("grid size must be > 0")


@dataclass(frozen=True)
class TransformationParams:
    blend_mode: str = "smooth"
    default_radius: float = 150.0
    max_active_domains: int = 5
    regularization_factor: float = 0.001
    inverse_tolerance: float = 0.1
    inverse_max_iterations: int = 50

    def __post_init__(self) -> None:
        if self.blend_mode not in BLEND_FUNCTIONS:
            raise ValueError(f"unknown blend mode {self.blend_mode!r}")
        if not self.default_radius > 0:
            raise ValueError("default_radius must be > 0")
        if self.max_active_domains < 1:
            raise ValueError("max_active_domains must be >= 1")
        if not self.inverse_tolerance > 0:
            raise ValueError("inverse_tolerance must be > 0")
        if self.inverse_max_iterations < 0:
            raise ValueError("inverse_max_iterations must be >= 0")


def _apply(obj: Any, overrides: Mapping[str, Any] | None) -> Any:
    if not overrides:
        return obj
    known = {f.name for f in fields(obj)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise ValueError(f"unknown {type(obj).__name__} fields: {unknown}")
    return replace(obj, **overrides)


@dataclass(frozen=True)
class GridParameters:
    grid: GridParams = field(default_factory=GridParams)
    transformations: TransformationParams = field(default_factory=TransformationParams)

    def merged(self, overrides: Mapping[str, Mapping[str, Any]] | None = None) -> GridParameters:
        """Copy with `{"grid": {...}, "transformations": {...}}` overrides applied field-wise."""
        if not overrides:
            return self
        unknown = sorted(set(overrides) - {"grid", "transformations"})
        if unknown:
            raise ValueError(f"unknown parameter groups: {unknown}")
        return GridParameters(
            grid=_apply(self.grid, overrides.get("grid")),
            transformations=_apply(self.transformations, overrides.get("transformations")),
        )

    def to_dict(self) -> dict[str, dict[str, Any]]:
        return asdict(self)
