from __future__ import annotations

from typing import Any, Mapping

from .config import GridParameters
from .grid_types import Point
from .session import GridSession

# Each entry: registry.create keyword arguments. Domains without a center are
# placed at the viewport center; without a radius they take the default radius.
PRESETS: dict[str, tuple[dict[str, Any], ...]] = {
    "basic_sphere": (
        {"domain_type": "spherical", "radius": 100.0},
    ),
    "organic_terrain": (
        {"domain_type": "spherical", "radius": 150.0, "amplitude": 20.0},
        {
            "domain_type": "noise",
            "amplitude": 15.0,
            "options": {"scale": 0.05, "octaves": 4},
        },
        {
            "domain_type": "harmonic",
            "amplitude": 10.0,
            "options": {"freq_x": 5.0, "freq_y": 3.0},
        },
    ),
    "mechanical_surface": (
        {"domain_type": "cylindrical", "radius": 80.0, "amplitude": 30.0},
        {
            "domain_type": "gaussian-curvature",
            "amplitude": 15.0,
            "options": {"spread": 6.0},
        },
    ),
}


def create_preset(
    name: str,
    width: float = 800.0,
    height: float = 600.0,
    parameters: Mapping[str, Mapping[str, Any]] | GridParameters | None = None,
) -> GridSession:
    """A new session populated with the domains of preset `name`."""
    if name not in PRESETS:
        raise KeyError(f"unknown preset: {name!r}")
    session = GridSession(width, height, parameters)
    default_center = Point(width / 2.0, height / 2.0)
    for entry in PRESETS[name]:
        kwargs = dict(entry)
        domain_type = kwargs.pop("domain_type")
        center = kwargs.pop("center", default_center)
        radius = kwargs.pop("radius", None)
        options = kwargs.pop("options", None)
        session.registry.create(domain_type, center, radius, options, **kwargs)
    return session
