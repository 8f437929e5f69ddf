from __future__ import annotations

import math
from typing import Callable, Literal, TypeAlias

BlendMode: TypeAlias = Literal["sharp", "linear", "smooth"]
BlendFn: TypeAlias = Callable[[float, float], float]


def sharp(distance: float, radius: float) -> float:
    """Step profile: 1 strictly inside the radius, 0 from the radius outward."""
    return 1.0 if distance < radius else 0.0


def linear(distance: float, radius: float) -> float:
    return max(0.0, 1.0 - distance / radius)


def smooth(distance: float, radius: float) -> float:
    """Cosine falloff; flat at the center and at the radius."""
    t = min(1.0, distance / radius)
    return 0.5 * (1.0 + math.cos(math.pi * t))


BLEND_FUNCTIONS: dict[str, BlendFn] = {
    "sharp": sharp,
    "linear": linear,
    "smooth": smooth,
}


def get_blend_function(mode: str) -> BlendFn:
    try:
        return BLEND_FUNCTIONS[mode]
    except KeyError:
        valid = ", ".join(sorted(BLEND_FUNCTIONS))
        raise ValueError(f"unknown blend mode {mode!r} (expected one of: {valid})") from None
