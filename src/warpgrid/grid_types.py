from __future__ import annotations

from typing import NamedTuple, TypeAlias

import numpy as np
from beartype import BeartypeConf, beartype
from jaxtyping import Float

# Scalars may arrive as ints (e.g. a grid size of 20); accept them where floats
# are annotated.
typechecker = beartype(conf=BeartypeConf(is_pep484_tower=True))


class Point(NamedTuple):
    x: float
    y: float

    @classmethod
    def of(cls, point: tuple[float, float]) -> "Point":
        return cls(float(point[0]), float(point[1]))


class Point3(NamedTuple):
    """Point lifted onto a sphere; `z` is the height above the plane."""

    x: float
    y: float
    z: float

    @property
    def xy(self) -> Point:
        return Point(self.x, self.y)


PointArray: TypeAlias = Float[np.ndarray, "N 2"]
CellArray: TypeAlias = Float[np.ndarray, "K 4 2"]
