from . import blending, complex_ops, conformal, domains, engine, noise, registry, snap
from .cache import NamedCache
from .config import GridParameters, GridParams, TransformationParams
from .domains import DOMAIN_TYPES, Domain, UnknownDomainTypeError, create_domain
from .engine import BlendingWeights, TransformationEngine
from .grid_types import Point, Point3
from .presets import PRESETS, create_preset
from .registry import DomainRegistry
from .session import GridSession
from .snap import SnapEngine, SnapMode, SnapSettings

__all__ = [
    "blending",
    "complex_ops",
    "conformal",
    "domains",
    "engine",
    "noise",
    "registry",
    "snap",
    "NamedCache",
    "GridParameters",
    "GridParams",
    "TransformationParams",
    "DOMAIN_TYPES",
    "Domain",
    "UnknownDomainTypeError",
    "create_domain",
    "BlendingWeights",
    "TransformationEngine",
    "Point",
    "Point3",
    "PRESETS",
    "create_preset",
    "DomainRegistry",
    "GridSession",
    "SnapEngine",
    "SnapMode",
    "SnapSettings",
]
