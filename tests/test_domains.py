import math

import numpy as np
import pytest

from src.warpgrid.domains import (
    DOMAIN_TYPES,
    ConicDomain,
    CylindricalDomain,
    GaussianCurvatureDomain,
    HarmonicDomain,
    NoiseDomain,
    SphericalDomain,
    UnknownDomainTypeError,
    apply_domain_transformation,
    create_domain,
    distance_between,
    is_point_in_domain,
)
from src.warpgrid.grid_types import Point, Point3


@pytest.mark.parametrize(
    ("name", "cls"),
    [
        ("spherical", SphericalDomain),
        ("cylindrical", CylindricalDomain),
        ("conic", ConicDomain),
        ("noise", NoiseDomain),
        ("harmonic", HarmonicDomain),
        ("gaussian-curvature", GaussianCurvatureDomain),
        ("gaussian-curvature-bump", GaussianCurvatureDomain),
    ],
)
def test_factory_builds_each_variant(name: str, cls: type) -> None:
    domain = create_domain(name, center=(1.0, 2.0), radius=30.0)
    assert isinstance(domain, cls)
    assert domain.center == Point(1.0, 2.0)
    assert domain.radius == 30.0
    assert domain.blend_mode == "smooth"


def test_factory_rejects_unknown_type() -> None:
    with pytest.raises(UnknownDomainTypeError, match="hyperbolic"):
        create_domain("hyperbolic")
    with pytest.raises(ValueError):
        create_domain("flat")
    assert "flat" not in DOMAIN_TYPES


@pytest.mark.parametrize("radius", [0.0, -5.0, float("inf")])
def test_factory_rejects_bad_radius(radius: float) -> None:
    with pytest.raises(ValueError):
        create_domain("spherical", radius=radius)


def test_ids_follow_creation_order() -> None:
    a = create_domain("spherical")
    b = create_domain("noise")
    assert b.id > a.id
    assert b.created > a.created


@pytest.mark.parametrize("mode", ["sharp", "linear", "smooth"])
def test_weight_at_center_and_rim(mode: str) -> None:
    d = create_domain("harmonic", center=(10.0, 10.0), radius=40.0, blend_mode=mode)
    assert d.weight_at(Point(10.0, 10.0)) == 1.0
    assert d.weight_at(Point(50.0, 10.0)) == 0.0
    assert 0.0 <= d.weight_at(Point(30.0, 10.0)) <= 1.0


def test_curvature_factors() -> None:
    sphere = create_domain("spherical", radius=100.0)
    assert sphere.curvature_factor(Point(0.0, 0.0)) == pytest.approx(0.5)
    assert sphere.curvature_factor(Point(100.0, 0.0)) == pytest.approx(1.0)
    assert create_domain("cylindrical").curvature_factor(Point(3.0, 4.0)) == 0.7
    assert create_domain("conic").curvature_factor(Point(0.0, 0.0)) == pytest.approx(0.8)
    conic = create_domain("conic", options={"eccentricity": 1.0})
    assert conic.curvature_factor(Point(0.0, 0.0)) == pytest.approx(0.6)
    for name in ("noise", "harmonic", "gaussian-curvature"):
        assert create_domain(name).curvature_factor(Point(5.0, 5.0)) == 1.0


def test_spherical_transform_drops_height() -> None:
    d = create_domain("spherical", radius=100.0)
    assert isinstance(d, SphericalDomain)
    assert d.transform(Point(50.0, 0.0)) == pytest.approx((80.0, 0.0))
    lifted = d.lift(Point(50.0, 0.0))
    assert isinstance(lifted, Point3)
    assert lifted.xy == pytest.approx((80.0, 0.0))
    assert lifted.z == pytest.approx(-60.0)


def test_harmonic_transform_formula() -> None:
    d = create_domain(
        "harmonic",
        center=(1.0, 2.0),
        amplitude=3.0,
        options={"freq_x": 0.5, "freq_y": 0.25, "phase": 0.1},
    )
    out = d.transform(Point(5.0, 6.0))
    assert out.x == pytest.approx(5.0 + 3.0 * math.sin(4.0 * 0.5 + 0.1))
    assert out.y == pytest.approx(6.0 + 3.0 * math.cos(4.0 * 0.25 + 0.1))


def test_noise_displaces_both_axes_equally() -> None:
    d = create_domain("noise", amplitude=12.0, options={"scale": 0.05, "seed": 3})
    assert isinstance(d, NoiseDomain)
    p = Point(17.0, -9.0)
    out = d.transform(p)
    assert out.x - p.x == pytest.approx(out.y - p.y)
    assert out.x - p.x == pytest.approx(12.0 * d.noise_at(p))
    assert abs(out.x - p.x) <= 12.0


def test_zero_amplitude_displacement_domains_are_identity() -> None:
    p = Point(3.5, -7.25)
    for name in ("noise", "harmonic", "gaussian-curvature"):
        assert create_domain(name).transform(p) == p


def test_gaussian_bumps_cancel_at_center() -> None:
    d = create_domain("gaussian-curvature", radius=100.0, amplitude=10.0)
    assert d.transform(Point(0.0, 0.0)) == pytest.approx((0.0, 0.0))
    pos = d.transform(Point(50.0, 50.0))
    neg = d.transform(Point(50.0, -50.0))
    assert pos.x > 50.0
    assert neg.x < 50.0


def test_cylindrical_inverse_is_exact() -> None:
    d = create_domain("cylindrical", center=(100.0, 0.0), radius=50.0)
    p = Point(130.0, 40.0)
    np.testing.assert_allclose(d.inverse(d.transform(p)), p, atol=1e-9)


def test_iterative_inverse_converges_for_small_displacement() -> None:
    d = create_domain(
        "harmonic",
        amplitude=2.0,
        options={"freq_x": 0.01, "freq_y": 0.01},
        inverse_tolerance=1e-4,
    )
    p = Point(20.0, -15.0)
    np.testing.assert_allclose(d.inverse(d.transform(p)), p, atol=1e-3)


def test_iterative_inverse_stops_after_budget() -> None:
    d = create_domain("harmonic", amplitude=2.0, inverse_max_iterations=0)
    target = Point(4.0, 4.0)
    assert d.inverse(target) == target


def test_helpers() -> None:
    assert distance_between(Point(0.0, 0.0), Point(3.0, 4.0)) == 5.0
    d = create_domain("conic", center=(0.0, 0.0), radius=10.0)
    assert is_point_in_domain(Point(6.0, 8.0), d)
    assert not is_point_in_domain(Point(6.0, 8.1), d)
    out = apply_domain_transformation(Point(50.0, 0.0), "spherical", radius=100.0)
    assert out == pytest.approx((80.0, 0.0))
