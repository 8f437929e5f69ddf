from typing import Callable

import numpy as np
import pytest

from src.warpgrid.cache import DERIVED_CACHES, GRID_CELL_CACHE, TRANSFORMATION_CACHE
from src.warpgrid.config import GridParameters
from src.warpgrid.grid_types import Point
from src.warpgrid.presets import PRESETS, create_preset
from src.warpgrid.session import GridSession
from src.warpgrid.snap import SnapSettings


def test_snap_to_grid_without_domains() -> None:
    session = GridSession(parameters={"grid": {"size": 10.0}})
    assert session.snap_to_grid(Point(7.0, 7.0)) == Point(10.0, 10.0)


def test_snap_to_grid_can_be_disabled() -> None:
    session = GridSession(parameters={"grid": {"size": 10.0, "snap_to_grid": False}})
    assert session.snap_to_grid(Point(7.0, 7.0)) == Point(7.0, 7.0)
    off = GridSession(parameters={"grid": {"size": 10.0}}, snap_settings=SnapSettings(enabled=False))
    assert off.snap_to_grid(Point(7.0, 7.0)) == Point(7.0, 7.0)


def test_snap_to_grid_follows_deformation() -> None:
    session = GridSession(
        parameters={
            "grid": {"size": 10.0},
            "transformations": {"blend_mode": "sharp", "inverse_tolerance": 0.001},
        }
    )
    session.create_transformation_domain((0.0, 0.0), 100.0, "spherical")
    # (80, 0) is the image of (50, 0); effective size there is 5.
    out = session.snap_to_grid(Point(80.0, 0.0))
    assert out == pytest.approx((80.0, 0.0), abs=1e-6)


def test_read_after_write_for_domain_changes() -> None:
    session = GridSession(parameters={"transformations": {"blend_mode": "sharp"}})
    p = Point(50.0, 0.0)
    assert session.transform_point(p) == p
    d = session.create_transformation_domain((0.0, 0.0), 100.0, "spherical")
    assert session.transform_point(p) == pytest.approx((80.0, 0.0))
    assert session.remove_transformation_domain(d.id)
    assert session.transform_point(p) == p
    session.create_transformation_domain((0.0, 0.0), 100.0, "spherical")
    session.clear_transformation_domains()
    assert session.transform_point(p) == p
    assert session.domains == ()


@pytest.mark.parametrize(
    "mutate",
    [
        lambda s: s.set_zoom_level(2.0),
        lambda s: s.set_pan_offset(5.0, -5.0),
        lambda s: s.update_viewport_dimensions(320.0, 240.0),
        lambda s: s.update_parameters({"grid": {"size": 25.0}}),
    ],
)
def test_viewport_and_parameter_changes_clear_caches(
    mutate: Callable[[GridSession], object],
) -> None:
    session = GridSession(200.0, 100.0)
    session.create_transformation_domain((50.0, 50.0), 40.0, "harmonic", amplitude=2.0)
    session.transform_point(Point(50.0, 50.0))
    session.generate_grid_cells()
    assert session.cache.size(TRANSFORMATION_CACHE) > 0
    assert session.cache.size(GRID_CELL_CACHE) == 1
    mutate(session)
    for name in DERIVED_CACHES:
        assert session.cache.size(name) == 0


def test_zoom_is_clamped() -> None:
    session = GridSession()
    assert session.set_zoom_level(100.0) == 10.0
    assert session.set_zoom_level(0.0) == 0.1
    assert session.set_zoom_level(2.5) == 2.5
    assert session.get_state().zoom_level == 2.5


def test_invalid_viewport() -> None:
    with pytest.raises(ValueError):
        GridSession(0.0, 100.0)


def test_parameters_merge_and_update() -> None:
    session = GridSession(parameters={"grid": {"size": 30.0}})
    params = session.get_parameters()
    assert params.grid.size == 30.0
    assert params.transformations == GridParameters().transformations
    with pytest.raises(ValueError):
        session.update_parameters({"grid": {"colour": "red"}})
    with pytest.raises(ValueError):
        session.update_parameters({"render": {}})

    for i in range(4):
        session.create_transformation_domain((float(i), 0.0), 10.0, "noise")
    newest = session.domains[-2:]
    session.update_parameters({"transformations": {"max_active_domains": 2}})
    assert session.domains == newest
    assert session.effective_grid_size(Point(500.0, 500.0)) == 30.0


def test_grid_points_cover_viewport() -> None:
    session = GridSession(100.0, 60.0, {"grid": {"size": 20.0}})
    original, transformed = session.generate_grid_points()
    assert original.shape == (8 * 6, 2)
    np.testing.assert_allclose(original, transformed)
    assert float(original[:, 0].min()) == -20.0
    assert float(original[:, 0].max()) == 120.0
    assert float(original[:, 1].min()) == -20.0
    assert float(original[:, 1].max()) == 80.0


def test_grid_points_respect_pan_and_zoom() -> None:
    session = GridSession(100.0, 100.0, {"grid": {"size": 10.0}})
    session.set_zoom_level(2.0)
    session.set_pan_offset(40.0, 0.0)
    assert session.visible_bounds() == (-20.0, 0.0, 30.0, 50.0)
    original, _ = session.generate_grid_points()
    assert float(original[:, 0].min()) == -30.0
    assert float(original[:, 0].max()) == 40.0


def test_grid_cells_are_cached_and_copied() -> None:
    session = GridSession(100.0, 60.0, {"grid": {"size": 20.0}})
    original, transformed = session.generate_grid_cells()
    assert original.shape == (7 * 5, 4, 2)
    np.testing.assert_allclose(original[0], [[-20, -20], [0, -20], [0, 0], [-20, 0]])
    transformed[:] = 0.0
    again_original, again_transformed = session.generate_grid_cells()
    np.testing.assert_allclose(again_original, again_transformed)

    session.create_transformation_domain(
        (50.0, 30.0), 40.0, "harmonic", {"freq_x": 0.1, "freq_y": 0.1}, amplitude=5.0
    )
    _, deformed = session.generate_grid_cells()
    assert not np.allclose(deformed, again_original)


def test_state_snapshot() -> None:
    session = GridSession(640.0, 480.0)
    d = session.create_transformation_domain((1.0, 1.0))
    state = session.get_state()
    assert (state.width, state.height) == (640.0, 480.0)
    assert state.pan_offset == Point(0.0, 0.0)
    assert state.domains == (d,)
    assert d.radius == 150.0
    assert type(d).__name__ == "SphericalDomain"


def test_presets() -> None:
    session = create_preset("organic_terrain", 400.0, 300.0)
    assert [type(d).__name__ for d in session.domains] == [
        "SphericalDomain",
        "NoiseDomain",
        "HarmonicDomain",
    ]
    assert session.domains[1].center == Point(200.0, 150.0)
    assert session.domains[1].radius == 150.0
    assert set(PRESETS) == {"basic_sphere", "organic_terrain", "mechanical_surface"}
    mech = create_preset("mechanical_surface")
    assert mech.domains[1].spread == 6.0
    with pytest.raises(KeyError):
        create_preset("lunar")
