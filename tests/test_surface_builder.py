import numpy as np
import pytest

from tiling_tools.Geometry import make_translation
from tiling_tools.LatticeTiling import LatticeLibrary
from tiling_tools.ParameterPresets import interpolated_params
from tiling_tools.SurfaceBuilder import (
    REGION_MARGIN, RegenerationLimiter, TilingSurfaceBuilder, room_surfaces,
)

from conftest import FakeLibrary, FakeOracle


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def builder():
    return TilingSurfaceBuilder(library=LatticeLibrary())


class TestBuildSurface:

    def test_covers_the_surface(self, builder):
        mesh = builder.build_surface(0, 10.0, 6.0, 1.0, curvature=0.0)
        assert not mesh.is_fallback
        lo, hi = mesh.bounds()
        assert lo[0] <= -5.0 and hi[0] >= 5.0
        assert lo[1] <= -3.0 and hi[1] >= 3.0
        assert np.all(mesh.positions[:, 2] == 0)
        assert mesh.indices.max() < mesh.vertex_count

    def test_tile_scale(self, builder):
        small = builder.build_surface(0, 10.0, 10.0, 1.0)
        large = builder.build_surface(0, 10.0, 10.0, 5.0)
        assert large.placement_count < small.placement_count

    def test_surface_transform(self, builder):
        mesh = builder.build_surface(1, 4.0, 4.0, 1.0, make_translation(0, 0, 7))
        np.testing.assert_allclose(mesh.positions[:, 2], 7.0)

    def test_invalid_scale(self, builder):
        with pytest.raises(ValueError):
            builder.build_surface(0, 10.0, 10.0, 0.0)

    @pytest.mark.parametrize('tiling_type', [0, 1, 2, 2.5, 3, 3.5, 4])
    def test_every_type_builds(self, builder, tiling_type):
        mesh = builder.build_surface(tiling_type, 8.0, 8.0, 1.0, curvature=0.6)
        assert mesh.vertex_count > 0
        assert mesh.triangle_count > 0
        assert not mesh.is_fallback


class TestCaching:

    def test_mesh_is_cached(self, builder):
        first = builder.build_surface(0, 10.0, 10.0, 2.0)
        assert builder.build_surface(0, 10.0, 10.0, 2.0) is first
        assert builder.cached_mesh_count == 1
        assert builder.build_surface(0, 10.0, 10.0, 2.0, curvature=0.2) is not first

    def test_invalidate(self, builder):
        first = builder.build_surface(0, 10.0, 10.0, 2.0)
        builder.invalidate()
        assert builder.cached_mesh_count == 0
        assert builder.build_surface(0, 10.0, 10.0, 2.0) is not first

    def test_out_of_range_types_share_prototiles(self, builder):
        assert builder.prototile(99, 0.5) is builder.prototile(4, 0.5)
        assert builder.prototile(-2, 0.5) is builder.prototile(0, 0.5)
        assert builder.prototile(float('nan'), 0.5) is builder.prototile(0, 0.5)

    def test_mesh_cache_is_bounded(self):
        builder = TilingSurfaceBuilder(max_cached_meshes=2)
        for curvature in (0.1, 0.2, 0.3):
            builder.build_surface(0, 4.0, 4.0, 1.0, curvature=curvature)
        assert builder.cached_mesh_count == 2


class TestParameters:

    def test_fractional_type_blends_presets(self, builder):
        proto = builder.prototile(3.5, 0.5)
        assert proto.parameters == pytest.approx(interpolated_params(2, 3, 0.5))
        assert proto.oracle.get_parameters() == pytest.approx(proto.parameters)

    def test_presets_are_per_type_and_deterministic(self):
        a = TilingSurfaceBuilder().prototile(2, 0.5)
        b = TilingSurfaceBuilder().prototile(2, 0.5)
        assert a.parameters == b.parameters
        np.testing.assert_array_equal(a.outline, b.outline)

    def test_parameterless_type(self, builder):
        assert builder.prototile(0, 0.5).parameters == []


class TestFallback:

    def test_empty_placements_give_quad(self, empty_library):
        builder = TilingSurfaceBuilder(library=empty_library)
        mesh = builder.build_surface(0, 12.0, 8.0, 2.0)
        assert mesh.is_fallback
        assert mesh.vertex_count == 4
        lo, hi = mesh.bounds()
        np.testing.assert_allclose(lo[:2], (-6.0, -4.0))
        np.testing.assert_allclose(hi[:2], (6.0, 4.0))

    def test_region_is_padded(self, square_descriptor):
        oracle = FakeOracle(square_descriptor)
        builder = TilingSurfaceBuilder(library=FakeLibrary(lambda index: oracle))
        builder.build_surface(0, 20.0, 10.0, 5.0)
        assert oracle.regions == [(-2 - REGION_MARGIN, -1 - REGION_MARGIN,
                                   2 + REGION_MARGIN, 1 + REGION_MARGIN)]


class TestRateLimiting:

    def test_limiter(self):
        clock = FakeClock()
        limiter = RegenerationLimiter(0.25, clock=clock)
        assert limiter.ready()
        limiter.mark()
        assert not limiter.ready()
        clock.now = 0.3
        assert limiter.ready()
        limiter.mark()
        limiter.reset()
        assert limiter.ready()

    def test_request_surface_returns_previous_while_cooling_down(self):
        clock = FakeClock()
        builder = TilingSurfaceBuilder(limiter=RegenerationLimiter(0.25, clock=clock))
        first = builder.request_surface(0, 4.0, 4.0, 1.0, curvature=0.1)
        assert builder.request_surface(0, 4.0, 4.0, 1.0, curvature=0.2) is first
        assert builder.cached_mesh_count == 1

        clock.now = 1.0
        second = builder.request_surface(0, 4.0, 4.0, 1.0, curvature=0.2)
        assert second is not first

        # cached requests are served even while cooling down
        assert builder.request_surface(0, 4.0, 4.0, 1.0, curvature=0.1) is first


class TestRoom:

    def test_surfaces(self):
        names = [name for name, _, _, _ in room_surfaces(400, 200, 600)]
        assert names == ['floor', 'ceiling', 'left', 'right', 'back', 'front']

    def test_build_room(self, builder):
        meshes = builder.build_room(0, 40.0, 20.0, 60.0, 5.0, curvature=0.3)
        assert set(meshes) == {'floor', 'ceiling', 'left', 'right', 'back', 'front'}
        assert all(not mesh.is_fallback for mesh in meshes.values())

        np.testing.assert_allclose(meshes['floor'].positions[:, 1], 0.0, atol=1e-3)
        np.testing.assert_allclose(meshes['ceiling'].positions[:, 1], 20.0, atol=1e-3)
        np.testing.assert_allclose(meshes['back'].positions[:, 2], -30.0, atol=1e-3)
        np.testing.assert_allclose(meshes['front'].positions[:, 2], 30.0, atol=1e-3)
        np.testing.assert_allclose(meshes['left'].positions[:, 0], -20.0, atol=1e-3)
        np.testing.assert_allclose(meshes['right'].positions[:, 0], 20.0, atol=1e-3)

    def test_floor_normals_point_up(self, builder):
        meshes = builder.build_room(0, 40.0, 20.0, 60.0, 5.0, curvature=0.0)
        normals = meshes['floor'].normals
        # collinear outline points can be left out of every triangle
        used = np.linalg.norm(normals, axis=1) > 0
        assert used.any()
        assert np.all(np.abs(np.abs(normals[used, 1]) - 1.0) < 1e-4)


class TestReleasedMeshes:

    def test_released_mesh_is_rebuilt(self, builder):
        mesh = builder.build_surface(0, 10.0, 10.0, 1.0)
        vertex_count = mesh.vertex_count
        mesh.release()

        again = builder.build_surface(0, 10.0, 10.0, 1.0)
        assert again is not mesh
        assert again.vertex_count == vertex_count
        assert builder.cached_mesh_count == 1

    def test_released_last_mesh_is_not_returned_while_cooling_down(self):
        clock = FakeClock()
        builder = TilingSurfaceBuilder(limiter=RegenerationLimiter(0.25, clock=clock))
        first = builder.request_surface(0, 4.0, 4.0, 1.0, curvature=0.1)
        first.release()

        second = builder.request_surface(0, 4.0, 4.0, 1.0, curvature=0.2)
        assert second is not first
        assert second.vertex_count > 0

        second.release()
        third = builder.request_surface(0, 4.0, 4.0, 1.0, curvature=0.2)
        assert third.vertex_count == second.placement_count * second.vertices_per_tile


class TestEmptyLibrary:

    def test_no_types_gives_quad(self, square_descriptor):
        library = FakeLibrary(lambda index: FakeOracle(square_descriptor), count=0)
        builder = TilingSurfaceBuilder(library=library)
        for tiling_type in (0, 3.5, float('nan')):
            mesh = builder.build_surface(tiling_type, 6.0, 2.0, 1.0)
            assert mesh.is_fallback
            assert mesh.vertex_count == 4
        assert builder.prototile(0, 0.5) is None
        assert library.created == []
        assert set(builder.build_room(1, 4.0, 3.0, 5.0, 1.0)) == {
            'floor', 'ceiling', 'left', 'right', 'back', 'front'}
