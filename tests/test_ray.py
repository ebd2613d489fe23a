"""Unit tests for the kernel-side ray helpers.

Tests cover:
- Ray dataclass and ray_at function
- dot, cross, length and length_squared
- normalize, including the zero-vector case
- Mirror reflection
- Snell refraction, leaving the material and total internal reflection
- Secondary ray origin offset
"""

import math

import pytest
import taichi as ti


class TestRayBasics:
    """Tests for Ray dataclass and ray_at."""

    def test_ray_at_origin(self):
        """Test ray_at returns origin when t=0."""
        from whitted.core.ray import Ray, ray_at, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(1.0, 2.0, 3.0), direction=vec3(0.0, 0.0, -1.0))
            result[None] = ray_at(ray, 0.0)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 1.0) < 1e-6
        assert abs(r[1] - 2.0) < 1e-6
        assert abs(r[2] - 3.0) < 1e-6

    def test_ray_at_positive_t(self):
        """Test ray_at computes correct point along ray."""
        from whitted.core.ray import Ray, ray_at, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(1.0, 0.0, 0.0))
            result[None] = ray_at(ray, 5.0)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 5.0) < 1e-6
        assert abs(r[1]) < 1e-6
        assert abs(r[2]) < 1e-6


class TestVectorHelpers:
    """Tests for kernel dot, cross, length and length_squared."""

    def test_dot_and_lengths(self):
        from whitted.core.ray import dot, length, length_squared, vec3

        result = ti.field(dtype=ti.f32, shape=3)

        @ti.kernel
        def test_kernel():
            v = vec3(3.0, 4.0, 0.0)
            result[0] = dot(v, vec3(1.0, 2.0, 3.0))
            result[1] = length(v)
            result[2] = length_squared(v)

        test_kernel()
        assert abs(result[0] - 11.0) < 1e-6
        assert abs(result[1] - 5.0) < 1e-6
        assert abs(result[2] - 25.0) < 1e-6

    def test_cross_is_right_handed(self):
        from whitted.core.ray import cross, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = cross(vec3(1.0, 0.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        r = result[None]
        assert abs(r[0]) < 1e-6
        assert abs(r[1]) < 1e-6
        assert abs(r[2] - 1.0) < 1e-6


class TestNormalize:
    """Tests for kernel normalize."""

    def test_normalize_unit_length(self):
        from whitted.core.ray import normalize, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = normalize(vec3(3.0, 4.0, 0.0))

        test_kernel()
        r = result[None]
        assert abs(r[0] - 0.6) < 1e-6
        assert abs(r[1] - 0.8) < 1e-6
        assert abs(r[2]) < 1e-6

    def test_normalize_zero_gives_zero(self):
        """Kernels cannot raise, so the zero vector maps to itself."""
        from whitted.core.ray import normalize, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = normalize(vec3(0.0, 0.0, 0.0))

        test_kernel()
        r = result[None]
        assert r[0] == 0.0 and r[1] == 0.0 and r[2] == 0.0


class TestReflect:
    """Tests for mirror reflection."""

    @pytest.mark.parametrize(
        "incident",
        [(1.0, -1.0, 0.0), (0.3, -0.2, 0.9), (0.0, -1.0, 0.0), (-0.5, 0.25, 0.1)],
    )
    def test_reflect_flips_normal_component(self, incident):
        """reflect(I, N) . N == -(I . N) for a unit normal."""
        from whitted.core.ray import reflect, vec3

        dots = ti.field(dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel(ix: ti.f32, iy: ti.f32, iz: ti.f32):
            i = vec3(ix, iy, iz)
            n = vec3(0.0, 1.0, 0.0)
            r = reflect(i, n)
            dots[0] = ti.math.dot(r, n)
            dots[1] = ti.math.dot(i, n)

        test_kernel(*incident)
        assert abs(dots[0] + dots[1]) < 1e-6

    def test_reflect_preserves_tangent(self):
        from whitted.core.ray import reflect, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        r = result[None]
        assert abs(r[0] - 1.0) < 1e-6
        assert abs(r[1] - 1.0) < 1e-6
        assert abs(r[2]) < 1e-6


class TestRefract:
    """Tests for Snell refraction."""

    def test_refract_normal_incidence_passes_straight(self):
        """A ray hitting the surface head-on is not bent."""
        from whitted.core.ray import refract, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())
        ok = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            d, refracted = refract(vec3(0.0, 0.0, -1.0), vec3(0.0, 0.0, 1.0), 1.5)
            result[None] = d
            ok[None] = refracted

        test_kernel()
        r = result[None]
        assert ok[None] == 1
        assert abs(r[0]) < 1e-6
        assert abs(r[1]) < 1e-6
        assert abs(r[2] + 1.0) < 1e-6

    def test_refract_entering_bends_toward_normal(self):
        """Entering glass at 45 degrees: sin(theta_t) = sin(45) / 1.5."""
        from whitted.core.ray import refract, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            incident = ti.math.normalize(vec3(1.0, -1.0, 0.0))
            d, _ = refract(incident, vec3(0.0, 1.0, 0.0), 1.5)
            result[None] = d

        test_kernel()
        r = result[None]
        expected_sin = math.sin(math.radians(45.0)) / 1.5
        assert abs(r[0] - expected_sin) < 1e-5
        assert r[1] < 0.0
        assert abs(math.sqrt(r[0] ** 2 + r[1] ** 2 + r[2] ** 2) - 1.0) < 1e-5

    def test_refract_leaving_uses_swapped_indices(self):
        """Leaving glass the ray bends away from the normal."""
        from whitted.core.ray import refract, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())
        ok = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            # Outward normal +y, ray travelling up from inside
            incident = ti.math.normalize(vec3(0.3, 1.0, 0.0))
            d, refracted = refract(incident, vec3(0.0, 1.0, 0.0), 1.5)
            result[None] = d
            ok[None] = refracted

        test_kernel()
        r = result[None]
        sin_i = 0.3 / math.sqrt(1.09)
        assert ok[None] == 1
        assert abs(r[0] - 1.5 * sin_i) < 1e-5
        assert r[1] > 0.0

    def test_total_internal_reflection(self):
        """Beyond the critical angle nothing is transmitted."""
        from whitted.core.ray import refract, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())
        ok = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            # 60 degrees from the normal, inside glass (critical angle ~41.8)
            incident = ti.math.normalize(vec3(ti.sqrt(3.0), 1.0, 0.0))
            d, refracted = refract(incident, vec3(0.0, 1.0, 0.0), 1.5)
            result[None] = d
            ok[None] = refracted

        test_kernel()
        r = result[None]
        assert ok[None] == 0
        assert r[0] == 0.0 and r[1] == 0.0 and r[2] == 0.0

    def test_unit_index_does_not_bend(self):
        from whitted.core.ray import refract, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            incident = ti.math.normalize(vec3(0.5, -1.0, 0.2))
            d, _ = refract(incident, vec3(0.0, 1.0, 0.0), 1.0)
            result[None] = d - incident

        test_kernel()
        r = result[None]
        assert abs(r[0]) < 1e-5 and abs(r[1]) < 1e-5 and abs(r[2]) < 1e-5


class TestOffsetOrigin:
    """Tests for secondary ray origin offset."""

    def test_offset_along_normal_when_leaving(self):
        from whitted.core.ray import PERTURB, offset_origin, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = offset_origin(
                vec3(0.0, 1.0, 0.0), vec3(0.0, 1.0, 0.0), vec3(0.0, 1.0, 0.0)
            )

        test_kernel()
        assert abs(result[None][1] - (1.0 + PERTURB)) < 1e-6

    def test_offset_against_normal_when_entering(self):
        from whitted.core.ray import PERTURB, offset_origin, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = offset_origin(
                vec3(0.0, 1.0, 0.0), vec3(0.0, 1.0, 0.0), vec3(0.0, -1.0, 0.0)
            )

        test_kernel()
        assert abs(result[None][1] - (1.0 - PERTURB)) < 1e-6
