"""Tests for Renderer class."""

import pytest
import math
import numpy as np
from PIL import Image

from lenstrace.errors import PreconditionError
from lenstrace.vec3 import Vec3, Point3, Color
from lenstrace.ray import Ray
from lenstrace.camera import Camera
from lenstrace.shapes import Sphere, Scene
from lenstrace.materials import Lambertian, Metal, Dielectric
from lenstrace.renderer import Renderer, RenderSettings, sample_rng


def front_camera(aspect_ratio=1.0):
    return Camera(
        origin=Point3(0, 0, 0),
        target=Point3(0, 0, -1),
        up=Vec3(0, 1, 0),
        fov=60,
        aspect_ratio=aspect_ratio,
        aperture=0.0,
        focus_dist=1.0,
    )


def one_sphere_scene():
    return Scene([Sphere(Point3(0, 0, -1), 0.5, Lambertian(Color(0.5, 0.5, 0.5)))])


class TestRenderSettings:
    """Test RenderSettings configuration."""

    def test_default_values(self):
        settings = RenderSettings()
        assert settings.width == 1024
        assert settings.height == 576
        assert settings.samples_per_pixel == 100
        assert settings.max_depth == 10
        assert settings.horizon_color == Color(1, 1, 1)
        assert settings.sky_color == Color(0.3, 0.5, 1.0)
        assert settings.output_path == 'image.png'

    def test_height_from_aspect_ratio(self):
        assert RenderSettings(width=400, aspect_ratio=2.0).height == 200
        assert RenderSettings(width=5, aspect_ratio=1.0).height == 5

    def test_auto_worker_detection(self):
        import os
        assert RenderSettings(num_workers=0).num_workers == (os.cpu_count() or 4)

    @pytest.mark.parametrize("overrides", [
        dict(width=0),
        dict(width=1, aspect_ratio=4.0),
        dict(samples_per_pixel=0),
        dict(num_workers=-2),
        dict(executor='gpu'),
        dict(seed=-1),
    ])
    def test_invalid_settings_rejected(self, overrides):
        with pytest.raises(PreconditionError):
            RenderSettings(**overrides)


class TestRayColor:
    """Test the recursive color estimator."""

    def test_depth_zero_is_black(self, rng):
        renderer = Renderer(RenderSettings(num_workers=1))
        ray = Ray(Point3(0, 0, 0), Vec3(0, 1, 0))
        assert renderer.ray_color(ray, one_sphere_scene(), 0, rng) == Color(0, 0, 0)
        assert renderer.ray_color(ray, Scene(), -3, rng) == Color(0, 0, 0)

    @pytest.mark.parametrize("direction, t", [
        (Vec3(0, 1, 0), 1.0),
        (Vec3(0, -2, 0), 0.0),
        (Vec3(1, 0, 0), 0.5),
    ])
    def test_empty_scene_returns_background(self, rng, direction, t):
        renderer = Renderer(RenderSettings(num_workers=1))
        color = renderer.ray_color(Ray(Point3(0, 0, 0), direction), Scene(), 10, rng)
        expected = Color(1, 1, 1) * (1 - t) + Color(0.3, 0.5, 1.0) * t
        assert color == expected

    def test_custom_palette(self, rng):
        settings = RenderSettings(
            num_workers=1, horizon_color=Color(0, 0, 0), sky_color=Color(1, 0, 0)
        )
        renderer = Renderer(settings)
        color = renderer.ray_color(Ray(Point3(0, 0, 0), Vec3(0, 1, 0)), Scene(), 5, rng)
        assert color == Color(1, 0, 0)

    def test_absorbed_ray_is_black(self, rng):
        # Fully fuzzed metal hit at a grazing angle absorbs some rays
        renderer = Renderer(RenderSettings(num_workers=1))
        scene = Scene([Sphere(Point3(0, -100, 0), 100, Metal(Color(1, 1, 1), 1.0))])
        ray = Ray(Point3(-5, 0.1, 0), Vec3(1, -0.05, 0))
        colors = [renderer.ray_color(ray, scene, 2, rng) for _ in range(200)]
        assert any(c == Color(0, 0, 0) for c in colors)

    def test_single_bounce_attenuates_background(self, midpoint_rng):
        renderer = Renderer(RenderSettings(num_workers=1))
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, -1))
        color = renderer.ray_color(ray, one_sphere_scene(), 2, midpoint_rng)
        # Bounces straight back along +z, where the gradient sits at t = 0.5
        assert color == Color(0.325, 0.375, 0.5)

    def test_bounce_budget_exhausted_is_black(self, midpoint_rng):
        renderer = Renderer(RenderSettings(num_workers=1))
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, -1))
        assert renderer.ray_color(ray, one_sphere_scene(), 1, midpoint_rng) == Color(0, 0, 0)

    def test_clear_glass_is_transparent(self, rng):
        renderer = Renderer(RenderSettings(num_workers=1))
        scene = Scene([Sphere(Point3(0, 0, -3), 1.0, Dielectric(1.0))])
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, -1))
        background = renderer.background(ray)
        assert renderer.ray_color(ray, scene, 10, rng) == background


class TestRender:
    """Test full renders."""

    def test_render_produces_image(self):
        settings = RenderSettings(width=8, aspect_ratio=2.0, samples_per_pixel=1,
                                  max_depth=2, num_workers=1, seed=3)
        image = Renderer(settings).render(one_sphere_scene(), front_camera(2.0))

        assert image.shape == (4, 8, 3)
        assert image.dtype == np.float64

    def test_sky_gradient_orientation(self):
        settings = RenderSettings(width=10, aspect_ratio=1.0, samples_per_pixel=2,
                                  max_depth=1, num_workers=1, seed=0)
        image = Renderer(settings).render(Scene(), front_camera())

        # The sky color (less red) is at the top of the image
        assert image[0, 5, 0] < image[9, 5, 0]

    def test_golden_image(self, midpoint_rng):
        settings = RenderSettings(width=5, aspect_ratio=1.0, samples_per_pixel=4,
                                  max_depth=2, num_workers=1)
        renderer = Renderer(settings, rng_factory=lambda entropy, row, col, sample: midpoint_rng)

        rgb = renderer.render_image(one_sphere_scene(), front_camera())
        assert rgb.dtype == np.uint8
        rgb = rgb.astype(int)

        assert rgb.shape == (5, 5, 3)
        # Center pixel: diffuse sphere lit by the horizon band of the gradient
        np.testing.assert_allclose(rgb[2, 2], [145, 156, 181], atol=1)
        # Bottom-left pixel misses the sphere and sees the gradient directly
        np.testing.assert_allclose(rgb[4, 0], [226, 235, 255], atol=1)
        # Symmetric scene, symmetric image
        np.testing.assert_allclose(rgb[:, 0], rgb[:, 4], atol=1)

    def test_seeded_render_is_reproducible(self):
        settings = RenderSettings(width=6, aspect_ratio=1.5, samples_per_pixel=3,
                                  max_depth=3, num_workers=1, seed=42)
        scene = one_sphere_scene()
        first = Renderer(settings).render(scene, front_camera(1.5))
        second = Renderer(settings).render(scene, front_camera(1.5))
        np.testing.assert_array_equal(first, second)

    def test_worker_count_does_not_change_result(self):
        scene = one_sphere_scene()
        single = RenderSettings(width=6, aspect_ratio=1.5, samples_per_pixel=2,
                                max_depth=3, num_workers=1, seed=7)
        multi = RenderSettings(width=6, aspect_ratio=1.5, samples_per_pixel=2,
                               max_depth=3, num_workers=4, seed=7)
        np.testing.assert_array_equal(
            Renderer(single).render(scene, front_camera(1.5)),
            Renderer(multi).render(scene, front_camera(1.5)),
        )

    def test_process_executor(self):
        scene = one_sphere_scene()
        threaded = RenderSettings(width=4, aspect_ratio=1.0, samples_per_pixel=1,
                                  max_depth=2, num_workers=2, seed=11)
        processes = RenderSettings(width=4, aspect_ratio=1.0, samples_per_pixel=1,
                                   max_depth=2, num_workers=2, seed=11, executor='process')
        np.testing.assert_array_equal(
            Renderer(threaded).render(scene, front_camera()),
            Renderer(processes).render(scene, front_camera()),
        )


class TestRendererProgress:
    """Test renderer progress reporting."""

    @pytest.mark.parametrize("workers", [1, 3])
    def test_progress_callback(self, workers):
        settings = RenderSettings(width=6, aspect_ratio=1.0, samples_per_pixel=1,
                                  max_depth=1, num_workers=workers, seed=1)
        renderer = Renderer(settings)

        progress_values = []
        renderer.set_progress_callback(progress_values.append)
        renderer.render(Scene(), front_camera())

        assert len(progress_values) == 6
        assert progress_values == sorted(progress_values)
        assert progress_values[-1] == 1.0


class TestSampleRng:
    """Test per-sample random streams."""

    def test_same_key_same_stream(self):
        assert sample_rng(5, 1, 2, 3).random() == sample_rng(5, 1, 2, 3).random()

    def test_different_keys_differ(self):
        draws = {sample_rng(5, 0, 0, s).random() for s in range(10)}
        assert len(draws) == 10


class TestToRGB8:
    """Test gamma correction and quantization."""

    def test_quantization(self):
        linear = np.array([[[0.25, 1.0, 0.0]]])
        rgb = Renderer.to_rgb8(linear)
        assert rgb.dtype == np.uint8
        # sqrt(0.25) * 256 = 128; 1.0 clamps to 0.999 -> 255
        assert rgb[0, 0].tolist() == [128, 255, 0]

    def test_clamps_out_of_range(self):
        rgb = Renderer.to_rgb8(np.array([[[4.0, -0.5, 0.999]]]))
        assert rgb[0, 0, 0] == 255
        assert rgb[0, 0, 1] == 0


class TestSaveImage:
    """Test PNG output."""

    def test_writes_png(self, tmp_path):
        settings = RenderSettings(width=3, aspect_ratio=1.0, num_workers=1,
                                  output_path=str(tmp_path / "out" / "image.png"))
        renderer = Renderer(settings)
        rgb = np.zeros((3, 3, 3), dtype=np.uint8)
        rgb[0, 0] = [255, 10, 20]

        path = renderer.save_image(rgb)

        assert path.exists()
        with Image.open(path) as img:
            assert img.size == (3, 3)
            assert img.mode == 'RGB'
            assert img.getpixel((0, 0)) == (255, 10, 20)
