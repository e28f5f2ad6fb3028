"""
Renderer module - the heart of the ray tracer.

Implements:
- Recursive Monte Carlo path tracing with a fixed depth bound
- Row-parallel rendering on a thread or process pool
- Per-sample random streams, so seeded renders are reproducible
- Gamma-2 correction, 8-bit quantization and PNG output
"""

from __future__ import annotations
import logging
import math
import os
import time
from concurrent.futures import ThreadPoolExecutor, ProcessPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Union

import numpy as np
from PIL import Image

from .errors import PreconditionError
from .vec3 import Color
from .ray import Ray
from .camera import Camera
from .shapes import Hittable
from .sampling import lerp

logger = logging.getLogger(__name__)

EXECUTORS = ('thread', 'process')


@dataclass
class RenderSettings:
    """Configuration for the renderer."""
    width: int = 1024
    aspect_ratio: float = 16.0 / 9.0
    samples_per_pixel: int = 100
    max_depth: int = 10
    horizon_color: Color = None
    sky_color: Color = None
    t_min: float = 1e-4
    num_workers: int = 0  # 0 = auto-detect
    executor: str = 'thread'
    seed: Optional[int] = None
    output_path: str = 'image.png'

    def __post_init__(self):
        if self.horizon_color is None:
            self.horizon_color = Color(1.0, 1.0, 1.0)
        if self.sky_color is None:
            self.sky_color = Color(0.3, 0.5, 1.0)
        if self.num_workers == 0:
            self.num_workers = os.cpu_count() or 4

        if self.width <= 0 or self.aspect_ratio <= 0 or self.height <= 0:
            raise PreconditionError(
                f"Image must have positive size, got width={self.width} aspect_ratio={self.aspect_ratio}"
            )
        if self.samples_per_pixel <= 0:
            raise PreconditionError("samples_per_pixel must be positive")
        if self.num_workers < 0:
            raise PreconditionError("num_workers must not be negative")
        if self.executor not in EXECUTORS:
            raise PreconditionError(f"Unknown executor: {self.executor}")
        if self.seed is not None and self.seed < 0:
            raise PreconditionError(f"seed must not be negative, got {self.seed}")

    @property
    def height(self) -> int:
        return int(self.width / self.aspect_ratio)


def sample_rng(entropy: int, row: int, col: int, sample: int) -> np.random.Generator:
    """Independent random stream for one (row, col, sample) unit of work."""
    return np.random.default_rng(np.random.SeedSequence(entropy, spawn_key=(row, col, sample)))


class Renderer:
    """Path tracing renderer with multi-worker support."""

    def __init__(
        self,
        settings: RenderSettings = None,
        rng_factory: Callable[[int, int, int, int], object] = sample_rng,
    ):
        """Create a renderer with the given settings.

        Args:
            settings: Render configuration (uses defaults if None)
            rng_factory: Builds the random source for a (entropy, row, col, sample)
                unit of work; must be picklable for the process executor
        """
        self.settings = settings if settings else RenderSettings()
        self.rng_factory = rng_factory
        self._progress_callback: Optional[Callable[[float], None]] = None

    def __getstate__(self):
        # Progress callbacks stay in the parent process
        state = self.__dict__.copy()
        state['_progress_callback'] = None
        return state

    def set_progress_callback(self, callback: Callable[[float], None]) -> None:
        """Set a callback function for progress updates.

        Args:
            callback: Function that takes progress as float (0.0 to 1.0),
                called in the calling process as rows complete
        """
        self._progress_callback = callback

    def ray_color(self, ray: Ray, scene: Hittable, depth: int, rng) -> Color:
        """Estimate the light arriving back along a ray.

        Args:
            ray: The ray to trace
            scene: The scene to trace against
            depth: Remaining bounces; at zero the ray is fully absorbed
            rng: Random source for this sample

        Returns:
            The color carried by this ray
        """
        if depth <= 0:
            return Color(0, 0, 0)

        hit_record = scene.hit(ray, self.settings.t_min, math.inf)
        if hit_record is None:
            return self.background(ray)

        scatter_result = hit_record.material.scatter(ray, hit_record, rng)
        if scatter_result is None:
            return Color(0, 0, 0)
        return scatter_result.attenuation * self.ray_color(
            scatter_result.scattered, scene, depth - 1, rng
        )

    def background(self, ray: Ray) -> Color:
        """Vertical gradient from the horizon color (down) to the sky color (up)."""
        t = 0.5 * (ray.direction.normalize().y + 1.0)
        return lerp(self.settings.horizon_color, self.settings.sky_color, t)

    def render(self, scene: Hittable, camera: Camera) -> np.ndarray:
        """Render the scene and return the mean linear color of every pixel.

        Args:
            scene: The scene to render (any Hittable)
            camera: The camera to render from

        Returns:
            Linear image as numpy array of shape (height, width, 3), row 0 at the top
        """
        width = self.settings.width
        height = self.settings.height
        samples = self.settings.samples_per_pixel
        workers = self.settings.num_workers

        entropy = self.settings.seed
        if entropy is None:
            entropy = np.random.SeedSequence().entropy

        logger.info(
            "Rendering %dx%d, %d samples/pixel, depth %d, %d %s worker(s)",
            width, height, samples, self.settings.max_depth, workers, self.settings.executor,
        )
        start = time.perf_counter()

        image = np.zeros((height, width, 3), dtype=np.float64)
        completed = 0

        def store(row: int, sums: np.ndarray) -> None:
            nonlocal completed
            # Row 0 is the bottom of the viewport but the top of the image
            image[height - 1 - row] = sums / samples
            completed += 1
            if self._progress_callback:
                self._progress_callback(completed / height)

        if workers <= 1:
            for row in range(height):
                store(row, self.render_row(scene, camera, row, entropy))
        else:
            pool_class = ProcessPoolExecutor if self.settings.executor == 'process' else ThreadPoolExecutor
            with pool_class(max_workers=workers) as executor:
                futures = {
                    executor.submit(self.render_row, scene, camera, row, entropy): row
                    for row in range(height)
                }
                for future in as_completed(futures):
                    store(futures[future], future.result())

        logger.info("Render finished in %.2f s", time.perf_counter() - start)
        return image

    def render_row(self, scene: Hittable, camera: Camera, row: int, entropy: int) -> np.ndarray:
        """Sum every sample of every pixel in one viewport row.

        Returns:
            Array of shape (width, 3) holding per-pixel sums
        """
        width = self.settings.width
        sums = np.zeros((width, 3), dtype=np.float64)
        for col in range(width):
            sums[col] = self.sample_pixel(scene, camera, row, col, entropy).to_array()
        return sums

    def sample_pixel(self, scene: Hittable, camera: Camera, row: int, col: int, entropy: int) -> Color:
        """Sum of samples_per_pixel jittered estimates for one pixel."""
        width = self.settings.width
        height = self.settings.height
        pixel_color = Color(0, 0, 0)

        for sample in range(self.settings.samples_per_pixel):
            rng = self.rng_factory(entropy, row, col, sample)
            s = (col + rng.random()) / width
            t = (row + rng.random()) / height
            ray = camera.get_ray(s, t, rng)
            pixel_color = pixel_color + self.ray_color(ray, scene, self.settings.max_depth, rng)

        return pixel_color

    @staticmethod
    def to_rgb8(image: np.ndarray) -> np.ndarray:
        """Convert a mean linear image to 8-bit with gamma-2 correction.

        Each channel becomes floor(256 * clamp(sqrt(value), 0, 0.999)).

        Args:
            image: Linear image array (float64)

        Returns:
            Image as uint8 array of the same shape
        """
        corrected = np.sqrt(np.clip(image, 0.0, None))
        return np.floor(256.0 * np.clip(corrected, 0.0, 0.999)).astype(np.uint8)

    def render_image(self, scene: Hittable, camera: Camera) -> np.ndarray:
        """Render and quantize in one step."""
        return self.to_rgb8(self.render(scene, camera))

    def save_image(self, image: np.ndarray, filename: Union[str, Path, None] = None) -> Path:
        """Save an 8-bit RGB image.

        Args:
            image: uint8 array of shape (height, width, 3)
            filename: Output path (defaults to settings.output_path)

        Returns:
            The path written
        """
        path = Path(filename if filename is not None else self.settings.output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.fromarray(image).save(path)
        logger.info("Wrote %dx%d image to %s", image.shape[1], image.shape[0], path)
        return path
