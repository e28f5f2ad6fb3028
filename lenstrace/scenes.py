"""
Built-in scenes.

The showcase is the classic "random spheres" arrangement: a huge ground
sphere, three large feature spheres, and a grid of small spheres with
randomly drawn materials.
"""

from __future__ import annotations
import logging

from .vec3 import Vec3, Point3, Color
from .camera import Camera
from .shapes import Sphere, Scene
from .materials import Lambertian, Metal, Dielectric
from .sampling import random_color

logger = logging.getLogger(__name__)

# Small spheres too close to this point would overlap the metal feature sphere
RESERVED_POSITION = Point3(4.0, 0.2, 0.0)
RESERVED_CLEARANCE = 0.9
SMALL_RADIUS = 0.2


def random_spheres_scene(rng, grid: int = 11) -> Scene:
    """Build the showcase scene.

    Args:
        rng: Random source for positions and materials
        grid: Small spheres are placed on the lattice [-grid, grid) x [-grid, grid)

    Returns:
        The populated scene
    """
    scene = Scene()

    # Ground
    scene.add(Sphere(Point3(0, -1000, -1), 1000, Lambertian(Color(0.3, 0.8, 0.2))))

    scene.add(Sphere(Point3(0, 1, 0), 1.0, Dielectric(1.5)))
    scene.add(Sphere(Point3(-4, 1, 0), 1.0, Lambertian(Color(0.4, 0.2, 0.1))))
    scene.add(Sphere(Point3(4, 1, 0), 1.0, Metal(Color(0.7, 0.6, 0.5), 0.0)))

    # Glass is the same for every small dielectric sphere
    glass = Dielectric(1.5)

    for a in range(-grid, grid):
        for b in range(-grid, grid):
            center = Point3(a + 1.9 * rng.random(), SMALL_RADIUS, b + 1.9 * rng.random())
            if (center - RESERVED_POSITION).length() <= RESERVED_CLEARANCE:
                continue

            choose_mat = rng.random()
            if choose_mat < 0.8:
                material = Lambertian(random_color(rng))
            elif choose_mat < 0.95:
                material = Metal(random_color(rng, 0.5, 1.0), rng.uniform(0.0, 0.5))
            else:
                material = glass
            scene.add(Sphere(center, SMALL_RADIUS, material))

    logger.debug("Built random spheres scene with %d objects", len(scene))
    return scene


def showcase_camera(aspect_ratio: float = 16.0 / 9.0) -> Camera:
    """Camera framing the showcase scene, focused on the feature spheres."""
    return Camera(
        origin=Point3(13, 2, 3),
        target=Point3(0, 0, 0),
        up=Vec3(0, 1, 0),
        fov=20.0,
        aspect_ratio=aspect_ratio,
        aperture=0.1,
        focus_dist=10.0,
    )
