"""
Random vector generators and the small optics helpers built on them.

Every generator takes its random source explicitly. Anything with numpy
``Generator`` semantics works: ``random()`` for a float in [0, 1) and
``uniform(low, high, size)`` for an array of floats.
"""

from __future__ import annotations
import math

from .vec3 import Vec3, Color

# Radii at or below this are treated as a point (no sampling)
RADIUS_EPSILON = 1e-7


def random_in_unit_sphere(rng) -> Vec3:
    """Uniform random point inside the unit ball."""
    while True:
        p = Vec3.from_array(rng.uniform(-1.0, 1.0, size=3))
        if p.length_squared() < 1.0:
            return p


def random_in_sphere(rng, radius: float = 1.0) -> Vec3:
    """Uniform random point inside a ball of the given radius."""
    if abs(radius) <= RADIUS_EPSILON:
        return Vec3(0, 0, 0)
    return random_in_unit_sphere(rng) * radius


def random_unit_vector(rng) -> Vec3:
    """Random direction, uniform on the unit sphere surface."""
    return random_in_unit_sphere(rng).normalize()


def random_in_unit_disk(rng) -> Vec3:
    """Uniform random point inside the unit disk in the xy plane (z = 0)."""
    while True:
        x, y = rng.uniform(-1.0, 1.0, size=2)
        if x * x + y * y < 1.0:
            return Vec3(x, y, 0.0)


def random_on_disk(rng, radius: float) -> Vec3:
    """Uniform random point on a disk of the given radius, used for lens sampling."""
    if abs(radius) <= RADIUS_EPSILON:
        return Vec3(0, 0, 0)
    return random_in_unit_disk(rng) * radius


def random_color(rng, low: float = 0.0, high: float = 1.0) -> Color:
    """Color with each channel drawn uniformly from [low, high)."""
    return Color.from_array(rng.uniform(low, high, size=3))


def lerp(a: Vec3, b: Vec3, t: float) -> Vec3:
    """Linear interpolation: a at t = 0, b at t = 1."""
    return a * (1.0 - t) + b * t


def reflect(v: Vec3, n: Vec3) -> Vec3:
    """Mirror v about the surface normal n."""
    return v - n * (2.0 * v.dot(n))


def refract(uv: Vec3, n: Vec3, eta_ratio: float) -> Vec3:
    """Bend the unit direction uv through a surface with normal n (Snell's law).

    Args:
        uv: Unit incoming direction
        n: Unit surface normal, pointing against uv
        eta_ratio: Ratio of refractive indices (incident / transmitted)

    Returns:
        The refracted direction, split into components parallel and
        perpendicular to the normal and recombined.
    """
    cos_theta = -uv.dot(n)
    parallel = (uv + n * cos_theta) * eta_ratio
    perpendicular = n * -math.sqrt(abs(1.0 - parallel.length_squared()))
    return parallel + perpendicular


def schlick(cosine: float, eta_ratio: float) -> float:
    """Schlick's approximation of the Fresnel reflectance."""
    r0 = (1.0 - eta_ratio) / (1.0 + eta_ratio)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * (1.0 - cosine) ** 5
