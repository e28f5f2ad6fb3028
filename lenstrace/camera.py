"""
Camera module for generating primary rays.

Supports:
- Perspective projection with a configurable vertical field of view
- Depth of field (thin lens defocus blur)
- Arbitrary positioning via look-at, with re-posing after construction
"""

from __future__ import annotations
import math

from .errors import PreconditionError
from .vec3 import Vec3, Point3
from .ray import Ray
from .sampling import random_on_disk


class Camera:
    """A thin-lens perspective camera."""

    def __init__(
        self,
        origin: Point3,
        target: Point3,
        up: Vec3 = Vec3(0, 1, 0),
        fov: float = 20.0,
        aspect_ratio: float = 16.0 / 9.0,
        aperture: float = 0.0,
        focus_dist: float = 1.0,
    ):
        """Create a camera.

        Args:
            origin: Camera position in world space
            target: Point the camera is looking at
            up: World up vector (normalized here)
            fov: Vertical field of view in degrees, |fov| < 90
            aspect_ratio: Width / Height ratio
            aperture: Lens diameter (0 = pinhole)
            focus_dist: Distance to the plane in perfect focus

        Raises:
            PreconditionError: if origin equals target or |fov| >= 90
        """
        if abs(fov) >= 90.0:
            raise PreconditionError("Field of view must be less than 90 degrees")

        self.up = up.normalize()
        self.fov = fov
        self.aspect_ratio = aspect_ratio
        self.aperture = aperture
        self.focus_dist = focus_dist
        self.lens_radius = aperture / 2
        self._pose(origin, target)

    def _pose(self, origin: Point3, target: Point3) -> None:
        """Derive the basis and viewport for a new pose, or raise without changing anything."""
        if origin.is_same(target):
            raise PreconditionError("Camera must not face its own origin")

        h = math.tan(math.radians(self.fov) / 2)
        viewport_height = 2.0 * h
        viewport_width = self.aspect_ratio * viewport_height

        w = (origin - target).normalize()  # Points backward from camera
        u = self.up.cross(w).normalize()   # Points right
        v = w.cross(u)                     # Points up

        horizontal = u * (self.focus_dist * viewport_width)
        vertical = v * (self.focus_dist * viewport_height)

        self.origin = origin
        self.target = target
        self.u, self.v, self.w = u, v, w
        self.horizontal = horizontal
        self.vertical = vertical
        self.lower_left = origin - horizontal / 2 - vertical / 2 - w * self.focus_dist

    def set_facing(self, target: Point3) -> None:
        """Point the camera at a new target, keeping its position."""
        self._pose(self.origin, target)

    def set_origin(self, origin: Point3) -> None:
        """Move the camera, keeping it aimed at the same target."""
        self._pose(origin, self.target)

    def get_ray(self, s: float, t: float, rng) -> Ray:
        """Generate a ray for the given coordinates on the image plane.

        Args:
            s: Horizontal coordinate [0, 1] (0 = left, 1 = right)
            t: Vertical coordinate [0, 1] (0 = bottom, 1 = top)
            rng: Random source used to sample the lens

        Returns:
            A ray from a point on the lens through the focal plane
        """
        rd = random_on_disk(rng, self.lens_radius)
        offset = self.u * rd.x + self.v * rd.y

        direction = (
            self.lower_left
            + self.horizontal * s
            + self.vertical * t
            - self.origin
            - offset
        )
        return Ray(self.origin + offset, direction)

    def __repr__(self) -> str:
        return f"Camera(origin={self.origin}, target={self.target}, fov={self.fov})"
