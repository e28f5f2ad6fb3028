"""
Material models.

Implements:
- Lambertian diffuse
- Metal (specular reflection with fuzz)
- Dielectric (glass, water - with refraction)

Materials are immutable once built and may be shared by any number of
surfaces and render workers.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING
import math

from .errors import PreconditionError
from .vec3 import Color
from .ray import Ray
from .sampling import (
    random_in_sphere, random_unit_vector, reflect, refract, schlick,
)

if TYPE_CHECKING:
    from .shapes import HitRecord


@dataclass(frozen=True)
class ScatterResult:
    """Result of a material scatter operation."""
    attenuation: Color
    scattered: Ray


class Material(ABC):
    """Abstract base class for materials."""

    @abstractmethod
    def scatter(self, ray_in: Ray, hit: HitRecord, rng) -> Optional[ScatterResult]:
        """Compute the scattered ray and attenuation.

        Args:
            ray_in: The incoming ray
            hit: The intersection being shaded
            rng: Random source for this sample

        Returns:
            ScatterResult if the ray scatters, None if it is absorbed
        """


class Lambertian(Material):
    """Diffuse material with Lambertian (ideal matte) scattering."""

    def __init__(self, albedo: Color):
        self.albedo = albedo

    def scatter(self, ray_in: Ray, hit: HitRecord, rng) -> Optional[ScatterResult]:
        scatter_direction = hit.normal + random_unit_vector(rng)

        # Catch degenerate scatter direction
        if scatter_direction.near_zero():
            scatter_direction = hit.normal

        return ScatterResult(
            attenuation=self.albedo,
            scattered=Ray(hit.point, scatter_direction),
        )

    def __repr__(self) -> str:
        return f"Lambertian(albedo={self.albedo})"


class Metal(Material):
    """Metallic material with specular reflection."""

    def __init__(self, albedo: Color, fuzz: float = 0.0):
        """Create a metal material.

        Args:
            albedo: The reflection color
            fuzz: Reflection perturbation radius, clamped to [0, 1] (0 = mirror)
        """
        self.albedo = albedo
        self.fuzz = max(0.0, min(fuzz, 1.0))

    def scatter(self, ray_in: Ray, hit: HitRecord, rng) -> Optional[ScatterResult]:
        reflected = reflect(ray_in.direction.normalize(), hit.normal)
        direction = reflected + random_in_sphere(rng, self.fuzz)

        # Fuzz pushed the ray below the surface: absorbed
        if direction.dot(hit.normal) <= 0:
            return None
        return ScatterResult(
            attenuation=self.albedo,
            scattered=Ray(hit.point, direction),
        )

    def __repr__(self) -> str:
        return f"Metal(albedo={self.albedo}, fuzz={self.fuzz})"


class Dielectric(Material):
    """Dielectric (glass-like) material with refraction.

    Attenuation is always white: colored glass is not modelled.
    """

    def __init__(self, refraction_idx: float = 1.5):
        """Create a dielectric material.

        Args:
            refraction_idx: Index of refraction (1.0 = air, 1.5 = glass, 2.4 = diamond)

        Raises:
            PreconditionError: if the index is not positive
        """
        if not refraction_idx > 0:
            raise PreconditionError(f"Index of refraction must be positive, got {refraction_idx}")
        self.refraction_idx = refraction_idx

    def scatter(self, ray_in: Ray, hit: HitRecord, rng) -> Optional[ScatterResult]:
        # Entering the medium from outside, or leaving it
        refraction_ratio = 1.0 / self.refraction_idx if hit.is_outside else self.refraction_idx

        unit_direction = ray_in.direction.normalize()
        cos_theta = min(-unit_direction.dot(hit.normal), 1.0)
        sin_theta = math.sqrt(max(0.0, 1.0 - cos_theta * cos_theta))

        cannot_refract = refraction_ratio * sin_theta > 1.0
        if cannot_refract or rng.random() < schlick(cos_theta, refraction_ratio):
            direction = reflect(unit_direction, hit.normal)
        else:
            direction = refract(unit_direction, hit.normal, refraction_ratio)

        return ScatterResult(
            attenuation=Color(1.0, 1.0, 1.0),
            scattered=Ray(hit.point, direction),
        )

    def __repr__(self) -> str:
        return f"Dielectric(refraction_idx={self.refraction_idx})"
