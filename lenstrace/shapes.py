"""
Geometric shapes for the ray tracer.

Each shape implements the Hittable interface with a `hit` method that
returns the nearest intersection strictly inside (t_min, t_max), or None.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, TYPE_CHECKING
import math

from .errors import PreconditionError
from .vec3 import Vec3, Point3
from .ray import Ray

if TYPE_CHECKING:
    from .materials import Material

# Below this |normal . direction| a ray is treated as parallel to a plane
PARALLEL_EPSILON = 1e-7
# Tolerance for the equal-sides and right-angle checks on squares
SQUARE_EPSILON = 1e-8


@dataclass(frozen=True)
class HitRecord:
    """Stores information about a ray-object intersection.

    Attributes:
        point: The intersection point in world space
        t: The ray parameter at intersection
        normal: The surface normal, always pointing against the incoming ray
        is_outside: True if the ray hit the surface from outside
        material: The material of the surface that was hit (shared, read-only)
    """
    point: Point3
    t: float
    normal: Vec3
    is_outside: bool
    material: Material


class Hittable(ABC):
    """Abstract base class for all objects that can be hit by rays."""

    @abstractmethod
    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Test if ray intersects this object.

        Args:
            ray: The ray to test
            t_min: Exclusive lower bound on t (avoids self-intersection)
            t_max: Exclusive upper bound on t

        Returns:
            HitRecord if intersection found, None otherwise
        """


class Sphere(Hittable):
    """A sphere defined by center and radius."""

    def __init__(self, center: Point3, radius: float, material: Material):
        if not radius > 0:
            raise PreconditionError(f"Sphere radius must be positive, got {radius}")
        self.center = center
        self.radius = radius
        self.material = material

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Test ray-sphere intersection using the quadratic formula.

        |O + tD - C|^2 = r^2 expands to t^2(D.D) + 2t(D.(O-C)) + |O-C|^2 - r^2 = 0,
        solved here with the half-b form.
        """
        if t_max < t_min:
            return None

        oc = ray.origin - self.center
        a = ray.direction.length_squared()
        half_b = oc.dot(ray.direction)
        c = oc.length_squared() - self.radius * self.radius

        discriminant = half_b * half_b - a * c
        if discriminant < 0:
            return None

        sqrtd = math.sqrt(discriminant)

        # Nearest root strictly inside the interval
        root = (-half_b - sqrtd) / a
        if not t_min < root < t_max:
            root = (-half_b + sqrtd) / a
            if not t_min < root < t_max:
                return None

        point = ray.at(root)
        outward_normal = (point - self.center) / self.radius
        is_outside = ray.direction.dot(outward_normal) < 0

        return HitRecord(
            point=point,
            t=root,
            normal=outward_normal if is_outside else -outward_normal,
            is_outside=is_outside,
            material=self.material,
        )

    def __repr__(self) -> str:
        return f"Sphere(center={self.center}, radius={self.radius})"


class Triangle(Hittable):
    """A one-sided-normal triangle with vertices wound p1 -> p2 -> p3."""

    def __init__(self, p1: Point3, p2: Point3, p3: Point3, material: Material):
        """Create a triangle.

        Raises:
            PreconditionError: if two vertices coincide or all three are collinear
        """
        if p1.is_same(p2) or p2.is_same(p3) or p3.is_same(p1):
            raise PreconditionError("Points on a triangle must be unique")
        normal = (p2 - p1).cross(p3 - p1).normalize()
        if normal.length_squared() == 0:
            raise PreconditionError("Points on a triangle must not be collinear")

        self.p1 = p1
        self.p2 = p2
        self.p3 = p3
        self.normal = normal
        self.material = material

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Intersect with the supporting plane, then run the edge-side test."""
        denom = self.normal.dot(ray.direction)
        if abs(denom) <= PARALLEL_EPSILON:
            return None

        t = (self.normal.dot(self.p1) - self.normal.dot(ray.origin)) / denom
        if not t_min < t < t_max:
            return None

        point = ray.at(t)

        # The point is inside when it lies on the inner side of every edge
        a = (self.p2 - self.p1).cross(point - self.p1).dot(self.normal)
        b = (self.p3 - self.p2).cross(point - self.p2).dot(self.normal)
        c = (self.p1 - self.p3).cross(point - self.p3).dot(self.normal)
        if a < 0 or b < 0 or c < 0:
            return None

        return HitRecord(
            point=point,
            t=t,
            normal=self.normal,
            is_outside=denom < 0,
            material=self.material,
        )

    def __repr__(self) -> str:
        return f"Triangle({self.p1}, {self.p2}, {self.p3})"


class Square(Hittable):
    """A square p1 -> p2 -> p3 -> p4, split into two triangles along p1-p3."""

    def __init__(self, p1: Point3, p2: Point3, p3: Point3, p4: Point3, material: Material):
        """Create a square.

        Raises:
            PreconditionError: if the sides differ in length or any corner
                is not a right angle
        """
        edges = [p1 - p2, p2 - p3, p3 - p4, p4 - p1]
        lengths = [edge.length() for edge in edges]

        for i in range(4):
            if abs(lengths[i] - lengths[(i + 1) % 4]) >= SQUARE_EPSILON:
                raise PreconditionError("Sides of a square must be equal")
        for i in range(4):
            if abs(edges[i].dot(edges[(i + 1) % 4])) >= SQUARE_EPSILON:
                raise PreconditionError("Squares must have right angles")

        self.first = Triangle(p1, p2, p3, material)
        self.second = Triangle(p1, p3, p4, material)
        self.material = material

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        hit_record = self.first.hit(ray, t_min, t_max)
        if hit_record is None:
            hit_record = self.second.hit(ray, t_min, t_max)
        return hit_record

    def __repr__(self) -> str:
        return f"Square({self.first.p1}, {self.first.p2}, {self.first.p3}, {self.second.p3})"


class Scene(Hittable):
    """An ordered collection of hittable objects with closest-hit semantics.

    Lookups are a linear scan over every member.
    """

    def __init__(self, objects: Optional[Iterable[Hittable]] = None):
        self.objects: list[Hittable] = list(objects) if objects is not None else []

    def add(self, obj: Hittable) -> None:
        """Add an object to the scene."""
        self.objects.append(obj)

    def pop(self) -> Optional[Hittable]:
        """Remove and return the most recently added object, if any."""
        if not self.objects:
            return None
        return self.objects.pop()

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Find the closest intersection among all objects."""
        closest_hit: Optional[HitRecord] = None
        closest_t = t_max

        for obj in self.objects:
            hit_record = obj.hit(ray, t_min, closest_t)
            if hit_record is not None:
                closest_hit = hit_record
                closest_t = hit_record.t

        return closest_hit

    def __len__(self) -> int:
        return len(self.objects)

    def __iter__(self) -> Iterator[Hittable]:
        return iter(self.objects)
