"""
LensTrace - A Python Monte Carlo Path Tracer

Renders scenes of spheres, triangles and squares with:
- Diffuse, metal and glass materials
- Thin lens camera with depth of field
- Multi-worker rendering with reproducible per-sample random streams
- 8-bit PNG output
"""

__version__ = "0.1.0"

from .vec3 import Vec3, Point3, Color
from .ray import Ray
from .errors import PreconditionError
from .shapes import HitRecord, Hittable, Sphere, Triangle, Square, Scene
from .materials import Material, ScatterResult, Lambertian, Metal, Dielectric
from .camera import Camera
from .renderer import Renderer, RenderSettings, sample_rng
from .scenes import random_spheres_scene, showcase_camera
