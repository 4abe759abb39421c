from d3kit.scene.mesh import PrimitiveShape2D, PrimitiveShape3D

from d3kit.shapes.base import Generator, keep_all, keep_none
from d3kit.shapes.line import Line2D, Line3D
from d3kit.shapes.primitive2d import Primitive2D
from d3kit.shapes.primitive3d import Primitive3D

__all__ = [
    "Generator",
    "Line2D",
    "Line3D",
    "Primitive2D",
    "Primitive3D",
    "PrimitiveShape2D",
    "PrimitiveShape3D",
    "keep_all",
    "keep_none",
]
