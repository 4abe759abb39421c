from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import math

import numpy as np

from d3kit.errors import UnsupportedError


class PrimitiveShape2D(Enum):
    RECT = "rect"
    CIRCLE = "circle"
    DOT = "dot"


class PrimitiveShape3D(Enum):
    CUBE = "cube"
    SPHERE = "sphere"


@dataclass(frozen=True)
class Mesh:
    vertices: np.ndarray
    triangles: np.ndarray
    normals: np.ndarray | None = None

    @property
    def vertex_count(self) -> int:
        return int(self.vertices.shape[0])


CIRCLE_SEGMENTS = 10
DOT_SEGMENTS = 6


def generate_mesh(shape: PrimitiveShape2D | PrimitiveShape3D) -> Mesh:
    if shape is PrimitiveShape2D.RECT:
        return _quad()
    if shape is PrimitiveShape2D.CIRCLE:
        return _disc(CIRCLE_SEGMENTS, radius=1.0)
    if shape is PrimitiveShape2D.DOT:
        return _disc(DOT_SEGMENTS, radius=0.5)
    if shape is PrimitiveShape3D.CUBE:
        return _cube()
    raise UnsupportedError(f"no mesh for shape: {shape!r}")


def _quad() -> Mesh:
    vertices = np.asarray(
        [
            (-0.5, -0.5, 0.0),
            (-0.5, 0.5, 0.0),
            (0.5, 0.5, 0.0),
            (0.5, -0.5, 0.0),
        ],
        dtype=np.float32,
    )
    triangles = np.asarray([0, 1, 3, 3, 1, 2], dtype=np.int32)
    return Mesh(vertices=vertices, triangles=triangles)


def _disc(n: int, *, radius: float) -> Mesh:
    angles = np.arange(n, dtype=np.float64) * (2.0 * math.pi / n)
    vertices = np.zeros((n, 3), dtype=np.float32)
    vertices[:, 0] = radius * np.cos(angles)
    vertices[:, 1] = radius * np.sin(angles)
    # Triangle fan around vertex 0.
    triangles = np.asarray([(0, i + 1, i + 2) for i in range(n - 2)], dtype=np.int32).reshape(-1)
    normals = np.tile(np.asarray([0.0, 0.0, -1.0], dtype=np.float32), (n, 1))
    return Mesh(vertices=vertices, triangles=triangles, normals=normals)


_CUBE_FACES = (
    # normal, then the two in-face axes
    ((0.0, 0.0, 1.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0)),
    ((0.0, 1.0, 0.0), (1.0, 0.0, 0.0), (0.0, 0.0, -1.0)),
    ((0.0, 0.0, -1.0), (-1.0, 0.0, 0.0), (0.0, 1.0, 0.0)),
    ((0.0, -1.0, 0.0), (1.0, 0.0, 0.0), (0.0, 0.0, 1.0)),
    ((-1.0, 0.0, 0.0), (0.0, 0.0, 1.0), (0.0, 1.0, 0.0)),
    ((1.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 1.0, 0.0)),
)


def _cube() -> Mesh:
    vertices: list[np.ndarray] = []
    normals: list[np.ndarray] = []
    triangles: list[int] = []
    for normal, u, v in _CUBE_FACES:
        n = np.asarray(normal)
        du = np.asarray(u) * 0.5
        dv = np.asarray(v) * 0.5
        center = n * 0.5
        base = len(vertices)
        for su, sv in ((-1, -1), (1, -1), (1, 1), (-1, 1)):
            vertices.append(center + su * du + sv * dv)
            normals.append(n)
        triangles.extend((base, base + 2, base + 1, base, base + 3, base + 2))
    return Mesh(
        vertices=np.asarray(vertices, dtype=np.float32),
        triangles=np.asarray(triangles, dtype=np.int32),
        normals=np.asarray(normals, dtype=np.float32),
    )
