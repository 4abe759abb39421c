"""Minimal in-memory scene graph the chart components attach to."""

from d3kit.scene.components import Billboard, Component, LineRenderer, MeshRenderer, TextLabel, look_at_rotation
from d3kit.scene.material import Material
from d3kit.scene.mesh import Mesh, PrimitiveShape2D, PrimitiveShape3D, generate_mesh
from d3kit.scene.node import Camera, Node, Scene, euler_matrix

__all__ = [
    "Billboard",
    "Camera",
    "Component",
    "LineRenderer",
    "Material",
    "Mesh",
    "MeshRenderer",
    "Node",
    "PrimitiveShape2D",
    "PrimitiveShape3D",
    "Scene",
    "TextLabel",
    "euler_matrix",
    "generate_mesh",
    "look_at_rotation",
]
