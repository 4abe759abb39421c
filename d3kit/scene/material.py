from __future__ import annotations

from dataclasses import dataclass, replace

from d3kit.config import RGBA


@dataclass
class Material:
    name: str = "default"
    color: RGBA = (255, 255, 255, 255)
    shader: str = "unlit"

    def clone(self) -> "Material":
        return replace(self)
