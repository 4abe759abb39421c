from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
import tomllib
from typing import Any


RGBA = tuple[int, int, int, int]

DEFAULT_TICK_COUNT = 6
DEFAULT_TICK_SIZE = 0.125
DEFAULT_TICK_FONT_SIZE = 2.0
DEFAULT_STROKE_WIDTH = 0.0175


@dataclass(frozen=True)
class AxisStyle:
    tick_count: int = DEFAULT_TICK_COUNT
    tick_size: float = DEFAULT_TICK_SIZE
    tick_font_size: float = DEFAULT_TICK_FONT_SIZE
    axis_stroke_width: float = DEFAULT_STROKE_WIDTH
    tick_stroke_width: float = DEFAULT_STROKE_WIDTH
    tick_text_color: RGBA = (0, 0, 0, 255)
    face_viewer: bool = False

    def __post_init__(self) -> None:
        if self.tick_size < 0:
            raise ValueError("tick_size must be >= 0")
        if self.tick_font_size <= 0:
            raise ValueError("tick_font_size must be > 0")
        if self.axis_stroke_width < 0 or self.tick_stroke_width < 0:
            raise ValueError("stroke widths must be >= 0")


@dataclass(frozen=True)
class GeneratorStyle:
    stroke_width: float = DEFAULT_STROKE_WIDTH
    dot_size: float = 0.05
    color: RGBA | None = None

    def __post_init__(self) -> None:
        if self.stroke_width < 0:
            raise ValueError("stroke_width must be >= 0")
        if self.dot_size <= 0:
            raise ValueError("dot_size must be > 0")


@dataclass(frozen=True)
class ChartStyle:
    width: float = 6.0
    height: float = 6.0
    depth: float = 6.0
    bin_padding: float = 0.05
    bin_count: int = 20
    min_bar_height: float = 0.005
    axis: AxisStyle = field(default_factory=AxisStyle)
    marks: GeneratorStyle = field(default_factory=GeneratorStyle)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0 or self.depth <= 0:
            raise ValueError("chart width/height/depth must be > 0")
        if self.bin_padding < 0:
            raise ValueError("bin_padding must be >= 0")
        if self.bin_count <= 0:
            raise ValueError("bin_count must be > 0")


def load_chart_style(path: str | Path, *, base: ChartStyle | None = None) -> ChartStyle:
    """Read a `ChartStyle` from TOML.

    Top-level keys override `ChartStyle` fields; the optional `[axis]` and
    `[marks]` tables override `AxisStyle` and `GeneratorStyle`. Keys that are
    not fields of the target dataclass are rejected.
    """
    style_path = Path(path)
    if not style_path.exists():
        raise FileNotFoundError(f"chart style not found: {style_path}")
    with style_path.open("rb") as f:
        raw = tomllib.load(f)
    return chart_style_from_mapping(raw, base=base)


def chart_style_from_mapping(raw: dict[str, Any], *, base: ChartStyle | None = None) -> ChartStyle:
    style = base or ChartStyle()
    raw = dict(raw)
    axis_raw = raw.pop("axis", None)
    marks_raw = raw.pop("marks", None)
    axis = style.axis
    marks = style.marks
    if axis_raw is not None:
        axis = replace(axis, **_coerce_table(axis_raw, AxisStyle, "axis"))
    if marks_raw is not None:
        marks = replace(marks, **_coerce_table(marks_raw, GeneratorStyle, "marks"))
    top = _coerce_table(raw, ChartStyle, "chart")
    return replace(style, axis=axis, marks=marks, **top)


def _coerce_table(raw: Any, target: type, table_name: str) -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise ValueError(f"`{table_name}` must be a table")
    known = {f.name: f for f in fields(target)}
    out: dict[str, Any] = {}
    for key, value in raw.items():
        if key not in known:
            raise ValueError(f"unknown {table_name} style field: {key}")
        out[key] = _coerce_value(value, key, table_name)
    return out


def _coerce_value(value: Any, key: str, table_name: str) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, list):
        if len(value) != 4 or not all(isinstance(v, int) and 0 <= v <= 255 for v in value):
            raise ValueError(f"{table_name}.{key} must be an RGBA list of four 0-255 integers")
        return tuple(value)
    raise ValueError(f"{table_name}.{key} has unsupported type: {type(value).__name__}")
