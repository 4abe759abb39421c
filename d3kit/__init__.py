from d3kit.axis import Axis, AxisBottom, AxisLeft, AxisRight
from d3kit.binning import Bin, Bin2D, Binner, Binner2D
from d3kit.charts import BarChart2D, Chart, Histogram3D, LineChart2D, LineChart3D, ScatterPlot2D
from d3kit.config import AxisStyle, ChartStyle, GeneratorStyle, load_chart_style
from d3kit.data import CsvLoadResult, extent, load_csv_path, load_csv_text
from d3kit.errors import ChartError, EmptyDatasetError, MissingAccessorError, ParseSkipped, UnsupportedError
from d3kit.events import Event, Subscription
from d3kit.scales import ContinuousScale, IntLinearScale, LinearScale, TimeScale
from d3kit.shapes import Generator, Line2D, Line3D, Primitive2D, Primitive3D, PrimitiveShape2D, PrimitiveShape3D

__all__ = [
    "Axis",
    "AxisBottom",
    "AxisLeft",
    "AxisRight",
    "AxisStyle",
    "BarChart2D",
    "Bin",
    "Bin2D",
    "Binner",
    "Binner2D",
    "Chart",
    "ChartError",
    "ChartStyle",
    "ContinuousScale",
    "CsvLoadResult",
    "EmptyDatasetError",
    "Event",
    "GeneratorStyle",
    "Generator",
    "Histogram3D",
    "IntLinearScale",
    "Line2D",
    "Line3D",
    "LineChart2D",
    "LineChart3D",
    "LinearScale",
    "MissingAccessorError",
    "ParseSkipped",
    "Primitive2D",
    "Primitive3D",
    "PrimitiveShape2D",
    "PrimitiveShape3D",
    "ScatterPlot2D",
    "Subscription",
    "TimeScale",
    "UnsupportedError",
    "extent",
    "load_chart_style",
    "load_csv_path",
    "load_csv_text",
]
