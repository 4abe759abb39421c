from __future__ import annotations

import argparse
import logging
from pathlib import Path
import tempfile

import numpy as np

from d3kit import Histogram3D, LineChart3D, load_chart_style, load_csv_path
from d3kit.scene import Scene


LOGGER = logging.getLogger("d3kit.examples")


def _parse_sample(line: str) -> tuple[float, float]:
    cols = line.split(",")
    return (float(cols[0]), float(cols[1]))


def _write_samples(path: Path, n: int, seed: int) -> None:
    rng = np.random.default_rng(seed)
    xs = rng.normal(5.0, 1.5, size=n)
    ys = rng.normal(3.0, 0.8, size=n)
    lines = ["x,y"] + [f"{x:.4f},{y:.4f}" for x, y in zip(xs.tolist(), ys.tolist())]
    # One malformed row to show that ingestion skips it.
    lines.insert(10, "n/a,n/a")
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


def main() -> int:
    parser = argparse.ArgumentParser(description="Build a 3-D histogram and a 3-D line chart in a headless scene.")
    parser.add_argument("--samples", type=int, default=2000)
    parser.add_argument("--seed", type=int, default=7)
    parser.add_argument("--bins", type=int, default=12)
    parser.add_argument("--style", type=Path, default=None, help="optional chart style TOML")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    style = load_chart_style(args.style) if args.style is not None else None

    with tempfile.TemporaryDirectory() as td:
        csv_path = Path(td) / "samples.csv"
        _write_samples(csv_path, args.samples, args.seed)
        records = load_csv_path(csv_path, _parse_sample)

    scene = Scene()
    scene.camera.local_position = (3.0, 4.0, -12.0)

    histogram = Histogram3D(
        records,
        x=lambda r: r[0],
        y=lambda r: r[1],
        bins_x=args.bins,
        bins_y=args.bins,
        style=style,
    ).build(scene.root)

    walk = np.cumsum(np.random.default_rng(args.seed).normal(size=(200, 3)), axis=0)
    trail = LineChart3D(walk.tolist(), x=lambda r: r[0], y=lambda r: r[1], z=lambda r: r[2], style=style).build(scene.root)

    # One frame: rebuild whatever is dirty, then turn labels toward the camera.
    for chart in (histogram, trail):
        chart.reconcile()
    scene.update()

    tallest = max(histogram.bins, key=lambda b: b.count)
    LOGGER.info("loaded %d records, skipped %d", len(records), len(records.skipped))
    LOGGER.info("histogram: %d bars, tallest at (%.2f, %.2f) with %d", len(histogram.bins), tallest.center_x, tallest.center_y, tallest.count)
    LOGGER.info("trail: %d points", trail.generators[0].primitive_count)

    # Responsive resize: scales change, axes go dirty, marks are forced.
    histogram.resize(8.0, 4.0, 8.0).reconcile()
    LOGGER.info("resized histogram axis ticks: %s", [axis.tick_count for axis in histogram.axes])
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
