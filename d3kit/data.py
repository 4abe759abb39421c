from __future__ import annotations

from pathlib import Path
import logging
from typing import Callable, Iterable, TypeVar

from d3kit.errors import EmptyDatasetError, ParseSkipped


LOGGER = logging.getLogger(__name__)

R = TypeVar("R")
V = TypeVar("V")

RecordParser = Callable[[str], R]


class CsvLoadResult(list):
    """Parsed records, plus the lines that were skipped on the way."""

    def __init__(self, records: Iterable = (), skipped: Iterable[ParseSkipped] = ()) -> None:
        super().__init__(records)
        self.skipped: list[ParseSkipped] = list(skipped)


def load_csv_text(text: str, record_parser: RecordParser[R]) -> CsvLoadResult:
    """Parse every non-blank line after the header with `record_parser`.

    Any exception the parser raises for a line is logged and the line is
    skipped; ingestion keeps going.
    """
    return _parse_lines(_split_lines(text), record_parser, source="<text>")


def load_csv_path(path: str | Path, record_parser: RecordParser[R], *, encoding: str = "utf-8") -> CsvLoadResult:
    csv_path = Path(path)
    if not csv_path.exists():
        raise FileNotFoundError(f"csv file not found: {csv_path}")
    with csv_path.open("r", encoding=encoding, newline="") as f:
        return _parse_lines(_split_lines(f.read()), record_parser, source=str(csv_path))


def _split_lines(text: str) -> list[str]:
    # Records end at "\n" only; other line-break characters stay inside the record.
    return [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]


def _parse_lines(lines: list[str], record_parser: RecordParser[R], *, source: str) -> CsvLoadResult:
    result = CsvLoadResult()
    # Line 1 is the header.
    for line_number, line in enumerate(lines[1:], start=2):
        if not line.strip():
            continue
        try:
            result.append(record_parser(line))
        except Exception as exc:  # noqa: BLE001
            skipped = ParseSkipped(line_number=line_number, text=line, reason=f"{type(exc).__name__}: {exc}")
            result.skipped.append(skipped)
            LOGGER.warning("ignored entry %r at %s:%d (%s)", line, source, line_number, skipped.reason)
    return result


def extent(data: Iterable[R], accessor: Callable[[R], V]) -> tuple[V, V]:
    """Minimum and maximum of `accessor` over `data`."""
    it = iter(data)
    try:
        first = accessor(next(it))
    except StopIteration:
        raise EmptyDatasetError("cannot compute the extent of an empty dataset") from None
    vmin = vmax = first
    for record in it:
        value = accessor(record)
        if value < vmin:
            vmin = value
        if value > vmax:
            vmax = value
    return (vmin, vmax)
