from __future__ import annotations

from dataclasses import dataclass


class ChartError(Exception):
    """Base class for every error raised by d3kit."""


class MissingAccessorError(ChartError):
    """Binning or primitive generation was attempted without a required accessor."""


class UnsupportedError(ChartError, NotImplementedError):
    """The requested operation or shape variant is not implemented."""


class EmptyDatasetError(ChartError):
    """An operation needed at least one record but got none."""


@dataclass(frozen=True)
class ParseSkipped:
    line_number: int
    text: str
    reason: str
