#!/usr/bin/env python3
"""
Exception hierarchy for the rain polygon engine.

Every caller-visible failure names the pipeline stage it came from
(catalog, tiles, extraction, ...) so logs and CLI output say where an
extraction stopped.
"""


class RainZoneError(Exception):
    """Base class for all engine errors."""

    default_stage = "extraction"

    def __init__(self, message: str, stage: str | None = None):
        self.stage = stage or self.default_stage
        self.message = message
        super().__init__(f"[{self.stage}] {message}")


class NetworkError(RainZoneError):
    """Catalog or tile transport failure."""

    default_stage = "catalog"


class ParseError(RainZoneError):
    """Malformed catalog JSON or undecodable payload."""

    default_stage = "catalog"


class NoDataError(RainZoneError):
    """The catalog holds no frame matching the requested time policy."""

    default_stage = "frame"


class BudgetExceededError(RainZoneError):
    """Tile budget violation.

    Never raised by the planner, which resolves budget overruns by
    lowering the zoom level.
    """

    default_stage = "plan"


class ExtractionTimeoutError(RainZoneError, TimeoutError):
    """The caller-supplied deadline expired before extraction finished."""

    default_stage = "timeout"
