from __future__ import annotations


class PlotDataError(ValueError):
    """Raised when a point snapshot violates the engine's input contract."""
