from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
import tomllib
from typing import Any, Mapping

from pointdash_plot.scales import (
    DEFAULT_LOG_THRESHOLD,
    DEFAULT_MIN_PADDING,
    DEFAULT_PADDING_RATIO,
)
from pointdash_plot.transform import DEFAULT_ZOOM_EXTENT


_SCALE_MODES = {"auto", "linear", "symlog"}
_TICK_FORMATS = {"si", "plain"}
_ID_STRATEGIES = {"timestamp", "sequential"}


@dataclass(frozen=True)
class Margins:
    top: int = 20
    right: int = 30
    bottom: int = 40
    left: int = 50

    def __post_init__(self) -> None:
        for name in ("top", "right", "bottom", "left"):
            if getattr(self, name) < 0:
                raise ValueError(f"margin `{name}` must be >= 0")

    def inner_size(self, width: float, height: float) -> tuple[float, float]:
        inner_w = max(1.0, float(width) - self.left - self.right)
        inner_h = max(1.0, float(height) - self.top - self.bottom)
        return inner_w, inner_h

    def to_inner(self, x: float, y: float) -> tuple[float, float]:
        return float(x) - self.left, float(y) - self.top


@dataclass(frozen=True)
class GraphConfig:
    """Tunable knobs of one graph view; defaults match the dashboard."""

    margins: Margins = field(default_factory=Margins)
    zoom_extent: tuple[float, float] = DEFAULT_ZOOM_EXTENT
    scale_mode: str = "auto"
    log_threshold_x: float = DEFAULT_LOG_THRESHOLD
    log_threshold_y: float = DEFAULT_LOG_THRESHOLD
    domain_padding_ratio: float = DEFAULT_PADDING_RATIO
    domain_min_padding: float = DEFAULT_MIN_PADDING
    drag_threshold_sq: float = 9.0
    double_tap_interval_s: float = 0.3
    double_tap_distance_sq: float = 64.0
    live_update_interval_s: float = 0.016
    autopan_padding_px: float = 20.0
    autopan_duration_s: float = 0.3
    hit_radius_px: float = 8.0
    tick_count: int = 6
    tick_format: str = "si"
    id_strategy: str = "timestamp"
    x_label: str = "X Axis"
    y_label: str = "Y Axis"

    def __post_init__(self) -> None:
        kmin, kmax = self.zoom_extent
        if kmin <= 0 or kmax <= 0 or kmin > kmax:
            raise ValueError("zoom_extent must be two positive numbers with min <= max")
        if self.scale_mode not in _SCALE_MODES:
            raise ValueError(f"scale_mode must be one of {sorted(_SCALE_MODES)}")
        if self.log_threshold_x <= 0 or self.log_threshold_y <= 0:
            raise ValueError("log thresholds must be > 0")
        if self.domain_padding_ratio < 0:
            raise ValueError("domain_padding_ratio must be >= 0")
        if self.domain_min_padding < 0:
            raise ValueError("domain_min_padding must be >= 0")
        if self.drag_threshold_sq < 0:
            raise ValueError("drag_threshold_sq must be >= 0")
        if self.double_tap_interval_s <= 0:
            raise ValueError("double_tap_interval_s must be > 0")
        if self.double_tap_distance_sq < 0:
            raise ValueError("double_tap_distance_sq must be >= 0")
        if self.live_update_interval_s < 0:
            raise ValueError("live_update_interval_s must be >= 0")
        if self.autopan_padding_px < 0:
            raise ValueError("autopan_padding_px must be >= 0")
        if self.autopan_duration_s < 0:
            raise ValueError("autopan_duration_s must be >= 0")
        if self.hit_radius_px <= 0:
            raise ValueError("hit_radius_px must be > 0")
        if self.tick_count <= 0:
            raise ValueError("tick_count must be > 0")
        if self.tick_format not in _TICK_FORMATS:
            raise ValueError(f"tick_format must be one of {sorted(_TICK_FORMATS)}")
        if self.id_strategy not in _ID_STRATEGIES:
            raise ValueError(f"id_strategy must be one of {sorted(_ID_STRATEGIES)}")

    def replace(self, **overrides: Any) -> "GraphConfig":
        return replace(self, **overrides)


def config_from_mapping(raw: Mapping[str, Any]) -> GraphConfig:
    known = {f.name for f in fields(GraphConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ValueError(f"unknown graph config keys: {', '.join(unknown)}")
    kwargs: dict[str, Any] = dict(raw)
    if "margins" in kwargs:
        margins = kwargs["margins"]
        if not isinstance(margins, Mapping):
            raise ValueError("graph.margins must be a table")
        kwargs["margins"] = Margins(**{k: int(v) for k, v in margins.items()})
    if "zoom_extent" in kwargs:
        extent = kwargs["zoom_extent"]
        if not isinstance(extent, (list, tuple)) or len(extent) != 2:
            raise ValueError("graph.zoom_extent must be a two-element array")
        kwargs["zoom_extent"] = (float(extent[0]), float(extent[1]))
    return GraphConfig(**kwargs)


def load_config(path: str | Path) -> GraphConfig:
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"graph config not found: {config_path}")
    with config_path.open("rb") as f:
        raw = tomllib.load(f)
    table = raw.get("graph", {})
    if not isinstance(table, Mapping):
        raise ValueError("`graph` must be a table")
    return config_from_mapping(table)
