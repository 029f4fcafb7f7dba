from pointdash_plot.autopan import AutoPanController
from pointdash_plot.config import GraphConfig, Margins, config_from_mapping, load_config
from pointdash_plot.errors import PlotDataError
from pointdash_plot.ids import SequentialIdFactory, TimestampIdFactory, build_id_factory
from pointdash_plot.interaction import (
    AddIntent,
    DragPreview,
    HoverIntent,
    InteractionController,
    MoveIntent,
    SelectIntent,
)
from pointdash_plot.live import LiveUpdate, LiveUpdateThrottle
from pointdash_plot.points import Point, coerce_points
from pointdash_plot.render import Marker, MarkerLayer, RenderScene, RenderSync, Tooltip, rasterize
from pointdash_plot.scales import Domain, Scale, build_scale, compute_domain, format_si, resolve_scale_mode
from pointdash_plot.style import DEFAULT_STYLE, PlotStyle
from pointdash_plot.transform import ZoomLimits, ZoomTransform, apply_gesture, constrain
from pointdash_plot.view import GraphView

__all__ = [
    "AddIntent",
    "AutoPanController",
    "DEFAULT_STYLE",
    "Domain",
    "DragPreview",
    "GraphConfig",
    "GraphView",
    "HoverIntent",
    "InteractionController",
    "LiveUpdate",
    "LiveUpdateThrottle",
    "Margins",
    "Marker",
    "MarkerLayer",
    "MoveIntent",
    "PlotDataError",
    "PlotStyle",
    "Point",
    "RenderScene",
    "RenderSync",
    "Scale",
    "SelectIntent",
    "SequentialIdFactory",
    "TimestampIdFactory",
    "Tooltip",
    "ZoomLimits",
    "ZoomTransform",
    "apply_gesture",
    "build_id_factory",
    "build_scale",
    "coerce_points",
    "compute_domain",
    "config_from_mapping",
    "constrain",
    "format_si",
    "load_config",
    "rasterize",
    "resolve_scale_mode",
]
