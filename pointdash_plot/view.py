from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Optional

import numpy as np

from pointdash_core.core import FrameScheduler, InputEvent
from pointdash_plot.autopan import AutoPanController
from pointdash_plot.config import GraphConfig
from pointdash_plot.ids import IdFactory, build_id_factory
from pointdash_plot.interaction import (
    AddIntent,
    HoverIntent,
    Intent,
    InteractionController,
    MoveIntent,
    SelectIntent,
)
from pointdash_plot.points import Point, PointId, append_point, coerce_points, find_point, replace_point
from pointdash_plot.raster import DirtyState, LayerCache
from pointdash_plot.render import RenderScene, RenderSync, hit_test, rasterize
from pointdash_plot.scales import Domain, Scale, ScaleMode, build_scale, compute_domain, resolve_scale_mode
from pointdash_plot.style import DEFAULT_STYLE, PlotStyle
from pointdash_plot.transform import IDENTITY, EffectiveScale, ZoomLimits, ZoomTransform, constrain


LOGGER = logging.getLogger(__name__)

_UNSET: Any = object()


class GraphView:
    """Controlled graph view: props in, point edits and hover/selection out.

    The view never adopts its own edits. `on_points_changed` hands the owner a
    whole new list and the owner feeds it back through `set_props`.
    """

    def __init__(
        self,
        *,
        width: int = 700,
        height: int = 500,
        config: GraphConfig | None = None,
        style: PlotStyle = DEFAULT_STYLE,
        scheduler: FrameScheduler | None = None,
        id_factory: IdFactory | None = None,
        on_points_changed: Optional[Callable[[list[Point]], None]] = None,
        on_hover: Optional[Callable[[Optional[PointId]], None]] = None,
        on_select: Optional[Callable[[Point], None]] = None,
    ) -> None:
        self._config = config or GraphConfig()
        self._style = style
        self._scheduler = scheduler or FrameScheduler()
        self._width = max(1, int(width))
        self._height = max(1, int(height))
        self.on_points_changed = on_points_changed
        self.on_hover = on_hover
        self.on_select = on_select

        self._points: tuple[Point, ...] = ()
        self._highlighted_id: PointId | None = None
        self._transform: ZoomTransform = IDENTITY
        self._x_domain = compute_domain(())
        self._y_domain = compute_domain(())
        self._x_mode: ScaleMode = "linear"
        self._y_mode: ScaleMode = "linear"

        self._render_sync = RenderSync(self._config, style)
        self._layer_cache = LayerCache()
        self._dirty = DirtyState()
        self._redraw_handle: int | None = None
        self._last_scene: RenderScene | None = None
        self.redraw_count = 0
        self._closed = False

        self._interaction = InteractionController(
            self,
            scheduler=self._scheduler,
            sink=self._dispatch_intent,
            id_factory=id_factory or build_id_factory(self._config.id_strategy),
            config=self._config,
        )
        self._autopan = AutoPanController(
            self,
            self._scheduler,
            padding_px=self._config.autopan_padding_px,
            duration_s=self._config.autopan_duration_s,
        )
        self._refresh_domains()
        self._mark_dirty("init")

    @property
    def config(self) -> GraphConfig:
        return self._config

    @property
    def scheduler(self) -> FrameScheduler:
        return self._scheduler

    @property
    def interaction(self) -> InteractionController:
        return self._interaction

    @property
    def autopan(self) -> AutoPanController:
        return self._autopan

    @property
    def points(self) -> tuple[Point, ...]:
        return self._points

    @property
    def highlighted_id(self) -> PointId | None:
        return self._highlighted_id

    @property
    def size(self) -> tuple[int, int]:
        return (self._width, self._height)

    @property
    def inner_size(self) -> tuple[float, float]:
        return self._config.margins.inner_size(self._width, self._height)

    @property
    def transform(self) -> ZoomTransform:
        return self._transform

    @property
    def domains(self) -> tuple[Domain, Domain]:
        return (self._x_domain, self._y_domain)

    @property
    def scale_modes(self) -> tuple[ScaleMode, ScaleMode]:
        return (self._x_mode, self._y_mode)

    @property
    def last_scene(self) -> RenderScene | None:
        return self._last_scene

    @property
    def closed(self) -> bool:
        return self._closed

    def set_props(
        self,
        *,
        points: Iterable[Any] | None = _UNSET,
        highlighted_id: PointId | None = _UNSET,
        viewport_size: tuple[int, int] | None = None,
        scale_mode: str | None = None,
        zoom_extent: tuple[float, float] | None = None,
        domain_padding_percent: float | None = None,
    ) -> None:
        if self._closed:
            return
        overrides: dict[str, Any] = {}
        if scale_mode is not None:
            overrides["scale_mode"] = scale_mode
        if zoom_extent is not None:
            overrides["zoom_extent"] = (float(zoom_extent[0]), float(zoom_extent[1]))
        if domain_padding_percent is not None:
            overrides["domain_padding_ratio"] = float(domain_padding_percent) / 100.0
        if overrides:
            self._apply_config(self._config.replace(**overrides))

        if points is not _UNSET:
            self._points = coerce_points(points)
            self._refresh_domains()
            self._mark_dirty("points")

        if viewport_size is not None:
            self.resize(*viewport_size)

        if highlighted_id is not _UNSET and highlighted_id != self._highlighted_id:
            self._highlighted_id = highlighted_id
            self._mark_dirty("highlight")
            self._autopan.focus(highlighted_id)

    def handle_event(self, event: InputEvent) -> None:
        """Feed one container-pixel event; callbacks fire synchronously."""

        if self._closed:
            return
        ix, iy = self._config.margins.to_inner(event.x, event.y)
        preview = self._interaction.drag_preview
        self._interaction.handle(event.with_position(ix, iy))
        if self._interaction.drag_preview != preview:
            self._mark_dirty("drag")

    def resize(self, width: int, height: int) -> None:
        if self._closed:
            return
        width = max(1, int(width))
        height = max(1, int(height))
        if (width, height) == (self._width, self._height):
            return
        old_w, old_h = self.inner_size
        sx, sy = self.effective_scales()
        anchor = (float(sx.invert(old_w * 0.5)), float(sy.invert(old_h * 0.5)))
        self._width, self._height = width, height

        bx, by = self.base_scales()
        limits = self.zoom_limits()
        k = self._transform.k
        cx, cy = limits.center
        recentered = ZoomTransform(
            k=k,
            tx=cx - k * float(bx.apply(anchor[0])),
            ty=cy - k * float(by.apply(anchor[1])),
        )
        self._transform = constrain(recentered, limits)
        self._layer_cache.invalidate()
        LOGGER.debug("resized to %dx%d, re-centred on %r: %r", width, height, anchor, self._transform)
        self._mark_dirty("resize")

    def set_transform(self, transform: ZoomTransform) -> None:
        if self._closed:
            return
        self._autopan.cancel()
        self.apply_transform(constrain(transform, self.zoom_limits()), source="api")

    def reset_zoom(self) -> None:
        self.set_transform(IDENTITY)

    def base_scales(self) -> tuple[Scale, Scale]:
        w, h = self.inner_size
        return (
            build_scale(self._x_domain, (0.0, w), self._x_mode),
            build_scale(self._y_domain, (h, 0.0), self._y_mode),
        )

    def effective_scales(self) -> tuple[EffectiveScale, EffectiveScale]:
        bx, by = self.base_scales()
        return self._transform.rescale(bx, "x"), self._transform.rescale(by, "y")

    def zoom_limits(self) -> ZoomLimits:
        w, h = self.inner_size
        return ZoomLimits(width=w, height=h, zoom_extent=self._config.zoom_extent)

    def data_to_pixel(self, x: float, y: float) -> tuple[float, float]:
        sx, sy = self.effective_scales()
        return float(sx.apply(x)), float(sy.apply(y))

    def pixel_to_data(self, px: float, py: float) -> tuple[float, float]:
        return self._interaction.invert_pixel(px, py)

    def find_point(self, point_id: PointId | None) -> Point | None:
        return find_point(self._points, point_id)

    def hit_test(self, px: float, py: float) -> PointId | None:
        sx, sy = self.effective_scales()
        return hit_test(
            self._points,
            sx,
            sy,
            px,
            py,
            hit_radius=self._config.hit_radius_px,
            highlighted_id=self._highlighted_id if self.find_point(self._highlighted_id) is not None else None,
        )

    def apply_transform(self, transform: ZoomTransform, *, source: str) -> None:
        if transform.almost_equal(self._transform):
            return
        self._transform = transform
        LOGGER.debug("transform (%s) -> %r", source, transform)
        self._mark_dirty("transform")

    def cancel_auto_pan(self) -> None:
        self._autopan.cancel()

    def render(self) -> RenderScene:
        sx, sy = self.effective_scales()
        scene = self._render_sync.render(
            self._points,
            sx,
            sy,
            highlighted_id=self._highlighted_id,
            hovered_id=self._interaction.hovered_id,
            drag=self._interaction.drag_preview,
        )
        self._last_scene = scene
        return scene

    def to_rgba(self) -> np.ndarray:
        return rasterize(
            self.render(),
            self._width,
            self._height,
            self._config.margins,
            style=self._style,
            cache=self._layer_cache,
        )

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._scheduler.cancel_frame(self._redraw_handle)
        self._redraw_handle = None
        self._interaction.close()
        self._autopan.cancel()
        LOGGER.debug("graph view closed")

    def _apply_config(self, config: GraphConfig) -> None:
        if config == self._config:
            return
        self._config = config
        self._render_sync.config = config
        self._interaction.set_config(config)
        self._autopan.padding_px = config.autopan_padding_px
        self._autopan.duration_s = config.autopan_duration_s
        self._transform = constrain(self._transform, self.zoom_limits())
        self._refresh_domains()
        self._layer_cache.invalidate()
        self._mark_dirty("config")

    def _refresh_domains(self) -> None:
        cfg = self._config
        self._x_domain = compute_domain(
            (p.x for p in self._points),
            padding_ratio=cfg.domain_padding_ratio,
            min_padding=cfg.domain_min_padding,
        )
        self._y_domain = compute_domain(
            (p.y for p in self._points),
            padding_ratio=cfg.domain_padding_ratio,
            min_padding=cfg.domain_min_padding,
        )
        self._x_mode = resolve_scale_mode(self._x_domain, cfg.scale_mode, cfg.log_threshold_x)
        self._y_mode = resolve_scale_mode(self._y_domain, cfg.scale_mode, cfg.log_threshold_y)

    def _dispatch_intent(self, intent: Intent) -> None:
        if isinstance(intent, AddIntent):
            self._emit_points(append_point(self._points, intent.point))
        elif isinstance(intent, MoveIntent):
            self._emit_points(replace_point(self._points, intent.point_id, intent.x, intent.y))
        elif isinstance(intent, SelectIntent):
            point = self.find_point(intent.point_id)
            if point is not None and self.on_select is not None:
                self.on_select(point)
        elif isinstance(intent, HoverIntent):
            self._mark_dirty("hover")
            if self.on_hover is not None:
                self.on_hover(intent.point_id)

    def _emit_points(self, points: list[Point]) -> None:
        if self.on_points_changed is not None:
            self.on_points_changed(points)

    def _mark_dirty(self, reason: str) -> None:
        self._dirty.mark(reason)
        if self._closed or self._redraw_handle is not None:
            return
        self._redraw_handle = self._scheduler.request_frame(self._on_redraw_frame)

    def _on_redraw_frame(self, now: float) -> None:
        self._redraw_handle = None
        if not self._dirty.dirty:
            return
        reasons = self._dirty.consume()
        self.redraw_count += 1
        self.render()
        LOGGER.debug("redraw at %.4f for %s", now, ", ".join(sorted(reasons)))
