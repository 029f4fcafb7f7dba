from __future__ import annotations

from dataclasses import dataclass, field, replace
import logging
import math
from typing import Any, Hashable, Iterable, Mapping, Sequence

from pointdash_plot.errors import PlotDataError


LOGGER = logging.getLogger(__name__)

PointId = Hashable


@dataclass(frozen=True)
class Point:
    id: PointId
    x: float
    y: float
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False)

    def moved(self, x: float, y: float) -> "Point":
        return replace(self, x=float(x), y=float(y))

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = dict(self.extra)
        out.update({"id": self.id, "x": self.x, "y": self.y})
        return out


def sanitize_coordinate(value: Any, fallback: float = 0.0) -> float:
    try:
        out = float(value)
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(out):
        return fallback
    return out


def coerce_point(raw: Any) -> Point:
    if isinstance(raw, Point):
        if math.isfinite(raw.x) and math.isfinite(raw.y):
            return raw
        return replace(raw, x=sanitize_coordinate(raw.x), y=sanitize_coordinate(raw.y))
    if isinstance(raw, Mapping):
        if raw.get("id") is None:
            raise PlotDataError(f"point is missing an id: {dict(raw)!r}")
        extra = {k: v for k, v in raw.items() if k not in {"id", "x", "y"}}
        return Point(
            id=raw["id"],
            x=sanitize_coordinate(raw.get("x")),
            y=sanitize_coordinate(raw.get("y")),
            extra=extra,
        )
    if isinstance(raw, Sequence) and not isinstance(raw, (str, bytes, bytearray)) and len(raw) == 3:
        pid, x, y = raw
        if pid is None:
            raise PlotDataError("point is missing an id")
        return Point(id=pid, x=sanitize_coordinate(x), y=sanitize_coordinate(y))
    raise PlotDataError(f"unsupported point input type: {type(raw)!r}")


def coerce_points(raw_points: Iterable[Any] | None) -> tuple[Point, ...]:
    if raw_points is None:
        return ()
    out: list[Point] = []
    seen: set[PointId] = set()
    for raw in raw_points:
        try:
            point = coerce_point(raw)
        except PlotDataError as exc:
            LOGGER.warning("skipping point: %s", exc)
            continue
        if point.id in seen:
            LOGGER.warning("dropping duplicate point id %r", point.id)
            continue
        seen.add(point.id)
        out.append(point)
    return tuple(out)


def find_point(points: Sequence[Point], point_id: PointId | None) -> Point | None:
    if point_id is None:
        return None
    for point in points:
        if point.id == point_id:
            return point
    return None


def replace_point(points: Sequence[Point], point_id: PointId, x: float, y: float) -> list[Point]:
    return [p.moved(x, y) if p.id == point_id else p for p in points]


def append_point(points: Sequence[Point], point: Point) -> list[Point]:
    return [*points, point]


def sort_by_x(points: Sequence[Point]) -> list[Point]:
    # sorted() is stable, so equal x keeps snapshot order.
    return sorted(points, key=lambda p: p.x)
