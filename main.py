from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
import sys
from typing import Any, TextIO

from pointdash_core.core import FrameScheduler, InputEvent
from pointdash_plot import GraphConfig, GraphView, Point, load_config


LOGGER = logging.getLogger("pointdash")

DRAIN_LIMIT_S = 5.0


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="pointdash")
    parser.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    sub = parser.add_subparsers(dest="command", required=True)

    replay = sub.add_parser("replay", help="Replay recorded pointer events against a headless graph view.")
    replay.add_argument("points_json", type=Path)
    replay.add_argument("events_jsonl", type=Path)
    replay.add_argument("--config", type=Path, default=None, help="TOML file with a [graph] table.")
    replay.add_argument("--width", type=int, default=700)
    replay.add_argument("--height", type=int, default=500)
    replay.add_argument("--frame-interval", type=float, default=0.016)

    describe = sub.add_parser("describe", help="Print domains, scale modes and ticks for a point set.")
    describe.add_argument("points_json", type=Path)
    describe.add_argument("--config", type=Path, default=None)
    describe.add_argument("--width", type=int, default=700)
    describe.add_argument("--height", type=int, default=500)

    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")
    config = load_config(args.config) if args.config is not None else GraphConfig()

    if args.command == "replay":
        if args.frame_interval <= 0:
            raise ValueError("--frame-interval must be > 0")
        points, highlighted = _load_points(args.points_json)
        records = _load_records(args.events_jsonl)
        run_replay(
            points,
            records,
            config=config,
            width=args.width,
            height=args.height,
            frame_interval=args.frame_interval,
            highlighted_id=highlighted,
            out=sys.stdout,
        )
        return

    if args.command == "describe":
        points, highlighted = _load_points(args.points_json)
        view = GraphView(width=args.width, height=args.height, config=config)
        view.set_props(points=points, highlighted_id=highlighted)
        print(json.dumps(describe_view(view), indent=2, sort_keys=True, default=str))
        view.close()
        return

    raise RuntimeError(f"unsupported command: {args.command}")


def run_replay(
    points: list[Any],
    records: list[dict[str, Any]],
    *,
    config: GraphConfig,
    width: int,
    height: int,
    frame_interval: float,
    highlighted_id: Any = None,
    out: TextIO,
) -> GraphView:
    """Feed recorded events to a view, echoing point edits back like a controlled owner."""

    clock = {"now": 0.0}
    scheduler = FrameScheduler(clock=lambda: clock["now"])

    def emit(kind: str, **payload: Any) -> None:
        out.write(json.dumps({"t": round(clock["now"], 6), "type": kind, **payload}, sort_keys=True, default=str))
        out.write("\n")

    def on_points_changed(new_points: list[Point]) -> None:
        emit("points_changed", points=[p.to_dict() for p in new_points])
        view.set_props(points=new_points)

    view = GraphView(
        width=width,
        height=height,
        config=config,
        scheduler=scheduler,
        on_points_changed=on_points_changed,
        on_hover=lambda point_id: emit("hover", id=point_id),
        on_select=lambda point: emit("select", point=point.to_dict()),
    )
    view.set_props(points=points, highlighted_id=highlighted_id)

    last_frame = 0.0
    scheduler.run_frame(last_frame)
    for record in records:
        ts = float(record.get("timestamp", clock["now"]))
        while last_frame + frame_interval <= ts:
            last_frame += frame_interval
            clock["now"] = last_frame
            scheduler.run_frame(last_frame)
        clock["now"] = max(clock["now"], ts)
        if "set_props" in record:
            view.set_props(**record["set_props"])
        else:
            view.handle_event(InputEvent(**record))

    deadline = clock["now"] + DRAIN_LIMIT_S
    while scheduler.pending_count() and last_frame < deadline:
        last_frame = max(last_frame + frame_interval, clock["now"])
        clock["now"] = last_frame
        scheduler.run_frame(last_frame)

    t = view.transform
    emit("final", transform={"k": t.k, "tx": t.tx, "ty": t.ty}, points=len(view.points))
    view.close()
    return view


def describe_view(view: GraphView) -> dict[str, Any]:
    scene = view.render()
    (xd, yd), (xm, ym) = view.domains, view.scale_modes
    return {
        "points": len(view.points),
        "inner_size": list(view.inner_size),
        "x": {"domain": list(xd.as_tuple()), "mode": xm, "ticks": [t.label for t in scene.x_ticks]},
        "y": {"domain": list(yd.as_tuple()), "mode": ym, "ticks": [t.label for t in scene.y_ticks]},
    }


def _load_points(path: Path) -> tuple[list[Any], Any]:
    if not path.exists():
        raise FileNotFoundError(f"points file not found: {path}")
    raw = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(raw, dict):
        return list(raw.get("points", [])), raw.get("highlighted_id")
    if isinstance(raw, list):
        return raw, None
    raise ValueError("points file must hold a list or an object with `points`")


def _load_records(path: Path) -> list[dict[str, Any]]:
    if not path.exists():
        raise FileNotFoundError(f"events file not found: {path}")
    records: list[dict[str, Any]] = []
    with path.open("r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            record = json.loads(line)
            if not isinstance(record, dict):
                raise ValueError(f"{path}:{lineno}: each line must be a JSON object")
            records.append(record)
    LOGGER.debug("loaded %d replay records from %s", len(records), path)
    return records


if __name__ == "__main__":
    main()
