from __future__ import annotations

import argparse
import json
import logging
import os
from pathlib import Path

from PIL import Image

from trendline_core.events import InputEvent
from trendline_plot.adapters import read_table
from trendline_plot.chart import StaticContainer
from trendline_plot.errors import TrendlineError
from trendline_plot.filters import FilterChange
from trendline_plot.style import ChartLayout
from trendline_ui.dashboard import TrendDashboard


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="trendline")
    sub = parser.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render", help="Render the trend chart for a CSV table to a PNG file.")
    render.add_argument("table", type=Path)
    render.add_argument("--out", type=Path, required=True)
    render.add_argument("--width", type=int, default=960, help="Container width read by the chart once.")
    render.add_argument("--height", type=int, default=ChartLayout().height)
    render.add_argument("--nutrient-type", default=None, help="Default: first nutrient type in the table.")
    render.add_argument(
        "--region",
        action="append",
        default=None,
        help="Selected region; repeat up to twice. Default: first region in the table.",
    )
    render.add_argument(
        "--pointer",
        action="append",
        default=[],
        metavar="X,Y",
        help="Replay pointer moves (pixels) before rendering; repeatable.",
    )

    inspect = sub.add_parser("inspect", help="Print the table's year and category domains as JSON.")
    inspect.add_argument("table", type=Path)
    args = parser.parse_args(argv)

    debug = os.getenv("TRENDLINE_DEBUG", "").strip().lower() in {"1", "true", "yes", "on"}
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "inspect":
        try:
            domains = read_table(args.table).domains
        except TrendlineError as exc:
            raise SystemExit(f"trendline inspect: {exc}") from exc
        print(
            json.dumps(
                {
                    "years": list(domains.years),
                    "nutrient_types": list(domains.nutrient_types),
                    "regions": list(domains.regions),
                },
                indent=2,
            )
        )
        return 0

    try:
        dashboard = TrendDashboard.from_csv(
            args.table,
            StaticContainer(client_width=args.width),
            layout=ChartLayout(height=args.height),
        )
        if args.nutrient_type is not None:
            dashboard.handle_filter_change(FilterChange(key="nutrientType", value=args.nutrient_type))
        if args.region:
            dashboard.handle_filter_change(FilterChange(key="regions", value=tuple(args.region)))
    except TrendlineError as exc:
        raise SystemExit(f"trendline render: {exc}") from exc
    for raw in args.pointer:
        x, y = _parse_point(raw)
        dashboard.chart.handle_pointer_event(InputEvent(event_type="pointer_move", x=x, y=y))

    args.out.parent.mkdir(parents=True, exist_ok=True)
    revision = dashboard.chart.present()
    Image.fromarray(dashboard.chart.surface.to_numpy()).save(args.out)
    logging.getLogger("trendline").info(
        "wrote %s (revision=%d, %d series, highlighted=%s)",
        args.out,
        revision,
        len(dashboard.visible),
        dashboard.chart.highlighted_nutrient,
    )
    return 0


def _parse_point(raw: str) -> tuple[float, float]:
    parts = raw.split(",")
    if len(parts) != 2:
        raise SystemExit(f"invalid --pointer value {raw!r}; expected X,Y")
    try:
        return (float(parts[0]), float(parts[1]))
    except ValueError as exc:
        raise SystemExit(f"invalid --pointer value {raw!r}; expected X,Y") from exc


if __name__ == "__main__":
    raise SystemExit(main())
