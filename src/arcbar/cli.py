"""
arcbar CLI entry point.

Renders chart documents to SVG and inspects their computed layout.
"""

from __future__ import annotations

import json
import sys
from typing import Optional

import click

from arcbar import __version__
from arcbar.charts import ChartEngine, ManualScheduler, create_chart
from arcbar.charts.models import Container
from arcbar.config import ChartDocument, ConfigLoadError, Settings, load_chart_file
from arcbar.observability import configure_logging


def _load(path: str) -> ChartDocument:
    try:
        return load_chart_file(path)
    except ConfigLoadError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _build_chart(
    document: ChartDocument,
    settings: Settings,
    container_width: Optional[float],
) -> ChartEngine:
    """Create, attach and render the chart described by ``document``."""
    container = document.container
    if container_width is not None:
        container = Container(container_width, container.height)

    chart = create_chart(
        document.chart_type,
        scheduler=ManualScheduler(),
        resize_debounce_ms=settings.resize_debounce_ms,
    )
    chart.init(container)
    if not chart.on_config_changed(document.config):
        click.echo(
            f"Nothing to render: {document.source or 'document'} has no "
            f"{'data' if document.chart_type.value == 'donut' else 'series'}",
            err=True,
        )
        sys.exit(1)
    return chart


@click.group()
@click.pass_context
def cli(ctx: click.Context):
    """Animated donut and grouped column charts."""
    try:
        settings = Settings.from_env()
    except ConfigLoadError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    configure_logging(level=settings.log_level, format=settings.log_format)
    ctx.obj = settings


@cli.command()
@click.argument("file", type=click.Path(dir_okay=False))
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write SVG to this file")
@click.option("--container-width", "-w", type=float, help="Override the container width")
@click.option("--at-ms", type=float, help="Render the frame this many ms after the render started")
@click.option("--settled", is_flag=True, help="Render the final frame (default)")
@click.pass_obj
def render(
    settings: Settings,
    file: str,
    output: Optional[str],
    container_width: Optional[float],
    at_ms: Optional[float],
    settled: bool,
):
    """Render a chart document to SVG."""
    if settled and at_ms is not None:
        click.echo("Error: --at-ms and --settled are mutually exclusive", err=True)
        sys.exit(1)

    document = _load(file)
    chart = _build_chart(document, settings, container_width)

    if at_ms is None:
        chart.settle()
    else:
        chart.frame(at_ms)

    svg = chart.to_svg()
    chart.dispose()

    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(svg + "\n")
        click.echo(f"Wrote {output}")
    else:
        click.echo(svg)


@cli.command()
@click.argument("file", type=click.Path(dir_okay=False))
@click.option("--container-width", "-w", type=float, help="Override the container width")
@click.option("--json-output", "-j", is_flag=True, help="Output as JSON")
@click.pass_obj
def inspect(settings: Settings, file: str, container_width: Optional[float], json_output: bool):
    """Show the computed layout of a chart document."""
    document = _load(file)
    chart = _build_chart(document, settings, container_width)
    chart.settle()
    summary = chart.describe()
    dimensions = dict(chart.state.dimensions)
    chart.dispose()

    if json_output:
        click.echo(json.dumps({
            "type": document.chart_type.value,
            "dimensions": dimensions,
            "layout": summary,
        }, indent=2))
        return

    click.echo(f"\nChart: {document.chart_type.value} ({document.source})")
    click.echo(f"  Dimensions: {', '.join(f'{k}={v:g}' for k, v in dimensions.items())}")
    click.echo(f"  Mobile mode: {'yes' if summary.get('mobile_mode') else 'no'}")

    if document.chart_type.value == "donut":
        click.echo(f"  Total: {summary['total_value']}")
        click.echo("\n  Slices:")
        for item in summary["slices"]:
            span = (item["end_angle"] - item["start_angle"]) * 180 / 3.141592653589793
            click.echo(f"    - {item['value']:>8g}  {span:7.2f} deg  {item['percentage']}")
    else:
        click.echo(f"  Column area height: {summary['column_area_height']:g}")
        click.echo(f"  Value domain: 0 - {summary['y_scale']['domain'][1]:g}")
        click.echo("\n  Bars:")
        for bar in summary["bars"]:
            striped = " (striped)" if bar["striped"] else ""
            click.echo(
                f"    - {bar['value']:>8g}  x={bar['x']:.1f} y={bar['y']:.1f} "
                f"w={bar['width']:.1f} h={bar['height']:.1f}{striped}"
            )
    click.echo()


@cli.command()
def version():
    """Show the arcbar version."""
    click.echo(f"arcbar {__version__}")


def main() -> int:
    """Main entry point."""
    cli()
    return 0


if __name__ == "__main__":
    sys.exit(main())
