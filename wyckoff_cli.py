#!/usr/bin/env python3
"""
Wyckoff Assistant CLI

This is a PURE SHELL - it only:
- Parses arguments
- Calls generator / session functions
- Prints results

NO business logic lives here.

  python wyckoff_cli.py generate accumulation --bars 80 --seed 42
  python wyckoff_cli.py sample TSLA --timeframe 1W --seed 7
  python wyckoff_cli.py serve --port 8765 --no-browser
"""

import argparse
import json
import sys

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from wyckoff_assistant.config import get_config
from wyckoff_assistant.synthetic import InvalidArgumentError, generate_series
from wyckoff_assistant.synthetic.phases import ARCHETYPE_SPECS
from wyckoff_assistant.utils.logger import get_logger, setup_logger
from wyckoff_assistant.viz.renderers import MarkerRenderer
from wyckoff_assistant.viz.session import ChartSession

console = Console()


def parse_cli_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Wyckoff Trading Assistant - synthetic charts and sample analysis",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python wyckoff_cli.py generate spring --seed 1
  python wyckoff_cli.py generate overview --bars 400 --json
  python wyckoff_cli.py sample AAPL --confidence 80
  python wyckoff_cli.py serve
        """
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    gen_parser = subparsers.add_parser("generate", help="Generate an annotated archetype series")
    gen_parser.add_argument(
        "archetype",
        help=f"One of {[a.value for a in ARCHETYPE_SPECS]} (unknown falls back to overview)",
    )
    gen_parser.add_argument("--bars", type=int, default=None, help="Bar count (default: archetype default)")
    gen_parser.add_argument("--seed", type=int, default=None, help="Random seed")
    gen_parser.add_argument("--json", dest="json_output", action="store_true", help="Print series as JSON")

    sample_parser = subparsers.add_parser("sample", help="Generate and analyze sample data for a ticker")
    sample_parser.add_argument("symbol", help="Ticker, e.g. AAPL")
    sample_parser.add_argument("--timeframe", default="1D", choices=["1D", "1W", "1M"])
    sample_parser.add_argument("--seed", type=int, default=None, help="Random seed")
    sample_parser.add_argument("--confidence", type=int, default=70, help="Minimum confidence (0-100)")

    serve_parser = subparsers.add_parser("serve", help="Run the chart API server")
    serve_parser.add_argument("--host", default=None, help="Host (default: VIZ_HOST)")
    serve_parser.add_argument("--port", type=int, default=None, help="Port (default: VIZ_PORT)")
    serve_parser.add_argument("--no-browser", action="store_true", help="Don't open a browser")
    serve_parser.add_argument("--reload", action="store_true", help="Auto-reload for development")

    return parser.parse_args(argv)


def handle_generate(args) -> int:
    seed = args.seed if args.seed is not None else get_config().generator.default_seed
    series = generate_series(args.archetype, bar_count=args.bars, seed=seed)
    get_logger().series(series.archetype.value, series.bar_count, series.seed, data_hash=series.data_hash)

    if args.json_output:
        print(json.dumps(series.to_dict(), indent=2))
        return 0

    spec = ARCHETYPE_SPECS[series.archetype]
    first, last = series.bars[0], series.bars[-1]
    console.print(Panel(
        f"[bold cyan]{spec.title}[/]\n"
        f"Bars: {series.bar_count} | Seed: {series.seed} | Hash: {series.data_hash}\n"
        f"Open {first.open:.2f} -> Close {last.close:.2f} | "
        f"Visible: {series.visible_range.from_index}-{series.visible_range.to_index}",
        border_style="cyan",
    ))

    table = Table(title="Annotations")
    table.add_column("Bar", justify="right")
    table.add_column("Label")
    table.add_column("Position")
    table.add_column("Close", justify="right")
    for a in series.annotations:
        table.add_row(str(a.bar_index), f"[{MarkerRenderer.get_color(a.color)}]{a.label}[/]", a.position.value,
                      f"{series.bars[a.bar_index].close:.2f}")
    console.print(table)
    return 0


def handle_sample(args) -> int:
    seed = args.seed if args.seed is not None else get_config().generator.default_seed
    with ChartSession() as session:
        dataset = session.load_sample(args.symbol, timeframe=args.timeframe, seed=seed)
        session.set_confidence_threshold(args.confidence)
        patterns = session.visible_patterns()

        console.print(Panel(
            f"[bold cyan]{dataset.symbol} {dataset.timeframe}[/]\n"
            f"Bars: {len(dataset.bars)} | Seed: {dataset.seed} | Hash: {dataset.data_hash}",
            border_style="cyan",
        ))
        table = Table(title="Detected Patterns")
        table.add_column("Pattern")
        table.add_column("Bars")
        table.add_column("Confidence", justify="right")
        table.add_column("Summary")
        for p in patterns:
            table.add_row(p.type.value.title(), f"{p.start_index}-{p.end_index}",
                          f"{p.confidence}%", p.explanation.summary)
        console.print(table)
    return 0


def handle_serve(args) -> int:
    from wyckoff_assistant.viz.server import run_server

    run_server(
        host=args.host,
        port=args.port,
        open_browser=False if args.no_browser else None,
        reload=args.reload,
    )
    return 0


def main(argv=None):
    """Main entry point."""
    args = parse_cli_args(argv)

    config = get_config()
    setup_logger(config.log.log_dir, config.log.level)

    handlers = {
        "generate": handle_generate,
        "sample": handle_sample,
        "serve": handle_serve,
    }
    handler = handlers.get(args.command)
    if handler is None:
        console.print("[yellow]Usage: wyckoff_cli.py {generate|sample|serve} --help[/]")
        sys.exit(1)

    try:
        sys.exit(handler(args))
    except InvalidArgumentError as e:
        console.print(f"\n[bold red]FAIL {e}[/]")
        sys.exit(2)


if __name__ == "__main__":
    main()
