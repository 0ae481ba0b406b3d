"""
CLI entry point for the import cost calculator.

Builds a calculator session from command-line products and/or a product file,
applies the exchange and ICMS rates, and prints the calculation trace (or the
result as JSON).
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from importcost.exporter.breakdown_exporter import write_breakdown
from importcost.importer.product_importer import load_products
from importcost.pricing.fx_provider import get_fx_rate
from importcost.services.calculator_service import CalculatorSession
from importcost.utils.config_loader import load_config, load_env
from importcost.utils.logging_setup import setup_logging
from importcost.validation.status_codes import get_status_description
from importcost.webapp.exceptions import AppException

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_BLOCKED = 1
EXIT_INPUT_ERROR = 2


def parse_product_arg(value: str) -> dict:
    """
    Parse a --product value of the form "PRICE;QUANTITY;WEIGHT".

    Quantity and weight are optional ("¥ 10,00" or "¥ 10,00;3").
    """
    parts = [part.strip() for part in value.split(";")]
    if len(parts) > 3:
        raise argparse.ArgumentTypeError(f"Expected PRICE;QUANTITY;WEIGHT, got: {value!r}")

    row = {"price": parts[0]}
    if len(parts) > 1 and parts[1]:
        row["quantity"] = parts[1]
    if len(parts) > 2 and parts[2]:
        row["weight"] = parts[2]
    return row


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Returns:
        argparse.Namespace: Parsed command line arguments.
    """
    parser = argparse.ArgumentParser(
        prog="importcost",
        description="Import cost calculator (freight, import tax, ICMS)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m importcost.main --examples
    python -m importcost.main -p "¥ 177,00;2;200" -p "¥ 94,40;1;150" --fx-rate 0.847
    python -m importcost.main --input products.xlsx --icms 17 --output data/output/breakdown.xlsx
        """,
    )

    parser.add_argument(
        "--product", "-p",
        action="append",
        type=parse_product_arg,
        default=[],
        metavar="PRICE;QTY;WEIGHT",
        help="Product row; repeat for several products",
    )

    parser.add_argument(
        "--input", "-i",
        type=Path,
        help="CSV/Excel file with price, quantity and weight columns",
    )

    parser.add_argument(
        "--examples",
        action="store_true",
        help="Start from the two reference products and exchange rate 0.847",
    )

    parser.add_argument(
        "--fx-rate", "-r",
        help="Exchange rate, source to target currency (default: from config)",
    )

    parser.add_argument(
        "--live-fx",
        action="store_true",
        help="Fetch the exchange rate from Google Finance",
    )

    parser.add_argument(
        "--icms",
        help="ICMS rate in percent, 0-100 (default: from config)",
    )

    parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Write the breakdown to this .xlsx or .csv file (bare names go to paths.output_dir)",
    )

    parser.add_argument(
        "--json",
        dest="output_json",
        action="store_true",
        help="Print the session state as JSON instead of the trace",
    )

    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=Path("config/config.yaml"),
        help="Path to configuration file",
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    return parser.parse_args(argv)


def run_cli(args: argparse.Namespace) -> int:
    """
    Run the CLI workflow.

    Args:
        args: Parsed command line arguments.

    Returns:
        int: Exit code (0 success, 1 recalculation blocked, 2 input error).
    """
    config = load_config(args.config)
    session = CalculatorSession(config)

    # ICMS first, so an out-of-range rate blocks every pass below
    if args.icms is not None:
        session.set_icms_rate(args.icms)

    if args.examples:
        session.load_examples()

    if args.input:
        try:
            session.add_products(load_products(args.input))
        except FileNotFoundError as e:
            logger.error(f"Input file not found: {e}")
            print(f"Error: input file not found: {args.input}", file=sys.stderr)
            return EXIT_INPUT_ERROR
        except AppException as e:
            logger.error(f"Invalid input file: {e.message}")
            print(f"Error: {e.message}", file=sys.stderr)
            return EXIT_INPUT_ERROR

    if args.product:
        session.add_products(args.product)

    if args.live_fx:
        config.fx.mode = "google"
        rate, source = get_fx_rate(config)
        logger.info(f"Exchange rate: {rate} [source: {source}]")
        session.set_exchange_rate(rate)

    if args.fx_rate is not None:
        session.set_exchange_rate(args.fx_rate)

    outcome = session.recompute()

    if outcome.blocked:
        description = get_status_description(outcome.validation.icms_status)
        print(f"Error: {description} Calculation skipped.", file=sys.stderr)
        return EXIT_BLOCKED

    if args.output_json:
        print(json.dumps(session.state(), indent=2, ensure_ascii=False))
    elif outcome.trace:
        print(outcome.trace)

    if outcome.advisory and not args.output_json:
        print(f"\nWARNING: {outcome.advisory}", file=sys.stderr)

    if args.output and outcome.result is not None:
        # Bare filenames go to the configured output directory
        output_dir = args.output.parent if args.output.parent != Path(".") else Path(config.paths.output_dir)
        output_path = write_breakdown(
            outcome.result,
            output_dir,
            filename=args.output.name,
            presenter=session.presenter,
        )
        print(f"\nBreakdown written: {output_path}", file=sys.stderr)

    return EXIT_OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        int: Exit code.
    """
    load_env()
    args = parse_args(argv)

    setup_logging(level="DEBUG" if args.verbose else "WARNING", stream=sys.stderr)

    try:
        return run_cli(args)
    except KeyboardInterrupt:
        print("\n\nOperation cancelled by user.", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
