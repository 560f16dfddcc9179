"""
auction-match — CLI расчёта цен открытия call-аукциона

Usage:
    auction-match orders.csv
    auction-match orders.csv -o results.csv
    auction-match orders.csv -o results.csv --workers 8 --config auction.json
    python -m src.auction.cli orders.csv

Коды выхода: 0 — успех, 1 — источник/приёмник/конфигурация недоступны,
2 — неверные аргументы.
"""

import argparse
import logging
import sys
from typing import List, Optional

from src.auction.config import AuctionConfig, ConfigError, load_auction_config, load_tick_table
from src.auction.errors import AuctionRunError
from src.auction.io import iter_order_rows, iter_order_rows_from_stream, write_results
from src.auction.pipeline import AuctionPipeline
from src.auction.scheduler import EXECUTOR_KINDS

logger = logging.getLogger("auction_match")

EXIT_OK = 0
EXIT_FAILURE = 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="auction-match",
        description="Call-auction opening price per instrument from a CSV batch of orders.",
        epilog="Example: auction-match orders.csv -o results.csv",
    )
    parser.add_argument("input", help="order CSV (instrumentID,direction,price,volume); '-' reads stdin")
    parser.add_argument("-o", "--output", help="result CSV (default: stdout)")
    parser.add_argument("--workers", type=int, help="number of pricing workers (default: CPU count)")
    parser.add_argument("--executor", choices=EXECUTOR_KINDS, help="worker pool kind (default: thread)")
    parser.add_argument("--config", help="JSON run configuration")
    parser.add_argument("--tick-table", help='JSON product tick table, e.g. {"IF": "0.2"}')
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="log level for stderr diagnostics (default: WARNING)",
    )
    return parser


def resolve_config(args: argparse.Namespace) -> AuctionConfig:
    config = load_auction_config(args.config) if args.config else AuctionConfig()
    product_ticks = load_tick_table(args.tick_table) if args.tick_table else None
    if args.workers is not None and args.workers < 1:
        raise ConfigError(f"--workers must be >= 1, got {args.workers}")
    return config.with_overrides(
        workers=args.workers,
        executor=args.executor,
        product_ticks=product_ticks,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = resolve_config(args)
        pipeline = AuctionPipeline(config)

        if args.input == "-":
            rows = iter_order_rows_from_stream(sys.stdin)
        else:
            rows = iter_order_rows(args.input)

        report = pipeline.run(rows)
        write_results(
            report.results,
            output_path=args.output,
            file_line_terminator=config.file_line_terminator,
        )
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except AuctionRunError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
