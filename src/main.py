"""Trade Dashboard Analytics — command-line entry point.

Generates the session dataset, applies the requested scope, and prints the
dashboard snapshot as JSON on stdout.

Startup: load config -> setup logging -> synthesize -> filter -> snapshot -> export

Usage:
    python -m src.main
    python -m src.main --granularity session --symbol "BTC / USDT"
    python -m src.main --range 7 --scope perpetual --csv exports/
    python -m src.main --set-note trade-2023-10-5 "Scaled out early"
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime

import structlog

from src.generator.dataset import Dataset, synthesize
from src.shell.config import Config, load_config
from src.shell.contract import Granularity, MarketScope, Order, TradeStatus
from src.shell.scope import ALL_SYMBOLS, classify_market_scope, filter_by_scope, window_for_days
from src.shell.snapshot import build_dashboard_snapshot
from src.storage.export import write_csv
from src.storage.notes import JsonFileNoteStore, NoteStore
from src.trading.sizing import size_position
from src.utils.logging import bind_run_context, setup_logging

log = structlog.get_logger()

GRANULARITIES = {
    "daily": Granularity.DAILY,
    "session": Granularity.SESSION,
    "hod": Granularity.HOUR_OF_DAY,
}

SCOPES = {
    "all": MarketScope.ALL,
    "perpetual": MarketScope.PERPETUAL,
    "spot": MarketScope.SPOT,
}


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="trade-dashboard",
        description="Synthetic trade analytics snapshot",
    )
    parser.add_argument("--seed", type=int, help="Generator seed (default from config)")
    parser.add_argument("--year", type=int, help="Year of the synthetic month")
    parser.add_argument("--month", type=int, help="0-based month index")
    parser.add_argument("--trades", type=int, help="Number of trades to synthesize")
    parser.add_argument("--granularity", choices=sorted(GRANULARITIES), default="daily")
    parser.add_argument("--symbol", default=ALL_SYMBOLS, help='Pair name, e.g. "BTC / USDT"')
    parser.add_argument("--scope", choices=sorted(SCOPES), default="all")
    parser.add_argument("--status", choices=["open", "closed"], help="Limit exported rows by status")
    parser.add_argument("--start", help="Window start, YYYY-MM-DD")
    parser.add_argument("--end", help="Window end, YYYY-MM-DD")
    parser.add_argument("--range", type=int, choices=[1, 7, 30], help="Trailing window in days")
    parser.add_argument("--csv", help="Write the scoped trades to this CSV file or directory")
    parser.add_argument("--notes", help="Notes file (default from config)")
    parser.add_argument("--set-note", nargs=2, metavar=("TRADE_ID", "TEXT"),
                        help="Store a note for a trade (blank text removes it)")
    parser.add_argument("--size", nargs=3, type=float, metavar=("BALANCE", "ENTRY", "STOP"),
                        help="Print a position sizing result instead of the snapshot")
    parser.add_argument("--risk", type=float, help="Risk per trade in percent for --size (default from config)")
    parser.add_argument("--impact-active", action="store_true", help="Rank only OPEN trades in the impact view")
    return parser


def build_dataset(args: argparse.Namespace, config: Config) -> Dataset:
    gen = config.generator
    return synthesize(
        year=args.year if args.year is not None else gen.year,
        month_index=args.month if args.month is not None else gen.month_index,
        total_trades=args.trades if args.trades is not None else gen.total_trades,
        seed=args.seed if args.seed is not None else gen.seed,
        config=config,
    )


def scoped_orders(
    dataset: Dataset,
    symbol: str,
    start: str | datetime | None,
    end: str | datetime | None,
    market_scope: MarketScope,
    perpetual_assets: list[str],
) -> list[Order]:
    """Orders in the window, narrowed to the market scope by their base asset."""
    orders = filter_by_scope(dataset.orders, symbol=symbol, start_date=start, end_date=end)
    if market_scope == MarketScope.ALL:
        return orders
    return [o for o in orders if classify_market_scope(o.base_asset, perpetual_assets) == market_scope]


def run(args: argparse.Namespace, config: Config) -> dict:
    """Execute one CLI invocation and return the JSON-ready result."""
    if args.size:
        balance, entry, stop = args.size
        risk_pct = args.risk if args.risk is not None else config.sizing.default_risk_percent
        result = size_position(balance, risk_pct, entry, stop, config.sizing.default_leverage)
        return {"sizing": vars(result)}

    notes: NoteStore = JsonFileNoteStore(args.notes or config.notes_path)
    if args.set_note:
        trade_id, text = args.set_note
        notes.set(trade_id, text)
        log.info("notes.updated", trade_id=trade_id, removed=not text.strip())

    dataset = build_dataset(args, config)
    perpetual = config.scope.perpetual_assets

    start, end = args.start, args.end
    if args.range:
        start, end = window_for_days(dataset.trades, args.range)

    market_scope = SCOPES[args.scope]
    scoped = filter_by_scope(
        dataset.trades,
        symbol=args.symbol,
        start_date=start,
        end_date=end,
        market_scope=market_scope,
        perpetual_assets=perpetual,
    )

    snapshot = build_dashboard_snapshot(
        scoped,
        dataset.starting_equity,
        start_date=start,
        end_date=end,
        granularity=GRANULARITIES[args.granularity],
        baseline_trades=dataset.trades,
        symbol=args.symbol,
        market_scope=market_scope,
        impact_active_only=args.impact_active,
        perpetual_assets=perpetual,
    )

    if args.csv:
        rows = scoped
        if args.status:
            rows = filter_by_scope(scoped, status=TradeStatus(args.status.upper()))
        write_csv(rows, args.csv, notes.lookup())

    return {
        "available_symbols": dataset.available_symbols,
        "orders": len(scoped_orders(dataset, args.symbol, start, end, market_scope, perpetual)),
        "transfers": len(filter_by_scope(dataset.transfers, start_date=start, end_date=end)),
        "snapshot": snapshot.to_dict(),
    }


def main(argv: list[str] | None = None) -> int:
    args = create_parser().parse_args(argv)
    try:
        config = load_config()
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 2

    setup_logging(config.log_level)
    bind_run_context(
        seed=args.seed if args.seed is not None else config.generator.seed,
        granularity=args.granularity,
        symbol=args.symbol,
    )
    result = run(args, config)
    json.dump(result, sys.stdout, indent=2, default=str)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
