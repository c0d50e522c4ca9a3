"""Bundle trades, orders and transfers from one generation run."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

import structlog

from src.generator.orders import build_orders
from src.generator.trades import build_trades
from src.generator.transfers import build_transfers
from src.shell.config import Config
from src.shell.contract import Order, Trade, Transfer

log = structlog.get_logger()


@dataclass(frozen=True)
class Dataset:
    trades: list[Trade]
    orders: list[Order]
    transfers: list[Transfer]
    starting_equity: float
    available_symbols: list[str] = field(default_factory=list)
    default_date_start: date | None = None
    default_date_end: date | None = None


def synthesize(
    year: int,
    month_index: int,
    total_trades: int,
    seed: int,
    config: Config | None = None,
) -> Dataset:
    """Generate trades, orders and transfers. Identical arguments give identical data."""
    config = config or Config()

    trades = build_trades(year, month_index, total_trades, seed, config.status)
    orders = build_orders(trades, seed, config.orders)
    transfers = build_transfers(trades, seed, config.transfers)

    start = end = None
    if trades:
        start = min(t.exit_at for t in trades).date()
        end = max(t.exit_at for t in trades).date()

    dataset = Dataset(
        trades=trades,
        orders=orders,
        transfers=transfers,
        starting_equity=config.generator.starting_equity,
        available_symbols=sorted({t.symbol for t in trades}),
        default_date_start=start,
        default_date_end=end,
    )
    log.info(
        "synth.dataset_ready",
        year=year,
        month_index=month_index,
        seed=seed,
        trades=len(trades),
        orders=len(orders),
        transfers=len(transfers),
    )
    return dataset
