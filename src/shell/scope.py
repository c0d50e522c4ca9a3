"""Narrow trade, order and transfer collections by scope.

Pure: inputs are never mutated and a new list is always returned.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable, TypeVar

from src.shell.contract import (
    MarketScope,
    Order,
    OrderStatus,
    Trade,
    TradeStatus,
    Transfer,
    TransferStatus,
)
from src.utils.dates import DAY, day_start, normalize_range, parse_date_input

ALL_SYMBOLS = "ALL"
DEFAULT_PERPETUAL_ASSETS = frozenset({"BTC", "ETH", "SOL"})

Record = TypeVar("Record", Trade, Order, Transfer)


def classify_market_scope(base_asset: str, perpetual_assets: Iterable[str] = DEFAULT_PERPETUAL_ASSETS) -> MarketScope:
    return MarketScope.PERPETUAL if base_asset in set(perpetual_assets) else MarketScope.SPOT


def filter_by_scope(
    collection: Iterable[Record],
    symbol: str | None = ALL_SYMBOLS,
    start_date: str | date | datetime | None = None,
    end_date: str | date | datetime | None = None,
    market_scope: MarketScope = MarketScope.ALL,
    status: TradeStatus | OrderStatus | TransferStatus | None = None,
    perpetual_assets: Iterable[str] = DEFAULT_PERPETUAL_ASSETS,
) -> list[Record]:
    """Keep records matching every supplied predicate.

    The window is inclusive: [start, end + 1 day - 1 ms] on the record's
    timestamp. Malformed date strings are ignored. Transfers carry no symbol
    and market scope applies to trades only.
    """
    start, end = normalize_range(parse_date_input(start_date), parse_date_input(end_date))
    end_limit = end + DAY - timedelta(milliseconds=1) if end is not None else None
    perpetual = frozenset(perpetual_assets)

    result = []
    for record in collection:
        if symbol and symbol != ALL_SYMBOLS and not isinstance(record, Transfer):
            if record.symbol != symbol:
                continue

        moment = record.timestamp
        if start is not None and moment < start:
            continue
        if end_limit is not None and moment > end_limit:
            continue

        if market_scope != MarketScope.ALL and isinstance(record, Trade):
            if classify_market_scope(record.base_asset, perpetual) != market_scope:
                continue

        if status is not None and record.status != status:
            continue

        result.append(record)
    return result


def window_for_days(trades: list[Trade], days: int | None) -> tuple[datetime | None, datetime | None]:
    """Trailing preset window (1D/7D/30D) of whole days ending on the latest exit day.

    Returns (None, None) for the ALL preset or an empty collection.
    """
    if not days or not trades:
        return None, None
    end = day_start(max(t.exit_at for t in trades))
    return end - timedelta(days=days - 1), end
