"""Risk ratios and scope comparisons.

Sharpe/Sortino use day-over-day returns of the daily equity series.
Period deltas compare the current window against the equal-length window
right before it, computed from the unfiltered trade set.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable

from src.shell.contract import MarketScope, Trade
from src.shell.scope import ALL_SYMBOLS, DEFAULT_PERPETUAL_ASSETS, filter_by_scope
from src.statistics.chart import ChartSeries
from src.statistics.summary import SummaryStats, summarize
from src.utils.dates import DAY, day_start, normalize_range, parse_date_input


@dataclass(frozen=True)
class RiskRatios:
    sharpe_ratio: float = 0.0
    sortino_ratio: float = 0.0


@dataclass(frozen=True)
class PeriodDelta:
    previous_start: datetime
    previous_end: datetime
    current: SummaryStats
    previous: SummaryStats
    pnl_delta: float
    win_rate_delta: float
    volume_delta: float
    fees_delta: float
    trade_count_delta: int


def compute_risk_ratios(daily: ChartSeries) -> RiskRatios:
    """Annualised (sqrt 365) Sharpe and Sortino from the daily equity points."""
    values = [p.secondary_line_value for p in daily.points if p.secondary_line_value is not None]
    returns = [
        (values[i] - values[i - 1]) / values[i - 1]
        for i in range(1, len(values))
        if values[i - 1] > 0
    ]
    if len(returns) < 2:
        return RiskRatios()

    mean_r = sum(returns) / len(returns)
    variance = sum((r - mean_r) ** 2 for r in returns) / (len(returns) - 1)
    std_r = math.sqrt(variance) if variance > 0 else 0
    sharpe = (mean_r / std_r * math.sqrt(365)) if std_r > 0 else 0.0

    downside = [r for r in returns if r < 0]
    sortino = 0.0
    if len(downside) >= 2:
        down_var = sum(r ** 2 for r in downside) / (len(downside) - 1)
        down_std = math.sqrt(down_var) if down_var > 0 else 0
        sortino = (mean_r / down_std * math.sqrt(365)) if down_std > 0 else 0.0

    return RiskRatios(sharpe_ratio=sharpe, sortino_ratio=sortino)


def summarize_by_scope(
    trades: list[Trade],
    starting_equity: float,
    perpetual_assets: Iterable[str] = DEFAULT_PERPETUAL_ASSETS,
) -> dict[MarketScope, SummaryStats]:
    assets = frozenset(perpetual_assets)
    return {
        scope: summarize(filter_by_scope(trades, market_scope=scope, perpetual_assets=assets), starting_equity)
        for scope in (MarketScope.PERPETUAL, MarketScope.SPOT)
    }


def previous_period(start: datetime, end: datetime) -> tuple[datetime, datetime]:
    """Equal-length day window ending the day before `start`."""
    start, end = day_start(start), day_start(end)
    length = end - start
    previous_end = start - DAY
    return previous_end - length, previous_end


def compute_period_delta(
    all_trades: list[Trade],
    start_date: str | date | datetime | None,
    end_date: str | date | datetime | None,
    starting_equity: float,
    symbol: str = ALL_SYMBOLS,
    market_scope: MarketScope = MarketScope.ALL,
    perpetual_assets: Iterable[str] = DEFAULT_PERPETUAL_ASSETS,
) -> PeriodDelta | None:
    """Current window minus the previous window. None when the window is unknown."""
    start, end = normalize_range(parse_date_input(start_date), parse_date_input(end_date))
    if start is None or end is None:
        return None

    prev_start, prev_end = previous_period(start, end)
    scope_args = {"symbol": symbol, "market_scope": market_scope, "perpetual_assets": frozenset(perpetual_assets)}
    current = summarize(
        filter_by_scope(all_trades, start_date=day_start(start), end_date=day_start(end), **scope_args),
        starting_equity,
    )
    previous = summarize(
        filter_by_scope(all_trades, start_date=prev_start, end_date=prev_end, **scope_args),
        starting_equity,
    )

    return PeriodDelta(
        previous_start=prev_start,
        previous_end=prev_end,
        current=current,
        previous=previous,
        pnl_delta=current.total_pnl - previous.total_pnl,
        win_rate_delta=current.win_rate - previous.win_rate,
        volume_delta=current.total_volume - previous.total_volume,
        fees_delta=current.total_fees - previous.total_fees,
        trade_count_delta=current.total_trades - previous.total_trades,
    )
