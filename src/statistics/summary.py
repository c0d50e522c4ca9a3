"""Summary aggregator — scalar statistics for a trade collection.

Every figure is either a count, a sum, or a simple ratio of the two,
except drawdown and recovery, which come from a chronological equity walk.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from src.shell.contract import OrderType, Side, Trade
from src.utils.dates import DAY
from src.utils.rounding import round_half_up


@dataclass(frozen=True)
class DrawdownStats:
    max_drawdown_amount: float = 0.0
    max_drawdown_percent: float = 0.0
    recovery_days: int = 0


@dataclass(frozen=True)
class SummaryStats:
    total_trades: int = 0
    total_volume: float = 0.0
    total_fees: float = 0.0
    total_pnl: float = 0.0
    total_duration_minutes: int = 0
    net_pnl_percent: float = 0.0
    win_rate: float = 0.0
    long_short_ratio: float = 0.0
    average_duration_minutes: float = 0.0
    max_win: float = 0.0
    max_loss: float = 0.0
    average_win: float = 0.0
    average_loss: float = 0.0
    maker_fees: float = 0.0
    taker_fees: float = 0.0
    market_ratio: float = 0.0
    limit_ratio: float = 0.0
    profit_factor: float = 0.0
    expectancy: float = 0.0
    max_drawdown_amount: float = 0.0
    max_drawdown_percent: float = 0.0
    recovery_days: int = 0


def _elapsed_days(start: datetime, end: datetime) -> int:
    return max(1, round_half_up((end - start) / DAY))


def compute_drawdown(trades: list[Trade], starting_equity: float) -> DrawdownStats:
    """Walk trades by exit time tracking (peak, peak time, drawdown start).

    A drawdown period opens at the peak preceding the first dip and closes
    when equity gets back to (or above) that peak. Its recovery length is
    the whole days between the two, at least 1. A period still open after
    the last trade is measured up to that trade. The longest period wins.
    """
    ordered = sorted(trades, key=lambda t: t.exit_at)
    if not ordered:
        return DrawdownStats()

    equity = starting_equity
    peak = starting_equity
    peak_at = ordered[0].exit_at
    drawdown_start: datetime | None = None
    max_amount = 0.0
    max_percent = 0.0
    max_recovery = 0

    for trade in ordered:
        equity += trade.pnl

        if equity >= peak:
            peak = equity
            peak_at = trade.exit_at
            if drawdown_start is not None:
                max_recovery = max(max_recovery, _elapsed_days(drawdown_start, trade.exit_at))
                drawdown_start = None
            continue

        drawdown = peak - equity
        percent = drawdown / peak * 100 if peak > 0 else 0.0

        if drawdown_start is None:
            drawdown_start = peak_at

        if drawdown > max_amount:
            max_amount = drawdown
            max_percent = percent

    if drawdown_start is not None:
        max_recovery = max(max_recovery, _elapsed_days(drawdown_start, ordered[-1].exit_at))

    return DrawdownStats(max_amount, max_percent, max_recovery)


def summarize(trades: list[Trade], starting_equity: float) -> SummaryStats:
    """Reduce a trade collection to its summary statistics.

    Empty input gives an all-zero SummaryStats instead of raising.
    """
    total = len(trades)
    if total == 0:
        return SummaryStats()

    total_volume = sum(t.notional for t in trades)
    total_fees = sum(t.fee for t in trades)
    total_pnl = sum(t.pnl for t in trades)
    total_duration = sum(t.duration_minutes for t in trades)

    winners = [t.pnl for t in trades if t.pnl > 0]
    losers = [t.pnl for t in trades if t.pnl < 0]
    longs = sum(1 for t in trades if t.side == Side.LONG)
    shorts = total - longs

    gross_profit = sum(winners)
    gross_loss = abs(sum(losers))

    maker_fees = sum(t.fee for t in trades if t.order_type == OrderType.LIMIT)
    market_count = sum(1 for t in trades if t.order_type == OrderType.MARKET)

    drawdown = compute_drawdown(trades, starting_equity)

    return SummaryStats(
        total_trades=total,
        total_volume=total_volume,
        total_fees=total_fees,
        total_pnl=total_pnl,
        total_duration_minutes=total_duration,
        net_pnl_percent=total_pnl / starting_equity * 100 if starting_equity else 0.0,
        win_rate=len(winners) / total * 100,
        long_short_ratio=longs / max(shorts, 1),
        average_duration_minutes=total_duration / total,
        max_win=max(t.pnl for t in trades),
        max_loss=min(t.pnl for t in trades),
        average_win=gross_profit / len(winners) if winners else 0.0,
        average_loss=gross_loss / len(losers) if losers else 0.0,
        maker_fees=maker_fees,
        taker_fees=total_fees - maker_fees,
        market_ratio=market_count / total * 100,
        limit_ratio=(total - market_count) / total * 100,
        profit_factor=gross_profit / gross_loss if gross_loss > 0 else 0.0,
        expectancy=total_pnl / total,
        max_drawdown_amount=drawdown.max_drawdown_amount,
        max_drawdown_percent=drawdown.max_drawdown_percent,
        recovery_days=drawdown.recovery_days,
    )
