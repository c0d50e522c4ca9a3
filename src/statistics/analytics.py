"""Time-bucketed analytics — sessions, weekdays, heatmap, streaks, order types.

All buckets are keyed on the trade's exit time in UTC.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from src.shell.contract import OrderType, Side, Trade, TradeStatus

SESSION_NAMES = ("Asia", "London", "New York")
WEEKDAY_SHORT = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
HEATMAP_SLOTS = ("00-03", "04-07", "08-11", "12-15", "16-19", "20-23")
RECENT_OUTCOMES = 8
IMPACT_LIMIT = 24


class RunKind(Enum):
    WIN = "WIN"
    LOSS = "LOSS"


@dataclass(frozen=True)
class SessionBucket:
    name: str
    trades: int = 0
    pnl: float = 0.0


@dataclass(frozen=True)
class WeekdayBucket:
    label: str
    trades: int = 0
    pnl: float = 0.0


@dataclass(frozen=True)
class Heatmap:
    values: list[list[int]]
    max_value: int
    day_labels: tuple[str, ...] = WEEKDAY_SHORT
    slot_labels: tuple[str, ...] = HEATMAP_SLOTS


@dataclass(frozen=True)
class StreakRun:
    kind: RunKind
    length: int
    net_pnl: float
    started_at: datetime
    ended_at: datetime


@dataclass(frozen=True)
class Outcome:
    kind: RunKind
    pnl: float
    trade_id: str


@dataclass(frozen=True)
class Streaks:
    runs: list[StreakRun] = field(default_factory=list)
    current: StreakRun | None = None
    longest_win: StreakRun | None = None
    longest_loss: StreakRun | None = None
    recent: list[Outcome] = field(default_factory=list)

    @property
    def current_win(self) -> int:
        return self.current.length if self.current and self.current.kind == RunKind.WIN else 0

    @property
    def current_loss(self) -> int:
        return self.current.length if self.current and self.current.kind == RunKind.LOSS else 0

    @property
    def max_win(self) -> int:
        return self.longest_win.length if self.longest_win else 0

    @property
    def max_loss(self) -> int:
        return self.longest_loss.length if self.longest_loss else 0

    @property
    def current_net_pnl(self) -> float:
        return self.current.net_pnl if self.current else 0.0


@dataclass(frozen=True)
class OrderTypePerformance:
    order_type: OrderType
    trades: int = 0
    win_rate: float = 0.0
    average_pnl: float = 0.0
    total_pnl: float = 0.0
    average_fee: float = 0.0


@dataclass(frozen=True)
class ImpactTile:
    trade_id: str
    symbol: str
    side: Side
    status: TradeStatus
    pnl: float
    fee: float
    ratio: float            # |pnl| relative to the largest |pnl| shown


@dataclass(frozen=True)
class Analytics:
    sessions: list[SessionBucket]
    weekdays: list[WeekdayBucket]
    best_day: WeekdayBucket
    streaks: Streaks
    heatmap: Heatmap
    order_types: list[OrderTypePerformance]
    impact: list[ImpactTile] = field(default_factory=list)


def session_name(hour: int) -> str:
    if hour < 8:
        return "Asia"
    if hour < 16:
        return "London"
    return "New York"


def weekday_index(moment: datetime) -> int:
    """Day of week with Sunday = 0."""
    return (moment.weekday() + 1) % 7


def heat_cell_opacity(value: float, max_value: float) -> float:
    if max_value <= 0:
        return 0.08
    return max(0.1, min(0.9, 0.15 + (value / max_value) * 0.75))


def build_sessions(trades: list[Trade]) -> list[SessionBucket]:
    counts = {name: 0 for name in SESSION_NAMES}
    pnl = {name: 0.0 for name in SESSION_NAMES}
    for trade in trades:
        name = session_name(trade.exit_at.hour)
        counts[name] += 1
        pnl[name] += trade.pnl
    return [SessionBucket(name, counts[name], pnl[name]) for name in SESSION_NAMES]


def build_weekdays(trades: list[Trade]) -> list[WeekdayBucket]:
    counts = [0] * 7
    pnl = [0.0] * 7
    for trade in trades:
        day = weekday_index(trade.exit_at)
        counts[day] += 1
        pnl[day] += trade.pnl
    return [WeekdayBucket(label, counts[i], pnl[i]) for i, label in enumerate(WEEKDAY_SHORT)]


def best_weekday(weekdays: list[WeekdayBucket]) -> WeekdayBucket:
    best = weekdays[0]
    for bucket in weekdays[1:]:
        if bucket.pnl > best.pnl:
            best = bucket
    return best


def build_heatmap(trades: list[Trade]) -> Heatmap:
    values = [[0] * len(HEATMAP_SLOTS) for _ in WEEKDAY_SHORT]
    for trade in trades:
        values[weekday_index(trade.exit_at)][trade.exit_at.hour // 4] += 1
    # Floor of 1 keeps opacity math free of a zero divisor
    max_value = max(1, max(max(row) for row in values))
    return Heatmap(values=values, max_value=max_value)


def _is_better_run(candidate: StreakRun, best: StreakRun | None) -> bool:
    """Longer run wins; equal lengths go to the larger signed net PnL."""
    if best is None or candidate.length > best.length:
        return True
    return candidate.length == best.length and candidate.net_pnl > best.net_pnl


def build_streaks(trades: list[Trade]) -> Streaks:
    """Win/loss runs over CLOSED trades in exit order.

    A trade with pnl >= 0 counts as a win. Ties on run length go to the run
    with the larger net PnL.
    """
    closed = sorted(
        (t for t in trades if t.status == TradeStatus.CLOSED),
        key=lambda t: t.exit_at,
    )
    if not closed:
        return Streaks()

    runs: list[StreakRun] = []
    for trade in closed:
        kind = RunKind.WIN if trade.pnl >= 0 else RunKind.LOSS
        if runs and runs[-1].kind == kind:
            last = runs[-1]
            runs[-1] = StreakRun(kind, last.length + 1, last.net_pnl + trade.pnl, last.started_at, trade.exit_at)
        else:
            runs.append(StreakRun(kind, 1, trade.pnl, trade.exit_at, trade.exit_at))

    longest: dict[RunKind, StreakRun | None] = {RunKind.WIN: None, RunKind.LOSS: None}
    for run in runs:
        if _is_better_run(run, longest[run.kind]):
            longest[run.kind] = run

    recent = [
        Outcome(RunKind.WIN if t.pnl >= 0 else RunKind.LOSS, t.pnl, t.id)
        for t in closed[-RECENT_OUTCOMES:]
    ]

    return Streaks(
        runs=runs,
        current=runs[-1],
        longest_win=longest[RunKind.WIN],
        longest_loss=longest[RunKind.LOSS],
        recent=recent,
    )


def build_order_type_performance(trades: list[Trade]) -> list[OrderTypePerformance]:
    result = []
    for order_type in (OrderType.MARKET, OrderType.LIMIT):
        subset = [t for t in trades if t.order_type == order_type]
        if not subset:
            result.append(OrderTypePerformance(order_type))
            continue
        total_pnl = sum(t.pnl for t in subset)
        wins = sum(1 for t in subset if t.pnl > 0)
        result.append(OrderTypePerformance(
            order_type=order_type,
            trades=len(subset),
            win_rate=wins / len(subset) * 100,
            average_pnl=total_pnl / len(subset),
            total_pnl=total_pnl,
            average_fee=sum(t.fee for t in subset) / len(subset),
        ))
    return result


def build_impact_ranking(
    trades: list[Trade],
    active_only: bool = False,
    limit: int = IMPACT_LIMIT,
) -> list[ImpactTile]:
    """Largest trades by |pnl|, biggest first.

    `active_only` keeps OPEN trades only. Ratios are taken against the
    largest magnitude shown, floored at 1.
    """
    source = [t for t in trades if t.status == TradeStatus.OPEN] if active_only else trades
    ranked = sorted(source, key=lambda t: abs(t.pnl), reverse=True)[:max(limit, 0)]
    max_magnitude = max([abs(t.pnl) for t in ranked] + [1.0])
    return [
        ImpactTile(
            trade_id=t.id,
            symbol=t.symbol,
            side=t.side,
            status=t.status,
            pnl=t.pnl,
            fee=t.fee,
            ratio=abs(t.pnl) / max_magnitude,
        )
        for t in ranked
    ]


def build_analytics(trades: list[Trade], impact_active_only: bool = False) -> Analytics:
    weekdays = build_weekdays(trades)
    return Analytics(
        sessions=build_sessions(trades),
        weekdays=weekdays,
        best_day=best_weekday(weekdays),
        streaks=build_streaks(trades),
        heatmap=build_heatmap(trades),
        order_types=build_order_type_performance(trades),
        impact=build_impact_ranking(trades, active_only=impact_active_only),
    )
