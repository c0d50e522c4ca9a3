"""Chart series builder — one point shape for every granularity.

The renderer draws `line_value`, shades `area_value` and plots `fee_value`
without knowing which granularity produced them.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime

from src.shell.contract import Granularity, Trade
from src.statistics.analytics import SESSION_NAMES, session_name
from src.utils.dates import DAY, day_start, format_day_key, normalize_range, parse_date_input


@dataclass(frozen=True)
class ChartPoint:
    label: str
    line_value: float
    area_value: float
    fee_value: float
    secondary_line_value: float | None = None


@dataclass(frozen=True)
class ChartSeries:
    granularity: Granularity
    points: list[ChartPoint]
    x_labels: list[str]
    headline_label: str
    headline_value: float
    headline_bucket: str | None = None
    line_legend: str = ""
    area_legend: str = ""
    fee_legend: str = ""
    second_line_legend: str | None = None


@dataclass(frozen=True)
class FeeTrendPoint:
    label: str
    value: float


def day_label(moment: datetime | date) -> str:
    return moment.strftime("%b %d")


def x_labels(points: list[ChartPoint]) -> list[str]:
    if not points:
        return ["-", "-", "-"]
    return [points[0].label, points[(len(points) - 1) // 2].label, points[-1].label]


def _best_point(points: list[ChartPoint]) -> ChartPoint:
    best = points[0]
    for point in points[1:]:
        if point.line_value > best.line_value:
            best = point
    return best


def build_daily_series(
    trades: list[Trade],
    start_date: str | date | datetime | None,
    end_date: str | date | datetime | None,
    starting_equity: float,
) -> ChartSeries:
    """One point per UTC day from start to end inclusive, trade-less days included."""
    pnl_by_day: dict[str, float] = defaultdict(float)
    fee_by_day: dict[str, float] = defaultdict(float)
    for trade in trades:
        key = format_day_key(trade.exit_at)
        pnl_by_day[key] += trade.pnl
        fee_by_day[key] += trade.fee

    start, end = normalize_range(parse_date_input(start_date), parse_date_input(end_date))
    equity = starting_equity
    peak = starting_equity
    points = []

    if start is not None and end is not None:
        day = day_start(start)
        last = day_start(end)
        while day <= last:
            key = format_day_key(day)
            equity += pnl_by_day.get(key, 0.0)
            peak = max(peak, equity)
            points.append(ChartPoint(
                label=day_label(day),
                line_value=equity - starting_equity,
                area_value=peak - equity,
                fee_value=fee_by_day.get(key, 0.0),
                secondary_line_value=equity,
            ))
            day += DAY

    return ChartSeries(
        granularity=Granularity.DAILY,
        points=points,
        x_labels=x_labels(points),
        headline_label="ATH",
        headline_value=peak,
        line_legend="Cumulative PnL",
        second_line_legend="Account Equity",
        area_legend="Drawdown Overlay",
        fee_legend="Daily Fees",
    )


def build_session_series(trades: list[Trade]) -> ChartSeries:
    pnl = {name: 0.0 for name in SESSION_NAMES}
    fees = {name: 0.0 for name in SESSION_NAMES}
    for trade in trades:
        name = session_name(trade.exit_at.hour)
        pnl[name] += trade.pnl
        fees[name] += trade.fee

    points = [ChartPoint(name, pnl[name], fees[name], fees[name]) for name in SESSION_NAMES]
    best = _best_point(points)
    return ChartSeries(
        granularity=Granularity.SESSION,
        points=points,
        x_labels=x_labels(points),
        headline_label="Best Session",
        headline_value=best.line_value,
        headline_bucket=best.label,
        line_legend="Session Net PnL",
        area_legend="Session Fees",
        fee_legend="Session Fees",
    )


def build_hour_of_day_series(trades: list[Trade]) -> ChartSeries:
    pnl = [0.0] * 24
    fees = [0.0] * 24
    for trade in trades:
        pnl[trade.exit_at.hour] += trade.pnl
        fees[trade.exit_at.hour] += trade.fee

    points = [ChartPoint(f"{hour:02d}:00", pnl[hour], fees[hour], fees[hour]) for hour in range(24)]
    best = _best_point(points)
    return ChartSeries(
        granularity=Granularity.HOUR_OF_DAY,
        points=points,
        x_labels=x_labels(points),
        headline_label="Best Hour",
        headline_value=best.line_value,
        headline_bucket=best.label,
        line_legend="Hourly Net PnL",
        area_legend="Hourly Fees",
        fee_legend="Hourly Fees",
    )


def build_chart_series(
    trades: list[Trade],
    start_date: str | date | datetime | None,
    end_date: str | date | datetime | None,
    starting_equity: float,
    granularity: Granularity = Granularity.DAILY,
) -> ChartSeries:
    if granularity == Granularity.SESSION:
        return build_session_series(trades)
    if granularity == Granularity.HOUR_OF_DAY:
        return build_hour_of_day_series(trades)
    return build_daily_series(trades, start_date, end_date, starting_equity)


def build_fee_trend(trades: list[Trade]) -> list[FeeTrendPoint]:
    """Running fee total across the days that had trades, oldest first."""
    fee_by_day: dict[str, float] = defaultdict(float)
    for trade in trades:
        fee_by_day[format_day_key(trade.exit_at)] += trade.fee

    running = 0.0
    points = []
    for key in sorted(fee_by_day):
        running += fee_by_day[key]
        points.append(FeeTrendPoint(day_label(parse_date_input(key)), running))
    return points
