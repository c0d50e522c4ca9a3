"""Dashboard snapshot — everything the view layer renders, derived in one call.

A snapshot is never updated in place. Any change to the scoped trades or the
chart granularity means building a new one.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Iterable

import structlog

from src.shell.contract import Granularity, MarketScope, Trade
from src.shell.formatting import (
    format_compact_usd,
    format_duration,
    format_percent,
    format_period_label,
    format_signed_usd,
    format_usd,
)
from src.shell.scope import ALL_SYMBOLS, DEFAULT_PERPETUAL_ASSETS
from src.statistics.analytics import Analytics, build_analytics
from src.statistics.chart import ChartSeries, FeeTrendPoint, build_chart_series, build_fee_trend
from src.statistics.risk import (
    PeriodDelta,
    RiskRatios,
    compute_period_delta,
    compute_risk_ratios,
    summarize_by_scope,
)
from src.statistics.summary import SummaryStats, summarize
from src.utils.dates import day_start, normalize_range, parse_date_input

log = structlog.get_logger()

# Window used when there is nothing to chart
EMPTY_WINDOW_DAY = datetime(2023, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class RiskMetrics:
    profit_factor: float = 0.0
    expectancy: float = 0.0
    max_drawdown_amount: float = 0.0
    max_drawdown_percent: float = 0.0
    recovery_days: int = 0
    sharpe_ratio: float = 0.0
    sortino_ratio: float = 0.0


@dataclass(frozen=True)
class DashboardSnapshot:
    period_label: str
    start_date: datetime
    end_date: datetime
    chart: ChartSeries
    analytics: Analytics
    summary: SummaryStats
    stats: dict[str, str]
    fee_breakdown: dict[str, float]
    order_type_breakdown: dict[str, float]
    fee_trend: list[FeeTrendPoint]
    risk: RiskMetrics
    headline: str
    period_delta: PeriodDelta | None = None
    scope_summaries: dict[MarketScope, SummaryStats] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return _jsonable(asdict(self))


def _jsonable(value):
    if isinstance(value, dict):
        return {(k.value if isinstance(k, Enum) else k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def display_stats(summary: SummaryStats) -> dict[str, str]:
    return {
        "net_pnl": format_percent(summary.net_pnl_percent, signed=True),
        "win_rate": format_percent(summary.win_rate),
        "volume": format_compact_usd(summary.total_volume),
        "fees": format_usd(summary.total_fees),
        "long_short_ratio": f"{summary.long_short_ratio:.2f}",
        "total_trades": str(summary.total_trades),
        "average_duration": format_duration(summary.average_duration_minutes),
        "max_win": format_compact_usd(summary.max_win),
        "max_loss": f"-{format_compact_usd(abs(summary.max_loss))}",
        "average_win": format_compact_usd(summary.average_win),
        "average_loss": format_compact_usd(summary.average_loss),
    }


def chart_headline(chart: ChartSeries) -> str:
    if chart.headline_bucket is None:
        return format_usd(chart.headline_value)
    return f"{chart.headline_bucket} ({format_signed_usd(chart.headline_value)})"


def resolve_window(
    trades: list[Trade],
    start_date: str | date | datetime | None,
    end_date: str | date | datetime | None,
) -> tuple[datetime, datetime]:
    """Requested window, falling back to the days of the first and last exit."""
    if not trades:
        return EMPTY_WINDOW_DAY, EMPTY_WINDOW_DAY
    start = parse_date_input(start_date) or day_start(min(t.exit_at for t in trades))
    end = parse_date_input(end_date) or day_start(max(t.exit_at for t in trades))
    return normalize_range(start, end)


def build_dashboard_snapshot(
    trades: list[Trade],
    starting_equity: float,
    start_date: str | date | datetime | None = None,
    end_date: str | date | datetime | None = None,
    granularity: Granularity = Granularity.DAILY,
    baseline_trades: list[Trade] | None = None,
    perpetual_assets: Iterable[str] = DEFAULT_PERPETUAL_ASSETS,
    symbol: str = ALL_SYMBOLS,
    market_scope: MarketScope = MarketScope.ALL,
    impact_active_only: bool = False,
) -> DashboardSnapshot:
    """Compose summary, analytics and chart for an already-scoped trade set.

    `baseline_trades` is the unfiltered collection; when given, the snapshot
    also carries the previous-period delta and per-market-scope summaries.
    `symbol` and `market_scope` must be the scope `trades` was filtered with,
    so the previous window is measured over the same slice.
    """
    start, end = resolve_window(trades, start_date, end_date)

    summary = summarize(trades, starting_equity)
    chart = build_chart_series(trades, start, end, starting_equity, granularity)
    daily = chart if granularity == Granularity.DAILY else build_chart_series(
        trades, start, end, starting_equity, Granularity.DAILY,
    )
    ratios = compute_risk_ratios(daily) if trades else RiskRatios()

    period_delta = None
    scope_summaries: dict[MarketScope, SummaryStats] = {}
    if baseline_trades is not None and trades:
        period_delta = compute_period_delta(
            baseline_trades, start, end, starting_equity,
            symbol=symbol, market_scope=market_scope, perpetual_assets=perpetual_assets,
        )
        scope_summaries = summarize_by_scope(trades, starting_equity, perpetual_assets)

    snapshot = DashboardSnapshot(
        period_label=format_period_label(start, end) if trades else "-",
        start_date=start,
        end_date=end,
        chart=chart,
        analytics=build_analytics(trades, impact_active_only=impact_active_only),
        summary=summary,
        stats=display_stats(summary),
        fee_breakdown={"maker": summary.maker_fees, "taker": summary.taker_fees},
        order_type_breakdown={"market": summary.market_ratio, "limit": summary.limit_ratio},
        fee_trend=build_fee_trend(trades),
        risk=RiskMetrics(
            profit_factor=summary.profit_factor,
            expectancy=summary.expectancy,
            max_drawdown_amount=summary.max_drawdown_amount,
            max_drawdown_percent=summary.max_drawdown_percent,
            recovery_days=summary.recovery_days,
            sharpe_ratio=ratios.sharpe_ratio,
            sortino_ratio=ratios.sortino_ratio,
        ),
        headline=chart_headline(chart),
        period_delta=period_delta,
        scope_summaries=scope_summaries,
    )
    log.debug(
        "snapshot.built",
        trades=summary.total_trades,
        granularity=granularity.value,
        points=len(chart.points),
    )
    return snapshot
