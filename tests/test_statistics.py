"""Tests for summary statistics, analytics buckets, chart series and risk ratios."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from src.generator.dataset import synthesize
from src.shell.contract import Granularity, MarketScope, OrderType, Side, Trade, TradeStatus
from src.statistics.analytics import (
    RunKind,
    build_analytics,
    build_heatmap,
    build_impact_ranking,
    build_order_type_performance,
    build_sessions,
    build_streaks,
    build_weekdays,
    heat_cell_opacity,
    session_name,
    weekday_index,
)
from src.statistics.chart import (
    ChartPoint,
    ChartSeries,
    build_chart_series,
    build_daily_series,
    build_fee_trend,
    build_hour_of_day_series,
    build_session_series,
)
from src.statistics.risk import (
    compute_period_delta,
    compute_risk_ratios,
    previous_period,
    summarize_by_scope,
)
from src.statistics.summary import SummaryStats, compute_drawdown, summarize


def _utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


_counter = 0


def _trade(
    pnl: float,
    exit_at: datetime,
    side: Side = Side.LONG,
    order_type: OrderType = OrderType.MARKET,
    status: TradeStatus = TradeStatus.CLOSED,
    base: str = "BTC",
    fee: float = 1.0,
    notional: float = 1000.0,
    duration: int = 60,
) -> Trade:
    global _counter
    _counter += 1
    return Trade(
        id=f"t-{_counter}",
        symbol=f"{base} / USDT",
        base_asset=base,
        side=side,
        order_type=order_type,
        size=1.0,
        size_digits=3,
        entry=notional,
        exit=notional,
        notional=notional,
        pnl=pnl,
        fee=fee,
        duration_minutes=duration,
        entry_at=exit_at - timedelta(minutes=duration),
        exit_at=exit_at,
        status=status,
    )


def _sample_trades() -> list[Trade]:
    """+100, -50, -30, +200 on Oct 1, 2, 5, 8 at noon."""
    return [
        _trade(100, _utc(2023, 10, 1, 12), side=Side.LONG, order_type=OrderType.MARKET),
        _trade(-50, _utc(2023, 10, 2, 12), side=Side.SHORT, order_type=OrderType.LIMIT),
        _trade(-30, _utc(2023, 10, 5, 12), side=Side.LONG, order_type=OrderType.MARKET),
        _trade(200, _utc(2023, 10, 8, 12), side=Side.LONG, order_type=OrderType.MARKET),
    ]


# --- Summary ---

def test_summarize_empty():
    assert summarize([], 35000) == SummaryStats()


def test_summarize_sample():
    summary = summarize(_sample_trades(), 1000)
    assert summary.total_trades == 4
    assert summary.total_pnl == 220
    assert summary.total_fees == 4
    assert summary.total_volume == 4000
    assert summary.net_pnl_percent == pytest.approx(22.0)
    assert summary.win_rate == 50
    assert summary.long_short_ratio == 3
    assert summary.max_win == 200
    assert summary.max_loss == -50
    assert summary.average_win == 150
    assert summary.average_loss == 40
    assert summary.maker_fees == 1
    assert summary.taker_fees == 3
    assert summary.market_ratio == 75
    assert summary.limit_ratio == 25
    assert summary.profit_factor == pytest.approx(300 / 80)
    assert summary.expectancy == 55
    assert summary.average_duration_minutes == 60


def test_drawdown_and_recovery():
    stats = compute_drawdown(_sample_trades(), 1000)
    assert stats.max_drawdown_amount == 80
    assert stats.max_drawdown_percent == pytest.approx(80 / 1100 * 100)
    assert stats.recovery_days == 7


def test_drawdown_ignores_input_order():
    trades = _sample_trades()
    assert compute_drawdown(list(reversed(trades)), 1000) == compute_drawdown(trades, 1000)


def test_unrecovered_drawdown_measured_to_last_trade():
    trades = [
        _trade(-100, _utc(2023, 10, 1, 12)),
        _trade(-50, _utc(2023, 10, 4, 12)),
    ]
    stats = compute_drawdown(trades, 1000)
    assert stats.max_drawdown_amount == 150
    assert stats.recovery_days == 3


def test_recovery_is_at_least_one_day():
    trades = [
        _trade(-10, _utc(2023, 10, 1, 12)),
        _trade(20, _utc(2023, 10, 1, 13)),
    ]
    assert compute_drawdown(trades, 1000).recovery_days == 1


def test_no_drawdown_when_always_rising():
    trades = [_trade(10, _utc(2023, 10, d, 12)) for d in range(1, 6)]
    stats = compute_drawdown(trades, 1000)
    assert stats.max_drawdown_amount == 0
    assert stats.recovery_days == 0


def test_break_even_collection():
    trades = [_trade(50, _utc(2023, 10, 1, 12)), _trade(-50, _utc(2023, 10, 2, 12))]
    summary = summarize(trades, 1000)
    assert summary.total_pnl == 0
    assert summary.net_pnl_percent == 0
    assert summary.win_rate == 50
    assert summary.profit_factor == 1.0
    assert summary.max_drawdown_amount == 50


def test_drawdown_is_maximal_on_generated_data():
    dataset = synthesize(2023, 9, 142, 20231114)
    equity = peak = dataset.starting_equity
    worst = 0.0
    for trade in sorted(dataset.trades, key=lambda t: t.exit_at):
        equity += trade.pnl
        peak = max(peak, equity)
        worst = max(worst, peak - equity)
    summary = summarize(dataset.trades, dataset.starting_equity)
    assert summary.max_drawdown_amount == pytest.approx(worst)
    assert summary.max_drawdown_amount >= 0


def test_profit_factor_without_losses():
    summary = summarize([_trade(10, _utc(2023, 10, 1, 12))], 1000)
    assert summary.profit_factor == 0
    assert summary.long_short_ratio == 1


# --- Analytics ---

def test_session_boundaries():
    assert session_name(0) == "Asia"
    assert session_name(7) == "Asia"
    assert session_name(8) == "London"
    assert session_name(15) == "London"
    assert session_name(16) == "New York"
    assert session_name(23) == "New York"


def test_build_sessions():
    trades = [
        _trade(10, _utc(2023, 10, 1, 3)),
        _trade(-5, _utc(2023, 10, 1, 8)),
        _trade(7, _utc(2023, 10, 1, 23)),
        _trade(3, _utc(2023, 10, 2, 4)),
    ]
    sessions = build_sessions(trades)
    assert [s.name for s in sessions] == ["Asia", "London", "New York"]
    assert [s.trades for s in sessions] == [2, 1, 1]
    assert [s.pnl for s in sessions] == [13, -5, 7]


def test_weekday_index_sunday_first():
    assert weekday_index(_utc(2023, 10, 1)) == 0  # Sunday
    assert weekday_index(_utc(2023, 10, 7)) == 6  # Saturday


def test_best_day():
    trades = [
        _trade(10, _utc(2023, 10, 2, 9)),   # Mon
        _trade(40, _utc(2023, 10, 4, 9)),   # Wed
        _trade(-5, _utc(2023, 10, 4, 10)),  # Wed
    ]
    analytics = build_analytics(trades)
    assert analytics.best_day.label == "Wed"
    assert analytics.best_day.pnl == 35
    assert build_weekdays([])[0].label == "Sun"


def test_heatmap():
    trades = [
        _trade(1, _utc(2023, 10, 1, 3)),
        _trade(1, _utc(2023, 10, 1, 2)),
        _trade(1, _utc(2023, 10, 2, 10)),
        _trade(1, _utc(2023, 10, 7, 23)),
    ]
    heatmap = build_heatmap(trades)
    assert heatmap.values[0][0] == 2
    assert heatmap.values[1][2] == 1
    assert heatmap.values[6][5] == 1
    assert heatmap.max_value == 2
    assert sum(sum(row) for row in heatmap.values) == len(trades)


def test_heatmap_empty_floor():
    heatmap = build_heatmap([])
    assert heatmap.max_value == 1
    assert all(v == 0 for row in heatmap.values for v in row)


def test_heat_cell_opacity():
    assert heat_cell_opacity(0, 0) == 0.08
    assert heat_cell_opacity(0, 10) == pytest.approx(0.15)
    assert heat_cell_opacity(5, 10) == pytest.approx(0.525)
    assert heat_cell_opacity(10, 10) == pytest.approx(0.9)


def test_streaks_runs():
    pnls = [5, 0, -3, -4, -1, 8]
    trades = [_trade(p, _utc(2023, 10, 1, h)) for h, p in enumerate(pnls)]
    trades.append(_trade(-100, _utc(2023, 10, 1, 20), status=TradeStatus.OPEN))

    streaks = build_streaks(trades)
    assert [(r.kind, r.length) for r in streaks.runs] == [
        (RunKind.WIN, 2), (RunKind.LOSS, 3), (RunKind.WIN, 1),
    ]
    assert streaks.current_win == 1
    assert streaks.current_loss == 0
    assert streaks.max_win == 2
    assert streaks.max_loss == 3
    assert streaks.longest_loss.net_pnl == -8
    assert streaks.current_net_pnl == 8


def test_streak_tie_break_prefers_larger_net():
    trades = [
        _trade(10, _utc(2023, 10, 1, 1)),
        _trade(-5, _utc(2023, 10, 1, 2)),
        _trade(30, _utc(2023, 10, 1, 3)),
        _trade(-9, _utc(2023, 10, 1, 4)),
        _trade(-2, _utc(2023, 10, 1, 5)),
    ]
    streaks = build_streaks(trades[:3])
    assert streaks.longest_win.net_pnl == 30
    streaks = build_streaks(trades)
    assert streaks.longest_loss.length == 2
    assert streaks.current_loss == 2


def test_streak_tie_between_loss_runs_keeps_larger_net():
    trades = [
        _trade(-9, _utc(2023, 10, 2, 1)),
        _trade(-9, _utc(2023, 10, 2, 2)),
        _trade(5, _utc(2023, 10, 2, 3)),
        _trade(-1, _utc(2023, 10, 2, 4)),
        _trade(-1, _utc(2023, 10, 2, 5)),
        _trade(5, _utc(2023, 10, 2, 6)),
    ]
    streaks = build_streaks(trades)
    assert streaks.max_loss == 2
    assert streaks.longest_loss.net_pnl == -2
    assert streaks.longest_loss.started_at == _utc(2023, 10, 2, 4)


def test_streaks_recent_outcomes():
    trades = [_trade(1 if h % 2 else -1, _utc(2023, 10, 1, h)) for h in range(10)]
    streaks = build_streaks(trades)
    assert len(streaks.recent) == 8
    assert streaks.recent[-1].trade_id == trades[-1].id
    assert streaks.recent[0].trade_id == trades[2].id


def test_streaks_empty():
    streaks = build_streaks([_trade(5, _utc(2023, 10, 1), status=TradeStatus.OPEN)])
    assert streaks.runs == []
    assert streaks.current is None
    assert streaks.max_win == 0
    assert streaks.current_net_pnl == 0


def test_streaks_consistent_on_generated_data():
    trades = synthesize(2023, 9, 142, 20231114).trades
    streaks = build_streaks(trades)
    closed = [t for t in trades if t.status == TradeStatus.CLOSED]
    assert sum(r.length for r in streaks.runs) == len(closed)
    for a, b in zip(streaks.runs, streaks.runs[1:]):
        assert a.kind != b.kind
    assert streaks.max_win == max(r.length for r in streaks.runs if r.kind == RunKind.WIN)
    assert streaks.max_loss == max(r.length for r in streaks.runs if r.kind == RunKind.LOSS)


def test_order_type_performance():
    performance = build_order_type_performance(_sample_trades())
    market, limit = performance
    assert market.order_type == OrderType.MARKET
    assert market.trades == 3
    assert market.total_pnl == 270
    assert market.win_rate == pytest.approx(200 / 3)
    assert limit.trades == 1
    assert limit.average_pnl == -50

    empty = build_order_type_performance([])
    assert [p.trades for p in empty] == [0, 0]


# --- Chart ---

def test_daily_series_covers_every_day():
    series = build_daily_series(_sample_trades(), "2023-10-01", "2023-10-31", 1000)
    assert len(series.points) == 31
    assert series.x_labels == ["Oct 01", "Oct 16", "Oct 31"]

    points = series.points
    assert points[0].line_value == 100
    assert points[0].secondary_line_value == 1100
    assert points[0].area_value == 0
    assert points[1].area_value == 50
    assert points[2].fee_value == 0
    assert points[4].area_value == 80
    assert points[7].line_value == 220
    assert points[7].area_value == 0
    assert points[-1].line_value == 220
    assert series.headline_label == "ATH"
    assert series.headline_value == 1220


def test_daily_series_reversed_and_missing_window():
    forward = build_daily_series(_sample_trades(), "2023-10-01", "2023-10-08", 1000)
    backward = build_daily_series(_sample_trades(), "2023-10-08", "2023-10-01", 1000)
    assert forward.points == backward.points
    assert len(forward.points) == 8

    empty = build_daily_series([], None, None, 1000)
    assert empty.points == []
    assert empty.x_labels == ["-", "-", "-"]


def test_session_series():
    trades = [
        _trade(10, _utc(2023, 10, 1, 3), fee=2),
        _trade(40, _utc(2023, 10, 1, 9), fee=3),
        _trade(-5, _utc(2023, 10, 1, 18), fee=1),
    ]
    series = build_session_series(trades)
    assert [p.label for p in series.points] == ["Asia", "London", "New York"]
    assert [p.fee_value for p in series.points] == [2, 3, 1]
    assert series.headline_bucket == "London"
    assert series.headline_value == 40


def test_hour_of_day_series():
    trades = [_trade(12, _utc(2023, 10, 1, 14)), _trade(-3, _utc(2023, 10, 2, 2))]
    series = build_hour_of_day_series(trades)
    assert len(series.points) == 24
    assert series.x_labels == ["00:00", "11:00", "23:00"]
    assert series.points[14].line_value == 12
    assert series.headline_bucket == "14:00"


def test_chart_series_dispatch():
    trades = _sample_trades()
    for granularity, count in ((Granularity.SESSION, 3), (Granularity.HOUR_OF_DAY, 24)):
        series = build_chart_series(trades, "2023-10-01", "2023-10-08", 1000, granularity)
        assert series.granularity == granularity
        assert len(series.points) == count
    daily = build_chart_series(trades, "2023-10-01", "2023-10-08", 1000)
    assert daily.granularity == Granularity.DAILY


def test_fee_trend_is_cumulative():
    trend = build_fee_trend(list(reversed(_sample_trades())))
    assert [p.label for p in trend] == ["Oct 01", "Oct 02", "Oct 05", "Oct 08"]
    assert [p.value for p in trend] == [1, 2, 3, 4]
    assert build_fee_trend([]) == []


# --- Risk ---

def _equity_series(values: list[float]) -> ChartSeries:
    points = [ChartPoint(str(i), v - values[0], 0.0, 0.0, v) for i, v in enumerate(values)]
    return ChartSeries(Granularity.DAILY, points, [], "ATH", max(values))


def test_risk_ratios_flat_equity():
    ratios = compute_risk_ratios(_equity_series([1000.0] * 10))
    assert ratios.sharpe_ratio == 0
    assert ratios.sortino_ratio == 0


def test_risk_ratios_rising_equity():
    ratios = compute_risk_ratios(_equity_series([1000, 1010, 1005, 1020, 1015, 1030]))
    assert ratios.sharpe_ratio > 0
    assert ratios.sortino_ratio > 0


def test_risk_ratios_too_short():
    ratios = compute_risk_ratios(_equity_series([1000, 1100]))
    assert ratios.sharpe_ratio == 0


def test_previous_period():
    start, end = previous_period(_utc(2023, 10, 8), _utc(2023, 10, 14, 18))
    assert start == _utc(2023, 10, 1)
    assert end == _utc(2023, 10, 7)


def test_period_delta():
    trades = [
        _trade(100, _utc(2023, 10, 2, 12)),
        _trade(-40, _utc(2023, 10, 6, 12)),
        _trade(70, _utc(2023, 10, 9, 12)),
        _trade(30, _utc(2023, 10, 14, 23)),
        _trade(500, _utc(2023, 10, 15, 1)),
    ]
    delta = compute_period_delta(trades, "2023-10-08", "2023-10-14", 1000)
    assert delta.current.total_trades == 2
    assert delta.previous.total_trades == 2
    assert delta.pnl_delta == 100 - 60
    assert delta.trade_count_delta == 0
    assert delta.win_rate_delta == 50
    assert delta.previous_start == _utc(2023, 10, 1)

    assert compute_period_delta(trades, None, "2023-10-14", 1000) is None


def test_period_delta_respects_market_scope():
    trades = [
        _trade(100, _utc(2023, 10, 9, 12), base="BTC"),
        _trade(10, _utc(2023, 10, 9, 13), base="BNB"),
    ]
    delta = compute_period_delta(trades, "2023-10-08", "2023-10-14", 1000, market_scope=MarketScope.SPOT)
    assert delta.current.total_pnl == 10


def test_summarize_by_scope():
    trades = [
        _trade(100, _utc(2023, 10, 9, 12), base="ETH"),
        _trade(10, _utc(2023, 10, 9, 13), base="XRP"),
        _trade(-4, _utc(2023, 10, 9, 14), base="BNB"),
    ]
    by_scope = summarize_by_scope(trades, 1000)
    assert by_scope[MarketScope.PERPETUAL].total_trades == 1
    assert by_scope[MarketScope.SPOT].total_trades == 2
    assert by_scope[MarketScope.SPOT].total_pnl == 6


def test_impact_ranking_orders_by_magnitude():
    trades = [
        _trade(40, _utc(2023, 10, 3, 1), fee=2.0),
        _trade(-250, _utc(2023, 10, 3, 2), side=Side.SHORT),
        _trade(120, _utc(2023, 10, 3, 3)),
        _trade(-5, _utc(2023, 10, 3, 4)),
    ]
    tiles = build_impact_ranking(trades)
    assert [t.pnl for t in tiles] == [-250, 120, 40, -5]
    assert tiles[0].ratio == 1.0
    assert tiles[0].side == Side.SHORT
    assert tiles[1].ratio == pytest.approx(120 / 250)
    assert tiles[2].trade_id == trades[0].id
    assert tiles[2].fee == 2.0


def test_impact_ranking_limit_and_ratio_floor():
    trades = [_trade(i + 1, _utc(2023, 10, 4) + timedelta(minutes=i)) for i in range(30)]
    tiles = build_impact_ranking(trades)
    assert len(tiles) == 24
    assert tiles[0].pnl == 30
    assert tiles[-1].pnl == 7

    small = build_impact_ranking([
        _trade(0.5, _utc(2023, 10, 5, 1)),
        _trade(-0.2, _utc(2023, 10, 5, 2)),
    ])
    assert [t.ratio for t in small] == [pytest.approx(0.5), pytest.approx(0.2)]
    assert build_impact_ranking([]) == []


def test_impact_ranking_active_only():
    trades = [
        _trade(900, _utc(2023, 10, 6, 1)),
        _trade(-30, _utc(2023, 10, 6, 2), status=TradeStatus.OPEN),
        _trade(60, _utc(2023, 10, 6, 3), status=TradeStatus.OPEN),
    ]
    tiles = build_impact_ranking(trades, active_only=True)
    assert [t.pnl for t in tiles] == [60, -30]
    assert all(t.status == TradeStatus.OPEN for t in tiles)
    assert tiles[1].ratio == pytest.approx(0.5)

    analytics = build_analytics(trades, impact_active_only=True)
    assert [t.trade_id for t in analytics.impact] == [trades[2].id, trades[1].id]
    assert build_analytics(trades).impact[0].pnl == 900
