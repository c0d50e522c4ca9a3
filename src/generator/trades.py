"""Trade synthesizer — one month of reproducible fake fills.

Draw order inside `_create_trade` is part of the output contract: moving a
draw changes every trade generated after it.
"""

from __future__ import annotations

import calendar
import math
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import structlog

from src.generator.rng import RngState, advance, choice, uniform
from src.generator.symbols import SYMBOLS
from src.shell.config import StatusPolicy
from src.shell.contract import OrderType, Side, Trade, TradeStatus
from src.utils.dates import from_epoch_ms, to_epoch_ms
from src.utils.rounding import round_half_up

log = structlog.get_logger()

LONG_BIAS = 0.58
MARKET_BIAS = 0.74
MOVE_RANGE = (-0.016, 0.026)
MARKET_FEE_RATE = (0.00055, 0.00085)
LIMIT_FEE_RATE = (0.0002, 0.00035)
DURATION_MINUTES = (20, 540)


def month_window(year: int, month_index: int) -> tuple[int, int]:
    """First and last millisecond bounds (UTC) of a month, as epoch ms.

    The upper bound is 23:59:59.000 on the last day. Out-of-range month
    indices roll into the neighbouring years.
    """
    year_offset, month_index = divmod(month_index, 12)
    year += year_offset
    last_day = calendar.monthrange(year, month_index + 1)[1]
    start = datetime(year, month_index + 1, 1, tzinfo=timezone.utc)
    end = datetime(year, month_index + 1, last_day, 23, 59, 59, tzinfo=timezone.utc)
    return to_epoch_ms(start), to_epoch_ms(end)


def directional_pnl(entry: float, exit: float, size: float, side: Side) -> float:
    if side == Side.LONG:
        return (exit - entry) * size
    return (entry - exit) * size


def _create_trade(
    state: RngState, index: int, year: int, month_index: int, start_ms: int, end_ms: int,
) -> tuple[Trade, RngState]:
    profile, state = choice(state, SYMBOLS)
    u, state = advance(state)
    side = Side.LONG if u < LONG_BIAS else Side.SHORT
    u, state = advance(state)
    order_type = OrderType.MARKET if u < MARKET_BIAS else OrderType.LIMIT

    raw_size, state = uniform(state, profile.size_min, profile.size_max)
    size = round(raw_size, profile.size_digits)
    raw_entry, state = uniform(state, profile.entry_min, profile.entry_max)
    entry = round(raw_entry, 2)
    move, state = uniform(state, *MOVE_RANGE)
    exit_price = round(entry * (1 + move), 2)
    notional = entry * size

    gross = directional_pnl(entry, exit_price, size, side)
    fee_range = MARKET_FEE_RATE if order_type == OrderType.MARKET else LIMIT_FEE_RATE
    fee_rate, state = uniform(state, *fee_range)
    fee = round(notional * fee_rate, 2)
    pnl = round(gross - fee, 2)

    exit_ms, state = uniform(state, start_ms, end_ms + 1)
    exit_at = from_epoch_ms(math.floor(exit_ms))
    duration, state = uniform(state, *DURATION_MINUTES)
    duration_minutes = math.floor(duration)
    entry_at = exit_at - timedelta(minutes=duration_minutes)

    trade = Trade(
        id=f"trade-{year}-{month_index + 1}-{index + 1}",
        symbol=profile.pair,
        base_asset=profile.base_asset,
        side=side,
        order_type=order_type,
        size=size,
        size_digits=profile.size_digits,
        entry=entry,
        exit=exit_price,
        notional=notional,
        pnl=pnl,
        fee=fee,
        duration_minutes=duration_minutes,
        entry_at=entry_at,
        exit_at=exit_at,
    )
    return trade, state


def open_count(total: int, policy: StatusPolicy) -> int:
    """How many of the newest trades are reported as still open."""
    if total <= 0:
        return 0
    return min(total, max(policy.min_open, round_half_up(total * policy.open_ratio)))


def build_trades(
    year: int,
    month_index: int,
    total_trades: int,
    seed: int,
    policy: StatusPolicy | None = None,
) -> list[Trade]:
    """Generate `total_trades` trades closing inside the given month.

    Returned newest first. The newest `open_count` trades are OPEN, the
    rest CLOSED; every `annotation_every`-th trade carries the placeholder
    note.
    """
    policy = policy or StatusPolicy()
    state = RngState.from_seed(seed)
    start_ms, end_ms = month_window(year, month_index)

    trades: list[Trade] = []
    for index in range(max(total_trades, 0)):
        trade, state = _create_trade(state, index, year, month_index, start_ms, end_ms)
        trades.append(trade)

    newest_first = sorted(trades, key=lambda t: t.exit_at, reverse=True)
    n_open = open_count(len(newest_first), policy)

    result = [
        replace(
            trade,
            status=TradeStatus.OPEN if index < n_open else TradeStatus.CLOSED,
            annotation=policy.annotation_text if index % policy.annotation_every == 0 else "",
        )
        for index, trade in enumerate(newest_first)
    ]

    log.debug("synth.trades_generated", count=len(result), open=n_open, seed=seed)
    return result
