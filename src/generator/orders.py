"""Order-book records derived from the newest trades."""

from __future__ import annotations

import math

import structlog

from src.generator.rng import RngState, choice, uniform
from src.shell.config import OrderPolicy
from src.shell.contract import Order, OrderStatus, TimeInForce, Trade
from src.utils.rounding import round_half_up

log = structlog.get_logger()

ORDER_SEED_MASK = 0x1F2E3D4C
PRICE_OFFSET = (-0.0045, 0.0035)
CANCELED_FILL = (0.05, 0.6)
OPEN_FILL = (0.0, 0.35)
TIME_IN_FORCE = (TimeInForce.GTC, TimeInForce.IOC, TimeInForce.FOK)


def _status_for_rank(rank: int, open_target: int, canceled_target: int) -> OrderStatus:
    if rank < open_target:
        return OrderStatus.OPEN
    if rank < open_target + canceled_target:
        return OrderStatus.CANCELED
    return OrderStatus.FILLED


def build_orders(trades: list[Trade], seed: int, policy: OrderPolicy | None = None) -> list[Order]:
    """One order per recent trade, newest entry first.

    Order status is assigned by rank and is unrelated to the parent trade's
    status.
    """
    policy = policy or OrderPolicy()
    if not trades:
        return []

    state = RngState.from_seed(seed ^ ORDER_SEED_MASK)
    recent = sorted(trades, key=lambda t: t.entry_at, reverse=True)[: min(policy.max_orders, len(trades))]

    open_target = max(policy.min_open, round_half_up(len(recent) * policy.open_ratio))
    canceled_target = max(policy.min_canceled, round_half_up(len(recent) * policy.canceled_ratio))

    orders = []
    for rank, trade in enumerate(recent):
        status = _status_for_rank(rank, open_target, canceled_target)

        offset, state = uniform(state, *PRICE_OFFSET)
        price = round(trade.entry * (1 + offset), 2)
        time_in_force, state = choice(state, TIME_IN_FORCE)
        if status == OrderStatus.FILLED:
            filled_ratio = 1.0
        elif status == OrderStatus.CANCELED:
            filled_ratio, state = uniform(state, *CANCELED_FILL)
        else:
            filled_ratio, state = uniform(state, *OPEN_FILL)
        order_number, state = uniform(state, 100000, 999999)

        orders.append(Order(
            id=f"order-{trade.id}",
            order_id=f"DV-{math.floor(order_number)}",
            symbol=trade.symbol,
            base_asset=trade.base_asset,
            side=trade.side,
            order_type=trade.order_type,
            time_in_force=time_in_force,
            size=trade.size,
            filled_size=round(trade.size * filled_ratio, trade.size_digits),
            size_digits=trade.size_digits,
            price=price,
            status=status,
            created_at=trade.entry_at,
        ))

    log.debug("synth.orders_generated", count=len(orders), open=min(open_target, len(orders)))
    return orders
