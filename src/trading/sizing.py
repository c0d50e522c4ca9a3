"""Risk-per-trade position sizing."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SizingResult:
    stop_distance: float
    risk_amount: float
    units: float
    notional: float
    margin_required: float


def size_position(
    account_balance: float,
    risk_percent: float,
    entry_price: float,
    stop_price: float,
    leverage: float = 5.0,
) -> SizingResult:
    """Units such that hitting the stop loses `risk_percent` of the balance.

    A zero stop distance yields zero units. Non-positive leverage yields
    zero margin.
    """
    stop_distance = abs(entry_price - stop_price)
    risk_amount = account_balance * (risk_percent / 100)
    units = risk_amount / stop_distance if stop_distance > 0 else 0.0
    notional = units * entry_price
    margin_required = notional / leverage if leverage > 0 else 0.0
    return SizingResult(
        stop_distance=stop_distance,
        risk_amount=risk_amount,
        units=units,
        notional=notional,
        margin_required=margin_required,
    )
