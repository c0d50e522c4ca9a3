"""Display formatting for the dashboard. Deterministic functions of their input."""

from __future__ import annotations

from datetime import datetime


def format_usd(value: float, digits: int = 2) -> str:
    return f"${value:,.{digits}f}"


def format_signed_usd(value: float, digits: int = 2) -> str:
    sign = "+" if value >= 0 else "-"
    return f"{sign}{format_usd(abs(value), digits)}"


def format_compact_usd(value: float) -> str:
    magnitude = abs(value)
    if magnitude >= 1_000_000_000:
        return f"${value / 1_000_000_000:.2f}B"
    if magnitude >= 1_000_000:
        return f"${value / 1_000_000:.2f}M"
    if magnitude >= 1_000:
        return f"${value / 1_000:.2f}K"
    return format_usd(value)


def format_duration(minutes: float) -> str:
    hours = int(minutes // 60)
    remainder = round(minutes % 60)
    return f"{hours}h {remainder}m"


def format_percent(value: float, signed: bool = False) -> str:
    sign = "+" if signed and value >= 0 else ""
    return f"{sign}{value:.1f}%"


def format_date_time(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%d %H:%M")


def format_period_label(start: datetime, end: datetime) -> str:
    return f"{start.strftime('%b')} {start.day}, {start.year} - {end.strftime('%b')} {end.day}, {end.year}"


def format_trade_size(size: float, base_asset: str, digits: int) -> str:
    return f"{size:.{digits}f} {base_asset}"
