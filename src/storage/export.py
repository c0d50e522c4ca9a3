"""CSV export of the filtered trade table."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pandas as pd
import structlog

from src.shell.contract import Trade
from src.shell.formatting import format_trade_size
from src.storage.notes import NoteLookup, resolve_note

log = structlog.get_logger()

EXPORT_COLUMNS = [
    "Date Time", "Symbol", "Status", "Side", "Type", "Size",
    "Entry", "Exit", "PnL", "Fee", "Annotation",
]


def build_export_rows(trades: list[Trade], lookup: NoteLookup | None = None) -> list[dict]:
    return [
        {
            "Date Time": trade.date_time_label,
            "Symbol": trade.symbol,
            "Status": trade.status.value,
            "Side": trade.side.value,
            "Type": trade.order_type.value,
            "Size": format_trade_size(trade.size, trade.base_asset, trade.size_digits),
            "Entry": trade.entry,
            "Exit": trade.exit,
            "PnL": trade.pnl,
            "Fee": trade.fee,
            "Annotation": resolve_note(trade, lookup),
        }
        for trade in trades
    ]


def export_frame(trades: list[Trade], lookup: NoteLookup | None = None) -> pd.DataFrame:
    return pd.DataFrame(build_export_rows(trades, lookup), columns=EXPORT_COLUMNS)


def export_csv(trades: list[Trade], lookup: NoteLookup | None = None) -> str:
    """CSV text with a header row, one line per trade, in input order."""
    return export_frame(trades, lookup).to_csv(index=False, lineterminator="\n")


def export_filename(now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"trades-{now.strftime('%Y%m%d')}.csv"


def write_csv(trades: list[Trade], path: str | Path, lookup: NoteLookup | None = None) -> Path:
    path = Path(path)
    if path.is_dir():
        path = path / export_filename()
    path.write_text(export_csv(trades, lookup))
    log.info("export.csv_written", path=str(path), rows=len(trades))
    return path
