"""Data contract — the record types every component passes around.

Trades, orders and transfers are produced once by the generator and never
mutated afterwards. Aggregators only read them.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from src.shell.formatting import format_date_time


# --- Enums ---

class Side(Enum):
    LONG = "LONG"
    SHORT = "SHORT"


class OrderType(Enum):
    MARKET = "Market"
    LIMIT = "Limit"


class TradeStatus(Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class OrderStatus(Enum):
    # Independent of TradeStatus even though OPEN appears in both
    OPEN = "OPEN"
    FILLED = "FILLED"
    CANCELED = "CANCELED"


class TimeInForce(Enum):
    GTC = "GTC"
    IOC = "IOC"
    FOK = "FOK"


class TransferType(Enum):
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"


class TransferStatus(Enum):
    COMPLETED = "COMPLETED"
    PENDING = "PENDING"
    FAILED = "FAILED"


class MarketScope(Enum):
    ALL = "ALL"
    PERPETUAL = "PERPETUAL"
    SPOT = "SPOT"


class Granularity(Enum):
    DAILY = "DAILY"
    SESSION = "SESSION"
    HOUR_OF_DAY = "HOD"


# --- Records ---

@dataclass(frozen=True)
class SymbolProfile:
    pair: str
    base_asset: str
    entry_min: float
    entry_max: float
    size_min: float
    size_max: float
    size_digits: int


@dataclass(frozen=True)
class Trade:
    id: str
    symbol: str
    base_asset: str
    side: Side
    order_type: OrderType
    size: float
    size_digits: int
    entry: float
    exit: float
    notional: float
    pnl: float              # net of fee
    fee: float
    duration_minutes: int
    entry_at: datetime
    exit_at: datetime
    status: TradeStatus = TradeStatus.CLOSED
    annotation: str = ""

    @property
    def date_time_label(self) -> str:
        return format_date_time(self.exit_at)

    @property
    def timestamp(self) -> datetime:
        return self.exit_at


@dataclass(frozen=True)
class Order:
    id: str
    order_id: str
    symbol: str
    base_asset: str
    side: Side
    order_type: OrderType
    time_in_force: TimeInForce
    size: float
    filled_size: float
    size_digits: int
    price: float
    status: OrderStatus
    created_at: datetime

    @property
    def date_time_label(self) -> str:
        return format_date_time(self.created_at)

    @property
    def timestamp(self) -> datetime:
        return self.created_at


@dataclass(frozen=True)
class Transfer:
    id: str
    transfer_id: str
    occurred_at: datetime
    transfer_type: TransferType
    amount: float
    status: TransferStatus
    asset: str

    @property
    def date_time_label(self) -> str:
        return format_date_time(self.occurred_at)

    @property
    def timestamp(self) -> datetime:
        return self.occurred_at
