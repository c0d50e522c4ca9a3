"""Load and validate configuration from settings.toml and .env."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv


PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "config"


@dataclass
class GeneratorConfig:
    year: int = 2023
    month_index: int = 9                # 0-based, October
    total_trades: int = 142
    seed: int = 20231114
    starting_equity: float = 35000.0


@dataclass
class StatusPolicy:
    """Which synthesized trades are marked OPEN and which get a placeholder note."""
    open_ratio: float = 0.08
    min_open: int = 3
    annotation_every: int = 13
    annotation_text: str = "Scale entry and monitor fee impact before adding size."


@dataclass
class OrderPolicy:
    max_orders: int = 96
    open_ratio: float = 0.14
    min_open: int = 4
    canceled_ratio: float = 0.10
    min_canceled: int = 3


@dataclass
class TransferPolicy:
    count: int = 18
    unsettled_head: int = 2             # first N transfers are PENDING or FAILED


@dataclass
class ScopeConfig:
    # Base assets traded as perpetuals; everything else counts as spot
    perpetual_assets: list[str] = field(default_factory=lambda: ["BTC", "ETH", "SOL"])


@dataclass
class SizingConfig:
    default_leverage: float = 5.0
    default_risk_percent: float = 1.0


@dataclass
class Config:
    log_level: str = "INFO"
    notes_path: str = ""
    generator: GeneratorConfig = field(default_factory=GeneratorConfig)
    status: StatusPolicy = field(default_factory=StatusPolicy)
    orders: OrderPolicy = field(default_factory=OrderPolicy)
    transfers: TransferPolicy = field(default_factory=TransferPolicy)
    scope: ScopeConfig = field(default_factory=ScopeConfig)
    sizing: SizingConfig = field(default_factory=SizingConfig)


def load_config(config_dir: Path | None = None) -> Config:
    """Load configuration from settings.toml and environment variables."""
    config_dir = config_dir or CONFIG_DIR
    load_dotenv(PROJECT_ROOT / ".env")

    config = Config()
    config.notes_path = str(PROJECT_ROOT / "data" / "notes.json")

    settings_path = config_dir / "settings.toml"
    if settings_path.exists():
        with open(settings_path, "rb") as f:
            settings = tomllib.load(f)

        general = settings.get("general", {})
        config.log_level = general.get("log_level", config.log_level)
        config.notes_path = general.get("notes_path", config.notes_path)

        gen = settings.get("generator", {})
        config.generator.year = gen.get("year", config.generator.year)
        config.generator.month_index = gen.get("month_index", config.generator.month_index)
        config.generator.total_trades = gen.get("total_trades", config.generator.total_trades)
        config.generator.seed = gen.get("seed", config.generator.seed)
        config.generator.starting_equity = gen.get("starting_equity", config.generator.starting_equity)

        status = settings.get("status_policy", {})
        for key in vars(config.status):
            if key in status:
                setattr(config.status, key, status[key])

        orders = settings.get("orders", {})
        for key in vars(config.orders):
            if key in orders:
                setattr(config.orders, key, orders[key])

        transfers = settings.get("transfers", {})
        for key in vars(config.transfers):
            if key in transfers:
                setattr(config.transfers, key, transfers[key])

        scope = settings.get("scope", {})
        config.scope.perpetual_assets = scope.get("perpetual_assets", config.scope.perpetual_assets)

        sizing = settings.get("sizing", {})
        config.sizing.default_leverage = sizing.get("default_leverage", config.sizing.default_leverage)
        config.sizing.default_risk_percent = sizing.get("default_risk_percent", config.sizing.default_risk_percent)

    # Environment overrides
    seed = os.getenv("DASHBOARD_SEED", "").strip()
    if seed:
        try:
            config.generator.seed = int(seed)
        except ValueError:
            raise ValueError(f"Config validation failed:\n  DASHBOARD_SEED must be an integer, got '{seed}'")
    config.log_level = os.getenv("DASHBOARD_LOG_LEVEL") or config.log_level
    config.notes_path = os.getenv("DASHBOARD_NOTES_PATH") or config.notes_path

    _validate_config(config)

    return config


def _validate_config(config: Config) -> None:
    """Validate config values are within sane ranges."""
    errors = []

    if config.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        errors.append(f"log_level must be a standard level name, got '{config.log_level}'")
    if not (0 <= config.generator.month_index <= 11):
        errors.append(f"generator.month_index must be 0-11, got {config.generator.month_index}")
    if not (1970 <= config.generator.year <= 9999):
        errors.append(f"generator.year must be 1970-9999, got {config.generator.year}")
    if config.generator.total_trades < 0:
        errors.append(f"generator.total_trades must be >= 0, got {config.generator.total_trades}")
    if config.generator.starting_equity <= 0:
        errors.append(f"generator.starting_equity must be > 0, got {config.generator.starting_equity}")
    if not (0 <= config.status.open_ratio <= 1):
        errors.append(f"status_policy.open_ratio must be 0-1, got {config.status.open_ratio}")
    if config.status.min_open < 0:
        errors.append(f"status_policy.min_open must be >= 0, got {config.status.min_open}")
    if config.status.annotation_every < 1:
        errors.append(f"status_policy.annotation_every must be >= 1, got {config.status.annotation_every}")
    if config.orders.max_orders < 0:
        errors.append(f"orders.max_orders must be >= 0, got {config.orders.max_orders}")
    if not (0 <= config.orders.open_ratio <= 1):
        errors.append(f"orders.open_ratio must be 0-1, got {config.orders.open_ratio}")
    if not (0 <= config.orders.canceled_ratio <= 1):
        errors.append(f"orders.canceled_ratio must be 0-1, got {config.orders.canceled_ratio}")
    if config.orders.open_ratio + config.orders.canceled_ratio > 1:
        errors.append(
            f"orders.open_ratio + orders.canceled_ratio must be <= 1, "
            f"got {config.orders.open_ratio + config.orders.canceled_ratio}"
        )
    if config.transfers.count < 0:
        errors.append(f"transfers.count must be >= 0, got {config.transfers.count}")
    if config.transfers.unsettled_head < 0:
        errors.append(f"transfers.unsettled_head must be >= 0, got {config.transfers.unsettled_head}")
    if not config.scope.perpetual_assets:
        errors.append("At least one perpetual base asset must be configured")
    if config.sizing.default_leverage <= 0:
        errors.append(f"sizing.default_leverage must be > 0, got {config.sizing.default_leverage}")
    if not (0 < config.sizing.default_risk_percent <= 100):
        errors.append(f"sizing.default_risk_percent must be 0-100, got {config.sizing.default_risk_percent}")

    for asset in config.scope.perpetual_assets:
        if not asset or asset != asset.upper():
            errors.append(f"Perpetual asset must be an upper-case ticker: '{asset}'")

    if errors:
        raise ValueError("Config validation failed:\n  " + "\n  ".join(errors))
