"""Deposits and withdrawals spread over the trade span."""

from __future__ import annotations

import math

import structlog

from src.generator.rng import RngState, choice, uniform
from src.shell.config import TransferPolicy
from src.shell.contract import Trade, Transfer, TransferStatus, TransferType
from src.utils.dates import from_epoch_ms, to_epoch_ms

log = structlog.get_logger()

TRANSFER_SEED_MASK = 0x0A1B2C3D
TRANSFER_TYPES = (TransferType.DEPOSIT, TransferType.WITHDRAWAL)
TRANSFER_STATUSES = (TransferStatus.COMPLETED, TransferStatus.PENDING, TransferStatus.FAILED)
UNSETTLED_STATUSES = (TransferStatus.PENDING, TransferStatus.FAILED)
DEPOSIT_AMOUNT = (350, 9500)
WITHDRAWAL_AMOUNT = (120, 6200)
ASSETS = ("USDC", "USDT", "SOL")


def build_transfers(trades: list[Trade], seed: int, policy: TransferPolicy | None = None) -> list[Transfer]:
    """Independent transfer records, newest first. No trades means no transfers."""
    policy = policy or TransferPolicy()
    if not trades:
        return []

    state = RngState.from_seed(seed ^ TRANSFER_SEED_MASK)
    min_ms = to_epoch_ms(min(t.exit_at for t in trades))
    max_ms = to_epoch_ms(max(t.exit_at for t in trades))

    transfers = []
    for index in range(policy.count):
        occurred_ms, state = uniform(state, min_ms, max_ms + 1)
        transfer_type, state = choice(state, TRANSFER_TYPES)
        statuses = UNSETTLED_STATUSES if index < policy.unsettled_head else TRANSFER_STATUSES
        status, state = choice(state, statuses)
        amount_range = DEPOSIT_AMOUNT if transfer_type == TransferType.DEPOSIT else WITHDRAWAL_AMOUNT
        amount, state = uniform(state, *amount_range)
        transfer_number, state = uniform(state, 1000000, 9999999)
        asset, state = choice(state, ASSETS)

        transfers.append(Transfer(
            id=f"transfer-{index + 1}",
            transfer_id=f"TX-{math.floor(transfer_number)}",
            occurred_at=from_epoch_ms(math.floor(occurred_ms)),
            transfer_type=transfer_type,
            amount=round(amount, 2),
            status=status,
            asset=asset,
        ))

    log.debug("synth.transfers_generated", count=len(transfers))
    return sorted(transfers, key=lambda t: t.occurred_at, reverse=True)
