"""Symbol profiles for the synthetic trade generator."""

from __future__ import annotations

from src.shell.contract import SymbolProfile

SYMBOLS: tuple[SymbolProfile, ...] = (
    SymbolProfile("BTC / USDT", "BTC", entry_min=27000, entry_max=34000,
                  size_min=0.15, size_max=2.4, size_digits=3),
    SymbolProfile("ETH / USDT", "ETH", entry_min=1450, entry_max=2100,
                  size_min=2, size_max=26, size_digits=3),
    SymbolProfile("SOL / USDT", "SOL", entry_min=18, entry_max=72,
                  size_min=80, size_max=520, size_digits=2),
    SymbolProfile("BNB / USDT", "BNB", entry_min=205, entry_max=340,
                  size_min=18, size_max=140, size_digits=2),
    SymbolProfile("XRP / USDT", "XRP", entry_min=0.43, entry_max=0.71,
                  size_min=1200, size_max=10000, size_digits=0),
)
