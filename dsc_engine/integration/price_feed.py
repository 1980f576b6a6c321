"""
Static price feed.

A settable aggregator: the latest answer is whatever was last published.
Staleness and deviation checks are out of scope; the engine trusts the feed.
"""

from __future__ import annotations

import time
from typing import Optional


class StaticPriceFeed:
    """Mock USD price feed with a fixed decimal count."""

    def __init__(self, address: str, decimals: int, initial_price: int):
        if decimals < 0:
            raise ValueError(f"decimals must be non-negative: {decimals}")
        self.address = address
        self._decimals = decimals
        self._price = 0
        self._updated_at = 0
        self._round = 0
        self.update_price(initial_price)

    def decimals(self) -> int:
        return self._decimals

    @property
    def round_id(self) -> int:
        return self._round

    def latest_price(self) -> tuple[int, int]:
        return self._price, self._updated_at

    def update_price(self, price: int, updated_at: Optional[int] = None) -> None:
        """Publish a new answer. `updated_at` defaults to the wall clock."""
        if price <= 0:
            raise ValueError(f"price must be positive: {price}")
        self._price = price
        self._updated_at = int(time.time()) if updated_at is None else updated_at
        self._round += 1

    def __repr__(self) -> str:
        return f"StaticPriceFeed({self.address}, price={self._price}, decimals={self._decimals})"
