"""Collaborator protocols: what the engine needs from tokens and the oracle.

The identity of whoever performs a collaborator call is passed explicitly
as ``caller``; the engine always calls with its own address.
"""
from __future__ import annotations

from typing import Protocol


class CollateralToken(Protocol):
    """Transfer capability for the collateral asset."""

    address: str

    def balance_of(self, owner: str) -> int: ...

    def allowance(self, owner: str, spender: str) -> int: ...

    def approve(self, spender: str, amount: int, *, caller: str) -> bool: ...

    def transfer(self, to: str, amount: int, *, caller: str) -> bool: ...

    def transfer_from(self, owner: str, to: str, amount: int, *, caller: str) -> bool: ...


class DebtToken(CollateralToken, Protocol):
    """Debt-token issuer. ``mint`` and ``burn`` are restricted to its owner (the engine)."""

    def total_supply(self) -> int: ...

    def mint(self, to: str, amount: int, *, caller: str) -> bool: ...

    def burn(self, amount: int, *, caller: str) -> None: ...


class PriceFeed(Protocol):
    """USD price of the collateral asset."""

    address: str

    def decimals(self) -> int: ...

    def latest_price(self) -> tuple[int, int]:
        """Return ``(price, updated_at)``; price carries ``decimals()`` decimals."""
        ...
