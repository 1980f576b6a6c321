"""
Per-account collateral/debt ledger.

Implements PositionLedger[Address] -> Position(collateral, debt)
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Iterator, List, Mapping


# Type aliases
Address = str  # account identifier
Amount = int  # Non-negative integer, 18-decimal fixed point


@dataclass(frozen=True)
class Position:
    """Collateral and debt held by the engine on behalf of one account."""

    collateral: Amount = 0
    debt: Amount = 0

    def __post_init__(self) -> None:
        if self.collateral < 0:
            raise ValueError(f"collateral cannot be negative: {self.collateral}")
        if self.debt < 0:
            raise ValueError(f"debt cannot be negative: {self.debt}")

    def __iter__(self) -> Iterator[Amount]:
        # Unpacks as (collateral, debt)
        yield self.collateral
        yield self.debt

    @property
    def is_empty(self) -> bool:
        return self.collateral == 0 and self.debt == 0


EMPTY_POSITION = Position()


class PositionLedger:
    """
    Mutable mapping account -> Position.

    No validation beyond non-negativity lives here; callers bounds-check
    before mutating. A failed subtraction raises and leaves the stored
    position untouched.
    """

    def __init__(self):
        self._positions: Dict[Address, Position] = {}

    def get(self, account: Address) -> Position:
        """Get the position for account. Returns a zero position if not found."""
        return self._positions.get(account, EMPTY_POSITION)

    def _put(self, account: Address, position: Position) -> None:
        if position.is_empty:
            # Drop zero positions to keep the table sparse
            self._positions.pop(account, None)
        else:
            self._positions[account] = position

    def add_collateral(self, account: Address, amount: Amount) -> None:
        """
        Credit collateral to account.

        Raises:
            ValueError: If amount is negative
        """
        if amount < 0:
            raise ValueError(f"Delta must be non-negative: {amount}")
        current = self.get(account)
        self._put(account, replace(current, collateral=current.collateral + amount))

    def sub_collateral(self, account: Address, amount: Amount) -> None:
        """
        Debit collateral from account.

        Raises:
            ValueError: If amount is negative or exceeds the collateral balance
        """
        if amount < 0:
            raise ValueError(f"Delta must be non-negative: {amount}")
        current = self.get(account)
        if amount > current.collateral:
            raise ValueError(
                f"Insufficient collateral: {current.collateral} - {amount} < 0"
            )
        self._put(account, replace(current, collateral=current.collateral - amount))

    def add_debt(self, account: Address, amount: Amount) -> None:
        """
        Record newly minted debt for account.

        Raises:
            ValueError: If amount is negative
        """
        if amount < 0:
            raise ValueError(f"Delta must be non-negative: {amount}")
        current = self.get(account)
        self._put(account, replace(current, debt=current.debt + amount))

    def sub_debt(self, account: Address, amount: Amount) -> None:
        """
        Remove repaid debt from account.

        Raises:
            ValueError: If amount is negative or exceeds the debt balance
        """
        if amount < 0:
            raise ValueError(f"Delta must be non-negative: {amount}")
        current = self.get(account)
        if amount > current.debt:
            raise ValueError(f"Insufficient debt: {current.debt} - {amount} < 0")
        self._put(account, replace(current, debt=current.debt - amount))

    def snapshot(self) -> Mapping[Address, Position]:
        """Copy of the table. Positions are frozen, so a shallow copy is enough."""
        return dict(self._positions)

    def restore(self, snapshot: Mapping[Address, Position]) -> None:
        """Replace the table with a snapshot taken by `snapshot()`."""
        self._positions = {acct: pos for acct, pos in snapshot.items() if not pos.is_empty}

    def accounts(self) -> List[Address]:
        """Accounts with a non-zero position, sorted."""
        return sorted(self._positions)

    def total_collateral(self) -> Amount:
        return sum(pos.collateral for pos in self._positions.values())

    def total_debt(self) -> Amount:
        return sum(pos.debt for pos in self._positions.values())

    def __len__(self) -> int:
        return len(self._positions)

    def __repr__(self) -> str:
        return f"PositionLedger({len(self._positions)} entries)"
