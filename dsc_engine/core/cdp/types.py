"""Data types for the `cdp` engine.

All types are frozen dataclasses (immutable).

Units/conventions:
- collateral and debt amounts are 18-decimal fixed point ints (1e18 = 1 unit),
- one debt unit is one nominal USD,
- health factors are small dimensionless ints (see ``math.health_factor``).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique
from typing import Union

from .errors import EngineError


@unique
class Action(Enum):
    """One member per mutating entry point."""
    DEPOSIT_COLLATERAL = "deposit_collateral"
    MINT_DEBT = "mint_debt"
    REDEEM_COLLATERAL = "redeem_collateral"
    BURN_DEBT = "burn_debt"
    DEPOSIT_AND_MINT = "deposit_and_mint"
    REDEEM_AND_BURN = "redeem_and_burn"
    LIQUIDATE = "liquidate"


@unique
class PositionBand(Enum):
    """Effective state of a position, derived from its health factor."""
    NO_DEBT = "no_debt"            # sentinel-max
    HEALTHY = "healthy"            # >= 4
    AT_RISK = "at_risk"            # [3, 4): only reachable through price moves
    LIQUIDATABLE = "liquidatable"  # < 3


@dataclass(frozen=True)
class CollateralDeposited:
    account: str
    token: str
    amount: int


@dataclass(frozen=True)
class CollateralRedeemed:
    redeemed_from: str
    redeemed_to: str
    token: str
    amount: int


@dataclass(frozen=True)
class Liquidation:
    account: str
    liquidator: str
    debt_repaid: int
    collateral_token: str
    collateral_seized: int


Record = Union[CollateralDeposited, CollateralRedeemed, Liquidation]


@dataclass(frozen=True)
class OpResult:
    """Result of a single engine operation."""

    accepted: bool
    action: Action
    records: tuple[Record, ...] = ()
    error: EngineError | None = None
