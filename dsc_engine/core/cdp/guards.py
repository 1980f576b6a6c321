"""Guard functions for `cdp`.

One pure function per precondition. Each returns None when the condition
holds, or the ``EngineError`` the operation must be rejected with.
"""

from __future__ import annotations

from ...state.ledger import Position
from .errors import EngineError, ErrorCode
from .math import LIQUIDATION_HEALTH_FACTOR, MIN_HEALTH_FACTOR


def guard_amount_positive(amount: int) -> EngineError | None:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        return EngineError(ErrorCode.AMOUNT_MUST_BE_POSITIVE)
    return None


def guard_allowed_token(token: str, allowed_token: str) -> EngineError | None:
    if token != allowed_token:
        return EngineError(ErrorCode.TOKEN_NOT_ALLOWED)
    return None


def guard_enough_collateral(position: Position, amount: int) -> EngineError | None:
    if amount > position.collateral:
        return EngineError(ErrorCode.NOT_ENOUGH_COLLATERAL)
    return None


def guard_enough_debt(position: Position, amount: int) -> EngineError | None:
    if amount > position.debt:
        return EngineError(ErrorCode.NOT_ENOUGH_DEBT)
    return None


def guard_health_floor(factor: int) -> EngineError | None:
    """Post-mutation check for mint / redeem."""
    if factor < MIN_HEALTH_FACTOR:
        return EngineError(ErrorCode.HEALTH_FACTOR_BELOW_THRESHOLD, health_factor=factor)
    return None


def guard_liquidatable(factor: int) -> EngineError | None:
    """Liquidation eligibility: strictly below the liquidation factor."""
    if factor >= LIQUIDATION_HEALTH_FACTOR:
        return EngineError(ErrorCode.HEALTH_FACTOR_ABOVE_THRESHOLD, health_factor=factor)
    return None
