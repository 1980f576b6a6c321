"""Error types for the `cdp` engine.

Rejections are values: every mutating operation returns an ``OpResult``
whose ``error`` is an ``EngineError`` tagged with an ``ErrorCode``.
``EngineRejected`` exists only for ``result_or_raise()`` callers that
prefer exceptions over ``OpResult`` inspection.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique


@unique
class ErrorCode(Enum):
    # Validation
    AMOUNT_MUST_BE_POSITIVE = "AmountMustBePositive"
    TOKEN_NOT_ALLOWED = "TokenNotAllowed"
    # Insufficient balance
    NOT_ENOUGH_COLLATERAL = "NotEnoughCollateral"
    NOT_ENOUGH_DEBT = "NotEnoughDebt"
    # Solvency invariant (carry the computed health factor)
    HEALTH_FACTOR_BELOW_THRESHOLD = "HealthFactorBelowThreshold"
    HEALTH_FACTOR_ABOVE_THRESHOLD = "HealthFactorAboveThreshold"
    # Collaborator failures
    TRANSFER_FAILED = "TransferFailed"
    MINT_FAILED = "MintFailed"
    # Concurrency
    REENTRANT_CALL = "ReentrantCall"


@dataclass(frozen=True)
class EngineError:
    """Tagged rejection. ``health_factor`` is set for the two health-factor codes."""

    code: ErrorCode
    health_factor: int | None = None

    def __str__(self) -> str:
        if self.health_factor is None:
            return self.code.value
        return f"{self.code.value}({self.health_factor})"


class EngineRejected(Exception):
    """Raised by ``result_or_raise()`` when an operation was rejected."""

    def __init__(self, error: EngineError) -> None:
        self.error = error
        super().__init__(str(error))

    @property
    def code(self) -> ErrorCode:
        return self.error.code
