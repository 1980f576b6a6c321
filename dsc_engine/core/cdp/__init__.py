"""`cdp`: single-collateral debt engine with health-factor gating and liquidation.

- integer-only valuation with floor rounding at every step,
- pure guards returning tagged errors,
- a stateful engine shell with an all-or-nothing rollback scope per call.

Public API:
- `DSCEngine(collateral_token, price_feed, debt_token, address=...)`
- `DSCEngine.<operation>(...) -> OpResult`
- `result_or_raise(result) -> OpResult` (raises `EngineRejected` on rejection)
"""

from .engine import DSCEngine, NonReentrantGuard, result_or_raise
from .errors import EngineError, EngineRejected, ErrorCode
from .math import (
    LIQUIDATION_BONUS,
    LIQUIDATION_HEALTH_FACTOR,
    MAX_HEALTH_FACTOR,
    MIN_HEALTH_FACTOR,
    PRECISION,
)
from .types import (
    Action,
    CollateralDeposited,
    CollateralRedeemed,
    Liquidation,
    OpResult,
    PositionBand,
    Record,
)

__all__ = [
    "DSCEngine",
    "NonReentrantGuard",
    "result_or_raise",
    "EngineError",
    "EngineRejected",
    "ErrorCode",
    "LIQUIDATION_BONUS",
    "LIQUIDATION_HEALTH_FACTOR",
    "MAX_HEALTH_FACTOR",
    "MIN_HEALTH_FACTOR",
    "PRECISION",
    "Action",
    "CollateralDeposited",
    "CollateralRedeemed",
    "Liquidation",
    "OpResult",
    "PositionBand",
    "Record",
]
