"""Invariant checkers for `cdp`.

Each function returns True when the invariant holds, and `check_all()` returns
the list of violated invariant IDs (empty = all pass).

These are global conservation checks across the ledger and the collaborators.
The per-account health floor is enforced by the operations themselves and
cannot be an invariant here: price moves alone can break it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from .engine import DSCEngine


def inv_positions_nonneg(engine: "DSCEngine") -> bool:
    for account in engine.accounts():
        collateral, debt = engine.get_position(account)
        if collateral < 0 or debt < 0:
            return False
    return True


def inv_debt_supply_matches(engine: "DSCEngine") -> bool:
    return engine.debt_token_supply() == engine.total_debt()


def inv_collateral_custodied(engine: "DSCEngine") -> bool:
    return engine.custodied_collateral() >= engine.total_collateral()


# ---------------------------------------------------------------------------
# Registry + check_all
# ---------------------------------------------------------------------------

INVARIANT_REGISTRY: dict[str, Callable[["DSCEngine"], bool]] = {
    "inv_positions_nonneg": inv_positions_nonneg,
    "inv_debt_supply_matches": inv_debt_supply_matches,
    "inv_collateral_custodied": inv_collateral_custodied,
}


def check_all(engine: "DSCEngine") -> list[str]:
    """Return list of violated invariant IDs (empty = all pass)."""
    return [
        inv_id
        for inv_id, check_fn in INVARIANT_REGISTRY.items()
        if not check_fn(engine)
    ]
