"""Stateful engine for `cdp`: the imperative shell around the pure core.

``DSCEngine`` owns the position ledger and talks to three collaborators: the
collateral token, the debt-token issuer and the price feed. Every mutating
entry point:

1. Acquires the engine-wide non-reentrancy guard.
2. Runs guards from ``guards.py`` (no state touched on rejection).
3. Updates the ledger, then checks the health factor on the POST-state.
4. Moves value through the collaborators.
5. Returns an ``OpResult`` (accepted, or rejected with an ``EngineError``).

A call is all-or-nothing. Each one runs inside an ``_AtomicUnit`` that holds
a ledger snapshot, an undo stack of compensating collaborator calls and the
records emitted so far. A rejection or a collaborator exception unwinds the
undo stack, restores the snapshot and drops the records; records are only
published once the whole call has succeeded.
"""

from __future__ import annotations

import functools
import logging
import threading
from typing import TYPE_CHECKING, Callable, List, Optional

from ...state.ledger import Address, Position, PositionLedger
from .errors import EngineError, EngineRejected, ErrorCode
from .guards import (
    guard_allowed_token,
    guard_amount_positive,
    guard_enough_collateral,
    guard_enough_debt,
    guard_health_floor,
    guard_liquidatable,
)
from .invariants import check_all
from .math import (
    classify,
    collateral_value_usd,
    debt_units,
    health_factor,
    liquidation_seize_amount,
    scale_price,
    token_amount_from_usd,
    usd_value,
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

if TYPE_CHECKING:
    from ...integration.interfaces import CollateralToken, DebtToken, PriceFeed

logger = logging.getLogger(__name__)

DEFAULT_ENGINE_ADDRESS = "dsc-engine"

RecordListener = Callable[[Record], None]


class NonReentrantGuard:
    """Engine-wide mutex that fails fast on re-entry from the owning thread.

    Other threads block until the guard is released, so mutating operations
    are linearized.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._held = threading.local()

    def acquire(self) -> bool:
        if getattr(self._held, "value", False):
            return False
        self._lock.acquire()
        self._held.value = True
        return True

    def release(self) -> None:
        self._held.value = False
        self._lock.release()

    @property
    def entered(self) -> bool:
        return self._lock.locked()


class _AtomicUnit:
    """Rollback scope of one engine call."""

    def __init__(self, ledger: PositionLedger) -> None:
        self._ledger = ledger
        self._snapshot = ledger.snapshot()
        self._undo: List[Callable[[], None]] = []
        self.records: List[Record] = []

    def on_rollback(self, fn: Callable[[], None]) -> None:
        self._undo.append(fn)

    def emit(self, record: Record) -> None:
        self.records.append(record)

    def rollback(self) -> None:
        try:
            while self._undo:
                self._undo.pop()()
        finally:
            self._ledger.restore(self._snapshot)
            self.records.clear()


def mutating(action: Action):
    """Mark an engine method as a mutating operation.

    The wrapped method returns ``EngineError | None``; the wrapper turns that
    into an ``OpResult`` and owns guard acquisition, rollback and publishing.
    """

    def decorate(method: Callable[..., Optional[EngineError]]) -> Callable[..., OpResult]:
        @functools.wraps(method)
        def wrapper(self: "DSCEngine", *args, **kwargs) -> OpResult:
            if not self._guard.acquire():
                error = EngineError(ErrorCode.REENTRANT_CALL)
                self._log_rejection(action, error)
                return OpResult(accepted=False, action=action, error=error)
            try:
                tx = _AtomicUnit(self._ledger)
                self._tx = tx
                try:
                    error = method(self, *args, **kwargs)
                except Exception:
                    logger.exception(
                        "%s aborted by collaborator error, rolling back",
                        action.value,
                        extra={"event": "cdp.aborted", "action": action.value},
                    )
                    tx.rollback()
                    raise
                if error is not None:
                    tx.rollback()
                    self._log_rejection(action, error)
                    return OpResult(accepted=False, action=action, error=error)
                records = tuple(tx.records)
            finally:
                self._tx = None
                self._guard.release()

            logger.info(
                "%s accepted",
                action.value,
                extra={"event": "cdp.accepted", "action": action.value, "records": len(records)},
            )
            self._publish(records)
            return OpResult(accepted=True, action=action, records=records)

        return wrapper

    return decorate


class DSCEngine:
    """Single-collateral CDP engine.

    Collaborator references are fixed at construction. The ledger is private;
    all reads go through the query methods below and all writes through the
    mutating operations.
    """

    def __init__(
        self,
        collateral_token: "CollateralToken",
        price_feed: "PriceFeed",
        debt_token: "DebtToken",
        address: Address = DEFAULT_ENGINE_ADDRESS,
    ):
        self._collateral = collateral_token
        self._feed = price_feed
        self._debt = debt_token
        self._address = address
        self._ledger = PositionLedger()
        self._guard = NonReentrantGuard()
        self._tx: Optional[_AtomicUnit] = None
        self._records: List[Record] = []
        self._listeners: List[RecordListener] = []

    # -- Addresses -----------------------------------------------------------

    @property
    def address(self) -> Address:
        return self._address

    @property
    def collateral_token(self) -> Address:
        return self._collateral.address

    @property
    def debt_token(self) -> Address:
        return self._debt.address

    @property
    def price_feed(self) -> Address:
        return self._feed.address

    # -- Observability -------------------------------------------------------

    @property
    def records(self) -> tuple[Record, ...]:
        """Published records, oldest first."""
        return tuple(self._records)

    def subscribe(self, listener: RecordListener) -> None:
        self._listeners.append(listener)

    def _publish(self, records: tuple[Record, ...]) -> None:
        for record in records:
            self._records.append(record)
            for listener in self._listeners:
                try:
                    listener(record)
                except Exception:
                    # The call is already committed; a broken listener cannot undo it.
                    logger.exception("record listener failed on %r", record)

    def _log_rejection(self, action: Action, error: EngineError) -> None:
        logger.warning(
            "%s rejected: %s",
            action.value,
            error,
            extra={
                "event": "cdp.rejected",
                "action": action.value,
                "reason": error.code.value,
                "health_factor": error.health_factor,
            },
        )

    # -- Ledger queries ------------------------------------------------------

    def get_position(self, account: Address) -> Position:
        return self._ledger.get(account)

    def get_collateral_balance(self, account: Address) -> int:
        return self._ledger.get(account).collateral

    def get_debt_balance(self, account: Address) -> int:
        return self._ledger.get(account).debt

    def accounts(self) -> List[Address]:
        return self._ledger.accounts()

    def total_collateral(self) -> int:
        return self._ledger.total_collateral()

    def total_debt(self) -> int:
        return self._ledger.total_debt()

    def custodied_collateral(self) -> int:
        """Collateral-token balance actually held by the engine."""
        return self._collateral.balance_of(self._address)

    def debt_token_supply(self) -> int:
        return self._debt.total_supply()

    # -- Valuation -----------------------------------------------------------

    def _price_scaled(self) -> int:
        price, _updated_at = self._feed.latest_price()
        return scale_price(price, self._feed.decimals())

    def get_usd_value(self, amount: int) -> int:
        """18-decimal USD value of `amount` collateral at the current price."""
        return usd_value(self._price_scaled(), amount)

    def get_token_amount_from_usd(self, usd_amount: int) -> int:
        """Collateral equivalent of an 18-decimal USD amount at the current price."""
        return token_amount_from_usd(self._price_scaled(), usd_amount)

    def collateral_value_usd(self, account: Address) -> int:
        return collateral_value_usd(self._price_scaled(), self._ledger.get(account).collateral)

    def debt_units(self, account: Address) -> int:
        return debt_units(self._ledger.get(account).debt)

    def health_factor(self, account: Address) -> int:
        units = self.debt_units(account)
        if units == 0:
            # No oracle read needed for a debt-free position
            return health_factor(0, 0)
        return health_factor(self.collateral_value_usd(account), units)

    def position_band(self, account: Address) -> PositionBand:
        return classify(self.health_factor(account))

    def get_account_information(self, account: Address) -> tuple[int, int]:
        """Return ``(debt_balance, collateral_value_usd)``."""
        return self.get_debt_balance(account), self.collateral_value_usd(account)

    # -- Invariants ----------------------------------------------------------

    def check_invariants(self) -> List[str]:
        """Violated invariant IDs (empty = all pass)."""
        return check_all(self)

    # -- Position operations -------------------------------------------------

    @mutating(Action.DEPOSIT_COLLATERAL)
    def deposit_collateral(self, account: Address, token: Address, amount: int) -> Optional[EngineError]:
        return self._deposit(account, token, amount)

    @mutating(Action.MINT_DEBT)
    def mint_debt(self, account: Address, amount: int) -> Optional[EngineError]:
        return self._mint(account, amount)

    @mutating(Action.REDEEM_COLLATERAL)
    def redeem_collateral(self, account: Address, token: Address, amount: int) -> Optional[EngineError]:
        return self._redeem(account, token, amount)

    @mutating(Action.BURN_DEBT)
    def burn_debt(self, account: Address, amount: int) -> Optional[EngineError]:
        return self._burn(account, amount)

    @mutating(Action.DEPOSIT_AND_MINT)
    def deposit_and_mint(
        self, account: Address, token: Address, collateral_amount: int, debt_amount: int
    ) -> Optional[EngineError]:
        return self._deposit(account, token, collateral_amount) or self._mint(account, debt_amount)

    @mutating(Action.REDEEM_AND_BURN)
    def redeem_and_burn(
        self, account: Address, token: Address, collateral_amount: int, debt_amount: int
    ) -> Optional[EngineError]:
        # Burn first so the redeem's health check sees the reduced debt.
        return self._burn(account, debt_amount) or self._redeem(account, token, collateral_amount)

    def _deposit(self, account: Address, token: Address, amount: int) -> Optional[EngineError]:
        err = guard_amount_positive(amount) or guard_allowed_token(token, self._collateral.address)
        if err is not None:
            return err

        self._ledger.add_collateral(account, amount)
        self._tx.emit(CollateralDeposited(account=account, token=token, amount=amount))

        if not self._pull(self._collateral, account, amount):
            return EngineError(ErrorCode.TRANSFER_FAILED)
        self._tx.on_rollback(lambda: self._send_collateral_or_raise(account, amount))
        return None

    def _mint(self, account: Address, amount: int) -> Optional[EngineError]:
        err = guard_amount_positive(amount)
        if err is not None:
            return err

        self._ledger.add_debt(account, amount)
        err = guard_health_floor(self.health_factor(account))
        if err is not None:
            return err

        # Minting is always the last collaborator call of an operation.
        if not self._debt.mint(account, amount, caller=self._address):
            return EngineError(ErrorCode.MINT_FAILED)
        return None

    def _redeem(self, account: Address, token: Address, amount: int) -> Optional[EngineError]:
        err = guard_amount_positive(amount) or guard_allowed_token(token, self._collateral.address)
        if err is not None:
            return err
        err = guard_enough_collateral(self._ledger.get(account), amount)
        if err is not None:
            return err

        self._ledger.sub_collateral(account, amount)
        self._tx.emit(
            CollateralRedeemed(redeemed_from=account, redeemed_to=account, token=token, amount=amount)
        )
        err = guard_health_floor(self.health_factor(account))
        if err is not None:
            return err

        if not self._collateral.transfer(account, amount, caller=self._address):
            return EngineError(ErrorCode.TRANSFER_FAILED)
        return None

    def _burn(self, account: Address, amount: int) -> Optional[EngineError]:
        err = guard_amount_positive(amount)
        if err is not None:
            return err
        err = guard_enough_debt(self._ledger.get(account), amount)
        if err is not None:
            return err

        # Burning never lowers the health factor; no post-check.
        self._ledger.sub_debt(account, amount)
        return self._pull_and_burn(account, amount)

    def _pull_and_burn(self, payer: Address, amount: int) -> Optional[EngineError]:
        if not self._pull(self._debt, payer, amount):
            return EngineError(ErrorCode.TRANSFER_FAILED)
        self._tx.on_rollback(lambda: self._return_debt_or_raise(payer, amount))

        self._debt.burn(amount, caller=self._address)
        self._tx.on_rollback(lambda: self._debt.mint(self._address, amount, caller=self._address))
        return None

    def _pull(self, token: "CollateralToken", owner: Address, amount: int) -> bool:
        """``transfer_from`` owner to the engine; rollback also reinstates the spent allowance."""
        allowed = token.allowance(owner, self._address)
        if not token.transfer_from(owner, self._address, amount, caller=self._address):
            return False
        self._tx.on_rollback(lambda: token.approve(self._address, allowed, caller=owner))
        return True

    def _send_collateral_or_raise(self, to: Address, amount: int) -> None:
        if not self._collateral.transfer(to, amount, caller=self._address):
            raise RuntimeError(f"compensating collateral transfer to {to} failed")

    def _return_debt_or_raise(self, to: Address, amount: int) -> None:
        if not self._debt.transfer(to, amount, caller=self._address):
            raise RuntimeError(f"compensating debt-token transfer to {to} failed")

    # -- Liquidation ---------------------------------------------------------

    @mutating(Action.LIQUIDATE)
    def liquidate(
        self, liquidator: Address, token: Address, account: Address, debt_to_cover: int
    ) -> Optional[EngineError]:
        """Repay `debt_to_cover` of `account`'s debt and seize collateral plus a 10% bonus.

        The account must be strictly below the liquidation health factor. The
        position is not re-checked afterwards: a partial liquidation may leave
        it liquidatable, and further calls are the remedy.
        """
        err = guard_amount_positive(debt_to_cover) or guard_allowed_token(token, self._collateral.address)
        if err is not None:
            return err
        err = guard_liquidatable(self.health_factor(account))
        if err is not None:
            return err

        collateral_equivalent = token_amount_from_usd(self._price_scaled(), debt_to_cover)
        to_seize = liquidation_seize_amount(collateral_equivalent)

        position = self._ledger.get(account)
        err = guard_enough_collateral(position, to_seize) or guard_enough_debt(position, debt_to_cover)
        if err is not None:
            return err

        self._ledger.sub_debt(account, debt_to_cover)
        self._ledger.sub_collateral(account, to_seize)
        self._tx.emit(
            CollateralRedeemed(redeemed_from=account, redeemed_to=liquidator, token=token, amount=to_seize)
        )

        err = self._pull_and_burn(liquidator, debt_to_cover)
        if err is not None:
            return err
        if not self._collateral.transfer(liquidator, to_seize, caller=self._address):
            return EngineError(ErrorCode.TRANSFER_FAILED)

        self._tx.emit(
            Liquidation(
                account=account,
                liquidator=liquidator,
                debt_repaid=debt_to_cover,
                collateral_token=token,
                collateral_seized=to_seize,
            )
        )
        logger.info(
            "liquidated %s: repaid=%d seized=%d",
            account,
            debt_to_cover,
            to_seize,
            extra={"event": "cdp.liquidation", "account": account, "liquidator": liquidator},
        )
        return None

    def __repr__(self) -> str:
        return f"DSCEngine({self._address}, positions={len(self._ledger)})"


def result_or_raise(result: OpResult) -> OpResult:
    """Return `result` if accepted, else raise ``EngineRejected``."""
    if result.accepted:
        return result
    raise EngineRejected(result.error)
