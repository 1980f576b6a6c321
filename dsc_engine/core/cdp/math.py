"""Pure arithmetic for the `cdp` engine.

Every function is stateless and operates on plain Python ints.

Rounding is always floor (`//`), at every step. Collateral value is reported
in whole dollars and debt in whole units, so the health factor is a small
dimensionless integer: exactly 200% collateralization gives 4, exactly 150%
gives 3.
"""

from __future__ import annotations

from .types import PositionBand

# Fixed-point constants
BALANCE_DECIMALS: int = 18
PRECISION: int = 10**BALANCE_DECIMALS  # 1e18

# Health-factor calibration
HEALTH_FACTOR_SCALE: int = 2
MIN_HEALTH_FACTOR: int = 4  # floor enforced on mint / redeem
LIQUIDATION_HEALTH_FACTOR: int = 3  # liquidation requires strictly below
MAX_HEALTH_FACTOR: int = 2**256 - 1  # sentinel for positions without whole-unit debt

# Liquidation bonus: 10% of the seized collateral equivalent
LIQUIDATION_BONUS: int = 10
LIQUIDATION_PRECISION: int = 100


# -- Oracle helpers ----------------------------------------------------------

def scale_price(price: int, decimals: int) -> int:
    """Oracle price rescaled to 18 decimals: ``price * 10**(18 - decimals)``."""
    if price <= 0:
        raise ValueError(f"oracle price must be positive: {price}")
    if decimals < 0 or decimals > BALANCE_DECIMALS:
        raise ValueError(f"oracle decimals must be in [0, {BALANCE_DECIMALS}]: {decimals}")
    return price * 10 ** (BALANCE_DECIMALS - decimals)


# -- Valuation helpers -------------------------------------------------------

def usd_value(price_scaled: int, amount: int) -> int:
    """USD value of *amount* collateral, 18-decimal: ``price * amount / 1e18``."""
    return (price_scaled * amount) // PRECISION


def collateral_value_usd(price_scaled: int, collateral: int) -> int:
    """Whole-dollar value of *collateral*.

    Two floor divisions by 1e18: the first leaves an 18-decimal USD amount,
    the second truncates it to whole dollars.
    """
    return usd_value(price_scaled, collateral) // PRECISION


def debt_units(debt: int) -> int:
    """Whole debt units; anything below 1e18 is zero."""
    return debt // PRECISION


def health_factor(value_usd: int, units: int) -> int:
    """``value * 2 / units``, or MAX_HEALTH_FACTOR with no whole-unit debt."""
    if units == 0:
        return MAX_HEALTH_FACTOR
    return (value_usd * HEALTH_FACTOR_SCALE) // units


def classify(factor: int) -> PositionBand:
    """Map a health factor onto its band."""
    if factor == MAX_HEALTH_FACTOR:
        return PositionBand.NO_DEBT
    if factor >= MIN_HEALTH_FACTOR:
        return PositionBand.HEALTHY
    if factor >= LIQUIDATION_HEALTH_FACTOR:
        return PositionBand.AT_RISK
    return PositionBand.LIQUIDATABLE


# -- Liquidation helpers -----------------------------------------------------

def token_amount_from_usd(price_scaled: int, usd_amount: int) -> int:
    """Collateral equivalent of an 18-decimal USD amount: ``usd * 1e18 / price``."""
    return (usd_amount * PRECISION) // price_scaled


def liquidation_seize_amount(collateral_equivalent: int) -> int:
    """Collateral equivalent plus the liquidation bonus: ``eq * 110 / 100``."""
    return (collateral_equivalent * (LIQUIDATION_PRECISION + LIQUIDATION_BONUS)) // LIQUIDATION_PRECISION
