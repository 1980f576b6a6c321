"""Shared test fixtures: a freshly deployed system and funded accounts."""
from __future__ import annotations

import pytest

from dsc_engine.integration import Deployment, deploy

E18 = 10**18
E8 = 10**8

USER = "user"
LIQUIDATOR = "liquidator"

STARTING_COLLATERAL = 10 * E18
COLLATERAL_AMOUNT = 2 * E18  # $4000 at the default 2000 USD price
AMOUNT_TO_MINT = 2000 * E18  # exactly 200% collateralized


def price_e8(usd: int) -> int:
    """Whole-dollar price in feed units (8 decimals)."""
    return usd * E8


# ---------------------------------------------------------------------------
# System fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def system() -> Deployment:
    return deploy()


@pytest.fixture()
def engine(system):
    return system.engine


@pytest.fixture()
def weth(system):
    return system.collateral


@pytest.fixture()
def dsc(system):
    return system.debt_token


@pytest.fixture()
def feed(system):
    return system.price_feed


# ---------------------------------------------------------------------------
# Account fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def funded_user(engine, weth) -> str:
    """USER holds collateral and has approved the engine for all of it."""
    weth.mint_to(USER, STARTING_COLLATERAL)
    weth.approve(engine.address, STARTING_COLLATERAL, caller=USER)
    return USER


@pytest.fixture()
def deposited(engine, weth, funded_user) -> str:
    result = engine.deposit_collateral(funded_user, weth.address, COLLATERAL_AMOUNT)
    assert result.accepted
    return funded_user


@pytest.fixture()
def minted(engine, weth, funded_user) -> str:
    """USER at exactly health factor 4: 2 WETH ($4000) against 2000 DSC."""
    result = engine.deposit_and_mint(funded_user, weth.address, COLLATERAL_AMOUNT, AMOUNT_TO_MINT)
    assert result.accepted
    return funded_user


@pytest.fixture()
def funded_liquidator(engine, weth, dsc) -> str:
    """LIQUIDATOR holds 2000 DSC, backed by a deep position of its own, and has approved the engine."""
    weth.mint_to(LIQUIDATOR, 100 * E18)
    weth.approve(engine.address, 100 * E18, caller=LIQUIDATOR)
    result = engine.deposit_and_mint(LIQUIDATOR, weth.address, 100 * E18, AMOUNT_TO_MINT)
    assert result.accepted
    dsc.approve(engine.address, AMOUNT_TO_MINT, caller=LIQUIDATOR)
    return LIQUIDATOR
