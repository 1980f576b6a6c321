"""Property tests: random operation sequences against a deployed engine.

Uses Hypothesis to fuzz interleavings of position operations, liquidations and
price moves, and checks after every step that conservation invariants hold,
that rejected calls change nothing, and that accepted mints and redemptions
leave the account at or above the minimum health factor.
"""

from __future__ import annotations

import importlib.util

import pytest

if importlib.util.find_spec("hypothesis") is None:  # pragma: no cover
    pytest.skip("hypothesis not installed", allow_module_level=True)

import hypothesis.strategies as st
from hypothesis import given, settings

from dsc_engine.core.cdp import MIN_HEALTH_FACTOR
from dsc_engine.integration import deploy

E18 = 10**18
E8 = 10**8
ACCOUNTS = ("alice", "bob", "carol")
FUNDING = 1_000 * E18
DEBT_ALLOWANCE = 20_000 * E18

# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

amounts = st.one_of(
    st.integers(min_value=0, max_value=5),
    st.integers(min_value=0, max_value=50).map(lambda n: n * E18),
    st.integers(min_value=0, max_value=50 * E18),
)
account_idx = st.integers(min_value=0, max_value=len(ACCOUNTS) - 1)

steps = st.one_of(
    st.tuples(st.just("deposit"), account_idx, amounts),
    st.tuples(st.just("mint"), account_idx, st.integers(min_value=0, max_value=60_000).map(lambda n: n * E18)),
    st.tuples(st.just("redeem"), account_idx, amounts),
    st.tuples(st.just("burn"), account_idx, st.integers(min_value=0, max_value=30_000 * E18)),
    st.tuples(st.just("price"), st.integers(min_value=100, max_value=4_000)),
    st.tuples(st.just("liquidate"), account_idx, account_idx, st.integers(min_value=0, max_value=20_000 * E18)),
)


def _fresh_system():
    system = deploy()
    engine = system.engine
    for acct in ACCOUNTS:
        system.collateral.mint_to(acct, FUNDING)
        system.collateral.approve(engine.address, FUNDING, caller=acct)
        system.debt_token.approve(engine.address, DEBT_ALLOWANCE, caller=acct)
    return system


def _observe(system):
    engine = system.engine
    return (
        tuple(engine.get_position(a) for a in ACCOUNTS),
        tuple(system.collateral.balance_of(a) for a in ACCOUNTS),
        tuple(system.debt_token.balance_of(a) for a in ACCOUNTS),
        tuple(system.collateral.allowance(a, engine.address) for a in ACCOUNTS),
        tuple(system.debt_token.allowance(a, engine.address) for a in ACCOUNTS),
        system.debt_token.total_supply(),
        engine.custodied_collateral(),
        len(engine.records),
    )


def _apply(system, step):
    engine = system.engine
    weth = system.collateral.address
    kind = step[0]
    if kind == "deposit":
        return engine.deposit_collateral(ACCOUNTS[step[1]], weth, step[2])
    if kind == "mint":
        return engine.mint_debt(ACCOUNTS[step[1]], step[2])
    if kind == "redeem":
        return engine.redeem_collateral(ACCOUNTS[step[1]], weth, step[2])
    if kind == "burn":
        return engine.burn_debt(ACCOUNTS[step[1]], step[2])
    if kind == "liquidate":
        return engine.liquidate(ACCOUNTS[step[1]], weth, ACCOUNTS[step[2]], step[3])
    system.price_feed.update_price(step[1] * E8)
    return None


class TestRandomSequences:
    @given(sequence=st.lists(steps, min_size=1, max_size=40))
    @settings(max_examples=200, deadline=5000)
    def test_invariants_hold(self, sequence):
        system = _fresh_system()
        engine = system.engine

        for i, step in enumerate(sequence):
            before = _observe(system)
            result = _apply(system, step)

            assert engine.check_invariants() == [], f"step {i} {step}: invariants violated"
            assert engine.custodied_collateral() == engine.total_collateral(), f"step {i} {step}"

            if result is None:
                continue
            if not result.accepted:
                assert _observe(system) == before, f"step {i} {step}: rejected call changed state"
                continue

            kind = step[0]
            if kind in ("mint", "redeem"):
                assert engine.health_factor(ACCOUNTS[step[1]]) >= MIN_HEALTH_FACTOR, f"step {i} {step}"
            if kind == "liquidate":
                debt_before = before[0][step[2]].debt
                assert engine.get_debt_balance(ACCOUNTS[step[2]]) == debt_before - step[3]

    @given(sequence=st.lists(steps, min_size=1, max_size=40))
    @settings(max_examples=100, deadline=5000)
    def test_ledger_matches_token_flows(self, sequence):
        system = _fresh_system()
        engine = system.engine

        for step in sequence:
            _apply(system, step)

        # Collateral is conserved between wallets and the engine.
        wallets = sum(system.collateral.balance_of(a) for a in ACCOUNTS)
        assert wallets + engine.custodied_collateral() == FUNDING * len(ACCOUNTS)
        # Every outstanding debt token is backed by a ledger entry.
        held = sum(system.debt_token.balance_of(a) for a in ACCOUNTS)
        assert held == engine.total_debt() == system.debt_token.total_supply()
