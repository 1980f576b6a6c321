"""Tests for dsc_engine/integration/deploy.py: wiring a fresh system."""

import pytest

from dsc_engine.config import DeploymentConfig, PriceFeedConfig
from dsc_engine.integration import TokenError, deploy


class TestDeploy:
    def test_defaults(self):
        system = deploy()
        engine = system.engine
        assert engine.collateral_token == system.collateral.address == "weth"
        assert engine.debt_token == system.debt_token.address == "dsc"
        assert engine.price_feed == system.price_feed.address
        assert engine.get_usd_value(10**18) == 2000 * 10**18

    def test_engine_owns_debt_token(self):
        system = deploy(deployer="ops")
        assert system.debt_token.owner == system.engine.address
        with pytest.raises(TokenError, match="NotOwner"):
            system.debt_token.mint("ops", 1, caller="ops")

    def test_custom_feed(self):
        config = DeploymentConfig(price_feed=PriceFeedConfig(address="feed", decimals=18, initial_price=3 * 10**18))
        system = deploy(config)
        assert system.engine.get_usd_value(10**18) == 3 * 10**18
        assert system.engine.check_invariants() == []
