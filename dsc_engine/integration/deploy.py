"""
Deployment wiring.

Builds the collateral token, price feed, debt token and engine from a
`DeploymentConfig`, then hands debt-token ownership to the engine so that
only the engine can mint or burn.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..config import DeploymentConfig
from ..core.cdp import DSCEngine
from .price_feed import StaticPriceFeed
from .tokens import DebtToken, Erc20Token

logger = logging.getLogger(__name__)

DEFAULT_DEPLOYER = "deployer"


@dataclass(frozen=True)
class Deployment:
    engine: DSCEngine
    collateral: Erc20Token
    debt_token: DebtToken
    price_feed: StaticPriceFeed


def deploy(config: Optional[DeploymentConfig] = None, deployer: str = DEFAULT_DEPLOYER) -> Deployment:
    """Deploy a fresh in-memory system."""
    config = config or DeploymentConfig()

    collateral = Erc20Token(
        name=config.collateral.name,
        symbol=config.collateral.symbol,
        address=config.collateral.address,
        decimals=config.collateral.decimals,
    )
    price_feed = StaticPriceFeed(
        address=config.price_feed.address,
        decimals=config.price_feed.decimals,
        initial_price=config.price_feed.initial_price,
    )
    debt_token = DebtToken(
        name=config.debt_token.name,
        symbol=config.debt_token.symbol,
        address=config.debt_token.address,
        owner=deployer,
    )
    engine = DSCEngine(
        collateral_token=collateral,
        price_feed=price_feed,
        debt_token=debt_token,
        address=config.engine.address,
    )
    debt_token.transfer_ownership(engine.address, caller=deployer)

    logger.info(
        "deployed %s: collateral=%s debt=%s feed=%s",
        engine.address,
        collateral.address,
        debt_token.address,
        price_feed.address,
    )
    return Deployment(engine=engine, collateral=collateral, debt_token=debt_token, price_feed=price_feed)
