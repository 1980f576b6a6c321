"""
Collaborators and deployment wiring for the DSC engine
"""

from .deploy import Deployment, deploy
from .interfaces import CollateralToken, DebtToken, PriceFeed
from .price_feed import StaticPriceFeed
from .tokens import ZERO_ADDRESS, Erc20Token, TokenError
from .tokens import DebtToken as InMemoryDebtToken

__all__ = [
    "Deployment",
    "deploy",
    "CollateralToken",
    "DebtToken",
    "PriceFeed",
    "StaticPriceFeed",
    "ZERO_ADDRESS",
    "Erc20Token",
    "InMemoryDebtToken",
    "TokenError",
]
