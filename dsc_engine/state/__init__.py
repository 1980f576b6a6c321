"""
State management for the DSC engine
"""

from .ledger import Address, Amount, Position, PositionLedger

__all__ = [
    "Address",
    "Amount",
    "Position",
    "PositionLedger",
]
