"""
dsc-engine: collateralized-debt accounting engine for a dollar-pegged token
"""

__version__ = "0.1.0"
