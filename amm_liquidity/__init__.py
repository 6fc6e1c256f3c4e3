"""
AMM Liquidity - approve, add and remove liquidity on Uniswap V2 style pools
"""

from .core.connection import Web3Manager
from .core.config import Config
from .core.exceptions import AMMError, ConfigError, ConnectionError, TransactionError
from .operations.liquidity import LiquidityOrchestrator
from .operations.quotes import QuoteCalculator

__version__ = "0.1.0"
__all__ = [
    "Web3Manager",
    "Config",
    "AMMError",
    "ConfigError",
    "ConnectionError",
    "TransactionError",
    "LiquidityOrchestrator",
    "QuoteCalculator",
]
