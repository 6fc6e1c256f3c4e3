"""Utility modules for gas and transactions"""

from .gas import GasConfig, GasManager, GasPriceTooHighError
from .transactions import TransactionBuilder, revert_reason

__all__ = [
    "GasConfig",
    "GasManager",
    "GasPriceTooHighError",
    "TransactionBuilder",
    "revert_reason",
]
