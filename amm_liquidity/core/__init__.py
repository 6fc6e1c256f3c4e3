"""Core module - configuration, connection and exceptions"""

from .config import Config
from .connection import Web3Manager
from .exceptions import (
    AMMError,
    ConfigError,
    ConnectionError,
    InvalidToleranceError,
    InsufficientBalanceError,
    PoolError,
    PairNotFoundError,
    ClampInvalidatesMinimumError,
    FlowStateError,
    TransactionError,
    ApprovalFailedError,
    TransactionRevertedError,
)

__all__ = [
    "Config",
    "Web3Manager",
    "AMMError",
    "ConfigError",
    "ConnectionError",
    "InvalidToleranceError",
    "InsufficientBalanceError",
    "PoolError",
    "PairNotFoundError",
    "ClampInvalidatesMinimumError",
    "FlowStateError",
    "TransactionError",
    "ApprovalFailedError",
    "TransactionRevertedError",
]
