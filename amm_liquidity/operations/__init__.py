"""High-level operations for liquidity provisioning and withdrawal"""

from .flow import FlowState, LiquidityFlow
from .liquidity import LiquidityOrchestrator
from .quotes import (
    QuoteCalculator,
    as_tolerance,
    expected_withdrawal,
    minimum_amount,
    rescale_minimum,
    safe_withdrawal_amount,
    tolerance_from_bps,
    validate_tolerance,
)
from .requests import (
    BalanceSnapshot,
    LiquidityRequest,
    NativeLiquidityRequest,
    WithdrawalRequest,
)

__all__ = [
    "FlowState",
    "LiquidityFlow",
    "LiquidityOrchestrator",
    "QuoteCalculator",
    "as_tolerance",
    "expected_withdrawal",
    "minimum_amount",
    "rescale_minimum",
    "safe_withdrawal_amount",
    "tolerance_from_bps",
    "validate_tolerance",
    "BalanceSnapshot",
    "LiquidityRequest",
    "NativeLiquidityRequest",
    "WithdrawalRequest",
]
