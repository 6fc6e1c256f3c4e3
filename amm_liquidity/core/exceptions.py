"""Custom exceptions for AMM liquidity operations"""


class AMMError(Exception):
    """Base exception for all AMM errors"""
    pass


class ConfigError(AMMError):
    """Configuration-related errors"""
    pass


class ConnectionError(AMMError):
    """Web3 connection errors"""
    pass


class InvalidToleranceError(AMMError, ValueError):
    """Slippage tolerance outside the accepted range"""
    pass


class InsufficientBalanceError(AMMError):
    """Insufficient token or liquidity-token balance"""
    pass


class PoolError(AMMError):
    """Pool-related errors (not found, not initialized, etc.)"""
    pass


class PairNotFoundError(PoolError):
    """Factory has no pair for the requested tokens"""

    def __init__(self, token_a, token_b):
        super().__init__(f"No pair exists for {token_a}/{token_b}")
        self.token_a = token_a
        self.token_b = token_b


class ClampInvalidatesMinimumError(AMMError):
    """Withdrawal was clamped below what the caller's minimums assumed"""

    def __init__(self, requested, clamped, minimums):
        super().__init__(
            f"Withdrawal clamped from {requested} to {clamped} liquidity; "
            f"minimums {minimums} were computed for the original amount"
        )
        self.requested = requested
        self.clamped = clamped
        self.minimums = minimums


class FlowStateError(AMMError):
    """Invalid liquidity flow state transition"""
    pass


class TransactionError(AMMError):
    """
    Transaction execution errors.

    Attributes:
        reason: Revert reason string from the node, when available
        tx_hash: Hash of the mined transaction, when it got that far
        step: Flow state the failure occurred in ("Approving" or "Submitted")
        leg: Which side of the pair the failure concerns ("token", "counterparty", "native")
        bound: Name of the violated bound (e.g. "amountTokenMin", "deadline")
    """

    def __init__(self, message, reason=None, tx_hash=None, step=None, leg=None, bound=None):
        super().__init__(message)
        self.message = message
        self.reason = reason
        self.tx_hash = tx_hash
        self.step = step
        self.leg = leg
        self.bound = bound

    def __str__(self):
        parts = [self.message]
        if self.step:
            parts.append(f"step={self.step}")
        if self.leg:
            parts.append(f"leg={self.leg}")
        if self.bound:
            parts.append(f"bound={self.bound}")
        if self.reason and self.reason not in self.message:
            parts.append(f"reason={self.reason}")
        return " | ".join(parts)


class ApprovalFailedError(TransactionError):
    """Token approval transaction failed or reverted"""
    pass


class TransactionRevertedError(TransactionError):
    """Router call reverted on-chain or in simulation"""
    pass
