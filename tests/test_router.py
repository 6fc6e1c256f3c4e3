"""Tests for router revert classification and error formatting"""

import pytest
from web3.exceptions import ContractLogicError

from amm_liquidity.contracts.router import classify_revert
from amm_liquidity.core.exceptions import (
    AMMError,
    ApprovalFailedError,
    PairNotFoundError,
    TransactionError,
    TransactionRevertedError,
)
from amm_liquidity.utils.transactions import revert_reason


class TestClassifyRevert:

    @pytest.mark.parametrize("reason,bound", [
        ("UniswapV2Router: INSUFFICIENT_A_AMOUNT", "a"),
        ("UniswapV2Router: INSUFFICIENT_B_AMOUNT", "b"),
        ("UniswapV2Router: EXPIRED", "deadline"),
        ("UniswapV2: INSUFFICIENT_LIQUIDITY_MINTED", "liquidity"),
        ("UniswapV2: INSUFFICIENT_LIQUIDITY_BURNED", "liquidity"),
        ("TransferHelper: TRANSFER_FROM_FAILED", "allowance"),
        ("ds-math-sub-underflow", "balance"),
    ])
    def test_known_reasons(self, reason, bound):
        assert classify_revert(reason) == bound

    @pytest.mark.parametrize("reason", [None, "", "out of gas", "UniswapV2: K"])
    def test_unknown_reasons(self, reason):
        assert classify_revert(reason) is None


class TestRevertReason:

    def test_strips_prefix(self):
        exc = ContractLogicError("execution reverted: UniswapV2Router: EXPIRED")
        assert revert_reason(exc) == "UniswapV2Router: EXPIRED"

    def test_plain_message(self):
        assert revert_reason(ContractLogicError("boom")) == "boom"


class TestErrorTaxonomy:

    def test_str_carries_labels(self):
        error = TransactionRevertedError(
            "addLiquidityETH reverted in simulation",
            reason="UniswapV2Router: INSUFFICIENT_B_AMOUNT",
            step="Submitted", leg="native", bound="amountETHMin",
        )
        text = str(error)
        assert "step=Submitted" in text
        assert "leg=native" in text
        assert "bound=amountETHMin" in text
        assert "reason=UniswapV2Router: INSUFFICIENT_B_AMOUNT" in text

    def test_reason_not_repeated(self):
        error = TransactionRevertedError("reverted: UniswapV2Router: EXPIRED",
                                         reason="UniswapV2Router: EXPIRED")
        assert str(error) == "reverted: UniswapV2Router: EXPIRED"

    def test_hierarchy(self):
        assert issubclass(ApprovalFailedError, TransactionError)
        assert issubclass(TransactionRevertedError, TransactionError)
        assert issubclass(TransactionError, AMMError)
        assert issubclass(PairNotFoundError, AMMError)

    def test_pair_not_found_keeps_tokens(self):
        error = PairNotFoundError("USDC", "DAI")
        assert (error.token_a, error.token_b) == ("USDC", "DAI")
        assert "USDC/DAI" in str(error)
