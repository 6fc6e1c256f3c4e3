"""Tests for the liquidity flow state machine"""

import pytest

from amm_liquidity.core.exceptions import (
    ApprovalFailedError,
    FlowStateError,
    InsufficientBalanceError,
    TransactionRevertedError,
)
from amm_liquidity.operations.flow import FlowState, LiquidityFlow


class TestLiquidityFlow:

    def test_happy_path(self):
        flow = LiquidityFlow("addLiquidity")
        with flow.stage(FlowState.APPROVING):
            pass
        with flow.stage(FlowState.SUBMITTED):
            pass
        flow.confirm()

        assert flow.state is FlowState.CONFIRMED
        assert flow.finished
        assert [s.value for s in flow.history] == ["Requested", "Approving", "Submitted", "Confirmed"]

    def test_cannot_skip_approval(self):
        flow = LiquidityFlow("addLiquidity")
        with pytest.raises(FlowStateError):
            flow.advance(FlowState.SUBMITTED)

    def test_cannot_confirm_from_approving(self):
        flow = LiquidityFlow("addLiquidity")
        flow.advance(FlowState.APPROVING)
        with pytest.raises(FlowStateError):
            flow.confirm()

    def test_not_restartable(self):
        flow = LiquidityFlow("removeLiquidity")
        flow.advance(FlowState.APPROVING)
        flow.advance(FlowState.REVERTED)
        assert flow.finished
        with pytest.raises(FlowStateError):
            flow.advance(FlowState.APPROVING)

    def test_approval_failure_labels_step(self):
        flow = LiquidityFlow("addLiquidity")
        with pytest.raises(ApprovalFailedError) as exc:
            with flow.stage(FlowState.APPROVING):
                raise ApprovalFailedError("Approval failed")
        assert exc.value.step == "Approving"
        assert flow.state is FlowState.REVERTED

    def test_submission_failure_labels_step(self):
        flow = LiquidityFlow("addLiquidityETH")
        flow.advance(FlowState.APPROVING)
        with pytest.raises(TransactionRevertedError) as exc:
            with flow.stage(FlowState.SUBMITTED):
                raise TransactionRevertedError("reverted", reason="UniswapV2Router: EXPIRED")
        assert exc.value.step == "Submitted"
        assert flow.history[-1] is FlowState.REVERTED

    def test_existing_step_is_kept(self):
        flow = LiquidityFlow("addLiquidity")
        with pytest.raises(ApprovalFailedError) as exc:
            with flow.stage(FlowState.APPROVING):
                raise ApprovalFailedError("Approval failed", step="Custom")
        assert exc.value.step == "Custom"

    def test_other_errors_abandon_flow(self):
        flow = LiquidityFlow("removeLiquidity")
        with pytest.raises(InsufficientBalanceError):
            with flow.stage(FlowState.APPROVING):
                raise InsufficientBalanceError("gone")
        assert flow.state is FlowState.APPROVING
        assert not flow.finished

    def test_state_values_are_strings(self):
        assert FlowState.SUBMITTED == "Submitted"
