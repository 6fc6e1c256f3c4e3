"""Per-flow state machine: Requested -> Approving -> Submitted -> Confirmed | Reverted"""

import logging
from contextlib import contextmanager
from enum import Enum

from ..core.exceptions import FlowStateError, TransactionError

logger = logging.getLogger(__name__)


class FlowState(str, Enum):
    REQUESTED = "Requested"
    APPROVING = "Approving"
    SUBMITTED = "Submitted"
    CONFIRMED = "Confirmed"
    REVERTED = "Reverted"


TRANSITIONS = {
    FlowState.REQUESTED: {FlowState.APPROVING},
    FlowState.APPROVING: {FlowState.SUBMITTED, FlowState.REVERTED},
    FlowState.SUBMITTED: {FlowState.CONFIRMED, FlowState.REVERTED},
    FlowState.CONFIRMED: set(),
    FlowState.REVERTED: set(),
}


class LiquidityFlow:
    """
    Tracks one add/remove flow through its states.

    A flow is not restartable: once Confirmed or Reverted it accepts no
    further transitions and the caller must issue a new flow with fresh reads.
    """

    def __init__(self, name):
        self.name = name
        self.state = FlowState.REQUESTED
        self.history = [FlowState.REQUESTED]

    def __repr__(self):
        return f"LiquidityFlow({self.name!r}, state={self.state.value})"

    @property
    def finished(self):
        return self.state in (FlowState.CONFIRMED, FlowState.REVERTED)

    def advance(self, new_state):
        """
        Move to new_state.

        Raises:
            FlowStateError: If the transition is not allowed from the current state
        """
        if new_state not in TRANSITIONS[self.state]:
            raise FlowStateError(
                f"{self.name}: invalid transition {self.state.value} -> {new_state.value}"
            )
        logger.info("%s: %s -> %s", self.name, self.state.value, new_state.value)
        self.state = new_state
        self.history.append(new_state)

    @contextmanager
    def stage(self, state):
        """
        Enter `state` for the duration of the block.

        A TransactionError escaping the block is labelled with the step it
        happened in, the flow moves to Reverted, and the error propagates.
        Other exceptions propagate untouched (the flow is simply abandoned).
        """
        self.advance(state)
        try:
            yield self
        except TransactionError as e:
            if e.step is None:
                e.step = state.value
            self.advance(FlowState.REVERTED)
            raise

    def confirm(self):
        self.advance(FlowState.CONFIRMED)
