from typing import List
from transitions import Machine

from .enum import RunState
from .logger import get_logger


logger = get_logger(__name__)


class SurveyRunMachine:
    states: List[RunState] = [s for s in RunState]

    def __init__(self):
        self.machine = Machine(
            model=self,
            states=self.states,
            initial=RunState.NOT_STARTED,
            after_state_change="on_any_transition"
        )

        # Setup
        self.machine.add_transition("open_store", RunState.NOT_STARTED, RunState.STORE_OPEN)
        self.machine.add_transition("resolve_numbers", RunState.STORE_OPEN, RunState.NUMBERS_RESOLVED)

        # Calls
        self.machine.add_transition("start_dialing", RunState.NUMBERS_RESOLVED, RunState.DIALING)
        self.machine.add_transition("aggregate", RunState.DIALING, RunState.AGGREGATED)

        # Final states
        self.machine.add_transition(
            "fail", [RunState.NOT_STARTED, RunState.STORE_OPEN, RunState.NUMBERS_RESOLVED], RunState.FAILED
        )
        self.machine.add_transition("close_store", RunState.AGGREGATED, RunState.STORE_CLOSED)

    def on_any_transition(self):
        logger.debug("Survey run is now %s", self.state.name)
