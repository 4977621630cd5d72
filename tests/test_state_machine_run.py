import pytest
from transitions import MachineError

from outbound_survey.enum import RunState
from outbound_survey.machine import SurveyRunMachine


def test_run_machine_success():
    run = SurveyRunMachine()

    events = ["open_store", "resolve_numbers", "start_dialing", "aggregate", "close_store"]
    for e in events:
        getattr(run, e)()

    assert run.state == RunState.STORE_CLOSED


@pytest.mark.parametrize("events", [[], ["open_store"], ["open_store", "resolve_numbers"]])
def test_run_machine_fails_before_dialing(events):
    run = SurveyRunMachine()
    for e in events:
        getattr(run, e)()

    run.fail()

    assert run.state == RunState.FAILED


def test_run_machine_cannot_fail_while_dialing():
    run = SurveyRunMachine()
    for e in ["open_store", "resolve_numbers", "start_dialing"]:
        getattr(run, e)()

    with pytest.raises(MachineError, match="Can't trigger event fail from state DIALING!"):
        run.fail()


def test_run_machine_failed_cycle():
    run = SurveyRunMachine()

    with pytest.raises(MachineError, match="Can't trigger event start_dialing from state NOT_STARTED!"):
        run.start_dialing()
