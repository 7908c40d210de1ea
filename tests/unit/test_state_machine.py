"""Unit tests for SessionStateMachine."""

import pytest
from unittest.mock import Mock, call

from speech2letter.errors import InvalidTransitionError
from speech2letter.models.session import SessionStatus
from speech2letter.services.state_machine import SessionStateMachine


@pytest.mark.unit
class TestSessionStateMachine:
    """Test cases for the session transition table."""

    def test_starts_idle_without_guard(self):
        machine = SessionStateMachine()

        assert machine.status is SessionStatus.IDLE
        assert machine.start_guard is False

    def test_start_stop_cycle(self):
        machine = SessionStateMachine()

        for target in (SessionStatus.STARTING, SessionStatus.LISTENING,
                       SessionStatus.STOPPING, SessionStatus.IDLE):
            machine.transition(target)

        assert machine.status is SessionStatus.IDLE

    def test_restart_path(self):
        machine = SessionStateMachine()
        machine.transition(SessionStatus.STARTING)
        machine.transition(SessionStatus.LISTENING)

        for target in (SessionStatus.STOPPING, SessionStatus.RESTARTING,
                       SessionStatus.STARTING, SessionStatus.LISTENING):
            machine.transition(target)

        assert machine.status is SessionStatus.LISTENING

    @pytest.mark.parametrize("path", [
        [SessionStatus.STARTING],
        [SessionStatus.STARTING, SessionStatus.LISTENING],
        [SessionStatus.STARTING, SessionStatus.LISTENING, SessionStatus.STOPPING],
        [SessionStatus.STARTING, SessionStatus.LISTENING, SessionStatus.STOPPING,
         SessionStatus.RESTARTING],
    ])
    def test_errored_reachable_from_every_active_state(self, path):
        machine = SessionStateMachine()
        for target in path:
            machine.transition(target)

        machine.transition(SessionStatus.ERRORED)
        machine.transition(SessionStatus.IDLE)

        assert machine.status is SessionStatus.IDLE

    @pytest.mark.parametrize("target", [
        SessionStatus.LISTENING,
        SessionStatus.STOPPING,
        SessionStatus.RESTARTING,
        SessionStatus.IDLE,
    ])
    def test_illegal_transitions_from_idle_are_rejected(self, target):
        machine = SessionStateMachine()

        with pytest.raises(InvalidTransitionError):
            machine.transition(target)

        assert machine.status is SessionStatus.IDLE

    def test_errored_only_leads_to_idle(self):
        machine = SessionStateMachine()
        machine.transition(SessionStatus.ERRORED)

        with pytest.raises(InvalidTransitionError) as exc_info:
            machine.transition(SessionStatus.STARTING)

        assert exc_info.value.current == "errored"
        assert exc_info.value.target == "starting"

    def test_start_guard_held_while_settling(self):
        machine = SessionStateMachine()

        machine.transition(SessionStatus.STARTING)
        assert machine.start_guard is True

        machine.transition(SessionStatus.LISTENING)
        assert machine.start_guard is False

        machine.transition(SessionStatus.STOPPING)
        assert machine.start_guard is True

        machine.transition(SessionStatus.RESTARTING)
        assert machine.start_guard is True

    def test_on_transition_callback(self):
        callback = Mock()
        machine = SessionStateMachine(on_transition=callback)

        machine.transition(SessionStatus.STARTING)
        machine.transition(SessionStatus.LISTENING)

        assert callback.call_args_list == [
            call(SessionStatus.IDLE, SessionStatus.STARTING),
            call(SessionStatus.STARTING, SessionStatus.LISTENING),
        ]

    def test_reset(self):
        callback = Mock()
        machine = SessionStateMachine(on_transition=callback)

        machine.reset()
        callback.assert_not_called()

        machine.transition(SessionStatus.STARTING)
        machine.transition(SessionStatus.LISTENING)
        machine.reset()

        assert machine.status is SessionStatus.IDLE
