"""Session state machine with a fixed transition table.

States:
    IDLE -> STARTING -> LISTENING -> STOPPING -> IDLE

A language switch while listening takes the restart path:
    LISTENING -> STOPPING -> RESTARTING -> STARTING -> LISTENING

ERRORED is reachable from every non-idle state and only leads back to IDLE.
Transitions not listed in the table raise InvalidTransitionError.
"""

import logging
from typing import Callable, Dict, FrozenSet, Optional

from ..errors import InvalidTransitionError
from ..models.session import SessionStatus

logger = logging.getLogger(__name__)

# {current_state: {allowed_target_states}}
_VALID_TRANSITIONS: Dict[SessionStatus, FrozenSet[SessionStatus]] = {
    SessionStatus.IDLE: frozenset({SessionStatus.STARTING, SessionStatus.ERRORED}),
    SessionStatus.STARTING: frozenset(
        {SessionStatus.LISTENING, SessionStatus.IDLE, SessionStatus.ERRORED}
    ),
    SessionStatus.LISTENING: frozenset(
        {SessionStatus.STOPPING, SessionStatus.IDLE, SessionStatus.ERRORED}
    ),
    SessionStatus.STOPPING: frozenset(
        {SessionStatus.IDLE, SessionStatus.RESTARTING, SessionStatus.ERRORED}
    ),
    SessionStatus.RESTARTING: frozenset(
        {SessionStatus.STARTING, SessionStatus.IDLE, SessionStatus.ERRORED}
    ),
    SessionStatus.ERRORED: frozenset({SessionStatus.IDLE}),
}

# While in one of these states a start is in flight and new toggles are dropped.
_GUARDED_STATES: FrozenSet[SessionStatus] = frozenset(
    {SessionStatus.STARTING, SessionStatus.STOPPING, SessionStatus.RESTARTING}
)

TransitionCallback = Callable[[SessionStatus, SessionStatus], None]


class SessionStateMachine:
    """Tracks the status of one session and enforces the transition table.

    Args:
        on_transition: Called with (previous, current) after every transition.
    """

    def __init__(self, on_transition: Optional[TransitionCallback] = None):
        self._status = SessionStatus.IDLE
        self._on_transition = on_transition

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def start_guard(self) -> bool:
        """True while a start, stop or restart has not settled yet."""
        return self._status in _GUARDED_STATES

    def can_transition(self, target: SessionStatus) -> bool:
        return target in _VALID_TRANSITIONS[self._status]

    def transition(self, target: SessionStatus) -> None:
        """Move to ``target``.

        Raises:
            InvalidTransitionError: If the table does not allow the transition
        """
        if not self.can_transition(target):
            raise InvalidTransitionError(self._status.value, target.value)

        previous = self._status
        self._status = target
        logger.debug(f"Session status: {previous.value} -> {target.value}")

        if self._on_transition:
            self._on_transition(previous, target)

    def reset(self) -> None:
        """Drive the machine back to IDLE from wherever it is."""
        if self._status is SessionStatus.IDLE:
            return
        self.transition(SessionStatus.IDLE)
