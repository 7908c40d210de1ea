"""Services layer for speech2letter session control."""

from .engine_binding import EngineBinding
from .session_manager import SessionManager
from .state_machine import SessionStateMachine

__all__ = [
    "EngineBinding",
    "SessionManager",
    "SessionStateMachine",
]
