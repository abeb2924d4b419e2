"""
Session state machine.

anonymous -> authenticating -> authenticated, with the way back to anonymous
on rejection, logout or a dropped connection.
"""

from enum import Enum
from typing import Any

from statemachine import State, StateMachine

from ..logging_config import get_logger

logger = get_logger(__name__)


class SessionState(Enum):
    ANONYMOUS = "anonymous"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


class SessionStateMachine(StateMachine):
    """
    Transitions:
    - anonymous -> authenticating: request_sent
    - authenticating -> authenticated: request_accepted
    - authenticating -> anonymous: request_rejected
    - authenticated -> anonymous: logged_out
    - authenticating/authenticated -> anonymous: connection_dropped
    """

    anonymous = State("Anonymous", value=SessionState.ANONYMOUS, initial=True)
    authenticating = State("Authenticating", value=SessionState.AUTHENTICATING)
    authenticated = State("Authenticated", value=SessionState.AUTHENTICATED)

    request_sent = anonymous.to(authenticating)
    request_accepted = authenticating.to(authenticated)
    request_rejected = authenticating.to(anonymous)
    logged_out = authenticated.to(anonymous)
    connection_dropped = authenticating.to(anonymous) | authenticated.to(anonymous)

    @property
    def state(self) -> SessionState:
        return self.current_state_value

    def after_transition(self, event: Any = None, source: State | None = None, target: State | None = None) -> None:
        logger.info(
            "Session state transition",
            trigger_event=str(event) if event else "unknown",
            from_state=getattr(source, "id", None),
            to_state=getattr(target, "id", None),
        )
