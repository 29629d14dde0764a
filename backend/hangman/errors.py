"""Error taxonomy shared by the session and round services.

Services raise; the Socket.IO layer decides who hears about it. Validation
and not-found errors go back to the originating connection only, while
``NotAllowed`` (wrong role, wrong turn) is swallowed by the handler so a
client never learns about roles it does not hold.
"""

from typing import Any, Dict


class GameError(Exception):
    """Base class. ``event`` is the outbound event name used to report it."""

    event = 'error'

    def __init__(self, message: str, event: str = None):
        super().__init__(message)
        self.message = message
        if event:
            self.event = event


class ValidationError(GameError):
    pass


class NotFoundError(GameError):
    event = 'error:join'


class NotAllowed(GameError):
    def __init__(self, message: str = 'Not allowed'):
        super().__init__(message)


def build_error_payload(error: GameError, **details: Any) -> Dict[str, Any]:
    payload = {
        'code': type(error).__name__,
        'message': str(error.message).strip() or 'Unknown error.',
    }
    if details:
        payload['details'] = details
    return payload
