"""Session layer: rooms, players and the round state machine.

Transport concerns stay out of here; the manager publishes ``Outbound``
events to a relay and the Socket.IO adapter does the delivering.
"""

from .events import (
    CLIENT,
    OTHERS,
    ROOM,
    AlreadyInRoom,
    BadRequest,
    GameNotStarted,
    InvalidMove,
    Outbound,
    PlayerNotFound,
    Relay,
    RoomFull,
    RoomNotFound,
    SessionError,
)
from .manager import SessionManager
from .scheduler import BackgroundStartScheduler, StartScheduler
