"""Outbound events and the user-facing error hierarchy of the session layer.

The session manager never talks to a socket. It hands ``Outbound`` records
to a relay, which decides how to deliver them.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

# Audiences
ROOM = 'room'          # every member of room_id
OTHERS = 'others'      # every member of room_id except `player_id`
CLIENT = 'client'      # only `player_id`


@dataclass(frozen=True)
class Outbound:
    event: str
    payload: Dict[str, Any] = field(default_factory=dict)
    audience: str = ROOM
    room_id: Optional[str] = None
    player_id: Optional[str] = None


class Relay(ABC):
    """Delivery boundary. Subclasses map outbound events onto a transport."""

    @abstractmethod
    def publish(self, message: Outbound) -> None:
        ...


class SessionError(Exception):
    """A recoverable user error reported to the requester only."""
    event = 'error'

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {'message': self.message}
        payload.update(self.extra)
        return payload


class RoomNotFound(SessionError):
    def __init__(self, message: str = 'Game room not found'):
        super().__init__(message)


class RoomFull(SessionError):
    def __init__(self, message: str = 'Game room is full'):
        super().__init__(message)


class AlreadyInRoom(SessionError):
    def __init__(self, message: str = 'You are already in this game'):
        super().__init__(message)


class GameNotStarted(SessionError):
    def __init__(self, message: str = 'Game not started'):
        super().__init__(message)


class PlayerNotFound(SessionError):
    def __init__(self, message: str = 'Player not found'):
        super().__init__(message)


class BadRequest(SessionError):
    pass


class InvalidMove(SessionError):
    event = 'invalidMove'
