from __future__ import annotations

import random
import string
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Set

from queens_duel.services.puzzle import Board, Cell

MAX_PLAYERS = 2
ROOM_ID_ALPHABET = string.ascii_letters + string.digits


@dataclass
class Player:
    id: str
    name: str
    ready: bool = False
    markers: List[Cell] = field(default_factory=list)
    flags: Set[Cell] = field(default_factory=set)

    def has_marker(self, row: int, col: int) -> bool:
        return (row, col) in self.markers

    def clear_round(self) -> None:
        self.ready = False
        self.markers = []
        self.flags = set()

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'ready': self.ready,
            'markers': [{'row': r, 'col': c} for r, c in self.markers],
            'flags': [{'row': r, 'col': c} for r, c in sorted(self.flags)],
        }


@dataclass
class Room:
    id: str
    players: List[Player] = field(default_factory=list)
    started: bool = False
    board: Optional[Board] = None
    # False during the countdown; moves are only accepted once the board was delivered.
    live: bool = False
    # Bumped on every start and reset; a delayed start only fires for its own round.
    round: int = 0

    @property
    def is_full(self) -> bool:
        return len(self.players) >= MAX_PLAYERS

    @property
    def all_ready(self) -> bool:
        return len(self.players) == MAX_PLAYERS and all(p.ready for p in self.players)

    def get_player(self, player_id: str) -> Optional[Player]:
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def remove_player(self, player_id: str) -> Optional[Player]:
        player = self.get_player(player_id)
        if player is not None:
            self.players.remove(player)
        return player

    def reset_round(self) -> None:
        """End the current round: unstarted, no board, every player cleared."""
        self.started = False
        self.live = False
        self.board = None
        self.round += 1
        for p in self.players:
            p.clear_round()

    def to_dict(self):
        return {
            'id': self.id,
            'started': self.started,
            'round': self.round,
            'players': [
                {
                    'id': p.id,
                    'name': p.name,
                    'ready': p.ready,
                    'queens': len(p.markers),
                    'marks': len(p.flags),
                }
                for p in self.players
            ],
        }


def generate_room_id(length=6, rng=None):
    """Generate a short random room code."""
    rng = rng or random
    return ''.join(rng.choice(ROOM_ID_ALPHABET) for _ in range(length))


class RoomRegistry:
    """Process-wide store of live rooms, keyed by room id."""

    def __init__(self, id_factory=generate_room_id):
        self._rooms: Dict[str, Room] = {}
        self._id_factory = id_factory

    def __contains__(self, room_id) -> bool:
        return room_id in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)

    def __iter__(self) -> Iterator[Room]:
        return iter(list(self._rooms.values()))

    def get(self, room_id) -> Optional[Room]:
        if not isinstance(room_id, str):
            return None
        return self._rooms.get(room_id)

    def create(self) -> Room:
        while True:
            room_id = self._id_factory()
            if room_id not in self._rooms:
                break
        room = Room(id=room_id)
        self._rooms[room_id] = room
        return room

    def remove(self, room_id: str) -> Optional[Room]:
        return self._rooms.pop(room_id, None)

    def rooms_for(self, player_id: str) -> List[Room]:
        return [room for room in self._rooms.values() if room.get_player(player_id) is not None]
