from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Optional

from queens_duel.models import Player, Room, RoomRegistry
from queens_duel.services.puzzle import (
    BOARD_SIZE,
    BoardFactory,
    PuzzleGenerationError,
    in_bounds,
    validate_placement,
)
from .events import (
    CLIENT,
    OTHERS,
    ROOM,
    AlreadyInRoom,
    GameNotStarted,
    InvalidMove,
    Outbound,
    PlayerNotFound,
    Relay,
    RoomFull,
    RoomNotFound,
)
from .scheduler import StartScheduler

DEFAULT_COUNTDOWN_SEC = 3.0


class SessionManager:
    """Authoritative state for every room and the transitions between its states.

    Each public operation either completes (mutating rooms and publishing
    events through the relay) or raises a ``SessionError`` with nothing
    changed. Operations are serialized behind one lock so socket handlers
    running on different threads still see them one at a time.
    """

    def __init__(
        self,
        relay: Relay,
        scheduler: StartScheduler,
        board_factory: Optional[BoardFactory] = None,
        registry: Optional[RoomRegistry] = None,
        countdown_sec: float = DEFAULT_COUNTDOWN_SEC,
        expose_solution: bool = False,
        logger: Optional[logging.Logger] = None,
    ):
        self.relay = relay
        self.scheduler = scheduler
        self.board_factory = board_factory or BoardFactory()
        self.rooms = registry or RoomRegistry()
        self.countdown_sec = countdown_sec
        self.expose_solution = expose_solution
        self.logger = logger or logging.getLogger(__name__)
        self._lock = threading.RLock()

    # ---- lookups ----

    def _room(self, room_id) -> Room:
        room = self.rooms.get(room_id)
        if room is None:
            raise RoomNotFound()
        return room

    def _started_room(self, room_id) -> Room:
        room = self._room(room_id)
        if not room.started:
            raise GameNotStarted()
        if not room.live:
            raise GameNotStarted('Game is starting')
        return room

    @staticmethod
    def _member(room: Room, player_id: str) -> Player:
        player = room.get_player(player_id)
        if player is None:
            raise PlayerNotFound()
        return player

    @staticmethod
    def _cell(row, col):
        if not in_bounds(row, col):
            raise InvalidMove(f'Cell must be a row and column between 0 and {BOARD_SIZE - 1}')
        return row, col

    def _publish(self, event: str, payload: Optional[Dict[str, Any]] = None, audience: str = ROOM,
                 room_id: Optional[str] = None, player_id: Optional[str] = None) -> None:
        self.relay.publish(Outbound(event, payload or {}, audience, room_id, player_id))

    def _end_round(self, room: Room) -> None:
        self.scheduler.cancel(room.id)
        room.reset_round()

    # ---- operations ----

    def create_room(self, player_id: str, name: str) -> Room:
        with self._lock:
            room = self.rooms.create()
            room.players.append(Player(id=player_id, name=name))
            self.logger.info(f"[room-create] room={room.id} player={player_id}")
            self._publish('gameCreated', {
                'roomId': room.id,
                'playerId': player_id,
                'playerName': name,
            }, CLIENT, room.id, player_id)
            return room

    def join_room(self, player_id: str, room_id: str, name: str) -> Room:
        with self._lock:
            room = self._room(room_id)
            if room.get_player(player_id) is not None:
                raise AlreadyInRoom()
            if room.is_full:
                raise RoomFull()
            opponent = room.players[0] if room.players else None
            room.players.append(Player(id=player_id, name=name))
            self.logger.info(f"[room-join] room={room.id} player={player_id} players={len(room.players)}")
            self._publish('gameJoined', {
                'roomId': room.id,
                'playerId': player_id,
                'playerName': name,
                'opponent': opponent.to_dict() if opponent else None,
            }, CLIENT, room.id, player_id)
            self._publish('playerJoined', {
                'playerId': player_id,
                'playerName': name,
            }, OTHERS, room.id, player_id)
            return room

    def set_ready(self, player_id: str, room_id: str, ready: bool) -> Room:
        with self._lock:
            room = self._room(room_id)
            player = self._member(room, player_id)
            player.ready = bool(ready)
            self._publish('playerReadyChanged', {'playerId': player_id, 'ready': player.ready},
                          ROOM, room.id)
            if room.all_ready and not room.started:
                self._begin_round(room)
            return room

    def _begin_round(self, room: Room) -> None:
        try:
            board = self.board_factory.create_board()
        except PuzzleGenerationError as exc:
            self.logger.error(f"[board-fail] room={room.id} error={exc}")
            for p in room.players:
                p.ready = False
                self._publish('playerReadyChanged', {'playerId': p.id, 'ready': False}, ROOM, room.id)
            self._publish('error', {
                'message': 'Could not generate a puzzle, please ready up again',
                'retryable': True,
            }, ROOM, room.id)
            return
        room.board = board
        room.started = True
        room.live = False
        room.round += 1
        token = room.round
        self.logger.info(f"[round-start] room={room.id} round={token} countdown={self.countdown_sec}s")
        self._publish('gameCountdown', {'seconds': self.countdown_sec}, ROOM, room.id)
        self.scheduler.schedule(room.id, self.countdown_sec,
                                lambda: self.deliver_start(room.id, token))

    def deliver_start(self, room_id: str, round_token: int) -> bool:
        """Send the board for ``round_token``; stale or orphaned starts are dropped."""
        with self._lock:
            room = self.rooms.get(room_id)
            if (
                room is None
                or not room.started
                or room.board is None
                or room.round != round_token
                or len(room.players) < 2
            ):
                self.logger.info(f"[start-abort] room={room_id} round={round_token}")
                return False
            room.live = True
            self._publish('gameStart', {
                'board': room.board.to_dict(include_solution=self.expose_solution),
            }, ROOM, room.id)
            return True

    def place_marker(self, player_id: str, room_id: str, row, col) -> Room:
        with self._lock:
            room = self._started_room(room_id)
            player = self._member(room, player_id)
            row, col = self._cell(row, col)
            result = validate_placement(room.board, row, col, player.markers)
            if not result.ok:
                raise InvalidMove(result.message, reason=result.reason)
            player.markers.append((row, col))
            self._publish('queenPlaced', {'playerId': player_id, 'row': row, 'col': col}, ROOM, room.id)
            if len(player.markers) == BOARD_SIZE:
                self.logger.info(f"[round-won] room={room.id} round={room.round} player={player_id}")
                self._publish('gameWon', {'playerId': player_id, 'playerName': player.name}, ROOM, room.id)
                self._end_round(room)
            return room

    def toggle_flag(self, player_id: str, room_id: str, row, col) -> bool:
        """Returns True when the cell is flagged after the call."""
        with self._lock:
            room = self._started_room(room_id)
            player = self._member(room, player_id)
            cell = self._cell(row, col)
            if player.has_marker(*cell):
                raise InvalidMove('Cell already has a queen')
            if cell in player.flags:
                player.flags.discard(cell)
                event = 'cellUnmarked'
            else:
                player.flags.add(cell)
                event = 'cellMarked'
            self._publish(event, {'playerId': player_id, 'row': cell[0], 'col': cell[1]}, ROOM, room.id)
            return cell in player.flags

    def restart(self, player_id: str, room_id: str) -> Room:
        with self._lock:
            room = self._room(room_id)
            self._end_round(room)
            self.logger.info(f"[round-restart] room={room.id} by={player_id}")
            self._publish('gameRestarted', {}, ROOM, room.id)
            return room

    def new_puzzle(self, player_id: str, room_id: str) -> Room:
        with self._lock:
            room = self._room(room_id)
            self._end_round(room)
            self.logger.info(f"[round-new-puzzle] room={room.id} by={player_id}")
            self._publish('newPuzzleRequested', {}, ROOM, room.id)
            return room

    def disconnect(self, player_id: str) -> None:
        with self._lock:
            for room in self.rooms.rooms_for(player_id):
                player = room.remove_player(player_id)
                # A pending start or a running round needs both players.
                interrupted = room.started
                if interrupted:
                    self._end_round(room)
                if not room.players:
                    self.rooms.remove(room.id)
                    self.logger.info(f"[room-remove] room={room.id} empty")
                    continue
                self.logger.info(f"[room-leave] room={room.id} player={player_id}")
                self._publish('playerDisconnected', {
                    'playerId': player_id,
                    'playerName': player.name if player else None,
                }, OTHERS, room.id, player_id)
                if interrupted:
                    self._publish('gameRestarted', {'reason': 'opponentDisconnected'}, OTHERS, room.id, player_id)

    def room_snapshot(self, room_id: str) -> Dict[str, Any]:
        with self._lock:
            return self._room(room_id).to_dict()
