from functools import wraps
from typing import Any, Dict

from flask import current_app, request
from flask_socketio import emit, join_room

from queens_duel.services.session import (
    CLIENT,
    OTHERS,
    BadRequest,
    Outbound,
    Relay,
    SessionError,
)

MAX_NAME_LENGTH = 32


def channel(room_id: str) -> str:
    """Socket.IO room name for a game room."""
    return f"room:{room_id}"


class SocketIORelay(Relay):
    """Delivers session events with ``socketio.emit``.

    Safe to call from background tasks, since it never relies on the
    request context of the current handler.
    """

    def __init__(self, socketio, namespace='/ws'):
        self.socketio = socketio
        self.namespace = namespace

    def publish(self, message: Outbound) -> None:
        if message.audience == CLIENT:
            self.socketio.emit(message.event, message.payload, to=message.player_id, namespace=self.namespace)
        elif message.audience == OTHERS:
            self.socketio.emit(message.event, message.payload, to=channel(message.room_id),
                               skip_sid=message.player_id, namespace=self.namespace)
        else:
            self.socketio.emit(message.event, message.payload, to=channel(message.room_id), namespace=self.namespace)


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _manager():
    from queens_duel import get_manager
    return get_manager(current_app)


def _payload(data) -> Dict[str, Any]:
    return data if isinstance(data, dict) else {}


def _room_id(data) -> str:
    room_id = _payload(data).get('roomId')
    if not room_id:
        raise BadRequest('roomId is required')
    return str(room_id)


def _player_name(data) -> str:
    name = _payload(data).get('playerName')
    name = name.strip() if isinstance(name, str) else ''
    if not name:
        raise BadRequest('playerName is required')
    return name[:MAX_NAME_LENGTH]


def reports_errors(handler):
    """Turn a SessionError into a single event addressed to the caller."""
    @wraps(handler)
    def wrapper(*args, **kwargs):
        try:
            return handler(*args, **kwargs)
        except SessionError as exc:
            current_app.logger.info(f"[rejected] sid={_get_sid()} handler={handler.__name__} message={exc.message}")
            emit(exc.event, exc.to_payload())
    return wrapper


def handle_connect(auth=None):
    emit('connected', {'message': 'Connected', 'playerId': _get_sid()})


def handle_disconnect(reason=None):
    _manager().disconnect(_get_sid())


@reports_errors
def handle_create_room(data):
    name = _player_name(data)
    room = _manager().create_room(_get_sid(), name)
    join_room(channel(room.id))


@reports_errors
def handle_join_game(data):
    room_id = _room_id(data)
    name = _player_name(data)
    room = _manager().join_room(_get_sid(), room_id, name)
    join_room(channel(room.id))


@reports_errors
def handle_player_ready(data):
    room_id = _room_id(data)
    ready = _payload(data).get('ready')
    if not isinstance(ready, bool):
        raise BadRequest('ready must be true or false')
    _manager().set_ready(_get_sid(), room_id, ready)


@reports_errors
def handle_place_queen(data):
    room_id = _room_id(data)
    payload = _payload(data)
    _manager().place_marker(_get_sid(), room_id, payload.get('row'), payload.get('col'))


@reports_errors
def handle_mark_cell(data):
    room_id = _room_id(data)
    payload = _payload(data)
    _manager().toggle_flag(_get_sid(), room_id, payload.get('row'), payload.get('col'))


@reports_errors
def handle_restart_game(data):
    _manager().restart(_get_sid(), _room_id(data))


@reports_errors
def handle_new_puzzle(data):
    _manager().new_puzzle(_get_sid(), _room_id(data))


def register_socketio_handlers(namespace: str = '/ws') -> None:
    """Register Socket.IO event handlers on the game namespace."""
    from queens_duel import socketio

    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('createRoom', handle_create_room, namespace=namespace)
    socketio.on_event('joinGame', handle_join_game, namespace=namespace)
    socketio.on_event('playerReady', handle_player_ready, namespace=namespace)
    socketio.on_event('placeQueen', handle_place_queen, namespace=namespace)
    socketio.on_event('markCell', handle_mark_cell, namespace=namespace)
    socketio.on_event('restartGame', handle_restart_game, namespace=namespace)
    socketio.on_event('newPuzzle', handle_new_puzzle, namespace=namespace)
