from flask import Blueprint, current_app, jsonify

from queens_duel import get_manager
from queens_duel.services.session import RoomNotFound

rooms = Blueprint('rooms', __name__)


@rooms.route('/<string:room_id>', methods=['GET'])
def get_room_state(room_id):
    """
    Returns a read-only snapshot of a room: players, ready flags, progress counts.
    Boards and marker positions are never exposed here.
    """
    try:
        snapshot = get_manager(current_app).room_snapshot(room_id)
    except RoomNotFound as exc:
        return jsonify({'error': exc.message}), 404
    return jsonify(snapshot), 200
