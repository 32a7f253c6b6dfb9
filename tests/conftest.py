import os
import random
import sys
import pytest

# Ensure the repository root (containing `queens_duel`) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
REPO_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from queens_duel import create_app, get_manager, socketio
from queens_duel.services.puzzle import Board, BoardFactory, RegionGenerator, solve
from queens_duel.services.session import Relay, SessionManager, StartScheduler

NAMESPACE = '/ws'

# One region per row, except (1,0) belongs to the top row's region, so
# (0,5) and (1,0) share a region without sharing a row, column or diagonal.
FIXED_REGIONS = (
    (0, 0, 0, 0, 0, 0, 0, 0),
    (0, 1, 1, 1, 1, 1, 1, 1),
    (2, 2, 2, 2, 2, 2, 2, 2),
    (3, 3, 3, 3, 3, 3, 3, 3),
    (4, 4, 4, 4, 4, 4, 4, 4),
    (5, 5, 5, 5, 5, 5, 5, 5),
    (6, 6, 6, 6, 6, 6, 6, 6),
    (7, 7, 7, 7, 7, 7, 7, 7),
)

# First placement found by the ascending-column search on FIXED_REGIONS
FIXED_SOLUTION = [(0, 0), (1, 4), (2, 7), (3, 5), (4, 2), (5, 6), (6, 1), (7, 3)]


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SOCKETIO_NAMESPACE = NAMESPACE
    COUNTDOWN_SEC = 0
    REGION_MAX_ATTEMPTS = 20000
    BOARD_MAX_ATTEMPTS = 500
    EXPOSE_SOLUTION = False
    CORS_ORIGINS = ['http://localhost:5173']


class RecordingRelay(Relay):
    """Keeps every published event in memory."""

    def __init__(self):
        self.sent = []

    def publish(self, message):
        self.sent.append(message)

    def names(self):
        return [m.event for m in self.sent]

    def events(self, name):
        return [m for m in self.sent if m.event == name]

    def clear(self):
        self.sent.clear()


class ManualScheduler(StartScheduler):
    """Holds scheduled callbacks until the test fires them."""

    def __init__(self):
        self.pending = {}
        self.cancelled = []

    def schedule(self, key, delay, callback):
        self.pending[key] = (delay, callback)

    def cancel(self, key):
        if self.pending.pop(key, None) is not None:
            self.cancelled.append(key)

    def fire(self, key):
        _, callback = self.pending.pop(key)
        callback()


class FixedBoardFactory:
    def __init__(self, board):
        self.board = board
        self.calls = 0

    def create_board(self):
        self.calls += 1
        return self.board


def make_fixed_board():
    solution = solve(FIXED_REGIONS)
    assert solution is not None
    return Board(regions=FIXED_REGIONS, solution=tuple(solution))


@pytest.fixture()
def fixed_board():
    return make_fixed_board()


@pytest.fixture()
def random_board():
    factory = BoardFactory(region_generator=RegionGenerator(rng=random.Random(7)))
    return factory.create_board()


@pytest.fixture()
def relay():
    return RecordingRelay()


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def manager(relay, scheduler, fixed_board):
    return SessionManager(
        relay=relay,
        scheduler=scheduler,
        board_factory=FixedBoardFactory(fixed_board),
        countdown_sec=3,
    )


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def app_manager(flask_app):
    return get_manager(flask_app)


@pytest.fixture()
def sio_factory(flask_app):
    clients = []

    def _make():
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
            namespace=NAMESPACE,
        )
        clients.append(test_client)
        return test_client

    yield _make
    for test_client in clients:
        try:
            if test_client.is_connected(NAMESPACE):
                test_client.disconnect(namespace=NAMESPACE)
        except Exception:
            pass


@pytest.fixture()
def fixed_regions():
    return FIXED_REGIONS


@pytest.fixture()
def fixed_solution():
    return list(FIXED_SOLUTION)
