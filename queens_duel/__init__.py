import random

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from queens_duel.config import Config

socketio = SocketIO(async_mode=None)

EXTENSION_KEY = 'queens_duel'


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One session manager per app; handlers reach it through app.extensions
    from queens_duel.socketio_events import SocketIORelay, register_socketio_handlers
    from queens_duel.services.puzzle import BoardFactory, PuzzleGenerationError, RegionGenerator
    from queens_duel.services.session import BackgroundStartScheduler, SessionManager

    cfg = flask_app.config
    namespace = cfg.get('SOCKETIO_NAMESPACE', '/ws')
    inline_timers = bool(cfg.get('TESTING')) and not cfg.get('ENABLE_SCHEDULER_IN_TESTS')
    manager = SessionManager(
        relay=SocketIORelay(socketio, namespace=namespace),
        scheduler=BackgroundStartScheduler(socketio, app=flask_app, inline=inline_timers, logger=flask_app.logger),
        board_factory=BoardFactory(
            region_generator=RegionGenerator(max_attempts=int(cfg.get('REGION_MAX_ATTEMPTS', 20000))),
            max_attempts=int(cfg.get('BOARD_MAX_ATTEMPTS', 500)),
        ),
        countdown_sec=float(cfg.get('COUNTDOWN_SEC', 3)),
        expose_solution=bool(cfg.get('EXPOSE_SOLUTION', False)),
        logger=flask_app.logger,
    )
    flask_app.extensions[EXTENSION_KEY] = manager

    from queens_duel.main import main
    flask_app.register_blueprint(main)

    from queens_duel.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    register_socketio_handlers(namespace=namespace)

    @click.command('generate-board')
    @click.option('--seed', type=int, default=None, help='Seed for a reproducible board.')
    @click.option('--show-solution', is_flag=True, help='Mark the solution cells with Q.')
    def generate_board_command(seed, show_solution):
        """Generates a solvable board and prints its region grid."""
        factory = BoardFactory(
            region_generator=RegionGenerator(
                rng=random.Random(seed),
                max_attempts=int(cfg.get('REGION_MAX_ATTEMPTS', 20000)),
            ),
            max_attempts=int(cfg.get('BOARD_MAX_ATTEMPTS', 500)),
        )
        try:
            board = factory.create_board()
        except PuzzleGenerationError as exc:
            raise click.ClickException(str(exc))
        click.echo(board.pretty(show_solution=show_solution))

    flask_app.cli.add_command(generate_board_command)

    return flask_app


def get_manager(flask_app):
    return flask_app.extensions[EXTENSION_KEY]
