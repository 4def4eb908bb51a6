"""BiblioSys: library catalog, loans, reservations and overdue notices over HTTP/JSON."""

import atexit
import os

import click
from flask import Flask

from .api import STORE_KEY, bp
from .cli import init_db_command, sweep_command
from .config import DefaultConfig
from .errors import register_error_handlers
from .notifications import OverdueSweeper
from .storage import create_store

SWEEPER_KEY = "bibliosys.sweeper"


def create_app(test_config=None):
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(DefaultConfig)
    app.config.from_prefixed_env("BIBLIOSYS")
    if test_config is not None:
        app.config.from_mapping(test_config)

    app.config["DATABASE"] = app.config["DATABASE"] or os.path.join(app.instance_path, "library.db")
    app.config["DATA_FILE"] = app.config["DATA_FILE"] or os.path.join(app.instance_path, "library.json")
    # module loggers (bibliosys.*) propagate to app.logger
    app.logger.setLevel(app.config["LOG_LEVEL"])

    # under `flask <command>` seeding is left to init-db
    from_cli = click.get_current_context(silent=True) is not None
    store = create_store(app.config)
    store.initialize(seed=app.config["SEED_DATA"] and not from_cli)
    app.extensions[STORE_KEY] = store
    app.logger.info("storage backend: %s", store.name)

    register_error_handlers(app)

    app.register_blueprint(bp)
    app.cli.add_command(init_db_command)
    app.cli.add_command(sweep_command)

    if app.config["SWEEPER_ENABLED"]:
        app.extensions[SWEEPER_KEY] = OverdueSweeper(
            store,
            interval=app.config["SWEEP_INTERVAL"],
            tolerance_days=app.config["TOLERANCE_DAYS"],
        )
        # CLI commands never serve requests, so they never start the thread
        @app.before_request
        def ensure_sweeper():
            start_sweeper(app)

    return app


def start_sweeper(app):
    """Start the app's overdue sweeper once; it is stopped at interpreter exit."""
    sweeper = app.extensions.get(SWEEPER_KEY)
    if sweeper is not None and sweeper.start():
        atexit.register(sweeper.stop, 5)
    return sweeper
