import click
from flask import current_app
from flask.cli import with_appcontext

from .api import get_store
from .notifications import sweep_overdue


@click.command("init-db")
@click.option(
    "--seed/--no-seed",
    default=None,
    help="Seed demo books and members into an empty store (default: SEED_DATA).",
)
@with_appcontext
def init_db_command(seed):
    """Create the storage (tables or JSON file) if it does not exist yet."""
    if seed is None:
        seed = current_app.config["SEED_DATA"]
    store = get_store()
    store.initialize(seed=seed)
    click.echo(f"Initialized {store.name} storage{' with demo data' if seed else ''}.")


@click.command("sweep")
@with_appcontext
def sweep_command():
    """Run the overdue sweep once."""
    created = sweep_overdue(get_store(), tolerance_days=current_app.config["TOLERANCE_DAYS"])
    click.echo(f"{len(created)} overdue notification(s) created.")
