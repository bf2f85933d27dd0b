"""Flask CLI commands: `flask --app configstore init-db | seed | show-config`."""

import json

import click
from flask import Flask, current_app
from flask.cli import with_appcontext

from . import migrations
from .db import get_db, get_store
from .seed import seed_all
from .store import UnknownDocument


@click.command("init-db")
@with_appcontext
def init_db_command():
    """Apply pending schema migrations."""
    if current_app.config["CONFIG_BACKEND"] != "postgres":
        click.echo("Memory backend has no schema to migrate")
        return
    applied = migrations.migrate(get_db())
    if applied:
        click.echo(f"Applied migrations: {', '.join(str(v) for v in applied)}")
    else:
        click.echo("Schema up to date")


@click.command("seed")
@with_appcontext
def seed_command():
    """Create every registered document that does not exist yet."""
    for entry in seed_all(get_store()):
        click.echo(entry)


@click.command("show-config")
@click.argument("key")
@with_appcontext
def show_config_command(key):
    """Print a document and its version."""
    try:
        store = get_store()
        doc = store.get(key)
    except UnknownDocument as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"{doc.key} version {doc.version}")
    click.echo(store.documents[key].description)
    click.echo(json.dumps(doc.value, indent=2))


def init_app(app: Flask) -> None:
    app.cli.add_command(init_db_command)
    app.cli.add_command(seed_command)
    app.cli.add_command(show_config_command)
