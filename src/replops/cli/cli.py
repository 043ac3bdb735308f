"""CLI application for catalog replication event tooling."""

import typer

from replops.cli.commands.events import app as events_app

app = typer.Typer(
    help="replops - catalog change events for table replication",
    no_args_is_help=True,
)

app.add_typer(events_app, name="events")


if __name__ == "__main__":
    app()
