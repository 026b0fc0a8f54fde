from __future__ import annotations

import typer

from cutrel.cli.commands.release_cmd import release


app = typer.Typer(
    add_completion=False,
    rich_markup_mode="rich",
)

# -h/--help is declared on the command itself so it can exit nonzero.
app.command(context_settings={"help_option_names": []})(release)


def main() -> None:
    app()
