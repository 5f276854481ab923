# explore/cli/main.py
from __future__ import annotations
import typer

from tracelens.explore.cli.explore import fetch_cmd, types_cmd, view_cmd

app = typer.Typer(help="Span explorer command-line utilities", no_args_is_help=True)

app.command("view")(view_cmd)
app.command("fetch")(fetch_cmd)
app.command("types")(types_cmd)


def run():
    app()


if __name__ == "__main__":
    run()
