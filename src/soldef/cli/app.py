from typing import Annotated

import typer

from soldef.cli.definition import definition, nodes
from soldef.cli.serve import serve_app
from soldef.config import configure_logging, get_settings

app = typer.Typer(
    name="soldef",
    help="Soldef CLI: go to definition in Solidity sources.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.command("definition")(definition)
app.command("nodes")(nodes)
app.add_typer(serve_app, name="serve")


@app.callback()
def setup(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log resolution steps.")] = False,
) -> None:
    configure_logging("DEBUG" if verbose else get_settings().log_level)


def main() -> None:
    app()
