"""CLI entrypoint: Typer app definition and command registration"""

import typer

from postsync.cli.commands import build_cmd, dump_cmd, init_cmd, list_cmd


app = typer.Typer(name="postsync", no_args_is_help=True, help="Incremental post synchronization for static sites")

app.command(name="build")(build_cmd)
app.command(name="list")(list_cmd)
app.command(name="dump")(dump_cmd)
app.command(name="init")(init_cmd)
