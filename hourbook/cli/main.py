"""
Hourbook CLI - Main Entry Point

Unified Typer CLI that assembles all module sub-commands.

Usage:
    hourbook version
    hourbook timesheets [command]
"""

import importlib

import typer

import hourbook

app = typer.Typer(
    name="hourbook",
    help="Timesheet hour splitting, month reports and exports.",
    no_args_is_help=True,
)


@app.command()
def version():
    """Show Hourbook version."""
    typer.echo(f"hourbook {hourbook.__version__}")


def _register_modules():
    """Register module CLI sub-apps."""
    module_registry = [
        ("hourbook.timesheets.cli", "timesheets", "Week splitting, month & range reports, exports"),
    ]

    for module_path, name, help_text in module_registry:
        mod = importlib.import_module(module_path)
        app.add_typer(mod.app, name=name, help=help_text)


_register_modules()


def main():
    """Entry point for the hourbook CLI."""
    app()


if __name__ == "__main__":
    main()
