"""rudder CLI - Main Entry Point.

Commands:
    routes   - Print the route table of an application
    serve    - Run an application with uvicorn
    version  - Show version information
"""

import importlib
import logging
import sys
from pathlib import Path
from typing import Any

import click

from . import __cli_name__, __version__


def success(message: str) -> None:
    click.echo(click.style(message, fg="green"))


def info(message: str) -> None:
    click.echo(click.style(message, fg="cyan"))


def import_target(target: str) -> Any:
    """
    Import ``module:attribute`` and return the attribute.

    Raises:
        click.BadParameter: If the target cannot be imported
    """
    module_name, _, attr = target.partition(":")
    if not module_name or not attr:
        raise click.BadParameter(f"expected MODULE:APP, got {target!r}")

    cwd = str(Path.cwd())
    if cwd not in sys.path:
        sys.path.insert(0, cwd)

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise click.BadParameter(f"cannot import {module_name!r}: {e}")

    try:
        return getattr(module, attr)
    except AttributeError:
        raise click.BadParameter(f"module {module_name!r} has no attribute {attr!r}")


def is_factory(obj: Any) -> bool:
    """A callable that is not an application (no ``routes``) builds one."""
    return not hasattr(obj, "routes") and callable(obj)


def load_app(target: str) -> Any:
    """Import ``target``, calling it without arguments when it is a factory."""
    app = import_target(target)
    if is_factory(app):
        app = app()
    return app


@click.group()
@click.version_option(version=__version__, prog_name=__cli_name__)
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
@click.pass_context
def cli(ctx, verbose: bool):
    """Declarative controller dispatch for ASGI."""
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)


@cli.command('routes')
@click.argument('target')
def routes(target: str):
    """
    Print the route table of TARGET (MODULE:APP).

    Examples:
      rudder routes photos.app:app
    """
    app = load_app(target)
    table = [
        (action.metadata.type.value.upper(), str(action.route), action.name)
        for action in app.routes
    ]
    if not table:
        info("No routes registered")
        return

    widths = [max(len(row[i]) for row in table) for i in range(2)]
    for method, path, handler in table:
        click.echo(f"{method.ljust(widths[0])}  {path.ljust(widths[1])}  {handler}")


@cli.command('serve')
@click.argument('target')
@click.option('--host', type=str, default='127.0.0.1', help='Bind host')
@click.option('--port', type=int, default=8000, help='Bind port')
@click.option('--reload', is_flag=True, help='Reload on code changes')
@click.pass_context
def serve(ctx, target: str, host: str, port: int, reload: bool):
    """
    Serve TARGET (MODULE:APP) with uvicorn.

    Examples:
      rudder serve photos.app:app
      rudder serve photos.app:app --port 8080 --reload
    """
    import uvicorn

    factory = is_factory(import_target(target))
    info(f"Serving {target} on http://{host}:{port}")
    try:
        uvicorn.run(
            target,
            factory=factory,
            host=host,
            port=port,
            reload=reload,
            log_level="debug" if ctx.obj['verbose'] else "info",
        )
    except KeyboardInterrupt:
        success("Server stopped")


@cli.command('version')
def version():
    """Show version information."""
    click.echo(f"{__cli_name__} {__version__}")
    click.echo(f"Python {sys.version.split()[0]}")


def main():
    """Entry point for `rudder` command."""
    cli(obj={})


if __name__ == '__main__':
    main()
