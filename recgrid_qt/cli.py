import importlib
import logging
import sys
from typing import Optional, Tuple

import click
from dotenv import load_dotenv

from recgrid.__version__ import __version__
from recgrid.errors import RecGridError
from recgrid.loader import load_records
from recgrid.record import Record, type_name_of
from recgrid.settings import LocalSettings
from recgrid.yaml_store import DirectoryStore

logger = logging.getLogger(__name__)

root_argument = click.argument(
    "root",
    envvar="RECGRID_ROOT",
    type=click.Path(file_okay=False),
)
module_option = click.option(
    "-m",
    "--module",
    "modules",
    multiple=True,
    help="Module that defines record types; can be repeated.",
)


def open_store(root: Optional[str], stg: LocalSettings) -> DirectoryStore:
    """Open the store in `root` or, if not given, the one used last time.

    The root of the store is remembered in the settings.
    """
    if not root:
        root = stg.last_root
        if not root:
            raise click.UsageError("Missing argument 'ROOT'.")
        logger.info("Opening the last store: %s", root)
    try:
        store = DirectoryStore(root, create=False)
    except RecGridError as e:
        raise click.ClickException(str(e))
    stg.last_root = store.root
    return store


def import_modules(modules: Tuple[str, ...]):
    """Import the modules that define the record classes."""
    importlib.import_module("recgrid_qt.demo")
    for name in modules:
        try:
            importlib.import_module(name)
        except ImportError as e:
            raise click.ClickException(f"Unable to import {name}: {e}")


@click.group()
@click.option("--debug/--no-debug", default=False)
@click.version_option(__version__, prog_name="recgrid")
def cli(debug: bool):
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="[%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.debug("Debug mode is on")
    load_dotenv()


@cli.command()
@click.argument(
    "root",
    envvar="RECGRID_ROOT",
    required=False,
    type=click.Path(file_okay=False),
)
@module_option
def run(root: Optional[str], modules: Tuple[str, ...]):
    """Open the editor for the records in ROOT.

    Without ROOT the store that was opened last time is used.
    """
    from PyQt5.QtWidgets import QApplication

    from recgrid_qt.main_window import MainWindow

    import_modules(modules)
    stg = LocalSettings()
    store = open_store(root, stg)

    app = QApplication(sys.argv)
    app.setApplicationName("recgrid")
    app.setApplicationVersion(__version__)

    main_window = MainWindow(store=store, stg=stg)
    main_window.show()
    sys.exit(app.exec_())


@cli.command()
@root_argument
def demo(root: str):
    """Create a few demo records in ROOT."""
    from recgrid_qt.demo import populate

    store = DirectoryStore(root)
    created = populate(store)
    click.echo(f"Created {created} records in {store.root}")


@cli.command(name="list")
@root_argument
@click.argument("type_name")
@module_option
@click.option("--no-sort", is_flag=True, help="Keep the order of the store.")
def list_records(
    root: str, type_name: str, modules: Tuple[str, ...], no_sort: bool
):
    """List the records of type TYPE_NAME in ROOT."""
    import_modules(modules)
    matches = [
        cls
        for cls in Record.get_subclasses()
        if type_name in (cls.__name__, type_name_of(cls))
    ]
    if not matches:
        raise click.ClickException(f"Unknown record type {type_name}")
    if len(matches) > 1:
        raise click.ClickException(
            f"{type_name} is ambiguous; use the fully qualified name"
        )

    try:
        store = DirectoryStore(root, create=False)
    except RecGridError as e:
        raise click.ClickException(str(e))

    for handle in load_records(store, matches[0], sort_rows=not no_sort):
        click.echo(f"{handle.location}\t{handle.record.model_dump_json()}")


if __name__ == "__main__":
    cli()
