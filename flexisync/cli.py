"""Click-based CLI for FlexiSync - record data export and import."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click

from flexisync import __version__
from flexisync.config import (
    get_config_path,
    get_objects_to_process,
    load_config,
    parse_object_names,
    validate_config_file,
    write_default_config,
)
from flexisync.config.schema import DataConfig
from flexisync.errors import FlexiSyncError, PartialFailureError
from flexisync.logger import SyncLogger
from flexisync.output import create_console
from flexisync.remote import SalesforceConnection
from flexisync.sync import ExportEngine, HookDispatcher, ImportEngine, SyncEngine

console = create_console()
logger = SyncLogger(console.rich)

DEFAULT_CONFIG_FILE = "flexisync.yaml"


def connection_options(func):
    """Options configuring the remote connection."""
    func = click.option(
        "--access-token",
        envvar="FLEXISYNC_ACCESS_TOKEN",
        help="OAuth access token (env: FLEXISYNC_ACCESS_TOKEN)",
    )(func)
    func = click.option(
        "--instance-url",
        envvar="FLEXISYNC_INSTANCE_URL",
        help="Instance URL, e.g. https://example.my.salesforce.com (env: FLEXISYNC_INSTANCE_URL)",
    )(func)
    return func


def run_options(func):
    """Options shared by export and import."""
    func = click.option("--verbose", "-v", is_flag=True, help="Show detailed output")(func)
    func = click.option(
        "--datadir",
        "-d",
        type=click.Path(file_okay=False, path_type=Path),
        help="Base directory for record files (default: data_dir from config)",
    )(func)
    func = click.option(
        "--objects",
        "-o",
        multiple=True,
        help="Comma separated object types to process (default: all configured)",
    )(func)
    func = click.option(
        "--config",
        "-c",
        "config_file",
        type=click.Path(dir_okay=False, path_type=Path),
        help="Data configuration file (env: FLEXISYNC_CONFIG)",
    )(func)
    return func


@click.group()
@click.version_option(version=__version__, prog_name="flexisync")
def cli() -> None:
    """FlexiSync - move records between JSON files and a remote org.

    \b
    Export: remote org -> <datadir>/<object>/<external id>.json
    Import: <datadir>/<object>/*.json -> remote org
    """
    pass


@cli.command("export")
@run_options
@connection_options
def export_command(
    config_file: Optional[Path],
    objects: tuple[str, ...],
    datadir: Optional[Path],
    verbose: bool,
    instance_url: Optional[str],
    access_token: Optional[str],
) -> None:
    """Export records into one JSON file per record.

    Each object's directory is emptied before its files are written.
    """
    try:
        config_path = get_config_path(config_file)
        config = load_config(config_path)
        run_logger = SyncLogger(console.rich, verbose=verbose)

        with _open_connection(instance_url, access_token) as connection:
            engine = ExportEngine(
                config,
                connection,
                **_engine_options(config, config_path, objects, datadir, run_logger),
            )
            results = _run(engine, "Exporting records...")
    except FlexiSyncError as e:
        console.print_error(e.message)
        sys.exit(1)

    console.print_summary(results, title="Export Summary")


@cli.command("import")
@run_options
@click.option("--remove", "-r", is_flag=True, help="Delete the records from the org instead of upserting them")
@click.option("--allowpartial", "-p", is_flag=True, help="Accept partially successful imports")
@click.option(
    "--save-operation",
    "-s",
    help="Save operation for objects without their own (standard, bulk or module:function)",
)
@connection_options
def import_command(
    config_file: Optional[Path],
    objects: tuple[str, ...],
    datadir: Optional[Path],
    verbose: bool,
    remove: bool,
    allowpartial: bool,
    save_operation: Optional[str],
    instance_url: Optional[str],
    access_token: Optional[str],
) -> None:
    """Import record files into the org, or remove them with --remove.

    Removal processes objects in reverse order so dependent records go first.
    """
    console.verbose = verbose
    try:
        config_path = get_config_path(config_file)
        config = load_config(config_path)
        run_logger = SyncLogger(console.rich, verbose=verbose)

        with _open_connection(instance_url, access_token) as connection:
            engine = ImportEngine(
                config,
                connection,
                save_operation=save_operation,
                allow_partial=allowpartial,
                remove=remove,
                **_engine_options(config, config_path, objects, datadir, run_logger),
            )
            results = _run(engine, "Removing records..." if remove else "Importing records...")
    except PartialFailureError as e:
        if e.result is not None:
            console.print_results(e.result, failures_only=True)
        console.print_error(e.message)
        sys.exit(1)
    except FlexiSyncError as e:
        console.print_error(e.message)
        sys.exit(1)

    for result in results:
        console.print_results(result)
    console.print_summary(results, title="Removal Summary" if remove else "Import Summary")


@cli.group()
def config() -> None:
    """Manage data configuration files.

    \b
    Commands:
      init   Write a commented example configuration
      check  Validate a configuration file
    """
    pass


@config.command("init")
@click.argument("file", required=False, type=click.Path(dir_okay=False, path_type=Path))
@click.option("--force", "-f", is_flag=True, help="Overwrite an existing file")
def config_init(file: Optional[Path], force: bool) -> None:
    """Write an example configuration file.

    \b
    Example:
        flexisync config init data/flexisync.yaml
    """
    path = file or Path(DEFAULT_CONFIG_FILE)
    if write_default_config(path, force=force):
        logger.success(f"Created configuration: {path}")
    else:
        logger.warning(f"Configuration already exists: {path} (use --force to overwrite)")


@config.command("check")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def config_check(file: Path) -> None:
    """Validate a configuration file.

    \b
    Example:
        flexisync config check flexisync.yaml
    """
    is_valid, errors = validate_config_file(file)
    if not is_valid:
        logger.error(f"Configuration is invalid: {file}")
        for error in errors:
            console.print(f"  [red]•[/red] {error}")
        sys.exit(1)

    config = load_config(file)
    console.print_config_summary(str(file), len(get_objects_to_process(config)))
    logger.success("Configuration is valid")


def _open_connection(instance_url: Optional[str], access_token: Optional[str]) -> SalesforceConnection:
    if not instance_url or not access_token:
        raise FlexiSyncError(
            "An instance URL and access token are required (--instance-url/--access-token or "
            "FLEXISYNC_INSTANCE_URL/FLEXISYNC_ACCESS_TOKEN)"
        )
    return SalesforceConnection(instance_url, access_token)


def _engine_options(
    config: DataConfig,
    config_path: Path,
    objects: tuple[str, ...],
    datadir: Optional[Path],
    run_logger: SyncLogger,
) -> dict:
    # Relative paths in the config are resolved against the config file's directory
    base_path = config_path.parent
    return {
        "data_dir": datadir.resolve() if datadir else None,
        "base_path": base_path,
        "dispatcher": HookDispatcher.from_config(config.hooks, base_path),
        "logger": run_logger,
        "object_names": parse_object_names(objects),
    }


def _run(engine: SyncEngine, message: str) -> list:
    with engine.logger.status(message):
        return engine.run()
