"""Main entry point for the streamtape CLI.

Sets up the Typer CLI application, performs dependency injection (Composition Root),
defines CLI commands, and delegates execution to the CommandHandler.
"""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, Any, Coroutine, Dict, List, Optional

import typer

from streamtape.client import StreamTape
from streamtape.core.command_handler import EXIT_FAILURE, CommandHandler
from streamtape.core.services.upload_service import (
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_REMOTE_UPLOAD_TIMEOUT_SECONDS,
)
from streamtape.infrastructure.cli.display import ConsoleDisplay
from streamtape.infrastructure.config.settings import get_config, load_client_config, load_configuration
from streamtape.infrastructure.monitoring.logger_setup import DEFAULT_LOG_FORMAT, setup_logging

logger = logging.getLogger(__name__)


# --- Dependency Injection (Manual) ---

def create_client(login: Optional[str] = None, key: Optional[str] = None) -> StreamTape:
    """Builds the API client from explicit credentials and loaded settings."""
    return StreamTape(load_client_config(login=login, key=key))


def create_dependencies(login: Optional[str] = None, key: Optional[str] = None) -> Dict[str, Any]:
    """Creates and wires up all dependencies for one command.

    This acts as the Composition Root.
    """
    load_configuration()
    setup_logging(
        log_level=get_config('logging.level'),
        log_format=get_config('logging.format', DEFAULT_LOG_FORMAT),
        log_file=get_config('logging.file'),
    )

    dependencies: Dict[str, Any] = {'ui': ConsoleDisplay()}
    try:
        dependencies['client'] = create_client(login=login, key=key)
    except ValueError as e:
        logger.error(f"Application initialization failed: {e}")
        dependencies['ui'].display_error(str(e), title="Configuration Error")
        raise typer.Exit(code=EXIT_FAILURE)

    dependencies['command_handler'] = CommandHandler(client=dependencies['client'], ui=dependencies['ui'])
    logger.debug("All dependencies initialized successfully.")
    return dependencies


# --- Typer App Definition ---
app = typer.Typer(
    name="streamtape",
    help="Command line client for the StreamTape file-hosting API.",
    add_completion=False,
    no_args_is_help=True,
)


def _handler(ctx: typer.Context) -> CommandHandler:
    if ctx.obj is None or 'command_handler' not in ctx.obj:
        options = ctx.obj or {}
        ctx.obj = create_dependencies(login=options.get('login'), key=options.get('key'))
    return ctx.obj['command_handler']


# --- Helper for Running Async Commands ---
def run_async(ctx: typer.Context, coro: Coroutine[Any, Any, int]) -> None:
    """Runs a handler coroutine, closes the client and exits with its code."""
    client: StreamTape = ctx.obj['client']

    async def runner() -> int:
        try:
            return await coro
        finally:
            await client.close()

    exit_code = asyncio.run(runner())
    if exit_code:
        raise typer.Exit(code=exit_code)


# --- CLI Commands ---

FileIdArgument = Annotated[str, typer.Argument(help="File (link) id.")]
FolderOption = Annotated[Optional[str], typer.Option("--folder", "-f", help="Folder id (root when omitted).")]


@app.callback()
def main_callback(
    ctx: typer.Context,
    login: Annotated[
        Optional[str], typer.Option("--login", envvar="STREAMTAPE_LOGIN", help="API login.", show_envvar=False)
    ] = None,
    key: Annotated[
        Optional[str], typer.Option("--key", envvar="STREAMTAPE_KEY", help="API key.", show_envvar=False)
    ] = None,
):
    """Manage files on StreamTape from the command line."""
    ctx.obj = {'login': login, 'key': key}


@app.command()
def account(ctx: typer.Context):
    """Show account information."""
    run_async(ctx, _handler(ctx).handle_account())


@app.command()
def info(ctx: typer.Context, file_ids: Annotated[List[str], typer.Argument(help="One or more file ids.")]):
    """Show information about files."""
    run_async(ctx, _handler(ctx).handle_info(file_ids))


@app.command(name="ls")
def list_folder(ctx: typer.Context, folder: FolderOption = None):
    """List the folders and files of a folder."""
    run_async(ctx, _handler(ctx).handle_list_folder(folder))


@app.command()
def mkdir(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Name of the new folder.")],
    parent: Annotated[Optional[str], typer.Option("--parent", "-p", help="Parent folder id.")] = None,
):
    """Create a folder and print its id."""
    run_async(ctx, _handler(ctx).handle_create_folder(name, parent))


@app.command(name="rename-folder")
def rename_folder(
    ctx: typer.Context,
    folder_id: Annotated[str, typer.Argument(help="Folder id.")],
    new_name: Annotated[str, typer.Argument(help="New folder name.")],
):
    """Rename a folder."""
    run_async(ctx, _handler(ctx).handle_rename_folder(folder_id, new_name))


@app.command()
def rmdir(ctx: typer.Context, folder_id: Annotated[str, typer.Argument(help="Folder id.")]):
    """Delete a folder and everything in it."""
    run_async(ctx, _handler(ctx).handle_delete_folder(folder_id))


@app.command()
def rename(
    ctx: typer.Context,
    file_id: FileIdArgument,
    new_name: Annotated[str, typer.Argument(help="New file name.")],
):
    """Rename a file."""
    run_async(ctx, _handler(ctx).handle_rename_file(file_id, new_name))


@app.command(name="mv")
def move(
    ctx: typer.Context,
    file_id: FileIdArgument,
    folder_id: Annotated[str, typer.Argument(help="Target folder id.")],
):
    """Move a file into another folder."""
    run_async(ctx, _handler(ctx).handle_move_file(file_id, folder_id))


@app.command(name="rm")
def remove(ctx: typer.Context, file_id: FileIdArgument):
    """Delete a file."""
    run_async(ctx, _handler(ctx).handle_delete_file(file_id))


@app.command()
def converts(
    ctx: typer.Context,
    failed: Annotated[bool, typer.Option("--failed", help="List failed instead of running conversions.")] = False,
):
    """List running (or failed) video conversions."""
    run_async(ctx, _handler(ctx).handle_converts(failed))


@app.command()
def thumbnail(ctx: typer.Context, file_id: FileIdArgument):
    """Print the thumbnail URL of a video."""
    run_async(ctx, _handler(ctx).handle_thumbnail(file_id))


@app.command()
def ticket(ctx: typer.Context, file_id: FileIdArgument):
    """Request a download ticket."""
    run_async(ctx, _handler(ctx).handle_ticket(file_id))


@app.command()
def link(
    ctx: typer.Context,
    file_id: FileIdArgument,
    ticket: Annotated[Optional[str], typer.Option("--ticket", "-t", help="Use an existing download ticket.")] = None,
    captcha: Annotated[Optional[str], typer.Option("--captcha", help="Captcha response, when required.")] = None,
):
    """Print a direct download link."""
    run_async(ctx, _handler(ctx).handle_link(file_id, ticket, captcha))


@app.command()
def upload(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(
        exists=True, file_okay=True, dir_okay=False, readable=True, resolve_path=True,
        help="Local file to upload.",
    )],
    folder: FolderOption = None,
    compute_hash: Annotated[bool, typer.Option("--hash", help="Send the file's SHA-256 for verification.")] = False,
    http_only: Annotated[bool, typer.Option("--http-only", help="Upload over plain HTTP.")] = False,
):
    """Upload a local file and print the new file id."""
    run_async(ctx, _handler(ctx).handle_upload(str(path), folder, compute_hash, http_only))


@app.command(name="remote-add")
def remote_add(
    ctx: typer.Context,
    url: Annotated[str, typer.Argument(help="URL the server should fetch.")],
    folder: FolderOption = None,
    name: Annotated[Optional[str], typer.Option("--name", "-n", help="Name of the stored file.")] = None,
    headers: Annotated[Optional[str], typer.Option("--headers", help="Extra headers sent when fetching.")] = None,
):
    """Start a remote upload and print its id."""
    run_async(ctx, _handler(ctx).handle_remote_add(url, folder, name, headers))


@app.command(name="remote-rm")
def remote_remove(
    ctx: typer.Context,
    upload_id: Annotated[str, typer.Argument(help="Remote upload id, or 'all'.")],
):
    """Remove a remote upload."""
    run_async(ctx, _handler(ctx).handle_remote_remove(upload_id))


@app.command(name="remote-status")
def remote_status(ctx: typer.Context, upload_id: Annotated[str, typer.Argument(help="Remote upload id.")]):
    """Show the status of a remote upload."""
    run_async(ctx, _handler(ctx).handle_remote_status(upload_id))


@app.command(name="remote-wait")
def remote_wait(
    ctx: typer.Context,
    upload_id: Annotated[str, typer.Argument(help="Remote upload id.")],
    interval: Annotated[float, typer.Option("--interval", min=0, help="Seconds between status checks.")] = DEFAULT_POLL_INTERVAL_SECONDS,
    timeout: Annotated[float, typer.Option("--timeout", min=0, help="Seconds before giving up.")] = DEFAULT_REMOTE_UPLOAD_TIMEOUT_SECONDS,
):
    """Wait for a remote upload to finish and print the file link."""
    run_async(ctx, _handler(ctx).handle_remote_wait(upload_id, interval, timeout))


# --- Main Execution Guard ---

def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    app()


if __name__ == "__main__":
    cli_entry_point()
