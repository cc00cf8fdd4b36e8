"""CLI entry point for gameshelf."""

import asyncio
import logging
from pathlib import Path

import click
from dotenv import load_dotenv

from gameshelf.codec import Playlist
from gameshelf.config import DEFAULT_CONFIG_PATH, ConfigManager, validate_root
from gameshelf.editing import add_game as add_game_to_playlist
from gameshelf.editing import apply_edit, icon_from_file, start_edit
from gameshelf.editing import remove_game as remove_game_from_playlist
from gameshelf.report import LoadReport, print_report
from gameshelf.search import find_playlists
from gameshelf.store import PlaylistStore, StoreError

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@click.group()
@click.option("--root", envvar="GAMESHELF_ROOT", type=click.Path(file_okay=False),
              help="Storage root holding the playlists folder (overrides saved config).")
@click.option("--config-path", default=DEFAULT_CONFIG_PATH, show_default=True, help="Path to config file.")
@click.option("--verbose", "-v", is_flag=True, help="Log store activity to stderr.")
@click.pass_context
def cli(ctx: click.Context, root: str | None, config_path: str, verbose: bool):
    """Game Shelf - Manage game playlists stored as JSON files."""
    load_dotenv()
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format=LOG_FORMAT)
    ctx.obj = {"root": root, "config_path": config_path}


def _build_store(ctx: click.Context) -> PlaylistStore:
    """Create a store from the --root option or the saved local config."""
    cfg = ConfigManager(ctx.obj["config_path"])
    cfg.load()
    root = ctx.obj["root"] or cfg.get_root_path()
    if not root:
        raise click.ClickException(
            "No storage root configured. "
            "Run `gameshelf root set /path/to/root` or pass --root."
        )
    return PlaylistStore(Path(root).expanduser(), cfg.get_playlists_folder())


async def _load(store: PlaylistStore) -> LoadReport:
    try:
        return await store.load()
    except StoreError as e:
        raise click.ClickException(str(e))


def _require_playlist(store: PlaylistStore, playlist_id: str) -> Playlist:
    playlist = store.get(playlist_id)
    if playlist is None:
        raise click.ClickException(f"Playlist '{playlist_id}' not found.")
    return playlist


@cli.group()
def root():
    """Manage the saved storage root."""


@root.command("set")
@click.argument("path", type=click.Path(exists=True, file_okay=False))
@click.option("--folder", default=None, help="Name of the playlists folder inside the root.")
@click.pass_context
def root_set(ctx: click.Context, path: str, folder: str | None):
    """Validate and save the default storage root."""
    ok, error = validate_root(path)
    if not ok:
        raise click.ClickException(error or "Invalid storage root.")

    cfg = ConfigManager(ctx.obj["config_path"])
    cfg.load()
    cfg.set_root_path(path)
    if folder:
        try:
            cfg.set_playlists_folder(folder)
        except ValueError as e:
            raise click.ClickException(str(e))
    cfg.save()

    click.echo(f"Saved storage root: {cfg.get_root_path()}")


@root.command("show")
@click.pass_context
def root_show(ctx: click.Context):
    """Show the configured storage root and validation status."""
    cfg = ConfigManager(ctx.obj["config_path"])
    cfg.load()
    root_path = cfg.get_root_path()
    if not root_path:
        click.echo("Storage root is not configured.")
        click.echo("Set it with: gameshelf root set /path/to/root")
        return

    click.echo(f"Configured storage root: {root_path}")
    click.echo(f"Playlists folder: {cfg.get_playlists_folder()}")
    ok, error = validate_root(root_path)
    if ok:
        click.echo("Status: OK (folder exists)")
    else:
        click.echo(f"Status: INVALID ({error})")


@cli.command("list")
@click.pass_context
def list_playlists(ctx: click.Context):
    """List all playlists in the playlists folder."""
    store = _build_store(ctx)
    asyncio.run(_load(store))
    if not store.playlists:
        click.echo("No playlists found.")
        return
    for pl in store.playlists:
        title = pl.title or "(untitled)"
        click.echo(f"  {pl.id}  {title} ({len(pl.games)} games)")


@cli.command()
@click.argument("playlist_id")
@click.pass_context
def show(ctx: click.Context, playlist_id: str):
    """Show one playlist and its games."""
    store = _build_store(ctx)
    asyncio.run(_load(store))
    pl = _require_playlist(store, playlist_id)
    click.echo(f"ID:          {pl.id}")
    click.echo(f"Title:       {pl.title}")
    click.echo(f"Author:      {pl.author}")
    click.echo(f"Description: {pl.description}")
    click.echo(f"Icon:        {'yes' if pl.icon else 'no'}")
    click.echo(f"Games ({len(pl.games)}):")
    for entry in pl.games:
        line = f"  - {entry.id}"
        if entry.notes:
            line += f"  ({entry.notes})"
        click.echo(line)
    path = store.file_index.get(pl.id)
    if path is not None:
        click.echo(f"File:        {path}")


@cli.command()
@click.option("--title", default="", help="Playlist title.")
@click.option("--author", default="", help="Playlist author.")
@click.option("--description", default="", help="Playlist description.")
@click.pass_context
def create(ctx: click.Context, title: str, author: str, description: str):
    """Create a new, empty playlist and save it."""
    store = _build_store(ctx)

    async def run() -> tuple[Playlist, Path]:
        await _load(store)
        pl = store.create()
        pl.title = title
        pl.author = author
        pl.description = description
        return pl, await store.save(pl)

    pl, path = asyncio.run(run())
    click.echo(f"Created playlist {pl.id}")
    click.echo(f"Saved to {path}")


@cli.command()
@click.argument("playlist_id")
@click.option("--title", default=None, help="New title.")
@click.option("--author", default=None, help="New author.")
@click.option("--description", default=None, help="New description.")
@click.option("--clear-icon", is_flag=True, help="Remove the playlist icon.")
@click.pass_context
def edit(
    ctx: click.Context,
    playlist_id: str,
    title: str | None,
    author: str | None,
    description: str | None,
    clear_icon: bool,
):
    """Change a playlist's title, author or description."""
    store = _build_store(ctx)

    async def run() -> bool:
        await _load(store)
        pl = _require_playlist(store, playlist_id)
        buffer = start_edit(pl)
        if title is not None:
            buffer.title = title
        if author is not None:
            buffer.author = author
        if description is not None:
            buffer.description = description
        if clear_icon:
            buffer.icon = ""
        if buffer == pl:
            return False
        apply_edit(pl, buffer)
        await store.save(pl)
        return True

    if asyncio.run(run()):
        click.echo(f"Updated playlist {playlist_id}.")
    else:
        click.echo(f"Nothing to change for {playlist_id}.")


@cli.command("add-game")
@click.argument("playlist_id")
@click.argument("game_id")
@click.option("--notes", default="", help="Free-text notes for this entry.")
@click.pass_context
def add_game(ctx: click.Context, playlist_id: str, game_id: str, notes: str):
    """Add a game to a playlist (skipped if already present)."""
    store = _build_store(ctx)

    async def run() -> bool:
        await _load(store)
        pl = _require_playlist(store, playlist_id)
        added = add_game_to_playlist(pl, game_id, notes)
        if added:
            await store.save(pl)
        return added

    if asyncio.run(run()):
        click.echo(f"Added {game_id} to {playlist_id}.")
    else:
        click.echo(f"{game_id} is already in {playlist_id}.")


@cli.command("remove-game")
@click.argument("playlist_id")
@click.argument("game_id")
@click.pass_context
def remove_game(ctx: click.Context, playlist_id: str, game_id: str):
    """Remove a game from a playlist."""
    store = _build_store(ctx)

    async def run() -> bool:
        await _load(store)
        pl = _require_playlist(store, playlist_id)
        removed = remove_game_from_playlist(pl, game_id)
        if removed:
            await store.save(pl)
        return removed

    if asyncio.run(run()):
        click.echo(f"Removed {game_id} from {playlist_id}.")
    else:
        click.echo(f"{game_id} is not in {playlist_id}.")


@cli.command("set-icon")
@click.argument("playlist_id")
@click.argument("image", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def set_icon(ctx: click.Context, playlist_id: str, image: str):
    """Embed an image file as the playlist icon."""
    try:
        icon = icon_from_file(image)
    except (ValueError, OSError) as e:
        raise click.ClickException(str(e))
    store = _build_store(ctx)

    async def run() -> None:
        await _load(store)
        pl = _require_playlist(store, playlist_id)
        pl.icon = icon
        await store.save(pl)

    asyncio.run(run())
    click.echo(f"Icon updated for {playlist_id}.")


@cli.command()
@click.argument("playlist_id")
@click.pass_context
def delete(ctx: click.Context, playlist_id: str):
    """Delete a playlist file and drop it from the store."""
    store = _build_store(ctx)

    async def run() -> bool:
        await _load(store)
        deleted = await store.delete(playlist_id)
        store.remove(playlist_id)
        return deleted

    if asyncio.run(run()):
        click.echo(f"Deleted playlist {playlist_id}.")
    else:
        raise click.ClickException(f"No file found for playlist '{playlist_id}'.")


@cli.command()
@click.argument("query")
@click.option("--threshold", "-t", default=60, show_default=True, help="Minimum match score (0-100).")
@click.pass_context
def find(ctx: click.Context, query: str, threshold: int):
    """Find playlists by title."""
    store = _build_store(ctx)
    asyncio.run(_load(store))
    results = find_playlists(store.playlists, query, threshold=threshold)
    if not results:
        click.echo(f"No playlists match '{query}'.")
        return
    for pl, score in results:
        click.echo(f"  {score:5.1f}  {pl.id}  {pl.title}")


@cli.command()
@click.pass_context
def check(ctx: click.Context):
    """Load the playlists folder and report skipped files."""
    store = _build_store(ctx)
    report = asyncio.run(_load(store))
    print_report(report)
