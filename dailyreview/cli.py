"""
CLI interface for daily review.

Usage:
    daily-review start
    daily-review next
    daily-review done
    daily-review config --count 5 --exclude-folder Archive
"""

import asyncio
import atexit
import json
import os
from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from .api import DailyReview
from .logging_config import configure_quiet_mode, enable_debug_mode
from .navigator import COMPLETE, NoteView
from .types import Note, ReviewSettings, SelectionMode, TimeRange

EMPTY_NOTICE = "No notes found matching your criteria. Check your settings."
COMPLETE_NOTICE = "Review complete! You've reviewed all notes in this session."


# Set DAILY_REVIEW_VERBOSE=1 to enable debug mode via environment
if os.environ.get("DAILY_REVIEW_VERBOSE") == "1":
    enable_debug_mode()
else:
    configure_quiet_mode(quiet=True)


def _version_callback(value: bool):
    if value:
        from importlib.metadata import version
        print(f"daily-review {version('daily-review')}")
        raise typer.Exit()


def _verbose_callback(value: bool):
    if value:
        enable_debug_mode()


# Global state for CLI options
_json_output = False
_vault_override: Optional[Path] = None
_state_override: Optional[Path] = None


def _json_callback(value: bool):
    global _json_output
    _json_output = value


def _get_json_output() -> bool:
    return _json_output


def _vault_callback(value: Optional[Path]):
    global _vault_override
    _vault_override = value


def _state_callback(value: Optional[Path]):
    global _state_override
    _state_override = value


app = typer.Typer(
    name="daily-review",
    help="Review a few notes from your vault every day.",
    no_args_is_help=False,
    invoke_without_command=True,
    rich_markup_mode=None,
)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[bool, typer.Option(
        "--verbose", "-v",
        help="Enable debug-level logging to stderr",
        callback=_verbose_callback,
        is_eager=True,
    )] = False,
    output_json: Annotated[bool, typer.Option(
        "--json", "-j",
        help="Output as JSON",
        callback=_json_callback,
        is_eager=True,
    )] = False,
    version: Annotated[Optional[bool], typer.Option(
        "--version",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    )] = None,
    vault: Annotated[Optional[Path], typer.Option(
        "--vault", "-V",
        envvar="DAILY_REVIEW_VAULT",
        help="Directory of markdown notes (default: current directory)",
        callback=_vault_callback,
        is_eager=True,
    )] = None,
    state_dir: Annotated[Optional[Path], typer.Option(
        "--state-dir",
        envvar="DAILY_REVIEW_STATE",
        help="Where review state is kept (default: <vault>/.daily-review)",
        callback=_state_callback,
        is_eager=True,
    )] = None,
):
    """Review a few notes from your vault every day."""
    # No subcommand: resume (or start) today's review
    if ctx.invoked_subcommand is None:
        review = _get_review()
        _open_review(review)
        _show_current(review)


def _get_review() -> DailyReview:
    try:
        review = DailyReview(vault=_vault_override, state_dir=_state_override)
    except (OSError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    atexit.register(review.close)
    return review


# -----------------------------------------------------------------------------
# Output Formatting
# -----------------------------------------------------------------------------

def render_view(view: NoteView, as_json: bool = False) -> str:
    """Format one note for the terminal."""
    if as_json:
        return json.dumps({
            "path": view.note.path,
            "title": view.note.title,
            "position": view.position,
            "total": view.total,
            "tags": view.tags,
            "available": view.available,
            "done": view.done,
            "content": view.content,
        }, ensure_ascii=False)
    lines = [f"Daily Review  {view.position} / {view.total}", "", f"## {view.note.title}"]
    if view.tags:
        lines.append(" ".join(view.tags))
    lines.append("")
    lines.append(view.content.rstrip("\n"))
    return "\n".join(lines)


def render_session(notes: list[Note], current: Optional[str], done: set[str], as_json: bool = False) -> str:
    """Format the list of today's notes with position and done markers."""
    if as_json:
        return json.dumps([
            {"path": n.path, "title": n.title, "current": n.path == current, "done": n.path in done}
            for n in notes
        ], ensure_ascii=False)
    lines = []
    for i, note in enumerate(notes, start=1):
        marker = ">" if note.path == current else " "
        check = "x" if note.path in done else " "
        lines.append(f"{marker} [{check}] {i:>2}. {note.path}")
    return "\n".join(lines)


def render_settings(settings: ReviewSettings, as_json: bool = False) -> str:
    if as_json:
        return json.dumps(settings.to_dict(), ensure_ascii=False)

    def _list(values) -> str:
        return ", ".join(values) if values else "(none)"

    return "\n".join([
        f"review count:       {settings.review_count}",
        f"recent days:        {settings.recent_days}",
        f"time range:         {TimeRange(settings.time_range).value}",
        f"selection mode:     {SelectionMode(settings.selection_mode).value}",
        f"include subfolders: {'yes' if settings.include_subfolders else 'no'}",
        f"include folders:    {_list(settings.include_folders)}",
        f"exclude folders:    {_list(settings.exclude_folders)}",
        f"include tags:       {_list(settings.include_tags)}",
        f"exclude tags:       {_list(settings.exclude_tags)}",
    ])


def _open_review(review: DailyReview) -> list[Note]:
    """Start or resume today's review; exit with a notice if nothing matches."""
    notes = review.start_review()
    if not notes:
        typer.echo(EMPTY_NOTICE, err=True)
        raise typer.Exit(0)
    return notes


def _show_current(review: DailyReview) -> None:
    view = asyncio.run(review.load_current())
    if view is COMPLETE:
        typer.echo(COMPLETE_NOTICE)
        return
    if view is not None:
        typer.echo(render_view(view, as_json=_get_json_output()))


# -----------------------------------------------------------------------------
# Commands
# -----------------------------------------------------------------------------

@app.command()
def start():
    """List today's notes and show the current one."""
    review = _get_review()
    notes = _open_review(review)
    session = review.session
    typer.echo(render_session(
        notes,
        session.current_note_path if session else None,
        set(session.done_paths) if session else set(),
        as_json=_get_json_output(),
    ))
    if not _get_json_output():
        typer.echo("")
        _show_current(review)


@app.command()
def show():
    """Show the current note."""
    review = _get_review()
    _open_review(review)
    _show_current(review)


@app.command("next")
def next_note():
    """Move to the next note."""
    review = _get_review()
    _open_review(review)
    review.advance(1)
    _show_current(review)


@app.command("prev")
def previous_note():
    """Move to the previous note."""
    review = _get_review()
    _open_review(review)
    review.advance(-1)
    _show_current(review)


@app.command()
def done():
    """Mark the current note reviewed and move on."""
    review = _get_review()
    _open_review(review)
    review.mark_current_done()
    _show_current(review)


@app.command()
def status():
    """Show the state of today's session without changing it."""
    review = _get_review()
    session = review.session
    info = {
        "date": review.today.isoformat(),
        "status": review.session_status(),
        "notes": len(session.note_paths) if session and isinstance(session.note_paths, list) else 0,
        "done": len(session.done_paths) if session else 0,
        "current": session.current_note_path if session else None,
    }
    if _get_json_output():
        typer.echo(json.dumps(info))
        return
    typer.echo(f"{info['date']}: session {info['status']}")
    if info["status"] == "valid":
        typer.echo(f"{info['done']} / {info['notes']} done, current: {info['current']}")


@app.command()
def reset():
    """Discard today's session so the next start selects again."""
    review = _get_review()
    review.reset()
    typer.echo("Session cleared.")


@app.command()
def config(
    count: Annotated[Optional[int], typer.Option(
        "--count", "-n", help="How many notes to review each session")] = None,
    recent_days: Annotated[Optional[int], typer.Option(
        "--recent-days", "-r",
        help="Prioritize notes from the last N days; older notes fill the remainder")] = None,
    time_range: Annotated[Optional[TimeRange], typer.Option(
        "--time-range", "-t", help="Only consider notes from this period")] = None,
    mode: Annotated[Optional[SelectionMode], typer.Option(
        "--mode", "-m", help="daily: same order all day; shuffle: random")] = None,
    subfolders: Annotated[Optional[bool], typer.Option(
        "--subfolders/--no-subfolders", help="Include notes in subfolders of included folders")] = None,
    include_folder: Annotated[Optional[list[str]], typer.Option(
        "--include-folder", "-i", help="Only review notes from this folder (repeatable)")] = None,
    exclude_folder: Annotated[Optional[list[str]], typer.Option(
        "--exclude-folder", "-x", help="Skip notes from this folder (repeatable)")] = None,
    include_tag: Annotated[Optional[list[str]], typer.Option(
        "--include-tag", help="Only review notes with one of these tags (repeatable)")] = None,
    exclude_tag: Annotated[Optional[list[str]], typer.Option(
        "--exclude-tag", help="Skip notes with this tag (repeatable)")] = None,
    remove: Annotated[Optional[list[str]], typer.Option(
        "--remove", help="Remove a folder or tag from every list (repeatable)")] = None,
):
    """Show or change review settings."""
    review = _get_review()
    s = review.settings
    changes: dict = {}
    if count is not None:
        if count <= 0:
            typer.echo("Error: --count must be at least 1", err=True)
            raise typer.Exit(1)
        changes["review_count"] = count
    if recent_days is not None:
        if recent_days <= 0:
            typer.echo("Error: --recent-days must be at least 1", err=True)
            raise typer.Exit(1)
        changes["recent_days"] = recent_days
    if time_range is not None:
        changes["time_range"] = time_range
    if mode is not None:
        changes["selection_mode"] = mode
    if subfolders is not None:
        changes["include_subfolders"] = subfolders

    lists = {
        "include_folders": list(s.include_folders) + list(include_folder or []),
        "exclude_folders": list(s.exclude_folders) + list(exclude_folder or []),
        "include_tags": list(s.include_tags) + list(include_tag or []),
        "exclude_tags": list(s.exclude_tags) + list(exclude_tag or []),
    }
    if remove:
        drop = set(remove)
        drop |= {r.replace("\\", "/").strip().strip("/") for r in remove}
        drop |= {r if r.startswith("#") else f"#{r}" for r in remove}
        lists = {k: [v for v in vals if v not in drop] for k, vals in lists.items()}
    for key, values in lists.items():
        if tuple(values) != getattr(s, key):
            changes[key] = values

    if changes:
        s = review.update_settings(**changes)
    typer.echo(render_settings(s, as_json=_get_json_output()))


@app.command()
def folders(
    query: Annotated[str, typer.Argument(help="Partial folder path; end with / to browse")] = "",
):
    """Suggest folder paths for include/exclude lists."""
    review = _get_review()
    suggestions = review.folder_suggestions(query)
    if _get_json_output():
        typer.echo(json.dumps(suggestions))
        return
    for folder in suggestions:
        typer.echo(folder)


@app.command()
def tags(
    path: Annotated[str, typer.Argument(help="Vault-relative note path")],
):
    """Show the tags of a note."""
    review = _get_review()
    try:
        found = sorted(review.note_tags(path))
    except (ValueError, OSError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    if _get_json_output():
        typer.echo(json.dumps(found))
        return
    for tag in found:
        typer.echo(tag)


# -----------------------------------------------------------------------------

def main():
    try:
        app()
    except SystemExit:
        raise  # Let typer handle exit codes
    except KeyboardInterrupt:
        raise SystemExit(130)  # Standard exit code for Ctrl+C
    except Exception as e:
        # Log full traceback to file, show clean message to user
        from .errors import log_exception
        log_path = log_exception(
            e, context="daily-review CLI", vault=_vault_override, state_dir=_state_override,
        )
        typer.echo(f"Error: {e}", err=True)
        typer.echo(f"Details logged to {log_path}", err=True)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
