"""Command-line front end for llmlog."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, NoReturn, Optional

import typer

from .config import Settings
from .data import Record, RecordDraft, RecordRepository
from .errors import LLMLogError
from .services import CommentService, ModelRegistry, SearchService, TransferService
from .services.transfer import default_backup_name
from .storage import create_store

app = typer.Typer(help="Archive, tag and search saved AI conversations.", no_args_is_help=True)
comment_app = typer.Typer(help="Manage comments on a log.", no_args_is_help=True)
models_app = typer.Typer(help="Manage the list of model labels.", no_args_is_help=True)
app.add_typer(comment_app, name="comment")
app.add_typer(models_app, name="models")


@dataclass
class Services:
    """Everything a command needs, built once per invocation."""

    repository: RecordRepository
    search: SearchService
    transfer: TransferService
    comments: CommentService
    registry: ModelRegistry


def build_services(config: Settings) -> Services:
    store = create_store(config)
    repository = RecordRepository(store, key=config.records_key)
    return Services(
        repository=repository,
        search=SearchService(repository),
        transfer=TransferService(repository, indent=config.export_indent),
        comments=CommentService(repository),
        registry=ModelRegistry(store, repository, key=config.models_key),
    )


def _services(ctx: typer.Context) -> Services:
    return ctx.obj


def _fail(message: str) -> NoReturn:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(code=1)


def _summary(record: Record) -> str:
    day = record.created_at.date().isoformat()
    return f"{record.id}  {day}  {record.title or 'Untitled'}  [{record.model or 'No Model'}]"


def _read_content(content: Optional[str], file: Optional[Path]) -> Optional[str]:
    if content is not None and file is not None:
        _fail("Use either --content or --file, not both")
    if file is not None:
        return file.read_text(encoding="utf-8")
    return content


@app.callback()
def main(
    ctx: typer.Context,
    data_root: Optional[Path] = typer.Option(None, "--data-root", help="Directory holding the log data"),
) -> None:
    config = Settings()
    if data_root is not None:
        config = config.model_copy(update={"data_root": data_root})
    logging.basicConfig(level=config.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
    ctx.obj = build_services(config)
    ctx.meta["settings"] = config


# ----------------------------------------------------------------------
# Records
# ----------------------------------------------------------------------
@app.command("list")
def list_logs(
    ctx: typer.Context,
    query: str = typer.Option("", "--query", "-q", help="Substring, or tag:<name> for an exact tag"),
    sort: str = typer.Option("date", "--sort", "-s", help="date, title or model"),
) -> None:
    """List logs, optionally filtered and sorted."""
    if sort not in ("date", "title", "model"):
        _fail(f"Unknown sort key: {sort}")
    records = _services(ctx).search.search(query, sort)  # type: ignore[arg-type]
    if not records:
        typer.echo("No logs found")
        return
    for record in records:
        typer.echo(_summary(record))


@app.command()
def show(ctx: typer.Context, record_id: str) -> None:
    """Print one log with its comments."""
    record = _services(ctx).repository.get(record_id)
    if record is None:
        _fail(f"Record {record_id} not found")
    typer.echo(f"# {record.title or 'Untitled'}")
    typer.echo(f"id: {record.id}")
    typer.echo(f"model: {record.model}")
    typer.echo(f"tags: {', '.join(record.tags)}")
    typer.echo(f"created: {record.created_at.isoformat()}")
    typer.echo(f"updated: {record.updated_at.isoformat()}")
    typer.echo("")
    typer.echo(record.content)
    for comment in record.comments:
        typer.echo("")
        typer.echo(f"--- comment {comment.id} ({comment.created_at.isoformat()})")
        typer.echo(comment.text)


@app.command()
def add(
    ctx: typer.Context,
    title: str = typer.Option("", "--title", "-t"),
    model: str = typer.Option("", "--model", "-m"),
    tag: List[str] = typer.Option([], "--tag", help="Repeat for several tags"),
    content: Optional[str] = typer.Option(None, "--content", "-c"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", exists=True, dir_okay=False),
) -> None:
    """Create a new log."""
    body = _read_content(content, file) or ""
    if not title.strip() and not body:
        _fail("Please enter at least a title or content")
    record = _services(ctx).repository.save(
        RecordDraft(title=title.strip(), model=model.strip(), tags=tag, content=body)
    )
    typer.echo(record.id)


@app.command()
def edit(
    ctx: typer.Context,
    record_id: str,
    title: Optional[str] = typer.Option(None, "--title", "-t"),
    model: Optional[str] = typer.Option(None, "--model", "-m"),
    tag: Optional[List[str]] = typer.Option(None, "--tag", help="Replaces all tags"),
    content: Optional[str] = typer.Option(None, "--content", "-c"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", exists=True, dir_okay=False),
) -> None:
    """Change fields of an existing log."""
    services = _services(ctx)
    if services.repository.get(record_id) is None:
        _fail(f"Record {record_id} not found")
    changes = {"id": record_id}
    if title is not None:
        changes["title"] = title.strip()
    if model is not None:
        changes["model"] = model.strip()
    if tag:
        changes["tags"] = tag
    body = _read_content(content, file)
    if body is not None:
        changes["content"] = body
    record = services.repository.save(RecordDraft(**changes))
    typer.echo(_summary(record))


@app.command()
def delete(ctx: typer.Context, record_id: str) -> None:
    """Delete a log permanently."""
    removed = _services(ctx).repository.delete(record_id)
    typer.echo("Deleted" if removed else "Nothing to delete")


# ----------------------------------------------------------------------
# Backup
# ----------------------------------------------------------------------
@app.command("export")
def export_logs(
    ctx: typer.Context,
    path: Optional[Path] = typer.Argument(None, help="Target file; defaults to a dated backup"),
) -> None:
    """Write every log to a JSON backup file."""
    services = _services(ctx)
    settings: Settings = ctx.meta["settings"]
    target = path or settings.resolved_export_dir / default_backup_name()
    typer.echo(str(services.transfer.export_to_file(target)))


@app.command("import")
def import_logs(ctx: typer.Context, path: Path = typer.Argument(..., exists=True, dir_okay=False)) -> None:
    """Merge logs from a JSON backup file."""
    result = _services(ctx).transfer.import_from_file(path)
    typer.echo(f"Imported {result.count} logs.")
    if result.skipped:
        typer.echo(f"Skipped {result.skipped} malformed entries.")


# ----------------------------------------------------------------------
# Comments
# ----------------------------------------------------------------------
@comment_app.command("add")
def comment_add(ctx: typer.Context, record_id: str, text: str) -> None:
    """Attach a comment to a log."""
    try:
        record = _services(ctx).comments.add(record_id, text)
    except (LLMLogError, ValueError) as exc:
        _fail(str(exc))
    typer.echo(record.comments[-1].id)


@comment_app.command("edit")
def comment_edit(ctx: typer.Context, record_id: str, comment_id: str, text: str) -> None:
    """Change the text of a comment."""
    try:
        _services(ctx).comments.edit(record_id, comment_id, text)
    except (LLMLogError, ValueError) as exc:
        _fail(str(exc))


@comment_app.command("delete")
def comment_delete(ctx: typer.Context, record_id: str, comment_id: str) -> None:
    """Remove a comment."""
    try:
        _services(ctx).comments.delete(record_id, comment_id)
    except LLMLogError as exc:
        _fail(str(exc))


# ----------------------------------------------------------------------
# Model labels
# ----------------------------------------------------------------------
@models_app.command("list")
def models_list(ctx: typer.Context) -> None:
    """List the known model labels."""
    for label in _services(ctx).registry.get_models():
        typer.echo(label)


@models_app.command("add")
def models_add(ctx: typer.Context, label: str) -> None:
    """Add a model label if it is not already listed."""
    _services(ctx).registry.add(label)


@models_app.command("rename")
def models_rename(ctx: typer.Context, old: str, new: str) -> None:
    """Rename a label and update every log that uses it."""
    try:
        updated = _services(ctx).registry.rename(old, new)
    except LLMLogError as exc:
        _fail(str(exc))
    typer.echo(f"Updated {updated} logs.")


@models_app.command("delete")
def models_delete(ctx: typer.Context, label: str) -> None:
    """Remove a label. Logs keep their current model value."""
    _services(ctx).registry.delete(label)


if __name__ == "__main__":
    app()
