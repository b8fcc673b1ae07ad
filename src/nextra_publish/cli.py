"""Command-line interface for nextra-publish."""

import threading
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger

from nextra_publish.config import load_settings
from nextra_publish.errors import PublishError
from nextra_publish.logging_config import configure_logging
from nextra_publish.providers import make_provider
from nextra_publish.publisher import ProgressEvent, Publisher, PublishResult
from nextra_publish.vault import VaultNoteSource

app = typer.Typer(help="Publish Obsidian notes to a Nextra site repository on GitHub or GitLab.")


class ProviderName(str, Enum):
    github = "github"
    gitlab = "gitlab"


ProviderOption = Annotated[
    ProviderName, typer.Option("--provider", "-p", help="Hosting provider to publish to")
]
VaultOption = Annotated[Path, typer.Option("--vault", "-V", help="Obsidian vault directory")]
SettingsOption = Annotated[
    Path | None,
    typer.Option("--settings", "-s", help="Settings JSON file (default: plugin data.json or ~/.config)"),
]
DryRunOption = Annotated[
    bool, typer.Option("--dry-run", "-n", help="Show what would change, write nothing")
]


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log warnings and errors"),
) -> None:
    configure_logging(verbose=verbose, quiet=quiet)


def _progress_printer(provider_name: str) -> Callable[[ProgressEvent], None]:
    """Render progress events as the plugin's status lines."""
    lock = threading.Lock()

    def render(event: ProgressEvent) -> None:
        with lock:
            if event.kind == "written":
                typer.echo(f"Publishing to {provider_name}: {event.completed}/{event.total}")
            elif event.kind == "deletions_done":
                typer.echo(f"Deleted {event.completed} Files at {provider_name}")
            elif event.kind == "done":
                typer.echo(f"{event.completed} has published")

    return render


def _make_publisher(
    provider: ProviderName,
    vault: Path,
    settings_file: Path | None,
    dry_run: bool,
) -> Publisher:
    settings = load_settings(provider.value, settings_file=settings_file, vault=vault)
    # Validated here too so a bad config fails before the vault is read.
    settings.validate()
    return Publisher(
        VaultNoteSource(vault),
        make_provider(settings),
        settings,
        on_progress=_progress_printer(provider.value),
        dry_run=dry_run,
    )


def _execute(run: Callable[[], PublishResult]) -> PublishResult:
    try:
        return run()
    except PublishError as e:
        logger.error("{}", e)
        raise typer.Exit(1) from e


@app.command("publish-all")
def publish_all(
    provider: ProviderOption = ProviderName.github,
    vault: VaultOption = Path("."),
    settings_file: SettingsOption = None,
    dry_run: DryRunOption = False,
) -> None:
    """Publish every flagged note and delete stale files under the publish paths."""
    try:
        publisher = _make_publisher(provider, vault, settings_file, dry_run)
    except (PublishError, ValueError) as e:
        logger.error("{}", e)
        raise typer.Exit(1) from e
    result = _execute(publisher.publish_all)
    if dry_run:
        typer.echo(f"dry-run: {len(result.published)} to write, {len(result.deleted)} to delete")


@app.command("publish-note")
def publish_note(
    note: Annotated[Path, typer.Argument(help="Note to publish, relative to the vault")],
    provider: ProviderOption = ProviderName.github,
    vault: VaultOption = Path("."),
    settings_file: SettingsOption = None,
    dry_run: DryRunOption = False,
) -> None:
    """Publish a single note and its images."""
    try:
        publisher = _make_publisher(provider, vault, settings_file, dry_run)
    except (PublishError, ValueError) as e:
        logger.error("{}", e)
        raise typer.Exit(1) from e

    if note.is_absolute():
        try:
            note = note.resolve().relative_to(Path(vault).resolve())
        except ValueError:
            logger.error("Note {} is outside the vault {}", note, vault)
            raise typer.Exit(1) from None

    result = _execute(lambda: publisher.publish_note(note.as_posix()))
    if dry_run:
        typer.echo(f"dry-run: {len(result.published)} to write")
