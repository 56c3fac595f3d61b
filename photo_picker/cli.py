from __future__ import annotations

import asyncio
import json
import logging
from collections import Counter

import typer
from dotenv import load_dotenv

from photo_picker.config import DEFAULT_PROVIDER, RunConfig, has_credential
from photo_picker.downloader import ImageDownloader
from photo_picker.errors import ConfigurationError, StoreIOError, UpstreamFetchError, ValidationError
from photo_picker.http_utils import build_client
from photo_picker.journal import picks_journal
from photo_picker.models import Record, SearchPage
from photo_picker.paths import get_output_dir, resolve_csv_path
from photo_picker.providers.registry import PROVIDERS
from photo_picker.records import RecordStore
from photo_picker.search import search_images
from photo_picker.workflow import PickerSession, SessionState

EXIT_OK = 0
EXIT_DEGRADED = 1
EXIT_CONFIG = 2
EXIT_UPSTREAM = 3
EXIT_STORE = 4

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"

HELP_TEXT = (
    "Commands: <number> pick | m more options | s skip | p <provider> switch provider | "
    "f <letter> filter by country (f alone clears) | q quit"
)

app = typer.Typer(add_completion=False, help="Pick stock photos for a list of travel destinations.")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")) -> None:
    load_dotenv()
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format=LOG_FORMAT)


def _load_store(csv: str | None) -> tuple[RecordStore, list[Record]]:
    store = RecordStore(resolve_csv_path(csv))
    try:
        records = store.load_all()
    except StoreIOError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=EXIT_STORE)
    return store, records


def _render(session: PickerSession, record: Record) -> None:
    index, total = session.position
    typer.echo("")
    typer.echo(f"[{index}/{total}] {record.city}, {record.country}")
    typer.echo(f"Query: {session.query}  (source: {session.provider}, page: {session.page})")

    if session.last_error:
        typer.echo(f"No images available now: {session.last_error}")
    if not session.candidates:
        typer.echo("No options found. Use m for more options or s to skip.")
        return

    typer.echo(f"Showing {len(session.candidates)} options")
    for n, result in enumerate(session.candidates, start=1):
        size = f"{result.width}x{result.height}" if result.width and result.height else "?x?"
        typer.echo(f"  {n}) {result.label}  [{size}]  {result.display_url}")


def _echo_finish(session: PickerSession) -> None:
    if session.state == SessionState.NO_MATCHES:
        typer.echo(f"No matches for filter '{session.letter}'.")
    else:
        typer.echo("All locations are complete. No rows without a filename were found.")


async def _interactive(session: PickerSession, config: RunConfig) -> int:
    loaded_generation: int | None = None
    typer.echo(HELP_TEXT)

    async with build_client(config.http_timeout) as client:
        while True:
            record = session.current
            if record is None:
                _echo_finish(session)
                return EXIT_OK

            if loaded_generation != session.generation:
                await session.load_candidates(client)
                loaded_generation = session.generation
                _render(session, record)

            raw = typer.prompt(">", default="", show_default=False).strip()
            command, _, arg = raw.partition(" ")
            command = command.lower()

            if not command:
                _render(session, record)
            elif command.isdigit():
                number = int(command)
                if not 1 <= number <= len(session.candidates):
                    typer.echo(f"Choose between 1 and {len(session.candidates)}.")
                    continue
                typer.echo("Downloading...")
                state = await session.pick(client, session.candidates[number - 1])
                if state.ok:
                    typer.echo(f"Saved as {config.output_dir / state.filename}")
                else:
                    typer.echo(f"Error: {state.message}")
            elif command == "m":
                session.show_more()
            elif command == "s":
                session.skip()
            elif command == "p":
                try:
                    session.set_provider(arg)
                except ValidationError as exc:
                    typer.echo(f"Error: {exc}")
            elif command == "f":
                try:
                    session.set_filter(arg or None)
                except ValidationError as exc:
                    typer.echo(f"Error: {exc}")
            elif command == "q":
                return EXIT_OK
            else:
                typer.echo(HELP_TEXT)


@app.command()
def pick(
    csv: str = typer.Option(None, "--csv", help="Location list (default: $PHOTO_PICKER_CSV or locations.csv)"),
    output: str = typer.Option(None, "--output", help="Download directory (default: $PHOTO_PICKER_OUTPUT or downloads)"),
    provider: str = typer.Option(DEFAULT_PROVIDER, "--provider", help=f"One of: {', '.join(PROVIDERS)}"),
    letter: str = typer.Option(None, "--letter", help="Only countries starting with this letter"),
) -> None:
    """Walk the locations without a filename and pick a photo for each."""
    store, records = _load_store(csv)
    output_dir = get_output_dir(output)
    config = RunConfig(csv_path=store.path, output_dir=output_dir, provider=provider)

    try:
        session = PickerSession(
            records,
            store=store,
            downloader=ImageDownloader(output_dir),
            config=config,
            provider=provider,
            letter=letter,
            journal=picks_journal(output_dir),
        )
    except ValidationError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=EXIT_CONFIG)

    session.start()

    try:
        code = asyncio.run(_interactive(session, config))
    except (KeyboardInterrupt, typer.Abort):
        typer.echo("\nInterrupted.")
        code = EXIT_DEGRADED
    raise typer.Exit(code=code)


async def _search_once(query: str, page: int, per_page: int, source: str) -> SearchPage:
    async with build_client() as client:
        return await search_images(client, query, page=page, per_page=per_page, source=source)


@app.command()
def search(
    query: str = typer.Argument("", help="Free-text query, e.g. 'Paris France'"),
    page: int = typer.Option(1, "--page"),
    per_page: int = typer.Option(12, "--per-page"),
    source: str = typer.Option(DEFAULT_PROVIDER, "--source", help=f"One of: {', '.join(PROVIDERS)}"),
) -> None:
    """Run one provider search and print the normalized JSON result."""
    try:
        result = asyncio.run(_search_once(query, page, per_page, source))
    except (ConfigurationError, ValidationError) as exc:
        typer.echo(json.dumps({"error": str(exc)}), err=True)
        raise typer.Exit(code=EXIT_CONFIG)
    except UpstreamFetchError as exc:
        typer.echo(json.dumps({"error": str(exc)}), err=True)
        raise typer.Exit(code=EXIT_UPSTREAM)

    typer.echo(json.dumps(result.to_payload(), ensure_ascii=False, indent=2))


@app.command()
def status(
    csv: str = typer.Option(None, "--csv", help="Location list (default: $PHOTO_PICKER_CSV or locations.csv)"),
) -> None:
    """Show how many locations still need a photo."""
    _, records = _load_store(csv)
    done = sum(1 for r in records if r.is_done)
    remaining = len(records) - done

    typer.echo(f"total: {len(records)}")
    typer.echo(f"done: {done}")
    typer.echo(f"remaining: {remaining}")

    by_letter = Counter(r.country[:1].upper() for r in records if not r.is_done)
    if by_letter:
        typer.echo("remaining_by_country_letter:")
        for letter in sorted(by_letter):
            typer.echo(f"  {letter}: {by_letter[letter]}")

    raise typer.Exit(code=EXIT_OK if remaining == 0 else EXIT_DEGRADED)


@app.command("providers")
def list_providers() -> None:
    for name in PROVIDERS:
        marker = " (default)" if name == DEFAULT_PROVIDER else ""
        configured = "configured" if has_credential(name) else "missing key"
        typer.echo(f"{name}{marker}: {configured}")


if __name__ == "__main__":
    app()
