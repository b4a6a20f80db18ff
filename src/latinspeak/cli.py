"""Typer CLI definition for latinspeak."""

import asyncio
import json
import logging

import typer

from .config import CONFIG_PATH, generate_config, load_config
from .core import build_orchestrator, create_provider, list_available_voices
from .dialects import Dialect
from .items.models import LessonItem
from .items.store import SQLiteItemStore
from .phonetics import get_ruleset, normalize, phonetic_examples
from .tts.errors import LatinspeakError, ProviderAuthError, SynthesisProviderError
from .tts.ssml import build_ssml

app = typer.Typer(help="Latin pronunciation: IPA transcripts and cached speech audio")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format=LOG_FORMAT,
    )


def fail(message: str, error: Exception, debug: bool) -> None:
    """Report an error on stderr and exit with status 1."""
    if debug:
        typer.echo(f"Debug - {message}: {error!r}", err=True)
    else:
        typer.echo(f"Error: {error}", err=True)
    raise typer.Exit(1)


@app.command()
def ipa(
    text: str = typer.Argument(..., help="Latin text to transcribe"),
    dialect: str | None = typer.Option(
        None, "-d", "--dialect", help="classical or ecclesiastical (both if omitted)"
    ),
    trace: bool = typer.Option(
        False, "--trace", help="Show the output of every rule stage"
    ),
    ssml: bool = typer.Option(
        False, "--ssml", help="Print SSML with per-word phoneme tags"
    ),
    debug: bool = typer.Option(False, "--debug", help="Show verbose logging"),
) -> None:
    """Print the IPA transcript of Latin text."""
    configure_logging(debug)

    normalized = normalize(text)
    if not normalized:
        typer.echo("Error: Text contains no letters to transcribe", err=True)
        raise typer.Exit(1)

    if dialect is None:
        if trace or ssml:
            typer.echo("Error: --trace and --ssml require --dialect", err=True)
            raise typer.Exit(1)
        for name, transcript in phonetic_examples(normalized).items():
            typer.echo(f"{name}: {transcript}")
        return

    try:
        ruleset = get_ruleset(dialect)
    except ValueError as e:
        fail("Invalid dialect", e, debug)

    if trace:
        for stage, output in ruleset.trace(normalized):
            typer.echo(f"{stage:>18}  {output}")
    elif ssml:
        typer.echo(build_ssml(normalized, ruleset.apply(normalized)))
    else:
        typer.echo(ruleset.apply(normalized))


@app.command()
def say(
    text: str = typer.Argument(..., help="Latin text to speak"),
    dialect: str = typer.Option(
        Dialect.CLASSICAL.value, "-d", "--dialect", help="classical or ecclesiastical"
    ),
    kind: str = typer.Option("word", "-k", "--kind", help="word or sentence"),
    item_id: str | None = typer.Option(
        None, "--item-id", help="Lesson item whose media shortcut should be updated"
    ),
    voice_model: str | None = typer.Option(
        None, "-m", "--voice-model", help="Model ID (dialect default if omitted)"
    ),
    speed: float = typer.Option(1.0, "-s", "--speed", help="Speaking speed multiplier"),
    provider: str | None = typer.Option(
        None, "-p", "--provider", help="Synthesis provider (from config if omitted)"
    ),
    debug: bool = typer.Option(False, "--debug", help="Show verbose logging"),
) -> None:
    """Get or synthesize audio for Latin text and print the JSON response."""
    configure_logging(debug)
    config = load_config()

    async def run() -> dict:
        orchestrator = build_orchestrator(config, create_provider(config, provider))
        result = await orchestrator.get_or_synthesize(
            text,
            dialect,
            kind=kind,
            item_id=item_id,
            voice_model=voice_model,
            speed=speed,
        )
        await orchestrator.drain()
        return result.to_dict()

    try:
        response = asyncio.run(run())
    except ProviderAuthError as e:
        fail("Authentication error", e, debug)
    except SynthesisProviderError as e:
        fail("Synthesis provider error", e, debug)
    except (LatinspeakError, KeyError) as e:
        fail("Request failed", e, debug)

    typer.echo(json.dumps(response, indent=2))


@app.command("add-item")
def add_item(
    item_id: str = typer.Argument(..., help="Lesson item ID"),
    latin: str = typer.Argument(..., help="Latin text of the item"),
    kind: str = typer.Option("vocab", "-k", "--kind", help="Item kind (vocab, sentence, ...)"),
    debug: bool = typer.Option(False, "--debug", help="Show verbose logging"),
) -> None:
    """Add or replace a lesson item in the item store."""
    configure_logging(debug)
    config = load_config()

    store = SQLiteItemStore(config.items.database)
    asyncio.run(store.add_item(LessonItem(id=item_id, latin=latin, kind=kind)))
    typer.echo(f"Saved item {item_id}")


@app.command("item-audio")
def item_audio(
    item_id: str = typer.Argument(..., help="Lesson item ID"),
    dialect: str = typer.Option(
        Dialect.CLASSICAL.value, "-d", "--dialect", help="classical or ecclesiastical"
    ),
    debug: bool = typer.Option(False, "--debug", help="Show verbose logging"),
) -> None:
    """Print the audio URL of a lesson item, synthesizing it if needed."""
    configure_logging(debug)
    config = load_config()

    async def run() -> str | None:
        items = SQLiteItemStore(config.items.database)
        item = await items.get_item(item_id)
        if item is None:
            return None
        orchestrator = build_orchestrator(config, create_provider(config))
        url = await orchestrator.get_item_audio(item, dialect)
        await orchestrator.drain()
        return url

    try:
        url = asyncio.run(run())
    except ProviderAuthError as e:
        fail("Authentication error", e, debug)
    except SynthesisProviderError as e:
        fail("Synthesis provider error", e, debug)
    except (LatinspeakError, KeyError) as e:
        fail("Request failed", e, debug)

    if url is None:
        typer.echo(f"Error: Item '{item_id}' not found", err=True)
        raise typer.Exit(1)
    typer.echo(url)


@app.command()
def voices(
    provider: str | None = typer.Option(
        None, "-p", "--provider", help="Synthesis provider (from config if omitted)"
    ),
    debug: bool = typer.Option(False, "--debug", help="Show verbose logging"),
) -> None:
    """List the voices offered by the synthesis provider."""
    configure_logging(debug)
    config = load_config()

    try:
        available = asyncio.run(list_available_voices(create_provider(config, provider)))
    except (LatinspeakError, KeyError) as e:
        fail("Failed to list voices", e, debug)

    for voice in available:
        typer.echo(f"{voice['name']}: {voice['id']}")


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address (from config if omitted)"),
    port: int | None = typer.Option(None, "--port", help="Port (from config if omitted)"),
    debug: bool = typer.Option(False, "--debug", help="Show verbose logging"),
) -> None:
    """Run the HTTP API."""
    import uvicorn

    from .server import create_app

    configure_logging(debug)
    config = load_config()

    bind_host = host or config.http.host
    bind_port = port or config.http.port
    url_host = "localhost" if bind_host in ("0.0.0.0", "::") else bind_host
    public_base_url = (
        config.storage.public_base_url or f"http://{url_host}:{bind_port}/audio"
    )

    try:
        orchestrator = build_orchestrator(
            config, public_base_url=public_base_url
        )
    except (LatinspeakError, KeyError) as e:
        fail("Failed to start server", e, debug)

    typer.echo(f"Serving latinspeak on http://{bind_host}:{bind_port}", err=True)
    uvicorn.run(
        create_app(orchestrator),
        host=bind_host,
        port=bind_port,
        log_level="debug" if debug else "info",
    )


@app.command("init-config")
def init_config(
    force: bool = typer.Option(False, "--force", help="Overwrite an existing config"),
) -> None:
    """Write the default config file."""
    if CONFIG_PATH.exists() and not force:
        typer.echo(f"Config already exists at {CONFIG_PATH} (use --force)", err=True)
        raise typer.Exit(1)
    path = generate_config()
    typer.echo(f"Wrote {path}")
