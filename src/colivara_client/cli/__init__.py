"""CLI module for colivara-client."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path  # noqa: TC003 - needed at runtime for typer
from typing import TYPE_CHECKING, Any

import typer
from pydantic import BaseModel

from colivara_client import __version__
from colivara_client.api import ColiVaraClient, ColiVaraError
from colivara_client.config import ConfigurationError, Settings, load_settings
from colivara_client.observability import LogLevel, configure_logging


if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


app = typer.Typer(
    name="colivara",
    help="Command line access to the ColiVara document search API.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:  # noqa: FBT001
    """Print version and exit."""
    if value:
        typer.echo(f"colivara version {__version__}")
        raise typer.Exit


def _to_jsonable(result: Any) -> Any:  # noqa: ANN401
    if isinstance(result, BaseModel):
        return result.model_dump(mode="json", exclude_none=True)
    if isinstance(result, list):
        return [_to_jsonable(item) for item in result]
    return result


def _run(
    ctx: typer.Context,
    operation: Callable[[ColiVaraClient], Awaitable[Any]],
) -> None:
    """Run one client operation and print its result as JSON.

    Client and configuration errors are printed to stderr and exit with
    status 1.
    """
    settings: Settings = ctx.obj["settings"]

    async def call() -> Any:  # noqa: ANN401
        async with ColiVaraClient.from_settings(settings) as client:
            return await operation(client)

    try:
        result = asyncio.run(call())
    except (ColiVaraError, ConfigurationError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc

    if result is not None:
        typer.echo(json.dumps(_to_jsonable(result), indent=2))


@app.callback()
def main(  # noqa: PLR0913
    ctx: typer.Context,
    version: bool = typer.Option(  # noqa: FBT001
        False,  # noqa: FBT003
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(  # noqa: FBT001
        False,  # noqa: FBT003
        "--verbose",
        "-V",
        help="Enable verbose (debug) logging.",
    ),
    quiet: bool = typer.Option(  # noqa: FBT001
        False,  # noqa: FBT003
        "--quiet",
        "-q",
        help="Only show warnings and errors.",
    ),
    config_file: str | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file.",
    ),
) -> None:
    """colivara-client CLI."""
    del version  # Handled by callback

    if verbose and quiet:
        typer.echo("Error: --verbose and --quiet are mutually exclusive.", err=True)
        raise typer.Exit(1)

    try:
        settings = load_settings(config_file, require_config_file=bool(config_file))
    except ConfigurationError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc

    if verbose:
        level = LogLevel.DEBUG
    elif quiet:
        level = LogLevel.WARNING
    else:
        level = settings.logging.level

    configure_logging(level=level, force_colors=settings.logging.colors)
    ctx.obj = {"settings": settings}


@app.command()
def health(ctx: typer.Context) -> None:
    """Check that the API is reachable."""
    _run(ctx, lambda client: client.check_health())


@app.command()
def collections(ctx: typer.Context) -> None:
    """List collections."""
    _run(ctx, lambda client: client.list_collections())


@app.command()
def documents(
    ctx: typer.Context,
    collection: str | None = typer.Option(
        None,
        "--collection",
        help='Collection to list ("all" for every collection).',
    ),
    pages: bool = typer.Option(  # noqa: FBT001
        False,  # noqa: FBT003
        "--pages",
        help="Include page images.",
    ),
) -> None:
    """List documents of a collection."""
    _run(
        ctx,
        lambda client: client.list_documents(
            collection_name=collection,
            expand="pages" if pages else None,
        ),
    )


@app.command()
def upsert(  # noqa: PLR0913
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Document name."),
    url: str | None = typer.Option(None, "--url", help="Remote document URL."),
    path: Path | None = typer.Option(None, "--path", help="Local file to upload."),
    base64_content: str | None = typer.Option(
        None,
        "--base64",
        help="Inline base64 document content.",
    ),
    collection: str | None = typer.Option(
        None,
        "--collection",
        help="Target collection.",
    ),
    wait: bool = typer.Option(  # noqa: FBT001
        False,  # noqa: FBT003
        "--wait",
        help="Wait for the server to process the document.",
    ),
) -> None:
    """Create or replace a document."""
    _run(
        ctx,
        lambda client: client.upsert_document(
            name,
            collection_name=collection,
            document_url=url,
            document_base64=base64_content,
            document_path=path,
            wait=wait,
        ),
    )


@app.command()
def search(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Search query."),
    collection: str | None = typer.Option(
        None,
        "--collection",
        help='Collection to search (default "all").',
    ),
    top_k: int | None = typer.Option(
        None,
        "--top-k",
        "-k",
        min=1,
        help="Number of results.",
    ),
) -> None:
    """Search document pages."""
    _run(
        ctx,
        lambda client: client.search(query, collection_name=collection, top_k=top_k),
    )


__all__ = ["app"]
