import asyncio
import json
import logging
import sys
from typing import List, Optional

import typer
from rich.console import Console

if sys.platform == "win32":
    # asyncpg не работает с ProactorEventLoop по умолчанию в Windows.
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from spotlight_data_client import create_data_client
from spotlight_data_client.config import get_settings
from spotlight_data_client.db.base import Base
from spotlight_data_client.exceptions import DataClientError
from spotlight_data_client.logging import configure as configure_logging


app = typer.Typer(help="CLI for spotlight-data-client management.")
logger = logging.getLogger(__name__)


def get_rich_console() -> Console: return Console(stderr=True)


console = get_rich_console()


@app.callback()
def main(log_level: Optional[str] = typer.Option(None, "--log-level", help="Overrides LOG_LEVEL.")):
    configure_logging(log_level)


@app.command()
def init():
    """
    Creates DB tables, the documents index and the image bucket.
    """
    console.rule("[bold cyan]Service Initialization[/bold cyan]")

    async def _init():
        client = create_data_client()
        try:
            with console.status("Creating PostgreSQL tables...", spinner="dots"):
                async with client.engine.begin() as conn:
                    await conn.run_sync(Base.metadata.create_all)
            console.log("[bold green]✔[/bold green] Database tables created successfully.")

            with console.status("Preparing Elasticsearch index...", spinner="dots"):
                created = await client.es.ensure_index()
            state = "created" if created else "already exists"
            console.log(f"[bold green]✔[/bold green] Index '{get_settings().elastic.index_docs}' {state}.")

            with console.status("Initializing MinIO storage bucket...", spinner="dots"):
                await client.minio.check_connection()
            console.log(f"[bold green]✔[/bold green] MinIO bucket '{client.minio.bucket}' is ready.")
        finally:
            await client.aclose()

    try:
        asyncio.run(_init())
    except DataClientError as e:
        console.log(f"[bold red]✖[/bold red] Initialization FAILED: {e}")
        raise typer.Exit(code=1)

    console.print("\n[bold green]✅ All services initialized successfully![/bold green]")


@app.command()
def check():
    """Checks connectivity to all external services (PostgreSQL, Elasticsearch, MinIO)."""
    console.rule("[bold cyan]Connection Check[/bold cyan]")

    async def _check():
        client = create_data_client()
        try:
            return await client.check_connections()
        finally:
            await client.aclose()

    statuses = asyncio.run(_check())
    failed = False
    for name, label in (("postgres", "PostgreSQL"), ("elastic", "Elasticsearch"), ("minio", "MinIO")):
        status = statuses.get(name, "unknown error")
        if status == "ok":
            console.print(f"[bold green]✔[/bold green] {label} connection: OK")
        else:
            failed = True
            console.print(f"[bold red]✖[/bold red] {label} connection: FAILED ({status})")
    if failed:
        raise typer.Exit(code=1)


@app.command()
def reindex(doc_ids: List[str] = typer.Argument(..., help="Document ids to republish.")):
    """Recomputes and publishes the exhibit projection of each document."""

    async def _reindex():
        client = create_data_client()
        try:
            for doc_id in doc_ids:
                found = await client.reindex(doc_id)
                if found:
                    console.print(f"[bold green]✔[/bold green] {doc_id} reindexed")
                else:
                    console.print(f"[yellow]•[/yellow] {doc_id} not in index, skipped")
        finally:
            await client.aclose()

    try:
        asyncio.run(_reindex())
    except DataClientError as e:
        console.print(f"[bold red]✖[/bold red] Reindex FAILED: {e}")
        raise typer.Exit(code=1)


@app.command()
def show(doc_id: str):
    """Prints the projection that would be published for DOC_ID."""

    async def _show():
        client = create_data_client()
        try:
            return await client.projection(doc_id)
        finally:
            await client.aclose()

    try:
        projection = asyncio.run(_show())
    except DataClientError as e:
        console.print(f"[bold red]✖[/bold red] {e}")
        raise typer.Exit(code=1)
    typer.echo(json.dumps(projection, ensure_ascii=False, indent=2, default=str))


@app.command()
def tag(
    doc_id: str,
    exhibit: int = typer.Option(..., "--exhibit", "-e", help="Exhibit id that owns the tags."),
    tags: str = typer.Option(..., "--tags", "-t", help='Comma-separated list, e.g. "map, rare".'),
):
    """Replaces the exhibit's tags on DOC_ID and reindexes it."""

    async def _tag():
        client = create_data_client()
        try:
            await client.update_document(exhibit, doc_id, {"exhibit_tag_list": tags})
            return await client.exhibit_tags(exhibit, doc_id)
        finally:
            await client.aclose()

    try:
        names = asyncio.run(_tag())
    except DataClientError as e:
        console.print(f"[bold red]✖[/bold red] Tagging FAILED: {e}")
        raise typer.Exit(code=1)
    console.print(f"[bold green]✔[/bold green] {doc_id}: {', '.join(names) or '(no tags)'}")


if __name__ == "__main__":
    app()
