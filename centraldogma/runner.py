"""
CLI entrypoint for the Central Dogma client.
"""
import asyncio
import json
import sys

import typer
from loguru import logger

from centraldogma.client.base_client import Client
from centraldogma.client.visualizer import Visualizer, describe
from centraldogma.client.watch_client import WatchStream
from centraldogma.shared.config import settings
from centraldogma.shared.errors import CentralDogmaError
from centraldogma.shared.models import Query

app = typer.Typer(help="Central Dogma client CLI")

BaseUrlOption = typer.Option(None, "--base-url", help="Server base URL (defaults to CENTRALDOGMA_BASE_URL)")
TokenOption = typer.Option(None, "--token", help="Access token (defaults to CENTRALDOGMA_TOKEN)")

def configure_logging(level: str | None = None) -> None:
    logger.remove()
    logger.add(sys.stderr, level=(level or settings.LOG_LEVEL).upper())

def make_client(base_url: str | None, token: str | None) -> Client:
    return Client(base_url, token)

def run_with_client(base_url: str | None, token: str | None, fn):
    async def main():
        async with make_client(base_url, token) as client:
            return await fn(client)

    try:
        return asyncio.run(main())
    except CentralDogmaError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

def make_query(path: str, json_path: list[str] | None) -> Query:
    if json_path:
        return Query.of_json_path(path, json_path)
    return Query.identity(path)

@app.callback()
def main(log_level: str = typer.Option(None, "--log-level", help="Override CENTRALDOGMA_LOG_LEVEL")):
    configure_logging(log_level)

@app.command()
def projects(base_url: str = BaseUrlOption, token: str = TokenOption):
    """List the projects on the server."""
    result = run_with_client(base_url, token, lambda c: c.list_projects())
    for p in result:
        typer.echo(p.name)

@app.command()
def repos(project: str, base_url: str = BaseUrlOption, token: str = TokenOption):
    """List the repositories of a project."""
    result = run_with_client(base_url, token, lambda c: c.project(project).list_repos())
    for r in result:
        typer.echo(f"{r.name}\t{r.head_revision}")

@app.command()
def get(
    project: str,
    repo: str,
    path: str,
    revision: int = typer.Option(None, help="Revision to read (HEAD when omitted)"),
    json_path: list[str] = typer.Option(None, "--json-path", help="JSON path expression, repeatable"),
    base_url: str = BaseUrlOption,
    token: str = TokenOption,
):
    """Print one file."""
    try:
        query = make_query(path, json_path)
    except CentralDogmaError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    entry = run_with_client(base_url, token, lambda c: c.repo(project, repo).get_file(revision, query))
    if isinstance(entry.content, str):
        typer.echo(entry.content)
    else:
        typer.echo(json.dumps(entry.content, indent=2))

def run_watch(stream: WatchStream, duration: float, plain: bool) -> None:
    async def consume():
        async for notification in stream:
            path, preview = describe(notification)
            typer.echo(f"{notification.revision}\t{path}\t{preview}")

    async def watch():
        try:
            if plain:
                try:
                    await asyncio.wait_for(consume(), timeout=duration)
                except asyncio.TimeoutError:
                    pass
                finally:
                    await stream.aclose()
            else:
                await Visualizer(stream).run(duration)
        finally:
            await stream.client.aclose()

    try:
        asyncio.run(watch())
    except KeyboardInterrupt:
        pass
    if stream.error is not None:
        typer.echo(f"Error: {stream.error}", err=True)
        raise typer.Exit(1)

@app.command("watch-file")
def watch_file(
    project: str,
    repo: str,
    path: str,
    json_path: list[str] = typer.Option(None, "--json-path", help="JSON path expression, repeatable"),
    duration: float = typer.Option(60.0, help="Duration to watch in seconds"),
    timeout: float = typer.Option(None, help="Long-poll wait in seconds (defaults to CENTRALDOGMA_WATCH_TIMEOUT_S)"),
    revision: int = typer.Option(None, help="Last revision already seen, to skip the initial notification"),
    plain: bool = typer.Option(False, "--plain", help="Print one line per change instead of the dashboard"),
    base_url: str = BaseUrlOption,
    token: str = TokenOption,
):
    """Watch a single file and show every change."""
    client = make_client(base_url, token)
    try:
        query = make_query(path, json_path)
        stream = client.repo(project, repo).watch_file_stream(query, timeout_s=timeout, initial_revision=revision)
    except CentralDogmaError as e:
        asyncio.run(client.aclose())
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    run_watch(stream, duration, plain)

@app.command("watch-repo")
def watch_repo(
    project: str,
    repo: str,
    pattern: str = typer.Option("", help="Path pattern, e.g. '*.json' or '/foo/**'"),
    duration: float = typer.Option(60.0, help="Duration to watch in seconds"),
    timeout: float = typer.Option(None, help="Long-poll wait in seconds (defaults to CENTRALDOGMA_WATCH_TIMEOUT_S)"),
    revision: int = typer.Option(None, help="Last revision already seen, to skip the initial notification"),
    plain: bool = typer.Option(False, "--plain", help="Print one line per commit instead of the dashboard"),
    base_url: str = BaseUrlOption,
    token: str = TokenOption,
):
    """Watch a repository for new commits touching files matched by a pattern."""
    client = make_client(base_url, token)
    try:
        stream = client.repo(project, repo).watch_repo_stream(pattern, timeout_s=timeout, initial_revision=revision)
    except CentralDogmaError as e:
        asyncio.run(client.aclose())
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    run_watch(stream, duration, plain)

if __name__ == "__main__":
    app()
