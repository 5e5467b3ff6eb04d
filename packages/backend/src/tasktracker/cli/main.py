"""Task Tracker CLI — run the server, create the schema.

Usage:
    tasktracker serve                       # Serve the API with uvicorn
    tasktracker serve --port 9000 --reload  # Dev server with autoreload
    tasktracker init-db                     # Create tables (dev/test databases)

Both commands read TASKTRACKER_* env vars; production schemas are
managed with Alembic (see db/migrations).
"""

from __future__ import annotations

import asyncio
import sys
from typing import Optional

import click
from pydantic import ValidationError

from tasktracker.config import Settings, load_settings


def _settings_or_exit() -> Settings:
    try:
        return load_settings()
    except ValidationError as e:
        click.secho("Error: invalid configuration", fg="red", err=True)
        for err in e.errors():
            field = ".".join(str(p) for p in err["loc"]) or "settings"
            click.secho(f"  TASKTRACKER_{field.upper()}: {err['msg']}", err=True)
        sys.exit(1)


@click.group()
def cli():
    """Task Tracker — projects and tasks with per-user ownership."""


@cli.command()
@click.option("--host", default=None, help="Bind address (default from settings)")
@click.option("--port", type=int, default=None, help="Port (default from settings)")
@click.option("--reload", is_flag=True, help="Reload on code changes (dev only)")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Serve the HTTP API."""
    import uvicorn

    settings = _settings_or_exit()
    uvicorn.run(
        "tasktracker.main:create_app",
        factory=True,
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@cli.command("init-db")
def init_db():
    """Create all tables that don't exist yet."""
    from tasktracker.db.engine import build_engine
    from tasktracker.db.models import Base

    settings = _settings_or_exit()

    async def _create():
        engine = build_engine(settings)
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        finally:
            await engine.dispose()

    asyncio.run(_create())
    click.secho("Tables created.", fg="green")


if __name__ == "__main__":
    cli()
