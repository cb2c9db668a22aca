"""Taskhub CLI — run the server and handle one-off operational chores.

Usage:
    taskhub serve --reload                 # Run the API with uvicorn
    taskhub init-db                        # Create tables (dev / SQLite)
    taskhub issue-token <user-id>          # Mint a bearer token for a user
"""

from __future__ import annotations

import asyncio
import sys
import uuid
from datetime import timedelta
from typing import Optional

import click

from taskhub.config import settings


@click.group()
def cli() -> None:
    """Taskhub — users, tasks and places API."""


@cli.command()
@click.option("--host", default=None, help="Bind address (default: TASKHUB_HOST).")
@click.option("--port", default=None, type=int, help="Port (default: TASKHUB_PORT).")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes.")
def serve(host: Optional[str], port: Optional[int], reload: bool) -> None:
    """Run the API server."""
    import uvicorn

    uvicorn.run(
        "taskhub.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@cli.command("init-db")
def init_db() -> None:
    """Create all tables directly from the models.

    Use Alembic migrations for Postgres deployments; this is for local
    SQLite databases and throwaway environments.
    """
    from taskhub.db.engine import engine
    from taskhub.db.models import Base

    async def _create() -> None:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        await engine.dispose()

    asyncio.run(_create())
    click.secho("Tables created.", fg="green")


@cli.command("issue-token")
@click.argument("user_id")
@click.option("--days", default=None, type=int, help="Lifetime in days (default: TASKHUB_TOKEN_EXPIRE_DAYS).")
def issue_token(user_id: str, days: Optional[int]) -> None:
    """Print a bearer token for USER_ID.

    The token is signed with TASKHUB_JWT_SECRET. The user is not looked
    up — exactly like the API, the token only proves who signed it.
    """
    from taskhub.auth.jwt import TokenService

    try:
        subject = uuid.UUID(user_id)
    except ValueError:
        click.secho(f"Error: '{user_id}' is not a valid user id", fg="red", err=True)
        sys.exit(1)

    tokens = TokenService.from_settings(settings)
    lifetime = timedelta(days=days) if days else None
    click.echo(tokens.issue(subject, lifetime=lifetime))


if __name__ == "__main__":
    cli()
