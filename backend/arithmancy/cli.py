"""
Arithmancy CLI - Command line interface for the Arithmancy game server.

Usage:
    arithmancy run            Start the game server
    arithmancy db create      Create tables directly from the models
    arithmancy db upgrade     Run database migrations
    arithmancy seed [PATH]    Load reference data from YAML
    arithmancy xp LEVEL       Show experience thresholds around a level
"""

import asyncio
import sys
from pathlib import Path

import click

from arithmancy import __version__, config


def _alembic_config(database_url: str | None = None):
    from alembic.config import Config

    # Look for alembic.ini in current directory or use package default
    alembic_ini = Path("alembic.ini")
    if alembic_ini.exists():
        alembic_cfg = Config(str(alembic_ini))
    else:
        package_dir = Path(__file__).parent
        alembic_cfg = Config()
        alembic_cfg.set_main_option("script_location", str(package_dir / "alembic"))
    alembic_cfg.set_main_option("sqlalchemy.url", database_url or config.DATABASE_URL)
    return alembic_cfg


@click.group()
@click.version_option(version=__version__, prog_name="arithmancy")
def main():
    """Arithmancy - A math-puzzle RPG server."""
    pass


@main.command()
@click.option("--host", "-h", default=config.HOST, help="Host to bind to")
@click.option("--port", "-p", default=config.PORT, type=int, help="Port to bind to")
@click.option("--reload", "-r", is_flag=True, help="Enable auto-reload for development")
@click.option("--workers", "-w", default=1, type=int, help="Number of worker processes")
def run(host: str, port: int, reload: bool, workers: int):
    """Start the Arithmancy game server."""
    import uvicorn

    click.echo(f"⏳ Starting Arithmancy server on {host}:{port}...")
    uvicorn.run(
        "arithmancy.main:app",
        host=host,
        port=port,
        reload=reload,
        workers=workers if not reload else 1,
        log_level=config.LOG_LEVEL.lower(),
    )


@main.group()
def db():
    """Database management commands."""
    pass


@db.command()
@click.option("--database-url", default=None, help="Override ARITHMANCY_DATABASE_URL")
def create(database_url: str | None):
    """Create all tables from the models (development shortcut for upgrade)."""
    from arithmancy.db import create_engine
    from arithmancy.models import Base

    async def _create() -> None:
        engine = create_engine(database_url)
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        finally:
            await engine.dispose()

    asyncio.run(_create())
    click.echo(click.style("✅ Tables created", fg="green"))


@db.command()
@click.option("--revision", "-r", default="head", help="Revision to upgrade to")
@click.option("--database-url", default=None, help="Override ARITHMANCY_DATABASE_URL")
def upgrade(revision: str, database_url: str | None):
    """Run database migrations to upgrade the schema."""
    from alembic import command

    click.echo("🗃️ Running migrations...")
    try:
        command.upgrade(_alembic_config(database_url), revision)
    except Exception as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)
    click.echo(click.style("✅ Database upgraded successfully!", fg="green"))


@main.command()
@click.argument(
    "path",
    required=False,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@click.option("--database-url", default=None, help="Override ARITHMANCY_DATABASE_URL")
def seed(path: Path | None, database_url: str | None):
    """Load monsters, problems, items and quests from YAML.

    PATH is a world data directory (default: the bundled starter world).
    Rows are upserted by id, so seeding twice is harmless.
    """
    from arithmancy.db import create_engine, create_session_factory
    from arithmancy.seed import SeedDataError, seed_database

    async def _seed() -> dict[str, int]:
        engine = create_engine(database_url)
        try:
            return await seed_database(create_session_factory(engine), path)
        finally:
            await engine.dispose()

    try:
        counts = asyncio.run(_seed())
    except SeedDataError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)

    for section, count in counts.items():
        click.echo(f"  {section}: {count}")
    click.echo(click.style("✅ World data loaded", fg="green"))


@main.command()
@click.argument("level", type=click.IntRange(min=1))
def xp(level: int):
    """Show experience thresholds around LEVEL."""
    from arithmancy.engine.systems import experience_summary

    summary = experience_summary(level)
    click.echo(f"Level {summary['current_level']}")
    click.echo(f"  Experience for this level: {summary['experience_for_current_level']}")
    click.echo(f"  Experience for next level: {summary['experience_for_next_level']}")
    click.echo(f"  Needed to level up:        {summary['experience_needed_to_level_up']}")


if __name__ == "__main__":
    main()
