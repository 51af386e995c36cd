"""
Command-line interface for Weight Log Sync.

Provides commands for reading, viewing, and saving values in the remote log.
"""

import asyncio
import calendar

import typer

from weight_log_sync.domain.record import ReadOutcome
from weight_log_sync.infrastructure.github_client.client import GitHubContentsClient
from weight_log_sync.services.sync import RemoteSyncClient
from weight_log_sync.utils.exceptions import WeightLogSyncError
from weight_log_sync.utils.logging_config import get_logger, setup_logging
from weight_log_sync.utils.parameters import ParameterLoader
from weight_log_sync.utils.timezone_utils import normalize_date, today, year_month_of

app = typer.Typer(help="Weight Log Sync - Weight tracker stored as a CSV file on GitHub")

logger = get_logger(__name__)


def init_config(config_path: str = "config/config.yaml") -> ParameterLoader:
    """
    Initialize configuration and logging.

    Args:
        config_path: Path to configuration file.

    Returns:
        Parameter loader instance.
    """
    param_loader = ParameterLoader(config_path)
    setup_logging(param_loader.get_logging_config(), "weight_log_sync")
    return param_loader


def build_sync_client(param_loader: ParameterLoader) -> RemoteSyncClient:
    """Create a sync client from configuration."""
    sync_config = param_loader.get_sync_config()
    return RemoteSyncClient(
        GitHubContentsClient(param_loader.get_remote_config()),
        token=param_loader.get_token(),
        max_retries=sync_config.max_retries,
        max_value=sync_config.max_value,
    )


def render_month(view: dict[int, float], year_month: str) -> str:
    """
    Render a month view as a text calendar with start/current/change figures.

    Args:
        view: Day -> value mapping.
        year_month: Period in YYYY-MM form.

    Returns:
        Multi-line text.
    """
    year, month = (int(part) for part in year_month.split("-"))
    header = " ".join(f"{day:>8}" for day in calendar.day_abbr)
    lines = [f"{calendar.month_name[month]} {year}", header]

    for week in calendar.Calendar().monthdayscalendar(year, month):
        cells = []
        for day in week:
            if day == 0:
                cells.append(" " * 8)
            elif day in view:
                cells.append(f"{day:>2} {view[day]:5.1f}")
            else:
                cells.append(f"{day:>2}     -")
        lines.append(" ".join(cells))

    days = sorted(view)
    if not days:
        lines.append("Start: --  Current: --  Change: --")
        return "\n".join(lines)

    first, last = view[days[0]], view[days[-1]]
    change = last - first
    sign = "+" if change > 0 else ""
    lines.append(f"Start: {first:.1f}  Current: {last:.1f}  Change: {sign}{change:.1f} kg")
    return "\n".join(lines)


def _resolve_month(month: str | None, timezone_str: str) -> str:
    if month:
        return normalize_date(f"{month}-01")[:7]
    return year_month_of(today(timezone_str))


@app.command()
def refresh(
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
) -> None:
    """
    Read the data file from GitHub and report what was found.
    """

    async def run(client: RemoteSyncClient) -> ReadOutcome:
        async with client.contents_client:
            return await client.refresh()

    try:
        param_loader = init_config(config_path)
        client = build_sync_client(param_loader)

        outcome = asyncio.run(run(client))

        if outcome is ReadOutcome.NOT_FOUND:
            typer.echo("No data file found, starting fresh")
        else:
            typer.echo(f"Read {len(client.store)} records (revision {client.revision_token})")

    except WeightLogSyncError as e:
        logger.error(f"Refresh failed: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


@app.command()
def show(
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
    month: str | None = typer.Option(None, help="Month to show (YYYY-MM); defaults to current"),
    name: str | None = typer.Option(None, help="Override identity from config"),
) -> None:
    """
    Show one month of values as a calendar.
    """

    async def run(client: RemoteSyncClient) -> None:
        async with client.contents_client:
            await client.refresh()

    try:
        param_loader = init_config(config_path)
        sync_config = param_loader.get_sync_config()
        client = build_sync_client(param_loader)

        year_month = _resolve_month(month, sync_config.timezone)
        asyncio.run(run(client))

        view = client.view(name or sync_config.identity, year_month)
        typer.echo(render_month(view, year_month))

    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2) from e
    except WeightLogSyncError as e:
        logger.error(f"Show failed: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


@app.command()
def save(
    value: str = typer.Argument(..., help="Value to record"),
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
    date: str | None = typer.Option(None, help="Date of the value; defaults to today"),
    name: str | None = typer.Option(None, help="Override identity from config"),
) -> None:
    """
    Record a value and write the data file back to GitHub.

    The file is read first so the write is based on its latest revision;
    concurrent changes are absorbed by re-reading and retrying.
    """

    async def run(client: RemoteSyncClient, day: str, identity: str):
        async with client.contents_client:
            await client.start()
            return await client.save(day, identity, value)

    try:
        param_loader = init_config(config_path)
        sync_config = param_loader.get_sync_config()
        client = build_sync_client(param_loader)

        day = normalize_date(date) if date else today(sync_config.timezone).isoformat()
        identity = name or sync_config.identity

        result = asyncio.run(run(client, day, identity))

        typer.echo(f"Saved {identity} {day}: {value.strip()} (revision {result.revision_token})")
        if result.retries:
            typer.echo(f"Resolved {result.retries} conflict(s) by re-reading the file")

    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2) from e
    except WeightLogSyncError as e:
        logger.error(f"Save failed: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


if __name__ == "__main__":
    app()
