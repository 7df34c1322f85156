"""
cli.py — Click CLI entrypoint for the indicator sync.

Usage:
    econpulse run
    econpulse run --countries US,CN,JP --dry-run
    econpulse status

Exit codes for `run`:
    0  published, dry run, or nothing to do
    1  missing configuration, no data from any source, or publish failure
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import click

from econpulse_pipeline.errors import (
    ConfigurationError,
    NoDataError,
    PublishReadError,
    PublishWriteError,
)
from econpulse_pipeline.loaders.document_store import DocumentStoreLoader
from econpulse_pipeline.pipelines import economic_data
from econpulse_pipeline.utils.logging import configure_logging
from econpulse_shared.config import Settings, get_settings
from econpulse_shared.constants import LAST_UPDATED_KEY
from econpulse_shared.models.indicators import Indicator

RULE = "=" * 60


def _split_codes(value: str | None) -> list[str] | None:
    if not value:
        return None
    return [c.strip().upper() for c in value.split(",") if c.strip()]


@click.group()
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Log level (default: LOG_LEVEL)",
)
@click.option(
    "--log-format",
    default=None,
    type=click.Choice(["console", "json"]),
    help="Log renderer (default: LOG_FORMAT)",
)
@click.pass_context
def main(ctx: click.Context, log_level: str | None, log_format: str | None) -> None:
    """econpulse economic indicator sync."""
    settings = get_settings()
    configure_logging(
        log_level=log_level or settings.log_level,
        log_format=log_format or settings.log_format,
    )
    ctx.obj = settings


@main.command()
@click.option(
    "--countries",
    default=None,
    metavar="CODE[,CODE...]",
    help="Comma-separated country codes (default: ENABLED_COUNTRIES)",
)
@click.option("--dry-run", is_flag=True, help="Fetch and merge but do not write the document")
@click.pass_context
def run(ctx: click.Context, countries: str | None, dry_run: bool) -> None:
    """Fetch indicators and publish them to the document store."""
    settings: Settings = ctx.obj
    codes = _split_codes(countries)

    click.echo(RULE)
    click.echo("Starting economic data update")
    click.echo(f"Time: {datetime.now(timezone.utc).isoformat()}")
    click.echo(f"Countries: {', '.join(codes or settings.enabled_countries_list)}")
    click.echo(RULE)

    try:
        result = asyncio.run(
            economic_data.run(settings, countries=codes, dry_run=dry_run)
        )
    except ConfigurationError as exc:
        click.echo(f"✗ Configuration error: {exc}", err=True)
        ctx.exit(1)
    except NoDataError as exc:
        click.echo(f"✗ {exc}", err=True)
        ctx.exit(1)
    except PublishWriteError as exc:
        click.echo(f"✗ Failed to update document: {exc}", err=True)
        ctx.exit(1)

    if result.status == "nothing_to_do":
        click.echo("Nothing to do: no supported countries requested.")
        return

    click.echo("Data summary:")
    for code, counts in result.point_counts.items():
        click.echo(f"  {code}:")
        for indicator in Indicator:
            click.echo(f"    - {indicator.value}: {counts.get(indicator.value, 0)} points")
    click.echo(f"Health: {result.health}")

    if result.publish is None:
        click.echo("Dry run: document store not configured, nothing read or written.")
    elif not result.publish.written:
        click.echo(f"Dry run: would update {', '.join(result.publish.sections_updated)}")
    else:
        if result.publish.base_recovered:
            click.echo("⚠ Previous document was unreadable; published from an empty base.")
        click.echo(f"✓ Updated sections: {', '.join(result.publish.sections_updated)}")
    click.echo(RULE)


@main.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show what the published document currently holds."""
    settings: Settings = ctx.obj
    if not (settings.document_store_token and settings.document_id):
        click.echo("✗ DOCUMENT_STORE_TOKEN and DOCUMENT_ID are required", err=True)
        ctx.exit(1)

    loader = DocumentStoreLoader(
        base_url=settings.document_store_url,
        token=settings.document_store_token,
        file_name=settings.document_file_name,
        timeout=settings.http_timeout,
    )
    try:
        document = asyncio.run(loader.read(settings.document_id))
    except PublishReadError as exc:
        click.echo(f"✗ {exc}", err=True)
        ctx.exit(1)

    click.echo(f"Document {settings.document_id} / {loader.file_name}")
    click.echo(f"Last update: {document.get(LAST_UPDATED_KEY, 'never')}")
    sections = {
        k: v for k, v in document.items()
        if isinstance(v, dict) and any(ind.value in v for ind in Indicator)
    }
    if not sections:
        click.echo("  No country sections found.")
        return
    for code, section in sorted(sections.items()):
        parts = []
        for indicator in Indicator:
            points = section.get(indicator.value) or []
            latest = points[-1]["date"] if points and isinstance(points[-1], dict) else "-"
            parts.append(f"{indicator.value}={len(points)} (latest {latest})")
        click.echo(f"  {code:4s} {str(section.get('lastUpdate', ''))[:19]}  " + "  ".join(parts))


if __name__ == "__main__":
    main()
