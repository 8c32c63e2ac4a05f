"""Click-based CLI for running and inspecting FanPulse.

Provides four commands:

* ``serve`` -- runs the MCP server over stdio, or the HTTP app (MCP
  streamable-HTTP plus REST routes) with ``--http``.
* ``init-db`` -- creates the SQLite schema and optionally loads the demo
  dataset.
* ``segments`` -- prints segment sizes and members.
* ``recommend`` -- prints ranked merchandise recommendations for a fan.
"""

from __future__ import annotations

import click

from fanpulse.common import settings
from fanpulse.common.logging_config import setup_logging
from fanpulse.serving.fan_service import FanNotFoundError, FanPulseService
from fanpulse.storage.demo_data import seed_demo_data
from fanpulse.storage.sqlite_fan_store import SQLiteFanStore


def _open_store(db_path: str, seed: bool) -> SQLiteFanStore:
    store = SQLiteFanStore(db_path)
    store.ensure_schema()
    if seed:
        seed_demo_data(store)
    return store


# --------------------------------------------------------------------------- #
# CLI group                                                                    #
# --------------------------------------------------------------------------- #


@click.group()
@click.option(
    "--db",
    "db_path",
    default=settings.DB_PATH,
    show_default=True,
    help="SQLite database file (env: FANPULSE_DB).",
)
@click.option(
    "--log-level",
    default=settings.LOG_LEVEL,
    show_default=True,
    help="Log level (env: FANPULSE_LOG_LEVEL).",
)
@click.pass_context
def cli(ctx: click.Context, db_path: str, log_level: str) -> None:
    """FanPulse -- fan engagement, segmentation, and merchandise tools."""
    ctx.ensure_object(dict)
    ctx.obj["db_path"] = db_path
    ctx.obj["log_level"] = log_level


@cli.command("serve")
@click.option(
    "--http/--stdio",
    "use_http",
    default=settings.USE_HTTP,
    show_default=True,
    help="Transport (env: FANPULSE_HTTP=true selects HTTP).",
)
@click.option("--host", default=settings.HTTP_HOST, show_default=True)
@click.option("--port", default=settings.HTTP_PORT, show_default=True, type=int)
@click.option("--seed/--no-seed", default=True, show_default=True, help="Load demo data into an empty database.")
@click.pass_context
def serve(ctx: click.Context, use_http: bool, host: str, port: int, seed: bool) -> None:
    """Run the FanPulse MCP server."""
    service_name = "fanpulse-http" if use_http else "fanpulse-mcp"
    logger = setup_logging(service_name, ctx.obj["log_level"])
    service = FanPulseService(_open_store(ctx.obj["db_path"], seed))

    if use_http:
        import uvicorn

        from fanpulse.serving.http_app import create_app

        logger.info("serving_http", host=host, port=port)
        uvicorn.run(create_app(service), host=host, port=port, log_config=None)
        return

    from fanpulse.serving.mcp_server import build_mcp_server

    logger.info("serving_stdio")
    build_mcp_server(service).run()


@cli.command("init-db")
@click.option("--seed/--no-seed", default=False, show_default=True, help="Load the demo dataset.")
@click.pass_context
def init_db(ctx: click.Context, seed: bool) -> None:
    """Create the SQLite schema (and optionally seed demo data)."""
    setup_logging("fanpulse-cli", ctx.obj["log_level"])
    store = _open_store(ctx.obj["db_path"], seed)
    click.secho(f"Database ready: {store.db_path}", fg="green", bold=True)
    click.echo(f"  fans: {store.count_fans()}")


@cli.command("segments")
@click.option("--team", default=None, help="Case-insensitive favorite-team substring.")
@click.option("--members/--no-members", default=False, show_default=True, help="List segment members.")
@click.pass_context
def segments(ctx: click.Context, team: str | None, members: bool) -> None:
    """Print fan segment sizes."""
    setup_logging("fanpulse-cli", ctx.obj["log_level"])
    service = FanPulseService(_open_store(ctx.obj["db_path"], seed=False))
    report = service.get_fan_segments(team)

    click.secho(f"{'Segment':<24} {'Fans':>5}  Description", fg="cyan", bold=True)
    click.echo("-" * 80)
    for group in report.segments:
        click.echo(f"  {group.segment.value:<22} {group.count:>5}  {group.description}")
        if members:
            for fan in group.fans:
                click.echo(
                    f"      {fan.fan_id:<10} {fan.name:<22} events={fan.engagement_count} "
                    f"purchases={fan.purchase_count} last={fan.last_engagement}"
                )


@cli.command("recommend")
@click.argument("fan_id")
@click.option("--limit", default=5, show_default=True, type=int)
@click.pass_context
def recommend(ctx: click.Context, fan_id: str, limit: int) -> None:
    """Print merchandise recommendations for FAN_ID."""
    setup_logging("fanpulse-cli", ctx.obj["log_level"])
    service = FanPulseService(_open_store(ctx.obj["db_path"], seed=False))
    try:
        result = service.get_merch_recommendations(fan_id, limit)
    except FanNotFoundError as exc:
        click.secho(str(exc), fg="red", bold=True)
        raise SystemExit(1) from exc

    click.secho(
        f"{fan_id} ({result.engagement_level.value}), favorite team: {result.favorite_team}",
        fg="cyan",
        bold=True,
    )
    if not result.recommendations:
        click.echo("No recommendations.")
        return
    for rec in result.recommendations:
        click.echo(
            f"  {rec.relevance_score:>3}  {rec.product.product_id:<10} "
            f"{rec.product.name:<32} ${rec.product.price:>7.2f}  {rec.reason}"
        )


if __name__ == "__main__":
    cli()
