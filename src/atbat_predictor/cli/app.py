import threading
from pathlib import Path
from typing import Annotated

import httpx
import typer

from atbat_predictor.cli._logging import configure_logging
from atbat_predictor.cli._output import (
    console,
    print_error,
    print_prediction,
    print_resolution_summary,
    print_sync_log,
    print_sync_log_table,
    print_user_stats,
)
from atbat_predictor.cli.factory import build_app_context
from atbat_predictor.config import AppSettings, create_config, load_settings
from atbat_predictor.exceptions import AtBatException, ConfigurationError

app = typer.Typer(name="atbat", help="At-bat predictions: resolution, scoring and live sync")

_ConfigOption = Annotated[Path, typer.Option("--config", "-c", help="YAML config file")]
_DbOption = Annotated[Path | None, typer.Option("--db", help="Override the SQLite database path")]


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable DEBUG logging")] = False,
) -> None:
    """At-bat predictions: resolution, scoring and live sync."""
    configure_logging(verbose=verbose)
    if ctx.invoked_subcommand is None:
        raise typer.Exit()


def _settings(config: Path, db: Path | None) -> AppSettings:
    overrides: dict[str, object] = {"db": {"path": str(db)}} if db is not None else {}
    try:
        return load_settings(create_config(str(config), overrides=overrides))
    except ConfigurationError as e:
        print_error(str(e))
        raise typer.Exit(code=2) from None


@app.command()
def sync(
    config: _ConfigOption = Path("atbat.yaml"),
    db: _DbOption = None,
) -> None:
    """Run one manual sync pass: fetch the current game and resolve completed at-bats."""
    with build_app_context(_settings(config, db)) as ctx:
        log = ctx.scheduler.trigger()
    if log is None:
        console.print("A sync pass is already running; skipped.")
        return
    print_sync_log(log)
    if log.status != "success":
        raise typer.Exit(code=1)


@app.command()
def serve(
    config: _ConfigOption = Path("atbat.yaml"),
    db: _DbOption = None,
) -> None:
    """Run the periodic sync loop until interrupted."""
    with build_app_context(_settings(config, db)) as ctx:
        ctx.scheduler.start()
        console.print(
            f"Syncing team {ctx.settings.mlb_team_id} every {ctx.settings.sync_interval_seconds:g}s. "
            "Press Ctrl+C to stop."
        )
        try:
            threading.Event().wait()
        except KeyboardInterrupt:
            pass
        finally:
            ctx.scheduler.stop(timeout=ctx.settings.sync_interval_seconds)


@app.command()
def resolve(
    game_pk: Annotated[int, typer.Argument(help="MLB game id")],
    config: _ConfigOption = Path("atbat.yaml"),
    db: _DbOption = None,
) -> None:
    """Resolve every completed at-bat of a game."""
    with build_app_context(_settings(config, db)) as ctx:
        try:
            game = ctx.source.fetch_game(game_pk)
        except (httpx.HTTPError, ValueError) as e:
            print_error(f"could not fetch game {game_pk}: {e}")
            raise typer.Exit(code=1) from None
        summary = ctx.orchestrator.resolve_all_completed(game)
    print_resolution_summary(summary)
    if not summary.ok:
        raise typer.Exit(code=1)


@app.command()
def predict(
    user_id: Annotated[str, typer.Argument(help="User making the prediction")],
    game_pk: Annotated[int, typer.Argument(help="MLB game id")],
    at_bat_index: Annotated[int, typer.Argument(help="At-bat index within the game")],
    outcome: Annotated[str, typer.Argument(help="Predicted outcome, e.g. home_run")],
    category: Annotated[str | None, typer.Option("--category", help="Predicted category")] = None,
    live_check: Annotated[
        bool, typer.Option("--live-check/--no-live-check", help="Refuse if the at-bat is too far along")
    ] = True,
    config: _ConfigOption = Path("atbat.yaml"),
    db: _DbOption = None,
) -> None:
    """Submit a prediction for an at-bat."""
    with build_app_context(_settings(config, db)) as ctx:
        play = None
        if live_check:
            try:
                game = ctx.source.fetch_game(game_pk)
            except (httpx.HTTPError, ValueError) as e:
                print_error(f"could not fetch game {game_pk}: {e}")
                raise typer.Exit(code=1) from None
            play = next((p for p in game.plays if p.at_bat_index == at_bat_index), None)
        try:
            prediction = ctx.predictions.submit(user_id, game_pk, at_bat_index, outcome, category, play=play)
        except AtBatException as e:
            print_error(str(e))
            raise typer.Exit(code=1) from None
    print_prediction(prediction)


@app.command()
def stats(
    user_id: Annotated[str, typer.Argument(help="User to report on")],
    config: _ConfigOption = Path("atbat.yaml"),
    db: _DbOption = None,
) -> None:
    """Show a user's prediction record."""
    with build_app_context(_settings(config, db)) as ctx:
        user_stats = ctx.predictions.user_stats(user_id)
    print_user_stats(user_id, user_stats)


@app.command("sync-log")
def sync_log(
    limit: Annotated[int, typer.Option("--limit", "-n", help="Number of passes to show")] = 20,
    config: _ConfigOption = Path("atbat.yaml"),
    db: _DbOption = None,
) -> None:
    """Show recent sync passes."""
    with build_app_context(_settings(config, db)) as ctx:
        logs = ctx.sync_log_repo.get_recent(limit)
    print_sync_log_table(logs)
