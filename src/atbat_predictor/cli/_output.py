from rich.console import Console
from rich.table import Table

from atbat_predictor.domain.prediction import Prediction, PredictionStats
from atbat_predictor.domain.sync_log import SyncLog
from atbat_predictor.resolution.orchestrator import ResolutionSummary

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)


def print_error(message: str) -> None:
    err_console.print(f"[red bold]Error:[/red bold] {message}")


def print_sync_log(log: SyncLog) -> None:
    color = "green" if log.status == "success" else "red"
    game = f"game {log.game_pk}" if log.game_pk is not None else "no game"
    console.print(
        f"[bold {color}]Sync {log.status}[/bold {color}] ({log.trigger.value}, {log.pass_type.value}, {game})"
    )
    console.print(f"  Predictions resolved: {log.predictions_resolved}")
    console.print(f"  Points awarded: {log.points_awarded}")
    console.print(f"  Duration: {log.duration_ms} ms")
    if log.error_message:
        console.print(f"  [red]Error: {log.error_message}[/red]")


def print_sync_log_table(logs: list[SyncLog]) -> None:
    if not logs:
        console.print("No sync passes recorded.")
        return
    table = Table(show_edge=False, pad_edge=False)
    table.add_column("Started")
    table.add_column("Trigger")
    table.add_column("Pass")
    table.add_column("Game", justify="right")
    table.add_column("Status")
    table.add_column("Resolved", justify="right")
    table.add_column("Points", justify="right")
    table.add_column("ms", justify="right")
    table.add_column("Error")
    for log in logs:
        table.add_row(
            log.started_at,
            log.trigger.value,
            log.pass_type.value,
            str(log.game_pk) if log.game_pk is not None else "",
            log.status,
            str(log.predictions_resolved),
            str(log.points_awarded),
            str(log.duration_ms),
            log.error_message or "",
        )
    console.print(table)


def print_resolution_summary(summary: ResolutionSummary) -> None:
    console.print(f"Resolution for game [bold]{summary.game_pk}[/bold]")
    console.print(f"  At-bats checked: {summary.at_bats_checked}")
    console.print(f"  At-bats resolved: {summary.at_bats_resolved}")
    console.print(f"  Predictions resolved: {summary.predictions_resolved}")
    console.print(f"  Points awarded: {summary.points_awarded}")
    if summary.unclassified:
        console.print(f"  [yellow]Unclassified at-bats: {', '.join(map(str, summary.unclassified))}[/yellow]")
    for error in summary.errors:
        console.print(f"  [red]At-bat {error.at_bat_index}: {error.message}[/red]")


def print_prediction(prediction: Prediction) -> None:
    category = prediction.category.value if prediction.category is not None else "-"
    console.print(
        f"[bold green]Prediction saved[/bold green] #{prediction.id}: {prediction.outcome.value} ({category}) "
        f"for game {prediction.game_pk} at-bat {prediction.at_bat_index}"
    )


def print_user_stats(user_id: str, stats: PredictionStats) -> None:
    console.print(f"Prediction stats for [bold]{user_id}[/bold]")
    table = Table(show_edge=False, pad_edge=False, show_header=False)
    table.add_column("Stat")
    table.add_column("Value", justify="right")
    table.add_row("Resolved", str(stats.total))
    table.add_row("Correct", str(stats.correct))
    table.add_row("Exact", str(stats.exact))
    table.add_row("Category only", str(stats.category_only))
    table.add_row("Accuracy", f"{stats.accuracy:.1f}%")
    table.add_row("Current streak", str(stats.current_streak))
    table.add_row("Best streak", str(stats.best_streak))
    table.add_row("Points", str(stats.total_points))
    console.print(table)
