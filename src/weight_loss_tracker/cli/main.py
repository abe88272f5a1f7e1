"""
Command-line interface for Weight Loss Tracker.

Provides commands for setting goals, logging weeks, viewing the dashboard
and progress charts, exporting data, and managing the signed-in user.
"""

import logging
from typing import Any

import typer

from weight_loss_tracker.domain.progress import ChartSeries
from weight_loss_tracker.domain.weekly_entry import Perception, SugarCraving
from weight_loss_tracker.infrastructure.identity.client import IdentityClient
from weight_loss_tracker.infrastructure.storage.backends import JsonFileBackend
from weight_loss_tracker.infrastructure.storage.entry_store import EntryStore
from weight_loss_tracker.services import progress
from weight_loss_tracker.services.dashboard import DashboardService
from weight_loss_tracker.services.goals import GoalService
from weight_loss_tracker.services.output import OutputService
from weight_loss_tracker.services.weekly_log import WeeklyLogService
from weight_loss_tracker.utils.exceptions import AuthError, WeightLossTrackerError
from weight_loss_tracker.utils.logging_config import setup_logging
from weight_loss_tracker.utils.parameters import ParameterLoader
from weight_loss_tracker.utils.timezone_utils import today_in

app = typer.Typer(help="Weight Loss Tracker - Goals, weekly logs and progress")
goals_app = typer.Typer(help="Manage the weight loss goal")
app.add_typer(goals_app, name="goals")

logger = logging.getLogger(__name__)


def init_config(config_path: str = "config/config.yaml") -> ParameterLoader:
    """
    Initialize configuration and logging.

    Args:
        config_path: Path to configuration file.

    Returns:
        Parameter loader instance.
    """
    param_loader = ParameterLoader(config_path)
    setup_logging(param_loader.get_logging_config(), "weight_loss_tracker")
    return param_loader


def open_store(param_loader: ParameterLoader) -> EntryStore:
    """Open the entry store described by the configuration."""
    storage_config = param_loader.get_storage_config()
    return EntryStore(
        JsonFileBackend(storage_config.path),
        storage_config,
        timezone=param_loader.get_display_config().timezone,
    )


def show_notices(store: EntryStore) -> None:
    """Print the store's recovery notices to stderr."""
    for notice in store.notices:
        typer.echo(f"Warning: {notice}", err=True)


def fmt(value: float | None, unit: str = "", digits: int = 1) -> str:
    """Format an optional number, "--" when undefined."""
    if value is None:
        return "--"
    return f"{value:.{digits}f}{unit}"


def fail(action: str, error: Exception) -> typer.Exit:
    """Log and print an error, returning the exit to raise."""
    logger.error(f"{action} failed: {error}")
    typer.echo(f"Error: {error}", err=True)
    return typer.Exit(code=1)


@goals_app.command("set")
def goals_set(
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
    start_date: str | None = typer.Option(None, help="Program start date (YYYY-MM-DD), default today"),
    end_date: str | None = typer.Option(None, help="Program end date (YYYY-MM-DD)"),
    initial_weight: float | None = typer.Option(None, help="Initial weight (kg)"),
    target_weight: float | None = typer.Option(None, help="Target weight (kg)"),
    initial_waist: float | None = typer.Option(None, help="Initial waist (cm)"),
    target_waist: float | None = typer.Option(None, help="Target waist (cm)"),
    height: float | None = typer.Option(None, help="Height (cm)"),
) -> None:
    """
    Set the weight loss goal.

    Replaces any previous goal. Nothing is saved if a bound is violated.
    """
    try:
        param_loader = init_config(config_path)
        store = open_store(param_loader)

        if start_date is None:
            start_date = today_in(param_loader.get_display_config().timezone).isoformat()

        goal = GoalService(store).save_goal(
            {
                "start_date": start_date,
                "end_date": end_date,
                "initial_weight": initial_weight,
                "target_weight": target_weight,
                "initial_waist": initial_waist,
                "target_waist": target_waist,
                "height": height,
            }
        )

        typer.echo("Goals saved")
        typer.echo(f"  Program: {goal.start_date} -> {goal.end_date}")
        typer.echo(f"  Weight: {goal.initial_weight} -> {goal.target_weight} kg")
        typer.echo(f"  Waist: {goal.initial_waist} -> {goal.target_waist} cm")

    except WeightLossTrackerError as e:
        raise fail("Saving goals", e) from e


@goals_app.command("show")
def goals_show(
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
) -> None:
    """Show the current goal."""
    try:
        param_loader = init_config(config_path)
        store = open_store(param_loader)
        goal = GoalService(store).get_goal()
        show_notices(store)

        if goal is None:
            typer.echo("No goals set. Run 'goals set' first.")
            return

        typer.echo(f"Program: {goal.start_date} -> {goal.end_date}")
        typer.echo(f"Height: {goal.height} cm")
        typer.echo(
            f"Weight: {goal.initial_weight} -> {goal.target_weight} kg "
            f"(goal: -{goal.weight_to_lose:.1f} kg)"
        )
        typer.echo(
            f"Waist: {goal.initial_waist} -> {goal.target_waist} cm "
            f"(goal: -{goal.waist_to_lose:.1f} cm)"
        )

    except WeightLossTrackerError as e:
        raise fail("Loading goals", e) from e


@app.command()
def log(
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
    date: str | None = typer.Option(None, help="Measurement date (YYYY-MM-DD), default today"),
    weight: float | None = typer.Option(None, help="Weight (kg)"),
    waist: float | None = typer.Option(None, help="Waist (cm)"),
    errors: int = typer.Option(0, min=0, help="Diet deviations this week"),
    physical_activity: bool = typer.Option(False, help="Exercised this week"),
    sleep: float = typer.Option(0.0, min=0, max=24, help="Average sleep (hours)"),
    meditation: bool = typer.Option(False, help="Meditated this week"),
    water: float = typer.Option(0.0, min=0, help="Daily water (liters)"),
    body_weight_perception: Perception = typer.Option(
        Perception.MEDIUM, case_sensitive=False, help="Body weight perception"
    ),
    energy: Perception = typer.Option(Perception.MEDIUM, case_sensitive=False, help="Energy level"),
    sugar_craving: SugarCraving = typer.Option(
        SugarCraving.LITTLE, case_sensitive=False, help="Sugar craving"
    ),
) -> None:
    """
    Log this week's measurements and habits.

    Requires a goal to be set first.
    """
    try:
        param_loader = init_config(config_path)
        store = open_store(param_loader)

        if date is None:
            date = today_in(param_loader.get_display_config().timezone).isoformat()

        entry = WeeklyLogService(store).log_entry(
            {
                "date": date,
                "weight": weight,
                "waist": waist,
                "errors": errors,
                "physical_activity": physical_activity,
                "sleep": sleep,
                "meditation": meditation,
                "water": water,
                "body_weight_perception": body_weight_perception,
                "energy": energy,
                "sugar_craving": sugar_craving,
            }
        )
        show_notices(store)

        typer.echo(f"Logged {entry.date}: {entry.weight} kg, {entry.waist} cm")

    except WeightLossTrackerError as e:
        raise fail("Logging week", e) from e


@app.command()
def history(
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
) -> None:
    """List logged weeks, newest first."""
    try:
        param_loader = init_config(config_path)
        store = open_store(param_loader)
        entries = WeeklyLogService(store).history()
        show_notices(store)

        if not entries:
            typer.echo("No weeks logged yet. Run 'log' to add one.")
            return

        for entry in entries:
            typer.echo(
                f"{entry.date}  {entry.weight:>6.1f} kg  {entry.waist:>6.1f} cm  "
                f"errors={entry.errors} sleep={entry.sleep}h water={entry.water}l"
            )

    except WeightLossTrackerError as e:
        raise fail("Listing history", e) from e


@app.command()
def dashboard(
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
) -> None:
    """Show current measurements, totals lost and progress toward the goal."""
    try:
        param_loader = init_config(config_path)
        store = open_store(param_loader)
        report = DashboardService(store).build_report()
        show_notices(store)

        goal = report.goal
        stats = report.stats

        typer.echo(
            f"Current weight: {fmt(stats.current_weight if stats else None, ' kg')} "
            f"(initial: {goal.initial_weight} kg)"
        )
        typer.echo(
            f"Current waist: {fmt(stats.current_waist if stats else None, ' cm')} "
            f"(initial: {goal.initial_waist} cm)"
        )
        typer.echo(
            f"Weight lost: {fmt(stats.total_weight_lost if stats else None, ' kg')} "
            f"(goal: -{goal.weight_to_lose:.1f} kg)"
        )
        typer.echo(f"Waist lost: {fmt(stats.total_waist_lost if stats else None, ' cm')}")
        typer.echo(f"Overall progress: {fmt(report.overall_progress_pct, '%', 0)}")

        if stats is None:
            typer.echo("\nNo weeks logged yet. Run 'log' to add one.")
            return

        typer.echo(f"\nWeeks logged: {stats.weeks_logged}")
        typer.echo(f"Average weight loss per week: {fmt(stats.avg_weight_loss_per_week, ' kg', 2)}")
        typer.echo(f"Average waist loss per week: {fmt(stats.avg_waist_loss_per_week, ' cm', 2)}")

    except WeightLossTrackerError as e:
        raise fail("Dashboard", e) from e


def _echo_series(series: ChartSeries, unit: str) -> None:
    low, high = series.axis_domain
    typer.echo(f"\n{series.name.capitalize()} (target {series.target_value} {unit}, axis {low:g}-{high:g}):")
    for point in series:
        typer.echo(f"  {point.label:<7} {point.measured_value:>6.1f} {unit}")


def _echo_scores(title: str, scores: dict[str, Any]) -> None:
    typer.echo(f"\n{title}:")
    for name, value in scores.items():
        typer.echo(f"  {name.replace('_', ' '):<24} {value:>5.0f}")


@app.command(name="progress")
def progress_command(
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
    window: int = typer.Option(3, min=1, help="Rolling average window (entries)"),
) -> None:
    """Show weight and waist series, trend, habit and self-assessment scores."""
    try:
        param_loader = init_config(config_path)
        store = open_store(param_loader)
        goal = GoalService(store).get_goal()
        if goal is None:
            show_notices(store)
            typer.echo("No goals set. Run 'goals set' first.")
            raise typer.Exit(code=1)

        entries = store.load_entries()
        show_notices(store)

        if not entries:
            typer.echo("No weeks logged yet. Run 'log' to add one.")
            return

        _echo_series(progress.weight_series(goal, entries), "kg")
        _echo_series(progress.waist_series(goal, entries), "cm")

        typer.echo(f"\nWeight trend ({window}-entry rolling average):")
        for point in progress.rolling_average(entries, "weight", window):
            typer.echo(f"  {point['label']:<7} {point['value']:>6.2f} kg")

        latest = progress.latest_entry(entries)
        habits = progress.habit_scores(latest)
        assessment = progress.self_assessment_scores(latest)
        if habits is not None:
            _echo_scores("Habits (latest week)", habits.model_dump())
        if assessment is not None:
            _echo_scores("Self-assessment (latest week)", assessment.model_dump())

    except WeightLossTrackerError as e:
        raise fail("Progress", e) from e


@app.command()
def export(
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
    output_format: str | None = typer.Option(None, help="Output format: csv, parquet, or both"),
) -> None:
    """
    Export weekly entries, chart series and a progress report.

    Writes files to the configured output directory.
    """
    try:
        param_loader = init_config(config_path)
        output_config = param_loader.get_output_config()
        if output_format:
            if output_format == "both":
                output_config.formats = ["csv", "parquet"]
            else:
                output_config.formats = [output_format]

        store = open_store(param_loader)
        report = DashboardService(store).build_report()
        entries = list(reversed(report.history))
        show_notices(store)

        output_service = OutputService(output_config)
        output_service.write_entries(entries)
        output_service.write_series(progress.weight_series(report.goal, entries))
        output_service.write_series(progress.waist_series(report.goal, entries))
        output_service.write_report(report)

        typer.echo(f"Exported {len(entries)} weekly entries to {output_config.dir}/")

    except WeightLossTrackerError as e:
        raise fail("Export", e) from e


@app.command()
def reset(
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
    yes: bool = typer.Option(False, "--yes", help="Skip confirmation"),
) -> None:
    """Delete the goal and every logged week."""
    try:
        param_loader = init_config(config_path)
        if not yes:
            typer.confirm("Delete the goal and all weekly logs?", abort=True)
        open_store(param_loader).clear()
        typer.echo("All data deleted")

    except WeightLossTrackerError as e:
        raise fail("Reset", e) from e


@app.command()
def login(
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
    email: str = typer.Option(..., prompt=True, help="Account email"),
    password: str = typer.Option(..., prompt=True, hide_input=True, help="Account password"),
) -> None:
    """Sign in to the identity service."""
    try:
        param_loader = init_config(config_path)
        user = IdentityClient(param_loader.get_identity_config()).sign_in_with_password(
            email, password
        )
        typer.echo(f"Signed in as {user.email} ({user.role.value})")

    except WeightLossTrackerError as e:
        raise fail("Sign in", e) from e


@app.command()
def signup(
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
    email: str = typer.Option(..., prompt=True, help="Account email"),
    password: str = typer.Option(
        ..., prompt=True, hide_input=True, confirmation_prompt=True, help="Account password"
    ),
) -> None:
    """Create an account."""
    try:
        param_loader = init_config(config_path)
        user = IdentityClient(param_loader.get_identity_config()).sign_up(email, password)
        if user is None:
            typer.echo("Account created. Check your email to confirm it, then run 'login'.")
        else:
            typer.echo(f"Account created, signed in as {user.email}")

    except WeightLossTrackerError as e:
        raise fail("Sign up", e) from e


@app.command()
def logout(
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
) -> None:
    """Sign out."""
    try:
        param_loader = init_config(config_path)
        IdentityClient(param_loader.get_identity_config()).sign_out()
        typer.echo("Signed out")

    except WeightLossTrackerError as e:
        raise fail("Sign out", e) from e


@app.command()
def whoami(
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
) -> None:
    """Show the signed-in user."""
    try:
        param_loader = init_config(config_path)
        user = IdentityClient(param_loader.get_identity_config()).get_session()
        if user is None:
            typer.echo("Not signed in")
        else:
            typer.echo(f"{user.email} ({user.role.value})")

    except WeightLossTrackerError as e:
        raise fail("Session lookup", e) from e


@app.command()
def patients(
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
) -> None:
    """List patients (administrators only)."""
    try:
        param_loader = init_config(config_path)
        client = IdentityClient(param_loader.get_identity_config())
        user = client.get_session()
        if user is None:
            raise AuthError("Not signed in. Run 'login' first.")

        records = client.list_patients(user)
        if not records:
            typer.echo("No patients registered")
            return

        for record in records:
            typer.echo(f"{record.email:<40} {record.created_at or ''}")

    except WeightLossTrackerError as e:
        raise fail("Listing patients", e) from e


if __name__ == "__main__":
    app()
