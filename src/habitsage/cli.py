"""Command-line interface for HabitSage."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

import click

from .config import BaseConfig
from .context import AppContext, create_app_context
from .errors import HabitNotFoundError, HabitSageError, InvalidConfigurationError
from .logging_config import setup_logging
from .models.habit import Habit, HabitFrequency
from .services import completion, habits, periods, recording, reports, streaks

DATE_TYPE = click.DateTime(formats=["%Y-%m-%d"])


def _as_date(value: Optional[datetime]) -> Optional[date]:
    return value.date() if value is not None else None


def _format_rate(rate: float) -> str:
    if completion.is_insufficient(rate):
        return "not enough data yet"
    return f"{rate:.0%}"


def _format_weekdays(habit: Habit) -> str:
    days = sorted(periods.habit_weekdays(habit))
    return ",".join(periods.WEEKDAY_LABELS[d] for d in days)


@click.group()
@click.option("--owner", "owner_id", type=int, default=None, help="Owner id to act as.")
@click.pass_context
def cli(ctx: click.Context, owner_id: Optional[int]) -> None:
    """Track habits and report streaks and completion rates."""

    if isinstance(ctx.obj, AppContext):
        if owner_id is not None:
            ctx.obj.owner_id = owner_id
        return
    config = BaseConfig()
    setup_logging(config)
    ctx.obj = create_app_context(config, owner_id=owner_id)


@cli.command("add-habit")
@click.argument("name")
@click.option(
    "--frequency",
    type=click.Choice([f.value for f in HabitFrequency]),
    default=HabitFrequency.DAILY.value,
    show_default=True,
)
@click.option("--weekday", "weekdays", type=int, multiple=True, help="0=Sun .. 6=Sat (weekly only).")
@click.option("--created", type=DATE_TYPE, default=None, help="Backdate the habit's start day.")
@click.pass_obj
def add_habit(
    app: AppContext,
    name: str,
    frequency: str,
    weekdays: tuple[int, ...],
    created: Optional[datetime],
) -> None:
    """Create a habit."""

    try:
        name = habits.validate_name(name)
    except InvalidConfigurationError as exc:
        raise click.BadParameter(str(exc), param_hint="NAME") from exc
    try:
        specific = periods.validate_habit_config(frequency, weekdays)
    except InvalidConfigurationError as exc:
        raise click.BadParameter(str(exc), param_hint="--weekday") from exc

    habit = Habit(owner_id=app.owner_id, name=name, frequency=frequency, specific_weekdays=specific)
    if created is not None:
        habit.created_at = created.replace(tzinfo=timezone.utc)
    try:
        habit = app.habit_repo.create_habit(habit)
    except HabitSageError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Created habit {habit.id}: {habit.name} ({habit.frequency})")


@cli.command("list-habits")
@click.pass_obj
def list_habits(app: AppContext) -> None:
    """List habits."""

    try:
        rows = app.habit_repo.list_habits(app.owner_id)
    except HabitSageError as exc:
        raise click.ClickException(str(exc)) from exc
    if not rows:
        click.echo("No habits yet.")
        return
    for habit in rows:
        days = _format_weekdays(habit)
        suffix = f" [{days}]" if days else ""
        click.echo(f"{habit.id}\t{habit.name}\t{habit.frequency}{suffix}")


@cli.command("edit-habit")
@click.argument("habit_id", type=int)
@click.option("--name", default=None)
@click.option("--frequency", type=click.Choice([f.value for f in HabitFrequency]), default=None)
@click.option("--weekday", "weekdays", type=int, multiple=True, help="Replace the target weekdays.")
@click.option("--every-day", is_flag=True, default=False, help="Drop specific weekdays.")
@click.pass_obj
def edit_habit(
    app: AppContext,
    habit_id: int,
    name: Optional[str],
    frequency: Optional[str],
    weekdays: tuple[int, ...],
    every_day: bool,
) -> None:
    """Change a habit's name, frequency or weekdays."""

    if every_day and weekdays:
        raise click.UsageError("--every-day cannot be combined with --weekday.")
    specific: Optional[list[int]] = None
    if every_day:
        specific = []
    elif weekdays:
        specific = list(weekdays)
    try:
        habit = habits.edit_habit(
            app.habit_repo,
            app.owner_id,
            habit_id,
            name=name,
            frequency=frequency,
            specific_weekdays=specific,
        )
    except InvalidConfigurationError as exc:
        raise click.BadParameter(str(exc)) from exc
    except HabitSageError as exc:
        raise click.ClickException(str(exc)) from exc
    days = _format_weekdays(habit)
    suffix = f" [{days}]" if days else ""
    click.echo(f"Updated habit {habit.id}: {habit.name} ({habit.frequency}{suffix})")


@cli.command("delete-habit")
@click.argument("habit_id", type=int)
@click.pass_obj
def delete_habit(app: AppContext, habit_id: int) -> None:
    """Delete a habit and all its logs."""

    try:
        deleted = app.habit_repo.delete_habit(app.owner_id, habit_id)
    except HabitSageError as exc:
        raise click.ClickException(str(exc)) from exc
    if not deleted:
        raise click.ClickException(str(HabitNotFoundError(habit_id)))
    click.echo(f"Deleted habit {habit_id}")


@cli.command("record")
@click.argument("habit_id", type=int)
@click.option("--date", "on", type=DATE_TYPE, default=None, help="Day to record (default today).")
@click.option("--not-done", is_flag=True, default=False, help="Mark the period as not done.")
@click.pass_obj
def record_cmd(app: AppContext, habit_id: int, on: Optional[datetime], not_done: bool) -> None:
    """Record a habit as done (or not done) for a day."""

    when = _as_date(on) or periods.utc_today()
    try:
        result = recording.record(app.habit_repo, app.owner_id, habit_id, when, not not_done)
    except HabitSageError as exc:
        raise click.ClickException(str(exc)) from exc
    state = "done" if result.completed else "not done"
    click.echo(f"{result.habit.name}: {result.period_key.isoformat()} marked {state}")


@cli.command("status")
@click.argument("habit_id", type=int)
@click.option("--date", "on", type=DATE_TYPE, default=None)
@click.pass_obj
def status(app: AppContext, habit_id: int, on: Optional[datetime]) -> None:
    """Show whether the period covering a day was recorded."""

    when = _as_date(on) or periods.utc_today()
    try:
        value = recording.completion_status(app.habit_repo, app.owner_id, habit_id, when)
    except HabitSageError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo({True: "done", False: "not done", None: "not recorded"}[value])


@cli.command("streak")
@click.argument("habit_id", type=int)
@click.option("--today", type=DATE_TYPE, default=None)
@click.pass_obj
def streak(app: AppContext, habit_id: int, today: Optional[datetime]) -> None:
    """Show the current streak."""

    try:
        value = streaks.current_streak(
            app.habit_repo, app.owner_id, habit_id, today=_as_date(today)
        )
    except HabitSageError as exc:
        raise click.ClickException(str(exc)) from exc
    if value == streaks.HABIT_NOT_FOUND:
        raise click.ClickException(str(HabitNotFoundError(habit_id)))
    click.echo(str(value))


@cli.command("rate")
@click.argument("habit_id", type=int)
@click.option("--window", "window_days", type=click.IntRange(min=1), default=None)
@click.option("--today", type=DATE_TYPE, default=None)
@click.pass_obj
def rate(
    app: AppContext, habit_id: int, window_days: Optional[int], today: Optional[datetime]
) -> None:
    """Show the completion rate over a trailing window."""

    try:
        value = completion.completion_rate(
            app.habit_repo,
            app.owner_id,
            habit_id,
            window_days or app.window_days,
            today=_as_date(today),
        )
    except HabitSageError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(_format_rate(value))


@cli.command("stats")
@click.option("--today", type=DATE_TYPE, default=None)
@click.pass_obj
def stats(app: AppContext, today: Optional[datetime]) -> None:
    """Show streaks and rates for every habit."""

    try:
        overview = habits.habit_overview(
            app.habit_repo, app.owner_id, window_days=app.window_days, today=_as_date(today)
        )
    except HabitSageError as exc:
        raise click.ClickException(str(exc)) from exc
    if not overview:
        click.echo("No habits yet.")
        return
    for item in overview:
        click.echo(
            f"{item.habit.name}: streak {item.current_streak} "
            f"(best {item.longest_streak}), rate {_format_rate(item.completion_rate)}"
        )


@cli.command("progress")
@click.option("--weeks", type=click.IntRange(min=1), default=8, show_default=True)
@click.option("--today", type=DATE_TYPE, default=None)
@click.pass_obj
def progress(app: AppContext, weeks: int, today: Optional[datetime]) -> None:
    """Show weekly completion percentages across all habits."""

    try:
        rows = reports.weekly_progress(
            app.habit_repo.list_habits(app.owner_id),
            app.habit_repo.list_logs(app.owner_id),
            weeks=weeks,
            today=_as_date(today),
        )
    except HabitSageError as exc:
        raise click.ClickException(str(exc)) from exc
    for row in rows:
        click.echo(f"{row.label} ({row.week_start.isoformat()}): {row.percentage}%")


def main() -> None:  # pragma: no cover - console entry point
    cli(prog_name="habitsage")


if __name__ == "__main__":  # pragma: no cover
    main()
