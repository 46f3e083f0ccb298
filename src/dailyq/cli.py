"""DailyQ CLI - Daily question journal."""

import calendar as month_calendar
import json
import logging
import sys
from dataclasses import asdict
from datetime import date

import click

from .config import load_config
from .record_store import RecordStore
from .telegram_format import format_todos
from .workflows import (
    AnswerFilter,
    QuestionState,
    add_todo,
    clear_completed,
    day_detail,
    ensure_daily_question,
    filter_answers,
    get_prompt_provider,
    get_store,
    month_overview,
    remove_todo,
    submit_answer,
    toggle_todo,
)


def _parse_day(value: str | None, store: RecordStore) -> date:
    if not value:
        return store.today()
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"Expected YYYY-MM-DD, got {value!r}")


def _parse_switch(value: str) -> bool:
    return value.lower() == "on"


@click.group()
@click.version_option()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx, debug: bool):
    """DailyQ - one question a day."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )
    ctx.ensure_object(dict)
    config = load_config()
    ctx.obj["config"] = config
    ctx.obj["store"] = get_store(config)


@main.command()
@click.option("--regenerate", is_flag=True, help="Generate a new question even if one was issued today")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def question(ctx, regenerate: bool, as_json: bool):
    """Show today's question, generating it if needed."""
    store = ctx.obj["store"]
    provider = get_prompt_provider(ctx.obj["config"])
    try:
        daily = ensure_daily_question(store, provider, regenerate=regenerate)
    except RuntimeError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(
            json.dumps(
                {
                    "date": daily.day.isoformat(),
                    "question": daily.question,
                    "answer": daily.answer,
                    "state": daily.state.value,
                },
                indent=2,
                ensure_ascii=False,
            )
        )
        return

    if daily.state is QuestionState.MISSING:
        click.echo("Today's question was generated but could not be loaded.", err=True)
        click.echo("Run 'dailyq question --regenerate' to get a new one.", err=True)
        sys.exit(1)

    click.echo(f"Question for {daily.day.strftime('%A, %b %d')}\n")
    click.echo(daily.question)
    if daily.state is QuestionState.ANSWERED:
        click.echo(f"\nYour answer:\n{daily.answer}")
    else:
        click.echo("\nAnswer with: dailyq answer \"...\"")


@main.command()
@click.argument("text", required=False)
@click.pass_context
def answer(ctx, text: str | None):
    """Answer today's question."""
    store = ctx.obj["store"]
    provider = get_prompt_provider(ctx.obj["config"])
    try:
        daily = ensure_daily_question(store, provider)
    except RuntimeError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if daily.state is QuestionState.MISSING:
        click.echo("Error: today's question could not be loaded.", err=True)
        sys.exit(1)

    if text is None:
        click.echo(daily.question)
        text = click.prompt(">", default="", show_default=False)

    try:
        edited = submit_answer(store, text)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo("✓ Answer updated." if edited else "✓ Answer saved.")


@main.command()
@click.option(
    "--period",
    type=click.Choice([f.value for f in AnswerFilter]),
    default=AnswerFilter.ALL.value,
    help="Limit to this month or the last 7 days",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def answers(ctx, period: str, as_json: bool):
    """List past answers, newest first."""
    store = ctx.obj["store"]
    records = filter_answers(store.get_all_answers(), AnswerFilter(period), store.now(), store.tz)

    if as_json:
        click.echo(json.dumps([r.to_dict() for r in records], indent=2, ensure_ascii=False))
        return

    if not records:
        click.echo("No answers yet.")
        return

    for i, record in enumerate(records):
        if i:
            click.echo()
        click.echo(f"### {record.date.strftime('%A, %B %d %Y')}")
        click.echo(f"Q: {record.question}")
        click.echo(f"A: {record.answer}")


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def stats(ctx, as_json: bool):
    """Show answer statistics."""
    snapshot = ctx.obj["store"].get_stats_snapshot()

    if as_json:
        click.echo(json.dumps(asdict(snapshot), indent=2, ensure_ascii=False))
        return

    click.echo(f"Total answers:   {snapshot.total_answers}")
    click.echo(f"This month:      {snapshot.this_month_answers}")
    click.echo(f"This week:       {snapshot.this_week_answers}")
    click.echo(f"Current streak:  {snapshot.current_streak} day(s)")
    click.echo(f"Longest streak:  {snapshot.max_streak} day(s)")
    click.echo("\nLast 3 months:")
    for m in snapshot.monthly_histogram:
        click.echo(f"  {m.label:>4} {'█' * m.count} {m.count}")


@main.command()
@click.option("--date", "-d", "target_date", default=None,
              help="Date to view (YYYY-MM-DD), defaults to today")
@click.pass_context
def day(ctx, target_date: str | None):
    """Show everything stored for a day."""
    store = ctx.obj["store"]
    target = _parse_day(target_date, store)
    detail = day_detail(store, target)

    if detail.is_empty:
        click.echo(f"Nothing recorded for {target.strftime('%A, %b %d')}.")
        return

    click.echo(f"{target.strftime('%A, %b %d %Y')}\n")
    if detail.question:
        click.echo(f"Q: {detail.question}")
    if detail.answer:
        click.echo(f"A: {detail.answer}")
    if detail.todos:
        click.echo("\nTodos:")
        click.echo(format_todos(detail.todos))


@main.command("calendar")
@click.option("--month", "month_str", default=None, help="Month to show (YYYY-MM), defaults to this month")
@click.pass_context
def calendar_cmd(ctx, month_str: str | None):
    """Show a month grid; days with entries are marked with *."""
    store = ctx.obj["store"]
    if month_str:
        try:
            year, month = map(int, month_str.split("-"))
            date(year, month, 1)
        except ValueError:
            raise click.BadParameter(f"Expected YYYY-MM, got {month_str!r}")
    else:
        today = store.today()
        year, month = today.year, today.month

    marked = {d.day for d in month_overview(store, year, month)}

    click.echo(f"{month_calendar.month_name[month]} {year}".center(28))
    click.echo(" ".join(f"{name:>3}" for name in ("Mo", "Tu", "We", "Th", "Fr", "Sa", "Su")))
    for week in month_calendar.monthcalendar(year, month):
        cells = []
        for n in week:
            if n == 0:
                cells.append("   ")
            else:
                cells.append(f"{n:>2}{'*' if n in marked else ' '}")
        click.echo(" ".join(cells))
    click.echo(f"\n{len(marked)} day(s) with entries")


# ============== Todos ==============


@main.group()
def todo():
    """Manage a day's todo list."""
    pass


_date_option = click.option("--date", "-d", "target_date", default=None,
                            help="Day of the list (YYYY-MM-DD), defaults to today")


@todo.command("list")
@_date_option
@click.pass_context
def todo_list(ctx, target_date: str | None):
    """List todos."""
    store = ctx.obj["store"]
    target = _parse_day(target_date, store)
    click.echo(format_todos(store.get_todo_list(target)))


@todo.command("add")
@click.argument("text")
@_date_option
@click.pass_context
def todo_add(ctx, text: str, target_date: str | None):
    """Add a todo."""
    store = ctx.obj["store"]
    target = _parse_day(target_date, store)
    try:
        todos = add_todo(store, text, target)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    click.echo(format_todos(todos))


@todo.command("done")
@click.argument("index", type=int)
@_date_option
@click.pass_context
def todo_done(ctx, index: int, target_date: str | None):
    """Toggle completion of todo INDEX (1-based)."""
    store = ctx.obj["store"]
    target = _parse_day(target_date, store)
    try:
        item = toggle_todo(store, index - 1, target)
    except IndexError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    state = "done" if item.is_completed else "not done"
    click.echo(f"✓ '{item.text}' marked {state}")


@todo.command("remove")
@click.argument("index", type=int)
@_date_option
@click.pass_context
def todo_remove(ctx, index: int, target_date: str | None):
    """Delete todo INDEX (1-based)."""
    store = ctx.obj["store"]
    target = _parse_day(target_date, store)
    try:
        item = remove_todo(store, index - 1, target)
    except IndexError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    click.echo(f"✓ Removed '{item.text}'")


@todo.command("clear-done")
@_date_option
@click.pass_context
def todo_clear_done(ctx, target_date: str | None):
    """Remove completed todos."""
    store = ctx.obj["store"]
    removed = clear_completed(store, _parse_day(target_date, store))
    click.echo(f"✓ Removed {removed} completed todo(s)")


# ============== Settings ==============


@main.group(invoke_without_command=True)
@click.pass_context
def settings(ctx):
    """Show or change settings."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(settings_show)


@settings.command("show")
@click.pass_context
def settings_show(ctx):
    """Show current settings."""
    store = ctx.obj["store"]
    hour, minute = store.get_notification_time()
    click.echo(f"Push notifications: {'on' if store.get_push_notification_enabled() else 'off'}")
    click.echo(f"Dark mode:          {'on' if store.get_dark_mode_enabled() else 'off'}")
    click.echo(f"Reminder time:      {hour:02d}:{minute:02d}")
    click.echo(f"Time zone:          {ctx.obj['config'].timezone}")


@settings.command("push")
@click.argument("state", type=click.Choice(["on", "off"], case_sensitive=False))
@click.pass_context
def settings_push(ctx, state: str):
    """Turn the daily reminder on or off."""
    ctx.obj["store"].set_push_notification_enabled(_parse_switch(state))
    click.echo(f"✓ Push notifications {state.lower()}")


@settings.command("dark-mode")
@click.argument("state", type=click.Choice(["on", "off"], case_sensitive=False))
@click.pass_context
def settings_dark_mode(ctx, state: str):
    """Turn dark mode on or off."""
    ctx.obj["store"].set_dark_mode_enabled(_parse_switch(state))
    click.echo(f"✓ Dark mode {state.lower()}")


@settings.command("time")
@click.argument("value")
@click.pass_context
def settings_time(ctx, value: str):
    """Set the reminder time (HH:MM)."""
    try:
        hour, minute = map(int, value.split(":"))
        ctx.obj["store"].set_notification_time(hour, minute)
    except ValueError:
        click.echo(f"Error: invalid time {value!r}, expected HH:MM", err=True)
        sys.exit(1)
    click.echo(f"✓ Reminder time set to {hour:02d}:{minute:02d}")


# ============== Maintenance ==============


@main.command()
@click.option("--yes", is_flag=True, help="Skip confirmation")
@click.pass_context
def clear(ctx, yes: bool):
    """Erase all questions, answers, todos and settings."""
    if not yes and not click.confirm("This deletes everything. Continue?"):
        click.echo("Nothing was deleted.")
        return
    ctx.obj["store"].clear_all_data()
    click.echo("✓ All data erased.")


@main.command()
def bot():
    """Run the Telegram bot."""
    try:
        from .telegram_bot import run_bot
        click.echo("Starting DailyQ Telegram bot...")
        click.echo("Press Ctrl+C to stop")
        run_bot()
    except ValueError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nBot stopped.")


if __name__ == "__main__":
    main()
