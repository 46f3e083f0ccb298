"""Markdown rendering of store data and Telegram message sending."""

import telegramify_markdown

from .core.records import AnswerRecord, TodoItem
from .core.stats import StatsSnapshot

CHUNK_SIZE = 4000


def format_stats(stats: StatsSnapshot) -> str:
    """Render a stats snapshot as markdown."""
    lines = [
        "**Your Stats**",
        "",
        f"- Total answers: {stats.total_answers}",
        f"- This month: {stats.this_month_answers}",
        f"- This week: {stats.this_week_answers}",
        f"- Current streak: {stats.current_streak} day(s)",
        f"- Longest streak: {stats.max_streak} day(s)",
    ]
    if stats.monthly_histogram:
        lines.append("")
        lines.append("**Last 3 months**")
        peak = max((m.count for m in stats.monthly_histogram), default=0) or 1
        for m in stats.monthly_histogram:
            bar = "█" * round(10 * m.count / peak)
            lines.append(f"- {m.label}: {bar} {m.count}")
    return "\n".join(lines)


def format_answers(records: list[AnswerRecord]) -> str:
    if not records:
        return "No answers yet."
    blocks = []
    for r in records:
        blocks.append(f"**{r.date.strftime('%a, %b %d %Y')}**\n_{r.question}_\n{r.answer}")
    return "\n\n".join(blocks)


def format_todos(todos: list[TodoItem]) -> str:
    if not todos:
        return "No todos."
    return "\n".join(
        f"{i}. [{'x' if t.is_completed else ' '}] {t.text}" for i, t in enumerate(todos, start=1)
    )


def chunk(text: str, size: int = CHUNK_SIZE) -> list[str]:
    """Split text into Telegram-sized pieces."""
    return [text[i : i + size] for i in range(0, len(text), size)] or [""]


async def send_markdown(bot_or_msg, text: str, *, chat_id: int | None = None, reply_markup=None):
    """Send markdown text to Telegram, converting to MarkdownV2.

    bot_or_msg: a Bot instance (pass chat_id) or an Update.message (calls reply_text).
    The reply markup is attached to the last chunk only.
    """
    converted = telegramify_markdown.markdownify(text)
    chunks = chunk(converted)
    for i, piece in enumerate(chunks):
        markup = reply_markup if i == len(chunks) - 1 else None
        if chat_id is not None:
            await bot_or_msg.send_message(
                chat_id=chat_id, text=piece, parse_mode="MarkdownV2", reply_markup=markup
            )
        else:
            await bot_or_msg.reply_text(piece, parse_mode="MarkdownV2", reply_markup=markup)
