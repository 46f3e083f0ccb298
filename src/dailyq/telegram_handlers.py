"""Telegram command handlers."""

import asyncio
import logging
from datetime import date

from telegram import Update, InlineKeyboardButton, InlineKeyboardMarkup
from telegram.ext import ContextTypes, ConversationHandler

from .record_store import RecordStore
from .reminders import reminder_recipients, sync_daily_reminder
from .telegram_format import format_answers, format_stats, format_todos, send_markdown
from .telegram_states import AnswerStates, ClearStates
from .workflows import (
    AnswerFilter,
    QuestionState,
    add_todo,
    day_detail,
    ensure_daily_question,
    filter_answers,
    remove_todo,
    submit_answer,
    toggle_todo,
)

logger = logging.getLogger(__name__)

HELP_TEXT = (
    "/question - Today's question\n"
    "/answer - Answer today's question\n"
    "/answers [all|month|week] - Past answers\n"
    "/stats - Answer statistics\n"
    "/todo [text] - Today's todos, or add one\n"
    "/day YYYY-MM-DD - Everything stored for a day\n"
    "/remind on|off|HH:MM - Daily reminder\n"
    "/clear - Erase all data\n"
    "/cancel - Cancel current operation\n"
    "/help - Show all commands"
)


def _store(context: ContextTypes.DEFAULT_TYPE) -> RecordStore:
    return context.bot_data["store"]


# ============== Simple Commands ==============


async def start_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /start command."""
    await update.message.reply_text(
        "Hi! I'm DailyQ. Every day brings one question to reflect on.\n\n" + HELP_TEXT
    )


async def help_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /help command."""
    await update.message.reply_text("*DailyQ Commands*\n\n" + HELP_TEXT, parse_mode="Markdown")


async def question_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /question command - show today's question, generating it if needed."""
    store = _store(context)
    provider = context.bot_data["prompts"]

    try:
        daily = await asyncio.to_thread(ensure_daily_question, store, provider)
    except RuntimeError as e:
        logger.error(f"Question generation failed: {e}")
        await update.message.reply_text("Question generation failed. Please try again.")
        return

    if daily.state is QuestionState.MISSING:
        await update.message.reply_text(
            "Today's question was generated but could not be loaded.\n"
            "Run `dailyq question --regenerate` to get a new one."
        )
        return

    status = {
        QuestionState.ANSWERED: "You've answered today. Use /answer to edit.",
        QuestionState.UNANSWERED: "Use /answer to write your answer.",
    }[daily.state]
    text = f"**Question of the day**\n\n{daily.question}\n\n_{status}_"
    if daily.answer:
        text += f"\n\n**Your answer**\n{daily.answer}"
    await send_markdown(update.message, text)


async def answers_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /answers command - list past answers."""
    store = _store(context)
    arg = context.args[0].lower() if context.args else "all"
    try:
        period = AnswerFilter(arg)
    except ValueError:
        await update.message.reply_text("Usage: /answers [all|month|week]")
        return

    records = filter_answers(store.get_all_answers(), period, store.now(), store.tz)
    await send_markdown(update.message, format_answers(records))


async def stats_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /stats command."""
    stats = _store(context).get_stats_snapshot()
    await send_markdown(update.message, format_stats(stats))


async def day_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /day command - show a stored day."""
    store = _store(context)
    try:
        target = date.fromisoformat(context.args[0]) if context.args else store.today()
    except ValueError:
        await update.message.reply_text("Usage: /day YYYY-MM-DD")
        return

    detail = day_detail(store, target)
    if detail.is_empty:
        await update.message.reply_text(f"Nothing recorded for {target.strftime('%A, %b %d')}.")
        return

    parts = [f"**{target.strftime('%A, %b %d %Y')}**"]
    if detail.question:
        parts.append(f"_{detail.question}_")
    if detail.answer:
        parts.append(detail.answer)
    if detail.todos:
        parts.append("**Todos**\n" + format_todos(detail.todos))
    await send_markdown(update.message, "\n\n".join(parts))


async def remind_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /remind command - toggle or move the daily reminder."""
    store = _store(context)
    arg = context.args[0].lower() if context.args else ""

    allowed = context.bot_data["config"].telegram_allowed_users
    if arg == "on":
        store.set_push_notification_enabled(True)
        if not allowed:
            store.set_reminder_chat_id(update.effective_chat.id)
    elif arg == "off":
        store.set_push_notification_enabled(False)
    elif ":" in arg:
        try:
            hour, minute = map(int, arg.split(":"))
            store.set_notification_time(hour, minute)
        except ValueError:
            await update.message.reply_text("Usage: /remind on|off|HH:MM")
            return
    elif arg:
        await update.message.reply_text("Usage: /remind on|off|HH:MM")
        return

    scheduled = sync_daily_reminder(
        context.bot_data["scheduler"],
        context.bot,
        reminder_recipients(allowed, store),
        store,
    )
    hour, minute = store.get_notification_time()
    state = "on" if scheduled else "off"
    await update.message.reply_text(f"Daily reminder is {state} ({hour:02d}:{minute:02d}).")


# ============== Todos ==============


def _todo_keyboard(day: date, count: int) -> InlineKeyboardMarkup | None:
    if not count:
        return None
    key = day.isoformat()
    rows = [
        [
            InlineKeyboardButton(f"✓ {i + 1}", callback_data=f"todo_toggle:{key}:{i}"),
            InlineKeyboardButton(f"✗ {i + 1}", callback_data=f"todo_remove:{key}:{i}"),
        ]
        for i in range(count)
    ]
    return InlineKeyboardMarkup(rows)


def _is_authorized(update: Update, context: ContextTypes.DEFAULT_TYPE) -> bool:
    allowed = context.bot_data["config"].telegram_allowed_users
    if not allowed:
        return True
    user = update.effective_user
    return user is not None and user.id in allowed


async def todo_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /todo command - list today's todos, or add one."""
    store = _store(context)
    today = store.today()

    text = " ".join(context.args or []).strip()
    if text:
        todos = add_todo(store, text, today)
        header = f"Added: {text}"
    else:
        todos = store.get_todo_list(today)
        header = f"Todos for {today.strftime('%A, %b %d')}"

    await update.message.reply_text(
        f"{header}\n\n{format_todos(todos)}",
        reply_markup=_todo_keyboard(today, len(todos)),
    )


async def todo_callback_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle todo toggle/remove buttons for the day the list was shown."""
    query = update.callback_query
    if not _is_authorized(update, context):
        user = update.effective_user
        logger.warning(f"Unauthorized todo button press from user {user.id if user else None}")
        await query.answer("Unauthorized.")
        return

    store = _store(context)
    action, day_part, raw_index = parse_todo_callback(query.data)

    try:
        day = date.fromisoformat(day_part)
        index = int(raw_index)
    except ValueError:
        await query.answer("That button is no longer valid.")
        return

    try:
        if action == "todo_toggle":
            toggle_todo(store, index, day)
        elif action == "todo_remove":
            remove_todo(store, index, day)
        await query.answer()
    except (ValueError, IndexError):
        await query.answer("That todo no longer exists.")

    todos = store.get_todo_list(day)
    await query.edit_message_text(
        f"Todos for {day.strftime('%A, %b %d')}\n\n{format_todos(todos)}",
        reply_markup=_todo_keyboard(day, len(todos)),
    )


def parse_todo_callback(data: str) -> tuple[str, str, str]:
    """Split "todo_<action>:<day>:<index>" into its parts."""
    action, _, rest = data.partition(":")
    day_part, _, raw_index = rest.partition(":")
    return action, day_part, raw_index


# ============== Answer Conversation ==============


async def answer_start_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Start the answer conversation."""
    store = _store(context)
    provider = context.bot_data["prompts"]

    try:
        daily = await asyncio.to_thread(ensure_daily_question, store, provider)
    except RuntimeError as e:
        logger.error(f"Question generation failed: {e}")
        await update.message.reply_text("Question generation failed. Please try again.")
        return ConversationHandler.END

    if daily.state is QuestionState.MISSING:
        await update.message.reply_text("Today's question could not be loaded. Try /question.")
        return ConversationHandler.END

    # Inline answer: /answer some text
    if context.args:
        return await _save_answer(update, context, " ".join(context.args))

    context.user_data["question"] = daily.question

    if daily.state is QuestionState.ANSWERED:
        keyboard = [
            [
                InlineKeyboardButton("Yes, edit", callback_data="answer_edit"),
                InlineKeyboardButton("No, keep it", callback_data="answer_cancel"),
            ]
        ]
        await update.message.reply_text(
            f"You already answered today:\n\n{daily.answer}\n\nEdit your answer?",
            reply_markup=InlineKeyboardMarkup(keyboard),
        )
        return AnswerStates.CONFIRM_EDIT

    await send_markdown(update.message, f"**{daily.question}**\n\n_Type your answer._")
    return AnswerStates.TEXT


async def answer_confirm_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle edit confirmation."""
    query = update.callback_query
    await query.answer()

    if query.data == "answer_cancel":
        await query.edit_message_text("Kept your answer.")
        context.user_data.pop("question", None)
        return ConversationHandler.END

    if query.data == "answer_edit":
        await query.edit_message_text(f"{context.user_data.get('question', '')}\n\nType your new answer.")
        return AnswerStates.TEXT

    return AnswerStates.CONFIRM_EDIT


async def answer_text_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle the answer text and save it."""
    return await _save_answer(update, context, update.message.text)


async def _save_answer(update: Update, context: ContextTypes.DEFAULT_TYPE, text: str):
    try:
        edited = submit_answer(_store(context), text)
    except ValueError:
        await update.message.reply_text("Please type an answer.")
        return AnswerStates.TEXT

    context.user_data.pop("question", None)
    await update.message.reply_text("Answer updated." if edited else "Answer saved.")
    return ConversationHandler.END


async def answer_cancel_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Cancel the answer conversation."""
    context.user_data.pop("question", None)
    await update.message.reply_text("Answer cancelled.")
    return ConversationHandler.END


# ============== Clear Conversation ==============


async def clear_start_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Ask before erasing everything."""
    keyboard = [
        [
            InlineKeyboardButton("Yes, erase everything", callback_data="clear_yes"),
            InlineKeyboardButton("No", callback_data="clear_no"),
        ]
    ]
    await update.message.reply_text(
        "This deletes every question, answer, todo and setting. Continue?",
        reply_markup=InlineKeyboardMarkup(keyboard),
    )
    return ClearStates.CONFIRM


async def clear_confirm_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle clear confirmation."""
    query = update.callback_query
    await query.answer()

    if query.data == "clear_yes":
        store = _store(context)
        store.clear_all_data()
        sync_daily_reminder(context.bot_data["scheduler"], context.bot, [], store)
        logger.info("All data cleared from Telegram")
        await query.edit_message_text("All data erased.")
    else:
        await query.edit_message_text("Nothing was deleted.")
    return ConversationHandler.END


async def clear_cancel_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    await update.message.reply_text("Nothing was deleted.")
    return ConversationHandler.END
