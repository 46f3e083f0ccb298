"""DailyQ Telegram Bot."""

import logging

from telegram import Update
from telegram.ext import (
    Application,
    CommandHandler,
    CallbackQueryHandler,
    ConversationHandler,
    MessageHandler,
    filters,
)
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from .config import Config, load_config
from .reminders import reminder_recipients, sync_daily_reminder
from .telegram_handlers import (
    start_handler,
    help_handler,
    question_handler,
    answers_handler,
    stats_handler,
    day_handler,
    remind_handler,
    todo_handler,
    todo_callback_handler,
    answer_start_handler,
    answer_confirm_handler,
    answer_text_handler,
    answer_cancel_handler,
    clear_start_handler,
    clear_confirm_handler,
    clear_cancel_handler,
)
from .telegram_states import AnswerStates, ClearStates
from .workflows import get_prompt_provider, get_store

logger = logging.getLogger(__name__)


class AuthFilter(filters.BaseFilter):
    """Filter to only allow authorized users."""

    def __init__(self, allowed_users: list[int]):
        super().__init__()
        self.allowed_users = allowed_users

    def check_update(self, update: Update) -> bool:
        if not self.allowed_users:
            return True  # No restriction if no users configured
        user = update.effective_user
        if user is None:
            return False
        return user.id in self.allowed_users


def create_application(config: Config | None = None) -> Application:
    """Create and configure the Telegram bot application."""
    if config is None:
        config = load_config()

    if not config.telegram_bot_token:
        raise ValueError(
            "TELEGRAM_BOT_TOKEN not configured. "
            "Get a token from @BotFather on Telegram and add it to dailyq.conf"
        )

    app = Application.builder().token(config.telegram_bot_token).build()

    # One store and one provider per process, shared through bot_data
    app.bot_data["config"] = config
    app.bot_data["store"] = get_store(config)
    app.bot_data["prompts"] = get_prompt_provider(config)

    auth_filter = AuthFilter(config.telegram_allowed_users)

    # Simple commands (with auth filter)
    app.add_handler(CommandHandler("start", start_handler, filters=auth_filter))
    app.add_handler(CommandHandler("help", help_handler, filters=auth_filter))
    app.add_handler(CommandHandler("question", question_handler, filters=auth_filter))
    app.add_handler(CommandHandler("answers", answers_handler, filters=auth_filter))
    app.add_handler(CommandHandler("stats", stats_handler, filters=auth_filter))
    app.add_handler(CommandHandler("day", day_handler, filters=auth_filter))
    app.add_handler(CommandHandler("remind", remind_handler, filters=auth_filter))
    app.add_handler(CommandHandler("todo", todo_handler, filters=auth_filter))
    app.add_handler(CallbackQueryHandler(todo_callback_handler, pattern=r"^todo_"))

    # Answer conversation handler (multi-step)
    answer_conv = ConversationHandler(
        entry_points=[CommandHandler("answer", answer_start_handler, filters=auth_filter)],
        states={
            AnswerStates.CONFIRM_EDIT: [
                CallbackQueryHandler(answer_confirm_handler, pattern=r"^answer_"),
            ],
            AnswerStates.TEXT: [
                MessageHandler(filters.TEXT & ~filters.COMMAND, answer_text_handler),
            ],
        },
        fallbacks=[CommandHandler("cancel", answer_cancel_handler)],
        per_user=True,
    )
    app.add_handler(answer_conv)

    clear_conv = ConversationHandler(
        entry_points=[CommandHandler("clear", clear_start_handler, filters=auth_filter)],
        states={
            ClearStates.CONFIRM: [
                CallbackQueryHandler(clear_confirm_handler, pattern=r"^clear_"),
            ],
        },
        fallbacks=[CommandHandler("cancel", clear_cancel_handler)],
        per_user=True,
    )
    app.add_handler(clear_conv)

    # Handle unauthorized access attempts
    async def unauthorized_handler(update: Update, context):
        user = update.effective_user
        logger.warning(f"Unauthorized access attempt from user {user.id} ({user.username})")
        await update.message.reply_text(
            "Unauthorized. This bot is private.\n"
            "If you're the owner, add your Telegram user ID to TELEGRAM_ALLOWED_USERS in dailyq.conf"
        )

    # Add catch-all for unauthorized users if we have an allowlist
    if config.telegram_allowed_users:
        app.add_handler(
            MessageHandler(~auth_filter & filters.ALL, unauthorized_handler)
        )

    return app


def setup_scheduler(app: Application, config: Config | None = None) -> AsyncIOScheduler:
    """Set up the daily question reminder from stored settings."""
    if config is None:
        config = load_config()

    store = app.bot_data["store"]
    scheduler = AsyncIOScheduler(timezone=store.tz)
    app.bot_data["scheduler"] = scheduler

    recipients = reminder_recipients(config.telegram_allowed_users, store)
    if not config.telegram_allowed_users:
        logger.info(f"No allowed users configured, reminders go to stored chat: {recipients}")

    sync_daily_reminder(scheduler, app.bot, recipients, store)
    return scheduler


def run_bot():
    """Run the Telegram bot."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.INFO,
    )

    config = load_config()
    app = create_application(config)
    scheduler = setup_scheduler(app, config)

    async def post_init(application: Application) -> None:
        """Start scheduler after event loop is running."""
        scheduler.start()
        logger.info("Scheduler started")

    app.post_init = post_init

    # Log startup info
    if config.telegram_allowed_users:
        logger.info(f"Bot authorized for users: {config.telegram_allowed_users}")
    else:
        logger.warning("No TELEGRAM_ALLOWED_USERS configured - bot is open to anyone!")

    logger.info("Starting DailyQ Telegram bot...")

    app.run_polling(allowed_updates=Update.ALL_TYPES)
