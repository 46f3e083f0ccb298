"""Daily question reminder scheduling."""

import logging

from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.cron import CronTrigger
from telegram import Bot

from .record_store import RecordStore

logger = logging.getLogger(__name__)

REMINDER_JOB_ID = "daily_question"
REMINDER_TEXT = "Your new question of the day is here!\n\nUse /question to see it."


def reminder_recipients(allowed_users: list[int], store: RecordStore) -> list[int]:
    """Allowed users, or the stored reminder chat when the bot is open."""
    if allowed_users:
        return list(allowed_users)
    chat_id = store.get_reminder_chat_id()
    return [chat_id] if chat_id is not None else []


async def send_daily_reminder(bot: Bot, user_ids: list[int], store: RecordStore):
    """Send the reminder unless today's question is already answered."""
    today = store.today()
    answer = store.get_answer(today)
    if answer and answer.strip():
        logger.info("Today's question already answered, skipping reminder")
        return

    logger.info("Sending daily question reminder")
    for user_id in user_ids:
        try:
            await bot.send_message(chat_id=user_id, text=REMINDER_TEXT)
        except Exception as e:
            logger.error(f"Failed to send reminder to user {user_id}: {e}")


def cancel_daily_reminder(scheduler: BaseScheduler) -> None:
    """Remove the reminder job if it is scheduled."""
    if scheduler.get_job(REMINDER_JOB_ID):
        scheduler.remove_job(REMINDER_JOB_ID)
        logger.info("Cancelled daily reminder")


def schedule_daily_reminder(
    scheduler: BaseScheduler,
    bot: Bot,
    user_ids: list[int],
    store: RecordStore,
    hour: int,
    minute: int,
) -> None:
    """(Re)schedule the reminder at hour:minute every day."""
    scheduler.add_job(
        send_daily_reminder,
        CronTrigger(hour=hour, minute=minute, timezone=store.tz),
        args=[bot, user_ids, store],
        id=REMINDER_JOB_ID,
        replace_existing=True,
    )
    logger.info(f"Scheduled daily reminder at {hour:02d}:{minute:02d}")


def sync_daily_reminder(
    scheduler: BaseScheduler, bot: Bot, user_ids: list[int], store: RecordStore
) -> bool:
    """Match the scheduled job to the stored settings. Returns True if scheduled."""
    if store.get_push_notification_enabled() and user_ids:
        hour, minute = store.get_notification_time()
        schedule_daily_reminder(scheduler, bot, user_ids, store, hour, minute)
        return True
    cancel_daily_reminder(scheduler)
    return False
