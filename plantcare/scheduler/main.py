"""Notification scheduler with paginated reminder jobs."""
import logging
import asyncio
from typing import Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from telegram import Bot
from plantcare.core.config import settings
from plantcare.core.log import configure_logging
from plantcare.scheduler.notifier import NotificationSuppressor, WateringNotifier
from plantcare.utils.time import get_timezone

logger = logging.getLogger(__name__)


class NotificationScheduler:
    """
    Scheduler for watering reminders.

    Runs ``notify_crons_count`` jobs; job *i* handles the page of due
    scenarios starting at ``notify_offset + notify_limit * i``. All jobs
    share one suppressor so a scenario is notified at most once a day.
    """

    def __init__(self, bot: Optional[Bot] = None, suppressor: Optional[NotificationSuppressor] = None):
        logger.info("Initializing NotificationScheduler...")
        self.bot = bot or Bot(token=settings.telegram_bot_token)
        self.suppressor = suppressor or NotificationSuppressor()
        self.scheduler = AsyncIOScheduler(timezone=get_timezone())
        self.notifiers = [
            WateringNotifier(
                self.bot,
                self.suppressor,
                limit=settings.notify_limit,
                offset=settings.notify_offset + settings.notify_limit * index
            )
            for index in range(settings.notify_crons_count)
        ]
        logger.info(f"NotificationScheduler initialized with {len(self.notifiers)} jobs")

    async def run_notifier(self, notifier: WateringNotifier):
        """Run one tick of a notifier."""
        try:
            await notifier.tick()
        except Exception as e:
            logger.error(f"Error in notification job (offset={notifier.offset}): {e}", exc_info=True)

    def start(self):
        """Register the reminder jobs and start the scheduler."""
        logger.info("="*60)
        logger.info("Starting notification scheduler...")
        logger.info(f"Timezone: {settings.timezone}, send hour: {settings.send_hour}")
        logger.info(f"Check interval: every {settings.notify_check_interval} seconds")
        logger.info("="*60)

        for index, notifier in enumerate(self.notifiers):
            self.scheduler.add_job(
                self.run_notifier,
                trigger=IntervalTrigger(seconds=settings.notify_check_interval),
                args=[notifier],
                id=f"notify_groups_{index}",
                max_instances=1,
                coalesce=True,
                replace_existing=True
            )
            logger.debug(f"Registered job notify_groups_{index} (limit={notifier.limit}, offset={notifier.offset})")

        self.scheduler.start()
        logger.info("Scheduler started successfully")

    def shutdown(self):
        if self.scheduler.running:
            logger.info("Shutting down scheduler...")
            self.scheduler.shutdown(wait=False)

    async def run(self):
        """Run scheduler indefinitely."""
        await self.bot.initialize()
        self.start()

        try:
            # Keep running
            while True:
                await asyncio.sleep(1)
        except (KeyboardInterrupt, SystemExit, asyncio.CancelledError):
            logger.info("Scheduler stopped")
        finally:
            self.shutdown()
            await self.bot.shutdown()


async def main():
    """Main entry point for scheduler."""
    configure_logging()
    scheduler = NotificationScheduler()
    await scheduler.run()


def run_scheduler():
    asyncio.run(main())


if __name__ == "__main__":
    run_scheduler()
