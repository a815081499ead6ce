"""Telegram bot main entry point."""
import logging
import traceback
from telegram import Update
from telegram.ext import (
    Application,
    CommandHandler,
    CallbackQueryHandler,
    MessageHandler,
    ContextTypes,
    filters,
)
from plantcare.bot import texts
from plantcare.core.config import settings
from plantcare.core.database import init_db
from plantcare.core.log import configure_logging
from plantcare.bot.handlers.start import start_command, help_command, menu_command
from plantcare.bot.handlers.callbacks import button_callback
from plantcare.bot.handlers.messages import on_text, on_photo, delete_unhandled_message
from plantcare.scheduler.main import NotificationScheduler

logger = logging.getLogger(__name__)

SCHEDULER_KEY = "notification_scheduler"


async def error_handler(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle errors globally for the Telegram bot.

    Logs the error with the update context and apologizes to the user.
    """
    logger.error("Exception while handling an update:")

    # Format the traceback
    tb_list = traceback.format_exception(None, context.error, context.error.__traceback__)
    tb_string = "".join(tb_list)

    logger.error(f"Exception: {context.error}")
    logger.error(f"Traceback:\n{tb_string}")

    if update and isinstance(update, Update):
        logger.error(f"Update ID: {update.update_id}")
        if update.effective_user:
            logger.error(f"User: {update.effective_user.id} (@{update.effective_user.username})")
        if update.effective_chat:
            logger.error(f"Chat: {update.effective_chat.id}")
        if update.effective_message:
            logger.error(f"Message: {update.effective_message.text}")

        if update.effective_chat:
            try:
                await context.bot.send_message(chat_id=update.effective_chat.id, text=texts.GENERIC_ERROR)
            except Exception as e:
                logger.error(f"Failed to send error message to user: {e}")


async def post_init(application: Application) -> None:
    """Create tables and start the reminder jobs once the bot is initialized."""
    await init_db()
    scheduler = NotificationScheduler(bot=application.bot)
    scheduler.start()
    application.bot_data[SCHEDULER_KEY] = scheduler


async def post_shutdown(application: Application) -> None:
    scheduler = application.bot_data.get(SCHEDULER_KEY)
    if scheduler is not None:
        scheduler.shutdown()


def build_application() -> Application:
    """Create the application and register all handlers."""
    application = (
        Application.builder()
        .token(settings.telegram_bot_token)
        .post_init(post_init)
        .post_shutdown(post_shutdown)
        .build()
    )

    # Register error handler
    application.add_error_handler(error_handler)

    # Register command handlers
    application.add_handler(CommandHandler("start", start_command))
    application.add_handler(CommandHandler("help", help_command))
    application.add_handler(CommandHandler("menu", menu_command))

    # Register callback query handler
    application.add_handler(CallbackQueryHandler(button_callback))

    # Register message handlers; anything unexpected is removed from the chat
    application.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, on_text))
    application.add_handler(MessageHandler(filters.PHOTO, on_photo))
    application.add_handler(MessageHandler(filters.ALL, delete_unhandled_message))

    return application


def main():
    """Start the Telegram bot."""
    configure_logging()

    logger.info("="*60)
    logger.info("Starting Telegram bot...")
    logger.info(f"Log level: {settings.log_level}")
    logger.debug(f"Bot token configured: {bool(settings.telegram_bot_token)}")
    logger.info("="*60)

    application = build_application()

    logger.info("All handlers registered successfully")
    logger.info("="*60)
    logger.info("Bot started successfully - polling for updates")
    logger.info("="*60)
    application.run_polling(allowed_updates=Update.ALL_TYPES, timeout=settings.telegram_poll_timeout)


if __name__ == "__main__":
    main()
