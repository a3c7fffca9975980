import asyncio
import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode

from bot import TelegramPanel, router
from config import settings
from panel import AppContext

# ensure logs are recorded both to stdout and to a rotating file
def configure_logging() -> None:
    log_dir = Path(os.getenv("LOG_DIR", "logs"))
    if not log_dir.is_absolute():
        log_dir = Path.cwd() / log_dir
    log_dir.mkdir(parents=True, exist_ok=True)

    log_file = log_dir / "panel.log"

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        handlers=[
            logging.StreamHandler(),
            RotatingFileHandler(
                log_file,
                maxBytes=5 * 1024 * 1024,
                backupCount=3,
                encoding="utf-8",
            ),
        ],
        force=True,
    )
    logging.getLogger("apscheduler").setLevel(logging.WARNING)


logger = logging.getLogger("reloader_panel")


async def on_startup(panel: AppContext, screen: TelegramPanel) -> None:
    await panel.start()
    if not screen.is_open:
        # nobody is looking at the panel until an admin opens it
        panel.hide()
    logger.info("Panel ready for %s (auto-refresh every %ss)", settings.API_URL, settings.AUTO_REFRESH_SECONDS)


async def on_shutdown(panel: AppContext) -> None:
    await panel.close()


async def main() -> None:
    settings.validate()

    bot = Bot(
        token=settings.BOT_TOKEN,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML),
    )
    screen = TelegramPanel(bot, confirm_timeout=settings.CONFIRM_TIMEOUT_SECONDS)
    panel = AppContext.from_settings(settings, screen)
    screen.attach(panel)

    dispatcher = Dispatcher(panel=panel, screen=screen)
    dispatcher.include_router(router)
    dispatcher.startup.register(on_startup)
    dispatcher.shutdown.register(on_shutdown)

    await dispatcher.start_polling(bot)


if __name__ == "__main__":
    configure_logging()
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Bot stopped by user")
    except Exception:
        logger.exception("Fatal error")
