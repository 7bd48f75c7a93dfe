import logging
import asyncio

import config
from init import Session, _engine, init_tables
from mlm_system.events.setup import setupMlmEventHandlers
from payout_runner import PayoutRunner

logger = logging.getLogger(__name__)


async def setup():
    """Создает таблицы и подключает обработчики событий"""
    init_tables(_engine)
    setupMlmEventHandlers(Session)
    logger.info("Database and event handlers ready")


async def start_services():
    """Запускает фоновые сервисы"""
    services = []

    payout_runner = PayoutRunner(Session)
    services.append(asyncio.create_task(
        payout_runner.run(),
        name="payout_runner"
    ))

    return services


async def main():
    """Основная асинхронная функция"""
    try:
        await setup()
        services = await start_services()
        logger.info("Application setup completed")

        await asyncio.gather(*services)

    except Exception as e:
        logger.error(f"Critical error in main: {e}")
        raise


if __name__ == '__main__':
    try:
        logging.basicConfig(
            level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        logger.info("Сервис остановлен.")
    except Exception as e:
        logger.critical(f"Unexpected error: {e}")
        raise
