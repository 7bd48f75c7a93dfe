import asyncio
import logging
from typing import Optional

import config
from init import Session
from mlm_system.services.config_service import ConfigService
from mlm_system.services.performance_bonus_service import PerformanceBonusEvaluator
from mlm_system.services.rebate_processor import RebateProcessor, ProcessingResult
from mlm_system.utils.time_machine import timeMachine

logger = logging.getLogger(__name__)


class PayoutRunner:
    def __init__(self, sessionFactory=None, check_interval: int = None, batch_size: Optional[int] = None):
        self.sessionFactory = sessionFactory or Session
        self.check_interval = check_interval or config.PAYOUT_CHECK_INTERVAL
        self.batch_size = batch_size or config.PAYOUT_BATCH_SIZE
        self._running = False
        self._lastBonusMonth = None

    async def process_pending_rebates(self) -> ProcessingResult:
        """
        Выплата накопившихся pending ребейтов, не больше batch_size за проход
        """
        with self.sessionFactory() as session:
            return await RebateProcessor(session).processPending(self.batch_size)

    async def evaluate_monthly_bonuses(self):
        """
        В день cutoff считает performance bonus за месяц (один раз за месяц)
        """
        if self._lastBonusMonth == timeMachine.currentMonth:
            return []

        with self.sessionFactory() as session:
            configuration = await ConfigService(session).getMlmConfiguration()
            if not timeMachine.isCutoffDay(configuration.monthlyCutoffDay):
                return []

            created = await PerformanceBonusEvaluator(session, configuration).evaluatePerformanceBonuses(
                timeMachine.today
            )

        self._lastBonusMonth = timeMachine.currentMonth
        return created

    async def run_once(self):
        try:
            await self.evaluate_monthly_bonuses()
        except Exception as e:
            # Ошибка бонусов не должна блокировать выплаты
            logger.error(f"Error evaluating monthly bonuses: {e}")
        return await self.process_pending_rebates()

    async def run(self):
        """
        Запускает цикл выплат
        """
        logger.info("Payout runner started")
        self._running = True

        while self._running:
            try:
                await self.run_once()
            except Exception as e:
                logger.error(f"Error in payout runner main loop: {e}")
            await asyncio.sleep(self.check_interval)

    async def stop(self):
        """
        Останавливает цикл выплат
        """
        self._running = False
        logger.info("Payout runner stopped")
