# mlm_system/operations.py
"""
Entry points of the rebate engine.

Every operation opens its own session from `sessionFactory` (the
application's `init.Session` by default) and closes it when done.
"""
from contextlib import contextmanager
from datetime import date
from typing import List, Optional
import logging

from models import Rebate
from mlm_system.config.mlm_config import MlmConfiguration
from mlm_system.services.config_service import ConfigService
from mlm_system.services.performance_bonus_service import PerformanceBonusEvaluator
from mlm_system.services.rebate_engine import RebateEngine
from mlm_system.services.rebate_processor import RebateProcessor, ProcessingResult
from mlm_system.services.wallet_ledger import WalletLedger

logger = logging.getLogger(__name__)


def _defaultSessionFactory():
    from init import Session
    return Session


@contextmanager
def _session(sessionFactory=None):
    session = (sessionFactory or _defaultSessionFactory())()
    try:
        yield session
    finally:
        session.close()


async def computeRebates(purchaseId: int, sessionFactory=None) -> List[Rebate]:
    with _session(sessionFactory) as session:
        return await RebateEngine(session).computeRebates(purchaseId)


async def processPendingRebates(batchSize: Optional[int] = None, sessionFactory=None,
                                ledger: Optional[WalletLedger] = None) -> ProcessingResult:
    """Credit pending rebates; `ledger` defaults to the database wallet ledger."""
    with _session(sessionFactory) as session:
        return await RebateProcessor(session, ledger).processPending(batchSize)


async def evaluatePerformanceBonuses(cutoffDate: Optional[date] = None, sessionFactory=None) -> List[Rebate]:
    with _session(sessionFactory) as session:
        return await PerformanceBonusEvaluator(session).evaluatePerformanceBonuses(cutoffDate)


async def requeueFailedRebate(rebateId: int, sessionFactory=None) -> Rebate:
    with _session(sessionFactory) as session:
        return await RebateProcessor(session).requeueFailed(rebateId)


async def getMlmConfiguration(sessionFactory=None) -> MlmConfiguration:
    with _session(sessionFactory) as session:
        return await ConfigService(session).getMlmConfiguration()


async def updateMlmConfiguration(sessionFactory=None, **changes) -> MlmConfiguration:
    with _session(sessionFactory) as session:
        return await ConfigService(session).updateMlmConfiguration(**changes)
