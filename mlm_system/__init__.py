# mlm_system/__init__.py
"""
MLM System - multi-level rebate engine.
"""

# Services
from mlm_system.services.sponsor_tree import SponsorTree
from mlm_system.services.commission_config_resolver import CommissionConfigResolver, NOT_CONFIGURED
from mlm_system.services.rebate_engine import RebateEngine
from mlm_system.services.rebate_processor import RebateProcessor, ProcessingResult
from mlm_system.services.performance_bonus_service import PerformanceBonusEvaluator
from mlm_system.services.config_service import ConfigService
from mlm_system.services.volume_service import VolumeService
from mlm_system.services.purchase_service import PurchaseService
from mlm_system.services.referral_service import ReferralRewardService
from mlm_system.services.wallet_ledger import WalletLedger, DatabaseWalletLedger, CreditResult

# Models and configuration
from mlm_system.config.ranks import Rank
from mlm_system.config.mlm_config import MlmConfiguration, StructureMode, PvCalculation
from mlm_system.config.rewards import Percentage, Fixed, computeAmount

# Utilities
from mlm_system.utils.time_machine import timeMachine

# Events
from mlm_system.events.event_bus import eventBus, MLMEvents
from mlm_system.events.setup import setupMlmEventHandlers

__all__ = [
    # Services
    'SponsorTree',
    'CommissionConfigResolver',
    'NOT_CONFIGURED',
    'RebateEngine',
    'RebateProcessor',
    'ProcessingResult',
    'PerformanceBonusEvaluator',
    'ConfigService',
    'VolumeService',
    'PurchaseService',
    'ReferralRewardService',
    'WalletLedger',
    'DatabaseWalletLedger',
    'CreditResult',

    # Config
    'Rank',
    'MlmConfiguration',
    'StructureMode',
    'PvCalculation',
    'Percentage',
    'Fixed',
    'computeAmount',

    # Utils
    'timeMachine',

    # Events
    'eventBus',
    'MLMEvents',
    'setupMlmEventHandlers',
]
