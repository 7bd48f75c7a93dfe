# models/__init__.py
"""
Database models for the rebate engine.
Import all models here so Base.metadata sees every table.
"""

# Base and mixins
from models.base import Base, AuditMixin

# Core models
from models.member import Member
from models.product import Product, CommissionConfig
from models.purchase import Purchase
from models.wallet_transaction import WalletTransaction
from models.rebate import (
    Rebate,
    RebateStatus,
    RebateEvent,
    CommissionType,
    InvalidTransition,
    transition,
)
from models.performance_bonus_tier import PerformanceBonusTier
from models.referral_reward import ReferralReward

# MLM models
from models.mlm.system_config import SystemConfig
from models.mlm.monthly_cutoff import MonthlyCutoff

__all__ = [
    # Base
    'Base',
    'AuditMixin',

    # Core
    'Member',
    'Product',
    'CommissionConfig',
    'Purchase',
    'WalletTransaction',
    'Rebate',
    'RebateStatus',
    'RebateEvent',
    'CommissionType',
    'InvalidTransition',
    'transition',
    'PerformanceBonusTier',
    'ReferralReward',

    # MLM
    'SystemConfig',
    'MonthlyCutoff',
]
