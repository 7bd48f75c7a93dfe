# models/mlm/__init__.py
"""
MLM-specific models: configuration storage and monthly cutoffs.
"""

from models.mlm.system_config import SystemConfig
from models.mlm.monthly_cutoff import MonthlyCutoff

__all__ = [
    'SystemConfig',
    'MonthlyCutoff',
]
