# mlm_system/errors.py
"""
Exceptions raised by the MLM services.

NOT_CONFIGURED levels and rank skips are ordinary control flow and have no
exception here.
"""
from typing import List, Optional

from models.rebate import InvalidTransition


class MLMError(Exception):
    """Base class for rebate engine errors."""


class CycleDetected(MLMError):
    """The upline graph loops back on itself. Data corruption, never retried."""

    def __init__(self, memberId: int, path: List[int]):
        self.memberId = memberId
        self.path = path
        super().__init__(
            f"Cycle detected in upline chain of member {memberId}: "
            f"{' -> '.join(str(p) for p in path)}"
        )


class ConfigurationGap(MLMError):
    """Commission levels of a product are not contiguous from 1."""

    def __init__(self, productId: Optional[int], missingLevels: List[int], configuredLevels: List[int]):
        self.productId = productId
        self.missingLevels = missingLevels
        self.configuredLevels = configuredLevels
        super().__init__(
            f"Product {productId} commission levels {configuredLevels} "
            f"are missing levels {missingLevels}"
        )


class ConfigurationError(MLMError, ValueError):
    """Invalid MLM configuration value or bonus tier."""


class DuplicateRebate(MLMError):
    """A rebate with the same dedupe key already exists."""

    def __init__(self, dedupeKey: str):
        self.dedupeKey = dedupeKey
        super().__init__(f"Rebate {dedupeKey} already exists")


class LedgerCreditFailure(MLMError):
    """Wallet ledger refused or could not apply a credit."""

    def __init__(self, rebateId: int, reason: str):
        self.rebateId = rebateId
        self.reason = reason
        super().__init__(f"Credit for rebate {rebateId} failed: {reason}")


class CreditNotRecorded(MLMError):
    """Ledger accepted a credit but the rebate could not be marked processed."""

    def __init__(self, rebateId: int, transactionId=None):
        self.rebateId = rebateId
        self.transactionId = transactionId
        super().__init__(f"Rebate {rebateId} credited (transaction {transactionId}) but not recorded")


class PurchaseNotFound(MLMError):
    def __init__(self, purchaseId: int):
        self.purchaseId = purchaseId
        super().__init__(f"Purchase {purchaseId} not found")


class RebateNotFound(MLMError):
    def __init__(self, rebateId: int):
        self.rebateId = rebateId
        super().__init__(f"Rebate {rebateId} not found")


__all__ = [
    'MLMError',
    'CycleDetected',
    'ConfigurationGap',
    'ConfigurationError',
    'DuplicateRebate',
    'LedgerCreditFailure',
    'CreditNotRecorded',
    'InvalidTransition',
    'PurchaseNotFound',
    'RebateNotFound',
]
