"""
Service layer enums
These mirror the string values stored on the models so services and
routes can validate input without importing database models
"""

from enum import Enum


class ChargeCategory(str, Enum):
    """Direction of money for a charge"""
    IN = 'In'
    OUT = 'Out'


class ChargeType(str, Enum):
    RESIDENT = 'Resident'
    SYNDICATE = 'Syndicate'
    MAINTENANCE = 'Maintenance'


class ChargePeriod(str, Enum):
    MONTHLY = 'Monthly'
    QUARTERLY = 'Quarterly'
    YEARLY = 'Yearly'
    ONE_TIME = 'One-time'


class PaymentStatus(str, Enum):
    PAID = 'paid'
    UNPAID = 'unpaid'


class ImportStatus(str, Enum):
    """Lifecycle of a resident import record"""
    PROCESSING = 'processing'
    COMPLETED = 'completed'
    FAILED = 'failed'


class ImportErrorCategory(str, Enum):
    """Buckets the import error list is grouped into for operators"""
    MISSING_APARTMENTS = 'missing_apartments'
    MISSING_BLOCKS = 'missing_blocks'
    LOCATION_CONFLICTS = 'location_conflicts'
    BATCH_CONFLICTS = 'batch_conflicts'
    OTHER = 'other'
