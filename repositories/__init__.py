"""
Repository layer for blocks, apartments, residents, imports and finances.
Services receive these through the service registry and never query models directly.
"""

from .base_repository import (
    BaseRepository,
    PaginationParams,
    PaginatedResult
)
from .apartment_repository import ApartmentRepository
from .block_repository import BlockRepository
from .charge_repository import ChargeRepository
from .payment_repository import PaymentRepository
from .resident_import_repository import ResidentImportRepository
from .resident_repository import ResidentRepository

__all__ = [
    'BaseRepository',
    'PaginationParams',
    'PaginatedResult',
    'ApartmentRepository',
    'BlockRepository',
    'ChargeRepository',
    'PaymentRepository',
    'ResidentImportRepository',
    'ResidentRepository',
]
