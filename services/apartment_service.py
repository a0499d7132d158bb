"""
ApartmentService - apartments inside blocks
"""

import math
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from logging_config import get_logger
from repositories.apartment_repository import ApartmentRepository
from repositories.block_repository import BlockRepository
from services.common.result import Result
from services.property_cache import PropertyCache

logger = get_logger(__name__)

APARTMENTS_PER_FLOOR = 4


def floor_for_apartment(number: str) -> int:
    """
    Floor heuristic: four apartments per floor, so 1-4 -> 1, 5-8 -> 2.
    Non-numeric numbers land on floor 1.
    """
    try:
        value = int(str(number).strip())
    except (TypeError, ValueError):
        return 1
    if value < 1:
        return 1
    return math.ceil(value / APARTMENTS_PER_FLOOR)


class ApartmentService:
    """Service for managing apartments"""

    def __init__(self,
                 apartment_repository: Optional[ApartmentRepository] = None,
                 block_repository: Optional[BlockRepository] = None,
                 property_cache: Optional[PropertyCache] = None):
        if not apartment_repository or not block_repository:
            raise ValueError("Apartment and block repositories must be provided via dependency injection")
        self.apartment_repository = apartment_repository
        self.block_repository = block_repository
        self.cache = property_cache or PropertyCache(default_ttl=0)

    def list_apartments(self, block_id: int) -> Result[List[Dict[str, Any]]]:
        if not self.block_repository.get_by_id(block_id):
            return Result.failure(f"Block {block_id} not found", code="NOT_FOUND")
        apartments = self.cache.get_or_set(
            f'apartments:{block_id}',
            lambda: [apartment.to_dict() for apartment in self.apartment_repository.find_by_block(block_id)]
        )
        return Result.success(apartments)

    def apartment_exists(self, block_name: str, number: str) -> bool:
        return self.apartment_repository.exists_in_block_named(block_name, number)

    def create_apartment(self, block_id: int, number: str, floor: Optional[int] = None) -> Result[Dict[str, Any]]:
        """
        Add one apartment to a block.

        Args:
            block_id: Owning block
            number: Apartment number, unique within the block
            floor: Explicit floor; derived from the number when omitted
        """
        number = (number or '').strip()
        if not number:
            return Result.failure("Apartment number is required", code="VALIDATION_ERROR")
        if not self.block_repository.get_by_id(block_id):
            return Result.failure(f"Block {block_id} not found", code="NOT_FOUND")
        if self.apartment_repository.find_in_block(block_id, number):
            return Result.failure(f"Apartment {number} already exists in this block", code="DUPLICATE")

        try:
            apartment = self.apartment_repository.create(
                block_id=block_id,
                number=number,
                floor=floor if floor is not None else floor_for_apartment(number)
            )
            self.apartment_repository.commit()
        except SQLAlchemyError as e:
            return Result.failure(f"Failed to create apartment: {e}", code="REPOSITORY_ERROR")

        self._invalidate(block_id)
        return Result.success(apartment.to_dict())

    def create_apartments(self, block_id: int, numbers: List[str]) -> Result[List[Any]]:
        """
        Bulk-create apartments in a block, skipping numbers that already exist.

        Args:
            block_id: Owning block
            numbers: Apartment numbers (duplicates ignored)

        Returns:
            Result with the list of created Apartment objects
        """
        if not self.block_repository.get_by_id(block_id):
            return Result.failure(f"Block {block_id} not found", code="NOT_FOUND")

        existing = self.apartment_repository.get_numbers_for_block(block_id)
        to_create = []
        for number in numbers:
            number = str(number).strip()
            if number and number not in existing:
                existing.add(number)
                to_create.append(number)

        if not to_create:
            return Result.success([])

        try:
            created = self.apartment_repository.create_many([
                {'block_id': block_id, 'number': number, 'floor': floor_for_apartment(number)}
                for number in to_create
            ])
            self.apartment_repository.commit()
        except SQLAlchemyError as e:
            return Result.failure(f"Failed to create apartments: {e}", code="REPOSITORY_ERROR")

        self._invalidate(block_id)
        logger.info("Apartments created", block_id=block_id, count=len(created))
        return Result.success(created)

    def delete_apartment(self, apartment_id: int) -> Result[bool]:
        apartment = self.apartment_repository.get_by_id(apartment_id)
        if not apartment:
            return Result.failure(f"Apartment {apartment_id} not found", code="NOT_FOUND")
        block_id = apartment.block_id
        try:
            self.apartment_repository.delete(apartment)
            self.apartment_repository.commit()
        except SQLAlchemyError as e:
            return Result.failure(f"Failed to delete apartment: {e}", code="REPOSITORY_ERROR")
        self._invalidate(block_id)
        return Result.success(True)

    def _invalidate(self, block_id: int) -> None:
        self.cache.invalidate(f'apartments:{block_id}')
        self.cache.invalidate('blocks:all')
