"""
ResidentService - resident CRUD, occupancy rules and CSV export
"""

import csv
import io
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from logging_config import get_logger
from repositories.apartment_repository import ApartmentRepository
from repositories.base_repository import PaginationParams
from repositories.block_repository import BlockRepository
from repositories.resident_repository import ResidentRepository
from services.common.result import PagedResult, Result
from utils.datetime_utils import current_year, utc_today
from utils.move_in_period import month_label, parse_month

logger = get_logger(__name__)

EXPORT_HEADERS = ['Name', 'Phone', 'Block', 'Apartment', 'Move-in Month', 'Move-in Year']

EDITABLE_FIELDS = ('full_name', 'phone_number', 'block_number', 'apartment_number',
                   'move_in_month', 'move_in_year')


class ResidentService:
    """Service for managing residents"""

    def __init__(self,
                 resident_repository: Optional[ResidentRepository] = None,
                 block_repository: Optional[BlockRepository] = None,
                 apartment_repository: Optional[ApartmentRepository] = None):
        if not resident_repository or not block_repository or not apartment_repository:
            raise ValueError("Resident, block and apartment repositories must be provided via dependency injection")
        self.resident_repository = resident_repository
        self.block_repository = block_repository
        self.apartment_repository = apartment_repository

    # Queries

    def list_residents(self, page: int = 1, per_page: int = 50,
                       block_number: Optional[str] = None,
                       search: Optional[str] = None) -> PagedResult[List[Dict[str, Any]]]:
        """
        One page of residents ordered by block and apartment.

        Args:
            page: 1-based page number
            per_page: Page size
            block_number: Only residents of this block
            search: Substring of name, phone or apartment
        """
        page = max(1, page)
        per_page = max(1, min(per_page, 500))
        result = self.resident_repository.get_filtered_paginated(
            PaginationParams(page=page, per_page=per_page),
            block_number=block_number,
            search=search
        )
        return PagedResult.paginated(
            data=[resident.to_dict() for resident in result.items],
            total=result.total,
            page=result.page,
            per_page=result.per_page
        )

    def get_all_residents(self) -> List[Any]:
        return self.resident_repository.list_ordered()

    def get_resident(self, resident_id: int) -> Result[Any]:
        resident = self.resident_repository.get_by_id(resident_id)
        if not resident:
            return Result.failure(f"Resident {resident_id} not found", code="NOT_FOUND")
        return Result.success(resident)

    def find_by_location(self, block_number: str, apartment_number: str,
                         exclude_id: Optional[int] = None):
        return self.resident_repository.find_by_location(block_number, apartment_number, exclude_id)

    # Commands

    def add_resident(self, data: Dict[str, Any]) -> Result[Any]:
        """
        Create a resident. The name is stored upper-cased.

        Required: full_name, block_number, apartment_number, move_in_month,
        move_in_year. The block and apartment must exist and the unit must be
        free.

        Returns:
            Result with the Resident; LOCATION_OCCUPIED failures carry the
            occupant name in metadata['occupant']
        """
        payload = self._clean(data)
        missing = [field for field in ('full_name', 'block_number', 'apartment_number',
                                       'move_in_month', 'move_in_year')
                   if not payload.get(field)]
        if missing:
            return Result.failure(f"Missing required fields: {', '.join(missing)}",
                                  code="VALIDATION_ERROR")

        payload['full_name'] = payload['full_name'].upper()
        payload['move_in_month'] = parse_month(payload['move_in_month'])

        check = self._check_location(payload['block_number'], payload['apartment_number'])
        if check.is_failure:
            return check

        try:
            resident = self.resident_repository.create(**payload)
            self.resident_repository.commit()
        except IntegrityError:
            return self._occupied_failure(payload['block_number'], payload['apartment_number'])
        except SQLAlchemyError as e:
            return Result.failure(f"Failed to add resident: {e}", code="REPOSITORY_ERROR")

        logger.info("Resident added", resident_id=resident.id,
                    block_number=resident.block_number, apartment_number=resident.apartment_number)
        return Result.success(resident)

    def update_resident(self, resident_id: int, data: Dict[str, Any]) -> Result[Any]:
        """
        Update a resident. The name is kept as given; a move to another unit
        must target a free, existing apartment.
        """
        resident = self.resident_repository.get_by_id(resident_id)
        if not resident:
            return Result.failure(f"Resident {resident_id} not found", code="NOT_FOUND")

        updates = {key: value for key, value in self._clean(data).items() if key in data}
        for field in ('full_name', 'block_number', 'apartment_number'):
            if field in updates and not updates[field]:
                return Result.failure(f"{field} cannot be empty", code="VALIDATION_ERROR")
        if updates.get('move_in_month'):
            updates['move_in_month'] = parse_month(updates['move_in_month'])

        block_number = updates.get('block_number', resident.block_number)
        apartment_number = updates.get('apartment_number', resident.apartment_number)
        if (block_number, apartment_number) != (resident.block_number, resident.apartment_number):
            check = self._check_location(block_number, apartment_number, exclude_id=resident.id)
            if check.is_failure:
                return check

        try:
            self.resident_repository.update(resident, **updates)
            self.resident_repository.commit()
        except IntegrityError:
            return self._occupied_failure(block_number, apartment_number)
        except SQLAlchemyError as e:
            return Result.failure(f"Failed to update resident: {e}", code="REPOSITORY_ERROR")

        return Result.success(resident)

    def delete_resident(self, resident_id: int) -> Result[bool]:
        resident = self.resident_repository.get_by_id(resident_id)
        if not resident:
            return Result.failure(f"Resident {resident_id} not found", code="NOT_FOUND")
        try:
            self.resident_repository.delete(resident)
            self.resident_repository.commit()
        except SQLAlchemyError as e:
            return Result.failure(f"Failed to delete resident: {e}", code="REPOSITORY_ERROR")
        return Result.success(True)

    def delete_all_residents(self) -> Result[int]:
        try:
            count = self.resident_repository.delete_all()
            self.resident_repository.commit()
        except SQLAlchemyError as e:
            return Result.failure(f"Failed to delete residents: {e}", code="REPOSITORY_ERROR")
        logger.warning("All residents deleted", count=count)
        return Result.success(count)

    # Export

    def export_csv(self) -> Result[Tuple[str, str]]:
        """
        Serialize every resident to CSV.

        Returns:
            Result with (filename, csv_text); filename is residents_<ISO date>.csv
        """
        residents = self.resident_repository.list_ordered()
        if not residents:
            return Result.failure("No residents to export", code="NOT_FOUND")

        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator='\n')
        buffer.write(','.join(EXPORT_HEADERS) + '\n')
        for resident in residents:
            writer.writerow([
                resident.full_name,
                resident.phone_number or '',
                resident.block_number,
                resident.apartment_number,
                month_label(resident.move_in_month),
                resident.move_in_year or '',
            ])

        filename = f"residents_{utc_today().isoformat()}.csv"
        return Result.success((filename, buffer.getvalue()))

    # Helpers

    @staticmethod
    def _clean(data: Dict[str, Any]) -> Dict[str, Any]:
        cleaned = {}
        for field in EDITABLE_FIELDS:
            value = data.get(field)
            cleaned[field] = str(value).strip() if value is not None else ''
        if not cleaned['move_in_year'] and 'move_in_year' not in data:
            cleaned['move_in_year'] = current_year()
        cleaned['phone_number'] = cleaned['phone_number'] or None
        return cleaned

    def _check_location(self, block_number: str, apartment_number: str,
                        exclude_id: Optional[int] = None) -> Result[None]:
        if not self.block_repository.find_by_name(block_number):
            return Result.failure(f'Block "{block_number}" does not exist', code="NOT_FOUND")
        if not self.apartment_repository.exists_in_block_named(block_number, apartment_number):
            return Result.failure(f"Apartment {apartment_number} does not exist in Block {block_number}",
                                  code="NOT_FOUND")
        occupant = self.resident_repository.find_by_location(block_number, apartment_number, exclude_id)
        if occupant:
            return Result.failure(
                f"Block {block_number}, Apartment {apartment_number} is already occupied by {occupant.full_name}",
                code="LOCATION_OCCUPIED",
                metadata={'occupant': occupant.full_name}
            )
        return Result.success(None)

    def _occupied_failure(self, block_number: str, apartment_number: str) -> Result[None]:
        occupant = self.resident_repository.find_by_location(block_number, apartment_number)
        name = occupant.full_name if occupant else 'another resident'
        return Result.failure(
            f"Block {block_number}, Apartment {apartment_number} is already occupied by {name}",
            code="LOCATION_OCCUPIED",
            metadata={'occupant': name}
        )
