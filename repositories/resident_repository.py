"""
ResidentRepository - Data access layer for Resident entities
Isolates all resident queries, including occupancy lookups used by imports
"""

from typing import List, Optional
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from repositories.base_repository import BaseRepository, PaginationParams, PaginatedResult
from syndic_database import Payment, Resident
import logging

logger = logging.getLogger(__name__)


class ResidentRepository(BaseRepository[Resident]):
    """Repository for Resident data access"""

    def __init__(self, session):
        """Initialize repository with database session"""
        super().__init__(session, Resident)

    def list_ordered(self) -> List[Resident]:
        """All residents ordered by block then apartment"""
        try:
            return self.session.query(Resident)\
                .order_by(Resident.block_number, Resident.apartment_number)\
                .all()
        except SQLAlchemyError as e:
            logger.error(f"Error listing residents: {e}")
            raise

    def get_filtered_paginated(self, pagination: PaginationParams,
                               block_number: Optional[str] = None,
                               search: Optional[str] = None) -> PaginatedResult[Resident]:
        """
        Page through residents, optionally restricted to one block and a search term.

        Args:
            pagination: Page and page size
            block_number: Only residents of this block
            search: Substring matched against name, phone and apartment

        Returns:
            PaginatedResult of residents ordered by location
        """
        query = self.session.query(Resident)
        if block_number:
            query = query.filter(Resident.block_number == block_number)
        if search:
            term = f'%{search}%'
            query = query.filter(or_(
                Resident.full_name.ilike(term),
                Resident.phone_number.ilike(term),
                Resident.apartment_number.ilike(term)
            ))
        query = query.order_by(Resident.block_number, Resident.apartment_number)
        return self._paginate(query, pagination)

    def find_by_location(self, block_number: str, apartment_number: str,
                         exclude_id: Optional[int] = None) -> Optional[Resident]:
        """
        Find the resident occupying a unit.

        Args:
            block_number: Block name
            apartment_number: Apartment number
            exclude_id: Ignore this resident (used when editing)

        Returns:
            Occupying Resident or None
        """
        try:
            query = self.session.query(Resident)\
                .filter(Resident.block_number == block_number,
                        Resident.apartment_number == apartment_number)
            if exclude_id is not None:
                query = query.filter(Resident.id != exclude_id)
            return query.first()
        except SQLAlchemyError as e:
            logger.error(f"Error finding resident at {block_number}/{apartment_number}: {e}")
            raise

    def rename_block(self, old_name: str, new_name: str) -> int:
        """Move every resident of block ``old_name`` to ``new_name``"""
        return self.update_many({'block_number': old_name}, {'block_number': new_name})

    def delete_all(self) -> int:
        """Delete every resident along with their payments"""
        try:
            self.session.query(Payment).delete(synchronize_session=False)
        except SQLAlchemyError as e:
            logger.error(f"Error deleting payments of all residents: {e}")
            self.session.rollback()
            raise
        return self.delete_many()
