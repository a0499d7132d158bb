"""
ApartmentRepository - Data access layer for Apartment entities
"""

from typing import List, Optional, Set
from sqlalchemy.exc import SQLAlchemyError
from repositories.base_repository import BaseRepository
from syndic_database import Apartment, Block
import logging

logger = logging.getLogger(__name__)


class ApartmentRepository(BaseRepository[Apartment]):
    """Repository for Apartment data access"""

    def __init__(self, session):
        """Initialize repository with database session"""
        super().__init__(session, Apartment)

    def find_by_block(self, block_id: int) -> List[Apartment]:
        """
        List apartments of one block ordered by number.

        Args:
            block_id: Owning block ID

        Returns:
            List of Apartment objects
        """
        return self.session.query(Apartment)\
            .filter(Apartment.block_id == block_id)\
            .order_by(Apartment.number)\
            .all()

    def find_in_block(self, block_id: int, number: str) -> Optional[Apartment]:
        return self.session.query(Apartment)\
            .filter(Apartment.block_id == block_id, Apartment.number == number)\
            .first()

    def exists_in_block_named(self, block_name: str, number: str) -> bool:
        """
        Check whether an apartment number exists inside the block with the given name.

        Args:
            block_name: Block name as referenced by residents
            number: Apartment number

        Returns:
            True if the apartment exists
        """
        try:
            return self.session.query(Apartment.id)\
                .join(Block, Apartment.block_id == Block.id)\
                .filter(Block.name == block_name, Apartment.number == number)\
                .first() is not None
        except SQLAlchemyError as e:
            logger.error(f"Error checking apartment {number} in block {block_name}: {e}")
            raise

    def get_numbers_for_block(self, block_id: int) -> Set[str]:
        rows = self.session.query(Apartment.number)\
            .filter(Apartment.block_id == block_id)\
            .all()
        return {row[0] for row in rows}
