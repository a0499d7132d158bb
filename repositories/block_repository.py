"""
BlockRepository - Data access layer for Block entities
"""

from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from repositories.base_repository import BaseRepository
from syndic_database import Block, Apartment
import logging

logger = logging.getLogger(__name__)


class BlockRepository(BaseRepository[Block]):
    """Repository for Block data access"""

    def __init__(self, session):
        """Initialize repository with database session"""
        super().__init__(session, Block)

    def find_by_name(self, name: str) -> Optional[Block]:
        """
        Find a block by its exact name.

        Args:
            name: Block name as referenced by residents

        Returns:
            Block or None
        """
        try:
            return self.session.query(Block).filter(Block.name == name).first()
        except SQLAlchemyError as e:
            logger.error(f"Error finding block {name}: {e}")
            raise

    def get_all_with_apartment_counts(self) -> List[tuple]:
        """
        List blocks ordered by name with their apartment counts.

        Returns:
            List of (Block, apartment_count) tuples
        """
        return self.session.query(Block, func.count(Apartment.id))\
            .outerjoin(Apartment, Apartment.block_id == Block.id)\
            .group_by(Block.id)\
            .order_by(Block.name)\
            .all()
