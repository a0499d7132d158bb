"""
ResidentImportRepository - Data access layer for resident import history
"""

from typing import List
from sqlalchemy import desc
from repositories.base_repository import BaseRepository
from syndic_database import ResidentImport


class ResidentImportRepository(BaseRepository[ResidentImport]):
    """Repository for ResidentImport data access"""

    def __init__(self, session):
        """Initialize repository with database session"""
        super().__init__(session, ResidentImport)

    def get_recent(self, limit: int = 10) -> List[ResidentImport]:
        """
        Most recent import runs first.

        Args:
            limit: Maximum number of records

        Returns:
            List of ResidentImport records
        """
        return self.session.query(ResidentImport)\
            .order_by(desc(ResidentImport.started_at), desc(ResidentImport.id))\
            .limit(limit)\
            .all()
