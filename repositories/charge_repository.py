"""
ChargeRepository - Data access layer for Charge entities
"""

from typing import List, Optional
from repositories.base_repository import BaseRepository
from syndic_database import Charge


class ChargeRepository(BaseRepository[Charge]):
    """Repository for Charge data access"""

    def __init__(self, session):
        """Initialize repository with database session"""
        super().__init__(session, Charge)

    def find_by_category(self, category: Optional[str] = None) -> List[Charge]:
        """
        List charges, optionally restricted to one category (In/Out).
        """
        query = self.session.query(Charge)
        if category:
            query = query.filter(Charge.category == category)
        return query.order_by(Charge.name).all()
