"""
PaymentRepository - Data access layer for Payment entities
"""

from typing import List, Optional
from sqlalchemy import desc, func
from repositories.base_repository import BaseRepository
from syndic_database import Payment, Resident


class PaymentRepository(BaseRepository[Payment]):
    """Repository for Payment data access"""

    def __init__(self, session):
        """Initialize repository with database session"""
        super().__init__(session, Payment)

    def find_filtered(self, block_number: Optional[str] = None,
                      year: Optional[str] = None,
                      month: Optional[str] = None,
                      status: Optional[str] = None) -> List[Payment]:
        """
        List payments, newest first, filtered by the resident's block and the
        period the payment is for.

        Args:
            block_number: Resident block name
            year: payment_for_year
            month: payment_for_month ("01".."12")
            status: paid / unpaid

        Returns:
            List of Payment objects
        """
        query = self.session.query(Payment).join(Resident, Payment.resident_id == Resident.id)
        if block_number:
            query = query.filter(Resident.block_number == block_number)
        if year:
            query = query.filter(Payment.payment_for_year == year)
        if month:
            query = query.filter(Payment.payment_for_month == month)
        if status:
            query = query.filter(Payment.status == status)
        return query.order_by(desc(Payment.payment_date), desc(Payment.id)).all()

    def get_period_totals(self, month: str, year: str) -> List[tuple]:
        """
        Payment counts and amounts for one period, grouped by the resident's
        block and the payment status.

        Returns:
            List of (block_number, status, count, total_amount) tuples
        """
        return self.session.query(Resident.block_number,
                                  Payment.status,
                                  func.count(Payment.id),
                                  func.sum(Payment.amount))\
            .join(Resident, Payment.resident_id == Resident.id)\
            .filter(Payment.payment_for_month == month,
                    Payment.payment_for_year == year)\
            .group_by(Resident.block_number, Payment.status)\
            .all()
