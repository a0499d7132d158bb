"""
Dashboard Service
Property totals and the payment collection figures of one month
"""

from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError

from logging_config import get_logger
from services.common.result import Result
from services.enums import PaymentStatus
from utils.datetime_utils import current_month_code, current_year
from utils.move_in_period import month_label, parse_month

logger = get_logger(__name__)


class DashboardService:
    """Service for dashboard statistics using Repository Pattern"""

    def __init__(self, block_repository=None, apartment_repository=None,
                 resident_repository=None, payment_repository=None):
        if not all((block_repository, apartment_repository, resident_repository, payment_repository)):
            raise ValueError("Dashboard repositories must be provided via dependency injection")
        self.block_repository = block_repository
        self.apartment_repository = apartment_repository
        self.resident_repository = resident_repository
        self.payment_repository = payment_repository

    def get_dashboard_stats(self, month: Optional[str] = None,
                            year: Optional[str] = None) -> Result[Dict[str, Any]]:
        """
        Get all dashboard statistics for one payment period.

        Args:
            month: Period month in any form parse_month accepts (default: current month)
            year: Period year (default: current year)

        Returns:
            Result with counts, pending payments, collection rate (rounded
            percent of paid payments), paid revenue and per-block paid and
            pending counts
        """
        month = parse_month(month) if month else current_month_code()
        year = year or current_year()

        try:
            blocks = self.block_repository.get_all_with_apartment_counts()
            total_apartments = self.apartment_repository.count()
            total_residents = self.resident_repository.count()
            period_totals = self.payment_repository.get_period_totals(month, year)
        except SQLAlchemyError as e:
            logger.error("Failed to load dashboard data", month=month, year=year, error=str(e))
            return Result.failure(f"Failed to load dashboard data: {e}", code="REPOSITORY_ERROR")

        paid_count = 0
        pending_count = 0
        revenue = Decimal('0')
        by_block: Dict[str, Dict[str, int]] = {}

        for block_number, status, count, amount in period_totals:
            counts = by_block.setdefault(block_number, {'paid': 0, 'pending': 0})
            if status == PaymentStatus.PAID.value:
                paid_count += count
                counts['paid'] += count
                revenue += Decimal(str(amount or 0))
            elif status == PaymentStatus.UNPAID.value:
                pending_count += count
                counts['pending'] += count

        total_payments = paid_count + pending_count
        # Half-up rounding of the paid share
        collection_rate = int(paid_count * 100 / total_payments + 0.5) if total_payments else 0

        return Result.success({
            'period': {'month': month, 'year': year, 'label': f"{month_label(month)} {year}"},
            'total_blocks': len(blocks),
            'total_apartments': total_apartments,
            'total_residents': total_residents,
            'pending_payments': pending_count,
            'collection_rate': collection_rate,
            'monthly_revenue': float(revenue),
            'payments_by_block': [
                {
                    'block_name': block.name,
                    'total_apartments': apartment_count,
                    'paid_count': by_block.get(block.name, {}).get('paid', 0),
                    'pending_count': by_block.get(block.name, {}).get('pending', 0),
                }
                for block, apartment_count in blocks
            ],
        })
