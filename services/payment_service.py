"""
PaymentService - resident payments and their paid/unpaid status
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from logging_config import get_logger
from repositories.payment_repository import PaymentRepository
from repositories.resident_repository import ResidentRepository
from services.common.result import Result
from services.enums import PaymentStatus
from utils.datetime_utils import utc_today
from utils.move_in_period import parse_month

logger = get_logger(__name__)

PAYMENT_FIELDS = ('resident_id', 'amount', 'payment_date', 'payment_for_month', 'payment_for_year',
                  'payment_type', 'payment_method', 'notes', 'status')


class PaymentService:
    """Service for managing payments"""

    def __init__(self,
                 payment_repository: Optional[PaymentRepository] = None,
                 resident_repository: Optional[ResidentRepository] = None):
        if not payment_repository or not resident_repository:
            raise ValueError("Payment and resident repositories must be provided via dependency injection")
        self.payment_repository = payment_repository
        self.resident_repository = resident_repository

    def list_payments(self, block_number: Optional[str] = None, year: Optional[str] = None,
                      month: Optional[str] = None, status: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Payments newest first.

        Args:
            block_number: Only residents of this block
            year: Period year the payment is for
            month: Period month ("01".."12" or a month name)
            status: paid / unpaid
        """
        if month:
            month = parse_month(month)
        payments = self.payment_repository.find_filtered(block_number, year, month, status)
        return [payment.to_dict() for payment in payments]

    def add_payment(self, data: Dict[str, Any]) -> Result[Dict[str, Any]]:
        """
        Record a payment for an existing resident. Status defaults to "paid".
        """
        values, error = self._prepare(data, require_all=True)
        if error:
            return Result.failure(error, code="VALIDATION_ERROR")

        resident = self.resident_repository.get_by_id(values['resident_id'])
        if not resident:
            return Result.failure("Selected resident does not exist", code="NOT_FOUND")

        values.setdefault('status', PaymentStatus.PAID.value)
        try:
            payment = self.payment_repository.create(**values)
            self.payment_repository.commit()
        except SQLAlchemyError as e:
            return Result.failure(f"Failed to add payment: {e}", code="REPOSITORY_ERROR")

        logger.info("Payment recorded", payment_id=payment.id, resident_id=resident.id)
        return Result.success(payment.to_dict())

    def update_payment(self, payment_id: int, data: Dict[str, Any]) -> Result[Dict[str, Any]]:
        payment = self.payment_repository.get_by_id(payment_id)
        if not payment:
            return Result.failure(f"Payment {payment_id} not found", code="NOT_FOUND")

        values, error = self._prepare(data, require_all=False)
        if error:
            return Result.failure(error, code="VALIDATION_ERROR")
        if 'resident_id' in values and not self.resident_repository.get_by_id(values['resident_id']):
            return Result.failure("Selected resident does not exist", code="NOT_FOUND")

        try:
            self.payment_repository.update(payment, **values)
            self.payment_repository.commit()
        except SQLAlchemyError as e:
            return Result.failure(f"Failed to update payment: {e}", code="REPOSITORY_ERROR")
        return Result.success(payment.to_dict())

    def toggle_payment_status(self, payment_id: int) -> Result[Dict[str, Any]]:
        """Flip a payment between paid and unpaid."""
        payment = self.payment_repository.get_by_id(payment_id)
        if not payment:
            return Result.failure(f"Payment {payment_id} not found", code="NOT_FOUND")

        new_status = PaymentStatus.UNPAID.value if payment.status == PaymentStatus.PAID.value \
            else PaymentStatus.PAID.value
        try:
            self.payment_repository.update(payment, status=new_status)
            self.payment_repository.commit()
        except SQLAlchemyError as e:
            return Result.failure(f"Failed to update payment status: {e}", code="REPOSITORY_ERROR")
        return Result.success(payment.to_dict())

    def delete_payment(self, payment_id: int) -> Result[bool]:
        payment = self.payment_repository.get_by_id(payment_id)
        if not payment:
            return Result.failure(f"Payment {payment_id} not found", code="NOT_FOUND")
        try:
            self.payment_repository.delete(payment)
            self.payment_repository.commit()
        except SQLAlchemyError as e:
            return Result.failure(f"Failed to delete payment: {e}", code="REPOSITORY_ERROR")
        return Result.success(True)

    @staticmethod
    def _prepare(data: Dict[str, Any], require_all: bool):
        values = {key: data[key] for key in PAYMENT_FIELDS if key in data}

        if require_all:
            for field in ('resident_id', 'amount'):
                if values.get(field) in (None, ''):
                    return None, f"{field} is required"
            values.setdefault('payment_date', utc_today())
            values.setdefault('payment_for_month', utc_today().strftime('%m'))
            values.setdefault('payment_for_year', str(utc_today().year))

        if 'resident_id' in values:
            try:
                values['resident_id'] = int(values['resident_id'])
            except (TypeError, ValueError):
                return None, "resident_id must be an integer"

        if 'amount' in values:
            try:
                amount = Decimal(str(values['amount']))
            except (InvalidOperation, TypeError, ValueError):
                return None, "Amount must be a number"
            if not amount.is_finite() or amount <= 0:
                return None, "Amount must be greater than zero"
            values['amount'] = amount

        if isinstance(values.get('payment_date'), str):
            try:
                values['payment_date'] = date.fromisoformat(values['payment_date'])
            except ValueError:
                return None, "payment_date must be an ISO date (YYYY-MM-DD)"

        if values.get('payment_for_month'):
            values['payment_for_month'] = parse_month(str(values['payment_for_month']))
        if 'payment_for_year' in values:
            values['payment_for_year'] = str(values['payment_for_year'])

        if 'status' in values and values['status'] not in {s.value for s in PaymentStatus}:
            return None, f"Invalid status: {values['status']}"

        return values, None
