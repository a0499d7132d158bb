"""
ChargeService - syndicate charges (income and expenses)
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from repositories.charge_repository import ChargeRepository
from services.common.result import Result
from services.enums import ChargeCategory, ChargePeriod, ChargeType


def _parse_amount(value) -> Optional[Decimal]:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        return None
    return amount if amount.is_finite() else None


class ChargeService:
    """Service for managing charges"""

    def __init__(self, charge_repository: Optional[ChargeRepository] = None):
        if not charge_repository:
            raise ValueError("ChargeRepository must be provided via dependency injection")
        self.charge_repository = charge_repository

    def list_charges(self, category: Optional[str] = None) -> List[Dict[str, Any]]:
        return [charge.to_dict() for charge in self.charge_repository.find_by_category(category)]

    def get_charge(self, charge_id: int) -> Result[Dict[str, Any]]:
        charge = self.charge_repository.get_by_id(charge_id)
        if not charge:
            return Result.failure(f"Charge {charge_id} not found", code="NOT_FOUND")
        return Result.success(charge.to_dict())

    def create_charge(self, data: Dict[str, Any]) -> Result[Dict[str, Any]]:
        """
        Create a charge. Category defaults to "In", type to "Resident" and
        period to "Monthly".
        """
        values = {
            'name': (data.get('name') or '').strip(),
            'amount': data.get('amount'),
            'category': data.get('category') or ChargeCategory.IN.value,
            'charge_type': data.get('charge_type') or ChargeType.RESIDENT.value,
            'period': data.get('period') or ChargePeriod.MONTHLY.value,
            'description': data.get('description'),
        }
        error = self._validate(values)
        if error:
            return Result.failure(error, code="VALIDATION_ERROR")
        values['amount'] = _parse_amount(values['amount'])

        try:
            charge = self.charge_repository.create(**values)
            self.charge_repository.commit()
        except SQLAlchemyError as e:
            return Result.failure(f"Failed to create charge: {e}", code="REPOSITORY_ERROR")
        return Result.success(charge.to_dict())

    def update_charge(self, charge_id: int, data: Dict[str, Any]) -> Result[Dict[str, Any]]:
        charge = self.charge_repository.get_by_id(charge_id)
        if not charge:
            return Result.failure(f"Charge {charge_id} not found", code="NOT_FOUND")

        values = charge.to_dict()
        values.update({key: data[key] for key in
                       ('name', 'amount', 'category', 'charge_type', 'period', 'description')
                       if key in data})
        values['name'] = (values.get('name') or '').strip()
        error = self._validate(values)
        if error:
            return Result.failure(error, code="VALIDATION_ERROR")
        values['amount'] = _parse_amount(values['amount'])
        values.pop('id', None)

        try:
            self.charge_repository.update(charge, **values)
            self.charge_repository.commit()
        except SQLAlchemyError as e:
            return Result.failure(f"Failed to update charge: {e}", code="REPOSITORY_ERROR")
        return Result.success(charge.to_dict())

    def delete_charge(self, charge_id: int) -> Result[bool]:
        charge = self.charge_repository.get_by_id(charge_id)
        if not charge:
            return Result.failure(f"Charge {charge_id} not found", code="NOT_FOUND")
        try:
            self.charge_repository.delete(charge)
            self.charge_repository.commit()
        except SQLAlchemyError as e:
            return Result.failure(f"Failed to delete charge: {e}", code="REPOSITORY_ERROR")
        return Result.success(True)

    @staticmethod
    def _validate(values: Dict[str, Any]) -> Optional[str]:
        if not values['name']:
            return "Charge name is required"
        amount = _parse_amount(values['amount'])
        if amount is None or amount < 0:
            return "Amount must be a non-negative number"
        if values['category'] not in {c.value for c in ChargeCategory}:
            return f"Invalid category: {values['category']}"
        if values['charge_type'] not in {t.value for t in ChargeType}:
            return f"Invalid charge type: {values['charge_type']}"
        if values['period'] not in {p.value for p in ChargePeriod}:
            return f"Invalid period: {values['period']}"
        return None
