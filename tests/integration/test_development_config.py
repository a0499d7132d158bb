"""
Behaviour of an application built from the development configuration
"""

from datetime import date

import pytest
from sqlalchemy import event, text
from sqlalchemy.engine import Engine

from app import create_app
from config import _enable_sqlite_foreign_keys
from extensions import db
from syndic_database import Payment, Resident


@pytest.fixture
def dev_app():
    app = create_app('development', {'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:'})
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


def test_sqlite_foreign_keys_enabled(dev_app):
    assert event.contains(Engine, "connect", _enable_sqlite_foreign_keys)
    assert db.session.execute(text("PRAGMA foreign_keys")).scalar() == 1


def test_delete_all_residents_removes_their_payments(dev_app):
    resident = Resident(full_name='ALICE', block_number='A', apartment_number='101')
    db.session.add(resident)
    db.session.commit()
    db.session.add(Payment(resident_id=resident.id, amount=150, payment_date=date(2024, 3, 2),
                           payment_for_month='03', payment_for_year='2024'))
    db.session.commit()

    result = dev_app.services.get('resident').delete_all_residents()

    assert result.is_success
    assert result.data == 1
    assert db.session.query(Resident).count() == 0
    assert db.session.query(Payment).count() == 0
