# tests/conftest.py
"""
Shared fixtures for the pytest test suite.

- app: one Flask application (in-memory SQLite, zero import delays) per module
- client: test client bound to that app
- clean_db: empties every table before a test and resets cached services
- seed helpers for blocks and residents
"""
import os

import pytest

from app import create_app
from extensions import db
from syndic_database import Apartment, Block, Resident


def create_test_block(name='A', apartment_numbers=('101', '102')):
    """
    Helper to create a block with apartments directly in the database.
    Used across multiple test files.
    """
    block = Block(name=name)
    db.session.add(block)
    db.session.flush()
    for number in apartment_numbers:
        db.session.add(Apartment(block_id=block.id, number=number, floor=1))
    db.session.commit()
    return block


def create_test_resident(**kwargs):
    """Helper to create a resident with default values."""
    defaults = {
        'full_name': 'TEST RESIDENT',
        'phone_number': '555',
        'block_number': 'A',
        'apartment_number': '101',
        'move_in_month': '01',
        'move_in_year': '2024',
    }
    defaults.update(kwargs)
    resident = Resident(**defaults)
    db.session.add(resident)
    db.session.commit()
    return resident


@pytest.fixture(scope='module')
def app():
    """
    A new Flask application instance per test module, with all tables created.
    """
    os.environ['FLASK_ENV'] = 'testing'

    app = create_app(config_name='testing')

    with app.app_context():
        db.create_all()

        yield app

        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='module')
def client(app):
    """A test client for the application's endpoints."""
    return app.test_client()


@pytest.fixture(scope='function')
def clean_db(app):
    """
    Empty every table before the test and drop cached service instances,
    so each test starts from an empty database and fresh singletons.
    """
    with app.app_context():
        db.session.rollback()
        for table in reversed(db.metadata.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        app.services.clear_all_instances()

        yield db.session

        db.session.rollback()
