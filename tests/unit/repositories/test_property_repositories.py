"""
Repository tests against the in-memory SQLite database
"""

from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError

from repositories.apartment_repository import ApartmentRepository
from repositories.base_repository import PaginationParams
from repositories.block_repository import BlockRepository
from repositories.payment_repository import PaymentRepository
from repositories.resident_import_repository import ResidentImportRepository
from repositories.resident_repository import ResidentRepository
from syndic_database import Payment
from tests.conftest import create_test_block, create_test_resident


class TestBlockAndApartmentRepositories:

    def test_block_counts(self, clean_db):
        create_test_block('B', ('1', '2', '3'))
        create_test_block('A', ())

        rows = BlockRepository(clean_db).get_all_with_apartment_counts()

        assert [(block.name, count) for block, count in rows] == [('A', 0), ('B', 3)]

    def test_exists_in_block_named(self, clean_db):
        create_test_block('A', ('101',))
        create_test_block('B', ('202',))
        repository = ApartmentRepository(clean_db)

        assert repository.exists_in_block_named('A', '101') is True
        assert repository.exists_in_block_named('A', '202') is False
        assert repository.exists_in_block_named('Z', '101') is False

    def test_numbers_for_block(self, clean_db):
        block = create_test_block('A', ('101', '102'))

        assert ApartmentRepository(clean_db).get_numbers_for_block(block.id) == {'101', '102'}


class TestResidentRepository:

    def test_find_by_location(self, clean_db):
        resident = create_test_resident(full_name='ALICE')
        repository = ResidentRepository(clean_db)

        assert repository.find_by_location('A', '101').id == resident.id
        assert repository.find_by_location('A', '101', exclude_id=resident.id) is None
        assert repository.find_by_location('A', '102') is None

    def test_one_resident_per_unit(self, clean_db):
        create_test_resident(full_name='ALICE')
        repository = ResidentRepository(clean_db)

        with pytest.raises(IntegrityError):
            repository.create(full_name='BOB', block_number='A', apartment_number='101')

    def test_filtered_pagination(self, clean_db):
        for number in range(1, 6):
            create_test_resident(full_name=f'RESIDENT {number}', apartment_number=str(number))
        create_test_resident(full_name='OTHER', block_number='B', apartment_number='1')
        repository = ResidentRepository(clean_db)

        page = repository.get_filtered_paginated(PaginationParams(page=2, per_page=2), block_number='A')

        assert page.total == 5
        assert [r.apartment_number for r in page.items] == ['3', '4']

    def test_search_filter(self, clean_db):
        create_test_resident(full_name='ALICE SMITH', apartment_number='101')
        create_test_resident(full_name='BOB JONES', apartment_number='102')

        page = ResidentRepository(clean_db).get_filtered_paginated(PaginationParams(), search='smith')

        assert [r.full_name for r in page.items] == ['ALICE SMITH']

    def test_rename_block(self, clean_db):
        create_test_resident(full_name='ALICE', apartment_number='101')
        create_test_resident(full_name='BOB', apartment_number='102')
        repository = ResidentRepository(clean_db)

        assert repository.rename_block('A', 'Block A') == 2
        repository.commit()

        assert {r.block_number for r in repository.list_ordered()} == {'Block A'}

    def test_delete_all_cascades_to_payments(self, clean_db):
        resident = create_test_resident()
        clean_db.add(Payment(resident_id=resident.id, amount=10, payment_date=date(2024, 1, 1),
                             payment_for_month='01', payment_for_year='2024'))
        clean_db.commit()
        repository = ResidentRepository(clean_db)

        assert repository.delete_all() == 1
        repository.commit()

        assert PaymentRepository(clean_db).count() == 0


class TestResidentImportRepository:

    def test_get_recent_newest_first(self, clean_db):
        repository = ResidentImportRepository(clean_db)
        first = repository.create(filename='a.csv', total_rows=1)
        second = repository.create(filename='b.csv', total_rows=2)
        repository.commit()

        recent = repository.get_recent(limit=1)

        assert [r.id for r in recent] == [second.id]
        assert first.id < second.id
