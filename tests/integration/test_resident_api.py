"""
Integration tests for the resident endpoints, including CSV import and export
"""

import io

import pytest

from syndic_database import Apartment, Resident, ResidentImport
from tests.conftest import create_test_block, create_test_resident

HEADER = "full_name,phone_number,block_number,apartment_number,move_in_month,move_in_year"


def _upload(client, *lines, filename='residents.csv'):
    content = "\n".join((HEADER,) + lines).encode('utf-8')
    return client.post(
        '/residents/import',
        data={'file': (io.BytesIO(content), filename)},
        content_type='multipart/form-data'
    )


@pytest.fixture
def block_a(clean_db):
    return create_test_block('A', ('101', '102', '103'))


class TestResidentCrud:

    def test_add_resident(self, client, block_a):
        response = client.post('/residents', json={
            'full_name': 'Alice Smith', 'phone_number': '555', 'block_number': 'A',
            'apartment_number': '101', 'move_in_month': 'May', 'move_in_year': '2024'
        })

        assert response.status_code == 201
        resident = response.get_json()['resident']
        assert resident['full_name'] == 'ALICE SMITH'
        assert resident['move_in_month'] == '05'

    def test_add_resident_to_occupied_unit(self, client, block_a):
        create_test_resident(full_name='CAROL')

        response = client.post('/residents', json={
            'full_name': 'Dave', 'block_number': 'A', 'apartment_number': '101',
            'move_in_month': '01', 'move_in_year': '2024'
        })

        assert response.status_code == 409
        data = response.get_json()
        assert data['code'] == 'LOCATION_OCCUPIED'
        assert data['details'] == {'occupant': 'CAROL'}

    def test_add_resident_missing_fields(self, client, block_a):
        response = client.post('/residents', json={'full_name': 'Alice'})

        assert response.status_code == 400
        assert response.get_json()['code'] == 'VALIDATION_ERROR'

    def test_list_residents_paginated(self, client, block_a):
        create_test_resident(full_name='ALICE', apartment_number='101')
        create_test_resident(full_name='BOB', apartment_number='102')

        response = client.get('/residents?per_page=1&page=2')

        data = response.get_json()
        assert data['total'] == 2
        assert data['total_pages'] == 2
        assert [r['full_name'] for r in data['residents']] == ['BOB']

    def test_get_update_delete(self, client, block_a):
        resident_id = create_test_resident(full_name='ALICE').id

        assert client.get(f'/residents/{resident_id}').get_json()['full_name'] == 'ALICE'

        response = client.put(f'/residents/{resident_id}', json={'apartment_number': '102'})
        assert response.status_code == 200
        assert response.get_json()['resident']['apartment_number'] == '102'

        assert client.delete(f'/residents/{resident_id}').status_code == 200
        assert client.get(f'/residents/{resident_id}').status_code == 404

    def test_delete_all_requires_confirmation(self, client, block_a, clean_db):
        create_test_resident()

        assert client.delete('/residents').status_code == 400
        assert clean_db.query(Resident).count() == 1

        response = client.delete('/residents?confirm=true')
        assert response.get_json() == {'success': True, 'deleted': 1}
        assert clean_db.query(Resident).count() == 0


class TestResidentImport:
    """Upload a file through the API and check what landed in the database"""

    def test_import_creates_residents(self, client, block_a, clean_db):
        response = _upload(client,
                           "Alice,555,A,101,Jan,2024",
                           "Bob,556,A,102,February,2023")

        assert response.status_code == 200
        data = response.get_json()
        assert data['successful'] == 2
        assert data['failed'] == 0
        assert data['message'] == "Successfully imported 2 residents. Failed to import 0 resident(s)."
        names = [r.full_name for r in clean_db.query(Resident).order_by(Resident.apartment_number)]
        assert names == ['ALICE', 'BOB']

    def test_import_same_unit_twice_in_batch(self, client, block_a, clean_db):
        response = _upload(client, "Alice,555,A,101", "Bob,555,A,101")

        data = response.get_json()
        assert data['successful'] == 1
        assert data['failed'] == 1
        assert "Failed to add resident: Bob at Block A, Apartment 101 - Location already occupied by Alice" \
            in data['errors']
        assert clean_db.query(Resident).count() == 1

    def test_reimport_creates_nothing(self, client, block_a, clean_db):
        lines = ("Alice,555,A,101", "Bob,556,A,102")
        _upload(client, *lines)

        data = _upload(client, *lines).get_json()

        assert data['successful'] == 0
        assert data['failed'] == 2
        assert len(data['grouped_errors']['location_conflicts']) == 4
        assert clean_db.query(Resident).count() == 2

    def test_existing_occupant_named(self, client, block_a):
        create_test_resident(full_name='CAROL', apartment_number='103')

        data = _upload(client, "Dave,555,A,103,Mar,2024").get_json()

        assert data['errors'] == [
            "Location already occupied: Block A, Apartment 103 occupied by CAROL",
            "Failed to add resident: Dave at Block A, Apartment 103 - Location already occupied by CAROL",
        ]

    def test_missing_block_and_apartment(self, client, block_a):
        data = _upload(client, "Zed,1,Z,1", "Alice,555,A,999").get_json()

        assert data['successful'] == 0
        assert data['grouped_errors']['missing_blocks'] == ['Failed to add resident: Zed - Block "Z" does not exist']
        assert data['missing_apartments'] == {'A': ['999']}

    def test_rejects_wrong_file_type(self, client, block_a):
        response = _upload(client, "Alice,555,A,101", filename='residents.xlsx')

        assert response.status_code == 400
        assert response.get_json()['code'] == 'INVALID_FILE'

    def test_rejects_missing_file(self, client, block_a):
        response = client.post('/residents/import', data={}, content_type='multipart/form-data')

        assert response.status_code == 400

    def test_rejects_header_only_file(self, client, block_a):
        response = _upload(client)

        assert response.status_code == 400
        assert response.get_json()['code'] == 'EMPTY_FILE'

    def test_import_history_recorded(self, client, block_a, clean_db):
        _upload(client, "Alice,555,A,101", "Zed,1,Z,1", filename='march.csv')

        record = clean_db.query(ResidentImport).one()
        assert record.status == 'completed'
        assert record.successful_imports == 1
        assert record.failed_imports == 1

        history = client.get('/residents/import/history').get_json()['imports']
        assert history[0]['filename'] == 'march.csv'
        assert history[0]['errors'] == ['Failed to add resident: Zed - Block "Z" does not exist']

    def test_create_missing_apartments_then_reimport(self, client, block_a, clean_db):
        data = _upload(client, "Alice,555,A,999", "Bob,556,A,998").get_json()

        response = client.post('/residents/import/missing-apartments', json={'errors': data['errors']})

        assert response.status_code == 200
        result = response.get_json()['results'][0]
        assert result['created'] == 2
        assert result['suggest_reimport'] is True
        numbers = {a.number for a in clean_db.query(Apartment).filter_by(block_id=block_a.id)}
        assert {'998', '999'} <= numbers

        again = _upload(client, "Alice,555,A,999", "Bob,556,A,998").get_json()
        assert again['successful'] == 2

    def test_create_missing_apartments_by_block(self, client, block_a):
        response = client.post('/residents/import/missing-apartments',
                               json={'block': 'A', 'apartments': ['7', '101']})

        assert response.status_code == 201
        data = response.get_json()
        assert data['created'] == 1
        assert data['message'] == "Successfully created 1 apartments in Block A"

    def test_create_missing_apartments_unknown_block(self, client, block_a):
        response = client.post('/residents/import/missing-apartments',
                               json={'block': 'Z', 'apartments': ['1']})

        assert response.status_code == 404


class TestResidentExport:

    def test_export_csv(self, client, block_a):
        create_test_resident(full_name='ALICE', apartment_number='101', move_in_month='03')

        response = client.get('/residents/export')

        assert response.status_code == 200
        assert response.mimetype == 'text/csv'
        assert response.headers['Content-Disposition'].startswith('attachment; filename=residents_')
        lines = response.get_data(as_text=True).splitlines()
        assert lines[0] == 'Name,Phone,Block,Apartment,Move-in Month,Move-in Year'
        assert lines[1] == '"ALICE","555","A","101","March","2024"'

    def test_export_empty(self, client, clean_db):
        assert client.get('/residents/export').status_code == 404
