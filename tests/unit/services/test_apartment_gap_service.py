"""
Unit tests for ApartmentGapService
"""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest

from services.apartment_gap_service import ApartmentGapService
from services.resident_import_gateway import ImportGatewayError


@pytest.fixture
def gateway():
    gateway = Mock()
    gateway.resolve_block_id = AsyncMock(return_value=3)
    gateway.create_apartments = AsyncMock(
        side_effect=lambda block_id, numbers: [SimpleNamespace(number=n) for n in numbers]
    )
    return gateway


@pytest.fixture
def service(gateway):
    return ApartmentGapService(gateway)


class TestApartmentGapService:

    def test_requires_gateway(self):
        with pytest.raises(ValueError):
            ApartmentGapService(None)

    def test_creates_missing_apartments(self, service, gateway, mocker):
        mock_import_logger = mocker.patch('services.apartment_gap_service.import_logger')

        result = service.create_missing('A', ['999', ' 1000 ', ''])

        assert result.is_success
        assert result.data['created'] == 2
        assert result.data['apartment_numbers'] == ['999', '1000']
        assert result.data['message'] == "Successfully created 2 apartments in Block A"
        assert result.data['suggest_reimport'] is True
        gateway.create_apartments.assert_awaited_once_with(3, ['999', '1000'])
        mock_import_logger.log_apartments_created.assert_called_once_with('A', ['999', '1000'])

    def test_existing_numbers_skipped_by_gateway(self, service, gateway):
        gateway.create_apartments.side_effect = None
        gateway.create_apartments.return_value = []

        result = service.create_missing('A', ['101'])

        assert result.data['created'] == 0
        assert result.data['suggest_reimport'] is False

    def test_unknown_block(self, service, gateway):
        gateway.resolve_block_id.return_value = None

        result = service.create_missing('Z', ['1'])

        assert result.is_failure
        assert result.error_code == 'NOT_FOUND'
        assert result.error == "Block Z not found"
        gateway.create_apartments.assert_not_awaited()

    def test_no_numbers(self, service, gateway):
        result = service.create_missing('A', ['  '])

        assert result.error_code == 'VALIDATION_ERROR'
        gateway.resolve_block_id.assert_not_awaited()

    def test_gateway_error_reported(self, service, gateway):
        gateway.create_apartments.side_effect = ImportGatewayError("disk full")

        result = service.create_missing('A', ['999'])

        assert result.error_code == 'REPOSITORY_ERROR'
        assert 'disk full' in result.error

    def test_rejected_while_running(self, service, gateway):
        service.guard.try_acquire()

        result = asyncio.run(service.create_missing_apartments('A', ['999']))

        assert result.error_code == 'IN_PROGRESS'
        gateway.resolve_block_id.assert_not_awaited()

    def test_guard_released_after_run(self, service):
        service.create_missing('A', ['999'])

        assert not service.guard.is_running

    def test_create_from_errors_groups_by_block(self, service, gateway):
        errors = [
            "Failed to add resident: Alice - Apartment 999 does not exist in Block A",
            "Failed to add resident: Bob - Apartment 998 does not exist in Block A",
            "Failed to add resident: Carol - Apartment 7 does not exist in Block B",
            'Failed to add resident: Zed - Block "Z" does not exist',
        ]

        results = service.create_from_errors(errors)

        assert [r.data['block_name'] for r in results] == ['A', 'B']
        assert results[0].data['apartment_numbers'] == ['999', '998']
        assert gateway.create_apartments.await_count == 2
