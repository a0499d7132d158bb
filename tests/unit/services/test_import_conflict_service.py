"""
Unit tests for ImportConflictService: intra-batch and database conflicts
"""

import asyncio
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from services.import_conflict_service import (
    UNKNOWN_OCCUPANT,
    UNREACHABLE_OCCUPANT,
    ImportConflictService,
    detect_batch_conflicts,
)
from services.occupancy_index import OccupancyIndex


class LookupGateway:
    """Gateway double answering occupant lookups from a dict"""

    def __init__(self, occupants, failures=0, slow_keys=()):
        self.occupants = occupants
        self.failures = failures
        self.slow_keys = set(slow_keys)
        self.calls = []

    async def find_resident_by_unit(self, block_name, unit_number):
        self.calls.append((block_name, unit_number))
        if (block_name, unit_number) in self.slow_keys:
            await asyncio.sleep(30)
        if self.failures:
            self.failures -= 1
            raise ConnectionError("database unreachable")
        name = self.occupants.get((block_name, unit_number))
        return {'id': 1, 'full_name': name} if name else None


async def no_sleep(delay):
    return None


def _index(*entries):
    return OccupancyIndex.from_residents([
        SimpleNamespace(id=i, full_name=name, block_number=block, apartment_number=apt)
        for i, (name, block, apt) in enumerate(entries, start=1)
    ])


def _run(service, rows, occupancy):
    return asyncio.run(service.detect_conflicts(rows, occupancy))


class TestDetectBatchConflicts:

    def test_two_names_on_one_unit(self):
        rows = [['Alice', '555', 'A', '101'], ['Bob', '555', 'A', '101']]

        assert detect_batch_conflicts(rows) == [
            'Conflict in import: Both "Alice" and "Bob" are being assigned to Block A, Apartment 101'
        ]

    def test_repetitions_produce_one_message(self):
        rows = [['Alice', '', 'A', '101'], ['Bob', '', 'A', '101'], ['Bob', '', 'A', '101'],
                ['Alice', '', 'A', '101']]

        errors = detect_batch_conflicts(rows)

        assert len(errors) == 1
        assert '"Alice"' in errors[0] and '"Bob"' in errors[0]

    def test_same_name_repeated_is_not_a_conflict(self):
        rows = [['Alice', '', 'A', '101']] * 3

        assert detect_batch_conflicts(rows) == []

    def test_first_row_wins(self):
        rows = [['Bob', '', 'A', '1'], ['Alice', '', 'A', '1'], ['Carol', '', 'A', '1']]

        errors = detect_batch_conflicts(rows)

        assert errors == [
            'Conflict in import: Both "Bob" and "Alice" are being assigned to Block A, Apartment 1',
            'Conflict in import: Both "Bob" and "Carol" are being assigned to Block A, Apartment 1',
        ]


class TestImportConflictService:

    def test_requires_gateway(self):
        with pytest.raises(ValueError):
            ImportConflictService(None)

    def test_no_conflicts(self):
        gateway = LookupGateway({})
        service = ImportConflictService(gateway, sleep=no_sleep)

        report = _run(service, [['Alice', '', 'A', '101']], _index())

        assert report.import_errors == []
        assert report.occupied_locations == {}
        assert report.timed_out is False
        assert gateway.calls == []

    def test_database_conflict_names_existing_occupant(self):
        gateway = LookupGateway({('B', '5'): 'Carol'})
        service = ImportConflictService(gateway, sleep=no_sleep)

        report = _run(service, [['Dave', '555', 'B', '5', 'Mar', '2024']], _index(('Carol', 'B', '5')))

        assert report.import_errors == [
            "Location already occupied: Block B, Apartment 5 occupied by Carol"
        ]
        assert report.occupied_locations == {('B', '5'): 'Carol'}

    def test_flags_without_removing_rows(self):
        rows = [['Dave', '', 'B', '5']]
        service = ImportConflictService(LookupGateway({('B', '5'): 'Carol'}), sleep=no_sleep)

        _run(service, rows, _index(('Carol', 'B', '5')))

        assert rows == [['Dave', '', 'B', '5']]

    def test_one_lookup_per_occupied_unit(self):
        gateway = LookupGateway({('B', '5'): 'Carol'})
        service = ImportConflictService(gateway, sleep=no_sleep)
        rows = [['Dave', '', 'B', '5'], ['Erin', '', 'B', '5']]

        report = _run(service, rows, _index(('Carol', 'B', '5')))

        assert gateway.calls == [('B', '5')]
        assert len([e for e in report.import_errors if e.startswith('Location already occupied')]) == 1

    def test_batch_and_database_errors_combined(self):
        service = ImportConflictService(LookupGateway({('B', '5'): 'Carol'}), sleep=no_sleep)
        rows = [['Alice', '', 'A', '1'], ['Bob', '', 'A', '1'], ['Dave', '', 'B', '5']]

        report = _run(service, rows, _index(('Carol', 'B', '5')))

        assert report.import_errors[0].startswith('Conflict in import')
        assert report.import_errors[1].startswith('Location already occupied')

    def test_lookup_retried_with_backoff(self):
        delays = []

        async def record_sleep(delay):
            delays.append(delay)

        gateway = LookupGateway({('B', '5'): 'Carol'}, failures=2)
        service = ImportConflictService(gateway, max_retries=3, base_delay=1.0, sleep=record_sleep)

        report = _run(service, [['Dave', '', 'B', '5']], _index(('Carol', 'B', '5')))

        assert report.occupied_locations[('B', '5')] == 'Carol'
        assert delays == [1.0, 2.0]

    def test_lookup_exhaustion_falls_back_to_placeholder(self):
        gateway = LookupGateway({('B', '5'): 'Carol'}, failures=10)
        service = ImportConflictService(gateway, max_retries=3, sleep=no_sleep)

        report = _run(service, [['Dave', '', 'B', '5']], _index(('Carol', 'B', '5')))

        assert report.occupied_locations[('B', '5')] == UNREACHABLE_OCCUPANT
        assert report.import_errors == [
            "Location already occupied: Block B, Apartment 5 occupied by another resident (connection error)"
        ]
        assert len(gateway.calls) == 4

    def test_occupant_without_name_uses_placeholder(self):
        # Index says occupied but the lookup finds nobody (deleted meanwhile)
        service = ImportConflictService(LookupGateway({}), sleep=no_sleep)

        report = _run(service, [['Dave', '', 'B', '5']], _index(('Carol', 'B', '5')))

        assert report.occupied_locations[('B', '5')] == UNKNOWN_OCCUPANT

    def test_timeout_keeps_partial_results(self):
        gateway = LookupGateway({('B', '5'): 'Carol', ('B', '6'): 'Frank'}, slow_keys=[('B', '6')])
        service = ImportConflictService(gateway, timeout=0.05, sleep=no_sleep)
        rows = [['Dave', '', 'B', '5'], ['Erin', '', 'B', '6']]

        with patch('services.import_conflict_service.import_logger') as mock_import_logger:
            report = _run(service, rows, _index(('Carol', 'B', '5'), ('Frank', 'B', '6')))

        assert report.timed_out is True
        assert report.occupied_locations == {('B', '5'): 'Carol', ('B', '6'): 'Frank'}
        assert "Location already occupied: Block B, Apartment 5 occupied by Carol" in report.import_errors
        assert report.import_errors[-1] == (
            "Conflict check timed out after 0.05 seconds; continuing with partial results"
        )
        mock_import_logger.log_conflict_check_timeout.assert_called_once_with(0.05, 1, 1)

