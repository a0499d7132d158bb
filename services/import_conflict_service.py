"""
ImportConflictService - finds rows that would collide with occupied units.

Two passes over the validated rows:
  1. rows inside the batch claiming one unit for different people
  2. rows claiming a unit that an existing resident already occupies

The second pass resolves occupant names through the persistence gateway
concurrently, bounded by an overall timeout. Rows are never removed here;
the batch importer uses ``occupied_locations`` to skip them.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Sequence

from logging_config import get_logger, import_logger
from services.common.retry import with_retry
from services.occupancy_index import OccupancyIndex, OccupancyKey, location_key

logger = get_logger(__name__)

UNKNOWN_OCCUPANT = 'another resident'
UNREACHABLE_OCCUPANT = 'another resident (connection error)'


@dataclass
class ConflictReport:
    import_errors: List[str] = field(default_factory=list)
    occupied_locations: Dict[OccupancyKey, str] = field(default_factory=dict)
    timed_out: bool = False


def batch_conflict_message(first_name: str, other_name: str, block_number: str, apartment_number: str) -> str:
    return (f'Conflict in import: Both "{first_name}" and "{other_name}" are being assigned to '
            f'Block {block_number}, Apartment {apartment_number}')


def occupied_message(block_number: str, apartment_number: str, occupant: str) -> str:
    return f"Location already occupied: Block {block_number}, Apartment {apartment_number} occupied by {occupant}"


def detect_batch_conflicts(rows: Sequence[Sequence[str]]) -> List[str]:
    """
    Flag units claimed by different names within one batch.

    The first row seen for a unit sets the expected name; each later row with
    another name yields one message, duplicates suppressed.
    """
    first_claims: Dict[OccupancyKey, str] = {}
    errors: List[str] = []
    for row in rows:
        if len(row) < 4:
            continue
        full_name, block_number, apartment_number = row[0], row[2], row[3]
        if not block_number or not apartment_number:
            continue
        key = location_key(block_number, apartment_number)
        if key not in first_claims:
            first_claims[key] = full_name
            continue
        if first_claims[key] != full_name:
            message = batch_conflict_message(first_claims[key], full_name, block_number, apartment_number)
            if message not in errors:
                errors.append(message)
    return errors


class ImportConflictService:
    """Conflict detection for resident imports"""

    def __init__(self, gateway, max_retries: int = 3, base_delay: float = 1.0,
                 timeout: float = 15.0,
                 sleep: Callable[[float], Awaitable] = asyncio.sleep):
        if gateway is None:
            raise ValueError("Import gateway must be provided via dependency injection")
        self.gateway = gateway
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.timeout = timeout
        self.sleep = sleep

    async def detect_conflicts(self, valid_rows: Sequence[Sequence[str]],
                               occupancy: OccupancyIndex) -> ConflictReport:
        """
        Run both conflict passes.

        Args:
            valid_rows: Rows that passed validation, in file order
            occupancy: Index of the residents currently stored

        Returns:
            ConflictReport with messages and the occupant name per occupied unit
        """
        report = ConflictReport(import_errors=detect_batch_conflicts(valid_rows))

        occupied_keys: List[OccupancyKey] = []
        for row in valid_rows:
            key = location_key(row[2], row[3])
            if key not in occupied_keys and occupancy.is_occupied(*key):
                occupied_keys.append(key)

        if not occupied_keys:
            return report

        lookups = {key: asyncio.ensure_future(self._lookup_occupant(*key)) for key in occupied_keys}
        done, pending = await asyncio.wait(list(lookups.values()), timeout=self.timeout)

        for key, task in lookups.items():
            if task in done:
                occupant = task.result()
                report.occupied_locations[key] = occupant
                message = occupied_message(key[0], key[1], occupant)
                if message not in report.import_errors:
                    report.import_errors.append(message)
            else:
                task.cancel()
                indexed = occupancy.occupant_of(*key)
                report.occupied_locations[key] = indexed.full_name if indexed and indexed.full_name else UNKNOWN_OCCUPANT

        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            report.timed_out = True
            report.import_errors.append(
                f"Conflict check timed out after {self.timeout:g} seconds; "
                f"continuing with partial results"
            )
            import_logger.log_conflict_check_timeout(self.timeout, len(done), len(pending))

        return report

    async def _lookup_occupant(self, block_number: str, apartment_number: str) -> str:
        try:
            resident = await with_retry(
                lambda: self.gateway.find_resident_by_unit(block_number, apartment_number),
                max_retries=self.max_retries,
                base_delay=self.base_delay,
                description=f"find occupant {block_number}/{apartment_number}",
                sleep=self.sleep
            )
        except Exception as e:
            logger.error("Occupant lookup failed",
                         block_number=block_number,
                         apartment_number=apartment_number,
                         error=str(e))
            return UNREACHABLE_OCCUPANT
        if resident and resident.get('full_name'):
            return resident['full_name']
        return UNKNOWN_OCCUPANT
