"""
ResidentImportService - bulk import of residents from CSV/TSV files.

Pipeline: file checks -> parse -> validate -> conflict detection ->
batch creation -> summary (+ refresh when anything was created).
Only an unreadable file aborts the run; every other problem is reported
per row and the remaining rows are still imported.
"""

import asyncio
import os
import time
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from logging_config import get_logger, import_logger
from repositories.resident_import_repository import ResidentImportRepository
from services.common.result import Result
from services.common.retry import with_retry
from services.common.single_flight import SingleFlight
from services.enums import ImportStatus
from services.import_conflict_service import ImportConflictService
from services.import_errors import extract_missing_apartments, group_errors
from services.import_validation import validate_rows
from services.occupancy_index import OccupancyIndex, OccupancyKey, location_key
from services.property_cache import PropertyCache
from services.resident_csv_parser import parse_resident_csv
from utils.datetime_utils import utc_now
from utils.move_in_period import prepare_resident_data

logger = get_logger(__name__)

ALLOWED_EXTENSIONS = ('.csv', '.tsv')
MAX_FILE_SIZE = 5 * 1024 * 1024

# Failures that another attempt cannot fix
NON_RETRYABLE_CODES = {'LOCATION_OCCUPIED', 'VALIDATION_ERROR', 'NOT_FOUND'}


@dataclass
class BatchOutcome:
    successful: int = 0
    failed: int = 0
    errors: List[str] = field(default_factory=list)


@dataclass
class ImportSummary:
    total_rows: int = 0
    successful: int = 0
    failed: int = 0
    errors: List[str] = field(default_factory=list)
    conflict_check_timed_out: bool = False
    import_id: Optional[int] = None

    @property
    def message(self) -> str:
        return (f"Successfully imported {self.successful} residents. "
                f"Failed to import {self.failed} resident(s).")

    @property
    def grouped_errors(self) -> Dict[str, List[str]]:
        return group_errors(self.errors)

    @property
    def missing_apartments(self) -> Dict[str, List[str]]:
        return extract_missing_apartments(self.errors)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'import_id': self.import_id,
            'total_rows': self.total_rows,
            'successful': self.successful,
            'failed': self.failed,
            'message': self.message,
            'errors': self.errors,
            'grouped_errors': self.grouped_errors,
            'missing_apartments': self.missing_apartments,
            'conflict_check_timed_out': self.conflict_check_timed_out,
        }


class ResidentImportService:
    """Imports residents from uploaded files"""

    def __init__(self,
                 gateway=None,
                 conflict_service: Optional[ImportConflictService] = None,
                 import_repository: Optional[ResidentImportRepository] = None,
                 property_cache: Optional[PropertyCache] = None,
                 import_guard: Optional[SingleFlight] = None,
                 chunk_size: int = 3,
                 throttle_seconds: float = 0.5,
                 max_retries: int = 3,
                 retry_base_delay: float = 1.0,
                 max_file_size: int = MAX_FILE_SIZE,
                 allowed_extensions: Sequence[str] = ALLOWED_EXTENSIONS,
                 sleep: Callable[[float], Awaitable] = asyncio.sleep):
        if gateway is None or conflict_service is None:
            raise ValueError("Import gateway and conflict service must be provided via dependency injection")
        self.gateway = gateway
        self.conflict_service = conflict_service
        self.import_repository = import_repository
        self.property_cache = property_cache
        self.import_guard = import_guard or SingleFlight('resident_import')
        self.chunk_size = max(1, chunk_size)
        self.throttle_seconds = throttle_seconds
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self.max_file_size = max_file_size
        self.allowed_extensions = tuple(ext.lower() for ext in allowed_extensions)
        self.sleep = sleep
        self.occupancy = OccupancyIndex()

    # File handling

    def check_file(self, filename: str, size: int) -> Result[None]:
        """Reject files with the wrong extension or over the size ceiling."""
        extension = os.path.splitext(filename or '')[1].lower()
        if extension not in self.allowed_extensions:
            return Result.failure(
                f"Invalid file type. Please upload a {' or '.join(self.allowed_extensions)} file",
                code="INVALID_FILE"
            )
        if size > self.max_file_size:
            limit_mb = self.max_file_size / (1024 * 1024)
            return Result.failure(f"File is too large. Maximum size is {limit_mb:g}MB", code="INVALID_FILE")
        return Result.success(None)

    @staticmethod
    def read_text(content: bytes) -> Result[str]:
        """Decode uploaded bytes; a BOM is dropped."""
        try:
            return Result.success(content.decode('utf-8-sig'))
        except UnicodeDecodeError as e:
            return Result.failure(f"Error reading file: {e}", code="UNREADABLE_FILE")

    def import_file(self, filename: str, content: bytes) -> Result[ImportSummary]:
        """
        Import residents from an uploaded file.

        Args:
            filename: Original file name (extension decides acceptance)
            content: Raw file bytes

        Returns:
            Result with the ImportSummary. Fails without touching any row when
            the file is rejected, unreadable, or another import is running.
        """
        check = self.check_file(filename, len(content))
        if check.is_failure:
            return check

        text = self.read_text(content)
        if text.is_failure:
            logger.error("Unreadable import file", filename=filename, error=text.error)
            return text

        if not any(line.strip() for line in text.data.splitlines()[1:]):
            return Result.failure("The file has no data rows", code="EMPTY_FILE")

        if not self.import_guard.try_acquire():
            return Result.failure("An import is already in progress", code="IN_PROGRESS")
        try:
            return Result.success(asyncio.run(self.run_import(text.data, filename)))
        finally:
            self.import_guard.release()

    # Pipeline

    async def run_import(self, text: str, filename: str = 'upload.csv') -> ImportSummary:
        """Run the whole pipeline on decoded file text."""
        started = time.monotonic()
        parsed = parse_resident_csv(text)
        validation = validate_rows(parsed.rows)

        summary = ImportSummary(total_rows=len(parsed.rows) + len(parsed.errors))
        record = self._start_record(filename, summary.total_rows)
        summary.import_id = record.id if record is not None else None
        import_logger.log_import_started(filename, summary.total_rows, summary.import_id)

        try:
            self.occupancy.rebuild(await self.gateway.list_residents())
            conflicts = await self.conflict_service.detect_conflicts(validation.valid_rows, self.occupancy)
            outcome = await self.import_rows(validation.valid_rows, conflicts.occupied_locations)
        except Exception as e:
            self._finish_record(record, summary, ImportStatus.FAILED, extra_error=str(e))
            raise

        summary.successful = outcome.successful
        summary.failed = len(parsed.errors) + len(validation.validation_errors) + outcome.failed
        summary.conflict_check_timed_out = conflicts.timed_out
        summary.errors = (parsed.errors + validation.validation_errors +
                          conflicts.import_errors + outcome.errors)

        if outcome.successful > 0:
            await self.refresh_data()

        self._finish_record(record, summary, ImportStatus.COMPLETED)
        import_logger.log_import_finished(
            filename, summary.successful, summary.failed,
            round((time.monotonic() - started) * 1000, 2), summary.import_id
        )
        return summary

    async def import_rows(self, rows: Sequence[Sequence[str]],
                          occupied_locations: Dict[OccupancyKey, str]) -> BatchOutcome:
        """
        Create residents for ``rows`` in concurrent chunks.

        ``occupied_locations`` is updated as residents are created so later
        rows for the same unit are rejected. Rows for one unit are processed
        one at a time.
        """
        outcome = BatchOutcome()
        unit_locks: Dict[OccupancyKey, asyncio.Lock] = defaultdict(asyncio.Lock)

        for start in range(0, len(rows), self.chunk_size):
            chunk = rows[start:start + self.chunk_size]
            await asyncio.gather(*(
                self._import_row(row, occupied_locations, unit_locks, outcome) for row in chunk
            ))
            await self.sleep(self.throttle_seconds)

        return outcome

    async def _import_row(self, row: Sequence[str], occupied_locations: Dict[OccupancyKey, str],
                          unit_locks: Dict[OccupancyKey, asyncio.Lock], outcome: BatchOutcome) -> None:
        full_name = row[0].strip() if row else 'Unknown'
        block_number, apartment_number = row[2].strip(), row[3].strip()
        key = location_key(block_number, apartment_number)

        async with unit_locks[key]:
            try:
                error = await self._create_from_row(row, full_name, key, occupied_locations)
            except Exception as e:
                logger.error("Error processing import row", full_name=full_name, error=str(e))
                error = f"Error processing resident: {full_name or 'Unknown'} - {e}"

        if error:
            outcome.failed += 1
            outcome.errors.append(error)
        else:
            outcome.successful += 1

    async def _create_from_row(self, row: Sequence[str], full_name: str, key: OccupancyKey,
                               occupied_locations: Dict[OccupancyKey, str]) -> Optional[str]:
        """Returns None on success, otherwise the error message for the row."""
        block_number, apartment_number = key

        if key in occupied_locations:
            return (f"Failed to add resident: {full_name} at Block {block_number}, "
                    f"Apartment {apartment_number} - Location already occupied by {occupied_locations[key]}")

        if not await self._retry(lambda: self.gateway.block_exists(block_number), f"block exists {block_number}"):
            return f'Failed to add resident: {full_name} - Block "{block_number}" does not exist'

        if not await self._retry(lambda: self.gateway.apartment_exists(block_number, apartment_number),
                                 f"apartment exists {block_number}/{apartment_number}"):
            return (f"Failed to add resident: {full_name} - "
                    f"Apartment {apartment_number} does not exist in Block {block_number}")

        payload = prepare_resident_data(row)
        result = await self._retry(
            lambda: self.gateway.create_resident(payload),
            f"create resident {block_number}/{apartment_number}",
            should_retry=lambda r: not r and getattr(r, 'error_code', None) not in NON_RETRYABLE_CODES
        )

        if result:
            occupied_locations[key] = full_name
            resident = getattr(result, 'data', None)
            self.occupancy.mark_occupied(block_number, apartment_number,
                                         getattr(resident, 'full_name', payload['full_name']),
                                         getattr(resident, 'id', None))
            return None

        if getattr(result, 'error_code', None) == 'LOCATION_OCCUPIED':
            occupant = (result.metadata or {}).get('occupant', 'another resident')
            occupied_locations[key] = occupant
            return (f"Failed to add resident: {full_name} at Block {block_number}, "
                    f"Apartment {apartment_number} - Location already occupied by {occupant}")

        reason = getattr(result, 'error', None) or 'unknown error'
        return f"Failed to add resident: {full_name} - {reason}"

    async def _retry(self, operation, description: str, should_retry=None):
        return await with_retry(
            operation,
            max_retries=self.max_retries,
            base_delay=self.retry_base_delay,
            should_retry=should_retry,
            description=description,
            sleep=self.sleep
        )

    async def refresh_data(self) -> None:
        """Reload occupancy from storage and drop cached property data."""
        self.occupancy.rebuild(await self.gateway.list_residents())
        if self.property_cache is not None:
            self.property_cache.clear()

    # History

    def get_import_history(self, limit: int = 10) -> List[Dict[str, Any]]:
        if self.import_repository is None:
            return []
        return [record.to_dict() for record in self.import_repository.get_recent(limit)]

    def _start_record(self, filename: str, total_rows: int):
        if self.import_repository is None:
            return None
        record = self.import_repository.create(
            filename=filename,
            status=ImportStatus.PROCESSING.value,
            total_rows=total_rows
        )
        self.import_repository.commit()
        return record

    def _finish_record(self, record, summary: ImportSummary, status: ImportStatus,
                       extra_error: Optional[str] = None) -> None:
        if record is None:
            return
        errors = list(summary.errors)
        if extra_error:
            errors.append(extra_error)
        self.import_repository.update(
            record,
            status=status.value,
            successful_imports=summary.successful,
            failed_imports=summary.failed,
            import_metadata={'errors': errors, 'message': summary.message},
            completed_at=utc_now()
        )
        self.import_repository.commit()
