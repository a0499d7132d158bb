"""
ApartmentGapService - creates apartments that an import reported as missing
"""

import asyncio
from typing import Any, Dict, List, Optional, Sequence

from logging_config import get_logger, import_logger
from services.common.result import Result
from services.common.single_flight import SingleFlight
from services.import_errors import extract_missing_apartments
from services.resident_import_gateway import ImportGatewayError

logger = get_logger(__name__)


class ApartmentGapService:
    """Fills gaps in a block's apartment list after a failed import"""

    def __init__(self, gateway=None, guard: Optional[SingleFlight] = None):
        if gateway is None:
            raise ValueError("Import gateway must be provided via dependency injection")
        self.gateway = gateway
        self.guard = guard or SingleFlight('apartment_gap')

    async def create_missing_apartments(self, block_name: str,
                                        numbers: Sequence[str]) -> Result[Dict[str, Any]]:
        """
        Create the given apartments in a block.

        Numbers that already exist are skipped. Floors are derived from the
        apartment number.

        Args:
            block_name: Block name as residents reference it, e.g. "Block A"
            numbers: Apartment numbers taken from the import errors

        Returns:
            Result with created count and numbers, plus a hint to re-import
        """
        if not self.guard.try_acquire():
            return Result.failure("Apartment creation is already in progress", code="IN_PROGRESS")
        try:
            return await self._create(block_name, numbers)
        finally:
            self.guard.release()

    async def _create(self, block_name: str, numbers: Sequence[str]) -> Result[Dict[str, Any]]:
        wanted = [str(number).strip() for number in numbers if str(number).strip()]
        if not wanted:
            return Result.failure("No apartment numbers given", code="VALIDATION_ERROR")

        block_id = await self.gateway.resolve_block_id(block_name)
        if block_id is None:
            return Result.failure(f"Block {block_name} not found", code="NOT_FOUND")

        try:
            created = await self.gateway.create_apartments(block_id, wanted)
        except ImportGatewayError as e:
            logger.error("Creating missing apartments failed", block_name=block_name, error=str(e))
            return Result.failure(f"Failed to create apartments: {e}", code="REPOSITORY_ERROR")

        created_numbers = [apartment.number for apartment in created]
        import_logger.log_apartments_created(block_name, created_numbers)
        return Result.success({
            'block_name': block_name,
            'created': len(created_numbers),
            'apartment_numbers': created_numbers,
            'message': f"Successfully created {len(created_numbers)} apartments in Block {block_name}",
            'suggest_reimport': len(created_numbers) > 0,
        })

    def create_missing(self, block_name: str, numbers: Sequence[str]) -> Result[Dict[str, Any]]:
        """Synchronous entry point for routes and CLI commands."""
        return asyncio.run(self.create_missing_apartments(block_name, numbers))

    def create_from_errors(self, errors: List[str]) -> List[Result[Dict[str, Any]]]:
        """Create every missing apartment mentioned in an import error list, block by block."""
        return [self.create_missing(block_name, numbers)
                for block_name, numbers in extract_missing_apartments(errors).items()]
