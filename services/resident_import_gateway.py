"""
Async persistence gateway used by the resident import pipeline.

Wraps the synchronous services so the pipeline can await every
persistence call. Calls run on the caller's thread: the SQLAlchemy
session is bound to the app context and must not be shared across
threads.
"""

from typing import Any, Dict, List, Optional

from services.apartment_service import ApartmentService
from services.block_service import BlockService
from services.common.result import Result
from services.resident_service import ResidentService


class ImportGatewayError(Exception):
    """Raised when a gateway call cannot complete"""
    pass


class ResidentImportGateway:
    """Persistence operations consumed by the import pipeline"""

    def __init__(self,
                 resident_service: ResidentService,
                 block_service: BlockService,
                 apartment_service: ApartmentService):
        self.resident_service = resident_service
        self.block_service = block_service
        self.apartment_service = apartment_service

    async def list_residents(self) -> List[Any]:
        return self.resident_service.get_all_residents()

    async def create_resident(self, data: Dict[str, Any]) -> Result:
        return self.resident_service.add_resident(data)

    async def block_exists(self, name: str) -> bool:
        return self.block_service.block_exists(name)

    async def apartment_exists(self, block_name: str, unit_number: str) -> bool:
        return self.apartment_service.apartment_exists(block_name, unit_number)

    async def find_resident_by_unit(self, block_name: str, unit_number: str) -> Optional[Dict[str, Any]]:
        resident = self.resident_service.find_by_location(block_name, unit_number)
        if resident is None:
            return None
        return {'id': resident.id, 'full_name': resident.full_name}

    async def create_apartments(self, block_id: int, numbers: List[str]) -> List[Any]:
        result = self.apartment_service.create_apartments(block_id, numbers)
        if result.is_failure:
            raise ImportGatewayError(result.error)
        return result.data

    async def resolve_block_id(self, name: str) -> Optional[int]:
        return self.block_service.get_block_id(name)
