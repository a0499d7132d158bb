"""
BlockService - blocks and their generated apartments
"""

from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from logging_config import get_logger
from repositories.apartment_repository import ApartmentRepository
from repositories.block_repository import BlockRepository
from repositories.resident_repository import ResidentRepository
from services.common.result import Result
from services.property_cache import PropertyCache

logger = get_logger(__name__)

BLOCKS_CACHE_KEY = 'blocks:all'
BLOCK_ID_CACHE_PREFIX = 'blocks:id:'


class BlockService:
    """Service for managing blocks"""

    def __init__(self,
                 block_repository: Optional[BlockRepository] = None,
                 apartment_repository: Optional[ApartmentRepository] = None,
                 resident_repository: Optional[ResidentRepository] = None,
                 property_cache: Optional[PropertyCache] = None):
        if not block_repository or not apartment_repository or not resident_repository:
            raise ValueError("Block, apartment and resident repositories must be provided via dependency injection")
        self.block_repository = block_repository
        self.apartment_repository = apartment_repository
        self.resident_repository = resident_repository
        self.cache = property_cache or PropertyCache(default_ttl=0)

    def list_blocks(self) -> List[Dict[str, Any]]:
        """
        All blocks ordered by name, with apartment counts.

        Returns:
            List of block dicts (cached)
        """
        def load():
            return [
                {'id': block.id, 'name': block.name, 'apartment_count': count}
                for block, count in self.block_repository.get_all_with_apartment_counts()
            ]
        return self.cache.get_or_set(BLOCKS_CACHE_KEY, load)

    def get_block(self, block_id: int) -> Result[Dict[str, Any]]:
        block = self.block_repository.get_by_id(block_id)
        if not block:
            return Result.failure(f"Block {block_id} not found", code="NOT_FOUND")
        return Result.success(block.to_dict(include_apartments=True))

    def get_block_id(self, name: str) -> Optional[int]:
        """Resolve a block name to its id; only hits are cached."""
        key = f'{BLOCK_ID_CACHE_PREFIX}{name}'
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        block = self.block_repository.find_by_name(name)
        if block is None:
            return None
        self.cache.set(key, block.id)
        return block.id

    def block_exists(self, name: str) -> bool:
        return self.get_block_id(name) is not None

    def create_block(self, name: str, apartment_count: int = 0) -> Result[Dict[str, Any]]:
        """
        Create a block and ``apartment_count`` apartments numbered "01", "02", ...
        on floor 1.

        Args:
            name: Block name, e.g. "Block A"
            apartment_count: Number of apartments to generate

        Returns:
            Result with the created block dict
        """
        name = (name or '').strip()
        if not name:
            return Result.failure("Block name is required", code="VALIDATION_ERROR")
        try:
            apartment_count = int(apartment_count or 0)
        except (TypeError, ValueError):
            return Result.failure("Number of apartments must be a number", code="VALIDATION_ERROR")
        if apartment_count < 0:
            return Result.failure("Number of apartments cannot be negative", code="VALIDATION_ERROR")

        if self.block_repository.find_by_name(name):
            return Result.failure(f'Block "{name}" already exists', code="DUPLICATE")

        try:
            block = self.block_repository.create(name=name)
            if apartment_count:
                width = max(2, len(str(apartment_count)))
                self.apartment_repository.create_many([
                    {'block_id': block.id, 'number': str(n).zfill(width), 'floor': 1}
                    for n in range(1, apartment_count + 1)
                ])
            self.block_repository.commit()
        except SQLAlchemyError as e:
            return Result.failure(f"Failed to create block: {e}", code="REPOSITORY_ERROR")

        self.cache.invalidate('blocks:')
        logger.info("Block created", block_id=block.id, name=name, apartments=apartment_count)
        return Result.success(block.to_dict())

    def rename_block(self, block_id: int, new_name: str) -> Result[Dict[str, Any]]:
        """
        Rename a block and move its residents to the new name.

        Returns:
            Result with the block dict; metadata carries residents_updated
        """
        new_name = (new_name or '').strip()
        if not new_name:
            return Result.failure("Block name is required", code="VALIDATION_ERROR")

        block = self.block_repository.get_by_id(block_id)
        if not block:
            return Result.failure(f"Block {block_id} not found", code="NOT_FOUND")

        old_name = block.name
        if new_name == old_name:
            return Result.success(block.to_dict(), metadata={'residents_updated': 0})

        existing = self.block_repository.find_by_name(new_name)
        if existing and existing.id != block.id:
            return Result.failure(f'Block "{new_name}" already exists', code="DUPLICATE")

        try:
            self.block_repository.update(block, name=new_name)
            residents_updated = self.resident_repository.rename_block(old_name, new_name)
            self.block_repository.commit()
        except SQLAlchemyError as e:
            return Result.failure(f"Failed to rename block: {e}", code="REPOSITORY_ERROR")

        self.cache.invalidate('blocks:')
        logger.info("Block renamed", block_id=block_id, old_name=old_name,
                    new_name=new_name, residents_updated=residents_updated)
        return Result.success(block.to_dict(), metadata={'residents_updated': residents_updated})

    def delete_block(self, block_id: int) -> Result[bool]:
        """Delete a block and its apartments. Residents keep their records."""
        block = self.block_repository.get_by_id(block_id)
        if not block:
            return Result.failure(f"Block {block_id} not found", code="NOT_FOUND")
        try:
            self.block_repository.delete(block)
            self.block_repository.commit()
        except SQLAlchemyError as e:
            return Result.failure(f"Failed to delete block: {e}", code="REPOSITORY_ERROR")

        self.cache.invalidate('blocks:')
        self.cache.invalidate(f'apartments:{block_id}')
        return Result.success(True)
