"""
In-memory occupancy lookup built from the resident list.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple


OccupancyKey = Tuple[str, str]


def location_key(block_number: str, apartment_number: str) -> OccupancyKey:
    """Occupancy key of a unit: (block_number, apartment_number)"""
    return (block_number, apartment_number)


@dataclass(frozen=True)
class Occupant:
    full_name: str
    resident_id: Optional[int] = None


class OccupancyIndex:
    """
    Maps occupancy keys to the resident living there.

    Rebuilt from the full resident list whenever residents are refetched and
    updated incrementally while an import creates residents.
    """

    def __init__(self):
        self._occupants: Dict[OccupancyKey, Occupant] = {}

    @classmethod
    def from_residents(cls, residents: Iterable) -> 'OccupancyIndex':
        index = cls()
        index.rebuild(residents)
        return index

    def rebuild(self, residents: Iterable) -> None:
        self._occupants = {
            location_key(resident.block_number, resident.apartment_number):
                Occupant(resident.full_name, getattr(resident, 'id', None))
            for resident in residents
        }

    def is_occupied(self, block_number: str, apartment_number: str,
                    exclude_resident_id: Optional[int] = None) -> bool:
        """
        Whether a unit is occupied, not counting ``exclude_resident_id``.

        Args:
            block_number: Block name
            apartment_number: Apartment number
            exclude_resident_id: Resident whose own unit should not count
                (editing a resident in place)
        """
        occupant = self._occupants.get(location_key(block_number, apartment_number))
        if occupant is None:
            return False
        if exclude_resident_id is not None and occupant.resident_id == exclude_resident_id:
            return False
        return True

    def occupant_of(self, block_number: str, apartment_number: str) -> Optional[Occupant]:
        return self._occupants.get(location_key(block_number, apartment_number))

    def mark_occupied(self, block_number: str, apartment_number: str,
                      full_name: str, resident_id: Optional[int] = None) -> None:
        self._occupants[location_key(block_number, apartment_number)] = Occupant(full_name, resident_id)

    def release(self, block_number: str, apartment_number: str) -> None:
        self._occupants.pop(location_key(block_number, apartment_number), None)

    def __len__(self) -> int:
        return len(self._occupants)

    def __contains__(self, key: OccupancyKey) -> bool:
        return key in self._occupants
