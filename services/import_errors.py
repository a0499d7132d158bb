"""
Grouping of import error messages for display and remediation.
"""

import re
from collections import OrderedDict
from typing import Dict, Iterable, List

from services.enums import ImportErrorCategory

MISSING_APARTMENT_PATTERN = re.compile(r'Apartment (?P<number>.+?) does not exist in Block (?P<block>.+?)\s*$')
MISSING_BLOCK_PATTERN = re.compile(r'Block "(?P<block>.*)" does not exist')


def categorize_error(error: str) -> ImportErrorCategory:
    if MISSING_APARTMENT_PATTERN.search(error):
        return ImportErrorCategory.MISSING_APARTMENTS
    if MISSING_BLOCK_PATTERN.search(error):
        return ImportErrorCategory.MISSING_BLOCKS
    if error.startswith('Conflict in import'):
        return ImportErrorCategory.BATCH_CONFLICTS
    if 'already occupied' in error:
        return ImportErrorCategory.LOCATION_CONFLICTS
    return ImportErrorCategory.OTHER


def group_errors(errors: Iterable[str]) -> Dict[str, List[str]]:
    """
    Bucket errors by category, keeping order inside each bucket.

    Every category is present in the result, empty ones included.
    """
    grouped = OrderedDict((category.value, []) for category in ImportErrorCategory)
    for error in errors:
        grouped[categorize_error(error).value].append(error)
    return dict(grouped)


def extract_missing_apartments(errors: Iterable[str]) -> Dict[str, List[str]]:
    """
    Collect apartment numbers reported missing, per block.

    >>> extract_missing_apartments(["Failed to add resident: X - Apartment 12 does not exist in Block A"])
    {'A': ['12']}
    """
    missing: Dict[str, List[str]] = OrderedDict()
    for error in errors:
        match = MISSING_APARTMENT_PATTERN.search(error)
        if not match:
            continue
        numbers = missing.setdefault(match.group('block'), [])
        if match.group('number') not in numbers:
            numbers.append(match.group('number'))
    return dict(missing)
