"""
Row-level checks for parsed resident import rows.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from services.resident_csv_parser import MIN_COLUMNS


@dataclass
class ValidationOutcome:
    valid_rows: List[List[str]] = field(default_factory=list)
    validation_errors: List[str] = field(default_factory=list)


def validate_row(row: Sequence[str]) -> Optional[str]:
    """Return the first problem with ``row``, or None when it can be imported."""
    if len(row) < MIN_COLUMNS:
        return f"Invalid row format: {', '.join(row)}. Not enough columns."

    full_name = row[0].strip()
    block_number = row[2].strip()
    apartment_number = row[3].strip()

    if not full_name:
        return f"Missing resident name in row: {', '.join(row)}"
    if not block_number:
        return f"Missing block number for resident {full_name}"
    if not apartment_number:
        return f"Missing apartment number for resident {full_name} in block {block_number}"
    return None


def validate_rows(rows: Sequence[Sequence[str]]) -> ValidationOutcome:
    """Partition rows into importable rows and error messages, keeping input order."""
    outcome = ValidationOutcome()
    for row in rows:
        error = validate_row(row)
        if error:
            outcome.validation_errors.append(error)
        else:
            outcome.valid_rows.append(list(row))
    return outcome
