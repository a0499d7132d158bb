"""
Move-in period helpers shared by manual resident entry, CSV import and export.
"""

import re
from typing import Dict, List, Optional, Sequence, Tuple

from utils.datetime_utils import current_month_code, current_year, utc_now

# (value, label) pairs, in calendar order
MONTHS: List[Tuple[str, str]] = [
    ('01', 'January'), ('02', 'February'), ('03', 'March'),
    ('04', 'April'), ('05', 'May'), ('06', 'June'),
    ('07', 'July'), ('08', 'August'), ('09', 'September'),
    ('10', 'October'), ('11', 'November'), ('12', 'December'),
]

MONTH_ABBREVIATIONS: Dict[str, str] = {
    'jan': '01', 'feb': '02', 'mar': '03', 'apr': '04',
    'may': '05', 'jun': '06', 'jul': '07', 'aug': '08',
    'sep': '09', 'oct': '10', 'nov': '11', 'dec': '12',
}

LEADING_INTEGER = re.compile(r'[+-]?\d+')


def parse_month(value: Optional[str], months: Sequence[Tuple[str, str]] = MONTHS) -> str:
    """
    Resolve a month label, code, abbreviation or number to a two-digit code.

    Resolution order: label (case-insensitive), value ("01".."12"), first three
    letters against the English abbreviations, leading integer 1-12 ("7th"
    reads as 7). Anything else, including blank input, falls back to the
    current month.

    Args:
        value: Raw cell content, e.g. "January", "jan", "07", "7"
        months: Known (value, label) pairs

    Returns:
        "01".."12"
    """
    if value is None or not value.strip():
        return current_month_code()

    text = value.strip()
    lowered = text.lower()

    for code, label in months:
        if label.lower() == lowered:
            return code

    for code, _ in months:
        if code == text:
            return code

    abbreviation = lowered[:3]
    if abbreviation in MONTH_ABBREVIATIONS:
        return MONTH_ABBREVIATIONS[abbreviation]

    match = LEADING_INTEGER.match(text)
    if match and 1 <= int(match.group()) <= 12:
        return f"{int(match.group()):02d}"

    return current_month_code()


def month_label(code: Optional[str], months: Sequence[Tuple[str, str]] = MONTHS) -> str:
    """Display label for a month code; unknown codes are returned unchanged."""
    if not code:
        return ''
    for value, label in months:
        if value == code:
            return label
    return code


def _looks_like_year(text: str) -> bool:
    try:
        year = int(text.strip())
    except (ValueError, AttributeError):
        return False
    return 1900 < year <= utc_now().year + 5


def prepare_resident_data(row: Sequence[str], months: Sequence[Tuple[str, str]] = MONTHS) -> Dict[str, str]:
    """
    Turn an import row into a resident creation payload.

    Columns: full_name, phone_number, block_number, apartment_number,
    move_in_month, move_in_year. A blank name falls back to the first
    non-blank cell, a blank block to a cell mentioning "block", and a blank
    year to the first cell that looks like a year, then to the current year.
    The name is upper-cased.
    """
    cells = list(row) + [''] * max(0, 6 - len(row))
    full_name, phone_number, block_number, apartment_number, month_raw, year_raw = (
        (cell or '') for cell in cells[:6]
    )

    if not full_name.strip():
        full_name = next((cell for cell in row[1:] if cell and cell.strip()), '')

    if not block_number.strip():
        block_number = next((cell for cell in row if cell and 'block' in cell.lower()), '')

    if not year_raw.strip():
        year_raw = next((cell for cell in row if cell and _looks_like_year(cell)), '')

    year = year_raw.strip()
    if not year.isdigit():
        year = current_year()

    return {
        'full_name': full_name.strip().upper(),
        'phone_number': phone_number.strip(),
        'block_number': block_number.strip(),
        'apartment_number': apartment_number.strip(),
        'move_in_month': parse_month(month_raw, months),
        'move_in_year': year,
    }
