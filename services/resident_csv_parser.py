"""
Parser for resident import files.

The first line is a header and is skipped. Data lines are comma separated;
a double quote toggles quoting so commas inside quotes stay in the field.
Lines containing a tab are split on tabs instead.
"""

from dataclasses import dataclass, field
import re
from typing import List

MIN_COLUMNS = 4

_FULLY_QUOTED = re.compile(r'^"(.*)"$', re.DOTALL)
_LINE_BREAK = re.compile(r'\r?\n')


@dataclass
class ParsedFile:
    rows: List[List[str]] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


def split_line(line: str) -> List[str]:
    """Split one data line into trimmed, unquoted fields."""
    if '\t' in line:
        values = line.split('\t')
    else:
        values = []
        in_quotes = False
        current = []
        for char in line:
            if char == '"':
                in_quotes = not in_quotes
            elif char == ',' and not in_quotes:
                values.append(''.join(current))
                current = []
            else:
                current.append(char)
        values.append(''.join(current))

    return [_FULLY_QUOTED.sub(r'\1', value.strip()) for value in values]


def parse_resident_csv(text: str) -> ParsedFile:
    """
    Parse import text into rows, collecting malformed lines as errors.

    Blank lines are ignored. A line yielding fewer than four fields is
    reported as ``Invalid data format: <line>`` and parsing continues.
    """
    result = ParsedFile()
    lines = _LINE_BREAK.split(text)

    for line in lines[1:]:
        if not line.strip():
            continue
        values = split_line(line)
        if len(values) < MIN_COLUMNS:
            result.errors.append(f"Invalid data format: {line}")
            continue
        result.rows.append(values)

    return result
