"""
Parser for interval energy usage CSV exports.

Each data line has exactly five comma-separated fields:

    timestamp, durationSeconds, unit, consumptionWh, generationWh

The first non-blank line is a header and is ignored. Quoted fields are not
supported. Parsing is all-or-nothing: every bad row is collected and reported
together, and no readings are returned unless every row is valid.
"""
from __future__ import annotations

import io
import logging
import math
import re
from datetime import datetime

from parse_result import Reading

log = logging.getLogger(__name__)

EXPECTED_FIELDS = 5
EXPECTED_UNIT = "wh"

TIMESTAMP_PATTERN = re.compile(
    r"^\d{4}-\d{2}-\d{2}(T\d{2}:\d{2}:\d{2}[+-]\d{2}:\d{2})?$"
)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class UsageFileError(Exception):
    """Base class for everything that can go wrong reading a usage file."""


class RowError(UsageFileError):
    """A single data row failed validation."""

    def __init__(self, row: int, reason: str):
        super().__init__(f"Row {row}: {reason}")
        self.row = row
        self.reason = reason


class SchemaError(RowError):
    """Wrong number of columns."""


class FormatError(RowError):
    """Malformed timestamp or non-numeric field."""


class RangeError(RowError):
    """Non-positive duration or negative consumption/generation."""


class UnitError(RowError):
    """Unit other than Wh."""


class EmptyFileError(UsageFileError):
    """Nothing but blank lines."""


class NoDataError(UsageFileError):
    """A header but no data rows."""


class ValidationError(UsageFileError):
    """One or more rows failed validation. Carries every failure."""

    def __init__(self, errors: list[RowError]):
        self.errors = list(errors)
        lines = "\n".join(str(e) for e in self.errors)
        super().__init__(f"Validation errors:\n{lines}")

    @property
    def rows(self) -> list[int]:
        return [e.row for e in self.errors]


# ---------------------------------------------------------------------------
# Row validation
# ---------------------------------------------------------------------------

def _parse_number(value: str) -> float | None:
    try:
        number = float(value)
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return number


def _is_real_timestamp(value: str) -> bool:
    try:
        datetime.fromisoformat(value)
    except ValueError:
        return False
    return True


def validate_row(fields: list[str], row: int) -> Reading:
    """
    Validate one split CSV record and return it as a Reading.

    Args:
        fields: Trimmed string fields of the record.
        row: Row number counted from the header (row 1), used in error messages.

    Raises:
        SchemaError, FormatError, RangeError or UnitError, checked in that order.
    """
    if len(fields) != EXPECTED_FIELDS:
        raise SchemaError(
            row,
            f"Expected {EXPECTED_FIELDS} columns, got {len(fields)}. "
            f"Columns: {' | '.join(fields)}",
        )

    timestamp, duration, unit, consumption, generation = fields

    if not TIMESTAMP_PATTERN.match(timestamp) or not _is_real_timestamp(timestamp):
        raise FormatError(
            row,
            f"Invalid datetime format: {timestamp}. "
            "Expected format: YYYY-MM-DD or YYYY-MM-DDTHH:mm:ss±HH:mm",
        )

    duration_num = _parse_number(duration)
    consumption_num = _parse_number(consumption)
    generation_num = _parse_number(generation)
    if duration_num is None or consumption_num is None or generation_num is None:
        raise FormatError(row, f"Invalid number format in row: {' | '.join(fields)}")

    if duration_num <= 0:
        raise RangeError(row, f"Duration must be positive, got: {duration_num:g}")

    if consumption_num < 0 or generation_num < 0:
        raise RangeError(row, "Consumption and generation must be non-negative")

    if unit.lower() != EXPECTED_UNIT:
        raise UnitError(row, f"Invalid unit: {unit}. Expected: {EXPECTED_UNIT}")

    return Reading(
        timestamp=timestamp,
        duration_seconds=duration_num,
        unit=unit,
        consumption_wh=consumption_num,
        generation_wh=generation_num,
    )


# ---------------------------------------------------------------------------
# File parsing
# ---------------------------------------------------------------------------

def decode_upload(file_content: bytes | str | io.IOBase) -> str:
    """Turn an upload into text. UTF-8 (BOM tolerated) first, then latin-1."""
    if isinstance(file_content, io.IOBase):
        file_content = file_content.read()
    if isinstance(file_content, str):
        return file_content
    try:
        return file_content.decode("utf-8-sig")
    except UnicodeDecodeError:
        return file_content.decode("latin-1")


def parse_usage_file(file_content: bytes | str | io.IOBase) -> list[Reading]:
    """
    Parse an interval usage CSV into validated readings.

    Args:
        file_content: CSV file content (bytes, string, or file-like object)

    Returns:
        Readings in file order (not yet grouped by date).

    Raises:
        EmptyFileError: the file holds nothing but blank lines.
        ValidationError: at least one data row is invalid.
        NoDataError: the header is the only non-blank line.
    """
    lines = decode_upload(file_content).splitlines()

    start = 0
    while start < len(lines) and not lines[start].strip():
        start += 1
    if start >= len(lines):
        raise EmptyFileError("File is empty or contains only empty lines")

    readings: list[Reading] = []
    errors: list[RowError] = []

    # start is the header, which is row 1; blank lines after it still count
    for index in range(start + 1, len(lines)):
        line = lines[index]
        if not line.strip():
            continue
        fields = [col.strip() for col in line.split(",")]
        try:
            readings.append(validate_row(fields, index - start + 1))
        except RowError as e:
            errors.append(e)

    if errors:
        log.debug("Rejected usage file: %d invalid rows", len(errors))
        raise ValidationError(errors)

    if not readings:
        raise NoDataError("No valid data found in file")

    log.debug("Parsed %d readings", len(readings))
    return readings
