"""Employee number format: ``{departmentCode}{year}{sequence:04d}``.

Example: the first cardiology hire of 2024 is ``CARD20240001``.
"""

from __future__ import annotations

import re
from typing import Optional

from ..core.constants import EMPLOYEE_SEQUENCE_WIDTH
from ..core.exceptions import SequenceExhaustedError, ValidationError

DEPARTMENT_CODE_RE = re.compile(r"^[A-Z0-9]{2,10}$")
MAX_SEQUENCE = 10 ** EMPLOYEE_SEQUENCE_WIDTH - 1


def normalize_department_code(code: str) -> str:
    value = (code or "").strip().upper()
    if not DEPARTMENT_CODE_RE.match(value):
        raise ValidationError(
            "Invalid department code",
            errors=[{"field": "code", "message": "2-10 uppercase letters or digits", "code": "pattern_mismatch"}],
        )
    return value


def employee_number_prefix(department_code: str, year: int) -> str:
    return f"{normalize_department_code(department_code)}{int(year):04d}"


def in_sequence(employee_number: str, prefix: str) -> bool:
    """True when the number is ``prefix`` followed by exactly the sequence digits."""
    tail = employee_number[len(prefix):]
    return employee_number.startswith(prefix) and len(tail) == EMPLOYEE_SEQUENCE_WIDTH and tail.isdigit()


def parse_sequence(employee_number: str, prefix: str) -> int:
    if not in_sequence(employee_number, prefix):
        raise ValueError(f"Malformed employee number for {prefix}: {employee_number!r}")
    return int(employee_number[len(prefix):])


def next_employee_number(department_code: str, year: int, last_number: Optional[str]) -> str:
    """Next number after ``last_number`` (the greatest existing one for the prefix).

    Raises SequenceExhaustedError instead of wrapping past 9999.
    """

    prefix = employee_number_prefix(department_code, year)
    if not last_number:
        return f"{prefix}{1:0{EMPLOYEE_SEQUENCE_WIDTH}d}"

    seq = parse_sequence(last_number, prefix) + 1
    if seq > MAX_SEQUENCE:
        raise SequenceExhaustedError(f"Employee numbers for {prefix} are exhausted")
    return f"{prefix}{seq:0{EMPLOYEE_SEQUENCE_WIDTH}d}"
