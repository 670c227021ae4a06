import re
from typing import Iterable, List

from src.platform.exception.exceptions import ValidationError


SEAT_CODE_PATTERN = re.compile(r'^([A-Z]+)([1-9][0-9]*)$')
ROW_PATTERN = re.compile(r'^[A-Z]+$')


def normalize_seat_code(raw: str) -> str:
    return raw.strip().upper()


def split_seat_code(seat_code: str) -> tuple[str, int]:
    """'AB12' -> ('AB', 12)"""
    match = SEAT_CODE_PATTERN.match(seat_code)
    if not match:
        raise ValidationError(f'Invalid seat code: {seat_code!r}')
    return match.group(1), int(match.group(2))


def make_seat_code(row: str, column: int) -> str:
    return f'{row}{column}'


def normalize_seat_selection(raw_codes: Iterable[str], *, max_seats: int) -> List[str]:
    """
    Normalize a client seat selection, keeping the client's order.

    Raises:
        ValidationError: empty, duplicated, malformed, or too many seats
    """
    codes = [normalize_seat_code(code) for code in raw_codes]
    if not codes:
        raise ValidationError('At least one seat must be selected')

    duplicates = sorted({code for code in codes if codes.count(code) > 1})
    if duplicates:
        raise ValidationError(f'Duplicate seats in request: {", ".join(duplicates)}')

    malformed = [code for code in codes if not SEAT_CODE_PATTERN.match(code)]
    if malformed:
        raise ValidationError(f'Invalid seat codes: {", ".join(repr(c) for c in malformed)}')

    if len(codes) > max_seats:
        raise ValidationError(f'Maximum {max_seats} seats per booking')
    return codes
