import math
from typing import Optional, Tuple, Union

from app.errors import InvalidArgument


OFFSET_LIMIT_MESSAGE = "Les paramètres offset et limit doivent être des nombres valides et positifs."
LIMIT_MESSAGE = "Le paramètre limit doit être un nombre valide et supérieur à 0."
CURSOR_MESSAGE = "Le paramètre cursor doit être un identifiant numérique."
PAGE_LIMIT_MESSAGE = "Les paramètres page et limit doivent être des nombres valides et positifs."

RawNumber = Union[int, str, None]

# Signed 64-bit range accepted by LIMIT/OFFSET in SQLite and PostgreSQL
MAX_BIGINT = 2 ** 63 - 1
MIN_BIGINT = -(2 ** 63)

# Range of the INTEGER id and quantity columns
MAX_INTEGER = 2 ** 31 - 1
MIN_INTEGER = -(2 ** 31)


def parse_int(value: RawNumber) -> Optional[int]:
    """Parse a query-string integer; ``None`` when it is not one or does not fit in 64 bits."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        parsed = value
    else:
        try:
            parsed = int(str(value).strip())
        except ValueError:
            return None
    if not MIN_BIGINT <= parsed <= MAX_BIGINT:
        return None
    return parsed


def fits_integer_column(value: int) -> bool:
    return MIN_INTEGER <= value <= MAX_INTEGER


def parse_offset_limit(offset: RawNumber, limit: RawNumber) -> Tuple[int, int]:
    parsed_offset = parse_int(offset)
    parsed_limit = parse_int(limit)

    if parsed_offset is None or parsed_limit is None or parsed_offset < 0 or parsed_limit <= 0:
        raise InvalidArgument(OFFSET_LIMIT_MESSAGE)

    return parsed_offset, parsed_limit


def parse_limit(limit: RawNumber, message: str = LIMIT_MESSAGE) -> int:
    parsed = parse_int(limit)
    if parsed is None or parsed <= 0:
        raise InvalidArgument(message)
    return parsed


def parse_cursor(cursor: RawNumber) -> Optional[int]:
    # Absent and empty cursors both mean "from the start"
    if cursor is None or (isinstance(cursor, str) and not cursor.strip()):
        return None

    parsed = parse_int(cursor)
    if parsed is None:
        raise InvalidArgument(CURSOR_MESSAGE)
    return parsed


def parse_page_limit(page: RawNumber, limit: RawNumber) -> Tuple[int, int]:
    parsed_page = parse_int(page)
    parsed_limit = parse_int(limit)

    if parsed_page is None or parsed_limit is None or parsed_page < 1 or parsed_limit <= 0:
        raise InvalidArgument(PAGE_LIMIT_MESSAGE)

    # page and limit fit on their own, the offset they produce must too
    if page_offset(parsed_page, parsed_limit) > MAX_BIGINT:
        raise InvalidArgument(PAGE_LIMIT_MESSAGE)

    return parsed_page, parsed_limit


def page_number(offset: int, limit: int) -> int:
    return offset // limit + 1


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit)


def page_offset(page: int, limit: int) -> int:
    return (page - 1) * limit
