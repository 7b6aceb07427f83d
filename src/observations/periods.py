"""
Calendar helpers for "M-YYYY" period keys.
"""

MONTH_NAMES = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]


def parse_period_key(period_key: str) -> tuple[int, int]:
    """Split a period key into (month, year)

    Raises:
        ValueError: If the key is not of the form "M-YYYY" or "MM-YYYY"
    """
    try:
        month_part, year_part = period_key.split("-")
        month, year = int(month_part), int(year_part)
    except (AttributeError, ValueError):
        raise ValueError(f"Invalid period key: {period_key!r}") from None

    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month in period key: {period_key!r}")

    return month, year


def make_period_key(month: int, year: int) -> str:
    return f"{month}-{year}"


def next_period_keys(last_key: str, count: int) -> list[str]:
    """Continue the calendar sequence after last_key

    Args:
        last_key: Last observed period, e.g. "12-2024"
        count: Number of labels to generate

    Returns:
        Period keys following last_key, rolling month 13 over to January
        of the next year ("12-2024" -> "1-2025", "2-2025", ...)
    """
    month, year = parse_period_key(last_key)

    keys = []
    for offset in range(1, count + 1):
        next_month = month + offset
        next_year = year
        while next_month > 12:
            next_month -= 12
            next_year += 1
        keys.append(make_period_key(next_month, next_year))

    return keys


def format_period(period_key: str) -> str:
    """Human-readable period label ("4-2024" -> "April 2024")

    Keys that are not calendar periods are returned unchanged.
    """
    try:
        month, year = parse_period_key(period_key)
    except ValueError:
        return period_key
    return f"{MONTH_NAMES[month - 1]} {year}"
