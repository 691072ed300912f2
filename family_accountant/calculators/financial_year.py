"""
Australian Financial Year Helpers

The financial year runs 1 July to 30 June and is written "2024-25".
"""

import re
from datetime import date
from typing import Optional

_FY_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")


class InvalidFinancialYearError(ValueError):
    """A financial year string that is not of the form YYYY-YY."""
    pass


def financial_year_for(day: Optional[date] = None) -> str:
    """Financial year containing `day` (today by default)."""
    day = day or date.today()
    start = day.year if day.month >= 7 else day.year - 1
    return f"{start}-{str(start + 1)[-2:]}"


def parse_financial_year(financial_year: str) -> int:
    """
    Return the starting calendar year of a financial year string.

    Raises:
        InvalidFinancialYearError: If the string is malformed or the two
            halves are not consecutive years ("2024-26").
    """
    match = _FY_PATTERN.match((financial_year or "").strip())
    if not match:
        raise InvalidFinancialYearError(
            f"Invalid financial year '{financial_year}', expected format YYYY-YY (e.g. 2024-25)"
        )
    start = int(match.group(1))
    if match.group(2) != str(start + 1)[-2:]:
        raise InvalidFinancialYearError(
            f"Invalid financial year '{financial_year}': years must be consecutive"
        )
    return start


def financial_year_bounds(financial_year: str) -> tuple[date, date]:
    """First and last day of a financial year."""
    start = parse_financial_year(financial_year)
    return date(start, 7, 1), date(start + 1, 6, 30)


def previous_financial_years(financial_year: str, count: int) -> list[str]:
    """The `count` financial years before `financial_year`, newest first."""
    start = parse_financial_year(financial_year)
    return [
        f"{year}-{str(year + 1)[-2:]}"
        for year in range(start - 1, start - 1 - count, -1)
    ]


def days_until_eofy(today: Optional[date] = None) -> int:
    """Days from `today` until the next 30 June (0 on the day itself)."""
    today = today or date.today()
    year = today.year + 1 if today.month >= 7 else today.year
    return (date(year, 6, 30) - today).days
