"""Generation of the monthly, half-month and weekly calendar windows."""

from datetime import date, timedelta
from typing import List

from components.calendar.utils import days_in_month
from components.core.enums import PeriodType
from components.source_period.schemas import SourcePeriod


def monthly_periods(year: int) -> List[SourcePeriod]:
    periods = []
    for month in range(1, 13):
        periods.append(SourcePeriod(
            id=f"{year}M{month:02d}",
            period_type=PeriodType.MONTHLY,
            year=year,
            index=int(f"{year}{month:02d}"),
            start_date=date(year, month, 1),
            end_date=date(year, month, days_in_month(year, month)),
        ))
    return periods


def bi_monthly_periods(year: int) -> List[SourcePeriod]:
    """Two windows per month: the 1st to the 15th and the 16th to month end."""
    periods = []
    for month in range(1, 13):
        last_day = days_in_month(year, month)
        for half, start_day, end_day in (("A", 1, 15), ("B", 16, last_day)):
            periods.append(SourcePeriod(
                id=f"{year}BM{month:02d}{half}",
                period_type=PeriodType.BI_MONTHLY,
                year=year,
                index=int(f"{year}{month:02d}{1 if half == 'A' else 2}"),
                start_date=date(year, month, start_day),
                end_date=date(year, month, end_day),
            ))
    return periods


def weekly_periods(year: int) -> List[SourcePeriod]:
    """
    Sunday-to-Saturday weeks.

    A week belongs to the year its Saturday falls in, so a week spanning
    New Year is generated exactly once.
    """
    week_start = date(year, 1, 1)
    # Sunday on or before Jan 1; its Saturday always lands in this year
    week_start -= timedelta(days=(week_start.weekday() + 1) % 7)

    periods = []
    number = 1
    while (week_start + timedelta(days=6)).year == year:
        periods.append(SourcePeriod(
            id=f"{year}W{number:02d}",
            period_type=PeriodType.WEEKLY,
            year=year,
            index=int(f"{year}{number:02d}"),
            start_date=week_start,
            end_date=week_start + timedelta(days=6),
        ))
        week_start += timedelta(days=7)
        number += 1
    return periods


def generate_source_periods(start_year: int, end_year: int) -> List[SourcePeriod]:
    """All source periods for the inclusive year range, ordered by type then start."""
    periods = []
    for year in range(start_year, end_year + 1):
        periods.extend(monthly_periods(year))
        periods.extend(bi_monthly_periods(year))
        periods.extend(weekly_periods(year))
    return periods
