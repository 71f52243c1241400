import logging
from datetime import date, timedelta

from components.calendar.utils import (
    add_interval,
    adjust_for_weekend,
    days_in_range,
    month_segments,
    nth_occurrence,
    parse_cadence,
)
from components.core.enums import Cadence


def test_fixed_day_cadences():
    start = date(2025, 1, 1)
    assert add_interval(start, Cadence.WEEKLY) == date(2025, 1, 8)
    assert add_interval(start, Cadence.BIWEEKLY) == date(2025, 1, 15)
    assert add_interval(start, Cadence.SEMI_MONTHLY) == date(2025, 1, 16)
    assert add_interval(start, Cadence.WEEKLY, -2) == start - timedelta(days=14)


def test_month_stepping_clamps_to_last_day():
    assert add_interval(date(2025, 1, 31), Cadence.MONTHLY) == date(2025, 2, 28)
    assert add_interval(date(2024, 1, 31), Cadence.MONTHLY) == date(2024, 2, 29)
    assert add_interval(date(2025, 3, 31), Cadence.MONTHLY, -1) == date(2025, 2, 28)
    assert add_interval(date(2024, 2, 29), Cadence.ANNUALLY) == date(2025, 2, 28)
    assert add_interval(date(2025, 12, 15), Cadence.MONTHLY) == date(2026, 1, 15)


def test_anchor_relative_stepping_does_not_drift():
    anchor = date(2025, 1, 31)
    assert nth_occurrence(anchor, Cadence.MONTHLY, 1) == date(2025, 2, 28)
    assert nth_occurrence(anchor, Cadence.MONTHLY, 2) == date(2025, 3, 31)
    assert nth_occurrence(anchor, Cadence.MONTHLY, -2) == date(2024, 11, 30)


def test_weekend_adjustment():
    assert adjust_for_weekend(date(2025, 1, 4)) == date(2025, 1, 6)  # Saturday
    assert adjust_for_weekend(date(2025, 1, 5)) == date(2025, 1, 6)  # Sunday
    assert adjust_for_weekend(date(2025, 1, 6)) == date(2025, 1, 6)
    assert adjust_for_weekend(date(2025, 1, 3)) == date(2025, 1, 3)


def test_days_in_range_is_inclusive():
    assert days_in_range(date(2025, 1, 1), date(2025, 1, 31)) == 31
    assert days_in_range(date(2025, 1, 1), date(2025, 1, 1)) == 1
    assert days_in_range(date(2025, 1, 2), date(2025, 1, 1)) == 0


def test_month_segments_split_at_month_boundary():
    assert month_segments(date(2025, 1, 29), date(2025, 2, 4)) == [
        (date(2025, 1, 29), date(2025, 1, 31)),
        (date(2025, 2, 1), date(2025, 2, 4)),
    ]
    assert month_segments(date(2025, 3, 5), date(2025, 3, 9)) == [(date(2025, 3, 5), date(2025, 3, 9))]


def test_parse_cadence_aliases():
    assert parse_cadence("bi_weekly") == Cadence.BIWEEKLY
    assert parse_cadence("YEARLY") == Cadence.ANNUALLY
    assert parse_cadence("Semi-Monthly") == Cadence.SEMI_MONTHLY
    assert parse_cadence(Cadence.WEEKLY) == Cadence.WEEKLY


def test_unknown_cadence_defaults_to_monthly_with_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="components.calendar.utils"):
        assert parse_cadence("quarterly") == Cadence.MONTHLY
        assert parse_cadence(None) == Cadence.MONTHLY
    assert "Unknown cadence" in caplog.text
