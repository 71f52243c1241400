from datetime import date, timedelta

from components.core.enums import PeriodType
from components.source_period.generator import generate_source_periods, weekly_periods


def test_counts_for_one_year():
    periods = generate_source_periods(2025, 2025)

    by_type = {t: [p for p in periods if p.period_type == t] for t in PeriodType}
    assert len(by_type[PeriodType.MONTHLY]) == 12
    assert len(by_type[PeriodType.BI_MONTHLY]) == 24
    assert len(by_type[PeriodType.WEEKLY]) == 52


def test_identifiers_and_boundaries():
    periods = {p.id: p for p in generate_source_periods(2025, 2025)}

    assert periods["2025M02"].end_date == date(2025, 2, 28)
    assert periods["2025M02"].index == 202502
    assert periods["2025BM01A"].start_date == date(2025, 1, 1)
    assert periods["2025BM01A"].end_date == date(2025, 1, 15)
    assert periods["2025BM02B"].start_date == date(2025, 2, 16)
    assert periods["2025BM02B"].end_date == date(2025, 2, 28)
    assert periods["2025BM01A"].index == 2025011
    assert periods["2025W01"].start_date == date(2024, 12, 29)
    assert periods["2025W01"].end_date == date(2025, 1, 4)


def test_weeks_start_on_sunday_and_never_repeat_across_years():
    weeks_2025 = weekly_periods(2025)
    weeks_2026 = weekly_periods(2026)

    assert all(w.start_date.weekday() == 6 for w in weeks_2025 + weeks_2026)
    assert weeks_2025[-1].end_date + timedelta(days=1) == weeks_2026[0].start_date
    for previous, current in zip(weeks_2025, weeks_2025[1:]):
        assert previous.end_date + timedelta(days=1) == current.start_date
