import random
from datetime import date

from backend.database.models import District, Performance
from backend.helpers.synthetic_data import (
    DATA_SOURCE,
    MAHARASHTRA_DISTRICTS,
    SyntheticDataGenerator,
    target_month,
    unique_names,
)
from conftest import TEST_MONTH


def counts(session):
    return session.query(District).count(), session.query(Performance).count()


def test_target_month_is_previous_calendar_month():
    assert target_month(date(2026, 10, 16)) == date(2026, 9, 1)
    assert target_month(date(2026, 1, 31)) == date(2025, 12, 1)
    assert target_month(date(2026, 3, 1)) == date(2026, 2, 1)


def test_unique_names_keeps_first_seen_order():
    assert unique_names(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]


def test_seeds_every_district_once(generator, session):
    result = generator.initialize(month=TEST_MONTH)
    expected = len(unique_names(MAHARASHTRA_DISTRICTS))

    assert result == {"districts_inserted": expected, "performance_inserted": expected}
    assert counts(session) == (expected, expected)
    assert {d.state_code for d in session.query(District)} == {"MH"}


def test_seeding_is_idempotent(generator, session):
    generator.initialize(month=TEST_MONTH)
    before = counts(session)

    result = generator.initialize(month=TEST_MONTH)

    assert result == {"districts_inserted": 0, "performance_inserted": 0}
    assert counts(session) == before


def test_duplicate_names_are_dropped_before_insert(database, session):
    generator = SyntheticDataGenerator(
        database, rng=random.Random(1), max_workers=1, districts=["A (A)", "B (B)", "A (A)"]
    )
    assert generator.seed_districts() == 2
    assert sorted(name for (name,) in session.query(District.district_name)) == ["A (A)", "B (B)"]


def test_only_missing_districts_are_added(database, session):
    SyntheticDataGenerator(database, max_workers=1, districts=["A (A)"]).seed_districts()
    grown = SyntheticDataGenerator(database, max_workers=1, districts=["A (A)", "B (B)"])
    assert grown.seed_districts() == 1


def test_generated_values_stay_in_bounds(seeded, session):
    rows = session.query(Performance).all()
    assert rows

    for row in rows:
        assert row.data_month == TEST_MONTH
        assert row.data_source == DATA_SOURCE
        assert 60000 <= row.households_worked < 90000
        assert int(row.households_worked * 0.7) <= row.active_workers <= int(row.households_worked * 0.9)
        assert int(row.active_workers * 0.55) <= row.women_workers <= int(row.active_workers * 0.7)
        assert row.sc_workers == int(row.active_workers * 0.2)
        assert row.st_workers == int(row.active_workers * 0.15)
        assert 35 <= row.avg_days_provided <= 55
        assert 285 <= row.avg_wage <= 335
        assert 800 <= row.completed_works < 1400
        assert 300 <= row.ongoing_works < 700
        assert row.total_persondays == int(row.households_worked * row.avg_days_provided)
        assert row.households_worked * 300 * 35 <= row.total_expenditure <= row.households_worked * 300 * 55


def test_generate_month_skips_existing_row(seeded):
    assert seeded.generate_month("पुणे (Pune)", TEST_MONTH) is False
    assert seeded.generate_month("पुणे (Pune)", date(2026, 8, 1)) is True


def test_one_failing_district_does_not_stop_the_others(database, session):
    class FlakyGenerator(SyntheticDataGenerator):
        def generate_month(self, district_name, month):
            if district_name == "B (B)":
                raise RuntimeError("boom")
            return super().generate_month(district_name, month)

    generator = FlakyGenerator(database, max_workers=1, districts=["A (A)", "B (B)", "C (C)"])
    generator.seed_districts()

    assert generator.generate_for_state(TEST_MONTH) == 2
    names = sorted(name for (name,) in session.query(Performance.district_name))
    assert names == ["A (A)", "C (C)"]


def test_generate_without_districts_inserts_nothing(generator):
    assert generator.generate_for_state(TEST_MONTH) == 0
