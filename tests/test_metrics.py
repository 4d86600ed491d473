from datetime import date, datetime

import pytest

from backend.database.models import District, Performance
from backend.inference.metrics import (
    shift_months,
    percent_change,
    round_half_up,
    format_month,
    format_date,
    state_average,
    get_district_data,
)
from backend.utils.errors import NotFoundError
from conftest import TEST_MONTH

PUNE = "पुणे (Pune)"


def add_row(session, district, month, households, avg_days=40.0, avg_wage=300.0, state="MH"):
    session.add(Performance(
        state_code=state,
        district_name=district,
        data_month=month,
        households_worked=households,
        active_workers=int(households * 0.8),
        women_workers=int(households * 0.5),
        avg_days_provided=avg_days,
        avg_wage=avg_wage,
        updated_at=datetime(2026, 10, 1, 9, 30),
    ))
    session.commit()


def stored(session, district, month=TEST_MONTH):
    return session.query(Performance).filter_by(
        state_code="MH", district_name=district, data_month=month
    ).one()


def test_shift_months():
    assert shift_months(date(2026, 9, 1), -1) == date(2026, 8, 1)
    assert shift_months(date(2026, 1, 1), -1) == date(2025, 12, 1)
    assert shift_months(date(2026, 9, 1), -12) == date(2025, 9, 1)
    assert shift_months(date(2025, 12, 1), 1) == date(2026, 1, 1)


def test_percent_change():
    assert percent_change(110, 100) == 10.0
    assert percent_change(90, 120) == -25.0
    assert percent_change(100, 0) == 0.0
    assert percent_change(100, None) == 0.0


def test_formatting():
    assert format_month(date(2026, 9, 1)) == "Sep 2026"
    assert format_date(datetime(2026, 10, 1, 9, 30)) == "01 Oct 2026"
    assert format_date(None) is None


def test_current_values_match_stored_row(seeded, session):
    row = stored(session, PUNE)
    data = get_district_data(session, "MH", PUNE)

    assert data["district"] == PUNE
    assert data["state"] == "महाराष्ट्र (Maharashtra)"
    assert data["current"] == {
        "householdsWorked": row.households_worked,
        "activeWorkers": row.active_workers,
        "womenWorkers": row.women_workers,
        "avgDays": round(row.avg_days_provided, 1),
        "avgWage": round(row.avg_wage, 2),
    }
    assert data["historical"] == [{"month": "Sep 2026", "value": row.households_worked}]


def test_missing_prior_periods_give_zero_change(seeded, session):
    row = stored(session, PUNE)
    comparison = get_district_data(session, "MH", PUNE)["comparison"]

    for period in ("lastMonth", "lastYear"):
        assert comparison[period]["change"] == 0
        assert comparison[period]["previousValue"] == row.households_worked


def test_state_average_is_mean_of_month_rows(seeded, session):
    rows = session.query(Performance).filter_by(state_code="MH", data_month=TEST_MONTH).all()
    assert len(rows) == len(seeded.districts)

    averages = state_average(session, "MH", TEST_MONTH)
    assert averages["households"] == pytest.approx(sum(r.households_worked for r in rows) / len(rows))
    assert averages["avg_days"] == pytest.approx(sum(r.avg_days_provided for r in rows) / len(rows))
    assert averages["avg_wage"] == pytest.approx(sum(r.avg_wage for r in rows) / len(rows))


def test_state_average_only_counts_same_month_and_state(session):
    add_row(session, "A (A)", TEST_MONTH, 1000, avg_days=40.0, avg_wage=300.0)
    add_row(session, "B (B)", TEST_MONTH, 3000, avg_days=50.0, avg_wage=320.0)
    add_row(session, "A (A)", date(2026, 8, 1), 99999)
    add_row(session, "K (K)", TEST_MONTH, 99999, state="KA")

    assert state_average(session, "MH", TEST_MONTH) == {
        "households": 2000.0,
        "avg_days": 45.0,
        "avg_wage": 310.0,
    }
    assert state_average(session, "MH", date(2020, 1, 1)) is None


def test_state_comparison_payload(session):
    add_row(session, "A (A)", TEST_MONTH, 1000, avg_days=40.04, avg_wage=300.004)
    add_row(session, "B (B)", TEST_MONTH, 3000, avg_days=50.0, avg_wage=320.0)

    above = get_district_data(session, "MH", "B (B)")["comparison"]["stateAvg"]
    assert above == {"value": 2000, "avgDays": 45.0, "avgWage": 310.0, "position": "above"}

    below = get_district_data(session, "MH", "A (A)")["comparison"]["stateAvg"]
    assert below["position"] == "below"


def test_prior_month_and_year_comparisons(session):
    add_row(session, "A (A)", TEST_MONTH, 1100)
    add_row(session, "A (A)", date(2026, 8, 1), 1000)
    add_row(session, "A (A)", date(2025, 9, 1), 1375)

    data = get_district_data(session, "MH", "A (A)")
    assert data["comparison"]["lastMonth"] == {"previousValue": 1000, "change": 10.0}
    assert data["comparison"]["lastYear"] == {"previousValue": 1375, "change": -20.0}
    # District name missing from the districts table falls back to the state code
    assert data["state"] == "MH"
    assert data["lastUpdated"] == "01 Oct 2026"
    assert [h["month"] for h in data["historical"]] == ["Sep 2025", "Aug 2026", "Sep 2026"]


def test_latest_month_is_used(session):
    add_row(session, "A (A)", date(2026, 8, 1), 1000)
    add_row(session, "A (A)", TEST_MONTH, 1200)
    session.add(District(state_code="MH", state_name="Maharashtra", district_name="A (A)"))
    session.commit()

    data = get_district_data(session, "MH", "A (A)")
    assert data["current"]["householdsWorked"] == 1200
    assert data["state"] == "Maharashtra"


def test_unknown_district_raises_not_found(seeded, session):
    with pytest.raises(NotFoundError) as excinfo:
        get_district_data(session, "MH", "Nowhere")
    assert excinfo.value.status_code == 404


def test_round_half_up():
    assert round_half_up(1000.5) == 1001
    assert round_half_up(2.5) == 3
    assert round_half_up(45.25, 1) == 45.3
    assert round_half_up(300.455, 2) == 300.46
    assert round_half_up(-12.345, 2) == -12.35


def test_current_values_are_rounded(session):
    add_row(session, "A (A)", TEST_MONTH, 1000, avg_days=41.26, avg_wage=300.456)

    assert get_district_data(session, "MH", "A (A)")["current"] == {
        "householdsWorked": 1000,
        "activeWorkers": 800,
        "womenWorkers": 500,
        "avgDays": 41.3,
        "avgWage": 300.46,
    }


def test_state_average_ties_round_up(session):
    add_row(session, "A (A)", TEST_MONTH, 1000, avg_days=40.0, avg_wage=300.0)
    add_row(session, "B (B)", TEST_MONTH, 1001, avg_days=50.5, avg_wage=300.02)

    state_avg = get_district_data(session, "MH", "A (A)")["comparison"]["stateAvg"]
    assert state_avg["value"] == 1001
    assert state_avg["avgDays"] == 45.3
    assert state_avg["avgWage"] == 300.01
