from datetime import timedelta

import pytest

from solarhub.errors import InvalidWindow
from solarhub.services import metrics
from solarhub.services.clock import FixedClock
from solarhub.services.metrics import aggregate, filter_window, find_duplicate_dates, sort_recent_first

from .conftest import NOW, TODAY, days_ago


def test_seven_day_window_scenario(make_record, clock):
    records = [
        make_record(TODAY, generation=10),
        make_record(days_ago(1), generation=8),
        make_record(days_ago(10), generation=5),
    ]

    summary = aggregate(records, 7, clock=clock)

    assert summary.record_count == 2
    assert summary.total_generation == 18
    assert summary.avg_daily_generation == 9
    assert days_ago(10) not in [r.date for r in summary.records]


@pytest.mark.parametrize("window", [7, 30, 90])
def test_window_keeps_only_records_after_cutoff(make_record, clock, window):
    records = [make_record(days_ago(n)) for n in range(0, 120, 3)]
    cutoff = NOW - timedelta(days=window)

    kept = aggregate(records, window, clock=clock).records

    assert kept
    for record in kept:
        assert metrics._as_instant(record.date) >= cutoff
    dropped = [r for r in records if r not in kept]
    for record in dropped:
        assert metrics._as_instant(record.date) < cutoff


def test_record_exactly_window_days_old_is_dropped_after_midnight(make_record, clock):
    # Cutoff keeps the current time-of-day, so midnight of the boundary day is before it
    record = make_record(days_ago(7))
    assert filter_window([record], 7, now=clock.now()) == []


def test_record_on_boundary_kept_at_midnight(make_record):
    midnight = FixedClock(NOW.replace(hour=0, minute=0, second=0))
    record = make_record(days_ago(7))
    assert filter_window([record], 7, now=midnight.now()) == [record]


def test_future_records_are_kept(make_record, clock):
    future = make_record(TODAY + timedelta(days=3), generation=4)
    summary = aggregate([future], 7, clock=clock)
    assert summary.records == [future]
    assert summary.total_generation == 4


def test_empty_window_guards_division(make_record, clock):
    summary = aggregate([make_record(days_ago(40))], 7, clock=clock)

    assert summary.record_count == 0
    assert summary.avg_daily_generation == 0
    assert summary.avg_daily_consumption == 0
    assert summary.estimated_monthly_savings == 0
    assert summary.efficiency_percent == 0


def test_efficiency_floors_zero_consumption_to_one(make_record, clock):
    records = [make_record(TODAY, generation=12.5, consumption=0)]
    summary = aggregate(records, 7, clock=clock)
    assert summary.efficiency_percent == pytest.approx(1250.0)


def test_totals_and_projection(make_record, clock):
    records = [
        make_record(TODAY, generation=20, consumption=10, savings=7.5),
        make_record(days_ago(2), generation=10, consumption=30, savings=5.0),
    ]

    summary = aggregate(records, 30, clock=clock, unit_price=0.75)

    assert summary.total_consumption == 40
    assert summary.total_savings == pytest.approx(12.5)
    assert summary.avg_daily_consumption == 20
    assert summary.efficiency_percent == pytest.approx(75.0)
    # Projection from average generation, independent of measured savings
    assert summary.estimated_monthly_savings == pytest.approx(15 * 30 * 0.75)


def test_projection_uses_configured_unit_price(monkeypatch, make_record, clock):
    monkeypatch.setattr(metrics.settings, "unit_price_per_kwh", 1.0)
    summary = aggregate([make_record(TODAY, generation=10)], 7, clock=clock)
    assert summary.estimated_monthly_savings == pytest.approx(300.0)


def test_duplicate_dates_are_summed(make_record, clock):
    records = [make_record(TODAY, generation=6), make_record(TODAY, generation=4)]

    summary = aggregate(records, 7, clock=clock)

    assert summary.record_count == 2
    assert summary.total_generation == 10
    assert find_duplicate_dates(records) == {(None, TODAY): 2}


def test_records_sorted_recent_first_and_stable(make_record):
    first = make_record(days_ago(1), generation=1)
    second = make_record(days_ago(1), generation=2)
    newest = make_record(TODAY)
    oldest = make_record(days_ago(5))

    ordered = sort_recent_first([first, oldest, second, newest])

    assert ordered == [newest, first, second, oldest]


def test_same_input_same_output(make_record, clock):
    records = [make_record(days_ago(n), generation=n + 1) for n in range(10)]
    assert aggregate(records, 30, clock=clock).to_dict() == aggregate(records, 30, clock=clock).to_dict()


@pytest.mark.parametrize("window", [0, 1, 14, 365, "abc", None])
def test_window_outside_choices_rejected(window, clock):
    with pytest.raises(InvalidWindow):
        aggregate([], window, clock=clock)


def test_unvalidated_window_allows_custom_range(make_record, clock):
    records = [make_record(TODAY), make_record(days_ago(12))]
    assert aggregate(records, 14, clock=clock, validate=False).record_count == 2
