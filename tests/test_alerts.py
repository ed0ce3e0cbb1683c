from datetime import timedelta

import pytest

from solarhub.errors import AlreadyResolved, InvalidFilter
from solarhub.models.enums import AlertFilter, AlertSeverity, AlertType, SystemStatus
from solarhub.services import alerts as alert_service
from solarhub.services.alerts import (
    MISSING_PROJECT_TITLE,
    classify_record,
    describe_alerts,
    filter_alerts,
    raise_alerts,
    resolve,
    summarize,
)

from .conftest import NOW, TODAY


def _mixed_alerts(make_alert):
    return [
        make_alert(created_at=NOW - timedelta(hours=5), severity=AlertSeverity.HIGH),
        make_alert(created_at=NOW - timedelta(hours=1), resolved=True, resolved_at=NOW),
        make_alert(created_at=NOW - timedelta(hours=3), severity=AlertSeverity.MEDIUM),
        make_alert(created_at=NOW - timedelta(hours=2), severity=AlertSeverity.LOW),
        make_alert(created_at=NOW - timedelta(hours=4), severity=AlertSeverity.HIGH, resolved=True, resolved_at=NOW),
    ]


def test_resolve_sets_flag_and_timestamp(make_alert, clock):
    alert = make_alert()
    clock.advance(minutes=10)

    resolve(alert, clock=clock)

    assert alert.resolved is True
    assert alert.resolved_at == clock.now()
    assert alert in filter_alerts([alert], "resolved")
    assert alert not in filter_alerts([alert], "active")


def test_second_resolve_rejected_and_keeps_timestamp(make_alert, clock):
    alert = make_alert()
    resolve(alert, clock=clock)
    first_resolved_at = alert.resolved_at
    clock.advance(days=1)

    with pytest.raises(AlreadyResolved):
        resolve(alert, clock=clock)

    assert alert.resolved is True
    assert alert.resolved_at == first_resolved_at


def test_resolved_at_present_iff_resolved(make_alert, clock):
    alerts = _mixed_alerts(make_alert)
    resolve(alerts[0], clock=clock)
    for alert in alerts:
        assert (alert.resolved_at is not None) == alert.resolved


def test_active_and_resolved_partition_all(make_alert):
    alerts = _mixed_alerts(make_alert)

    active = filter_alerts(alerts, AlertFilter.ACTIVE)
    resolved = filter_alerts(alerts, AlertFilter.RESOLVED)

    assert not set(map(id, active)) & set(map(id, resolved))
    assert set(map(id, active)) | set(map(id, resolved)) == set(map(id, alerts))
    for view in (active, resolved, filter_alerts(alerts, "all")):
        stamps = [a.created_at for a in view]
        assert stamps == sorted(stamps, reverse=True)


def test_all_filter_returns_everything_newest_first(make_alert):
    alerts = _mixed_alerts(make_alert)
    result = filter_alerts(alerts, "all")
    assert len(result) == 5
    assert result[0].created_at == NOW - timedelta(hours=1)


def test_default_filter_is_active(make_alert):
    alerts = _mixed_alerts(make_alert)
    assert all(not a.resolved for a in filter_alerts(alerts))


def test_unknown_filter_rejected(make_alert):
    with pytest.raises(InvalidFilter):
        filter_alerts(_mixed_alerts(make_alert), "open")


def test_summary_ignores_filter_view(make_alert):
    alerts = _mixed_alerts(make_alert)
    filter_alerts(alerts, "resolved")

    summary = summarize(alerts)

    assert summary.high == 1
    assert summary.medium == 1
    assert summary.low == 1
    assert summary.resolved == 2
    assert summary.active == 3


def test_describe_alerts_degrades_missing_project(make_alert, make_client, make_project):
    client = make_client(name="Joao Santos")
    project = make_project(client, title="Residential 8 kWp")
    known = make_alert(project_id=project.id)
    orphan = make_alert(project_id="gone")

    rows = describe_alerts([known, orphan], [project])

    assert rows[0]["project_title"] == "Residential 8 kWp"
    assert rows[0]["client_name"] == "Joao Santos"
    assert rows[1]["project_title"] == MISSING_PROJECT_TITLE
    assert rows[1]["client_name"] == ""
    assert rows[1]["type"] == "low_generation"


def test_classify_critical_is_system_failure(make_record):
    draft = classify_record(make_record(TODAY, generation=30, status=SystemStatus.CRITICAL), power_kwp=5)
    assert draft.type == AlertType.SYSTEM_FAILURE
    assert draft.severity == AlertSeverity.HIGH


@pytest.mark.parametrize(
    "generation,severity",
    [(12.0, AlertSeverity.MEDIUM), (5.0, AlertSeverity.HIGH)],
)
def test_classify_low_generation(make_record, generation, severity):
    # 5 kWp x 4.5 h = 22.5 kWh expected, threshold 13.5 kWh
    record = make_record(TODAY, generation=generation, consumption=1)
    draft = classify_record(record, power_kwp=5, peak_sun_hours=4.5, low_generation_ratio=0.6)
    assert draft.type == AlertType.LOW_GENERATION
    assert draft.severity == severity


def test_classify_high_consumption(make_record):
    record = make_record(TODAY, generation=20, consumption=40)
    draft = classify_record(record, power_kwp=5, peak_sun_hours=4.5, high_consumption_ratio=1.5)
    assert draft.type == AlertType.HIGH_CONSUMPTION
    assert draft.severity == AlertSeverity.MEDIUM


def test_classify_alert_status_is_maintenance(make_record):
    record = make_record(TODAY, generation=20, consumption=10, status=SystemStatus.ALERT)
    draft = classify_record(record, power_kwp=5, peak_sun_hours=4.5)
    assert draft.type == AlertType.MAINTENANCE
    assert draft.severity == AlertSeverity.LOW


def test_classify_normal_day_returns_none(make_record):
    record = make_record(TODAY, generation=22, consumption=15)
    assert classify_record(record, power_kwp=5, peak_sun_hours=4.5) is None


def test_classify_without_power_skips_low_generation(make_record):
    record = make_record(TODAY, generation=0.5, consumption=0.1)
    assert classify_record(record) is None


def test_raise_alerts_builds_unresolved_alerts(make_client, make_project, make_record, clock):
    project = make_project(make_client(), power_kwp=5)
    records = [
        make_record(TODAY, generation=2, consumption=1, project=project),
        make_record(TODAY, generation=22, consumption=10, project=project),
        make_record(TODAY, status=SystemStatus.CRITICAL),  # no project
        make_record(TODAY, status=SystemStatus.CRITICAL, project=project),
    ]

    created = raise_alerts(records, [project], clock=clock)

    assert [a.type for a in created] == [AlertType.LOW_GENERATION, AlertType.SYSTEM_FAILURE]
    for alert in created:
        assert alert.project_id == project.id
        assert alert.resolved is False
        assert alert.resolved_at is None
        assert alert.created_at == NOW


def test_type_labels_cover_all_types():
    assert set(alert_service.TYPE_LABELS) == set(AlertType)


def test_severity_labels_cover_all_severities():
    assert set(alert_service.SEVERITY_LABELS) == set(AlertSeverity)


def test_alert_dict_carries_labels(make_alert):
    data = alert_service.alert_to_dict(make_alert(severity=AlertSeverity.HIGH, type=AlertType.MAINTENANCE))
    assert data["type_label"] == "Maintenance"
    assert data["severity_label"] == "High"
