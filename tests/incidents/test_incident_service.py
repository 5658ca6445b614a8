from __future__ import annotations

from datetime import datetime

import pytest

from fakes import InMemoryIncidents
from guard_system.common.web import Identity
from guard_system.core.enums import IncidentSeverity, IncidentStatus
from guard_system.core.exceptions import NotFoundError, ValidationError
from guard_system.incidents.service import IncidentService

NOW = datetime(2024, 5, 1, 1, 30, 0)
GUARD = Identity(user_id="g1", organization_id="org-1")


def _report(service, **kw):
    data = dict(incident_type="trespass", title=" Fence cut ", description="North fence", now=NOW)
    data.update(kw)
    return service.report(GUARD, **data)


def test_report_defaults():
    incident = _report(IncidentService(InMemoryIncidents()))

    assert incident.status == IncidentStatus.REPORTED
    assert incident.severity == IncidentSeverity.MEDIUM
    assert incident.incident_date == NOW
    assert incident.title == "Fence cut"
    assert incident.guard_id == "g1"


def test_report_keeps_given_date_and_location():
    incident = _report(
        IncidentService(InMemoryIncidents()),
        severity="high",
        incident_date="2024-04-30T23:10:00Z",
        location_latitude="40.5",
        location_longitude=-74.1,
        location_address="Gate 3",
    )
    assert incident.severity == IncidentSeverity.HIGH
    assert incident.incident_date == datetime(2024, 4, 30, 23, 10)
    assert incident.location_latitude == 40.5
    assert incident.location_address == "Gate 3"


def test_report_requires_type_title_description():
    with pytest.raises(ValidationError, match="incident_type, description"):
        _report(IncidentService(InMemoryIncidents()), incident_type="", description=None)


def test_list_filters_by_status():
    service = IncidentService(InMemoryIncidents())
    first = _report(service)
    _report(service, title="Alarm")
    service.update_status("org-1", first.id, status="investigating")

    assert [i.id for i in service.list_incidents("org-1", status="investigating")] == [first.id]
    assert len(service.list_incidents("org-1")) == 2


def test_update_status_errors():
    service = IncidentService(InMemoryIncidents())
    incident = _report(service)
    with pytest.raises(ValidationError):
        service.update_status("org-1", incident.id, status="forgotten")
    with pytest.raises(NotFoundError, match="Incident not found"):
        service.update_status("org-2", incident.id, status="closed")
