from __future__ import annotations

from datetime import datetime, time, timedelta, timezone

import pytest

from src.timecard.timecard.core.enums import PunchState, PunchStatus
from src.timecard.timecard.core.exceptions import ValidationError, ValidationFailed
from src.timecard.timecard.jobs.model import Job, Shift
from src.timecard.timecard.leave.model import LeaveRequest
from src.timecard.timecard.punches.model import LocationSample, Punch

T0 = datetime(2024, 3, 4, 8, 0, tzinfo=timezone.utc)


def make_punch(**kwargs) -> Punch:
    data = dict(punch_id="p1", worker_id="w1", applicant_id="a1", job_id="j1", time_in=T0)
    data.update(kwargs)
    return Punch(**data)


def test_punch_requires_aware_times():
    with pytest.raises(ValidationError):
        make_punch(time_in=datetime(2024, 3, 4, 8, 0))


@pytest.mark.parametrize("delta", [timedelta(0), timedelta(minutes=-1)])
def test_punch_rejects_non_positive_interval(delta):
    with pytest.raises(ValidationFailed):
        make_punch(time_out=T0 + delta)


def test_punch_states():
    assert make_punch().state == PunchState.OPEN
    assert make_punch(time_out=T0 + timedelta(hours=1)).state == PunchState.CLOSED
    assert make_punch(status=PunchStatus.CANCELLED).state == PunchState.CANCELLED
    assert not make_punch(status=PunchStatus.CANCELLED).is_open
    approved = make_punch(
        time_out=T0 + timedelta(hours=1), status="Approved", approving_manager_id="m1", paid_hours=1.0
    )
    assert approved.state == PunchState.APPROVED
    assert approved.status is PunchStatus.APPROVED


def test_decided_punch_needs_manager():
    with pytest.raises(ValidationError):
        make_punch(time_out=T0 + timedelta(hours=1), status=PunchStatus.REJECTED)


def test_paid_hours_only_on_approved():
    with pytest.raises(ValidationError):
        make_punch(time_out=T0 + timedelta(hours=1), paid_hours=1.0)


def test_punch_dict_round_trip_keeps_samples():
    sample = LocationSample(latitude=41.88, longitude=-87.63, recorded_at=T0, within_geofence=True, distance_meters=12.5)
    punch = make_punch(time_out=T0 + timedelta(hours=2), location_samples=[sample], shift_slug="day")

    data = punch.to_dict()
    assert data["time_in"] == "2024-03-04T08:00:00Z"
    assert data["state"] == "closed"
    assert Punch.from_dict(data) == punch


def test_job_from_dict_parses_nested_shift_schedule():
    job = Job.from_dict(
        {
            "job_id": "j1",
            "title": "Warehouse",
            "location": {"latitude": "41.88", "longitude": "-87.63", "geo_fence_radius": 30, "grace_distance_feet": 20},
            "additional_config": {"geofence": True, "early_clock_in_minutes": "10"},
            "shifts": [
                {
                    "slug": "night",
                    "shift_start_date": "2024-03-01T00:00:00Z",
                    "shift_end_date": "2024-03-31T00:00:00Z",
                    "default_schedule": {
                        "friday": {"start": "22:00", "end": "06:00", "roster": [{"employee_id": 7, "date": "2024-03-08"}]}
                    },
                    "shift_roster": [1, 2],
                }
            ],
        },
        default_timezone="UTC",
    )

    assert job.timezone == "UTC"
    assert job.location.latitude == pytest.approx(41.88)
    assert job.additional_config.tracks_location
    assert job.additional_config.early_clock_in_minutes == 10
    night = job.shift_by_slug("night")
    assert night.shift_name == "night"
    assert night.shift_roster == ("1", "2")
    friday = night.schedule_for("friday")
    assert friday.start == time(22, 0)
    assert friday.roster[0].employee_id == "7"
    assert job.to_dict()["shifts"][0]["default_schedule"]["friday"]["end"] == "06:00"


def test_shift_must_start_before_end():
    with pytest.raises(ValidationFailed):
        Shift(slug="s", shift_name="S", shift_start_date=T0, shift_end_date=T0)


def test_shift_rejects_unknown_weekday():
    with pytest.raises(ValidationError):
        Shift(
            slug="s",
            shift_name="S",
            shift_start_date=T0,
            shift_end_date=T0 + timedelta(days=1),
            default_schedule={"funday": None},
        )


def test_leave_request_totals_and_status():
    leave = LeaveRequest.from_dict(
        {
            "leave_id": "l1",
            "worker_id": "w1",
            "start": "2024-03-04T00:00:00Z",
            "end": "2024-03-05T00:00:00Z",
            "pto_hours": 6,
            "company_hours": "2",
            "status": "Approved",
        }
    )

    assert leave.applicant_id == "w1"
    assert leave.leave_request_type == "PTO"
    assert leave.total_hours == timedelta(hours=8)
    assert leave.counts_toward_hours
    assert leave.to_dict()["status"] == "Approved"


def test_leave_request_rejects_reversed_range():
    with pytest.raises(ValidationFailed):
        LeaveRequest(
            leave_id="l1",
            worker_id="w1",
            applicant_id="w1",
            start=T0,
            end=T0 - timedelta(hours=1),
            leave_request_type="PTO",
        )
