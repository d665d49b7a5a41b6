from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from datetime import date, datetime, timedelta, timezone

import pytest

from src.school_office.school_office.core.enums import AttendanceStatus, HolidayPolicy
from src.school_office.school_office.core.exceptions import DuplicateKeyConflict, HolidayConflict, InvalidRecord

MONDAY = date(2025, 1, 6)
SUNDAY = date(2025, 1, 5)
NURSERY = 1


def _submit(container, records, *, day=MONDAY, class_id=NURSERY, section="A", **kwargs):
    return container.attendance_service.submit_attendance(day, class_id, section, 7, records, **kwargs)


def test_first_submission_creates_sheet(school):
    sheet = _submit(school, [{"student_id": 1, "status": "Present"}, {"student_id": 2, "status": "Absent"}])

    assert sheet.key == (MONDAY, NURSERY, "A")
    assert [(e.student_id, e.status) for e in sheet.records] == [
        (1, AttendanceStatus.PRESENT),
        (2, AttendanceStatus.ABSENT),
    ]
    assert sheet.marked_by == 7
    assert sheet.is_holiday is False


def test_resubmission_replaces_records_in_place(school):
    first = _submit(school, [{"student_id": 1, "status": "Present"}, {"student_id": 2, "status": "Absent"}])
    second = _submit(school, [{"student_id": 1, "status": "Absent"}, {"student_id": 2, "status": "Present"}])

    sheets = school.attendance_repo.sheets
    assert len(sheets) == 1
    assert second.sheet_id == first.sheet_id
    stored = sheets[(MONDAY, NURSERY, "A")]
    assert len(stored.records) == 2
    assert stored.status_for(1).status == AttendanceStatus.ABSENT
    assert stored.status_for(2).status == AttendanceStatus.PRESENT
    assert stored.created_at == first.created_at


def test_missing_status_defaults_to_present(school):
    sheet = _submit(school, [{"student_id": 1}, (2, "", "came late")])

    assert sheet.status_for(1).status == AttendanceStatus.PRESENT
    assert sheet.status_for(2).status == AttendanceStatus.PRESENT
    assert sheet.status_for(2).remarks == "came late"


def test_status_is_case_insensitive(school):
    sheet = _submit(school, [{"studentId": 1, "status": "absent"}])
    assert sheet.status_for(1).status == AttendanceStatus.ABSENT


def test_duplicate_student_rejects_whole_submission(school):
    _submit(school, [{"student_id": 1, "status": "Present"}])

    with pytest.raises(InvalidRecord):
        _submit(school, [{"student_id": 2, "status": "Absent"}, {"student_id": 2, "status": "Present"}])

    stored = school.attendance_repo.sheets[(MONDAY, NURSERY, "A")]
    assert [e.student_id for e in stored.records] == [1]
    assert school.attendance_repo.writes == 1


def test_student_from_other_section_is_rejected(school):
    with pytest.raises(InvalidRecord):
        _submit(school, [{"student_id": 1}, {"student_id": 3}])
    assert school.attendance_repo.sheets == {}


def test_unknown_student_is_rejected(school):
    with pytest.raises(InvalidRecord):
        _submit(school, [{"student_id": 99}])


def test_inactive_student_is_not_on_roster(school):
    school.students_repo.set_active(2, is_active=False)
    with pytest.raises(InvalidRecord):
        _submit(school, [{"student_id": 2}])


@pytest.mark.parametrize("status", ["Late", "P", 3])
def test_unknown_status_is_rejected(school, status):
    with pytest.raises(InvalidRecord):
        _submit(school, [{"student_id": 1, "status": status}])
    assert school.attendance_repo.writes == 0


@pytest.mark.parametrize("class_id, section", [(42, "A"), (NURSERY, "E"), ("abc", "A"), (NURSERY, "")])
def test_bad_class_or_section_is_rejected(school, class_id, section):
    with pytest.raises(InvalidRecord):
        _submit(school, [], class_id=class_id, section=section)


def test_inactive_class_is_rejected(school):
    school.classes_repo.classes[NURSERY] = replace(school.classes_repo.classes[NURSERY], is_active=False)

    with pytest.raises(InvalidRecord):
        _submit(school, [{"student_id": 1}])
    assert school.attendance_repo.writes == 0


def test_malformed_record_is_rejected(school):
    with pytest.raises(InvalidRecord):
        _submit(school, ["not-a-record"])


def test_section_is_normalized(school):
    sheet = _submit(school, [{"student_id": 1}], section=" a ")
    assert sheet.section == "A"


def test_empty_submission_stores_empty_sheet(school):
    sheet = _submit(school, [])
    assert sheet.records == ()


@pytest.mark.parametrize(
    "value",
    [
        "2025-01-06",
        datetime(2025, 1, 6, 15, 45),
        datetime(2025, 1, 7, 2, 0, tzinfo=timezone(timedelta(hours=5, minutes=30))),
        "2025-01-06T20:30:00Z",
    ],
)
def test_date_is_reduced_to_calendar_day(school, value):
    _submit(school, [{"student_id": 1}], day=value)
    _submit(school, [{"student_id": 2}], day=MONDAY)

    assert list(school.attendance_repo.sheets) == [(MONDAY, NURSERY, "A")]


def test_invalid_date_is_rejected(school):
    with pytest.raises(InvalidRecord):
        _submit(school, [], day="06/01/2025")


def test_concurrent_submissions_keep_one_sheet(school):
    inputs = [
        [{"student_id": 1, "status": s1}, {"student_id": 2, "status": s2}]
        for s1 in ("Present", "Absent")
        for s2 in ("Present", "Absent")
    ] * 10

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(lambda records: _submit(school, records), inputs))

    assert len(school.attendance_repo.sheets) == 1
    stored = school.attendance_repo.sheets[(MONDAY, NURSERY, "A")]
    assert sorted(e.student_id for e in stored.records) == [1, 2]


def test_lost_insert_race_surfaces_without_retry(racing_school):
    with pytest.raises(DuplicateKeyConflict):
        _submit(racing_school, [{"student_id": 1}])
    assert racing_school.attendance_repo.writes == 1


def test_holiday_is_rejected_by_default(school):
    with pytest.raises(HolidayConflict) as exc:
        _submit(school, [{"student_id": 1}], day=SUNDAY)

    assert exc.value.reason == "Sunday"
    assert school.attendance_repo.writes == 0


def test_registered_holiday_is_rejected(school):
    school.holidays_repo.create(holiday_date=MONDAY, description="Makar Sankranti")

    with pytest.raises(HolidayConflict) as exc:
        _submit(school, [{"student_id": 1}])
    assert exc.value.reason == "Makar Sankranti"


def test_override_records_holiday_attendance(school):
    sheet = _submit(school, [{"student_id": 1, "status": "Present"}], day=SUNDAY, override_holiday=True)

    assert sheet.is_holiday is True
    assert sheet.holiday_reason == "Sunday"
    assert sheet.status_for(1).status == AttendanceStatus.PRESENT


def test_coerce_policy_marks_everyone_holiday(make_school):
    school = make_school(holiday_policy=HolidayPolicy.COERCE)

    sheet = _submit(school, [{"student_id": 1, "status": "Present"}, {"student_id": 2, "status": "Absent"}], day=SUNDAY)

    assert {e.status for e in sheet.records} == {AttendanceStatus.HOLIDAY}
    assert sheet.is_holiday is True


def test_allow_policy_stores_as_submitted(make_school):
    school = make_school(holiday_policy="allow")

    sheet = _submit(school, [{"student_id": 1, "status": "Absent"}], day=SUNDAY)

    assert sheet.status_for(1).status == AttendanceStatus.ABSENT
    assert sheet.is_holiday is True


def test_weekly_off_days_are_configurable(make_school):
    school = make_school(weekly_off_days=(5, 6))
    saturday = date(2025, 1, 4)

    with pytest.raises(HolidayConflict) as exc:
        _submit(school, [], day=saturday)
    assert exc.value.reason == "Saturday"


def test_get_sheet_normalizes_key(school):
    _submit(school, [{"student_id": 1}])

    assert school.attendance_service.get_sheet("2025-01-06", "1", "a") is not None
    assert school.attendance_service.get_sheet(MONDAY, NURSERY, "B") is None
