from __future__ import annotations

from datetime import date

import pytest

from src.school_office.school_office.core.enums import Gender, Role
from src.school_office.school_office.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.school_office.school_office.students.model import AdmissionForm

TODAY = date(2025, 6, 2)


def _form(**overrides) -> AdmissionForm:
    fields = dict(
        name="Diya Sharma",
        class_id=1,
        date_of_birth="2021-08-19",
        address="4 Lake View",
        mobiles=["9811122233"],
        section="A",
        father_name="Ravi Sharma",
        father_aadhaar="123412341234",
    )
    fields.update(overrides)
    return AdmissionForm(**fields)


def test_admission_issues_next_registration_number(school):
    svc = school.student_service

    first = svc.admit(current_role=Role.STAFF, form=_form(), today=TODAY)
    second = svc.admit(current_role=Role.ADMIN, form=_form(name="Kabir"), today=TODAY)

    assert first.registration_number == "0215"
    assert second.registration_number == "0216"
    assert school.students_repo.get_by_id(first.student_id).name == "Diya Sharma"


def test_manual_registration_number_skips_sequence(school):
    student = school.student_service.admit(
        current_role=Role.STAFF, form=_form(registration_number=" 0100 "), today=TODAY
    )

    assert student.registration_number == "0100"
    assert school.sequences_repo.increments == 0


def test_manual_registration_number_must_be_unique(school):
    # seeded Asha holds 0001
    with pytest.raises(ValidationError):
        school.student_service.admit(current_role=Role.STAFF, form=_form(registration_number="0001"), today=TODAY)


def test_admission_fields_are_normalized(school):
    student = school.student_service.admit(
        current_role=Role.STAFF,
        form=_form(section="b", gender="Female", emails=["", "parent@example.com"], mobiles=["9811122233", " "]),
        today=TODAY,
    )

    assert student.section == "B"
    assert student.gender == Gender.FEMALE
    assert student.emails == ("parent@example.com",)
    assert student.mobiles == ("9811122233",)
    assert student.date_of_admission == TODAY
    assert student.date_of_birth == date(2021, 8, 19)
    assert student.father.aadhaar_number == "123412341234"


@pytest.mark.parametrize(
    "overrides",
    [
        {"name": " "},
        {"address": ""},
        {"class_id": 99},
        {"section": "E"},
        {"mobiles": []},
        {"mobiles": ["12345"]},
        {"father_aadhaar": "1234"},
        {"date_of_birth": "not a date"},
        {"date_of_admission": "2025-06-03"},
        {"emails": ["nope"]},
        {"gender": "Unknown"},
    ],
)
def test_invalid_admission_issues_no_number(school, overrides):
    with pytest.raises(ValidationError):
        school.student_service.admit(current_role=Role.STAFF, form=_form(**overrides), today=TODAY)
    assert school.sequences_repo.increments == 0


def test_attendance_staff_cannot_admit(school):
    with pytest.raises(AuthorizationError):
        school.student_service.admit(current_role=Role.ATTENDANCE_STAFF, form=_form(), today=TODAY)


def test_roll_number_collision_is_a_validation_error(school):
    svc = school.student_service
    svc.admit(current_role=Role.STAFF, form=_form(roll_number="7"), today=TODAY)

    with pytest.raises(ValidationError):
        svc.admit(current_role=Role.STAFF, form=_form(name="Kabir", roll_number="7"), today=TODAY)


def test_next_registration_number_preview(school):
    assert school.student_service.next_registration_number() == "0215"


def test_get_missing_student(school):
    with pytest.raises(NotFoundError):
        school.student_service.get(404)


def test_deactivated_student_leaves_roster(school):
    svc = school.student_service
    svc.set_active(current_role=Role.ADMIN, student_id=2, is_active=False)

    assert [s.name for s in svc.roster(class_id=1, section="A")] == ["Asha"]
    assert len(svc.list_students(class_id=1, active_only=False)) == 3


def test_only_admin_changes_student_status(school):
    with pytest.raises(AuthorizationError):
        school.student_service.set_active(current_role=Role.STAFF, student_id=1, is_active=False)
    with pytest.raises(NotFoundError):
        school.student_service.set_active(current_role=Role.ADMIN, student_id=404, is_active=False)


def test_update_overwrites_fields_and_keeps_number(school):
    updated = school.student_service.update(
        current_role=Role.STAFF,
        student_id=2,
        form=_form(name="Bilal Khan", section="b", roll_number="4"),
        today=TODAY,
    )

    assert updated.registration_number == "0002"
    stored = school.students_repo.get_by_id(2)
    assert (stored.name, stored.section, stored.roll_number) == ("Bilal Khan", "B", "4")
    assert school.sequences_repo.increments == 0


def test_update_may_change_registration_number(school):
    school.student_service.update(
        current_role=Role.STAFF, student_id=2, form=_form(registration_number="0950"), today=TODAY
    )

    assert school.students_repo.get_by_registration_number("0950").student_id == 2


def test_update_keeps_own_number_when_resubmitted(school):
    updated = school.student_service.update(
        current_role=Role.STAFF, student_id=2, form=_form(registration_number="0002"), today=TODAY
    )
    assert updated.registration_number == "0002"


def test_update_rejects_number_of_another_student(school):
    with pytest.raises(ValidationError):
        school.student_service.update(
            current_role=Role.STAFF, student_id=2, form=_form(registration_number="0001"), today=TODAY
        )
    assert school.students_repo.get_by_id(2).registration_number == "0002"


def test_update_validates_like_admission(school):
    with pytest.raises(ValidationError):
        school.student_service.update(current_role=Role.STAFF, student_id=2, form=_form(mobiles=[]), today=TODAY)
    assert school.students_repo.get_by_id(2).name == "Bilal"


def test_update_keeps_status_and_checks_access(school):
    svc = school.student_service
    svc.set_active(current_role=Role.ADMIN, student_id=2, is_active=False)
    svc.update(current_role=Role.ADMIN, student_id=2, form=_form(), today=TODAY)
    assert school.students_repo.get_by_id(2).is_active is False

    with pytest.raises(AuthorizationError):
        svc.update(current_role=Role.ATTENDANCE_STAFF, student_id=2, form=_form(), today=TODAY)
    with pytest.raises(NotFoundError):
        svc.update(current_role=Role.STAFF, student_id=404, form=_form(), today=TODAY)


@pytest.mark.parametrize(
    "search, names",
    [("asha", ["Asha"]), ("B", ["Bilal"]), ("0003", ["Chen"]), ("  ", ["Asha", "Bilal", "Chen"]), ("zzz", [])],
)
def test_list_students_search(school, search, names):
    rows = school.student_service.list_students(search=search)
    assert [s.name for s in rows] == names
