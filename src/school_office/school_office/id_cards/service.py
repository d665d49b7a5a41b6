from __future__ import annotations

import io

import qrcode

from ..classes.repository import ClassRepository
from ..core.exceptions import NotFoundError
from ..students.model import Student
from ..students.repository import StudentRepository
from .model import IdCard


class IdCardService:
    """Builds printable ID-card data and the QR code printed on each card."""

    def __init__(self, students: StudentRepository, classes: ClassRepository):
        self._students = students
        self._classes = classes

    def _to_card(self, s: Student, class_name: str) -> IdCard:
        return IdCard(
            student_id=s.student_id,
            name=s.name,
            registration_number=s.registration_number,
            class_name=class_name,
            section=s.section,
            father_name=s.father.name or "",
            date_of_birth=s.date_of_birth,
            address=s.address,
            mobile=s.mobiles[0] if s.mobiles else "",
        )

    def card_for_student(self, student_id: int) -> IdCard:
        student = self._students.get_by_id(int(student_id))
        if not student:
            raise NotFoundError("Student not found")
        school_class = self._classes.get_by_id(student.class_id)
        return self._to_card(student, school_class.name if school_class else "")

    def cards_for_class(self, class_id: int) -> list[IdCard]:
        school_class = self._classes.get_by_id(int(class_id))
        if not school_class:
            raise NotFoundError("Class not found")

        students = self._students.list_by_class(class_id=int(class_id), active_only=True)
        if not students:
            raise NotFoundError("No students found in this class")
        return [self._to_card(s, school_class.name) for s in students]

    def qr_png(self, student_id: int) -> bytes:
        """PNG of a QR code holding the student's registration number."""

        card = self.card_for_student(student_id)

        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=8,
            border=2,
        )
        qr.add_data(card.registration_number)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")

        buf = io.BytesIO()
        img.save(buf, format="PNG")
        return buf.getvalue()
