from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Student


class StudentRepository(Protocol):
    def get_by_id(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def get_by_registration_number(self, registration_number: str) -> Optional[Student]:
        raise NotImplementedError

    def create(self, student: Student) -> int:
        """Persist a new student (student_id is ignored) and return its id.

        Raises DuplicateKeyConflict on a registration/roll number collision.
        """

        raise NotImplementedError

    def update(self, student: Student) -> bool:
        """Overwrite every field of an existing student except is_active.

        Raises DuplicateKeyConflict on a registration/roll number collision.
        """

        raise NotImplementedError

    def set_active(self, student_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError

    def list_roster(self, *, class_id: int, section: str) -> Sequence[Student]:
        """Active students enrolled in class/section, ordered by name."""

        raise NotImplementedError

    def list_by_class(
        self,
        *,
        class_id: Optional[int] = None,
        section: Optional[str] = None,
        active_only: bool = True,
        search: Optional[str] = None,
    ) -> Sequence[Student]:
        """`search` matches a substring of the name or registration number, case-insensitively."""

        raise NotImplementedError

    def get_many(self, student_ids: Sequence[int]) -> Sequence[Student]:
        raise NotImplementedError
