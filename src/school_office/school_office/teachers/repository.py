from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Teacher


class TeacherRepository(Protocol):
    def get_by_id(self, teacher_id: int) -> Optional[Teacher]:
        raise NotImplementedError

    def get_by_code(self, teacher_code: str) -> Optional[Teacher]:
        raise NotImplementedError

    def create(self, teacher: Teacher) -> int:
        """Persist a new teacher (teacher_id is ignored) and return its id.

        Raises DuplicateKeyConflict when the teacher code is taken.
        """

        raise NotImplementedError

    def update(self, teacher: Teacher) -> bool:
        raise NotImplementedError

    def delete(self, teacher_id: int) -> bool:
        raise NotImplementedError

    def search(self, query: Optional[str] = None) -> Sequence[Teacher]:
        """Newest first; `query` matches name, code, email, phone or Aadhaar."""

        raise NotImplementedError
