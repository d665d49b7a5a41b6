from __future__ import annotations

import logging

from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_SEQUENCE_START, REGISTRATION_NUMBER_WIDTH
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError
from .repository import SequenceRepository

logger = logging.getLogger(__name__)


def format_registration_number(value: int) -> str:
    """Zero-pad an issued number for display, e.g. 215 -> '0215'."""
    return str(int(value)).zfill(REGISTRATION_NUMBER_WIDTH)


class SequenceService:
    """Issues strictly increasing numbers per sequence name.

    All state lives in the repository; nothing is cached here, so any number
    of processes can share one store.
    """

    def __init__(self, sequences: SequenceRepository, *, default_start: int = DEFAULT_SEQUENCE_START):
        self._sequences = sequences
        self._default_start = int(default_start)

    @property
    def default_start(self) -> int:
        return self._default_start

    def issue_next(self, sequence_name: str) -> int:
        name = require_non_empty(sequence_name, "Sequence name")
        value = self._sequences.increment(name, default_start=self._default_start)
        logger.info("issued %s=%d", name, value)
        return value

    def peek_next(self, sequence_name: str) -> int:
        """Value the next `issue_next` would return; does not mutate."""
        name = require_non_empty(sequence_name, "Sequence name")
        counter = self._sequences.get(name)
        current = counter.seq if counter else self._default_start
        return current + 1

    def reset(self, *, current_role: Role, sequence_name: str, value: int) -> None:
        """Continue the sequence from `value` (the last number already issued).

        The counter only moves forward; a value below the current one would
        hand out numbers again and is rejected.
        """
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can change a sequence")

        name = require_non_empty(sequence_name, "Sequence name")
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValidationError("Sequence value must be a non-negative integer")

        stored = self._sequences.raise_to(name, value)
        if stored != value:
            raise ValidationError(f"Sequence value must not be below the current value {stored}")
        logger.warning("sequence %s reset to %d", name, value)
