from dataclasses import dataclass
from typing import Dict, List, Optional

from secret_santa.constants import Messages
from secret_santa.schemas.results import PreconditionViolation
from secret_santa.service.assignment_service import AssignmentService


@dataclass(frozen=True)
class RevealState:
    cursor: int
    revealed: bool


class RevealSequencer:
    """
    Steps through participants one at a time.

    Each participant's recipient is only handed out after reveal() was called
    for their position, advance() moves on once the current one was revealed.
    Out-of-order calls to advance() are ignored.
    """

    def __init__(self, participants: List[str], assignment: Dict[str, str]):
        participants = list(participants)
        if not participants:
            raise PreconditionViolation("Nobody to reveal assignments for")
        if not AssignmentService.check_assignment(assignment, participants):
            raise PreconditionViolation(
                "Assignment must pair every revealed participant with someone else"
            )

        self._participants = participants
        self._assignment = dict(assignment)
        self._cursor = 0
        self._revealed = False

    def _ensure_active(self) -> None:
        if self._assignment is None:
            raise ValueError(Messages.NO_ACTIVE_ASSIGNMENT)

    def is_active(self) -> bool:
        return self._assignment is not None

    @property
    def participant_count(self) -> int:
        return len(self._participants)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def revealed(self) -> bool:
        return self._revealed

    def state(self) -> RevealState:
        return RevealState(cursor=self._cursor, revealed=self._revealed)

    def current_participant(self) -> str:
        self._ensure_active()
        return self._participants[self._cursor]

    def current_assignment(self) -> Optional[str]:
        """Recipient of the current participant, None until revealed"""
        self._ensure_active()
        if not self._revealed:
            return None
        return self._assignment[self.current_participant()]

    def reveal(self) -> None:
        self._ensure_active()
        self._revealed = True

    def is_terminal(self) -> bool:
        return (
            self.is_active()
            and self._revealed
            and self._cursor == len(self._participants) - 1
        )

    def advance(self) -> None:
        if not self.is_active() or not self._revealed or self.is_terminal():
            return
        self._cursor += 1
        self._revealed = False

    def reset(self) -> None:
        self._assignment = None
        self._participants = []
        self._cursor = 0
        self._revealed = False
