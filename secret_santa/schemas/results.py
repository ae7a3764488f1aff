from dataclasses import dataclass, field
from typing import Dict, Optional

from secret_santa.constants import ErrorKind, Messages


class PreconditionViolation(ValueError):
    """Engine or sequencer called with input the editing phase should never produce"""


@dataclass(frozen=True)
class AssignmentResult:
    assignment: Optional[Dict[str, str]] = None
    error: Optional[str] = None
    strategy: Optional[str] = None
    attempts: int = 0
    exhaustive: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(
        cls, assignment: Dict[str, str], strategy: str, attempts: int
    ) -> "AssignmentResult":
        return cls(assignment=dict(assignment), strategy=strategy, attempts=attempts)

    @classmethod
    def infeasible(
        cls, strategy: str, attempts: int, exhaustive: bool = False
    ) -> "AssignmentResult":
        return cls(
            error=ErrorKind.INFEASIBLE,
            strategy=strategy,
            attempts=attempts,
            exhaustive=exhaustive,
        )


@dataclass(frozen=True)
class PhaseResult:
    phase: str
    error: Optional[str] = None
    details: dict = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> Optional[str]:
        if self.error is None:
            return None
        return Messages.BY_ERROR_KIND[self.error]
