"""
MeetSpace Backend: Two-Phase Outcomes
=======================================

What:  The result of an operation made of two provider writes that cannot
       share a transaction (identity account + profile document).
How:   Phases run in order; the first failure stops the run. The outcome
       records which phases completed, which failed, and the error. Nothing
       is rolled back, so a caller can tell "account created, profile
       missing" apart from "nothing happened".

Example:
    outcome = TwoPhaseOutcome("register", ("account", "profile"))
    uid = await outcome.run("account", identity.create_account(email, password))
    if uid is not None:
        await outcome.run("profile", users.create(build_user(fields, uid)))
    return outcome.unwrap()
"""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Generic, List, Optional, Tuple, TypeVar

from meetspace.exceptions import MeetSpaceError

T = TypeVar("T")


@dataclass
class TwoPhaseOutcome(Generic[T]):
    operation: str
    phases: Tuple[str, ...]
    completed: List[str] = field(default_factory=list)
    failed_phase: Optional[str] = None
    error: Optional[MeetSpaceError] = None
    value: Optional[T] = None

    @property
    def succeeded(self) -> bool:
        return self.failed_phase is None and len(self.completed) == len(self.phases)

    async def run(self, phase: str, step: Awaitable[Any]) -> Any:
        """
        Await one phase and record its result.

        Returns the phase's value, or None once a phase has failed. A
        MeetSpaceError marks the phase failed; any other exception propagates.
        """
        if phase not in self.phases:
            raise ValueError(f"Unknown phase '{phase}' for {self.operation}")
        if self.failed_phase is not None:
            # Close the coroutine that will never be awaited
            close = getattr(step, "close", None)
            if close is not None:
                close()
            return None

        try:
            result = await step
        except MeetSpaceError as e:
            self.failed_phase = phase
            self.error = e
            return None

        self.completed.append(phase)
        return result

    def unwrap(self) -> Optional[T]:
        """Return the value, or raise the failed phase's error with phase context."""
        if self.error is not None:
            self.error.context.update(
                {
                    "operation": self.operation,
                    "failed_phase": self.failed_phase,
                    "completed_phases": list(self.completed),
                }
            )
            raise self.error
        return self.value
