"""Applicant stage workflow.

Each transition receives record snapshots and returns new snapshots; inputs
are never mutated. Persisting the returned records is the caller's job and
must happen in one unit of work per transition.
"""

from __future__ import annotations

import secrets
import string
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Mapping

import pendulum
from pydantic import ValidationError

from ..errors import InvalidInput, InvalidTransition, NotFound
from ..schemas import (
    Applicant,
    Contract,
    Evaluation,
    Interview,
    InterviewDetails,
    InterviewStatus,
    Stage,
    SubScores,
)
from .scoring import ScoreResult, is_passing, score
from .stages import TRANSITIONS

DEFAULT_INCOMPLETE_NOTE = "Marked incomplete - needs rescheduling"


@dataclass
class WorkflowConfig:
    """Business rules layered on top of the stage machine."""

    required_documents: tuple[str, ...] = ()
    require_passing_score: bool = False
    incomplete_note: str = DEFAULT_INCOMPLETE_NOTE


@dataclass(slots=True)
class TransitionResult:
    """Records a transition produced, ready to be persisted together."""

    operation: str
    previous_stage: Stage
    applicant: Applicant
    interview: Interview | None = None
    evaluation: Evaluation | None = None
    contract: Contract | None = None
    score: ScoreResult | None = None
    changed: bool = True
    details: dict[str, Any] = field(default_factory=dict)


def utc_now() -> datetime:
    return pendulum.now("UTC")


def generate_employee_id(now: datetime) -> str:
    suffix = "".join(secrets.choice(string.ascii_uppercase + string.digits) for _ in range(5))
    return f"EMP-{int(now.timestamp() * 1000)}-{suffix}"


class StageWorkflow:
    """Validate applicant transitions and compute the records they produce."""

    def __init__(
        self,
        *,
        config: WorkflowConfig | None = None,
        now_provider: Callable[[], datetime] | None = None,
    ) -> None:
        self._config = config or WorkflowConfig()
        self._now_provider = now_provider or utc_now

    def endorse(self, applicant: Applicant, *, idempotent: bool = False) -> TransitionResult:
        if not self._check("endorse", applicant, idempotent):
            return self._unchanged("endorse", applicant)

        missing = applicant.missing_documents(self._config.required_documents)
        if missing:
            raise InvalidInput(
                "Cannot endorse applicant with incomplete files",
                details={"missing_documents": missing},
            )

        now = self._now()
        updated = applicant.model_copy(
            update={
                "stage": Stage.ENDORSED,
                "endorsed_date": now,
                "status_updated_at": now,
            }
        )
        return TransitionResult("endorse", applicant.stage, updated)

    def schedule_interview(
        self,
        applicant: Applicant,
        details: InterviewDetails | Mapping[str, Any],
        *,
        interview: Interview | None = None,
        idempotent: bool = False,
    ) -> TransitionResult:
        if not self._check("schedule_interview", applicant, idempotent):
            return self._unchanged("schedule_interview", applicant, interview=interview)

        if not isinstance(details, InterviewDetails):
            try:
                details = InterviewDetails.model_validate(dict(details))
            except ValidationError as exc:
                raise InvalidInput.from_validation(exc) from exc
        if details.interview_date is None or details.teaching_demo_date is None:
            raise InvalidInput(
                "Both interview and teaching demo dates are required",
                details={
                    "interview_date": details.interview_date is not None,
                    "teaching_demo_date": details.teaching_demo_date is not None,
                },
            )
        if interview is not None:
            self._check_owner(applicant, interview)

        now = self._now()
        schedule = details.model_dump()
        if interview is None:
            scheduled = Interview(
                applicant_id=applicant.id,
                created_at=now,
                updated_at=now,
                **schedule,
            )
        else:
            # rescheduling reuses the applicant's single interview record
            scheduled = interview.model_copy(
                update={**schedule, "status": InterviewStatus.PENDING, "updated_at": now}
            )

        updated = applicant.model_copy(
            update={
                "stage": Stage.INTERVIEW_SCHEDULED,
                "interview_date": details.interview_date,
                "demo_date": details.teaching_demo_date,
                "status_updated_at": now,
            }
        )
        return TransitionResult(
            "schedule_interview", applicant.stage, updated, interview=scheduled
        )

    def complete_interview(
        self,
        applicant: Applicant,
        interview: Interview | None,
        *,
        idempotent: bool = False,
    ) -> TransitionResult:
        if not self._check("complete_interview", applicant, idempotent):
            return self._unchanged("complete_interview", applicant, interview=interview)
        interview = self._require_interview(applicant, interview)

        now = self._now()
        completed = interview.model_copy(
            update={"status": InterviewStatus.COMPLETED, "updated_at": now}
        )
        updated = applicant.model_copy(
            update={"stage": Stage.EVALUATED, "status_updated_at": now}
        )
        return TransitionResult(
            "complete_interview", applicant.stage, updated, interview=completed
        )

    def mark_interview_incomplete(
        self,
        applicant: Applicant,
        interview: Interview | None,
        reason: str | None = None,
        *,
        idempotent: bool = False,
    ) -> TransitionResult:
        if not self._check("mark_interview_incomplete", applicant, idempotent):
            return self._unchanged("mark_interview_incomplete", applicant, interview=interview)
        interview = self._require_interview(applicant, interview)

        now = self._now()
        reset = interview.model_copy(
            update={
                "status": InterviewStatus.PENDING,
                "notes": reason or self._config.incomplete_note,
                "updated_at": now,
            }
        )
        # back into the endorsement queue; endorsement must be granted again
        updated = applicant.model_copy(
            update={
                "stage": Stage.APPLIED,
                "endorsed_date": None,
                "rejection_reason": reason,
                "status_updated_at": now,
            }
        )
        return TransitionResult(
            "mark_interview_incomplete", applicant.stage, updated, interview=reset
        )

    def record_evaluation(
        self,
        applicant: Applicant,
        scores: SubScores | Mapping[str, Any],
        *,
        existing: Evaluation | None = None,
        breakdown: Mapping[str, Any] | None = None,
        evaluated_by: str | None = None,
        remarks: str | None = None,
    ) -> TransitionResult:
        self._check("record_evaluation", applicant, False)
        if not isinstance(scores, SubScores):
            try:
                scores = SubScores.model_validate(dict(scores))
            except ValidationError as exc:
                raise InvalidInput.from_validation(exc) from exc
        if existing is not None and existing.applicant_id != applicant.id:
            raise InvalidInput(
                "Evaluation belongs to another applicant",
                details={"evaluation_id": existing.id, "applicant_id": applicant.id},
            )

        result = score(scores)
        now = self._now()
        fields: dict[str, Any] = {
            "applicant_id": applicant.id,
            **scores.model_dump(),
            "breakdown": dict(breakdown or {}),
            "total_score": result.total_score,
            "rank": result.rank,
            "rate_per_hour": result.rate_per_hour,
            "evaluated_by": evaluated_by,
            "remarks": remarks,
            "evaluated_at": now,
        }
        if existing is None:
            evaluation = Evaluation(**fields)
        else:
            # re-evaluation overwrites in place
            evaluation = Evaluation(
                id=existing.id,
                revision=existing.revision + 1,
                version=existing.version,
                **fields,
            )

        updated = applicant.model_copy(
            update={
                "evaluation_score": result.total_score,
                "evaluation_notes": remarks,
            }
        )
        return TransitionResult(
            "record_evaluation",
            applicant.stage,
            updated,
            evaluation=evaluation,
            score=result,
            details={"revision": evaluation.revision},
        )

    def advance_to_for_hiring(
        self,
        applicant: Applicant,
        evaluation: Evaluation | None,
        *,
        idempotent: bool = False,
    ) -> TransitionResult:
        if not self._check("advance_to_for_hiring", applicant, idempotent):
            return self._unchanged("advance_to_for_hiring", applicant, evaluation=evaluation)
        if evaluation is None:
            raise InvalidTransition(
                "advance_to_for_hiring",
                applicant.stage.value,
                reason="Applicant has not been evaluated yet",
            )
        if self._config.require_passing_score and not is_passing(evaluation.total_score):
            raise InvalidTransition(
                "advance_to_for_hiring",
                applicant.stage.value,
                reason=f"Evaluation total {evaluation.total_score} is below the passing score",
            )

        now = self._now()
        updated = applicant.model_copy(
            update={"stage": Stage.FOR_HIRING, "status_updated_at": now}
        )
        return TransitionResult(
            "advance_to_for_hiring", applicant.stage, updated, evaluation=evaluation
        )

    def mark_hired(
        self,
        applicant: Applicant,
        *,
        employee_id: str | None = None,
        hired_at: datetime | None = None,
        idempotent: bool = False,
    ) -> TransitionResult:
        if not self._check("mark_hired", applicant, idempotent):
            return self._unchanged("mark_hired", applicant)

        now = self._now()
        updated = applicant.model_copy(
            update={
                "stage": Stage.HIRED,
                "hired_at": hired_at or now,
                "employee_id": employee_id or generate_employee_id(now),
                "status_updated_at": now,
            }
        )
        return TransitionResult("mark_hired", applicant.stage, updated)

    def reject(
        self,
        applicant: Applicant,
        reason: str | None = None,
        *,
        idempotent: bool = False,
    ) -> TransitionResult:
        if applicant.stage is Stage.REJECTED and idempotent:
            return self._unchanged("reject", applicant)
        if applicant.stage in (Stage.HIRED, Stage.REJECTED):
            raise InvalidTransition("reject", applicant.stage.value)

        now = self._now()
        updated = applicant.model_copy(
            update={
                "stage": Stage.REJECTED,
                "rejection_reason": reason,
                "status_updated_at": now,
            }
        )
        return TransitionResult("reject", applicant.stage, updated)

    def force_set_stage(
        self,
        applicant: Applicant,
        stage: Stage | str,
        *,
        notes: str | None = None,
    ) -> TransitionResult:
        """Administrative override: set ``stage`` without checking the current one."""
        target = Stage.parse(stage)
        now = self._now()
        update: dict[str, Any] = {"stage": target, "status_updated_at": now}
        if target is Stage.ENDORSED:
            update["endorsed_date"] = now
        elif target is Stage.INTERVIEW_SCHEDULED:
            update["interview_date"] = now.date()
        elif target is Stage.EVALUATED and notes:
            update["evaluation_notes"] = notes
        elif target is Stage.HIRED:
            update["hired_at"] = now
            update["employee_id"] = applicant.employee_id or generate_employee_id(now)
        elif target is Stage.REJECTED and notes:
            update["rejection_reason"] = notes

        updated = applicant.model_copy(update=update)
        return TransitionResult(
            "force_set_stage",
            applicant.stage,
            updated,
            details={"override": True, "target": target.value},
        )

    def _check(self, operation: str, applicant: Applicant, idempotent: bool) -> bool:
        """Return True to proceed, False for an idempotent no-op; raise otherwise."""
        required, target = TRANSITIONS[operation]
        if applicant.stage is required:
            return True
        if idempotent and applicant.stage is target:
            return False
        raise InvalidTransition(operation, applicant.stage.value, expected=[required.value])

    @staticmethod
    def _check_owner(applicant: Applicant, interview: Interview) -> None:
        if interview.applicant_id != applicant.id:
            raise InvalidInput(
                "Interview belongs to another applicant",
                details={"interview_id": interview.id, "applicant_id": applicant.id},
            )

    def _require_interview(self, applicant: Applicant, interview: Interview | None) -> Interview:
        if interview is None:
            raise NotFound("Interview for applicant", applicant.id)
        self._check_owner(applicant, interview)
        return interview

    @staticmethod
    def _unchanged(operation: str, applicant: Applicant, **records: Any) -> TransitionResult:
        return TransitionResult(operation, applicant.stage, applicant, changed=False, **records)

    def _now(self) -> datetime:
        return self._now_provider()


__all__ = [
    "DEFAULT_INCOMPLETE_NOTE",
    "StageWorkflow",
    "TransitionResult",
    "WorkflowConfig",
    "generate_employee_id",
    "utc_now",
]
