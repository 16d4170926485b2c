"""Applicant stage ordering and role gating."""

from __future__ import annotations

from ..errors import Forbidden
from ..schemas import Role, Stage

PIPELINE: tuple[Stage, ...] = (
    Stage.APPLIED,
    Stage.ENDORSED,
    Stage.INTERVIEW_SCHEDULED,
    Stage.EVALUATED,
    Stage.FOR_HIRING,
    Stage.HIRED,
)

TERMINAL_STAGES: frozenset[Stage] = frozenset({Stage.HIRED, Stage.REJECTED})

# operation -> (required stage, resulting stage)
TRANSITIONS: dict[str, tuple[Stage, Stage]] = {
    "endorse": (Stage.APPLIED, Stage.ENDORSED),
    "schedule_interview": (Stage.ENDORSED, Stage.INTERVIEW_SCHEDULED),
    "complete_interview": (Stage.INTERVIEW_SCHEDULED, Stage.EVALUATED),
    "mark_interview_incomplete": (Stage.INTERVIEW_SCHEDULED, Stage.APPLIED),
    "record_evaluation": (Stage.EVALUATED, Stage.EVALUATED),
    "advance_to_for_hiring": (Stage.EVALUATED, Stage.FOR_HIRING),
    "mark_hired": (Stage.FOR_HIRING, Stage.HIRED),
}

TRANSITION_ROLES: dict[str, frozenset[Role]] = {
    "submit_application": frozenset(Role),
    "endorse": frozenset({Role.HR}),
    "schedule_interview": frozenset({Role.HR}),
    "complete_interview": frozenset({Role.HR}),
    "mark_interview_incomplete": frozenset({Role.HR}),
    "record_evaluation": frozenset({Role.HR}),
    "advance_to_for_hiring": frozenset({Role.HR}),
    "mark_hired": frozenset({Role.HR}),
    "reject": frozenset({Role.HR, Role.DEAN}),
    "force_set_stage": frozenset({Role.HR}),
    "delete_applicant": frozenset({Role.HR}),
    "post_vacancy": frozenset({Role.HR}),
    "close_vacancy": frozenset({Role.HR}),
    "submit_dean_recommendation": frozenset({Role.DEAN}),
    "submit_vacancy_request": frozenset({Role.DEAN}),
    "decide_vacancy_request": frozenset({Role.HR}),
}


def position(stage: Stage) -> int:
    """Index of ``stage`` along the pipeline; Rejected sorts after Hired."""
    if stage is Stage.REJECTED:
        return len(PIPELINE)
    return PIPELINE.index(stage)


def is_terminal(stage: Stage) -> bool:
    return stage in TERMINAL_STAGES


def authorize(operation: str, role: Role | str) -> Role:
    """Return the parsed role, raising ``Forbidden`` when it may not run ``operation``."""
    parsed = Role.parse(role)
    allowed = TRANSITION_ROLES.get(operation)
    if allowed is None:
        raise KeyError(f"Unknown operation: {operation!r}")
    if parsed not in allowed:
        raise Forbidden(
            f"Role {parsed.value} may not {operation.replace('_', ' ')}",
            details={
                "operation": operation,
                "role": parsed.value,
                "allowed": sorted(r.value for r in allowed),
            },
        )
    return parsed


__all__ = [
    "PIPELINE",
    "TERMINAL_STAGES",
    "TRANSITIONS",
    "TRANSITION_ROLES",
    "authorize",
    "is_terminal",
    "position",
]
