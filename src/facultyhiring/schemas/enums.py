"""Enumerations shared by records, engines and persistence."""

from __future__ import annotations

from enum import Enum

from ..errors import InvalidInput


class _ParseableEnum(str, Enum):
    """String enum accepting its value, its name or its display label."""

    @property
    def display(self) -> str:
        return self.value

    @classmethod
    def parse(cls, raw: "str | _ParseableEnum"):
        if isinstance(raw, cls):
            return raw
        token = str(raw or "").strip()
        normalized = _normalize(token)
        for member in cls:
            if normalized in {
                _normalize(member.value),
                _normalize(member.name),
                _normalize(member.display),
            }:
                return member
        allowed = [member.value for member in cls]
        raise InvalidInput(
            f"{token!r} is not a valid {cls.__name__}",
            details={"allowed": allowed},
        )


def _normalize(token: str) -> str:
    return token.replace(" ", "").replace("_", "").replace("-", "").lower()


class Stage(_ParseableEnum):
    """Position of an applicant in the hiring pipeline."""

    APPLIED = "APPLIED"
    ENDORSED = "ENDORSED"
    INTERVIEW_SCHEDULED = "INTERVIEW_SCHEDULED"
    EVALUATED = "EVALUATED"
    FOR_HIRING = "FOR_HIRING"
    HIRED = "HIRED"
    REJECTED = "REJECTED"

    @property
    def display(self) -> str:
        return _STAGE_LABELS[self]


_STAGE_LABELS: dict[Stage, str] = {
    Stage.APPLIED: "Applied",
    Stage.ENDORSED: "Endorsed",
    Stage.INTERVIEW_SCHEDULED: "Interview Scheduled",
    Stage.EVALUATED: "Evaluated",
    Stage.FOR_HIRING: "For Hiring",
    Stage.HIRED: "Hired",
    Stage.REJECTED: "Rejected",
}


class InterviewStatus(_ParseableEnum):
    PENDING = "Pending"
    COMPLETED = "Completed"


class VacancyStatus(_ParseableEnum):
    OPEN = "Open"
    CLOSED = "Closed"
    DRAFT = "Draft"


class DeanRecommendation(_ParseableEnum):
    PENDING = "Pending"
    RENEW = "Renew"
    NOT_RENEW = "NotRenew"


class ContractStatus(_ParseableEnum):
    PENDING_DEAN = "PendingDean"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class VacancyRequestStatus(_ParseableEnum):
    PENDING = "Pending"
    APPROVED = "Approved"
    DECLINED = "Declined"


class VacancyRequestAction(_ParseableEnum):
    APPROVE = "approve"
    DECLINE = "decline"


class Role(_ParseableEnum):
    """Caller role supplied by the authentication collaborator."""

    HR = "HR"
    DEAN = "Dean"
    PUBLIC = "Public"


__all__ = [
    "Stage",
    "InterviewStatus",
    "VacancyStatus",
    "DeanRecommendation",
    "ContractStatus",
    "VacancyRequestStatus",
    "VacancyRequestAction",
    "Role",
]
