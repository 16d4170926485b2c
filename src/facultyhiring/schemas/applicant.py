from __future__ import annotations

from datetime import date, datetime
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .enums import InterviewStatus, Stage

DOCUMENT_FIELDS: tuple[str, ...] = (
    "pds_url",
    "transcript_url",
    "trainings_url",
    "employment_url",
)


def new_id() -> str:
    return uuid4().hex


class Applicant(BaseModel):
    """One candidate's journey through the hiring pipeline.

    ``status`` is a display projection of ``stage`` and is never stored on its
    own; incoming ``status`` keys are ignored.
    """

    id: str = Field(default_factory=new_id)
    vacancy_id: str
    full_name: str
    email: str
    phone: str | None = None
    cover_letter: str | None = None
    resume_url: str | None = None
    pds_url: str | None = None
    transcript_url: str | None = None
    trainings_url: str | None = None
    employment_url: str | None = None

    stage: Stage = Stage.APPLIED
    applied_date: datetime | None = None
    endorsed_date: datetime | None = None
    interview_date: date | None = None
    demo_date: date | None = None
    hired_at: datetime | None = None
    status_updated_at: datetime | None = None

    evaluation_score: float | None = None
    evaluation_notes: str | None = None
    rejection_reason: str | None = None
    employee_id: str | None = None

    version: int = 0

    model_config = ConfigDict(extra="ignore")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def status(self) -> str:
        return self.stage.display

    def missing_documents(self, required: tuple[str, ...] | list[str]) -> list[str]:
        return [name for name in required if not getattr(self, name, None)]


class InterviewDetails(BaseModel):
    """Command payload for scheduling an interview."""

    interview_date: date | None = None
    teaching_demo_date: date | None = None
    interview_time: str | None = None
    location: str | None = None
    interview_type: str | None = None
    notes: str | None = None

    model_config = ConfigDict(extra="forbid")


class Interview(BaseModel):
    """A scheduled interview tied to exactly one applicant."""

    id: str = Field(default_factory=new_id)
    applicant_id: str
    status: InterviewStatus = InterviewStatus.PENDING
    interview_date: date | None = None
    teaching_demo_date: date | None = None
    interview_time: str | None = None
    location: str | None = None
    interview_type: str | None = None
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    version: int = 0

    model_config = ConfigDict(extra="forbid")
