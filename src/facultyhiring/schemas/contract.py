from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from .applicant import new_id
from .enums import ContractStatus, DeanRecommendation, VacancyRequestStatus, VacancyStatus


class Contract(BaseModel):
    """An active faculty employment term and its renewal decision."""

    id: str = Field(default_factory=new_id)
    contract_no: str
    faculty_name: str
    email: str | None = None
    college: str | None = None
    job_title: str | None = None
    position: str | None = None
    employment_type: str | None = None
    rate_per_hour: float | None = None
    start_date: date | None = None
    end_date: date | None = None
    status: ContractStatus = ContractStatus.PENDING_DEAN

    dean_recommendation: DeanRecommendation = DeanRecommendation.PENDING
    dean_remarks: str | None = None
    decided_by: str | None = None
    decided_at: datetime | None = None

    applicant_id: str | None = None
    evaluation_id: str | None = None

    version: int = 0

    model_config = ConfigDict(extra="forbid")


class Vacancy(BaseModel):
    """A job posting applicants apply against."""

    id: str = Field(default_factory=new_id)
    title: str
    college: str
    status: VacancyStatus = VacancyStatus.OPEN
    description: str | None = None
    requirements: str | None = None
    posted_date: datetime | None = None

    version: int = 0

    model_config = ConfigDict(extra="forbid")


class VacancyRequest(BaseModel):
    """A dean's request that HR open a new vacancy."""

    id: str = Field(default_factory=new_id)
    job_title: str
    college: str
    number_of_slots: int = Field(gt=0)
    target_start_date: date
    minimum_qualifications: str = ""
    justification: str = ""
    status: VacancyRequestStatus = VacancyRequestStatus.PENDING

    submitted_by: str | None = None
    submitted_at: datetime | None = None
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    review_notes: str | None = None
    vacancy_id: str | None = None

    version: int = 0

    model_config = ConfigDict(extra="forbid")
