"""Persistence collaborator contract shared by the store implementations."""

from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Generic, Iterable, Protocol, TypeVar, runtime_checkable

from ..schemas import (
    Applicant,
    Contract,
    Evaluation,
    Interview,
    Stage,
    Vacancy,
    VacancyRequest,
    VacancyRequestStatus,
    VacancyStatus,
)

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


@dataclass(slots=True)
class ApplicantQuery:
    """Applicant listing filters; ``search`` matches name or email."""

    search: str | None = None
    stage: Stage | None = None
    vacancy_id: str | None = None
    college: str | None = None


@dataclass(slots=True)
class ContractQuery:
    """Renewal listing filters and paging window."""

    search: str | None = None
    college: str | None = None
    skip: int = 0
    take: int = DEFAULT_PAGE_SIZE

    def __post_init__(self) -> None:
        self.skip = max(int(self.skip or 0), 0)
        self.take = clamp_take(self.take)


@dataclass(slots=True)
class Page(Generic[T]):
    items: list[T] = field(default_factory=list)
    total: int = 0
    skip: int = 0
    take: int = DEFAULT_PAGE_SIZE


def clamp_take(take: int | None) -> int:
    if take is None:
        return DEFAULT_PAGE_SIZE
    return max(0, min(int(take), MAX_PAGE_SIZE))


def contains(haystacks: Iterable[str | None], needle: str | None) -> bool:
    """Case-insensitive substring match over any of ``haystacks``."""
    if not needle:
        return True
    token = needle.strip().lower()
    return any(token in (value or "").lower() for value in haystacks)


def sort_key_desc(value: datetime | None) -> tuple[int, float]:
    """Newest first with missing dates last."""
    if value is None:
        return (1, 0.0)
    return (0, -value.timestamp())


def sort_key_asc(value: date | None) -> tuple[int, str]:
    """Earliest first with missing dates last."""
    if value is None:
        return (1, "")
    return (0, value.isoformat())


@runtime_checkable
class Repository(Protocol[T]):
    """CRUD over one record type, keyed by opaque string id."""

    def get(self, record_id: str) -> T | None:
        """Return the record or None."""

    def add(self, record: T) -> T:
        """Insert ``record`` and return the stored copy (version 1)."""

    def update(self, record: T) -> T:
        """Replace the stored record; raise ``Conflict`` on a stale version."""

    def delete(self, record_id: str) -> None:
        """Remove the record; raise ``NotFound`` if absent."""


class ApplicantRepository(Repository[Applicant], Protocol):
    def list(self, query: ApplicantQuery) -> list[Applicant]:
        """Applicants matching ``query`` ordered by applied date, newest first."""


class InterviewRepository(Repository[Interview], Protocol):
    def for_applicant(self, applicant_id: str) -> Interview | None:
        """The applicant's interview, if one was scheduled."""


class EvaluationRepository(Repository[Evaluation], Protocol):
    def for_applicant(self, applicant_id: str) -> Evaluation | None:
        """The applicant's evaluation, if scored."""


class ContractRepository(Repository[Contract], Protocol):
    def search(self, query: ContractQuery) -> Page[Contract]:
        """Contracts matching ``query`` ordered by end date, earliest first."""

    def count(self) -> int:
        """Number of stored contracts."""


class VacancyRepository(Repository[Vacancy], Protocol):
    def list(self, status: VacancyStatus | None = None) -> list[Vacancy]:
        """Vacancies, optionally restricted to one status, newest first."""


class VacancyRequestRepository(Repository[VacancyRequest], Protocol):
    def list(self, status: VacancyRequestStatus | None = None) -> list[VacancyRequest]:
        """Requests, optionally restricted to one status, oldest submission first."""


class UnitOfWork(Protocol):
    """Repositories whose writes commit together or not at all."""

    applicants: ApplicantRepository
    interviews: InterviewRepository
    evaluations: EvaluationRepository
    contracts: ContractRepository
    vacancies: VacancyRepository
    vacancy_requests: VacancyRequestRepository


@runtime_checkable
class Store(Protocol):
    """Process-wide persistence handle."""

    def unit_of_work(self) -> AbstractContextManager[UnitOfWork]:
        """Open a transactional boundary; commit on exit, roll back on error."""

    def close(self) -> None:
        """Release resources held by the handle."""
