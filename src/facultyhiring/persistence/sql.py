"""SQLAlchemy-backed store."""

from __future__ import annotations

from contextlib import contextmanager
from enum import Enum
from typing import Any, Generic, Iterator, TypeVar

import structlog
from pydantic import BaseModel
from sqlalchemy import (
    JSON,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    create_engine,
    func,
    or_,
    select,
)
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy.pool import StaticPool

from ..errors import Conflict, InternalError, NotFound
from ..schemas import (
    Applicant,
    Contract,
    Evaluation,
    Interview,
    Vacancy,
    VacancyRequest,
    VacancyRequestStatus,
    VacancyStatus,
)
from .base import ApplicantQuery, ContractQuery, Page

logger = structlog.get_logger(__name__)

Base = declarative_base()

M = TypeVar("M", bound=BaseModel)


class VacancyRow(Base):
    __tablename__ = "vacancies"

    id = Column(String(32), primary_key=True)
    title = Column(String(255), nullable=False)
    college = Column(String(255), nullable=False, index=True)
    status = Column(String(20), nullable=False, default="Open")
    description = Column(Text, nullable=True)
    requirements = Column(Text, nullable=True)
    posted_date = Column(DateTime(timezone=True), nullable=True)
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}


class VacancyRequestRow(Base):
    __tablename__ = "vacancy_requests"

    id = Column(String(32), primary_key=True)
    job_title = Column(String(255), nullable=False)
    college = Column(String(255), nullable=False, index=True)
    number_of_slots = Column(Integer, nullable=False)
    target_start_date = Column(Date, nullable=False)
    minimum_qualifications = Column(Text, nullable=False, default="")
    justification = Column(Text, nullable=False, default="")
    status = Column(String(20), nullable=False, index=True)
    submitted_by = Column(String(255), nullable=True)
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    reviewed_by = Column(String(255), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    review_notes = Column(Text, nullable=True)
    vacancy_id = Column(String(32), ForeignKey("vacancies.id"), nullable=True)
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}


class ApplicantRow(Base):
    __tablename__ = "applicants"

    id = Column(String(32), primary_key=True)
    vacancy_id = Column(String(32), ForeignKey("vacancies.id"), nullable=False, index=True)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(64), nullable=True)
    cover_letter = Column(Text, nullable=True)
    resume_url = Column(String(1024), nullable=True)
    pds_url = Column(String(1024), nullable=True)
    transcript_url = Column(String(1024), nullable=True)
    trainings_url = Column(String(1024), nullable=True)
    employment_url = Column(String(1024), nullable=True)

    # canonical enum value; the display status is derived, never stored
    stage = Column(String(32), nullable=False, index=True)
    applied_date = Column(DateTime(timezone=True), nullable=True)
    endorsed_date = Column(DateTime(timezone=True), nullable=True)
    interview_date = Column(Date, nullable=True)
    demo_date = Column(Date, nullable=True)
    hired_at = Column(DateTime(timezone=True), nullable=True)
    status_updated_at = Column(DateTime(timezone=True), nullable=True)

    evaluation_score = Column(Float, nullable=True)
    evaluation_notes = Column(Text, nullable=True)
    rejection_reason = Column(Text, nullable=True)
    employee_id = Column(String(64), nullable=True)

    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}


class InterviewRow(Base):
    __tablename__ = "interviews"

    id = Column(String(32), primary_key=True)
    applicant_id = Column(String(32), ForeignKey("applicants.id"), nullable=False, unique=True)
    status = Column(String(20), nullable=False)
    interview_date = Column(Date, nullable=True)
    teaching_demo_date = Column(Date, nullable=True)
    interview_time = Column(String(32), nullable=True)
    location = Column(String(255), nullable=True)
    interview_type = Column(String(64), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}


class EvaluationRow(Base):
    __tablename__ = "evaluations"

    id = Column(String(32), primary_key=True)
    applicant_id = Column(String(32), ForeignKey("applicants.id"), nullable=False, unique=True)
    educational = Column(Float, nullable=False)
    experience = Column(Float, nullable=False)
    professional_development = Column(Float, nullable=False)
    technological = Column(Float, nullable=False)
    breakdown = Column(JSON, nullable=False, default=dict)
    total_score = Column(Float, nullable=False)
    rank = Column(String(64), nullable=False)
    rate_per_hour = Column(Float, nullable=False)
    evaluated_by = Column(String(255), nullable=True)
    remarks = Column(Text, nullable=True)
    evaluated_at = Column(DateTime(timezone=True), nullable=True)
    revision = Column(Integer, nullable=False, default=1)
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}


class ContractRow(Base):
    __tablename__ = "contracts"

    id = Column(String(32), primary_key=True)
    contract_no = Column(String(32), nullable=False, unique=True)
    faculty_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    college = Column(String(255), nullable=True, index=True)
    job_title = Column(String(255), nullable=True)
    position = Column(String(64), nullable=True)
    employment_type = Column(String(64), nullable=True)
    rate_per_hour = Column(Float, nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True, index=True)
    status = Column(String(20), nullable=False)

    dean_recommendation = Column(String(20), nullable=False)
    dean_remarks = Column(Text, nullable=True)
    decided_by = Column(String(255), nullable=True)
    decided_at = Column(DateTime(timezone=True), nullable=True)

    applicant_id = Column(String(32), nullable=True)
    evaluation_id = Column(String(32), nullable=True)

    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}


def build_engine(url: str, *, echo: bool = False):
    """Create an engine; SQLite connections may be shared across threads."""
    kwargs: dict[str, Any] = {"echo": echo, "future": True}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # one shared connection, otherwise every session gets an empty database
            kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


class SqlStore:
    """Store backed by any SQLAlchemy URL, one session per unit of work."""

    def __init__(self, url: str = "sqlite://", *, echo: bool = False, create: bool = True) -> None:
        self.url = url
        self._engine = build_engine(url, echo=echo)
        self._sessions = sessionmaker(
            bind=self._engine,
            autoflush=False,
            expire_on_commit=False,
        )
        if create:
            self.create_schema()

    @property
    def engine(self):
        return self._engine

    def create_schema(self) -> None:
        Base.metadata.create_all(self._engine)

    @contextmanager
    def unit_of_work(self) -> Iterator["SqlUnitOfWork"]:
        session = self._sessions()
        try:
            yield SqlUnitOfWork(session)
            session.commit()
        except StaleDataError as exc:
            session.rollback()
            raise Conflict("Record was modified concurrently", details={"reason": str(exc)}) from exc
        except IntegrityError as exc:
            session.rollback()
            raise Conflict("Write violates a uniqueness constraint", details={"reason": str(exc.orig)}) from exc
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("store.failure", error=str(exc))
            raise InternalError("Persistence failure", details={"reason": str(exc)}) from exc
        except BaseException:
            session.rollback()
            raise
        finally:
            session.close()

    def close(self) -> None:
        self._engine.dispose()


def _column_values(record: BaseModel) -> dict[str, Any]:
    excluded = set(type(record).model_computed_fields) | {"version"}
    values = record.model_dump(exclude=excluded)
    return {key: value.value if isinstance(value, Enum) else value for key, value in values.items()}


class _SqlRepository(Generic[M]):
    row_type: type = Base
    model_type: type[BaseModel] = BaseModel
    entity = "Record"

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, record_id: str) -> M | None:
        row = self._session.get(self.row_type, record_id)
        return self._to_model(row) if row is not None else None

    def add(self, record: M) -> M:
        record_id = record.id  # type: ignore[attr-defined]
        if self._session.get(self.row_type, record_id) is not None:
            raise Conflict(f"{self.entity} {record_id!r} already exists", details={"id": record_id})
        row = self.row_type(**_column_values(record))
        self._session.add(row)
        self._session.flush()
        return self._to_model(row)

    def update(self, record: M) -> M:
        record_id = record.id  # type: ignore[attr-defined]
        row = self._session.get(self.row_type, record_id)
        if row is None:
            raise NotFound(self.entity, record_id)
        if row.version != record.version:  # type: ignore[attr-defined]
            raise Conflict(
                f"{self.entity} {record_id!r} is stale",
                details={"id": record_id, "expected": row.version, "got": record.version},  # type: ignore[attr-defined]
            )
        for key, value in _column_values(record).items():
            setattr(row, key, value)
        self._session.flush()
        return self._to_model(row)

    def delete(self, record_id: str) -> None:
        row = self._session.get(self.row_type, record_id)
        if row is None:
            raise NotFound(self.entity, record_id)
        self._session.delete(row)
        self._session.flush()

    def _to_model(self, row: Any) -> M:
        return self.model_type.model_validate(row, from_attributes=True)  # type: ignore[return-value]


def _like(value: str) -> str:
    return f"%{value.strip().lower()}%"


class SqlApplicantRepository(_SqlRepository[Applicant]):
    row_type = ApplicantRow
    model_type = Applicant
    entity = "Applicant"

    def list(self, query: ApplicantQuery) -> list[Applicant]:
        stmt = select(ApplicantRow)
        if query.stage is not None:
            stmt = stmt.where(ApplicantRow.stage == query.stage.value)
        if query.vacancy_id:
            stmt = stmt.where(ApplicantRow.vacancy_id == query.vacancy_id)
        if query.search and query.search.strip():
            pattern = _like(query.search)
            stmt = stmt.where(
                or_(
                    func.lower(ApplicantRow.full_name).like(pattern),
                    func.lower(ApplicantRow.email).like(pattern),
                )
            )
        if query.college and query.college.strip():
            stmt = stmt.join(VacancyRow, VacancyRow.id == ApplicantRow.vacancy_id).where(
                func.lower(VacancyRow.college) == query.college.strip().lower()
            )
        stmt = stmt.order_by(ApplicantRow.applied_date.is_(None), ApplicantRow.applied_date.desc())
        return [self._to_model(row) for row in self._session.scalars(stmt)]


class SqlInterviewRepository(_SqlRepository[Interview]):
    row_type = InterviewRow
    model_type = Interview
    entity = "Interview"

    def for_applicant(self, applicant_id: str) -> Interview | None:
        row = self._session.scalars(
            select(InterviewRow).where(InterviewRow.applicant_id == applicant_id)
        ).first()
        return self._to_model(row) if row is not None else None


class SqlEvaluationRepository(_SqlRepository[Evaluation]):
    row_type = EvaluationRow
    model_type = Evaluation
    entity = "Evaluation"

    def for_applicant(self, applicant_id: str) -> Evaluation | None:
        row = self._session.scalars(
            select(EvaluationRow).where(EvaluationRow.applicant_id == applicant_id)
        ).first()
        return self._to_model(row) if row is not None else None


class SqlContractRepository(_SqlRepository[Contract]):
    row_type = ContractRow
    model_type = Contract
    entity = "Contract"

    def search(self, query: ContractQuery) -> Page[Contract]:
        stmt = select(ContractRow)
        if query.search and query.search.strip():
            pattern = _like(query.search)
            stmt = stmt.where(
                or_(
                    func.lower(ContractRow.faculty_name).like(pattern),
                    func.lower(ContractRow.college).like(pattern),
                    func.lower(ContractRow.job_title).like(pattern),
                    func.lower(ContractRow.contract_no).like(pattern),
                )
            )
        if query.college and query.college.strip():
            stmt = stmt.where(func.lower(ContractRow.college) == query.college.strip().lower())

        total = self._session.scalar(select(func.count()).select_from(stmt.subquery())) or 0
        stmt = (
            stmt.order_by(ContractRow.end_date.is_(None), ContractRow.end_date.asc(), ContractRow.id)
            .offset(query.skip)
            .limit(query.take)
        )
        items = [self._to_model(row) for row in self._session.scalars(stmt)]
        return Page(items=items, total=total, skip=query.skip, take=query.take)

    def count(self) -> int:
        return self._session.scalar(select(func.count(ContractRow.id))) or 0


class SqlVacancyRepository(_SqlRepository[Vacancy]):
    row_type = VacancyRow
    model_type = Vacancy
    entity = "Vacancy"

    def list(self, status: VacancyStatus | None = None) -> list[Vacancy]:
        stmt = select(VacancyRow)
        if status is not None:
            stmt = stmt.where(VacancyRow.status == status.value)
        stmt = stmt.order_by(VacancyRow.posted_date.is_(None), VacancyRow.posted_date.desc())
        return [self._to_model(row) for row in self._session.scalars(stmt)]


class SqlVacancyRequestRepository(_SqlRepository[VacancyRequest]):
    row_type = VacancyRequestRow
    model_type = VacancyRequest
    entity = "Vacancy request"

    def list(self, status: VacancyRequestStatus | None = None) -> list[VacancyRequest]:
        stmt = select(VacancyRequestRow)
        if status is not None:
            stmt = stmt.where(VacancyRequestRow.status == status.value)
        stmt = stmt.order_by(
            VacancyRequestRow.submitted_at.is_(None), VacancyRequestRow.submitted_at.asc()
        )
        return [self._to_model(row) for row in self._session.scalars(stmt)]


class SqlUnitOfWork:
    def __init__(self, session: Session) -> None:
        self.session = session
        self.applicants = SqlApplicantRepository(session)
        self.interviews = SqlInterviewRepository(session)
        self.evaluations = SqlEvaluationRepository(session)
        self.contracts = SqlContractRepository(session)
        self.vacancies = SqlVacancyRepository(session)
        self.vacancy_requests = SqlVacancyRequestRepository(session)


__all__ = ["Base", "SqlStore", "SqlUnitOfWork", "build_engine"]
