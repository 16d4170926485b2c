"""In-process store with staged, all-or-nothing commits."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Generic, Iterator, TypeVar

from pydantic import BaseModel

from ..errors import Conflict, NotFound
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
from .base import (
    ApplicantQuery,
    ContractQuery,
    Page,
    contains,
    sort_key_asc,
    sort_key_desc,
)

R = TypeVar("R", bound=BaseModel)

_DELETED = object()

TABLES: tuple[str, ...] = (
    "applicants",
    "interviews",
    "evaluations",
    "contracts",
    "vacancies",
    "vacancy_requests",
)


class MemoryStore:
    """Dictionary-backed store.

    Writes inside a unit of work are staged and applied under a lock on
    commit, after checking that no staged record was changed by another unit
    of work in the meantime.
    """

    def __init__(self) -> None:
        self._tables: dict[str, dict[str, BaseModel]] = {name: {} for name in TABLES}
        self._lock = threading.RLock()

    @contextmanager
    def unit_of_work(self) -> Iterator["MemoryUnitOfWork"]:
        uow = MemoryUnitOfWork(self)
        try:
            yield uow
        except BaseException:
            uow.rollback()
            raise
        uow.commit()

    def close(self) -> None:
        with self._lock:
            for table in self._tables.values():
                table.clear()

    def snapshot(self, table: str) -> dict[str, BaseModel]:
        """Committed rows of ``table`` (copies)."""
        with self._lock:
            return {key: row.model_copy(deep=True) for key, row in self._tables[table].items()}

    def _committed(self, table: str, record_id: str) -> BaseModel | None:
        with self._lock:
            return self._tables[table].get(record_id)

    def _apply(self, staged: dict[str, dict[str, tuple[Any, int | None]]]) -> None:
        with self._lock:
            for table, writes in staged.items():
                rows = self._tables[table]
                for record_id, (_, base_version) in writes.items():
                    current = rows.get(record_id)
                    current_version = current.version if current is not None else None
                    if current_version != base_version:
                        raise Conflict(
                            f"{table[:-1]} {record_id!r} was modified concurrently",
                            details={"table": table, "id": record_id},
                        )
            for table, writes in staged.items():
                rows = self._tables[table]
                for record_id, (value, _) in writes.items():
                    if value is _DELETED:
                        rows.pop(record_id, None)
                    else:
                        rows[record_id] = value


class MemoryUnitOfWork:
    def __init__(self, store: MemoryStore) -> None:
        self._store = store
        # table -> id -> (record or _DELETED, committed version the write was based on)
        self._staged: dict[str, dict[str, tuple[Any, int | None]]] = {
            name: {} for name in TABLES
        }
        self.applicants = MemoryApplicantRepository(self, "applicants", "Applicant")
        self.interviews = MemoryInterviewRepository(self, "interviews", "Interview")
        self.evaluations = MemoryEvaluationRepository(self, "evaluations", "Evaluation")
        self.contracts = MemoryContractRepository(self, "contracts", "Contract")
        self.vacancies = MemoryVacancyRepository(self, "vacancies", "Vacancy")
        self.vacancy_requests = MemoryVacancyRequestRepository(
            self, "vacancy_requests", "Vacancy request"
        )

    def commit(self) -> None:
        self._store._apply(self._staged)
        self._clear()

    def rollback(self) -> None:
        self._clear()

    def _clear(self) -> None:
        for writes in self._staged.values():
            writes.clear()

    def _read(self, table: str, record_id: str) -> BaseModel | None:
        staged = self._staged[table].get(record_id)
        if staged is not None:
            value = staged[0]
            return None if value is _DELETED else value
        return self._store._committed(table, record_id)

    def _rows(self, table: str) -> list[BaseModel]:
        rows = dict(self._store.snapshot(table))
        for record_id, (value, _) in self._staged[table].items():
            if value is _DELETED:
                rows.pop(record_id, None)
            else:
                rows[record_id] = value
        return list(rows.values())

    def _stage(self, table: str, record_id: str, value: Any, base_version: int | None) -> None:
        previous = self._staged[table].get(record_id)
        if previous is not None:
            # keep the version of the first read in this unit of work
            base_version = previous[1]
        self._staged[table][record_id] = (value, base_version)


class _MemoryRepository(Generic[R]):
    def __init__(self, uow: MemoryUnitOfWork, table: str, entity: str) -> None:
        self._uow = uow
        self._table = table
        self._entity = entity

    def get(self, record_id: str) -> R | None:
        row = self._uow._read(self._table, record_id)
        return row.model_copy(deep=True) if row is not None else None  # type: ignore[return-value]

    def add(self, record: R) -> R:
        if self._uow._read(self._table, record.id) is not None:  # type: ignore[attr-defined]
            raise Conflict(
                f"{self._entity} {record.id!r} already exists",  # type: ignore[attr-defined]
                details={"id": record.id},  # type: ignore[attr-defined]
            )
        stored = record.model_copy(update={"version": 1}, deep=True)
        self._uow._stage(self._table, stored.id, stored, None)  # type: ignore[attr-defined]
        return stored.model_copy(deep=True)

    def update(self, record: R) -> R:
        record_id = record.id  # type: ignore[attr-defined]
        current = self._uow._read(self._table, record_id)
        if current is None:
            raise NotFound(self._entity, record_id)
        if current.version != record.version:  # type: ignore[attr-defined]
            raise Conflict(
                f"{self._entity} {record_id!r} is stale",
                details={"id": record_id, "expected": current.version, "got": record.version},  # type: ignore[attr-defined]
            )
        stored = record.model_copy(update={"version": current.version + 1}, deep=True)  # type: ignore[attr-defined]
        self._uow._stage(self._table, record_id, stored, current.version)  # type: ignore[attr-defined]
        return stored.model_copy(deep=True)

    def delete(self, record_id: str) -> None:
        current = self._uow._read(self._table, record_id)
        if current is None:
            raise NotFound(self._entity, record_id)
        self._uow._stage(self._table, record_id, _DELETED, current.version)  # type: ignore[attr-defined]

    def _all(self) -> list[R]:
        return [row.model_copy(deep=True) for row in self._uow._rows(self._table)]  # type: ignore[misc]


class MemoryApplicantRepository(_MemoryRepository[Applicant]):
    def list(self, query: ApplicantQuery) -> list[Applicant]:
        college = (query.college or "").strip().lower()
        results: list[Applicant] = []
        for applicant in self._all():
            if query.stage is not None and applicant.stage is not query.stage:
                continue
            if query.vacancy_id and applicant.vacancy_id != query.vacancy_id:
                continue
            if not contains([applicant.full_name, applicant.email], query.search):
                continue
            if college:
                vacancy = self._uow.vacancies.get(applicant.vacancy_id)
                if vacancy is None or vacancy.college.lower() != college:
                    continue
            results.append(applicant)
        results.sort(key=lambda a: sort_key_desc(a.applied_date))
        return results


class MemoryInterviewRepository(_MemoryRepository[Interview]):
    def for_applicant(self, applicant_id: str) -> Interview | None:
        for interview in self._all():
            if interview.applicant_id == applicant_id:
                return interview
        return None


class MemoryEvaluationRepository(_MemoryRepository[Evaluation]):
    def for_applicant(self, applicant_id: str) -> Evaluation | None:
        for evaluation in self._all():
            if evaluation.applicant_id == applicant_id:
                return evaluation
        return None


class MemoryContractRepository(_MemoryRepository[Contract]):
    def search(self, query: ContractQuery) -> Page[Contract]:
        college = (query.college or "").strip().lower()
        matches = [
            contract
            for contract in self._all()
            if contains(
                [contract.faculty_name, contract.college, contract.job_title, contract.contract_no],
                query.search,
            )
            and (not college or (contract.college or "").lower() == college)
        ]
        matches.sort(key=lambda c: sort_key_asc(c.end_date))
        window = matches[query.skip : query.skip + query.take]
        return Page(items=window, total=len(matches), skip=query.skip, take=query.take)

    def count(self) -> int:
        return len(self._uow._rows(self._table))


class MemoryVacancyRepository(_MemoryRepository[Vacancy]):
    def list(self, status: VacancyStatus | None = None) -> list[Vacancy]:
        vacancies = [v for v in self._all() if status is None or v.status is status]
        vacancies.sort(key=lambda v: sort_key_desc(v.posted_date))
        return vacancies


class MemoryVacancyRequestRepository(_MemoryRepository[VacancyRequest]):
    def list(self, status: VacancyRequestStatus | None = None) -> list[VacancyRequest]:
        requests = [r for r in self._all() if status is None or r.status is status]
        requests.sort(key=lambda r: sort_key_asc(r.submitted_at))
        return requests


__all__ = ["MemoryStore", "MemoryUnitOfWork"]
