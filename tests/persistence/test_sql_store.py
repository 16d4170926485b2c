from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest
from sqlalchemy import inspect

from facultyhiring.errors import Conflict
from facultyhiring.persistence import SqlStore
from facultyhiring.schemas import Evaluation, Interview, InterviewStatus


@pytest.fixture
def sql_store(tmp_path: Path):
    store = SqlStore(f"sqlite:///{tmp_path / 'hiring.db'}")
    yield store
    store.close()


def test_schema_contains_every_table(sql_store):
    tables = set(inspect(sql_store.engine).get_table_names())
    assert {
        "applicants",
        "interviews",
        "evaluations",
        "contracts",
        "vacancies",
        "vacancy_requests",
    } <= tables


def test_in_memory_url_shares_one_database(make_applicant):
    store = SqlStore("sqlite://")
    with store.unit_of_work() as uow:
        stored = uow.applicants.add(make_applicant())
    with store.unit_of_work() as uow:
        assert uow.applicants.get(stored.id) is not None
    store.close()


def test_concurrent_sessions_raise_conflict(sql_store, make_applicant):
    with sql_store.unit_of_work() as uow:
        stored = uow.applicants.add(make_applicant())

    with pytest.raises(Conflict):
        with sql_store.unit_of_work() as first:
            mine = first.applicants.get(stored.id)
            with sql_store.unit_of_work() as second:
                theirs = second.applicants.get(stored.id)
                second.applicants.update(theirs.model_copy(update={"full_name": "Second"}))
            first.applicants.update(mine.model_copy(update={"full_name": "First"}))

    with sql_store.unit_of_work() as uow:
        assert uow.applicants.get(stored.id).full_name == "Second"


def test_one_interview_per_applicant(sql_store, make_applicant):
    with sql_store.unit_of_work() as uow:
        stored = uow.applicants.add(make_applicant())
        uow.interviews.add(Interview(applicant_id=stored.id))

    with pytest.raises(Conflict):
        with sql_store.unit_of_work() as uow:
            uow.interviews.add(Interview(applicant_id=stored.id))


def test_records_round_trip_enums_dates_and_breakdown(sql_store, make_applicant):
    with sql_store.unit_of_work() as uow:
        stored = uow.applicants.add(make_applicant())
        uow.interviews.add(
            Interview(
                applicant_id=stored.id,
                interview_date=date(2025, 6, 10),
                teaching_demo_date=date(2025, 6, 11),
                location="Room 204",
            )
        )
        uow.evaluations.add(
            Evaluation(
                applicant_id=stored.id,
                educational=70,
                experience=65,
                professional_development=40,
                technological=35,
                breakdown={"educational": {"highest_degree": "PhD"}},
                total_score=210,
                rank="Professor I",
                rate_per_hour=350,
            )
        )

    with sql_store.unit_of_work() as uow:
        interview = uow.interviews.for_applicant(stored.id)
        evaluation = uow.evaluations.for_applicant(stored.id)

    assert interview.status is InterviewStatus.PENDING
    assert interview.interview_date == date(2025, 6, 10)
    assert interview.location == "Room 204"
    assert evaluation.breakdown == {"educational": {"highest_degree": "PhD"}}
    assert evaluation.rank == "Professor I"
    assert evaluation.version == 1
