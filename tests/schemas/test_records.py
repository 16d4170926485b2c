from __future__ import annotations

import pytest
from pydantic import ValidationError

from facultyhiring.errors import (
    Conflict,
    Forbidden,
    InternalError,
    InvalidInput,
    InvalidTransition,
    NotFound,
)
from facultyhiring.schemas import Applicant, Evaluation, Stage, VacancyStatus


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("INTERVIEW_SCHEDULED", Stage.INTERVIEW_SCHEDULED),
        ("Interview Scheduled", Stage.INTERVIEW_SCHEDULED),
        ("interviewscheduled", Stage.INTERVIEW_SCHEDULED),
        ("For Hiring", Stage.FOR_HIRING),
        (Stage.HIRED, Stage.HIRED),
    ],
)
def test_stage_parse_accepts_value_and_display(raw, expected):
    assert Stage.parse(raw) is expected


def test_stage_parse_rejects_unknown():
    with pytest.raises(InvalidInput) as excinfo:
        Stage.parse("Shortlisted")
    assert "APPLIED" in excinfo.value.details["allowed"]


def test_vacancy_status_parse():
    assert VacancyStatus.parse("open") is VacancyStatus.OPEN


def test_status_is_derived_from_stage():
    applicant = Applicant(
        vacancy_id="V-1",
        full_name="Ana Cruz",
        email="ana@example.edu",
        stage=Stage.FOR_HIRING,
        status="Hired",
    )
    assert applicant.status == "For Hiring"
    dumped = applicant.model_dump()
    assert dumped["status"] == "For Hiring"
    assert dumped["stage"] is Stage.FOR_HIRING


def test_missing_documents():
    applicant = Applicant(
        vacancy_id="V-1",
        full_name="Ana Cruz",
        email="ana@example.edu",
        pds_url="https://files.example.edu/pds.pdf",
    )
    assert applicant.missing_documents(["pds_url", "employment_url"]) == ["employment_url"]


def test_evaluation_total_must_equal_sub_score_sum():
    with pytest.raises(ValidationError, match="does not equal"):
        Evaluation(
            applicant_id="A-1",
            educational=70,
            experience=65,
            professional_development=40,
            technological=35,
            total_score=200,
            rank="Associate Professor IV",
            rate_per_hour=320,
        )


def test_evaluation_exposes_sub_scores():
    evaluation = Evaluation(
        applicant_id="A-1",
        educational=70,
        experience=65,
        professional_development=40,
        technological=35,
        total_score=210,
        rank="Professor I",
        rate_per_hour=350,
    )
    assert evaluation.sub_scores.total == 210


@pytest.mark.parametrize(
    ("error", "status_code", "code"),
    [
        (InvalidTransition("endorse", "HIRED"), 400, "invalid_transition"),
        (InvalidInput("bad"), 400, "invalid_input"),
        (NotFound("Applicant", "A-404"), 404, "not_found"),
        (Forbidden("no"), 403, "forbidden"),
        (Conflict("stale"), 409, "conflict"),
        (InternalError("boom"), 500, "internal_error"),
    ],
)
def test_errors_carry_status_and_serialize(error, status_code, code):
    assert error.status_code == status_code
    payload = error.to_dict()
    assert payload["error"] == code
    assert payload["message"] == error.message


def test_invalid_transition_message_names_operation():
    error = InvalidTransition("complete_interview", "APPLIED", expected=["INTERVIEW_SCHEDULED"])
    assert str(error) == "Cannot complete interview from stage APPLIED"
    assert error.to_dict()["details"]["expected"] == ["INTERVIEW_SCHEDULED"]
