from __future__ import annotations

from datetime import date

import pytest

from facultyhiring.core import VacancyRequestWorkflow, parse_action
from facultyhiring.errors import InvalidInput, InvalidTransition
from facultyhiring.schemas import (
    VacancyRequestAction,
    VacancyRequestStatus,
    VacancyStatus,
)

PAYLOAD = {
    "job_title": "Assistant Professor - Chemistry",
    "college": "College of Science",
    "number_of_slots": "3",
    "target_start_date": "2025-08-15",
}


@pytest.fixture
def requests(clock) -> VacancyRequestWorkflow:
    return VacancyRequestWorkflow(now_provider=clock)


def test_submit_builds_pending_request(requests, now):
    request = requests.submit(PAYLOAD, submitted_by="dean.cos")

    assert request.status is VacancyRequestStatus.PENDING
    assert request.number_of_slots == 3
    assert request.target_start_date == date(2025, 8, 15)
    assert request.minimum_qualifications == ""
    assert request.submitted_at == now
    assert request.submitted_by == "dean.cos"


@pytest.mark.parametrize("slots", [0, -2, "many"])
def test_submit_rejects_non_positive_or_malformed_slots(requests, slots):
    with pytest.raises(InvalidInput) as excinfo:
        requests.submit({**PAYLOAD, "number_of_slots": slots})
    assert excinfo.value.details["errors"][0]["field"] == "number_of_slots"


def test_submit_reports_missing_fields(requests):
    with pytest.raises(InvalidInput) as excinfo:
        requests.submit({"job_title": "  ", "college": "College of Law"})
    assert excinfo.value.details["missing"] == [
        "job_title",
        "number_of_slots",
        "target_start_date",
    ]


def test_approve_opens_vacancy(requests, now):
    request = requests.submit({**PAYLOAD, "justification": "New program"})

    decision = requests.decide(request, "approve", reviewed_by="hr.head")

    assert decision.request.status is VacancyRequestStatus.APPROVED
    assert decision.request.reviewed_at == now
    assert decision.request.vacancy_id == decision.vacancy.id
    assert decision.vacancy.status is VacancyStatus.OPEN
    assert decision.vacancy.college == "College of Science"
    assert decision.vacancy.description == "New program"
    assert decision.vacancy.requirements is None
    assert request.status is VacancyRequestStatus.PENDING


def test_decline_and_double_decision(requests):
    declined = requests.decide(requests.submit(PAYLOAD), "DECLINE", review_notes="No budget")
    assert declined.vacancy is None
    assert declined.request.status is VacancyRequestStatus.DECLINED
    assert declined.request.review_notes == "No budget"

    with pytest.raises(InvalidTransition):
        requests.decide(declined.request, "approve")


@pytest.mark.parametrize("raw", ["defer", "", None])
def test_parse_action_rejects_unknown(raw):
    with pytest.raises(InvalidInput):
        parse_action(raw)


def test_parse_action_accepts_both_actions():
    assert parse_action("Approve") is VacancyRequestAction.APPROVE
    assert parse_action(VacancyRequestAction.DECLINE) is VacancyRequestAction.DECLINE
