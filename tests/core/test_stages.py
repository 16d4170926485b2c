from __future__ import annotations

import pytest

from facultyhiring.core import authorize
from facultyhiring.core.stages import PIPELINE, is_terminal, position
from facultyhiring.errors import Forbidden
from facultyhiring.schemas import Role, Stage


def test_hr_runs_pipeline_transitions():
    for operation in ("endorse", "schedule_interview", "complete_interview", "mark_hired"):
        assert authorize(operation, "HR") is Role.HR


def test_dean_is_limited_to_recommendations_and_rejections():
    assert authorize("submit_dean_recommendation", Role.DEAN) is Role.DEAN
    assert authorize("reject", "dean") is Role.DEAN
    with pytest.raises(Forbidden) as excinfo:
        authorize("endorse", Role.DEAN)
    assert excinfo.value.status_code == 403
    assert excinfo.value.details["allowed"] == ["HR"]


def test_public_may_only_apply():
    assert authorize("submit_application", Role.PUBLIC) is Role.PUBLIC
    with pytest.raises(Forbidden):
        authorize("force_set_stage", Role.PUBLIC)


def test_unknown_operation_is_a_programming_error():
    with pytest.raises(KeyError):
        authorize("promote", Role.HR)


def test_pipeline_order():
    assert [position(stage) for stage in PIPELINE] == list(range(len(PIPELINE)))
    assert position(Stage.REJECTED) > position(Stage.HIRED)
    assert is_terminal(Stage.HIRED)
    assert is_terminal(Stage.REJECTED)
    assert not is_terminal(Stage.FOR_HIRING)


def test_vacancy_requests_go_from_dean_to_hr():
    assert authorize("submit_vacancy_request", "Dean") is Role.DEAN
    assert authorize("decide_vacancy_request", "HR") is Role.HR
    with pytest.raises(Forbidden):
        authorize("submit_vacancy_request", Role.HR)
    with pytest.raises(Forbidden):
        authorize("decide_vacancy_request", Role.DEAN)
