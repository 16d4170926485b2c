"""Dean-to-HR vacancy request sub-workflow."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Mapping

from pydantic import ValidationError

from ..errors import InvalidInput, InvalidTransition
from ..schemas import (
    Vacancy,
    VacancyRequest,
    VacancyRequestAction,
    VacancyRequestStatus,
    VacancyStatus,
)
from .workflow import utc_now

REQUEST_FIELDS: tuple[str, ...] = (
    "job_title",
    "college",
    "number_of_slots",
    "target_start_date",
    "minimum_qualifications",
    "justification",
)

REQUIRED_REQUEST_FIELDS: tuple[str, ...] = (
    "job_title",
    "college",
    "number_of_slots",
    "target_start_date",
)


@dataclass(slots=True)
class RequestDecision:
    """Reviewed request plus the vacancy an approval opened."""

    request: VacancyRequest
    vacancy: Vacancy | None = None


def parse_action(raw: VacancyRequestAction | str | None) -> VacancyRequestAction:
    try:
        return VacancyRequestAction.parse(raw or "")
    except InvalidInput as exc:
        raise InvalidInput(
            "action must be 'approve' or 'decline'",
            details={"action": raw},
        ) from exc


class VacancyRequestWorkflow:
    """Build dean requests and apply HR decisions to them."""

    def __init__(self, *, now_provider: Callable[[], datetime] | None = None) -> None:
        self._now_provider = now_provider or utc_now

    def submit(
        self,
        payload: Mapping[str, Any],
        *,
        submitted_by: str | None = None,
    ) -> VacancyRequest:
        missing = [
            name
            for name in REQUIRED_REQUEST_FIELDS
            if payload.get(name) is None or not str(payload.get(name)).strip()
        ]
        if missing:
            raise InvalidInput(
                f"Missing required field(s): {', '.join(missing)}",
                details={"missing": missing},
            )

        fields = {name: payload[name] for name in REQUEST_FIELDS if payload.get(name) is not None}
        try:
            return VacancyRequest(
                **fields,
                status=VacancyRequestStatus.PENDING,
                submitted_by=submitted_by,
                submitted_at=self._now_provider(),
            )
        except ValidationError as exc:
            raise InvalidInput.from_validation(exc) from exc

    def decide(
        self,
        request: VacancyRequest,
        action: VacancyRequestAction | str | None,
        *,
        review_notes: str | None = None,
        reviewed_by: str | None = None,
    ) -> RequestDecision:
        parsed = parse_action(action)
        if request.status is not VacancyRequestStatus.PENDING:
            raise InvalidTransition(
                "decide_vacancy_request",
                request.status.value,
                expected=[VacancyRequestStatus.PENDING.value],
                reason=f"Vacancy request {request.id!r} has already been reviewed",
            )

        now = self._now_provider()
        review = {"reviewed_at": now, "reviewed_by": reviewed_by, "review_notes": review_notes}
        if parsed is VacancyRequestAction.DECLINE:
            declined = request.model_copy(
                update={**review, "status": VacancyRequestStatus.DECLINED}
            )
            return RequestDecision(declined)

        vacancy = Vacancy(
            title=request.job_title,
            college=request.college,
            status=VacancyStatus.OPEN,
            requirements=request.minimum_qualifications or None,
            description=request.justification or None,
            posted_date=now,
        )
        approved = request.model_copy(
            update={
                **review,
                "status": VacancyRequestStatus.APPROVED,
                "vacancy_id": vacancy.id,
            }
        )
        return RequestDecision(approved, vacancy)


__all__ = ["RequestDecision", "VacancyRequestWorkflow", "parse_action"]
