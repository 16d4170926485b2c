"""Contract renewal sub-workflow."""

from __future__ import annotations

from datetime import date, datetime
from typing import Callable

import pendulum

from ..errors import InvalidInput, InvalidRecommendation, InvalidTransition
from ..schemas import (
    Applicant,
    Contract,
    ContractStatus,
    DeanRecommendation,
    Evaluation,
    Vacancy,
)
from .workflow import utc_now

_DECISION_STATUS: dict[DeanRecommendation, ContractStatus] = {
    DeanRecommendation.RENEW: ContractStatus.APPROVED,
    DeanRecommendation.NOT_RENEW: ContractStatus.REJECTED,
}


def parse_decision(raw: DeanRecommendation | str | None) -> DeanRecommendation:
    """Accept ``Renew``/``RENEW`` and ``NotRenew``/``NOT_RENEW`` only."""
    try:
        decision = DeanRecommendation.parse(raw or "")
    except InvalidInput as exc:
        raise InvalidRecommendation(
            "decision must be 'Renew' or 'NotRenew'",
            details={"decision": raw},
        ) from exc
    if decision is DeanRecommendation.PENDING:
        raise InvalidRecommendation(
            "decision must be 'Renew' or 'NotRenew'",
            details={"decision": raw},
        )
    return decision


class RenewalWorkflow:
    """Single-transition state machine for dean renewal recommendations."""

    def __init__(self, *, now_provider: Callable[[], datetime] | None = None) -> None:
        self._now_provider = now_provider or utc_now

    def submit_dean_recommendation(
        self,
        contract: Contract,
        decision: DeanRecommendation | str | None,
        *,
        remarks: str | None = None,
        decided_by: str | None = None,
    ) -> Contract:
        parsed = parse_decision(decision)
        if contract.dean_recommendation is not DeanRecommendation.PENDING:
            raise InvalidTransition(
                "submit_dean_recommendation",
                contract.dean_recommendation.value,
                expected=[DeanRecommendation.PENDING.value],
                reason="Dean recommendation has already been submitted",
            )
        return contract.model_copy(
            update={
                "dean_recommendation": parsed,
                "dean_remarks": remarks,
                "decided_by": decided_by,
                "decided_at": self._now_provider(),
                "status": _DECISION_STATUS[parsed],
            }
        )

    def open_contract(
        self,
        applicant: Applicant,
        evaluation: Evaluation | None,
        vacancy: Vacancy | None,
        *,
        sequence: int,
        start: date | None = None,
        employment_type: str | None = None,
        term_years: int = 1,
    ) -> Contract:
        """Build the contract issued when an applicant is hired."""
        begin = start or self._now_provider().date()
        begin = pendulum.date(begin.year, begin.month, begin.day)
        return Contract(
            contract_no=f"C-{begin.year}-{sequence:03d}",
            faculty_name=applicant.full_name,
            email=applicant.email,
            college=vacancy.college if vacancy else None,
            job_title=vacancy.title if vacancy else None,
            position=evaluation.rank if evaluation else None,
            employment_type=employment_type or "Full-time",
            rate_per_hour=evaluation.rate_per_hour if evaluation else None,
            start_date=begin,
            end_date=begin.add(years=term_years),
            applicant_id=applicant.id,
            evaluation_id=evaluation.id if evaluation else None,
        )


__all__ = ["RenewalWorkflow", "parse_decision"]
