"""Hiring service: binds the workflow engines to an injected store."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Mapping, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from .core import (
    EvaluationRubric,
    RenewalWorkflow,
    RequestDecision,
    StageWorkflow,
    TransitionResult,
    VacancyRequestWorkflow,
    authorize,
)
from .core.workflow import utc_now
from .errors import HiringError, InvalidInput, InvalidTransition, NotFound
from .persistence import ApplicantQuery, ContractQuery, Page, Store
from .schemas import (
    Applicant,
    Contract,
    Evaluation,
    Role,
    Stage,
    Vacancy,
    VacancyRequest,
    VacancyRequestStatus,
    VacancyStatus,
)

M = TypeVar("M", bound=BaseModel)

APPLICATION_FIELDS: tuple[str, ...] = (
    "vacancy_id",
    "full_name",
    "email",
    "phone",
    "cover_letter",
    "resume_url",
    "pds_url",
    "transcript_url",
    "trainings_url",
    "employment_url",
)

VACANCY_FIELDS: tuple[str, ...] = ("title", "college", "status", "description", "requirements")


def _require(payload: Mapping[str, Any], names: tuple[str, ...]) -> None:
    missing = [name for name in names if not str(payload.get(name) or "").strip()]
    if missing:
        raise InvalidInput(
            f"Missing required field(s): {', '.join(missing)}",
            details={"missing": missing},
        )


def _build(model: type[M], **fields: Any) -> M:
    try:
        return model(**fields)
    except ValidationError as exc:
        raise InvalidInput.from_validation(exc) from exc


class HiringService:
    """Run each workflow operation inside exactly one unit of work.

    Every public transition authorizes the caller's role, loads the records it
    needs, asks the engine for the new snapshots and writes all of them before
    the unit of work commits. Refusals are logged at warning level and
    re-raised unchanged.
    """

    def __init__(
        self,
        *,
        store: Store,
        workflow: StageWorkflow | None = None,
        renewal: RenewalWorkflow | None = None,
        rubric: EvaluationRubric | None = None,
        vacancy_requests: VacancyRequestWorkflow | None = None,
        now_provider: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._now_provider = now_provider or utc_now
        self._workflow = workflow or StageWorkflow(now_provider=self._now_provider)
        self._renewal = renewal or RenewalWorkflow(now_provider=self._now_provider)
        self._rubric = rubric or EvaluationRubric()
        self._vacancy_requests = vacancy_requests or VacancyRequestWorkflow(
            now_provider=self._now_provider
        )
        self._logger = structlog.get_logger(__name__)

    @property
    def store(self) -> Store:
        return self._store

    # applications

    def submit_application(
        self,
        payload: Mapping[str, Any],
        *,
        role: Role | str = Role.PUBLIC,
    ) -> Applicant:
        try:
            authorize("submit_application", role)
            _require(payload, ("vacancy_id", "full_name", "email"))
            fields = {name: payload[name] for name in APPLICATION_FIELDS if payload.get(name)}
            with self._store.unit_of_work() as uow:
                vacancy = uow.vacancies.get(fields["vacancy_id"])
                if vacancy is None:
                    raise NotFound("Vacancy", fields["vacancy_id"])
                if vacancy.status is not VacancyStatus.OPEN:
                    raise InvalidTransition(
                        "submit_application",
                        vacancy.status.value,
                        expected=[VacancyStatus.OPEN.value],
                        reason=f"Vacancy {vacancy.id!r} is not accepting applications",
                    )
                now = self._now_provider()
                applicant = uow.applicants.add(
                    _build(
                        Applicant,
                        **fields,
                        stage=Stage.APPLIED,
                        applied_date=now,
                        status_updated_at=now,
                    )
                )
        except HiringError as exc:
            self._refused("submit_application", exc, vacancy_id=payload.get("vacancy_id"))
            raise

        self._logger.info(
            "workflow.submit_application",
            applicant_id=applicant.id,
            vacancy_id=applicant.vacancy_id,
        )
        return applicant

    # validated transitions

    def endorse(
        self, applicant_id: str, *, role: Role | str, idempotent: bool = False
    ) -> TransitionResult:
        return self._transition(
            "endorse",
            applicant_id,
            role,
            lambda uow, applicant: self._workflow.endorse(applicant, idempotent=idempotent),
        )

    def schedule_interview(
        self,
        applicant_id: str,
        details: Mapping[str, Any],
        *,
        role: Role | str,
        idempotent: bool = False,
    ) -> TransitionResult:
        return self._transition(
            "schedule_interview",
            applicant_id,
            role,
            lambda uow, applicant: self._workflow.schedule_interview(
                applicant,
                details,
                interview=uow.interviews.for_applicant(applicant.id),
                idempotent=idempotent,
            ),
            writes=("interview",),
        )

    def complete_interview(
        self, applicant_id: str, *, role: Role | str, idempotent: bool = False
    ) -> TransitionResult:
        return self._transition(
            "complete_interview",
            applicant_id,
            role,
            lambda uow, applicant: self._workflow.complete_interview(
                applicant,
                uow.interviews.for_applicant(applicant.id),
                idempotent=idempotent,
            ),
            writes=("interview",),
        )

    def mark_interview_incomplete(
        self,
        applicant_id: str,
        reason: str | None = None,
        *,
        role: Role | str,
        idempotent: bool = False,
    ) -> TransitionResult:
        return self._transition(
            "mark_interview_incomplete",
            applicant_id,
            role,
            lambda uow, applicant: self._workflow.mark_interview_incomplete(
                applicant,
                uow.interviews.for_applicant(applicant.id),
                reason,
                idempotent=idempotent,
            ),
            writes=("interview",),
        )

    def record_evaluation(
        self,
        applicant_id: str,
        scores: Mapping[str, Any],
        *,
        role: Role | str,
        breakdown: Mapping[str, Any] | None = None,
        evaluated_by: str | None = None,
        remarks: str | None = None,
    ) -> TransitionResult:
        result = self._transition(
            "record_evaluation",
            applicant_id,
            role,
            lambda uow, applicant: self._workflow.record_evaluation(
                applicant,
                scores,
                existing=uow.evaluations.for_applicant(applicant.id),
                breakdown=breakdown,
                evaluated_by=evaluated_by,
                remarks=remarks,
            ),
            writes=("evaluation",),
        )
        if result.score is not None:
            self._logger.info(
                "evaluation.scored",
                applicant_id=applicant_id,
                total_score=result.score.total_score,
                rank=result.score.rank,
                rate_per_hour=result.score.rate_per_hour,
                revision=result.details.get("revision"),
            )
        return result

    def record_detailed_evaluation(
        self,
        applicant_id: str,
        breakdown: Mapping[str, Any],
        *,
        role: Role | str,
        evaluated_by: str | None = None,
        remarks: str | None = None,
    ) -> TransitionResult:
        """Score a detailed rubric breakdown and record the resulting evaluation."""
        computed = self._rubric.compute(breakdown)
        if computed.unknown_keys:
            self._logger.warning(
                "evaluation.unknown_keys",
                applicant_id=applicant_id,
                keys=computed.unknown_keys,
            )
        result = self.record_evaluation(
            applicant_id,
            computed.sub_scores.model_dump(),
            role=role,
            breakdown=breakdown,
            evaluated_by=evaluated_by,
            remarks=remarks,
        )
        result.details["unknown_keys"] = computed.unknown_keys
        return result

    def advance_to_for_hiring(
        self, applicant_id: str, *, role: Role | str, idempotent: bool = False
    ) -> TransitionResult:
        return self._transition(
            "advance_to_for_hiring",
            applicant_id,
            role,
            lambda uow, applicant: self._workflow.advance_to_for_hiring(
                applicant,
                uow.evaluations.for_applicant(applicant.id),
                idempotent=idempotent,
            ),
        )

    def mark_hired(
        self,
        applicant_id: str,
        *,
        role: Role | str,
        employee_id: str | None = None,
        hired_at: datetime | None = None,
        open_contract: bool = True,
        employment_type: str | None = None,
        idempotent: bool = False,
    ) -> TransitionResult:
        """Hire the applicant and, unless disabled, open their first contract."""

        def step(uow, applicant: Applicant) -> TransitionResult:
            result = self._workflow.mark_hired(
                applicant,
                employee_id=employee_id,
                hired_at=hired_at,
                idempotent=idempotent,
            )
            if result.changed and open_contract:
                result.contract = self._renewal.open_contract(
                    result.applicant,
                    uow.evaluations.for_applicant(applicant.id),
                    uow.vacancies.get(applicant.vacancy_id),
                    sequence=uow.contracts.count() + 1,
                    employment_type=employment_type,
                )
            return result

        result = self._transition("mark_hired", applicant_id, role, step, writes=("contract",))
        if result.contract is not None:
            self._logger.info(
                "renewal.contract_opened",
                contract_id=result.contract.id,
                contract_no=result.contract.contract_no,
                applicant_id=applicant_id,
            )
        return result

    def reject(
        self,
        applicant_id: str,
        reason: str | None = None,
        *,
        role: Role | str,
        idempotent: bool = False,
    ) -> TransitionResult:
        return self._transition(
            "reject",
            applicant_id,
            role,
            lambda uow, applicant: self._workflow.reject(
                applicant, reason, idempotent=idempotent
            ),
        )

    # administration

    def force_set_stage(
        self,
        applicant_id: str,
        stage: Stage | str,
        *,
        role: Role | str,
        notes: str | None = None,
    ) -> TransitionResult:
        """Set ``stage`` without precondition checks."""
        result = self._transition(
            "force_set_stage",
            applicant_id,
            role,
            lambda uow, applicant: self._workflow.force_set_stage(applicant, stage, notes=notes),
        )
        self._logger.warning(
            "workflow.override",
            applicant_id=applicant_id,
            from_stage=result.previous_stage.value,
            to_stage=result.applicant.stage.value,
        )
        return result

    def delete_applicant(self, applicant_id: str, *, role: Role | str) -> None:
        """Remove the applicant together with their interview and evaluation."""
        try:
            authorize("delete_applicant", role)
            with self._store.unit_of_work() as uow:
                self._load_applicant(uow, applicant_id)
                interview = uow.interviews.for_applicant(applicant_id)
                if interview is not None:
                    uow.interviews.delete(interview.id)
                evaluation = uow.evaluations.for_applicant(applicant_id)
                if evaluation is not None:
                    uow.evaluations.delete(evaluation.id)
                uow.applicants.delete(applicant_id)
        except HiringError as exc:
            self._refused("delete_applicant", exc, applicant_id=applicant_id)
            raise
        self._logger.info(
            "workflow.delete_applicant",
            applicant_id=applicant_id,
            interview_removed=interview is not None,
            evaluation_removed=evaluation is not None,
        )

    # renewals

    def submit_dean_recommendation(
        self,
        contract_id: str,
        decision: str,
        *,
        role: Role | str,
        remarks: str | None = None,
        decided_by: str | None = None,
    ) -> Contract:
        try:
            authorize("submit_dean_recommendation", role)
            with self._store.unit_of_work() as uow:
                contract = uow.contracts.get(contract_id)
                if contract is None:
                    raise NotFound("Contract", contract_id)
                decided = self._renewal.submit_dean_recommendation(
                    contract, decision, remarks=remarks, decided_by=decided_by
                )
                stored = uow.contracts.update(decided)
        except HiringError as exc:
            self._refused("submit_dean_recommendation", exc, contract_id=contract_id)
            raise

        self._logger.info(
            "renewal.recommendation",
            contract_id=contract_id,
            decision=stored.dean_recommendation.value,
            status=stored.status.value,
            decided_by=decided_by,
        )
        return stored

    def list_renewals(
        self,
        *,
        search: str | None = None,
        college: str | None = None,
        skip: int = 0,
        take: int | None = None,
    ) -> Page[Contract]:
        query = ContractQuery(search=search, college=college, skip=skip, take=take)
        with self._store.unit_of_work() as uow:
            return uow.contracts.search(query)

    def get_contract(self, contract_id: str) -> Contract:
        with self._store.unit_of_work() as uow:
            contract = uow.contracts.get(contract_id)
        if contract is None:
            raise NotFound("Contract", contract_id)
        return contract

    # vacancies

    def post_vacancy(self, payload: Mapping[str, Any], *, role: Role | str) -> Vacancy:
        try:
            authorize("post_vacancy", role)
            _require(payload, ("title", "college"))
            fields = {name: payload[name] for name in VACANCY_FIELDS if payload.get(name)}
            if "status" in fields:
                fields["status"] = VacancyStatus.parse(fields["status"])
            with self._store.unit_of_work() as uow:
                vacancy = uow.vacancies.add(
                    _build(Vacancy, **fields, posted_date=self._now_provider())
                )
        except HiringError as exc:
            self._refused("post_vacancy", exc)
            raise
        self._logger.info("vacancy.posted", vacancy_id=vacancy.id, college=vacancy.college)
        return vacancy

    def close_vacancy(self, vacancy_id: str, *, role: Role | str) -> Vacancy:
        try:
            authorize("close_vacancy", role)
            with self._store.unit_of_work() as uow:
                vacancy = uow.vacancies.get(vacancy_id)
                if vacancy is None:
                    raise NotFound("Vacancy", vacancy_id)
                if vacancy.status is VacancyStatus.CLOSED:
                    raise InvalidTransition(
                        "close_vacancy",
                        vacancy.status.value,
                        reason=f"Vacancy {vacancy_id!r} is already closed",
                    )
                closed = uow.vacancies.update(
                    vacancy.model_copy(update={"status": VacancyStatus.CLOSED})
                )
        except HiringError as exc:
            self._refused("close_vacancy", exc, vacancy_id=vacancy_id)
            raise
        self._logger.info("vacancy.closed", vacancy_id=vacancy_id)
        return closed

    def list_vacancies(self, status: VacancyStatus | str | None = None) -> list[Vacancy]:
        parsed = VacancyStatus.parse(status) if status else None
        with self._store.unit_of_work() as uow:
            return uow.vacancies.list(parsed)

    # vacancy requests

    def submit_vacancy_request(
        self,
        payload: Mapping[str, Any],
        *,
        role: Role | str,
        submitted_by: str | None = None,
    ) -> VacancyRequest:
        try:
            authorize("submit_vacancy_request", role)
            request = self._vacancy_requests.submit(payload, submitted_by=submitted_by)
            with self._store.unit_of_work() as uow:
                stored = uow.vacancy_requests.add(request)
        except HiringError as exc:
            self._refused("submit_vacancy_request", exc, college=payload.get("college"))
            raise
        self._logger.info(
            "vacancy_request.submitted",
            request_id=stored.id,
            college=stored.college,
            slots=stored.number_of_slots,
        )
        return stored

    def decide_vacancy_request(
        self,
        request_id: str,
        action: str,
        *,
        role: Role | str,
        review_notes: str | None = None,
        reviewed_by: str | None = None,
    ) -> RequestDecision:
        """Approve (opening a vacancy) or decline a pending request."""
        try:
            authorize("decide_vacancy_request", role)
            with self._store.unit_of_work() as uow:
                request = uow.vacancy_requests.get(request_id)
                if request is None:
                    raise NotFound("Vacancy request", request_id)
                decision = self._vacancy_requests.decide(
                    request, action, review_notes=review_notes, reviewed_by=reviewed_by
                )
                # the vacancy must exist before the request points at it
                if decision.vacancy is not None:
                    decision.vacancy = uow.vacancies.add(decision.vacancy)
                decision.request = uow.vacancy_requests.update(decision.request)
        except HiringError as exc:
            self._refused("decide_vacancy_request", exc, request_id=request_id)
            raise
        self._logger.info(
            "vacancy_request.decided",
            request_id=request_id,
            status=decision.request.status.value,
            vacancy_id=decision.request.vacancy_id,
        )
        return decision

    def list_vacancy_requests(
        self, status: VacancyRequestStatus | str | None = None
    ) -> list[VacancyRequest]:
        parsed = VacancyRequestStatus.parse(status) if status else None
        with self._store.unit_of_work() as uow:
            return uow.vacancy_requests.list(parsed)

    # reads

    def get_applicant(self, applicant_id: str) -> Applicant:
        with self._store.unit_of_work() as uow:
            return self._load_applicant(uow, applicant_id)

    def get_evaluation(self, applicant_id: str) -> Evaluation | None:
        with self._store.unit_of_work() as uow:
            self._load_applicant(uow, applicant_id)
            return uow.evaluations.for_applicant(applicant_id)

    def list_applicants(
        self,
        *,
        search: str | None = None,
        stage: Stage | str | None = None,
        vacancy_id: str | None = None,
        college: str | None = None,
    ) -> list[Applicant]:
        query = ApplicantQuery(
            search=search,
            stage=Stage.parse(stage) if stage else None,
            vacancy_id=vacancy_id,
            college=college,
        )
        with self._store.unit_of_work() as uow:
            return uow.applicants.list(query)

    def dashboard_counts(self) -> dict[str, int]:
        """Number of applicants in each stage, keyed by stage value."""
        counts = {stage.value: 0 for stage in Stage}
        with self._store.unit_of_work() as uow:
            for applicant in uow.applicants.list(ApplicantQuery()):
                counts[applicant.stage.value] += 1
        return counts

    # internals

    def _transition(
        self,
        operation: str,
        applicant_id: str,
        role: Role | str,
        step: Callable[[Any, Applicant], TransitionResult],
        *,
        writes: tuple[str, ...] = (),
    ) -> TransitionResult:
        try:
            authorize(operation, role)
            with self._store.unit_of_work() as uow:
                applicant = self._load_applicant(uow, applicant_id)
                result = step(uow, applicant)
                if result.changed:
                    self._persist(uow, result, writes)
        except HiringError as exc:
            self._refused(operation, exc, applicant_id=applicant_id)
            raise

        self._logger.info(
            f"workflow.{operation}",
            applicant_id=applicant_id,
            from_stage=result.previous_stage.value,
            to_stage=result.applicant.stage.value,
            changed=result.changed,
        )
        return result

    @staticmethod
    def _persist(uow: Any, result: TransitionResult, writes: tuple[str, ...]) -> None:
        # related records first, the applicant last
        if "interview" in writes and result.interview is not None:
            result.interview = _save(uow.interviews, result.interview)
        if "evaluation" in writes and result.evaluation is not None:
            result.evaluation = _save(uow.evaluations, result.evaluation)
        if "contract" in writes and result.contract is not None:
            result.contract = _save(uow.contracts, result.contract)
        result.applicant = uow.applicants.update(result.applicant)

    @staticmethod
    def _load_applicant(uow: Any, applicant_id: str) -> Applicant:
        applicant = uow.applicants.get(applicant_id)
        if applicant is None:
            raise NotFound("Applicant", applicant_id)
        return applicant

    def _refused(self, operation: str, exc: HiringError, **context: Any) -> None:
        self._logger.warning(
            "workflow.refused",
            operation=operation,
            error=exc.code,
            message=exc.message,
            **context,
        )


def _save(repository: Any, record: Any) -> Any:
    # version 0 marks a record that has never been stored
    if record.version == 0:
        return repository.add(record)
    return repository.update(record)


__all__ = ["APPLICATION_FIELDS", "HiringService"]
