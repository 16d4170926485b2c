"""Workflow and scoring engines."""

from __future__ import annotations

from .renewal import RenewalWorkflow, parse_decision
from .rubric import EvaluationRubric, RubricConfig, RubricResult
from .scoring import (
    MAX_SCORE,
    PASSING_SCORE,
    RANK_TABLE,
    RankBand,
    ScoreResult,
    is_passing,
    rank_of,
    score,
    validate_rank_table,
)
from .stages import authorize
from .vacancy_requests import RequestDecision, VacancyRequestWorkflow, parse_action
from .workflow import StageWorkflow, TransitionResult, WorkflowConfig

__all__ = [
    "MAX_SCORE",
    "PASSING_SCORE",
    "RANK_TABLE",
    "RankBand",
    "ScoreResult",
    "is_passing",
    "rank_of",
    "score",
    "validate_rank_table",
    "EvaluationRubric",
    "RubricConfig",
    "RubricResult",
    "StageWorkflow",
    "TransitionResult",
    "WorkflowConfig",
    "RenewalWorkflow",
    "parse_decision",
    "authorize",
    "RequestDecision",
    "VacancyRequestWorkflow",
    "parse_action",
]
