"""Pydantic record definitions shared by the engines and the stores."""

from __future__ import annotations

from .applicant import DOCUMENT_FIELDS, Applicant, Interview, InterviewDetails, new_id
from .config import (
    AppConfig,
    DatabaseSettings,
    LoggingSettings,
    RubricSettings,
    WorkflowSettings,
    load_config,
)
from .contract import Contract, Vacancy, VacancyRequest
from .enums import (
    ContractStatus,
    DeanRecommendation,
    InterviewStatus,
    Role,
    Stage,
    VacancyRequestAction,
    VacancyRequestStatus,
    VacancyStatus,
)
from .evaluation import Evaluation, SubScores

__all__ = [
    "Applicant",
    "Interview",
    "InterviewDetails",
    "Evaluation",
    "SubScores",
    "Contract",
    "Vacancy",
    "VacancyRequest",
    "Stage",
    "InterviewStatus",
    "VacancyStatus",
    "DeanRecommendation",
    "ContractStatus",
    "VacancyRequestStatus",
    "VacancyRequestAction",
    "Role",
    "AppConfig",
    "WorkflowSettings",
    "RubricSettings",
    "DatabaseSettings",
    "LoggingSettings",
    "load_config",
    "DOCUMENT_FIELDS",
    "new_id",
]
