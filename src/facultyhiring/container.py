"""Dependency injection container for the hiring system."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable

from dependency_injector import containers, providers

from .core import (
    EvaluationRubric,
    RenewalWorkflow,
    RubricConfig,
    StageWorkflow,
    VacancyRequestWorkflow,
    WorkflowConfig,
)
from .core.workflow import utc_now
from .persistence import MemoryStore, SqlStore
from .service import HiringService


def build_workflow_config(settings: dict[str, Any] | None) -> WorkflowConfig:
    settings = settings or {}
    return WorkflowConfig(
        required_documents=tuple(settings.get("required_documents") or ()),
        require_passing_score=bool(settings.get("require_passing_score", False)),
    )


def build_rubric_config(settings: dict[str, Any] | None) -> RubricConfig:
    """Layer rubric overrides on top of the default caps and credit tables."""
    config = RubricConfig()
    for name, value in (settings or {}).items():
        current = getattr(config, name, None)
        if isinstance(current, dict):
            merged = dict(current)
            merged.update(value or {})
            setattr(config, name, merged)
        elif hasattr(config, name):
            setattr(config, name, value)
        else:
            raise ValueError(f"Unknown rubric setting: {name!r}")
    return config


class HiringContainer(containers.DeclarativeContainer):
    """Dependency-injector container definition."""

    config = providers.Configuration()

    clock = providers.Object(utc_now)

    # one persistence handle per process
    store = providers.Singleton(MemoryStore)

    workflow = providers.Singleton(
        StageWorkflow,
        config=providers.Callable(build_workflow_config, config.workflow),
        now_provider=clock,
    )
    renewal = providers.Singleton(RenewalWorkflow, now_provider=clock)
    vacancy_requests = providers.Singleton(VacancyRequestWorkflow, now_provider=clock)
    rubric = providers.Singleton(
        EvaluationRubric,
        config=providers.Callable(build_rubric_config, config.rubric),
    )

    service = providers.Factory(
        HiringService,
        store=store,
        workflow=workflow,
        renewal=renewal,
        rubric=rubric,
        vacancy_requests=vacancy_requests,
        now_provider=clock,
    )


def create_container(
    *,
    settings: dict | None = None,
    now_provider: Callable[[], datetime] | None = None,
) -> HiringContainer:
    """Instantiate container with optional overrides."""

    container = HiringContainer()

    if now_provider is not None:
        container.clock.override(providers.Object(now_provider))

    if not settings:
        return container

    # workflow and rubric sections are read by their providers
    container.config.from_dict(settings)

    database_settings = settings.get("database", {}) if isinstance(settings, dict) else {}
    if database_settings.get("url"):
        container.store.override(
            providers.Singleton(
                SqlStore,
                database_settings["url"],
                echo=bool(database_settings.get("echo", False)),
            )
        )

    return container


__all__ = [
    "HiringContainer",
    "build_rubric_config",
    "build_workflow_config",
    "create_container",
]
