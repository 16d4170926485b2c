"""Pydantic configuration schema for YAML input."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class WorkflowSettings(BaseModel):
    required_documents: list[str] | None = None
    require_passing_score: bool | None = None

    model_config = ConfigDict(extra="forbid")


class RubricSettings(BaseModel):
    educational_cap: float | None = None
    experience_cap: float | None = None
    professional_development_cap: float | None = None
    technological_cap: float | None = None
    degree_points: dict[str, float] | None = None
    experience_credits: dict[str, float] | None = None
    professional_credits: dict[str, float] | None = None

    model_config = ConfigDict(extra="forbid")


class DatabaseSettings(BaseModel):
    url: str | None = None
    echo: bool = False

    model_config = ConfigDict(extra="forbid")


class LoggingSettings(BaseModel):
    level: str = "INFO"

    model_config = ConfigDict(extra="forbid")


class AppConfig(BaseModel):
    workflow: WorkflowSettings = Field(default_factory=WorkflowSettings)
    rubric: RubricSettings = Field(default_factory=RubricSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    def to_settings(self) -> dict[str, Any]:
        settings: dict[str, Any] = {}
        workflow = self.workflow.model_dump(exclude_none=True)
        if workflow:
            settings["workflow"] = workflow
        rubric = self.rubric.model_dump(exclude_none=True)
        if rubric:
            settings["rubric"] = rubric
        if self.database.url:
            settings["database"] = self.database.model_dump()
        return settings


def load_config(raw: Any) -> AppConfig:
    """Validate a parsed YAML document; an empty document yields defaults."""
    if raw is None:
        return AppConfig()
    return AppConfig.model_validate(raw)
