from __future__ import annotations

import math
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .applicant import new_id


class SubScores(BaseModel):
    """Pre-aggregated category subtotals fed to the scoring engine."""

    educational: float = 0.0
    experience: float = 0.0
    professional_development: float = 0.0
    technological: float = 0.0

    model_config = ConfigDict(extra="forbid")

    @property
    def total(self) -> float:
        return (
            self.educational
            + self.experience
            + self.professional_development
            + self.technological
        )


class Evaluation(BaseModel):
    """Finalized scoring record for one applicant."""

    id: str = Field(default_factory=new_id)
    applicant_id: str
    educational: float
    experience: float
    professional_development: float
    technological: float
    breakdown: dict[str, Any] = Field(default_factory=dict)
    total_score: float
    rank: str
    rate_per_hour: float
    evaluated_by: str | None = None
    remarks: str | None = None
    evaluated_at: datetime | None = None
    revision: int = 1

    version: int = 0

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def _total_matches_sub_scores(self) -> "Evaluation":
        expected = self.sub_scores.total
        if not math.isclose(self.total_score, expected, abs_tol=1e-9):
            raise ValueError(
                f"total_score {self.total_score} does not equal sub-score sum {expected}"
            )
        return self

    @property
    def sub_scores(self) -> SubScores:
        return SubScores(
            educational=self.educational,
            experience=self.experience,
            professional_development=self.professional_development,
            technological=self.technological,
        )
