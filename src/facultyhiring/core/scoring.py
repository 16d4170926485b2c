"""Evaluation scoring: sub-score totals mapped to academic rank and hourly rate."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from pydantic import ValidationError

from ..errors import InvalidInput
from ..schemas import SubScores

MAX_SCORE = 250
PASSING_SCORE = 175  # 70% of MAX_SCORE


@dataclass(frozen=True, slots=True)
class RankBand:
    """Closed integer score interval with its rank name and hourly rate."""

    name: str
    min_score: int
    max_score: int
    rate_per_hour: float

    def contains(self, total: float) -> bool:
        return self.min_score <= math.floor(total) <= self.max_score


@dataclass(slots=True)
class ScoreResult:
    """Scoring engine output."""

    total_score: float
    rank: str
    rate_per_hour: float

    @property
    def passing(self) -> bool:
        return is_passing(self.total_score)


RANK_TABLE: tuple[RankBand, ...] = (
    RankBand("Professor IV", 240, 250, 500),
    RankBand("Professor III", 230, 239, 450),
    RankBand("Professor II", 220, 229, 400),
    RankBand("Professor I", 210, 219, 350),
    RankBand("Associate Professor IV", 200, 209, 320),
    RankBand("Associate Professor III", 190, 199, 300),
    RankBand("Associate Professor II", 180, 189, 280),
    RankBand("Associate Professor I", 175, 179, 260),
    RankBand("Assistant Professor IV", 170, 174, 240),
    RankBand("Assistant Professor III", 160, 169, 220),
    RankBand("Assistant Professor II", 150, 159, 200),
    RankBand("Assistant Professor I", 140, 149, 180),
    RankBand("Instructor III", 130, 139, 160),
    RankBand("Instructor II", 120, 129, 140),
    RankBand("Instructor I", 110, 119, 120),
    RankBand("Lecturer I", 0, 109, 100),
)


def validate_rank_table(table: Sequence[RankBand], *, maximum: int = MAX_SCORE) -> None:
    """Raise ``ValueError`` unless ``table`` partitions ``[0, maximum]`` exactly."""
    if not table:
        raise ValueError("Rank table is empty")
    ordered = sorted(table, key=lambda band: band.min_score)
    if ordered[0].min_score != 0:
        raise ValueError(f"Rank table starts at {ordered[0].min_score}, expected 0")
    if ordered[-1].max_score != maximum:
        raise ValueError(f"Rank table ends at {ordered[-1].max_score}, expected {maximum}")
    for band in ordered:
        if band.max_score < band.min_score:
            raise ValueError(f"Band {band.name!r} has max below min")
    for lower, upper in zip(ordered, ordered[1:]):
        if upper.min_score <= lower.max_score:
            raise ValueError(f"Bands {lower.name!r} and {upper.name!r} overlap")
        if upper.min_score != lower.max_score + 1:
            raise ValueError(f"Gap between {lower.name!r} and {upper.name!r}")


validate_rank_table(RANK_TABLE)

_FALLBACK: RankBand = min(RANK_TABLE, key=lambda band: band.min_score)


def rank_of(total_score: float, *, table: Sequence[RankBand] = RANK_TABLE) -> RankBand:
    """Return the band containing ``total_score``.

    Fractional totals fall into the band of their integer floor, so a total
    reaching a band's minimum already belongs to that band. Totals outside the
    table (negative, above the maximum, NaN) resolve to the lowest band.
    """
    fallback = _FALLBACK if table is RANK_TABLE else min(table, key=lambda b: b.min_score)
    try:
        total = float(total_score)
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(total) or total < 0:
        return fallback
    for band in table:
        if total <= band.max_score and band.contains(total):
            return band
    return fallback


def is_passing(total_score: float) -> bool:
    return total_score >= PASSING_SCORE


def score(sub_scores: SubScores | Mapping[str, Any]) -> ScoreResult:
    """Sum the four sub-scores and rank the total."""
    if not isinstance(sub_scores, SubScores):
        try:
            sub_scores = SubScores.model_validate(dict(sub_scores))
        except ValidationError as exc:
            raise InvalidInput.from_validation(exc) from exc
    total = sub_scores.total
    band = rank_of(total)
    return ScoreResult(total_score=total, rank=band.name, rate_per_hour=band.rate_per_hour)


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
]
