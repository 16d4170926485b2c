from __future__ import annotations

import math

import pytest

from facultyhiring.core import (
    MAX_SCORE,
    PASSING_SCORE,
    RANK_TABLE,
    RankBand,
    is_passing,
    rank_of,
    score,
    validate_rank_table,
)
from facultyhiring.errors import InvalidInput
from facultyhiring.schemas import SubScores


def test_rank_table_partitions_every_integer_score():
    for total in range(0, MAX_SCORE + 1):
        matches = [band for band in RANK_TABLE if band.min_score <= total <= band.max_score]
        assert len(matches) == 1, total
        assert rank_of(total) is matches[0]


@pytest.mark.parametrize(
    ("total", "rank", "rate"),
    [
        (250, "Professor IV", 500),
        (240, "Professor IV", 500),
        (239, "Professor III", 450),
        (210, "Professor I", 350),
        (209.5, "Associate Professor IV", 320),
        (175, "Associate Professor I", 260),
        (174.9, "Assistant Professor IV", 240),
        (110, "Instructor I", 120),
        (109, "Lecturer I", 100),
        (0, "Lecturer I", 100),
    ],
)
def test_rank_boundaries(total, rank, rate):
    band = rank_of(total)
    assert band.name == rank
    assert band.rate_per_hour == rate


@pytest.mark.parametrize("total", [-1, -0.5, 250.5, 300, math.nan, math.inf])
def test_out_of_table_totals_fall_back_to_lowest_band(total):
    band = rank_of(total)
    assert band.name == "Lecturer I"
    assert band.rate_per_hour == 100


def test_score_sums_sub_scores_and_ranks_total():
    result = score(
        SubScores(educational=70, experience=65, professional_development=40, technological=35)
    )
    assert result.total_score == 210
    assert result.rank == "Professor I"
    assert result.rate_per_hour == 350
    assert result.passing is True


def test_score_accepts_mapping():
    result = score({"educational": 50, "experience": 10.5})
    assert result.total_score == pytest.approx(60.5)
    assert result.rank == "Lecturer I"


def test_score_refuses_malformed_sub_scores():
    with pytest.raises(InvalidInput) as excinfo:
        score({"educational": "abc", "bonus": 5})
    fields = sorted(error["field"] for error in excinfo.value.details["errors"])
    assert fields == ["bonus", "educational"]


def test_passing_threshold():
    assert PASSING_SCORE == 175
    assert is_passing(175)
    assert not is_passing(174.99)


def test_validate_rank_table_rejects_gap():
    broken = [RankBand("Low", 0, 100, 100), RankBand("High", 102, 250, 200)]
    with pytest.raises(ValueError, match="Gap"):
        validate_rank_table(broken)


def test_validate_rank_table_rejects_overlap():
    broken = [RankBand("Low", 0, 120, 100), RankBand("High", 110, 250, 200)]
    with pytest.raises(ValueError, match="overlap"):
        validate_rank_table(broken)


def test_validate_rank_table_rejects_short_table():
    with pytest.raises(ValueError, match="ends at"):
        validate_rank_table([RankBand("Only", 0, 200, 100)])
