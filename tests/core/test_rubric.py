from __future__ import annotations

import pytest

from facultyhiring.core import EvaluationRubric, RubricConfig


def test_educational_sums_degree_additional_degrees_and_units():
    result = EvaluationRubric().compute(
        {
            "educational": {
                "highest_degree": "Masters",
                "additional_masters": 1,
                "additional_units": 12,
            }
        }
    )
    assert result.sub_scores.educational == 65 + 4 + 4


def test_educational_is_capped():
    result = EvaluationRubric().compute(
        {
            "educational": {
                "highest_degree": "PhD",
                "additional_masters": 2,
                "additional_bachelors": 3,
            }
        }
    )
    assert result.sub_scores.educational == 85


def test_additional_units_cap_at_ten_points():
    result = EvaluationRubric().compute(
        {"educational": {"highest_degree": "Other", "additional_units": 90}}
    )
    assert result.sub_scores.educational == 10


def test_unrecognized_degree_is_reported():
    result = EvaluationRubric().compute(
        {"educational": {"highest_degree": "Doctorate", "additional_units": 6}}
    )
    assert result.sub_scores.educational == 2
    assert result.unknown_keys == ["educational.highest_degree=Doctorate"]
    assert not any(item.key.startswith("degree_") for item in result.items)


def test_experience_credits_and_cap():
    rubric = EvaluationRubric()
    moderate = rubric.compute({"experience": {"state_hei_years": 5, "dean_years": 2}})
    assert moderate.sub_scores.experience == 9

    veteran = rubric.compute({"experience": {"state_hei_years": 30}})
    assert veteran.sub_scores.experience == 25


def test_professional_development_inner_and_section_caps():
    result = EvaluationRubric().compute(
        {
            "professional_development": {
                "ts_intl": 5,
                "es_intl": 4,
                "art_intl_sa": 10,
                "bogus": 3,
            }
        }
    )
    # 3.2.1 capped at 10, 3.2.2 at 20, 3.1 at 30
    assert result.sub_scores.professional_development == 60
    assert result.unknown_keys == ["professional_development.bogus"]


def test_technological_ratings_are_clamped():
    result = EvaluationRubric().compute(
        {
            "technological": {
                "word": 7,
                "excel": 4,
                "powerpoint": "not a number",
                "training_international": 5,
                "training_national": 5,
                "training_local": 2,
                "originality": 4,
            }
        }
    )
    assert result.sub_scores.technological == pytest.approx(5 + 4 + 10 + 1)


def test_negative_values_count_as_zero():
    result = EvaluationRubric().compute(
        {"experience": {"state_hei_years": -4}, "technological": {"word": -1}}
    )
    assert result.total == 0
    assert result.items == []


def test_build_items_lists_credited_lines():
    items = EvaluationRubric().build_items(
        {"educational": {"highest_degree": "PhD"}, "experience": {"technician_years": 2}}
    )
    keys = {(item.category, item.key): item.points for item in items}
    assert keys[(1, "degree_PhD")] == 85
    assert keys[(2, "technician_years")] == 2


def test_config_overrides_caps_and_credits():
    config = RubricConfig(educational_cap=50, professional_credits={"award_local": 2})
    result = EvaluationRubric(config=config).compute(
        {
            "educational": {"highest_degree": "PhD"},
            "professional_development": {"award_local": 3},
        }
    )
    assert result.sub_scores.educational == 50
    assert result.sub_scores.professional_development == 6


def test_empty_breakdown_scores_zero():
    assert EvaluationRubric().compute(None).total == 0
