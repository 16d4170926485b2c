"""Detailed evaluation rubric.

Turns the nested breakdown HR fills in during evaluation into the four capped
category subtotals consumed by :func:`facultyhiring.core.scoring.score`.

Breakdown shape (every key optional)::

    educational:
      highest_degree: Masters
      additional_masters: 1
      additional_bachelors: 0
      additional_units: 12
    experience:
      state_hei_years: 5
      dean_years: 2
      ...
    professional_development:
      art_nat_sa: 2        # item key -> units
      ts_local: 3
    technological:
      word: 4
      excel: 4
      powerpoint: 5
      educational_apps: 3
      training_international: 1
      originality: 4
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Mapping

from ..schemas import SubScores

DEGREE_POINTS: dict[str, float] = {
    "PhD": 85,
    "Masters": 65,
    "LLB_MD": 65,
    "DiplomaAboveBacc": 55,
    "Bacc4": 45,
    "Bacc5": 50,
    "Bacc6": 55,
    "Special3yr": 30,
    "Special2yr": 25,
    "Other": 0,
}

EXPERIENCE_CREDITS: dict[str, float] = {
    "state_hei_years": 1.0,
    "other_institution_years": 0.75,
    "president_years": 3.0,
    "vice_president_years": 2.5,
    "dean_years": 2.0,
    "department_head_years": 1.0,
    "engineer_manager_years": 1.5,
    "technician_years": 1.0,
    "skilled_worker_years": 0.5,
    "cooperating_teacher_years": 1.5,
    "basic_ed_teacher_years": 1.0,
}

_EXPERIENCE_SUBCATEGORY: dict[str, str] = {
    "state_hei_years": "2.1",
    "other_institution_years": "2.2",
    "president_years": "2.3",
    "vice_president_years": "2.3",
    "dean_years": "2.3",
    "department_head_years": "2.3",
    "engineer_manager_years": "2.4",
    "technician_years": "2.4",
    "skilled_worker_years": "2.4",
    "cooperating_teacher_years": "2.5",
    "basic_ed_teacher_years": "2.5",
}

# item key -> (subcategory, credit per unit)
PROFESSIONAL_CREDITS: dict[str, tuple[str, float]] = {
    # inventions, discoveries, creative works
    "inv_patent_intl": ("3.1.1", 7),
    "inv_patent_nat": ("3.1.1", 5),
    "inv_patent_inst": ("3.1.1", 2),
    "inv_pending_intl": ("3.1.1", 7),
    "inv_pending_nat": ("3.1.1", 5),
    "inv_pending_inst": ("3.1.1", 2),
    "disc_originality": ("3.1.1", 4.2),
    "disc_dissemination": ("3.1.1", 2.8),
    "cw_accept": ("3.1.1", 1.75),
    "cw_recognition": ("3.1.1", 1.75),
    "cw_relevance": ("3.1.1", 1.75),
    "cw_documentation": ("3.1.1", 1.75),
    # published books
    "book_sa_tertiary": ("3.1.2", 7),
    "book_sa_hs": ("3.1.2", 5),
    "book_sa_elem": ("3.1.2", 4),
    "book_ca_tertiary": ("3.1.2", 3),
    "book_ca_hs": ("3.1.2", 2),
    "book_ca_elem": ("3.1.2", 2),
    "book_rev_tertiary": ("3.1.2", 4),
    "book_rev_hs": ("3.1.2", 2),
    "book_rev_elem": ("3.1.2", 1),
    "book_trans_tertiary": ("3.1.2", 3),
    "book_trans_hs": ("3.1.2", 2),
    "book_trans_elem": ("3.1.2", 1),
    "book_edit_tertiary": ("3.1.2", 2),
    "book_edit_hs": ("3.1.2", 2),
    "book_edit_elem": ("3.1.2", 1),
    "book_comp_tertiary": ("3.1.2", 2),
    "book_comp_hs": ("3.1.2", 1),
    "book_comp_elem": ("3.1.2", 1),
    # articles
    "art_intl_sa": ("3.1.3", 5),
    "art_intl_ca": ("3.1.3", 2.5),
    "art_nat_sa": ("3.1.3", 3),
    "art_nat_ca": ("3.1.3", 1.5),
    "art_local_sa": ("3.1.3", 2),
    "art_local_ca": ("3.1.3", 1),
    # instructional materials
    "inst_single": ("3.1.4", 1),
    "inst_co": ("3.1.4", 0.5),
    # training and seminars
    "ts_intl": ("3.2.1", 5),
    "ts_nat": ("3.2.1", 3),
    "ts_local": ("3.2.1", 2),
    "ts_industry": ("3.2.1", 0.1),
    "ts_conf_intl": ("3.2.1", 3),
    "ts_conf_nat": ("3.2.1", 2),
    "ts_conf_local": ("3.2.1", 1),
    # expert services
    "es_intl": ("3.2.2", 7),
    "es_nat": ("3.2.2", 5),
    "es_local": ("3.2.2", 2),
    "coord_intl": ("3.2.2", 5),
    "coord_nat": ("3.2.2", 3),
    "coord_local": ("3.2.2", 2),
    "adv_doc": ("3.2.2", 1),
    "adv_master": ("3.2.2", 0.5),
    "adv_undergrad": ("3.2.2", 0.25),
    "es_reviewer": ("3.2.2", 1),
    "es_accredit": ("3.2.2", 1),
    "es_trade": ("3.2.2", 1),
    "es_coach": ("3.2.2", 1),
    # professional organizations
    "po_full": ("3.3.1", 2),
    "po_assoc": ("3.3.1", 1),
    "po_honor": ("3.3.1", 1),
    "po_science": ("3.3.1", 1),
    "po_officer": ("3.3.1", 1),
    "po_member": ("3.3.1", 0.5),
    # scholarships and fellowships
    "sf_intl_degree": ("3.3.2", 5),
    "sf_intl_non": ("3.3.2", 4),
    "sf_nat_degree": ("3.3.2", 3),
    "sf_nat_non": ("3.3.2", 2),
    # awards
    "award_intl": ("3.4", 5),
    "award_nat": ("3.4", 3),
    "award_local": ("3.4", 1),
    # community outreach
    "co_service": ("3.5", 1),
    # professional examinations
    "pex_eng_law_teachers": ("3.6", 5),
    "pex_marine_elec": ("3.6", 2),
    "pex_trade_other": ("3.6", 1),
}

PROFESSIONAL_SECTION_CAPS: dict[str, float] = {
    "3.1": 30,
    "3.2": 30,
    "3.3": 10,
    "3.4": 10,
    "3.5": 5,
    "3.6": 10,
}

PROFESSIONAL_INNER_CAPS: dict[str, float] = {
    "3.2.1": 10,
    "3.2.2": 20,
}

# key -> (subcategory, credit per rating point, max rating)
TECHNOLOGICAL_ITEMS: dict[str, tuple[str, float, float]] = {
    "word": ("4.1", 1, 5),
    "excel": ("4.1", 1, 5),
    "powerpoint": ("4.1", 1, 5),
    "educational_apps": ("4.2", 1, 5),
    "training_international": ("4.3", 1, 5),
    "training_national": ("4.3", 1, 5),
    "training_local": ("4.3", 1, 2),
    "originality": ("4.4", 0.25, 5),
    "acceptability": ("4.4", 0.25, 5),
    "relevance": ("4.4", 0.25, 5),
    "documentation": ("4.4", 0.25, 5),
}

TECHNOLOGICAL_SECTION_CAPS: dict[str, float] = {"4.3": 10}


@dataclass
class RubricConfig:
    """Caps and credit tables for the detailed rubric."""

    educational_cap: float = 85
    experience_cap: float = 25
    professional_development_cap: float = 90
    technological_cap: float = 50
    additional_masters_credit: float = 4
    additional_bachelors_credit: float = 3
    units_per_credit: int = 3
    additional_units_cap: float = 10
    degree_points: dict[str, float] = field(default_factory=lambda: dict(DEGREE_POINTS))
    experience_credits: dict[str, float] = field(
        default_factory=lambda: dict(EXPERIENCE_CREDITS)
    )
    professional_credits: dict[str, float] = field(default_factory=dict)


@dataclass(slots=True)
class RubricItem:
    """One credited line of the breakdown."""

    category: int
    subcategory: str
    key: str
    units: float
    credit: float
    points: float


@dataclass(slots=True)
class RubricResult:
    """Category subtotals plus the credited items that produced them."""

    sub_scores: SubScores
    items: list[RubricItem]
    unknown_keys: list[str]

    @property
    def total(self) -> float:
        return self.sub_scores.total


class EvaluationRubric:
    """Compute capped category subtotals from a detailed breakdown."""

    def __init__(self, *, config: RubricConfig | None = None) -> None:
        self._config = config or RubricConfig()

    def compute(self, breakdown: Mapping[str, Any] | None) -> RubricResult:
        breakdown = breakdown or {}
        items: list[RubricItem] = []
        unknown: list[str] = []

        educational = self._educational(_section(breakdown, "educational"), items, unknown)
        experience = self._experience(_section(breakdown, "experience"), items, unknown)
        professional = self._professional(
            _section(breakdown, "professional_development"), items, unknown
        )
        technological = self._technological(
            _section(breakdown, "technological"), items, unknown
        )

        return RubricResult(
            sub_scores=SubScores(
                educational=educational,
                experience=experience,
                professional_development=professional,
                technological=technological,
            ),
            items=items,
            unknown_keys=unknown,
        )

    def build_items(self, breakdown: Mapping[str, Any] | None) -> list[RubricItem]:
        return self.compute(breakdown).items

    def _educational(
        self, section: Mapping[str, Any], items: list[RubricItem], unknown: list[str]
    ) -> float:
        cfg = self._config
        degree = section.get("highest_degree")
        degree_points = 0.0
        if degree and str(degree) not in cfg.degree_points:
            unknown.append(f"educational.highest_degree={degree}")
        elif degree:
            degree_points = float(cfg.degree_points[str(degree)])
            items.append(RubricItem(1, "1.1", f"degree_{degree}", 1, degree_points, degree_points))

        masters = _units(section.get("additional_masters"))
        bachelors = _units(section.get("additional_bachelors"))
        for key, units, credit in (
            ("additional_masters", masters, cfg.additional_masters_credit),
            ("additional_bachelors", bachelors, cfg.additional_bachelors_credit),
        ):
            if units:
                items.append(RubricItem(1, "1.2", key, units, credit, units * credit))
        additional_degrees = (
            masters * cfg.additional_masters_credit
            + bachelors * cfg.additional_bachelors_credit
        )

        blocks = math.floor(_units(section.get("additional_units")) / cfg.units_per_credit)
        unit_points = min(float(blocks), cfg.additional_units_cap)
        if unit_points:
            items.append(RubricItem(1, "1.3", "additional_units", blocks, 1, unit_points))

        return min(degree_points + additional_degrees + unit_points, cfg.educational_cap)

    def _experience(
        self,
        section: Mapping[str, Any],
        items: list[RubricItem],
        unknown: list[str],
    ) -> float:
        credits = self._config.experience_credits
        subtotal = 0.0
        for key, raw in section.items():
            credit = credits.get(key)
            if credit is None:
                unknown.append(f"experience.{key}")
                continue
            years = _units(raw)
            if not years:
                continue
            points = years * credit
            subtotal += points
            items.append(
                RubricItem(2, _EXPERIENCE_SUBCATEGORY.get(key, "2.x"), key, years, credit, points)
            )
        return min(subtotal, self._config.experience_cap)

    def _professional(
        self,
        section: Mapping[str, Any],
        items: list[RubricItem],
        unknown: list[str],
    ) -> float:
        overrides = self._config.professional_credits
        by_subcategory: dict[str, float] = {}
        for key, raw in section.items():
            entry = PROFESSIONAL_CREDITS.get(key)
            if entry is None:
                unknown.append(f"professional_development.{key}")
                continue
            subcategory, credit = entry
            credit = float(overrides.get(key, credit))
            units = _units(raw)
            if not units or not credit:
                continue
            points = units * credit
            by_subcategory[subcategory] = by_subcategory.get(subcategory, 0.0) + points
            items.append(RubricItem(3, subcategory, key, units, credit, points))

        by_section: dict[str, float] = {}
        for subcategory, points in by_subcategory.items():
            capped = min(points, PROFESSIONAL_INNER_CAPS.get(subcategory, points))
            section_key = _section_key(subcategory)
            by_section[section_key] = by_section.get(section_key, 0.0) + capped

        subtotal = sum(
            min(points, PROFESSIONAL_SECTION_CAPS.get(section_key, points))
            for section_key, points in by_section.items()
        )
        return min(subtotal, self._config.professional_development_cap)

    def _technological(
        self,
        section: Mapping[str, Any],
        items: list[RubricItem],
        unknown: list[str],
    ) -> float:
        by_subcategory: dict[str, float] = {}
        for key, raw in section.items():
            entry = TECHNOLOGICAL_ITEMS.get(key)
            if entry is None:
                unknown.append(f"technological.{key}")
                continue
            subcategory, credit, max_rating = entry
            rating = min(_units(raw), max_rating)
            if not rating:
                continue
            points = rating * credit
            by_subcategory[subcategory] = by_subcategory.get(subcategory, 0.0) + points
            items.append(RubricItem(4, subcategory, key, rating, credit, points))

        subtotal = sum(
            min(points, TECHNOLOGICAL_SECTION_CAPS.get(subcategory, points))
            for subcategory, points in by_subcategory.items()
        )
        return min(subtotal, self._config.technological_cap)


def _section(breakdown: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = breakdown.get(name)
    return value if isinstance(value, Mapping) else {}


def _section_key(subcategory: str) -> str:
    return ".".join(subcategory.split(".")[:2])


def _units(raw: Any) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(value) or value < 0:
        return 0.0
    return value


__all__ = [
    "DEGREE_POINTS",
    "EXPERIENCE_CREDITS",
    "PROFESSIONAL_CREDITS",
    "TECHNOLOGICAL_ITEMS",
    "EvaluationRubric",
    "RubricConfig",
    "RubricItem",
    "RubricResult",
]
