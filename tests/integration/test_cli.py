from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from facultyhiring.cli import app
from facultyhiring.config import DATABASE_URL_ENV
from facultyhiring.persistence import SqlStore
from facultyhiring.schemas import Role
from facultyhiring.service import HiringService


@pytest.fixture
def runner(monkeypatch) -> CliRunner:
    monkeypatch.delenv(DATABASE_URL_ENV, raising=False)
    return CliRunner()


@pytest.fixture
def database(tmp_path: Path, clock) -> tuple[str, str]:
    """Seed a SQLite database with one applicant; return its URL and the applicant id."""
    url = f"sqlite:///{tmp_path / 'hiring.db'}"
    store = SqlStore(url)
    service = HiringService(store=store, now_provider=clock)
    vacancy = service.post_vacancy(
        {"title": "Instructor - Physics", "college": "College of Science"}, role=Role.HR
    )
    applicant = service.submit_application(
        {"vacancy_id": vacancy.id, "full_name": "Ana Cruz", "email": "ana@example.edu"}
    )
    store.close()
    return url, applicant.id


def test_score_command_prints_rank(runner: CliRunner) -> None:
    result = runner.invoke(
        app,
        [
            "score",
            "--educational",
            "70",
            "--experience",
            "65",
            "--professional-development",
            "40",
            "--technological",
            "35",
        ],
    )

    assert result.exit_code == 0, result.stdout
    rendered = json.loads(result.stdout)
    assert rendered["total_score"] == 210
    assert rendered["rank"] == "Professor I"
    assert rendered["rate_per_hour"] == 350
    assert rendered["passing"] is True


def test_ranks_command_lists_all_bands(runner: CliRunner) -> None:
    result = runner.invoke(app, ["ranks"])
    assert result.exit_code == 0
    lines = [line for line in result.stdout.splitlines() if line.strip()]
    assert len(lines) == 16
    assert "Professor IV" in lines[0]
    assert "Lecturer I" in lines[-1]


def test_rubric_command_scores_breakdown(tmp_path: Path, runner: CliRunner) -> None:
    breakdown = tmp_path / "breakdown.yaml"
    breakdown.write_text(
        "educational:\n"
        "  highest_degree: Masters\n"
        "  additional_units: 12\n"
        "experience:\n"
        "  state_hei_years: 8\n"
        "technological:\n"
        "  word: 5\n"
        "  excel: 5\n",
        encoding="utf-8",
    )

    result = runner.invoke(app, ["rubric", str(breakdown), "--items"])

    assert result.exit_code == 0, result.stdout
    rendered = json.loads(result.stdout)
    assert rendered["sub_scores"]["educational"] == 69
    assert rendered["sub_scores"]["experience"] == 8
    assert rendered["sub_scores"]["technological"] == 10
    assert rendered["total_score"] == 87
    assert rendered["rank"] == "Lecturer I"
    assert rendered["unknown_keys"] == []
    assert {item["key"] for item in rendered["items"]} >= {"degree_Masters", "state_hei_years"}


def test_init_db_requires_database_url(runner: CliRunner) -> None:
    result = runner.invoke(app, ["init-db"])
    assert result.exit_code != 0


def test_init_db_creates_schema(tmp_path: Path, runner: CliRunner) -> None:
    url = f"sqlite:///{tmp_path / 'fresh.db'}"
    result = runner.invoke(app, ["init-db", "--database-url", url])
    assert result.exit_code == 0, result.stdout
    assert (tmp_path / "fresh.db").exists()


def test_transition_command_endorses_applicant(database, runner: CliRunner) -> None:
    url, applicant_id = database

    result = runner.invoke(app, ["transition", "endorse", applicant_id, "--database-url", url])
    assert result.exit_code == 0, result.stdout
    assert '"ENDORSED"' in result.stdout

    store = SqlStore(url, create=False)
    with store.unit_of_work() as uow:
        assert uow.applicants.get(applicant_id).stage.value == "ENDORSED"
    store.close()


def test_transition_command_reports_refusals(database, runner: CliRunner) -> None:
    url, applicant_id = database

    result = runner.invoke(
        app, ["transition", "complete-interview", applicant_id, "--database-url", url]
    )
    assert result.exit_code == 1


def test_transition_command_rejects_unknown_operation(database, runner: CliRunner) -> None:
    url, applicant_id = database
    result = runner.invoke(app, ["transition", "promote", applicant_id, "--database-url", url])
    assert result.exit_code == 2


def test_renewals_command_lists_contracts(database, runner: CliRunner) -> None:
    url, _ = database

    result = runner.invoke(app, ["renewals", "--database-url", url, "--take", "5"])
    assert result.exit_code == 0, result.stdout
    assert '"total": 0' in result.stdout
