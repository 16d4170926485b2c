"""Typer CLI entrypoint for the faculty hiring workflow."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import typer

from .config import read_yaml, resolve_config
from .container import build_rubric_config, create_container
from .core import RANK_TABLE, EvaluationRubric, score as score_sub_scores
from .errors import HiringError
from .logging import configure_logging
from .persistence import SqlStore

app = typer.Typer(help="Faculty hiring workflow and evaluation scoring CLI.")

TRANSITION_OPERATIONS: tuple[str, ...] = (
    "endorse",
    "complete_interview",
    "mark_interview_incomplete",
    "advance_to_for_hiring",
    "mark_hired",
    "reject",
    "force_set_stage",
)


def _echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, ensure_ascii=False, indent=2, default=str))


def _load_settings(
    config: Optional[Path],
    database_url: Optional[str],
) -> tuple[dict[str, Any], str]:
    raw: dict[str, Any] | None = None
    if config:
        try:
            raw = read_yaml(config)
        except ValueError as exc:
            raise typer.BadParameter(str(exc), param_hint="config") from exc
    app_config = resolve_config(raw)
    settings = app_config.to_settings()
    if database_url:
        settings["database"] = {"url": database_url, "echo": app_config.database.echo}
    return settings, app_config.logging.level


def _require_database(settings: dict[str, Any]) -> str:
    url = settings.get("database", {}).get("url")
    if not url:
        raise typer.BadParameter(
            "A database URL is required (--database-url, config or FACULTYHIRING_DATABASE_URL)",
            param_hint="database_url",
        )
    return url


@app.command()
def score(
    educational: float = typer.Option(0.0, help="Educational qualifications subtotal."),
    experience: float = typer.Option(0.0, help="Experience subtotal."),
    professional_development: float = typer.Option(0.0, help="Professional development subtotal."),
    technological: float = typer.Option(0.0, help="Technological knowledge subtotal."),
) -> None:
    """Score four sub-totals and print rank and hourly rate."""
    result = score_sub_scores(
        {
            "educational": educational,
            "experience": experience,
            "professional_development": professional_development,
            "technological": technological,
        }
    )
    _echo_json(
        {
            "total_score": result.total_score,
            "rank": result.rank,
            "rate_per_hour": result.rate_per_hour,
            "passing": result.passing,
        }
    )


@app.command()
def ranks() -> None:
    """Print the rank table."""
    for band in RANK_TABLE:
        typer.echo(f"{band.min_score:>3}-{band.max_score:<3}  {band.name:<24} {band.rate_per_hour:g}")


@app.command()
def rubric(
    breakdown: Path = typer.Argument(..., exists=True, readable=True, dir_okay=False, help="Breakdown JSON/YAML path."),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    items: bool = typer.Option(False, "--items", help="Include credited line items."),
) -> None:
    """Compute sub-scores, total and rank from a detailed breakdown."""
    settings, _ = _load_settings(config, None)
    engine = EvaluationRubric(config=build_rubric_config(settings.get("rubric", {})))
    try:
        document = read_yaml(breakdown)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="breakdown") from exc

    computed = engine.compute(document)
    result = score_sub_scores(computed.sub_scores)
    payload: dict[str, Any] = {
        "sub_scores": computed.sub_scores.model_dump(),
        "total_score": result.total_score,
        "rank": result.rank,
        "rate_per_hour": result.rate_per_hour,
        "unknown_keys": computed.unknown_keys,
    }
    if items:
        payload["items"] = [
            {
                "category": item.category,
                "subcategory": item.subcategory,
                "key": item.key,
                "units": item.units,
                "credit": item.credit,
                "points": item.points,
            }
            for item in computed.items
        ]
    _echo_json(payload)


@app.command("init-db")
def init_db(
    database_url: Optional[str] = typer.Option(None, help="SQLAlchemy database URL."),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
) -> None:
    """Create the database tables."""
    settings, _ = _load_settings(config, database_url)
    url = _require_database(settings)
    store = SqlStore(url, create=False)
    try:
        store.create_schema()
    finally:
        store.close()
    typer.echo(f"Initialized schema at {url}.")


@app.command()
def renewals(
    search: Optional[str] = typer.Option(None, help="Search faculty, college, title or contract number."),
    college: Optional[str] = typer.Option(None, help="Restrict to one college."),
    skip: int = typer.Option(0, min=0, help="Number of contracts to skip."),
    take: int = typer.Option(20, min=0, help="Page size (max 100)."),
    database_url: Optional[str] = typer.Option(None, help="SQLAlchemy database URL."),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
) -> None:
    """List contracts due for renewal, earliest end date first."""
    settings, level = _load_settings(config, database_url)
    _require_database(settings)
    configure_logging(level)

    container = create_container(settings=settings)
    try:
        page = container.service().list_renewals(
            search=search, college=college, skip=skip, take=take
        )
    finally:
        container.store().close()
    _echo_json(
        {
            "total": page.total,
            "skip": page.skip,
            "take": page.take,
            "items": [contract.model_dump(mode="json") for contract in page.items],
        }
    )


@app.command()
def transition(
    operation: str = typer.Argument(..., help=f"One of: {', '.join(TRANSITION_OPERATIONS)}."),
    applicant_id: str = typer.Argument(..., help="Applicant id."),
    role: str = typer.Option("HR", help="Caller role (HR, Dean, Public)."),
    reason: Optional[str] = typer.Option(None, help="Reason for reject or incomplete interview."),
    stage: Optional[str] = typer.Option(None, help="Target stage for force_set_stage."),
    idempotent: bool = typer.Option(False, "--idempotent", help="Return unchanged if already in the target stage."),
    database_url: Optional[str] = typer.Option(None, help="SQLAlchemy database URL."),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    log_level: Optional[str] = typer.Option(None, help="Log level for structured logging."),
) -> None:
    """Run one workflow transition against the configured database."""
    operation = operation.replace("-", "_")
    if operation not in TRANSITION_OPERATIONS:
        raise typer.BadParameter(
            f"Unsupported operation {operation!r}", param_hint="operation"
        )
    if operation == "force_set_stage" and not stage:
        raise typer.BadParameter("--stage is required for force_set_stage", param_hint="stage")

    settings, level = _load_settings(config, database_url)
    _require_database(settings)
    configure_logging(log_level or level)

    container = create_container(settings=settings)
    service = container.service()
    try:
        if operation == "reject":
            result = service.reject(applicant_id, reason, role=role, idempotent=idempotent)
        elif operation == "mark_interview_incomplete":
            result = service.mark_interview_incomplete(
                applicant_id, reason, role=role, idempotent=idempotent
            )
        elif operation == "force_set_stage":
            result = service.force_set_stage(applicant_id, stage, role=role, notes=reason)
        else:
            result = getattr(service, operation)(applicant_id, role=role, idempotent=idempotent)
    except HiringError as exc:
        typer.echo(json.dumps(exc.to_dict(), ensure_ascii=False, default=str), err=True)
        raise typer.Exit(code=1) from exc
    finally:
        container.store().close()

    _echo_json(
        {
            "operation": result.operation,
            "previous_stage": result.previous_stage.value,
            "changed": result.changed,
            "applicant": result.applicant.model_dump(mode="json"),
        }
    )


def main() -> None:
    app()


if __name__ == "__main__":
    main()
