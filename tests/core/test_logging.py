from __future__ import annotations

import json

import structlog

from facultyhiring.logging import APP_NAME, configure_logging
from facultyhiring.schemas import Role, Stage


def test_events_render_as_json_lines(capsys):
    configure_logging("INFO")
    logger = structlog.get_logger("facultyhiring.service")

    logger.debug("workflow.ignored")
    logger.info("workflow.endorse", to_stage=Stage.ENDORSED, role=Role.HR)

    lines = [line for line in capsys.readouterr().out.splitlines() if line.strip()]
    assert len(lines) == 1
    payload = json.loads(lines[0])
    assert payload["event"] == "workflow.endorse"
    assert payload["level"] == "info"
    assert payload["app"] == APP_NAME
    assert payload["to_stage"] == "ENDORSED"
    assert payload["role"] == "HR"
    assert "timestamp" in payload
