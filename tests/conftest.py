from __future__ import annotations

from typing import Any, Callable

import pendulum
import pytest
import structlog

from facultyhiring.persistence import MemoryStore, SqlStore
from facultyhiring.schemas import Applicant, Role
from facultyhiring.service import HiringService

FIXED_NOW = pendulum.datetime(2025, 6, 1, 9, 0, 0, tz="UTC")


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def clock() -> Callable[[], Any]:
    return lambda: FIXED_NOW


@pytest.fixture
def make_applicant() -> Callable[..., Applicant]:
    def build(**kwargs: Any) -> Applicant:
        defaults: dict[str, Any] = {
            "vacancy_id": "V-001",
            "full_name": "Maria Santos",
            "email": "maria.santos@example.edu",
            "applied_date": FIXED_NOW,
        }
        defaults.update(kwargs)
        return Applicant(**defaults)

    return build


@pytest.fixture(params=["memory", "sql"])
def store(request, tmp_path):
    if request.param == "memory":
        handle = MemoryStore()
    else:
        handle = SqlStore(f"sqlite:///{tmp_path / 'hiring.db'}")
    yield handle
    handle.close()


@pytest.fixture
def service(store, clock) -> HiringService:
    return HiringService(store=store, now_provider=clock)


@pytest.fixture
def vacancy(service):
    return service.post_vacancy(
        {
            "title": "Instructor - Computer Science",
            "college": "College of Engineering",
            "description": "Full-time teaching post",
        },
        role=Role.HR,
    )


@pytest.fixture
def applicant(service, vacancy) -> Applicant:
    return service.submit_application(
        {
            "vacancy_id": vacancy.id,
            "full_name": "Maria Santos",
            "email": "maria.santos@example.edu",
            "phone": "0917-000-0000",
        }
    )
