from __future__ import annotations

import pytest

from facultyhiring.errors import Conflict
from facultyhiring.persistence import MemoryStore


def test_interleaved_units_of_work_detect_lost_update(make_applicant):
    store = MemoryStore()
    with store.unit_of_work() as uow:
        stored = uow.applicants.add(make_applicant())

    with pytest.raises(Conflict):
        with store.unit_of_work() as first:
            mine = first.applicants.get(stored.id)
            first.applicants.update(mine.model_copy(update={"full_name": "First"}))

            with store.unit_of_work() as second:
                theirs = second.applicants.get(stored.id)
                second.applicants.update(theirs.model_copy(update={"full_name": "Second"}))

    with store.unit_of_work() as uow:
        survivor = uow.applicants.get(stored.id)
    assert survivor.full_name == "Second"
    assert survivor.version == 2


def test_returned_records_are_copies(make_applicant):
    store = MemoryStore()
    with store.unit_of_work() as uow:
        stored = uow.applicants.add(make_applicant())
        stored.full_name = "Mutated outside the store"

    with store.unit_of_work() as uow:
        assert uow.applicants.get(stored.id).full_name == "Maria Santos"


def test_close_clears_tables(make_applicant):
    store = MemoryStore()
    with store.unit_of_work() as uow:
        stored = uow.applicants.add(make_applicant())
    store.close()
    with store.unit_of_work() as uow:
        assert uow.applicants.get(stored.id) is None
