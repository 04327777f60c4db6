"""Shared fakes and fixtures for the intentbridge test suite."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

import pytest

from fakes import FakeClock, StubRunner, StubScanner
from intentbridge.discovery.catalog import ActionCatalog
from intentbridge.discovery.models import ActionRecord, ParameterSpec
from intentbridge.execution.coordinator import ExecutionCoordinator
from intentbridge.protocol.dispatcher import Dispatcher


@pytest.fixture
def reminder_record() -> ActionRecord:
    return ActionRecord(
        id="a.b.Create",
        owner_id="a.b",
        name="Create Reminder",
        parameters=(),
        returns_result=True,
    )


@pytest.fixture
def sample_records(reminder_record: ActionRecord) -> list[ActionRecord]:
    return [
        reminder_record,
        ActionRecord(
            id="com.apple.Notes.CreateNote",
            owner_id="com.apple.Notes",
            name="Create Note",
            description="Make a new note",
            parameters=(
                ParameterSpec(name="title", type="String", description="Note title"),
                ParameterSpec(name="folder", type="Folder", required=False),
            ),
        ),
        ActionRecord(
            id="com.apple.Notes.OpenNote",
            owner_id="com.apple.Notes",
            name="Open Note",
        ),
    ]


@pytest.fixture
def make_catalog() -> Callable[..., ActionCatalog]:
    def _make(records: Sequence[ActionRecord] = (), **kwargs: Any) -> ActionCatalog:
        return ActionCatalog(StubScanner(records), **kwargs)

    return _make


@pytest.fixture
def make_dispatcher(
    make_catalog: Callable[..., ActionCatalog],
) -> Callable[..., Dispatcher]:
    def _make(
        records: Sequence[ActionRecord] = (),
        runner: StubRunner | None = None,
    ) -> Dispatcher:
        catalog = make_catalog(records)
        coordinator = ExecutionCoordinator(catalog, runner if runner is not None else StubRunner())
        return Dispatcher(catalog, coordinator)

    return _make


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()
