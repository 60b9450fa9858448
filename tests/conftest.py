"""Shared test fixtures."""

from __future__ import annotations

import pytest

from oreally.api import OreallyClient
from oreally.api.models import BookRequest


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("OREALLY_AUTH", "OREALLY_FOLDER", "OREALLY_DB_PATH", "OREALLY_RUNNER", "OREALLY_DEBUG"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setitem(OreallyClient.model_config, "env_file", None)

@pytest.fixture()
def db_path(tmp_path):
    return tmp_path / "queue" / "database.db"

@pytest.fixture()
def client(db_path):
    return OreallyClient(DB_PATH=str(db_path), _env_file=None)

@pytest.fixture()
def ready_client(client):
    client.queue.init()
    return client

class RecordingFetch:
    """Fetch action that records requests and fails for the given book IDs."""

    def __init__(self, fail_for: tuple[str, ...] = ()) -> None:
        self.requests: list[BookRequest] = []
        self.fail_for = fail_for

    def __call__(self, request: BookRequest) -> None:
        from oreally.api.exceptions import FetchActionFailed

        self.requests.append(request)
        if request.book_id in self.fail_for:
            raise FetchActionFailed(request.book_id, exit_code=1)

@pytest.fixture()
def recording_fetch():
    return RecordingFetch()

@pytest.fixture()
def failing_fetch():
    def _make(*book_ids: str) -> RecordingFetch:
        return RecordingFetch(fail_for=book_ids)

    return _make
