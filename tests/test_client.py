from __future__ import annotations

from dotenv import dotenv_values

from oreally.api import OreallyClient
from oreally.api.enums import FetchRunner
from oreally.api.resources import BooksApi, QueueApi
from oreally.settings import DEFAULT_DB_PATH, DEFAULT_DOCKER_IMAGE


def test_defaults() -> None:
    client = OreallyClient(_env_file=None)

    assert client.auth is None
    assert client.folder is None
    assert client.storage.db_path == DEFAULT_DB_PATH
    assert client.POLL_INTERVAL == 1.0
    assert client.RUNNER is FetchRunner.DOCKER
    assert client.DOCKER_IMAGE == DEFAULT_DOCKER_IMAGE
    assert client.DEBUG is False


def test_reads_environment(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("OREALLY_AUTH", "env-token")
    monkeypatch.setenv("OREALLY_FOLDER", "/env-books")
    monkeypatch.setenv("OREALLY_DB_PATH", str(tmp_path / "env.db"))
    monkeypatch.setenv("OREALLY_RUNNER", "pueue")

    client = OreallyClient(_env_file=None)

    assert client.auth.get_secret_value() == "env-token"
    assert client.folder == "/env-books"
    assert client.storage.db_path == tmp_path / "env.db"
    assert client.RUNNER is FetchRunner.PUEUE


def test_empty_environment_values_are_ignored(monkeypatch) -> None:
    monkeypatch.setenv("OREALLY_AUTH", "")

    assert OreallyClient(_env_file=None).auth is None


def test_reads_env_file(tmp_path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("OREALLY_AUTH=file-token\nOREALLY_FOLDER=/file-books\n")

    client = OreallyClient(_env_file=env_file)

    assert client.auth.get_secret_value() == "file-token"
    assert client.folder == "/file-books"


def test_storage_path_is_fixed_at_construction(tmp_path) -> None:
    client = OreallyClient(DB_PATH=str(tmp_path / "a.db"), _env_file=None)
    storage = client.storage

    client.DB_PATH = str(tmp_path / "b.db")

    assert client.storage is storage
    assert client.storage.db_path == tmp_path / "a.db"


def test_resources_are_cached(client) -> None:
    assert isinstance(client.books, BooksApi)
    assert isinstance(client.queue, QueueApi)
    assert client.books is client.books
    assert client.queue is client.queue


def test_write_config(client, tmp_path) -> None:
    env_path = tmp_path / "config" / ".env"

    written = client.write_config(auth="token", folder="/books", env_path=env_path)

    assert written == env_path
    assert dotenv_values(env_path) == {"OREALLY_AUTH": "token", "OREALLY_FOLDER": "/books"}
    assert client.auth.get_secret_value() == "token"
    assert client.folder == "/books"

    reloaded = OreallyClient(_env_file=env_path)
    assert reloaded.auth.get_secret_value() == "token"
    assert reloaded.folder == "/books"


def test_write_config_keeps_other_values(client, tmp_path) -> None:
    env_path = tmp_path / ".env"
    client.write_config(auth="token", env_path=env_path)

    client.write_config(folder="/books", env_path=env_path)

    assert dotenv_values(env_path) == {"OREALLY_AUTH": "token", "OREALLY_FOLDER": "/books"}
