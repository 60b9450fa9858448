from __future__ import annotations

import pytest
from pydantic import SecretStr, ValidationError

from oreally.api.exceptions import InvalidUrl, MissingCredential
from oreally.api.models import BookRequest
from oreally.api.resolver import resolve_auth, resolve_folder, resolve_request
from oreally.settings import DEFAULT_FOLDER

URL = "https://learning.oreilly.com/library/view/learn-postgresql/9781838985288"


def test_resolve_auth_explicit_wins_over_environment() -> None:
    assert resolve_auth("explicit", "from-env").get_secret_value() == "explicit"
    assert resolve_auth("explicit", SecretStr("from-env")).get_secret_value() == "explicit"


def test_resolve_auth_falls_back_to_environment() -> None:
    assert resolve_auth(None, SecretStr("from-env")).get_secret_value() == "from-env"


def test_resolve_auth_without_any_value_fails() -> None:
    with pytest.raises(MissingCredential, match="OREALLY_AUTH"):
        resolve_auth(None, None)


def test_resolve_folder_precedence() -> None:
    assert resolve_folder("/books", "/env-books") == "/books"
    assert resolve_folder(None, "/env-books") == "/env-books"
    assert resolve_folder(None, None) == DEFAULT_FOLDER == "~"


def test_resolve_request_builds_full_request() -> None:
    request = resolve_request(URL, auth="token", folder="/books")

    assert request.book_id == "9781838985288"
    assert request.title == "learn-postgresql"
    assert request.auth.get_secret_value() == "token"
    assert request.folder == "/books"


def test_resolve_request_uses_environment_values() -> None:
    request = resolve_request(URL, env_auth=SecretStr("env-token"), env_folder="/env-books")

    assert request.auth.get_secret_value() == "env-token"
    assert request.folder == "/env-books"


def test_resolve_request_checks_url_before_credential() -> None:
    with pytest.raises(InvalidUrl):
        resolve_request("https://learning.oreilly.com/library/view/learn-postgresql/")


def test_resolve_request_without_credential_fails() -> None:
    with pytest.raises(MissingCredential):
        resolve_request(URL, folder="/books")


def test_request_is_immutable() -> None:
    request = resolve_request(URL, auth="token")

    with pytest.raises(ValidationError):
        request.folder = "/elsewhere"


def test_request_does_not_leak_credential() -> None:
    request = resolve_request(URL, auth="token")

    assert "token" not in repr(request)
    assert "token" not in str(request)


def test_request_command_line() -> None:
    request = BookRequest(book_id="9781838985288", title="learn-postgresql", auth=SecretStr("a b"), folder="/books")

    assert request.to_args("kirinnee/orly:latest") == [
        "docker",
        "run",
        "kirinnee/orly:latest",
        "login",
        "9781838985288",
        "a b",
    ]
    assert request.to_command("kirinnee/orly:latest") == (
        "(docker run kirinnee/orly:latest login 9781838985288 'a b') > /books/learn-postgresql.epub"
    )


def test_request_output_path_expands_home(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    request = BookRequest(book_id="1", title="learn-postgresql", auth=SecretStr("token"), folder="~")

    assert request.get_output_filepath() == tmp_path / "learn-postgresql.epub"
