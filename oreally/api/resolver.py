from pydantic import SecretStr

from oreally.api.exceptions import MissingCredential
from oreally.api.models import BookRequest
from oreally.settings import DEFAULT_FOLDER
from oreally.utils import get_arg_or_default, parse_url


def _secret_value(value: SecretStr | str | None) -> str | None:
    if isinstance(value, SecretStr):
        return value.get_secret_value()
    return value


def resolve_auth(auth: SecretStr | str | None, env_auth: SecretStr | str | None) -> SecretStr:
    """
    Picks the credential: explicit value, then environment value.

    Raises:
        oreally.api.exceptions.MissingCredential: If neither is set
    """

    value = get_arg_or_default(_secret_value(auth), _secret_value(env_auth))
    if value is None:
        raise MissingCredential()
    return SecretStr(value)


def resolve_folder(folder: str | None, env_folder: str | None) -> str:
    """
    Picks the download folder: explicit value, then environment value, then the home folder.
    """

    return get_arg_or_default(folder, env_folder) or DEFAULT_FOLDER


def build_request(url: str, auth: SecretStr, folder: str) -> BookRequest:
    title, book_id = parse_url(url)
    return BookRequest(book_id=book_id, title=title, auth=auth, folder=folder)


def resolve_request(
    url: str,
    auth: SecretStr | str | None = None,
    folder: str | None = None,
    env_auth: SecretStr | str | None = None,
    env_folder: str | None = None,
) -> BookRequest:
    """
    Turns a library view URL into a download request.

    Explicit values win over environment values. The credential has no default,
    the folder falls back to the home folder.

    Args:
        url (str): Library view URL
        auth (SecretStr | str | None): Credential given by the caller
        folder (str | None): Folder given by the caller
        env_auth (SecretStr | str | None): Credential from the environment
        env_folder (str | None): Folder from the environment

    Returns:
        (BookRequest): Resolved request

    Raises:
        oreally.api.exceptions.InvalidUrl: If the URL is not a library view URL
        oreally.api.exceptions.MissingCredential: If no credential is available
    """

    title, book_id = parse_url(url)
    return BookRequest(
        book_id=book_id,
        title=title,
        auth=resolve_auth(auth, env_auth),
        folder=resolve_folder(folder, env_folder),
    )
