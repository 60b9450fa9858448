import re
from urllib.parse import urlparse

from oreally.api.enums import FetchRunner
from oreally.api.exceptions import InvalidUrl

LIBRARY_VIEW_PATH = re.compile(r"^/library/view/(?P<title>[^/]+)/(?P<book_id>\d+)(?:/.*)?$")


def parse_url(url: str) -> tuple[str, str]:
    """
    Extracts the book title and book ID from a library view URL.

    e.g. https://learning.oreilly.com/library/view/learn-postgresql/9781838985288

    Args:
        url (str): Library view URL

    Returns:
        (tuple[str, str]): Title slug and numeric book ID

    Raises:
        oreally.api.exceptions.InvalidUrl: If the URL is not a library view URL
    """

    parsed = urlparse(url.strip())
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidUrl(url)

    match = LIBRARY_VIEW_PATH.match(parsed.path)
    if not match:
        raise InvalidUrl(url)

    return match.group("title"), match.group("book_id")


def get_arg_or_default(arg: str | None, default: str | None) -> str | None:
    """
    Returns the argument if it is set, otherwise the default.

    Empty strings count as unset.
    """

    if arg:
        return arg
    if default:
        return default
    return None


def seralize_runner(runner_value: str | None) -> FetchRunner | None:
    if runner_value is None:
        return None

    return FetchRunner(runner_value)
