class OreallyException(Exception):
    """
    Base class for all oreally exceptions
    """

    pass


class NotInitialized(OreallyException):
    """
    Raised when a queue operation runs before the store was initialized.
    """

    def __init__(self, message="Queue is not initialized, run `oreally init` first"):
        super().__init__(message)


class AlreadyInitialized(OreallyException):
    """
    Raised when initializing a store that already exists.
    """

    def __init__(self, message="Queue is already initialized"):
        super().__init__(message)


class ResolutionError(OreallyException):
    """
    Raised when a book URL cannot be turned into a download request.
    """

    pass


class InvalidUrl(ResolutionError):
    """
    Raised when a URL is not a library view URL.
    """

    def __init__(self, url, message=None):
        super().__init__(message or f"Invalid URL: {url}")
        self.url = url


class MissingCredential(ResolutionError):
    """
    Raised when no credential was given and none is set in the environment.
    """

    def __init__(self, message="--auth argument or OREALLY_AUTH environment variable required"):
        super().__init__(message)


class StoreError(OreallyException):
    """
    Raised when the queue database cannot be read or written.
    """

    def __init__(self, message, errors=[]):
        super().__init__(message)
        self.errors = errors


class FetchActionFailed(OreallyException):
    """
    Raised when the fetch action for a book exits unsuccessfully.
    """

    def __init__(self, book_id, exit_code=None, message=None):
        super().__init__(message or f"Failed to download book {book_id} (exit code {exit_code})")
        self.book_id = book_id
        self.exit_code = exit_code
