import os
import subprocess
from collections.abc import Callable

from pydantic import SecretStr

import oreally.api.exceptions
from oreally.api.client import OreallyClient
from oreally.api.enums import FetchRunner
from oreally.api.models import BookRequest
from oreally.api.resolver import resolve_request

FetchAction = Callable[[BookRequest], None]


class BooksApi:
    """
    API for resolving and downloading single books

    Args:
        client (OreallyClient): OreallyClient instance
    """

    def __init__(self, client: OreallyClient):
        self._client = client

    def resolve(self, url: str, auth: SecretStr | str | None = None, folder: str | None = None) -> BookRequest:
        """
        Builds the download request for a book URL.

        Args:
            url (str): Library view URL
            auth (SecretStr | str | None): Credential, overrides OREALLY_AUTH
            folder (str | None): Download folder, overrides OREALLY_FOLDER

        Returns:
            (BookRequest): Resolved request

        Raises:
            oreally.api.exceptions.InvalidUrl: If the URL is not a library view URL
            oreally.api.exceptions.MissingCredential: If no credential is available
        """

        return resolve_request(
            url,
            auth=auth,
            folder=folder,
            env_auth=self._client.auth,
            env_folder=self._client.folder,
        )

    def download(
        self,
        url: str,
        auth: SecretStr | str | None = None,
        folder: str | None = None,
        fetch_action: FetchAction | None = None,
    ) -> BookRequest:
        """
        Downloads a single book right away, without going through the queue.

        Args:
            url (str): Library view URL
            auth (SecretStr | str | None): Credential, overrides OREALLY_AUTH
            folder (str | None): Download folder, overrides OREALLY_FOLDER
            fetch_action (FetchAction | None): Runs the download. Defaults to the configured runner

        Returns:
            (BookRequest): The request that was downloaded

        Raises:
            oreally.api.exceptions.ResolutionError: If the request cannot be built
            oreally.api.exceptions.FetchActionFailed: If the download fails
        """

        request = self.resolve(url, auth=auth, folder=folder)
        fetch = fetch_action or self.fetch
        fetch(request)
        return request

    def fetch(self, request: BookRequest):
        """
        Runs the download for a resolved request with the configured runner.

        Args:
            request (BookRequest): Request to download

        Raises:
            oreally.api.exceptions.FetchActionFailed: If the runner fails
        """

        match self._client.RUNNER:
            case FetchRunner.DOCKER:
                self._run_docker(request)
            case FetchRunner.PUEUE:
                self._run_pueue(request)

    def _run_docker(self, request: BookRequest):
        output_filepath = request.get_output_filepath()
        self._client._debug_log(f"Downloading book {request.book_id} to {output_filepath}")
        try:
            os.makedirs(output_filepath.parent, exist_ok=True)
            with open(output_filepath, "wb") as f:
                completed = subprocess.run(request.to_args(self._client.DOCKER_IMAGE), stdout=f, check=False)
        except OSError as e:
            self._remove_partial_file(output_filepath)
            raise oreally.api.exceptions.FetchActionFailed(
                request.book_id, message=f"Unable to run docker for book {request.book_id}: {e}"
            ) from e
        except BaseException:
            self._remove_partial_file(output_filepath)
            raise

        if completed.returncode != 0:
            self._remove_partial_file(output_filepath)
            raise oreally.api.exceptions.FetchActionFailed(request.book_id, exit_code=completed.returncode)

        self._client._debug_log(f"Downloaded book {request.book_id}")

    def _run_pueue(self, request: BookRequest):
        command = request.to_command(self._client.DOCKER_IMAGE)
        self._client._debug_log(f"Adding book {request.book_id} to pueue")

        try:
            os.makedirs(request.get_output_filepath().parent, exist_ok=True)
            completed = subprocess.run(
                ["pueue", "add", "--print-task-id", "--", command],
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as e:
            raise oreally.api.exceptions.FetchActionFailed(
                request.book_id, message=f"Unable to run pueue for book {request.book_id}: {e}"
            ) from e

        if completed.returncode != 0:
            self._client._debug_error(completed.stderr)
            raise oreally.api.exceptions.FetchActionFailed(request.book_id, exit_code=completed.returncode)

        self._client._debug_log(f"Added book {request.book_id} to pueue as task {completed.stdout.strip()}")

    def _remove_partial_file(self, filepath):
        if filepath.exists():
            os.remove(filepath)
