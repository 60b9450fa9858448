import time
from collections import deque
from collections.abc import Callable

from pydantic import SecretStr
from tqdm import tqdm

import oreally.api.exceptions
from oreally.api.client import OreallyClient
from oreally.api.enums import DrainState
from oreally.api.models import BookRecord, DrainSummary
from oreally.api.resolver import build_request, resolve_auth, resolve_folder
from oreally.api.resources.books import FetchAction
from oreally.utils import parse_url


class QueueApi:
    """
    API for the persisted book queue

    Every operation checks whether the store is initialized before touching it.
    Readiness is looked up on each call, never cached.

    Args:
        client (OreallyClient): OreallyClient instance
    """

    def __init__(self, client: OreallyClient):
        self._client = client

    @property
    def is_ready(self) -> bool:
        """
        Has the queue store been initialized?
        """

        return self._client.storage.is_ready()

    def _ensure_ready(self):
        if not self.is_ready:
            raise oreally.api.exceptions.NotInitialized()

    def init(self):
        """
        Creates the queue store.

        Raises:
            oreally.api.exceptions.AlreadyInitialized: If the store already exists
        """

        if self.is_ready:
            raise oreally.api.exceptions.AlreadyInitialized(
                f"Queue is already initialized at {self._client.storage.db_path}"
            )

        self._client.storage.setup()
        self._client._debug_log(f"Initialized queue at {self._client.storage.db_path}")

    def reset(self):
        """
        Removes every queued book by re-creating the store.

        Raises:
            oreally.api.exceptions.NotInitialized: If the store does not exist
        """

        self._ensure_ready()
        self._client.storage.flush()
        self._client._debug_log("Reset queue")

    def add(self, url: str) -> BookRecord:
        """
        Adds a book to the queue.

        Args:
            url (str): Library view URL of the book

        Returns:
            (BookRecord): Stored book

        Raises:
            oreally.api.exceptions.NotInitialized: If the store does not exist
            oreally.api.exceptions.InvalidUrl: If the URL is not a library view URL
        """

        self._ensure_ready()
        parse_url(url)

        book = self._client.storage.insert(BookRecord(url=url))
        self._client._debug_log(f"Queued book {book.id}: {book.url}")
        return book

    def list(self) -> list[BookRecord]:
        """
        Gets every queued book.

        Returns:
            (list[BookRecord]): Queued books, oldest first

        Raises:
            oreally.api.exceptions.NotInitialized: If the store does not exist
        """

        self._ensure_ready()
        return self._client.storage.all()

    def drain_pass(
        self,
        auth: SecretStr | str | None = None,
        folder: str | None = None,
        fetch_action: FetchAction | None = None,
    ) -> int:
        """
        Downloads every queued book once, in queue order.

        A book is removed from the queue only after its download succeeded. The first
        failure stops the pass and leaves the failed book and the rest of the batch queued.

        Args:
            auth (SecretStr | str | None): Credential, overrides OREALLY_AUTH
            folder (str | None): Download folder, overrides OREALLY_FOLDER
            fetch_action (FetchAction | None): Runs each download. Defaults to the configured runner

        Returns:
            (int): Number of books downloaded and removed

        Raises:
            oreally.api.exceptions.NotInitialized: If the store does not exist
            oreally.api.exceptions.MissingCredential: If no credential is available and books are queued
            oreally.api.exceptions.FetchActionFailed: If a download fails
        """

        summary = self.run(
            auth=auth,
            folder=folder,
            fetch_action=fetch_action,
            sleep=lambda _: None,
            should_stop=lambda: False,
            max_passes=1,
        )
        return summary.dispatched

    def run(
        self,
        auth: SecretStr | str | None = None,
        folder: str | None = None,
        fetch_action: FetchAction | None = None,
        sleep: Callable[[float], None] = time.sleep,
        should_stop: Callable[[], bool] = lambda: False,
        max_passes: int | None = None,
    ) -> DrainSummary:
        """
        Drains the queue forever: load every queued book, download each one, sleep, repeat.

        The loop only ends when `should_stop` returns True or after `max_passes` passes.
        Credential and folder are resolved once per pass, after loading, and shared by
        every book in it. A pass over an empty queue needs no credential.

        Args:
            auth (SecretStr | str | None): Credential, overrides OREALLY_AUTH
            folder (str | None): Download folder, overrides OREALLY_FOLDER
            fetch_action (FetchAction | None): Runs each download. Defaults to the configured runner
            sleep (Callable[[float], None]): Called with POLL_INTERVAL between passes
            should_stop (Callable[[], bool]): Checked before each pass
            max_passes (int | None): Stop after this many passes. Defaults to no limit

        Returns:
            (DrainSummary): Pass and download counters

        Raises:
            oreally.api.exceptions.NotInitialized: If the store does not exist
            oreally.api.exceptions.MissingCredential: If no credential is available and books are queued
            oreally.api.exceptions.FetchActionFailed: If a download fails
        """

        fetch = fetch_action or self._client.books.fetch
        summary = DrainSummary()

        state = DrainState.LOAD
        pending: deque[BookRecord] = deque()
        pass_auth: SecretStr | None = None
        pass_folder: str | None = None
        progress_bar: tqdm | None = None

        try:
            while True:
                match state:
                    case DrainState.LOAD:
                        if should_stop():
                            return summary

                        self._ensure_ready()
                        pending = deque(self._client.storage.all())
                        self._client._debug_log(f"Loaded {len(pending)} queued books")
                        if not pending:
                            state = DrainState.SLEEP
                            continue

                        pass_auth = resolve_auth(auth, self._client.auth)
                        pass_folder = resolve_folder(folder, self._client.folder)

                        self._client._log(f"\nDownloading {len(pending)} queued books")
                        progress_bar = tqdm(total=len(pending), desc="Books", unit="book")
                        state = DrainState.DISPATCH_ITEM

                    case DrainState.DISPATCH_ITEM:
                        book = pending.popleft()
                        try:
                            request = build_request(book.url, pass_auth, pass_folder)
                            self._client._debug_log(f"Downloading queued book {book.id}: {request.title}")
                            fetch(request)
                        except oreally.api.exceptions.OreallyException:
                            self._client._debug_error(f"Stopping drain, book {book.id} stays queued")
                            raise

                        self._client.storage.delete(book)
                        self._client._debug_info(f"Removed book {book.id} from queue")
                        summary.dispatched += 1
                        progress_bar.update(1)

                        if not pending:
                            progress_bar.close()
                            progress_bar = None
                            state = DrainState.SLEEP

                    case DrainState.SLEEP:
                        summary.passes += 1
                        if max_passes is not None and summary.passes >= max_passes:
                            return summary
                        if should_stop():
                            return summary

                        sleep(self._client.POLL_INTERVAL)
                        state = DrainState.LOAD
        finally:
            if progress_bar is not None:
                progress_bar.close()
