from pathlib import Path
from typing import TYPE_CHECKING, Optional

from dotenv import set_key
from loguru import logger
from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict
from rich.console import Console

from oreally.api.enums import DEFAULT_FETCH_RUNNER, FetchRunner
from oreally.api.storage import Storage
from oreally.settings import (
    DEFAULT_DOCKER_IMAGE,
    DEFAULT_POLL_INTERVAL,
    ENV_PATH,
    ENV_PREFIX,
)

if TYPE_CHECKING:
    from oreally.api.resources.books import BooksApi
    from oreally.api.resources.queue import QueueApi


console = Console()


class OreallyClient(BaseSettings):
    """
    oreally client

    Holds the settings and gives access to the queue store and the download resources.
    Settings are read from OREALLY_* environment variables and from ~/.oreally/.env.

    Attributes:
        auth (SecretStr): Default credential for the login container (OREALLY_AUTH)
        folder (str): Default folder for downloaded books (OREALLY_FOLDER)
        DB_PATH (str): Queue database file. Defaults to ~/.oreally/database.db
        POLL_INTERVAL (float): Seconds to wait between queue drain passes
        RUNNER (FetchRunner): Program that runs the downloads
        DOCKER_IMAGE (str): Image that logs in and downloads a book
        DEBUG (bool): Debug mode
    """

    model_config = SettingsConfigDict(
        env_file=ENV_PATH,
        env_prefix=ENV_PREFIX,
        extra="ignore",
        env_ignore_empty=True,
    )

    auth: SecretStr | None = None
    folder: str | None = None

    DB_PATH: str | None = None
    POLL_INTERVAL: float = DEFAULT_POLL_INTERVAL

    RUNNER: FetchRunner = DEFAULT_FETCH_RUNNER
    DOCKER_IMAGE: str = DEFAULT_DOCKER_IMAGE

    DEBUG: bool = False

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self._storage = Storage(self.DB_PATH)

        # Resources
        self._books: Optional["BooksApi"] = None
        self._queue: Optional["QueueApi"] = None

    @property
    def storage(self) -> Storage:
        """
        Queue store, bound to DB_PATH when the client was created
        """

        return self._storage

    @property
    def books(self):
        """
        Books Api Instance

        Returns:
            (BooksApi): BooksApi Instance
        """

        if self._books is None:
            from oreally.api.resources.books import BooksApi

            self._books = BooksApi(self)

        return self._books

    @property
    def queue(self):
        """
        Queue Api Instance

        Returns:
            (QueueApi): QueueApi Instance
        """

        if self._queue is None:
            from oreally.api.resources.queue import QueueApi

            self._queue = QueueApi(self)

        return self._queue

    def write_config(self, auth: str | None = None, folder: str | None = None, env_path: Path | None = None) -> Path:
        """
        Saves default credential and folder to the env file

        Args:
            auth (str): Credential to save as OREALLY_AUTH
            folder (str): Folder to save as OREALLY_FOLDER
            env_path (Path): Env file. Defaults to ~/.oreally/.env

        Returns:
            (Path): Env file that was written
        """

        env_path = env_path or ENV_PATH
        env_path.parent.mkdir(parents=True, exist_ok=True)
        env_path.touch(exist_ok=True)

        if auth:
            set_key(env_path, f"{ENV_PREFIX}AUTH", auth)
            self.auth = SecretStr(auth)
        if folder:
            set_key(env_path, f"{ENV_PREFIX}FOLDER", folder)
            self.folder = folder

        self._debug_log(f"Saved config to {env_path}")
        return env_path

    def _log(self, *args, **kwargs):
        """
        Generic user-facing log function
        """
        console.print(*args, **kwargs)

    def _debug_log(self, *args, **kwargs):
        """
        Debug Mode Only: Basic log
        """

        if not self.DEBUG:
            return

        logger.opt(depth=1).debug(*args, **kwargs)

    def _debug_error(self, *args, **kwargs):
        """
        Debug Mode Only: Error log
        """
        if not self.DEBUG:
            return

        logger.opt(depth=1).error(*args, **kwargs)

    def _debug_info(self, *args, **kwargs):
        """
        Debug Mode Only: Info log
        """
        if not self.DEBUG:
            return

        logger.opt(depth=1).info(*args, **kwargs)
