import os
import shlex
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class BookRecord(BaseModel):
    """
    Represents a book waiting in the download queue

    Attributes:
        id (int | None): Row ID, None until the record is stored
        url (str): Library view URL of the book
    """

    id: int | None = None
    url: str = Field(frozen=True)

    @property
    def is_stored(self) -> bool:
        return self.id is not None


class BookRequest(BaseModel):
    """
    A fully resolved download request for a single book

    Attributes:
        book_id (str): Numeric book ID taken from the URL
        title (str): Book slug taken from the URL, used as the file name
        auth (SecretStr): Credential passed to the login container
        folder (str): Folder the epub is written to
    """

    model_config = ConfigDict(frozen=True)

    book_id: str
    title: str
    auth: SecretStr
    folder: str

    def get_output_filepath(self) -> Path:
        return Path(os.path.expanduser(self.folder)) / f"{self.title}.epub"

    def to_args(self, image: str) -> list[str]:
        return ["docker", "run", image, "login", self.book_id, self.auth.get_secret_value()]

    def to_command(self, image: str) -> str:
        """
        Shell command line that downloads the book into its output file

        Args:
            image (str): Docker image that logs in and downloads

        Returns:
            (str): Command line for `sh -c`
        """
        docker_cmd = shlex.join(self.to_args(image))
        return f"({docker_cmd}) > {shlex.quote(str(self.get_output_filepath()))}"


class DrainSummary(BaseModel):
    """
    Counters for a finished drain loop

    Attributes:
        passes (int): Number of completed load/dispatch passes
        dispatched (int): Number of books downloaded and removed from the queue
    """

    passes: int = 0
    dispatched: int = 0
