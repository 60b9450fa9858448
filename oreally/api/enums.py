from enum import Enum


class FetchRunner(Enum):
    """
    Enum for the programs that can run a book download

    Attributes:
        DOCKER (str): run the login+download container and wait for it
        PUEUE (str): hand the container command to the pueue daemon
    """

    DOCKER = "docker"
    PUEUE = "pueue"


DEFAULT_FETCH_RUNNER = FetchRunner.DOCKER
FETCH_RUNNER_VALUES = [runner.value for runner in FetchRunner]


class DrainState(Enum):
    """
    States of the queue drain loop

    Attributes:
        LOAD (str): read every pending book from the store
        DISPATCH_ITEM (str): download the next loaded book
        SLEEP (str): wait before loading again
    """

    LOAD = "load"
    DISPATCH_ITEM = "dispatch_item"
    SLEEP = "sleep"
