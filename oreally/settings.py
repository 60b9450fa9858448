from pathlib import Path

CONFIG_DIR = Path.home() / ".oreally"
ENV_PATH = CONFIG_DIR / ".env"
ENV_PREFIX = "OREALLY_"

DEFAULT_DB_PATH = CONFIG_DIR / "database.db"
DEFAULT_FOLDER = "~"
DEFAULT_DOCKER_IMAGE = "kirinnee/orly:latest"
DEFAULT_POLL_INTERVAL = 1.0
